"""
Unit tests for SQLAlchemy models, JSON field helpers and exceptions.
"""

import pytest
import uuid
from app.exceptions import (
    QuotaExceededError, AccountRestrictedError, TenantNotFoundError, InsufficientStockError
)
from app.models import Tenant, Plan, AppUser, UserTenant
from app.utils.json_fields import safe_parse, dump_json


class TestTenantModel:
    """Tests for Tenant model."""

    def test_create_tenant_defaults(self, session):
        suffix = str(uuid.uuid4())[:8]
        tenant = Tenant(slug=f'clinic-{suffix}', name=f'Clinic {suffix}')
        session.add(tenant)
        session.commit()

        assert tenant.id is not None
        assert tenant.plan_id == 'Trial'
        assert tenant.status == 'Active'
        assert tenant.storage_used_mb == 0.0
        assert tenant.settings_dict == {}
        assert tenant.is_blocked is False

    def test_tenant_slug_unique(self, session, tenant1):
        duplicate = Tenant(slug=tenant1.slug, name='Duplicate Clinic')
        session.add(duplicate)

        with pytest.raises(Exception):  # IntegrityError
            session.commit()

    @pytest.mark.parametrize('status,blocked', [
        ('Active', False), ('Restricted', True), ('Suspended', True)
    ])
    def test_is_blocked(self, status, blocked):
        assert Tenant(status=status).is_blocked is blocked

    def test_update_settings_merges(self, session, tenant1):
        tenant1.update_settings({'invoicePrefix': 'INV-0000'})
        tenant1.update_settings({'clientPrefix': 'CL/000/year'})
        session.commit()
        assert tenant1.settings_dict == {'invoicePrefix': 'INV-0000', 'clientPrefix': 'CL/000/year'}

    def test_corrupt_settings_degrade_to_empty(self):
        assert Tenant(settings='{not json').settings_dict == {}
        assert Tenant(settings='[1, 2]').settings_dict == {}


class TestPlanModel:

    def test_limits_round_trip(self, plans):
        standard = plans['Standard']
        assert standard.get_limit('maxUsers') == 7
        assert standard.get_limit('maxClients') == -1
        assert standard.has_module('lab') is True
        assert plans['Starter'].has_module('lab') is False

    def test_corrupt_limits(self):
        plan = Plan(id='Broken', name='Broken', limits='oops', features='nope')
        assert plan.limits_dict == {}
        assert plan.features_list == []
        assert plan.get_limit('maxUsers', 1) == 1


class TestAppUserModel:

    def test_password_hashing(self):
        user = AppUser(email='vet@test.com', active=True)
        user.set_password('mypassword')

        assert user.check_password('mypassword') is True
        assert user.check_password('wrongpassword') is False

    def test_user_can_belong_to_multiple_tenants(self, session, owner_user1, tenant1, tenant2):
        session.add(UserTenant(user_id=owner_user1.id, tenant_id=tenant2.id, role='VET', active=True))
        session.commit()

        memberships = session.query(UserTenant).filter_by(user_id=owner_user1.id).all()
        assert {m.tenant_id for m in memberships} == {tenant1.id, tenant2.id}


class TestJsonFields:

    def test_safe_parse(self):
        assert safe_parse('{"a": 1}') == {'a': 1}
        assert safe_parse('', {}) == {}
        assert safe_parse(None, []) == []
        assert safe_parse('not json', []) == []
        assert safe_parse({'already': 'decoded'}) == {'already': 'decoded'}

    def test_dump_json(self):
        assert safe_parse(dump_json([{'qty': 2}])) == [{'qty': 2}]


class TestExceptions:

    @pytest.mark.parametrize('kind,message', [
        ('storage', 'Storage quota exceeded.'),
        ('users', 'User limit reached.'),
        ('clients', 'Client limit reached.'),
    ])
    def test_quota_exceeded_carries_kind(self, kind, message):
        error = QuotaExceededError(kind)
        assert error.resource_kind == kind
        assert error.status_code == 403
        assert error.to_dict() == {'resource': kind, 'message': message, 'status': 'error'}

    def test_account_restricted_is_distinct_from_quota(self):
        error = AccountRestrictedError('Suspended')
        assert not isinstance(error, QuotaExceededError)
        assert error.to_dict()['account_status'] == 'Suspended'
        assert error.message == 'Account restricted'

    def test_tenant_not_found_is_404(self):
        assert TenantNotFoundError(5).status_code == 404

    def test_insufficient_stock_message(self):
        error = InsufficientStockError('Rabies vaccine', 2)
        assert error.message == 'Low stock: Rabies vaccine (Only 2 left)'
        assert error.status_code == 409

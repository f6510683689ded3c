"""
Integration tests for quota-gated creation endpoints.
"""

import json
from datetime import date
import pytest
from app.models import Owner, SaleRecord, InventoryItem


def login_as(client, user, tenant):
    with client.session_transaction() as sess:
        sess['user_id'] = user.id
        sess['tenant_id'] = tenant.id


@pytest.fixture
def trial_clinic(tenant_factory, user_factory, client):
    """Trial clinic (1 user, 10 clients, 0.5 GB) with its owner logged in."""
    tenant = tenant_factory(plan_id='Trial')
    owner = user_factory(tenant, role='OWNER')
    login_as(client, owner, tenant)
    return tenant


class TestUserQuota:

    def test_owner_fills_trial_user_slot(self, client, trial_clinic):
        response = client.post('/users', json={
            'email': 'vet@vet.test', 'name': 'Vet', 'password': 'secret123', 'role': 'VET'
        })

        assert response.status_code == 403
        assert response.get_json() == {
            'resource': 'users', 'message': 'User limit reached.', 'status': 'error'
        }

    def test_standard_plan_allows_more_users(self, authenticated_client, session, tenant1):
        response = authenticated_client.post('/users', json={
            'email': 'vet@vet.test', 'name': 'Vet', 'password': 'secret123', 'role': 'VET'
        })

        assert response.status_code == 201
        assert response.get_json()['role'] == 'VET'
        assert len(authenticated_client.get('/users').get_json()) == 2

    def test_removed_user_frees_slot(self, client, session, tenant_factory, user_factory):
        tenant = tenant_factory(plan_id='Starter')
        owner = user_factory(tenant, role='OWNER')
        vet = user_factory(tenant, role='VET')
        login_as(client, owner, tenant)

        payload = {'email': 'third@vet.test', 'name': 'Third', 'password': 'secret123'}
        assert client.post('/users', json=payload).status_code == 403

        assert client.delete(f'/users/{vet.id}').status_code == 200
        assert client.post('/users', json=payload).status_code == 201

    def test_owner_cannot_be_removed(self, authenticated_client, owner_user1):
        response = authenticated_client.delete(f'/users/{owner_user1.id}')
        assert response.status_code == 400


class TestClientQuota:

    def test_numbering_uses_default_pattern(self, authenticated_client):
        first = authenticated_client.post('/owners', json={'name': 'Ana'})
        second = authenticated_client.post('/owners', json={'name': 'Bruno'})

        assert first.status_code == 201
        assert first.get_json()['clientNumber'] == 'CL-00001'
        assert second.get_json()['clientNumber'] == 'CL-00002'

    def test_numbering_uses_clinic_pattern(self, authenticated_client, session, tenant1):
        tenant1.update_settings({'clientPrefix': 'HH/000/year'})
        session.commit()

        response = authenticated_client.post('/owners', json={'name': 'Ana'})
        number = response.get_json()['clientNumber']
        assert number.startswith('HH/001/')
        assert len(number.rsplit('/', 1)[1]) == 4

    def test_numbering_with_year_ahead_of_placeholder(self, authenticated_client, session, tenant1):
        tenant1.update_settings({'clientPrefix': 'CL/year/0000'})
        session.commit()

        number = authenticated_client.post('/owners', json={'name': 'Ana'}).get_json()['clientNumber']
        assert number == f'CL/{date.today().year}/0001'

    def test_client_limit(self, client, session, trial_clinic, owner_factory):
        for n in range(1, 11):
            owner_factory(trial_clinic, n)

        response = client.post('/owners', json={'name': 'Eleventh'})

        assert response.status_code == 403
        assert response.get_json()['resource'] == 'clients'
        assert response.get_json()['message'] == 'Client limit reached.'
        assert session.query(Owner).filter_by(tenant_id=trial_clinic.id).count() == 10

    def test_clients_have_no_login(self, authenticated_client, tenant1, owner_factory):
        own = owner_factory(tenant1, 1)

        assert authenticated_client.patch(f'/owners/{own.id}/portal', json={'isActive': True}).status_code == 404
        assert set(authenticated_client.get(f'/owners/{own.id}').get_json()) == {
            'id', 'clientNumber', 'name', 'email', 'phone', 'address'
        }

    def test_missing_name_is_rejected(self, authenticated_client):
        response = authenticated_client.post('/owners', json={'phone': '555'})
        assert response.status_code == 400

    def test_storage_is_tracked(self, authenticated_client, session, tenant1):
        authenticated_client.post('/owners', json={'name': 'Ana'})
        session.refresh(tenant1)
        assert tenant1.storage_used_mb == pytest.approx(0.002)


class TestStorageQuota:

    def test_full_storage_rejects_inventory(self, client, session, tenant_factory, user_factory):
        tenant = tenant_factory(plan_id='Trial', storage_used_mb=512.0)
        owner = user_factory(tenant, role='OWNER')
        login_as(client, owner, tenant)

        response = client.post('/inventory', json={'name': 'Gauze', 'stock': 10})

        assert response.status_code == 403
        assert response.get_json()['resource'] == 'storage'
        assert response.get_json()['message'] == 'Storage quota exceeded.'
        assert session.query(InventoryItem).filter_by(tenant_id=tenant.id).count() == 0

        session.refresh(tenant)
        assert tenant.storage_used_mb == 512.0

    def test_expense_charges_storage(self, authenticated_client, session, tenant1):
        response = authenticated_client.post('/expenses', json={'category': 'Rent', 'amount': 1200})

        assert response.status_code == 201
        session.refresh(tenant1)
        assert tenant1.storage_used_mb == pytest.approx(0.005)


class TestAccountStatus:

    @pytest.mark.parametrize('status', ['Restricted', 'Suspended'])
    def test_blocked_clinic_cannot_create(self, client, tenant_factory, user_factory, status):
        tenant = tenant_factory(plan_id='Premium', status=status)
        owner = user_factory(tenant, role='OWNER')
        login_as(client, owner, tenant)

        for url, payload in [
            ('/owners', {'name': 'Ana'}),
            ('/inventory', {'name': 'Gauze'}),
            ('/sales', {'items': [{'name': 'Consult'}]}),
            ('/users', {'email': 'x@vet.test', 'name': 'X', 'password': 'secret123'}),
        ]:
            response = client.post(url, json=payload)
            assert response.status_code == 403
            body = response.get_json()
            assert body['message'] == 'Account restricted'
            assert body['account_status'] == status
            assert 'resource' not in body

    def test_blocked_clinic_can_still_read(self, client, tenant_factory, user_factory):
        tenant = tenant_factory(status='Suspended')
        owner = user_factory(tenant, role='OWNER')
        login_as(client, owner, tenant)

        assert client.get('/owners').status_code == 200
        assert client.get('/settings/usage').status_code == 200


class TestSales:

    def test_invoice_and_receipt_share_sequence(self, authenticated_client):
        first = authenticated_client.post('/sales', json={'items': [{'name': 'Consult'}], 'total': 50})
        second = authenticated_client.post('/sales', json={'items': [{'name': 'Consult'}], 'total': 50})

        assert first.status_code == 201
        assert first.get_json()['invoiceNumber'] == 'INV-0001'
        assert first.get_json()['receiptNumber'] == 'RCPT-0001'
        assert second.get_json()['invoiceNumber'] == 'INV-0002'
        assert second.get_json()['receiptNumber'] == 'RCPT-0002'

    def test_clinic_patterns(self, authenticated_client, session, tenant1):
        tenant1.update_settings({'invoicePrefix': 'F', 'receiptPrefix': 'R/00000'})
        session.commit()

        data = authenticated_client.post('/sales', json={'items': [{'name': 'Consult'}]}).get_json()
        assert data['invoiceNumber'] == 'F1'
        assert data['receiptNumber'] == 'R/00001'

    def test_paid_sale_deducts_stock(self, authenticated_client, session, tenant1):
        item = InventoryItem(tenant_id=tenant1.id, name='Rabies vaccine', type='Product', stock=5)
        session.add(item)
        session.commit()

        response = authenticated_client.post('/sales', json={
            'items': [{'inventoryItemId': item.id, 'name': 'Rabies vaccine', 'quantity': 2}],
            'status': 'Paid', 'total': 40
        })

        assert response.status_code == 201
        session.refresh(item)
        assert item.stock == 3

    def test_draft_sale_keeps_stock(self, authenticated_client, session, tenant1):
        item = InventoryItem(tenant_id=tenant1.id, name='Rabies vaccine', type='Product', stock=5)
        session.add(item)
        session.commit()

        authenticated_client.post('/sales', json={
            'items': [{'inventoryItemId': item.id, 'quantity': 2}], 'status': 'Draft'
        })

        session.refresh(item)
        assert item.stock == 5

    def test_low_stock_rolls_back_sale(self, authenticated_client, session, tenant1):
        item = InventoryItem(tenant_id=tenant1.id, name='Rabies vaccine', type='Product', stock=2)
        session.add(item)
        session.commit()

        response = authenticated_client.post('/sales', json={
            'items': [{'inventoryItemId': item.id, 'name': 'Rabies vaccine', 'quantity': 3}]
        })

        assert response.status_code == 409
        assert response.get_json()['message'] == 'Low stock: Rabies vaccine (Only 2 left)'
        assert session.query(SaleRecord).filter_by(tenant_id=tenant1.id).count() == 0

        session.refresh(tenant1)
        assert tenant1.storage_used_mb == 0.0

        # The failed sale did not consume a number
        ok = authenticated_client.post('/sales', json={'items': [{'name': 'Consult'}]})
        assert ok.get_json()['invoiceNumber'] == 'INV-0001'

    def test_sale_without_items_is_rejected(self, authenticated_client):
        response = authenticated_client.post('/sales', json={'items': []})
        assert response.status_code == 400

    def test_items_stored_as_json(self, authenticated_client, session, tenant1):
        items = [{'name': 'Consult', 'quantity': 1, 'price': 50}]
        authenticated_client.post('/sales', json={'items': items, 'payments': [{'method': 'Cash', 'amount': 50}]})

        sale = session.query(SaleRecord).filter_by(tenant_id=tenant1.id).one()
        assert json.loads(sale.items) == items


class TestSettings:

    def test_usage_summary(self, authenticated_client, owner_factory, tenant1):
        owner_factory(tenant1, 1)

        data = authenticated_client.get('/settings/usage').get_json()

        assert data['plan'] == 'Standard'
        assert data['limits'] == {'maxUsers': 7, 'maxClients': -1, 'maxStorageGB': 10}
        assert data['usage']['users'] == 1
        assert data['usage']['clients'] == 1

    def test_update_returns_preview(self, authenticated_client):
        response = authenticated_client.patch('/settings', json={'invoicePrefix': 'INV-000/year'})

        assert response.status_code == 200
        data = response.get_json()
        assert data['settings']['invoicePrefix'] == 'INV-000/year'
        assert data['preview']['invoicePrefix'].startswith('INV-001/')

    def test_unknown_setting_rejected(self, authenticated_client):
        response = authenticated_client.patch('/settings', json={'storage_used_mb': 0})
        assert response.status_code == 400

    def test_actions_are_logged(self, authenticated_client):
        authenticated_client.post('/owners', json={'name': 'Ana'})

        logs = authenticated_client.get('/logs').get_json()
        assert any(entry['action'] == 'Added Client' for entry in logs)

import pytest
import uuid

from app import create_app
from app.database import get_session, create_all, drop_all
from app.models import (
    Tenant, AppUser, UserTenant, Plan, AdminUser, Owner
)
from app.services.plan_service import seed_default_plans


@pytest.fixture(scope='function')
def app():
    """Create application instance with a fresh in-memory database."""
    app = create_app('config.TestingConfig')
    ctx = app.app_context()
    ctx.push()
    create_all()
    yield app
    get_session().remove()
    drop_all()
    ctx.pop()


@pytest.fixture(scope='function')
def client(app):
    """Create test client."""
    return app.test_client()


@pytest.fixture(scope='function')
def session(app):
    """Database session shared with the request handlers."""
    session = get_session()
    yield session
    session.rollback()


@pytest.fixture(scope='function')
def plans(session):
    """Default plan catalogue."""
    seed_default_plans(session)
    session.commit()
    return {p.id: p for p in session.query(Plan).all()}


def make_tenant(session, plan_id='Trial', status='Active', storage_used_mb=0.0, settings='{}'):
    suffix = str(uuid.uuid4())[:8]
    tenant = Tenant(
        slug=f'clinic-{suffix}',
        name=f'Clinic {suffix}',
        plan_id=plan_id,
        status=status,
        storage_used_mb=storage_used_mb,
        settings=settings
    )
    session.add(tenant)
    session.commit()
    return tenant


def make_user(session, tenant, role='STAFF', password='password123'):
    suffix = str(uuid.uuid4())[:8]
    user = AppUser(email=f'user-{suffix}@vet.test', full_name=f'User {suffix}', active=True)
    user.set_password(password)
    session.add(user)
    session.flush()
    session.add(UserTenant(user_id=user.id, tenant_id=tenant.id, role=role, active=True))
    session.commit()
    return user


def make_owner(session, tenant, number):
    owner = Owner(tenant_id=tenant.id, client_number=f'CL-{number:05d}', name=f'Owner {number}')
    session.add(owner)
    session.commit()
    return owner


@pytest.fixture(scope='function')
def tenant1(session, plans):
    """Standard plan clinic: 7 users, unlimited clients, 10 GB."""
    return make_tenant(session, plan_id='Standard')


@pytest.fixture(scope='function')
def tenant2(session, plans):
    """Second clinic for isolation tests."""
    return make_tenant(session, plan_id='Standard')


@pytest.fixture(scope='function')
def owner_user1(session, tenant1):
    """OWNER of tenant1."""
    return make_user(session, tenant1, role='OWNER')


@pytest.fixture(scope='function')
def authenticated_client(client, owner_user1, tenant1):
    """Client logged in as the owner of tenant1."""
    with client.session_transaction() as sess:
        sess['user_id'] = owner_user1.id
        sess['tenant_id'] = tenant1.id
    return client


@pytest.fixture(scope='function')
def admin_client(client, session):
    """Client logged in as a super admin."""
    admin = AdminUser(email=f'admin-{uuid.uuid4().hex[:8]}@platform.test')
    admin.set_password('adminpass')
    session.add(admin)
    session.commit()
    with client.session_transaction() as sess:
        sess['admin_user_id'] = admin.id
    return client


@pytest.fixture(scope='function')
def tenant_factory(session, plans):
    """Build tenants with custom plan, status, storage or settings."""
    def factory(**kwargs):
        return make_tenant(session, **kwargs)
    return factory


@pytest.fixture(scope='function')
def user_factory(session):
    def factory(tenant, role='STAFF'):
        return make_user(session, tenant, role=role)
    return factory


@pytest.fixture(scope='function')
def owner_factory(session):
    def factory(tenant, number):
        return make_owner(session, tenant, number)
    return factory

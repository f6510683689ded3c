"""Tenant lifecycle operations used by the admin console."""
import logging
import re
import uuid
from typing import Optional

from sqlalchemy.exc import IntegrityError

from app.exceptions import BusinessLogicError, NotFoundError
from app.models import Tenant, TenantStatus, BillingPeriod, AppUser, UserTenant, UserRole

logger = logging.getLogger(__name__)

VALID_STATUSES = {s.value for s in TenantStatus}
VALID_BILLING_PERIODS = {p.value for p in BillingPeriod}


def slugify(name: str) -> str:
    """Lowercase, hyphen-separated slug with a short random suffix."""
    base = re.sub(r'[^a-z0-9]+', '-', (name or '').lower()).strip('-') or 'clinic'
    return f"{base[:60]}-{uuid.uuid4().hex[:6]}"


def create_tenant(
    session,
    name: str,
    owner_email: str,
    owner_password: str,
    owner_name: Optional[str] = None,
    plan_id: str = 'Trial',
    billing_period: str = BillingPeriod.MONTHLY.value,
    parent_id: Optional[int] = None,
) -> Tenant:
    """
    Create a clinic with its owner account.

    The tenant starts Active with zero storage used. The owner membership
    counts as the first user of the plan.

    Raises:
        BusinessLogicError: invalid input or email already registered
    """
    name = (name or '').strip()
    owner_email = (owner_email or '').strip().lower()
    if not name:
        raise BusinessLogicError('Clinic name is required')
    if not owner_email or '@' not in owner_email:
        raise BusinessLogicError('A valid owner email is required')
    if not owner_password or len(owner_password) < 6:
        raise BusinessLogicError('Owner password must be at least 6 characters')
    if billing_period not in VALID_BILLING_PERIODS:
        raise BusinessLogicError(f'Invalid billing period: {billing_period}')

    if session.query(AppUser).filter_by(email=owner_email).first():
        raise BusinessLogicError(f'A user with email {owner_email} already exists')

    tenant = Tenant(
        slug=slugify(name),
        name=name,
        plan_id=plan_id,
        status=TenantStatus.ACTIVE.value,
        billing_period=billing_period,
        parent_id=parent_id,
        storage_used_mb=0.0,
        settings='{}'
    )
    session.add(tenant)

    owner = AppUser(email=owner_email, full_name=owner_name or name, active=True)
    owner.set_password(owner_password)
    session.add(owner)

    try:
        session.flush()
    except IntegrityError:
        session.rollback()
        raise BusinessLogicError('Could not create clinic, please retry')

    session.add(UserTenant(user_id=owner.id, tenant_id=tenant.id, role=UserRole.OWNER.value, active=True))
    session.flush()

    logger.info(f"Tenant created: {tenant.slug} (plan {plan_id})")
    return tenant


def update_tenant(session, tenant_id, status: Optional[str] = None, plan_id: Optional[str] = None,
                  billing_period: Optional[str] = None) -> Tenant:
    """
    Change a tenant's status, plan or billing period.

    Raises:
        NotFoundError: tenant does not exist
        BusinessLogicError: invalid status or billing period
    """
    tenant = session.get(Tenant, tenant_id)
    if tenant is None:
        raise NotFoundError('Tenant not found')

    if status is not None:
        if status not in VALID_STATUSES:
            raise BusinessLogicError(f'Invalid status: {status}')
        tenant.status = status
    if plan_id is not None:
        tenant.plan_id = plan_id
    if billing_period is not None:
        if billing_period not in VALID_BILLING_PERIODS:
            raise BusinessLogicError(f'Invalid billing period: {billing_period}')
        tenant.billing_period = billing_period

    logger.info(f"Tenant {tenant_id} updated: status={tenant.status} plan={tenant.plan_id}")
    return tenant

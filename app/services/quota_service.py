"""
Tenant resource-quota enforcement.

Route handlers gate every resource-creating action with a three step
contract:

    check_limits(session, tenant_id, kind, amount)   # may raise
    ... create the record ...
    track_storage(session, tenant_id, mb)            # persist usage

check_limits is read-only and track_storage is a separate call, so two
concurrent requests can both pass the check before either increment lands.
Quotas are therefore soft limits. Callers that need a hard ceiling must run
check, create and track inside one serializable transaction scoped to the
tenant row.
"""
import enum
import logging
from typing import NamedTuple, Optional, Union

from sqlalchemy import func, update

from app.exceptions import TenantNotFoundError, AccountRestrictedError, QuotaExceededError
from app.models import Tenant, Plan, UserTenant, Owner

logger = logging.getLogger(__name__)

UNLIMITED = -1
MB_PER_GB = 1024


class ResourceKind(enum.Enum):
    """Resources whose consumption is capped by the tenant's plan."""
    STORAGE = 'storage'
    USERS = 'users'
    CLIENTS = 'clients'


class PlanLimits(NamedTuple):
    """Resource ceilings of a plan. -1 means unlimited (users and clients only)."""
    max_users: float
    max_clients: float
    max_storage_gb: float

    @property
    def max_storage_mb(self):
        return self.max_storage_gb * MB_PER_GB

    @classmethod
    def from_dict(cls, limits, default: 'PlanLimits'):
        """Build limits from a plan's JSON limits, filling gaps from default."""
        return cls(
            max_users=limits.get('maxUsers', default.max_users),
            max_clients=limits.get('maxClients', default.max_clients),
            max_storage_gb=limits.get('maxStorageGB', default.max_storage_gb),
        )

    def to_dict(self):
        return {
            'maxUsers': self.max_users,
            'maxClients': self.max_clients,
            'maxStorageGB': self.max_storage_gb,
        }


# Applied when a tenant's plan record is missing (deleted or corrupt plan data)
FALLBACK_LIMITS = PlanLimits(max_users=1, max_clients=10, max_storage_gb=0.5)

# Storage charged per created record, in MB
STORAGE_COST_MB = {
    'inventory_item': 0.002,
    'owner': 0.002,
    'sale': 0.005,
    'expense': 0.005,
}


def _coerce_kind(resource_kind: Union[ResourceKind, str]) -> ResourceKind:
    if isinstance(resource_kind, ResourceKind):
        return resource_kind
    try:
        return ResourceKind(resource_kind)
    except ValueError:
        raise ValueError(f"Unknown resource kind: {resource_kind!r}")


def get_plan_limits(session, plan_id: Optional[str]) -> PlanLimits:
    """
    Resolve the limits of a plan.

    Args:
        session: SQLAlchemy session
        plan_id: Plan code referenced by the tenant

    Returns:
        PlanLimits of the plan, or FALLBACK_LIMITS if the plan does not exist
    """
    plan = session.get(Plan, plan_id) if plan_id else None
    if plan is None:
        return FALLBACK_LIMITS
    return PlanLimits.from_dict(plan.limits_dict, FALLBACK_LIMITS)


def count_users(session, tenant_id) -> int:
    """Live count of active staff memberships of a tenant."""
    return session.query(func.count(UserTenant.id)).filter(
        UserTenant.tenant_id == tenant_id,
        UserTenant.active == True  # noqa: E712
    ).scalar() or 0


def count_clients(session, tenant_id) -> int:
    """Live count of client (owner) records of a tenant."""
    return session.query(func.count(Owner.id)).filter(
        Owner.tenant_id == tenant_id
    ).scalar() or 0


def check_limits(session, tenant_id, resource_kind: Union[ResourceKind, str], increment_amount: float = 0) -> Tenant:
    """
    Verify a tenant may consume more of a resource.

    Order of checks: tenant exists, tenant not Restricted/Suspended (for any
    resource kind), then the plan ceiling for the requested kind. Counts are
    read live at call time.

    Storage ceilings get no unlimited treatment: a maxStorageGB of -1 is a
    literal ceiling of -1024 MB and every storage check fails. Users and
    clients treat -1 as unlimited. This asymmetry matches existing plan data
    and is kept as-is.

    Args:
        session: SQLAlchemy session
        tenant_id: Tenant to check
        resource_kind: 'storage' (amount in MB), 'users' or 'clients' (amount is a count)
        increment_amount: Non-negative amount about to be consumed

    Returns:
        The tenant, unmodified

    Raises:
        TenantNotFoundError: tenant does not exist
        AccountRestrictedError: tenant status blocks gated operations
        QuotaExceededError: the increment would exceed the plan ceiling
        ValueError: unknown resource kind
    """
    kind = _coerce_kind(resource_kind)

    tenant = session.get(Tenant, tenant_id)
    if tenant is None:
        raise TenantNotFoundError(tenant_id)

    if tenant.is_blocked:
        raise AccountRestrictedError(tenant.status)

    limits = get_plan_limits(session, tenant.plan_id)

    if kind is ResourceKind.STORAGE:
        used = tenant.storage_used_mb or 0.0
        if used + increment_amount > limits.max_storage_mb:
            raise QuotaExceededError(kind)

    elif kind is ResourceKind.USERS:
        if limits.max_users != UNLIMITED:
            if count_users(session, tenant.id) + increment_amount > limits.max_users:
                raise QuotaExceededError(kind)

    elif kind is ResourceKind.CLIENTS:
        if limits.max_clients != UNLIMITED:
            if count_clients(session, tenant.id) + increment_amount > limits.max_clients:
                raise QuotaExceededError(kind)

    return tenant


def track_storage(session, tenant_id, mb_used: float) -> None:
    """
    Add mb_used to the tenant's storage counter.

    Issued as a single UPDATE ... SET storage_used_mb = storage_used_mb + :mb
    so concurrent increments are not lost. The caller commits.

    Raises:
        TenantNotFoundError: tenant does not exist
    """
    result = session.execute(
        update(Tenant)
        .where(Tenant.id == tenant_id)
        .values(storage_used_mb=Tenant.storage_used_mb + mb_used)
        .execution_options(synchronize_session=False)
    )
    if result.rowcount == 0:
        raise TenantNotFoundError(tenant_id)

    # Refresh an already-loaded instance on next access
    loaded = session.identity_map.get(session.identity_key(Tenant, tenant_id))
    if loaded is not None:
        session.expire(loaded, ['storage_used_mb'])
    logger.info(f"Tracked {mb_used} MB of storage for tenant {tenant_id}")


def get_usage_summary(session, tenant_id) -> dict:
    """
    Current usage against plan limits, for the clinic settings screen.

    Returns:
        dict with plan code, limits and used amounts
    """
    tenant = session.get(Tenant, tenant_id)
    if tenant is None:
        raise TenantNotFoundError(tenant_id)

    limits = get_plan_limits(session, tenant.plan_id)
    return {
        'plan': tenant.plan_id,
        'status': tenant.status,
        'limits': limits.to_dict(),
        'usage': {
            'users': count_users(session, tenant.id),
            'clients': count_clients(session, tenant.id),
            'storageMB': round(tenant.storage_used_mb or 0.0, 6),
        },
    }

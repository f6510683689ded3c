"""
Admin Dashboard Service - platform KPIs across all tenants.
"""
from decimal import Decimal

from sqlalchemy import func

from app.models import Tenant, TenantStatus, BillingPeriod, Plan, UserTenant, Owner


def monthly_revenue(tenants, plans_by_id):
    """
    Monthly recurring revenue of the given tenants.

    Yearly subscribers contribute a twelfth of the yearly price. Tenants whose
    plan no longer exists contribute nothing.
    """
    total = Decimal('0')
    for tenant in tenants:
        plan = plans_by_id.get(tenant.plan_id)
        if plan is None:
            continue
        if tenant.billing_period == BillingPeriod.YEARLY.value:
            total += Decimal(plan.price_yearly or 0) / 12
        else:
            total += Decimal(plan.price_monthly or 0)
    return total


def get_platform_stats(db_session):
    """
    Get global KPIs for the admin console.

    Returns dict with:
    - total_tenants / active_tenants / restricted_tenants / suspended_tenants
    - total_users: active staff memberships across tenants
    - total_clients: client records across tenants
    - mrr: monthly recurring revenue of Active tenants
    """
    status_counts = dict(
        db_session.query(Tenant.status, func.count(Tenant.id)).group_by(Tenant.status).all()
    )
    total_users = db_session.query(func.count(UserTenant.id)).filter(
        UserTenant.active == True  # noqa: E712
    ).scalar() or 0
    total_clients = db_session.query(func.count(Owner.id)).scalar() or 0

    active = db_session.query(Tenant).filter(Tenant.status == TenantStatus.ACTIVE.value).all()
    plans_by_id = {p.id: p for p in db_session.query(Plan).all()}

    return {
        'total_tenants': sum(status_counts.values()),
        'active_tenants': status_counts.get(TenantStatus.ACTIVE.value, 0),
        'restricted_tenants': status_counts.get(TenantStatus.RESTRICTED.value, 0),
        'suspended_tenants': status_counts.get(TenantStatus.SUSPENDED.value, 0),
        'total_users': total_users,
        'total_clients': total_clients,
        'mrr': float(round(monthly_revenue(active, plans_by_id), 2)),
    }

"""
Plan catalogue management.

The default catalogue is seeded with `flask seed-plans`; super admins can
later edit prices, features and limits from the admin console.
"""
import logging

from app.exceptions import NotFoundError, BusinessLogicError
from app.models import Plan

logger = logging.getLogger(__name__)


DEFAULT_PLANS = [
    {
        'id': 'Trial',
        'name': 'Trial',
        'price_monthly': 100,
        'price_yearly': 1000,
        'features': ['Full Access for Testing', 'Limited Time', 'Single User'],
        'limits': {'maxUsers': 1, 'maxClients': 10, 'maxStorageGB': 0.5,
                   'modules': {'pos': True, 'lab': True, 'ai': True, 'reports': True, 'multiBranch': False}},
    },
    {
        'id': 'Starter',
        'name': 'Starter',
        'price_monthly': 7000,
        'price_yearly': 70000,
        'features': ['2 Users Max', 'Max 50 Clients', 'Basic Inventory & Sales', 'No Printing/Downloads', 'No AI Features'],
        'limits': {'maxUsers': 2, 'maxClients': 50, 'maxStorageGB': 2,
                   'modules': {'pos': True, 'lab': False, 'ai': False, 'reports': False, 'multiBranch': False, 'print': False}},
    },
    {
        'id': 'Standard',
        'name': 'Standard',
        'price_monthly': 30000,
        'price_yearly': 300000,
        'features': ['7 Users Max', 'Unlimited Clients', 'Full Reports & Printing', 'Limited AI (200/mo)', 'Lab Module'],
        'limits': {'maxUsers': 7, 'maxClients': -1, 'maxStorageGB': 10,
                   'modules': {'pos': True, 'lab': True, 'ai': True, 'reports': True, 'multiBranch': False, 'print': True, 'aiLimit': 200}},
    },
    {
        'id': 'Premium',
        'name': 'Premium',
        'price_monthly': 70000,
        'price_yearly': 700000,
        'features': ['Unlimited Users', 'Unlimited AI', 'Multi-Branch Management', 'Staff Transfer', 'Priority Support'],
        'limits': {'maxUsers': -1, 'maxClients': -1, 'maxStorageGB': 100,
                   'modules': {'pos': True, 'lab': True, 'ai': True, 'reports': True, 'multiBranch': True, 'print': True, 'aiLimit': -1}},
    },
]

LIMIT_KEYS = ('maxUsers', 'maxClients', 'maxStorageGB')


def seed_default_plans(session, overwrite=False):
    """
    Insert the default plan catalogue.

    Args:
        session: SQLAlchemy session (caller commits)
        overwrite: Reset existing plans to the defaults

    Returns:
        list[str]: Codes of plans created or reset
    """
    touched = []
    for definition in DEFAULT_PLANS:
        plan = session.get(Plan, definition['id'])
        if plan is not None and not overwrite:
            continue
        if plan is None:
            plan = Plan(id=definition['id'])
            session.add(plan)
        plan.name = definition['name']
        plan.price_monthly = definition['price_monthly']
        plan.price_yearly = definition['price_yearly']
        plan.set_features(definition['features'])
        plan.set_limits(definition['limits'])
        plan.is_active = True
        touched.append(plan.id)

    if touched:
        logger.info(f"Seeded plans: {', '.join(touched)}")
    return touched


def list_plans(session, active_only=False):
    query = session.query(Plan)
    if active_only:
        query = query.filter(Plan.is_active == True)  # noqa: E712
    return query.order_by(Plan.price_monthly).all()


def update_plan(session, plan_id, data):
    """
    Update pricing, features or limits of a plan.

    Args:
        session: SQLAlchemy session (caller commits)
        plan_id: Plan code
        data: dict with any of name, priceMonthly, priceYearly, features, limits, isActive

    Returns:
        Plan: The updated plan

    Raises:
        NotFoundError: plan does not exist
        BusinessLogicError: limits payload is malformed
    """
    plan = session.get(Plan, plan_id)
    if plan is None:
        raise NotFoundError('Plan not found')

    if 'name' in data:
        plan.name = data['name']
    if 'priceMonthly' in data:
        plan.price_monthly = data['priceMonthly']
    if 'priceYearly' in data:
        plan.price_yearly = data['priceYearly']
    if 'features' in data:
        if not isinstance(data['features'], list):
            raise BusinessLogicError('Features must be a list')
        plan.set_features(data['features'])
    if 'limits' in data:
        limits = data['limits']
        if not isinstance(limits, dict):
            raise BusinessLogicError('Limits must be an object')
        for key in LIMIT_KEYS:
            if key in limits and not isinstance(limits[key], (int, float)):
                raise BusinessLogicError(f'Limit {key} must be a number')
        merged = plan.limits_dict
        merged.update(limits)
        plan.set_limits(merged)
    if 'isActive' in data:
        plan.is_active = bool(data['isActive'])

    logger.info(f"Plan {plan_id} updated")
    return plan

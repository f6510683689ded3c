"""Staff user management inside a clinic."""
import logging

from app.exceptions import BusinessLogicError, NotFoundError
from app.models import AppUser, UserTenant, UserRole, LogType
from app.services import quota_service
from app.services.log_service import create_log
from app.services.quota_service import ResourceKind

logger = logging.getLogger(__name__)

ASSIGNABLE_ROLES = {UserRole.ADMIN.value, UserRole.VET.value, UserRole.STAFF.value}


def list_staff(session, tenant_id):
    """Active memberships of a clinic with their users, owners first."""
    return session.query(UserTenant, AppUser).join(
        AppUser, AppUser.id == UserTenant.user_id
    ).filter(
        UserTenant.tenant_id == tenant_id,
        UserTenant.active == True  # noqa: E712
    ).order_by(UserTenant.created_at.asc(), UserTenant.id.asc()).all()


def add_staff_user(session, tenant_id, data, acting_user_name):
    """
    Create a staff account in a clinic (or attach an existing account).

    Gated by the plan's maxUsers. Caller commits.

    Args:
        session: SQLAlchemy session
        tenant_id: Clinic ID
        data: dict with name, email, password, role
        acting_user_name: For the clinic log

    Returns:
        tuple(AppUser, UserTenant)
    """
    email = (data.get('email') or '').strip().lower()
    name = (data.get('name') or '').strip()
    role = data.get('role') or UserRole.STAFF.value

    if not email or '@' not in email:
        raise BusinessLogicError('Invalid email')
    if not name:
        raise BusinessLogicError('Name is required')
    if role not in ASSIGNABLE_ROLES:
        raise BusinessLogicError(f'Invalid role: {role}')

    quota_service.check_limits(session, tenant_id, ResourceKind.USERS, 1)

    user = session.query(AppUser).filter_by(email=email).first()
    if user is None:
        password = data.get('password') or ''
        if len(password) < 6:
            raise BusinessLogicError('Password must be at least 6 characters')
        user = AppUser(email=email, full_name=name, active=True,
                       is_suspended=bool(data.get('isSuspended', False)))
        user.set_password(password)
        session.add(user)
        session.flush()
    else:
        existing = session.query(UserTenant).filter_by(user_id=user.id, tenant_id=tenant_id).first()
        if existing and existing.active:
            raise BusinessLogicError(f'{email} already belongs to this clinic')
        if existing:
            existing.active = True
            existing.role = role
            session.flush()
            create_log(session, tenant_id, acting_user_name, 'Created User', LogType.ADMIN, f'Created: {name}')
            return user, existing

    membership = UserTenant(user_id=user.id, tenant_id=tenant_id, role=role, active=True)
    session.add(membership)
    session.flush()

    create_log(session, tenant_id, acting_user_name, 'Created User', LogType.ADMIN, f'Created: {name}')
    logger.info(f"User {email} added to tenant {tenant_id} as {role}")
    return user, membership


def remove_staff_user(session, tenant_id, user_id, acting_user_name):
    """Deactivate a membership, freeing one user slot. Owners cannot be removed."""
    membership = session.query(UserTenant).filter_by(
        user_id=user_id, tenant_id=tenant_id, active=True
    ).first()
    if membership is None:
        raise NotFoundError('User not found in this clinic')
    if membership.is_owner():
        raise BusinessLogicError('The clinic owner cannot be removed')

    membership.active = False
    create_log(session, tenant_id, acting_user_name, 'Removed User', LogType.ADMIN, f'User {user_id}')
    return membership

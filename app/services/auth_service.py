"""
Authentication service for clinic staff and platform admins.

Password checks only; session handling lives in the auth blueprints.
"""
import logging
from datetime import datetime

from app.exceptions import UnauthorizedError
from app.models import AppUser, UserTenant, AdminUser

logger = logging.getLogger(__name__)


def authenticate_staff(session, email, password):
    """
    Verify staff credentials and pick the clinic to log into.

    Args:
        session: SQLAlchemy session
        email: Login email (case insensitive)
        password: Plain password

    Returns:
        tuple(AppUser, UserTenant): user and their first active membership

    Raises:
        UnauthorizedError: bad credentials, suspended user or no clinic
    """
    email = (email or '').strip().lower()
    user = session.query(AppUser).filter_by(email=email, active=True).first()
    if not user or not user.check_password(password or ''):
        logger.warning(f"Failed staff login for {email}")
        raise UnauthorizedError('Invalid email or password', status_code=401)

    if user.is_suspended:
        raise UnauthorizedError('This account has been suspended')

    membership = session.query(UserTenant).filter_by(
        user_id=user.id,
        active=True
    ).order_by(UserTenant.created_at.asc(), UserTenant.id.asc()).first()
    if membership is None:
        raise UnauthorizedError('User does not belong to any clinic')

    logger.info(f"Staff login: {email} (tenant {membership.tenant_id})")
    return user, membership


def authenticate_admin(session, email, password):
    """Verify super admin credentials and stamp last_login (caller commits)."""
    email = (email or '').strip().lower()
    admin = session.query(AdminUser).filter_by(email=email).first()
    if not admin or not admin.check_password(password or ''):
        logger.warning(f"Failed admin login for {email}")
        raise UnauthorizedError('Invalid email or password', status_code=401)

    admin.last_login = datetime.utcnow()
    return admin

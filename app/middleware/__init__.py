"""Middleware for authentication and tenant context."""
from functools import wraps
from flask import session, g, current_app
from app.database import get_session
from app.exceptions import UnauthorizedError
from app.models import AppUser, UserTenant


def load_user_and_tenant():
    """
    Load current user and tenant into g (Flask's per-request global).

    Called before each request to establish user and tenant context.
    Sets g.user, g.tenant_id, and g.user_role if authenticated.
    Tenant status is not checked here: Restricted and Suspended clinics can
    still read their data, gated operations are refused by the quota service.
    """
    g.user = None
    g.tenant_id = None
    g.user_role = None

    try:
        user_id = session.get('user_id')
        if not user_id:
            return

        db_session = get_session()
        user = db_session.query(AppUser).filter_by(id=user_id, active=True).first()
        if not user or user.is_suspended:
            return

        g.user = user
        tenant_id = session.get('tenant_id')
        if tenant_id:
            # Verify user has access to this tenant
            user_tenant = db_session.query(UserTenant).filter_by(
                user_id=user.id,
                tenant_id=tenant_id,
                active=True
            ).first()

            if user_tenant:
                g.tenant_id = tenant_id
                g.user_role = user_tenant.role
            else:
                session.pop('tenant_id', None)
    except Exception as e:
        current_app.logger.error(f"Error in load_user_and_tenant: {e}")


def require_login(f):
    """Decorator: Require a logged in staff user (401 otherwise)."""
    @wraps(f)
    def decorated_function(*args, **kwargs):
        if g.get('user') is None:
            raise UnauthorizedError('Authentication required', status_code=401)
        return f(*args, **kwargs)
    return decorated_function


def require_tenant(f):
    """
    Decorator: Require tenant to be selected.

    Must be used AFTER require_login.
    """
    @wraps(f)
    def decorated_function(*args, **kwargs):
        if g.get('tenant_id') is None:
            raise UnauthorizedError('No clinic selected')
        return f(*args, **kwargs)
    return decorated_function


def current_user_name():
    """Display name of the logged in user, for clinic logs."""
    user = g.get('user')
    if user is None:
        return 'System'
    return user.full_name or user.email

"""
Permission decorators for role-based access control.
Extends the basic require_login and require_tenant decorators with role checks.
"""

from functools import wraps
from flask import g
from app.exceptions import UnauthorizedError


def require_role(*allowed_roles):
    """
    Decorator to restrict access to specific roles.

    Usage:
        @require_role('OWNER')
        @require_role('OWNER', 'ADMIN')

    Args:
        *allowed_roles: Variable number of role strings (OWNER, ADMIN, VET, STAFF)

    Returns:
        Decorator function
    """
    def decorator(f):
        @wraps(f)
        def decorated_function(*args, **kwargs):
            if not g.get('user'):
                raise UnauthorizedError('Authentication required', status_code=401)

            if not g.get('tenant_id'):
                raise UnauthorizedError('No clinic selected')

            user_role = g.get('user_role')
            if not user_role or user_role not in allowed_roles:
                raise UnauthorizedError('You do not have permission for this action')

            return f(*args, **kwargs)

        return decorated_function
    return decorator


def admin_or_owner(f):
    """
    Shortcut decorator for ADMIN or OWNER access.

    Usage:
        @admin_or_owner
        def create_user():
            ...
    """
    return require_role('OWNER', 'ADMIN')(f)

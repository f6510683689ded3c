"""
Admin security decorators.
Provides authentication for super admin console routes.
"""

from functools import wraps
from flask import session, g
from app.exceptions import UnauthorizedError


def admin_required(f):
    """
    Decorator: Require admin user to be logged in.

    IMPORTANT: This checks session['admin_user_id'], NOT g.user or g.tenant_id.
    Admin authentication is completely separate from clinic staff authentication.
    """
    @wraps(f)
    def decorated_function(*args, **kwargs):
        admin_user_id = session.get('admin_user_id')
        if not admin_user_id:
            raise UnauthorizedError('Admin authentication required', status_code=401)

        from app.database import get_session
        from app.models import AdminUser

        admin_user = get_session().get(AdminUser, admin_user_id)
        if not admin_user:
            # Admin user no longer exists in database
            session.pop('admin_user_id', None)
            raise UnauthorizedError('Invalid admin session', status_code=401)

        g.admin_user = admin_user
        return f(*args, **kwargs)

    return decorated_function

"""
Staff user management for a clinic.
Creating a user is gated by the plan's maxUsers.
"""

from flask import Blueprint, request, g, jsonify
from app.database import get_session
from app.middleware import require_login, require_tenant, current_user_name
from app.decorators.permissions import admin_or_owner
from app.services import staff_service


users_bp = Blueprint('users', __name__, url_prefix='/users')


@users_bp.route('', methods=['GET'])
@require_login
@require_tenant
def list_users():
    """List active staff of the current clinic."""
    session = get_session()
    rows = staff_service.list_staff(session, g.tenant_id)
    return jsonify([user.to_dict(role=membership.role) for membership, user in rows])


@users_bp.route('', methods=['POST'])
@require_login
@require_tenant
@admin_or_owner
def create_user():
    """Create a staff account (quota gated)."""
    session = get_session()
    data = request.get_json(silent=True) or {}
    try:
        user, membership = staff_service.add_staff_user(session, g.tenant_id, data, current_user_name())
        session.commit()
    except Exception:
        session.rollback()
        raise
    return jsonify(user.to_dict(role=membership.role)), 201


@users_bp.route('/<int:user_id>', methods=['DELETE'])
@require_login
@require_tenant
@admin_or_owner
def remove_user(user_id):
    """Remove a staff member from the current clinic."""
    session = get_session()
    try:
        staff_service.remove_staff_user(session, g.tenant_id, user_id, current_user_name())
        session.commit()
    except Exception:
        session.rollback()
        raise
    return jsonify({'success': True})

"""Staff authentication blueprint (session cookie based)."""
from flask import Blueprint, request, session, g, jsonify
from app.database import get_session
from app.middleware import require_login
from app.models import Tenant
from app.services.auth_service import authenticate_staff

auth_bp = Blueprint('auth', __name__, url_prefix='/auth')


@auth_bp.route('/login', methods=['POST'])
def login():
    """Log a staff user in and select their first clinic."""
    db_session = get_session()
    data = request.get_json(silent=True) or {}

    user, membership = authenticate_staff(db_session, data.get('email'), data.get('password'))

    session.clear()
    session['user_id'] = user.id
    session['tenant_id'] = membership.tenant_id
    session.permanent = True

    tenant = db_session.get(Tenant, membership.tenant_id)
    return jsonify({
        'user': user.to_dict(role=membership.role),
        'tenant': tenant.to_dict() if tenant else None,
    })


@auth_bp.route('/logout', methods=['POST'])
def logout():
    session.clear()
    return jsonify({'success': True})


@auth_bp.route('/me', methods=['GET'])
@require_login
def me():
    db_session = get_session()
    tenant = db_session.get(Tenant, g.tenant_id) if g.tenant_id else None
    return jsonify({
        'user': g.user.to_dict(role=g.user_role),
        'tenant': tenant.to_dict() if tenant else None,
    })

"""Clients (pet owners) blueprint - tenant-scoped JSON API."""
from flask import Blueprint, request, g, jsonify
from sqlalchemy import or_, func
from app.database import get_session
from app.exceptions import NotFoundError
from app.middleware import require_login, require_tenant, current_user_name
from app.models import Owner
from app.services import owner_service

owners_bp = Blueprint('owners', __name__, url_prefix='/owners')


@owners_bp.route('', methods=['GET'])
@require_login
@require_tenant
def list_owners():
    """List clients, newest first, optionally filtered by ?q=."""
    session = get_session()
    query = session.query(Owner).filter(Owner.tenant_id == g.tenant_id)

    search = request.args.get('q', '').strip().lower()
    if search:
        query = query.filter(or_(
            func.lower(Owner.name).like(f'%{search}%'),
            func.lower(Owner.client_number).like(f'%{search}%'),
            func.lower(Owner.phone).like(f'%{search}%'),
            func.lower(Owner.email).like(f'%{search}%')
        ))

    owners = query.order_by(Owner.created_at.desc(), Owner.id.desc()).all()
    return jsonify([o.to_dict() for o in owners])


@owners_bp.route('', methods=['POST'])
@require_login
@require_tenant
def create_owner():
    """Register a client (client and storage quota gated)."""
    session = get_session()
    data = request.get_json(silent=True) or {}
    try:
        owner = owner_service.create_owner(session, g.tenant_id, data, current_user_name())
        session.commit()
    except Exception:
        session.rollback()
        raise
    return jsonify(owner.to_dict()), 201


@owners_bp.route('/<int:owner_id>', methods=['GET'])
@require_login
@require_tenant
def get_owner(owner_id):
    session = get_session()
    owner = session.query(Owner).filter_by(id=owner_id, tenant_id=g.tenant_id).first()
    if owner is None:
        raise NotFoundError('Client not found')
    return jsonify(owner.to_dict())


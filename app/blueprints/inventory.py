"""Inventory and expenses blueprint - tenant-scoped JSON API."""
from flask import Blueprint, request, g, jsonify
from sqlalchemy import func
from app.database import get_session
from app.middleware import require_login, require_tenant, current_user_name
from app.models import InventoryItem
from app.services import inventory_service

inventory_bp = Blueprint('inventory', __name__)


@inventory_bp.route('/inventory', methods=['GET'])
@require_login
@require_tenant
def list_items():
    session = get_session()
    return jsonify([i.to_dict() for i in inventory_service.list_items(session, g.tenant_id)])


@inventory_bp.route('/inventory/check', methods=['GET'])
@require_login
@require_tenant
def check_item():
    """Check whether an item with the given name or SKU already exists."""
    session = get_session()
    name = request.args.get('name', '').strip().lower()
    sku = request.args.get('sku', '').strip()

    existing = None
    if sku:
        existing = session.query(InventoryItem).filter_by(tenant_id=g.tenant_id, sku=sku).first()
    if existing is None and name:
        existing = session.query(InventoryItem).filter(
            InventoryItem.tenant_id == g.tenant_id,
            func.lower(InventoryItem.name) == name
        ).first()

    return jsonify({'exists': existing is not None, 'match': existing.to_dict() if existing else None})


@inventory_bp.route('/inventory', methods=['POST'])
@require_login
@require_tenant
def create_item():
    session = get_session()
    data = request.get_json(silent=True) or {}
    try:
        item = inventory_service.create_item(session, g.tenant_id, data, current_user_name())
        session.commit()
    except Exception:
        session.rollback()
        raise
    return jsonify(item.to_dict()), 201


@inventory_bp.route('/inventory/<int:item_id>', methods=['PATCH'])
@require_login
@require_tenant
def update_item(item_id):
    session = get_session()
    data = request.get_json(silent=True) or {}
    try:
        item = inventory_service.update_item(session, g.tenant_id, item_id, data)
        session.commit()
    except Exception:
        session.rollback()
        raise
    return jsonify(item.to_dict())


@inventory_bp.route('/inventory/<int:item_id>', methods=['DELETE'])
@require_login
@require_tenant
def delete_item(item_id):
    session = get_session()
    try:
        inventory_service.delete_item(session, g.tenant_id, item_id)
        session.commit()
    except Exception:
        session.rollback()
        raise
    return jsonify({'success': True})


@inventory_bp.route('/expenses', methods=['GET'])
@require_login
@require_tenant
def list_expenses():
    session = get_session()
    return jsonify([e.to_dict() for e in inventory_service.list_expenses(session, g.tenant_id)])


@inventory_bp.route('/expenses', methods=['POST'])
@require_login
@require_tenant
def create_expense():
    session = get_session()
    data = request.get_json(silent=True) or {}
    try:
        expense = inventory_service.create_expense(session, g.tenant_id, data, current_user_name())
        session.commit()
    except Exception:
        session.rollback()
        raise
    return jsonify(expense.to_dict()), 201

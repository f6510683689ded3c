"""Sales (POS) blueprint - tenant-scoped JSON API."""
from flask import Blueprint, request, g, jsonify
from app.database import get_session
from app.middleware import require_login, require_tenant, current_user_name
from app.services import sales_service

sales_bp = Blueprint('sales', __name__, url_prefix='/sales')


@sales_bp.route('', methods=['GET'])
@require_login
@require_tenant
def list_sales():
    """Latest 500 sales of the clinic."""
    session = get_session()
    return jsonify([s.to_dict() for s in sales_service.list_sales(session, g.tenant_id)])


@sales_bp.route('', methods=['POST'])
@require_login
@require_tenant
def create_sale():
    """Process a sale: numbering, stock deduction and storage accounting."""
    session = get_session()
    data = request.get_json(silent=True) or {}
    try:
        sale = sales_service.create_sale(session, g.tenant_id, data, current_user_name())
        session.commit()
    except Exception:
        session.rollback()
        raise
    return jsonify(sale.to_dict()), 201


@sales_bp.route('/<int:sale_id>', methods=['DELETE'])
@require_login
@require_tenant
def delete_sale(sale_id):
    session = get_session()
    try:
        sales_service.delete_sale(session, g.tenant_id, sale_id, current_user_name())
        session.commit()
    except Exception:
        session.rollback()
        raise
    return jsonify({'success': True})

"""Public endpoints: health check and plan catalogue."""
from flask import Blueprint, jsonify
from app.database import get_session
from app.services import plan_service

main_bp = Blueprint('main', __name__)


@main_bp.route('/health')
def health():
    return jsonify({'status': 'ok'})


@main_bp.route('/plans')
def public_plans():
    """Active plans, cheapest first (pricing page)."""
    return jsonify([p.to_dict() for p in plan_service.list_plans(get_session(), active_only=True)])

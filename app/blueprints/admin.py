"""
Admin Blueprint - super admin console for the SaaS owner.

Routes:
- /admin/login, /admin/logout - Admin authentication
- /admin/stats - Platform KPIs
- /admin/tenants - Tenant list and creation
- /admin/tenants/<id> - Status / plan / billing period changes
- /admin/plans - Plan catalogue management
"""

from flask import Blueprint, request, session, jsonify, current_app
from app.database import get_session
from app.decorators.admin_security import admin_required
from app.exceptions import NotFoundError
from app.models import Tenant
from app.services import admin_dashboard_service, plan_service, tenant_service, quota_service
from app.services.auth_service import authenticate_admin


admin_bp = Blueprint('admin', __name__, url_prefix='/admin')


def _tenant_payload(session_db, tenant):
    payload = tenant.to_dict()
    payload['usage'] = quota_service.get_usage_summary(session_db, tenant.id)['usage']
    return payload


@admin_bp.route('/login', methods=['POST'])
def login():
    """Admin login - separate from clinic staff login."""
    session_db = get_session()
    data = request.get_json(silent=True) or {}

    admin_user = authenticate_admin(session_db, data.get('email'), data.get('password'))
    session_db.commit()

    session.clear()
    session['admin_user_id'] = admin_user.id
    session.permanent = True
    return jsonify({'id': admin_user.id, 'email': admin_user.email})


@admin_bp.route('/logout', methods=['POST'])
def logout():
    session.pop('admin_user_id', None)
    return jsonify({'success': True})


@admin_bp.route('/stats')
@admin_required
def stats():
    return jsonify(admin_dashboard_service.get_platform_stats(get_session()))


@admin_bp.route('/tenants')
@admin_required
def list_tenants():
    session_db = get_session()
    tenants = session_db.query(Tenant).order_by(Tenant.created_at.desc(), Tenant.id.desc()).all()
    return jsonify([_tenant_payload(session_db, t) for t in tenants])


@admin_bp.route('/tenants', methods=['POST'])
@admin_required
def create_tenant():
    """Create a clinic and its owner account."""
    session_db = get_session()
    data = request.get_json(silent=True) or {}
    try:
        tenant = tenant_service.create_tenant(
            session_db,
            name=data.get('name'),
            owner_email=data.get('ownerEmail'),
            owner_password=data.get('ownerPassword'),
            owner_name=data.get('ownerName'),
            plan_id=data.get('plan') or current_app.config.get('DEFAULT_PLAN_ID', 'Trial'),
            billing_period=data.get('billingPeriod') or 'Monthly',
            parent_id=data.get('parentId'),
        )
        session_db.commit()
    except Exception:
        session_db.rollback()
        raise
    return jsonify(_tenant_payload(session_db, tenant)), 201


@admin_bp.route('/tenants/<int:tenant_id>')
@admin_required
def tenant_detail(tenant_id):
    session_db = get_session()
    tenant = session_db.get(Tenant, tenant_id)
    if tenant is None:
        raise NotFoundError('Tenant not found')
    return jsonify(_tenant_payload(session_db, tenant))


@admin_bp.route('/tenants/<int:tenant_id>', methods=['PATCH'])
@admin_required
def update_tenant(tenant_id):
    """Change status (Active / Restricted / Suspended), plan or billing period."""
    session_db = get_session()
    data = request.get_json(silent=True) or {}
    try:
        tenant = tenant_service.update_tenant(
            session_db, tenant_id,
            status=data.get('status'),
            plan_id=data.get('plan'),
            billing_period=data.get('billingPeriod'),
        )
        session_db.commit()
    except Exception:
        session_db.rollback()
        raise
    current_app.logger.info(f"Admin updated tenant {tenant_id}: {data}")
    return jsonify(_tenant_payload(session_db, tenant))


@admin_bp.route('/plans')
@admin_required
def list_plans():
    return jsonify([p.to_dict() for p in plan_service.list_plans(get_session())])


@admin_bp.route('/plans/<plan_id>', methods=['PATCH'])
@admin_required
def update_plan(plan_id):
    session_db = get_session()
    data = request.get_json(silent=True) or {}
    try:
        plan = plan_service.update_plan(session_db, plan_id, data)
        session_db.commit()
    except Exception:
        session_db.rollback()
        raise
    return jsonify(plan.to_dict())

"""Clinic settings blueprint: ID patterns, usage and activity log."""
from flask import Blueprint, request, g, jsonify
from app.database import get_session
from app.decorators.permissions import admin_or_owner
from app.exceptions import BusinessLogicError, TenantNotFoundError
from app.middleware import require_login, require_tenant, current_user_name
from app.models import Tenant, LogType
from app.services import quota_service
from app.services.log_service import create_log, get_logs
from app.utils.id_generator import generate_next_id

settings_bp = Blueprint('settings', __name__)

# Settings keys a clinic may change through the API
EDITABLE_SETTINGS = {
    'invoicePrefix', 'receiptPrefix', 'clientPrefix',
    'clinicName', 'address', 'phone', 'email', 'currency', 'taxRate',
}
PATTERN_KEYS = ('invoicePrefix', 'receiptPrefix', 'clientPrefix')


def _current_tenant(session):
    tenant = session.get(Tenant, g.tenant_id)
    if tenant is None:
        raise TenantNotFoundError(g.tenant_id)
    return tenant


@settings_bp.route('/settings', methods=['GET'])
@require_login
@require_tenant
def get_settings():
    session = get_session()
    return jsonify(_current_tenant(session).to_dict())


@settings_bp.route('/settings', methods=['PATCH'])
@require_login
@require_tenant
@admin_or_owner
def update_settings():
    """Merge editable keys into the clinic settings and preview the ID patterns."""
    session = get_session()
    data = request.get_json(silent=True) or {}

    unknown = set(data) - EDITABLE_SETTINGS
    if unknown:
        raise BusinessLogicError(f"Unknown settings: {', '.join(sorted(unknown))}")
    for key in PATTERN_KEYS:
        if key in data and data[key] is not None and not isinstance(data[key], str):
            raise BusinessLogicError(f'{key} must be a string')

    tenant = _current_tenant(session)
    try:
        tenant.update_settings(data)
        create_log(session, tenant.id, current_user_name(), 'Updated Settings', LogType.ADMIN,
                   ', '.join(sorted(data)))
        session.commit()
    except Exception:
        session.rollback()
        raise

    settings = tenant.settings_dict
    preview = {key: generate_next_id(settings.get(key), 1) for key in PATTERN_KEYS if settings.get(key)}
    return jsonify({'settings': settings, 'preview': preview})


@settings_bp.route('/settings/usage', methods=['GET'])
@require_login
@require_tenant
def usage():
    """Usage of users, clients and storage against the plan limits."""
    session = get_session()
    return jsonify(quota_service.get_usage_summary(session, g.tenant_id))


@settings_bp.route('/logs', methods=['GET'])
@require_login
@require_tenant
def list_logs():
    session = get_session()
    return jsonify([entry.to_dict() for entry in get_logs(session, g.tenant_id)])

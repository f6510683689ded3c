"""Client (pet owner) management - quota gated and sequentially numbered."""
import logging

from flask import current_app

from app.exceptions import BusinessLogicError
from app.models import Owner, LogType
from app.services import quota_service, sequence_service
from app.services.log_service import create_log
from app.services.quota_service import ResourceKind, STORAGE_COST_MB

logger = logging.getLogger(__name__)


def _client_pattern(tenant):
    return tenant.settings_dict.get('clientPrefix') or current_app.config.get('DEFAULT_CLIENT_PATTERN', 'CL-00000')


def create_owner(session, tenant_id, data, user_name):
    """
    Register a new client for a clinic.

    Checks the client ceiling and storage before creating, numbers the
    client with the clinic's clientPrefix pattern and records the storage
    used. Caller commits.

    Args:
        session: SQLAlchemy session
        tenant_id: Clinic ID
        data: dict with name (required), email, phone, address
        user_name: Acting user, for the clinic log

    Returns:
        Owner: The new client (flushed)
    """
    name = (data.get('name') or '').strip()
    if not name:
        raise BusinessLogicError('Client name is required')

    cost = STORAGE_COST_MB['owner']
    tenant = quota_service.check_limits(session, tenant_id, ResourceKind.CLIENTS, 1)
    quota_service.check_limits(session, tenant_id, ResourceKind.STORAGE, cost)

    client_number = sequence_service.format_next_id(session, tenant_id, 'owner', _client_pattern(tenant))

    owner = Owner(
        tenant_id=tenant_id,
        client_number=client_number,
        name=name,
        email=(data.get('email') or '').strip() or None,
        phone=(data.get('phone') or '').strip() or None,
        address=(data.get('address') or '').strip() or None,
    )
    session.add(owner)
    session.flush()

    quota_service.track_storage(session, tenant_id, cost)
    create_log(session, tenant_id, user_name, 'Added Client', LogType.SYSTEM, f'{client_number} {name}')

    logger.info(f"Client {client_number} created for tenant {tenant_id}")
    return owner

"""
Clinic activity log service.

Writes ClinicLog entries for actions taken inside a clinic. Logging failures
never break the business operation that triggered them.
"""
import logging
from typing import Union

from app.models import ClinicLog, LogType

logger = logging.getLogger(__name__)

MAX_LOGS = 200


def create_log(
    session,
    tenant_id: int,
    user: str,
    action: str,
    log_type: Union[LogType, str] = LogType.SYSTEM,
    details: str = ''
):
    """
    Add a clinic log entry to the session.

    Args:
        session: Database session (caller commits)
        tenant_id: Clinic the action belongs to
        user: Display name of the acting user
        action: Short action label, e.g. 'Processed Sale'
        log_type: LogType or its value
        details: Free text details
    """
    try:
        entry = ClinicLog(
            tenant_id=tenant_id,
            user=user or 'Unknown',
            action=action,
            type=getattr(log_type, 'value', log_type),
            details=details
        )
        session.add(entry)
        logger.info(f"Clinic log: {action} by {user} (tenant {tenant_id})")
    except Exception as e:
        logger.error(f"Failed to create clinic log: {e}")


def get_logs(session, tenant_id: int, limit: int = MAX_LOGS):
    """Latest log entries of a clinic, newest first."""
    return session.query(ClinicLog).filter(
        ClinicLog.tenant_id == tenant_id
    ).order_by(ClinicLog.timestamp.desc(), ClinicLog.id.desc()).limit(limit).all()

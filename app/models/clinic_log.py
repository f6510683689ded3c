"""
Clinic activity log.

Records who did what inside a clinic (created users, processed sales, ...).
Multi-tenant: always filtered by tenant_id.
"""
import enum
from sqlalchemy import Column, BigInteger, String, Text, DateTime, ForeignKey
from sqlalchemy.sql import func
from app.database import Base, BigIntPK


class LogType(enum.Enum):
    SYSTEM = 'system'
    FINANCIAL = 'financial'
    ADMIN = 'admin'
    CLINICAL = 'clinical'


class ClinicLog(Base):
    __tablename__ = 'clinic_log'

    id = Column(BigIntPK, primary_key=True, autoincrement=True)
    tenant_id = Column(BigInteger, ForeignKey('tenant.id'), nullable=False, index=True)
    user = Column(String(200), nullable=False)  # Display name at the time of the action
    action = Column(String(200), nullable=False)
    type = Column(String(20), nullable=False, default=LogType.SYSTEM.value)
    details = Column(Text, nullable=True)
    timestamp = Column(DateTime(timezone=True), nullable=False, server_default=func.now(), index=True)

    def to_dict(self):
        return {
            'id': self.id,
            'user': self.user,
            'action': self.action,
            'type': self.type,
            'details': self.details,
            'timestamp': self.timestamp.isoformat() if self.timestamp else None,
        }

    def __repr__(self):
        return f"<ClinicLog {self.action} by {self.user} at {self.timestamp}>"

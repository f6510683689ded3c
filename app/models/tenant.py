"""Tenant model - represents each clinic using the platform."""
import enum
from sqlalchemy import Column, BigInteger, String, Float, Text, DateTime, ForeignKey
from sqlalchemy.orm import relationship
from sqlalchemy.sql import func
from app.database import Base, BigIntPK
from app.utils.json_fields import safe_parse, dump_json


class TenantStatus(enum.Enum):
    """Account status of a tenant."""
    ACTIVE = 'Active'
    RESTRICTED = 'Restricted'
    SUSPENDED = 'Suspended'


BLOCKING_STATUSES = (TenantStatus.RESTRICTED.value, TenantStatus.SUSPENDED.value)


class BillingPeriod(enum.Enum):
    MONTHLY = 'Monthly'
    YEARLY = 'Yearly'


class Tenant(Base):
    """Tenant model - each clinic (or branch)."""

    __tablename__ = 'tenant'

    id = Column(BigIntPK, primary_key=True, autoincrement=True)
    slug = Column(String(80), nullable=False, unique=True)  # URL-safe identifier
    name = Column(String(200), nullable=False)  # Display name
    parent_id = Column(BigInteger, ForeignKey('tenant.id'), nullable=True)  # Branch of another clinic

    # Plan code; intentionally not a foreign key so a deleted plan leaves a dangling reference
    plan_id = Column(String(50), nullable=False, default='Trial')
    status = Column(String(20), nullable=False, default=TenantStatus.ACTIVE.value)
    billing_period = Column(String(20), nullable=False, default=BillingPeriod.MONTHLY.value)

    storage_used_mb = Column(Float, nullable=False, default=0.0)
    settings = Column(Text, nullable=False, default='{}')

    created_at = Column(DateTime(timezone=True), nullable=False, server_default=func.now())
    updated_at = Column(DateTime(timezone=True), nullable=False, server_default=func.now(), onupdate=func.now())

    # Relationships
    user_tenants = relationship('UserTenant', back_populates='tenant')
    branches = relationship('Tenant')

    def __repr__(self):
        return f"<Tenant(id={self.id}, slug='{self.slug}', plan='{self.plan_id}', status='{self.status}')>"

    @property
    def is_blocked(self):
        """Restricted and Suspended tenants reject all quota-gated operations."""
        return self.status in BLOCKING_STATUSES

    @property
    def settings_dict(self):
        parsed = safe_parse(self.settings, {})
        return parsed if isinstance(parsed, dict) else {}

    def update_settings(self, values):
        """Merge values into the JSON settings blob."""
        merged = self.settings_dict
        merged.update(values)
        self.settings = dump_json(merged)

    def to_dict(self):
        return {
            'id': self.id,
            'slug': self.slug,
            'name': self.name,
            'parentId': self.parent_id,
            'plan': self.plan_id,
            'status': self.status,
            'billingPeriod': self.billing_period,
            'storageUsedMB': self.storage_used_mb,
            'settings': self.settings_dict,
        }

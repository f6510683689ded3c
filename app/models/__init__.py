"""Models package - exports all SQLAlchemy models."""
# SaaS Core Models
from app.models.admin_user import AdminUser
from app.models.app_user import AppUser
from app.models.plan import Plan
from app.models.tenant import Tenant, TenantStatus, BillingPeriod
from app.models.user_tenant import UserTenant, UserRole
from app.models.sequence_counter import SequenceCounter

# Clinic Models
from app.models.owner import Owner
from app.models.inventory_item import InventoryItem, ItemType
from app.models.sale_record import SaleRecord, SaleStatus
from app.models.expense import Expense
from app.models.clinic_log import ClinicLog, LogType

__all__ = [
    # SaaS Core
    'AdminUser', 'AppUser', 'Plan', 'Tenant', 'TenantStatus', 'BillingPeriod',
    'UserTenant', 'UserRole', 'SequenceCounter',
    # Clinic
    'Owner', 'InventoryItem', 'ItemType', 'SaleRecord', 'SaleStatus',
    'Expense', 'ClinicLog', 'LogType',
]

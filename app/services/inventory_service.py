"""Inventory items and expenses (tenant-scoped, storage-gated)."""
import logging

from app.exceptions import BusinessLogicError, NotFoundError
from app.models import InventoryItem, ItemType, Expense, LogType
from app.services import quota_service
from app.services.log_service import create_log
from app.services.quota_service import ResourceKind, STORAGE_COST_MB
from app.utils.number_format import parse_amount, parse_date

logger = logging.getLogger(__name__)

VALID_ITEM_TYPES = {t.value for t in ItemType}


def _item_fields(data, partial=False):
    """Extract and validate inventory fields from a JSON payload."""
    fields = {}
    if not partial or 'name' in data:
        name = (data.get('name') or '').strip()
        if not name:
            raise BusinessLogicError('Item name is required')
        fields['name'] = name
    if 'category' in data:
        fields['category'] = data.get('category')
    if 'sku' in data:
        fields['sku'] = data.get('sku') or None
    if not partial or 'type' in data:
        item_type = data.get('type') or ItemType.PRODUCT.value
        if item_type not in VALID_ITEM_TYPES:
            raise BusinessLogicError(f'Invalid item type: {item_type}')
        fields['type'] = item_type

    numeric = {
        'stock': 'stock',
        'purchasePrice': 'purchase_price',
        'retailPrice': 'retail_price',
        'wholesalePrice': 'wholesale_price',
        'reorderLevel': 'reorder_level',
    }
    for key, column in numeric.items():
        if not partial or key in data:
            fields[column] = parse_amount(data.get(key), key)

    if 'expiryDate' in data:
        fields['expiry_date'] = parse_date(data.get('expiryDate'), 'expiryDate')
    return fields


def list_items(session, tenant_id):
    return session.query(InventoryItem).filter(
        InventoryItem.tenant_id == tenant_id
    ).order_by(InventoryItem.name.asc()).all()


def get_item(session, tenant_id, item_id):
    item = session.query(InventoryItem).filter_by(id=item_id, tenant_id=tenant_id).first()
    if item is None:
        raise NotFoundError('Inventory item not found')
    return item


def create_item(session, tenant_id, data, user_name):
    """Create an inventory item: check storage, create, track storage. Caller commits."""
    fields = _item_fields(data)
    cost = STORAGE_COST_MB['inventory_item']

    quota_service.check_limits(session, tenant_id, ResourceKind.STORAGE, cost)

    item = InventoryItem(tenant_id=tenant_id, **fields)
    session.add(item)
    session.flush()

    quota_service.track_storage(session, tenant_id, cost)
    create_log(session, tenant_id, user_name, 'Added Inventory', LogType.SYSTEM, item.name)
    return item


def update_item(session, tenant_id, item_id, data):
    item = get_item(session, tenant_id, item_id)
    for column, value in _item_fields(data, partial=True).items():
        setattr(item, column, value)
    return item


def delete_item(session, tenant_id, item_id):
    """Delete an item. Storage already charged for it is not refunded."""
    item = get_item(session, tenant_id, item_id)
    session.delete(item)


def list_expenses(session, tenant_id):
    return session.query(Expense).filter(
        Expense.tenant_id == tenant_id
    ).order_by(Expense.date.desc(), Expense.id.desc()).all()


def create_expense(session, tenant_id, data, user_name):
    """Record an expense: check storage, create, track storage. Caller commits."""
    category = (data.get('category') or '').strip()
    if not category:
        raise BusinessLogicError('Expense category is required')
    amount = parse_amount(data.get('amount'), 'amount', default=None)
    cost = STORAGE_COST_MB['expense']

    quota_service.check_limits(session, tenant_id, ResourceKind.STORAGE, cost)

    expense = Expense(
        tenant_id=tenant_id,
        category=category,
        description=data.get('description'),
        payment_method=data.get('paymentMethod'),
        amount=amount,
        notes=data.get('notes'),
    )
    session.add(expense)
    session.flush()

    quota_service.track_storage(session, tenant_id, cost)
    create_log(session, tenant_id, user_name, 'Recorded Expense', LogType.FINANCIAL, f'{category} {amount}')
    return expense

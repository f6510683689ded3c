"""
POS sales - Multi-Tenant.

A sale is storage-gated, numbered with the clinic's invoice and receipt
patterns (both share one sequence number), and takes Product items out of
stock when it is Paid or Pending.
"""
import logging
from decimal import Decimal
from typing import Any, Dict, List

from flask import current_app

from app.exceptions import BusinessLogicError, NotFoundError, InsufficientStockError
from app.models import InventoryItem, Owner, SaleRecord, SaleStatus, LogType
from app.models.sale_record import STOCK_DEDUCTING_STATUSES
from app.services import quota_service, sequence_service
from app.services.log_service import create_log
from app.services.quota_service import ResourceKind, STORAGE_COST_MB
from app.utils.id_generator import generate_next_id
from app.utils.json_fields import dump_json
from app.utils.number_format import parse_amount

logger = logging.getLogger(__name__)

VALID_STATUSES = {s.value for s in SaleStatus}


def _patterns(tenant):
    settings = tenant.settings_dict
    config = current_app.config
    invoice = settings.get('invoicePrefix') or config.get('DEFAULT_INVOICE_PATTERN', 'INV-0000')
    receipt = settings.get('receiptPrefix') or config.get('DEFAULT_RECEIPT_PATTERN', 'RCPT-0000')
    return invoice, receipt


def _resolve_client(session, tenant_id, client_id):
    """Return the clinic's client for client_id (None when no client is given)."""
    if client_id in (None, ''):
        return None
    try:
        client_id = int(client_id)
    except (TypeError, ValueError):
        raise BusinessLogicError('clientId must be an integer')
    owner = session.query(Owner).filter_by(id=client_id, tenant_id=tenant_id).first()
    if owner is None:
        raise NotFoundError('Client not found')
    return owner


def _deduct_stock(session, tenant_id, items: List[Dict[str, Any]]):
    """Lock and decrement stock of Product items, failing on insufficient stock."""
    for line in items:
        item_id = line.get('inventoryItemId')
        if item_id is None:
            continue
        quantity = parse_amount(line.get('quantity'), 'quantity', default=Decimal('1'))
        item = session.query(InventoryItem).filter_by(
            id=item_id, tenant_id=tenant_id
        ).with_for_update().first()
        if item is None or not item.is_product:
            continue
        if Decimal(item.stock) < quantity:
            raise InsufficientStockError(line.get('name') or item.name, Decimal(item.stock))
        item.stock = Decimal(item.stock) - quantity


def create_sale(session, tenant_id, data, user_name):
    """
    Process a POS sale.

    Steps: storage check, reserve the sale sequence number and format the
    invoice/receipt numbers, deduct stock, create the record, track storage.
    Caller commits; on any error the caller rolls back so stock and the
    sequence reservation are undone together.

    Args:
        session: SQLAlchemy session
        tenant_id: Clinic ID
        data: JSON payload (items, payments, totals, status, client fields, notes)
        user_name: For the clinic log

    Returns:
        SaleRecord: The flushed sale
    """
    items = data.get('items') or []
    if not isinstance(items, list) or not items:
        raise BusinessLogicError('A sale needs at least one item')
    payments = data.get('payments') or []
    status = data.get('status') or SaleStatus.PAID.value
    if status not in VALID_STATUSES:
        raise BusinessLogicError(f'Invalid sale status: {status}')
    client = _resolve_client(session, tenant_id, data.get('clientId'))

    cost = STORAGE_COST_MB['sale']
    tenant = quota_service.check_limits(session, tenant_id, ResourceKind.STORAGE, cost)

    invoice_pattern, receipt_pattern = _patterns(tenant)
    year = sequence_service.current_year()
    sequence = sequence_service.next_sequence(session, tenant_id, 'sale', year)

    if status in STOCK_DEDUCTING_STATUSES:
        _deduct_stock(session, tenant_id, items)

    sale = SaleRecord(
        tenant_id=tenant_id,
        client_id=client.id if client else None,
        client_name=data.get('clientName') or (client.name if client else None),
        client_email=data.get('clientEmail'),
        client_phone=data.get('clientPhone'),
        client_address=data.get('clientAddress'),
        items=dump_json(items),
        payments=dump_json(payments),
        subtotal=parse_amount(data.get('subtotal'), 'subtotal'),
        discount=parse_amount(data.get('discount'), 'discount'),
        tax=parse_amount(data.get('tax'), 'tax'),
        total=parse_amount(data.get('total'), 'total'),
        status=status,
        invoice_number=generate_next_id(invoice_pattern, sequence, year=year),
        receipt_number=generate_next_id(receipt_pattern, sequence, year=year),
        notes=data.get('notes'),
    )
    session.add(sale)
    session.flush()

    quota_service.track_storage(session, tenant_id, cost)
    create_log(session, tenant_id, user_name, 'Processed Sale', LogType.FINANCIAL, f'{sale.total}')

    logger.info(f"Sale {sale.invoice_number} created for tenant {tenant_id}")
    return sale


def list_sales(session, tenant_id, limit=500):
    return session.query(SaleRecord).filter(
        SaleRecord.tenant_id == tenant_id
    ).order_by(SaleRecord.date.desc(), SaleRecord.id.desc()).limit(limit).all()


def delete_sale(session, tenant_id, sale_id, user_name):
    sale = session.query(SaleRecord).filter_by(id=sale_id, tenant_id=tenant_id).first()
    if sale is None:
        raise NotFoundError('Sale not found')
    session.delete(sale)
    create_log(session, tenant_id, user_name, 'Deleted Sale', LogType.FINANCIAL, sale.invoice_number or '')

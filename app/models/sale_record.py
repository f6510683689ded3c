"""SaleRecord model - POS sales with JSON-encoded items and payments."""
import enum
from sqlalchemy import Column, BigInteger, String, Numeric, Text, DateTime, ForeignKey, UniqueConstraint
from sqlalchemy.sql import func
from app.database import Base, BigIntPK
from app.utils.json_fields import safe_parse


class SaleStatus(enum.Enum):
    PAID = 'Paid'
    PENDING = 'Pending'
    DRAFT = 'Draft'


# Statuses that take stock out of inventory
STOCK_DEDUCTING_STATUSES = (SaleStatus.PAID.value, SaleStatus.PENDING.value)


class SaleRecord(Base):
    """Sale made at the clinic POS."""

    __tablename__ = 'sale_record'

    id = Column(BigIntPK, primary_key=True, autoincrement=True)
    tenant_id = Column(BigInteger, ForeignKey('tenant.id'), nullable=False, index=True)
    date = Column(DateTime(timezone=True), nullable=False, server_default=func.now())

    client_id = Column(BigInteger, ForeignKey('owner.id'), nullable=True)
    client_name = Column(String(200), nullable=True)
    client_email = Column(String(255), nullable=True)
    client_phone = Column(String(50), nullable=True)
    client_address = Column(Text, nullable=True)

    items = Column(Text, nullable=False, default='[]')
    payments = Column(Text, nullable=False, default='[]')

    subtotal = Column(Numeric(12, 2), nullable=False, default=0)
    discount = Column(Numeric(12, 2), nullable=False, default=0)
    tax = Column(Numeric(12, 2), nullable=False, default=0)
    total = Column(Numeric(12, 2), nullable=False, default=0)

    status = Column(String(20), nullable=False, default=SaleStatus.PAID.value)
    invoice_number = Column(String(80), nullable=True)
    receipt_number = Column(String(80), nullable=True)
    notes = Column(Text, nullable=True)

    __table_args__ = (
        UniqueConstraint('tenant_id', 'invoice_number', name='uq_sale_record_tenant_invoice'),
    )

    def to_dict(self):
        return {
            'id': self.id,
            'date': self.date.isoformat() if self.date else None,
            'clientId': self.client_id,
            'clientName': self.client_name,
            'items': safe_parse(self.items, []),
            'payments': safe_parse(self.payments, []),
            'subtotal': float(self.subtotal or 0),
            'discount': float(self.discount or 0),
            'tax': float(self.tax or 0),
            'total': float(self.total or 0),
            'status': self.status,
            'invoiceNumber': self.invoice_number,
            'receiptNumber': self.receipt_number,
            'notes': self.notes,
        }

    def __repr__(self):
        return f"<SaleRecord(id={self.id}, invoice='{self.invoice_number}', total={self.total})>"

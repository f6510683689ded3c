"""Expense model."""
from sqlalchemy import Column, BigInteger, String, Numeric, Text, DateTime, ForeignKey
from sqlalchemy.sql import func
from app.database import Base, BigIntPK


class Expense(Base):
    """Clinic expense."""

    __tablename__ = 'expense'

    id = Column(BigIntPK, primary_key=True, autoincrement=True)
    tenant_id = Column(BigInteger, ForeignKey('tenant.id'), nullable=False, index=True)
    date = Column(DateTime(timezone=True), nullable=False, server_default=func.now())
    category = Column(String(100), nullable=False)
    description = Column(Text, nullable=True)
    payment_method = Column(String(50), nullable=True)
    amount = Column(Numeric(12, 2), nullable=False)
    notes = Column(Text, nullable=True)

    def to_dict(self):
        return {
            'id': self.id,
            'date': self.date.isoformat() if self.date else None,
            'category': self.category,
            'description': self.description,
            'paymentMethod': self.payment_method,
            'amount': float(self.amount or 0),
            'notes': self.notes,
        }

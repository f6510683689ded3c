"""InventoryItem model - products and services sold by the clinic."""
import enum
from sqlalchemy import Column, BigInteger, String, Numeric, Date, DateTime, ForeignKey
from sqlalchemy.sql import func
from app.database import Base, BigIntPK


class ItemType(enum.Enum):
    PRODUCT = 'Product'
    SERVICE = 'Service'


class InventoryItem(Base):
    """Inventory item. Only Product items carry stock."""

    __tablename__ = 'inventory_item'

    id = Column(BigIntPK, primary_key=True, autoincrement=True)
    tenant_id = Column(BigInteger, ForeignKey('tenant.id'), nullable=False, index=True)
    name = Column(String(200), nullable=False)
    category = Column(String(100), nullable=True)
    type = Column(String(20), nullable=False, default=ItemType.PRODUCT.value)
    sku = Column(String(80), nullable=True)
    stock = Column(Numeric(12, 2), nullable=False, default=0)
    purchase_price = Column(Numeric(12, 2), nullable=False, default=0)
    retail_price = Column(Numeric(12, 2), nullable=False, default=0)
    wholesale_price = Column(Numeric(12, 2), nullable=False, default=0)
    reorder_level = Column(Numeric(12, 2), nullable=False, default=0)
    expiry_date = Column(Date, nullable=True)
    created_at = Column(DateTime(timezone=True), nullable=False, server_default=func.now())

    @property
    def is_product(self):
        return self.type == ItemType.PRODUCT.value

    def to_dict(self):
        return {
            'id': self.id,
            'name': self.name,
            'category': self.category,
            'type': self.type,
            'sku': self.sku,
            'stock': float(self.stock or 0),
            'purchasePrice': float(self.purchase_price or 0),
            'retailPrice': float(self.retail_price or 0),
            'wholesalePrice': float(self.wholesale_price or 0),
            'reorderLevel': float(self.reorder_level or 0),
            'expiryDate': self.expiry_date.isoformat() if self.expiry_date else None,
        }

    def __repr__(self):
        return f"<InventoryItem(id={self.id}, name='{self.name}', stock={self.stock})>"

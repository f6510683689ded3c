"""Owner model - clinic clients (pet owners)."""
from sqlalchemy import Column, BigInteger, String, Text, DateTime, ForeignKey, UniqueConstraint
from sqlalchemy.orm import relationship
from sqlalchemy.sql import func
from app.database import Base, BigIntPK


class Owner(Base):
    """Pet owner (client). Counted against the plan's maxClients."""

    __tablename__ = 'owner'

    id = Column(BigIntPK, primary_key=True, autoincrement=True)
    tenant_id = Column(BigInteger, ForeignKey('tenant.id'), nullable=False, index=True)
    client_number = Column(String(50), nullable=False)
    name = Column(String(200), nullable=False)
    email = Column(String(255), nullable=True)
    phone = Column(String(50), nullable=True)
    address = Column(Text, nullable=True)
    created_at = Column(DateTime(timezone=True), nullable=False, server_default=func.now())

    tenant = relationship('Tenant')

    __table_args__ = (
        UniqueConstraint('tenant_id', 'client_number', name='uq_owner_tenant_client_number'),
    )

    def to_dict(self):
        return {
            'id': self.id,
            'clientNumber': self.client_number,
            'name': self.name,
            'email': self.email,
            'phone': self.phone,
            'address': self.address,
        }

    def __repr__(self):
        return f"<Owner(id={self.id}, client_number='{self.client_number}')>"

"""SequenceCounter model - per tenant, per resource kind, per year numbering."""
from sqlalchemy import Column, BigInteger, String, Integer, DateTime, ForeignKey, UniqueConstraint
from sqlalchemy.sql import func
from app.database import Base, BigIntPK


class SequenceCounter(Base):
    """
    Last issued sequence number for (tenant, resource kind, year).

    Rows are incremented under a row lock so concurrent creations never
    receive the same number.
    """
    __tablename__ = 'sequence_counter'

    id = Column(BigIntPK, primary_key=True, autoincrement=True)
    tenant_id = Column(BigInteger, ForeignKey('tenant.id', ondelete='CASCADE'), nullable=False)
    resource_kind = Column(String(30), nullable=False)
    year = Column(Integer, nullable=False)
    last_value = Column(Integer, nullable=False, default=0)
    updated_at = Column(DateTime(timezone=True), nullable=False, server_default=func.now(), onupdate=func.now())

    __table_args__ = (
        UniqueConstraint('tenant_id', 'resource_kind', 'year', name='uq_sequence_counter_scope'),
    )

    def __repr__(self):
        return f"<SequenceCounter tenant={self.tenant_id} kind={self.resource_kind} year={self.year} last={self.last_value}>"

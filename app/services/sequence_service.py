"""
Per-tenant, per-year sequence numbers for human readable identifiers.

Each (tenant, resource kind, year) scope has one SequenceCounter row that
is locked, incremented and flushed inside the caller's transaction. Unlike
counting existing rows, two concurrent creations cannot receive the same
number on a database that honours SELECT ... FOR UPDATE. Uniqueness of the
final identifier is still backed by a unique constraint on the numbered
table.
"""
import logging
from datetime import date
from typing import Optional

from sqlalchemy import func, extract
from sqlalchemy.exc import IntegrityError

from app.models import SequenceCounter, SaleRecord, Owner
from app.utils.id_generator import generate_next_id

logger = logging.getLogger(__name__)

# Resource kind -> (model, creation timestamp column) used to seed new counters
SEQUENCED_RESOURCES = {
    'sale': (SaleRecord, SaleRecord.date),
    'owner': (Owner, Owner.created_at),
}


def current_year() -> int:
    return date.today().year


def _count_existing(session, tenant_id, resource_kind: str, year: int) -> int:
    """Count records of a kind created in a year (seed for a new counter)."""
    model, created_col = SEQUENCED_RESOURCES[resource_kind]
    return session.query(func.count(model.id)).filter(
        model.tenant_id == tenant_id,
        extract('year', created_col) == year
    ).scalar() or 0


def _locked_counter(session, tenant_id, resource_kind: str, year: int) -> Optional[SequenceCounter]:
    return session.query(SequenceCounter).filter(
        SequenceCounter.tenant_id == tenant_id,
        SequenceCounter.resource_kind == resource_kind,
        SequenceCounter.year == year
    ).with_for_update().first()


def next_sequence(session, tenant_id, resource_kind: str, year: Optional[int] = None) -> int:
    """
    Reserve the next sequence number for a tenant and resource kind.

    The counter row for the year is created on first use, seeded with the
    number of records of that kind the tenant already created this year so
    existing numbering continues.

    The counter row is inserted inside a savepoint: losing the race to
    create it rolls back only that savepoint, the caller's pending work is
    kept.

    Args:
        session: SQLAlchemy session (caller commits)
        tenant_id: Tenant ID
        resource_kind: One of SEQUENCED_RESOURCES ('sale', 'owner')
        year: Calendar year of the scope (defaults to the current year)

    Returns:
        int: The reserved sequence number (1-based)

    Raises:
        ValueError: resource kind is not sequenced
    """
    if resource_kind not in SEQUENCED_RESOURCES:
        raise ValueError(f"Resource kind {resource_kind!r} has no sequence")

    year = year or current_year()

    counter = _locked_counter(session, tenant_id, resource_kind, year)
    if counter is None:
        seed = _count_existing(session, tenant_id, resource_kind, year)
        try:
            with session.begin_nested():
                counter = SequenceCounter(
                    tenant_id=tenant_id,
                    resource_kind=resource_kind,
                    year=year,
                    last_value=seed
                )
                session.add(counter)
        except IntegrityError:
            # Another transaction created the row first; use theirs
            logger.info(f"Sequence {resource_kind}/{year} for tenant {tenant_id} created concurrently")
            counter = _locked_counter(session, tenant_id, resource_kind, year)
            if counter is None:
                raise

    counter.last_value += 1
    session.flush()

    logger.info(
        f"Sequence {resource_kind}/{year} for tenant {tenant_id} advanced to {counter.last_value}"
    )
    return counter.last_value


def format_next_id(session, tenant_id, resource_kind: str, pattern: Optional[str], year: Optional[int] = None) -> str:
    """Reserve the next sequence number and format it with a tenant pattern."""
    year = year or current_year()
    sequence = next_sequence(session, tenant_id, resource_kind, year)
    return generate_next_id(pattern, sequence, year=year)

"""
Unit tests for per-tenant sequence counters.
"""

import pytest
from app.models import SequenceCounter, ClinicLog
from app.services import sequence_service
from app.services.log_service import create_log
from app.services.sequence_service import next_sequence, format_next_id, current_year


class TestNextSequence:

    def test_starts_at_one(self, tenant1, session):
        assert next_sequence(session, tenant1.id, 'sale') == 1
        assert next_sequence(session, tenant1.id, 'sale') == 2
        assert next_sequence(session, tenant1.id, 'sale') == 3

    def test_scoped_by_kind(self, tenant1, session):
        assert next_sequence(session, tenant1.id, 'sale') == 1
        assert next_sequence(session, tenant1.id, 'owner') == 1
        assert next_sequence(session, tenant1.id, 'sale') == 2

    def test_scoped_by_tenant(self, tenant1, tenant2, session):
        assert next_sequence(session, tenant1.id, 'sale') == 1
        assert next_sequence(session, tenant2.id, 'sale') == 1

    def test_scoped_by_year(self, tenant1, session):
        assert next_sequence(session, tenant1.id, 'sale', year=2024) == 1
        assert next_sequence(session, tenant1.id, 'sale', year=2024) == 2
        assert next_sequence(session, tenant1.id, 'sale', year=2025) == 1

    def test_seeded_from_existing_records(self, tenant1, owner_factory, session):
        for n in range(1, 4):
            owner_factory(tenant1, n)
        assert next_sequence(session, tenant1.id, 'owner', year=current_year()) == 4

    def test_existing_records_of_other_years_not_counted(self, tenant1, owner_factory, session):
        owner_factory(tenant1, 1)
        assert next_sequence(session, tenant1.id, 'owner', year=1999) == 1

    def test_counter_row_persisted(self, tenant1, session):
        next_sequence(session, tenant1.id, 'sale', year=2030)
        next_sequence(session, tenant1.id, 'sale', year=2030)
        session.commit()
        counter = session.query(SequenceCounter).filter_by(
            tenant_id=tenant1.id, resource_kind='sale', year=2030
        ).one()
        assert counter.last_value == 2

    def test_unknown_kind(self, tenant1, session):
        with pytest.raises(ValueError):
            next_sequence(session, tenant1.id, 'pets')


class TestFormatNextId:

    def test_formats_with_pattern(self, tenant1, session):
        assert format_next_id(session, tenant1.id, 'sale', 'INV-0000') == 'INV-0001'
        assert format_next_id(session, tenant1.id, 'sale', 'INV-0000') == 'INV-0002'

    def test_uses_given_year(self, tenant1, session):
        assert format_next_id(session, tenant1.id, 'owner', 'HH/000/year', year=2025) == 'HH/001/2025'


class TestCounterCreationRace:
    """Another transaction creates the counter row between our read and insert."""

    @pytest.fixture
    def lose_first_lookup(self, monkeypatch):
        real_lookup = sequence_service._locked_counter
        calls = []

        def lookup(*args):
            calls.append(args)
            if len(calls) == 1:
                return None
            return real_lookup(*args)

        monkeypatch.setattr(sequence_service, '_locked_counter', lookup)
        return calls

    def test_uses_existing_row(self, tenant1, session, lose_first_lookup):
        next_sequence(session, tenant1.id, 'sale', year=2030)
        session.commit()
        lose_first_lookup.clear()

        assert next_sequence(session, tenant1.id, 'sale', year=2030) == 2
        assert len(lose_first_lookup) == 2
        session.commit()

        counters = session.query(SequenceCounter).filter_by(tenant_id=tenant1.id, year=2030).all()
        assert [c.last_value for c in counters] == [2]

    def test_keeps_callers_pending_work(self, tenant1, session, lose_first_lookup):
        next_sequence(session, tenant1.id, 'owner', year=2030)
        session.commit()
        lose_first_lookup.clear()

        create_log(session, tenant1.id, 'Vet', 'Added Client')
        assert next_sequence(session, tenant1.id, 'owner', year=2030) == 2
        session.commit()

        assert session.query(ClinicLog).filter_by(tenant_id=tenant1.id, action='Added Client').count() == 1

"""
Unit tests for membership status derivation and lifecycle transitions.
"""
from datetime import date, datetime

import pytest
from sqlalchemy.exc import OperationalError
from sqlalchemy.orm import Session

from gymapp.errors import (
    AlreadyInactive,
    BackdatingNotAllowed,
    InvalidDate,
    MemberNotFound,
    NoActiveMembership,
    PermissionDenied,
    PlanNotFound,
    RecordNotFound,
    StoreUnavailable,
)
from gymapp.membership import DerivedStatus, MembershipStore, SQLAlchemyMembershipStore, derive_status
from gymapp.models import MembershipRecord, PaymentStatus


def add_record(db, member, plan_id='quarterly', plan_name='Quarterly Plan',
               start=date(2024, 1, 1), end=date(2024, 4, 1), is_active=True,
               created_at=datetime(2024, 1, 1, 9, 0)):
    record = MembershipRecord(
        member_id=member.id,
        plan_id=plan_id,
        plan_name=plan_name,
        start_date=start,
        end_date=end,
        is_active=is_active,
        payment_status=PaymentStatus.COMPLETED.value,
    )
    record.created_at = created_at
    db.session.add(record)
    db.session.commit()
    return record


class TestComputeStatus:
    """Tests for read-time status derivation."""

    def test_member_without_records_is_pending(self, engine, member):
        status = engine.compute_status(member.id)

        assert status.status is DerivedStatus.PENDING
        assert status.start_date is None
        assert status.end_date is None
        assert status.plan_name is None

    def test_unknown_member_id_is_pending(self, engine):
        assert engine.compute_status(9999).status is DerivedStatus.PENDING

    def test_empty_member_id_rejected(self, engine):
        with pytest.raises(MemberNotFound):
            engine.compute_status('')
        with pytest.raises(MemberNotFound):
            engine.compute_status(None)

    def test_quarterly_plan_past_end_date_is_expired(self, engine, db, member, clock):
        add_record(db, member, start=date(2024, 1, 1), end=date(2024, 4, 1), is_active=True)

        status = engine.compute_status(member.id)

        assert clock().date() == date(2024, 5, 1)
        assert status.status is DerivedStatus.EXPIRED
        assert status.plan_name == 'Quarterly Plan'
        assert status.end_date == date(2024, 4, 1)

    @pytest.mark.parametrize("end", [date(2024, 4, 30), date(2023, 12, 31), date(2020, 1, 1)])
    def test_stale_active_flag_reads_as_expired(self, engine, db, member, end):
        record = add_record(db, member, start=date(2019, 1, 1), end=end, is_active=True)

        assert engine.compute_status(member.id).status is DerivedStatus.EXPIRED
        # Reading never corrects the stored flag
        assert db.session.get(MembershipRecord, record.id).is_active is True

    def test_end_date_today_is_active(self, engine, db, member):
        add_record(db, member, start=date(2024, 4, 1), end=date(2024, 5, 1))
        assert engine.compute_status(member.id).status is DerivedStatus.ACTIVE

    def test_inactive_latest_record_is_expired(self, engine, db, member):
        add_record(db, member, start=date(2024, 4, 1), end=date(2024, 7, 1), is_active=False)
        assert engine.compute_status(member.id).status is DerivedStatus.EXPIRED

    def test_latest_record_by_creation_wins(self, engine, db, member):
        add_record(db, member, start=date(2024, 4, 1), end=date(2024, 7, 1), is_active=True,
                   created_at=datetime(2024, 4, 1, 9, 0))
        add_record(db, member, plan_id='monthly', plan_name='Monthly Plan',
                   start=date(2024, 4, 2), end=date(2024, 5, 2), is_active=False,
                   created_at=datetime(2024, 4, 2, 9, 0))

        status = engine.compute_status(member.id)

        assert status.status is DerivedStatus.EXPIRED
        assert status.plan_id == 'monthly'

    def test_creation_tie_prefers_later_end_date(self, engine, db, member):
        created = datetime(2024, 4, 1, 9, 0)
        add_record(db, member, plan_id='6month', plan_name='6 Month Plan',
                   start=date(2024, 4, 1), end=date(2024, 10, 1), created_at=created)
        add_record(db, member, plan_id='monthly', plan_name='Monthly Plan',
                   start=date(2024, 3, 1), end=date(2024, 4, 1), created_at=created)

        status = engine.compute_status(member.id)

        assert status.plan_id == '6month'
        assert status.status is DerivedStatus.ACTIVE

    def test_derive_status_without_record(self):
        status = derive_status(7, None, date(2024, 5, 1))
        assert status.to_dict() == {
            'member_id': 7,
            'status': 'pending',
            'start_date': None,
            'end_date': None,
            'plan_id': None,
            'plan_name': None,
        }

    def test_compute_statuses_for_roster(self, engine, db, member, admin):
        add_record(db, member, start=date(2024, 4, 15), end=date(2024, 7, 15))

        statuses = engine.compute_statuses([member.id, admin.id])

        assert statuses[member.id].status is DerivedStatus.ACTIVE
        assert statuses[admin.id].status is DerivedStatus.PENDING


class TestCreateMembership:
    """Tests for creating membership records."""

    def test_create_then_status_is_active(self, engine, member, clock):
        record = engine.create_membership(member.id, 'quarterly', '2024-04-20', is_admin=True)

        assert record.id is not None
        assert record.is_active is True
        assert record.payment_status == PaymentStatus.COMPLETED.value
        assert record.start_date == date(2024, 4, 20)
        assert record.end_date == date(2024, 7, 20)
        assert record.created_at == clock()

        status = engine.compute_status(member.id)
        assert status.status is DerivedStatus.ACTIVE
        assert status.plan_name == 'Quarterly Plan'
        assert status.start_date == record.start_date
        assert status.end_date == record.end_date

    def test_month_overflow_clamped_in_leap_year(self, engine, member):
        record = engine.create_membership(member.id, 'monthly', date(2024, 1, 31), is_admin=True)
        assert record.end_date == date(2024, 2, 29)

    def test_records_plan_name_and_amount(self, engine, member):
        record = engine.create_membership(member.id, '6month', '2024-05-01', is_admin=True)

        assert record.plan_name == '6 Month Plan'
        assert float(record.amount) == 3999.0
        assert record.end_date == date(2024, 11, 1)

    def test_requires_admin(self, engine, member):
        with pytest.raises(PermissionDenied):
            engine.create_membership(member.id, 'monthly', '2024-05-01', is_admin=False)
        assert engine.membership_history(member.id) == []

    def test_unknown_plan(self, engine, member):
        with pytest.raises(PlanNotFound):
            engine.create_membership(member.id, 'monthly-plan', '2024-05-01', is_admin=True)

    def test_invalid_start_date(self, engine, member):
        with pytest.raises(InvalidDate):
            engine.create_membership(member.id, 'monthly', '31/01/2024', is_admin=True)

    def test_unknown_member(self, engine, db):
        with pytest.raises(MemberNotFound):
            engine.create_membership(4242, 'monthly', '2024-05-01', is_admin=True)
        assert db.session.query(MembershipRecord).count() == 0

    def test_backdating_allowed_by_default(self, engine, member):
        record = engine.create_membership(member.id, 'monthly', '2024-01-01', is_admin=True)

        assert record.end_date == date(2024, 2, 1)
        assert engine.compute_status(member.id).status is DerivedStatus.EXPIRED

    def test_backdating_rejected_when_disabled(self, make_engine, member):
        strict = make_engine(allow_backdating=False)

        with pytest.raises(BackdatingNotAllowed):
            strict.create_membership(member.id, 'monthly', '2024-04-30', is_admin=True)
        record = strict.create_membership(member.id, 'monthly', '2024-05-01', is_admin=True)
        assert record.start_date == date(2024, 5, 1)

    def test_second_membership_deactivates_first(self, engine, db, member, clock):
        first = engine.create_membership(member.id, 'monthly', '2024-05-01', is_admin=True)
        clock.advance(minutes=5)
        second = engine.create_membership(member.id, 'quarterly', '2024-05-01', is_admin=True)

        db.session.refresh(first)
        assert first.is_active is False
        assert first.updated_at == clock()
        assert second.is_active is True
        active = MembershipRecord.query.filter_by(member_id=member.id, is_active=True).all()
        assert [r.id for r in active] == [second.id]
        assert engine.compute_status(member.id).plan_id == 'quarterly'

    def test_second_membership_keeps_first_when_policy_off(self, make_engine, db, member):
        lenient = make_engine(deactivate_prior=False)

        first = lenient.create_membership(member.id, 'monthly', '2024-05-01', is_admin=True)
        second = lenient.create_membership(member.id, 'monthly', '2024-05-01', is_admin=True)

        db.session.refresh(first)
        assert first.is_active is True
        assert second.is_active is True
        # Same creation time and end date: the newer record is the latest
        assert lenient.compute_status(member.id).status is DerivedStatus.ACTIVE
        assert lenient.membership_history(member.id)[0].id == second.id

    def test_stale_records_corrected_on_write_when_policy_off(self, make_engine, db, member):
        lenient = make_engine(deactivate_prior=False)
        stale = add_record(db, member, start=date(2024, 1, 1), end=date(2024, 4, 1), is_active=True)
        current = add_record(db, member, start=date(2024, 4, 15), end=date(2024, 7, 15), is_active=True,
                             created_at=datetime(2024, 4, 15, 9, 0))

        lenient.create_membership(member.id, 'monthly', '2024-05-01', is_admin=True)

        db.session.refresh(stale)
        db.session.refresh(current)
        assert stale.is_active is False
        assert current.is_active is True

    def test_failed_gateway_payment_is_not_active(self, engine, db, member):
        active = engine.create_membership(member.id, 'monthly', '2024-05-01', is_admin=True)
        failed = engine.create_membership(member.id, 'quarterly', '2024-05-01', is_admin=True,
                                          payment_status=PaymentStatus.FAILED, payment_method='card')

        db.session.refresh(active)
        assert failed.is_active is False
        assert failed.payment_status == 'failed'
        assert failed.payment_method == 'card'
        # A failed payment does not supersede the paid membership
        assert active.is_active is True

    def test_failed_payment_after_paid_membership_keeps_status(self, engine, member, clock):
        engine.create_membership(member.id, 'monthly', '2024-05-01', is_admin=True)
        clock.advance(minutes=5)
        engine.create_membership(member.id, 'monthly', '2024-05-01', is_admin=True,
                                 payment_status=PaymentStatus.FAILED)

        status = engine.compute_status(member.id)

        assert status.status is DerivedStatus.ACTIVE
        assert status.end_date == date(2024, 6, 1)
        assert len(engine.membership_history(member.id)) == 2

    def test_unpaid_records_only_leave_member_pending(self, engine, member):
        engine.create_membership(member.id, 'quarterly', '2024-05-01', is_admin=True,
                                 payment_status=PaymentStatus.PENDING)

        assert engine.compute_status(member.id).status is DerivedStatus.PENDING
        with pytest.raises(NoActiveMembership):
            engine.discontinue_membership(member.id, is_admin=True)

    def test_renewal_after_expiry(self, engine, member, clock):
        engine.create_membership(member.id, 'monthly', '2024-03-01', is_admin=True)
        assert engine.compute_status(member.id).status is DerivedStatus.EXPIRED

        clock.advance(minutes=1)
        engine.create_membership(member.id, 'monthly', '2024-05-01', is_admin=True)

        status = engine.compute_status(member.id)
        assert status.status is DerivedStatus.ACTIVE
        assert status.end_date == date(2024, 6, 1)
        assert len(engine.membership_history(member.id)) == 2


class TestDiscontinueMembership:
    """Tests for discontinuing memberships."""

    def test_discontinue_active_membership(self, engine, db, member, clock):
        created = engine.create_membership(member.id, 'quarterly', '2024-04-01', is_admin=True)
        clock.advance(hours=2)

        record = engine.discontinue_membership(member.id, is_admin=True)

        assert record.id == created.id
        stored = db.session.get(MembershipRecord, created.id)
        assert stored.is_active is False
        assert stored.end_date == date(2024, 5, 1)
        assert stored.updated_at == clock()
        assert engine.compute_status(member.id).status is DerivedStatus.EXPIRED

    def test_discontinue_twice_fails(self, engine, member):
        engine.create_membership(member.id, 'monthly', '2024-05-01', is_admin=True)
        engine.discontinue_membership(member.id, is_admin=True)

        with pytest.raises(AlreadyInactive):
            engine.discontinue_membership(member.id, is_admin=True)

    def test_discontinue_without_records(self, engine, member):
        with pytest.raises(NoActiveMembership):
            engine.discontinue_membership(member.id, is_admin=True)

    def test_discontinue_requires_admin(self, engine, db, member):
        record = engine.create_membership(member.id, 'monthly', '2024-05-01', is_admin=True)

        with pytest.raises(PermissionDenied):
            engine.discontinue_membership(member.id, is_admin=False)
        assert db.session.get(MembershipRecord, record.id).is_active is True

    def test_stale_record_keeps_earlier_end_date(self, engine, db, member):
        stale = add_record(db, member, start=date(2024, 1, 1), end=date(2024, 4, 1), is_active=True)

        engine.discontinue_membership(member.id, is_admin=True)

        db.session.refresh(stale)
        assert stale.is_active is False
        assert stale.end_date == date(2024, 4, 1)

    def test_discontinue_targets_latest_active(self, make_engine, db, member):
        lenient = make_engine(deactivate_prior=False)
        older = add_record(db, member, start=date(2024, 4, 1), end=date(2024, 7, 1),
                           created_at=datetime(2024, 4, 1, 9, 0))
        newer = add_record(db, member, plan_id='monthly', plan_name='Monthly Plan',
                           start=date(2024, 4, 20), end=date(2024, 5, 20),
                           created_at=datetime(2024, 4, 20, 9, 0))

        lenient.discontinue_membership(member.id, is_admin=True)

        db.session.refresh(older)
        db.session.refresh(newer)
        assert newer.is_active is False
        assert older.is_active is True


class TestMembershipStore:
    """Tests for the SQLAlchemy-backed record store."""

    def test_contract_is_abstract(self):
        store = MembershipStore()
        with pytest.raises(NotImplementedError):
            store.list_records_by_member(1)

    def test_update_missing_record(self, db):
        store = SQLAlchemyMembershipStore(db)
        with pytest.raises(RecordNotFound):
            store.update_record(12345, is_active=False)

    def test_list_newest_first(self, db, member):
        store = SQLAlchemyMembershipStore(db)
        older = add_record(db, member, created_at=datetime(2024, 1, 1, 9, 0))
        newer = add_record(db, member, created_at=datetime(2024, 2, 1, 9, 0))

        assert [r.id for r in store.list_records_by_member(member.id)] == [newer.id, older.id]

    def test_database_errors_become_store_unavailable(self, engine, member, monkeypatch):
        def fail(*args, **kwargs):
            raise OperationalError("SELECT", {}, Exception("server has gone away"))

        member_id = member.id
        monkeypatch.setattr(Session, "execute", fail)

        with pytest.raises(StoreUnavailable) as excinfo:
            engine.compute_status(member_id)
        assert excinfo.value.retryable is True
        assert excinfo.value.status_code == 503

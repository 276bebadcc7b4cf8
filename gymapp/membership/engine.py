"""
Membership status derivation and lifecycle transitions.

A member's status is never stored. It is derived on every read from the
newest paid membership record. Records of failed or pending payments are
kept for the payment history and never affect the status:

    no paid record                          -> pending
    newest record flagged inactive          -> expired
    newest record active, end date passed   -> expired
    newest record active, end date not past -> active

Writes go through ``create_membership`` (new record, optionally superseding
the member's active records) and ``discontinue_membership`` (flag the latest
active record inactive and end it today).
"""
import logging
from dataclasses import dataclass
from datetime import date
from enum import Enum
from typing import Optional

from gymapp.errors import (
    AlreadyInactive,
    BackdatingNotAllowed,
    MemberNotFound,
    NoActiveMembership,
    PermissionDenied,
)
from gymapp.models.membership_record import MembershipRecord, PaymentStatus
from gymapp.utils.dates import add_months, to_calendar_date, utcnow

logger = logging.getLogger(__name__)


class DerivedStatus(Enum):
    """Enum for derived membership status values."""
    ACTIVE = "active"
    EXPIRED = "expired"
    PENDING = "pending"


@dataclass(frozen=True)
class MembershipStatus:
    """Result of a status derivation for one member."""
    member_id: int
    status: DerivedStatus
    start_date: Optional[date] = None
    end_date: Optional[date] = None
    plan_id: Optional[str] = None
    plan_name: Optional[str] = None

    def to_dict(self):
        return {
            'member_id': self.member_id,
            'status': self.status.value,
            'start_date': self.start_date,
            'end_date': self.end_date,
            'plan_id': self.plan_id,
            'plan_name': self.plan_name,
        }


def latest_record(records):
    """
    Pick the most recently created record.

    Ties on creation time go to the later end date, then to the newer id.

    Returns:
        MembershipRecord: The latest record, or None for an empty sequence
    """
    if not records:
        return None
    return max(records, key=lambda r: (r.created_at, r.end_date, r.id or 0))


def paid_records(records):
    """Records whose payment completed; failed and pending payments are history only."""
    return [r for r in records if r.payment_status == PaymentStatus.COMPLETED.value]


def derive_status(member_id, record, today):
    """
    Apply the status rules to a member's latest record.

    Args:
        member_id: Member the record belongs to
        record (MembershipRecord): Latest record, or None
        today (date): Current calendar date

    Returns:
        MembershipStatus: The derived status with the record's dates and plan
    """
    if record is None:
        return MembershipStatus(member_id=member_id, status=DerivedStatus.PENDING)

    # A stale active flag is corrected here, independent of storage
    if record.is_active and record.end_date >= today:
        status = DerivedStatus.ACTIVE
    else:
        status = DerivedStatus.EXPIRED

    return MembershipStatus(
        member_id=member_id,
        status=status,
        start_date=record.start_date,
        end_date=record.end_date,
        plan_id=record.plan_id,
        plan_name=record.plan_name,
    )


class MembershipStatusEngine:
    """
    Derives member status and performs membership lifecycle transitions.

    Args:
        store (MembershipStore): Record store
        catalog (PlanCatalog): Plan definitions
        clock (callable): Returns the current UTC datetime
        allow_backdating (bool): Accept start dates before today
        deactivate_prior (bool): Deactivate a member's active records when a
            new membership is created. When off, only records whose end date
            has passed are deactivated.
    """

    def __init__(self, store, catalog, clock=utcnow, allow_backdating=True, deactivate_prior=True):
        self.store = store
        self.catalog = catalog
        self.clock = clock
        self.allow_backdating = allow_backdating
        self.deactivate_prior = deactivate_prior

    def today(self):
        return self.clock().date()

    def compute_status(self, member_id):
        """
        Derive the current status of a member. Has no side effects.

        Raises:
            MemberNotFound: If member_id is empty
            StoreUnavailable: If the store cannot be read
        """
        _require_member_id(member_id)
        records = paid_records(self.store.list_records_by_member(member_id))
        return derive_status(member_id, latest_record(records), self.today())

    def compute_statuses(self, member_ids):
        """
        Derive the status of several members, each from its own fetch.

        Returns:
            dict: member id -> MembershipStatus
        """
        return {member_id: self.compute_status(member_id) for member_id in member_ids}

    def membership_history(self, member_id):
        """All records of a member, newest first."""
        _require_member_id(member_id)
        records = self.store.list_records_by_member(member_id)
        return sorted(records, key=lambda r: (r.created_at, r.end_date, r.id or 0), reverse=True)

    def create_membership(self, member_id, plan_id, start_date, is_admin=False,
                          payment_status=PaymentStatus.COMPLETED, payment_method=None):
        """
        Assign a plan to a member as a new membership record.

        Args:
            member_id: Member receiving the plan
            plan_id (str): Catalog plan id
            start_date: Any representation accepted by ``to_calendar_date``
            is_admin (bool): Caller's admin claim
            payment_status (PaymentStatus): Payment result, completed for
                admin assignments
            payment_method (str, optional): Payment method label

        Returns:
            MembershipRecord: The stored record

        Raises:
            PermissionDenied, PlanNotFound, InvalidDate, BackdatingNotAllowed,
            MemberNotFound, StoreUnavailable
        """
        _require_admin(is_admin)
        _require_member_id(member_id)
        plan = self.catalog.get(plan_id)
        start = to_calendar_date(start_date)

        now = self.clock()
        today = now.date()
        if not self.allow_backdating and start < today:
            raise BackdatingNotAllowed(f"Start date {start.isoformat()} is before {today.isoformat()}")

        payment_status = PaymentStatus(payment_status)
        is_active = payment_status == PaymentStatus.COMPLETED

        record = MembershipRecord(
            member_id=member_id,
            plan_id=plan.id,
            plan_name=plan.name,
            amount=plan.price,
            start_date=start,
            end_date=add_months(start, plan.duration_months),
            is_active=is_active,
            payment_status=payment_status.value,
            payment_method=payment_method,
        )
        record.created_at = now
        record.updated_at = now

        if is_active and self.deactivate_prior:
            supersede = _supersede_all
        else:
            def supersede(existing):
                return existing.is_stale(today)

        self.store.insert_record(record, supersede=supersede, now=now)
        logger.info("Created membership %s for member %s: plan=%s %s..%s",
                    record.id, member_id, plan.id, record.start_date, record.end_date)
        return record

    def discontinue_membership(self, member_id, is_admin=False):
        """
        End a member's latest active membership today.

        Returns:
            MembershipRecord: The discontinued record

        Raises:
            PermissionDenied: If the caller is not an admin
            NoActiveMembership: If the member has no records at all
            AlreadyInactive: If the member has records but none is active
            StoreUnavailable: If the store cannot be read or written
        """
        _require_admin(is_admin)
        _require_member_id(member_id)
        records = paid_records(self.store.list_records_by_member(member_id))
        if not records:
            raise NoActiveMembership(f"No active membership found for member {member_id}")

        target = latest_record([r for r in records if r.is_active])
        if target is None:
            raise AlreadyInactive(f"Membership of member {member_id} is already inactive")

        now = self.clock()
        # A stale record keeps its earlier end date
        end_date = min(target.end_date, now.date())
        self.store.update_record(target.id, is_active=False, end_date=end_date, updated_at=now)
        logger.info("Discontinued membership %s of member %s on %s", target.id, member_id, end_date)
        return target


def _supersede_all(existing):
    return True


def _require_admin(is_admin):
    if not is_admin:
        raise PermissionDenied()


def _require_member_id(member_id):
    if member_id is None or (isinstance(member_id, str) and not member_id.strip()):
        raise MemberNotFound("Member id is required")

"""
Membership lifecycle and status derivation.
"""
from gymapp.errors import (
    AlreadyInactive,
    BackdatingNotAllowed,
    InvalidDate,
    MemberNotFound,
    MembershipError,
    NoActiveMembership,
    PermissionDenied,
    PlanNotFound,
    RecordNotFound,
    StoreUnavailable,
)
from gymapp.utils.dates import add_months, to_calendar_date, utcnow

from .engine import DerivedStatus, MembershipStatus, MembershipStatusEngine, derive_status, latest_record, paid_records
from .plans import DEFAULT_PLANS, Plan, PlanCatalog
from .store import MembershipStore, SQLAlchemyMembershipStore

__all__ = [
    'AlreadyInactive',
    'BackdatingNotAllowed',
    'DEFAULT_PLANS',
    'DerivedStatus',
    'InvalidDate',
    'MemberNotFound',
    'MembershipError',
    'MembershipStatus',
    'MembershipStatusEngine',
    'MembershipStore',
    'NoActiveMembership',
    'PermissionDenied',
    'Plan',
    'PlanCatalog',
    'PlanNotFound',
    'RecordNotFound',
    'SQLAlchemyMembershipStore',
    'StoreUnavailable',
    'add_months',
    'derive_status',
    'latest_record',
    'paid_records',
    'to_calendar_date',
    'utcnow',
]

"""
Membership record model: one purchase or assignment of a plan to a member.
"""
from enum import Enum

from sqlalchemy import Index
from sqlalchemy.orm import validates

from gymapp import db
from gymapp.utils.dates import to_calendar_date

from .base import BaseModel


class PaymentStatus(Enum):
    """Enum for payment status values."""
    PENDING = "pending"
    COMPLETED = "completed"
    FAILED = "failed"


class MembershipRecord(BaseModel):
    """
    Membership record. Records are never deleted; a newer record supersedes
    an older one and the history doubles as the member's payment history.

    Attributes:
        member_id (int): Foreign key to Member model
        plan_id (str): Catalog plan identifier
        plan_name (str): Plan display name at the time of writing
        amount (Decimal): Plan price at the time of writing
        start_date (date): First day of the membership
        end_date (date): Last day of the membership
        is_active (bool): Flag maintained by the engine
        payment_status (str): pending, completed or failed
        payment_method (str): Optional payment method label
    """
    __tablename__ = 'membership_records'

    member_id = db.Column(db.Integer, db.ForeignKey('members.id'), nullable=False)
    plan_id = db.Column(db.String(50), nullable=False)
    plan_name = db.Column(db.String(100), nullable=False)
    amount = db.Column(db.Numeric(10, 2), nullable=False, default=0)
    start_date = db.Column(db.Date, nullable=False)
    end_date = db.Column(db.Date, nullable=False)
    is_active = db.Column(db.Boolean, nullable=False, default=True)
    payment_status = db.Column(db.String(20), nullable=False, default=PaymentStatus.PENDING.value)
    payment_method = db.Column(db.String(50), nullable=True)

    # Relationships
    member = db.relationship('Member', back_populates='memberships')

    __table_args__ = (
        # Newest-first history per member
        Index('idx_membership_member_created', 'member_id', 'created_at'),
        # Active record lookup per member
        Index('idx_membership_member_active', 'member_id', 'is_active'),
        Index('idx_membership_end_date', 'end_date'),
    )

    def __init__(self, member_id, plan_id, plan_name, start_date, end_date,
                 amount=0, is_active=True, payment_status=PaymentStatus.PENDING.value,
                 payment_method=None):
        self.member_id = member_id
        self.plan_id = plan_id
        self.plan_name = plan_name
        self.amount = amount
        self.start_date = start_date
        self.end_date = end_date
        self.is_active = is_active
        self.payment_status = payment_status
        self.payment_method = payment_method

    @validates('start_date', 'end_date')
    def validate_dates(self, key, value):
        return to_calendar_date(value)

    @validates('payment_status')
    def validate_payment_status(self, key, value):
        if isinstance(value, PaymentStatus):
            return value.value
        # Raises ValueError for anything outside the enum
        return PaymentStatus(value).value

    def is_stale(self, today):
        """
        Check whether the record is still flagged active after its end date.

        Args:
            today (date): Current calendar date

        Returns:
            bool: True if flagged active but already ended
        """
        return self.is_active and self.end_date < today

    def __repr__(self):
        return (f"<MembershipRecord Member:{self.member_id} Plan:{self.plan_id} "
                f"{self.start_date}..{self.end_date} Active:{self.is_active}>")

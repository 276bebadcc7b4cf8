"""
Models package for SQLAlchemy database models.
"""
from .base import BaseModel
from .member import Member
from .membership_record import MembershipRecord, PaymentStatus
from .attendance_record import AttendanceRecord

__all__ = [
    'BaseModel',
    'Member',
    'MembershipRecord',
    'PaymentStatus',
    'AttendanceRecord',
]

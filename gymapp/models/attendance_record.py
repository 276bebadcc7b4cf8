"""
Attendance record model for gym check-ins.
"""
from sqlalchemy import UniqueConstraint

from gymapp import db
from gymapp.utils.dates import utcnow

from .base import BaseModel


class AttendanceRecord(BaseModel):
    """
    One visit per member per day.

    Attributes:
        member_id (int): Foreign key to Member model
        attendance_date (date): Day of the visit
        check_in_time (datetime): When the member checked in
        check_out_time (datetime): When the member checked out, if they did
    """
    __tablename__ = 'attendance_records'

    member_id = db.Column(db.Integer, db.ForeignKey('members.id'), nullable=False, index=True)
    attendance_date = db.Column(db.Date, nullable=False)
    check_in_time = db.Column(db.DateTime, nullable=False, default=utcnow)
    check_out_time = db.Column(db.DateTime, nullable=True)

    member = db.relationship('Member', back_populates='attendance')

    __table_args__ = (
        UniqueConstraint('member_id', 'attendance_date', name='uq_attendance_member_date'),
    )

    def __init__(self, member_id, attendance_date, check_in_time):
        self.member_id = member_id
        self.attendance_date = attendance_date
        self.check_in_time = check_in_time

    def check_out(self, when):
        self.check_out_time = when
        return self

    @classmethod
    def history_for(cls, member_id):
        """Attendance records for a member, most recent first."""
        return cls.query.filter_by(member_id=member_id).order_by(
            cls.attendance_date.desc()
        ).all()

    @classmethod
    def summary_for(cls, member_id):
        """
        Last attendance date and visit count for a member.

        Returns:
            tuple: (last attendance date or None, total visits)
        """
        last = cls.query.filter_by(member_id=member_id).order_by(
            cls.attendance_date.desc()
        ).first()
        total = cls.query.filter_by(member_id=member_id).count()
        return (last.attendance_date if last else None), total

    def __repr__(self):
        return f"<AttendanceRecord Member:{self.member_id} {self.attendance_date}>"

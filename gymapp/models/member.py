"""
Member model: gym member accounts and their profile.
"""
from sqlalchemy.orm import validates
from werkzeug.security import check_password_hash, generate_password_hash

from gymapp import db
from gymapp.utils.dates import to_calendar_date, utcnow

from .base import BaseModel

PROFILE_FIELDS = (
    'name', 'phone', 'date_of_birth', 'gender', 'blood_type',
    'height_cm', 'weight_kg', 'address', 'emergency_contact',
)


class Member(BaseModel):
    """
    Member account with login credentials, admin flag and profile details.

    Attributes:
        name (str): Display name
        email (str): Login email address (unique)
        password_hash (str): Hashed password
        is_admin (bool): Whether the member may manage other members
        joined_at (datetime): When the account was created
    """
    __tablename__ = 'members'

    name = db.Column(db.String(100), nullable=False)
    email = db.Column(db.String(120), unique=True, nullable=False, index=True)
    password_hash = db.Column(db.String(255), nullable=False)
    is_admin = db.Column(db.Boolean, nullable=False, default=False)
    joined_at = db.Column(db.DateTime, nullable=False, default=utcnow)

    # Profile
    phone = db.Column(db.String(30), nullable=True)
    date_of_birth = db.Column(db.Date, nullable=True)
    gender = db.Column(db.String(20), nullable=True)
    blood_type = db.Column(db.String(5), nullable=True)
    height_cm = db.Column(db.Float, nullable=True)
    weight_kg = db.Column(db.Float, nullable=True)
    address = db.Column(db.String(255), nullable=True)
    emergency_contact = db.Column(db.String(100), nullable=True)

    # Relationships
    memberships = db.relationship('MembershipRecord', back_populates='member', lazy='dynamic')
    attendance = db.relationship('AttendanceRecord', back_populates='member', lazy='dynamic')

    def __init__(self, name, email, password, is_admin=False, **profile):
        """
        Initialize a new Member instance.

        Args:
            name (str): Member's display name
            email (str): Member's email
            password (str): Member's password (will be hashed)
            is_admin (bool, optional): Admin flag
            **profile: Optional profile fields
        """
        self.name = name
        self.email = email.strip().lower()
        self.password_hash = generate_password_hash(password)
        self.is_admin = is_admin
        self.update_profile(**profile)

    def check_password(self, password):
        """
        Verify a password against the stored hash.

        Args:
            password (str): Password to check

        Returns:
            bool: True if password matches, False otherwise
        """
        return check_password_hash(self.password_hash, password)

    def update_profile(self, **fields):
        """
        Update profile fields, ignoring anything that is not a profile field.

        Returns:
            Member: The member instance
        """
        for field in PROFILE_FIELDS:
            if field in fields:
                setattr(self, field, fields[field])
        return self

    @validates('date_of_birth')
    def validate_date_of_birth(self, key, value):
        if value in (None, ''):
            return None
        return to_calendar_date(value)

    @classmethod
    def find_by_email(cls, email):
        return cls.query.filter_by(email=email.strip().lower()).first()

    def __repr__(self):
        return f"<Member {self.email}>"

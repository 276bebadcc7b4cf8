"""
Membership record store: the engine's only persistence boundary.
"""
import logging
from contextlib import contextmanager

from sqlalchemy import select
from sqlalchemy.exc import SQLAlchemyError

from gymapp.errors import MemberNotFound, RecordNotFound, StoreUnavailable
from gymapp.models.member import Member
from gymapp.models.membership_record import MembershipRecord

logger = logging.getLogger(__name__)


class MembershipStore:
    """
    Record-store contract used by the membership engine.

    Records are append-only: they are inserted and flagged, never deleted.
    """

    def list_records_by_member(self, member_id):
        """Return every record of a member, newest first."""
        raise NotImplementedError

    def insert_record(self, record, supersede=None, now=None):
        """
        Insert a record, deactivating selected active records of the same
        member in the same transaction.

        Args:
            record (MembershipRecord): The new record
            supersede (callable, optional): Predicate choosing which currently
                active records of the member to deactivate
            now (datetime, optional): Timestamp for the deactivated records

        Returns:
            int: The new record id
        """
        raise NotImplementedError

    def update_record(self, record_id, **fields):
        """Apply partial updates to a record; raises RecordNotFound if absent."""
        raise NotImplementedError


class SQLAlchemyMembershipStore(MembershipStore):
    """Membership store backed by the application's Flask-SQLAlchemy session."""

    def __init__(self, db):
        self.db = db

    @contextmanager
    def _transaction(self, action):
        try:
            yield self.db.session
        except SQLAlchemyError as e:
            self.db.session.rollback()
            logger.error("Membership store failed during %s: %s", action, e)
            raise StoreUnavailable() from e

    def list_records_by_member(self, member_id):
        with self._transaction('list_records_by_member'):
            return MembershipRecord.query.filter_by(member_id=member_id).order_by(
                MembershipRecord.created_at.desc(),
                MembershipRecord.end_date.desc(),
                MembershipRecord.id.desc(),
            ).all()

    def insert_record(self, record, supersede=None, now=None):
        with self._transaction('insert_record') as session:
            # Row lock on the member serializes concurrent writes for the same member
            member_id = session.execute(
                select(Member.id).where(Member.id == record.member_id).with_for_update()
            ).scalar_one_or_none()
            if member_id is None:
                session.rollback()
                raise MemberNotFound(f"Member not found: {record.member_id}")

            if supersede is not None:
                active = MembershipRecord.query.filter_by(
                    member_id=record.member_id, is_active=True
                ).with_for_update().all()
                for existing in active:
                    if supersede(existing):
                        existing.is_active = False
                        if now is not None:
                            existing.updated_at = now
                        logger.info("Superseding membership record %s of member %s",
                                    existing.id, existing.member_id)

            session.add(record)
            session.commit()
            return record.id

    def update_record(self, record_id, **fields):
        with self._transaction('update_record') as session:
            record = session.get(MembershipRecord, record_id)
            if record is None:
                raise RecordNotFound(f"Membership record not found: {record_id}")
            for name, value in fields.items():
                setattr(record, name, value)
            session.commit()

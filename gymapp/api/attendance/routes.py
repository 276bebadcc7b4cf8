"""
Routes for attendance check-in, check-out and history.
"""
from flask import current_app
from flask_jwt_extended import jwt_required
from flask_restx import Resource, fields
from sqlalchemy.exc import IntegrityError

from gymapp import db
from gymapp.api import get_engine
from gymapp.membership import DerivedStatus
from gymapp.models.attendance_record import AttendanceRecord
from gymapp.utils.auth import current_member_id

from . import attendance_ns

attendance_model = attendance_ns.model('AttendanceRecord', {
    'id': fields.Integer(description='Record identifier'),
    'member_id': fields.Integer(description='Member identifier'),
    'attendance_date': fields.Date(description='Day of the visit'),
    'check_in_time': fields.DateTime(description='Check-in time'),
    'check_out_time': fields.DateTime(description='Check-out time'),
})

attendance_list_model = attendance_ns.model('AttendanceList', {
    'records': fields.List(fields.Nested(attendance_model)),
    'total': fields.Integer(description='Number of visits'),
})


def todays_record(engine, member_id):
    return AttendanceRecord.query.filter_by(
        member_id=member_id,
        attendance_date=engine.today()
    ).first()


@attendance_ns.route('/')
class OwnAttendance(Resource):
    """Resource for the current member's attendance history"""

    @attendance_ns.doc('list_own_attendance')
    @attendance_ns.marshal_with(attendance_list_model)
    @jwt_required()
    def get(self):
        """List the current member's attendance, most recent first"""
        records = AttendanceRecord.history_for(current_member_id())
        return {'records': records, 'total': len(records)}


@attendance_ns.route('/check-in')
class CheckIn(Resource):
    """Resource for checking in"""

    @attendance_ns.doc('check_in')
    @attendance_ns.response(201, 'Checked in', attendance_model)
    @attendance_ns.response(403, 'An active membership is required')
    @attendance_ns.response(409, 'Already checked in today')
    @attendance_ns.marshal_with(attendance_model, code=201)
    @jwt_required()
    def post(self):
        """Record today's check-in for the current member"""
        engine = get_engine()
        member_id = current_member_id()

        status = engine.compute_status(member_id)
        if status.status is not DerivedStatus.ACTIVE:
            attendance_ns.abort(403, 'You need an active membership to access the attendance feature')

        if todays_record(engine, member_id) is not None:
            attendance_ns.abort(409, 'Already checked in today')

        now = engine.clock()
        record = AttendanceRecord(member_id=member_id, attendance_date=now.date(), check_in_time=now)
        try:
            db.session.add(record)
            db.session.commit()
        except IntegrityError:
            db.session.rollback()
            attendance_ns.abort(409, 'Already checked in today')

        current_app.logger.info("Member %s checked in", member_id)
        return record, 201


@attendance_ns.route('/check-out')
class CheckOut(Resource):
    """Resource for checking out"""

    @attendance_ns.doc('check_out')
    @attendance_ns.response(404, 'No check-in today')
    @attendance_ns.response(409, 'Already checked out')
    @attendance_ns.marshal_with(attendance_model)
    @jwt_required()
    def post(self):
        """Record today's check-out for the current member"""
        engine = get_engine()
        member_id = current_member_id()

        record = todays_record(engine, member_id)
        if record is None:
            attendance_ns.abort(404, 'No check-in recorded today')
        if record.check_out_time is not None:
            attendance_ns.abort(409, 'Already checked out today')

        record.check_out(engine.clock())
        db.session.commit()
        current_app.logger.info("Member %s checked out", member_id)
        return record

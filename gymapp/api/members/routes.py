"""
Routes for the member roster, member profiles and the membership lifecycle.
"""
from flask import current_app, request
from flask_jwt_extended import jwt_required
from flask_restx import Resource, fields, marshal
from sqlalchemy.exc import IntegrityError

from gymapp import db
from gymapp.api import get_engine
from gymapp.api.attendance.routes import attendance_list_model
from gymapp.api.auth.routes import validate_registration
from gymapp.api.memberships.routes import history_payload, history_model, record_model, status_model
from gymapp.membership import DerivedStatus
from gymapp.models.attendance_record import AttendanceRecord
from gymapp.models.member import PROFILE_FIELDS, Member
from gymapp.models.membership_record import PaymentStatus
from gymapp.utils.auth import admin_required, current_is_admin, current_member_id

from . import member_ns

profile_model = member_ns.model('MemberProfile', {
    'id': fields.Integer(description='Member identifier'),
    'name': fields.String(description='Display name'),
    'email': fields.String(description='Email address'),
    'is_admin': fields.Boolean(description='Admin flag'),
    'joined_at': fields.DateTime(description='Join timestamp'),
    'phone': fields.String(description='Contact number'),
    'date_of_birth': fields.Date(description='Date of birth'),
    'gender': fields.String(description='Gender'),
    'blood_type': fields.String(description='Blood type'),
    'height_cm': fields.Float(description='Height in centimetres'),
    'weight_kg': fields.Float(description='Weight in kilograms'),
    'address': fields.String(description='Postal address'),
    'emergency_contact': fields.String(description='Emergency contact'),
})

profile_input_model = member_ns.model('MemberProfileInput', {
    'name': fields.String(description='Display name'),
    'phone': fields.String(description='Contact number'),
    'date_of_birth': fields.String(description='Date of birth (YYYY-MM-DD)'),
    'gender': fields.String(description='Gender'),
    'blood_type': fields.String(description='Blood type'),
    'height_cm': fields.Float(description='Height in centimetres'),
    'weight_kg': fields.Float(description='Weight in kilograms'),
    'address': fields.String(description='Postal address'),
    'emergency_contact': fields.String(description='Emergency contact'),
})

member_input_model = member_ns.inherit('MemberInput', profile_input_model, {
    'name': fields.String(required=True, description='Display name'),
    'email': fields.String(required=True, description='Email address'),
    'password': fields.String(required=True, description='Initial password'),
})

member_detail_model = member_ns.inherit('MemberDetail', profile_model, {
    'membership': fields.Nested(status_model),
    'last_attendance': fields.Date(description='Most recent attendance date'),
    'total_attendance': fields.Integer(description='Number of visits'),
})

roster_entry_model = member_ns.model('RosterEntry', {
    'id': fields.Integer(description='Member identifier'),
    'name': fields.String(description='Display name'),
    'email': fields.String(description='Email address'),
    'phone': fields.String(description='Contact number'),
    'joined_at': fields.DateTime(description='Join timestamp'),
    'membership_status': fields.String(description='Derived status'),
    'membership_plan': fields.String(description='Plan of the latest membership'),
    'membership_end_date': fields.Date(description='End of the latest membership'),
    'last_attendance': fields.Date(description='Most recent attendance date'),
    'total_attendance': fields.Integer(description='Number of visits'),
})

roster_model = member_ns.model('Roster', {
    'members': fields.List(fields.Nested(roster_entry_model)),
    'total': fields.Integer(description='Number of members listed'),
})

membership_input_model = member_ns.model('MembershipInput', {
    'plan_id': fields.String(required=True, description='Plan identifier'),
    'start_date': fields.Raw(required=True, description='Start date (ISO date, epoch or timestamp object)'),
    'payment_status': fields.String(description='Payment status reported by the payment gateway',
                                    enum=[s.value for s in PaymentStatus],
                                    default=PaymentStatus.COMPLETED.value),
    'payment_method': fields.String(description='Payment method label'),
})


def member_detail(member):
    """Profile, derived status and attendance summary of one member."""
    status = get_engine().compute_status(member.id)
    last_attendance, total_attendance = AttendanceRecord.summary_for(member.id)
    detail = member.to_dict()
    detail.update({
        'membership': status.to_dict(),
        'last_attendance': last_attendance,
        'total_attendance': total_attendance,
    })
    return detail


def save_profile(member):
    """Apply the request's profile fields to a member and commit."""
    data = request.get_json(silent=True) or {}

    if 'name' in data and not data['name']:
        member_ns.abort(400, 'Name cannot be empty')

    member.update_profile(**{k: v for k, v in data.items() if k in PROFILE_FIELDS})
    db.session.commit()
    return member


@member_ns.route('/')
class MemberRoster(Resource):
    """Resource for the admin member roster"""

    @member_ns.doc('list_members', params={
        'status': {'type': 'string', 'description': 'Filter by derived status (active, expired, pending)'}
    })
    @member_ns.marshal_with(roster_model)
    @jwt_required()
    @admin_required()
    def get(self):
        """List members with their derived membership status (admin only)"""
        status_filter = request.args.get('status')
        if status_filter and status_filter not in [s.value for s in DerivedStatus]:
            member_ns.abort(400, f"Unknown status filter: {status_filter}")

        members = Member.query.order_by(Member.name, Member.id).all()
        statuses = get_engine().compute_statuses([m.id for m in members])

        entries = []
        for member in members:
            status = statuses[member.id]
            if status_filter and status.status.value != status_filter:
                continue
            last_attendance, total_attendance = AttendanceRecord.summary_for(member.id)
            entries.append({
                'id': member.id,
                'name': member.name,
                'email': member.email,
                'phone': member.phone,
                'joined_at': member.joined_at,
                'membership_status': status.status.value,
                'membership_plan': status.plan_name,
                'membership_end_date': status.end_date,
                'last_attendance': last_attendance,
                'total_attendance': total_attendance,
            })

        return {'members': entries, 'total': len(entries)}

    @member_ns.doc('create_member')
    @member_ns.expect(member_input_model)
    @member_ns.response(201, 'Member created', profile_model)
    @member_ns.response(409, 'Email already registered')
    @jwt_required()
    @admin_required()
    def post(self):
        """Create a member account on behalf of a member (admin only)"""
        data = request.get_json(silent=True) or {}

        error = validate_registration(data)
        if error:
            return {'message': error}, 400

        profile = {k: v for k, v in data.items() if k in PROFILE_FIELDS and k != 'name'}
        try:
            member = Member(
                name=data['name'],
                email=data['email'],
                password=data['password'],
                **profile
            )
            db.session.add(member)
            db.session.commit()
        except IntegrityError:
            db.session.rollback()
            return {'message': 'Email already registered'}, 409

        current_app.logger.info("Admin created member %s", member.id)
        return marshal(member, profile_model), 201


@member_ns.route('/me')
class OwnProfile(Resource):
    """Resource for the current member's profile"""

    @member_ns.doc('get_own_profile')
    @member_ns.marshal_with(member_detail_model)
    @jwt_required()
    def get(self):
        """Get the current member's profile, status and attendance summary"""
        member = db.get_or_404(Member, current_member_id())
        return member_detail(member)

    @member_ns.doc('update_own_profile')
    @member_ns.expect(profile_input_model)
    @member_ns.marshal_with(profile_model)
    @jwt_required()
    def put(self):
        """Update the current member's profile"""
        return save_profile(db.get_or_404(Member, current_member_id()))


@member_ns.route('/<int:member_id>')
@member_ns.param('member_id', 'The member identifier')
class MemberResource(Resource):
    """Resource for a single member (admin view)"""

    @member_ns.doc('get_member')
    @member_ns.marshal_with(member_detail_model)
    @jwt_required()
    @admin_required()
    def get(self, member_id):
        """Get a member's profile, status and attendance summary (admin only)"""
        return member_detail(db.get_or_404(Member, member_id))

    @member_ns.doc('update_member')
    @member_ns.expect(profile_input_model)
    @member_ns.marshal_with(profile_model)
    @jwt_required()
    @admin_required()
    def put(self, member_id):
        """Update a member's profile (admin only)"""
        member = save_profile(db.get_or_404(Member, member_id))
        current_app.logger.info("Admin updated profile of member %s", member.id)
        return member


@member_ns.route('/<int:member_id>/status')
@member_ns.param('member_id', 'The member identifier')
class MemberStatus(Resource):
    """Resource for a member's derived status"""

    @member_ns.doc('get_member_status')
    @member_ns.response(503, 'Membership store unavailable, retry')
    @member_ns.marshal_with(status_model)
    @jwt_required()
    @admin_required()
    def get(self, member_id):
        """Get a member's derived membership status (admin only)"""
        db.get_or_404(Member, member_id)
        return get_engine().compute_status(member_id).to_dict()


@member_ns.route('/<int:member_id>/memberships')
@member_ns.param('member_id', 'The member identifier')
class MemberMemberships(Resource):
    """Resource for a member's membership records"""

    @member_ns.doc('list_member_memberships')
    @member_ns.marshal_with(history_model)
    @jwt_required()
    @admin_required()
    def get(self, member_id):
        """List a member's membership and payment history (admin only)"""
        db.get_or_404(Member, member_id)
        return history_payload(member_id)

    @member_ns.doc('create_membership')
    @member_ns.expect(membership_input_model)
    @member_ns.response(201, 'Membership created', record_model)
    @member_ns.response(400, 'Invalid start date')
    @member_ns.response(403, 'Admin privileges required')
    @member_ns.response(404, 'Plan or member not found')
    @jwt_required()
    def post(self, member_id):
        """Assign a plan to a member as a new membership (admin only)"""
        data = request.get_json(silent=True) or {}

        if not data.get('plan_id') or data.get('start_date') in (None, ''):
            member_ns.abort(400, 'Please select a plan and start date')

        payment_status = data.get('payment_status', PaymentStatus.COMPLETED.value)
        if payment_status not in [s.value for s in PaymentStatus]:
            member_ns.abort(400, f"Unknown payment status: {payment_status}")

        record = get_engine().create_membership(
            member_id,
            data['plan_id'],
            data['start_date'],
            is_admin=current_is_admin(),
            payment_status=payment_status,
            payment_method=data.get('payment_method'),
        )
        return marshal(record, record_model), 201


@member_ns.route('/<int:member_id>/memberships/discontinue')
@member_ns.param('member_id', 'The member identifier')
class MemberMembershipDiscontinue(Resource):
    """Resource for discontinuing a member's active membership"""

    @member_ns.doc('discontinue_membership')
    @member_ns.response(200, 'Membership discontinued', record_model)
    @member_ns.response(403, 'Admin privileges required')
    @member_ns.response(409, 'No active membership or already inactive')
    @jwt_required()
    def post(self, member_id):
        """Discontinue a member's latest active membership today (admin only)"""
        db.get_or_404(Member, member_id)
        record = get_engine().discontinue_membership(member_id, is_admin=current_is_admin())
        return marshal(record, record_model), 200


@member_ns.route('/<int:member_id>/attendance')
@member_ns.param('member_id', 'The member identifier')
class MemberAttendance(Resource):
    """Resource for a member's attendance history"""

    @member_ns.doc('list_member_attendance')
    @member_ns.marshal_with(attendance_list_model)
    @jwt_required()
    @admin_required()
    def get(self, member_id):
        """List a member's attendance, most recent first (admin only)"""
        db.get_or_404(Member, member_id)
        records = AttendanceRecord.history_for(member_id)
        return {'records': records, 'total': len(records)}

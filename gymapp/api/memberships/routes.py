"""
Routes for a member's own membership status and history.
"""
from flask_jwt_extended import jwt_required
from flask_restx import Resource, fields

from gymapp.api import get_engine
from gymapp.models.membership_record import PaymentStatus
from gymapp.utils.auth import current_member_id

from . import membership_ns

status_model = membership_ns.model('MembershipStatus', {
    'member_id': fields.Integer(description='Member identifier'),
    'status': fields.String(description='Derived status', enum=['active', 'expired', 'pending']),
    'start_date': fields.Date(description='Start of the latest membership'),
    'end_date': fields.Date(description='End of the latest membership'),
    'plan_id': fields.String(description='Plan of the latest membership'),
    'plan_name': fields.String(description='Plan display name'),
})

record_model = membership_ns.model('MembershipRecord', {
    'id': fields.Integer(description='Record identifier'),
    'member_id': fields.Integer(description='Member identifier'),
    'plan_id': fields.String(description='Plan identifier'),
    'plan_name': fields.String(description='Plan display name'),
    'amount': fields.Float(description='Amount charged'),
    'start_date': fields.Date(description='Start date'),
    'end_date': fields.Date(description='End date'),
    'is_active': fields.Boolean(description='Active flag'),
    'payment_status': fields.String(description='Payment status',
                                    enum=[s.value for s in PaymentStatus]),
    'payment_method': fields.String(description='Payment method'),
    'created_at': fields.DateTime(description='Creation date'),
    'updated_at': fields.DateTime(description='Last update date'),
})

history_model = membership_ns.model('MembershipHistory', {
    'records': fields.List(fields.Nested(record_model)),
    'total': fields.Integer(description='Number of records'),
})


def history_payload(member_id):
    records = get_engine().membership_history(member_id)
    return {'records': records, 'total': len(records)}


@membership_ns.route('/status')
class OwnMembershipStatus(Resource):
    """Resource for the current member's derived status"""

    @membership_ns.doc('get_own_status')
    @membership_ns.response(503, 'Membership store unavailable, retry')
    @membership_ns.marshal_with(status_model)
    @jwt_required()
    def get(self):
        """Get the current member's membership status"""
        return get_engine().compute_status(current_member_id()).to_dict()


@membership_ns.route('/history')
class OwnMembershipHistory(Resource):
    """Resource for the current member's membership and payment history"""

    @membership_ns.doc('get_own_history')
    @membership_ns.marshal_with(history_model)
    @jwt_required()
    def get(self):
        """List the current member's membership records, newest first"""
        return history_payload(current_member_id())

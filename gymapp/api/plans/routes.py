"""
Routes for the membership plan catalog.
"""
from flask_restx import Resource, fields

from gymapp.api import get_engine

from . import plan_ns

plan_model = plan_ns.model('Plan', {
    'id': fields.String(description='Plan identifier'),
    'name': fields.String(description='Plan display name'),
    'duration_months': fields.Integer(description='Duration in months'),
    'price': fields.Float(description='Plan price'),
    'features': fields.List(fields.String, description='Ordered feature list'),
})

plan_list_model = plan_ns.model('PlanList', {
    'plans': fields.List(fields.Nested(plan_model)),
    'total': fields.Integer(description='Number of plans'),
})


@plan_ns.route('/')
class PlanList(Resource):
    """Resource for listing the plan catalog"""

    @plan_ns.doc('list_plans')
    @plan_ns.marshal_with(plan_list_model)
    def get(self):
        """List all membership plans"""
        catalog = get_engine().catalog
        plans = [plan.to_dict() for plan in catalog]
        return {'plans': plans, 'total': len(plans)}


@plan_ns.route('/<string:plan_id>')
@plan_ns.param('plan_id', 'The plan identifier')
class PlanResource(Resource):
    """Resource for a single plan"""

    @plan_ns.doc('get_plan')
    @plan_ns.response(404, 'Plan not found')
    @plan_ns.marshal_with(plan_model)
    def get(self, plan_id):
        """Get a specific membership plan"""
        return get_engine().catalog.get(plan_id).to_dict()

"""
Authentication routes.
"""
from flask import current_app, request
from flask_jwt_extended import (
    create_access_token,
    create_refresh_token,
    get_jwt_identity,
    jwt_required,
)
from flask_restx import Resource, fields, marshal
from sqlalchemy.exc import IntegrityError

from gymapp import db
from gymapp.models.member import Member
from gymapp.utils.auth import admin_required

from . import auth_ns

# Define the member registration model for documentation and validation
register_model = auth_ns.model('MemberRegistration', {
    'name': fields.String(required=True, description='Member display name'),
    'email': fields.String(required=True, description='Member email address'),
    'password': fields.String(required=True, description='Member password')
})

# Define the login model for documentation and validation
login_model = auth_ns.model('MemberLogin', {
    'email': fields.String(required=True, description='Member email address'),
    'password': fields.String(required=True, description='Member password')
})

# Define the token response model for documentation
token_model = auth_ns.model('TokenResponse', {
    'access_token': fields.String(description='JWT access token'),
    'refresh_token': fields.String(description='JWT refresh token'),
    'member_id': fields.Integer(description='Member identifier'),
    'name': fields.String(description='Member display name'),
    'is_admin': fields.Boolean(description='Whether the member has admin privileges')
})

# Define the member response model for documentation
account_model = auth_ns.model('MemberAccount', {
    'id': fields.Integer(description='Member identifier'),
    'name': fields.String(description='Member display name'),
    'email': fields.String(description='Member email address'),
    'is_admin': fields.Boolean(description='Admin flag'),
    'joined_at': fields.DateTime(description='Join timestamp')
})

refresh_token_model = auth_ns.model('RefreshToken', {
    'access_token': fields.String(description='New JWT access token')
})

admin_grant_model = auth_ns.model('AdminGrant', {
    'email': fields.String(required=True, description='Email of the member to promote')
})


def issue_access_token(member):
    """Access token carrying the member's admin claim."""
    return create_access_token(
        identity=str(member.id),
        additional_claims={'is_admin': bool(member.is_admin)}
    )


def validate_registration(data):
    """
    Validate registration input.

    Returns:
        str: Error message, or None if the input is valid
    """
    if not all(data.get(k) for k in ('name', 'email', 'password')):
        return 'Missing required fields'
    if '@' not in data['email']:
        return 'Invalid email format'
    if len(data['password']) < 6:
        return 'Password must be at least 6 characters long'
    return None


@auth_ns.route('/register')
class MemberRegistration(Resource):
    """
    Member registration endpoint.
    """
    @auth_ns.doc('register_member')
    @auth_ns.expect(register_model)
    @auth_ns.response(201, 'Member successfully created', account_model)
    @auth_ns.response(400, 'Validation error')
    @auth_ns.response(409, 'Member already exists')
    def post(self):
        """
        Register a new member account.
        """
        data = request.get_json(silent=True) or {}

        error = validate_registration(data)
        if error:
            return {'message': error}, 400

        try:
            member = Member(
                name=data['name'],
                email=data['email'],
                password=data['password']
            )
            db.session.add(member)
            db.session.commit()
        except IntegrityError:
            db.session.rollback()
            return {'message': 'Email already registered'}, 409

        current_app.logger.info("Registered member %s", member.id)
        return marshal(member, account_model), 201


@auth_ns.route('/login')
class MemberLogin(Resource):
    """
    Member login endpoint.
    """
    @auth_ns.doc('login_member')
    @auth_ns.expect(login_model)
    @auth_ns.response(200, 'Login successful', token_model)
    @auth_ns.response(400, 'Validation error')
    @auth_ns.response(401, 'Invalid credentials')
    def post(self):
        """
        Authenticate a member and generate JWT tokens.
        """
        data = request.get_json(silent=True) or {}

        if not all(data.get(k) for k in ('email', 'password')):
            return {'message': 'Missing required fields'}, 400

        member = Member.find_by_email(data['email'])
        if not member or not member.check_password(data['password']):
            return {'message': 'Invalid email or password'}, 401

        return {
            'access_token': issue_access_token(member),
            'refresh_token': create_refresh_token(identity=str(member.id)),
            'member_id': member.id,
            'name': member.name,
            'is_admin': bool(member.is_admin)
        }, 200


@auth_ns.route('/refresh')
class TokenRefresh(Resource):
    """
    Token refresh endpoint.
    """
    @auth_ns.doc('refresh_token')
    @auth_ns.response(200, 'Token refresh successful', refresh_token_model)
    @auth_ns.response(401, 'Invalid refresh token')
    @jwt_required(refresh=True)
    def post(self):
        """
        Generate a new access token using a refresh token.
        """
        # Re-read the member so a revoked or granted admin flag takes effect
        member = db.session.get(Member, int(get_jwt_identity()))
        if member is None:
            return {'message': 'Member no longer exists'}, 401

        return {'access_token': issue_access_token(member)}, 200


@auth_ns.route('/admins')
class AdminList(Resource):
    """
    Admin list and grant endpoint.
    """
    @auth_ns.doc('grant_admin')
    @auth_ns.expect(admin_grant_model)
    @auth_ns.response(200, 'Admin privileges granted', account_model)
    @auth_ns.response(403, 'Admin privileges required')
    @auth_ns.response(404, 'Member not found')
    @jwt_required()
    @admin_required()
    def post(self):
        """
        Grant admin privileges to an existing member (admin only).
        """
        data = request.get_json(silent=True) or {}
        if not data.get('email'):
            return {'message': 'Email is required'}, 400

        member = Member.find_by_email(data['email'])
        if member is None:
            return {'message': 'Member not found'}, 404

        member.is_admin = True
        db.session.commit()
        current_app.logger.info("Granted admin privileges to member %s", member.id)
        return marshal(member, account_model), 200

    @auth_ns.doc('list_admins')
    @auth_ns.marshal_list_with(account_model)
    @jwt_required()
    @admin_required()
    def get(self):
        """
        List members with admin privileges (admin only).
        """
        return Member.query.filter_by(is_admin=True).order_by(Member.name, Member.id).all()


@auth_ns.route('/admins/<int:member_id>')
@auth_ns.param('member_id', 'The member identifier')
class AdminRevoke(Resource):
    """
    Admin revoke endpoint.
    """
    @auth_ns.doc('revoke_admin')
    @auth_ns.response(200, 'Admin privileges revoked', account_model)
    @auth_ns.response(403, 'Admin privileges required')
    @auth_ns.response(404, 'Admin not found')
    @auth_ns.response(409, 'Cannot remove the last admin')
    @jwt_required()
    @admin_required()
    def delete(self, member_id):
        """
        Revoke admin privileges from a member (admin only).
        """
        member = db.session.get(Member, member_id)
        if member is None or not member.is_admin:
            return {'message': 'Admin not found'}, 404

        if Member.query.filter_by(is_admin=True).count() <= 1:
            return {'message': 'Cannot remove the last admin'}, 409

        member.is_admin = False
        db.session.commit()
        current_app.logger.info("Revoked admin privileges from member %s", member.id)
        return marshal(member, account_model), 200

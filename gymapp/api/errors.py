"""
API error handlers.
"""
from flask import current_app

from gymapp.errors import MembershipError


def register_error_handlers(api):
    """
    Register handlers that turn membership errors into JSON responses.

    Args:
        api: flask-restx Api instance
    """
    @api.errorhandler(MembershipError)
    def handle_membership_error(error):
        """Membership error response"""
        if error.retryable:
            current_app.logger.error("Retryable membership error: %s", error.message)
        else:
            current_app.logger.info("Membership request rejected (%s): %s", error.code, error.message)
        return error.to_dict(), error.status_code

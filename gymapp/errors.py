"""
Membership error hierarchy.

Every error carries the HTTP status and the machine-readable code the API
reports, and whether the caller may retry the same request.
"""


class MembershipError(Exception):
    """Base class for errors raised by the membership engine and its store."""

    status_code = 400
    code = 'membership_error'
    retryable = False
    default_message = 'Membership operation failed'

    def __init__(self, message=None):
        super().__init__(message or self.default_message)
        self.message = message or self.default_message

    def to_dict(self):
        """
        Serialize the error for an API response body.

        Returns:
            dict: message, error code and retry hint
        """
        return {
            'message': self.message,
            'error': self.code,
            'retryable': self.retryable,
        }


class StoreUnavailable(MembershipError):
    """The record store could not be reached or timed out."""

    status_code = 503
    code = 'store_unavailable'
    retryable = True
    default_message = 'Membership store is unavailable, please retry'


class PlanNotFound(MembershipError):
    status_code = 404
    code = 'plan_not_found'
    default_message = 'Membership plan not found'


class MemberNotFound(MembershipError):
    status_code = 404
    code = 'member_not_found'
    default_message = 'Member not found'


class RecordNotFound(MembershipError):
    status_code = 404
    code = 'record_not_found'
    default_message = 'Membership record not found'


class InvalidDate(MembershipError):
    status_code = 400
    code = 'invalid_date'
    default_message = 'Invalid calendar date'


class BackdatingNotAllowed(MembershipError):
    status_code = 400
    code = 'backdating_not_allowed'
    default_message = 'Start date cannot be in the past'


class NoActiveMembership(MembershipError):
    status_code = 409
    code = 'no_active_membership'
    default_message = 'No active membership found'


class AlreadyInactive(MembershipError):
    status_code = 409
    code = 'already_inactive'
    default_message = 'Membership is already inactive'


class PermissionDenied(MembershipError):
    status_code = 403
    code = 'permission_denied'
    default_message = 'Admin privileges required'

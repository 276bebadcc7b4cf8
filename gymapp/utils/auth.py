"""
Authentication utilities and decorators.
"""
from functools import wraps

from flask_jwt_extended import get_jwt, get_jwt_identity
from flask_restx import abort


def admin_required():
    """
    Decorator to check if the current user has admin privileges.
    Must be used after jwt_required() decorator.

    Returns:
        function: Decorator function
    """
    def wrapper(fn):
        @wraps(fn)
        def decorator(*args, **kwargs):
            if not current_is_admin():
                abort(403, "Admin privileges required")

            return fn(*args, **kwargs)
        return decorator
    return wrapper


def current_is_admin():
    """Whether the verified token carries the admin claim."""
    return bool(get_jwt().get('is_admin', False))


def current_member_id():
    """Member id of the verified token's identity."""
    return int(get_jwt_identity())

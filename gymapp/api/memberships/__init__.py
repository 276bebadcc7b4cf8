"""
Memberships namespace for a member's own membership status and history.
"""
from flask_restx import Namespace

membership_ns = Namespace(
    'memberships',
    description='Own membership status and payment history'
)

from . import routes  # noqa: E402,F401

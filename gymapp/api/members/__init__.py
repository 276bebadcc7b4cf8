"""
Members namespace for the admin roster, member profiles and membership lifecycle.
"""
from flask_restx import Namespace

member_ns = Namespace(
    'members',
    description='Member roster, profiles and membership management'
)

from . import routes  # noqa: E402,F401

"""
Plans namespace exposing the membership plan catalog.
"""
from flask_restx import Namespace

plan_ns = Namespace(
    'plans',
    description='Membership plan catalog'
)

from . import routes  # noqa: E402,F401

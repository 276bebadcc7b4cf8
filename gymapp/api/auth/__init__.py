"""
Authentication namespace for handling member authentication.
"""
from flask_restx import Namespace

auth_ns = Namespace(
    'auth',
    description='Authentication operations'
)

from . import routes  # noqa: E402,F401

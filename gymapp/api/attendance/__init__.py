"""
Attendance namespace for gym check-ins.
"""
from flask_restx import Namespace

attendance_ns = Namespace(
    'attendance',
    description='Attendance check-in and history'
)

from . import routes  # noqa: E402,F401

"""
REST API namespaces.
"""
from flask import current_app


def get_engine():
    """
    Membership engine bound to the current application.

    Returns:
        MembershipStatusEngine: The engine built by the application factory
    """
    return current_app.extensions['membership_engine']

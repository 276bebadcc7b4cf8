"""
Shared helpers for the API and the membership engine.
"""

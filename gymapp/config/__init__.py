"""
Configuration classes for the supported environments.
"""

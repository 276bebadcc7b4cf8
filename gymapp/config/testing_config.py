"""
Testing environment configuration module.
"""
from gymapp.config.base_config import BaseConfig


class TestingConfig(BaseConfig):
    """Testing environment configuration class."""

    TESTING = True
    DEBUG = True
    LOG_LEVEL = "WARNING"

    # In-memory database, one per application instance
    DB_NAME = "gym_test_db"
    SQLALCHEMY_DATABASE_URI = "sqlite://"

    # JWT settings for testing
    JWT_ACCESS_TOKEN_EXPIRES = 300  # 5 minutes
    JWT_REFRESH_TOKEN_EXPIRES = 1800  # 30 minutes
    # Use a predictable key for testing
    JWT_SECRET_KEY = "test-jwt-secret-key-for-testing-only-32b"

    ALLOW_BACKDATING = True
    DEACTIVATE_PRIOR_MEMBERSHIPS = True

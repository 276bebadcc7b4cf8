"""
Base configuration module with common settings.
"""
import os


def _env_flag(name, default):
    """Read a boolean flag from the environment."""
    value = os.getenv(name)
    if value is None:
        return default
    return value.strip().lower() in ('1', 'true', 'yes', 'on')


class BaseConfig:
    """Base configuration class with common settings."""

    # Flask settings
    SECRET_KEY = os.getenv("SECRET_KEY", "default-dev-key-not-for-production")
    DEBUG = False
    TESTING = False
    # Let flask-jwt-extended handle its own errors instead of flask-restx turning them into 500s
    PROPAGATE_EXCEPTIONS = True

    # Logging
    LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO")

    # Database settings
    DB_USER = os.getenv("DB_USER", "user")
    DB_PASSWORD = os.getenv("DB_PASSWORD", "password")
    DB_HOST = os.getenv("DB_HOST", "localhost")
    DB_PORT = os.getenv("DB_PORT", "3306")
    DB_NAME = os.getenv("DB_NAME", "gym_db")

    SQLALCHEMY_DATABASE_URI = os.getenv(
        "SQLALCHEMY_DATABASE_URI",
        f"mysql+pymysql://{DB_USER}:{DB_PASSWORD}@{DB_HOST}:{DB_PORT}/{DB_NAME}",
    )
    SQLALCHEMY_TRACK_MODIFICATIONS = False

    # JWT settings
    JWT_SECRET_KEY = os.getenv("JWT_SECRET_KEY", "default-jwt-key-not-for-production")
    JWT_ACCESS_TOKEN_EXPIRES = int(os.getenv("JWT_ACCESS_TOKEN_EXPIRES", 3600))  # 1 hour
    JWT_REFRESH_TOKEN_EXPIRES = int(os.getenv("JWT_REFRESH_TOKEN_EXPIRES", 604800))  # 7 days
    JWT_ERROR_MESSAGE_KEY = "message"

    # Keep 404 messages as raised
    RESTX_ERROR_404_HELP = False

    # Membership policy
    ALLOW_BACKDATING = _env_flag("ALLOW_BACKDATING", True)
    DEACTIVATE_PRIOR_MEMBERSHIPS = _env_flag("DEACTIVATE_PRIOR_MEMBERSHIPS", True)
    # None means the built-in catalog
    MEMBERSHIP_PLANS = None

    # API settings
    API_TITLE = "Gym Membership API"
    API_VERSION = "1.0"
    API_DESCRIPTION = "Membership lifecycle, attendance and member roster API"
    API_PREFIX = "/api"

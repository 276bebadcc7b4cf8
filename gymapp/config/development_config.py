"""
Development environment configuration module.
"""
from gymapp.config.base_config import BaseConfig


class DevelopmentConfig(BaseConfig):
    """Development environment configuration class."""

    DEBUG = True
    SQLALCHEMY_ECHO = True  # Log SQL queries
    LOG_LEVEL = "DEBUG"

    DB_NAME = "gym_dev_db"
    SQLALCHEMY_DATABASE_URI = "mysql+pymysql://user:password@db:3306/gym_dev_db"

    # JWT settings for development
    JWT_ACCESS_TOKEN_EXPIRES = 86400  # 24 hours for easier development

"""
Gym Membership API Application Factory.
"""
import importlib
import logging
import os

from dotenv import load_dotenv
from flask import Flask, jsonify
from flask_jwt_extended import JWTManager
from flask_migrate import Migrate
from flask_restx import Api
from flask_sqlalchemy import SQLAlchemy
from sqlalchemy import text

# Initialize extensions
db = SQLAlchemy()
jwt = JWTManager()
migrate = Migrate()

CONFIG_MAPPING = {
    'development': ('gymapp.config.development_config', 'DevelopmentConfig'),
    'testing': ('gymapp.config.testing_config', 'TestingConfig'),
    'production': ('gymapp.config.production_config', 'ProductionConfig'),
}


def configure_logging(app):
    """
    Configure log level and format for the application logger.

    Args:
        app: Flask application instance.
    """
    level = getattr(logging, str(app.config.get('LOG_LEVEL', 'INFO')).upper(), logging.INFO)

    logging.basicConfig(
        level=level,
        format='%(asctime)s %(levelname)s [%(name)s] %(message)s',
    )
    app.logger.setLevel(level)
    logging.getLogger('gymapp').setLevel(level)

    # SQLAlchemy echo is controlled by SQLALCHEMY_ECHO, keep the engine logger quiet otherwise
    if level > logging.DEBUG:
        logging.getLogger('sqlalchemy.engine').setLevel(logging.WARNING)


def create_app(config_name=None, config_overrides=None):
    """
    Application Factory Pattern implementation.

    Args:
        config_name: Configuration name to use (development, testing, production).
        config_overrides: Optional mapping applied on top of the configuration class.

    Returns:
        Flask application instance.
    """
    # Load environment variables
    load_dotenv()

    app = Flask(__name__)

    app_config = config_name or os.getenv("FLASK_ENV", "development")
    if app_config not in CONFIG_MAPPING:
        app.logger.warning("Unknown configuration %r, falling back to development", app_config)
        app_config = 'development'

    module_path, class_name = CONFIG_MAPPING[app_config]
    config_class = getattr(importlib.import_module(module_path), class_name)
    app.config.from_object(config_class)
    if config_overrides:
        app.config.update(config_overrides)

    configure_logging(app)
    app.logger.info("Loaded configuration class: %s", class_name)
    app.logger.debug("DEBUG=%s TESTING=%s", app.config.get('DEBUG'), app.config.get('TESTING'))

    # Initialize extensions with app
    db.init_app(app)
    jwt.init_app(app)
    migrate.init_app(app, db)

    # Import models to ensure they're registered with SQLAlchemy
    from gymapp.models import AttendanceRecord, Member, MembershipRecord  # noqa: F401

    # One engine per application instance
    from gymapp.membership import MembershipStatusEngine, PlanCatalog, SQLAlchemyMembershipStore, utcnow

    catalog = PlanCatalog.from_config(app.config.get('MEMBERSHIP_PLANS'))
    app.extensions['membership_engine'] = MembershipStatusEngine(
        store=SQLAlchemyMembershipStore(db),
        catalog=catalog,
        clock=utcnow,
        allow_backdating=app.config.get('ALLOW_BACKDATING', True),
        deactivate_prior=app.config.get('DEACTIVATE_PRIOR_MEMBERSHIPS', True),
    )
    app.logger.info("Membership engine ready with plans: %s", ', '.join(catalog.ids()))

    # Create API with additional configuration for Swagger UI documentation
    api = Api(
        app,
        version=app.config.get("API_VERSION", "1.0"),
        title=app.config.get("API_TITLE", "Gym Membership API"),
        description=app.config.get("API_DESCRIPTION", "Membership lifecycle, attendance and roster API"),
        doc="/api/docs",
        authorizations={
            'Bearer Auth': {
                'type': 'apiKey',
                'in': 'header',
                'name': 'Authorization',
                'description': 'Enter: **Bearer &lt;JWT&gt;**'
            },
        },
        security='Bearer Auth'
    )

    from gymapp.api.errors import register_error_handlers
    register_error_handlers(api)

    # Register namespaces
    from gymapp.api.attendance import attendance_ns
    from gymapp.api.auth import auth_ns
    from gymapp.api.members import member_ns
    from gymapp.api.memberships import membership_ns
    from gymapp.api.plans import plan_ns

    api.add_namespace(auth_ns, path='/api/auth')
    api.add_namespace(plan_ns, path='/api/plans')
    api.add_namespace(membership_ns, path='/api/memberships')
    api.add_namespace(member_ns, path='/api/members')
    api.add_namespace(attendance_ns, path='/api/attendance')

    @app.route('/health')
    def health_check():
        """Health check endpoint to verify the application is running."""
        return jsonify({
            'status': 'healthy',
            'environment': app_config,
            'database_connected': _check_db_connection(),
        })

    def _check_db_connection():
        """Check if the database connection is working."""
        try:
            db.session.execute(text('SELECT 1'))
            return True
        except Exception as e:
            app.logger.error("Database connection error: %s", e)
            return False

    @app.shell_context_processor
    def shell_context():
        return {"app": app, "db": db}

    return app

"""
StyleRewards Loyalty Platform
Flask application factory
"""
import os
import logging
from flask import Flask
from flask_cors import CORS

from .extensions import db, migrate
from .config import get_config, validate_config
from .utils.logging_config import setup_logging

logger = logging.getLogger(__name__)


def create_app(config_name: str = None, test_config: dict = None) -> Flask:
    """
    Application factory for creating Flask app instances.

    Args:
        config_name: Configuration environment (development, production, testing)
        test_config: Extra settings applied on top of the config class
                     before extensions are initialised

    Returns:
        Configured Flask application
    """
    if config_name is None:
        config_name = os.getenv('FLASK_ENV', 'development')

    # Setup logging before anything else
    setup_logging()

    app = Flask(__name__)
    app.config.from_object(get_config(config_name))
    if test_config:
        app.config.update(test_config)

    validate_config(config_name)

    # Initialize extensions
    db.init_app(app)
    migrate.init_app(app, db)

    from .utils.cache import init_cache
    init_cache(app)

    CORS(
        app,
        origins=app.config['CORS_ORIGINS'],
        supports_credentials=True,
        allow_headers=['Content-Type', 'Authorization', 'X-Customer-ID']
    )

    # Make sure every model is registered on db.metadata
    from . import models  # noqa: F401

    register_blueprints(app)

    from .commands import init_app as init_commands
    init_commands(app)

    register_error_handlers(app)

    @app.route('/health')
    def health_check():
        return {'status': 'healthy', 'service': 'stylerewards'}

    logger.info('StyleRewards app created (%s)', config_name)
    return app


def register_blueprints(app: Flask) -> None:
    """Register all API blueprints."""
    from .api.customer import customer_bp, purchases_bp
    from .api.rewards import rewards_bp
    from .api.admin import admin_bp

    # Customer-facing routes
    app.register_blueprint(customer_bp, url_prefix='/api/customer')
    app.register_blueprint(purchases_bp, url_prefix='/api/purchase')
    app.register_blueprint(rewards_bp, url_prefix='/api/rewards')

    # Admin routes
    app.register_blueprint(admin_bp, url_prefix='/api/admin')


def register_error_handlers(app: Flask) -> None:
    """Register error handlers."""
    from .utils.errors import (
        ErrorCode,
        error_response,
        bad_request,
        not_found,
        internal_error,
        loyalty_error_response,
    )
    from .utils.exceptions import LoyaltyError

    @app.errorhandler(LoyaltyError)
    def handle_loyalty_error(error):
        return loyalty_error_response(error)

    @app.errorhandler(400)
    def handle_bad_request(error):
        return bad_request('Bad request')

    @app.errorhandler(404)
    def handle_not_found(error):
        return not_found('Not found')

    @app.errorhandler(405)
    def handle_method_not_allowed(error):
        return error_response('Method not allowed', ErrorCode.INVALID_REQUEST, 405, log_error=False)

    @app.errorhandler(500)
    def handle_internal_error(error):
        return internal_error()

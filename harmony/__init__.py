"""
Harmony Progress Engine
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


def create_app(config_name: str = None) -> Flask:
    """
    Application factory for creating Flask app instances.

    Args:
        config_name: Configuration environment (development, production, testing)

    Returns:
        Configured Flask application
    """
    if config_name is None:
        config_name = os.getenv('FLASK_ENV', 'development')

    validate_config(config_name)
    config = get_config(config_name)

    # Setup logging before anything else
    setup_logging(config.LOG_LEVEL)

    app = Flask(__name__)
    app.config.from_object(config)

    # Initialize extensions
    db.init_app(app)
    migrate.init_app(app, db)

    # Configure CORS - allow the mobile/web client origins
    CORS(
        app,
        resources={r'/api/*': {'origins': app.config['CORS_ORIGINS']}},
        allow_headers=['Content-Type', 'Authorization'],
    )

    # Register blueprints
    register_blueprints(app)

    # Register CLI commands
    from .commands import init_app as init_commands
    init_commands(app)

    # Register error handlers
    register_error_handlers(app)

    # Health check endpoint
    @app.route('/health')
    def health_check():
        return {'status': 'healthy', 'service': 'harmony'}

    logger.info('[Harmony] App created with %s config', config_name)
    return app


def register_blueprints(app: Flask) -> None:
    """Register all API blueprints."""
    from .api.progress import progress_bp

    app.register_blueprint(progress_bp, url_prefix='/api/progress')


def register_error_handlers(app: Flask) -> None:
    """Register error handlers."""
    from .utils.errors import (
        ErrorCode,
        error_response,
        harmony_error_response,
        internal_error,
    )
    from .utils.exceptions import HarmonyError

    @app.errorhandler(HarmonyError)
    def handle_harmony_error(error):
        return harmony_error_response(error)

    @app.errorhandler(400)
    def bad_request(error):
        return error_response('Bad request', ErrorCode.INVALID_REQUEST, 400, log_error=False)

    @app.errorhandler(404)
    def not_found(error):
        return error_response('Not found', ErrorCode.NOT_FOUND, 404, log_error=False)

    @app.errorhandler(500)
    def handle_internal_error(error):
        return internal_error(details={'error': str(error)})

"""Flask application factory and initialization."""
import logging

from flask import Flask, jsonify

from conference_site.config import config
from conference_site.extensions import init_extensions
from conference_site import db

logger = logging.getLogger(__name__)


def create_app(config_class=None):
    """Create and configure the Flask application.

    Args:
        config_class: Configuration class to use; defaults to the class
            registered for ``APP_ENV``.

    Returns:
        Flask: Configured Flask application instance
    """
    if config_class is None:
        from conference_site.config import Config
        config_class = config.get(Config.APP_ENV, config['default'])

    app = Flask(__name__)
    app.config.from_object(config_class)

    init_extensions(app)

    @app.route('/api/health')
    def health_check():
        """Health check endpoint with database connectivity."""
        response = {
            "status": "ok",
            "service": "conference-registration-api",
            "environment": app.config.get('APP_ENV'),
        }
        try:
            db_health = db.health_check()
            response["database"] = db_health
            if db_health.get("status") != "healthy":
                response["status"] = "degraded"
        except Exception as e:
            response["database"] = {
                "status": "unhealthy",
                "error": str(e)
            }
            response["status"] = "degraded"

        return jsonify(response)

    register_blueprints(app)

    logger.info("Conference registration app created (APP_ENV=%s)", app.config.get('APP_ENV'))
    return app


def register_blueprints(app):
    """Register Flask blueprints with the application."""
    # Import here to avoid circular imports
    from conference_site.blueprints.api.registration.routes import registration_bp
    from conference_site.blueprints.api.uploads.routes import uploads_bp
    from conference_site.blueprints.api.admin.routes import admin_bp

    app.register_blueprint(registration_bp, url_prefix='/api')
    app.register_blueprint(uploads_bp, url_prefix='/api')
    app.register_blueprint(admin_bp, url_prefix='/api/admin')

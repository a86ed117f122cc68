import logging

from flask import Flask, jsonify
from werkzeug.exceptions import HTTPException

from .config import config
from .database import close_db, create_tables, init_engine
from .errors import ApiError
from .routes import blueprints

logger = logging.getLogger(__name__)

PLACEHOLDER_SECRET = 'CHANGE_IN_PRODUCTION_USE_ENV_VAR'


def configure_logging(settings=config):
    logging.basicConfig(level=settings.LOG_LEVEL, format=settings.LOG_FORMAT)


def create_app(settings=config) -> Flask:
    # --- SETUP ---
    app = Flask(__name__)
    app.config.from_object(settings)

    if settings.ENV_NAME == 'production' and PLACEHOLDER_SECRET in (settings.SECRET_KEY, settings.JWT_SECRET_KEY):
        logger.warning("Running with placeholder secrets; set APP_SECRET_KEY and JWT_SECRET_KEY")

    engine = init_engine(
        settings.DATABASE_URL,
        pool_size=settings.DATABASE_POOL_SIZE,
        max_overflow=settings.DATABASE_MAX_OVERFLOW,
    )
    create_tables(engine)
    app.extensions['laid.engine'] = engine
    app.teardown_appcontext(close_db)

    for blueprint in blueprints:
        app.register_blueprint(blueprint)

    register_error_handlers(app)

    @app.after_request
    def add_security_headers(response):
        response.headers['X-Content-Type-Options'] = 'nosniff'
        response.headers['X-Frame-Options'] = 'DENY'
        response.headers['Content-Security-Policy'] = "default-src 'self'"
        return response

    @app.route('/health', methods=['GET'])
    def health():
        return jsonify({"status": "ok"}), 200

    return app


def register_error_handlers(app: Flask):
    @app.errorhandler(ApiError)
    def handle_api_error(error):
        return jsonify(error.to_dict()), error.status_code

    @app.errorhandler(HTTPException)
    def handle_http_error(error):
        return jsonify({"error": error.description}), error.code

    @app.errorhandler(Exception)
    def handle_unexpected_error(error):
        # Full detail goes to the log only
        logger.exception("Unhandled error")
        return jsonify({"error": "Internal server error"}), 500


if __name__ == "__main__":
    configure_logging()
    app = create_app()
    # In production, run behind Gunicorn: gunicorn "laid.main:create_app()"
    app.run(host=config.HOST, port=config.PORT, debug=False)

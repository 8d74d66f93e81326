"""Flask application factory."""

import logging

from flask import Flask, jsonify

from poisongame.engine.auth import AuthorizationError
from poisongame.engine.escrow import EscrowError
from poisongame.errors import (
    InvalidTileIndex,
    MatchNotFound,
    NotAdmin,
    NotPlayer,
    PoisonGameError,
    VerificationKeyMalformed,
)

from .config import Config
from .extensions import db, login_manager
from .services import engine_service

logger = logging.getLogger(__name__)

# HTTP status for rule violations; anything not listed is a 409 conflict
ERROR_STATUS = {
    MatchNotFound: 404,
    NotPlayer: 403,
    NotAdmin: 403,
    InvalidTileIndex: 400,
    VerificationKeyMalformed: 400,
}


def _error_response(name: str, code: int | None, message: str, status: int):
    return jsonify({"error": name, "code": code, "message": message}), status


def register_error_handlers(app: Flask) -> None:
    """Render every expected failure as a JSON error body."""

    @app.errorhandler(PoisonGameError)
    def handle_game_error(e: PoisonGameError):
        return jsonify(e.to_dict()), ERROR_STATUS.get(type(e), 409)

    @app.errorhandler(AuthorizationError)
    def handle_authorization_error(e: AuthorizationError):
        return _error_response("AuthorizationError", None, str(e), 403)

    @app.errorhandler(EscrowError)
    def handle_escrow_error(e: EscrowError):
        logger.error(f"Escrow refused operation: {e}")
        return _error_response("EscrowError", None, str(e), 502)

    @app.errorhandler(ValueError)
    def handle_value_error(e: ValueError):
        return _error_response("BadRequest", None, str(e), 400)

    @login_manager.unauthorized_handler
    def handle_unauthorized():
        return _error_response("Unauthorized", None, "Login required.", 401)


def _import_models():
    """Ensure all models are imported so their tables are created."""
    from .models.user import User  # noqa: F401


def create_app(config_class=Config):
    """Create and configure the Flask application."""
    app = Flask(__name__)
    app.config.from_object(config_class)

    # Ensure instance folder exists
    config_class.INSTANCE_PATH.mkdir(parents=True, exist_ok=True)

    # Initialize extensions
    db.init_app(app)
    login_manager.init_app(app)

    # Register blueprints
    from .routes import admin, auth, matches

    app.register_blueprint(auth.bp)
    app.register_blueprint(matches.bp)
    app.register_blueprint(admin.bp)

    register_error_handlers(app)
    engine_service.init_app(app)

    # Create database tables
    with app.app_context():
        _import_models()
        db.create_all()

    return app


def main():
    """Entry point for `poisongame-web` command."""
    logging.basicConfig(level=logging.INFO)
    app = create_app()
    app.run(debug=True, host="0.0.0.0", port=5000)


if __name__ == "__main__":
    main()

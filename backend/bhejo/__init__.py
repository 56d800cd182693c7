# backend/bhejo/__init__.py
from flask import Flask, current_app, jsonify

from .config import Config
from .extensions import db, migrate


def _register_error_handlers(app: Flask) -> None:
    from .services.product_store import StoreError
    from .services.products_service import ProductVanishedError
    from .services.upload_service import ImageStorageError, UploadRejectedError

    @app.errorhandler(StoreError)
    def handle_store_error(e: StoreError):
        if e.status_code >= 500:
            current_app.logger.exception("Store operation failed")
        else:
            current_app.logger.info("Rejected store value: %s", e)
        return jsonify({"error": str(e)}), e.status_code

    @app.errorhandler(UploadRejectedError)
    def handle_upload_rejected(e: UploadRejectedError):
        return jsonify({"error": str(e)}), e.status_code

    @app.errorhandler(ImageStorageError)
    def handle_image_storage_error(e: ImageStorageError):
        current_app.logger.exception("Image storage failed")
        return jsonify({"error": str(e)}), e.status_code

    @app.errorhandler(ProductVanishedError)
    def handle_product_vanished(e: ProductVanishedError):
        current_app.logger.warning("%s", e)
        return jsonify({"error": "Product not found"}), e.status_code


def create_app(config_overrides: dict | None = None) -> Flask:
    app = Flask(__name__, instance_relative_config=True)
    app.config.from_object(Config)
    if config_overrides:
        app.config.update(config_overrides)

    # Initialize extensions
    db.init_app(app)
    migrate.init_app(app, db)

    # Import models so Alembic can discover metadata reliably
    from . import models  # noqa: F401

    from . import cors
    from .services import upload_service
    cors.init_app(app)
    upload_service.init_app(app)

    # Register blueprints
    from .routes.system import system_bp
    from .routes.products import products_bp
    from .routes.users import users_bp

    app.register_blueprint(system_bp)
    app.register_blueprint(products_bp)
    app.register_blueprint(users_bp)

    _register_error_handlers(app)

    # Register CLI commands
    from .cli import register_commands
    register_commands(app)

    return app

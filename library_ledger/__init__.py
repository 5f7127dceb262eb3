from flask import Flask, jsonify
from sqlalchemy.exc import SQLAlchemyError

from library_ledger.config import Config
from library_ledger.extensions import db, migrate, jwt
from library_ledger.errors import LedgerError


def create_app(config_object=None):
    app = Flask(__name__)
    app.config.from_object(config_object or Config)
    app.logger.setLevel(app.config.get("LOG_LEVEL", "INFO"))

    # models must be imported before create_all / migrations see the metadata
    from library_ledger import models  # noqa: F401

    db.init_app(app)
    migrate.init_app(app, db)
    jwt.init_app(app)

    # importing utils.auth registers the JWT error callbacks
    from library_ledger.utils.auth import json_error

    from library_ledger.controllers.auth_controller import auth_bp
    from library_ledger.controllers.book_controller import book_bp
    from library_ledger.controllers.borrow_controller import borrow_bp
    from library_ledger.controllers.admin_controller import admin_bp
    app.register_blueprint(auth_bp, url_prefix="/auth")
    app.register_blueprint(book_bp, url_prefix="/books")
    app.register_blueprint(borrow_bp, url_prefix="/borrow")
    app.register_blueprint(admin_bp, url_prefix="/admin")

    from library_ledger.commands import register_commands
    register_commands(app)

    @app.get("/health")
    def health():
        return jsonify({"ok": True})

    @app.errorhandler(LedgerError)
    def handle_ledger_error(e):
        db.session.rollback()
        return jsonify(e.to_dict()), e.status_code

    @app.errorhandler(SQLAlchemyError)
    def handle_store_error(e):
        db.session.rollback()
        app.logger.exception(f"[store] request failed: {e}")
        return json_error("internal_error", "Internal server error", 500)

    app.logger.info("[app] library ledger ready")
    return app

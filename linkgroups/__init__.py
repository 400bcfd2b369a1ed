import logging
import traceback

import click
from flask import Flask, jsonify, request
from flask_cors import CORS
from werkzeug.exceptions import HTTPException
from werkzeug.middleware.proxy_fix import ProxyFix

from linkgroups.api import api_bp
from linkgroups.auth import auth_bp
from linkgroups.config import Config
from linkgroups.extensions import db, login_manager, migrate, oauth
from linkgroups.services.common import ServiceError
from linkgroups.services.identity import add_allowed_email
from linkgroups.web import web_bp


def _register_error_handlers(app: Flask) -> None:
    @app.errorhandler(HTTPException)
    def handle_http_exception(err: HTTPException):
        if request.path.startswith("/api/"):
            return jsonify({"error": err.name, "message": err.description}), err.code
        return err

    @app.errorhandler(Exception)
    def handle_unexpected_error(err: Exception):
        db.session.rollback()
        app.logger.exception(
            "Unhandled exception on %s %s", request.method, request.path
        )
        if app.config.get("IS_PRODUCTION"):
            return (
                jsonify(
                    {"error": "An unexpected error occurred. Please try again later."}
                ),
                500,
            )
        return (
            jsonify(
                {
                    "error": str(err),
                    "stack": "".join(
                        traceback.format_exception(type(err), err, err.__traceback__)
                    ),
                }
            ),
            500,
        )


def _cors_origins(app: Flask) -> list[str]:
    if app.config.get("FRONTEND_URL"):
        return [app.config["FRONTEND_URL"].rstrip("/")]
    if app.config.get("IS_PRODUCTION"):
        return []
    return [app.config["DEV_FRONTEND_URL"]]


def _configure_cors(app: Flask) -> None:
    origins = _cors_origins(app)
    if not origins:
        return
    CORS(
        app,
        resources={r"/api/*": {"origins": origins}},
        methods=["GET", "POST", "PUT", "PATCH", "DELETE", "OPTIONS"],
        allow_headers=["Content-Type"],
        supports_credentials=True,
    )


def create_app(config_object=Config):
    app = Flask(__name__, template_folder="../templates", static_folder="../static")
    app.config.from_object(config_object)
    app.logger.setLevel(
        getattr(logging, str(app.config["LOG_LEVEL"]).upper(), logging.INFO)
    )
    app.wsgi_app = ProxyFix(app.wsgi_app, x_for=1, x_proto=1, x_host=1)

    db.init_app(app)
    migrate.init_app(app, db)
    login_manager.init_app(app)
    oauth.init_app(app)
    oauth.register(
        name="google",
        client_id=app.config["GOOGLE_CLIENT_ID"],
        client_secret=app.config["GOOGLE_CLIENT_SECRET"],
        server_metadata_url=app.config["GOOGLE_METADATA_URL"],
        client_kwargs={"scope": "openid email profile"},
    )

    app.register_blueprint(auth_bp)
    app.register_blueprint(api_bp)
    app.register_blueprint(web_bp)
    _configure_cors(app)
    _register_error_handlers(app)

    @app.cli.command("init-db")
    def init_db_command():
        db.create_all()
        print("Initialized linkgroups database.")

    @app.cli.command("allow-email")
    @click.argument("email")
    def allow_email_command(email):
        try:
            row = add_allowed_email(email)
        except ServiceError as exc:
            raise click.ClickException(exc.message) from exc
        print(f"Allowed {row.email}.")

    @app.context_processor
    def inject_globals():
        return {"app_name": "linkgroups"}

    with app.app_context():
        db.create_all()

    return app

"""
Pillgraph – Flask Application Factory
Serves the drug / interaction REST API and the streaming chat endpoint.
"""

import logging

from flask import Flask
from flask_cors import CORS
from flask_limiter import Limiter
from flask_limiter.util import get_remote_address

from app.config import Config
from app.database import db
from app.errors import now_ms, register_error_handlers
from app.middleware.request_logger import init_request_logging
from app.routes.chat import chat_bp
from app.routes.drugs import drugs_bp
from app.routes.graph import graph_bp
from app.routes.interactions import interactions_bp
from app.services.container import EXTENSION_KEY, build_services, get_services

limiter = Limiter(key_func=get_remote_address, default_limits=[Config.RATE_LIMIT_DEFAULT])

LOG_FORMAT = "%(asctime)s %(levelname)s [%(name)s] %(message)s"


def configure_logging() -> None:
    logging.basicConfig(level=Config.LOG_LEVEL, format=LOG_FORMAT)
    logging.getLogger("pillgraph").setLevel(Config.LOG_LEVEL)


def create_app(ai_client=None) -> Flask:
    """
    Build the application. ``ai_client`` replaces the configured inference
    client (tests inject a fake one so no network call is ever made).
    """
    Config.validate()
    configure_logging()

    app = Flask(__name__)
    app.config["SQLALCHEMY_DATABASE_URI"] = Config.DATABASE_URL
    app.config["SQLALCHEMY_TRACK_MODIFICATIONS"] = False
    app.config["DEBUG"] = Config.DEBUG
    app.config["TESTING"] = Config.APP_ENV == "testing"
    app.config["RATELIMIT_ENABLED"] = Config.APP_ENV != "testing"
    app.json.sort_keys = False

    # Extensions
    CORS(app, resources={r"/api/*": {"origins": "*"}})
    limiter.init_app(app)
    db.init_app(app)

    # Create tables if they don't already exist
    with app.app_context():
        from app.models import models as _models  # noqa: F401 – ensure all models are registered
        db.create_all()

    app.extensions[EXTENSION_KEY] = build_services(db, Config, ai_client)

    # Middleware
    init_request_logging(app)
    register_error_handlers(app)

    # Blueprints
    app.register_blueprint(graph_bp, url_prefix="/api/drugs")
    app.register_blueprint(drugs_bp, url_prefix="/api/drugs")
    app.register_blueprint(interactions_bp, url_prefix="/api/interactions")
    app.register_blueprint(chat_bp, url_prefix="/api/ai")

    # Health check
    @app.route("/health")
    @app.route("/api/health")
    @limiter.exempt
    def health():
        database_ok = get_services().store.ping()
        body = {
            "status": "ok" if database_ok else "degraded",
            "service": "pillgraph",
            "database": "connected" if database_ok else "unavailable",
            "timestamp": now_ms(),
        }
        return body, 200 if database_ok else 503

    logging.getLogger("pillgraph").info("Pillgraph app created env=%s", Config.APP_ENV)
    return app

from flask import Flask, request
from flasgger import Swagger
from flask_cors import CORS
import logging

from .config import get_config
from .errors import register_error_handlers
from models import storage
from models.user_repository import UserRepository
from utils.ratelimit import RateLimiter
from utils.session import SessionManager
from utils.decorators import check_rate_limit

# Minimal Swagger config: exposes /swagger.json and UI at /apidocs
SWAGGER_TEMPLATE = {
    "swagger": "2.0.0",
    "info": {
        "title": "Task Manager API",
        "version": "1.0.0",
        "description": "REST API for user accounts and per-user task management.",
    },
    "basePath": "/",  # blueprints are mounted under /api/v1
    "schemes": ["http", "https"],
    "securityDefinitions": {
        "Bearer": {
            "type": "apiKey",
            "name": "Authorization",
            "in": "header",
            "description": "Browsers send the access token cookie; API clients may use \"Bearer <token>\".",
        }
    },
}

SWAGGER_CONFIG = {
    "headers": [],
    "specs": [
        {
            "endpoint": "apispec_1",
            "route": "/swagger.json",
            "rule_filter": lambda rule: True,   # include all endpoints
            "model_filter": lambda tag: True,   # include all models
        }
    ],
    "static_url_path": "/flasgger_static",
    "swagger_ui": True,
    "specs_route": "/apidocs/",
}


def create_app(config_name: str | None = None, **overrides) -> Flask:
    """
    Application factory: creates and configures the Flask app.
    Keyword overrides are applied on top of the selected config class.
    Raises utils.exceptions.ConfigurationError if JWT_SECRET is missing.
    """
    app = Flask(__name__)

    app.config.from_object(get_config(config_name))
    app.config.update(overrides)

    logging.basicConfig(format="%(asctime)s %(levelname)s %(name)s: %(message)s")
    app.logger.setLevel(app.config.get("LOG_LEVEL", "INFO"))
    logging.getLogger("utils").setLevel(app.config.get("LOG_LEVEL", "INFO"))

    # Session core; fails here, before serving anything, without a signing secret
    app.extensions["session_manager"] = SessionManager.from_config(app.config, UserRepository(storage))
    storage.reload(app.config["DATABASE_URL"])

    window = app.config["RATELIMIT_WINDOW_SECONDS"]
    app.extensions["rate_limiters"] = {
        "global": RateLimiter(app.config["RATELIMIT_GLOBAL"], window),
        "auth": RateLimiter(app.config["RATELIMIT_AUTH"], window),
    }

    # Credentialed CORS: cookies only flow to explicitly listed origins
    CORS(
        app,
        resources={r"/api/*": {"origins": app.config.get("CORS_ORIGINS", [])}},
        supports_credentials=True,
        methods=["GET", "POST", "PUT", "DELETE"],
        allow_headers=["Content-Type", "Authorization"],
    )

    # Swagger UI and JSON
    Swagger(app, template=SWAGGER_TEMPLATE, config=SWAGGER_CONFIG)

    # Register global error handlers that return the uniform error envelope
    register_error_handlers(app)

    from .health import bp as health_bp
    from .auth import bp as auth_bp
    from .tasks import bp as tasks_bp

    app.register_blueprint(health_bp, url_prefix="/api/v1")
    app.register_blueprint(auth_bp, url_prefix="/api/v1/auth")
    app.register_blueprint(tasks_bp, url_prefix="/api/v1")

    @app.before_request
    def global_rate_limit():
        # CORS preflights are answered by flask-cors and do not count
        if request.method == "OPTIONS":
            return
        check_rate_limit("global")

    # Ensure the DB session is removed at the end of each request/app context
    @app.teardown_appcontext
    def remove_session(exception=None):
        storage.close()

    @app.route("/")
    def root():
        return {
            "message": "Welcome to Task Manager API",
            "docs": "/apidocs/",
            "health": "/api/v1/health",
        }, 200

    return app

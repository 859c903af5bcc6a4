# nutriapp/__init__.py

import time
import logging
from flask import Flask, jsonify, request, g
from flask.logging import default_handler
from flask_cors import CORS
from flask_socketio import SocketIO
from werkzeug.exceptions import HTTPException
from .config import Config
from .supabase_client import init_supabase
from .utils import utc_now_iso

socketio = SocketIO()


def create_app(config_class=Config, supabase_client=None, auth_client_factory=None):
    app = Flask(__name__)
    app.config.from_object(config_class)

    # Configure logging to show INFO level messages
    log_level = getattr(logging, str(app.config.get('LOG_LEVEL', 'INFO')).upper(), logging.INFO)
    app.logger.setLevel(log_level)
    app.logger.removeHandler(default_handler)
    if not app.logger.handlers:
        handler = logging.StreamHandler()
        handler.setLevel(log_level)
        formatter = logging.Formatter('[%(asctime)s] %(levelname)s: %(message)s')
        handler.setFormatter(formatter)
        app.logger.addHandler(handler)

    init_supabase(app, supabase_client, auth_client_factory)

    # The frontend runs on its own origin and sends the bearer token with credentials.
    CORS(app, supports_credentials=True, origins=app.config['CORS_ORIGINS'])

    socketio.init_app(
        app,
        cors_allowed_origins=app.config['CORS_ORIGINS'],
        async_mode=app.config.get('SOCKETIO_ASYNC_MODE')
    )

    from .sockets import register_socket_handlers
    register_socket_handlers(socketio)

    # --- REGISTER BLUEPRINTS ---
    from .api.auth import bp as auth_bp
    from .api.users import bp as users_bp
    from .api.nutritionists import bp as nutritionists_bp
    from .api.chat import bp as chat_bp
    from .api.goals import bp as goals_bp

    app.register_blueprint(auth_bp, url_prefix='/api/auth')
    app.register_blueprint(users_bp, url_prefix='/api/user')
    app.register_blueprint(nutritionists_bp, url_prefix='/api/nutricionistas')
    app.register_blueprint(chat_bp, url_prefix='/api/chat')
    app.register_blueprint(goals_bp, url_prefix='/api/metas')

    @app.route('/health', methods=['GET'])
    def health():
        return jsonify({"status": "UP", "timestamp": utc_now_iso()}), 200

    # --- REQUEST LOGGING ---
    @app.before_request
    def _start_timer():
        g._t0 = time.perf_counter()

    @app.after_request
    def _log_response(resp):
        dt_ms = (time.perf_counter() - getattr(g, '_t0', time.perf_counter())) * 1000
        app.logger.info("%s %s %s (%.1f ms)", request.method, request.path, resp.status_code, dt_ms)
        return resp

    # --- JSON ERROR HANDLERS ---
    @app.errorhandler(HTTPException)
    def _handle_http_error(e):
        return jsonify({"success": False, "error": e.description, "error_code": e.code}), e.code

    @app.errorhandler(Exception)
    def _handle_unexpected_error(e):
        app.logger.exception(f"Unhandled error on {request.method} {request.path}")
        return jsonify({"success": False, "error": "Erro interno do servidor", "error_code": 500}), 500

    return app

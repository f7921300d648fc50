import os

from flask import Flask
from flask_cors import CORS
from flask_socketio import SocketIO
from config import Config

BACKEND_ROOT = os.path.abspath(os.path.join(os.path.dirname(__file__), '..'))

socketio = SocketIO(async_mode=None)


def _allowed_origins(raw):
    origins = [o.strip() for o in (raw or '').split(',') if o.strip()]
    if not origins or origins == ['*']:
        return '*'
    return origins


def create_app(config_class=Config):
    static_folder = getattr(config_class, 'STATIC_FOLDER', 'public')
    if not os.path.isabs(static_folder):
        static_folder = os.path.join(BACKEND_ROOT, static_folder)

    # Serve the client bundle from the site root, like a plain static server
    flask_app = Flask(__name__, static_folder=static_folder, static_url_path='')
    flask_app.config.from_object(config_class)
    flask_app.logger.setLevel(flask_app.config.get('LOG_LEVEL', 'INFO'))

    allowed_origins = _allowed_origins(flask_app.config.get('CORS_ORIGINS'))
    CORS(flask_app, origins=allowed_origins)

    # Initialize Socket.IO after app is created
    socketio.init_app(flask_app, cors_allowed_origins=allowed_origins)

    from app.routes import main
    flask_app.register_blueprint(main)

    # One shared room per app; handlers find it through app.extensions
    from app.services.games import BackgroundScheduler, SessionManager
    from app.socketio_events import SocketIONotifier, register_socketio_handlers

    scheduler = flask_app.config.get('SESSION_SCHEDULER') or BackgroundScheduler(socketio, flask_app.logger)
    flask_app.extensions['session_manager'] = SessionManager(
        notifier=SocketIONotifier(),
        scheduler=scheduler,
        duration_ms=flask_app.config['ROUND_DURATION_MS'],
        target_presses=flask_app.config['TARGET_PRESSES'],
        cooldown_ms=flask_app.config['KEY_PRESS_COOLDOWN_MS'],
        eviction_delay_ms=flask_app.config['EVICTION_DELAY_MS'],
        clock=flask_app.config.get('SESSION_CLOCK'),
        logger=flask_app.logger,
    )
    register_socketio_handlers()

    return flask_app

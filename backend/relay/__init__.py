from flask import Flask
from flask_cors import CORS
from flask_socketio import SocketIO
from config import Config

socketio = SocketIO(async_mode=None)

def create_app(config_class=Config):
    flask_app = Flask(__name__)
    flask_app.config.from_object(config_class)
    flask_app.logger.setLevel(flask_app.config.get('LOG_LEVEL', 'INFO'))

    allowed_origins = flask_app.config.get('CORS_ALLOWED_ORIGINS', [])
    namespace = flask_app.config.get('SOCKETIO_NAMESPACE', '/ws')
    CORS(flask_app, supports_credentials=True, origins=allowed_origins)

    # Initialize Socket.IO after app is created
    socketio.init_app(
        flask_app,
        cors_allowed_origins=allowed_origins,
        async_mode=flask_app.config.get('SOCKETIO_ASYNC_MODE'),
    )

    from relay.routes import main
    flask_app.register_blueprint(main)

    from relay.api.rooms import rooms
    flask_app.register_blueprint(rooms, url_prefix='/api/rooms')

    # One dispatcher (and room registry) per app; handlers find it via current_app
    from relay.dispatcher import ConnectionDispatcher
    from relay.socketio_events import SocketIOTransport, register_socketio_handlers
    flask_app.extensions['relay'] = ConnectionDispatcher(SocketIOTransport(socketio, namespace))
    register_socketio_handlers(namespace)

    flask_app.logger.info(f"[startup] namespace={namespace} origins={allowed_origins}")
    return flask_app

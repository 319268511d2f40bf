import os

DEFAULT_ORIGINS = ",".join([
    "http://localhost:5173",
    "http://127.0.0.1:5173",
    "http://localhost:5174",
    "http://127.0.0.1:5174",
])

class Config:
    SECRET_KEY = os.environ.get('SECRET_KEY') or 'you-will-never-guess'
    # Comma separated list, shared by Flask-Cors and Socket.IO
    CORS_ALLOWED_ORIGINS = [o.strip() for o in os.environ.get('CORS_ALLOWED_ORIGINS', DEFAULT_ORIGINS).split(',') if o.strip()]
    SOCKETIO_NAMESPACE = os.environ.get('SOCKETIO_NAMESPACE', '/ws')
    # None lets Flask-SocketIO pick threading/eventlet/gevent
    SOCKETIO_ASYNC_MODE = os.environ.get('SOCKETIO_ASYNC_MODE') or None
    HOST = os.environ.get('HOST', '127.0.0.1')
    PORT = int(os.environ.get('PORT', '8080'))
    LOG_LEVEL = os.environ.get('LOG_LEVEL', 'INFO').upper()
    DEBUG = os.environ.get('FLASK_DEBUG', '0') == '1'
    # Werkzeug refuses to serve outside debug mode unless this is set
    ALLOW_UNSAFE_WERKZEUG = os.environ.get('ALLOW_UNSAFE_WERKZEUG', '0') == '1'

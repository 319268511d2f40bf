import os
import sys
import pytest

# Ensure the backend root (containing the `relay` package) is on sys.path
CURRENT_DIR = os.path.dirname(__file__)
BACKEND_ROOT = os.path.abspath(os.path.join(CURRENT_DIR, '..'))
if BACKEND_ROOT not in sys.path:
    sys.path.insert(0, BACKEND_ROOT)

from relay import create_app, socketio
from relay.services.games.broadcast import Transport


NAMESPACE = '/ws'


class TestConfig:
    TESTING = True
    SECRET_KEY = os.environ.get('SECRET_KEY', 'test-secret')
    CORS_ALLOWED_ORIGINS = ['http://localhost:5173']
    SOCKETIO_NAMESPACE = NAMESPACE
    SOCKETIO_ASYNC_MODE = 'threading'
    LOG_LEVEL = 'DEBUG'


class RecordingTransport(Transport):
    """Collects outbound events per connection instead of sending them."""

    def __init__(self):
        self.sent = []
        self.closed = []
        self.on_close = None

    def send(self, conn, event, payload):
        self.sent.append((conn, event, payload))

    def close(self, conn):
        self.closed.append(conn)
        if self.on_close is not None:
            self.on_close(conn)

    def events(self, conn):
        return [(event, payload) for c, event, payload in self.sent if c == conn]

    def names(self, conn):
        return [event for event, _ in self.events(conn)]

    def last(self, conn, event):
        matching = [payload for name, payload in self.events(conn) if name == event]
        return matching[-1] if matching else None

    def clear(self):
        self.sent.clear()


@pytest.fixture()
def transport():
    return RecordingTransport()


@pytest.fixture()
def dispatcher(transport):
    from relay.dispatcher import ConnectionDispatcher
    d = ConnectionDispatcher(transport)
    # Mirror the real transport: closing a connection runs the disconnect path
    transport.on_close = d.disconnected
    return d


@pytest.fixture()
def flask_app():
    application = create_app(TestConfig)
    with application.app_context():
        yield application


@pytest.fixture()
def client(flask_app):
    return flask_app.test_client()


@pytest.fixture()
def sio_factory(flask_app):
    created = []

    def _make():
        test_client = socketio.test_client(
            flask_app,
            flask_test_client=flask_app.test_client(),
            namespace=NAMESPACE,
        )
        created.append(test_client)
        return test_client

    yield _make
    for test_client in created:
        try:
            if test_client.is_connected(NAMESPACE):
                test_client.disconnect(namespace=NAMESPACE)
        except Exception:
            pass

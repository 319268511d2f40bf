from flask import current_app, request

from relay import protocol, socketio
from relay.dispatcher import ConnectionDispatcher
from relay.services.games.broadcast import Transport


class SocketIOTransport(Transport):
    """Sends to and closes Socket.IO sessions on one namespace."""

    def __init__(self, sio, namespace: str):
        self.sio = sio
        self.namespace = namespace

    def send(self, conn, event, payload):
        self.sio.emit(event, payload, to=conn, namespace=self.namespace)

    def close(self, conn):
        # Runs the namespace's disconnect handler before returning
        self.sio.server.disconnect(conn, namespace=self.namespace)


def _get_sid() -> str:
    # type: ignore: request.sid exists in Socket.IO context
    return request.sid  # type: ignore


def _dispatcher() -> ConnectionDispatcher:
    return current_app.extensions['relay']


def handle_connect(auth=None):
    current_app.logger.debug(f"[connect] sid={_get_sid()}")


def handle_disconnect(reason=None):
    sid = _get_sid()
    current_app.logger.info(f"[disconnect] sid={sid} reason={reason}")
    _dispatcher().disconnected(sid)


def _event_handler(kind: str):
    def handler(data=None):
        _dispatcher().dispatch(_get_sid(), kind, data)
    handler.__name__ = f"handle_{kind}"
    return handler


def register_socketio_handlers(namespace: str = '/ws') -> None:
    """Register Socket.IO event handlers on ``namespace``.

    One handler per inbound kind; events without a handler are dropped by
    Socket.IO itself.
    """
    socketio.on_event('connect', handle_connect, namespace=namespace)
    socketio.on_event('disconnect', handle_disconnect, namespace=namespace)
    for kind in protocol.INBOUND_EVENTS:
        socketio.on_event(kind, _event_handler(kind), namespace=namespace)

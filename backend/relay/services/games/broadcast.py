import logging
from abc import ABC, abstractmethod
from typing import Any, Dict

from relay.models import Room

logger = logging.getLogger(__name__)


class Transport(ABC):
    """Outbound side of a client connection.

    ``conn`` is whatever handle the transport uses to address a client
    (a Socket.IO sid in production).
    """

    @abstractmethod
    def send(self, conn: str, event: str, payload: Dict[str, Any]) -> None:
        ...

    @abstractmethod
    def close(self, conn: str) -> None:
        ...


class Broadcaster:
    """Delivers events to one connection or to every connection of a room."""

    def __init__(self, transport: Transport):
        self.transport = transport

    def send(self, conn: str, event: str, payload: Dict[str, Any]) -> bool:
        try:
            self.transport.send(conn, event, payload)
            return True
        except Exception:
            # keep delivering to the rest of the room
            logger.exception(f"[send-failed] conn={conn} event={event}")
            return False

    def broadcast(self, room: Room, event: str, payload: Dict[str, Any]) -> int:
        """Send to all connections bound to ``room``; returns how many succeeded."""
        delivered = 0
        for conn in list(room.connections.values()):
            if self.send(conn, event, payload):
                delivered += 1
        return delivered

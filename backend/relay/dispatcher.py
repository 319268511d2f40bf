import logging
from typing import Any, Callable, Dict, Optional, Type

from relay import protocol
from relay.errors import MalformedCommandError, RoomFullError
from relay.services.games.broadcast import Broadcaster, Transport
from relay.services.games.registry import RoomRegistry
from relay.services.games.rooms import RoomService

logger = logging.getLogger(__name__)


class ConnectionDispatcher:
    """Routes inbound transport events to the room handlers.

    ``dispatch`` never raises: admission errors are reported to the sender
    and its connection is closed, malformed payloads and unknown kinds are
    dropped, anything else is logged.
    """

    def __init__(self, transport: Transport, registry: Optional[RoomRegistry] = None):
        self.transport = transport
        self.registry = registry if registry is not None else RoomRegistry()
        self.broadcaster = Broadcaster(transport)
        self.rooms = RoomService(self.registry, self.broadcaster)
        self._routes: Dict[Type, Callable[[str, Any], Any]] = {
            protocol.JoinCommand: lambda conn, cmd: self.rooms.join(conn, cmd.room, cmd.player_id),
            protocol.CheckJoinCommand: lambda conn, cmd: self.rooms.check_join(conn, cmd.room, cmd.player_id),
            protocol.MoveCommand: lambda conn, cmd: self.rooms.move(cmd.room, cmd.board, cmd.turn_player, cmd.move_count),
            protocol.SwitchRequestCommand: lambda conn, cmd: self.rooms.switch_request(cmd.room, cmd.player_id),
            protocol.ChatCommand: lambda conn, cmd: self.rooms.chat(cmd.room, cmd.text),
            protocol.PlayAgainCommand: lambda conn, cmd: self.rooms.play_again(cmd.room, cmd.player_id),
            protocol.SyncStateCommand: lambda conn, cmd: self.rooms.sync_state(conn, cmd.room),
        }

    def dispatch(self, conn: str, kind: str, data: Any) -> None:
        try:
            command = protocol.decode(kind, data)
        except MalformedCommandError as exc:
            logger.warning(f"[malformed] conn={conn} kind={kind} error={exc}")
            return
        if command is None:
            logger.debug(f"[unknown-kind] conn={conn} kind={kind}")
            return

        try:
            self._routes[type(command)](conn, command)
        except RoomFullError as exc:
            # Room lock is released by now; closing re-enters disconnected()
            self.broadcaster.send(conn, exc.event, {'message': exc.message})
            self.close(conn)
        except Exception:
            logger.exception(f"[handler-failed] conn={conn} kind={kind}")

    def close(self, conn: str) -> None:
        try:
            self.transport.close(conn)
        except Exception:
            logger.exception(f"[close-failed] conn={conn}")

    def disconnected(self, conn: str) -> None:
        try:
            self.rooms.disconnect(conn)
        except Exception:
            logger.exception(f"[disconnect-failed] conn={conn}")

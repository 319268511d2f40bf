"""Wire protocol: event names and typed inbound commands.

Every inbound Socket.IO event carries one JSON object. ``decode`` turns it
into one of the command dataclasses below, checking only that the fields
are present and well formed. Move legality is left to the clients.
"""
from dataclasses import dataclass
from typing import Any, Callable, Dict, List, Optional

from relay.errors import MalformedCommandError
from relay.models import BOARD_SIZE, EMPTY, MAX_MOVES, SLOTS

# Inbound
JOIN = 'join'
CHECK_JOIN = 'checkJoin'
MOVE = 'move'
SWITCH_REQUEST = 'switchRequest'
MESSAGE = 'message'
PLAY_AGAIN = 'playAgain'
SYNC_STATE = 'syncState'

# Outbound
JOIN_ALLOWED = 'joinAllowed'
JOIN_NOT_ALLOWED = 'joinNotAllowed'
ERROR = 'error'
PLAYER_NUMBER = 'playerNumber'
START = 'start'
UPDATE = 'update'
GAME_OVER = 'gameOver'
RESET = 'reset'


@dataclass(frozen=True)
class JoinCommand:
    room: str
    player_id: str


@dataclass(frozen=True)
class CheckJoinCommand:
    room: str
    player_id: str


@dataclass(frozen=True)
class MoveCommand:
    room: str
    board: List[List[int]]
    turn_player: int
    move_count: int


@dataclass(frozen=True)
class SwitchRequestCommand:
    room: str
    player_id: str


@dataclass(frozen=True)
class ChatCommand:
    room: str
    text: str


@dataclass(frozen=True)
class PlayAgainCommand:
    room: str
    player_id: str


@dataclass(frozen=True)
class SyncStateCommand:
    room: str


def _require_str(data: Dict[str, Any], key: str) -> str:
    value = data.get(key)
    if not isinstance(value, str) or not value:
        raise MalformedCommandError(f'{key} is required')
    return value


def _require_int(data: Dict[str, Any], key: str, allowed) -> int:
    value = data.get(key)
    # bool is an int subclass; true/false are not valid counters
    if isinstance(value, bool) or not isinstance(value, int) or value not in allowed:
        raise MalformedCommandError(f'{key} is invalid: {value!r}')
    return value


def _require_board(data: Dict[str, Any]) -> List[List[int]]:
    board = data.get('board')
    cells = (EMPTY,) + SLOTS
    if not isinstance(board, list) or len(board) != BOARD_SIZE:
        raise MalformedCommandError('board must have 3 rows')
    rows = []
    for row in board:
        if not isinstance(row, list) or len(row) != BOARD_SIZE:
            raise MalformedCommandError('board rows must have 3 cells')
        if any(isinstance(c, bool) or c not in cells for c in row):
            raise MalformedCommandError(f'board has an invalid cell: {row!r}')
        rows.append(list(row))
    return rows


def _join(data):
    return JoinCommand(room=_require_str(data, 'room'), player_id=_require_str(data, 'playerId'))


def _check_join(data):
    return CheckJoinCommand(room=_require_str(data, 'room'), player_id=_require_str(data, 'playerId'))


def _move(data):
    return MoveCommand(
        room=_require_str(data, 'room'),
        board=_require_board(data),
        turn_player=_require_int(data, 'turnPlayer', SLOTS),
        move_count=_require_int(data, 'moveCnt', range(MAX_MOVES)),
    )


def _switch_request(data):
    return SwitchRequestCommand(room=_require_str(data, 'room'), player_id=_require_str(data, 'playerId'))


def _chat(data):
    text = data.get('text')
    if not isinstance(text, str):
        raise MalformedCommandError('text is required')
    return ChatCommand(room=_require_str(data, 'room'), text=text)


def _play_again(data):
    return PlayAgainCommand(room=_require_str(data, 'room'), player_id=_require_str(data, 'playerId'))


def _sync_state(data):
    return SyncStateCommand(room=_require_str(data, 'room'))


DECODERS: Dict[str, Callable[[Dict[str, Any]], Any]] = {
    JOIN: _join,
    CHECK_JOIN: _check_join,
    MOVE: _move,
    SWITCH_REQUEST: _switch_request,
    MESSAGE: _chat,
    PLAY_AGAIN: _play_again,
    SYNC_STATE: _sync_state,
}

INBOUND_EVENTS = tuple(DECODERS)


def decode(kind: str, data: Any) -> Optional[Any]:
    """Decode an inbound payload; None for an unknown kind."""
    decoder = DECODERS.get(kind)
    if decoder is None:
        return None
    if not isinstance(data, dict):
        raise MalformedCommandError(f'{kind} payload must be an object')
    return decoder(data)

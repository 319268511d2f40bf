"""Room handlers: admission, moves, sync, rematch and seat swap.

Each public method is one inbound operation. It runs with the room lock
held for its whole duration, broadcast included, so events for a room are
applied one at a time. Admission failures are raised as RoomFullError
after any bookkeeping is done; the caller reports them and closes the
connection once the lock is released.
"""
import logging
from typing import Any, Dict, List

from relay import protocol
from relay.errors import RoomFullError
from relay.models import MAX_MOVES, SLOTS, Room, other_slot
from .broadcast import Broadcaster
from .registry import RoomRegistry
from .rules import check_win, terminal_status

logger = logging.getLogger(__name__)

ROOM_FULL_CHECK = 'Room is full.'
ROOM_FULL_JOIN = 'Room is full. You will be redirected to the homepage.'
ROOM_FREE = 'Room is free to join.'
BOTH_CONNECTED = 'Both players connected!'
SLOTS_SWITCHED = 'Player numbers have been switched!'


def build_snapshot(room: Room) -> Dict[str, Any]:
    """Full state of a room as sent in ``syncState``."""
    winner, game_over = terminal_status(room.board, room.move_count)
    return {
        'board': [list(row) for row in room.board],
        'turnPlayer': room.turn_player,
        'moves': room.move_count,
        'player1': room.slot_a,
        'player2': room.slot_b,
        'winnerPlayer': winner,
        'gameOver': game_over,
        'readyToPlayAgain': {pid: True for pid in sorted(room.rematch_ready)},
        'connections': len(room.connections),
    }


class RoomService:

    def __init__(self, registry: RoomRegistry, broadcaster: Broadcaster):
        self.registry = registry
        self.broadcaster = broadcaster

    def check_join(self, conn: str, room_id: str, player_id: str) -> None:
        """Reserve a connection entry ahead of ``join`` without taking a slot."""
        with self.registry.locked(room_id, create=True) as room:
            if len(room.connections) >= 2:
                logger.warning(f"[check-join-reject] room={room_id} player={player_id}")
                raise RoomFullError(room_id, protocol.JOIN_NOT_ALLOWED, ROOM_FULL_CHECK)
            room.connections[player_id] = conn
            self.broadcaster.send(conn, protocol.JOIN_ALLOWED, {'message': ROOM_FREE})

    def join(self, conn: str, room_id: str, player_id: str) -> None:
        with self.registry.locked(room_id, create=True) as room:
            # A known id on a new connection is a reconnect: the old handle is replaced
            room.connections[player_id] = conn

            slot = room.seat(player_id)
            if slot is None:
                logger.warning(f"[join-reject] room={room_id} player={player_id} reason=full")
                raise RoomFullError(room_id, protocol.ERROR, ROOM_FULL_JOIN)
            logger.info(f"[join] room={room_id} player={player_id} slot={slot}")

            self.broadcaster.send(conn, protocol.PLAYER_NUMBER, {'playerNumber': slot, 'playerId': player_id})
            self.broadcaster.send(conn, protocol.SYNC_STATE, build_snapshot(room))

            if room.is_full:
                self.broadcaster.broadcast(room, protocol.START, {'message': BOTH_CONNECTED})

    def move(self, room_id: str, board, turn_player: int, move_count: int) -> bool:
        """Apply a submitted board as-is and announce the result.

        ``turn_player`` is the slot that just moved and ``move_count`` the
        count before this move. Neither is checked against the room.
        """
        with self.registry.locked(room_id) as room:
            if room is None:
                logger.warning(f"[move-ignored] room={room_id} reason=unknown-room")
                return False
            room.board = [list(row) for row in board]
            room.move_count = move_count + 1
            room.turn_player = other_slot(turn_player)

            won = check_win(room.board, turn_player)
            if won or room.move_count == MAX_MOVES:
                winner = turn_player if won else 0
                logger.info(f"[game-over] room={room_id} winner={winner} moves={room.move_count}")
                self.broadcaster.broadcast(room, protocol.GAME_OVER, {
                    'winner': winner,
                    'board': room.board,
                    'newMoveCnt': room.move_count,
                })
            else:
                self.broadcaster.broadcast(room, protocol.UPDATE, {
                    'board': room.board,
                    'turnPlayer': room.turn_player,
                    'newMoveCnt': room.move_count,
                })
            return True

    def sync_state(self, conn: str, room_id: str) -> bool:
        with self.registry.locked(room_id) as room:
            if room is None:
                logger.warning(f"[sync-ignored] room={room_id} reason=unknown-room")
                return False
            self.broadcaster.send(conn, protocol.SYNC_STATE, build_snapshot(room))
            return True

    def play_again(self, room_id: str, player_id: str) -> bool:
        """Record rematch intent; reset the board once both seated players agree.

        Returns True when the reset happened.
        """
        with self.registry.locked(room_id) as room:
            if room is None:
                logger.warning(f"[play-again-ignored] room={room_id} reason=unknown-room")
                return False
            room.rematch_ready.add(player_id)
            if not room.all_seated_in(room.rematch_ready):
                logger.info(f"[play-again-wait] room={room_id} player={player_id}")
                return False
            room.reset_board()
            logger.info(f"[reset] room={room_id}")
            self.broadcaster.broadcast(room, protocol.RESET, {})
            return True

    def switch_request(self, room_id: str, player_id: str) -> bool:
        """Record seat-swap intent; swap slots once both seated players agree."""
        with self.registry.locked(room_id) as room:
            if room is None:
                logger.warning(f"[switch-ignored] room={room_id} reason=unknown-room")
                return False
            room.switch_pending.add(player_id)
            if not room.all_seated_in(room.switch_pending):
                return False
            room.swap_slots()
            room.switch_pending.clear()
            logger.info(f"[switch] room={room_id} player1={room.slot_a} player2={room.slot_b}")

            for slot in SLOTS:
                occupant = room.occupant(slot)
                conn = room.connections.get(occupant)
                if conn is not None:
                    self.broadcaster.send(conn, protocol.PLAYER_NUMBER, {'playerNumber': slot, 'playerId': occupant})
            self.broadcaster.broadcast(room, protocol.MESSAGE, {'text': SLOTS_SWITCHED})
            return True

    def chat(self, room_id: str, text: str) -> bool:
        with self.registry.locked(room_id) as room:
            if room is None:
                logger.warning(f"[chat-ignored] room={room_id} reason=unknown-room")
                return False
            self.broadcaster.broadcast(room, protocol.MESSAGE, {'text': text})
            return True

    def disconnect(self, conn: str) -> List[str]:
        """Unbind a closed connection and free its slot in every room.

        Returns the ids of the rooms the connection belonged to. A room is
        deleted once neither slot is occupied.
        """
        left = []
        for room in self.registry.snapshot():
            with room.lock:
                if room.closed:
                    continue
                player_id = room.player_for_connection(conn)
                if player_id is None:
                    continue
                del room.connections[player_id]
                slot = room.vacate(player_id)
                logger.info(f"[leave] room={room.room_id} player={player_id} slot={slot}")
                if room.is_empty:
                    self.registry.delete(room.room_id, room)
                left.append(room.room_id)
        return left

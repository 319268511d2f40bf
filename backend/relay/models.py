import threading
from typing import Dict, List, Optional, Set

# Cell values double as slot numbers on the wire: mark A belongs to slot 1
EMPTY = 0
SLOT_A = 1
SLOT_B = 2
SLOTS = (SLOT_A, SLOT_B)
BOARD_SIZE = 3
MAX_MOVES = BOARD_SIZE * BOARD_SIZE


def empty_board() -> List[List[int]]:
    return [[EMPTY] * BOARD_SIZE for _ in range(BOARD_SIZE)]


def other_slot(slot: int) -> int:
    return SLOT_B if slot == SLOT_A else SLOT_A


class Room:
    """State of one two-seat session.

    Rooms are owned by the RoomRegistry. Callers mutate a room only while
    holding ``room.lock``; ``closed`` is set once the registry has dropped
    the room so late handlers can tell it apart from a live one.
    """

    def __init__(self, room_id: str):
        self.room_id = room_id
        self.slot_a: Optional[str] = None
        self.slot_b: Optional[str] = None
        self.board = empty_board()
        self.turn_player = SLOT_A
        self.move_count = 0
        # player id -> connection handle (Socket.IO sid)
        self.connections: Dict[str, str] = {}
        self.rematch_ready: Set[str] = set()
        self.switch_pending: Set[str] = set()
        self.lock = threading.RLock()
        self.closed = False

    def __repr__(self):
        return f"<Room {self.room_id!r} a={self.slot_a!r} b={self.slot_b!r} moves={self.move_count}>"

    @property
    def is_full(self) -> bool:
        return self.slot_a is not None and self.slot_b is not None

    @property
    def is_empty(self) -> bool:
        return self.slot_a is None and self.slot_b is None

    def occupant(self, slot: int) -> Optional[str]:
        return self.slot_a if slot == SLOT_A else self.slot_b

    def slot_of(self, player_id: str) -> Optional[int]:
        if player_id is None:
            return None
        if self.slot_a == player_id:
            return SLOT_A
        if self.slot_b == player_id:
            return SLOT_B
        return None

    def seat(self, player_id: str) -> Optional[int]:
        """Put ``player_id`` in the first free slot, A before B.

        A player already seated keeps its slot. Returns the slot held
        afterwards, or None when both slots belong to someone else.
        """
        current = self.slot_of(player_id)
        if current is not None:
            return current
        if self.slot_a is None:
            self.slot_a = player_id
            return SLOT_A
        if self.slot_b is None:
            self.slot_b = player_id
            return SLOT_B
        return None

    def vacate(self, player_id: str) -> Optional[int]:
        slot = self.slot_of(player_id)
        if slot == SLOT_A:
            self.slot_a = None
        elif slot == SLOT_B:
            self.slot_b = None
        return slot

    def swap_slots(self) -> None:
        self.slot_a, self.slot_b = self.slot_b, self.slot_a

    def all_seated_in(self, intents: Set[str]) -> bool:
        """True when both slots are taken and both occupants are in ``intents``."""
        return self.is_full and self.slot_a in intents and self.slot_b in intents

    def reset_board(self) -> None:
        self.board = empty_board()
        self.turn_player = SLOT_A
        self.move_count = 0
        self.rematch_ready.clear()

    def player_for_connection(self, conn: str) -> Optional[str]:
        for player_id, handle in self.connections.items():
            if handle == conn:
                return player_id
        return None

    def to_dict(self):
        return {
            'room': self.room_id,
            'player1': self.slot_a,
            'player2': self.slot_b,
            'connections': len(self.connections),
            'moves': self.move_count,
        }

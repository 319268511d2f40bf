import logging
import threading
from contextlib import contextmanager
from typing import Dict, Iterator, List, Optional

from relay.models import Room

logger = logging.getLogger(__name__)


class RoomRegistry:
    """Process-wide map of room id -> Room.

    The registry lock only guards the mapping. It is never held while a
    room lock is awaited, so handlers may call ``delete`` with their room
    locked.
    """

    def __init__(self):
        self._rooms: Dict[str, Room] = {}
        self._lock = threading.Lock()

    def __len__(self):
        with self._lock:
            return len(self._rooms)

    def __contains__(self, room_id):
        with self._lock:
            return room_id in self._rooms

    def get(self, room_id: str) -> Optional[Room]:
        with self._lock:
            return self._rooms.get(room_id)

    def get_or_create(self, room_id: str) -> Room:
        with self._lock:
            room = self._rooms.get(room_id)
            if room is None:
                room = Room(room_id)
                self._rooms[room_id] = room
                logger.info(f"[room-create] room={room_id}")
            return room

    def delete(self, room_id: str, room: Optional[Room] = None) -> None:
        """Drop ``room_id``. Idempotent.

        When ``room`` is given, only that instance is removed; a newer room
        registered under the same id is left alone.
        """
        with self._lock:
            current = self._rooms.get(room_id)
            if current is None or (room is not None and current is not room):
                return
            del self._rooms[room_id]
            current.closed = True
        logger.info(f"[room-delete] room={room_id}")

    def snapshot(self) -> List[Room]:
        with self._lock:
            return list(self._rooms.values())

    @contextmanager
    def locked(self, room_id: str, create: bool = False) -> Iterator[Optional[Room]]:
        """Yield the live room for ``room_id`` with its lock held.

        With ``create`` the room is made if absent; a room closed between
        lookup and locking is looked up again. Without ``create`` an absent
        or closed room yields None.
        """
        room = None
        while True:
            room = self.get_or_create(room_id) if create else self.get(room_id)
            if room is None:
                break
            room.lock.acquire()
            if not room.closed:
                break
            room.lock.release()
            room = None
            if not create:
                break
        try:
            yield room
        finally:
            if room is not None:
                room.lock.release()

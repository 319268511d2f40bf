class RelayError(Exception):
    """Base class for errors raised while handling a relay event."""


class MalformedCommandError(RelayError):
    """Inbound payload is missing fields or has the wrong shape."""


class RoomFullError(RelayError):
    """Admission refused; ``event`` is what the rejected connection receives."""

    def __init__(self, room_id: str, event: str, message: str):
        super().__init__(message)
        self.room_id = room_id
        self.event = event
        self.message = message

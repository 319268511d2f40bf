from flask import Blueprint, current_app, jsonify

from relay.services.games.rooms import build_snapshot

rooms = Blueprint('rooms', __name__)


def _registry():
    return current_app.extensions['relay'].registry


@rooms.route('/', methods=['GET'])
def list_rooms():
    """
    Returns a summary of every live room. Read-only: never creates rooms.
    """
    summaries = []
    for room in _registry().snapshot():
        with room.lock:
            if room.closed:
                continue
            summaries.append(room.to_dict())
    summaries.sort(key=lambda r: r['room'])
    return jsonify(summaries), 200


@rooms.route('/<string:room_id>/state', methods=['GET'])
def get_room_state(room_id):
    """
    Returns the same snapshot a client receives in ``syncState``.
    """
    with _registry().locked(room_id) as room:
        if room is None:
            return jsonify({'error': 'Room not found'}), 404
        state = build_snapshot(room)
    state['room'] = room_id
    return jsonify(state), 200

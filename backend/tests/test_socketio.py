NAMESPACE = '/ws'

EMPTY_BOARD = [[0, 0, 0], [0, 0, 0], [0, 0, 0]]


def _drain(sio_client):
    """Return (event, payload) pairs received since the last call."""
    out = []
    for pkt in sio_client.get_received(NAMESPACE):
        args = pkt['args']
        # 'message' packets carry the payload directly, others as a list
        if isinstance(args, list):
            args = args[0] if args else None
        out.append((pkt['name'], args))
    return out


def _named(events, name):
    return [payload for event, payload in events if event == name]


def _join(sio_client, room, player_id):
    sio_client.emit('join', {'room': room, 'playerId': player_id}, namespace=NAMESPACE)


def test_socket_connect_and_join(sio_factory):
    p1 = sio_factory()
    assert p1.is_connected(NAMESPACE)

    _join(p1, 'R1', 'p1')
    events = _drain(p1)
    assert _named(events, 'playerNumber') == [{'playerNumber': 1, 'playerId': 'p1'}]
    snap = _named(events, 'syncState')[0]
    assert snap['player1'] == 'p1'
    assert snap['player2'] is None
    assert snap['connections'] == 1
    assert _named(events, 'start') == []


def test_full_game_rematch_scenario(sio_factory):
    p1, p2 = sio_factory(), sio_factory()
    _join(p1, 'R1', 'p1')
    _join(p2, 'R1', 'p2')

    e1, e2 = _drain(p1), _drain(p2)
    assert _named(e1, 'playerNumber')[0]['playerNumber'] == 1
    assert _named(e2, 'playerNumber')[0]['playerNumber'] == 2
    assert len(_named(e1, 'start')) == 1
    assert len(_named(e2, 'start')) == 1

    winning = [[1, 1, 1], [2, 2, 0], [0, 0, 0]]
    p1.emit('move', {'room': 'R1', 'board': winning, 'turnPlayer': 1, 'moveCnt': 4}, namespace=NAMESPACE)
    for sio_client in (p1, p2):
        over = _named(_drain(sio_client), 'gameOver')
        assert over == [{'winner': 1, 'board': winning, 'newMoveCnt': 5}]

    p1.emit('playAgain', {'room': 'R1', 'playerId': 'p1'}, namespace=NAMESPACE)
    assert _named(_drain(p2), 'reset') == []
    p2.emit('playAgain', {'room': 'R1', 'playerId': 'p2'}, namespace=NAMESPACE)
    assert len(_named(_drain(p1), 'reset')) == 1
    assert len(_named(_drain(p2), 'reset')) == 1

    p2.emit('syncState', {'room': 'R1'}, namespace=NAMESPACE)
    snap = _named(_drain(p2), 'syncState')[0]
    assert snap['board'] == EMPTY_BOARD
    assert snap['moves'] == 0
    assert snap['turnPlayer'] == 1
    assert snap['gameOver'] is False


def test_third_player_is_disconnected(sio_factory, client):
    p1, p2, p3 = sio_factory(), sio_factory(), sio_factory()
    _join(p1, 'R1', 'p1')
    _join(p2, 'R1', 'p2')
    _join(p3, 'R1', 'p3')

    assert not p3.is_connected(NAMESPACE)
    assert p1.is_connected(NAMESPACE)
    state = client.get('/api/rooms/R1/state').get_json()
    assert state['player1'] == 'p1'
    assert state['player2'] == 'p2'
    assert state['connections'] == 2


def test_check_join_probe(sio_factory):
    probe = sio_factory()
    probe.emit('checkJoin', {'room': 'R9', 'playerId': 'p1'}, namespace=NAMESPACE)
    events = _drain(probe)
    assert [name for name, _ in events] == ['joinAllowed']


def test_move_update_and_chat(sio_factory):
    p1, p2 = sio_factory(), sio_factory()
    _join(p1, 'R1', 'p1')
    _join(p2, 'R1', 'p2')
    _drain(p1), _drain(p2)

    board = [[0, 0, 0], [0, 1, 0], [0, 0, 0]]
    p1.emit('move', {'room': 'R1', 'board': board, 'turnPlayer': 1, 'moveCnt': 0}, namespace=NAMESPACE)
    assert _named(_drain(p2), 'update') == [{'board': board, 'turnPlayer': 2, 'newMoveCnt': 1}]

    p2.emit('message', {'room': 'R1', 'text': 'nice'}, namespace=NAMESPACE)
    assert _named(_drain(p1), 'message') == [{'text': 'nice'}]
    assert _named(_drain(p2), 'message') == [{'text': 'nice'}]


def test_switch_seats(sio_factory):
    p1, p2 = sio_factory(), sio_factory()
    _join(p1, 'R1', 'p1')
    _join(p2, 'R1', 'p2')
    _drain(p1), _drain(p2)

    p1.emit('switchRequest', {'room': 'R1', 'playerId': 'p1'}, namespace=NAMESPACE)
    assert _drain(p2) == []
    p2.emit('switchRequest', {'room': 'R1', 'playerId': 'p2'}, namespace=NAMESPACE)

    e1, e2 = _drain(p1), _drain(p2)
    assert _named(e1, 'playerNumber') == [{'playerNumber': 2, 'playerId': 'p1'}]
    assert _named(e2, 'playerNumber') == [{'playerNumber': 1, 'playerId': 'p2'}]
    assert _named(e1, 'message') == [{'text': 'Player numbers have been switched!'}]


def test_reconnect_keeps_board(sio_factory):
    p1, p2 = sio_factory(), sio_factory()
    _join(p1, 'R1', 'p1')
    _join(p2, 'R1', 'p2')
    board = [[1, 0, 0], [0, 0, 0], [0, 0, 0]]
    p1.emit('move', {'room': 'R1', 'board': board, 'turnPlayer': 1, 'moveCnt': 0}, namespace=NAMESPACE)

    p1.disconnect(namespace=NAMESPACE)
    again = sio_factory()
    _join(again, 'R1', 'p1')
    events = _drain(again)
    assert _named(events, 'playerNumber') == [{'playerNumber': 1, 'playerId': 'p1'}]
    snap = _named(events, 'syncState')[0]
    assert snap['board'] == board
    assert snap['turnPlayer'] == 2
    assert snap['moves'] == 1
    assert len(_named(_drain(p2), 'start')) == 2


def test_last_player_leaving_removes_room(flask_app, sio_factory, client):
    p1, p2 = sio_factory(), sio_factory()
    _join(p1, 'R1', 'p1')
    _join(p2, 'R1', 'p2')
    assert client.get('/api/rooms/R1/state').status_code == 200

    p1.disconnect(namespace=NAMESPACE)
    p2.disconnect(namespace=NAMESPACE)
    assert client.get('/api/rooms/R1/state').status_code == 404
    assert 'R1' not in flask_app.extensions['relay'].registry


def test_unknown_event_is_ignored(sio_factory):
    p1 = sio_factory()
    p1.emit('dance', {'room': 'R1'}, namespace=NAMESPACE)
    p1.emit('move', {'room': 'R1'}, namespace=NAMESPACE)
    assert _drain(p1) == []
    assert p1.is_connected(NAMESPACE)

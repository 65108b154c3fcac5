from conftest import ALICE, BOB


def _events(sio_client, name):
    return [pkt for pkt in sio_client.get_received('/ws') if pkt['name'] == name]


def test_socket_connect_and_ping(sio_client):
    assert sio_client.is_connected('/ws')
    sio_client.emit('ping', {'n': 1}, namespace='/ws')
    pongs = _events(sio_client, 'pong')
    assert pongs and pongs[0]['args'][0] == {'n': 1}


def test_join_unknown_match(sio_client):
    sio_client.emit('join_match', {'matchId': '999999'}, namespace='/ws')
    errors = _events(sio_client, 'error')
    assert errors and errors[0]['args'][0]['kind'] == 'NotFound'


def test_join_requires_match_id(sio_client):
    sio_client.emit('join_match', {}, namespace='/ws')
    assert _events(sio_client, 'error')


def test_moves_are_pushed_to_room(client, sio_client):
    match_id = client.post('/api/matches/create', json={'playerA': ALICE}).get_json()['matchId']

    sio_client.emit('join_match', {'matchId': match_id}, namespace='/ws')
    joined = _events(sio_client, 'joined')
    assert joined[0]['args'][0]['room'] == f'match:{match_id}'
    assert joined[0]['args'][0]['game']['status'] == 'WAITING'

    client.post('/api/matches/join', json={'matchId': match_id, 'playerB': BOB})
    client.post(f'/api/matches/{match_id}/move', json={'player': ALICE, 'index': 4})
    updates = _events(sio_client, 'state_update')
    assert [u['args'][0]['game']['status'] for u in updates] == ['PLAYING', 'PLAYING']
    assert updates[-1]['args'][0]['matchId'] == match_id
    assert updates[-1]['args'][0]['game']['board'][4] == 'X'


def test_leave_match_stops_updates(client, sio_client):
    match_id = client.post('/api/matches/create', json={'playerA': ALICE}).get_json()['matchId']
    sio_client.emit('join_match', {'matchId': match_id}, namespace='/ws')
    sio_client.emit('leave_match', {'matchId': match_id}, namespace='/ws')
    assert _events(sio_client, 'left')
    client.post('/api/matches/join', json={'matchId': match_id, 'playerB': BOB})
    assert not _events(sio_client, 'state_update')

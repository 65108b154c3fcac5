from flask_socketio import join_room, leave_room, emit
from referee import socketio, get_engine


def handle_connect():
    emit('connected', {'message': 'Connected to /ws'})


def handle_join_match(data):
    match_id = (data or {}).get('matchId')
    if not match_id:
        emit('error', {'message': 'matchId is required', 'kind': 'BadRequest'})
        return
    match = get_engine().registry.get(str(match_id))
    if match is None:
        emit('error', {'message': 'Game not found', 'kind': 'NotFound'})
        return
    room = f"match:{match.match_id}"
    join_room(room)
    # Send the current view right away so the client does not wait for the next move
    emit('joined', {'room': room, 'game': match.to_dict()})


def handle_leave_match(data):
    match_id = (data or {}).get('matchId')
    if not match_id:
        emit('error', {'message': 'matchId is required', 'kind': 'BadRequest'})
        return
    room = f"match:{match_id}"
    leave_room(room)
    emit('left', {'room': room})


def handle_ping(data):
    emit('pong', data or {})


def register_socketio_handlers() -> None:
    """Register Socket.IO event handlers on namespace '/ws'."""
    socketio.on_event('connect', handle_connect, namespace='/ws')
    socketio.on_event('join_match', handle_join_match, namespace='/ws')
    socketio.on_event('leave_match', handle_leave_match, namespace='/ws')
    socketio.on_event('ping', handle_ping, namespace='/ws')

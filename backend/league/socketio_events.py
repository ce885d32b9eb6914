from flask_socketio import join_room, leave_room, emit


def handle_connect():
    emit('connected', {'message': 'Connected to /ws'})


def _tournament_room(data):
    tournament_id = (data or {}).get('tournament_id')
    try:
        return f"tournament:{int(tournament_id)}"
    except (TypeError, ValueError):
        emit('error', {'message': 'tournament_id is required'})
        return None


def handle_join_tournament(data):
    room = _tournament_room(data)
    if not room:
        return
    join_room(room)
    emit('joined', {'room': room})


def handle_leave_tournament(data):
    room = _tournament_room(data)
    if not room:
        return
    leave_room(room)
    emit('left', {'room': room})


def handle_ping(data):
    emit('pong', data or {})


def register_socketio_handlers(testing: bool = False) -> None:
    """Register Socket.IO event handlers.

    Always register on namespace '/ws'. When testing is True, also mirror
    handlers on the default namespace '/' to accommodate the test harness.
    """
    from league import socketio

    for namespace in (['/ws', '/'] if testing else ['/ws']):
        socketio.on_event('connect', handle_connect, namespace=namespace)
        socketio.on_event('join_tournament', handle_join_tournament, namespace=namespace)
        socketio.on_event('leave_tournament', handle_leave_tournament, namespace=namespace)
        socketio.on_event('ping', handle_ping, namespace=namespace)

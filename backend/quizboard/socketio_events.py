from flask_socketio import join_room, emit
from flask import request
from quizboard import socketio
from quizboard.broadcaster import NAMESPACE, dispatch
from quizboard.services.games import get_engine
from quizboard.services.games.engine import room_for
from quizboard.services.games.store import normalize_code

DEFAULT_NAME = 'Player'


def _get_sid() -> str:
    # type: ignore: request.sid exists in Socket.IO context
    return request.sid  # type: ignore


def _as_int(value):
    # JSON numbers only; bools, floats and numeric strings are rejected
    if isinstance(value, int) and not isinstance(value, bool):
        return value
    return None


def _join(game_code: str, player_id: str, name: str) -> None:
    engine = get_engine()
    if engine.store.get(game_code) is None:
        return
    room = room_for(game_code)
    join_room(room)
    emit('joined', {'room': room, 'game_code': game_code, 'player_id': player_id})
    dispatch(engine.join(game_code, player_id, name, connection_id=_get_sid()))


def handle_connect(auth=None):
    emit('connected', {'message': f'Connected to {NAMESPACE}'})
    # A reconnecting client replays its earlier join through the auth payload
    auth = auth or {}
    game_code = normalize_code(auth.get('game_code'))
    player_id = auth.get('player_id')
    if game_code and player_id:
        _join(game_code, str(player_id), auth.get('name') or DEFAULT_NAME)


def handle_disconnect(reason=None):
    dispatch(get_engine().disconnect(_get_sid()))


def handle_join_game(data):
    data = data or {}
    game_code = normalize_code(data.get('game_code'))
    player_id = data.get('player_id')
    if not game_code:
        emit('error', {'message': 'game_code is required'})
        return
    if not player_id:
        emit('error', {'message': 'player_id is required'})
        return
    _join(game_code, str(player_id), data.get('name') or DEFAULT_NAME)


def _command_context(data):
    """Resolve (game_code, player_id) for a command, or None to ignore it."""
    game_code = normalize_code((data or {}).get('game_code'))
    if not game_code:
        emit('error', {'message': 'game_code is required'})
        return None
    return game_code, get_engine().store.player_for(_get_sid())


def handle_roll_dice(data):
    ctx = _command_context(data)
    if not ctx or ctx[1] is None:
        return
    game_code, player_id = ctx
    dispatch(get_engine().roll_dice(game_code, player_id))


def handle_answer_question(data):
    ctx = _command_context(data)
    if not ctx or ctx[1] is None:
        return
    game_code, player_id = ctx
    question_id = _as_int(data.get('question_id'))
    option_index = _as_int(data.get('option_index'))
    if question_id is None or option_index is None:
        return
    dispatch(get_engine().answer_question(game_code, player_id, question_id, option_index))


def handle_restart_game(data):
    ctx = _command_context(data)
    if not ctx:
        return
    dispatch(get_engine().restart(ctx[0]))


def handle_ping(data):
    emit('pong', data or {})


def register_socketio_handlers() -> None:
    """Register Socket.IO event handlers on the game namespace."""
    socketio.on_event('connect', handle_connect, namespace=NAMESPACE)
    socketio.on_event('disconnect', handle_disconnect, namespace=NAMESPACE)
    socketio.on_event('join_game', handle_join_game, namespace=NAMESPACE)
    socketio.on_event('roll_dice', handle_roll_dice, namespace=NAMESPACE)
    socketio.on_event('answer_question', handle_answer_question, namespace=NAMESPACE)
    socketio.on_event('restart_game', handle_restart_game, namespace=NAMESPACE)
    socketio.on_event('ping', handle_ping, namespace=NAMESPACE)

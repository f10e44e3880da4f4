from flask import Blueprint, jsonify, current_app
from quizboard.errors import CreationFailure
from quizboard.models import load_questions
from quizboard.services.games import get_engine


games = Blueprint('games', __name__)


@games.route('/create', methods=['POST'])
def create_game():
    """
    Creates a new game session and returns its shareable code.
    """
    try:
        questions = load_questions()
        game_code = get_engine().create_session(questions)
    except CreationFailure as exc:
        current_app.logger.warning(f"[create-failed] {exc}")
        return jsonify({'error': 'Could not create game', 'detail': str(exc)}), 503
    return jsonify({
        'message': 'New game created!',
        'game_code': game_code
    }), 201


@games.route('/<string:game_code>/state', methods=['GET'])
def get_game_state(game_code):
    """
    Returns the full state snapshot of a game, as broadcast over the socket.
    """
    state = get_engine().snapshot(game_code)
    if state is None:
        return jsonify({'error': 'Game not found'}), 404
    return jsonify(state), 200

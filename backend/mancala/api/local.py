from flask import Blueprint, current_app, jsonify, request, session
from mancala.errors import MancalaError
from mancala.services.games.local import LocalGame

local = Blueprint('local', __name__)

# Key of the hot-seat game inside the signed session cookie
SESSION_KEY = 'local_game'


def _load_game() -> LocalGame:
    state = session.get(SESSION_KEY)
    if state:
        try:
            return LocalGame.from_state(state)
        except (KeyError, TypeError, ValueError):
            current_app.logger.warning("[local] discarding unreadable game in session")
    return _new_game()


def _new_game() -> LocalGame:
    game = LocalGame(stones_per_pit=int(current_app.config.get('STONES_PER_PIT', 4)))
    _save_game(game)
    return game


def _save_game(game: LocalGame) -> None:
    session[SESSION_KEY] = {'board': game.board.to_list(), 'currentPlayer': game.board.current_player}


@local.route('/state', methods=['GET'])
def get_state():
    return jsonify(_load_game().to_state())


@local.route('/new', methods=['POST'])
def new_game():
    """Throw away the current hot-seat game and start over."""
    return jsonify(_new_game().to_state()), 201


@local.route('/move', methods=['POST'])
def make_move():
    data = request.get_json(silent=True) or {}
    game = _load_game()
    if 'pitIndex' not in data:
        return jsonify({'error': 'pitIndex is required', **game.to_state()}), 400
    try:
        state = game.submit(data.get('pitIndex'))
    except MancalaError as exc:
        current_app.logger.info(f"[local-move-rejected] pit={data.get('pitIndex')!r} {exc.message}")
        return jsonify({'error': exc.message, **game.to_state()}), 400
    _save_game(game)
    return jsonify(state)

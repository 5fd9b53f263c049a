"""Hot-seat play: both players share one process and alternate at the same screen."""

import logging
from typing import Optional

from mancala.errors import GameAlreadyOver, InvalidMove
from mancala.models import NO_WINNER
from .board import DEFAULT_STONES_PER_PIT, NUM_SLOTS, Board
from .rules import apply_move, is_terminal, winner_of

logger = logging.getLogger(__name__)


def status_message(board: Board) -> str:
    if is_terminal(board):
        winner = winner_of(board)
        if winner is None:
            return "Game Over! It's a draw!"
        return f"Game Over! Player {winner + 1} wins!"
    return f"It's Player {board.current_player + 1}'s turn."


def _parse_pit(value) -> int:
    """Pit number from a JSON int or a typed-in string; floats and booleans are refused."""
    if isinstance(value, int) and not isinstance(value, bool):
        return value
    if isinstance(value, str) and value.strip().isdigit():
        return int(value.strip())
    raise InvalidMove(f"Choose a pit number between 0 and {NUM_SLOTS - 2}")


class LocalGame:
    """A single game where whoever holds the turn submits the next pit."""

    def __init__(self, board: Optional[Board] = None, stones_per_pit: int = DEFAULT_STONES_PER_PIT):
        self.board = board if board is not None else Board.initial(stones_per_pit)

    @classmethod
    def from_state(cls, state) -> 'LocalGame':
        """Rebuild from the dict produced by ``to_state``."""
        slots = tuple(int(s) for s in state['board'])
        return cls(Board(slots=slots, current_player=int(state['currentPlayer'])))

    @property
    def finished(self) -> bool:
        return is_terminal(self.board)

    def submit(self, pit_index):
        """Play ``pit_index`` for the player to move and return the rendered state.

        Raises InvalidMove or GameAlreadyOver with a message meant for the
        players; the board is left untouched in that case.
        """
        if self.finished:
            raise GameAlreadyOver('The game has already finished. Start a new game.')
        pit_index = _parse_pit(pit_index)
        result = apply_move(self.board, self.board.current_player, pit_index)
        self.board = result.board
        logger.debug("Local move %d -> %s", pit_index, result.outcome.value)
        return self.to_state()

    def to_state(self):
        winner = winner_of(self.board) if self.finished else None
        return {
            'board': self.board.to_list(),
            'currentPlayer': self.board.current_player,
            'gameOver': self.finished,
            'winner': NO_WINNER if winner is None else winner,
            'statusMessage': status_message(self.board),
        }

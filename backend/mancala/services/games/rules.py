"""
Kalah rules.

- Counter-clockwise sowing that skips the opponent's store
- Extra turn when the last stone lands in the mover's store
- Capture when the last stone lands in an empty own pit
- Game ends when one side's pits are empty; the rest is swept home
"""

import logging
from dataclasses import dataclass
from enum import Enum
from typing import List, Optional

from mancala.errors import GameAlreadyOver, InvalidMove, NotYourTurn
from .board import (
    NUM_SLOTS,
    Board,
    is_store,
    opposite_pit,
    owner_of,
    pits_of,
    store_of,
)

logger = logging.getLogger(__name__)


class MoveOutcome(str, Enum):
    EXTRA_TURN = 'EXTRA_TURN'
    TURN_SWITCH = 'TURN_SWITCH'
    GAME_OVER = 'GAME_OVER'


@dataclass(frozen=True)
class MoveResult:
    board: Board
    outcome: MoveOutcome
    last_slot: int
    captured: int = 0
    # Only meaningful when outcome is GAME_OVER; None there means a draw
    winner: Optional[int] = None

    @property
    def finished(self) -> bool:
        return self.outcome is MoveOutcome.GAME_OVER


def legal_moves(board: Board) -> List[int]:
    """Non-empty pits of the player to move; empty once the game is over."""
    if is_terminal(board):
        return []
    return [p for p in pits_of(board.current_player) if board.slots[p] > 0]


def is_terminal(board: Board) -> bool:
    return board.side_empty(0) or board.side_empty(1)


def winner_of(board: Board) -> Optional[int]:
    """Player with the larger store, None on equal stores."""
    if board.store(0) > board.store(1):
        return 0
    if board.store(1) > board.store(0):
        return 1
    return None


def validate_move(board: Board, player: int, pit_index: int) -> None:
    """Raise the error ``apply_move`` would raise for this move, if any."""
    if is_terminal(board):
        raise GameAlreadyOver()
    if player != board.current_player:
        raise NotYourTurn(f"It is Player {board.current_player + 1}'s turn")
    if not isinstance(pit_index, int) or isinstance(pit_index, bool):
        raise InvalidMove(f"Pit index must be an integer, got {pit_index!r}")
    if not 0 <= pit_index < NUM_SLOTS:
        raise InvalidMove(f"Pit {pit_index} does not exist")
    if is_store(pit_index):
        raise InvalidMove(f"Pit {pit_index} is a store and cannot be played")
    if owner_of(pit_index) != player:
        raise InvalidMove(f"Pit {pit_index} does not belong to Player {player + 1}")
    if board.slots[pit_index] == 0:
        raise InvalidMove(f"Pit {pit_index} is empty")


def _sweep(slots: List[int]) -> None:
    for player in (0, 1):
        store = store_of(player)
        for pit in pits_of(player):
            slots[store] += slots[pit]
            slots[pit] = 0


def apply_move(board: Board, player: int, pit_index: int) -> MoveResult:
    """
    Play ``pit_index`` for ``player`` and return the resulting board.

    The input board is never modified. On a terminal result every remaining
    pit stone has already been swept into its owner's store and
    ``current_player`` is left as the mover.

    Raises:
        GameAlreadyOver: the board is terminal
        NotYourTurn: ``player`` is not the player to move
        InvalidMove: store, foreign, empty or out-of-range pit
    """
    validate_move(board, player, pit_index)

    slots = list(board.slots)
    own_store = store_of(player)
    opponent_store = store_of(1 - player)

    in_hand = slots[pit_index]
    slots[pit_index] = 0
    pos = pit_index
    while in_hand > 0:
        pos = (pos + 1) % NUM_SLOTS
        if pos == opponent_store:
            continue
        slots[pos] += 1
        in_hand -= 1

    captured = 0
    if pos == own_store:
        outcome = MoveOutcome.EXTRA_TURN
    else:
        outcome = MoveOutcome.TURN_SWITCH
        # Captures even when the facing pit is empty: the lone stone still goes home
        if owner_of(pos) == player and slots[pos] == 1:
            facing = opposite_pit(pos)
            captured = slots[facing] + 1
            slots[own_store] += captured
            slots[facing] = 0
            slots[pos] = 0

    next_player = player if outcome is MoveOutcome.EXTRA_TURN else 1 - player
    if all(slots[p] == 0 for p in pits_of(0)) or all(slots[p] == 0 for p in pits_of(1)):
        _sweep(slots)
        final = Board(slots=tuple(slots), current_player=player)
        winner = winner_of(final)
        logger.info(
            "Game over: stores %d-%d, winner=%s",
            final.store(0), final.store(1), 'draw' if winner is None else winner,
        )
        return MoveResult(final, MoveOutcome.GAME_OVER, pos, captured, winner)

    return MoveResult(
        Board(slots=tuple(slots), current_player=next_player), outcome, pos, captured
    )

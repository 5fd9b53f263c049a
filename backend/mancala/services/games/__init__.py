"""Game domain services: board, rules, local play and eviction timers.

This package contains pure(ish) domain logic that should be imported by
HTTP routes and socket handlers, keeping transport concerns separated
from core game mechanics.
"""

from .board import Board, opposite_pit, pits_of, store_of
from .rules import (
    MoveOutcome,
    MoveResult,
    apply_move,
    is_terminal,
    legal_moves,
    winner_of,
)

__all__ = [
    "Board",
    "opposite_pit",
    "pits_of",
    "store_of",
    "MoveOutcome",
    "MoveResult",
    "apply_move",
    "is_terminal",
    "legal_moves",
    "winner_of",
]

"""
Board representation for Kalah(6, n).

Layout (slot indices):

          player 1 pits (12-7)
       [12][11][10][9][8][7]
    [13]                    [6]   <- stores
       [0] [1] [2] [3][4][5]
          player 0 pits (0-5)

Stones move counter-clockwise, i.e. towards higher indices, wrapping from
13 back to 0.
"""

from dataclasses import dataclass
from typing import List, Tuple

PITS_PER_SIDE = 6
NUM_SLOTS = 2 * PITS_PER_SIDE + 2
DEFAULT_STONES_PER_PIT = 4

PLAYER0_STORE = PITS_PER_SIDE
PLAYER1_STORE = NUM_SLOTS - 1


def store_of(player: int) -> int:
    """Store slot of ``player``."""
    return PLAYER0_STORE if player == 0 else PLAYER1_STORE


def pits_of(player: int) -> range:
    """Pit slots owned by ``player`` (stores excluded)."""
    if player == 0:
        return range(0, PITS_PER_SIDE)
    return range(PITS_PER_SIDE + 1, 2 * PITS_PER_SIDE + 1)


def owner_of(slot: int) -> int:
    """Player owning ``slot`` (pit or store)."""
    return 0 if slot <= PLAYER0_STORE else 1


def is_store(slot: int) -> bool:
    return slot in (PLAYER0_STORE, PLAYER1_STORE)


def opposite_pit(pit: int) -> int:
    """Pit facing ``pit`` across the board: i <-> 12 - i."""
    if is_store(pit) or not 0 <= pit < NUM_SLOTS:
        raise ValueError(f"Slot {pit} has no opposite pit")
    return 2 * PITS_PER_SIDE - pit


@dataclass(frozen=True)
class Board:
    """Immutable board state: 14 slot counts plus whose turn it is."""

    slots: Tuple[int, ...]
    current_player: int = 0

    def __post_init__(self) -> None:
        if len(self.slots) != NUM_SLOTS:
            raise ValueError(
                f"Board needs {NUM_SLOTS} slots, got {len(self.slots)}"
            )
        if any(stones < 0 for stones in self.slots):
            raise ValueError("Negative stone count not allowed")
        if self.current_player not in (0, 1):
            raise ValueError(f"Invalid player {self.current_player}, must be 0 or 1")

    @classmethod
    def initial(cls, stones_per_pit: int = DEFAULT_STONES_PER_PIT) -> "Board":
        """Starting position: every pit holds ``stones_per_pit``, stores empty."""
        if stones_per_pit < 1:
            raise ValueError("A game needs at least one stone per pit")
        side = [stones_per_pit] * PITS_PER_SIDE
        return cls(slots=tuple(side + [0] + side + [0]), current_player=0)

    @property
    def total_stones(self) -> int:
        return sum(self.slots)

    def store(self, player: int) -> int:
        return self.slots[store_of(player)]

    def side_empty(self, player: int) -> bool:
        return all(self.slots[p] == 0 for p in pits_of(player))

    def to_list(self) -> List[int]:
        return list(self.slots)

    def render(self) -> str:
        """Plain-text picture of the board, player 1 on top."""
        top = " ".join(f"{self.slots[p]:>2}" for p in reversed(pits_of(1)))
        bottom = " ".join(f"{self.slots[p]:>2}" for p in pits_of(0))
        labels = " ".join(f"{p:>2}" for p in pits_of(0))
        top_labels = " ".join(f"{p:>2}" for p in reversed(pits_of(1)))
        gap = " " * len(top)
        return "\n".join([
            f"      {top_labels}",
            f"      {top}",
            f"[{self.store(1):>2}]  {gap}  [{self.store(0):>2}]",
            f"      {bottom}",
            f"      {labels}",
        ])

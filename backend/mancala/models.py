import secrets
import threading
import time
from dataclasses import dataclass, field
from enum import Enum
from typing import List, Optional

from mancala.services.games.board import DEFAULT_STONES_PER_PIT, Board

# Wire value for "no winner": a draw, a cancelled game or a game still running
NO_WINNER = -1


class GameStatus(str, Enum):
    WAITING_FOR_PLAYER = 'WAITING_FOR_PLAYER'
    IN_PROGRESS = 'IN_PROGRESS'
    FINISHED = 'FINISHED'
    CANCELLED = 'CANCELLED'

    @property
    def is_live(self) -> bool:
        return self in (GameStatus.WAITING_FOR_PLAYER, GameStatus.IN_PROGRESS)


def generate_game_id() -> str:
    """Generate an unguessable game id; sharing it is the only way to find a game."""
    return secrets.token_urlsafe(16)


@dataclass
class Game:
    id: str
    board: Board
    status: GameStatus = GameStatus.WAITING_FOR_PLAYER
    winner: Optional[int] = None
    player0_wants_rematch: bool = False
    player1_wants_rematch: bool = False
    stones_per_pit: int = DEFAULT_STONES_PER_PIT
    # Matches played in this session, rematches included
    match_number: int = 1

    @classmethod
    def new(cls, game_id: str, stones_per_pit: int = DEFAULT_STONES_PER_PIT) -> 'Game':
        return cls(id=game_id, board=Board.initial(stones_per_pit), stones_per_pit=stones_per_pit)

    @property
    def current_player(self) -> int:
        return self.board.current_player

    @property
    def game_over(self) -> bool:
        return self.status == GameStatus.FINISHED

    def wants_rematch(self, role: int) -> bool:
        return self.player0_wants_rematch if role == 0 else self.player1_wants_rematch

    def set_wants_rematch(self, role: int) -> None:
        if role == 0:
            self.player0_wants_rematch = True
        else:
            self.player1_wants_rematch = True

    def both_want_rematch(self) -> bool:
        return self.player0_wants_rematch and self.player1_wants_rematch

    def reset_for_rematch(self) -> None:
        self.board = Board.initial(self.stones_per_pit)
        self.status = GameStatus.IN_PROGRESS
        self.winner = None
        self.player0_wants_rematch = False
        self.player1_wants_rematch = False
        self.match_number += 1

    def to_dict(self):
        """Topic snapshot sent to every subscriber of the game."""
        return {
            'gameId': self.id,
            'board': self.board.to_list(),
            'currentPlayer': self.current_player,
            'gameStatus': self.status.value,
            'gameOver': self.game_over,
            'winner': NO_WINNER if self.winner is None else self.winner,
            'player0WantsRematch': self.player0_wants_rematch,
            'player1WantsRematch': self.player1_wants_rematch,
        }

    def to_details(self, assigned_role: int):
        """Personal "game details" frame for the connection holding ``assigned_role``."""
        return {
            'gameId': self.id,
            'assignedPlayerRole': assigned_role,
            'board': self.board.to_list(),
            'currentPlayer': self.current_player,
            'gameStatus': self.status.value,
            'gameOver': self.game_over,
            'winner': NO_WINNER if self.winner is None else self.winner,
        }


@dataclass(eq=False)
class Session:
    """A hosted game and the (at most two) connections playing it.

    ``participants[0]`` is the host, ``participants[1]`` the joiner. A slot
    is reset to None when that connection leaves. ``lock`` linearizes every
    read-then-write on ``game``.
    """

    game: Game
    participants: List[Optional[str]] = field(default_factory=lambda: [None, None])
    lock: threading.RLock = field(default_factory=threading.RLock, repr=False)
    created_at: float = field(default_factory=time.time)
    # Identifies the most recently armed eviction timer; None when none is pending
    eviction_token: Optional[int] = None

    @property
    def id(self) -> str:
        return self.game.id

    def role_of(self, participant_id: str) -> Optional[int]:
        for role, pid in enumerate(self.participants):
            if pid is not None and pid == participant_id:
                return role
        return None

    def other(self, role: int) -> Optional[str]:
        return self.participants[1 - role]

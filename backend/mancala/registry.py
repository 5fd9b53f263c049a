"""In-memory table of live game sessions.

The registry owns every Session. Its own lock only protects the two dicts
below and is never held while waiting for a session lock; callers that
already hold a session lock may call into the registry, not the reverse.
"""

import logging
import threading
from typing import Dict, Optional

from mancala.errors import SessionFull, SessionNotFound
from mancala.models import Game, GameStatus, Session, generate_game_id
from mancala.services.games.board import DEFAULT_STONES_PER_PIT

logger = logging.getLogger(__name__)


class SessionRegistry:

    def __init__(self, stones_per_pit: int = DEFAULT_STONES_PER_PIT):
        self.stones_per_pit = stones_per_pit
        self._sessions: Dict[str, Session] = {}
        self._participant_to_session: Dict[str, str] = {}
        self._lock = threading.Lock()

    def __len__(self) -> int:
        with self._lock:
            return len(self._sessions)

    def __contains__(self, session_id) -> bool:
        with self._lock:
            return session_id in self._sessions

    def create(self, host_id: str) -> str:
        """Register a new WAITING_FOR_PLAYER game hosted by ``host_id``."""
        with self._lock:
            game_id = generate_game_id()
            while game_id in self._sessions:
                game_id = generate_game_id()
            session = Session(game=Game.new(game_id, self.stones_per_pit))
            session.participants[0] = host_id
            self._sessions[game_id] = session
            self._participant_to_session[host_id] = game_id
        logger.info("Session %s created by %s", game_id, host_id)
        return game_id

    def get(self, session_id: str) -> Session:
        with self._lock:
            session = self._sessions.get(session_id) if isinstance(session_id, str) else None
        if session is None:
            raise SessionNotFound()
        return session

    def join(self, session_id: str, joiner_id: str) -> Session:
        """Claim the joiner seat of ``session_id``.

        Exactly one of several concurrent callers wins; everybody else (and
        anyone joining a game that already started or ended) gets SessionFull.
        """
        session = self.get(session_id)
        with session.lock:
            if session_id not in self:
                # Evicted between lookup and claim
                raise SessionNotFound()
            game = session.game
            if (
                game.status != GameStatus.WAITING_FOR_PLAYER
                or session.participants[1] is not None
                or session.participants[0] == joiner_id
            ):
                logger.warning("Join of %s by %s refused: status=%s", session_id, joiner_id, game.status.value)
                raise SessionFull()
            session.participants[1] = joiner_id
            game.status = GameStatus.IN_PROGRESS
            with self._lock:
                self._participant_to_session[joiner_id] = session_id
        logger.info("Session %s joined by %s", session_id, joiner_id)
        return session

    def session_for(self, participant_id: str) -> Optional[Session]:
        """Session ``participant_id`` is currently seated in, if any."""
        with self._lock:
            session_id = self._participant_to_session.get(participant_id)
            return self._sessions.get(session_id) if session_id else None

    def release(self, participant_id: str) -> None:
        """Forget which session ``participant_id`` sits in."""
        with self._lock:
            self._participant_to_session.pop(participant_id, None)

    def remove(self, session_id: str) -> Optional[Session]:
        """Evict ``session_id``; a no-op for unknown ids."""
        with self._lock:
            session = self._sessions.pop(session_id, None)
            if session is None:
                return None
            for pid in session.participants:
                if pid is not None and self._participant_to_session.get(pid) == session_id:
                    del self._participant_to_session[pid]
        logger.info("Session %s removed", session_id)
        return session

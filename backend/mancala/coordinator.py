"""Session protocol: host, join, move, rematch and disconnect.

Every intent that touches a game runs inside that session's lock, from the
role check through to the broadcast, so subscribers see state changes in the
order they were made. Sessions never wait on each other.

Seat claims (host, join) and disconnect also meet on a connection lock, so a
frame still in flight when its connection drops can never seat the dead sid.
"""

import functools
import itertools
import logging
import re
import threading
import time
from typing import Optional

from mancala.errors import (
    GameAlreadyOver,
    InvalidMove,
    MancalaError,
    NotAParticipant,
    NotYourTurn,
    ProtocolError,
    SessionNotFound,
)
from mancala.models import GameStatus, Session
from mancala.services.games.rules import apply_move

HOST_DESTINATION = '/app/game.host'
JOIN_DESTINATION = '/app/game.join'
_GAME_DESTINATION = re.compile(r'^/app/game\.(?P<game_id>[A-Za-z0-9_-]+)\.(?P<action>move|rematch)$')

# How long a closed connection is remembered; late frames arrive well within this
DEPARTED_TTL_SEC = 60


def _reported(intent):
    """Turn MancalaError into a personal error frame for the calling connection."""

    def decorator(method):
        @functools.wraps(method)
        def wrapper(self, connection_id, *args, **kwargs):
            try:
                return method(self, connection_id, *args, **kwargs)
            except MancalaError as exc:
                self.logger.warning(f"[{intent}-rejected] sid={connection_id} {type(exc).__name__}: {exc.message}")
                self.broadcaster.send_error(connection_id, exc.message)
            except Exception:
                self.logger.exception(f"[{intent}-failed] sid={connection_id}")
                self.broadcaster.send_error(connection_id, 'Internal server error')
            return None
        return wrapper

    return decorator


def _require_dict(payload) -> dict:
    if payload is None:
        return {}
    if not isinstance(payload, dict):
        raise ProtocolError('Payload must be a JSON object')
    return payload


class SessionCoordinator:

    def __init__(
        self,
        registry,
        broadcaster,
        scheduler=None,
        finished_grace_sec: float = 300,
        cancelled_grace_sec: float = 5,
        stale_waiting_sec: float = 600,
        logger=None,
    ):
        self.registry = registry
        self.broadcaster = broadcaster
        self.scheduler = scheduler
        self.finished_grace_sec = finished_grace_sec
        self.cancelled_grace_sec = cancelled_grace_sec
        self.stale_waiting_sec = stale_waiting_sec
        self.logger = logger or logging.getLogger(__name__)
        self._tokens = itertools.count(1)
        # sid -> monotonic time of its disconnect, oldest first
        self._departed = {}
        self._connections_lock = threading.Lock()

    # -- dispatch --
    @_reported('dispatch')
    def handle(self, connection_id: str, destination: str, payload=None):
        """Route a client frame addressed to ``destination``."""
        if destination == HOST_DESTINATION:
            _require_dict(payload)
            return self.host(connection_id)
        if destination == JOIN_DESTINATION:
            game_id = _require_dict(payload).get('gameId')
            if not isinstance(game_id, str) or not game_id.strip():
                raise ProtocolError('gameId is required')
            return self.join(connection_id, game_id.strip())
        match = _GAME_DESTINATION.match(destination or '')
        if not match:
            raise ProtocolError(f"Unknown destination {destination!r}")
        game_id = match.group('game_id')
        if match.group('action') == 'move':
            pit_index = _require_dict(payload).get('pitIndex')
            if not isinstance(pit_index, int) or isinstance(pit_index, bool):
                raise ProtocolError('pitIndex must be an integer')
            return self.move(connection_id, game_id, pit_index)
        _require_dict(payload)
        return self.rematch(connection_id, game_id)

    # -- intents --
    @_reported('host')
    def host(self, connection_id: str) -> Optional[str]:
        self._leave_previous(connection_id)
        with self._connections_lock:
            self._ensure_connected(connection_id)
            game_id = self.registry.create(connection_id)
        session = self.registry.get(game_id)
        with session.lock:
            self.broadcaster.subscribe(connection_id, game_id)
            self.broadcaster.send_details(connection_id, session.game.to_details(0))
            # A disconnect that slipped in after create has already armed the cancel grace
            if session.eviction_token is None:
                self._arm_eviction(session, self.stale_waiting_sec)
        self.logger.info(f"[host] game={game_id} sid={connection_id}")
        return game_id

    @_reported('join')
    def join(self, connection_id: str, game_id: str) -> Optional[Session]:
        self._leave_previous(connection_id)
        session = self.registry.get(game_id)
        with session.lock:
            with self._connections_lock:
                self._ensure_connected(connection_id)
                self.registry.join(game_id, connection_id)
            session.eviction_token = None
            self.broadcaster.subscribe(connection_id, game_id)
            self.broadcaster.send_details(connection_id, session.game.to_details(1))
            self.broadcaster.publish(game_id, session.game.to_dict())
        self.logger.info(f"[join] game={game_id} sid={connection_id}")
        return session

    @_reported('move')
    def move(self, connection_id: str, game_id: str, pit_index: int):
        session = self.registry.get(game_id)
        with session.lock:
            role = self._role_in(session, connection_id)
            game = session.game
            if game.status in (GameStatus.FINISHED, GameStatus.CANCELLED):
                raise GameAlreadyOver()
            if game.status != GameStatus.IN_PROGRESS:
                raise NotYourTurn('Waiting for an opponent to join')
            if role != game.current_player:
                raise NotYourTurn()

            result = apply_move(game.board, role, pit_index)
            game.board = result.board
            if result.finished:
                game.status = GameStatus.FINISHED
                game.winner = result.winner
                self._arm_eviction(session, self.finished_grace_sec)
            self.broadcaster.publish(game_id, game.to_dict())
        self.logger.info(
            f"[move] game={game_id} role={role} pit={pit_index} outcome={result.outcome.value} "
            f"captured={result.captured}"
        )
        return result

    @_reported('rematch')
    def rematch(self, connection_id: str, game_id: str):
        session = self.registry.get(game_id)
        with session.lock:
            role = self._role_in(session, connection_id)
            game = session.game
            if game.status != GameStatus.FINISHED:
                raise InvalidMove('A rematch can only be requested once the game has finished')
            if session.other(role) is None:
                raise InvalidMove('Your opponent has left the game')
            if game.wants_rematch(role):
                return game
            game.set_wants_rematch(role)
            self.broadcaster.publish(game_id, game.to_dict())
            self.logger.info(f"[rematch-request] game={game_id} role={role}")
            if game.both_want_rematch():
                game.reset_for_rematch()
                session.eviction_token = None
                self.broadcaster.publish(game_id, game.to_dict())
                self.logger.info(f"[rematch-start] game={game_id} match={game.match_number}")
            return game

    def disconnect(self, connection_id: str) -> None:
        """Connection gone: cancel its live game or release its finished one."""
        now = time.monotonic()
        with self._connections_lock:
            self._forget_departed(now)
            self._departed[connection_id] = now
            session = self.registry.session_for(connection_id)
        if session is None:
            return
        with session.lock:
            self._depart(session, connection_id)

    # -- eviction --
    def evict(self, game_id: str, token: int) -> bool:
        """Remove ``game_id`` if ``token`` is still its armed eviction."""
        try:
            session = self.registry.get(game_id)
        except SessionNotFound:
            return False
        with session.lock:
            if token is None or session.eviction_token != token:
                return False
            game = session.game
            if game.status == GameStatus.WAITING_FOR_PLAYER:
                game.status = GameStatus.CANCELLED
                game.winner = None
                self.broadcaster.publish(game_id, game.to_dict())
            self.registry.remove(game_id)
            self.broadcaster.close_topic(game_id)
        self.logger.info(f"[evict] game={game_id} status={game.status.value}")
        return True

    # -- helpers --
    def _ensure_connected(self, connection_id: str) -> None:
        # caller holds _connections_lock
        if connection_id in self._departed:
            raise ProtocolError('Connection already closed')

    def _forget_departed(self, now: float) -> None:
        while self._departed:
            sid, departed_at = next(iter(self._departed.items()))
            if now - departed_at < DEPARTED_TTL_SEC:
                break
            del self._departed[sid]

    def _role_in(self, session: Session, connection_id: str) -> int:
        if session.id not in self.registry:
            raise SessionNotFound()
        role = session.role_of(connection_id)
        if role is None:
            raise NotAParticipant()
        return role

    def _arm_eviction(self, session: Session, delay: float) -> int:
        token = next(self._tokens)
        session.eviction_token = token
        if self.scheduler is not None:
            self.scheduler.call_later(delay, self.evict, session.id, token)
        return token

    def _leave_previous(self, connection_id: str) -> None:
        """Refuse a second live seat; drop a seat left over from a finished game."""
        session = self.registry.session_for(connection_id)
        if session is None:
            return
        with session.lock:
            if session.game.status.is_live:
                raise ProtocolError(f"You are already seated in game {session.id}")
            self._depart(session, connection_id)
            self.broadcaster.unsubscribe(connection_id, session.id)

    def _depart(self, session: Session, connection_id: str) -> None:
        role = session.role_of(connection_id)
        self.registry.release(connection_id)
        if role is None:
            return
        session.participants[role] = None
        game = session.game
        if game.status.is_live:
            game.status = GameStatus.CANCELLED
            game.winner = None
            remaining = session.other(role)
            if remaining is not None:
                self.registry.release(remaining)
            self.broadcaster.publish(session.id, game.to_dict())
            self._arm_eviction(session, self.cancelled_grace_sec)
            self.logger.info(f"[cancel] game={session.id} role={role} left")
        elif game.status == GameStatus.FINISHED:
            self._arm_eviction(session, self.cancelled_grace_sec)
            self.logger.info(f"[leave] game={session.id} role={role} left after finish")

"""Errors raised by the rules engine and the session layer.

Every error carries a short message that is safe to show to the player who
caused it. The coordinator turns them into personal error frames; nothing here
ever reaches the session topic.
"""


class MancalaError(Exception):
    """Base class for all recoverable game/session errors."""

    default_message = 'Request rejected'

    def __init__(self, message=None):
        self.message = message or self.default_message
        super().__init__(self.message)


class InvalidMove(MancalaError):
    default_message = 'Invalid move'


class NotYourTurn(InvalidMove):
    default_message = 'It is not your turn'


class ProtocolError(InvalidMove):
    """Malformed payload, unknown destination or an out-of-order intent."""

    default_message = 'Malformed request'


class GameAlreadyOver(MancalaError):
    default_message = 'The game is already over'


class SessionNotFound(MancalaError):
    default_message = 'Game not found'


class SessionFull(MancalaError):
    default_message = 'Game is full or has already started'


class NotAParticipant(MancalaError):
    default_message = 'You are not a player in this game'

"""
Exceptions raised across the boundary of the rules engine.

NOTE: The chess domain itself never raises for bad moves; it answers False and records a MoveRejection.
These exceptions are how the service layer reports problems to whoever calls it.
"""

from typing import Optional

from chess_rules.core.shared_types import MoveRejectionReason


class GameError(Exception):
    """Base class for every error the service layer raises"""


class InvalidRequestError(GameError):
    """The request could not be interpreted (e.g. a square name that is not in algebraic notation)"""


class GameNotFoundError(GameError):
    """No game with the requested ID is being played"""


class GameStateError(GameError):
    """The request does not fit the current state of the game"""


class TooManyGamesError(GameError):
    """The configured limit of simultaneous games is reached"""


class IllegalMoveError(GameError):
    """The engine refused the move. The reason tells why."""

    def __init__(
        self, message: str, reason: Optional[MoveRejectionReason] = None
    ) -> None:
        super().__init__(message)
        self.reason = reason

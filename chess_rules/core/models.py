"""
Boundary layer data model(s).

These objects can be used to communicate with the Service.
Hence, both the API layer (higher) and the domain layer (lower) will use model(s) defined here to send to/receive from the Service
(Decouples the data model specific to the API layer or domain layer from the information needed to send across boundaries)
"""

from dataclasses import dataclass
from typing import Optional

# Type aliases to make GameModel easier to read
PieceColor = str
PlayerName = str


@dataclass
class GameModel:
    """Transport-safe snapshot of a chess game used between API, Service, and Game layers."""

    board: list[str]
    color_to_move: PieceColor
    status: str
    players: dict[PieceColor, PlayerName]
    moves_uci: list[str]
    scores: dict[PieceColor, int]
    in_check: dict[PieceColor, bool]
    winner: Optional[PlayerName] = None

"""
Pytest will auto-discover / import this file called 'conftest.py'.
This file defines fixtures/variables required for testing multiple layers.
"""

from typing import Callable

import pytest

from chess_rules.chess.board import Board
from chess_rules.chess.game import Game
from chess_rules.chess.pieces import Color
from chess_rules.chess.position import Position


def sq(name: str) -> Position:
    """Shorthand: 'e4' -> Position"""
    return Position.from_algebraic(name)


@pytest.fixture
def new_game() -> Game:
    """A game in the standard starting position, White to move."""
    return Game.new_game("player_white", "player_black")


@pytest.fixture
def play() -> Callable[[Game, str], None]:
    """
    Call the inner function with a game and space separated coordinate moves ("e2e4 e7e5 ...").
    Every move must be accepted.
    """

    def _play(game: Game, moves: str) -> None:
        for uci in moves.split():
            accepted = game.make_move(sq(uci[:2]), sq(uci[2:4]))
            assert accepted, f"{uci} was rejected: {game.last_rejection}"

    return _play


@pytest.fixture
def game_from_diagram() -> Callable[..., Game]:
    """Call the inner function with a board diagram (see Board.from_diagram) and the color to move"""

    def _create_game(diagram: str, color_to_move: Color = Color.WHITE, **kwargs) -> Game:
        return Game.from_board(
            Board.from_diagram(diagram), color_to_move=color_to_move, **kwargs
        )

    return _create_game

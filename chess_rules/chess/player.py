"""A participant of the game. Game updates the player after every half-move."""

from dataclasses import dataclass

from chess_rules.chess.pieces import Color


@dataclass
class Player:
    name: str
    color: Color
    in_check: bool = False
    score: int = 0
    captured_material_value: int = 0

    def add_captured_value(self, value: int) -> None:
        self.captured_material_value += value
        self.score += value

    def remove_captured_value(self, value: int) -> None:
        """Inverse of `add_captured_value()`, for taking a move back"""
        self.captured_material_value -= value
        self.score -= value

    def reset(self) -> None:
        self.in_check = False
        self.score = 0
        self.captured_material_value = 0

    def __str__(self) -> str:
        check = " [IN CHECK]" if self.in_check else ""
        return f"{self.name} ({self.color.name.capitalize()}) - Score: {self.score}{check}"

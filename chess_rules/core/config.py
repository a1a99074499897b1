"""
Application settings.

All settings are read from environment variables prefixed with CHESS_RULES_ (or a .env file),
e.g. CHESS_RULES_DEFAULT_PROMOTION=knight
"""

import logging
from typing import Literal

from pydantic_settings import BaseSettings, SettingsConfigDict

from chess_rules.core.shared_types import PieceType

LogLevel = Literal["DEBUG", "INFO", "WARNING", "ERROR"]


class Settings(BaseSettings):
    model_config = SettingsConfigDict(
        env_prefix="CHESS_RULES_", env_file=".env", env_file_encoding="utf-8", extra="ignore"
    )

    # What a pawn turns into when nobody says otherwise
    default_promotion: PieceType = PieceType.QUEEN

    # How many games the service keeps in memory at the same time
    max_games: int = 1000

    # Level for the loggers of the chess_rules package
    log_level: LogLevel = "INFO"


def configure_logging(settings: Settings) -> None:
    """Apply the configured level to the chess_rules loggers. Meant to be called once, by the application at startup."""
    logging.getLogger("chess_rules").setLevel(settings.log_level)

"""Application settings, read from environment variables."""

import logging
import os
from dataclasses import dataclass
from functools import lru_cache

from src.core.exceptions import GameStateError

LOG_FORMAT = "%(asctime)s [%(levelname)s] %(name)s: %(message)s"


@dataclass(frozen=True)
class Settings:
    database_url: str = "sqlite:///./nim.db"
    database_echo: bool = False
    log_level: str = "INFO"
    default_token_count: int = 15
    default_player_count: int = 2
    max_tokens_per_move: int = 3


def _env_int(name: str, default: int) -> int:
    raw = os.environ.get(name)
    if raw is None:
        return default
    try:
        value = int(raw)
    except ValueError as err:
        raise GameStateError(
            f"Environment variable {name} must be an integer, got {raw!r}."
        ) from err
    if value < 1:
        raise GameStateError(f"Environment variable {name} must be positive, got {value}.")
    return value


def _env_bool(name: str, default: bool) -> bool:
    raw = os.environ.get(name)
    if raw is None:
        return default
    return raw.lower() in ("1", "true", "yes")


def load_settings() -> Settings:
    """Build Settings from the environment. Anything not set keeps its default."""
    defaults = Settings()
    return Settings(
        database_url=os.environ.get("NIM_DATABASE_URL", defaults.database_url),
        database_echo=_env_bool("NIM_DATABASE_ECHO", defaults.database_echo),
        log_level=os.environ.get("NIM_LOG_LEVEL", defaults.log_level).upper(),
        default_token_count=_env_int("NIM_DEFAULT_TOKEN_COUNT", defaults.default_token_count),
        default_player_count=_env_int("NIM_DEFAULT_PLAYER_COUNT", defaults.default_player_count),
        max_tokens_per_move=_env_int("NIM_MAX_TOKENS_PER_MOVE", defaults.max_tokens_per_move),
    )


@lru_cache
def get_settings() -> Settings:
    return load_settings()


def configure_logging(settings: Settings) -> None:
    logging.basicConfig(level=settings.log_level, format=LOG_FORMAT)

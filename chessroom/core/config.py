"""Application settings, read from the environment (or a `.env` file)."""

import logging
from functools import lru_cache

from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    database_url: str = "sqlite:///./chessroom.db"
    database_echo: bool = False
    log_level: str = "INFO"
    default_time_control: str = "10+0"
    room_code_length: int = 6

    model_config = SettingsConfigDict(
        env_prefix="CHESSROOM_",
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
    )


@lru_cache
def get_settings() -> Settings:
    return Settings()


def configure_logging(level_name: str) -> None:
    """Unknown level names fall back to INFO."""
    level = getattr(logging, level_name.upper(), logging.INFO)
    if not isinstance(level, int):
        level = logging.INFO
    logging.basicConfig(format="%(asctime)s %(levelname)s %(name)s: %(message)s")
    logging.getLogger().setLevel(level)
    logging.getLogger("chessroom").setLevel(level)

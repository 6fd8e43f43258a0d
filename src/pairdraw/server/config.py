from __future__ import annotations

from functools import lru_cache

from pydantic_settings import BaseSettings, SettingsConfigDict

from pairdraw.protocol.constants import ROOM_ID_LENGTH


class Settings(BaseSettings):
    """
    Runtime config.

    - Loaded from environment variables (`PAIRDRAW_*`)
    - Also reads `.env` if present (via pydantic-settings + python-dotenv)
    """

    model_config = SettingsConfigDict(env_file=".env", env_prefix="PAIRDRAW_", extra="ignore")

    host: str = "0.0.0.0"
    port: int = 3000

    room_id_length: int = ROOM_ID_LENGTH

    # Reaper: sweep every 30 min, evict empty rooms older than 1 h
    reaper_interval_s: float = 30 * 60.0
    reaper_max_age_s: float = 60 * 60.0

    # Logging
    log_level: str = "INFO"
    debug_log_msgs: bool = False


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    return Settings()

from functools import lru_cache
from typing import Optional

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict

MEBIBYTE = 1024 * 1024


class Settings(BaseSettings):
    model_config = SettingsConfigDict(env_file=".env", extra="ignore")

    PROJECT_NAME: str = "Cap Table Dashboard"

    # Supabase
    SUPABASE_URL: Optional[str] = None
    SUPABASE_ANON_KEY: Optional[str] = None
    FUNCTIONS_URL: Optional[str] = None

    # Pitch decks
    PITCH_DECK_BUCKET: str = "pitch-decks"
    MAX_UPLOAD_BYTES: int = Field(10 * MEBIBYTE, gt=0)
    REQUEST_TIMEOUT: float = Field(60.0, gt=0)

    # Loader
    LOADER_MAX_WORKERS: int = Field(6, ge=1)

    # Display
    CURRENCY_SYMBOL: str = "$"
    LOG_LEVEL: str = "INFO"

    @property
    def functions_base_url(self) -> str:
        return (self.FUNCTIONS_URL or self.SUPABASE_URL or "").rstrip("/")


@lru_cache
def get_settings() -> Settings:
    return Settings()

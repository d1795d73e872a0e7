from enum import Enum
from functools import lru_cache
from pathlib import Path

from pydantic_settings import BaseSettings, SettingsConfigDict


class Env(Enum):
    local = "local"
    dev = "dev"
    prod = "prod"


class Settings(BaseSettings):
    model_config = SettingsConfigDict(
        env_prefix="RECIPEBOOK_", env_file=".env", extra="ignore"
    )

    env: Env = Env.local
    database_url: str = "sqlite:///./recipes.db"
    log_level: str = "INFO"
    bcrypt_rounds: int = 12
    host: str = "127.0.0.1"
    port: int = 8080
    seed_file: Path = Path("data/recipes.json")


@lru_cache
def get_settings() -> Settings:
    return Settings()

from functools import lru_cache
from typing import Optional

from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    # App
    app_name: str = "ExhibitFlow"
    debug: bool = False

    # Logging
    log_level: str = "INFO"
    log_dir: str = "logs"
    file_logging: bool = False

    # Seed data
    seed_path: Optional[str] = None  # YAML file; overrides the built-in seed
    load_default_seed: bool = True

    # Identity: actor used when a request carries no X-User-Id header.
    # None means such requests are unauthenticated.
    default_actor_id: Optional[str] = None

    model_config = SettingsConfigDict(
        env_prefix="EXHIBITFLOW_",
        env_file=".env",
        case_sensitive=False,
        extra="ignore",
    )


@lru_cache
def get_settings() -> Settings:
    return Settings()

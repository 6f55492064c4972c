from pydantic_settings import BaseSettings
from functools import lru_cache


class Settings(BaseSettings):
    # Datenbank
    database_url: str = "sqlite:///./data/gilde.db"

    # JWT
    secret_key: str = "changeme"
    algorithm: str = "HS256"
    access_token_expire_minutes: int = 60 * 24 * 7  # 7 Tage

    # Server
    host: str = "0.0.0.0"
    port: int = 8000
    debug: bool = True
    log_level: str = "INFO"

    # CORS
    frontend_url: str = "http://localhost:5173"

    # Loot
    default_participation_threshold: int = 1  # Mindestpunkte für Raid-Loot, falls die Gilde nichts gesetzt hat
    discord_timeout_seconds: float = 5.0

    class Config:
        env_file = ".env"
        env_file_encoding = "utf-8"


@lru_cache()
def get_settings() -> Settings:
    return Settings()

from pydantic_settings import BaseSettings
from typing import List, Optional

class Settings(BaseSettings):
    # Server
    host: str = "0.0.0.0"
    port: int = 3000
    environment: str = "development"
    log_level: str = "INFO"

    # Store Settings
    store_backend: str = "json"  # json, postgres
    track_ip: bool = True

    # Document store
    data_file: str = "data/subscriptions.json"
    serialize_writes: bool = False

    # Database Settings
    database_url: Optional[str] = None
    db_ssl_mode: str = "prefer"
    db_pool_min_size: int = 1
    db_pool_max_size: int = 10
    db_command_timeout: float = 60

    # Admin export
    admin_token: Optional[str] = None

    # Comma-separated list, empty allows any origin
    cors_origins: Optional[str] = None

    class Config:
        env_file = ".env"
        extra = "ignore"  # This line allows extra env vars without errors

    @property
    def allowed_origins(self) -> List[str]:
        if not self.cors_origins:
            return []
        return [origin.strip() for origin in self.cors_origins.split(",") if origin.strip()]

settings = Settings()

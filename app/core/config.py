from pydantic_settings import BaseSettings, SettingsConfigDict
from pydantic import PostgresDsn, RedisDsn, computed_field
from typing import Optional

class Settings(BaseSettings):
    model_config = SettingsConfigDict(env_file=".env", env_ignore_empty=True, extra="ignore")

    # Security: no default credentials - require them to be set in .env
    POSTGRES_USER: str
    POSTGRES_PASSWORD: str
    POSTGRES_DB: str = "weekend_match"
    POSTGRES_HOST: str = "localhost"
    POSTGRES_PORT: int = 5432

    @computed_field
    def DATABASE_URL(self) -> PostgresDsn:
        return PostgresDsn.build(
            scheme="postgresql+asyncpg",
            username=self.POSTGRES_USER,
            password=self.POSTGRES_PASSWORD,
            host=self.POSTGRES_HOST,
            port=self.POSTGRES_PORT,
            path=self.POSTGRES_DB,
        )

    REDIS_URL: RedisDsn = "redis://localhost:6379/0"

    ENV: str = "production"
    LOG_LEVEL: str = "INFO"

    # Identity provider (bearer token verification)
    SUPABASE_URL: Optional[str] = None
    SUPABASE_ANON_KEY: Optional[str] = None

    # All slot calendar math happens in this zone
    SLOT_TIMEZONE: str = "Europe/Berlin"

    # Payment capture webhook
    WEBHOOK_SECRET: Optional[str] = None

    # Reminder fan-out
    NOTIFY_WEBHOOK_URL: Optional[str] = None
    APP_URL: str = "https://localhost"
    APP_DOMAIN: Optional[str] = None

settings = Settings()

"""Runtime configuration, read from the environment (and an optional .env file)."""
from functools import lru_cache
from typing import Optional

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict
from sqlalchemy.engine import URL


class Settings(BaseSettings):
    # Full SQLAlchemy URL; takes precedence over the DB_* parts below
    database_url: Optional[str] = Field(default=None)

    db_user: Optional[str] = Field(default=None)
    db_password: Optional[str] = Field(default=None)
    db_host: Optional[str] = Field(default=None)
    db_port: Optional[int] = Field(default=None)
    db_name: Optional[str] = Field(default=None)

    db_timeout_seconds: float = Field(default=5.0, gt=0)
    db_pool_size: int = Field(default=5, ge=1)
    db_max_overflow: int = Field(default=10, ge=0)

    jwt_secret: str = Field(default="dev-secret")
    token_ttl_seconds: int = Field(default=60 * 60, gt=0)  # 1 hour

    host: str = Field(default="0.0.0.0")
    port: int = Field(default=5000)
    log_level: str = Field(default="INFO")
    cors_origins: str = Field(default="*")
    # Directory holding the single-page client; defaults to the bundled one
    static_dir: Optional[str] = Field(default=None)

    model_config = SettingsConfigDict(env_file=".env", env_file_encoding="utf-8", extra="ignore")

    @property
    def sqlalchemy_url(self) -> str:
        if self.database_url:
            return self.database_url
        if self.db_host:
            return URL.create(
                "postgresql+psycopg2",
                username=self.db_user,
                password=self.db_password,
                host=self.db_host,
                port=self.db_port,
                database=self.db_name,
            ).render_as_string(hide_password=False)
        return "sqlite:///./arcadefinder.db"

    @property
    def cors_origins_list(self) -> list[str]:
        return [o.strip() for o in self.cors_origins.split(",") if o.strip()]


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    return Settings()


settings = get_settings()

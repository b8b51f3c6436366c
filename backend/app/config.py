from functools import lru_cache
from pathlib import Path
from typing import Annotated, List

from pydantic import AnyHttpUrl, Field, field_validator
from pydantic_settings import BaseSettings, NoDecode, SettingsConfigDict


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    app_name: str = Field(default="Parley API", description="Human readable service name")
    environment: str = Field(default="development", description="Deployment environment name")
    debug: bool = Field(default=True, description="Enable debug mode")

    cors_origins: Annotated[List[AnyHttpUrl], NoDecode] = Field(
        default_factory=lambda: [
            "http://localhost",
            "http://localhost:3000",
            "http://127.0.0.1",
            "http://127.0.0.1:3000",
        ],
        description="List of allowed CORS origins",
    )

    cors_allow_origin_regex: str | None = Field(
        default=r"^https?://(localhost|127\.0\.0\.1|0\.0\.0\.0|\[::1\])(:\d+)?$",
        description="Optional regular expression that matches allowed CORS origins",
    )

    sqlalchemy_database_url: str | None = Field(
        default=None,
        description="Full SQLAlchemy URL; takes precedence over the DB_* parts",
    )
    database_user: str = Field(default="parley", validation_alias="DB_USER")
    database_password: str = Field(default="parley", validation_alias="DB_PASSWORD")
    database_host: str = Field(default="db", validation_alias="DB_HOST")
    database_port: int = Field(default=3306, validation_alias="DB_PORT")
    database_name: str = Field(default="parley", validation_alias="DB_NAME")

    jwt_secret_key: str = Field(default="changeme")
    jwt_algorithm: str = Field(default="HS256")
    access_token_expire_minutes: int = Field(default=60 * 24 * 30)
    password_reset_expire_minutes: int = Field(
        default=10,
        description="Lifetime of password reset tokens",
    )
    auth_cache_url: str | None = Field(
        default=None,
        description="Redis URL used to store password reset tokens; in-process cache when unset",
    )

    messages_default_limit: int = Field(default=30)
    messages_max_limit: int = Field(default=100)
    message_max_length: int = Field(default=2000)
    list_default_limit: int = Field(default=25)
    recommendations_limit: int = Field(default=20)

    media_root: Path = Field(default=Path("uploads"))
    avatar_base_url: str = Field(
        default="/api/users/avatar",
        description="Base URL for serving user avatars",
    )
    max_upload_size: int = Field(
        default=5 * 1024 * 1024, description="Maximum upload size in bytes"
    )

    translation_api_url: AnyHttpUrl = Field(
        default="https://libretranslate.de/translate",
        description="LibreTranslate compatible translate endpoint",
    )
    translation_api_key: str | None = Field(default=None)
    translation_timeout_seconds: float = Field(default=10.0)

    voice_room_default_capacity: int = Field(
        default=10,
        description="Participant limit applied when a room is created without one",
    )

    websocket_keepalive_timeout_seconds: float = Field(
        default=30
    )
    websocket_keepalive_ping_interval_seconds: float = Field(
        default=25
    )
    realtime_scoped_disconnect: bool = Field(
        default=False,
        description="Announce disconnects only to rooms the session had joined instead of every session.",
    )

    model_config = SettingsConfigDict(
        env_file=str(Path(__file__).resolve().parents[2] / ".env"),
        env_file_encoding="utf-8",
        extra="ignore",
    )

    @property
    def database_url(self) -> str:
        if self.sqlalchemy_database_url:
            return self.sqlalchemy_database_url
        return (
            f"mysql+pymysql://{self.database_user}:{self.database_password}"
            f"@{self.database_host}:{self.database_port}/{self.database_name}"
        )

    @field_validator("cors_origins", mode="before")
    @classmethod
    def assemble_cors_origins(cls, v):  # type: ignore[override]
        if v in (None, "", Ellipsis):
            return v
        if isinstance(v, str):
            return [origin.strip() for origin in v.split(",") if origin.strip()]
        if isinstance(v, (list, tuple, set)):
            return list(v)
        return v

    @field_validator("media_root", mode="before")
    @classmethod
    def resolve_media_root(cls, value: str | Path) -> Path:
        if isinstance(value, Path):
            return value.resolve()
        return Path(value).resolve()


@lru_cache
def get_settings() -> Settings:
    return Settings()

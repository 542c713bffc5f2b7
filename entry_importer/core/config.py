from typing import Any, Literal

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

DEFAULT_API_URL = "https://api.critizr.com/v2"


class Settings(BaseSettings):
    model_config = SettingsConfigDict(
        env_prefix="IMPORTER_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
        frozen=True,
    )

    concurrency: int = Field(default=5, ge=1)
    database_url: str = "sqlite:///./import.db"
    api_token: str
    api_url: str = DEFAULT_API_URL

    log_level: Literal["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"] = "INFO"
    json_logs: bool = False

    @field_validator("api_token")
    @classmethod
    def _require_token(cls, value: str) -> str:
        if not value.strip():
            raise ValueError("an API token is needed")
        return value

    @field_validator("log_level", mode="before")
    @classmethod
    def _upper_level(cls, value: Any) -> Any:
        return value.upper() if isinstance(value, str) else value

    @field_validator("api_url")
    @classmethod
    def _strip_trailing_slash(cls, value: str) -> str:
        return value.rstrip("/")

    @property
    def responses_url(self) -> str:
        return f"{self.api_url}/responses"


def database_url_from_path(path: str) -> str:
    """Accept either a SQLAlchemy URL or a bare SQLite file path."""
    if "://" in path:
        return path
    return f"sqlite:///{path}"


def load_settings(**overrides: Any) -> Settings:
    return Settings(**{k: v for k, v in overrides.items() if v is not None})

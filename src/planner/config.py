"""Application configuration and settings management."""

from typing import Any, Literal, Optional

import json
from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Runtime configuration loaded from environment variables or defaults."""

    model_config = SettingsConfigDict(
        env_prefix="PLANNER_",
        case_sensitive=False,
        env_file=".env",
        env_file_encoding="utf-8",
    )

    app_name: str = "Route Timeline Planner API"
    api_prefix: str = "/api"
    log_level: Literal["DEBUG", "INFO", "WARNING", "ERROR"] = "INFO"

    default_workday_start: str = Field(default="08:00", description="Workday start (HH:MM) when a request omits it.")
    default_workday_end: str = Field(default="16:00", description="Workday end (HH:MM) when a request omits it.")
    snap_grid_minutes: int = Field(default=15, ge=1, le=60, description="Grid used when dropping items into gaps.")

    load_tight_percent: float = Field(default=80.0, ge=0.0)
    load_overloaded_percent: float = Field(default=95.0, ge=0.0)
    slack_ok_minutes: float = Field(default=30.0, ge=0.0)
    slack_tight_minutes: float = Field(default=15.0, ge=0.0)

    advisor_base_url: Optional[str] = Field(
        default=None,
        description="Base URL of the insertion advisor service (e.g., http://localhost:8080).",
    )
    advisor_timeout_seconds: float = Field(default=10.0, gt=0.0)
    advisor_max_retries: int = Field(default=2, ge=0)
    advisor_backoff_seconds: float = Field(default=0.5, ge=0.0)

    jobs_base_url: Optional[str] = Field(
        default=None,
        description="Base URL of the background job service used for recalculation.",
    )
    jobs_poll_interval_seconds: float = Field(default=1.0, gt=0.0)
    jobs_timeout_seconds: float = Field(default=120.0, gt=0.0)

    frontend_allowed_origins: tuple[str, ...] = Field(
        default=(
            "http://localhost:5173",
            "http://127.0.0.1:5173",
        ),
        description="Permitted web origins for browser clients (CORS).",
    )

    @field_validator("default_workday_start", "default_workday_end")
    @classmethod
    def _validate_clock(cls, value: str) -> str:
        parts = value.split(":")
        if len(parts) < 2 or not all(part.isdigit() for part in parts[:2]):
            raise ValueError(f"Expected HH:MM clock value, got '{value}'")
        return value[:5]

    @field_validator("frontend_allowed_origins", mode="before")
    @classmethod
    def _parse_str_tuple_from_env(cls, value: Any) -> tuple[str, ...]:
        """Parse string tuple from environment variable (comma-separated or JSON array)."""
        if isinstance(value, tuple):
            return value
        if isinstance(value, list):
            return tuple(str(item) for item in value)
        if isinstance(value, str):
            # Try JSON first
            try:
                parsed = json.loads(value)
                if isinstance(parsed, list):
                    return tuple(str(item) for item in parsed)
            except (json.JSONDecodeError, TypeError):
                pass
            if "," in value:
                return tuple(item.strip() for item in value.split(",") if item.strip())
            if value.strip():
                return (value.strip(),)
        return tuple()


settings = Settings()

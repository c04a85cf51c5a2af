"""Application configuration and settings management."""

from pathlib import Path
from typing import Any, Optional

import json
from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Runtime configuration loaded from environment variables or defaults."""

    model_config = SettingsConfigDict(
        env_prefix="GFA_",
        case_sensitive=False,
        env_file=".env",
        env_file_encoding="utf-8",
    )

    app_name: str = "Green Field Analysis API"
    api_prefix: str = "/api"
    log_level: str = Field(default="INFO", description="Root logging level applied at app creation.")
    data_root: Path = Field(default=Path("data"), description="Root directory for run outputs and snapshots.")
    frontend_allowed_origins: tuple[str, ...] = Field(
        default=(
            "http://localhost:5173",
            "http://127.0.0.1:5173",
            "http://localhost:8080",
            "http://127.0.0.1:8080",
        ),
        description="Permitted web origins for browser clients (CORS).",
    )

    # Optimizer tuning
    max_iterations: int = Field(default=100, ge=1, description="Iteration cap of the clustering loop.")
    kmeans_n_init: int = Field(default=10, ge=1)
    random_state: int = Field(default=42)
    capacity_epsilon: float = Field(
        default=1e-6,
        ge=0.0,
        description="Tolerance used in capacity, radius and coverage comparisons.",
    )
    cost_search_max_sites: int = Field(
        default=20,
        ge=1,
        description="Largest site count evaluated when minimizing total cost.",
    )
    standard_unit: str = Field(default="m3", description="Unit that conversion factors convert into.")

    # Supabase configuration
    supabase_url: Optional[str] = Field(
        default=None,
        description="Supabase project URL (e.g., https://xxx.supabase.co).",
    )
    supabase_key: Optional[str] = Field(
        default=None,
        description="Supabase service role key for backend operations.",
    )

    @field_validator("data_root", mode="before")
    @classmethod
    def _expand_path(cls, value: Any) -> Path:
        path_value = value if isinstance(value, Path) else Path(str(value))
        return path_value.expanduser().resolve()

    @field_validator("frontend_allowed_origins", mode="before")
    @classmethod
    def _parse_str_tuple_from_env(cls, value: Any) -> tuple[str, ...]:
        """Parse string tuple from environment variable (comma-separated or JSON array)."""
        if isinstance(value, tuple):
            return value
        if isinstance(value, list):
            return tuple(str(item) for item in value)
        if isinstance(value, str):
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

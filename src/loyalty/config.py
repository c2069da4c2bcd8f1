"""Application configuration and settings management."""

from typing import Any, Optional

import json
from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Runtime configuration loaded from environment variables or defaults."""

    model_config = SettingsConfigDict(
        env_prefix="LOYALTY_",
        case_sensitive=False,
        env_file=".env",
        env_file_encoding="utf-8",
    )

    app_name: str = "Customer Loyalty Ledger API"
    api_prefix: str = "/api"
    customer_summary_view: str = Field(
        default="customer_summary",
        description="View exposing one row per customer with accrued/claimed/unclaimed points.",
    )
    sales_records_table: str = Field(
        default="sales_records",
        description="Table holding the editable customer records.",
    )
    default_page_size: int = Field(default=10, ge=1)
    page_size_options: tuple[int, ...] = Field(
        default=(10, 25, 50, 100, 500, 1000),
        description="Page sizes offered to list clients.",
    )
    prefetch_enabled: bool = Field(
        default=True,
        description="Load the next page in the background after every list request.",
    )
    frontend_allowed_origins: tuple[str, ...] = Field(
        default=(
            "http://localhost:5173",
            "http://127.0.0.1:5173",
        ),
        description="Permitted web origins for browser clients (CORS).",
    )

    # Supabase configuration
    supabase_url: Optional[str] = Field(
        default=None,
        description="Supabase project URL (e.g., https://xxx.supabase.co).",
    )
    supabase_key: Optional[str] = Field(
        default=None,
        description="Supabase service role key for backend operations.",
    )

    @field_validator("frontend_allowed_origins", mode="before")
    @classmethod
    def _parse_origins(cls, value: Any) -> tuple[str, ...]:
        return tuple(str(item) for item in _env_list(value))

    @field_validator("page_size_options", mode="before")
    @classmethod
    def _parse_page_sizes(cls, value: Any) -> tuple[int, ...]:
        sizes = tuple(sorted({int(item) for item in _env_list(value)}))
        if not sizes or sizes[0] < 1:
            raise ValueError("page_size_options needs at least one size of 1 or more")
        return sizes


def _env_list(value: Any) -> list[Any]:
    """Accept a sequence, a JSON array or a comma-separated string."""
    if isinstance(value, (list, tuple)):
        return list(value)
    if not isinstance(value, str):
        return []
    text = value.strip()
    if text.startswith("["):
        try:
            parsed = json.loads(text)
        except json.JSONDecodeError:
            parsed = None
        if isinstance(parsed, list):
            return parsed
    return [item.strip() for item in text.split(",") if item.strip()]


settings = Settings()

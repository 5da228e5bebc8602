"""Pagination settings.

Centralized defaults for offset and cursor pagination.

Environment variables use PAGINATION_ prefix.
Example: PAGINATION_DEFAULT_PAGE_SIZE=50, PAGINATION_INCLUDE_TOTAL=true
"""

from __future__ import annotations

from pydantic import Field, model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class PaginationSettings(BaseSettings):
    """Pagination configuration settings.

    Attributes:
        default_page_size: Page size used when a request does not give one.
        max_page_size: Hard upper bound for requested page sizes.
        include_total: Run the extra count query so cursor pages carry total_pages.
        null_safe_sort: Order None before any value when sorting in memory.

    Example:
        settings = PaginationSettings()
        size = min(requested_size, settings.max_page_size)
    """

    default_page_size: int = Field(
        default=20,
        ge=1,
        le=1000,
        description="Default page size when size not specified",
    )
    max_page_size: int = Field(
        default=100,
        ge=1,
        le=10000,
        description="Maximum allowed page size (hard limit)",
    )
    include_total: bool = Field(
        default=False,
        description="Count matching rows for cursor pages (one extra query)",
    )
    null_safe_sort: bool = Field(
        default=True,
        description="Tolerate None in nested paths when sorting in memory",
    )

    model_config = SettingsConfigDict(
        env_prefix="PAGINATION_",
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        frozen=True,
        extra="ignore",
    )

    @model_validator(mode="after")
    def check_default_within_max(self) -> PaginationSettings:
        """Default page size cannot exceed the maximum."""
        if self.default_page_size > self.max_page_size:
            msg = "default_page_size must be <= max_page_size"
            raise ValueError(msg)
        return self

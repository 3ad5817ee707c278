"""Models for critical CSS extraction requests and results."""

from __future__ import annotations

from enum import Enum
from typing import Any, List

from pydantic import AliasChoices, AnyHttpUrl, BaseModel, ConfigDict, Field, field_validator

DEFAULT_WIDTH = 1366
DEFAULT_HEIGHT = 768
WIDTH_BOUNDS = (320, 2560)
HEIGHT_BOUNDS = (480, 2000)

DEFAULT_SETTLE_MS = 10_000
SETTLE_BOUNDS = (0, 60_000)
DEFAULT_CSS_WAIT_MS = 15_000
CSS_WAIT_BOUNDS = (1_000, 60_000)

_TRUTHY = {"1", "true", "yes", "on"}


def _clamp_int(value: Any, default: int, bounds: tuple[int, int]) -> int:
    """Parse an integer leniently, falling back to the default, then clamp it."""

    try:
        parsed = int(str(value).strip())
    except (TypeError, ValueError):
        parsed = default
    low, high = bounds
    return min(max(parsed, low), high)


class ScopeMode(str, Enum):
    """Which coverage window feeds the extraction."""

    page = "page"
    fold = "fold"


class CacheStatus(str, Enum):
    """Whether a result was served from the result cache."""

    hit = "HIT"
    miss = "MISS"


class CriticalCSSRequest(BaseModel):
    """Extraction parameters, accepted either as query parameters or as a JSON body."""

    model_config = ConfigDict(populate_by_name=True)

    url: AnyHttpUrl = Field(..., description="Page to render.")
    width: int = Field(default=DEFAULT_WIDTH, validation_alias=AliasChoices("width", "w"))
    height: int = Field(default=DEFAULT_HEIGHT, validation_alias=AliasChoices("height", "h"))
    user_agent: str = Field(default="", validation_alias=AliasChoices("user_agent", "ua"))
    wait_selectors: List[str] = Field(
        default_factory=list,
        validation_alias=AliasChoices("wait_selectors", "wait"),
        description="Selectors to wait for, as a list or a comma separated string.",
    )
    settle_ms: int = Field(default=DEFAULT_SETTLE_MS, validation_alias=AliasChoices("settle_ms", "settle"))
    css_wait_ms: int = Field(default=DEFAULT_CSS_WAIT_MS, validation_alias=AliasChoices("css_wait_ms", "csswait"))
    scope: ScopeMode = ScopeMode.page
    include_base: bool = Field(default=False, validation_alias=AliasChoices("include_base", "base"))

    @field_validator("width", mode="before")
    @classmethod
    def _clamp_width(cls, value: Any) -> int:
        return _clamp_int(value, DEFAULT_WIDTH, WIDTH_BOUNDS)

    @field_validator("height", mode="before")
    @classmethod
    def _clamp_height(cls, value: Any) -> int:
        return _clamp_int(value, DEFAULT_HEIGHT, HEIGHT_BOUNDS)

    @field_validator("settle_ms", mode="before")
    @classmethod
    def _clamp_settle(cls, value: Any) -> int:
        return _clamp_int(value, DEFAULT_SETTLE_MS, SETTLE_BOUNDS)

    @field_validator("css_wait_ms", mode="before")
    @classmethod
    def _clamp_css_wait(cls, value: Any) -> int:
        return _clamp_int(value, DEFAULT_CSS_WAIT_MS, CSS_WAIT_BOUNDS)

    @field_validator("user_agent", mode="before")
    @classmethod
    def _strip_user_agent(cls, value: Any) -> str:
        return str(value or "").strip()

    @field_validator("wait_selectors", mode="before")
    @classmethod
    def _split_selectors(cls, value: Any) -> List[str]:
        if value is None:
            return []
        items = value.split(",") if isinstance(value, str) else list(value)
        return [str(item).strip() for item in items if str(item).strip()]

    @field_validator("scope", mode="before")
    @classmethod
    def _default_scope(cls, value: Any) -> ScopeMode:
        if isinstance(value, ScopeMode):
            return value
        try:
            return ScopeMode(str(value or ScopeMode.page.value).strip().lower())
        except ValueError:
            return ScopeMode.page

    @field_validator("include_base", mode="before")
    @classmethod
    def _parse_flag(cls, value: Any) -> bool:
        if isinstance(value, str):
            return value.strip().lower() in _TRUTHY
        return bool(value)


class CriticalCSSResult(BaseModel):
    """Outcome of one extraction; an empty ``critical_css`` means nothing critical was found."""

    critical_css: str
    cache_status: CacheStatus
    cache_key: str

    @property
    def is_empty(self) -> bool:
        return not self.critical_css

import json
import re
from typing import Annotated, Any

from pydantic import field_validator
from pydantic_settings import BaseSettings, NoDecode, SettingsConfigDict


def _parse_list(raw: Any) -> list[str]:
    """Parse a list setting from JSON or a comma/space separated string."""
    if raw is None:
        return []
    if isinstance(raw, (list, tuple)):
        items = [str(v).strip() for v in raw]
        return [v for v in items if v]

    raw = str(raw).strip()
    if not raw or raw == "[]":
        return []

    # Prefer JSON, but tolerate plain values so a misconfigured deployment
    # still starts.
    if raw.startswith(("[", '"', "'")):
        try:
            parsed = json.loads(raw)
        except json.JSONDecodeError:
            parsed = None
        if isinstance(parsed, list):
            items = [str(v).strip() for v in parsed]
            return [v for v in items if v]
        if isinstance(parsed, str):
            raw = parsed.strip()

    parts = [p for p in re.split(r"[,\s]+", raw) if p]

    # Deduplicate while preserving order.
    seen: set[str] = set()
    result: list[str] = []
    for part in parts:
        if part in seen:
            continue
        seen.add(part)
        result.append(part)
    return result


def _parse_cors_origins(raw: Any) -> list[str]:
    origins = _parse_list(raw)
    if "*" in origins:
        return ["*"]

    result: list[str] = []
    for origin in origins:
        if "://" in origin:
            result.append(origin)
            continue
        # Browsers include the scheme in the Origin header.
        result.append(f"http://{origin}")
        result.append(f"https://{origin}")
    return result


class Settings(BaseSettings):
    """Application settings loaded from environment variables.

    All settings can be configured via environment variables or .env file.
    """

    # Debug mode - enables detailed error responses
    debug: bool = False

    # Admission: sliding window + daily quota + cooldown
    requests_per_window: int = 5
    window_minutes: int = 5
    daily_limit: int = 20
    cooldown_seconds: int = 30

    # Admission: prompt length bounds
    min_post_length: int = 10
    max_post_length: int = 2000

    # Admission: near-duplicate detection
    duplicate_similarity_threshold: float = 0.9
    duplicate_window_seconds: int = 3600  # 1 hour
    duplicate_history_max_entries: int = 200

    # Number of lock stripes guarding per-client state
    lock_stripes: int = 64

    # Upstream (Anthropic Messages API)
    anthropic_api_key: str = ""
    anthropic_base_url: str = "https://api.anthropic.com"
    anthropic_version: str = "2023-06-01"
    anthropic_model: str = "claude-sonnet-4-20250514"
    anthropic_max_tokens: int = 2000

    # Serve canned responses instead of calling the upstream API
    mock_provider: bool = False

    # HTTP Client connection pool settings
    httpx_connect_timeout: float = 10.0
    httpx_read_timeout: float = 60.0
    httpx_write_timeout: float = 10.0
    httpx_pool_timeout: float = 5.0
    httpx_keepalive_expiry: float = 30.0
    httpx_max_connections: int = 100
    httpx_max_keepalive_connections: int = 20

    # Request guards
    allowed_referrers: Annotated[list[str], NoDecode] = [
        "https://social-post-generator.netlify.app",
        "http://localhost:3000",
        "http://127.0.0.1:3000",
    ]
    blocked_user_agents: Annotated[list[str], NoDecode] = [
        "curl",
        "wget",
        "python",
        "bot",
        "crawler",
        "spider",
    ]

    # CORS settings
    cors_origins: Annotated[list[str], NoDecode] = ["*"]

    # Logging settings
    log_level: str = "INFO"
    log_format: str = "text"  # text | structured | json

    @field_validator("cors_origins", mode="before")
    @classmethod
    def decode_cors_origins(cls, v: Any) -> list[str]:
        return _parse_cors_origins(v)

    @field_validator("allowed_referrers", "blocked_user_agents", mode="before")
    @classmethod
    def decode_list(cls, v: Any) -> list[str]:
        return _parse_list(v)

    @field_validator(
        "requests_per_window",
        "window_minutes",
        "daily_limit",
        "min_post_length",
        "max_post_length",
        "duplicate_window_seconds",
        "duplicate_history_max_entries",
        "lock_stripes",
    )
    @classmethod
    def validate_positive(cls, v: int) -> int:
        """Validate limit values are positive."""
        if v < 1:
            raise ValueError("Admission limits must be at least 1")
        return v

    @field_validator("cooldown_seconds")
    @classmethod
    def validate_cooldown(cls, v: int) -> int:
        if v < 0:
            raise ValueError("cooldown_seconds must not be negative")
        return v

    @field_validator("duplicate_similarity_threshold")
    @classmethod
    def validate_threshold(cls, v: float) -> float:
        """Validate the similarity threshold is a ratio."""
        if not 0.0 <= v <= 1.0:
            raise ValueError("duplicate_similarity_threshold must be between 0 and 1")
        return v

    @field_validator("httpx_connect_timeout", "httpx_read_timeout", "httpx_write_timeout")
    @classmethod
    def validate_timeout_positive(cls, v: float) -> float:
        """Validate timeout values are positive."""
        if v <= 0:
            raise ValueError("Timeout values must be positive")
        return v

    @property
    def window_seconds(self) -> int:
        return self.window_minutes * 60

    model_config = SettingsConfigDict(env_file=".env", extra="ignore")


# Global settings instance
settings = Settings()

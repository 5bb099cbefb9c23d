import pytest
from pydantic import ValidationError

from postguard.app.core.config import Settings


def test_admission_defaults() -> None:
    settings = Settings(_env_file=None)

    assert settings.requests_per_window == 5
    assert settings.window_minutes == 5
    assert settings.window_seconds == 300
    assert settings.daily_limit == 20
    assert settings.min_post_length == 10
    assert settings.max_post_length == 2000
    assert settings.cooldown_seconds == 30
    assert settings.duplicate_similarity_threshold == 0.9
    assert settings.duplicate_window_seconds == 3600
    assert settings.duplicate_history_max_entries == 200


def test_limits_from_environment(monkeypatch) -> None:
    monkeypatch.setenv("REQUESTS_PER_WINDOW", "10")
    monkeypatch.setenv("COOLDOWN_SECONDS", "5")

    settings = Settings(_env_file=None)
    assert settings.requests_per_window == 10
    assert settings.cooldown_seconds == 5


def test_cors_origins_accepts_host_without_json(monkeypatch) -> None:
    monkeypatch.setenv("CORS_ORIGINS", "43.163.94.63")

    settings = Settings(_env_file=None)
    assert "http://43.163.94.63" in settings.cors_origins
    assert "https://43.163.94.63" in settings.cors_origins


@pytest.mark.parametrize(
    ("raw", "expected"),
    [
        ('["http://localhost:5173"]', ["http://localhost:5173"]),
        ("*", ["*"]),
        ("[]", []),
        ("", []),
    ],
)
def test_cors_origins_parsing_variants(monkeypatch, raw: str, expected: list[str]) -> None:
    monkeypatch.setenv("CORS_ORIGINS", raw)

    settings = Settings(_env_file=None)
    assert settings.cors_origins == expected


def test_blocked_user_agents_comma_separated(monkeypatch) -> None:
    monkeypatch.setenv("BLOCKED_USER_AGENTS", "curl, wget,  headless")

    settings = Settings(_env_file=None)
    assert settings.blocked_user_agents == ["curl", "wget", "headless"]


def test_allowed_referrers_json(monkeypatch) -> None:
    monkeypatch.setenv("ALLOWED_REFERRERS", '["https://example.com"]')

    settings = Settings(_env_file=None)
    assert settings.allowed_referrers == ["https://example.com"]


@pytest.mark.parametrize(
    "overrides",
    [
        {"requests_per_window": 0},
        {"daily_limit": -1},
        {"cooldown_seconds": -5},
        {"duplicate_similarity_threshold": 1.5},
    ],
)
def test_invalid_limits_rejected(overrides) -> None:
    with pytest.raises(ValidationError):
        Settings(_env_file=None, **overrides)

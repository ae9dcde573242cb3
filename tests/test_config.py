"""Tests for centralized Settings, credential validation, and get_settings cache.

Covers: defaults, env-override, production credential gate, dev-mode warnings,
and lru_cache behavior.
"""

from __future__ import annotations

from pathlib import Path

import pytest

from replydesk.config import Settings, get_settings, validate_credentials

# ---------------------------------------------------------------------------
# Fixtures
# ---------------------------------------------------------------------------

@pytest.fixture(autouse=True)
def _clear_settings_cache() -> None:
    """Clear get_settings lru_cache before each test."""
    get_settings.cache_clear()


# ---------------------------------------------------------------------------
# Settings defaults
# ---------------------------------------------------------------------------

class TestSettingsDefaults:
    """Verify that Settings fields have the expected default values."""

    def test_settings_defaults(self, monkeypatch: pytest.MonkeyPatch) -> None:
        for field in Settings.model_fields:
            monkeypatch.delenv(field.upper(), raising=False)
        s = Settings(_env_file=None)  # type: ignore[call-arg]

        assert s.production is False
        assert s.port == 8000
        assert s.agent_email == ""
        assert s.gmail_token_path == Path("token.json")
        assert s.refresh_interval_seconds == 90.0
        assert s.thread_list_max_results == 15
        assert s.unreplied_query == "is:unread"
        assert s.replied_query == "is:read in:inbox -in:sent"
        assert s.anthropic_api_key.get_secret_value() == ""
        assert s.knowledge_base_dir == Path("knowledge_base")
        assert s.attachments_dir == Path("data/attachments")

    def test_settings_from_env(self, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setenv("PRODUCTION", "true")
        monkeypatch.setenv("PORT", "9090")
        monkeypatch.setenv("ANTHROPIC_API_KEY", "sk-test")
        monkeypatch.setenv("REFRESH_INTERVAL_SECONDS", "30")

        s = Settings(_env_file=None)  # type: ignore[call-arg]

        assert s.production is True
        assert s.port == 9090
        assert s.anthropic_api_key.get_secret_value() == "sk-test"
        assert s.refresh_interval_seconds == 30.0

    def test_secret_not_in_repr(self) -> None:
        s = Settings(_env_file=None, anthropic_api_key="sk-secret")  # type: ignore[call-arg,arg-type]
        assert "sk-secret" not in repr(s)


# ---------------------------------------------------------------------------
# Credential validation
# ---------------------------------------------------------------------------

class TestValidateCredentials:
    """Verify validate_credentials behaviour in production and dev modes."""

    def test_validate_credentials_production_missing(self, tmp_path: Path) -> None:
        """Production mode exits when credentials are missing."""
        settings = Settings(
            _env_file=None,  # type: ignore[call-arg]
            production=True,
            gmail_token_path=tmp_path / "nonexistent_token.json",
            anthropic_api_key="",  # type: ignore[arg-type]
        )

        with pytest.raises(SystemExit) as exc_info:
            validate_credentials(settings)

        assert exc_info.value.code == 1

    def test_validate_credentials_production_valid(self, tmp_path: Path) -> None:
        """Production mode passes when all credentials exist."""
        token_file = tmp_path / "token.json"
        token_file.write_text("{}")

        settings = Settings(
            _env_file=None,  # type: ignore[call-arg]
            production=True,
            gmail_token_path=token_file,
            anthropic_api_key="sk-valid",  # type: ignore[arg-type]
        )

        # Should NOT raise or exit
        validate_credentials(settings)

    def test_validate_credentials_dev_mode_warns(self, tmp_path: Path) -> None:
        """Dev mode logs warnings but does NOT exit."""
        settings = Settings(
            _env_file=None,  # type: ignore[call-arg]
            production=False,
            gmail_token_path=tmp_path / "missing_token.json",
            anthropic_api_key="",  # type: ignore[arg-type]
        )

        validate_credentials(settings)


# ---------------------------------------------------------------------------
# get_settings cache
# ---------------------------------------------------------------------------

class TestGetSettingsCached:
    """Verify lru_cache on get_settings."""

    def test_get_settings_cached(self, monkeypatch: pytest.MonkeyPatch) -> None:
        """Calling get_settings() twice returns the exact same object."""
        monkeypatch.delenv("PRODUCTION", raising=False)

        first = get_settings()
        second = get_settings()

        assert first is second

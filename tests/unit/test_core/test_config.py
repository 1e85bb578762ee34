"""Unit tests for core configuration module."""

from decimal import Decimal

import pytest
from pydantic import ValidationError

from election_cycle.core.config import Settings

_SECRET = "test-secret-key-that-is-at-least-32-characters-long"


@pytest.fixture
def base_env(monkeypatch: pytest.MonkeyPatch) -> pytest.MonkeyPatch:
    monkeypatch.setenv("DATABASE_URL", "postgresql+asyncpg://localhost/db")
    monkeypatch.setenv("JWT_SECRET_KEY", _SECRET)
    return monkeypatch


class TestSettings:
    """Tests for Settings configuration."""

    def test_settings_from_env(self, base_env: pytest.MonkeyPatch) -> None:
        settings = Settings()  # type: ignore[call-arg]
        assert settings.database_url == "postgresql+asyncpg://localhost/db"
        assert settings.jwt_secret_key == _SECRET

    def test_election_defaults(self, base_env: pytest.MonkeyPatch) -> None:
        settings = Settings(_env_file=None)  # type: ignore[call-arg]
        assert settings.operator_identity == "election"
        assert settings.treasury_symbol == "8,VOTE"
        assert settings.voting_method == "1token1vote"
        assert settings.weighting_mode == "votestake"
        assert settings.ballot_fee_recipient == "decide"
        assert settings.ballot_fee_amount == Decimal("30.00000000")
        assert settings.ballot_fee_symbol == "WAX"
        assert settings.sync_batch_size == 100
        assert settings.cleanup_batch_size == 200
        assert settings.nomination_purge_threshold == 200
        assert settings.self_nomination_accept_limit == 150
        assert settings.auto_advance_enabled is False
        assert settings.api_v1_prefix == "/api/v1"

    def test_jwt_secret_key_minimum_length(self, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setenv("DATABASE_URL", "postgresql+asyncpg://localhost/db")
        monkeypatch.setenv("JWT_SECRET_KEY", "too-short")
        with pytest.raises(ValidationError, match="at least 32 characters"):
            Settings()  # type: ignore[call-arg]

    def test_batch_sizes_must_be_positive(self, base_env: pytest.MonkeyPatch) -> None:
        base_env.setenv("SYNC_BATCH_SIZE", "0")
        with pytest.raises(ValidationError):
            Settings()  # type: ignore[call-arg]

    def test_purge_threshold_fits_counter(self, base_env: pytest.MonkeyPatch) -> None:
        base_env.setenv("NOMINATION_PURGE_THRESHOLD", "300")
        with pytest.raises(ValidationError):
            Settings()  # type: ignore[call-arg]

    def test_auto_advance_interval_floor(self, base_env: pytest.MonkeyPatch) -> None:
        base_env.setenv("AUTO_ADVANCE_INTERVAL", "5")
        with pytest.raises(ValidationError):
            Settings()  # type: ignore[call-arg]

    def test_service_urls_are_normalized(self, base_env: pytest.MonkeyPatch) -> None:
        base_env.setenv("BALLOT_SERVICE_URL", "https://ballots.example.com/")
        settings = Settings()  # type: ignore[call-arg]
        assert settings.ballot_service_url == "https://ballots.example.com"

    def test_service_url_scheme_required(self, base_env: pytest.MonkeyPatch) -> None:
        base_env.setenv("LEDGER_URL", "ftp://ledger.example.com")
        with pytest.raises(ValidationError, match="http or https"):
            Settings()  # type: ignore[call-arg]

    def test_database_schema_validated(self, base_env: pytest.MonkeyPatch) -> None:
        base_env.setenv("DATABASE_SCHEMA", "Bad-Schema")
        with pytest.raises(ValidationError, match="Invalid database_schema"):
            Settings()  # type: ignore[call-arg]

    def test_list_properties(self, base_env: pytest.MonkeyPatch) -> None:
        base_env.setenv("CORS_ORIGINS", "http://localhost:3000, http://example.com")
        base_env.setenv("TRUSTED_PROXY_HEADERS", "X-Real-IP,  ")
        settings = Settings()  # type: ignore[call-arg]
        assert settings.cors_origin_list == ["http://localhost:3000", "http://example.com"]
        assert settings.trusted_proxy_header_list == ["X-Real-IP"]

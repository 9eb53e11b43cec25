"""
Tests for Settings loading and validation (STORY-001, STORY-009).

CHANGELOG:
- 2026-10-06: Page-size cap validation (STORY-009)
- 2026-10-02: Initial creation (STORY-001)

TODO:
- None
"""

import pytest
from pydantic import ValidationError

from plantops.config import Settings


class TestSettings:
    """Settings loads from the environment and validates values."""

    def test_defaults(self, monkeypatch: pytest.MonkeyPatch) -> None:
        for var in ("SEED_PLANTS", "SEED_RTUS", "TELEMETRY_MIN_INTERVAL_S", "TELEMETRY_MAX_INTERVAL_S"):
            monkeypatch.delenv(var)
        settings = Settings()
        assert settings.seed_plants == 30
        assert settings.seed_rtus == 100
        assert settings.plant_page_size == 10
        assert settings.rtu_page_size == 20
        assert settings.max_page_size == 100
        assert settings.device_ids == ["0001", "0002", "0003", "0004", "0005"]
        assert settings.telemetry_min_interval_s == 3.0
        assert settings.telemetry_max_interval_s == 8.0

    def test_api_tokens_required(self, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.delenv("API_TOKENS")
        with pytest.raises(ValidationError):
            Settings()

    def test_log_level_normalised(self, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setenv("LOG_LEVEL", " debug ")
        assert Settings().log_level == "DEBUG"

    def test_unknown_log_level_rejected(self, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setenv("LOG_LEVEL", "chatty")
        with pytest.raises(ValidationError):
            Settings()

    @pytest.mark.parametrize(
        ("var", "value"),
        [
            ("SEED_PLANTS", "-1"),
            ("PLANT_PAGE_SIZE", "0"),
            ("MAX_PAGE_SIZE", "5"),
            ("TELEMETRY_MIN_INTERVAL_S", "0"),
            ("TELEMETRY_MAX_INTERVAL_S", "1"),
            ("TELEMETRY_DEVICE_IDS", " , "),
        ],
    )
    def test_invalid_values_rejected(
        self, monkeypatch: pytest.MonkeyPatch, var: str, value: str
    ) -> None:
        monkeypatch.setenv(var, value)
        with pytest.raises(ValidationError):
            Settings()

    def test_device_ids_deduplicated_in_order(self, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setenv("TELEMETRY_DEVICE_IDS", "b, a ,b,c")
        assert Settings().device_ids == ["b", "a", "c"]

    def test_origins_split(self, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setenv("CORS_ORIGINS", "http://a, http://b,")
        assert Settings().origins == ["http://a", "http://b"]

"""
Service configuration loaded from environment variables.

Uses Pydantic BaseSettings for automatic env var loading and validation.
All values come from environment variables or a ``.env`` file; only
API_TOKENS is required, everything else has a development default.

CHANGELOG:
- 2026-10-14: Add MAIL_SENDER_DOMAIN (STORY-022)
- 2026-10-06: Add MAX_PAGE_SIZE and per-collection default page sizes (STORY-009)
- 2026-10-02: Initial creation (STORY-001)

TODO:
- None
"""

from pydantic import field_validator, model_validator
from pydantic_settings import BaseSettings

_LOG_LEVELS = frozenset({"CRITICAL", "ERROR", "WARNING", "INFO", "DEBUG"})


class Settings(BaseSettings):
    """Configuration for the plant operations API.

    Attributes:
        api_tokens: Comma-separated ``token:user`` pairs for bearer auth.
        host: Interface uvicorn binds to.
        port: TCP port uvicorn listens on.
        log_level: Root logger level name.
        log_json: Emit structured JSON log lines instead of plain text.
        cors_origins: Comma-separated list of allowed browser origins.
        seed_plants: Number of synthetic plants generated at startup.
        seed_rtus: Number of synthetic RTUs generated at startup.
        seed_random: Optional RNG seed for reproducible startup data.
        plant_page_size: Default ``limit`` for plant listings.
        rtu_page_size: Default ``limit`` for RTU listings.
        max_page_size: Largest ``limit`` a listing request may ask for.
        telemetry_device_ids: Comma-separated ids of simulated RTUs.
        telemetry_min_interval_s: Lower bound of the per-device refresh interval.
        telemetry_max_interval_s: Upper bound of the per-device refresh interval.
        history_path: SQLite file backing the change-history journal.
        history_limit: Default number of history entries returned.
        mail_sender_domain: Domain of sender addresses (``user@domain``).
    """

    api_tokens: str
    host: str = "0.0.0.0"
    port: int = 8000
    log_level: str = "INFO"
    log_json: bool = False
    cors_origins: str = "http://localhost:3000"
    seed_plants: int = 30
    seed_rtus: int = 100
    seed_random: int | None = None
    plant_page_size: int = 10
    rtu_page_size: int = 20
    max_page_size: int = 100
    telemetry_device_ids: str = "0001,0002,0003,0004,0005"
    telemetry_min_interval_s: float = 3.0
    telemetry_max_interval_s: float = 8.0
    history_path: str = "data/history.db"
    history_limit: int = 50
    mail_sender_domain: str = "plantops.local"

    model_config = {"env_file": ".env", "env_file_encoding": "utf-8"}

    @field_validator("log_level")
    @classmethod
    def log_level_must_be_known(cls, v: str) -> str:
        """Normalise and validate the log level name."""
        level = v.strip().upper()
        if level not in _LOG_LEVELS:
            raise ValueError(f"LOG_LEVEL must be one of {sorted(_LOG_LEVELS)}")
        return level

    @field_validator("seed_plants", "seed_rtus")
    @classmethod
    def seed_counts_must_be_non_negative(cls, v: int) -> int:
        """Validate seed counts are non-negative."""
        if v < 0:
            raise ValueError("SEED_PLANTS and SEED_RTUS must be >= 0")
        return v

    @field_validator("plant_page_size", "rtu_page_size", "max_page_size", "history_limit")
    @classmethod
    def sizes_must_be_positive(cls, v: int) -> int:
        """Validate page sizes and the history limit are at least 1."""
        if v < 1:
            raise ValueError("page sizes and HISTORY_LIMIT must be >= 1")
        return v

    @field_validator("telemetry_min_interval_s")
    @classmethod
    def telemetry_interval_must_be_positive(cls, v: float) -> float:
        """Validate the telemetry refresh interval is strictly positive."""
        if v <= 0:
            raise ValueError("TELEMETRY_MIN_INTERVAL_S must be > 0")
        return v

    @model_validator(mode="after")
    def _check_cross_field_bounds(self) -> "Settings":
        """Validate interval ordering and default page sizes against the cap."""
        if self.telemetry_max_interval_s < self.telemetry_min_interval_s:
            raise ValueError(
                "TELEMETRY_MAX_INTERVAL_S must be >= TELEMETRY_MIN_INTERVAL_S"
            )
        if max(self.plant_page_size, self.rtu_page_size) > self.max_page_size:
            raise ValueError("default page sizes must not exceed MAX_PAGE_SIZE")
        if not self.device_ids:
            raise ValueError("TELEMETRY_DEVICE_IDS must name at least one device")
        return self

    @property
    def device_ids(self) -> list[str]:
        """Simulated telemetry device ids, in configured order, deduplicated."""
        seen: dict[str, None] = {}
        for raw in self.telemetry_device_ids.split(","):
            device_id = raw.strip()
            if device_id:
                seen.setdefault(device_id, None)
        return list(seen)

    @property
    def origins(self) -> list[str]:
        """Allowed CORS origins."""
        return [o.strip() for o in self.cors_origins.split(",") if o.strip()]

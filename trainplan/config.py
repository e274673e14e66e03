"""Engine configuration with environment-specific profiles.

Supports dev, staging, and production environments via APP_ENV.
All values can be overridden by environment variables.
"""

from __future__ import annotations

import os
from dataclasses import dataclass


@dataclass(frozen=True)
class Settings:
    """Immutable engine settings resolved from environment."""

    app_env: str = "dev"
    log_level: str = "INFO"
    default_methodology: str = "daniels"

    # Intensity distribution enforcement
    distribution_tolerance: float = 5.0
    max_adjustment_iterations: int = 5

    # Easy -> tempo upgrades when a plan is too easy
    max_upgrades_per_week: int = 2
    upgrade_every_nth: int = 1
    upgrade_min_duration: float = 45.0
    upgrade_seed: int | None = None

    @property
    def is_production(self) -> bool:
        return self.app_env == "production"

    @property
    def is_dev(self) -> bool:
        return self.app_env == "dev"


# -- Environment profiles --

_ENV_PROFILES: dict[str, dict] = {
    "dev": {
        "log_level": "DEBUG",
        "max_adjustment_iterations": 5,
    },
    "staging": {
        "log_level": "INFO",
        "max_adjustment_iterations": 5,
    },
    "production": {
        "log_level": "WARNING",
        "max_adjustment_iterations": 8,
    },
}


def _optional_int(raw: str | None) -> int | None:
    if raw is None or raw.strip() == "":
        return None
    return int(raw)


def get_settings() -> Settings:
    """Build Settings by merging environment profile with env-var overrides."""
    app_env = os.getenv("APP_ENV", "dev")
    profile = _ENV_PROFILES.get(app_env, _ENV_PROFILES["dev"])

    return Settings(
        app_env=app_env,
        log_level=os.getenv("LOG_LEVEL", profile.get("log_level", "INFO")),
        default_methodology=os.getenv("DEFAULT_METHODOLOGY", "daniels"),
        distribution_tolerance=float(os.getenv("DISTRIBUTION_TOLERANCE", "5.0")),
        max_adjustment_iterations=int(
            os.getenv("MAX_ADJUSTMENT_ITERATIONS", str(profile.get("max_adjustment_iterations", 5)))
        ),
        max_upgrades_per_week=int(os.getenv("MAX_UPGRADES_PER_WEEK", "2")),
        upgrade_every_nth=int(os.getenv("UPGRADE_EVERY_NTH", "1")),
        upgrade_min_duration=float(os.getenv("UPGRADE_MIN_DURATION", "45")),
        upgrade_seed=_optional_int(os.getenv("UPGRADE_SEED")),
    )

"""Engine configuration loaded from ``RISK_ENGINE_*`` environment variables."""

import logging
from functools import lru_cache
from typing import Optional

from pydantic import Field, field_validator, model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

logger = logging.getLogger(__name__)


class EngineSettings(BaseSettings):
    """Admin-tunable cutoffs and catalog location"""

    model_config = SettingsConfigDict(env_prefix="RISK_ENGINE_", env_file=".env", extra="ignore")

    force_preselect_score: float = Field(default=7.0, ge=0, le=10)
    min_preselect_score: float = Field(default=4.0, ge=0, le=10)

    catalog_path: str = Field(default="data/catalog")
    catalog_url: Optional[str] = Field(default=None)
    request_timeout: float = Field(default=30.0, gt=0)

    log_level: str = Field(default="INFO")

    @field_validator("log_level", mode="before")
    @classmethod
    def _normalize_log_level(cls, value: str) -> str:
        valid_levels = {"DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"}
        level = (value or "INFO").upper()
        if level not in valid_levels:
            raise ValueError(f"log_level must be one of {sorted(valid_levels)}")
        return level

    @model_validator(mode="after")
    def _check_cutoffs(self) -> "EngineSettings":
        if self.min_preselect_score > self.force_preselect_score:
            raise ValueError(
                f"min_preselect_score ({self.min_preselect_score}) must not exceed "
                f"force_preselect_score ({self.force_preselect_score})"
            )
        return self


@lru_cache()
def get_settings() -> EngineSettings:
    settings = EngineSettings()
    logger.debug(
        f"Loaded settings: force={settings.force_preselect_score} "
        f"min={settings.min_preselect_score} catalog={settings.catalog_url or settings.catalog_path}"
    )
    return settings

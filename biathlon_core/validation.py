"""
Race configuration schema using Pydantic v2
Validates the JSON configuration document consumed at startup
"""

import logging
from datetime import datetime, timedelta
from pathlib import Path
from typing import Any, Union

from pydantic import BaseModel, ConfigDict, Field, ValidationError, field_validator

from .clock import FormatError, instant_from_offset, parse_duration

logger = logging.getLogger(__name__)


class ConfigError(ValueError):
    """Raised when the configuration document is missing fields or malformed."""


class RaceConfig(BaseModel):
    """Competition parameters, read-only for the duration of a run"""

    laps: int = Field(..., ge=1, le=1000, description="Number of main laps")
    lapLen: int = Field(..., gt=0, description="Length of one main lap (m)")
    penaltyLen: int = Field(..., gt=0, description="Length of one penalty loop (m)")
    firingLines: int = Field(..., ge=0, le=100, description="Number of firing lines")
    start: datetime = Field(..., description="Scheduled start (HH:MM:SS[.mmm])")
    startDelta: timedelta = Field(
        ..., description="Interval between start slots (HH:MM:SS[.mmm])"
    )

    @field_validator("start", mode="before")
    @classmethod
    def validate_start(cls, v: Any) -> Any:
        """Parse the scheduled start clock string into a race-clock instant"""
        if isinstance(v, datetime):
            return v
        if not isinstance(v, str):
            raise ValueError("start must be a clock string")
        try:
            return instant_from_offset(parse_duration(v))
        except FormatError as exc:
            raise ValueError(str(exc)) from exc

    @field_validator("startDelta", mode="before")
    @classmethod
    def validate_start_delta(cls, v: Any) -> Any:
        """Parse the start slot interval (HH:MM:SS[.mmm])"""
        if isinstance(v, timedelta):
            return v
        if not isinstance(v, str):
            raise ValueError("startDelta must be a clock string")
        try:
            return parse_duration(v)
        except FormatError as exc:
            raise ValueError(str(exc)) from exc

    @field_validator("start")
    @classmethod
    def validate_start_within_day(cls, v: datetime) -> datetime:
        if (v - instant_from_offset(timedelta())) >= timedelta(days=1):
            raise ValueError("start must be a time of day (hours 0-23)")
        return v

    model_config = ConfigDict(frozen=True, extra="ignore")


def parse_config(document: Union[str, bytes]) -> RaceConfig:
    """
    Validate a JSON configuration document

    Returns:
        RaceConfig: Validated configuration

    Raises:
        ConfigError: If the document is not valid JSON or fails validation
    """
    try:
        return RaceConfig.model_validate_json(document)
    except ValidationError as e:
        logger.warning(f"Configuration validation failed: {e}")
        raise ConfigError(f"Invalid configuration: {e}") from e


def load_config(path: Union[str, Path]) -> RaceConfig:
    """
    Read and validate the configuration file at ``path``

    Raises:
        OSError: If the file cannot be read
        ConfigError: If the contents are invalid
    """
    document = Path(path).read_text(encoding="utf-8")
    config = parse_config(document)
    logger.debug(
        f"Loaded configuration from {path}: laps={config.laps}, "
        f"lapLen={config.lapLen}, penaltyLen={config.penaltyLen}"
    )
    return config


# ==================== EXPORT ====================

__all__ = [
    "ConfigError",
    "RaceConfig",
    "load_config",
    "parse_config",
]

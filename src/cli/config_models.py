"""Pydantic configuration models for Steward."""

from pathlib import Path

from pydantic import BaseModel, Field, field_validator, model_validator


class PathsConfig(BaseModel):
    """File paths configuration."""

    data_dir: Path = Path("~/steward")
    log_file: Path = Path("~/steward/steward.log")

    @model_validator(mode="after")
    def expand_paths(self):
        """Expand ~ in all paths."""
        self.data_dir = self.data_dir.expanduser()
        self.log_file = self.log_file.expanduser()
        return self


class LearningConfig(BaseModel):
    """Threshold auto-adjustment tuning."""

    min_interactions: int = Field(default=10, ge=1)
    step: float = Field(default=0.05, gt=0.0, le=0.5)
    high_acceptance: float = Field(default=0.8, ge=0.0, le=1.0)
    low_acceptance: float = Field(default=0.4, ge=0.0, le=1.0)

    @model_validator(mode="after")
    def validate_band(self):
        if self.low_acceptance >= self.high_acceptance:
            raise ValueError(
                f"low_acceptance ({self.low_acceptance}) must be below "
                f"high_acceptance ({self.high_acceptance})"
            )
        return self


class ContextConfig(BaseModel):
    """Context aggregation defaults."""

    days: int = Field(default=7, ge=1, le=365)
    max_items: int = Field(default=10, ge=1, le=100)


VALID_LOG_LEVELS = {"DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"}


class LoggingConfig(BaseModel):
    """Logging configuration."""

    level: str = "INFO"
    json_mode: bool = False

    @field_validator("level")
    @classmethod
    def validate_level(cls, v: str) -> str:
        v_upper = v.upper()
        if v_upper not in VALID_LOG_LEVELS:
            raise ValueError(f"Invalid log level: {v}. Must be one of {VALID_LOG_LEVELS}")
        return v_upper


class CliConfig(BaseModel):
    """Local single-user defaults for the command line."""

    user_id: str = "local"


class StewardConfig(BaseModel):
    """Main configuration model."""

    paths: PathsConfig = Field(default_factory=PathsConfig)
    learning: LearningConfig = Field(default_factory=LearningConfig)
    context: ContextConfig = Field(default_factory=ContextConfig)
    logging: LoggingConfig = Field(default_factory=LoggingConfig)
    cli: CliConfig = Field(default_factory=CliConfig)

    @classmethod
    def from_dict(cls, data: dict) -> "StewardConfig":
        return cls.model_validate(data)

    def to_dict(self) -> dict:
        return self.model_dump(mode="python")

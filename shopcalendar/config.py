"""
Configuration management using Pydantic models loaded from YAML.
"""

from pathlib import Path
from typing import List, Optional

import yaml
from pydantic import BaseModel, Field, field_validator, model_validator

from .domain.exceptions import ConfigError, InvalidFormatError
from .domain.models import WorkingHoursRule
from .domain.timeutils import Now, parse_time
from .domain.working_hours import WorkingHours


class CalendarSettings(BaseModel):
    """Per-shop calendar settings."""
    buffer_time_minutes: int = 0
    default_appointment_duration: int = 30
    slot_granularity_minutes: int = 30

    @field_validator("default_appointment_duration", "slot_granularity_minutes")
    @classmethod
    def validate_positive(cls, value: int) -> int:
        """Ensure durations are positive."""
        if value <= 0:
            raise ValueError("must be greater than zero")
        return value

    @field_validator("buffer_time_minutes")
    @classmethod
    def validate_non_negative(cls, value: int) -> int:
        if value < 0:
            raise ValueError("must not be negative")
        return value


class WorkingHoursConfig(BaseModel):
    """Opening hours for one day of the week (0=Sunday)."""
    day_of_week: int
    open_time: Optional[str] = None
    close_time: Optional[str] = None
    is_closed: bool = False

    @field_validator("day_of_week")
    @classmethod
    def validate_day(cls, v: int) -> int:
        """Validate day is between 0 and 6."""
        if not 0 <= v <= 6:
            raise ValueError(f"day_of_week must be between 0 and 6, got {v}")
        return v

    @field_validator("open_time", "close_time", mode="before")
    @classmethod
    def normalize_time(cls, value):
        """YAML may hand us ``9:00`` as an int of minutes (sexagesimal) or a string."""
        if value is None:
            return None
        if isinstance(value, int):
            hours, minutes = divmod(value, 60)
            value = f"{hours:02d}:{minutes:02d}"
        try:
            return str(parse_time(str(value)))
        except InvalidFormatError as exc:
            raise ValueError(str(exc)) from exc

    @model_validator(mode="after")
    def validate_hours_order(self) -> "WorkingHoursConfig":
        """Ensure an open day opens before it closes."""
        self.to_rule()
        return self

    def to_rule(self) -> WorkingHoursRule:
        if self.is_closed:
            return WorkingHoursRule.closed(self.day_of_week)
        if self.open_time is None or self.close_time is None:
            raise ValueError(f"Day {self.day_of_week} needs open_time and close_time unless is_closed")
        return WorkingHoursRule(
            day_of_week=self.day_of_week,
            open_time=parse_time(self.open_time),
            close_time=parse_time(self.close_time),
        )


class AppConfig(BaseModel):
    """Application configuration."""
    shop_id: str = "default"
    shop_name: str = ""
    timezone: str = "America/New_York"
    log_level: str = "WARNING"
    calendar: CalendarSettings = Field(default_factory=CalendarSettings)
    working_hours: List[WorkingHoursConfig] = Field(default_factory=list)

    @field_validator("working_hours")
    @classmethod
    def validate_unique_days(cls, value: List[WorkingHoursConfig]) -> List[WorkingHoursConfig]:
        """Ensure each weekday is configured at most once."""
        seen: set[int] = set()
        for entry in value:
            if entry.day_of_week in seen:
                raise ValueError(f"Duplicate working hours for day {entry.day_of_week}")
            seen.add(entry.day_of_week)
        return value

    @field_validator("log_level")
    @classmethod
    def validate_log_level(cls, value: str) -> str:
        level = value.upper()
        if level not in {"DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"}:
            raise ValueError(f"Unknown log level: {value}")
        return level

    def to_working_hours(self) -> WorkingHours:
        return WorkingHours(entry.to_rule() for entry in self.working_hours)

    def now(self) -> Now:
        """Current shop-local instant."""
        return Now.current(self.timezone)

    @classmethod
    def load_from_yaml(cls, config_path: Path) -> "AppConfig":
        """
        Load configuration from YAML file.

        Args:
            config_path: Path to the YAML config file

        Returns:
            AppConfig instance

        Raises:
            FileNotFoundError: If config file doesn't exist
            ConfigError: If config is invalid
        """
        if not config_path.exists():
            raise FileNotFoundError(
                f"Config file not found: {config_path}\n"
                f"Please create a config.yaml file. See config.example.yaml for reference."
            )

        data = load_yaml_mapping(config_path)

        try:
            return cls(**data)
        except ValueError as exc:
            raise ConfigError(f"Invalid configuration in {config_path}: {exc}") from exc


def load_yaml_mapping(path: Path) -> dict:
    """Read a YAML file that must contain a mapping at the root."""
    try:
        with open(path, "r", encoding="utf-8") as f:
            data = yaml.safe_load(f) or {}
    except yaml.YAMLError as exc:
        raise ConfigError(f"Invalid YAML in {path}: {exc}") from exc

    if not isinstance(data, dict):
        raise ConfigError(f"{path} must contain a mapping at the root level.")

    return data


def get_default_config_path() -> Path:
    """Get the default configuration file path."""
    # Look for config.yaml in current directory
    current_dir = Path.cwd()
    config_path = current_dir / "config.yaml"

    if not config_path.exists():
        # Try in the project root
        project_root = Path(__file__).parent.parent
        config_path = project_root / "config.yaml"

    return config_path

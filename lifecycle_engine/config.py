"""
Configuration management using Pydantic models loaded from YAML.
"""

from datetime import date as CalendarDate
from pathlib import Path
from typing import Dict, List, Optional, Tuple

import pendulum
import yaml
from pydantic import BaseModel, Field, field_validator, model_validator

from .domain.models import (
    LocaleLabels,
    OpeningWindow,
    OperatingMode,
    ScheduleException,
    WeekDaySchedule,
)
from .domain.time_window import parse_time_of_day

WEEKDAY_KEYS = (
    "monday",
    "tuesday",
    "wednesday",
    "thursday",
    "friday",
    "saturday",
    "sunday",
)


class WindowConfig(BaseModel):
    """
    One opening window as stored in configuration.

    Times are HH:MM strings; either side may be left out, in which case the
    engine skips the window and reports it.
    """
    opens_at: Optional[str] = None
    closes_at: Optional[str] = None

    @field_validator("opens_at", "closes_at", mode="before")
    @classmethod
    def coerce_sexagesimal(cls, v):
        """YAML 1.1 reads unquoted 18:30 as the integer 1110 (minutes)."""
        if isinstance(v, int) and not isinstance(v, bool):
            hours, minutes = divmod(v, 60)
            return f"{hours:02d}:{minutes:02d}"
        return v

    @field_validator("opens_at", "closes_at")
    @classmethod
    def validate_time(cls, v: Optional[str]) -> Optional[str]:
        """Validate HH:MM format when a value is present."""
        if v is None or not v.strip():
            return None
        parse_time_of_day(v)
        return v.strip()

    def to_window(self) -> OpeningWindow:
        return OpeningWindow(
            opens_at=parse_time_of_day(self.opens_at) if self.opens_at else None,
            closes_at=parse_time_of_day(self.closes_at) if self.closes_at else None,
        )


class DayConfig(BaseModel):
    """Weekly schedule entry for one weekday."""
    is_open: bool = False
    windows: List[WindowConfig] = Field(default_factory=list)

    def to_schedule(self) -> WeekDaySchedule:
        return WeekDaySchedule(
            is_open=self.is_open,
            windows=tuple(window.to_window() for window in self.windows),
        )


class ExceptionConfig(BaseModel):
    """Date-specific override (holiday, special hours)."""
    date: CalendarDate
    name: str
    is_open: bool = False
    windows: List[WindowConfig] = Field(default_factory=list)

    def to_exception(self) -> ScheduleException:
        return ScheduleException(
            date=self.date,
            name=self.name,
            is_open=self.is_open,
            windows=tuple(window.to_window() for window in self.windows),
        )


class LabelsConfig(BaseModel):
    """Optional overrides for the display text."""
    weekdays: Optional[List[str]] = None
    closes_at: Optional[str] = None
    opens_at: Optional[str] = None
    opens_on: Optional[str] = None
    closed: Optional[str] = None
    closed_temporarily: Optional[str] = None

    @field_validator("weekdays")
    @classmethod
    def validate_weekdays(cls, value: Optional[List[str]]) -> Optional[List[str]]:
        """Require exactly seven names, Monday first."""
        if value is not None and len(value) != 7:
            raise ValueError(f"weekdays must list 7 names starting with Monday, got {len(value)}")
        return value

    def to_labels(self) -> LocaleLabels:
        overrides = self.model_dump(exclude_none=True)
        if "weekdays" in overrides:
            overrides["weekdays"] = tuple(overrides["weekdays"])
        return LocaleLabels(**overrides)


class OrdersConfig(BaseModel):
    """Order policy settings."""
    allow_reactivation: bool = True


class DeliveryConfig(BaseModel):
    """Delivery times in minutes, preparation included."""
    min_minutes: int = Field(default=30, ge=0)
    max_minutes: int = Field(default=60, ge=0)
    slot_minutes: int = Field(default=30, gt=0)

    @model_validator(mode="after")
    def validate_range(self) -> "DeliveryConfig":
        """Ensure min_minutes <= max_minutes."""
        if self.min_minutes > self.max_minutes:
            raise ValueError(
                f"min_minutes ({self.min_minutes}) must not exceed max_minutes ({self.max_minutes})"
            )
        return self


class AppConfig(BaseModel):
    """Application configuration."""
    timezone: str = "UTC"
    mode: OperatingMode = OperatingMode.AUTOMATIC
    schedule: Dict[str, DayConfig] = Field(default_factory=dict)
    exceptions: List[ExceptionConfig] = Field(default_factory=list)
    labels: LabelsConfig = Field(default_factory=LabelsConfig)
    orders: OrdersConfig = Field(default_factory=OrdersConfig)
    delivery: DeliveryConfig = Field(default_factory=DeliveryConfig)

    @field_validator("timezone")
    @classmethod
    def validate_timezone(cls, value: str) -> str:
        """Ensure the timezone is a known IANA name."""
        try:
            pendulum.timezone(value)
        except Exception as exc:
            raise ValueError(f"Unknown timezone: {value}") from exc
        return value

    @field_validator("schedule")
    @classmethod
    def validate_schedule_keys(cls, value: Dict[str, DayConfig]) -> Dict[str, DayConfig]:
        """Normalise weekday keys and reject unknown ones."""
        normalized: Dict[str, DayConfig] = {}
        for key, day in value.items():
            name = key.strip().lower()
            if name not in WEEKDAY_KEYS:
                raise ValueError(f"Unknown weekday '{key}'. Use one of: {', '.join(WEEKDAY_KEYS)}")
            normalized[name] = day
        return normalized

    @model_validator(mode="after")
    def validate_unique_exception_dates(self) -> "AppConfig":
        """At most one exception may exist per calendar date."""
        seen: set[CalendarDate] = set()
        for exception in self.exceptions:
            if exception.date in seen:
                raise ValueError(f"Duplicate schedule exception for {exception.date.isoformat()}")
            seen.add(exception.date)
        return self

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
            ValueError: If config is invalid
        """
        if not config_path.exists():
            raise FileNotFoundError(
                f"Config file not found: {config_path}\n"
                f"Please create a config.yaml file. See config.example.yaml for reference."
            )

        try:
            with open(config_path, "r", encoding="utf-8") as f:
                data = yaml.safe_load(f) or {}
        except yaml.YAMLError as exc:
            raise ValueError(f"Invalid YAML in {config_path}: {exc}") from exc

        if not isinstance(data, dict):
            raise ValueError("Config file must contain a mapping at the root level.")

        return cls(**data)

    def week_schedule(self) -> Tuple[WeekDaySchedule, ...]:
        """Weekly schedule as seven domain entries, 0=Monday. Missing days are closed."""
        return tuple(
            self.schedule[key].to_schedule() if key in self.schedule else WeekDaySchedule(is_open=False)
            for key in WEEKDAY_KEYS
        )

    def schedule_exceptions(self) -> List[ScheduleException]:
        return [exception.to_exception() for exception in self.exceptions]

    def locale_labels(self) -> LocaleLabels:
        return self.labels.to_labels()


def get_default_config_path() -> Path:
    """Get the default configuration file path."""
    # Look for config.yaml in current directory
    current_dir = Path.cwd()
    config_path = current_dir / "config.yaml"

    if not config_path.exists():
        # Try in the project root (parent of the package)
        project_root = Path(__file__).parent.parent
        config_path = project_root / "config.yaml"

    return config_path

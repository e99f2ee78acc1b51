"""
Tests for YAML configuration loading.
"""

from datetime import date, time
from pathlib import Path

import pytest

from lifecycle_engine.config import AppConfig
from lifecycle_engine.domain.models import OperatingMode

VALID_CONFIG = """
timezone: America/Sao_Paulo
mode: automatic
schedule:
  Monday:
    is_open: true
    windows:
      - {opens_at: "08:00", closes_at: "14:00"}
      - {opens_at: "18:00", closes_at: "23:00"}
  wednesday:
    is_open: true
    windows:
      - {opens_at: "09:00", closes_at: "12:00"}
      - {opens_at: "13:00"}
exceptions:
  - date: 2024-12-25
    name: Christmas
    is_open: false
orders:
  allow_reactivation: false
"""


def write_config(tmp_path: Path, content: str) -> Path:
    path = tmp_path / "config.yaml"
    path.write_text(content, encoding="utf-8")
    return path


class TestAppConfig:
    """Tests for AppConfig."""

    def test_load_valid_config(self, tmp_path):
        config = AppConfig.load_from_yaml(write_config(tmp_path, VALID_CONFIG))

        assert config.timezone == "America/Sao_Paulo"
        assert config.mode == OperatingMode.AUTOMATIC
        assert config.orders.allow_reactivation is False

        week = config.week_schedule()
        assert len(week) == 7
        assert week[0].is_open
        assert week[0].windows[1].opens_at == time(18, 0)
        assert not week[1].is_open  # tuesday not configured

        exceptions = config.schedule_exceptions()
        assert exceptions[0].date == date(2024, 12, 25)
        assert exceptions[0].name == "Christmas"

    def test_window_with_missing_side_is_kept_as_malformed(self, tmp_path):
        """The engine, not the loader, decides to skip incomplete windows."""
        config = AppConfig.load_from_yaml(write_config(tmp_path, VALID_CONFIG))

        wednesday = config.week_schedule()[2]
        assert wednesday.windows[1].is_malformed

    def test_unquoted_times_are_accepted(self, tmp_path):
        """YAML 1.1 reads 18:30 as an integer; it is converted back."""
        content = """
schedule:
  friday:
    is_open: true
    windows:
      - {opens_at: 18:30, closes_at: 02:00}
"""
        config = AppConfig.load_from_yaml(write_config(tmp_path, content))

        friday = config.week_schedule()[4]
        assert friday.windows[0].opens_at == time(18, 30)
        assert friday.windows[0].closes_at == time(2, 0)

    def test_defaults(self, tmp_path):
        config = AppConfig.load_from_yaml(write_config(tmp_path, ""))

        assert config.timezone == "UTC"
        assert config.mode == OperatingMode.AUTOMATIC
        assert all(not day.is_open for day in config.week_schedule())
        assert config.locale_labels().closed == "Closed"
        assert config.delivery.min_minutes == 30
        assert config.delivery.max_minutes == 60
        assert config.delivery.slot_minutes == 30

    def test_label_overrides(self, tmp_path):
        content = """
labels:
  weekdays: [Seg, Ter, Qua, Qui, Sex, Sab, Dom]
  closed: Fechado
"""
        labels = AppConfig.load_from_yaml(write_config(tmp_path, content)).locale_labels()

        assert labels.weekday_name(2) == "Qua"
        assert labels.closed == "Fechado"
        assert labels.closes_at == "Closes at {time}"

    def test_invalid_time_raises(self, tmp_path):
        content = """
schedule:
  monday:
    is_open: true
    windows:
      - {opens_at: "25:00", closes_at: "14:00"}
"""
        with pytest.raises(ValueError, match="Invalid time"):
            AppConfig.load_from_yaml(write_config(tmp_path, content))

    def test_unknown_weekday_raises(self, tmp_path):
        content = """
schedule:
  funday:
    is_open: true
"""
        with pytest.raises(ValueError, match="Unknown weekday"):
            AppConfig.load_from_yaml(write_config(tmp_path, content))

    def test_duplicate_exception_dates_raise(self, tmp_path):
        content = """
exceptions:
  - {date: 2024-12-25, name: Christmas}
  - {date: 2024-12-25, name: Also Christmas, is_open: true}
"""
        with pytest.raises(ValueError, match="Duplicate schedule exception"):
            AppConfig.load_from_yaml(write_config(tmp_path, content))

    def test_unknown_timezone_raises(self, tmp_path):
        with pytest.raises(ValueError, match="Unknown timezone"):
            AppConfig.load_from_yaml(write_config(tmp_path, "timezone: Mars/Olympus_Mons\n"))

    def test_wrong_labels_weekday_count_raises(self, tmp_path):
        content = """
labels:
  weekdays: [Mon, Tue]
"""
        with pytest.raises(ValueError, match="7 names"):
            AppConfig.load_from_yaml(write_config(tmp_path, content))

    def test_missing_file_raises(self, tmp_path):
        with pytest.raises(FileNotFoundError):
            AppConfig.load_from_yaml(tmp_path / "missing.yaml")

    def test_non_mapping_root_raises(self, tmp_path):
        with pytest.raises(ValueError, match="mapping"):
            AppConfig.load_from_yaml(write_config(tmp_path, "- just\n- a list\n"))

    def test_delivery_settings(self, tmp_path):
        content = """
delivery:
  min_minutes: 20
  max_minutes: 45
  slot_minutes: 15
"""
        config = AppConfig.load_from_yaml(write_config(tmp_path, content))

        assert (config.delivery.min_minutes, config.delivery.max_minutes) == (20, 45)
        assert config.delivery.slot_minutes == 15

    def test_inverted_delivery_range_raises(self, tmp_path):
        content = """
delivery:
  min_minutes: 90
  max_minutes: 45
"""
        with pytest.raises(ValueError, match="must not exceed"):
            AppConfig.load_from_yaml(write_config(tmp_path, content))

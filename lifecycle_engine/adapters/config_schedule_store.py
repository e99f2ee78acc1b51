"""
Schedule store backed by the YAML application configuration.
"""

from typing import List, Sequence

from ..config import AppConfig
from ..domain.models import OperatingMode, ScheduleException, WeekDaySchedule


class ConfigScheduleStore:
    """
    Serves schedule data from an ``AppConfig``.

    Implements the schedule store protocol so the CLI can evaluate
    availability without a database.
    """

    def __init__(self, config: AppConfig):
        self.config = config

    async def get_schedule(self) -> Sequence[WeekDaySchedule]:
        return self.config.week_schedule()

    async def get_exceptions(self) -> List[ScheduleException]:
        return self.config.schedule_exceptions()

    async def get_mode(self) -> OperatingMode:
        return self.config.mode

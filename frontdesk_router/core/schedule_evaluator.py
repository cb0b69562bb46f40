"""
Schedule Evaluation

Decides whether a skill's availability window is open at a given instant.
Windows are evaluated in the schedule's own timezone. A window whose end
is not after its start wraps past midnight, so the early-morning tail of
yesterday's window still counts when yesterday is a scheduled day.
"""

import asyncio
import logging
from dataclasses import dataclass, field
from datetime import date, datetime, timedelta
from typing import List, Optional
from zoneinfo import ZoneInfo

from .models.skill import Schedule, Weekday
from ..config.settings import settings
from ..services.holiday_calendar import HolidayCalendar
from ..utils.helpers import parse_hhmm, window_minutes

logger = logging.getLogger(__name__)


@dataclass
class WindowMatch:
    """Result of matching an instant against a schedule, holidays aside."""
    active: bool
    local_time: datetime
    window_date: Optional[date] = None
    carried_over: bool = False


@dataclass
class ScheduleCheck:
    """Full schedule decision, including holiday suppression."""
    active: bool
    reason: Optional[str] = None
    warnings: List[str] = field(default_factory=list)


class ScheduleEvaluator:
    """Evaluates skill schedules against UTC instants."""

    def __init__(
        self,
        holiday_calendar: Optional[HolidayCalendar] = None,
        region: Optional[str] = None,
        timeout: Optional[float] = None
    ):
        self.holiday_calendar = holiday_calendar
        self.region = region or settings.holiday_region
        self.timeout = timeout or settings.holiday_timeout_seconds

    def match_window(self, schedule: Schedule, at_utc: datetime) -> WindowMatch:
        """Match ``at_utc`` against the weekly window, ignoring holidays."""
        local = at_utc.astimezone(ZoneInfo(schedule.timezone))
        today = Weekday.from_index(local.weekday())
        yesterday = Weekday.from_index(local.weekday() - 1)
        minute = local.hour * 60 + local.minute
        start = parse_hhmm(schedule.start_time)
        end = parse_hhmm(schedule.end_time)

        if not schedule.enabled:
            return WindowMatch(active=False, local_time=local)

        if not schedule.wraps_midnight:
            active = today in schedule.days and start <= minute < end
            return WindowMatch(
                active=active,
                local_time=local,
                window_date=local.date() if active else None
            )

        if minute >= start and today in schedule.days:
            return WindowMatch(active=True, local_time=local, window_date=local.date())

        if minute < end and yesterday in schedule.days:
            return WindowMatch(
                active=True,
                local_time=local,
                window_date=local.date() - timedelta(days=1),
                carried_over=True
            )

        return WindowMatch(active=False, local_time=local)

    async def evaluate(
        self,
        schedule: Schedule,
        at_utc: datetime,
        region: Optional[str] = None,
        holiday_calendar: Optional[HolidayCalendar] = None
    ) -> ScheduleCheck:
        """
        Decide whether the schedule is active, consulting the holiday calendar.

        ``holiday_calendar`` is used when the evaluator was built without one,
        so a catalogue can supply its own holiday list per evaluation.
        """
        if not schedule.enabled:
            return ScheduleCheck(active=False, reason="schedule_disabled")

        match = self.match_window(schedule, at_utc)
        if not match.active:
            return ScheduleCheck(active=False, reason="outside_window")

        calendar = self.holiday_calendar if self.holiday_calendar is not None else holiday_calendar
        if not schedule.holidays or calendar is None:
            return ScheduleCheck(active=True)

        # Holidays are checked against the day the window opened on
        lookup_region = region or self.region
        try:
            is_holiday = await asyncio.wait_for(
                calendar.is_holiday(match.window_date, lookup_region),
                timeout=self.timeout
            )
        except asyncio.TimeoutError:
            warning = (
                f"Holiday lookup for {match.window_date} ({lookup_region}) timed out "
                f"after {self.timeout}s; treating as non-holiday"
            )
            logger.warning(warning)
            return ScheduleCheck(active=True, warnings=[warning])
        except Exception as e:
            warning = (
                f"Holiday lookup for {match.window_date} ({lookup_region}) failed: {e}; "
                "treating as non-holiday"
            )
            logger.warning(warning)
            return ScheduleCheck(active=True, warnings=[warning])

        if is_holiday:
            return ScheduleCheck(active=False, reason="holiday")
        return ScheduleCheck(active=True)

    async def is_active(
        self,
        schedule: Schedule,
        at_utc: datetime,
        region: Optional[str] = None,
        holiday_calendar: Optional[HolidayCalendar] = None
    ) -> bool:
        """Return True when the schedule is in window at ``at_utc``."""
        check = await self.evaluate(schedule, at_utc, region, holiday_calendar)
        return check.active

    @staticmethod
    def weekly_active_minutes(schedule: Schedule) -> int:
        """Minutes per week the schedule is open; used to rank specialised skills."""
        if not schedule.enabled:
            return 0
        return len(schedule.days) * window_minutes(schedule.start_time, schedule.end_time)

"""
Unit tests for schedule evaluation.

Covers plain daytime windows, windows that wrap past midnight, holiday
suppression and the fail-open behaviour of the holiday lookup.
"""

import asyncio
import logging
from datetime import date, datetime, timezone
from unittest.mock import AsyncMock

import pytest

from frontdesk_router.core.exceptions.routing_exceptions import HolidayLookupError
from frontdesk_router.core.models import Schedule
from frontdesk_router.core.schedule_evaluator import ScheduleEvaluator
from frontdesk_router.services import StaticHolidayCalendar


def make_schedule(**overrides) -> Schedule:
    data = {
        "timezone": "America/New_York",
        "days": ["Mon", "Tue", "Wed", "Thu", "Fri"],
        "startTime": "09:00",
        "endTime": "17:00",
    }
    data.update(overrides)
    return Schedule.model_validate(data)


class TestDaytimeWindow:
    """Windows whose end is after their start."""

    def test_start_is_inclusive(self, local_time):
        evaluator = ScheduleEvaluator()
        match = evaluator.match_window(make_schedule(), local_time(2025, 6, 2, 9, 0))
        assert match.active is True
        assert match.window_date == date(2025, 6, 2)
        assert match.carried_over is False

    def test_end_is_exclusive(self, local_time):
        evaluator = ScheduleEvaluator()
        assert evaluator.match_window(make_schedule(), local_time(2025, 6, 2, 16, 59)).active is True
        assert evaluator.match_window(make_schedule(), local_time(2025, 6, 2, 17, 0)).active is False

    def test_day_not_in_schedule(self, local_time):
        evaluator = ScheduleEvaluator()
        # 2025-06-07 is a Saturday
        assert evaluator.match_window(make_schedule(), local_time(2025, 6, 7, 10, 0)).active is False

    def test_evaluated_in_schedule_timezone(self):
        evaluator = ScheduleEvaluator()
        schedule = make_schedule()
        # 13:30 UTC is 09:30 in New York (EDT) but 05:30 in Los Angeles
        at_utc = datetime(2025, 6, 2, 13, 30, tzinfo=timezone.utc)
        assert evaluator.match_window(schedule, at_utc).active is True

        pacific = make_schedule(timezone="America/Los_Angeles")
        assert evaluator.match_window(pacific, at_utc).active is False

    def test_local_time_reported(self):
        evaluator = ScheduleEvaluator()
        at_utc = datetime(2025, 1, 6, 15, 0, tzinfo=timezone.utc)
        match = evaluator.match_window(make_schedule(), at_utc)
        # Standard time in January: UTC-5
        assert match.local_time.hour == 10
        assert match.local_time.minute == 0


class TestWrappingWindow:
    """Windows such as 18:00-08:00 that run past midnight."""

    @pytest.fixture
    def monday_nights(self) -> Schedule:
        return make_schedule(days=["Mon"], startTime="18:00", endTime="08:00")

    def test_evening_of_scheduled_day(self, monday_nights, local_time):
        match = ScheduleEvaluator().match_window(monday_nights, local_time(2025, 6, 2, 23, 0))
        assert match.active is True
        assert match.carried_over is False

    def test_morning_tail_carries_over_from_scheduled_day(self, monday_nights, local_time):
        match = ScheduleEvaluator().match_window(monday_nights, local_time(2025, 6, 3, 7, 30))
        assert match.active is True
        assert match.carried_over is True
        assert match.window_date == date(2025, 6, 2)

    def test_after_end_on_unscheduled_day(self, monday_nights, local_time):
        match = ScheduleEvaluator().match_window(monday_nights, local_time(2025, 6, 3, 8, 30))
        assert match.active is False

    def test_evening_of_unscheduled_day(self, monday_nights, local_time):
        assert ScheduleEvaluator().match_window(monday_nights, local_time(2025, 6, 3, 23, 0)).active is False

    def test_morning_without_scheduled_previous_day(self, monday_nights, local_time):
        # Monday morning belongs to Sunday's window, and Sunday is not scheduled
        assert ScheduleEvaluator().match_window(monday_nights, local_time(2025, 6, 2, 7, 30)).active is False

    def test_equal_start_and_end_is_full_day(self, local_time):
        schedule = make_schedule(days=["Wed"], startTime="00:00", endTime="00:00")
        evaluator = ScheduleEvaluator()
        assert evaluator.match_window(schedule, local_time(2025, 6, 4, 0, 0)).active is True
        assert evaluator.match_window(schedule, local_time(2025, 6, 4, 23, 59)).active is True
        assert evaluator.match_window(schedule, local_time(2025, 6, 5, 0, 0)).active is False


class TestEvaluate:
    """Full decisions including disabled schedules and holidays."""

    @pytest.mark.asyncio
    async def test_disabled_schedule_is_never_active(self, local_time):
        evaluator = ScheduleEvaluator()
        check = await evaluator.evaluate(make_schedule(enabled=False), local_time(2025, 6, 2, 10, 0))
        assert check.active is False
        assert check.reason == "schedule_disabled"

    @pytest.mark.asyncio
    async def test_outside_window_reason(self, local_time):
        check = await ScheduleEvaluator().evaluate(make_schedule(), local_time(2025, 6, 2, 20, 0))
        assert check.active is False
        assert check.reason == "outside_window"

    @pytest.mark.asyncio
    async def test_holiday_suppresses_window(self, local_time):
        calendar = StaticHolidayCalendar([date(2025, 12, 25)])
        evaluator = ScheduleEvaluator(holiday_calendar=calendar)

        check = await evaluator.evaluate(make_schedule(holidays=True), local_time(2025, 12, 25, 10, 0))
        assert check.active is False
        assert check.reason == "holiday"

    @pytest.mark.asyncio
    async def test_holidays_ignored_when_not_observed(self, local_time):
        calendar = StaticHolidayCalendar([date(2025, 12, 25)])
        evaluator = ScheduleEvaluator(holiday_calendar=calendar)

        check = await evaluator.evaluate(make_schedule(holidays=False), local_time(2025, 12, 25, 10, 0))
        assert check.active is True

    @pytest.mark.asyncio
    async def test_carried_over_window_checks_opening_day(self, local_time):
        schedule = make_schedule(days=["Thu"], startTime="18:00", endTime="08:00", holidays=True)
        evaluator = ScheduleEvaluator(holiday_calendar=StaticHolidayCalendar([date(2025, 12, 25)]))

        # Friday 07:00 belongs to Thursday 25 December's window
        check = await evaluator.evaluate(schedule, local_time(2025, 12, 26, 7, 0))
        assert check.active is False
        assert check.reason == "holiday"

    @pytest.mark.asyncio
    async def test_region_passed_to_calendar(self, local_time):
        calendar = AsyncMock()
        calendar.is_holiday.return_value = False
        evaluator = ScheduleEvaluator(holiday_calendar=calendar, region="US")

        await evaluator.evaluate(make_schedule(holidays=True), local_time(2025, 6, 2, 10, 0), "CA")

        calendar.is_holiday.assert_awaited_once_with(date(2025, 6, 2), "CA")

    @pytest.mark.asyncio
    async def test_per_call_calendar_used_without_injected_one(self, local_time):
        calendar = StaticHolidayCalendar([date(2025, 12, 25)])

        check = await ScheduleEvaluator().evaluate(
            make_schedule(holidays=True), local_time(2025, 12, 25, 10, 0), holiday_calendar=calendar
        )
        assert check.active is False
        assert check.reason == "holiday"

    @pytest.mark.asyncio
    async def test_injected_calendar_takes_precedence(self, local_time):
        evaluator = ScheduleEvaluator(holiday_calendar=StaticHolidayCalendar())

        check = await evaluator.evaluate(
            make_schedule(holidays=True),
            local_time(2025, 12, 25, 10, 0),
            holiday_calendar=StaticHolidayCalendar([date(2025, 12, 25)]),
        )
        assert check.active is True

    @pytest.mark.asyncio
    async def test_lookup_failure_fails_open(self, local_time, caplog):
        calendar = AsyncMock()
        calendar.is_holiday.side_effect = HolidayLookupError("service down")
        evaluator = ScheduleEvaluator(holiday_calendar=calendar)

        with caplog.at_level(logging.WARNING):
            check = await evaluator.evaluate(make_schedule(holidays=True), local_time(2025, 6, 2, 10, 0))

        assert check.active is True
        assert len(check.warnings) == 1
        assert "service down" in check.warnings[0]
        assert "treating as non-holiday" in caplog.text

    @pytest.mark.asyncio
    async def test_lookup_timeout_fails_open(self, local_time):
        class SlowCalendar:
            async def is_holiday(self, day, region):
                await asyncio.sleep(1)
                return True

        evaluator = ScheduleEvaluator(holiday_calendar=SlowCalendar(), timeout=0.01)
        check = await evaluator.evaluate(make_schedule(holidays=True), local_time(2025, 6, 2, 10, 0))

        assert check.active is True
        assert "timed out" in check.warnings[0]

    @pytest.mark.asyncio
    async def test_is_active(self, local_time):
        evaluator = ScheduleEvaluator()
        assert await evaluator.is_active(make_schedule(), local_time(2025, 6, 2, 10, 0)) is True
        assert await evaluator.is_active(make_schedule(), local_time(2025, 6, 2, 8, 0)) is False


class TestWeeklyActiveMinutes:

    def test_daytime_window(self):
        assert ScheduleEvaluator.weekly_active_minutes(make_schedule()) == 5 * 8 * 60

    def test_wrapping_window(self):
        schedule = make_schedule(days=["Mon", "Tue"], startTime="18:00", endTime="08:00")
        assert ScheduleEvaluator.weekly_active_minutes(schedule) == 2 * 14 * 60

    def test_full_day(self):
        schedule = make_schedule(days=["Sat"], startTime="00:00", endTime="00:00")
        assert ScheduleEvaluator.weekly_active_minutes(schedule) == 24 * 60

    def test_disabled(self):
        assert ScheduleEvaluator.weekly_active_minutes(make_schedule(enabled=False)) == 0

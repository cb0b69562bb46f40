"""Unit tests for helper utilities and event/skill model behaviour."""

from datetime import datetime, timedelta, timezone

import pytest
from pydantic import ValidationError

from frontdesk_router.core.models import InboundEvent, Weekday
from frontdesk_router.utils.helpers import (
    find_keyword,
    parse_hhmm,
    parse_key_values,
    parse_timestamp,
    truncate_string,
    window_minutes
)


class TestTimeHelpers:

    def test_parse_hhmm(self):
        assert parse_hhmm("18:30") == 1110
        assert parse_hhmm("00:05") == 5

    @pytest.mark.parametrize("start,end,expected", [
        ("09:00", "17:00", 480),
        ("18:00", "08:00", 840),
        ("00:00", "23:59", 1439),
        ("00:00", "00:00", 1440),
    ])
    def test_window_minutes(self, start, end, expected):
        assert window_minutes(start, end) == expected

    def test_parse_timestamp(self):
        assert parse_timestamp("2025-06-02T09:15:00Z") == datetime(2025, 6, 2, 9, 15, tzinfo=timezone.utc)
        assert parse_timestamp("2025-06-02T09:15:00").tzinfo == timezone.utc

    def test_parse_timestamp_defaults_to_now(self):
        assert datetime.now(timezone.utc) - parse_timestamp(None) < timedelta(seconds=5)


class TestTextHelpers:

    def test_find_keyword_returns_configured_form(self):
        assert find_keyword("Severe CHEST PAIN now", ["bleeding", "chest pain"]) == "chest pain"

    def test_find_keyword_none(self):
        assert find_keyword("", ["chest pain"]) is None
        assert find_keyword("all good", ["chest pain", ""]) is None

    def test_parse_key_values(self):
        assert parse_key_values(["a=1", "b = x=y"]) == {"a": "1", "b": "x=y"}
        with pytest.raises(ValueError):
            parse_key_values(["novalue"])

    def test_truncate_string(self):
        assert truncate_string("short") == "short"
        assert truncate_string("x" * 60, max_length=10) == "xxxxxxx..."


class TestInboundEvent:

    def test_timestamp_normalized_to_utc(self):
        naive = InboundEvent(channel="sms", timestamp_utc=datetime(2025, 6, 2, 9, 0))
        offset = InboundEvent(channel="sms", timestampUtc="2025-06-02T05:00:00-04:00")

        assert naive.timestamp_utc.tzinfo == timezone.utc
        assert offset.timestamp_utc == datetime(2025, 6, 2, 9, 0, tzinfo=timezone.utc)

    def test_confidence_bounds(self):
        with pytest.raises(ValidationError):
            InboundEvent(channel="voice", timestamp_utc=datetime.now(timezone.utc), confidence=1.2)

    def test_has_input(self):
        event = InboundEvent(
            channel="voice",
            timestamp_utc=datetime.now(timezone.utc),
            captured_inputs={"a": "x", "b": "  ", "c": None, "d": 0},
        )
        assert event.has_input("a") is True
        assert event.has_input("b") is False
        assert event.has_input("c") is False
        assert event.has_input("d") is True
        assert event.has_input("e") is False


class TestWeekday:

    def test_from_index(self):
        assert Weekday.from_index(0) == Weekday.MON
        assert Weekday.from_index(-1) == Weekday.SUN


class TestSkillModel:

    def test_handles_intent(self, scheduling_skill):
        assert scheduling_skill.handles_intent("scheduling") is True
        assert scheduling_skill.handles_intent(" APPOINTMENT ") is True
        assert scheduling_skill.handles_intent("refill") is False
        assert scheduling_skill.handles_intent(None) is False

    def test_required_inputs(self, scheduling_skill):
        assert [f.id for f in scheduling_skill.required_inputs] == ["patient_dob", "appt_reason"]

    def test_urgent_keywords_cleaned(self, make_skill):
        skill = make_skill("triage", logic={"urgentKeywords": [" stroke ", "stroke", ""]})
        assert skill.logic.urgent_keywords == ["stroke"]

    def test_days_deduplicated_in_week_order(self, make_skill):
        skill = make_skill("x", schedule={"days": ["Fri", "Mon", "Fri"]})
        assert skill.schedule.days == [Weekday.MON, Weekday.FRI]

    def test_skill_is_immutable(self, scheduling_skill):
        with pytest.raises(ValidationError):
            scheduling_skill.enabled = False

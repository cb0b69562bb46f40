"""
Shared fixtures for routing engine tests.
"""

from datetime import datetime
from typing import Any, Dict
from zoneinfo import ZoneInfo

import pytest

from frontdesk_router.core.models import InboundEvent, Skill, SkillCatalogue

CLINIC_TZ = "America/New_York"


def _merge(base: Dict[str, Any], override: Dict[str, Any]) -> Dict[str, Any]:
    result = dict(base)
    for key, value in override.items():
        if isinstance(value, dict) and isinstance(result.get(key), dict):
            result[key] = _merge(result[key], value)
        else:
            result[key] = value
    return result


@pytest.fixture
def local_time():
    """Build an aware datetime in the clinic timezone."""
    def _local(year, month, day, hour, minute=0, tz=CLINIC_TZ):
        return datetime(year, month, day, hour, minute, tzinfo=ZoneInfo(tz))
    return _local


@pytest.fixture
def make_skill():
    """Build a Skill from a permissive default, overriding nested keys."""
    def _make(skill_id: str = "general", **overrides) -> Skill:
        base = {
            "id": skill_id,
            "name": skill_id.replace("_", " ").title(),
            "category": "healthcare",
            "enabled": True,
            "channels": {"sms": True, "voice": True},
            "schedule": {
                "enabled": True,
                "timezone": CLINIC_TZ,
                "days": ["Mon", "Tue", "Wed", "Thu", "Fri", "Sat", "Sun"],
                "startTime": "00:00",
                "endTime": "00:00",
                "holidays": False,
            },
            "logic": {
                "tone": "efficient",
                "escalationThreshold": 0.5,
                "fallbackAction": "message",
                "urgentKeywords": [],
            },
        }
        return Skill.model_validate(_merge(base, overrides))
    return _make


@pytest.fixture
def make_event(local_time):
    """Build an InboundEvent; defaults to a confident voice call on Mon 2025-06-02 10:00 local."""
    def _make(**overrides) -> InboundEvent:
        data = {
            "channel": "voice",
            "timestamp_utc": local_time(2025, 6, 2, 10, 0),
            "caller_id": "+15551234567",
            "classified_intent": None,
            "confidence": 0.9,
            "free_text": "",
            "captured_inputs": {},
        }
        data.update(overrides)
        return InboundEvent(**data)
    return _make


@pytest.fixture
def triage_skill(make_skill) -> Skill:
    return make_skill(
        "triage",
        schedule={"startTime": "18:00", "endTime": "08:00", "holidays": True},
        inputs=[
            {"id": "symptoms", "label": "Symptoms", "type": "text", "required": True},
            {"id": "pain_level", "label": "Pain Level", "type": "number", "required": True},
        ],
        tools={
            "transfer": {
                "enabled": True,
                "targetNumber": "+1911",
                "whisperMessage": "EMERGENCY: {{ caller_id }} reports {{ symptoms }}",
                "conditions": ["sentiment_negative"],
            },
            "ivr": {"enabled": True, "triggerDigit": "9", "voicePrompt": "For emergencies, press 9."},
        },
        logic={
            "tone": "empathetic",
            "escalationThreshold": 0.95,
            "fallbackAction": "transfer",
            "urgentKeywords": ["chest pain", "bleeding", "stroke"],
        },
        compliance={
            "hipaa": True,
            "recording": True,
            "redaction": True,
            "consentRequired": True,
            "disclosures": ["If this is an emergency, hang up and dial 911."],
        },
    )


@pytest.fixture
def scheduling_skill(make_skill) -> Skill:
    return make_skill(
        "scheduling",
        intents=["appointment"],
        channels={"sms": True, "voice": False},
        schedule={"days": ["Mon", "Tue", "Wed", "Thu", "Fri"], "endTime": "23:59", "holidays": True},
        inputs=[
            {"id": "patient_dob", "label": "Date of Birth", "type": "date", "required": True, "sensitive": True},
            {"id": "appt_reason", "label": "Reason for Visit", "type": "text", "required": True},
            {"id": "insurance_card", "label": "Insurance Card", "type": "file", "required": False},
        ],
        tools={
            "sms": {"enabled": True, "template": "Book here: {{ link }}", "triggerKeywords": ["book"]},
            "calendar": {"enabled": True, "provider": "athena", "lookaheadDays": 14},
            "ehr": {"enabled": True, "provider": "athena", "writeAccess": False},
            "ivr": {"enabled": True, "triggerDigit": "1", "voicePrompt": "For scheduling, press 1."},
        },
        integration={
            "provider": "athena",
            "authType": "oauth",
            "endpoints": [{"name": "Book Slot", "url": "/v1/appointments/book", "method": "POST"}],
            "fieldMapping": {"patient_dob": "dob", "appt_reason": "appointmentreasonid"},
        },
        logic={"escalationThreshold": 0.7, "fallbackAction": "transfer"},
        compliance={
            "hipaa": True,
            "redaction": True,
            "consentRequired": True,
            "disclosures": ["Replies are automated."],
        },
    )


@pytest.fixture
def catalogue(triage_skill, scheduling_skill) -> SkillCatalogue:
    return SkillCatalogue(
        name="test_clinic",
        handoff={"behavior": "transfer", "transferNumber": "+15550123456"},
        skills=[triage_skill, scheduling_skill],
    )

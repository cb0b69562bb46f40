from datetime import datetime, timezone
from typing import Any, Dict, List, Optional

from pydantic import BaseModel, Field, ConfigDict, field_validator

from .skill import Channel


class InboundEvent(BaseModel):
    """One inbound contact (call or SMS) as seen by the routing engine.

    ``classified_intent`` and ``confidence`` come from the external intent
    classifier. ``signals`` carries conversation flags such as
    ``sentiment_negative`` that transfer conditions match against.
    """
    model_config = ConfigDict(populate_by_name=True, frozen=True)

    channel: Channel
    timestamp_utc: datetime = Field(alias="timestampUtc")
    caller_id: str = Field("", alias="callerId")
    classified_intent: Optional[str] = Field(None, alias="classifiedIntent")
    confidence: float = Field(0.0, ge=0.0, le=1.0)
    free_text: str = Field("", alias="freeText")
    captured_inputs: Dict[str, Any] = Field(default_factory=dict, alias="capturedInputs")
    consent_given: bool = Field(False, alias="consentGiven")
    signals: List[str] = Field(default_factory=list)
    conversation_id: Optional[str] = Field(None, alias="conversationId")

    @field_validator("timestamp_utc")
    @classmethod
    def _as_utc(cls, value: datetime) -> datetime:
        if value.tzinfo is None:
            return value.replace(tzinfo=timezone.utc)
        return value.astimezone(timezone.utc)

    def has_input(self, field_id: str) -> bool:
        value = self.captured_inputs.get(field_id)
        if value is None:
            return False
        if isinstance(value, str) and not value.strip():
            return False
        return True

from datetime import datetime
from typing import Any, Dict, List, Optional
from enum import Enum

from pydantic import BaseModel, Field, ConfigDict


class OutcomeStatus(str, Enum):
    """Matches the ``status`` column of the call/SMS activity log."""
    RESOLVED = "resolved"
    ESCALATED = "escalated"
    ACTION_REQUIRED = "action_required"


class RoutingOutcome(BaseModel):
    """Terminal decision record for one inbound event.

    Only redacted data is ever placed on an outcome, since outcomes are
    handed to the activity log for persistence.
    """
    model_config = ConfigDict(populate_by_name=True, frozen=True)

    selected_skill_id: Optional[str] = Field(None, alias="selectedSkillId")
    status: OutcomeStatus
    invoked_tool: Optional[str] = Field(None, alias="invokedTool")
    missing_required_inputs: List[str] = Field(default_factory=list, alias="missingRequiredInputs")
    escalation_reason: Optional[str] = Field(None, alias="escalationReason")
    action_reason: Optional[str] = Field(None, alias="actionReason")
    retryable: bool = False
    disclosures: List[str] = Field(default_factory=list)
    extracted_data: Dict[str, Any] = Field(default_factory=dict, alias="extractedData")
    transcript: str = ""
    conversation_id: Optional[str] = Field(None, alias="conversationId")
    channel: Optional[str] = None
    caller_id: Optional[str] = Field(None, alias="callerId")
    evaluated_at: Optional[datetime] = Field(None, alias="evaluatedAt")

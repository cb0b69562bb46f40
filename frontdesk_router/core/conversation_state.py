"""
Conversation State

Explicit per-conversation routing state. A conversation that stopped at
ActionRequired remembers its skill and where to resume, so the next
evaluation skips schedule filtering and skill selection.
"""

from dataclasses import dataclass, replace
from enum import Enum
from typing import Any, Dict, List, Optional, Tuple

from .models import RoutingOutcome, OutcomeStatus


class RoutingStage(str, Enum):
    RECEIVED = "received"
    SCHEDULE_FILTERED = "schedule_filtered"
    SKILL_SELECTED = "skill_selected"
    COMPLIANCE_CHECKED = "compliance_checked"
    ESCALATION_CHECKED = "escalation_checked"
    TOOL_DISPATCHED = "tool_dispatched"
    ESCALATED = "escalated"
    ACTION_REQUIRED = "action_required"
    CLOSED = "closed"


# Stages a paused conversation may resume at
RESUMABLE_STAGES = (RoutingStage.COMPLIANCE_CHECKED, RoutingStage.ESCALATION_CHECKED)


@dataclass(frozen=True)
class ConversationState:
    """Routing state of one conversation between evaluations."""
    conversation_id: Optional[str] = None
    stage: RoutingStage = RoutingStage.RECEIVED
    skill_id: Optional[str] = None
    resume_stage: Optional[RoutingStage] = None
    disclosures_delivered: Tuple[str, ...] = ()
    history: Tuple[RoutingStage, ...] = ()
    outcome: Optional[RoutingOutcome] = None

    @property
    def is_paused(self) -> bool:
        """True when the last evaluation stopped waiting on the caller."""
        return (
            self.stage == RoutingStage.CLOSED
            and self.skill_id is not None
            and self.resume_stage in RESUMABLE_STAGES
        )

    @property
    def is_terminal(self) -> bool:
        return (
            self.stage == RoutingStage.CLOSED
            and self.outcome is not None
            and self.outcome.status != OutcomeStatus.ACTION_REQUIRED
        )

    def advance(self, stage: RoutingStage) -> "ConversationState":
        return replace(self, stage=stage, history=self.history + (stage,))

    def pending_disclosures(self, disclosures: List[str]) -> List[str]:
        """Disclosures not yet delivered in this conversation, in configured order."""
        return [d for d in disclosures if d not in self.disclosures_delivered]

    def with_disclosures(self, delivered: List[str]) -> "ConversationState":
        merged = self.disclosures_delivered + tuple(
            d for d in delivered if d not in self.disclosures_delivered
        )
        return replace(self, disclosures_delivered=merged)

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary for serialization."""
        return {
            'conversation_id': self.conversation_id,
            'stage': self.stage.value,
            'skill_id': self.skill_id,
            'resume_stage': self.resume_stage.value if self.resume_stage else None,
            'disclosures_delivered': list(self.disclosures_delivered),
            'history': [stage.value for stage in self.history],
            'outcome': self.outcome.model_dump(mode="json", by_alias=True) if self.outcome else None
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'ConversationState':
        """Create ConversationState from dictionary."""
        if not data:
            return cls()

        resume = data.get('resume_stage')
        outcome = data.get('outcome')
        return cls(
            conversation_id=data.get('conversation_id'),
            stage=RoutingStage(data.get('stage', RoutingStage.RECEIVED.value)),
            skill_id=data.get('skill_id'),
            resume_stage=RoutingStage(resume) if resume else None,
            disclosures_delivered=tuple(data.get('disclosures_delivered', [])),
            history=tuple(RoutingStage(s) for s in data.get('history', [])),
            outcome=RoutingOutcome.model_validate(outcome) if outcome else None
        )


def new_conversation(conversation_id: Optional[str] = None) -> ConversationState:
    return ConversationState(conversation_id=conversation_id, history=(RoutingStage.RECEIVED,))

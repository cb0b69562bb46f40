"""
Escalation Evaluation

Decides whether a selected skill hands the event to a human. Urgent keywords
escalate at any confidence; otherwise a confidence below the skill's
threshold escalates. The reported confidence is the classifier's own score.
"""

from dataclasses import dataclass
from typing import Optional

from .models import InboundEvent, Skill
from ..utils.helpers import find_keyword


@dataclass
class EscalationDecision:
    """Whether to hand the event to a human, with one audit reason."""
    escalate: bool
    reason: Optional[str] = None
    urgent: bool = False
    low_confidence: bool = False


class EscalationEvaluator:
    """Decides resolve-vs-escalate for a selected skill."""

    def evaluate(self, skill: Skill, event: InboundEvent) -> EscalationDecision:
        """
        Escalate on an urgent keyword or a confidence below the skill threshold.

        Urgent keywords win regardless of confidence and own the reported
        reason; low confidence is still flagged on the decision.
        """
        keyword = self.urgent_keyword(skill, event)
        low_confidence = event.confidence < skill.logic.escalation_threshold

        if keyword:
            return EscalationDecision(
                escalate=True,
                reason=f"urgent_keyword:{keyword}",
                urgent=True,
                low_confidence=low_confidence
            )

        if low_confidence:
            return EscalationDecision(
                escalate=True,
                reason=f"low_confidence:{event.confidence}",
                low_confidence=True
            )

        return EscalationDecision(escalate=False)

    def urgent_keyword(self, skill: Skill, event: InboundEvent) -> Optional[str]:
        return find_keyword(event.free_text, skill.logic.urgent_keywords)

"""
Compliance Gate

Enforces a skill's consent, disclosure and redaction rules before any data
collection continues. Redaction is one-way: values leaving the gate are
replaced by a marker and never restored within the engine.
"""

import re
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional

from .models import InboundEvent, Skill

REDACTION_MARKER = "[REDACTED]"


@dataclass
class ComplianceDecision:
    """Result of authorizing an event against a skill's compliance rules."""
    allowed: bool
    required_disclosures: List[str] = field(default_factory=list)
    redact: bool = False
    reason: Optional[str] = None
    redacted_inputs: Dict[str, Any] = field(default_factory=dict)
    redacted_text: str = ""


class ComplianceGate:
    """Checks consent and applies HIPAA redaction for a selected skill."""

    def __init__(self, marker: str = REDACTION_MARKER):
        self.marker = marker

    def authorize(self, skill: Skill, event: InboundEvent) -> ComplianceDecision:
        """Authorize data collection for ``event`` under ``skill``'s rules."""
        compliance = skill.compliance
        redact = self.should_redact(skill)

        decision = ComplianceDecision(
            allowed=True,
            required_disclosures=list(compliance.disclosures),
            redact=redact,
            redacted_inputs=self.redact_inputs(skill, event.captured_inputs),
            redacted_text=self.redact_text(skill, event.free_text, event.captured_inputs)
        )

        if compliance.consent_required and not event.consent_given:
            decision.allowed = False
            decision.reason = "consent_required"

        return decision

    def should_redact(self, skill: Skill) -> bool:
        return skill.compliance.hipaa and skill.compliance.redaction

    def sensitive_field_ids(self, skill: Skill) -> List[str]:
        return [f.id for f in skill.inputs if f.required and f.sensitive]

    def redact_inputs(self, skill: Skill, captured: Dict[str, Any]) -> Dict[str, Any]:
        """Copy of captured inputs with sensitive values replaced."""
        if not self.should_redact(skill):
            return dict(captured)

        sensitive = set(self.sensitive_field_ids(skill))
        return {
            key: (self.marker if key in sensitive and value not in (None, "") else value)
            for key, value in captured.items()
        }

    def redact_text(self, skill: Skill, text: str, captured: Dict[str, Any]) -> str:
        """Replace every occurrence of a sensitive captured value in free text."""
        if not text or not self.should_redact(skill):
            return text

        values = []
        for field_id in self.sensitive_field_ids(skill):
            value = captured.get(field_id)
            if value is None:
                continue
            value = str(value).strip()
            if value and value != self.marker:
                values.append(value)

        # Longest first so overlapping values are fully covered
        for value in sorted(values, key=len, reverse=True):
            text = re.sub(re.escape(value), self.marker, text, flags=re.IGNORECASE)
        return text

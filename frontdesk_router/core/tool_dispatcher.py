"""
Tool Dispatch

Maps a selected skill and its captured inputs to one concrete tool action,
or to the skill's fallback disposition. The dispatcher only decides which
action fires and with what parameters; executing it belongs to the
integration connectors.

Priority among enabled tools:
    transfer (a condition matched) > ivr (voice with a digit) >
    calendar > ehr (healthcare skills) > sms (keyword-triggered) > fallback
"""

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, List, Optional

from jinja2 import Environment, TemplateError

from .models import Channel, InboundEvent, Skill, SkillCategory
from ..utils.helpers import find_keyword


class ToolKind(str, Enum):
    TRANSFER = "transfer"
    IVR = "ivr"
    CALENDAR = "calendar"
    EHR = "ehr"
    SMS = "sms"
    FALLBACK = "fallback"


@dataclass
class ToolAction:
    """A decided tool invocation, ready to hand to a connector."""
    tool: ToolKind
    action: str
    params: Dict[str, Any] = field(default_factory=dict)

    @property
    def name(self) -> str:
        if self.tool == ToolKind.FALLBACK:
            return f"fallback:{self.action}"
        return self.tool.value


@dataclass
class DispatchResult:
    tool: Optional[ToolAction] = None
    missing_inputs: List[str] = field(default_factory=list)

    @property
    def fired(self) -> bool:
        return self.tool is not None


class ToolDispatcher:
    """Selects the tool action for a skill once its inputs are complete."""

    def __init__(self, template_env: Optional[Environment] = None):
        self.template_env = template_env or Environment(autoescape=False)

    def missing_inputs(self, skill: Skill, event: InboundEvent) -> List[str]:
        """Required input ids not yet captured, in declaration order."""
        return [f.id for f in skill.required_inputs if not event.has_input(f.id)]

    def dispatch(self, skill: Skill, event: InboundEvent) -> DispatchResult:
        """
        Decide the tool action for ``event``.

        While required inputs are missing no tool fires. Calls with a growing
        set of captured inputs converge on a fired tool.
        """
        missing = self.missing_inputs(skill, event)
        if missing:
            return DispatchResult(missing_inputs=missing)

        for selector in (
            self._transfer,
            self._ivr,
            self._calendar,
            self._ehr,
            self._sms,
        ):
            action = selector(skill, event)
            if action is not None:
                return DispatchResult(tool=action)

        return DispatchResult(tool=self._fallback(skill, event))

    def render(self, template: str, skill: Skill, event: InboundEvent) -> str:
        """Render a message template against the event's captured inputs."""
        if not template:
            return ""
        context = dict(event.captured_inputs)
        context.update(
            caller_id=event.caller_id,
            skill_id=skill.id,
            skill_name=skill.name,
            intent=event.classified_intent or "",
        )
        try:
            return self.template_env.from_string(template).render(**context)
        except TemplateError:
            # Templates are syntax-checked at load time; runtime errors keep the raw text
            return template

    def _transfer(self, skill: Skill, event: InboundEvent) -> Optional[ToolAction]:
        transfer = skill.tools.transfer
        if not transfer.enabled:
            return None

        signals = {signal.casefold() for signal in event.signals}
        matched = [c for c in transfer.conditions if c.casefold() in signals]
        if not matched:
            return None

        return ToolAction(
            tool=ToolKind.TRANSFER,
            action="transfer_call",
            params={
                "target_number": transfer.target_number,
                "whisper_message": self.render(transfer.whisper_message, skill, event),
                "conditions": matched,
            }
        )

    def _ivr(self, skill: Skill, event: InboundEvent) -> Optional[ToolAction]:
        ivr = skill.tools.ivr
        if not ivr.enabled or event.channel != Channel.VOICE or not ivr.trigger_digit:
            return None

        return ToolAction(
            tool=ToolKind.IVR,
            action="ivr_branch",
            params={
                "digit": ivr.trigger_digit,
                "voice_prompt": ivr.voice_prompt,
            }
        )

    def _calendar(self, skill: Skill, event: InboundEvent) -> Optional[ToolAction]:
        calendar = skill.tools.calendar
        if not calendar.enabled:
            return None

        return ToolAction(
            tool=ToolKind.CALENDAR,
            action="calendar_book",
            params={
                "provider": calendar.provider.value,
                "lookahead_days": calendar.lookahead_days,
                "fields": self._mapped_fields(skill, event),
                "endpoints": self._endpoints(skill),
            }
        )

    def _ehr(self, skill: Skill, event: InboundEvent) -> Optional[ToolAction]:
        ehr = skill.tools.ehr
        if not ehr.enabled or skill.category != SkillCategory.HEALTHCARE:
            return None

        return ToolAction(
            tool=ToolKind.EHR,
            action="ehr_write" if ehr.write_access else "ehr_lookup",
            params={
                "provider": ehr.provider.value,
                "write_access": ehr.write_access,
                "fields": self._mapped_fields(skill, event),
                "endpoints": self._endpoints(skill),
            }
        )

    def _sms(self, skill: Skill, event: InboundEvent) -> Optional[ToolAction]:
        sms = skill.tools.sms
        if not sms.enabled or not sms.template:
            return None

        keyword = None
        if sms.trigger_keywords:
            keyword = find_keyword(event.free_text, sms.trigger_keywords)
            if keyword is None:
                return None

        return ToolAction(
            tool=ToolKind.SMS,
            action="send_sms",
            params={
                "to": event.caller_id,
                "body": self.render(sms.template, skill, event),
                "trigger_keyword": keyword,
            }
        )

    def _fallback(self, skill: Skill, event: InboundEvent) -> ToolAction:
        fallback = skill.logic.fallback_action
        params: Dict[str, Any] = {"tone": skill.logic.tone}
        if fallback.value == "transfer" and skill.tools.transfer.target_number:
            params["target_number"] = skill.tools.transfer.target_number
        return ToolAction(tool=ToolKind.FALLBACK, action=fallback.value, params=params)

    def _mapped_fields(self, skill: Skill, event: InboundEvent) -> Dict[str, Any]:
        """Captured inputs keyed by the integration's external field ids."""
        mapping = skill.integration.field_mapping
        fields: Dict[str, Any] = {}
        for input_field in skill.inputs:
            if not event.has_input(input_field.id):
                continue
            external = mapping.get(input_field.id) or input_field.mapped_field or input_field.id
            fields[external] = event.captured_inputs[input_field.id]
        return fields

    def _endpoints(self, skill: Skill) -> List[Dict[str, str]]:
        return [
            {"name": e.name, "url": e.url, "method": e.method}
            for e in skill.integration.endpoints
        ]

"""
Skill Selection

Narrows the catalogue to the skills eligible for an inbound event and picks
one. Urgent keyword matches take precedence over the classified intent.
"""

import asyncio
from dataclasses import dataclass, field
from typing import Dict, List, Optional, Tuple

from .models import InboundEvent, Skill, SkillCatalogue
from .schedule_evaluator import ScheduleEvaluator
from ..services.holiday_calendar import StaticHolidayCalendar
from ..utils.helpers import find_keyword


@dataclass
class SelectionResult:
    """Outcome of skill selection for one event."""
    skill_id: Optional[str]
    ties: List[str] = field(default_factory=list)
    matched_by: Optional[str] = None
    matched_keyword: Optional[str] = None
    eligible: List[str] = field(default_factory=list)
    rejections: Dict[str, str] = field(default_factory=dict)
    warnings: List[str] = field(default_factory=list)


class SkillSelector:
    """Picks the skill that should handle an inbound event."""

    def __init__(self, schedule_evaluator: Optional[ScheduleEvaluator] = None):
        self.schedule_evaluator = schedule_evaluator or ScheduleEvaluator()

    async def eligible_skills(
        self,
        catalogue: SkillCatalogue,
        event: InboundEvent
    ) -> Tuple[List[Skill], Dict[str, str], List[str]]:
        """
        Apply the eligibility filter: enabled, then channel, then schedule.

        Returns:
            Eligible skills, rejection reason per skill id, and schedule warnings
        """
        rejections: Dict[str, str] = {}
        in_channel: List[Skill] = []

        for skill in catalogue.ordered_skills():
            if not skill.enabled:
                rejections[skill.id] = "disabled"
            elif not skill.channels.supports(event.channel):
                rejections[skill.id] = f"channel_unsupported:{event.channel.value}"
            else:
                in_channel.append(skill)

        # Without an injected calendar the catalogue's own holiday list applies
        catalogue_calendar = StaticHolidayCalendar(catalogue.holidays)
        checks = await asyncio.gather(*[
            self.schedule_evaluator.evaluate(
                skill.schedule,
                event.timestamp_utc,
                catalogue.holiday_region,
                catalogue_calendar
            )
            for skill in in_channel
        ])

        eligible: List[Skill] = []
        warnings: List[str] = []
        for skill, check in zip(in_channel, checks):
            warnings.extend(check.warnings)
            if check.active:
                eligible.append(skill)
            else:
                rejections[skill.id] = check.reason or "outside_window"

        return eligible, rejections, warnings

    async def select(self, catalogue: SkillCatalogue, event: InboundEvent) -> SelectionResult:
        """Select one skill for the event, or none."""
        eligible, rejections, warnings = await self.eligible_skills(catalogue, event)

        result = SelectionResult(
            skill_id=None,
            eligible=[skill.id for skill in eligible],
            rejections=rejections,
            warnings=warnings
        )

        # Safety first: urgent keywords override the classified intent
        urgent: List[Tuple[Skill, str]] = []
        for skill in eligible:
            keyword = find_keyword(event.free_text, skill.logic.urgent_keywords)
            if keyword:
                urgent.append((skill, keyword))

        if urgent:
            ranked = self.rank([skill for skill, _ in urgent])
            winner = ranked[0]
            result.skill_id = winner.id
            result.ties = [skill.id for skill in ranked[1:]]
            result.matched_by = "urgent_keyword"
            result.matched_keyword = next(k for s, k in urgent if s.id == winner.id)
            return result

        if event.classified_intent:
            candidates = [skill for skill in eligible if skill.handles_intent(event.classified_intent)]
            if candidates:
                ranked = self.rank(candidates)
                result.skill_id = ranked[0].id
                result.ties = [skill.id for skill in ranked[1:]]
                result.matched_by = "intent"

        return result

    def rank(self, skills: List[Skill]) -> List[Skill]:
        """Order candidates: narrower weekly window first, then smaller id."""
        return sorted(
            skills,
            key=lambda s: (ScheduleEvaluator.weekly_active_minutes(s.schedule), s.id)
        )

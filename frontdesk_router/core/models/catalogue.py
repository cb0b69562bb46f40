from datetime import date
from typing import Any, Dict, List, Optional
from enum import Enum

from pydantic import BaseModel, Field, ConfigDict, field_validator

from .skill import Skill


class HandoffBehavior(str, Enum):
    TRANSFER = "transfer"
    MESSAGE = "message"


class Handoff(BaseModel):
    """System-level fallback used when no skill can take an event."""
    model_config = ConfigDict(populate_by_name=True, frozen=True, extra="forbid")

    behavior: HandoffBehavior = HandoffBehavior.TRANSFER
    transfer_number: str = Field("", alias="transferNumber")
    message: str = "We could not route your request. A staff member will follow up shortly."


class SkillCatalogue(BaseModel):
    """Read-only snapshot of the configured skills.

    ``skills`` accepts either a list of skill definitions or a mapping of
    skill id to definition; it is always stored keyed by id.
    """
    model_config = ConfigDict(populate_by_name=True, frozen=True, extra="forbid")

    name: str = "default"
    holiday_region: Optional[str] = Field(None, alias="holidayRegion")
    holidays: List[date] = Field(default_factory=list)
    handoff: Handoff = Field(default_factory=Handoff)
    skills: Dict[str, Skill] = Field(default_factory=dict)

    @field_validator("skills", mode="before")
    @classmethod
    def _index_skills(cls, value: Any) -> Any:
        if isinstance(value, list):
            indexed: Dict[str, Any] = {}
            for index, item in enumerate(value):
                if not isinstance(item, (Skill, dict)):
                    raise ValueError(f"skill at position {index} must be a mapping, got {type(item).__name__}")
                skill_id = item.id if isinstance(item, Skill) else item.get("id")
                if skill_id is None:
                    raise ValueError(f"skill at position {index} has no id")
                if skill_id in indexed:
                    raise ValueError(f"duplicate skill id '{skill_id}'")
                indexed[skill_id] = item
            return indexed
        if isinstance(value, dict):
            indexed = {}
            for key, item in value.items():
                if item is None:
                    item = {}
                if isinstance(item, dict):
                    item = {"id": key, **item}
                indexed[key] = item
            return indexed
        return value

    @field_validator("skills")
    @classmethod
    def _check_keys(cls, value: Dict[str, Skill]) -> Dict[str, Skill]:
        for key, skill in value.items():
            if key != skill.id:
                raise ValueError(f"skill key '{key}' does not match skill id '{skill.id}'")
        return value

    def get_skill(self, skill_id: str) -> Optional[Skill]:
        return self.skills.get(skill_id)

    def ordered_skills(self) -> List[Skill]:
        return [self.skills[skill_id] for skill_id in sorted(self.skills)]

from .skill import (
    Skill,
    SkillCategory,
    SkillChannels,
    SkillMetrics,
    SkillLogic,
    SkillCompliance,
    Schedule,
    Weekday,
    Channel,
    InputField,
    InputType,
    ToolSet,
    SmsTool,
    TransferTool,
    CalendarTool,
    EhrTool,
    IvrTool,
    Integration,
    IntegrationEndpoint,
    IntegrationProvider,
    FallbackAction
)
from .catalogue import (
    SkillCatalogue,
    Handoff,
    HandoffBehavior
)
from .event import InboundEvent
from .outcome import (
    RoutingOutcome,
    OutcomeStatus
)

__all__ = [
    "Skill",
    "SkillCategory",
    "SkillChannels",
    "SkillMetrics",
    "SkillLogic",
    "SkillCompliance",
    "Schedule",
    "Weekday",
    "Channel",
    "InputField",
    "InputType",
    "ToolSet",
    "SmsTool",
    "TransferTool",
    "CalendarTool",
    "EhrTool",
    "IvrTool",
    "Integration",
    "IntegrationEndpoint",
    "IntegrationProvider",
    "FallbackAction",
    "SkillCatalogue",
    "Handoff",
    "HandoffBehavior",
    "InboundEvent",
    "RoutingOutcome",
    "OutcomeStatus"
]

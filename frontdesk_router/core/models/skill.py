import re
from typing import Dict, List, Optional
from enum import Enum
from zoneinfo import ZoneInfo, ZoneInfoNotFoundError

from pydantic import BaseModel, Field, ConfigDict, field_validator, model_validator


_HHMM_PATTERN = re.compile(r"^([01]\d|2[0-3]):[0-5]\d$")


class SkillCategory(str, Enum):
    HEALTHCARE = "healthcare"
    FINTECH = "fintech"
    REAL_ESTATE = "real_estate"
    SAAS = "saas"
    GENERAL = "general"


class Channel(str, Enum):
    SMS = "sms"
    VOICE = "voice"


class Weekday(str, Enum):
    """Weekday symbols in the order returned by ``datetime.weekday()``."""
    MON = "Mon"
    TUE = "Tue"
    WED = "Wed"
    THU = "Thu"
    FRI = "Fri"
    SAT = "Sat"
    SUN = "Sun"

    @classmethod
    def from_index(cls, index: int) -> "Weekday":
        return list(cls)[index % 7]


class InputType(str, Enum):
    TEXT = "text"
    NUMBER = "number"
    DATE = "date"
    PHONE = "phone"
    BOOLEAN = "boolean"
    FILE = "file"


class FallbackAction(str, Enum):
    TRANSFER = "transfer"
    MESSAGE = "message"
    HANGUP = "hangup"


class IntegrationProvider(str, Enum):
    ATHENA = "athena"
    SALESFORCE = "salesforce"
    CUSTOM = "custom"
    NONE = "none"


class AuthType(str, Enum):
    OAUTH = "oauth"
    API_KEY = "api_key"
    NONE = "none"


class CalendarProvider(str, Enum):
    ATHENA = "athena"
    GOOGLE = "google"
    OUTLOOK = "outlook"


class EhrProvider(str, Enum):
    ATHENA = "athena"
    EPIC = "epic"
    CERNER = "cerner"


class _Config(BaseModel):
    model_config = ConfigDict(populate_by_name=True, frozen=True, extra="forbid")


class Schedule(_Config):
    """Availability window of a skill.

    A window whose ``end_time`` is not after its ``start_time`` wraps past
    midnight (e.g. 18:00-08:00). ``start_time == end_time`` is a full day.
    """

    enabled: bool = True
    timezone: str = "UTC"
    days: List[Weekday] = Field(default_factory=lambda: list(Weekday))
    start_time: str = Field("00:00", alias="startTime")
    end_time: str = Field("23:59", alias="endTime")
    holidays: bool = False

    @field_validator("timezone")
    @classmethod
    def _check_timezone(cls, value: str) -> str:
        try:
            ZoneInfo(value)
        except (ZoneInfoNotFoundError, ValueError) as e:
            raise ValueError(f"unknown IANA timezone '{value}'") from e
        return value

    @field_validator("start_time", "end_time")
    @classmethod
    def _check_hhmm(cls, value: str) -> str:
        if not _HHMM_PATTERN.match(value):
            raise ValueError(f"time '{value}' is not in HH:mm format")
        return value

    @field_validator("days")
    @classmethod
    def _dedupe_days(cls, value: List[Weekday]) -> List[Weekday]:
        return [day for day in Weekday if day in value]

    @property
    def wraps_midnight(self) -> bool:
        return self.end_time <= self.start_time


class InputField(_Config):
    id: str
    label: str
    type: InputType = InputType.TEXT
    required: bool = False
    description: Optional[str] = None
    mapped_field: Optional[str] = Field(None, alias="mappedField")
    sensitive: bool = False


class SmsTool(_Config):
    enabled: bool = False
    template: str = ""
    trigger_keywords: List[str] = Field(default_factory=list, alias="triggerKeywords")


class TransferTool(_Config):
    enabled: bool = False
    target_number: str = Field("", alias="targetNumber")
    whisper_message: str = Field("", alias="whisperMessage")
    conditions: List[str] = Field(default_factory=list)


class CalendarTool(_Config):
    enabled: bool = False
    provider: CalendarProvider = CalendarProvider.ATHENA
    lookahead_days: int = Field(7, alias="lookaheadDays", ge=0)


class EhrTool(_Config):
    enabled: bool = False
    provider: EhrProvider = EhrProvider.ATHENA
    write_access: bool = Field(False, alias="writeAccess")


class IvrTool(_Config):
    enabled: bool = False
    trigger_digit: str = Field("", alias="triggerDigit")
    voice_prompt: str = Field("", alias="voicePrompt")

    @field_validator("trigger_digit")
    @classmethod
    def _check_digit(cls, value: str) -> str:
        if value and not re.fullmatch(r"[0-9]", value):
            raise ValueError(f"IVR trigger digit must be a single character 0-9, got '{value}'")
        return value


class ToolSet(_Config):
    """Fixed per-skill tool slots."""

    sms: SmsTool = Field(default_factory=SmsTool)
    transfer: TransferTool = Field(default_factory=TransferTool)
    calendar: CalendarTool = Field(default_factory=CalendarTool)
    ehr: EhrTool = Field(default_factory=EhrTool)
    ivr: IvrTool = Field(default_factory=IvrTool)


class IntegrationEndpoint(_Config):
    name: str
    url: str
    method: str = "GET"

    @field_validator("method")
    @classmethod
    def _check_method(cls, value: str) -> str:
        value = value.upper()
        if value not in ("GET", "POST"):
            raise ValueError(f"endpoint method must be GET or POST, got '{value}'")
        return value


class Integration(_Config):
    provider: IntegrationProvider = IntegrationProvider.NONE
    auth_type: AuthType = Field(AuthType.NONE, alias="authType")
    endpoints: List[IntegrationEndpoint] = Field(default_factory=list)
    field_mapping: Dict[str, str] = Field(default_factory=dict, alias="fieldMapping")


class SkillLogic(_Config):
    tone: str = "professional"
    escalation_threshold: float = Field(0.7, alias="escalationThreshold")
    fallback_action: FallbackAction = Field(FallbackAction.TRANSFER, alias="fallbackAction")
    urgent_keywords: List[str] = Field(default_factory=list, alias="urgentKeywords")

    @field_validator("escalation_threshold")
    @classmethod
    def _check_threshold(cls, value: float) -> float:
        if not 0.0 <= value <= 1.0:
            raise ValueError(f"escalationThreshold must be within [0, 1], got {value}")
        return value

    @field_validator("urgent_keywords")
    @classmethod
    def _strip_keywords(cls, value: List[str]) -> List[str]:
        keywords = []
        for keyword in value:
            keyword = keyword.strip()
            if keyword and keyword not in keywords:
                keywords.append(keyword)
        return keywords


class SkillCompliance(_Config):
    hipaa: bool = False
    recording: bool = False
    redaction: bool = False
    consent_required: bool = Field(False, alias="consentRequired")
    disclosures: List[str] = Field(default_factory=list)


class SkillMetrics(_Config):
    expected_calls_per_day: int = Field(0, alias="expectedCallsPerDay", ge=0)
    target_resolution_rate: float = Field(0.0, alias="targetResolutionRate")

    @field_validator("target_resolution_rate")
    @classmethod
    def _check_rate(cls, value: float) -> float:
        if not 0.0 <= value <= 1.0:
            raise ValueError(f"targetResolutionRate must be within [0, 1], got {value}")
        return value


class SkillChannels(_Config):
    sms: bool = False
    voice: bool = False

    def supports(self, channel: Channel) -> bool:
        return getattr(self, Channel(channel).value)


class Skill(_Config):
    """A configured unit of business capability the agent can execute."""

    id: str
    name: str
    description: str = ""
    category: SkillCategory = SkillCategory.GENERAL
    intents: List[str] = Field(default_factory=list)
    enabled: bool = True
    channels: SkillChannels = Field(default_factory=SkillChannels)
    metrics: SkillMetrics = Field(default_factory=SkillMetrics)
    schedule: Schedule = Field(default_factory=Schedule)
    inputs: List[InputField] = Field(default_factory=list)
    tools: ToolSet = Field(default_factory=ToolSet)
    integration: Integration = Field(default_factory=Integration)
    logic: SkillLogic = Field(default_factory=SkillLogic)
    compliance: SkillCompliance = Field(default_factory=SkillCompliance)

    @field_validator("id")
    @classmethod
    def _check_id(cls, value: str) -> str:
        if not value or not value.strip():
            raise ValueError("skill id must not be empty")
        return value

    @model_validator(mode="after")
    def _check_input_ids(self) -> "Skill":
        seen = set()
        for field in self.inputs:
            if field.id in seen:
                raise ValueError(f"duplicate input id '{field.id}' in skill '{self.id}'")
            seen.add(field.id)
        return self

    @property
    def required_inputs(self) -> List[InputField]:
        return [field for field in self.inputs if field.required]

    def handles_intent(self, intent: Optional[str]) -> bool:
        """True when the classified intent names this skill or one of its intents."""
        if not intent:
            return False
        wanted = intent.strip().casefold()
        return wanted == self.id.casefold() or any(
            wanted == alias.strip().casefold() for alias in self.intents
        )

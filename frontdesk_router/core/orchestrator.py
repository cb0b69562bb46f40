"""
Routing Orchestrator

Sequences schedule filtering, skill selection, the compliance gate,
escalation and tool dispatch into one RoutingOutcome per inbound event:

    Received -> ScheduleFiltered -> SkillSelected -> ComplianceChecked ->
    EscalationChecked -> (ToolDispatched | Escalated | ActionRequired) -> Closed

A conversation paused at ActionRequired resumes at ComplianceChecked (missing
consent) or EscalationChecked (missing inputs, failed tool) with its skill
already fixed. Callers must not evaluate one conversation concurrently.
"""

import asyncio
import logging
from dataclasses import dataclass, field, replace
from typing import Any, Dict, List, Optional

from .compliance_gate import ComplianceDecision, ComplianceGate
from .conversation_state import ConversationState, RoutingStage, new_conversation
from .escalation_evaluator import EscalationEvaluator
from .models import InboundEvent, OutcomeStatus, RoutingOutcome, Skill, SkillCatalogue
from .schedule_evaluator import ScheduleEvaluator
from .skill_selector import SelectionResult, SkillSelector
from .tool_dispatcher import ToolAction, ToolDispatcher
from ..config.settings import settings
from ..services.integration_client import ConnectorRegistry
from ..services.intent_classifier import IntentClassifier

logger = logging.getLogger(__name__)


@dataclass
class RoutingDecision:
    """Everything produced by one evaluation.

    ``outcome`` is safe to persist. ``tool_action`` carries unredacted
    parameters for the integration layer and must not be logged.
    """
    outcome: RoutingOutcome
    state: ConversationState
    tool_action: Optional[ToolAction] = None
    selection: Optional[SelectionResult] = None
    warnings: List[str] = field(default_factory=list)


class RoutingOrchestrator:
    """Turns a skill catalogue snapshot and an inbound event into a routing decision."""

    def __init__(
        self,
        schedule_evaluator: Optional[ScheduleEvaluator] = None,
        selector: Optional[SkillSelector] = None,
        compliance_gate: Optional[ComplianceGate] = None,
        escalation_evaluator: Optional[EscalationEvaluator] = None,
        dispatcher: Optional[ToolDispatcher] = None,
        classifier: Optional[IntentClassifier] = None,
        connectors: Optional[ConnectorRegistry] = None,
        tool_timeout: Optional[float] = None,
        classifier_timeout: Optional[float] = None
    ):
        self.schedule_evaluator = schedule_evaluator or ScheduleEvaluator()
        self.selector = selector or SkillSelector(self.schedule_evaluator)
        self.compliance_gate = compliance_gate or ComplianceGate()
        self.escalation_evaluator = escalation_evaluator or EscalationEvaluator()
        self.dispatcher = dispatcher or ToolDispatcher()
        self.classifier = classifier
        self.connectors = connectors or ConnectorRegistry()
        self.tool_timeout = tool_timeout or settings.tool_timeout_seconds
        self.classifier_timeout = classifier_timeout or settings.classifier_timeout_seconds

    async def evaluate(
        self,
        catalogue: SkillCatalogue,
        event: InboundEvent,
        state: Optional[ConversationState] = None
    ) -> RoutingDecision:
        """
        Evaluate one inbound event.

        Args:
            catalogue: Read-only skill catalogue snapshot
            event: The inbound contact
            state: State returned by the previous evaluation of this conversation

        Returns:
            RoutingDecision with the closed conversation state and its outcome
        """
        if state is not None and state.is_paused:
            skill = catalogue.get_skill(state.skill_id)
            if skill is not None and skill.enabled:
                logger.debug(
                    "Resuming conversation %s at %s with skill %s",
                    state.conversation_id, state.resume_stage.value, skill.id
                )
                resumed = replace(state, history=(), outcome=None)
                return await self._run_from(resumed.resume_stage, catalogue, skill, event, resumed)
            else:
                logger.info(
                    "Skill %s no longer available for conversation %s; routing from scratch",
                    state.skill_id, state.conversation_id
                )
        elif state is not None and state.is_terminal:
            logger.debug(
                "Conversation %s closed as %s; starting a new routing pass",
                state.conversation_id, state.outcome.status.value
            )

        conversation_id = event.conversation_id or (state.conversation_id if state else None)
        current = new_conversation(conversation_id)
        if state is not None:
            current = current.with_disclosures(list(state.disclosures_delivered))

        if not event.classified_intent and self.classifier is not None:
            try:
                classification = await asyncio.wait_for(
                    self.classifier.classify(event.free_text),
                    timeout=self.classifier_timeout
                )
            except asyncio.TimeoutError:
                logger.warning("Intent classifier timed out after %ss", self.classifier_timeout)
                classification = None
            except Exception as e:
                logger.warning("Intent classifier failed: %s", e)
                classification = None

            if classification is None:
                current = current.advance(RoutingStage.ACTION_REQUIRED)
                return self._close(current, event, self._action_required(
                    event, current, None, "classifier_unavailable", retryable=True
                ))
            event = event.model_copy(update={
                "classified_intent": classification.intent,
                "confidence": classification.confidence,
            })

        current = current.advance(RoutingStage.SCHEDULE_FILTERED)
        selection = await self.selector.select(catalogue, event)

        if selection.skill_id is None:
            current = current.advance(RoutingStage.ESCALATED)
            outcome = self._outcome(
                event,
                current,
                status=OutcomeStatus.ESCALATED,
                invoked_tool=f"handoff:{catalogue.handoff.behavior.value}",
                escalation_reason="no_eligible_skill"
            )
            decision = self._close(current, event, outcome)
            decision.selection = selection
            decision.warnings = list(selection.warnings)
            return decision

        skill = catalogue.skills[selection.skill_id]
        current = replace(current.advance(RoutingStage.SKILL_SELECTED), skill_id=skill.id)
        decision = await self._run_from(
            RoutingStage.COMPLIANCE_CHECKED, catalogue, skill, event, current
        )
        decision.selection = selection
        decision.warnings = list(selection.warnings) + decision.warnings
        return decision

    async def _run_from(
        self,
        stage: RoutingStage,
        catalogue: SkillCatalogue,
        skill: Skill,
        event: InboundEvent,
        current: ConversationState
    ) -> RoutingDecision:
        compliance = self.compliance_gate.authorize(skill, event)
        disclosures = current.pending_disclosures(compliance.required_disclosures)
        current = current.with_disclosures(disclosures)

        if stage == RoutingStage.COMPLIANCE_CHECKED:
            current = current.advance(RoutingStage.COMPLIANCE_CHECKED)
            if not compliance.allowed:
                # Escalating collects no data, so urgency pre-empts the consent prompt
                keyword = self.escalation_evaluator.urgent_keyword(skill, event)
                if keyword:
                    current = current.advance(RoutingStage.ESCALATION_CHECKED)
                    return self._escalate(
                        event, current, skill, compliance, disclosures, f"urgent_keyword:{keyword}"
                    )
                current = replace(
                    current.advance(RoutingStage.ACTION_REQUIRED),
                    resume_stage=RoutingStage.COMPLIANCE_CHECKED
                )
                return self._close(current, event, self._action_required(
                    event, current, skill, compliance.reason or "consent_required",
                    compliance=compliance, disclosures=disclosures
                ))

        current = current.advance(RoutingStage.ESCALATION_CHECKED)
        escalation = self.escalation_evaluator.evaluate(skill, event)
        if escalation.escalate:
            return self._escalate(event, current, skill, compliance, disclosures, escalation.reason)

        dispatch = self.dispatcher.dispatch(skill, event)
        if not dispatch.fired:
            current = replace(
                current.advance(RoutingStage.ACTION_REQUIRED),
                resume_stage=RoutingStage.ESCALATION_CHECKED
            )
            return self._close(current, event, self._action_required(
                event, current, skill, "missing_inputs",
                compliance=compliance,
                disclosures=disclosures,
                missing=dispatch.missing_inputs
            ))

        action = dispatch.tool
        current = current.advance(RoutingStage.TOOL_DISPATCHED)
        failure = await self._execute(action)
        if failure is not None:
            current = replace(
                current.advance(RoutingStage.ACTION_REQUIRED),
                resume_stage=RoutingStage.ESCALATION_CHECKED
            )
            decision = self._close(current, event, self._action_required(
                event, current, skill, f"tool_failed:{action.name}",
                compliance=compliance,
                disclosures=disclosures,
                retryable=True,
                invoked_tool=action.name
            ))
            decision.tool_action = action
            decision.warnings.append(failure)
            return decision

        current = replace(current, resume_stage=None)
        outcome = self._outcome(
            event,
            current,
            skill=skill,
            status=OutcomeStatus.RESOLVED,
            invoked_tool=action.name,
            compliance=compliance,
            disclosures=disclosures
        )
        decision = self._close(current, event, outcome)
        decision.tool_action = action
        return decision

    async def _execute(self, action: ToolAction) -> Optional[str]:
        """Run the action through its connector; return a failure message or None."""
        connector = self.connectors.get(action.tool.value)
        if connector is None:
            return None

        try:
            result = await asyncio.wait_for(
                connector.execute(action.action, action.params),
                timeout=self.tool_timeout
            )
        except asyncio.TimeoutError:
            message = f"Tool {action.name} timed out after {self.tool_timeout}s"
            logger.warning(message)
            return message
        except Exception as e:
            message = f"Tool {action.name} failed: {e}"
            logger.warning(message)
            return message

        if not result.success:
            message = f"Tool {action.name} reported failure: {result.result_payload}"
            logger.warning(message)
            return message
        return None

    def _escalate(
        self,
        event: InboundEvent,
        current: ConversationState,
        skill: Skill,
        compliance: ComplianceDecision,
        disclosures: List[str],
        reason: Optional[str]
    ) -> RoutingDecision:
        current = replace(current.advance(RoutingStage.ESCALATED), resume_stage=None)
        outcome = self._outcome(
            event,
            current,
            skill=skill,
            status=OutcomeStatus.ESCALATED,
            escalation_reason=reason,
            compliance=compliance,
            disclosures=disclosures
        )
        return self._close(current, event, outcome)

    def _action_required(
        self,
        event: InboundEvent,
        current: ConversationState,
        skill: Optional[Skill],
        reason: str,
        compliance: Optional[ComplianceDecision] = None,
        disclosures: Optional[List[str]] = None,
        missing: Optional[List[str]] = None,
        retryable: bool = False,
        invoked_tool: Optional[str] = None
    ) -> RoutingOutcome:
        return self._outcome(
            event,
            current,
            skill=skill,
            status=OutcomeStatus.ACTION_REQUIRED,
            action_reason=reason,
            compliance=compliance,
            disclosures=disclosures,
            missing=missing,
            retryable=retryable,
            invoked_tool=invoked_tool
        )

    def _outcome(
        self,
        event: InboundEvent,
        current: ConversationState,
        status: OutcomeStatus,
        skill: Optional[Skill] = None,
        invoked_tool: Optional[str] = None,
        escalation_reason: Optional[str] = None,
        action_reason: Optional[str] = None,
        compliance: Optional[ComplianceDecision] = None,
        disclosures: Optional[List[str]] = None,
        missing: Optional[List[str]] = None,
        retryable: bool = False
    ) -> RoutingOutcome:
        # Without a skill there are no redaction rules to apply, so no captured data leaves
        extracted: Dict[str, Any] = compliance.redacted_inputs if compliance else {}
        transcript = compliance.redacted_text if compliance else ""

        return RoutingOutcome(
            selected_skill_id=skill.id if skill else None,
            status=status,
            invoked_tool=invoked_tool,
            missing_required_inputs=list(missing or []),
            escalation_reason=escalation_reason,
            action_reason=action_reason,
            retryable=retryable,
            disclosures=list(disclosures or []),
            extracted_data=extracted,
            transcript=transcript,
            conversation_id=current.conversation_id,
            channel=event.channel.value,
            caller_id=event.caller_id,
            evaluated_at=event.timestamp_utc
        )

    def _close(
        self,
        current: ConversationState,
        event: InboundEvent,
        outcome: RoutingOutcome
    ) -> RoutingDecision:
        closed = replace(current.advance(RoutingStage.CLOSED), outcome=outcome)
        logger.info(
            "Routed %s event from %s: %s",
            event.channel.value,
            event.caller_id or "unknown",
            outcome.model_dump_json(by_alias=True, exclude={"transcript", "extracted_data"})
        )
        return RoutingDecision(outcome=outcome, state=closed)

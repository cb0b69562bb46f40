"""Unit tests for the escalation evaluator."""

import pytest

from frontdesk_router.core.escalation_evaluator import EscalationEvaluator


@pytest.fixture
def evaluator() -> EscalationEvaluator:
    return EscalationEvaluator()


class TestEscalationEvaluator:

    @pytest.mark.parametrize("confidence", [0.0, 0.5, 0.96, 1.0])
    def test_urgent_keyword_escalates_at_any_confidence(self, evaluator, triage_skill, make_event, confidence):
        event = make_event(free_text="my father has chest pain", confidence=confidence)

        decision = evaluator.evaluate(triage_skill, event)

        assert decision.escalate is True
        assert decision.urgent is True
        assert decision.reason == "urgent_keyword:chest pain"

    def test_urgent_keyword_case_insensitive(self, evaluator, triage_skill, make_event):
        decision = evaluator.evaluate(triage_skill, make_event(free_text="CHEST PAIN", confidence=1.0))
        assert decision.reason == "urgent_keyword:chest pain"

    def test_first_configured_keyword_reported(self, evaluator, triage_skill, make_event):
        event = make_event(free_text="stroke symptoms and bleeding", confidence=1.0)
        assert evaluator.evaluate(triage_skill, event).reason == "urgent_keyword:bleeding"

    def test_urgent_keeps_low_confidence_flag(self, evaluator, triage_skill, make_event):
        decision = evaluator.evaluate(triage_skill, make_event(free_text="bleeding", confidence=0.2))
        assert decision.urgent is True
        assert decision.low_confidence is True
        assert decision.reason.startswith("urgent_keyword:")

    def test_low_confidence(self, evaluator, scheduling_skill, make_event):
        decision = evaluator.evaluate(scheduling_skill, make_event(confidence=0.42))

        assert decision.escalate is True
        assert decision.urgent is False
        assert decision.reason == "low_confidence:0.42"

    def test_low_confidence_reports_score_unrounded(self, evaluator, scheduling_skill, make_event):
        decision = evaluator.evaluate(scheduling_skill, make_event(confidence=0.699))

        assert decision.escalate is True
        assert decision.reason == "low_confidence:0.699"

    def test_threshold_is_inclusive(self, evaluator, scheduling_skill, make_event):
        decision = evaluator.evaluate(scheduling_skill, make_event(confidence=0.7))
        assert decision.escalate is False
        assert decision.reason is None

    def test_no_escalation(self, evaluator, scheduling_skill, make_event):
        decision = evaluator.evaluate(scheduling_skill, make_event(confidence=0.9, free_text="book me in"))
        assert decision.escalate is False

    def test_urgent_keyword_helper(self, evaluator, triage_skill, scheduling_skill, make_event):
        event = make_event(free_text="severe bleeding")
        assert evaluator.urgent_keyword(triage_skill, event) == "bleeding"
        assert evaluator.urgent_keyword(scheduling_skill, event) is None

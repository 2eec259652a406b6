"""Tests for reply rendering."""

import pytest

from src.prompts.reply_templates import (
    REPLY_TEMPLATES,
    format_amount,
    get_template,
    render_reply,
)
from src.schemas.conversation_schema import Intent, Outcome, TurnOutcome


class TestTemplateCoverage:
    def test_every_outcome_has_a_default(self):
        missing = [o for o in Outcome if o not in REPLY_TEMPLATES and o is not Outcome.SLOT_PROMPT]
        assert missing == []

    @pytest.mark.parametrize(
        "intent",
        [
            Intent.TRACK_ORDER,
            Intent.INITIATE_REFUND,
            Intent.REFUND_STATUS,
            Intent.REGISTER_COMPLAINT,
            Intent.CREATE_RETURN,
        ],
    )
    def test_every_flow_has_a_prompt(self, intent):
        assert get_template(Outcome.SLOT_PROMPT, intent)

    def test_intent_specific_template_wins(self):
        assert get_template(Outcome.ORDER_NOT_FOUND, Intent.CREATE_RETURN) == "Order {order_id} not found."
        assert get_template(Outcome.ORDER_NOT_FOUND, Intent.INITIATE_REFUND) == "I couldn’t find {order_id}."


class TestFormatAmount:
    @pytest.mark.parametrize(
        "value, expected",
        [(798, "798"), (798.0, "798"), (15.75, "15.75"), (10.5, "10.50"), (0, "0")],
    )
    def test_formatting(self, value, expected):
        assert format_amount(value) == expected


class TestRenderReply:
    def test_refund_created(self):
        result = TurnOutcome(
            Outcome.REFUND_CREATED, Intent.INITIATE_REFUND,
            {"refund_id": "RFD-1", "order_id": "ORD1", "amount": 100.0, "sla_days": 5},
        )
        reply = render_reply(result)
        assert reply.startswith("Refund created: RFD-1, amount ")
        assert reply.endswith("100, SLA 5 days. Summary: Refund for ORD1.")

    def test_window_expired(self):
        result = TurnOutcome(
            Outcome.RETURN_WINDOW_EXPIRED, Intent.CREATE_RETURN, {"days_elapsed": 30},
        )
        assert render_reply(result) == "Return window expired (30 days). Summary: return rejected."

    def test_slot_escalation_for_refund(self):
        result = TurnOutcome(Outcome.SLOT_ESCALATION, Intent.INITIATE_REFUND)
        assert render_reply(result) == "I couldn’t capture a valid Order ID. Let me connect you to an agent."

    def test_system_error_ignores_intent(self):
        result = TurnOutcome(Outcome.SYSTEM_ERROR, Intent.TRACK_ORDER)
        assert render_reply(result) == "Something went wrong. Let me connect you to an agent."

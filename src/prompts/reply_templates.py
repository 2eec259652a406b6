"""
Reply text for every dialogue outcome.

The engine decides *what* happened (a ``TurnOutcome``); this module turns
it into the customer-facing string. Templates that differ per flow are
keyed by ``(Outcome, Intent)`` and fall back to the plain ``Outcome`` key.
"""

from typing import Union

from src.config import settings
from src.schemas.conversation_schema import Intent, Outcome, TurnOutcome

TemplateKey = Union[Outcome, tuple[Outcome, Intent]]

REPLY_TEMPLATES: dict[TemplateKey, str] = {
    Outcome.GREETING: (
        "Hi! I can help with tracking, refunds, returns, and complaints. "
        "What would you like to do?"
    ),
    Outcome.GOODBYE: "Thanks for chatting. Have a great day!",
    Outcome.HANDOFF: "Connecting you to a human agent... (simulated handoff)",
    Outcome.MENU: (
        "Sorry, I didn’t understand. I can help with: track order, refund, "
        "complaint, return, or agent handoff."
    ),
    Outcome.SYSTEM_ERROR: "Something went wrong. Let me connect you to an agent.",

    # --- Slot prompts ---
    (Outcome.SLOT_PROMPT, Intent.TRACK_ORDER): "Sure, please share your Order ID (e.g., ORD1001).",
    (Outcome.SLOT_PROMPT, Intent.INITIATE_REFUND): "Sure. Please provide your Order ID to start a refund.",
    (Outcome.SLOT_PROMPT, Intent.REFUND_STATUS): "Please provide a Refund ID (e.g., RFD-XXXX).",
    (Outcome.SLOT_PROMPT, Intent.REGISTER_COMPLAINT): "Please share your Order ID to register a complaint.",
    (Outcome.SLOT_PROMPT, Intent.CREATE_RETURN): "Please share your Order ID to start a return.",

    # --- Slot retries ---
    Outcome.SLOT_REPROMPT: "That doesn’t look like a valid Order ID. Please try again (e.g., ORD1001).",
    (Outcome.SLOT_REPROMPT, Intent.REGISTER_COMPLAINT): "Please share a valid Order ID like ORD1001.",
    Outcome.SLOT_ESCALATION: "I couldn’t capture a valid Order ID. Let me connect you to an agent.",
    (Outcome.SLOT_ESCALATION, Intent.REGISTER_COMPLAINT): (
        "I couldn’t capture the Order ID. Escalating to an agent."
    ),

    # --- Not found ---
    Outcome.ORDER_NOT_FOUND: "I couldn’t find {order_id}.",
    (Outcome.ORDER_NOT_FOUND, Intent.TRACK_ORDER): "I couldn’t find {order_id}. Please double-check.",
    (Outcome.ORDER_NOT_FOUND, Intent.CREATE_RETURN): "Order {order_id} not found.",
    Outcome.REFUND_NOT_FOUND: "Refund {refund_id} not found.",

    # --- Tracking ---
    Outcome.TRACKING_PENDING: (
        "Order {order_id} is currently *{status}*. No tracking yet. "
        "Summary: waiting for shipment."
    ),
    Outcome.TRACKING_UNAVAILABLE: "Tracking info unavailable for {order_id}. Last event: {last_event}.",
    Outcome.TRACKING_STATUS: (
        "Order {order_id} is *{status_label}*. ETA: {eta}. "
        "Summary: Order {order_id}, status {status}."
    ),

    # --- Refunds ---
    Outcome.REFUND_INELIGIBLE: "Order {order_id} is *{status}*. Refund not available yet.",
    Outcome.REFUND_CREATED: (
        "Refund created: {refund_id}, amount {currency}{amount}, SLA {sla_days} days. "
        "Summary: Refund for {order_id}."
    ),
    Outcome.REFUND_STATUS: (
        "Refund {refund_id} is *{status}*. Amount {currency}{amount}, SLA {sla_days} days. "
        "Summary: refund status checked."
    ),

    # --- Complaints ---
    Outcome.COMPLAINT_EXISTS: "You already have a complaint: {ticket_id}. Do you want to escalate?",
    Outcome.COMPLAINT_CREATED: (
        "Complaint registered: {ticket_id}, SLA {sla_hours}h. Summary: complaint created."
    ),

    # --- Returns ---
    Outcome.RETURN_WINDOW_EXPIRED: "Return window expired ({days_elapsed} days). Summary: return rejected.",
    Outcome.RETURN_CREATED: (
        "Return created: {return_id}, pickup on {pickup_window}. Summary: return scheduled."
    ),
}


def format_amount(value: Union[int, float]) -> str:
    """Render a money amount without a trailing ``.0`` for whole values."""
    if isinstance(value, float):
        if value.is_integer():
            return str(int(value))
        return f"{value:.2f}"
    return str(value)


def get_template(outcome: Outcome, intent: Intent) -> str:
    template = REPLY_TEMPLATES.get((outcome, intent))
    if template is None:
        template = REPLY_TEMPLATES[outcome]
    return template


def render_reply(result: TurnOutcome) -> str:
    """Render a turn outcome into the reply string sent to the customer."""
    details = dict(result.details)
    if "amount" in details:
        details["amount"] = format_amount(details["amount"])
    details.setdefault("currency", settings.business.currency_symbol)
    return get_template(result.outcome, result.intent).format(**details)

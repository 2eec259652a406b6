"""
Keyword-based intent classification and identifier extraction.

Rules are evaluated top to bottom and the first hit wins, so the order
of ``INTENT_RULES`` is part of the behavior: "refund status" has to be
tested before the bare "refund" keyword, and every keyword is a plain
substring match on the lower-cased text.
"""

import re
from dataclasses import dataclass
from typing import Optional

from src.schemas.conversation_schema import Intent

ORDER_ID_PATTERN = re.compile(r"ord[0-9]+", re.IGNORECASE)
REFUND_ID_PATTERN = re.compile(r"rfd-?[a-z0-9]+", re.IGNORECASE)


@dataclass(frozen=True)
class IntentRule:
    """A single keyword rule mapping matching text to an intent."""

    pattern: re.Pattern
    intent: Intent

    def matches(self, text: str) -> bool:
        return self.pattern.search(text) is not None


INTENT_RULES: list[IntentRule] = [
    IntentRule(re.compile(r"track"), Intent.TRACK_ORDER),
    IntentRule(re.compile(r"refund status"), Intent.REFUND_STATUS),
    IntentRule(re.compile(r"refund"), Intent.INITIATE_REFUND),
    IntentRule(re.compile(r"complaint|complain"), Intent.REGISTER_COMPLAINT),
    IntentRule(re.compile(r"return"), Intent.CREATE_RETURN),
    IntentRule(re.compile(r"agent|human|help"), Intent.AGENT_HANDOFF),
    IntentRule(re.compile(r"hi|hello|hey"), Intent.GREETING),
    IntentRule(re.compile(r"bye|thank"), Intent.GOODBYE),
]

# (keywords, normalized status), checked in order after the empty check
CARRIER_STATUS_RULES: list[tuple[tuple[str, ...], str]] = [
    (("pick",), "picked_up"),
    (("transit",), "in_transit"),
    (("out for",), "out_for_delivery"),
    (("deliver",), "delivered"),
    (("exception", "delay"), "exception"),
]
DEFAULT_CARRIER_STATUS = "in_transit"
EMPTY_CARRIER_STATUS = "created"


def classify_intent(text: Optional[str]) -> Intent:
    """Return the intent of the first matching rule, or FALLBACK."""
    normalized = (text or "").lower()
    for rule in INTENT_RULES:
        if rule.matches(normalized):
            return rule.intent
    return Intent.FALLBACK


def extract_order_id(text: Optional[str]) -> Optional[str]:
    """Return the first ``ORD<digits>`` token, upper-cased."""
    match = ORDER_ID_PATTERN.search(text or "")
    return match.group(0).upper() if match else None


def extract_refund_id(text: Optional[str]) -> Optional[str]:
    """Return the first ``RFD[-]<alnum>`` token, upper-cased."""
    match = REFUND_ID_PATTERN.search(text or "")
    return match.group(0).upper() if match else None


def normalize_carrier_status(raw: Optional[str]) -> str:
    """Map free-text carrier status onto the canonical shipment states.

    Examples:
        >>> normalize_carrier_status("Out for Delivery today")
        'out_for_delivery'
        >>> normalize_carrier_status("")
        'created'
    """
    if not raw:
        return EMPTY_CARRIER_STATUS
    lowered = raw.lower()
    for keywords, status in CARRIER_STATUS_RULES:
        if any(keyword in lowered for keyword in keywords):
            return status
    return DEFAULT_CARRIER_STATUS

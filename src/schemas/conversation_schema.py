"""Intent enumeration, per-session dialogue state and chat wire models."""

import time
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Optional

from pydantic import BaseModel, Field, field_validator

DEFAULT_SESSION = "default"


class Intent(str, Enum):
    """Closed set of support intents a message can be classified into."""

    GREETING = "greeting"
    GOODBYE = "goodbye"
    AGENT_HANDOFF = "agent_handoff"
    TRACK_ORDER = "track_order"
    INITIATE_REFUND = "initiate_refund"
    REFUND_STATUS = "refund_status"
    REGISTER_COMPLAINT = "register_complaint"
    CREATE_RETURN = "create_return"
    FALLBACK = "fallback"


@dataclass
class SessionState:
    """
    Per-session dialogue state, owned by the session store.

    ``retry_count`` only carries meaning while ``pending_intent`` is set.
    Use ``start_flow``/``finish_flow`` so both are reset together.
    """

    pending_intent: Optional[Intent] = None
    retry_count: int = 0
    slots: dict[str, str] = field(default_factory=dict)
    last_active: float = field(default_factory=time.monotonic)

    def start_flow(self, intent: Intent) -> None:
        self.pending_intent = intent
        self.retry_count = 0
        self.slots = {}

    def finish_flow(self) -> None:
        self.pending_intent = None
        self.retry_count = 0
        self.slots = {}


class ChatRequest(BaseModel):
    """Inbound chat message."""

    message: str = ""
    session: str = Field(default=DEFAULT_SESSION)

    @field_validator("message", mode="before")
    @classmethod
    def _none_message_is_empty(cls, value):
        return "" if value is None else value

    @field_validator("session", mode="before")
    @classmethod
    def _blank_session_is_default(cls, value):
        if value is None or (isinstance(value, str) and not value.strip()):
            return DEFAULT_SESSION
        return value


class ChatResponse(BaseModel):
    reply: str


class Outcome(str, Enum):
    """Which branch of the dialogue produced a turn's reply."""

    GREETING = "greeting"
    GOODBYE = "goodbye"
    HANDOFF = "handoff"
    MENU = "menu"
    SLOT_PROMPT = "slot_prompt"
    SLOT_REPROMPT = "slot_reprompt"
    SLOT_ESCALATION = "slot_escalation"
    ORDER_NOT_FOUND = "order_not_found"
    TRACKING_PENDING = "tracking_pending"
    TRACKING_UNAVAILABLE = "tracking_unavailable"
    TRACKING_STATUS = "tracking_status"
    REFUND_INELIGIBLE = "refund_ineligible"
    REFUND_CREATED = "refund_created"
    REFUND_NOT_FOUND = "refund_not_found"
    REFUND_STATUS = "refund_status"
    COMPLAINT_EXISTS = "complaint_exists"
    COMPLAINT_CREATED = "complaint_created"
    RETURN_WINDOW_EXPIRED = "return_window_expired"
    RETURN_CREATED = "return_created"
    SYSTEM_ERROR = "system_error"


@dataclass(frozen=True)
class TurnOutcome:
    """Structured result of one turn, rendered to text separately."""

    outcome: Outcome
    intent: Intent
    details: dict[str, Any] = field(default_factory=dict)

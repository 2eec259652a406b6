"""
Slot collection policy for multi-turn flows.

A flow that cannot run without an identifier parks itself as the
session's pending intent. On the next turn that carries no new command,
the slot manager tries to pull the missing slot out of the message:

    Collect -> (valid) resume the pending intent
            -> (invalid) re-prompt, then escalate once retries run out

Usage:
    manager = SlotManager()
    result = manager.collect(session, "it's ORD1001")
    if result.status is CollectStatus.FILLED:
        ...
"""

import logging
from dataclasses import dataclass
from enum import Enum
from typing import Callable, Optional

from src.config import settings
from src.conversation.nlu import extract_order_id
from src.schemas.conversation_schema import Intent, SessionState

logger = logging.getLogger(__name__)

ORDER_ID_SLOT = "order_id"


class CollectStatus(str, Enum):
    """Result of one slot collection attempt."""

    FILLED = "filled"
    RETRY = "retry"
    ESCALATE = "escalate"
    NOT_COLLECTABLE = "not_collectable"


@dataclass(frozen=True)
class SlotDefinition:
    """Schema for the slot a pending intent is waiting on."""

    name: str
    display_name: str
    extractor: Callable[[str], Optional[str]]


@dataclass(frozen=True)
class CollectResult:
    status: CollectStatus
    intent: Optional[Intent] = None
    slot: Optional[SlotDefinition] = None
    value: Optional[str] = None


ORDER_ID_DEFINITION = SlotDefinition(
    name=ORDER_ID_SLOT,
    display_name="Order ID",
    extractor=extract_order_id,
)


class SlotManager:
    """
    Resolves the slot a pending intent needs from follow-up messages.

    Retries are bounded by ``max_retries``: the attempt that pushes the
    session's ``retry_count`` past it clears the flow and escalates.
    """

    SLOT_DEFINITIONS: dict[Intent, SlotDefinition] = {
        Intent.INITIATE_REFUND: ORDER_ID_DEFINITION,
        Intent.REGISTER_COMPLAINT: ORDER_ID_DEFINITION,
        Intent.TRACK_ORDER: ORDER_ID_DEFINITION,
    }

    def __init__(self, max_retries: Optional[int] = None) -> None:
        self.max_retries = (
            settings.dialogue.max_slot_retries if max_retries is None else max_retries
        )

    def get_definition(self, intent: Intent) -> Optional[SlotDefinition]:
        return self.SLOT_DEFINITIONS.get(intent)

    def collect(self, session: SessionState, message: str) -> CollectResult:
        """Try to fill the pending intent's slot from ``message``, mutating ``session``."""
        intent = session.pending_intent
        defn = self.get_definition(intent) if intent is not None else None
        if defn is None:
            return CollectResult(status=CollectStatus.NOT_COLLECTABLE, intent=intent)

        value = defn.extractor(message)
        if value:
            session.slots[defn.name] = value
            session.retry_count = 0
            logger.debug("Slot '%s' filled for %s", defn.name, intent.value)
            return CollectResult(CollectStatus.FILLED, intent=intent, slot=defn, value=value)

        session.retry_count += 1
        if session.retry_count > self.max_retries:
            logger.info(
                "Slot '%s' not captured after %d attempt(s), escalating %s",
                defn.name, session.retry_count, intent.value,
            )
            session.finish_flow()
            return CollectResult(CollectStatus.ESCALATE, intent=intent, slot=defn)

        logger.debug("Slot '%s' invalid, retry %d", defn.name, session.retry_count)
        return CollectResult(CollectStatus.RETRY, intent=intent, slot=defn)

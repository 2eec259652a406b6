"""
Dialogue engine: the per-session state machine behind the chat endpoint.

One turn runs as follows:

1. Classify the message and load the session under its lock.
2. Greeting, goodbye and handoff reply immediately without touching state.
3. If a flow is pending and the message carries no new command, try to
   collect the missing slot (re-prompt, escalate, or resume the flow).
4. Dispatch to the intent handler, which may call the backend gateway.

Handlers return a ``TurnOutcome``; ``render_reply`` turns it into text.
Backend failures never escape a turn: they are logged and answered with
the fixed escalation reply, leaving the pending flow as it was.

Usage:
    engine = DialogueEngine(backend=InMemoryBackend.with_sample_data())
    reply = await engine.handle_message("track ORD1001", "web-42")
"""

import asyncio
import math
from datetime import datetime, timezone
from typing import Any, Awaitable, Callable, Optional, TypeVar

from src.config import DialogueConfig, settings
from src.conversation.nlu import (
    classify_intent,
    extract_order_id,
    extract_refund_id,
    normalize_carrier_status,
)
from src.conversation.session_store import SessionStore
from src.conversation.slot_manager import ORDER_ID_SLOT, CollectStatus, SlotManager
from src.logging_context import get_session_logger, session_scope
from src.prompts.reply_templates import render_reply
from src.schemas.conversation_schema import (
    DEFAULT_SESSION,
    Intent,
    Outcome,
    SessionState,
    TurnOutcome,
)
from src.schemas.order_schema import Complaint, OrderReturn, Refund
from src.tools.gateway import BackendGateway, BackendUnavailable
from src.tools.ids import REFUND_PREFIX, RETURN_PREFIX, TICKET_PREFIX, generate_reference

logger = get_session_logger(__name__)

T = TypeVar("T")
Handler = Callable[[str, SessionState], Awaitable[TurnOutcome]]

STATELESS_OUTCOMES: dict[Intent, Outcome] = {
    Intent.GREETING: Outcome.GREETING,
    Intent.GOODBYE: Outcome.GOODBYE,
    Intent.AGENT_HANDOFF: Outcome.HANDOFF,
}

REFUND_INITIATED = "initiated"
RETURN_PICKUP_SCHEDULED = "pickup_scheduled"
SECONDS_PER_DAY = 24 * 60 * 60


class DialogueEngine:
    """
    Order-support state machine.

    Owns its session store, so independent engines never share
    conversations. Every backend call is bounded by ``timeout_sec``.
    """

    def __init__(
        self,
        backend: BackendGateway,
        sessions: Optional[SessionStore] = None,
        slot_manager: Optional[SlotManager] = None,
        policy: Optional[DialogueConfig] = None,
        timeout_sec: Optional[float] = None,
        id_factory: Callable[[str], str] = generate_reference,
        clock: Optional[Callable[[], datetime]] = None,
    ) -> None:
        self.backend = backend
        self.sessions = sessions or SessionStore(idle_ttl_sec=settings.sessions.idle_ttl_sec)
        self.policy = policy or settings.dialogue
        self.slot_manager = slot_manager or SlotManager(max_retries=self.policy.max_slot_retries)
        self.timeout_sec = timeout_sec or settings.backend.timeout_sec
        self._id_factory = id_factory
        self._clock = clock or (lambda: datetime.now(timezone.utc))
        # check-then-insert for complaints must not interleave across sessions
        self._complaint_lock = asyncio.Lock()
        self._handlers: dict[Intent, Handler] = {
            Intent.TRACK_ORDER: self._handle_track_order,
            Intent.INITIATE_REFUND: self._handle_initiate_refund,
            Intent.REFUND_STATUS: self._handle_refund_status,
            Intent.REGISTER_COMPLAINT: self._handle_register_complaint,
            Intent.CREATE_RETURN: self._handle_create_return,
            Intent.FALLBACK: self._handle_fallback,
        }

    async def handle_message(self, message: Optional[str], session_key: str = DEFAULT_SESSION) -> str:
        """Process one inbound message and return the reply text."""
        result = await self.process_turn(message, session_key)
        return render_reply(result)

    async def process_turn(self, message: Optional[str], session_key: str = DEFAULT_SESSION) -> TurnOutcome:
        """Process one inbound message and return the structured outcome."""
        text = message or ""
        intent = classify_intent(text)
        with session_scope(session_key):
            async with self.sessions.lock(session_key):
                session = self.sessions.get_or_create(session_key)
                logger.debug(
                    "Turn for %s: intent=%s pending=%s",
                    session_key, intent.value,
                    session.pending_intent.value if session.pending_intent else None,
                )
                try:
                    return await self._decide(intent, text, session)
                except BackendUnavailable as exc:
                    logger.error("Backend unavailable during %s: %s", intent.value, exc, exc_info=True)
                except Exception:
                    logger.exception("Unexpected failure during %s", intent.value)
                return TurnOutcome(Outcome.SYSTEM_ERROR, intent)

    async def _decide(self, intent: Intent, message: str, session: SessionState) -> TurnOutcome:
        if intent in STATELESS_OUTCOMES:
            return TurnOutcome(STATELESS_OUTCOMES[intent], intent)

        if session.pending_intent is not None and intent is Intent.FALLBACK:
            collected = self.slot_manager.collect(session, message)
            if collected.status is CollectStatus.RETRY:
                return TurnOutcome(
                    Outcome.SLOT_REPROMPT, collected.intent, {"retry_count": session.retry_count}
                )
            if collected.status is CollectStatus.ESCALATE:
                return TurnOutcome(Outcome.SLOT_ESCALATION, collected.intent)
            if collected.status is CollectStatus.FILLED:
                intent = collected.intent

        return await self._handlers[intent](message, session)

    async def _call(self, awaitable: Awaitable[T]) -> T:
        """Await a backend call, converting a timeout into BackendUnavailable."""
        try:
            return await asyncio.wait_for(awaitable, timeout=self.timeout_sec)
        except asyncio.TimeoutError as exc:
            raise BackendUnavailable(f"backend call exceeded {self.timeout_sec}s") from exc

    def _now_iso(self) -> str:
        return self._clock().isoformat()

    @staticmethod
    def _prompt(session: SessionState, intent: Intent, start_flow: bool = True) -> TurnOutcome:
        if start_flow:
            session.start_flow(intent)
            logger.info("Flow started: %s", intent.value)
        return TurnOutcome(Outcome.SLOT_PROMPT, intent)

    @staticmethod
    def _finish_pending(session: SessionState, intent: Intent) -> None:
        if session.pending_intent is intent:
            session.finish_flow()

    @staticmethod
    def _slot_order_id(session: SessionState, intent: Intent) -> Optional[str]:
        """Order id collected for ``intent``'s own pending flow, if any."""
        if session.pending_intent is not intent:
            return None
        return session.slots.get(ORDER_ID_SLOT)

    # ------------------------------------------------------------------ #
    # Intent handlers
    # ------------------------------------------------------------------ #

    async def _handle_track_order(self, message: str, session: SessionState) -> TurnOutcome:
        intent = Intent.TRACK_ORDER
        order_id = extract_order_id(message)
        if not order_id:
            return self._prompt(session, intent)

        orders = await self._call(self.backend.find_orders_by_id(order_id))
        if not orders:
            return TurnOutcome(Outcome.ORDER_NOT_FOUND, intent, {"order_id": order_id})
        order = orders[0]

        if not order.tracking_id:
            self._finish_pending(session, intent)
            return TurnOutcome(
                Outcome.TRACKING_PENDING, intent,
                {"order_id": order.order_id, "status": order.status},
            )

        shipments = await self._call(self.backend.find_shipment_by_tracking(order.tracking_id))
        self._finish_pending(session, intent)
        if not shipments:
            return TurnOutcome(
                Outcome.TRACKING_UNAVAILABLE, intent,
                {"order_id": order_id, "last_event": order.last_event or "unknown"},
            )
        shipment = shipments[0]
        status = normalize_carrier_status(shipment.status)
        return TurnOutcome(
            Outcome.TRACKING_STATUS, intent,
            {
                "order_id": order_id,
                "status": status,
                "status_label": status.replace("_", " "),
                "eta": shipment.eta_iso or "unknown",
                "tracking_id": shipment.tracking_id,
            },
        )

    async def _handle_initiate_refund(self, message: str, session: SessionState) -> TurnOutcome:
        intent = Intent.INITIATE_REFUND
        order_id = extract_order_id(message) or self._slot_order_id(session, intent)
        if not order_id:
            return self._prompt(session, intent)

        orders = await self._call(self.backend.find_orders_by_id(order_id))
        if not orders:
            return TurnOutcome(Outcome.ORDER_NOT_FOUND, intent, {"order_id": order_id})
        order = orders[0]
        if order.status not in self.policy.refundable_statuses:
            logger.info("Refund rejected for %s: status %s", order_id, order.status)
            return TurnOutcome(
                Outcome.REFUND_INELIGIBLE, intent, {"order_id": order_id, "status": order.status}
            )

        refund = Refund(
            refund_id=self._id_factory(REFUND_PREFIX),
            order_id=order_id,
            amount=order.total_amount,
            sla_days=self.policy.refund_sla_days,
            status=REFUND_INITIATED,
            created_at=self._now_iso(),
        )
        await self._call(self.backend.create_refund(refund))
        session.finish_flow()
        logger.info("Refund %s created for %s", refund.refund_id, order_id)
        return TurnOutcome(
            Outcome.REFUND_CREATED, intent,
            {
                "refund_id": refund.refund_id,
                "order_id": order_id,
                "amount": refund.amount,
                "sla_days": refund.sla_days,
            },
        )

    async def _handle_refund_status(self, message: str, session: SessionState) -> TurnOutcome:
        intent = Intent.REFUND_STATUS
        refund_id = extract_refund_id(message)
        if not refund_id:
            return self._prompt(session, intent, start_flow=False)

        refunds = await self._call(self.backend.find_refund_by_id(refund_id))
        if not refunds:
            return TurnOutcome(Outcome.REFUND_NOT_FOUND, intent, {"refund_id": refund_id})
        refund = refunds[0]
        return TurnOutcome(
            Outcome.REFUND_STATUS, intent,
            {
                "refund_id": refund.refund_id,
                "status": refund.status,
                "amount": refund.amount,
                "sla_days": refund.sla_days,
            },
        )

    async def _handle_register_complaint(self, message: str, session: SessionState) -> TurnOutcome:
        intent = Intent.REGISTER_COMPLAINT
        order_id = extract_order_id(message) or self._slot_order_id(session, intent)
        if not order_id:
            return self._prompt(session, intent)

        async with self._complaint_lock:
            existing = await self._call(self.backend.find_complaints_by_order(order_id))
            if existing:
                logger.info("Complaint already open for %s: %s", order_id, existing[0].ticket_id)
                return TurnOutcome(
                    Outcome.COMPLAINT_EXISTS, intent,
                    {"order_id": order_id, "ticket_id": existing[0].ticket_id},
                )

            complaint = Complaint(
                ticket_id=self._id_factory(TICKET_PREFIX),
                order_id=order_id,
                description=message,
                priority=self.policy.complaint_priority,
                sla_hours=self.policy.complaint_sla_hours,
                created_at=self._now_iso(),
            )
            await self._call(self.backend.create_complaint(complaint))

        session.finish_flow()
        logger.info("Complaint %s registered for %s", complaint.ticket_id, order_id)
        return TurnOutcome(
            Outcome.COMPLAINT_CREATED, intent,
            {
                "ticket_id": complaint.ticket_id,
                "order_id": order_id,
                "sla_hours": complaint.sla_hours,
            },
        )

    async def _handle_create_return(self, message: str, session: SessionState) -> TurnOutcome:
        intent = Intent.CREATE_RETURN
        order_id = extract_order_id(message)
        if not order_id:
            return self._prompt(session, intent, start_flow=False)

        orders = await self._call(self.backend.find_orders_by_id(order_id))
        if not orders:
            return TurnOutcome(Outcome.ORDER_NOT_FOUND, intent, {"order_id": order_id})
        order = orders[0]
        if order.placed_at is None:
            raise BackendUnavailable(f"order {order_id} has no placed_at")

        days_elapsed = math.floor((self._clock() - order.placed_at).total_seconds() / SECONDS_PER_DAY)
        if days_elapsed > self.policy.return_window_days:
            logger.info("Return rejected for %s: %d days since purchase", order_id, days_elapsed)
            return TurnOutcome(
                Outcome.RETURN_WINDOW_EXPIRED, intent,
                {"order_id": order_id, "days_elapsed": days_elapsed},
            )

        order_return = OrderReturn(
            return_id=self._id_factory(RETURN_PREFIX),
            order_id=order_id,
            reason=self.policy.return_reason,
            pickup_window=self.policy.return_pickup_window,
            status=RETURN_PICKUP_SCHEDULED,
        )
        await self._call(self.backend.create_return(order_return))
        logger.info("Return %s scheduled for %s", order_return.return_id, order_id)
        return TurnOutcome(
            Outcome.RETURN_CREATED, intent,
            {
                "return_id": order_return.return_id,
                "order_id": order_id,
                "pickup_window": order_return.pickup_window,
            },
        )

    async def _handle_fallback(self, message: str, session: SessionState) -> TurnOutcome:
        return TurnOutcome(Outcome.MENU, Intent.FALLBACK)

    def describe_transitions(self) -> dict[str, Any]:
        """Enumerate which intents are stateless, dispatched, or slot-collecting."""
        return {
            "stateless": sorted(i.value for i in STATELESS_OUTCOMES),
            "handlers": sorted(i.value for i in self._handlers),
            "slot_flows": sorted(i.value for i in self.slot_manager.SLOT_DEFINITIONS),
        }

"""Shared test fixtures and helpers."""

import itertools
from datetime import datetime, timedelta, timezone
from typing import Any, Optional

import pytest

from src.conversation.dialogue_engine import DialogueEngine
from src.conversation.session_store import SessionStore
from src.conversation.slot_manager import SlotManager
from src.schemas.conversation_schema import Intent, SessionState
from src.tools.mock_backend import InMemoryBackend

NOW = datetime(2025, 9, 10, 12, 0, tzinfo=timezone.utc)


def make_order(
    order_id: str,
    status: str = "delivered",
    tracking_id: Optional[str] = None,
    prices: tuple = (100,),
    days_ago: float = 1,
    last_event: str = "Order placed",
) -> dict[str, Any]:
    """Helper to create a raw order record as the data store returns it."""
    return {
        "order_id": order_id,
        "status": status,
        "tracking_id": tracking_id,
        "items": [{"price": p} for p in prices],
        "placed_at": (NOW - timedelta(days=days_ago)).isoformat(),
        "last_event": last_event,
    }


def sample_orders() -> list[dict[str, Any]]:
    return [
        make_order("ORD1001", "delivered", "TRK9001", (499, 299), days_ago=5),
        make_order("ORD1002", "shipped", "TRK9002", (1999,), days_ago=14),
        make_order("ORD1003", "created", None, (350,), days_ago=1),
        make_order("ORD1004", "delivered", "TRK9004", (1250,), days_ago=15),
        make_order("ORD1005", "shipped", "TRK9005", (799,), days_ago=3,
                   last_event="Departed sorting facility"),
        make_order("ORD1006", "delivered", None, (10.25, 5.5), days_ago=2),
    ]


def sample_shipments() -> list[dict[str, Any]]:
    return [
        {"tracking_id": "TRK9001", "status": "Delivered", "eta_iso": None},
        {"tracking_id": "TRK9002", "status": "Out for Delivery today",
         "eta_iso": "2025-09-11T18:00:00Z"},
        {"tracking_id": "TRK9004", "status": "", "eta_iso": None},
    ]


def sample_refunds() -> list[dict[str, Any]]:
    return [
        {
            "refund_id": "RFD-ABC123",
            "order_id": "ORD1001",
            "amount": 798,
            "sla_days": 5,
            "status": "processing",
            "created_at": "2025-09-08T10:00:00+00:00",
        }
    ]


def sequential_ids():
    """Deterministic reference generator: RFD-TEST1, TCK-TEST2, ..."""
    counter = itertools.count(1)
    return lambda prefix: f"{prefix}TEST{next(counter)}"


@pytest.fixture
def backend():
    return InMemoryBackend(
        orders=sample_orders(),
        shipments=sample_shipments(),
        refunds=sample_refunds(),
    )


@pytest.fixture
def session_store():
    return SessionStore()


@pytest.fixture
def slot_manager():
    return SlotManager(max_retries=1)


@pytest.fixture
def engine(backend, session_store, slot_manager):
    return DialogueEngine(
        backend=backend,
        sessions=session_store,
        slot_manager=slot_manager,
        timeout_sec=1.0,
        id_factory=sequential_ids(),
        clock=lambda: NOW,
    )


@pytest.fixture
def pending_refund_session() -> SessionState:
    session = SessionState()
    session.start_flow(Intent.INITIATE_REFUND)
    return session

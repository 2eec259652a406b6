"""
In-memory order data store.

Stands in for the json-server backend in the console demo and in tests.
Implements the same ``BackendGateway`` operations as the HTTP gateway, so
the dialogue engine cannot tell the two apart.
"""

import logging
from datetime import datetime, timedelta, timezone
from typing import Any, Optional

from src.schemas.order_schema import Complaint, Order, OrderReturn, Refund, Shipment

logger = logging.getLogger(__name__)


def _sample_orders(now: datetime) -> list[dict[str, Any]]:
    return [
        {
            "order_id": "ORD1001",
            "status": "delivered",
            "tracking_id": "TRK9001",
            "items": [{"sku": "SKU-TSHIRT", "price": 499}, {"sku": "SKU-MUG", "price": 299}],
            "placed_at": (now - timedelta(days=5)).isoformat(),
            "last_event": "Delivered to front door",
        },
        {
            "order_id": "ORD1002",
            "status": "shipped",
            "tracking_id": "TRK9002",
            "items": [{"sku": "SKU-HEADPHONES", "price": 1999}],
            "placed_at": (now - timedelta(days=2)).isoformat(),
            "last_event": "Departed sorting facility",
        },
        {
            "order_id": "ORD1003",
            "status": "created",
            "tracking_id": None,
            "items": [{"sku": "SKU-BOOK", "price": 350}],
            "placed_at": (now - timedelta(days=1)).isoformat(),
            "last_event": "Order placed",
        },
        {
            "order_id": "ORD1004",
            "status": "delivered",
            "tracking_id": "TRK9004",
            "items": [{"sku": "SKU-LAMP", "price": 1250}],
            "placed_at": (now - timedelta(days=30)).isoformat(),
            "last_event": "Delivered to reception",
        },
        {
            "order_id": "ORD1005",
            "status": "shipped",
            "tracking_id": "TRK9005",
            "items": [{"sku": "SKU-CHARGER", "price": 799}],
            "placed_at": (now - timedelta(days=3)).isoformat(),
            "last_event": "Shipment picked up by carrier",
        },
    ]


def _sample_shipments() -> list[dict[str, Any]]:
    return [
        {"tracking_id": "TRK9001", "status": "Delivered", "eta_iso": None},
        {"tracking_id": "TRK9002", "status": "Out for delivery today", "eta_iso": "2025-09-14T18:00:00Z"},
        {"tracking_id": "TRK9004", "status": "Delivered", "eta_iso": None},
    ]


class InMemoryBackend:
    """Mock backend holding records in plain lists."""

    def __init__(
        self,
        orders: Optional[list[dict[str, Any]]] = None,
        shipments: Optional[list[dict[str, Any]]] = None,
        refunds: Optional[list[dict[str, Any]]] = None,
        complaints: Optional[list[dict[str, Any]]] = None,
    ) -> None:
        self._seed = (orders or [], shipments or [], refunds or [], complaints or [])
        self.reset()

    @classmethod
    def with_sample_data(cls, now: Optional[datetime] = None) -> "InMemoryBackend":
        """Build a store pre-filled with demo orders placed relative to ``now``."""
        now = now or datetime.now(timezone.utc)
        return cls(orders=_sample_orders(now), shipments=_sample_shipments())

    def reset(self) -> None:
        """Restore the seed records. Used by test fixtures for isolation."""
        orders, shipments, refunds, complaints = self._seed
        self.orders: list[Order] = [Order.model_validate(o) for o in orders]
        self.shipments: list[Shipment] = [Shipment.model_validate(s) for s in shipments]
        self.refunds: list[Refund] = [Refund.model_validate(r) for r in refunds]
        self.complaints: list[Complaint] = [Complaint.model_validate(c) for c in complaints]
        self.returns: list[OrderReturn] = []

    async def find_orders_by_id(self, order_id: str) -> list[Order]:
        return [o for o in self.orders if o.order_id == order_id]

    async def find_shipment_by_tracking(self, tracking_id: str) -> list[Shipment]:
        return [s for s in self.shipments if s.tracking_id == tracking_id]

    async def find_refund_by_id(self, refund_id: str) -> list[Refund]:
        return [r for r in self.refunds if r.refund_id == refund_id]

    async def find_complaints_by_order(self, order_id: str) -> list[Complaint]:
        return [c for c in self.complaints if c.order_id == order_id]

    async def create_refund(self, refund: Refund) -> None:
        self.refunds.append(refund)
        logger.info("Refund stored: %s for %s", refund.refund_id, refund.order_id)

    async def create_complaint(self, complaint: Complaint) -> None:
        self.complaints.append(complaint)
        logger.info("Complaint stored: %s for %s", complaint.ticket_id, complaint.order_id)

    async def create_return(self, order_return: OrderReturn) -> None:
        self.returns.append(order_return)
        logger.info("Return stored: %s for %s", order_return.return_id, order_return.order_id)

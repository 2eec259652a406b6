"""Backend record models for orders, shipments, refunds, complaints and returns."""

from datetime import datetime, timezone
from typing import Optional, Union

from pydantic import BaseModel, ConfigDict, Field, field_validator

Amount = Union[int, float]


class BackendRecord(BaseModel):
    """Base for records read from the data store. Unknown fields are kept."""

    model_config = ConfigDict(extra="allow")


class OrderItem(BackendRecord):
    price: Amount = 0

    @field_validator("price", mode="before")
    @classmethod
    def _missing_price_is_zero(cls, value):
        return 0 if value is None else value


class Order(BackendRecord):
    """Customer order. Read-only to the assistant."""

    order_id: str
    status: str
    tracking_id: Optional[str] = None
    items: list[OrderItem] = Field(default_factory=list)
    placed_at: Optional[datetime] = None
    last_event: Optional[str] = None

    @field_validator("placed_at")
    @classmethod
    def _assume_utc(cls, value: Optional[datetime]) -> Optional[datetime]:
        if value is not None and value.tzinfo is None:
            return value.replace(tzinfo=timezone.utc)
        return value

    @property
    def total_amount(self) -> Amount:
        return sum(item.price for item in self.items)


class Shipment(BackendRecord):
    """Carrier shipment. ``status`` is free text as reported by the carrier."""

    tracking_id: str
    status: Optional[str] = None
    eta_iso: Optional[str] = None


class Refund(BackendRecord):
    refund_id: str
    order_id: str
    amount: Amount
    sla_days: int
    status: str
    created_at: Optional[str] = None


class Complaint(BackendRecord):
    ticket_id: str
    order_id: str
    description: str = ""
    priority: str = "Normal"
    sla_hours: int = 72
    created_at: Optional[str] = None


class OrderReturn(BackendRecord):
    return_id: str
    order_id: str
    reason: str
    pickup_window: str
    status: str

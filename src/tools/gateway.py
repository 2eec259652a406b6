"""
Backend gateway for the order data store.

The dialogue engine only talks to the store through the ``BackendGateway``
interface below. Lookups return a list (empty means not found) and writes
return nothing. Anything that prevents a clean answer (timeouts, transport
errors, bad status codes, malformed records) surfaces as
``BackendUnavailable``.

``HttpBackendGateway`` speaks to a json-server style REST API:

    GET  /orders?order_id=ORD1001
    GET  /shipments?tracking_id=TRK9001
    GET  /refunds?refund_id=RFD-AB12
    GET  /complaints?order_id=ORD1001
    POST /refunds | /complaints | /returns
"""

import logging
from typing import Any, Optional, Protocol, TypeVar

import httpx
from pydantic import BaseModel, ValidationError

from src.schemas.order_schema import Complaint, Order, OrderReturn, Refund, Shipment

logger = logging.getLogger(__name__)

RecordT = TypeVar("RecordT", bound=BaseModel)


class BackendError(Exception):
    """Base class for backend gateway failures."""


class BackendUnavailable(BackendError):
    """The backend could not produce a usable answer for this call."""


class BackendGateway(Protocol):
    """Operations the dialogue engine needs from the data store."""

    async def find_orders_by_id(self, order_id: str) -> list[Order]: ...

    async def find_shipment_by_tracking(self, tracking_id: str) -> list[Shipment]: ...

    async def find_refund_by_id(self, refund_id: str) -> list[Refund]: ...

    async def find_complaints_by_order(self, order_id: str) -> list[Complaint]: ...

    async def create_refund(self, refund: Refund) -> None: ...

    async def create_complaint(self, complaint: Complaint) -> None: ...

    async def create_return(self, order_return: OrderReturn) -> None: ...


class HttpBackendGateway:
    """Backend gateway over HTTP using a shared ``httpx.AsyncClient``."""

    def __init__(
        self,
        base_url: str,
        timeout_sec: float,
        client: Optional[httpx.AsyncClient] = None,
    ) -> None:
        self.base_url = base_url.rstrip("/")
        self.timeout_sec = timeout_sec
        self._client = client

    def _get_client(self) -> httpx.AsyncClient:
        """Get or create the async HTTP client."""
        if self._client is None:
            self._client = httpx.AsyncClient(
                base_url=self.base_url,
                timeout=httpx.Timeout(self.timeout_sec),
            )
        return self._client

    async def close(self) -> None:
        """Close the HTTP client."""
        if self._client is not None:
            await self._client.aclose()
            self._client = None

    async def _request(self, method: str, path: str, **kwargs: Any) -> httpx.Response:
        try:
            response = await self._get_client().request(method, path, **kwargs)
            response.raise_for_status()
        except httpx.TimeoutException as exc:
            raise BackendUnavailable(f"{method} {path} timed out") from exc
        except httpx.HTTPStatusError as exc:
            raise BackendUnavailable(
                f"{method} {path} returned HTTP {exc.response.status_code}"
            ) from exc
        except httpx.HTTPError as exc:
            raise BackendUnavailable(f"{method} {path} failed: {exc}") from exc
        return response

    async def _query(self, path: str, model: type[RecordT], **params: str) -> list[RecordT]:
        response = await self._request("GET", path, params=params)
        try:
            payload = response.json()
        except ValueError as exc:
            raise BackendUnavailable(f"GET {path} returned a non-JSON body") from exc
        if not isinstance(payload, list):
            raise BackendUnavailable(f"GET {path} returned {type(payload).__name__}, expected list")
        try:
            return [model.model_validate(item) for item in payload]
        except ValidationError as exc:
            raise BackendUnavailable(f"GET {path} returned a malformed {model.__name__}") from exc

    async def _insert(self, path: str, record: BaseModel) -> None:
        await self._request("POST", path, json=record.model_dump(mode="json"))
        logger.debug("Inserted record into %s", path)

    async def find_orders_by_id(self, order_id: str) -> list[Order]:
        return await self._query("/orders", Order, order_id=order_id)

    async def find_shipment_by_tracking(self, tracking_id: str) -> list[Shipment]:
        return await self._query("/shipments", Shipment, tracking_id=tracking_id)

    async def find_refund_by_id(self, refund_id: str) -> list[Refund]:
        return await self._query("/refunds", Refund, refund_id=refund_id)

    async def find_complaints_by_order(self, order_id: str) -> list[Complaint]:
        return await self._query("/complaints", Complaint, order_id=order_id)

    async def create_refund(self, refund: Refund) -> None:
        await self._insert("/refunds", refund)

    async def create_complaint(self, complaint: Complaint) -> None:
        await self._insert("/complaints", complaint)

    async def create_return(self, order_return: OrderReturn) -> None:
        await self._insert("/returns", order_return)

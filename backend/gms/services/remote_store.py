"""RemoteStore contract and the async HTTP client for the central backend.

The sync coordinator and the offline-aware action layer only ever talk to a
``RemoteStore``. Three implementations exist:

- ``HttpRemoteStore`` (this module): the central workshop API over HTTP.
- ``DatabaseRemoteStore`` (``gms.services.remote_database``): direct SQL access
  for deployments co-located with the database.
- ``MockRemoteStore`` (``gms.services.mock_backend``): seeded in-memory data.
"""

import logging
from typing import Any, Protocol, TypeVar

import httpx
from pydantic import BaseModel, ValidationError

from gms.schemas.inventory import InventoryItemRead
from gms.schemas.work_order import LineItemCreate, WorkOrderRead

logger = logging.getLogger(__name__)

ModelT = TypeVar("ModelT", bound=BaseModel)


class RemoteStoreError(Exception):
    """The remote store could not complete the call."""


class NotFoundError(RemoteStoreError):
    """The referenced entity does not exist remotely."""


class ValidationRejected(RemoteStoreError):
    """The remote store refused the change as invalid."""


class RemoteStore(Protocol):
    async def update_inventory_item(
        self, item_id: str, updates: dict[str, Any]
    ) -> InventoryItemRead: ...

    async def find_inventory_items_by_sku(self, sku: str) -> list[InventoryItemRead]: ...

    async def append_line_item_to_work_order(
        self, work_order_id: str, line_item: LineItemCreate
    ) -> WorkOrderRead: ...

    async def get_inventory_item(self, item_id: str) -> InventoryItemRead: ...

    async def get_work_order(self, work_order_id: str) -> WorkOrderRead: ...


class HttpRemoteStore:
    """Thin async wrapper around the central workshop REST API.

    Every response is expected in the ``{"success": true, "data": ...}``
    envelope. Timeouts and transport failures surface as ``RemoteStoreError``,
    as do 2xx bodies that are not JSON or do not fit the expected model, so
    callers can treat them like any other hard failure.
    """

    def __init__(
        self,
        base_url: str,
        token: str = "",
        timeout: float = 15.0,
        transport: httpx.AsyncBaseTransport | None = None,
    ):
        self.base_url = base_url.rstrip("/")
        self.token = token
        self.timeout = timeout
        self._transport = transport

    def _headers(self) -> dict[str, str]:
        headers = {"Accept": "application/json"}
        if self.token:
            headers["Authorization"] = f"Bearer {self.token}"
        return headers

    async def _request(self, method: str, path: str, **kwargs) -> Any:
        """Make a request and unwrap the response envelope."""
        url = f"{self.base_url}/api/v1{path}"
        try:
            async with httpx.AsyncClient(
                timeout=self.timeout, transport=self._transport
            ) as client:
                resp = await client.request(method, url, headers=self._headers(), **kwargs)
        except httpx.TimeoutException as exc:
            raise RemoteStoreError(f"{method} {path} timed out") from exc
        except httpx.HTTPError as exc:
            raise RemoteStoreError(f"{method} {path} failed: {exc}") from exc

        if resp.status_code == 404:
            raise NotFoundError(_error_message(resp, "Not found."))
        if resp.status_code in (400, 409, 422):
            raise ValidationRejected(_error_message(resp, "Rejected by remote."))
        if resp.is_error:
            raise RemoteStoreError(
                f"{method} {path} returned HTTP {resp.status_code}"
            )
        try:
            body = resp.json()
        except ValueError as exc:
            content_type = resp.headers.get("content-type", "unknown type")
            raise RemoteStoreError(
                f"{method} {path} returned a non-JSON body ({content_type})"
            ) from exc
        return body.get("data") if isinstance(body, dict) else body

    async def update_inventory_item(
        self, item_id: str, updates: dict[str, Any]
    ) -> InventoryItemRead:
        data = await self._request("PATCH", f"/inventory/{item_id}", json=updates)
        return _parse(InventoryItemRead, data)

    async def find_inventory_items_by_sku(self, sku: str) -> list[InventoryItemRead]:
        data = await self._request("GET", "/inventory", params={"sku": sku})
        if data is not None and not isinstance(data, list):
            raise RemoteStoreError(f"SKU lookup returned {type(data).__name__}, expected a list")
        return [_parse(InventoryItemRead, row) for row in data or []]

    async def append_line_item_to_work_order(
        self, work_order_id: str, line_item: LineItemCreate
    ) -> WorkOrderRead:
        data = await self._request(
            "POST",
            f"/work-orders/{work_order_id}/line-items",
            json=line_item.to_wire(),
        )
        return _parse(WorkOrderRead, data)

    async def get_inventory_item(self, item_id: str) -> InventoryItemRead:
        data = await self._request("GET", f"/inventory/{item_id}")
        return _parse(InventoryItemRead, data)

    async def get_work_order(self, work_order_id: str) -> WorkOrderRead:
        data = await self._request("GET", f"/work-orders/{work_order_id}")
        return _parse(WorkOrderRead, data)


def _error_message(resp: httpx.Response, default: str) -> str:
    try:
        body = resp.json()
    except ValueError:
        return default
    if isinstance(body, dict):
        error = body.get("error")
        if isinstance(error, dict) and error.get("message"):
            return str(error["message"])
        if body.get("detail"):
            return str(body["detail"])
    return default


def _parse(model: type[ModelT], data: Any) -> ModelT:
    try:
        return model.model_validate(data)
    except ValidationError as exc:
        raise RemoteStoreError(
            f"Unexpected {model.__name__} payload from remote ({exc.error_count()} errors)"
        ) from exc

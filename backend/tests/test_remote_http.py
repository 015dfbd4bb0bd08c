import json

import httpx
import pytest

from gms.schemas.work_order import LineItemCreate
from gms.services.remote_store import (
    HttpRemoteStore,
    NotFoundError,
    RemoteStoreError,
    ValidationRejected,
)

ITEM = {
    "id": "inv_1",
    "sku": "BOS-BR-0001",
    "name": "Brake Pads Pro",
    "brand": "Bosch",
    "stockQty": 5,
    "lowStockThreshold": 5,
    "price": 4599,
}

WORK_ORDER = {
    "id": "WO-1",
    "status": "In Progress",
    "customerName": "Jane Doe",
    "vehicle": "Ford Focus",
    "vrm": "AB12 CDE",
    "issue": "Grinding noise when braking.",
    "isUrgent": False,
    "createdAt": "2026-10-01T09:00:00Z",
    "lastUpdatedAt": "2026-10-01T09:00:00Z",
    "lineItems": [],
}


def make_store(handler, token=""):
    return HttpRemoteStore(
        "http://central.local/", token=token, transport=httpx.MockTransport(handler)
    )


async def test_update_sends_patch_and_unwraps_envelope():
    seen = {}

    def handler(request):
        seen["method"] = request.method
        seen["url"] = str(request.url)
        seen["body"] = json.loads(request.content)
        seen["auth"] = request.headers.get("Authorization")
        return httpx.Response(200, json={"success": True, "data": ITEM})

    item = await make_store(handler, token="secret").update_inventory_item(
        "inv_1", {"stockQty": 5}
    )

    assert item.stock_qty == 5
    assert seen == {
        "method": "PATCH",
        "url": "http://central.local/api/v1/inventory/inv_1",
        "body": {"stockQty": 5},
        "auth": "Bearer secret",
    }


async def test_find_by_sku_passes_query_and_keeps_order():
    second = {**ITEM, "id": "inv_2", "name": "Brake Pads Max"}

    def handler(request):
        assert request.url.params["sku"] == "BOS-BR-0001"
        return httpx.Response(200, json={"success": True, "data": [ITEM, second]})

    items = await make_store(handler).find_inventory_items_by_sku("BOS-BR-0001")

    assert [i.id for i in items] == ["inv_1", "inv_2"]


async def test_append_line_item_posts_camel_case():
    captured = {}

    def handler(request):
        captured["path"] = request.url.path
        captured["body"] = json.loads(request.content)
        wo = {**WORK_ORDER, "lineItems": [{"id": "li_WO-1_0", **captured["body"]}]}
        return httpx.Response(201, json={"success": True, "data": wo})

    line = LineItemCreate(description="Brake Pads Pro (Bosch)", quantity=2, unit_price=4599)
    wo = await make_store(handler).append_line_item_to_work_order("WO-1", line)

    assert captured["path"] == "/api/v1/work-orders/WO-1/line-items"
    assert captured["body"] == {
        "description": "Brake Pads Pro (Bosch)",
        "quantity": 2,
        "unitPrice": 4599,
        "isVatable": True,
        "type": "part",
    }
    assert wo.line_items[0].id == "li_WO-1_0"


@pytest.mark.parametrize(
    ("status", "error"),
    [
        (404, NotFoundError),
        (400, ValidationRejected),
        (409, ValidationRejected),
        (422, ValidationRejected),
        (500, RemoteStoreError),
        (503, RemoteStoreError),
    ],
)
async def test_http_errors_map_to_remote_errors(status, error):
    def handler(request):
        return httpx.Response(
            status, json={"success": False, "error": {"code": "X", "message": "nope"}}
        )

    with pytest.raises(error):
        await make_store(handler).get_inventory_item("inv_1")


async def test_error_message_is_taken_from_envelope():
    def handler(request):
        return httpx.Response(
            422,
            json={"success": False, "error": {"message": "Stock quantity cannot be negative."}},
        )

    with pytest.raises(ValidationRejected, match="cannot be negative"):
        await make_store(handler).update_inventory_item("inv_1", {"stockQty": 1})


async def test_timeout_becomes_remote_store_error():
    def handler(request):
        raise httpx.ReadTimeout("slow", request=request)

    with pytest.raises(RemoteStoreError, match="timed out"):
        await make_store(handler).get_work_order("WO-1")


async def test_connection_error_becomes_remote_store_error():
    def handler(request):
        raise httpx.ConnectError("refused", request=request)

    with pytest.raises(RemoteStoreError) as excinfo:
        await make_store(handler).find_inventory_items_by_sku("X")
    assert not isinstance(excinfo.value, (NotFoundError, ValidationRejected))


async def test_get_work_order_parses_nested_line_items():
    wo = {
        **WORK_ORDER,
        "lineItems": [
            {"id": "li_WO-1_0", "description": "Labour", "quantity": 1,
             "unitPrice": 7500, "isVatable": True, "type": "labour"},
        ],
    }

    def handler(request):
        return httpx.Response(200, json={"success": True, "data": wo})

    result = await make_store(handler).get_work_order("WO-1")

    assert result.line_items[0].unit_price == 7500
    assert result.customer_name == "Jane Doe"


async def test_non_json_success_body_becomes_remote_store_error():
    def handler(request):
        return httpx.Response(
            200, text="<html>proxy login</html>", headers={"content-type": "text/html"}
        )

    with pytest.raises(RemoteStoreError, match="non-JSON body") as excinfo:
        await make_store(handler).update_inventory_item("inv_1", {"stockQty": 3})
    assert not isinstance(excinfo.value, (NotFoundError, ValidationRejected))


@pytest.mark.parametrize(
    "call",
    [
        lambda store: store.get_inventory_item("inv_1"),
        lambda store: store.get_work_order("WO-1"),
        lambda store: store.find_inventory_items_by_sku("BOS-BR-0001"),
    ],
    ids=["item", "work_order", "sku_lookup"],
)
async def test_malformed_success_payload_becomes_remote_store_error(call):
    def handler(request):
        return httpx.Response(200, json={"success": True, "data": {"id": "x"}})

    with pytest.raises(RemoteStoreError):
        await call(make_store(handler))

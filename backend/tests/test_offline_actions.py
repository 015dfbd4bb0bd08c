import httpx
import pytest
from pydantic import ValidationError

from gms.models.enums import ActionDisposition, LineItemType
from gms.schemas.work_order import LineItemCreate
from gms.services.offline_actions import (
    InventoryProjection,
    OfflineActionService,
    OfflineUnavailable,
)
from gms.services.remote_store import (
    HttpRemoteStore,
    NotFoundError,
    RemoteStoreError,
    ValidationRejected,
)
from tests.helpers import make_item, make_work_order


@pytest.fixture
def actions(queue, monitor, remote):
    return OfflineActionService(queue, monitor, remote)


async def test_online_update_applies_and_refreshes_projection(actions, remote, queue):
    remote.add_item(make_item("inv_1", stock_qty=10))

    outcome = await actions.update_inventory_item("inv_1", {"stockQty": 3})

    assert outcome.disposition == ActionDisposition.APPLIED
    assert outcome.item.stock_qty == 3
    assert actions.projection.items["inv_1"].stock_qty == 3
    assert len(queue) == 0


async def test_offline_update_is_queued_and_projected(actions, remote, monitor, queue):
    remote.add_item(make_item("inv_1", stock_qty=10))
    await actions.get_inventory_item("inv_1")
    monitor.set_online(False)
    remote.calls.clear()

    outcome = await actions.update_inventory_item("inv_1", {"stock_qty": 4})

    assert outcome.disposition == ActionDisposition.QUEUED
    assert outcome.queued_action.payload.updates == {"stockQty": 4}
    assert actions.projection.items["inv_1"].stock_qty == 4
    assert [a.id for a in queue.list()] == [outcome.queued_action.id]
    assert remote.calls == []


async def test_transport_failure_queues_and_keeps_optimistic_value(actions, remote, queue):
    remote.add_item(make_item("inv_1", stock_qty=10))
    await actions.get_inventory_item("inv_1")
    remote.fail("inv_1", RemoteStoreError("timeout"))

    outcome = await actions.update_inventory_item("inv_1", {"stockQty": 2})

    assert outcome.disposition == ActionDisposition.QUEUED
    assert actions.projection.items["inv_1"].stock_qty == 2
    assert len(queue) == 1


async def test_rejected_update_reverts_projection(actions, remote, queue):
    remote.add_item(make_item("inv_1", stock_qty=10))
    await actions.get_inventory_item("inv_1")
    remote.fail("inv_1", ValidationRejected("Stock quantity cannot be negative."))

    with pytest.raises(ValidationRejected):
        await actions.update_inventory_item("inv_1", {"stockQty": 1})

    assert actions.projection.items["inv_1"].stock_qty == 10
    assert len(queue) == 0


async def test_update_for_unknown_item_raises_not_found(actions, queue):
    with pytest.raises(NotFoundError):
        await actions.update_inventory_item("inv_404", {"stockQty": 1})
    assert len(queue) == 0


async def test_invalid_patch_never_reaches_queue(actions, monitor, queue):
    monitor.set_online(False)

    with pytest.raises(ValidationError):
        await actions.update_inventory_item("inv_1", {"stockQty": -1})
    with pytest.raises(ValidationError):
        await actions.update_inventory_item("inv_1", {"colour": "red"})
    with pytest.raises(ValidationError):
        await actions.update_inventory_item("inv_1", {})

    assert len(queue) == 0


async def test_offline_scan_is_queued(actions, monitor, queue, remote):
    monitor.set_online(False)

    outcome = await actions.scan_to_work_order("BOS-BR-0001", 2, "WO-1")

    assert outcome.disposition == ActionDisposition.QUEUED
    assert outcome.queued_action.payload.work_order_id == "WO-1"
    assert outcome.queued_action.describe() == "Add part SKU BOS-BR-0001 (Qty: 2) to WO#WO-1"
    assert remote.calls == []
    assert len(queue) == 1


async def test_online_scan_single_match_appends(actions, remote, queue):
    remote.add_item(make_item("inv_1", sku="BOS-BR-0001", price=4599))
    remote.add_work_order(make_work_order("WO-1"))

    outcome = await actions.scan_to_work_order("BOS-BR-0001", 1, "WO-1")

    assert outcome.disposition == ActionDisposition.APPLIED
    (line,) = outcome.work_order.line_items
    assert line.description == "Brake Pads Pro (Bosch)"
    assert line.type == LineItemType.PART
    assert actions.projection.work_orders["WO-1"].line_items[0].id == line.id
    assert len(queue) == 0


async def test_online_scan_multi_match_asks_user(actions, remote):
    remote.add_item(make_item("inv_1", sku="DUP"))
    remote.add_item(make_item("inv_2", sku="DUP"))

    outcome = await actions.scan_to_work_order("DUP", 1, "WO-1")

    assert outcome.disposition == ActionDisposition.NEEDS_SELECTION
    assert [c.id for c in outcome.candidates] == ["inv_1", "inv_2"]
    assert outcome.to_wire()["candidates"][0]["stockQty"] == 10


async def test_online_scan_unknown_sku_raises(actions, queue):
    with pytest.raises(NotFoundError, match="ZZZ"):
        await actions.scan_to_work_order("ZZZ", 1, "WO-1")
    assert len(queue) == 0


async def test_scan_lookup_failure_falls_back_to_queue(actions, remote, queue):
    remote.fail("BOS-BR-0001", RemoteStoreError("connection reset"))

    outcome = await actions.scan_to_work_order("BOS-BR-0001", 1, "WO-1")

    assert outcome.disposition == ActionDisposition.QUEUED
    assert len(queue) == 1


async def test_add_line_item_requires_connection(actions, monitor):
    monitor.set_online(False)
    with pytest.raises(OfflineUnavailable):
        await actions.add_line_item(
            "WO-1", LineItemCreate(description="Labour", quantity=1, unit_price=7500)
        )


async def test_add_line_item_failure_reverts_and_refetches(actions, remote, queue):
    remote.add_work_order(make_work_order("WO-1"))
    await actions.get_work_order("WO-1")
    remote.fail("WO-1", RemoteStoreError("502"))

    with pytest.raises(RemoteStoreError):
        await actions.add_line_item(
            "WO-1", LineItemCreate(description="Diagnostics", quantity=1, unit_price=4000)
        )

    assert actions.projection.work_orders["WO-1"].line_items == []
    assert remote.calls[-1] == ("get_work_order", "WO-1")
    assert len(queue) == 0


async def test_offline_reads_fall_back_to_projection(actions, remote, monitor):
    remote.add_item(make_item("inv_1"))
    remote.add_work_order(make_work_order("WO-1"))
    await actions.get_inventory_item("inv_1")
    await actions.get_work_order("WO-1")
    monitor.set_online(False)

    assert (await actions.get_inventory_item("inv_1")).id == "inv_1"
    assert (await actions.get_work_order("WO-1")).id == "WO-1"
    with pytest.raises(OfflineUnavailable):
        await actions.get_inventory_item("inv_2")
    with pytest.raises(OfflineUnavailable):
        await actions.lookup_sku("BOS-BR-0001")


async def test_refresh_reloads_projection_after_sync(actions, remote, monitor, coordinator):
    remote.add_item(make_item("inv_1", stock_qty=10))
    await actions.get_inventory_item("inv_1")
    monitor.set_online(False)
    await actions.update_inventory_item("inv_1", {"stockQty": 6})
    # Someone else changes the item centrally before we reconnect.
    remote.items["inv_1"] = remote.items["inv_1"].model_copy(update={"name": "Renamed"})

    coordinator.on_refresh(lambda report: actions.refresh())
    monitor.set_online(True)
    await coordinator.sync_now()

    item = actions.projection.items["inv_1"]
    assert item.stock_qty == 6
    assert item.name == "Renamed"


def test_projection_patch_and_revert():
    projection = InventoryProjection()
    projection.put_item(make_item("inv_1", stock_qty=10))

    previous = projection.apply_item_patch("inv_1", {"stockQty": 1})
    assert projection.items["inv_1"].stock_qty == 1

    projection.revert_item("inv_1", previous)
    assert projection.items["inv_1"].stock_qty == 10
    assert projection.apply_item_patch("inv_9", {"stockQty": 1}) is None


def test_projection_provisional_line_item():
    projection = InventoryProjection()
    projection.put_work_order(make_work_order("WO-1"))

    previous = projection.append_line_item(
        "WO-1", LineItemCreate(description="Oil", quantity=1, unit_price=1200)
    )

    assert projection.work_orders["WO-1"].line_items[0].id == "pending_WO-1_0"
    assert previous.line_items == []


async def test_garbled_success_response_queues_instead_of_losing_edit(queue, monitor):
    def handler(request):
        return httpx.Response(200, text="<html>proxy login</html>")

    http_remote = HttpRemoteStore("http://central.local", transport=httpx.MockTransport(handler))
    actions = OfflineActionService(queue, monitor, http_remote)
    actions.projection.put_item(make_item("inv_1", stock_qty=10))

    outcome = await actions.update_inventory_item("inv_1", {"stockQty": 3})

    assert outcome.disposition == ActionDisposition.QUEUED
    assert outcome.queued_action.payload.updates == {"stockQty": 3}
    assert actions.projection.items["inv_1"].stock_qty == 3
    assert len(queue) == 1

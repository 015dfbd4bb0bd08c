"""Seed demo workshop data: inventory parts and open work orders.

The same generator feeds the in-memory mock backend and the database.
Idempotent: skips tables that already hold rows.
Run via: python -m gms.seed
"""

import asyncio
import logging
import random
from datetime import datetime, timedelta, timezone

from sqlalchemy import func, select

from gms.database import Base, async_session_factory, engine
from gms.models.enums import LineItemType, WorkOrderStatus
from gms.models.inventory import InventoryItem
from gms.models.work_order import WorkOrder, WorkOrderLineItem

logger = logging.getLogger(__name__)

SEED = 12345
INVENTORY_COUNT = 50
WORK_ORDER_COUNT = 8

BRANDS = ["Bosch", "Mann", "Filtron", "NGK", "Brembo", "TRW", "Febi Bilstein"]
PART_TYPES = [
    "Brake Pads", "Oil Filter", "Air Filter", "Spark Plug",
    "Brake Disc", "Wiper Blade", "Timing Belt Kit",
]
NAME_SUFFIXES = ["Pro", "Max", "Plus", "Classic", "Eco", "Sport", "Ultra", "Prime"]
CUSTOMERS = [
    "Jane Doe", "Tom Baker", "Priya Shah", "Liam Walsh",
    "Aisha Khan", "Ron Price", "Mia Clarke", "Owen Jones",
]
VEHICLES = ["Ford Focus", "VW Golf", "BMW 3 Series", "Audi A4", "Vauxhall Corsa"]
ISSUES = [
    "Grinding noise when braking.",
    "Engine management light on.",
    "Annual service and MOT.",
    "Wipers smearing, replace blades.",
    "Rough idle after cold start.",
]
LETTERS = "ABCDEFGHIJKLMNOPQRSTUVWXYZ"


def _make_sku(rng: random.Random, brand: str, part_type: str) -> str:
    digits = "".join(rng.choice("0123456789") for _ in range(4))
    return f"{brand[:3].upper()}-{part_type.split(' ')[0][:2].upper()}-{digits}"


def _make_vrm(rng: random.Random) -> str:
    return (
        f"{rng.choice(LETTERS)}{rng.choice(LETTERS)}{rng.randint(10, 99)} "
        f"{''.join(rng.choice(LETTERS) for _ in range(3))}"
    )


def generate_demo_data(seed: int = SEED) -> dict[str, list[dict]]:
    """Build deterministic demo rows keyed by ``inventory`` and ``work_orders``.

    Rows use model attribute names (snake_case); line items are nested under
    each work order.
    """
    rng = random.Random(seed)
    now = datetime.now(timezone.utc).replace(microsecond=0)

    inventory: list[dict] = []
    for i in range(INVENTORY_COUNT):
        brand = rng.choice(BRANDS)
        part_type = rng.choice(PART_TYPES)
        inventory.append({
            "id": f"inv_{i}",
            "sku": _make_sku(rng, brand, part_type),
            "name": f"{part_type} {rng.choice(NAME_SUFFIXES)}",
            "brand": brand,
            "stock_qty": rng.randint(0, 50),
            "low_stock_threshold": rng.randint(5, 10),
            "price": rng.randint(500, 15000),
        })

    open_statuses = [
        WorkOrderStatus.NEW,
        WorkOrderStatus.IN_PROGRESS,
        WorkOrderStatus.AWAITING_PARTS,
        WorkOrderStatus.AWAITING_CUSTOMER,
    ]
    work_orders: list[dict] = []
    for i in range(WORK_ORDER_COUNT):
        wo_id = f"WO-{1000 + i}"
        created_at = now - timedelta(days=rng.randint(0, 20), hours=rng.randint(0, 8))
        line_items = []
        for j in range(rng.randint(0, 3)):
            part = rng.choice(inventory)
            line_items.append({
                "id": f"li_{wo_id}_{j}",
                "description": f"{part['name']} ({part['brand']})",
                "quantity": rng.randint(1, 4),
                "unit_price": part["price"],
                "is_vatable": True,
                "item_type": LineItemType.PART,
            })
        line_items.append({
            "id": f"li_{wo_id}_{len(line_items)}",
            "description": "Labour",
            "quantity": rng.randint(1, 3),
            "unit_price": 7500,
            "is_vatable": True,
            "item_type": LineItemType.LABOUR,
        })
        work_orders.append({
            "id": wo_id,
            "status": rng.choice(open_statuses),
            "customer_name": CUSTOMERS[i % len(CUSTOMERS)],
            "vehicle": rng.choice(VEHICLES),
            "vrm": _make_vrm(rng),
            "issue": rng.choice(ISSUES),
            "is_urgent": rng.random() < 0.2,
            "created_at": created_at,
            "last_updated_at": created_at,
            "line_items": line_items,
        })

    return {"inventory": inventory, "work_orders": work_orders}


async def seed_database(seed: int = SEED) -> None:
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

    data = generate_demo_data(seed)
    async with async_session_factory() as session:
        count = (await session.execute(select(func.count(InventoryItem.id)))).scalar_one()
        if count:
            logger.info("Inventory already seeded (%d rows), skipping.", count)
        else:
            session.add_all(InventoryItem(**row) for row in data["inventory"])
            logger.info("Seeded %d inventory items.", len(data["inventory"]))

        count = (await session.execute(select(func.count(WorkOrder.id)))).scalar_one()
        if count:
            logger.info("Work orders already seeded (%d rows), skipping.", count)
        else:
            for row in data["work_orders"]:
                row = dict(row)
                items = row.pop("line_items")
                wo = WorkOrder(**row)
                wo.line_items = [
                    WorkOrderLineItem(position=pos, **item) for pos, item in enumerate(items)
                ]
                session.add(wo)
            logger.info("Seeded %d work orders.", len(data["work_orders"]))

        await session.commit()


if __name__ == "__main__":
    logging.basicConfig(level=logging.INFO)
    asyncio.run(seed_database())

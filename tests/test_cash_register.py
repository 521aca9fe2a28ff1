"""
Cash register tests

  1. Singleton status, open/close state errors
  2. Daily summary breakdowns
  3. Closure numbers, cash difference, register reset
  4. Closure history and tickets
"""
import pytest

from comanda.core.clock import local_today
from conftest import auth_headers, order_body


async def _seed_day(client, menu_items):
    """cash 57.00 (delivered), wallet 25.50 (phone), none 6.00 (delivery, cancelled)."""
    a = (await client.post("/orders", json=order_body(menu_items))).json()
    await client.patch(f"/orders/{a['id']}/status", json={"status": "delivered"})

    await client.post("/orders", json=order_body(
        menu_items,
        source="phone",
        payment_method="mobile_wallet",
        items=[{"menu_item_id": menu_items["Lomo Saltado"]["id"], "quantity": 1}],
    ))

    c = (await client.post("/orders", json=order_body(
        menu_items,
        source="delivery",
        address="Jr. Cusco 12",
        payment_method=None,
        items=[{"menu_item_id": menu_items["Chicha Morada"]["id"], "quantity": 1}],
    ))).json()
    await client.post(f"/orders/{c['id']}/cancel")


# ─── Test 1: State ─────────────────────────────────────────────────────────────
@pytest.mark.asyncio
async def test_register_starts_closed(client):
    r = await client.get("/cash-register")
    assert r.status_code == 200
    assert r.json()["is_open"] is False
    assert r.json()["initial_cash"] == 0


@pytest.mark.asyncio
async def test_open_records_employee_and_rejects_reopen(client):
    headers = auth_headers("employee", sub="carla", name="Carla Rios")
    r = await client.post("/cash-register/open", json={"initial_cash": 150}, headers=headers)
    assert r.status_code == 200, r.text
    register = r.json()
    assert register["is_open"] is True
    assert register["opened_by"] == "carla"
    assert register["opened_by_name"] == "Carla Rios"
    assert register["initial_cash"] == pytest.approx(150.0)

    r = await client.post("/cash-register/open", json={"initial_cash": 10})
    assert r.status_code == 409


@pytest.mark.asyncio
async def test_close_requires_open_register(client):
    r = await client.post("/cash-register/close", json={"final_cash": 0})
    assert r.status_code == 409


@pytest.mark.asyncio
async def test_negative_cash_is_rejected(client):
    r = await client.post("/cash-register/open", json={"initial_cash": -5})
    assert r.status_code == 422


# ─── Test 2: Summary ───────────────────────────────────────────────────────────
@pytest.mark.asyncio
async def test_daily_summary_breakdowns(client, menu_items):
    await _seed_day(client, menu_items)

    summary = (await client.get("/cash-register/summary")).json()
    assert summary["date"] == local_today().isoformat()
    assert summary["total_orders"] == 3
    assert summary["total_amount"] == pytest.approx(88.50)
    assert summary["by_payment"] == {
        "cash": pytest.approx(57.0),
        "mobile_wallet": pytest.approx(25.5),
        "card": 0,
        "not_applicable": pytest.approx(6.0),
    }
    assert summary["by_source"] == {
        "phone": pytest.approx(25.5),
        "walk_in": pytest.approx(57.0),
        "delivery": pytest.approx(6.0),
    }
    assert summary["by_status"] == {
        "pending": 1, "preparing": 0, "ready": 0, "delivered": 1, "cancelled": 1,
    }
    top = summary["top_products"]
    assert [(p["name"], p["quantity"]) for p in top] == [("Lomo Saltado", 3), ("Chicha Morada", 2)]
    assert top[0]["total"] == pytest.approx(76.5)


# ─── Test 3: Closure ───────────────────────────────────────────────────────────
@pytest.mark.asyncio
async def test_close_snapshots_day_and_resets_register(client, menu_items):
    await client.post("/cash-register/open", json={"initial_cash": 100})
    await _seed_day(client, menu_items)

    r = await client.post(
        "/cash-register/close",
        json={"final_cash": 150, "notes": "  short by 7  "},
        headers=auth_headers("manager", sub="boss", name="The Boss"),
    )
    assert r.status_code == 201, r.text
    closure = r.json()

    stamp = local_today().strftime("%Y%m%d")
    assert closure["closure_number"] == f"CLS-{stamp}-001"
    assert closure["initial_cash"] == pytest.approx(100.0)
    assert closure["total_cash"] == pytest.approx(57.0)
    assert closure["cash_difference"] == pytest.approx(150 - (100 + 57))
    assert closure["total_orders"] == 3
    assert closure["orders_cancelled"] == 1
    assert closure["closed_by_name"] == "The Boss"
    assert closure["opened_by"] == "admin"
    assert closure["notes"] == "short by 7"
    assert closure["top_products"][0]["name"] == "Lomo Saltado"

    register = (await client.get("/cash-register")).json()
    assert register["is_open"] is False
    assert register["current_cash"] == 0
    assert register["last_closure_id"] == closure["id"]


@pytest.mark.asyncio
async def test_closure_numbers_increment_within_the_day(client):
    numbers = []
    for _ in range(2):
        await client.post("/cash-register/open", json={"initial_cash": 0})
        numbers.append((await client.post("/cash-register/close", json={"final_cash": 0})).json()["closure_number"])
    assert [n[-3:] for n in numbers] == ["001", "002"]


# ─── Test 4: History ───────────────────────────────────────────────────────────
@pytest.mark.asyncio
async def test_closure_history_and_ticket(client, menu_items):
    for _ in range(2):
        await client.post("/cash-register/open", json={"initial_cash": 20})
        await client.post("/cash-register/close", json={"final_cash": 20})

    closures = (await client.get("/cash-register/closures")).json()
    assert len(closures) == 2
    assert closures[0]["closure_number"].endswith("-002")

    one = await client.get(f"/cash-register/closures/{closures[1]['id']}")
    assert one.json()["closure_number"].endswith("-001")

    ticket = await client.get(f"/cash-register/closures/{closures[0]['id']}/ticket.txt")
    assert ticket.status_code == 200
    assert "CASH REGISTER CLOSURE" in ticket.text
    assert closures[0]["closure_number"] in ticket.text

    assert (await client.get("/cash-register/closures/nope")).status_code == 404

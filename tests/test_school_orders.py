"""
School lunch channel tests (fullday, oep, loncheritas)

  1. Orders: registry snapshot, inline students, validation
  2. Numbering and channel isolation
  3. Status, cancellation, payment, tickets
  4. Per-channel cash registers, closures and reports
"""
import pytest

from comanda.core.clock import local_today
from conftest import auth_headers, order_body


async def _student(client, **overrides) -> dict:
    body = {
        "full_name": "Lucia Mamani",
        "grade": "TERCERO DE PRIMARIA",
        "section": "B",
        "guardian_name": "Elena Mamani",
        "phone": "912345678",
    }
    body.update(overrides)
    r = await client.post("/students", json=body)
    assert r.status_code == 201, r.text
    return r.json()


def lunch_body(menu_items: dict, **overrides) -> dict:
    body = {
        "student_name": "Diego Flores",
        "grade": "RED ROOM",
        "section": "A",
        "guardian_name": "Rosa Flores",
        "payment_method": "cash",
        "items": [
            {"menu_item_id": menu_items["Lomo Saltado"]["id"], "quantity": 1},
            {"menu_item_id": menu_items["Chicha Morada"]["id"], "quantity": 1, "notes": "no sugar"},
        ],
    }
    body.update(overrides)
    return body


# ─── Test 1: Orders ────────────────────────────────────────────────────────────
@pytest.mark.asyncio
async def test_order_for_registered_student_snapshots_details(client, menu_items):
    student = await _student(client)
    body = {"student_id": student["id"], "items": lunch_body(menu_items)["items"]}

    r = await client.post("/school/fullday/orders", json=body)
    assert r.status_code == 201, r.text
    order = r.json()
    assert order["channel"] == "fullday"
    assert order["student_id"] == student["id"]
    assert order["student_name"] == "Lucia Mamani"
    assert order["grade"] == "TERCERO DE PRIMARIA"
    assert order["section"] == "B"
    assert order["guardian_name"] == "Elena Mamani"
    assert order["phone"] == "912345678"
    assert order["total"] == pytest.approx(31.50)
    assert order["payment_method"] is None

    await client.patch(f"/students/{student['id']}", json={"full_name": "Lucia M. Quispe"})
    await client.patch(f"/menu/items/{menu_items['Lomo Saltado']['id']}", json={"price": 40})
    again = (await client.get(f"/school/fullday/orders/{order['id']}")).json()
    assert again["student_name"] == "Lucia Mamani"
    assert again["items"][0]["menu_item_price"] == pytest.approx(25.50)


@pytest.mark.asyncio
async def test_inline_fields_override_registry(client, menu_items):
    student = await _student(client)
    body = {"student_id": student["id"], "section": "A", "phone": "999000111", "items": lunch_body(menu_items)["items"]}

    order = (await client.post("/school/oep/orders", json=body)).json()
    assert order["section"] == "A"
    assert order["phone"] == "999000111"
    assert order["grade"] == "TERCERO DE PRIMARIA"


@pytest.mark.asyncio
async def test_order_with_inline_student(client, menu_items):
    r = await client.post("/school/loncheritas/orders", json=lunch_body(menu_items))
    assert r.status_code == 201, r.text
    assert r.json()["student_id"] is None
    assert r.json()["student_name"] == "Diego Flores"


@pytest.mark.asyncio
@pytest.mark.parametrize("override", [
    {"guardian_name": None},
    {"student_name": "   "},
    {"grade": "NURSERY"},
    {"items": []},
])
async def test_unidentified_or_invalid_orders_are_rejected(client, menu_items, override):
    r = await client.post("/school/fullday/orders", json=lunch_body(menu_items, **override))
    assert r.status_code == 422


@pytest.mark.asyncio
async def test_unknown_student_and_channel(client, menu_items):
    r = await client.post(
        "/school/fullday/orders",
        json={"student_id": "missing", "items": lunch_body(menu_items)["items"]},
    )
    assert r.status_code == 400
    assert "Student not found" in r.json()["detail"]

    r = await client.post("/school/evening/orders", json=lunch_body(menu_items))
    assert r.status_code == 422


@pytest.mark.asyncio
async def test_unavailable_dish_is_rejected(client, menu_items):
    body = lunch_body(menu_items, items=[{"menu_item_id": menu_items["Ceviche"]["id"], "quantity": 1}])
    r = await client.post("/school/fullday/orders", json=body)
    assert r.status_code == 400


# ─── Test 2: Numbering and isolation ───────────────────────────────────────────
@pytest.mark.asyncio
async def test_each_channel_numbers_its_own_orders(client, menu_items):
    stamp = local_today().strftime("%Y%m%d")
    fd1 = (await client.post("/school/fullday/orders", json=lunch_body(menu_items))).json()
    fd2 = (await client.post("/school/fullday/orders", json=lunch_body(menu_items))).json()
    oep = (await client.post("/school/oep/orders", json=lunch_body(menu_items))).json()
    lon = (await client.post("/school/loncheritas/orders", json=lunch_body(menu_items))).json()
    restaurant = (await client.post("/orders", json=order_body(menu_items))).json()

    assert fd1["order_number"] == f"FD-{stamp}-0001"
    assert fd2["order_number"] == f"FD-{stamp}-0002"
    assert oep["order_number"] == f"OEP-{stamp}-0001"
    assert lon["order_number"] == f"LON-{stamp}-0001"
    assert restaurant["order_number"] == f"ORD-{stamp}-0001"


@pytest.mark.asyncio
async def test_deleted_school_orders_keep_their_numbers(client, menu_items):
    stamp = local_today().strftime("%Y%m%d")
    first = (await client.post("/school/fullday/orders", json=lunch_body(menu_items))).json()
    assert (await client.delete(f"/school/fullday/orders/{first['id']}")).status_code == 204

    second = (await client.post("/school/fullday/orders", json=lunch_body(menu_items))).json()
    assert second["order_number"] == f"FD-{stamp}-0002"


@pytest.mark.asyncio
async def test_orders_are_scoped_to_their_channel(client, menu_items):
    order = (await client.post("/school/fullday/orders", json=lunch_body(menu_items))).json()
    await client.post("/school/oep/orders", json=lunch_body(menu_items))

    assert (await client.get(f"/school/oep/orders/{order['id']}")).status_code == 404
    assert (await client.post(f"/school/oep/orders/{order['id']}/cancel")).status_code == 404

    listing = (await client.get("/school/fullday/orders")).json()
    assert listing["total"] == 1
    assert [o["id"] for o in listing["orders"]] == [order["id"]]
    assert len((await client.get("/school/fullday/orders/today")).json()) == 1
    assert (await client.get("/orders")).json()["total"] == 0


@pytest.mark.asyncio
async def test_school_orders_stay_off_the_kitchen_board(client, menu_items):
    await client.post("/school/fullday/orders", json=lunch_body(menu_items))
    board = (await client.get("/kitchen/board")).json()
    assert all(not column for column in board.values())


# ─── Test 3: Status and tickets ────────────────────────────────────────────────
@pytest.mark.asyncio
async def test_status_cancel_and_payment(client, menu_items):
    order = (await client.post("/school/fullday/orders", json=lunch_body(menu_items))).json()

    r = await client.patch(f"/school/fullday/orders/{order['id']}/status", json={"status": "ready"})
    assert r.json()["status"] == "ready"

    r = await client.get("/school/fullday/orders", params={"status": "ready"})
    assert r.json()["total"] == 1

    r = await client.patch(f"/school/fullday/orders/{order['id']}/payment", json={"payment_method": "card"})
    assert r.json()["payment_method"] == "card"

    assert (await client.post(f"/school/fullday/orders/{order['id']}/cancel")).json()["status"] == "cancelled"
    assert (await client.post(f"/school/fullday/orders/{order['id']}/cancel")).status_code == 400


@pytest.mark.asyncio
async def test_employees_cannot_delete_school_orders(client, menu_items):
    order = (await client.post("/school/oep/orders", json=lunch_body(menu_items))).json()
    r = await client.delete(f"/school/oep/orders/{order['id']}", headers=auth_headers("employee"))
    assert r.status_code == 403


@pytest.mark.asyncio
async def test_school_order_ticket(client, menu_items):
    order = (await client.post("/school/fullday/orders", json=lunch_body(menu_items, payment_method=None))).json()

    r = await client.get(f"/school/fullday/orders/{order['id']}/ticket.txt")
    assert r.status_code == 200
    text = r.text
    assert order["order_number"] in text
    assert "STUDENT:" in text and "Diego Flores" in text
    assert 'RED ROOM "A"' in text
    assert "GUARDIAN:" in text
    assert "NOT APPLICABLE" in text
    assert "*** FULLDAY ***" in text
    assert "* no sugar" in text


# ─── Test 4: Registers ─────────────────────────────────────────────────────────
@pytest.mark.asyncio
async def test_channel_registers_are_independent(client):
    r = await client.post("/school/fullday/cash-register/open", json={"initial_cash": 40})
    assert r.status_code == 200, r.text
    assert r.json()["channel"] == "fullday"
    assert r.json()["opened_by_name"] == "Admin User"

    assert (await client.get("/cash-register")).json()["is_open"] is False
    assert (await client.get("/school/oep/cash-register")).json()["is_open"] is False
    assert (await client.post("/school/fullday/cash-register/open", json={"initial_cash": 1})).status_code == 409
    assert (await client.post("/cash-register/open", json={"initial_cash": 10})).status_code == 200


@pytest.mark.asyncio
async def test_channel_summary_counts_only_its_orders(client, menu_items):
    await client.post("/school/fullday/orders", json=lunch_body(menu_items))
    await client.post("/school/fullday/orders", json=lunch_body(menu_items, payment_method="mobile_wallet"))
    await client.post("/school/oep/orders", json=lunch_body(menu_items))
    await client.post("/orders", json=order_body(menu_items))

    summary = (await client.get("/school/fullday/cash-register/summary")).json()
    assert summary["total_orders"] == 2
    assert summary["total_amount"] == pytest.approx(63.0)
    assert summary["by_payment"]["cash"] == pytest.approx(31.5)
    assert summary["by_payment"]["mobile_wallet"] == pytest.approx(31.5)
    assert summary["by_source"] == {"phone": 0, "walk_in": 0, "delivery": 0}

    assert (await client.get("/cash-register/summary")).json()["total_orders"] == 1


@pytest.mark.asyncio
async def test_channel_closure_numbering_and_history(client, menu_items):
    stamp = local_today().strftime("%Y%m%d")
    await client.post("/school/fullday/orders", json=lunch_body(menu_items))

    await client.post("/school/fullday/cash-register/open", json={"initial_cash": 20})
    r = await client.post("/school/fullday/cash-register/close", json={"final_cash": 51.5})
    assert r.status_code == 201, r.text
    closure = r.json()
    assert closure["closure_number"] == f"CLS-FD-{stamp}-001"
    assert closure["channel"] == "fullday"
    assert closure["total_cash"] == pytest.approx(31.5)
    assert closure["cash_difference"] == pytest.approx(0)

    await client.post("/school/loncheritas/cash-register/open", json={"initial_cash": 0})
    lon = (await client.post("/school/loncheritas/cash-register/close", json={"final_cash": 0})).json()
    assert lon["closure_number"] == f"CLS-LON-{stamp}-001"

    await client.post("/cash-register/open", json={"initial_cash": 0})
    restaurant = (await client.post("/cash-register/close", json={"final_cash": 0})).json()
    assert restaurant["closure_number"] == f"CLS-{stamp}-001"

    history = (await client.get("/school/fullday/cash-register/closures")).json()
    assert [c["id"] for c in history] == [closure["id"]]
    assert [c["id"] for c in (await client.get("/cash-register/closures")).json()] == [restaurant["id"]]

    assert (await client.get(f"/school/oep/cash-register/closures/{closure['id']}")).status_code == 404
    assert (await client.get(f"/cash-register/closures/{closure['id']}")).status_code == 404

    ticket = await client.get(f"/school/fullday/cash-register/closures/{closure['id']}/ticket.txt")
    assert "FULLDAY" in ticket.text
    assert "ORDER TYPE" not in ticket.text


@pytest.mark.asyncio
async def test_channel_sales_report(client, menu_items):
    await client.post("/school/oep/orders", json=lunch_body(menu_items))
    today = local_today().isoformat()
    params = {"start_date": today, "end_date": today}

    r = await client.get("/school/oep/reports/summary", params=params)
    assert r.status_code == 200
    assert r.json()["total_orders"] == 1
    assert r.json()["top_products"][0]["name"] == "Chicha Morada"

    ticket = await client.get("/school/oep/reports/summary/ticket.txt", params=params)
    assert "OEP" in ticket.text

    r = await client.get("/school/oep/reports/summary", params=params, headers=auth_headers("employee"))
    assert r.status_code == 403

"""
Menu catalog tests

  1. Grouped menu and daily specials
  2. Item CRUD and filters
  3. Categories: ordering, duplicates, rename cascade, delete fallback
  4. Role checks on catalog changes
"""
import pytest

from conftest import auth_headers


async def _category(client, name):
    r = await client.post("/menu/categories", json={"name": name})
    assert r.status_code == 201, r.text
    return r.json()


# ─── Test 1: Grouped views ─────────────────────────────────────────────────────
@pytest.mark.asyncio
async def test_menu_grouped_by_category_order(client, menu_items):
    await _category(client, "Drinks")
    await _category(client, "Main Courses")
    await client.post("/menu/items", json={"name": "Arroz con Pato", "price": 28, "category": "Main Courses"})

    groups = (await client.get("/menu")).json()
    assert [g["category"] for g in groups] == ["Drinks", "Main Courses"]
    assert [i["name"] for i in groups[1]["items"]] == ["Arroz con Pato", "Ceviche", "Lomo Saltado"]


@pytest.mark.asyncio
async def test_sort_order_wins_over_name(client):
    await client.post("/menu/items", json={"name": "Zapallo", "price": 5, "category": "Sides", "sort_order": 1})
    await client.post("/menu/items", json={"name": "Arroz", "price": 4, "category": "Sides", "sort_order": 2})

    items = (await client.get("/menu/items", params={"category": "Sides"})).json()
    assert [i["name"] for i in items] == ["Zapallo", "Arroz"]


@pytest.mark.asyncio
async def test_daily_specials(client, menu_items):
    item_id = menu_items["Lomo Saltado"]["id"]
    r = await client.patch(f"/menu/items/{item_id}/daily-special", json={"is_daily_special": True})
    assert r.status_code == 200
    assert r.json()["is_daily_special"] is True

    groups = (await client.get("/menu/daily-specials")).json()
    assert len(groups) == 1
    assert [i["name"] for i in groups[0]["items"]] == ["Lomo Saltado"]


# ─── Test 2: Items ─────────────────────────────────────────────────────────────
@pytest.mark.asyncio
async def test_create_trims_text_and_rejects_negative_price(client):
    r = await client.post(
        "/menu/items",
        json={"name": "  Papa a la Huancaina ", "description": "  cold  ", "price": 12.5, "category": " Starters "},
    )
    assert r.status_code == 201
    item = r.json()
    assert item["name"] == "Papa a la Huancaina"
    assert item["description"] == "cold"
    assert item["category"] == "Starters"
    assert item["available"] is True

    r = await client.post("/menu/items", json={"name": "Free lunch", "price": -1, "category": "x"})
    assert r.status_code == 422


@pytest.mark.asyncio
async def test_list_items_filters(client, menu_items):
    available = (await client.get("/menu/items", params={"available": True})).json()
    assert {i["name"] for i in available} == {"Lomo Saltado", "Chicha Morada"}

    drinks = (await client.get("/menu/items", params={"category": "Drinks"})).json()
    assert [i["name"] for i in drinks] == ["Chicha Morada"]


@pytest.mark.asyncio
async def test_partial_update_and_delete(client, menu_items):
    item_id = menu_items["Ceviche"]["id"]
    r = await client.patch(f"/menu/items/{item_id}", json={"available": True, "description": "fresh"})
    assert r.status_code == 200
    body = r.json()
    assert body["available"] is True
    assert body["description"] == "fresh"
    assert body["price"] == pytest.approx(32.0)

    assert (await client.delete(f"/menu/items/{item_id}")).status_code == 204
    assert (await client.get(f"/menu/items/{item_id}")).status_code == 404


# ─── Test 3: Categories ────────────────────────────────────────────────────────
@pytest.mark.asyncio
async def test_categories_get_next_sort_order_and_reject_duplicates(client):
    first = await _category(client, "Soups")
    second = await _category(client, "Desserts")
    assert (first["sort_order"], second["sort_order"]) == (1, 2)

    r = await client.post("/menu/categories", json={"name": "Soups"})
    assert r.status_code == 409

    names = [c["name"] for c in (await client.get("/menu/categories")).json()]
    assert names == ["Soups", "Desserts"]


@pytest.mark.asyncio
async def test_rename_category_cascades_to_items(client, menu_items):
    category = await _category(client, "Main Courses")
    r = await client.patch(f"/menu/categories/{category['id']}", json={"name": "Mains"})
    assert r.status_code == 200
    assert r.json()["name"] == "Mains"

    mains = (await client.get("/menu/items", params={"category": "Mains"})).json()
    assert {i["name"] for i in mains} == {"Lomo Saltado", "Ceviche"}
    assert (await client.get("/menu/items", params={"category": "Main Courses"})).json() == []


@pytest.mark.asyncio
async def test_delete_category_moves_items_to_uncategorized(client, menu_items):
    category = await _category(client, "Drinks")
    r = await client.delete(f"/menu/categories/{category['id']}")
    assert r.status_code == 204

    moved = (await client.get("/menu/items", params={"category": "Uncategorized"})).json()
    assert [i["name"] for i in moved] == ["Chicha Morada"]
    assert (await client.get("/menu/categories")).json() == []


# ─── Test 4: Roles ─────────────────────────────────────────────────────────────
@pytest.mark.asyncio
async def test_employees_can_read_but_not_edit_menu(client, menu_items):
    headers = auth_headers("employee")
    assert (await client.get("/menu", headers=headers)).status_code == 200

    r = await client.post("/menu/items", json={"name": "X", "price": 1, "category": "Y"}, headers=headers)
    assert r.status_code == 403

    r = await client.post("/menu/items", json={"name": "X", "price": 1, "category": "Y"}, headers=auth_headers("manager"))
    assert r.status_code == 201

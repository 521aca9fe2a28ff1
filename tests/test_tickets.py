"""
Ticket rendering tests

  1. Row layout for orders and summaries
  2. Plain-text width and alignment
  3. HTML escaping and page size
  4. PDF page geometry and Latin-1 fallback
"""
from datetime import date
from decimal import Decimal
from types import SimpleNamespace

import pytest

from comanda.core.clock import utcnow
from comanda.models.order import OrderSource, OrderStatus, PaymentMethod
from comanda.tickets.html import render_html
from comanda.tickets.layout import Ticket, clip, order_ticket, summary_ticket
from comanda.tickets.pdf import render_pdf
from comanda.tickets.text import TEXT_WIDTH, render_text, text_lines
from conftest import order_body


def _order(**overrides):
    item = SimpleNamespace(
        menu_item_name="Lomo Saltado",
        menu_item_price=Decimal("25.50"),
        quantity=2,
        notes="no onion",
        subtotal=Decimal("51.00"),
    )
    fields = dict(
        order_number="ORD-20261019-0007",
        kitchen_number="COM-007",
        customer_name="Rosa Quispe",
        phone="987654321",
        address=None,
        table_number="4",
        source_type=OrderSource.WALK_IN,
        status=OrderStatus.PENDING,
        total=Decimal("51.00"),
        notes=None,
        payment_method=PaymentMethod.CASH,
        created_at=utcnow(),
        items=[item],
    )
    fields.update(overrides)
    return SimpleNamespace(**fields)


def _summary(start, end, daily=None):
    return {
        "start_date": start,
        "end_date": end,
        "total_orders": 3,
        "total_amount": Decimal("88.50"),
        "by_payment": {"cash": Decimal("57"), "mobile_wallet": Decimal("25.5"), "card": 0, "not_applicable": Decimal("6")},
        "top_products": [{"name": "Lomo Saltado con papas fritas y arroz", "quantity": 3, "total": Decimal("76.5")}],
        "daily": daily or [{"date": start, "total_orders": 3, "total_amount": Decimal("88.50")}],
    }


# ─── Test 1: Layout ────────────────────────────────────────────────────────────
def test_order_ticket_rows():
    text = render_text(order_ticket(_order()))
    assert "COM-007" in text
    assert "ORD-20261019-0007" in text
    assert "WALK-IN" in text
    assert "2x Lomo Saltado" in text
    assert "* no onion" in text
    assert "S/ 51.00" in text
    assert "PAYMENT:" in text and "CASH" in text
    assert "ADDRESS" not in text


def test_delivery_ticket_shows_address():
    text = render_text(order_ticket(_order(source_type=OrderSource.DELIVERY, address="Jr. Lampa 456")))
    assert "DELIVERY" in text
    assert "ADDRESS: Jr. Lampa 456" in text


def test_clip_product_names():
    assert clip("Short") == "Short"
    assert clip("Lomo Saltado con papas fritas") == "Lomo Saltado con pap..."


def test_summary_ticket_single_day_has_no_breakdown():
    day = date(2026, 10, 19)
    text = render_text(summary_ticket(_summary(day, day), "Carla"))
    assert "DAY: 19/10/2026" in text
    assert "USER: CARLA" in text
    assert "Lomo Saltado con pap..." in text
    assert "DAILY BREAKDOWN" not in text


def test_summary_ticket_range_has_daily_breakdown():
    start, end = date(2026, 10, 18), date(2026, 10, 19)
    daily = [
        {"date": start, "total_orders": 0, "total_amount": Decimal("0")},
        {"date": end, "total_orders": 3, "total_amount": Decimal("88.50")},
    ]
    text = render_text(summary_ticket(_summary(start, end, daily), "Carla"))
    assert "PERIOD: 18/10/2026 TO 19/10/2026" in text
    assert "DAILY BREAKDOWN" in text
    assert "18/10/2026" in text


# ─── Test 2: Text ──────────────────────────────────────────────────────────────
def test_text_lines_fit_the_roll():
    ticket = Ticket(title="t")
    ticket.add("A very long dish name that certainly will not fit in one line", "S/ 123.00")
    ticket.rule()
    ticket.add("centered", center=True)

    lines = text_lines(ticket)
    assert all(len(line) <= TEXT_WIDTH for line, _ in lines)
    priced = [line for line, _ in lines if line.endswith("S/ 123.00")]
    assert len(priced) == 1 and len(priced[0]) == TEXT_WIDTH
    assert "-" * TEXT_WIDTH in [line for line, _ in lines]
    assert lines[-1][0].strip() == "centered" and lines[-1][0].startswith(" ")


# ─── Test 3: HTML ──────────────────────────────────────────────────────────────
def test_html_escapes_user_text_and_sets_page_size():
    html = render_html(order_ticket(_order(customer_name="<script>alert(1)</script>")))
    assert "@page { size: 80mm auto" in html
    assert "<script>alert(1)</script>" not in html
    assert "&lt;script&gt;" in html


# ─── Test 4: PDF ───────────────────────────────────────────────────────────────
def test_pdf_is_80mm_wide_and_latin1_safe():
    pdf = render_pdf(order_ticket(_order(customer_name="Zoë 🍕 Ñuñez")))
    assert pdf.startswith(b"%PDF-")
    # 80 mm = 226.77 pt
    assert b"226.77" in pdf


@pytest.mark.asyncio
async def test_order_ticket_endpoints(client, menu_items):
    order = (await client.post("/orders", json=order_body(menu_items))).json()

    html = await client.get(f"/orders/{order['id']}/ticket.html")
    assert html.status_code == 200
    assert html.headers["content-type"].startswith("text/html")
    assert order["kitchen_number"] in html.text

    pdf = await client.get(f"/orders/{order['id']}/ticket.pdf")
    assert pdf.headers["content-type"] == "application/pdf"
    assert pdf.content.startswith(b"%PDF-")

    txt = await client.get(f"/orders/{order['id']}/ticket.txt")
    assert "Lomo Saltado" in txt.text

    assert (await client.get(f"/orders/{order['id']}/ticket.doc")).status_code == 422

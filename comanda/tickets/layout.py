"""
Comanda — Ticket layout

A ticket is a flat list of rows for an 80 mm thermal roll. The same rows
feed the HTML, PDF and plain-text renderers, so the three always agree.
"""
from dataclasses import dataclass, field
from datetime import date, datetime
from decimal import Decimal

from comanda.core.clock import to_local, utcnow
from comanda.core.config import get_settings
from comanda.models.cash_register import RESTAURANT_CHANNEL
from comanda.models.order import OrderSource, PaymentMethod
from comanda.models.school import SchoolChannel

settings = get_settings()

PRODUCT_NAME_WIDTH = 20

SOURCE_LABELS = {
    OrderSource.PHONE: "PHONE",
    OrderSource.WALK_IN: "WALK-IN",
    OrderSource.DELIVERY: "DELIVERY",
}

PAYMENT_LABELS = {
    PaymentMethod.CASH.value: "CASH",
    PaymentMethod.MOBILE_WALLET.value: "MOBILE WALLET",
    PaymentMethod.CARD.value: "CARD",
    "not_applicable": "NOT APPLICABLE",
}

CHANNEL_LABELS = {
    SchoolChannel.FULLDAY.value: "FULLDAY",
    SchoolChannel.OEP.value: "OEP",
    SchoolChannel.LONCHERITAS.value: "LONCHERITAS",
}


@dataclass
class Row:
    left: str = ""
    right: str | None = None
    bold: bool = False
    center: bool = False
    rule: bool = False


@dataclass
class Ticket:
    title: str
    rows: list[Row] = field(default_factory=list)

    def add(self, left: str = "", right: str | None = None, **style) -> None:
        self.rows.append(Row(left=left, right=right, **style))

    def heading(self, text: str) -> None:
        self.rows.append(Row(left=text, bold=True, center=True))

    def rule(self) -> None:
        self.rows.append(Row(rule=True))


def money(amount) -> str:
    return f"{settings.CURRENCY_SYMBOL} {Decimal(str(amount or 0)):.2f}"


def fmt_date(value: date) -> str:
    return value.strftime("%d/%m/%Y")


def fmt_datetime(value: datetime | None) -> str:
    if value is None:
        return "-"
    return to_local(value).strftime("%d/%m/%Y %H:%M")


def clip(name: str, width: int = PRODUCT_NAME_WIDTH) -> str:
    return name if len(name) <= width else name[:width] + "..."


def _business_header(ticket: Ticket) -> None:
    ticket.heading(settings.BUSINESS_NAME)
    if settings.BUSINESS_LEGAL_NAME:
        ticket.add(settings.BUSINESS_LEGAL_NAME, center=True)
    if settings.BUSINESS_TAX_ID:
        ticket.add(f"TAX ID: {settings.BUSINESS_TAX_ID}", center=True)
    if settings.BUSINESS_ADDRESS:
        ticket.add(settings.BUSINESS_ADDRESS, center=True)
    if settings.BUSINESS_PHONE:
        ticket.add(f"Tel: {settings.BUSINESS_PHONE}", center=True)
    ticket.rule()


def _top_products(ticket: Ticket, products: list[dict], title: str) -> None:
    if not products:
        return
    ticket.heading(title)
    for position, product in enumerate(products, start=1):
        ticket.add(
            f"{position}. {clip(product['name'])}",
            f"{product['quantity']}x {money(product['total'])}",
        )
    ticket.rule()


def order_ticket(order) -> Ticket:
    """Customer/kitchen ticket for a single order."""
    ticket = Ticket(title=f"Order {order.order_number}")
    _business_header(ticket)

    ticket.heading(order.kitchen_number)
    ticket.add("ORDER:", order.order_number)
    ticket.add("TYPE:", SOURCE_LABELS[order.source_type])
    ticket.add("DATE:", fmt_datetime(order.created_at))
    ticket.add("CUSTOMER:", order.customer_name)
    if order.phone:
        ticket.add("PHONE:", order.phone)
    if order.table_number:
        ticket.add("TABLE:", order.table_number)
    if order.address:
        ticket.add(f"ADDRESS: {order.address}")
    ticket.rule()

    for item in order.items:
        ticket.add(f"{item.quantity}x {item.menu_item_name}", money(item.subtotal))
        if item.notes:
            ticket.add(f"   * {item.notes}")
    ticket.rule()

    if order.notes:
        ticket.add(f"NOTES: {order.notes}")
        ticket.rule()

    ticket.add("TOTAL:", money(order.total), bold=True)
    if order.payment_method:
        ticket.add("PAYMENT:", PAYMENT_LABELS[order.payment_method.value])
    ticket.rule()
    ticket.add("Thank you for your order!", center=True)
    return ticket


def school_order_ticket(order) -> Ticket:
    """Ticket for a school lunch order; the student replaces the customer block."""
    label = CHANNEL_LABELS[order.channel.value]
    ticket = Ticket(title=f"Order {order.order_number}")
    _business_header(ticket)

    ticket.heading(order.order_number)
    ticket.add("TYPE:", label)
    ticket.add("DATE:", fmt_datetime(order.created_at))
    ticket.add("PAYMENT:", PAYMENT_LABELS[order.payment_method.value if order.payment_method else "not_applicable"])
    ticket.rule()

    ticket.add("STUDENT:", order.student_name)
    ticket.add("GRADE:", f"{order.grade.value} \"{order.section.value}\"")
    ticket.add("GUARDIAN:", order.guardian_name)
    if order.phone:
        ticket.add("PHONE:", order.phone)
    ticket.rule()

    for item in order.items:
        ticket.add(f"{item.quantity}x {item.menu_item_name}", money(item.subtotal))
        if item.notes:
            ticket.add(f"   * {item.notes}")
    ticket.rule()

    if order.notes:
        ticket.add(f"NOTES: {order.notes}")
        ticket.rule()

    ticket.add("TOTAL:", money(order.total), bold=True)
    ticket.rule()
    ticket.add(f"*** {label} ***", center=True)
    return ticket


def summary_ticket(summary: dict, issued_by: str, channel: str = RESTAURANT_CHANNEL) -> Ticket:
    """Sales summary for a date range (see sales_ops.sales_summary)."""
    start, end = summary["start_date"], summary["end_date"]
    ticket = Ticket(title=f"Sales summary {start.isoformat()} - {end.isoformat()}")
    _business_header(ticket)

    if channel != RESTAURANT_CHANNEL:
        ticket.heading(CHANNEL_LABELS[channel])
    if start == end:
        ticket.add(f"DAY: {fmt_date(start)}", center=True)
    else:
        ticket.add(f"PERIOD: {fmt_date(start)} TO {fmt_date(end)}", center=True)
    ticket.add(f"ISSUED: {fmt_datetime(utcnow())}", center=True)
    ticket.add(f"USER: {issued_by.upper()}", center=True)
    ticket.rule()

    ticket.heading("GENERAL SUMMARY")
    ticket.add("TOTAL ORDERS:", str(summary["total_orders"]), bold=True)
    ticket.add("TOTAL SALES:", money(summary["total_amount"]), bold=True)
    ticket.rule()

    ticket.heading("PAYMENT METHOD")
    for key, label in PAYMENT_LABELS.items():
        ticket.add(f"{label}:", money(summary["by_payment"][key]))
    ticket.rule()

    _top_products(ticket, summary["top_products"], "TOP 5 PRODUCTS")

    if len(summary["daily"]) > 1:
        ticket.heading("DAILY BREAKDOWN")
        for day in summary["daily"]:
            ticket.add(fmt_date(day["date"]), f"{day['total_orders']} ord. {money(day['total_amount'])}")
        ticket.rule()

    ticket.add("END OF REPORT", center=True)
    return ticket


def closure_ticket(closure) -> Ticket:
    """Shift closure (cash count) ticket."""
    ticket = Ticket(title=f"Closure {closure.closure_number}")
    _business_header(ticket)

    ticket.heading("CASH REGISTER CLOSURE")
    if closure.channel != RESTAURANT_CHANNEL:
        ticket.add(CHANNEL_LABELS[closure.channel], center=True)
    ticket.add("NUMBER:", closure.closure_number)
    ticket.add("OPENED:", fmt_datetime(closure.opened_at))
    ticket.add("OPENED BY:", closure.opened_by_name or "-")
    ticket.add("CLOSED:", fmt_datetime(closure.closed_at))
    ticket.add("CLOSED BY:", closure.closed_by_name or "-")
    ticket.rule()

    ticket.heading("CASH")
    ticket.add("INITIAL CASH:", money(closure.initial_cash))
    ticket.add("CASH SALES:", money(closure.total_cash))
    ticket.add("FINAL CASH:", money(closure.final_cash))
    ticket.add("DIFFERENCE:", money(closure.cash_difference), bold=True)
    ticket.rule()

    ticket.heading("PAYMENT METHOD")
    ticket.add("CASH:", money(closure.total_cash))
    ticket.add("MOBILE WALLET:", money(closure.total_mobile_wallet))
    ticket.add("CARD:", money(closure.total_card))
    ticket.add("NOT APPLICABLE:", money(closure.total_not_applicable))
    ticket.rule()

    if closure.channel == RESTAURANT_CHANNEL:
        ticket.heading("ORDER TYPE")
        ticket.add("PHONE:", money(closure.total_phone))
        ticket.add("WALK-IN:", money(closure.total_walk_in))
        ticket.add("DELIVERY:", money(closure.total_delivery))
        ticket.rule()

    ticket.heading("ORDERS")
    ticket.add("PENDING:", str(closure.orders_pending))
    ticket.add("PREPARING:", str(closure.orders_preparing))
    ticket.add("READY:", str(closure.orders_ready))
    ticket.add("DELIVERED:", str(closure.orders_delivered))
    ticket.add("CANCELLED:", str(closure.orders_cancelled))
    ticket.add("TOTAL ORDERS:", str(closure.total_orders), bold=True)
    ticket.add("TOTAL SALES:", money(closure.total_amount), bold=True)
    ticket.rule()

    _top_products(ticket, closure.top_products or [], "TOP PRODUCTS")

    if closure.notes:
        ticket.add(f"NOTES: {closure.notes}")
        ticket.rule()

    ticket.add("END OF CLOSURE", center=True)
    return ticket

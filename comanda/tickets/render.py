"""
Comanda — Ticket HTTP responses
"""
from enum import Enum

from fastapi import Response
from fastapi.responses import HTMLResponse, PlainTextResponse

from comanda.tickets.html import render_html
from comanda.tickets.layout import Ticket
from comanda.tickets.pdf import render_pdf
from comanda.tickets.text import render_text


class TicketFormat(str, Enum):
    HTML = "html"
    PDF = "pdf"
    TXT = "txt"


def ticket_response(ticket: Ticket, fmt: TicketFormat, filename: str) -> Response:
    if fmt == TicketFormat.HTML:
        return HTMLResponse(render_html(ticket))
    if fmt == TicketFormat.PDF:
        return Response(
            content=render_pdf(ticket),
            media_type="application/pdf",
            headers={"Content-Disposition": f'inline; filename="{filename}.pdf"'},
        )
    return PlainTextResponse(render_text(ticket))

"""
Comanda — HTML ticket renderer (Jinja2)
"""
from pathlib import Path

from jinja2 import Environment, FileSystemLoader, select_autoescape

from comanda.core.config import get_settings
from comanda.tickets.layout import Ticket

settings = get_settings()

TEMPLATES_DIR = Path(__file__).parent / "templates"

env = Environment(
    loader=FileSystemLoader(TEMPLATES_DIR),
    autoescape=select_autoescape(["html", "j2"]),
    trim_blocks=True,
    lstrip_blocks=True,
)


def render_html(ticket: Ticket) -> str:
    template = env.get_template("ticket.html.j2")
    return template.render(ticket=ticket, business_name=settings.BUSINESS_NAME)

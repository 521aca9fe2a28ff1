"""
Comanda — PDF ticket renderer (fpdf2)

One page, 80 mm wide, as tall as the content. Text is laid out with the
fixed-width renderer and printed in Courier so columns line up.
"""
from fpdf import FPDF
from fpdf.enums import XPos, YPos

from comanda.tickets.layout import Ticket
from comanda.tickets.text import TEXT_WIDTH, text_lines

PAGE_WIDTH_MM = 80
MARGIN_MM = 4
LINE_HEIGHT_MM = 3.6
# Courier glyphs are 0.6 em wide: 42 columns at 8 pt fill the 72 mm printable width.
FONT_SIZE_PT = 8


def _latin1(text: str) -> str:
    # Core PDF fonts only cover Latin-1.
    return text.encode("latin-1", "replace").decode("latin-1")


def render_pdf(ticket: Ticket) -> bytes:
    lines = text_lines(ticket, TEXT_WIDTH)
    height = 2 * MARGIN_MM + max(len(lines), 1) * LINE_HEIGHT_MM

    pdf = FPDF(orientation="P", unit="mm", format=(PAGE_WIDTH_MM, height))
    pdf.set_title(_latin1(ticket.title))
    pdf.set_margins(MARGIN_MM, MARGIN_MM, MARGIN_MM)
    pdf.set_auto_page_break(False)
    pdf.add_page()

    for line, bold in lines:
        pdf.set_font("Courier", "B" if bold else "", FONT_SIZE_PT)
        pdf.cell(0, LINE_HEIGHT_MM, _latin1(line), new_x=XPos.LMARGIN, new_y=YPos.NEXT)

    return bytes(pdf.output())

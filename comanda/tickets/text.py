"""
Comanda — Plain-text ticket renderer (fixed-width, ESC/POS friendly)
"""
import textwrap

from comanda.tickets.layout import Ticket

TEXT_WIDTH = 42


def text_lines(ticket: Ticket, width: int = TEXT_WIDTH) -> list[tuple[str, bool]]:
    """Lay the rows out as (line, bold) pairs no wider than `width`."""
    lines: list[tuple[str, bool]] = []
    for row in ticket.rows:
        if row.rule:
            lines.append(("-" * width, False))
            continue

        if row.right is None:
            for part in textwrap.wrap(row.left, width) or [""]:
                lines.append((part.center(width).rstrip() if row.center else part, row.bold))
            continue

        right = row.right[:width]
        room = max(width - len(right) - 1, 1)
        parts = textwrap.wrap(row.left, room) or [""]
        for part in parts[:-1]:
            lines.append((part, row.bold))
        last = parts[-1]
        padding = max(width - len(last) - len(right), 1)
        lines.append((f"{last}{' ' * padding}{right}", row.bold))
    return lines


def render_text(ticket: Ticket, width: int = TEXT_WIDTH) -> str:
    return "\n".join(line for line, _ in text_lines(ticket, width)) + "\n"

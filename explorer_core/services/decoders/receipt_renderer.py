"""
Plain-text receipt rendering.

Turns ReceiptLineItems (and optionally the known events) into a fixed-width
text receipt through a Jinja2 template, for CLI and log output.
"""

import os
from typing import List, Optional, Sequence

from jinja2 import Environment, FileSystemLoader

from .base import FeeBreakdownItem, KnownEvent, LineItem, ReceiptLineItems, same_address
from .formatting import format_event, format_note, format_price, truncate_hex

TEMPLATE_DIR = os.path.join(os.path.dirname(__file__), "templates")
RECEIPT_TEMPLATE = "receipt.txt.j2"
RECEIPT_WIDTH = 56


def _env() -> Environment:
    env = Environment(
        loader=FileSystemLoader(TEMPLATE_DIR),
        trim_blocks=True,
        lstrip_blocks=True,
        keep_trailing_newline=True,
    )
    env.filters['row'] = _row
    env.filters['truncate_hex'] = truncate_hex
    return env


def _row(left: str, right: Optional[str] = None, indent: int = 0) -> str:
    """Left/right justified row, truncating the left side if needed."""
    left = " " * indent + (left or "")
    right = right or ""
    space = RECEIPT_WIDTH - len(right) - 1
    if len(left) > space:
        left = left[:max(space - 1, 0)] + "…"
    return f"{left.ljust(space)} {right}".rstrip()


def _fee_label(fee: FeeBreakdownItem, sender: Optional[str]) -> str:
    symbol = fee.symbol or truncate_hex(fee.token)
    if fee.payer and sender and not same_address(fee.payer, sender):
        return f"{symbol} (PAID BY {truncate_hex(fee.payer)})"
    return symbol


def _items(items: Sequence[LineItem]) -> List[dict]:
    return [
        {
            'left': item.ui.left,
            'right': item.ui.right,
            'bottom': [{'left': row.left, 'right': row.right} for row in item.ui.bottom],
        }
        for item in items
    ]


def render_text_receipt(line_items: ReceiptLineItems,
                        events: Sequence[KnownEvent] = (),
                        tx_hash: Optional[str] = None,
                        sender: Optional[str] = None) -> str:
    """
    Render a text receipt.

    Args:
        line_items: Output of `line_items_from_receipt`
        events: Known events to narrate above the line items
        tx_hash: Transaction hash for the header
        sender: Receipt owner; fees paid by anyone else get a "PAID BY" label

    Returns:
        Multi-line string
    """
    template = _env().get_template(RECEIPT_TEMPLATE)
    return template.render(
        width=RECEIPT_WIDTH,
        tx_hash=tx_hash,
        sender=sender,
        events=[
            {'text': format_event(event), 'note': format_note(event)}
            for event in events
        ],
        main=_items(line_items.main),
        fees=[
            {'left': _fee_label(fee, sender), 'right': format_price(fee.amount, fee.decimals)}
            for fee in line_items.fee_breakdown
        ],
        fee_totals=_items(line_items.fee_totals),
        totals=_items(line_items.totals),
    )

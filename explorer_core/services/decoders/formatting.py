"""
Formatting helpers for receipts and known-event narration.

Prices are formatted USD style (the explorer's stablecoins are USD
denominated); amounts with unknown decimals render as raw integers.
"""

from decimal import ROUND_HALF_UP, Decimal, localcontext
from typing import List, Optional, Union

from .base import (
    AccountPart,
    ActionPart,
    Amount,
    AmountPart,
    DurationPart,
    EventPart,
    HexPart,
    KnownEvent,
    NumberPart,
    TextPart,
    TickPart,
    TokenPart,
)

ELLIPSIS = "…"

# Compact notation thresholds (largest first)
_COMPACT_UNITS = (
    (Decimal(10) ** 12, "T"),
    (Decimal(10) ** 9, "B"),
    (Decimal(10) ** 6, "M"),
    (Decimal(10) ** 3, "K"),
)

_CENT = Decimal("0.01")


def truncate_hex(value: Optional[str], chars: int = 4) -> str:
    """Shorten a hex string to look like 0x1234…5678."""
    if not value:
        return ""
    if len(value) < chars * 2 + 2:
        return value
    return f"{value[:chars + 2]}{ELLIPSIS}{value[-chars:]}"


def to_decimal(value: int, decimals: int) -> Decimal:
    """Exact token units -> Decimal."""
    with localcontext() as ctx:
        ctx.prec = 100
        return Decimal(value).scaleb(-decimals)


def format_units(value: int, decimals: Optional[int]) -> str:
    """Exact decimal string (no exponent, no trailing zeros)."""
    if decimals is None:
        return str(value)
    text = format(to_decimal(value, decimals), 'f')
    if '.' in text:
        text = text.rstrip('0').rstrip('.')
    return text


def _two_places(value: Decimal) -> str:
    text = format(value.quantize(_CENT, rounding=ROUND_HALF_UP), ',f')
    return text.rstrip('0').rstrip('.') if '.' in text else text


def _compact(value: Decimal) -> str:
    rounded = value.quantize(_CENT, rounding=ROUND_HALF_UP)
    for index, (threshold, suffix) in enumerate(_COMPACT_UNITS):
        if rounded < threshold:
            continue
        scaled = (value / threshold).quantize(_CENT, rounding=ROUND_HALF_UP)
        # 999.995K rounds up into the next unit
        if scaled >= 1000 and index > 0:
            threshold, suffix = _COMPACT_UNITS[index - 1]
            scaled = (value / threshold).quantize(_CENT, rounding=ROUND_HALF_UP)
        text = format(scaled, 'f').rstrip('0').rstrip('.')
        return f"{text}{suffix}"
    return _two_places(value)


def format_price(value: Union[int, Decimal], decimals: Optional[int] = 0, short: bool = False) -> str:
    """
    Format a token amount as a USD price.

    Args:
        value: Integer token units (or an already scaled Decimal)
        decimals: Token decimals; None renders "-"
        short: Compact notation ($1.23K) instead of full ($1,234.56)
    """
    if decimals is None:
        return "-"
    amount = value if isinstance(value, Decimal) else to_decimal(value, decimals)

    sign = "-" if amount < 0 else ""
    if 0 < abs(amount) < _CENT:
        return f"{sign}<$0.01"

    magnitude = abs(amount)
    # uint256 amounts exceed the default 28 digit precision
    with localcontext() as ctx:
        ctx.prec = 100
        body = _compact(magnitude) if short else _two_places(magnitude)
    if body in ("0", "0.00"):
        sign = ""
    return f"{sign}${body}"


def format_duration(seconds: int) -> str:
    days, remainder = divmod(int(seconds), 86400)
    hours, remainder = divmod(remainder, 3600)
    minutes, secs = divmod(remainder, 60)

    parts: List[str] = []
    if days > 0:
        parts.append(f"{days} day{'s' if days > 1 else ''}")
    if hours > 0:
        parts.append(f"{hours}h")
    if minutes > 0:
        parts.append(f"{minutes}m")
    if secs > 0 or not parts:
        parts.append(f"{secs}s")
    return " ".join(parts)


def format_amount(amount: Amount) -> str:
    """Token amount; raw integer with no symbol when metadata is missing."""
    if amount.value is None:
        return "-"
    text = format_units(amount.value, amount.decimals)
    return f"{text} {amount.symbol}" if amount.symbol else text


def format_part(part: EventPart) -> str:
    if isinstance(part, ActionPart):
        return part.label
    if isinstance(part, TextPart):
        return part.text
    if isinstance(part, AccountPart):
        return truncate_hex(part.address)
    if isinstance(part, AmountPart):
        return format_amount(part.amount)
    if isinstance(part, DurationPart):
        return format_duration(part.seconds or 0)
    if isinstance(part, HexPart):
        return truncate_hex(part.value)
    if isinstance(part, NumberPart):
        return format_units(part.value, part.decimals)
    if isinstance(part, TickPart):
        return str(part.tick)
    if isinstance(part, TokenPart):
        return part.symbol or truncate_hex(part.address)
    raise TypeError(f"Unknown event part: {type(part).__name__}")


def format_note(event: KnownEvent) -> Optional[str]:
    if event.note is None:
        return None
    if isinstance(event.note, str):
        return event.note or None
    return ", ".join(f"{label}: {format_part(part)}" for label, part in event.note)


def format_event(event: KnownEvent) -> str:
    """Plain-text narration, e.g. "Send 0.15 AUSD to 0xabcd…1234"."""
    return " ".join(format_part(part) for part in event.parts)

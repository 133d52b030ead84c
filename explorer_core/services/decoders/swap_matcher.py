"""
Cross-log swap matcher.

A swap through the stablecoin exchange shows up as two independent transfer
logs: one into the exchange and one out of it. The matcher fuses each such
pair into a single `swap` known event.

Greedy, single pass, first match: the scan for the exit leg does not try to
find a globally optimal pairing and does not skip exit legs consumed by an
earlier pair.
"""

from dataclasses import dataclass, field
from typing import List, Sequence, Set, Tuple
import logging

from .base import (
    ActionPart,
    AmountPart,
    DetectionContext,
    KnownEvent,
    RawEventLog,
    TRANSFER_EVENTS,
    TextPart,
    is_address,
)

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class SwapMatch:
    events: List[KnownEvent] = field(default_factory=list)
    consumed: Set[int] = field(default_factory=set)


def is_transfer_log(log: RawEventLog) -> bool:
    """Transfer-shaped log with well-typed from/to/amount."""
    return (
        log.event_name in TRANSFER_EVENTS
        and is_address(log.arg('from'))
        and is_address(log.arg('to'))
        and isinstance(log.arg('amount'), int)
    )


def match_swaps(logs: Sequence[RawEventLog], ctx: DetectionContext) -> SwapMatch:
    """
    Pair transfers into the exchange with the next transfer out of it.

    Args:
        logs: Deduplicated logs of one transaction
        ctx: Detection context (exchange address, metadata lookup)

    Returns:
        SwapMatch with swap events in entry-leg order and the consumed
        indices (positions in `logs`)
    """
    transfers: List[Tuple[int, RawEventLog]] = [
        (index, log) for index, log in enumerate(logs) if is_transfer_log(log)
    ]

    events: List[KnownEvent] = []
    consumed: Set[int] = set()

    for position, (entry_index, entry) in enumerate(transfers[:-1]):
        if not ctx.config.is_exchange(entry.arg('to')):
            continue

        for exit_index, exit_log in transfers[position + 1:]:
            if not ctx.config.is_exchange(exit_log.arg('from')):
                continue

            events.append(KnownEvent(
                type='swap',
                parts=(
                    ActionPart('Swap'),
                    AmountPart(ctx.create_amount(entry.arg('amount'), entry.address)),
                    TextPart('for'),
                    AmountPart(ctx.create_amount(exit_log.arg('amount'), exit_log.address)),
                ),
            ))
            consumed.update((entry_index, exit_index))
            logger.debug(f"Swap matched: log {entry_index} -> log {exit_index}")
            break

    return SwapMatch(events=events, consumed=consumed)

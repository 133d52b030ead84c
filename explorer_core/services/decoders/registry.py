"""
Known Event Registry - central routing from decoded logs to known events.

Pipeline (order matters):
1. Pairing resolver drops generic restatements and harvests mint/burn memos
2. Call-data fallback: explicit fee-manager liquidity mints go first
3. Swap matcher fuses exchange entry/exit transfers
4. Remaining logs are routed through the family detectors in priority order
5. Fee transfers are collected apart; if nothing else was recognized they
   become a single "Pay Fee" event
"""

from dataclasses import replace
from typing import Any, List, Mapping, Optional, Sequence, Tuple
import logging

from .base import (
    AccountPart,
    ActionPart,
    AmountPart,
    DetectionContext,
    DetectionResult,
    EventDetector,
    EventPart,
    FeeTransferEvent,
    KnownEvent,
    RawEventLog,
    TextPart,
    same_address,
    validate_logs,
)
from .calldata import detect_liquidity_from_calldata
from .exchange_decoder import detect_stablecoin_exchange
from .fee_decoder import detect_fee_amm, detect_fee_manager
from .nonce_decoder import detect_nonce
from .pairing import resolve_pairs
from .policy_decoder import detect_tip403_registry
from .swap_matcher import match_swaps
from .tip20 import MetadataSource, metadata_lookup
from .tip20_decoder import detect_tip20, detect_tip20_factory
from ...config.chain_config import EngineConfig

logger = logging.getLogger(__name__)


# Family detectors in priority order; the first non-None result wins.
DETECTORS: Tuple[Tuple[str, EventDetector], ...] = (
    ('tip20', detect_tip20),
    ('tip20_factory', detect_tip20_factory),
    ('stablecoin_exchange', detect_stablecoin_exchange),
    ('tip403_registry', detect_tip403_registry),
    ('fee_manager', detect_fee_manager),
    ('nonce', detect_nonce),
    ('fee_amm', detect_fee_amm),
)


def detect_event(log: RawEventLog, ctx: DetectionContext) -> DetectionResult:
    """Run the family detectors over one log; first match wins."""
    for family, detector in DETECTORS:
        detected = detector(log, ctx)
        if detected is not None:
            logger.debug(f"{log.event_name} at {log.address} classified by {family}")
            return detected
    return None


def fee_payment_event(fees: Sequence[FeeTransferEvent], ctx: DetectionContext) -> KnownEvent:
    """Synthesize one "Pay Fee" event listing every fee amount."""
    parts: List[EventPart] = [ActionPart('Pay Fee')]
    for index, fee in enumerate(fees):
        if index > 0:
            parts.append(TextPart('and'))
        parts.append(AmountPart(ctx.create_amount(fee.amount, fee.token)))
    return KnownEvent(type='fee', parts=tuple(parts))


def parse_known_events(logs: Sequence[Any],
                       transaction: Optional[Mapping[str, Any]] = None,
                       get_token_metadata: MetadataSource = None,
                       config: Optional[EngineConfig] = None) -> List[KnownEvent]:
    """
    Derive the ordered list of known events for one transaction.

    Args:
        logs: Decoded logs (RawEventLog or web3-style dicts)
        transaction: Optional `{to, input, calls}` call tree for the
            call-data liquidity fallback
        get_token_metadata: Optional metadata lookup (callable or mapping)
        config: Engine config, defaults to the Tempo system addresses

    Returns:
        Known events: call-data fallback first, then swaps, then per-log
        detections in log order
    """
    config = config or EngineConfig.default()
    raw_logs = validate_logs(logs)
    pairing = resolve_pairs(raw_logs, config)

    ctx = DetectionContext(
        config=config,
        get_token_metadata=metadata_lookup(get_token_metadata),
        memos=pairing.memos,
    )

    known_events: List[KnownEvent] = []
    fee_transfers: List[FeeTransferEvent] = []

    liquidity = detect_liquidity_from_calldata(transaction, ctx)
    if liquidity:
        known_events.append(liquidity)

    swaps = match_swaps(pairing.logs, ctx)
    known_events.extend(swaps.events)

    for index, log in enumerate(pairing.logs):
        if index in swaps.consumed:
            continue

        detected = detect_event(log, ctx)
        if detected is None:
            continue

        if isinstance(detected, FeeTransferEvent):
            fee_transfers.append(detected)
            continue

        known_events.append(detected)

    if not known_events and fee_transfers:
        known_events.append(fee_payment_event(fee_transfers, ctx))

    logger.debug(f"Parsed {len(known_events)} known events from {len(raw_logs)} logs")
    return known_events


def get_perspective_event(event: KnownEvent, account: Optional[str] = None) -> KnownEvent:
    """
    Re-describe a `send` as seen by its recipient ("Received ... from ...").

    Returns a new event; the original is never modified. Events that are not
    sends, or sends where the account is not the (sole) recipient, are
    returned unchanged.
    """
    if not account or event.type != 'send' or event.meta is None:
        return event

    to_matches = same_address(event.meta.to, account)
    from_matches = same_address(event.meta.from_, account)
    if not to_matches or from_matches:
        return event

    sender = event.meta.from_
    parts = []
    for part in event.parts:
        if isinstance(part, ActionPart):
            part = ActionPart('Received')
        elif isinstance(part, TextPart) and part.text.lower() == 'to':
            part = TextPart('from')
        elif isinstance(part, AccountPart) and sender:
            part = AccountPart(sender)
        parts.append(part)
    return replace(event, parts=tuple(parts))

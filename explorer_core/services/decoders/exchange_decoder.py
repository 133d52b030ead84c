"""
Stablecoin Exchange Detector

Classifies order book and pair events of the enshrined stablecoin exchange,
plus pool `Mint` events that add liquidity with both tokens.
"""

from typing import Callable, Dict
import logging

from .base import (
    ActionPart,
    AmountPart,
    DetectionContext,
    DetectionResult,
    KnownEvent,
    RawEventLog,
    TextPart,
    TickPart,
    TokenPart,
)

logger = logging.getLogger(__name__)


def add_liquidity_event(ctx: DetectionContext, user_token: str, amount_user: int,
                        validator_token: str, amount_validator: int) -> KnownEvent:
    """Shared "Add Liquidity" narration (exchange, fee pool and call-data fallback)."""
    return KnownEvent(
        type='mint',
        parts=(
            ActionPart('Add Liquidity'),
            AmountPart(ctx.create_amount(amount_user, user_token)),
            TextPart('and'),
            AmountPart(ctx.create_amount(amount_validator, validator_token)),
        ),
    )


def _pool_mint(log: RawEventLog, ctx: DetectionContext) -> DetectionResult:
    amount_user = log.arg('amountUserToken')
    amount_validator = log.arg('amountValidatorToken')
    if ctx.config.is_fee_manager(log.address):
        return None
    if not isinstance(amount_user, int) or not isinstance(amount_validator, int):
        return None
    if amount_user <= 0 or amount_validator <= 0:
        return None
    return add_liquidity_event(
        ctx, log.arg('userToken'), amount_user, log.arg('validatorToken'), amount_validator
    )


def _order_placed(log: RawEventLog, ctx: DetectionContext) -> DetectionResult:
    side = 'Buy' if log.arg('isBid') else 'Sell'
    return KnownEvent(
        type='order placed',
        parts=(
            ActionPart(f'Limit {side}'),
            AmountPart(ctx.create_amount(log.arg('amount'), log.arg('token'))),
            TextPart('at tick'),
            TickPart(log.arg('tick')),
        ),
    )


def _flip_order_placed(log: RawEventLog, ctx: DetectionContext) -> DetectionResult:
    side = 'Buy' if log.arg('isBid') else 'Sell'
    return KnownEvent(
        type='flip order placed',
        parts=(
            ActionPart(f'Flip {side}'),
            AmountPart(ctx.create_amount(log.arg('amount'), log.arg('token'))),
            TextPart('at tick'),
            TickPart(log.arg('tick')),
        ),
    )


def _order_filled(log: RawEventLog, ctx: DetectionContext) -> DetectionResult:
    return KnownEvent(
        type='order filled',
        parts=(
            ActionPart('Partial Fill' if log.arg('partialFill') else 'Complete Fill'),
            TextPart(str(log.arg('amountFilled'))),
        ),
    )


def _order_cancelled(log: RawEventLog, ctx: DetectionContext) -> DetectionResult:
    return KnownEvent(type='order cancelled', parts=(ActionPart('Cancel Order'),))


def _pair_created(log: RawEventLog, ctx: DetectionContext) -> DetectionResult:
    return KnownEvent(
        type='create pair',
        parts=(
            ActionPart('Create Pair'),
            TokenPart(log.arg('base')),
            TextPart('/'),
            TokenPart(log.arg('quote')),
        ),
    )


_EXCHANGE_HANDLERS: Dict[str, Callable[[RawEventLog, DetectionContext], DetectionResult]] = {
    'Mint': _pool_mint,
    'OrderPlaced': _order_placed,
    'FlipOrderPlaced': _flip_order_placed,
    'OrderFilled': _order_filled,
    'OrderCancelled': _order_cancelled,
    'PairCreated': _pair_created,
}


def detect_stablecoin_exchange(log: RawEventLog, ctx: DetectionContext) -> DetectionResult:
    handler = _EXCHANGE_HANDLERS.get(log.event_name)
    return handler(log, ctx) if handler else None

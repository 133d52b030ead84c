"""
Fee Manager / Fee AMM Detectors

Fee Manager:
- UserTokenSet / ValidatorTokenSet: fee token preference changes

Fee AMM (fee-liquidity pool):
- Mint / Burn: liquidity added or removed
- RebalanceSwap / FeeSwap: pool swaps between user and validator tokens
"""

from typing import Callable, Dict
import logging

from .base import (
    AccountPart,
    ActionPart,
    AmountPart,
    DetectionContext,
    DetectionResult,
    KnownEvent,
    RawEventLog,
    TextPart,
    TokenPart,
)
from .exchange_decoder import add_liquidity_event

logger = logging.getLogger(__name__)


# ============================================================================
# FEE MANAGER
# ============================================================================

def _fee_token_set(account_arg: str, event_type: str):
    def handler(log: RawEventLog, ctx: DetectionContext) -> DetectionResult:
        return KnownEvent(
            type=event_type,
            parts=(
                ActionPart('Set Fee Token'),
                TokenPart(log.arg('token')),
                TextPart('for'),
                AccountPart(log.arg(account_arg)),
            ),
        )
    return handler


_FEE_MANAGER_HANDLERS: Dict[str, Callable[[RawEventLog, DetectionContext], DetectionResult]] = {
    'UserTokenSet': _fee_token_set('user', 'user token set'),
    'ValidatorTokenSet': _fee_token_set('validator', 'validator token set'),
}


def detect_fee_manager(log: RawEventLog, ctx: DetectionContext) -> DetectionResult:
    handler = _FEE_MANAGER_HANDLERS.get(log.event_name)
    return handler(log, ctx) if handler else None


# ============================================================================
# FEE AMM
# ============================================================================

def _has_pool_amounts(log: RawEventLog) -> bool:
    return 'amountUserToken' in log.args and 'amountValidatorToken' in log.args


def _liquidity_mint(log: RawEventLog, ctx: DetectionContext) -> DetectionResult:
    if ctx.config.is_fee_manager(log.address) or not _has_pool_amounts(log):
        return None
    return add_liquidity_event(
        ctx,
        log.arg('userToken'), log.arg('amountUserToken'),
        log.arg('validatorToken'), log.arg('amountValidatorToken'),
    )


def _liquidity_burn(log: RawEventLog, ctx: DetectionContext) -> DetectionResult:
    if not _has_pool_amounts(log):
        return None
    return KnownEvent(
        type='burn',
        parts=(
            ActionPart('Remove Liquidity'),
            AmountPart(ctx.create_amount(log.arg('amountUserToken'), log.arg('userToken'))),
            TextPart('and'),
            AmountPart(ctx.create_amount(log.arg('amountValidatorToken'), log.arg('validatorToken'))),
        ),
    )


def _pool_swap(label: str, event_type: str):
    def handler(log: RawEventLog, ctx: DetectionContext) -> DetectionResult:
        return KnownEvent(
            type=event_type,
            parts=(
                ActionPart(label),
                AmountPart(ctx.create_amount(log.arg('amountIn'), log.arg('userToken'))),
                TextPart('for'),
                AmountPart(ctx.create_amount(log.arg('amountOut'), log.arg('validatorToken'))),
            ),
        )
    return handler


_FEE_AMM_HANDLERS: Dict[str, Callable[[RawEventLog, DetectionContext], DetectionResult]] = {
    'Mint': _liquidity_mint,
    'Burn': _liquidity_burn,
    'RebalanceSwap': _pool_swap('Rebalance Swap', 'rebalance swap'),
    'FeeSwap': _pool_swap('Fee Swap', 'fee swap'),
}


def detect_fee_amm(log: RawEventLog, ctx: DetectionContext) -> DetectionResult:
    handler = _FEE_AMM_HANDLERS.get(log.event_name)
    return handler(log, ctx) if handler else None

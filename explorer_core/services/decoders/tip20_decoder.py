"""
TIP-20 Token Detector

Classifies events emitted by TIP-20 token contracts and by the TIP-20
factory into known events.

Events Handled:
- Transfer / TransferWithMemo: sends (or fee transfers into the fee manager)
- Mint / Burn: token supply changes (memo harvested from a paired transfer)
- RoleMembershipUpdated, RoleAdminUpdated: access control
- PauseStateUpdate, SupplyCapUpdate, TransferPolicyUpdate: token policy
- RewardScheduled, RewardCanceled, RewardRecipientSet: reward streams
- Approval, BurnBlocked
- NextQuoteTokenSet, QuoteTokenUpdate: quote token changes
- TokenCreated (factory)
"""

from typing import Callable, Dict
import logging

from .base import (
    AccountPart,
    ActionPart,
    AmountPart,
    DetectionContext,
    DetectionResult,
    DurationPart,
    EventMeta,
    FeeTransferEvent,
    HexPart,
    KnownEvent,
    RawEventLog,
    TextPart,
    TokenPart,
    decode_memo,
    to_hex,
)
from .pairing import burn_key, mint_key

logger = logging.getLogger(__name__)


# ============================================================================
# TRANSFERS / SUPPLY
# ============================================================================

def _transfer(log: RawEventLog, ctx: DetectionContext) -> DetectionResult:
    frm, to, amount = log.arg('from'), log.arg('to'), log.arg('amount')
    if not isinstance(amount, int):
        return None

    if ctx.config.is_fee_manager(to) and not ctx.config.is_zero(frm):
        return FeeTransferEvent(amount=amount, token=log.address)

    note = (decode_memo(log.arg('memo')) or None) if 'memo' in log.args else None
    return KnownEvent(
        type='send',
        parts=(
            ActionPart('Send'),
            AmountPart(ctx.create_amount(amount, log.address)),
            TextPart('to'),
            AccountPart(to),
        ),
        note=note,
        meta=EventMeta(from_=frm, to=to),
    )


def _mint(log: RawEventLog, ctx: DetectionContext) -> DetectionResult:
    # Pool mints carry no `amount` and are left to the liquidity detectors
    if ctx.config.is_fee_manager(log.address) or not log.has_amount():
        return None

    amount, to = log.arg('amount'), log.arg('to')
    return KnownEvent(
        type='mint',
        parts=(
            ActionPart('Mint'),
            AmountPart(ctx.create_amount(amount, log.address)),
            TextPart('to'),
            AccountPart(to),
        ),
        note=ctx.memos.get(mint_key(log.address, amount, to)),
    )


def _burn(log: RawEventLog, ctx: DetectionContext) -> DetectionResult:
    if not log.has_amount():
        return None

    amount, frm = log.arg('amount'), log.arg('from')
    return KnownEvent(
        type='burn',
        parts=(
            ActionPart('Burn'),
            AmountPart(ctx.create_amount(amount, log.address)),
            TextPart('from'),
            AccountPart(frm),
        ),
        note=ctx.memos.get(burn_key(log.address, amount, frm)),
    )


def _burn_blocked(log: RawEventLog, ctx: DetectionContext) -> DetectionResult:
    return KnownEvent(
        type='burn blocked',
        parts=(
            ActionPart('Burn Blocked'),
            AmountPart(ctx.create_amount(log.arg('amount'), log.address)),
            TextPart('from'),
            AccountPart(log.arg('from')),
        ),
    )


def _approval(log: RawEventLog, ctx: DetectionContext) -> DetectionResult:
    return KnownEvent(
        type='approval',
        parts=(
            ActionPart('Approve'),
            AmountPart(ctx.create_amount(log.arg('amount'), log.address)),
            TextPart('for spender'),
            AccountPart(log.arg('spender')),
        ),
    )


# ============================================================================
# ROLES
# ============================================================================

def _role_membership_updated(log: RawEventLog, ctx: DetectionContext) -> DetectionResult:
    has_role = bool(log.arg('hasRole'))
    role = to_hex(log.arg('role'))
    role_name = ctx.config.role_name(role)
    return KnownEvent(
        type='grant role' if has_role else 'revoke role',
        parts=(
            ActionPart('Grant Role' if has_role else 'Revoke Role'),
            TextPart(role_name) if role_name else HexPart(role),
            TextPart('to'),
            AccountPart(log.arg('account')),
        ),
    )


def _role_admin_updated(log: RawEventLog, ctx: DetectionContext) -> DetectionResult:
    return KnownEvent(
        type='role admin updated',
        parts=(
            ActionPart('Update Role Admin'),
            HexPart(to_hex(log.arg('role'))),
            TextPart('to'),
            HexPart(to_hex(log.arg('newAdminRole'))),
        ),
        note=(('Sender', AccountPart(log.arg('sender'))),),
    )


# ============================================================================
# TOKEN POLICY
# ============================================================================

def _pause_state_update(log: RawEventLog, ctx: DetectionContext) -> DetectionResult:
    paused = bool(log.arg('isPaused'))
    return KnownEvent(
        type='pause' if paused else 'unpause',
        parts=(
            ActionPart('Pause Transfers' if paused else 'Resume Transfers'),
            TextPart('for'),
            TokenPart(log.address),
        ),
    )


def _supply_cap_update(log: RawEventLog, ctx: DetectionContext) -> DetectionResult:
    return KnownEvent(
        type='supply cap update',
        parts=(
            ActionPart('Supply Cap Update'),
            TextPart('for'),
            ctx.token_part(log.address),
        ),
        note=(('New', ctx.number_part(log.arg('newSupplyCap'), log.address)),),
    )


def _transfer_policy_update(log: RawEventLog, ctx: DetectionContext) -> DetectionResult:
    return KnownEvent(
        type='transfer policy update',
        parts=(
            ActionPart('Update Transfer Policy'),
            TextPart(f"#{log.arg('newPolicyId')}"),
            TextPart('for'),
            TokenPart(log.address),
        ),
        note=(('Updater', AccountPart(log.arg('updater'))),),
    )


def _next_quote_token_set(log: RawEventLog, ctx: DetectionContext) -> DetectionResult:
    return KnownEvent(
        type='next quote token set',
        parts=(
            ActionPart('Set Next Quote Token'),
            TokenPart(log.arg('nextQuoteToken')),
            TextPart('for'),
            ctx.token_part(log.address),
        ),
        note=(('Updater', AccountPart(log.arg('updater'))),),
    )


def _quote_token_update(log: RawEventLog, ctx: DetectionContext) -> DetectionResult:
    return KnownEvent(
        type='quote token update',
        parts=(
            ActionPart('Update Quote Token'),
            TokenPart(log.arg('newQuoteToken')),
            TextPart('for'),
            ctx.token_part(log.address),
        ),
        note=(('Updater', AccountPart(log.arg('updater'))),),
    )


# ============================================================================
# REWARDS
# ============================================================================

def _reward_scheduled(log: RawEventLog, ctx: DetectionContext) -> DetectionResult:
    return KnownEvent(
        type='reward scheduled',
        parts=(
            ActionPart('Reward Stream'),
            TextPart('created for'),
            ctx.token_part(log.address),
        ),
        note=(
            ('ID', TextPart(str(log.arg('id')))),
            ('Funder', AccountPart(log.arg('funder'))),
            ('Amount', ctx.number_part(log.arg('amount'), log.address)),
            ('Duration', DurationPart(log.arg('durationSeconds'))),
        ),
    )


def _reward_canceled(log: RawEventLog, ctx: DetectionContext) -> DetectionResult:
    return KnownEvent(
        type='reward canceled',
        parts=(
            ActionPart('Cancel Reward Stream'),
            TextPart('for'),
            ctx.token_part(log.address),
        ),
        note=(
            ('ID', TextPart(str(log.arg('id')))),
            ('Funder', AccountPart(log.arg('funder'))),
            ('Refund', ctx.number_part(log.arg('refund'), log.address)),
        ),
    )


def _reward_recipient_set(log: RawEventLog, ctx: DetectionContext) -> DetectionResult:
    return KnownEvent(
        type='reward recipient set',
        parts=(
            ActionPart('Set Reward Recipient'),
            AccountPart(log.arg('recipient')),
            TextPart('for holder'),
            AccountPart(log.arg('holder')),
        ),
    )


_TIP20_HANDLERS: Dict[str, Callable[[RawEventLog, DetectionContext], DetectionResult]] = {
    'Transfer': _transfer,
    'TransferWithMemo': _transfer,
    'Mint': _mint,
    'Burn': _burn,
    'RoleMembershipUpdated': _role_membership_updated,
    'PauseStateUpdate': _pause_state_update,
    'SupplyCapUpdate': _supply_cap_update,
    'RewardScheduled': _reward_scheduled,
    'RewardCanceled': _reward_canceled,
    'RewardRecipientSet': _reward_recipient_set,
    'Approval': _approval,
    'BurnBlocked': _burn_blocked,
    'TransferPolicyUpdate': _transfer_policy_update,
    'NextQuoteTokenSet': _next_quote_token_set,
    'QuoteTokenUpdate': _quote_token_update,
    'RoleAdminUpdated': _role_admin_updated,
}


def detect_tip20(log: RawEventLog, ctx: DetectionContext) -> DetectionResult:
    """Token family detector."""
    handler = _TIP20_HANDLERS.get(log.event_name)
    return handler(log, ctx) if handler else None


def detect_tip20_factory(log: RawEventLog, ctx: DetectionContext) -> DetectionResult:
    """Token factory detector."""
    if log.event_name != 'TokenCreated':
        return None
    return KnownEvent(
        type='create token',
        parts=(
            ActionPart('Create Token'),
            TokenPart(log.arg('token') or log.address, symbol=log.arg('symbol')),
        ),
    )

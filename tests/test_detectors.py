"""
Unit tests for the per-family detectors and their routing order.
"""
import sys
import os

import pytest

# Add parent directory to path for imports
sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

from explorer_core.config.chain_config import role_hash
from explorer_core.services.decoders import (
    DETECTORS,
    DetectionContext,
    FeeTransferEvent,
    HexPart,
    TextPart,
    detect_event,
    format_event,
    metadata_lookup,
)
from explorer_core.services.decoders.formatting import format_note

from log_builders import (
    EXCHANGE,
    FEE_MANAGER,
    RECIPIENT,
    SENDER,
    TOKEN_A,
    TOKEN_B,
    make_log,
    transfer,
)

POLICY_REGISTRY = "0x403c000000000000000000000000000000000000"
NONCE_MANAGER = "0x4e4f4e4345000000000000000000000000000000"
FACTORY = "0x20fc000000000000000000000000000000000000"
POOL = "0x4444444444444444444444444444444444444444"


@pytest.fixture
def ctx(config, tokens):
    return DetectionContext(config=config, get_token_metadata=metadata_lookup(tokens))


class TestRoutingOrder:
    """Detectors run in a fixed order; the first match wins."""

    def test_detector_order(self):
        assert [name for name, _ in DETECTORS] == [
            'tip20', 'tip20_factory', 'stablecoin_exchange', 'tip403_registry',
            'fee_manager', 'nonce', 'fee_amm',
        ]

    def test_unknown_event_returns_none(self, ctx):
        assert detect_event(make_log('Unknown', TOKEN_A), ctx) is None

    def test_fee_transfer_is_collected_not_surfaced(self, ctx):
        detected = detect_event(transfer(TOKEN_A, SENDER, FEE_MANAGER, 1000), ctx)

        assert detected == FeeTransferEvent(amount=1000, token=TOKEN_A)

    def test_pool_mint_with_both_amounts_is_add_liquidity(self, ctx):
        log = make_log('Mint', POOL, {
            'sender': SENDER,
            'userToken': TOKEN_A,
            'validatorToken': TOKEN_B,
            'amountUserToken': 1000000,
            'amountValidatorToken': 2000000,
        })

        detected = detect_event(log, ctx)

        assert detected.type == 'mint'
        assert format_event(detected) == "Add Liquidity 1 AUSD and 2 BUSD"

    def test_pool_mint_on_fee_manager_left_to_call_data(self, ctx):
        log = make_log('Mint', FEE_MANAGER, {
            'sender': SENDER,
            'userToken': TOKEN_A,
            'validatorToken': TOKEN_B,
            'amountUserToken': 1000000,
            'amountValidatorToken': 2000000,
        })

        assert detect_event(log, ctx) is None

    def test_pool_mint_with_zero_amount_falls_to_fee_amm(self, ctx):
        log = make_log('Mint', POOL, {
            'sender': SENDER,
            'userToken': TOKEN_A,
            'validatorToken': TOKEN_B,
            'amountUserToken': 0,
            'amountValidatorToken': 2000000,
        })

        assert format_event(detect_event(log, ctx)) == "Add Liquidity 0 AUSD and 2 BUSD"

    def test_pool_burn_is_remove_liquidity(self, ctx):
        log = make_log('Burn', FEE_MANAGER, {
            'sender': SENDER,
            'userToken': TOKEN_A,
            'validatorToken': TOKEN_B,
            'amountUserToken': 1000000,
            'amountValidatorToken': 1000000,
            'to': SENDER,
        })

        detected = detect_event(log, ctx)

        assert detected.type == 'burn'
        assert format_event(detected) == "Remove Liquidity 1 AUSD and 1 BUSD"


class TestTip20:
    """Token contract events."""

    def test_role_granted_uses_role_name(self, ctx):
        log = make_log('RoleMembershipUpdated', TOKEN_A, {
            'role': role_hash('ISSUER_ROLE'),
            'account': RECIPIENT,
            'sender': SENDER,
            'hasRole': True,
        })

        detected = detect_event(log, ctx)

        assert detected.type == 'grant role'
        assert detected.parts[1] == TextPart('Issuer')
        assert format_event(detected) == "Grant Role Issuer to 0x2222…2222"

    def test_unknown_role_falls_back_to_hex(self, ctx):
        role = "0x" + "ab" * 32
        log = make_log('RoleMembershipUpdated', TOKEN_A, {
            'role': role, 'account': RECIPIENT, 'sender': SENDER, 'hasRole': False,
        })

        detected = detect_event(log, ctx)

        assert detected.type == 'revoke role'
        assert detected.parts[1] == HexPart(role)

    def test_role_as_bytes(self, ctx):
        log = make_log('RoleMembershipUpdated', TOKEN_A, {
            'role': bytes(32), 'account': RECIPIENT, 'sender': SENDER, 'hasRole': True,
        })

        assert detect_event(log, ctx).parts[1] == TextPart('Default Admin')

    def test_pause_state(self, ctx):
        paused = detect_event(make_log('PauseStateUpdate', TOKEN_A, {'updater': SENDER, 'isPaused': True}), ctx)
        resumed = detect_event(make_log('PauseStateUpdate', TOKEN_A, {'updater': SENDER, 'isPaused': False}), ctx)

        assert paused.type == 'pause'
        assert resumed.type == 'unpause'
        assert format_event(resumed).startswith("Resume Transfers for")

    def test_supply_cap_note(self, ctx):
        log = make_log('SupplyCapUpdate', TOKEN_A, {'updater': SENDER, 'newSupplyCap': 1000000000000})

        detected = detect_event(log, ctx)

        assert format_event(detected) == "Supply Cap Update for AUSD"
        assert format_note(detected) == "New: 1000000"

    def test_reward_scheduled(self, ctx):
        log = make_log('RewardScheduled', TOKEN_A, {
            'funder': SENDER, 'id': 7, 'amount': 5000000, 'durationSeconds': 90061,
        })

        detected = detect_event(log, ctx)

        assert format_event(detected) == "Reward Stream created for AUSD"
        assert format_note(detected) == "ID: 7, Funder: 0x1111…1111, Amount: 5, Duration: 1 day 1h 1m 1s"

    def test_approval(self, ctx):
        log = make_log('Approval', TOKEN_A, {'owner': SENDER, 'spender': RECIPIENT, 'amount': 3000000})

        assert format_event(detect_event(log, ctx)) == "Approve 3 AUSD for spender 0x2222…2222"

    def test_token_created(self, ctx):
        log = make_log('TokenCreated', FACTORY, {
            'token': TOKEN_B, 'name': 'B Dollar', 'symbol': 'BUSD', 'currency': 'USD',
            'quoteToken': TOKEN_A, 'admin': SENDER,
        })

        detected = detect_event(log, ctx)

        assert detected.type == 'create token'
        assert format_event(detected) == "Create Token BUSD"
        assert detected.parts[1].address == TOKEN_B


class TestExchange:
    """Stablecoin exchange order book events."""

    def test_limit_buy(self, ctx):
        log = make_log('OrderPlaced', EXCHANGE, {
            'orderId': 1, 'maker': SENDER, 'token': TOKEN_A, 'amount': 5000000, 'isBid': True, 'tick': -20,
        })

        assert format_event(detect_event(log, ctx)) == "Limit Buy 5 AUSD at tick -20"

    def test_flip_sell(self, ctx):
        log = make_log('FlipOrderPlaced', EXCHANGE, {
            'orderId': 2, 'maker': SENDER, 'token': TOKEN_A, 'amount': 1000000, 'isBid': False,
            'tick': 10, 'flipTick': 20,
        })

        detected = detect_event(log, ctx)

        assert detected.type == 'flip order placed'
        assert format_event(detected) == "Flip Sell 1 AUSD at tick 10"

    def test_order_filled_and_cancelled(self, ctx):
        filled = detect_event(make_log('OrderFilled', EXCHANGE, {
            'orderId': 1, 'maker': SENDER, 'amountFilled': 10, 'partialFill': True,
        }), ctx)
        cancelled = detect_event(make_log('OrderCancelled', EXCHANGE, {'orderId': 1}), ctx)

        assert format_event(filled) == "Partial Fill 10"
        assert format_event(cancelled) == "Cancel Order"

    def test_pair_created(self, ctx):
        log = make_log('PairCreated', EXCHANGE, {'key': "0x" + "00" * 32, 'base': TOKEN_A, 'quote': TOKEN_B})

        detected = detect_event(log, ctx)

        assert detected.type == 'create pair'
        assert detected.parts[1].address == TOKEN_A


class TestPolicyAndFees:
    """TIP-403 registry, fee manager and nonce manager events."""

    def test_whitelist(self, ctx):
        log = make_log('WhitelistUpdated', POLICY_REGISTRY, {
            'policyId': 3, 'updater': SENDER, 'account': RECIPIENT, 'allowed': True,
        })

        assert format_event(detect_event(log, ctx)) == "Whitelist 0x2222…2222 on Policy #3"

    def test_policy_admin_updated(self, ctx):
        log = make_log('PolicyAdminUpdated', POLICY_REGISTRY, {
            'policyId': 3, 'updater': SENDER, 'admin': RECIPIENT,
        })

        detected = detect_event(log, ctx)

        assert format_event(detected) == "New Admin 0x2222…2222 on Policy #3"
        assert format_note(detected) == "Updater: 0x1111…1111"

    def test_user_token_set(self, ctx):
        log = make_log('UserTokenSet', FEE_MANAGER, {'user': SENDER, 'token': TOKEN_A})

        detected = detect_event(log, ctx)

        assert detected.type == 'user token set'
        assert format_event(detected) == "Set Fee Token 0x20c0…0001 for 0x1111…1111"

    def test_fee_swap(self, ctx):
        log = make_log('FeeSwap', FEE_MANAGER, {
            'userToken': TOKEN_A, 'validatorToken': TOKEN_B, 'amountIn': 1000000, 'amountOut': 997000,
        })

        assert format_event(detect_event(log, ctx)) == "Fee Swap 1 AUSD for 0.997 BUSD"

    def test_nonce_incremented(self, ctx):
        log = make_log('NonceIncremented', NONCE_MANAGER, {'account': SENDER, 'nonceKey': 5, 'newNonce': 6})

        detected = detect_event(log, ctx)

        assert format_event(detected) == "Increment Nonce 0x1111…1111"
        assert format_note(detected) == "Key: 5, New Nonce: 6"

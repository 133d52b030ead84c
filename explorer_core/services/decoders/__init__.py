"""
Tempo transaction event decoders.

Turns the decoded logs of one transaction (plus its call tree) into:
- Known events: human-narratable actions ("Send 0.15 AUSD to 0xabcd…1234")
- Receipt line items: main rows, fee breakdown, fee totals and totals

Pipeline:
1. pairing.py - drop generic Transfer restatements, harvest mint/burn memos
2. calldata.py - fee-manager liquidity fallback from call data
3. swap_matcher.py - fuse exchange entry/exit transfers into swaps
4. {family}_decoder.py - per-family detectors, routed by registry.py
5. receipt.py - monetary line items over the same deduplicated logs

Development workflow:
1. Capture the transaction's decoded logs as a JSON fixture
2. Debug it with explore_tx.py (--verbose writes engine_debug.log)
3. Add or fix the handler in the family decoder, then add a test
"""

from .base import (
    # Errors
    InvalidInputError,
    # Value model
    TokenMetadata,
    GetTokenMetadata,
    Amount,
    make_amount,
    # Event parts
    AccountPart,
    ActionPart,
    AmountPart,
    DurationPart,
    HexPart,
    NumberPart,
    TextPart,
    TickPart,
    TokenPart,
    EventPart,
    # Events
    EventMeta,
    KnownEvent,
    FeeTransferEvent,
    RawEventLog,
    validate_logs,
    # Receipt
    Price,
    LineItemUIRow,
    LineItemUI,
    LineItem,
    FeeBreakdownItem,
    ReceiptLineItems,
    # Detection
    DetectionContext,
)

from .pairing import PairingResult, resolve_pairs
from .swap_matcher import SwapMatch, match_swaps
from .calldata import LiquidityCall, find_fee_manager_liquidity_call
from .registry import DETECTORS, detect_event, parse_known_events, get_perspective_event
from .receipt import line_items_from_receipt, get_fee_breakdown
from .receipt_renderer import render_text_receipt
from .tip20 import is_tip20_address, metadata_lookup, metadata_from_logs
from .formatting import format_event, format_price, format_units, truncate_hex

__all__ = [
    # Errors
    'InvalidInputError',
    # Value model
    'TokenMetadata',
    'GetTokenMetadata',
    'Amount',
    'make_amount',
    # Event parts
    'AccountPart',
    'ActionPart',
    'AmountPart',
    'DurationPart',
    'HexPart',
    'NumberPart',
    'TextPart',
    'TickPart',
    'TokenPart',
    'EventPart',
    # Events
    'EventMeta',
    'KnownEvent',
    'FeeTransferEvent',
    'RawEventLog',
    'validate_logs',
    # Receipt
    'Price',
    'LineItemUIRow',
    'LineItemUI',
    'LineItem',
    'FeeBreakdownItem',
    'ReceiptLineItems',
    # Detection
    'DetectionContext',
    'DETECTORS',
    'detect_event',
    # Pipeline stages
    'PairingResult',
    'resolve_pairs',
    'SwapMatch',
    'match_swaps',
    'LiquidityCall',
    'find_fee_manager_liquidity_call',
    # Entry points
    'parse_known_events',
    'get_perspective_event',
    'line_items_from_receipt',
    'get_fee_breakdown',
    'render_text_receipt',
    # Token metadata
    'is_tip20_address',
    'metadata_lookup',
    'metadata_from_logs',
    # Formatting
    'format_event',
    'format_price',
    'format_units',
    'truncate_hex',
]

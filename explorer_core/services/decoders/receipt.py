"""
Receipt line-item aggregator.

Builds the monetary view of a transaction receipt from its decoded logs:
main line items, per-transfer fee breakdown, fee totals per currency and
grand totals per currency.

Sign convention for `Price.amount`: positive is value leaving the receipt's
sender (sends, fees, the sender's own burns); negative is value arriving at
the sender (transfers whose `to` is the sender).
"""

from typing import Any, Dict, List, Optional, Sequence, Tuple
import logging

from .base import (
    FeeBreakdownItem,
    GetTokenMetadata,
    LineItem,
    LineItemUI,
    LineItemUIRow,
    Price,
    RawEventLog,
    ReceiptLineItems,
    TRANSFER_EVENTS,
    TokenMetadata,
    checksum,
    decode_memo,
    is_address,
    require_address,
    same_address,
    to_hex,
    validate_logs,
)
from .formatting import format_price, truncate_hex
from .pairing import resolve_pairs
from .tip20 import MetadataSource, metadata_lookup
from ...config.chain_config import EngineConfig

logger = logging.getLogger(__name__)


def _currency(metadata: TokenMetadata, token: str) -> str:
    """Grouping currency; falls back to the symbol, then the token address."""
    return metadata.currency or metadata.symbol or token.lower()


def _lookup(get_token_metadata: Optional[GetTokenMetadata], token: str) -> Optional[TokenMetadata]:
    return get_token_metadata(token) if get_token_metadata else None


def _is_fee_transfer(log: RawEventLog, config: EngineConfig) -> bool:
    return config.is_fee_manager(log.arg('to')) and not config.is_zero(log.arg('from'))


# ============================================================================
# PER-EVENT LINE ITEMS
# ============================================================================

def _transfer_item(log: RawEventLog, sender: str, metadata: TokenMetadata) -> LineItem:
    amount, to = log.arg('amount'), log.arg('to')
    signed = -amount if same_address(to, sender) else amount
    memo = decode_memo(log.arg('memo')) if 'memo' in log.args else ""
    label = " ".join(part for part in ("Send", metadata.symbol) if part)

    return LineItem(
        event=log,
        price=Price(
            amount=signed,
            currency=_currency(metadata, log.address),
            decimals=metadata.decimals,
            symbol=metadata.symbol,
            token=log.address,
        ),
        ui=LineItemUI(
            left=f"{label} to {truncate_hex(to)}" if to else label,
            right=format_price(signed, metadata.decimals),
            bottom=(LineItemUIRow(left=f"Memo: {memo}"),) if memo else (),
        ),
    )


def _fee_breakdown_item(log: RawEventLog, metadata: TokenMetadata) -> FeeBreakdownItem:
    payer = log.arg('from')
    return FeeBreakdownItem(
        amount=log.arg('amount'),
        currency=_currency(metadata, log.address),
        decimals=metadata.decimals,
        symbol=metadata.symbol,
        token=log.address,
        payer=checksum(payer) if is_address(payer) else None,
    )


def _mint_item(log: RawEventLog, metadata: TokenMetadata) -> LineItem:
    amount, to = log.arg('amount'), log.arg('to')
    formatted = format_price(amount, metadata.decimals)
    return LineItem(
        event=log,
        ui=LineItemUI(
            left=f"Mint {metadata.symbol}" if metadata.symbol else "Mint",
            right=f"({formatted})" if metadata.decimals is not None else "-",
            bottom=(LineItemUIRow(left=f"To: {truncate_hex(to)}"),),
        ),
    )


def _burn_item(log: RawEventLog, sender: str, metadata: TokenMetadata) -> LineItem:
    amount, frm = log.arg('amount'), log.arg('from')
    price = None
    if same_address(frm, sender):
        price = Price(
            amount=amount,
            currency=_currency(metadata, log.address),
            decimals=metadata.decimals,
            symbol=metadata.symbol,
            token=log.address,
        )
    return LineItem(
        event=log,
        price=price,
        ui=LineItemUI(
            left=f"Burn {metadata.symbol}" if metadata.symbol else "Burn",
            right=format_price(amount, metadata.decimals),
            bottom=(LineItemUIRow(left=f"From: {truncate_hex(frm)}"),),
        ),
    )


def _role_item(log: RawEventLog, config: EngineConfig) -> LineItem:
    role = to_hex(log.arg('role'))
    role_name = config.role_name(role)
    verb = 'Granted' if log.arg('hasRole') else 'Revoked'
    return LineItem(
        event=log,
        ui=LineItemUI(
            left=f"{role_name} Role {verb}" if role_name else f"Role {verb}",
            right="-",
            bottom=(
                LineItemUIRow(left=f"To: {truncate_hex(log.arg('account'))}"),
                LineItemUIRow(left=f"Role: {role_name or truncate_hex(role)}"),
            ),
        ),
    )


def _token_created_item(log: RawEventLog) -> LineItem:
    return LineItem(
        event=log,
        ui=LineItemUI(left=f"Create Token ({log.arg('symbol')})", right="-"),
    )


def classify_log(log: RawEventLog, sender: str,
                 get_token_metadata: Optional[GetTokenMetadata],
                 config: EngineConfig) -> Tuple[Optional[LineItem], Optional[FeeBreakdownItem]]:
    """
    Map one deduplicated log to either a main line item or a fee breakdown
    entry (never both).
    """
    name = log.event_name

    if name in TRANSFER_EVENTS and isinstance(log.arg('amount'), int):
        metadata = _lookup(get_token_metadata, log.address)
        if metadata is None:
            return LineItem.noop(log), None
        if _is_fee_transfer(log, config):
            return None, _fee_breakdown_item(log, metadata)
        return _transfer_item(log, sender, metadata), None

    if name == 'Mint' and log.has_amount():
        metadata = _lookup(get_token_metadata, log.address)
        return (_mint_item(log, metadata) if metadata else LineItem.noop(log)), None

    if name == 'Burn' and log.has_amount():
        metadata = _lookup(get_token_metadata, log.address)
        return (_burn_item(log, sender, metadata) if metadata else LineItem.noop(log)), None

    if name == 'RoleMembershipUpdated':
        return _role_item(log, config), None

    if name == 'TokenCreated':
        return _token_created_item(log), None

    return LineItem.noop(log), None


# ============================================================================
# TOTALS
# ============================================================================

def _sum_by_currency(prices: Sequence[Price]) -> Dict[Tuple[str, Optional[int]], Price]:
    """
    Fold prices into one Price per currency and scale (first-seen order).

    Raw units only add up at the same scale, so tokens sharing a currency
    but not their decimals get separate groups.
    """
    grouped: Dict[Tuple[str, Optional[int]], Price] = {}
    for price in prices:
        key = (price.currency, price.decimals)
        existing = grouped.get(key)
        if existing is None:
            if any(currency == price.currency for currency, _ in grouped):
                logger.debug(f"{price.currency} seen with {price.decimals} decimals, totalled separately")
            grouped[key] = Price(
                amount=price.amount,
                currency=price.currency,
                decimals=price.decimals,
                symbol=price.symbol,
                token=price.token,
            )
        else:
            grouped[key] = Price(
                amount=existing.amount + price.amount,
                currency=existing.currency,
                decimals=existing.decimals,
                symbol=existing.symbol if existing.symbol == price.symbol else None,
                token=existing.token if same_address(existing.token, price.token) else None,
            )
    return grouped


def fee_totals(fee_breakdown: Sequence[FeeBreakdownItem]) -> List[LineItem]:
    """One "Fee" row per currency summing the fee breakdown."""
    prices = [
        Price(amount=f.amount, currency=f.currency, decimals=f.decimals, symbol=f.symbol, token=f.token)
        for f in fee_breakdown
    ]
    return [
        LineItem(
            price=price,
            is_fee=True,
            ui=LineItemUI(left="Fee", right=format_price(price.amount, price.decimals, short=True)),
        )
        for price in _sum_by_currency(prices).values()
    ]


def grand_totals(main: Sequence[LineItem], fees: Sequence[LineItem]) -> List[LineItem]:
    """One "Total" row per currency over main items and fee totals."""
    prices = [item.price for item in list(main) + list(fees) if item.price is not None]
    return [
        LineItem(
            price=price,
            ui=LineItemUI(left="Total", right=format_price(price.amount, price.decimals, short=True)),
        )
        for price in _sum_by_currency(prices).values()
    ]


# ============================================================================
# ENTRY POINTS
# ============================================================================

def line_items_from_receipt(logs: Sequence[Any], sender: str,
                            get_token_metadata: MetadataSource = None,
                            config: Optional[EngineConfig] = None) -> ReceiptLineItems:
    """
    Build receipt line items for one transaction.

    Args:
        logs: Decoded logs (RawEventLog or web3-style dicts)
        sender: The transaction's `from` address (receipt owner)
        get_token_metadata: Metadata lookup (callable or mapping); without it
            every log renders as a no-op row
        config: Engine config, defaults to the Tempo system addresses

    Returns:
        ReceiptLineItems(main, fee_breakdown, fee_totals, totals)
    """
    require_address('sender', sender)
    config = config or EngineConfig.default()
    lookup = metadata_lookup(get_token_metadata)
    pairing = resolve_pairs(validate_logs(logs), config)

    main: List[LineItem] = []
    breakdown: List[FeeBreakdownItem] = []
    for log in pairing.logs:
        item, fee = classify_log(log, sender, lookup, config)
        if item is not None:
            main.append(item)
        if fee is not None:
            breakdown.append(fee)

    fees = fee_totals(breakdown)
    totals = grand_totals(main, fees)

    logger.debug(
        f"Receipt: {len(main)} main items, {len(breakdown)} fees, "
        f"{len(fees)} fee totals, {len(totals)} totals"
    )
    return ReceiptLineItems(
        main=tuple(main),
        fee_breakdown=tuple(breakdown),
        fee_totals=tuple(fees),
        totals=tuple(totals),
    )


def get_fee_breakdown(logs: Sequence[Any], get_token_metadata: MetadataSource,
                      config: Optional[EngineConfig] = None) -> List[FeeBreakdownItem]:
    """Fee breakdown only, without building the rest of the receipt."""
    config = config or EngineConfig.default()
    lookup = metadata_lookup(get_token_metadata)
    pairing = resolve_pairs(validate_logs(logs), config)

    breakdown = []
    for log in pairing.logs:
        if log.event_name not in TRANSFER_EVENTS or not isinstance(log.arg('amount'), int):
            continue
        if not _is_fee_transfer(log, config):
            continue
        metadata = _lookup(lookup, log.address)
        if metadata is None:
            continue
        breakdown.append(_fee_breakdown_item(log, metadata))
    return breakdown

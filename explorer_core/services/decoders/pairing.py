"""
Event pairing resolver.

TIP-20 tokens restate some transfers twice: a generic `Transfer` is emitted
next to a more specific `TransferWithMemo`, `Mint` or `Burn`. This module
builds a preference map over the logs of one transaction and filters out the
redundant restatements so that only the most specific log survives.

Pairing keys:
- TransferWithMemo(from, to)  -> "<from><to>"
- Mint(amount, to)            -> "mint:<token>:<amount>:<to>"
- Burn(amount, from)          -> "burn:<token>:<amount>:<from>"
"""

from dataclasses import dataclass, field
from typing import Dict, List, Optional, Sequence
import logging

from .base import RawEventLog, decode_memo, is_address
from ...config.chain_config import EngineConfig

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class PairingResult:
    """Deduplicated logs plus the maps used to produce them."""
    logs: List[RawEventLog]
    preference_map: Dict[str, str] = field(default_factory=dict)
    memos: Dict[str, str] = field(default_factory=dict)


def _lower(value) -> str:
    return value.lower() if isinstance(value, str) else str(value)


def transfer_key(log: RawEventLog) -> Optional[str]:
    frm, to = log.arg('from'), log.arg('to')
    if not is_address(frm) or not is_address(to):
        return None
    return f"{frm.lower()}{to.lower()}"


def mint_key(token: str, amount: int, to: str) -> str:
    return f"mint:{token.lower()}:{amount}:{_lower(to)}"


def burn_key(token: str, amount: int, frm: str) -> str:
    return f"burn:{token.lower()}:{amount}:{_lower(frm)}"


def pairing_key(log: RawEventLog) -> Optional[str]:
    """Key under which a specific log claims its generic restatement."""
    if log.event_name == 'TransferWithMemo':
        return transfer_key(log)
    # Mint/Burn without an `amount` are pool events, not TIP-20 mints/burns
    if log.event_name == 'Mint' and log.has_amount():
        return mint_key(log.address, log.arg('amount'), log.arg('to'))
    if log.event_name == 'Burn' and log.has_amount():
        return burn_key(log.address, log.arg('amount'), log.arg('from'))
    return None


def build_preference_map(logs: Sequence[RawEventLog]) -> Dict[str, str]:
    """First pass: pairing key -> event name (last writer wins)."""
    preference_map: Dict[str, str] = {}
    for log in logs:
        key = pairing_key(log)
        if key:
            preference_map[key] = log.event_name
    return preference_map


def harvest_memos(logs: Sequence[RawEventLog], preference_map: Dict[str, str],
                  config: EngineConfig) -> Dict[str, str]:
    """
    Second pass: collect memo text from TransferWithMemo logs that restate a
    Mint (from zero address) or Burn (to zero address), keyed by the
    mint/burn key so the surviving Mint/Burn can carry the memo as its note.
    """
    memos: Dict[str, str] = {}
    for log in logs:
        if log.event_name != 'TransferWithMemo' or 'memo' not in log.args:
            continue
        if not isinstance(log.arg('amount'), int):
            continue

        memo_text = decode_memo(log.arg('memo'))
        if not memo_text:
            continue

        frm, to, amount = log.arg('from'), log.arg('to'), log.arg('amount')
        if config.is_zero(frm):
            key = mint_key(log.address, amount, to)
            if preference_map.get(key) == 'Mint':
                memos[key] = memo_text
        if config.is_zero(to):
            key = burn_key(log.address, amount, frm)
            if preference_map.get(key) == 'Burn':
                memos[key] = memo_text
    return memos


def is_paired(log: RawEventLog, preference_map: Dict[str, str], config: EngineConfig) -> bool:
    """True if a more specific log restates this one."""
    if log.event_name == 'Transfer':
        key = transfer_key(log)
        if key and preference_map.get(key) == 'TransferWithMemo':
            return True

    if log.event_name in ('Transfer', 'TransferWithMemo') and isinstance(log.arg('amount'), int):
        frm, to, amount = log.arg('from'), log.arg('to'), log.arg('amount')
        if config.is_zero(frm) and preference_map.get(mint_key(log.address, amount, to)) == 'Mint':
            return True
        if config.is_zero(to) and preference_map.get(burn_key(log.address, amount, frm)) == 'Burn':
            return True

    return False


def dedupe_logs(logs: Sequence[RawEventLog], preference_map: Dict[str, str],
                config: EngineConfig) -> List[RawEventLog]:
    """Stable filter dropping every log that is restated by a more specific one."""
    kept = []
    for log in logs:
        if is_paired(log, preference_map, config):
            logger.debug(f"Dropping paired {log.event_name} log from {log.address}")
            continue
        kept.append(log)
    return kept


def resolve_pairs(logs: Sequence[RawEventLog], config: Optional[EngineConfig] = None) -> PairingResult:
    """Run preference map, memo harvest and dedup over one transaction's logs."""
    config = config or EngineConfig.default()
    preference_map = build_preference_map(logs)
    memos = harvest_memos(logs, preference_map, config)
    deduped = dedupe_logs(logs, preference_map, config)
    if len(deduped) != len(logs):
        logger.debug(f"Pairing resolver dropped {len(logs) - len(deduped)} of {len(logs)} logs")
    return PairingResult(logs=deduped, preference_map=preference_map, memos=memos)

"""
TIP-20 token metadata helpers.

The engine itself never fetches anything: callers resolve metadata first
(batched RPC, cache, fixture) and hand the engine a synchronous lookup.
"""

from typing import Any, Callable, Dict, Iterable, Mapping, Optional, Union
import logging

from .base import GetTokenMetadata, InvalidInputError, RawEventLog, TokenMetadata
from ...config.chain_config import TIP20_ADDRESS_PREFIX

logger = logging.getLogger(__name__)

MetadataSource = Union[None, GetTokenMetadata, Mapping[str, Any]]


def is_tip20_address(address: str) -> bool:
    return isinstance(address, str) and address.lower().startswith(TIP20_ADDRESS_PREFIX)


def _as_metadata(value: Any) -> Optional[TokenMetadata]:
    if value is None or isinstance(value, TokenMetadata):
        return value
    if isinstance(value, Mapping):
        return TokenMetadata(
            decimals=value.get('decimals'),
            symbol=value.get('symbol'),
            currency=value.get('currency'),
        )
    raise InvalidInputError(f"Unsupported token metadata: {type(value).__name__}")


def metadata_lookup(source: MetadataSource) -> Optional[GetTokenMetadata]:
    """
    Normalize a metadata source into a lookup function.

    Args:
        source: None, a callable `address -> TokenMetadata | dict | None`, or a
            mapping of address (any case) to TokenMetadata / dict

    Returns:
        Case-insensitive lookup function, or None when no source is given
    """
    if source is None:
        return None

    if isinstance(source, Mapping):
        table: Dict[str, Optional[TokenMetadata]] = {
            str(address).lower(): _as_metadata(value) for address, value in source.items()
        }
        return lambda address: table.get(str(address).lower())

    if callable(source):
        return lambda address: _as_metadata(source(address))

    raise InvalidInputError(f"Token metadata source must be a mapping or callable, got {type(source).__name__}")


def metadata_from_logs(logs: Iterable[RawEventLog],
                       fetch_metadata: Callable[[str], Any]) -> GetTokenMetadata:
    """
    Resolve metadata for every TIP-20 token that emitted a log.

    Each distinct token address is fetched once, in first-seen order.
    """
    table: Dict[str, Optional[TokenMetadata]] = {}
    for log in logs:
        address = log.address.lower()
        if not is_tip20_address(address) or address in table:
            continue
        table[address] = _as_metadata(fetch_metadata(log.address))
    logger.debug(f"Resolved metadata for {len(table)} TIP-20 tokens")
    return lambda address: table.get(str(address).lower())

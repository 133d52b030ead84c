"""
Base classes and data structures for the transaction event engine.

Provides the value types shared by the pairing resolver, the per-family
detectors, the known-event orchestrator and the receipt line-item
aggregator.
"""

from dataclasses import dataclass, field
from typing import Any, Callable, Dict, List, Mapping, Optional, Sequence, Tuple, Union
import logging

from hexbytes import HexBytes
from web3 import Web3

from ...config.chain_config import EngineConfig

logger = logging.getLogger(__name__)

MAX_UINT256 = 2**256 - 1

# Event names whose generic `Transfer` restatement gets paired away
TRANSFER_EVENTS = ("Transfer", "TransferWithMemo")

# Decoded args that must hold an address when present
ADDRESS_ARGS = {
    "from", "to", "account", "spender", "recipient", "holder", "funder",
    "updater", "admin", "token", "userToken", "validatorToken", "user",
    "validator", "base", "quote", "nextQuoteToken", "newQuoteToken", "sender",
    "maker",
}

# Decoded args that must hold an unsigned 256-bit integer when present
AMOUNT_ARGS = {
    "amount", "amountUserToken", "amountValidatorToken", "amountIn",
    "amountOut", "newSupplyCap", "refund", "amountFilled", "liquidity",
}


class InvalidInputError(ValueError):
    """Raised when a caller hands the engine structurally invalid input."""


# ============================================================================
# HELPERS
# ============================================================================

def is_address(value: Any) -> bool:
    """True for a 0x-prefixed 20-byte hex string."""
    return isinstance(value, str) and value.startswith("0x") and Web3.is_address(value)


def same_address(a: Optional[str], b: Optional[str]) -> bool:
    """Case-insensitive address equality; None never matches."""
    if not a or not b:
        return False
    return a.lower() == b.lower()


def checksum(address: str) -> str:
    return Web3.to_checksum_address(address)


def to_hex(value: Any) -> str:
    """Render bytes/HexBytes/int/str as a lowercase 0x-prefixed hex string."""
    if isinstance(value, (bytes, bytearray)):
        return "0x" + bytes(value).hex()
    if isinstance(value, int) and not isinstance(value, bool):
        return hex(value)
    text = str(value).lower()
    return text if text.startswith("0x") else f"0x{text}"


def decode_memo(memo: Any) -> str:
    """Decode a bytes32 memo into text, dropping zero padding on both sides."""
    if memo is None:
        return ""
    try:
        raw = bytes(HexBytes(memo))
    except (TypeError, ValueError):
        logger.debug(f"Could not decode memo {memo!r}")
        return ""
    return raw.strip(b"\x00").decode("utf-8", errors="replace")


def _coerce_uint(name: str, value: Any) -> int:
    if isinstance(value, bool):
        raise InvalidInputError(f"Argument '{name}' must be an integer, got bool")
    if isinstance(value, str):
        text = value.strip()
        try:
            value = int(text, 16) if text.lower().startswith("0x") else int(text)
        except ValueError:
            raise InvalidInputError(f"Argument '{name}' is not an integer: {value!r}")
    if not isinstance(value, int):
        raise InvalidInputError(f"Argument '{name}' must be an integer, got {type(value).__name__}")
    if value < 0 or value > MAX_UINT256:
        raise InvalidInputError(f"Argument '{name}' out of uint256 range: {value}")
    return value


def _json_arg(value: Any) -> Any:
    if isinstance(value, (bytes, bytearray)):
        return to_hex(value)
    if isinstance(value, int) and not isinstance(value, bool):
        return str(value)
    return value


def require_address(name: str, value: Any) -> str:
    if not is_address(value):
        raise InvalidInputError(f"'{name}' is not a valid address: {value!r}")
    return value


# ============================================================================
# TOKEN / AMOUNT VALUE MODEL
# ============================================================================

@dataclass(frozen=True)
class TokenMetadata:
    """Token metadata as resolved by the caller (decimals, symbol, currency)."""
    decimals: Optional[int] = None
    symbol: Optional[str] = None
    currency: Optional[str] = None


GetTokenMetadata = Callable[[str], Optional[TokenMetadata]]


@dataclass(frozen=True)
class Amount:
    """`value` units of `token`, optionally enriched with decimals/symbol."""
    value: int
    token: str
    decimals: Optional[int] = None
    symbol: Optional[str] = None

    def to_dict(self) -> dict:
        return {
            'value': str(self.value),
            'token': self.token,
            'decimals': self.decimals,
            'symbol': self.symbol,
        }


def make_amount(token: str, value: int,
                get_token_metadata: Optional[GetTokenMetadata] = None) -> Amount:
    """Build an Amount, filling decimals/symbol from the lookup when it hits."""
    metadata = get_token_metadata(token) if get_token_metadata else None
    if metadata is None:
        return Amount(value=value, token=token)
    return Amount(value=value, token=token, decimals=metadata.decimals, symbol=metadata.symbol)


# ============================================================================
# EVENT PARTS
# ============================================================================

@dataclass(frozen=True)
class AccountPart:
    address: str
    type: str = field(default="account", init=False)

    def to_dict(self) -> dict:
        return {'type': self.type, 'value': self.address}


@dataclass(frozen=True)
class ActionPart:
    label: str
    type: str = field(default="action", init=False)

    def to_dict(self) -> dict:
        return {'type': self.type, 'value': self.label}


@dataclass(frozen=True)
class AmountPart:
    amount: Amount
    type: str = field(default="amount", init=False)

    def to_dict(self) -> dict:
        return {'type': self.type, 'value': self.amount.to_dict()}


@dataclass(frozen=True)
class DurationPart:
    seconds: int
    type: str = field(default="duration", init=False)

    def to_dict(self) -> dict:
        return {'type': self.type, 'value': self.seconds}


@dataclass(frozen=True)
class HexPart:
    value: str
    type: str = field(default="hex", init=False)

    def to_dict(self) -> dict:
        return {'type': self.type, 'value': self.value}


@dataclass(frozen=True)
class NumberPart:
    value: int
    decimals: Optional[int] = None
    type: str = field(default="number", init=False)

    def to_dict(self) -> dict:
        return {'type': self.type, 'value': str(self.value), 'decimals': self.decimals}


@dataclass(frozen=True)
class TextPart:
    text: str
    type: str = field(default="text", init=False)

    def to_dict(self) -> dict:
        return {'type': self.type, 'value': self.text}


@dataclass(frozen=True)
class TickPart:
    tick: int
    type: str = field(default="tick", init=False)

    def to_dict(self) -> dict:
        return {'type': self.type, 'value': self.tick}


@dataclass(frozen=True)
class TokenPart:
    address: str
    symbol: Optional[str] = None
    type: str = field(default="token", init=False)

    def to_dict(self) -> dict:
        return {'type': self.type, 'value': {'address': self.address, 'symbol': self.symbol}}


EventPart = Union[
    AccountPart, ActionPart, AmountPart, DurationPart, HexPart,
    NumberPart, TextPart, TickPart, TokenPart,
]

Note = Union[str, Tuple[Tuple[str, EventPart], ...]]


# ============================================================================
# KNOWN EVENTS
# ============================================================================

@dataclass(frozen=True)
class EventMeta:
    """Sender/receiver of a send, used to re-derive the viewer's perspective."""
    from_: Optional[str] = None
    to: Optional[str] = None


@dataclass(frozen=True)
class KnownEvent:
    """A classified, human-narratable representation of one or more logs."""
    type: str
    parts: Tuple[EventPart, ...]
    note: Optional[Note] = None
    meta: Optional[EventMeta] = None

    def __post_init__(self):
        object.__setattr__(self, "parts", tuple(self.parts))
        if self.note is not None and not isinstance(self.note, str):
            object.__setattr__(self, "note", tuple((label, part) for label, part in self.note))

    def to_dict(self) -> dict:
        if self.note is None or isinstance(self.note, str):
            note = self.note
        else:
            note = [[label, part.to_dict()] for label, part in self.note]
        return {
            'type': self.type,
            'parts': [part.to_dict() for part in self.parts],
            'note': note,
            'meta': {'from': self.meta.from_, 'to': self.meta.to} if self.meta else None,
        }


@dataclass(frozen=True)
class FeeTransferEvent:
    """A fee payment that did not map to a richer event (never surfaced)."""
    amount: int
    token: str


# ============================================================================
# RAW EVENT LOGS
# ============================================================================

@dataclass(frozen=True)
class RawEventLog:
    """
    One decoded event log of a transaction.

    Produced by an external ABI decoder. `args` maps parameter names to typed
    values; address-typed and amount-typed args are validated on construction.
    """
    address: str
    event_name: str
    args: Mapping[str, Any] = field(default_factory=dict)
    topics: Tuple[str, ...] = ()
    data: Optional[str] = None
    log_index: Optional[int] = None

    def __post_init__(self):
        require_address("address", self.address)
        if not isinstance(self.event_name, str) or not self.event_name:
            raise InvalidInputError(f"Event name must be a non-empty string: {self.event_name!r}")
        if not isinstance(self.args, Mapping):
            raise InvalidInputError(f"Event args must be a mapping, got {type(self.args).__name__}")

        args = {}
        for name, value in self.args.items():
            if name in ADDRESS_ARGS and value is not None:
                require_address(f"{self.event_name}.{name}", value)
            if name in AMOUNT_ARGS and value is not None:
                value = _coerce_uint(f"{self.event_name}.{name}", value)
            args[name] = value
        object.__setattr__(self, "args", args)
        object.__setattr__(self, "topics", tuple(to_hex(t) for t in self.topics))

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> 'RawEventLog':
        """Build from a web3.py / JSON-RPC style decoded log dict."""
        if not isinstance(data, Mapping):
            raise InvalidInputError(f"Log must be a mapping, got {type(data).__name__}")
        event_name = data.get('eventName', data.get('event'))
        data_field = data.get('data')
        return cls(
            address=data.get('address'),
            event_name=event_name,
            args=dict(data.get('args') or {}),
            topics=tuple(data.get('topics') or ()),
            data=to_hex(data_field) if data_field is not None else None,
            log_index=data.get('logIndex', data.get('log_index')),
        )

    def arg(self, name: str, default: Any = None) -> Any:
        return self.args.get(name, default)

    def has_amount(self) -> bool:
        """TIP-20 style Mint/Burn carry an integer `amount` arg."""
        return isinstance(self.args.get('amount'), int)

    def to_dict(self) -> dict:
        return {
            'address': self.address,
            'eventName': self.event_name,
            'args': {k: _json_arg(v) for k, v in self.args.items()},
            'topics': list(self.topics),
            'data': self.data,
            'logIndex': self.log_index,
        }


def validate_logs(logs: Sequence[Any]) -> List[RawEventLog]:
    """Coerce dicts to RawEventLog and fail fast on anything else."""
    if logs is None:
        return []
    if isinstance(logs, (str, bytes)) or not isinstance(logs, Sequence):
        raise InvalidInputError(f"Logs must be a sequence, got {type(logs).__name__}")
    result = []
    for log in logs:
        if isinstance(log, RawEventLog):
            result.append(log)
        elif isinstance(log, Mapping):
            result.append(RawEventLog.from_dict(log))
        else:
            raise InvalidInputError(f"Unsupported log entry: {type(log).__name__}")
    return result


# ============================================================================
# RECEIPT LINE ITEMS
# ============================================================================

@dataclass(frozen=True)
class Price:
    """Signed amount in token units. Positive = value leaving the sender."""
    amount: int
    currency: str
    decimals: Optional[int]
    symbol: Optional[str] = None
    token: Optional[str] = None

    def to_dict(self) -> dict:
        return {
            'amount': str(self.amount),
            'currency': self.currency,
            'decimals': self.decimals,
            'symbol': self.symbol,
            'token': self.token,
        }


@dataclass(frozen=True)
class LineItemUIRow:
    left: str
    right: Optional[str] = None


@dataclass(frozen=True)
class LineItemUI:
    left: str
    right: str
    bottom: Tuple[LineItemUIRow, ...] = ()


@dataclass(frozen=True)
class LineItem:
    """One row of a monetary receipt."""
    ui: LineItemUI
    event: Optional[RawEventLog] = None
    is_fee: bool = False
    price: Optional[Price] = None

    @property
    def event_name(self) -> Optional[str]:
        return self.event.event_name if self.event else None

    @classmethod
    def noop(cls, event: RawEventLog) -> 'LineItem':
        """Fallback row for logs without a monetary classification."""
        return cls(event=event, ui=LineItemUI(left=event.event_name, right="-"))

    def to_dict(self) -> dict:
        return {
            'eventName': self.event_name,
            'isFee': self.is_fee,
            'price': self.price.to_dict() if self.price else None,
            'ui': {
                'left': self.ui.left,
                'right': self.ui.right,
                'bottom': [{'left': r.left, 'right': r.right} for r in self.ui.bottom],
            },
        }


@dataclass(frozen=True)
class FeeBreakdownItem:
    amount: int
    currency: str
    decimals: Optional[int]
    symbol: Optional[str] = None
    token: Optional[str] = None
    payer: Optional[str] = None

    def to_dict(self) -> dict:
        return {
            'amount': str(self.amount),
            'currency': self.currency,
            'decimals': self.decimals,
            'symbol': self.symbol,
            'token': self.token,
            'payer': self.payer,
        }


@dataclass(frozen=True)
class ReceiptLineItems:
    main: Tuple[LineItem, ...] = ()
    fee_breakdown: Tuple[FeeBreakdownItem, ...] = ()
    fee_totals: Tuple[LineItem, ...] = ()
    totals: Tuple[LineItem, ...] = ()

    def to_dict(self) -> dict:
        return {
            'main': [item.to_dict() for item in self.main],
            'feeBreakdown': [item.to_dict() for item in self.fee_breakdown],
            'feeTotals': [item.to_dict() for item in self.fee_totals],
            'totals': [item.to_dict() for item in self.totals],
        }


# ============================================================================
# DETECTION CONTEXT
# ============================================================================

@dataclass(frozen=True)
class DetectionContext:
    """Read-only inputs shared by every detector for one transaction."""
    config: EngineConfig
    get_token_metadata: Optional[GetTokenMetadata] = None
    memos: Mapping[str, str] = field(default_factory=dict)

    def create_amount(self, value: int, token: str) -> Amount:
        return make_amount(token, value, self.get_token_metadata)

    def token_metadata(self, token: str) -> Optional[TokenMetadata]:
        return self.get_token_metadata(token) if self.get_token_metadata else None

    def token_part(self, address: str) -> TokenPart:
        metadata = self.token_metadata(address)
        return TokenPart(address=address, symbol=metadata.symbol if metadata else None)

    def number_part(self, value: int, token: str) -> NumberPart:
        metadata = self.token_metadata(token)
        return NumberPart(value=value, decimals=metadata.decimals if metadata else None)


DetectionResult = Optional[Union[KnownEvent, FeeTransferEvent]]
EventDetector = Callable[[RawEventLog, DetectionContext], DetectionResult]

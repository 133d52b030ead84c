"""
Call-data fallback detector.

`Transfer` logs alone cannot distinguish "Add Liquidity" from fee collection,
since both move tokens into the fee manager. Decoding the call data of calls
made to the fee manager is the only way to catch explicit user mints.

The transaction's call tree (top level call plus nested batched `calls`) is
walked breadth-first; the first call to the fee manager that decodes as
`mint` or `mintWithValidatorToken` wins.
"""

from collections import deque
from dataclasses import dataclass
from functools import lru_cache
from typing import Any, Mapping, Optional
import logging

from web3 import Web3

from .abis import FEE_AMM_ABI, LIQUIDITY_FUNCTIONS
from .base import DetectionContext, InvalidInputError, KnownEvent
from .exchange_decoder import add_liquidity_event
from ...config.chain_config import EngineConfig

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class LiquidityCall:
    """A decoded fee-manager liquidity call."""
    function_name: str
    user_token: str
    validator_token: str
    amount_user_token: int
    amount_validator_token: int
    to: Optional[str] = None


@lru_cache(maxsize=1)
def _fee_amm_contract():
    # No provider needed, the contract object is only used to decode input
    return Web3().eth.contract(abi=FEE_AMM_ABI)


def _field(call: Any, name: str) -> Any:
    if isinstance(call, Mapping):
        return call.get(name)
    return getattr(call, name, None)


def decode_liquidity_input(input_data: Any) -> Optional[LiquidityCall]:
    """
    Decode fee-manager input data as a liquidity call.

    Returns:
        LiquidityCall for `mint` / `mintWithValidatorToken`, None otherwise
        (including when the data does not decode against the fee AMM ABI)
    """
    try:
        func, params = _fee_amm_contract().decode_function_input(input_data)
    except Exception as e:
        logger.debug(f"Fee manager call data did not decode: {e}")
        return None

    fn_name = getattr(func, 'fn_name', None)
    if fn_name not in LIQUIDITY_FUNCTIONS:
        logger.debug(f"Fee manager call {fn_name} is not a liquidity mint")
        return None

    params = dict(params)
    if fn_name == 'mint':
        return LiquidityCall(
            function_name=fn_name,
            user_token=params['userToken'],
            validator_token=params['validatorToken'],
            amount_user_token=params['amountUserToken'],
            amount_validator_token=params['amountValidatorToken'],
            to=params.get('to'),
        )
    return LiquidityCall(
        function_name=fn_name,
        user_token=params['userToken'],
        validator_token=params['validatorToken'],
        amount_user_token=0,
        amount_validator_token=params['amountValidatorToken'],
        to=params.get('to'),
    )


def find_fee_manager_liquidity_call(transaction: Optional[Mapping[str, Any]],
                                    config: Optional[EngineConfig] = None) -> Optional[LiquidityCall]:
    """
    Breadth-first search of the call tree for a fee-manager liquidity mint.

    Args:
        transaction: `{to, input | data, calls}` where `calls` nests the same shape
        config: Engine config (fee manager address)

    Returns:
        First decoded LiquidityCall, or None
    """
    if transaction is None:
        return None
    if not isinstance(transaction, Mapping) and not hasattr(transaction, 'to'):
        raise InvalidInputError(f"Transaction must be a mapping, got {type(transaction).__name__}")

    config = config or EngineConfig.default()
    queue = deque([transaction])

    while queue:
        call = queue.popleft()
        target = _field(call, 'to')
        input_data = _field(call, 'input') or _field(call, 'data')

        if target and input_data and config.is_fee_manager(str(target)):
            decoded = decode_liquidity_input(input_data)
            if decoded:
                logger.debug(f"Found fee manager {decoded.function_name} call")
                return decoded

        nested = _field(call, 'calls')
        if nested:
            queue.extend(nested)

    return None


def liquidity_event(call: LiquidityCall, ctx: DetectionContext) -> KnownEvent:
    """Narrate a decoded liquidity call as an "Add Liquidity" event."""
    return add_liquidity_event(
        ctx,
        call.user_token, call.amount_user_token,
        call.validator_token, call.amount_validator_token,
    )


def detect_liquidity_from_calldata(transaction: Optional[Mapping[str, Any]],
                                   ctx: DetectionContext) -> Optional[KnownEvent]:
    call = find_fee_manager_liquidity_call(transaction, ctx.config)
    return liquidity_event(call, ctx) if call else None

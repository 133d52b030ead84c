"""
Embedded ABIs for the event engine.

Only call-data decoding needs an ABI here; event logs arrive already decoded.
"""

from .fee_amm import FEE_AMM_ABI, LIQUIDITY_FUNCTIONS

__all__ = [
    'FEE_AMM_ABI',
    'LIQUIDITY_FUNCTIONS',
]

"""Shared pytest fixtures for the event engine tests."""
import os
import sys

import pytest

# Add parent directory to path for imports
sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

from explorer_core.config.chain_config import EngineConfig
from explorer_core.services.decoders.base import TokenMetadata

from log_builders import TOKEN_A, TOKEN_B


@pytest.fixture
def config():
    return EngineConfig.default()


@pytest.fixture
def tokens():
    """Metadata for the two test stablecoins."""
    return {
        TOKEN_A: TokenMetadata(decimals=6, symbol='AUSD', currency='USD'),
        TOKEN_B: TokenMetadata(decimals=6, symbol='BUSD', currency='USD'),
    }

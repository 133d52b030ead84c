"""
Unit tests for engine logging setup and the explorer script entry point.
"""
import sys
import os
import logging

import pytest

# Add parent directory to path for imports
sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

from explorer_core.logging_config import (
    DECODERS_LOGGER,
    ConciseFormatter,
    get_logger,
    setup_engine_debug_logging,
    setup_logging,
)

import explore_tx

FIXTURE_PATH = os.path.join(os.path.dirname(os.path.abspath(__file__)), 'fixtures', 'memo_send.json')


@pytest.fixture
def restore_root_logger():
    root = logging.getLogger()
    handlers, level = list(root.handlers), root.level
    yield
    root.handlers[:] = handlers
    root.setLevel(level)


class TestLogging:
    """Test logger naming and handler setup."""

    def test_get_logger_namespaced(self):
        assert get_logger('explore_tx').name == 'explorer_core.explore_tx'
        assert get_logger('explorer_core.services').name == 'explorer_core.services'

    def test_setup_logging_single_console_handler(self, restore_root_logger):
        logger = setup_logging(debug=False)

        assert logger.name == 'explorer_core'
        assert len(logging.getLogger().handlers) == 1
        assert logging.getLogger('web3').level == logging.WARNING

    def test_concise_tags(self):
        formatter = ConciseFormatter()

        def line(level, name='explorer_core.services.decoders.pairing'):
            record = logging.LogRecord(name, level, __file__, 1, "%s dropped", ('Transfer',), None)
            return formatter.format(record)

        assert line(logging.INFO) == "[i] Transfer dropped"
        assert line(logging.WARNING) == "[*] Transfer dropped"
        assert line(logging.DEBUG) == "[.] explorer_core.services.decoders.pairing Transfer dropped"
        assert line(logging.ERROR) == "[!] explorer_core.services.decoders.pairing Transfer dropped"

    def test_debug_handler_idempotent(self, tmp_path):
        path = tmp_path / 'debug.log'
        decoders = logging.getLogger(DECODERS_LOGGER)

        first = setup_engine_debug_logging(path)
        try:
            second = setup_engine_debug_logging(path)
            decoders.debug("pairing check")
            first.flush()

            assert first is second, "Second call should reuse the handler"
            assert "pairing check" in path.read_text(encoding='utf-8')
        finally:
            decoders.removeHandler(first)
            first.close()


class TestMain:
    """Test the command-line entry point."""

    def test_missing_file_exits(self, monkeypatch, capsys, restore_root_logger):
        monkeypatch.setattr(sys, 'argv', ['explore_tx.py', 'does_not_exist.json'])

        with pytest.raises(SystemExit) as exc:
            explore_tx.main()

        assert exc.value.code == 1
        assert "[!]" in capsys.readouterr().out

    def test_account_flag(self, monkeypatch, capsys, restore_root_logger):
        account = "0x" + "22" * 20
        monkeypatch.setattr(sys, 'argv', ['explore_tx.py', FIXTURE_PATH, '--account', account])

        explore_tx.main()

        assert "Received" in capsys.readouterr().out

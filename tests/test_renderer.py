"""
Unit tests for the plain-text receipt and the fixture explorer script.
"""
import sys
import os

# Add parent directory to path for imports
sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

from explorer_core.services.decoders import (
    ReceiptLineItems,
    line_items_from_receipt,
    parse_known_events,
    render_text_receipt,
)
from explorer_core.services.decoders.receipt_renderer import RECEIPT_WIDTH, _row

import explore_tx
from log_builders import RECIPIENT, SENDER

FIXTURE_PATH = os.path.join(os.path.dirname(os.path.abspath(__file__)), 'fixtures', 'memo_send.json')


def rendered_fixture():
    fixture = explore_tx.load_fixture(FIXTURE_PATH)
    events = parse_known_events(fixture['logs'], get_token_metadata=fixture['tokens'])
    line_items = line_items_from_receipt(fixture['logs'], fixture['sender'], fixture['tokens'])
    return render_text_receipt(line_items, events, tx_hash=fixture['hash'], sender=fixture['sender'])


class TestTextReceipt:
    """Test the Jinja2 text receipt."""

    def test_sections_rendered(self):
        text = rendered_fixture()

        assert "RECEIPT" in text
        assert "Send 0.15 AUSD to 0x2222…2222" in text
        assert "(Invoice 42)" in text
        assert "Memo: Invoice 42" in text
        assert "FEES" in text
        assert "Total" in text

    def test_sponsored_fee_labelled(self):
        text = rendered_fixture()

        assert "AUSD (PAID BY 0x3333…3333)" in text

    def test_rows_fit_width(self):
        text = rendered_fixture()

        assert all(len(line) <= RECEIPT_WIDTH for line in text.splitlines())

    def test_totals_right_aligned(self):
        lines = rendered_fixture().splitlines()

        total = [line for line in lines if line.startswith("Total")]
        assert total == [_row("Total", "$0.15")]
        assert total[0].endswith("$0.15")

    def test_empty_receipt(self):
        text = render_text_receipt(ReceiptLineItems())

        assert "No line items" in text
        assert "FEES" not in text

    def test_long_left_side_truncated(self):
        row = _row("x" * 100, "$1")

        assert len(row) == RECEIPT_WIDTH
        assert row.endswith(" $1")
        assert "…" in row


class TestExploreScript:
    """Test the fixture explorer end to end."""

    def test_explore_fixture(self, capsys):
        fixture = explore_tx.load_fixture(FIXTURE_PATH)

        events = explore_tx.explore_transaction(fixture, account=RECIPIENT)

        output = capsys.readouterr().out
        assert len(events) == 1
        assert "(send) Send 0.15 AUSD to 0x2222…2222" in output
        assert "Received 0.15 AUSD from 0x1111…1111" in output
        assert "PAID BY" in output

    def test_raw_logs_shown(self, capsys):
        fixture = explore_tx.load_fixture(FIXTURE_PATH)

        explore_tx.explore_transaction(fixture, show_raw=True)

        output = capsys.readouterr().out
        assert "RAW LOGS" in output
        assert '"eventName": "TransferWithMemo"' in output
        assert SENDER in output

"""
Unit tests for perspective adjustment of send events.
"""
import sys
import os

# Add parent directory to path for imports
sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

from explorer_core.services.decoders import (
    ActionPart,
    format_event,
    get_perspective_event,
    parse_known_events,
)

from log_builders import FEE_MANAGER, RECIPIENT, SENDER, SPONSOR, TOKEN_A, transfer, transfer_with_memo


def send_event(tokens):
    logs = [transfer_with_memo(TOKEN_A, SENDER, RECIPIENT, 150000, "Invoice 42")]
    return parse_known_events(logs, get_token_metadata=tokens)[0]


class TestPerspective:
    """Sends are re-described from the recipient's point of view."""

    def test_recipient_sees_received(self, tokens):
        event = send_event(tokens)

        adjusted = get_perspective_event(event, RECIPIENT)

        assert format_event(adjusted) == "Received 0.15 AUSD from 0x1111…1111"
        assert adjusted.note == "Invoice 42"
        assert adjusted.type == 'send'

    def test_original_not_modified(self, tokens):
        event = send_event(tokens)

        get_perspective_event(event, RECIPIENT)

        assert format_event(event) == "Send 0.15 AUSD to 0x2222…2222"

    def test_case_insensitive_account(self, tokens):
        event = send_event(tokens)

        adjusted = get_perspective_event(event, RECIPIENT.upper().replace('0X', '0x'))

        assert adjusted.parts[0] == ActionPart('Received')

    def test_sender_view_unchanged(self, tokens):
        event = send_event(tokens)

        assert get_perspective_event(event, SENDER) is event

    def test_third_party_unchanged(self, tokens):
        event = send_event(tokens)

        assert get_perspective_event(event, SPONSOR) is event
        assert get_perspective_event(event, None) is event

    def test_self_send_unchanged(self, tokens):
        event = parse_known_events([transfer(TOKEN_A, SENDER, SENDER, 1)], get_token_metadata=tokens)[0]

        assert get_perspective_event(event, SENDER) is event

    def test_non_send_unchanged(self, tokens):
        event = parse_known_events([transfer(TOKEN_A, SENDER, FEE_MANAGER, 1000)], get_token_metadata=tokens)[0]

        assert event.type == 'fee'
        assert get_perspective_event(event, FEE_MANAGER) is event

    def test_idempotent(self, tokens):
        event = send_event(tokens)

        once = get_perspective_event(event, RECIPIENT)
        twice = get_perspective_event(once, RECIPIENT)

        assert once == twice

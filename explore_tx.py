"""
Transaction Explorer - Debug tool running the exact same engine as the explorer

Usage:
    python explore_tx.py <fixture.json>
    python explore_tx.py tests/fixtures/memo_send.json
    python explore_tx.py <fixture.json> --raw              # Show raw log data
    python explore_tx.py <fixture.json> --account 0x...   # Show events as seen by an account
    python explore_tx.py <fixture.json> --verbose          # Enable debug logging (write to engine_debug.log)
    python explore_tx.py <fixture.json> -v                 # Short for --verbose

Fixture format (JSON):
    {
        "hash": "0x...",
        "sender": "0x...",
        "transaction": {"to": "0x...", "input": "0x...", "calls": [...]},
        "logs": [{"address": "0x...", "eventName": "Transfer", "args": {...}}],
        "tokens": {"0x20c0...": {"decimals": 6, "symbol": "AUSD", "currency": "USD"}}
    }

Debug Mode:
    Set ENGINE_DEBUG=1 environment variable to enable verbose logging to engine_debug.log
    Or use --verbose flag to enable debug mode for this run only
"""

import sys
import json
from typing import Optional

# Load environment
from dotenv import load_dotenv
load_dotenv()

from explorer_core.config.chain_config import EngineConfig
from explorer_core.logging_config import DEBUG_LOG_PATH, ENGINE_DEBUG, get_logger, setup_logging
from explorer_core.services.decoders import (
    InvalidInputError,
    format_event,
    get_perspective_event,
    line_items_from_receipt,
    parse_known_events,
    render_text_receipt,
    validate_logs,
)

logger = get_logger('explore_tx')


def print_section(title: str, char: str = "="):
    """Print a section header"""
    print(f"\n{char * 60}")
    print(f" {title}")
    print(f"{char * 60}")


def load_fixture(path: str) -> dict:
    with open(path, encoding='utf-8') as f:
        fixture = json.load(f)
    if not isinstance(fixture, dict) or 'logs' not in fixture:
        raise InvalidInputError(f"{path}: fixture must be an object with a 'logs' array")
    return fixture


def explore_transaction(fixture: dict, show_raw: bool = False, account: Optional[str] = None):
    """
    Run both pipelines over a fixture and print the result.

    Args:
        fixture: Parsed fixture (see module docstring)
        show_raw: Show raw log data in output
        account: Viewer address for the perspective view
    """
    config = EngineConfig.from_env()
    tokens = fixture.get('tokens') or {}
    logs = validate_logs(fixture['logs'])
    sender = fixture.get('sender')
    tx_hash = fixture.get('hash')

    print_section(f"TRANSACTION: {(tx_hash or 'fixture')[:18]}...")
    print(f"\nSender:     {sender}")
    print(f"Logs:       {len(logs)}")
    print(f"Tokens:     {len(tokens)}")
    print(f"Fee mgr:    {config.fee_manager}")

    if show_raw:
        print_section("RAW LOGS", "-")
        for log in logs:
            print(json.dumps(log.to_dict(), indent=2))

    events = parse_known_events(
        logs,
        transaction=fixture.get('transaction'),
        get_token_metadata=tokens,
        config=config,
    )
    logger.info(f"Detected {len(events)} known events")

    print_section(f"KNOWN EVENTS ({len(events)})", "-")
    for i, event in enumerate(events):
        print(f"[{i + 1}] ({event.type}) {format_event(event)}")

    if account:
        print_section(f"AS SEEN BY {account[:10]}...", "-")
        for i, event in enumerate(events):
            print(f"[{i + 1}] {format_event(get_perspective_event(event, account))}")

    if sender:
        line_items = line_items_from_receipt(logs, sender, tokens, config)
        print_section("RECEIPT", "-")
        print(render_text_receipt(line_items, events, tx_hash=tx_hash, sender=sender))
    else:
        logger.warning("Fixture has no sender - skipping receipt")

    print_section("DONE")
    return events


def main():
    args = sys.argv[1:]
    if not args:
        print(__doc__)
        sys.exit(1)

    # Parse flags
    show_raw = "--raw" in args
    verbose = "--verbose" in args or "-v" in args
    account = None
    if "--account" in args:
        position = args.index("--account")
        if position + 1 >= len(args):
            print("[!] --account needs an address")
            sys.exit(1)
        account = args[position + 1]

    positional = [a for a in args if not a.startswith("-") and a != account]
    if not positional:
        print("[!] Missing fixture path")
        sys.exit(1)
    path = positional[0]

    setup_logging(debug=verbose or ENGINE_DEBUG)
    if verbose:
        print(f"[DEBUG] Verbose mode enabled - detailed logs will be written to:")
        print(f"        {DEBUG_LOG_PATH}")

    try:
        fixture = load_fixture(path)
        explore_transaction(fixture, show_raw=show_raw, account=account)
    except (OSError, json.JSONDecodeError, InvalidInputError) as e:
        print(f"[!] {e}")
        sys.exit(1)


if __name__ == "__main__":
    main()

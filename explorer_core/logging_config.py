"""
Logging configuration for the explorer engine.
Supports normal mode (concise) and debug mode (verbose with file output).
"""
import logging
import sys
import os
from pathlib import Path

# Debug mode: set ENGINE_DEBUG=1 to enable verbose decoder logging
ENGINE_DEBUG = os.getenv('ENGINE_DEBUG', '').lower() in ('1', 'true', 'yes')

# Debug log file path
DEBUG_LOG_PATH = Path(__file__).parent.parent / 'engine_debug.log'

DECODERS_LOGGER = 'explorer_core.services.decoders'
DEBUG_HANDLER_NAME = 'engine_debug_file'


class ConciseFormatter(logging.Formatter):
    """
    One line per record, tagged like the explorer script's own output
    ([i], [*], [!]). Decoder debug lines keep their logger name so pairing
    and swap decisions can be traced to a module.
    """

    TAGS = {
        logging.DEBUG: "[.] {name}",
        logging.INFO: "[i]",
        logging.WARNING: "[*]",
    }

    def format(self, record):
        # errors and above share the script's failure tag
        tag = self.TAGS.get(record.levelno, "[!] {name}").format(name=record.name)
        line = f"{tag} {record.getMessage()}"
        if record.exc_info:
            line += "\n" + self.formatException(record.exc_info)
        return line


class VerboseFormatter(logging.Formatter):
    """Debug file format: timestamp, level, module and source line."""
    def __init__(self):
        super().__init__(
            fmt='%(asctime)s %(levelname).1s %(name)s:%(lineno)d %(message)s',
            datefmt='%H:%M:%S'
        )


def setup_logging(level=logging.INFO, debug: bool = ENGINE_DEBUG):
    """
    Configure console logging for scripts using the engine.
    Call this once at startup.

    Set ENGINE_DEBUG=1 (or pass debug=True) to also write verbose decoder
    logs to engine_debug.log.
    """
    for logger_name in ('web3', 'web3.providers', 'web3.RequestManager', 'urllib3', 'asyncio'):
        logging.getLogger(logger_name).setLevel(logging.WARNING)

    root = logging.getLogger()
    root.setLevel(level)
    root.handlers.clear()

    handler = logging.StreamHandler(sys.stdout)
    handler.setFormatter(ConciseFormatter())
    root.addHandler(handler)

    app_logger = logging.getLogger('explorer_core')
    app_logger.setLevel(level)

    if debug:
        setup_engine_debug_logging()
        app_logger.info(f"ENGINE_DEBUG enabled - verbose logs written to {DEBUG_LOG_PATH}")

    return app_logger


def setup_engine_debug_logging(path: Path = DEBUG_LOG_PATH) -> logging.Handler:
    """
    Attach a verbose file handler to the decoders logger.
    Idempotent: a second call reuses the existing handler.
    """
    parent_logger = logging.getLogger(DECODERS_LOGGER)
    parent_logger.setLevel(logging.DEBUG)

    for existing in parent_logger.handlers:
        if getattr(existing, 'name', None) == DEBUG_HANDLER_NAME:
            return existing

    file_handler = logging.FileHandler(path, mode='w', encoding='utf-8')
    file_handler.setLevel(logging.DEBUG)
    file_handler.setFormatter(VerboseFormatter())
    file_handler.name = DEBUG_HANDLER_NAME
    parent_logger.addHandler(file_handler)
    return file_handler


def get_logger(name: str) -> logging.Logger:
    """Get a logger for a module. Use: logger = get_logger(__name__)"""
    if name.startswith('explorer_core'):
        return logging.getLogger(name)
    return logging.getLogger(f'explorer_core.{name}')

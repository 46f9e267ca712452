"""
Logging Utilities for FrontRAG

The MCP server talks JSON-RPC over stdout, so every handler installed here
writes to stderr or to a file, never to stdout.

Author: Olivier Vitrac, PhD, HDR | olivier.vitrac@adservio.fr | Adservio | 2026-10-19
"""

import logging
import re
import sys
from datetime import datetime
from pathlib import Path
from typing import Optional

from .config import LoggingConfig

LOG_FORMAT = "%(asctime)s %(name)s %(levelname)s %(message)s"

# Patterns for secret masking (environment variables, tokens, keys)
SECRET_PATTERNS = [
    (re.compile(r"(API_KEY|TOKEN|SECRET|PASSWORD|PASS|AUTH)[=:]\s*['\"]?([^'\"\ \n]+)", re.I), r"\1=***"),
    (re.compile(r"(Bearer|token)\s+([a-zA-Z0-9_\-\.]+)", re.I), r"\1 ***"),
    (re.compile(r"\bsk-[A-Za-z0-9_\-]{16,}"), "sk-***"),
]


def mask_secrets(text: str) -> str:
    """
    Mask secrets in text before logging.

    Args:
        text: Raw text that may contain secrets

    Returns:
        Text with secrets replaced by ***
    """
    masked = text
    for pattern, replacement in SECRET_PATTERNS:
        masked = pattern.sub(replacement, masked)
    return masked


class SecretMaskingFilter(logging.Filter):
    """Rewrite log records so API keys never reach a handler."""

    def filter(self, record: logging.LogRecord) -> bool:
        message = record.getMessage()
        masked = mask_secrets(message)
        if masked != message:
            record.msg = masked
            record.args = None
        return True


def get_log_file(log_dir: Path, when: Optional[datetime] = None) -> Path:
    """Daily log file inside log_dir (frontrag-YYYY-MM-DD.log)."""
    when = when or datetime.now()
    return Path(log_dir) / f"frontrag-{when.strftime('%Y-%m-%d')}.log"


def setup_logging(config: Optional[LoggingConfig] = None, verbose: bool = False) -> logging.Logger:
    """
    Configure the root logger for the server and CLI.

    Args:
        config: Logging configuration (defaults to LoggingConfig())
        verbose: Force DEBUG level

    Returns:
        The configured root logger
    """
    config = config or LoggingConfig()
    level = logging.DEBUG if verbose else getattr(logging, config.level.upper(), logging.INFO)

    root = logging.getLogger()
    root.setLevel(level)

    # Replace handlers from a previous call (CLI re-entry, tests)
    for handler in list(root.handlers):
        if getattr(handler, "_frontrag", False):
            root.removeHandler(handler)

    formatter = logging.Formatter(LOG_FORMAT)
    handlers = []

    stream = logging.StreamHandler(sys.stderr)
    handlers.append(stream)

    if config.log_dir:
        log_dir = Path(config.log_dir).expanduser()
        log_dir.mkdir(parents=True, exist_ok=True)
        handlers.append(logging.FileHandler(get_log_file(log_dir), encoding="utf-8"))

    for handler in handlers:
        handler.setFormatter(formatter)
        handler.setLevel(level)
        if config.mask_secrets:
            handler.addFilter(SecretMaskingFilter())
        handler._frontrag = True  # type: ignore[attr-defined]
        root.addHandler(handler)

    # Third-party chatter (chromadb telemetry, httpx request lines)
    for noisy in ("httpx", "chromadb.telemetry", "urllib3"):
        logging.getLogger(noisy).setLevel(max(level, logging.WARNING))

    return root

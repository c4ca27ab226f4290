from __future__ import annotations

import logging
import sys

import colorama

_LEVEL_COLORS = {
    logging.DEBUG: colorama.Fore.CYAN,
    logging.INFO: colorama.Fore.GREEN,
    logging.WARNING: colorama.Fore.YELLOW,
    logging.ERROR: colorama.Fore.RED,
    logging.CRITICAL: colorama.Fore.RED + colorama.Style.BRIGHT,
}


class AgentGenLogFormatter(logging.Formatter):
    def __init__(self, use_color: bool, include_timestamp: bool = False) -> None:
        fmt = "%(asctime)s " if include_timestamp else ""
        fmt += "%(levelname)s %(message)s"
        super().__init__(fmt=fmt, datefmt="%H:%M:%S")
        self.use_color = use_color

    def format(self, record: logging.LogRecord) -> str:
        formatted = super().format(record)
        if not self.use_color:
            return formatted
        color = _LEVEL_COLORS.get(record.levelno, "")
        return f"{color}{formatted}{colorama.Style.RESET_ALL}"


def setup_log(log_level: str = "INFO", include_timestamp: bool = False) -> None:
    """Log to stderr; stdout carries the plugin response."""
    handler = logging.StreamHandler(sys.stderr)
    handler.setFormatter(
        AgentGenLogFormatter(
            use_color=sys.stderr.isatty(), include_timestamp=include_timestamp
        )
    )

    root = logging.getLogger()
    for existing in list(root.handlers):
        if isinstance(existing.formatter, AgentGenLogFormatter):
            root.removeHandler(existing)
    root.addHandler(handler)
    root.setLevel(log_level)

"""Logging setup for the command line."""

from __future__ import annotations

import logging
import os

ENV_VAR = "RUST_LOG"
_DEFAULT_DIRECTIVES = "info"
_LEVELS = {
    "trace": logging.DEBUG,
    "debug": logging.DEBUG,
    "info": logging.INFO,
    "warn": logging.WARNING,
    "warning": logging.WARNING,
    "error": logging.ERROR,
    "off": logging.CRITICAL + 1,
}
_PLAIN_FORMAT = "%(asctime)s %(levelname)s %(message)s"
_VERBOSE_FORMAT = (
    "%(asctime)s %(levelname)s %(name)s: %(message)s\n"
    "    at %(pathname)s:%(lineno)d"
)


def _parse_directives(text: str) -> tuple[int, dict[str, int]]:
    """Root level and per-logger levels; raises ValueError on bad input."""
    root = logging.ERROR
    targets: dict[str, int] = {}
    for directive in filter(None, (part.strip() for part in text.split(","))):
        target, sep, level = directive.rpartition("=")
        if not sep:
            level_name = directive.lower()
            if level_name in _LEVELS:
                root = _LEVELS[level_name]
            else:
                targets[directive] = logging.DEBUG
            continue
        if not target or level.lower() not in _LEVELS:
            raise ValueError(f"invalid log directive {directive!r}")
        targets[target] = _LEVELS[level.lower()]
    return root, targets


def init(verbose: bool) -> None:
    """Configure logging at ``info``, or as the RUST_LOG variable asks.

    With ``verbose`` the logger name and source location are shown too.
    """
    try:
        root_level, targets = _parse_directives(os.environ.get(ENV_VAR, ""))
        if ENV_VAR not in os.environ:
            raise ValueError("not set")
    except ValueError:
        root_level, targets = _parse_directives(_DEFAULT_DIRECTIVES)

    handler = logging.StreamHandler()
    handler.setFormatter(logging.Formatter(_VERBOSE_FORMAT if verbose else _PLAIN_FORMAT))
    root = logging.getLogger()
    for existing in list(root.handlers):
        root.removeHandler(existing)
    root.addHandler(handler)
    root.setLevel(root_level)
    for name, level in targets.items():
        logging.getLogger(name).setLevel(level)
    logging.captureWarnings(True)
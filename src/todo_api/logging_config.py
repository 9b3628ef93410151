from __future__ import annotations

import logging
from typing import Dict, Optional, Tuple

LOG_FORMAT = "%(asctime)s [%(levelname)s] %(name)s: %(message)s"

_LEVELS = {
    "trace": logging.DEBUG,
    "debug": logging.DEBUG,
    "info": logging.INFO,
    "warn": logging.WARNING,
    "warning": logging.WARNING,
    "error": logging.ERROR,
    "critical": logging.CRITICAL,
    "off": logging.CRITICAL + 10,
}


def _level(name: str) -> Optional[int]:
    return _LEVELS.get(name.strip().lower())


# PUBLIC_INTERFACE
def parse_log_filter(spec: str) -> Tuple[Optional[int], Dict[str, int]]:
    """
    Parse a logging filter such as 'info,sqlalchemy.engine=info,uvicorn.access=debug'.

    A bare level sets the root level; 'logger=level' sets a named logger.
    Directives with unknown levels are ignored.

    Returns:
        (root_level or None, {logger_name: level})
    """
    root: Optional[int] = None
    loggers: Dict[str, int] = {}
    for directive in spec.split(","):
        directive = directive.strip()
        if not directive:
            continue
        name, sep, level_name = directive.partition("=")
        if not sep:
            level = _level(name)
            if level is not None:
                root = level
            continue
        level = _level(level_name)
        if level is not None and name.strip():
            loggers[name.strip()] = level
    return root, loggers


# PUBLIC_INTERFACE
def configure_logging(spec: str) -> None:
    """Install the stream handler and apply the directives from ``spec``."""
    root, loggers = parse_log_filter(spec)
    logging.basicConfig(level=root if root is not None else logging.INFO, format=LOG_FORMAT)
    if root is not None:
        logging.getLogger().setLevel(root)
    for name, level in loggers.items():
        logging.getLogger(name).setLevel(level)

"""Reading input and configuration files."""

from __future__ import annotations

import logging
from os import PathLike

from .errors import ParserError

logger = logging.getLogger(__name__)


def read_file(path: str | PathLike[str]) -> str:
    """Return the UTF-8 text of ``path``; raise ParserError if it cannot be read."""
    try:
        with open(path, encoding="utf-8") as handle:
            return handle.read()
    except (OSError, UnicodeDecodeError) as exc:
        logger.error("%s", exc)
        raise ParserError.read_failed() from exc
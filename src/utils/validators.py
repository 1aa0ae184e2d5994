"""Validation helpers for arguments handed to the Transmission client.

These checks run before anything is sent so obviously malformed calls
fail locally with ``InvalidArgumentError`` instead of a daemon error.
"""

from __future__ import annotations

import re
from typing import Any

from ..exceptions import InvalidArgumentError

_HASH_REGEX = re.compile(r"^[0-9a-fA-F]{40}$")


def is_hash_string(value: Any) -> bool:
    """Return True if ``value`` looks like a SHA1 info-hash string."""
    return isinstance(value, str) and bool(_HASH_REGEX.match(value))


def _is_identifier(value: Any) -> bool:
    # bool is an int subclass but never a torrent id
    if isinstance(value, bool):
        return False
    return isinstance(value, (int, str))


def validate_ids(ids: Any) -> Any:
    """Check an identifier selector and return it unchanged.

    Parameters
    ----------
    ids: Any
        ``None`` (all torrents), an int id, a hash string, the keyword
        "recently-active", or a list/tuple of ids and hashes.

    Raises
    ------
    InvalidArgumentError
        If ``ids`` has any other shape.
    """
    if ids is None or _is_identifier(ids):
        return ids
    if isinstance(ids, (list, tuple)):
        for item in ids:
            if not _is_identifier(item):
                raise InvalidArgumentError(f"Invalid torrent id in selector: {item!r}")
        return ids
    raise InvalidArgumentError(f"Invalid torrent selector: {ids!r}")


def parse_id(text: str) -> Any:
    """Turn a command-line token into a torrent id, hash, or keyword."""
    text = text.strip()
    if text.isdigit():
        return int(text)
    if is_hash_string(text) or text == "recently-active":
        return text
    raise InvalidArgumentError(f"Not a torrent id or hash: {text!r}")

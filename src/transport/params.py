"""Normalise call arguments into the shapes the RPC wire format accepts."""

from __future__ import annotations

from typing import Any, Dict, Mapping, Optional

IDS_KEY = "ids"

# Keyword the daemon understands as "torrents active in the last minute".
RECENTLY_ACTIVE = "recently-active"


def build(params: Optional[Mapping[str, Any]] = None) -> Dict[str, Any]:
    """Return a new argument dict ready to be JSON encoded.

    Parameters
    ----------
    params: Mapping[str, Any], optional
        Arguments as given by the caller. The mapping is not modified.

    Returns
    -------
    Dict[str, Any]
        A copy of ``params`` where an absent ``ids`` selector is dropped
        instead of being sent as ``null`` and a tuple selector becomes a
        list in the same order. Duplicates are kept; the daemon handles
        them. Every other key is passed through untouched.
    """
    arguments: Dict[str, Any] = {}
    for key, value in (params or {}).items():
        if key == IDS_KEY:
            if value is None:
                continue
            if isinstance(value, tuple):
                value = list(value)
        arguments[key] = value
    return arguments

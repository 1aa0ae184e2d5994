"""Torrent record returned by ``torrent-get``."""

from __future__ import annotations

import re
from typing import Any, Dict, Iterator, List, Mapping

_CAMEL_BOUNDARY = re.compile(r"_([a-z])")


def _to_wire_name(name: str) -> str:
    """Map a snake_case attribute to the daemon's camelCase field name."""
    return _CAMEL_BOUNDARY.sub(lambda match: match.group(1).upper(), name)


class Torrent(Mapping[str, Any]):
    """Read-only view over one torrent entry.

    Fields are reachable by wire name (``torrent["hashString"]``) or as
    attributes in either spelling (``torrent.hash_string``).
    """

    FIELDS: Dict[str, List[str]] = {
        "default": [
            "id",
            "eta",
            "name",
            "status",
            "error",
            "errorString",
            "hashString",
            "isFinished",
            "isStalled",
            "percentDone",
            "rateUpload",
            "rateDownload",
            "sizeWhenDone",
            "totalSize",
            "uploadRatio",
            "uploadedEver",
            "downloadDir",
            "addedDate",
            "doneDate",
        ],
        "stats": [
            "id",
            "name",
            "peersConnected",
            "peersGettingFromUs",
            "peersSendingToUs",
            "downloadedEver",
            "uploadedEver",
            "uploadRatio",
        ],
        "files": [
            "id",
            "name",
            "files",
            "fileStats",
            "priorities",
            "wanted",
        ],
    }

    # Values of the "status" field.
    STATUS_STOPPED = 0
    STATUS_CHECK_WAIT = 1
    STATUS_CHECK = 2
    STATUS_DOWNLOAD_WAIT = 3
    STATUS_DOWNLOAD = 4
    STATUS_SEED_WAIT = 5
    STATUS_SEED = 6

    def __init__(self, data: Mapping[str, Any]):
        self._data = dict(data)

    def __getitem__(self, key: str) -> Any:
        return self._data[key]

    def __iter__(self) -> Iterator[str]:
        return iter(self._data)

    def __len__(self) -> int:
        return len(self._data)

    def __getattr__(self, name: str) -> Any:
        data = self.__dict__.get("_data", {})
        if name in data:
            return data[name]
        wire_name = _to_wire_name(name)
        if wire_name in data:
            return data[wire_name]
        raise AttributeError(f"Torrent has no field '{name}'")

    @property
    def is_stopped(self) -> bool:
        return self._data.get("status") == self.STATUS_STOPPED

    @property
    def is_done(self) -> bool:
        return self._data.get("percentDone") == 1

    def to_dict(self) -> Dict[str, Any]:
        return dict(self._data)

    def __repr__(self) -> str:
        return f"Torrent(id={self._data.get('id')!r}, name={self._data.get('name')!r})"

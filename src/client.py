"""Transmission RPC convenience operations.

Every method here builds a wire method name and an argument dict and hands
them to ``RpcClient.perform_call``. Retries, session renewal and error
translation all live in the pipeline, not here.

Wherever an ``ids`` argument is accepted it may be one torrent id, a SHA1
hash string, a list mixing both, or "recently-active". Leaving it out
targets every torrent.
"""

from __future__ import annotations

import base64
from typing import Any, Dict, Iterable, List, Optional, Union

from .exceptions import InvalidArgumentError
from .models import Torrent
from .rpc_client import RpcClient
from .utils.validators import validate_ids

TorrentIds = Union[None, int, str, List[Union[int, str]]]


class Client(RpcClient):
    """Transmission RPC client with one method per daemon operation."""

    def start_all(self) -> bool:
        return self.start()

    def start(self, ids: TorrentIds = None) -> bool:
        """Start one or more torrents."""
        self._call_with_ids("torrent-start", ids)
        return True

    def start_now(self, ids: TorrentIds = None) -> bool:
        """Start torrents immediately, bypassing the download queue."""
        self._call_with_ids("torrent-start-now", ids)
        return True

    def stop_all(self) -> bool:
        return self.stop()

    def stop(self, ids: TorrentIds = None) -> bool:
        self._call_with_ids("torrent-stop", ids)
        return True

    def verify(self, ids: TorrentIds = None) -> bool:
        self._call_with_ids("torrent-verify", ids)
        return True

    def reannounce(self, ids: TorrentIds = None) -> bool:
        self._call_with_ids("torrent-reannounce", ids)
        return True

    def set(self, ids: TorrentIds, arguments: Dict[str, Any]) -> bool:
        """Set properties of one or more torrents.

        ``arguments`` uses the daemon's "torrent-set" field names as-is.
        """
        payload = dict(arguments)
        payload["ids"] = validate_ids(ids)
        self.perform_call("torrent-set", payload)
        return True

    def get_all(self, fields: Optional[Iterable[str]] = None) -> List[Torrent]:
        return self.get(None, fields)

    def get(self, ids: TorrentIds = None, fields: Optional[Iterable[str]] = None) -> List[Torrent]:
        """Fetch torrents, all of them when ``ids`` is None.

        Without ``fields`` the ``Torrent.FIELDS["default"]`` set is requested.
        """
        fields = list(fields) if fields is not None else list(Torrent.FIELDS["default"])
        data = self.perform_call("torrent-get", {"ids": validate_ids(ids), "fields": fields})
        return [Torrent(item) for item in data.get("torrents") or []]

    def add_file(self, file: bytes, savepath: Optional[str] = None, optional_args: Optional[Dict[str, Any]] = None) -> Dict[str, Any]:
        """Add a torrent from the raw content of a .torrent file."""
        return self.add(file, True, savepath, optional_args)

    def add_url(self, url: str, savepath: Optional[str] = None, optional_args: Optional[Dict[str, Any]] = None) -> Dict[str, Any]:
        """Add a torrent by magnet URI or URL of a .torrent file."""
        return self.add(url, False, savepath, optional_args)

    def add(
        self,
        torrent: Union[str, bytes],
        metainfo: bool = False,
        savepath: Optional[str] = None,
        optional_args: Optional[Dict[str, Any]] = None,
    ) -> Dict[str, Any]:
        """Add a torrent to the download queue, started immediately.

        Parameters
        ----------
        torrent: str or bytes
            Magnet URI / URL, or the .torrent content when ``metainfo`` is True.
        metainfo: bool
            Send ``torrent`` base64 encoded as "metainfo" instead of "filename".
        savepath: str, optional
            Download directory on the daemon host.
        optional_args: dict, optional
            Extra "torrent-add" arguments, merged last.

        Returns
        -------
        dict
            The added torrent ("id", "name", "hashString"). If the daemon
            already had it, the existing torrent with ``duplicate: True``.
        """
        arguments: Dict[str, Any] = {"paused": False}
        if metainfo:
            content = torrent.encode() if isinstance(torrent, str) else torrent
            arguments["metainfo"] = base64.b64encode(content).decode("ascii")
        else:
            arguments["filename"] = torrent
        if savepath is not None:
            arguments["download-dir"] = savepath
        arguments.update(optional_args or {})

        return self.perform_call("torrent-add", arguments)

    def remove(self, ids: TorrentIds, delete_local_data: bool = False) -> bool:
        self.perform_call("torrent-remove", {"ids": validate_ids(ids), "delete-local-data": delete_local_data})
        return True

    def move(self, ids: TorrentIds, location: str, move: bool = True) -> bool:
        """Point torrents at a new location, moving the data when ``move`` is True."""
        self.perform_call("torrent-set-location", {"ids": validate_ids(ids), "location": location, "move": move})
        return True

    def rename(self, ids: TorrentIds, path: str, name: str) -> Dict[str, Any]:
        """Rename a file or folder inside a single torrent."""
        return self.perform_call("torrent-rename-path", {"ids": validate_ids(ids), "path": path, "name": name})

    def set_settings(self, arguments: Dict[str, Any]) -> bool:
        self.perform_call("session-set", arguments)
        return True

    def get_settings(self, fields: Optional[Iterable[str]] = None) -> Dict[str, Any]:
        arguments = {"fields": list(fields)} if fields is not None else {}
        return self.perform_call("session-get", arguments)

    def session_stats(self) -> Dict[str, Any]:
        return self.perform_call("session-stats")

    def update_blocklist(self) -> Dict[str, Any]:
        return self.perform_call("blocklist-update")

    def port_test(self) -> bool:
        """Whether the daemon's peer port is reachable from outside."""
        return bool(self.perform_call("port-test").get("port-is-open"))

    def close(self) -> bool:
        """Shut the daemon down."""
        self.perform_call("session-close")
        return True

    def queue_move_top(self, ids: TorrentIds = None) -> bool:
        self._call_with_ids("queue-move-top", ids)
        return True

    def queue_move_up(self, ids: TorrentIds = None) -> bool:
        self._call_with_ids("queue-move-up", ids)
        return True

    def queue_move_down(self, ids: TorrentIds = None) -> bool:
        self._call_with_ids("queue-move-down", ids)
        return True

    def queue_move_bottom(self, ids: TorrentIds = None) -> bool:
        self._call_with_ids("queue-move-bottom", ids)
        return True

    def free_space(self, path: Optional[str] = None) -> Dict[str, Any]:
        """Free space in ``path`` on the daemon host, the download dir by default."""
        if not path:
            path = self.get_settings(["download-dir"]).get("download-dir")
            if not path:
                raise InvalidArgumentError("Daemon did not report a download-dir to check")
        return self.perform_call("free-space", {"path": path})

    def seed_ratio_limit(self) -> Union[int, float]:
        """Global seed ratio limit, or -1 when the limit is disabled."""
        settings = self.get_settings(["seedRatioLimited", "seedRatioLimit"])
        if settings.get("seedRatioLimited"):
            return settings["seedRatioLimit"]
        return -1

    def update_download_dir(self, download_dir: str) -> bool:
        return self.set_settings({"download-dir": download_dir})

    def update_incomplete_dir(self, incomplete_dir: str, enable_incomplete_dir: bool = True) -> bool:
        return self.set_settings({
            "incomplete-dir-enabled": enable_incomplete_dir,
            "incomplete-dir": incomplete_dir,
        })

    def _call_with_ids(self, method: str, ids: TorrentIds) -> Any:
        return self.perform_call(method, {"ids": validate_ids(ids)})

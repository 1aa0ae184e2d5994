"""HTTP client assembled from a transport and an ordered plugin chain."""

from __future__ import annotations

from functools import partial
from typing import Dict, List, Mapping, Optional, Union

import requests

from ..exceptions import NetworkError
from ..utils.logger import get_logger
from .plugins import NextHandler, Plugin, PluginTag, PLUGIN_ORDER


class Builder:
    """Own the transport and the plugins wrapped around it.

    Parameters
    ----------
    http_client: requests.Session-like, optional
        Anything exposing ``send(prepared_request, timeout=...)``. A new
        ``requests.Session`` is created when omitted.
    timeout: float, optional
        Seconds passed to the transport for each send.
    """

    def __init__(self, http_client=None, timeout: Optional[float] = 30.0):
        self.http_client = http_client if http_client is not None else requests.Session()
        self.timeout = timeout
        self._plugins: Dict[PluginTag, Plugin] = {}
        self.logger = get_logger(self.__class__.__name__)

    def add_plugin(self, plugin: Plugin) -> "Builder":
        """Install ``plugin``, replacing any plugin with the same tag."""
        self._plugins[plugin.tag] = plugin
        return self

    def remove_plugin(self, tag: Union[PluginTag, type]) -> "Builder":
        """Drop the plugin registered under ``tag`` (a tag or a plugin class)."""
        if isinstance(tag, type):
            tag = tag.tag
        self._plugins.pop(tag, None)
        return self

    def get_plugin(self, tag: PluginTag) -> Optional[Plugin]:
        return self._plugins.get(tag)

    @property
    def plugins(self) -> List[Plugin]:
        """Installed plugins, outermost first."""
        installed = [self._plugins.get(tag) for tag in PLUGIN_ORDER]
        return [plugin for plugin in installed if plugin is not None]

    def clone(self) -> "Builder":
        """New builder on the same transport with a copy of the plugin set."""
        builder = Builder(self.http_client, timeout=self.timeout)
        builder._plugins = dict(self._plugins)
        return builder

    def send(
        self,
        method: str,
        url: str,
        headers: Optional[Mapping[str, str]] = None,
        body: Optional[Union[str, bytes]] = None,
    ) -> requests.Response:
        """Prepare a request and run it through the chain to the transport."""
        try:
            prepared = requests.Request(method, url, headers=dict(headers or {}), data=body).prepare()
        except requests.RequestException as exc:
            self.logger.error("Unable to prepare request for %s: %s", url, exc)
            raise NetworkError(str(exc)) from exc
        handler: NextHandler = self._transport
        for plugin in reversed(self.plugins):
            handler = partial(plugin.handle, next_=handler)
        return handler(prepared)

    def _transport(self, request: requests.PreparedRequest) -> requests.Response:
        self.logger.debug("%s %s", request.method, request.url)
        return self.http_client.send(request, timeout=self.timeout)

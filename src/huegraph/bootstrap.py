"""Startup sequence: version probe, full fetch, resync, then streaming.

    STARTUP -> VERSION_CHECK -> REFRESH_RESOURCES -> REFRESHED -> STREAMING
                    |                  ^                |
                    v                  +--- retry ------+
                TERMINAL
"""

import logging
from enum import Enum
from typing import Callable, Optional

from huegraph.api.bridge_client import BridgeReply
from huegraph.context import BridgeContext

logger = logging.getLogger(__name__)

CONFIG_PATH = "/api/config"
RESOURCE_PATH = "/clip/v2/resource"


class BootState(str, Enum):
    STARTUP = "startup"
    VERSION_CHECK = "version_check"
    REFRESH_RESOURCES = "refresh_resources"
    REFRESHED = "refreshed"
    STREAMING = "streaming"
    TERMINAL = "terminal"


class BootstrapProtocol:
    def __init__(self, context: BridgeContext, start_stream: Callable[[], None],
                 on_ready: Optional[Callable[[], None]] = None):
        self.context = context
        self._start_stream = start_stream
        self._on_ready = on_ready
        self.state = BootState.STARTUP

    @property
    def retry_delay(self) -> float:
        return self.context.settings.retry_delay

    def _enter(self, state: BootState) -> None:
        logger.debug("Bootstrap %s -> %s", self.state.value, state.value)
        self.state = state

    def start(self) -> None:
        self._enter(BootState.STARTUP)
        self.context.client.get(CONFIG_PATH, self.on_version)

    def on_version(self, reply: BridgeReply) -> None:
        self._enter(BootState.VERSION_CHECK)
        if not reply.ok:
            logger.error("%s %s, retry in %ss", CONFIG_PATH, reply.error, self.retry_delay)
            self.context.dispatcher.post(self.start, delay=self.retry_delay)
            return

        try:
            swversion = int((reply.result or {})["swversion"])
        except (KeyError, TypeError, ValueError):
            logger.error("%s: no usable swversion in %r, retry in %ss", CONFIG_PATH, reply.result, self.retry_delay)
            self.context.dispatcher.post(self.start, delay=self.retry_delay)
            return

        minimum = self.context.settings.min_sw_version
        if swversion < minimum:
            logger.warning("V2 api not available (%s < %s)", swversion, minimum)
            self._enter(BootState.TERMINAL)
            return

        logger.info("V2 api available (%s)", swversion)
        self.context.new_registry()
        self.context.dispatcher.post(self.refresh)

    def refresh(self) -> None:
        self._enter(BootState.REFRESH_RESOURCES)
        self.context.client.get(RESOURCE_PATH, self.on_resources)

    def on_resources(self, reply: BridgeReply) -> None:
        self._enter(BootState.REFRESHED)
        listing = reply.result.get("data") if isinstance(reply.result, dict) else None
        if not reply.ok or not isinstance(listing, list):
            logger.error("%s %s", RESOURCE_PATH, reply.error or f"unexpected listing {reply.result!r:.80}")
            logger.error("Retry in %ss", self.retry_delay)
            self.context.dispatcher.post(self.refresh, delay=self.retry_delay)
            return

        self.context.registry.resync(listing)
        logger.info("%d resources loaded", len(self.context.registry))

        callback, self._on_ready = self._on_ready, None
        self._start_stream()
        self._enter(BootState.STREAMING)
        if callback is not None:
            callback()

import logging
import threading
from concurrent.futures import Executor
from typing import Any, Callable, Optional

from huegraph.api.bridge_client import BridgeClient
from huegraph.api.event_stream import EventStreamConsumer
from huegraph.api.http_client import HttpClient
from huegraph.bootstrap import BootstrapProtocol
from huegraph.config import BridgeSettings
from huegraph.context import BridgeContext
from huegraph.dispatch import Dispatcher
from huegraph.errors import UnknownCommandError, UnknownPropertyError, UnknownResourceError
from huegraph.repo.hue_repository import HueRepository
from huegraph.resources.kinds import ResourceKind
from huegraph.resources.node import ResourceNode
from huegraph.resources.registry import ResourceRegistry
from huegraph.services.group_service import GroupService

logger = logging.getLogger(__name__)


class HueEngine:
    """Live mirror of one bridge.

    Lookups read the registry directly. Subscriptions and commands are
    posted onto the dispatcher so they run in order with incoming events.
    """

    def __init__(self, settings: BridgeSettings, *, http: Optional[HttpClient] = None,
                 dispatcher: Optional[Dispatcher] = None, executor: Optional[Executor] = None):
        self.settings = settings
        http = http or HttpClient(settings.base_url, settings.headers)
        dispatcher = dispatcher or Dispatcher()
        client = BridgeClient(http, dispatcher, executor=executor, timeout=settings.timeout)
        self.context = BridgeContext(settings=settings, dispatcher=dispatcher, client=client)
        self.stream = EventStreamConsumer(
            http, dispatcher, lambda: self.context.registry,
            framing=settings.stream_framing,
            read_timeout=settings.stream_timeout,
            connect_timeout=settings.timeout,
            reconnect_delay=settings.reconnect_delay,
        )
        self.bootstrap: Optional[BootstrapProtocol] = None
        self._thread: Optional[threading.Thread] = None

    @property
    def dispatcher(self) -> Dispatcher:
        return self.context.dispatcher

    @property
    def registry(self) -> ResourceRegistry:
        if self.context.registry is None:
            raise UnknownResourceError("bridge resources not loaded yet")
        return self.context.registry

    @property
    def repository(self) -> HueRepository:
        return HueRepository(self.registry)

    @property
    def groups(self) -> GroupService:
        return GroupService(self.registry)

    # ---- lifecycle
    def start(self, on_ready: Optional[Callable[[], None]] = None) -> None:
        logger.info("Hub url: %s", self.settings.base_url)
        self.bootstrap = BootstrapProtocol(self.context, self.stream.start, on_ready)
        self.dispatcher.post(self.bootstrap.start)

    def run_forever(self) -> None:
        self.dispatcher.run_forever()

    def run_in_background(self) -> None:
        if self._thread and self._thread.is_alive():
            return
        self._thread = threading.Thread(target=self.dispatcher.run_forever, daemon=True, name="hue-dispatch")
        self._thread.start()

    def stop(self) -> None:
        self.stream.stop()
        self.dispatcher.stop()
        self.context.client.shutdown()

    # ---- upward interface
    def get_resource(self, rid: str) -> Optional[ResourceNode]:
        return self.context.registry.get(rid) if self.context.registry else None

    def get_resources(self, kind: ResourceKind | str) -> dict[str, ResourceNode]:
        return self.context.registry.of_kind(kind) if self.context.registry else {}

    def resource_ids(self) -> set[str]:
        return self.context.registry.ids() if self.context.registry else set()

    def _node(self, rid: str) -> ResourceNode:
        node = self.get_resource(rid)
        if node is None:
            raise UnknownResourceError(f"no resource {rid!r}")
        return node

    def subscribe(self, rid: str, key: str, listener: Callable[[str, Any, ResourceNode], None]) -> None:
        node = self._node(rid)
        if key not in node.get_capabilities():
            raise UnknownPropertyError(f"{node} has no property {key!r}")
        self.dispatcher.post(node.subscribe, key, listener)

    def unsubscribe(self, rid: str, key: str, listener) -> None:
        self.dispatcher.post(self._unsubscribe, rid, key, listener)

    def _unsubscribe(self, rid: str, key: str, listener) -> None:
        node = self.get_resource(rid)
        if node is not None:
            node.unsubscribe(key, listener)

    def issue_command(self, rid: str, name: str, *args, **kwargs) -> None:
        if self._node(rid).resolve_command(name) is None:
            raise UnknownCommandError(f"{rid} has no command {name!r}")
        self.dispatcher.post(self._issue, rid, name, args, kwargs)

    def _issue(self, rid: str, name: str, args: tuple, kwargs: dict) -> None:
        node = self.get_resource(rid)
        target = node.resolve_command(name) if node is not None else None
        if target is None:
            logger.warning("Command %s for %s dropped, resource is gone", name, rid)
            return
        logger.debug("Command %s%s -> %s", name, args, target)
        getattr(target, name)(*args, **kwargs)

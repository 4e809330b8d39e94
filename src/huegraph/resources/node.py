import copy
import logging
from typing import TYPE_CHECKING, Any, Callable, Optional

from huegraph.errors import UnknownPropertyError
from huegraph.models.resource import ResourceFrame, ResourceRef
from huegraph.resources.capabilities import Capability, CapabilityTable, table_for
from huegraph.resources.kinds import ResourceKind

if TYPE_CHECKING:
    from huegraph.resources.registry import ResourceRegistry

logger = logging.getLogger(__name__)

Listener = Callable[[str, Any, "ResourceNode"], None]
ChildWatcher = Callable[["ResourceNode", "ResourceNode"], None]


class _AllListeners:
    def __repr__(self):
        return "ALL"


# unsubscribe(key, ALL) entfernt alle Listener für key
ALL = _AllListeners()


class InertResource:
    """What a reference resolves to when the target is not (or no longer) known."""

    kind = None
    name = None
    archetype = None
    owner = None
    services = None
    children = ()

    def __init__(self, rid: Optional[str] = None):
        self.id = rid

    def __bool__(self):
        return False

    def __repr__(self):
        return f"[missing:{self.id}]"

    def display_name(self, default: Optional[str] = None) -> Optional[str]:
        return default

    def get_capabilities(self) -> dict[str, Capability]:
        return {}

    def get_commands(self) -> dict[str, Any]:
        return {}

    def resolve_command(self, name: str):
        return None

    def subscribe(self, key: str, listener: Listener) -> None:
        pass

    def unsubscribe(self, key: str, listener) -> None:
        pass

    def publish_current(self) -> None:
        pass

    def publish_all(self) -> None:
        pass

    def child_changed(self, child: "ResourceNode") -> None:
        pass


class ResourceNode:
    """One live resource of the bridge graph.

    Relationships (`owner`, `services`, `children`) are kept as references
    and resolved through the registry on every use, so a node never holds
    another node directly.
    """

    archetype: Optional[str] = None

    def __init__(self, kind: ResourceKind, raw: dict, registry: "ResourceRegistry"):
        self.kind = kind
        self._registry = registry
        self._listeners: dict[str, set[Listener]] = {}
        self._child_watchers: list[ChildWatcher] = []
        self.setup(raw)

    def setup(self, raw: dict) -> None:
        frame = ResourceFrame.model_validate(raw)
        self.id = frame.id
        self.raw = copy.deepcopy(raw)
        self.id_v1 = frame.id_v1
        self.owner: Optional[ResourceRef] = frame.owner
        self.services: Optional[list[ResourceRef]] = frame.services
        self.children: list[ResourceRef] = frame.children
        self.metadata = frame.metadata
        self.product_data = frame.product_data
        self.name = frame.metadata.name
        self.resource_type = frame.product_data.model_id or frame.metadata.archetype or "unknown"
        self.resource_name = frame.product_data.product_name
        self.path = f"/clip/v2/resource/{self.kind.value}/{self.id}"
        self.capabilities: CapabilityTable = table_for(self.kind)
        logger.debug("Setup %s '%s' %s", self.id, self.kind.value, self.name or "rsrc")

    # ---- lifecycle hooks, called by the registry
    def added(self) -> None:
        logger.debug("Created %s", self)

    def modified(self, raw: dict) -> None:
        self.setup(raw)
        logger.debug("Modified %s", self)

    def deleted(self) -> None:
        logger.debug("Deleted %s", self)

    # ---- relationships
    def resolve(self, ref):
        return self._registry.resolve(ref)

    def resolved_services(self) -> list:
        return [self.resolve(ref) for ref in self.services or ()]

    def resolved_children(self) -> list:
        return [self.resolve(ref) for ref in self.children]

    def find_services(self, kind: ResourceKind) -> list["ResourceNode"]:
        return [s for s in self.resolved_services() if s.kind == kind]

    @property
    def is_composite(self) -> bool:
        return self.services is not None

    def display_name(self, default: Optional[str] = None) -> Optional[str]:
        if self.name:
            return self.name
        if self.owner:
            return self.resolve(self.owner).name or default
        return default

    # ---- capabilities
    def get_capabilities(self) -> dict[str, Capability]:
        """Own properties, then those of each service; the first declaration of a key wins."""
        merged = dict(self.capabilities.properties)
        for service in self.resolved_services():
            for key, cap in service.get_capabilities().items():
                merged.setdefault(key, cap)
        return merged

    def get_commands(self) -> dict[str, "ResourceNode"]:
        """Command name -> node that implements it, own commands first."""
        merged = {name: self for name in self.capabilities.commands}
        for service in self.resolved_services():
            for name, target in service.get_commands().items():
                merged.setdefault(name, target)
        return merged

    def resolve_command(self, name: str) -> Optional["ResourceNode"]:
        if name in self.capabilities.commands:
            return self
        for service in self.resolved_services():
            target = service.resolve_command(name)
            if target is not None:
                return target
        return None

    def send_command(self, payload: dict) -> None:
        self._registry.send(self.path, payload)

    # ---- state
    def get(self, key: str) -> Any:
        cap = self.capabilities.properties.get(key)
        if cap is None:
            raise UnknownPropertyError(f"{self} has no property {key!r}")
        return cap.get(self.raw)

    def apply_delta(self, delta: dict) -> None:
        logger.debug("Event %s: %s", self, delta)
        self.handle_delta(delta)
        if self.owner:
            self.resolve(self.owner).child_changed(self)

    def handle_delta(self, delta: dict) -> None:
        """Per-property walk; kinds with aggregate state override this."""
        for key, cap in self.capabilities.properties.items():
            if cap.field not in delta:
                continue
            changed, value = cap.changed(self.raw, delta)
            if changed:
                cap.set(self.raw, value)
                self.publish(key, value)

    def child_changed(self, child: "ResourceNode") -> None:
        for watcher in list(self._child_watchers):
            try:
                watcher(self, child)
            except Exception:
                logger.exception("Child watcher failed on %s", self)

    def watch_children(self, watcher: ChildWatcher) -> None:
        if watcher not in self._child_watchers:
            self._child_watchers.append(watcher)

    def unwatch_children(self, watcher: ChildWatcher) -> None:
        if watcher in self._child_watchers:
            self._child_watchers.remove(watcher)

    # ---- subscriptions
    def publish(self, key: str, value: Any) -> None:
        for listener in list(self._listeners.get(key, ())):
            try:
                listener(key, value, self)
            except Exception:
                logger.exception("Listener for %s on %s failed", key, self)

    def publish_current(self) -> None:
        for key, cap in self.capabilities.properties.items():
            if cap.field in self.raw:
                self.publish(key, cap.get(self.raw))

    def publish_all(self) -> None:
        if self.is_composite:
            for service in self.resolved_services():
                service.publish_current()
        else:
            self.publish_current()
        if self.owner:
            self.resolve(self.owner).child_changed(self)

    def subscribe(self, key: str, listener: Listener) -> None:
        if self.is_composite:
            targets = [s for s in self.resolved_services() if key in s.get_capabilities()]
            if not targets:
                raise UnknownPropertyError(f"no service of {self} has property {key!r}")
            for service in targets:
                service.subscribe(key, listener)
            return
        if key not in self.capabilities.properties:
            raise UnknownPropertyError(f"{self} has no property {key!r}")
        self._listeners.setdefault(key, set()).add(listener)

    def unsubscribe(self, key: str, listener) -> None:
        for service in self.resolved_services():
            service.unsubscribe(key, listener)
        listeners = self._listeners.get(key)
        if not listeners:
            return
        if listener is ALL:
            listeners.clear()
        else:
            listeners.discard(listener)

    def listener_count(self, key: str) -> int:
        return len(self._listeners.get(key, ()))

    def __repr__(self):
        return f"[{self.kind.value}:{self.id},{self.display_name('')}]"

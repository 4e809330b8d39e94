import logging
from enum import Enum
from typing import Callable, Iterable, Iterator, Optional

from pydantic import ValidationError

from huegraph.models.resource import ResourceRef
from huegraph.resources.kinds import ResourceKind
from huegraph.resources.node import InertResource, ResourceNode
from huegraph.resources.types import create_node

logger = logging.getLogger(__name__)

Sender = Callable[[str, dict], None]


class RegistryEvent(str, Enum):
    ADDED = "added"
    MODIFIED = "modified"
    DELETED = "deleted"
    BEFORE_CHANGE = "before_change"


class ResourceRegistry:
    """Owns every ResourceNode of one bridge, indexed by id and by kind."""

    def __init__(self, sender: Optional[Sender] = None):
        self._by_id: dict[str, ResourceNode] = {}
        self._by_kind: dict[ResourceKind, dict[str, ResourceNode]] = {}
        self._hooks: dict[RegistryEvent, list[Callable]] = {event: [] for event in RegistryEvent}
        self._sender = sender

    # ---- hooks
    def watch(self, event: RegistryEvent, fn: Callable) -> None:
        self._hooks[RegistryEvent(event)].append(fn)

    def unwatch(self, event: RegistryEvent, fn: Callable) -> None:
        hooks = self._hooks[RegistryEvent(event)]
        if fn in hooks:
            hooks.remove(fn)

    def _fire(self, event: RegistryEvent, *args) -> None:
        for fn in list(self._hooks[event]):
            try:
                fn(*args)
            except Exception:
                logger.exception("%s hook failed", event.value)

    def notify_before_change(self) -> None:
        self._fire(RegistryEvent.BEFORE_CHANGE)

    # ---- mutation
    def add(self, rid: str, raw: dict) -> Optional[ResourceNode]:
        if rid in self._by_id:
            return self.modify(rid, raw)

        kind = ResourceKind.parse(raw.get("type"))
        if kind is None:
            logger.warning("Missing resource type: %s (%s)", raw.get("type"), rid)
            return None
        try:
            node = create_node(kind, raw, self)
        except ValidationError as e:
            logger.warning("Malformed %s resource %s skipped: %s", kind.value, rid, e)
            return None

        self._by_id[rid] = node
        self._by_kind.setdefault(kind, {})[rid] = node
        node.added()
        self._fire(RegistryEvent.ADDED, node)
        return node

    def modify(self, rid: str, raw: dict) -> Optional[ResourceNode]:
        node = self._by_id.get(rid)
        if node is None:
            logger.error("No resource %s to modify", rid)
            return None

        raw_type = raw.get("type", node.kind.value)
        if raw_type != node.kind.value:
            logger.warning("Resource %s changed type %s -> %s", rid, node.kind.value, raw_type)
            self.delete(rid)
            return self.add(rid, raw)

        try:
            node.modified(dict(raw, type=raw_type))
        except ValidationError as e:
            logger.warning("Malformed update for %s ignored: %s", node, e)
            return node
        self._fire(RegistryEvent.MODIFIED, node)
        return node

    def delete(self, rid: str) -> None:
        node = self._by_id.get(rid)
        if node is None:
            logger.error("No resource %s to delete", rid)
            return
        node.deleted()
        self._fire(RegistryEvent.DELETED, node)
        del self._by_kind[node.kind][rid]
        del self._by_id[rid]

    def resync(self, entries: Iterable[dict]) -> None:
        """Reconcile with a complete listing: add/modify what is listed, delete the rest."""
        dirty = set(self._by_id)
        for raw in entries:
            rid = raw.get("id") if isinstance(raw, dict) else None
            if not rid:
                logger.warning("Resource without id in listing: %s", raw)
                continue
            dirty.discard(rid)
            self.add(rid, raw)
        for rid in dirty:
            if rid in self._by_id:
                self.delete(rid)
        logger.debug("Resync done, %d resources", len(self._by_id))

    # ---- lookup
    def get(self, rid: str) -> Optional[ResourceNode]:
        return self._by_id.get(rid)

    def resolve(self, ref):
        """Node for a reference ({rid, rtype}, ResourceRef or plain id); InertResource if unknown."""
        if isinstance(ref, ResourceRef):
            rid = ref.rid
        elif isinstance(ref, dict):
            rid = ref.get("rid")
        else:
            rid = ref
        return self._by_id.get(rid) or InertResource(rid)

    def of_kind(self, kind: ResourceKind) -> dict[str, ResourceNode]:
        return dict(self._by_kind.get(ResourceKind(kind), {}))

    def ids(self) -> set[str]:
        return set(self._by_id)

    def __len__(self):
        return len(self._by_id)

    def __contains__(self, rid):
        return rid in self._by_id

    def __iter__(self) -> Iterator[ResourceNode]:
        return iter(list(self._by_id.values()))

    # ---- outbound
    def send(self, path: str, payload: dict) -> None:
        if self._sender is None:
            logger.warning("No bridge connection, dropping %s %s", path, payload)
            return
        self._sender(path, payload)

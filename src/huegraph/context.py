from dataclasses import dataclass
from typing import Optional

from huegraph.api.bridge_client import BridgeClient
from huegraph.config import BridgeSettings
from huegraph.dispatch import Dispatcher
from huegraph.resources.registry import ResourceRegistry


@dataclass
class BridgeContext:
    """Everything that belongs to one bridge connection.

    The registry is None until the version check passes and is replaced
    whenever the bootstrap starts over.
    """
    settings: BridgeSettings
    dispatcher: Dispatcher
    client: BridgeClient
    registry: Optional[ResourceRegistry] = None

    def new_registry(self) -> ResourceRegistry:
        self.registry = ResourceRegistry(sender=self.client.put)
        return self.registry

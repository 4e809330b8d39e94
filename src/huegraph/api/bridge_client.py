import logging
from concurrent.futures import Executor, ThreadPoolExecutor
from dataclasses import dataclass
from typing import Any, Callable

from huegraph.api.http_client import HttpClient
from huegraph.dispatch import Dispatcher
from huegraph.errors import BridgeRequestError

logger = logging.getLogger(__name__)


@dataclass
class BridgeReply:
    result: Any = None
    error: Exception | None = None

    @property
    def ok(self) -> bool:
        return self.error is None


class BridgeClient:
    """Non-blocking requests against the bridge.

    GET results come back as a BridgeReply posted onto the dispatcher, the
    same timeline the event stream uses. PUTs are fire-and-forget.
    """

    def __init__(self, http: HttpClient, dispatcher: Dispatcher, *,
                 executor: Executor | None = None, timeout: float = 5):
        self.http = http
        self.dispatcher = dispatcher
        self.timeout = timeout
        self._executor = executor or ThreadPoolExecutor(max_workers=4, thread_name_prefix="hue-http")

    def get(self, path: str, reply: Callable[[BridgeReply], None]) -> None:
        self._executor.submit(self._get, path, reply)

    def _get(self, path: str, reply: Callable[[BridgeReply], None]):
        try:
            result = BridgeReply(result=self.http.get(path, timeout=self.timeout))
        except BridgeRequestError as e:
            result = BridgeReply(error=e)
        self.dispatcher.post(reply, result)

    def put(self, path: str, body: dict | None, method: str = "PUT") -> None:
        self._executor.submit(self._put, path, body, method)

    def _put(self, path: str, body: dict | None, method: str):
        try:
            js = self.http.request(method, path, body, timeout=self.timeout)
        except BridgeRequestError as e:
            logger.error("hue call %s %s %s - %s", method, path, body, e)
            return
        if isinstance(js, dict) and js.get("errors"):
            logger.warning("hue call %s %s rejected: %s", method, path, js["errors"])

    def shutdown(self):
        self._executor.shutdown(wait=False)
        self.http.close()

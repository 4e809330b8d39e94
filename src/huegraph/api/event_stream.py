"""Consumer of the bridge's push feed (/eventstream/clip/v2).

Two framings exist in the wild:

* ``json``: every read returns one bare JSON array of batch events.
* ``sse``: a text/event-stream with ``: hi`` keep-alive comments and
  ``data:`` lines that carry the JSON array.

Unless pinned in the settings, the framing is probed from the first
response's Content-Type. Decoded batches are posted onto the dispatcher
and applied to the registry there.
"""

import json
import logging
import threading
from enum import Enum
from typing import Callable, Iterable, Iterator, Optional

import requests

from huegraph.api.http_client import HttpClient
from huegraph.dispatch import Dispatcher
from huegraph.errors import BridgeRequestError, StreamDecodeError
from huegraph.resources.registry import ResourceRegistry

logger = logging.getLogger(__name__)

EVENTSTREAM_PATH = "/eventstream/clip/v2"


class StreamFraming(str, Enum):
    JSON = "json"
    SSE = "sse"


def probe_framing(content_type: Optional[str]) -> StreamFraming:
    if content_type and content_type.split(";")[0].strip().lower() == "text/event-stream":
        return StreamFraming.SSE
    return StreamFraming.JSON


def decode_json_read(text: str) -> list:
    try:
        data = json.loads(text)
    except ValueError as e:
        raise StreamDecodeError(f"undecodable stream read: {text[:80]!r}") from e
    if not isinstance(data, list):
        raise StreamDecodeError(f"expected a JSON array, got {type(data).__name__}")
    return data


def decode_sse_block(block: str) -> list:
    """Batch events of one SSE block; keep-alives and id-only blocks give []."""
    start, end = block.find("["), block.rfind("]")
    if start < 0:
        return []
    if end < start:
        raise StreamDecodeError(f"unterminated array in {block[:80]!r}")
    return decode_json_read(block[start:end + 1])


def iter_sse_blocks(lines: Iterable[str]) -> Iterator[str]:
    """Group stream lines into blocks separated by blank lines."""
    block: list[str] = []
    for line in lines:
        if line:
            block.append(line)
        elif block:
            yield "\n".join(block)
            block = []
    if block:
        yield "\n".join(block)


class EventStreamConsumer:
    def __init__(self, http: HttpClient, dispatcher: Dispatcher,
                 registry: Callable[[], Optional[ResourceRegistry]], *,
                 framing: str = "auto", read_timeout: float = 60.0,
                 connect_timeout: float = 5.0, reconnect_delay: float = 1.0):
        self.http = http
        self.dispatcher = dispatcher
        self._registry = registry
        self.framing: Optional[StreamFraming] = None if framing == "auto" else StreamFraming(framing)
        self._timeout = (connect_timeout, read_timeout)
        self.reconnect_delay = reconnect_delay
        self._stopped = threading.Event()
        self._thread: Optional[threading.Thread] = None

    @property
    def accept(self) -> str:
        return "application/json" if self.framing is StreamFraming.JSON else "text/event-stream"

    def start(self) -> None:
        if self._thread and self._thread.is_alive():
            return
        self._stopped.clear()
        self._thread = threading.Thread(target=self._run, daemon=True, name="hue-eventstream")
        self._thread.start()
        logger.info("Event stream started")

    def stop(self) -> None:
        self._stopped.set()

    # ---- reader thread
    def _run(self) -> None:
        # Jeder Fehler ist vorübergehend: neu verbinden, ohne Obergrenze
        while not self._stopped.is_set():
            try:
                self.read_once()
            except requests.Timeout:
                logger.debug("%s: read timeout", EVENTSTREAM_PATH)
            except StreamDecodeError as e:
                logger.warning("%s: %s", EVENTSTREAM_PATH, e)
            except (requests.RequestException, BridgeRequestError) as e:
                logger.error("%s: %s", EVENTSTREAM_PATH, e)
            except Exception:
                logger.exception("%s: reader failed", EVENTSTREAM_PATH)
            if self._stopped.wait(self.reconnect_delay):
                break

    def read_once(self) -> None:
        """One connection: read until the bridge closes it or the read times out."""
        response = self.http.open_stream(EVENTSTREAM_PATH, accept=self.accept, timeout=self._timeout)
        with response:
            # Die Bridge sendet UTF-8, auch ohne charset im Content-Type
            response.encoding = "utf-8"
            if self.framing is None:
                self.framing = probe_framing(response.headers.get("Content-Type"))
                logger.info("Event stream framing: %s", self.framing.value)

            if self.framing is StreamFraming.JSON:
                self._deliver(decode_json_read(response.text))
                return

            for block in iter_sse_blocks(response.iter_lines(decode_unicode=True)):
                if self._stopped.is_set():
                    return
                try:
                    events = decode_sse_block(block)
                except StreamDecodeError as e:
                    logger.warning("%s: skipping block: %s", EVENTSTREAM_PATH, e)
                    continue
                self._deliver(events)

    def _deliver(self, events: list) -> None:
        if events:
            self.dispatcher.post(self.handle_events, events)

    # ---- timeline
    def handle_events(self, events: list) -> None:
        registry = self._registry()
        if registry is None:
            logger.warning("Event batch before registry exists, dropped")
            return

        for event in events:
            if not isinstance(event, dict):
                logger.warning("Malformed batch event: %r", event)
                continue
            kind = event.get("type")
            if kind not in ("update", "add", "delete"):
                logger.debug("New v2 event type: %s %s", kind, event)
                continue
            data = event.get("data") or []
            if not isinstance(data, list):
                logger.warning("Malformed %s data: %r", kind, data)
                continue
            for entry in data:
                if not isinstance(entry, dict) or not entry.get("id"):
                    logger.warning("Malformed %s entry skipped: %r", kind, entry)
                    continue
                self._apply(registry, kind, entry)

    def _apply(self, registry: ResourceRegistry, kind: str, entry: dict) -> None:
        rid = entry["id"]
        if kind == "update":
            node = registry.get(rid)
            if node is not None:
                node.apply_delta(entry)
            else:
                logger.debug("Update for unknown resource %s (%s)", rid, entry.get("type"))
            return
        registry.notify_before_change()
        if kind == "add":
            registry.add(rid, entry)
        else:
            registry.delete(rid)

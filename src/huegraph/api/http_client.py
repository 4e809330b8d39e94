import logging

import requests
import urllib3

from huegraph.errors import BridgeRequestError

# Die Bridge nutzt ein selbstsigniertes Zertifikat (im LAN ok)
urllib3.disable_warnings(urllib3.exceptions.InsecureRequestWarning)

logger = logging.getLogger(__name__)


class HttpClient:
    """Blocking transport to the bridge's REST surface."""

    def __init__(self, base_url: str, headers: dict[str, str]):
        self.session = requests.Session()
        self.session.verify = False
        self.base_url = base_url.rstrip("/")
        self.headers = headers

    def url(self, path: str) -> str:
        return f"{self.base_url}/{path.lstrip('/')}"

    def get(self, path: str, *, timeout: float = 5):
        return self.request("GET", path, timeout=timeout)

    def put(self, path: str, payload: dict, *, timeout: float = 5):
        return self.request("PUT", path, payload, timeout=timeout)

    def request(self, method: str, path: str, payload: dict | None = None, *, timeout: float = 5):
        """Send one request and return the decoded JSON body (None if there is none)."""
        url = self.url(path)
        logger.debug("%s %s %s", method, url, payload if payload is not None else "")
        try:
            r = self.session.request(method, url, json=payload, headers=self.headers, timeout=timeout)
        except requests.RequestException as e:
            raise BridgeRequestError(f"{method} {path}: {e}") from e

        try:
            r.raise_for_status()
        except requests.HTTPError as e:
            raise BridgeRequestError(f"{method} {path}: HTTP {r.status_code} {r.text[:200]}", status=r.status_code) from e

        if not r.content:
            return None
        try:
            return r.json()
        except ValueError as e:
            raise BridgeRequestError(f"{method} {path}: response is not JSON", status=r.status_code) from e

    def open_stream(self, path: str, *, accept: str, timeout: tuple[float, float]) -> requests.Response:
        """Open a streaming GET; the caller owns (and closes) the response."""
        headers = dict(self.headers, Accept=accept)
        r = self.session.get(self.url(path), headers=headers, stream=True, timeout=timeout)
        try:
            r.raise_for_status()
        except requests.HTTPError as e:
            r.close()
            raise BridgeRequestError(f"GET {path}: HTTP {r.status_code}", status=r.status_code) from e
        return r

    def close(self):
        self.session.close()

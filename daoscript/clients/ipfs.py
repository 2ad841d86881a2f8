"""
Content-addressed artifact fetcher.

Retrieves files from an IPFS gateway and caches the decoded JSON by URL
for the lifetime of the resolver.
"""

from __future__ import annotations

import logging
from typing import Any, Dict, Optional

import requests

from daoscript.config import DEFAULT_IPFS_GATEWAY
from daoscript.errors import ErrorException

logger = logging.getLogger(__name__)


def content_id_from_uri(content_uri: str) -> str:
    """``ipfs:Qm...`` -> ``Qm...``; bare CIDs pass through."""
    return content_uri.split(":", 1)[1] if ":" in content_uri else content_uri


class IPFSResolver:
    def __init__(self, gateway: str = DEFAULT_IPFS_GATEWAY, timeout: float = 30.0,
                 session: Optional[requests.Session] = None):
        self.gateway = gateway if gateway.endswith("/") else gateway + "/"
        self.timeout = timeout
        self.session = session or requests.Session()
        self._cache: Dict[str, Any] = {}

    def resolve(self, cid: str, path: str = "") -> str:
        url = f"{self.gateway}{cid}"
        return f"{url}/{path.lstrip('/')}" if path else url

    def json(self, cid: str, path: str = "") -> Any:
        url = self.resolve(cid, path)
        if url in self._cache:
            return self._cache[url]

        logger.debug("Fetching %s", url)
        try:
            response = self.session.get(url, timeout=self.timeout)
            response.raise_for_status()
            data = response.json()
        except (requests.RequestException, ValueError) as e:
            raise ErrorException(f"An error happened while fetching {url}: {e}") from e

        self._cache[url] = data
        return data

    def fetch_artifact(self, content_uri: str) -> Dict[str, Any]:
        """Fetch the ``artifact.json`` descriptor of an app version."""
        return self.json(content_id_from_uri(content_uri), "artifact.json")

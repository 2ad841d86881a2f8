"""
Chain access: a minimal JSON-RPC provider and the signer (identity handle).

The interpreter only reads from the chain: the chain id, an account's
transaction count and the result of ``eth_call``.
"""

from __future__ import annotations

import itertools
import logging
from typing import Any, List, Optional

import requests
from eth_utils import to_bytes

from daoscript.chain.address import checksum, is_valid_address
from daoscript.errors import ErrorException, ErrorInvalid

logger = logging.getLogger(__name__)


class JsonRpcProvider:
    """JSON-RPC client over HTTP."""

    def __init__(self, url: str, timeout: float = 30.0,
                 session: Optional[requests.Session] = None):
        self.url = url
        self.timeout = timeout
        self.session = session or requests.Session()
        self._ids = itertools.count(1)
        self._chain_id: Optional[int] = None

    def request(self, method: str, params: List[Any]) -> Any:
        payload = {"jsonrpc": "2.0", "id": next(self._ids), "method": method, "params": params}
        logger.debug("RPC %s %s", method, params)
        try:
            response = self.session.post(self.url, json=payload, timeout=self.timeout)
            response.raise_for_status()
            body = response.json()
        except (requests.RequestException, ValueError) as e:
            raise ErrorException(f"An error happened while calling {method}: {e}") from e

        error = body.get("error")
        if error:
            message = error.get("message", error) if isinstance(error, dict) else error
            raise ErrorException(f"An error happened while calling {method}: {message}")
        return body.get("result")

    def get_chain_id(self) -> int:
        if self._chain_id is None:
            self._chain_id = int(self.request("eth_chainId", []), 16)
        return self._chain_id

    def get_transaction_count(self, address: str, block: str = "latest") -> int:
        return int(self.request("eth_getTransactionCount", [checksum(address), block]), 16)

    def call(self, to: str, data: str, block: str = "latest") -> bytes:
        result = self.request("eth_call", [{"to": checksum(to), "data": data}, block])
        return to_bytes(hexstr=result or "0x")


class Signer:
    """
    Identity handle of the session: the account actions are built for,
    plus read access to the chain through its provider.
    """

    def __init__(self, provider: JsonRpcProvider, address: str):
        if not is_valid_address(address):
            raise ErrorInvalid(f"invalid signer address {address}")
        self.provider = provider
        self.address = checksum(address)

    def get_address(self) -> str:
        return self.address

    def get_chain_id(self) -> int:
        return self.provider.get_chain_id()

    def get_transaction_count(self, address: Optional[str] = None) -> int:
        return self.provider.get_transaction_count(address or self.address)

"""
Address helpers and contract-address prediction.

A contract created by ``deployer`` with nonce ``n`` lives at
``keccak256(rlp([deployer, n]))[12:]``.
"""

from __future__ import annotations

from typing import Any, Optional

import rlp
from eth_utils import is_address, keccak, to_bytes, to_checksum_address

ZERO_ADDRESS = "0x0000000000000000000000000000000000000000"


def is_valid_address(value: Any) -> bool:
    return isinstance(value, str) and is_address(value)


def checksum(address: str) -> str:
    return to_checksum_address(address)


def addresses_equal(a: Optional[str], b: Optional[str]) -> bool:
    if not a or not b:
        return False
    return a.lower() == b.lower()


def calculate_new_proxy_address(deployer: str, nonce: int) -> str:
    """Predict the address of the contract ``deployer`` creates at ``nonce``."""
    if nonce < 0:
        raise ValueError("nonce must be non-negative")
    encoded = rlp.encode([to_bytes(hexstr=deployer), nonce])
    return to_checksum_address(keccak(encoded)[12:])

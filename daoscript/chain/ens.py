"""
ENS helpers: namehash and forward resolution through a registry contract.
"""

from __future__ import annotations

import logging
from typing import Optional, TYPE_CHECKING

from eth_utils import keccak, to_hex

from daoscript.chain.abi import decode_result, encode_function_call
from daoscript.chain.address import ZERO_ADDRESS, addresses_equal, checksum
from daoscript.errors import ErrorException

if TYPE_CHECKING:
    from daoscript.providers import JsonRpcProvider

logger = logging.getLogger(__name__)

# ENS registries that hold the aragonpm.eth / aragonid.eth names per chain id.
ARAGON_ENS_REGISTRIES = {
    1: "0x314159265dd8dbb310642f98f50c066173c1259b",
    4: "0x98df287b6c145399aaa709692c8d308357bc085d",
    100: "0xaafca6b0c89521752e559650206d7c925fd0e530",
    137: "0x3c70a0190d09f34519e6e218364451add21b7d4b",
}


def namehash(name: str) -> bytes:
    node = b"\x00" * 32
    if name:
        for label in reversed(name.split(".")):
            node = keccak(node + keccak(text=label))
    return node


def namehash_hex(name: str) -> str:
    return to_hex(namehash(name))


def get_aragon_ens_registry(chain_id: int) -> str:
    registry = ARAGON_ENS_REGISTRIES.get(chain_id)
    if registry is None:
        raise ErrorException(f"No ENS registry configured for network {chain_id}")
    return checksum(registry)


def resolve_name(name: str, ens_registry: str, provider: "JsonRpcProvider") -> Optional[str]:
    """
    Resolve ``name`` to an address, or None when it has no resolver or
    no address record.
    """
    node = namehash(name)
    logger.debug("Resolving ENS name %s through registry %s", name, ens_registry)

    raw = provider.call(ens_registry, encode_function_call("resolver(bytes32)", [node]))
    (resolver,) = decode_result(["address"], raw)
    if addresses_equal(resolver, ZERO_ADDRESS):
        return None

    raw = provider.call(resolver, encode_function_call("addr(bytes32)", [node]))
    (address,) = decode_result(["address"], raw)
    if addresses_equal(address, ZERO_ADDRESS):
        return None
    return checksum(address)

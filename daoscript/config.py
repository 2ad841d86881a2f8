"""
daoscript configuration

Settings for an interpretation session. Every field has a default so an
empty config works against the public endpoints.
"""

from __future__ import annotations

import os
from dataclasses import dataclass, field
from typing import Any, Dict, Mapping, Optional

DEFAULT_IPFS_GATEWAY = "https://ipfs.blossom.software/ipfs/"
DEFAULT_RPC_URL = "http://127.0.0.1:8545"

ENV_PREFIX = "DAOSCRIPT_"


@dataclass
class InterpreterConfig:
    """Configuration for an interpretation session."""
    rpc_url: str = DEFAULT_RPC_URL
    ipfs_gateway: str = DEFAULT_IPFS_GATEWAY
    subgraph_url: Optional[str] = None
    ens_resolver: Optional[str] = None
    from_address: Optional[str] = None
    http_timeout: float = 30.0
    extra: Dict[str, Any] = field(default_factory=dict)

    @classmethod
    def from_env(cls, environ: Optional[Mapping[str, str]] = None) -> "InterpreterConfig":
        """Build a config from ``DAOSCRIPT_*`` environment variables."""
        env = os.environ if environ is None else environ
        config = cls()
        config.rpc_url = env.get(f"{ENV_PREFIX}RPC_URL", config.rpc_url)
        config.ipfs_gateway = env.get(f"{ENV_PREFIX}IPFS_GATEWAY", config.ipfs_gateway)
        config.subgraph_url = env.get(f"{ENV_PREFIX}SUBGRAPH_URL", config.subgraph_url)
        config.ens_resolver = env.get(f"{ENV_PREFIX}ENS_RESOLVER", config.ens_resolver)
        config.from_address = env.get(f"{ENV_PREFIX}FROM_ADDRESS", config.from_address)
        timeout = env.get(f"{ENV_PREFIX}HTTP_TIMEOUT")
        if timeout:
            config.http_timeout = float(timeout)
        return config

    def to_dict(self) -> Dict[str, Any]:
        return {
            "rpc_url": self.rpc_url,
            "ipfs_gateway": self.ipfs_gateway,
            "subgraph_url": self.subgraph_url,
            "ens_resolver": self.ens_resolver,
            "from_address": self.from_address,
            "http_timeout": self.http_timeout,
        }

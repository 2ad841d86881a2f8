"""
daoscript Modules

A module is a named (optionally aliased) set of commands and helpers. All
modules of a session share one SessionContext: the bindings store, the
signer, the content fetcher, the per-deployer nonce counters and the
session-wide artifact cache.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Any, Dict, Optional

from daoscript.clients.ipfs import IPFSResolver
from daoscript.config import InterpreterConfig
from daoscript.errors import ErrorNotFound
from daoscript.providers import Signer
from daoscript.runtime.bindings import BindingsManager, BindingsSpace
from daoscript.runtime.command import Command, Helper

logger = logging.getLogger(__name__)


class NonceTracker:
    """
    Per-address nonce counters.

    The first request for an address reads its on-chain transaction count;
    later requests increment in memory. A transaction sent for the same
    address outside the session makes the counter stale.
    """

    def __init__(self):
        self._nonces: Dict[str, int] = {}

    def next_nonce(self, address: str, signer: Signer) -> int:
        key = address.lower()
        if key not in self._nonces:
            self._nonces[key] = signer.get_transaction_count(address)
            logger.debug("Read on-chain nonce %d for %s", self._nonces[key], address)
        nonce = self._nonces[key]
        self._nonces[key] = nonce + 1
        return nonce


@dataclass
class SessionContext:
    """State shared by every module of an interpretation session."""
    bindings: BindingsManager
    signer: Signer
    ipfs_resolver: IPFSResolver
    config: InterpreterConfig = field(default_factory=InterpreterConfig)
    nonces: NonceTracker = field(default_factory=NonceTracker)
    artifact_cache: Dict[str, Any] = field(default_factory=dict)


class Module:
    """Base class for modules; subclasses set ``name``, ``commands`` and ``helpers``."""

    name: str = ""
    commands: Dict[str, Command] = {}
    helpers: Dict[str, Helper] = {}

    def __init__(self, context: SessionContext, alias: Optional[str] = None):
        self.context = context
        self.alias = alias

    @property
    def contextual_name(self) -> str:
        return self.alias or self.name

    @property
    def bindings(self) -> BindingsManager:
        return self.context.bindings

    @property
    def signer(self) -> Signer:
        return self.context.signer

    @property
    def ipfs_resolver(self) -> IPFSResolver:
        return self.context.ipfs_resolver

    def get_command(self, name: str) -> Command:
        command = self.commands.get(name)
        if command is None:
            raise ErrorNotFound(f"command {name} not found on module {self.contextual_name}")
        return command

    def get_config_binding(self, key: str) -> Any:
        return self.bindings.get_binding_value(f"${self.name}:{key}", BindingsSpace.USER)

    def next_nonce(self, address: str) -> int:
        return self.context.nonces.next_nonce(address, self.signer)

    def __repr__(self) -> str:
        return f"{type(self).__name__}({self.contextual_name})"

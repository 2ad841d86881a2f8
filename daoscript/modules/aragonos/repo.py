"""
Read access to a package repository contract.

A repo stores published versions of an app: the semantic version, the
implementation ("code") address and the content URI of its artifacts.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Optional, Sequence, Tuple

from daoscript.chain.abi import Interface, decode_result
from daoscript.chain.address import checksum
from daoscript.errors import ErrorInvalid
from daoscript.modules.aragonos.abis import REPO_ABI
from daoscript.providers import Signer

logger = logging.getLogger(__name__)

VERSION_TYPES = ["uint16[3]", "address", "bytes"]


@dataclass
class RepoVersionInfo:
    semantic_version: Tuple[int, int, int]
    code_address: str
    content_uri: str


class RepoContract:
    def __init__(self, address: str, signer: Signer):
        self.address = checksum(address)
        self.signer = signer
        self.interface = Interface(REPO_ABI)

    def _call(self, name: str, args: Sequence) -> RepoVersionInfo:
        data = self.interface.encode_function_data(name, list(args))
        logger.debug("Calling %s on repo %s", name, self.address)
        raw = self.signer.provider.call(self.address, data)
        version, code_address, content_uri = decode_result(VERSION_TYPES, raw)
        try:
            uri = bytes(content_uri).decode("utf-8")
        except UnicodeDecodeError as e:
            raise ErrorInvalid(f"invalid content URI returned by repo {self.address}") from e
        return RepoVersionInfo(tuple(version), checksum(code_address), uri)

    def get_latest(self) -> RepoVersionInfo:
        return self._call("getLatest", [])

    def get_by_semantic_version(self, version: str) -> RepoVersionInfo:
        """``version`` is a ``MAJOR.MINOR.PATCH`` string."""
        return self._call("getBySemanticVersion", [[int(p) for p in version.split(".")]])

    def get_version(self, version: Optional[str] = None) -> RepoVersionInfo:
        return self.get_by_semantic_version(version) if version else self.get_latest()

"""
Organization context.

An AragonDAO holds what a ``connect`` session knows about one
organization: its kernel and ACL, and an app cache keyed by app
identifier (``name:index`` for apps found on chain, the labeled
identifier for apps installed by the script).
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional, Set

from eth_utils import keccak, to_hex

from daoscript.chain.abi import Interface, decode_result
from daoscript.chain.address import ZERO_ADDRESS, addresses_equal, checksum
from daoscript.clients.connector import Connector, ParsedApp
from daoscript.clients.ipfs import IPFSResolver
from daoscript.modules.aragonos.abis import ACL_ABI, ACL_ROLES, KERNEL_ABI, KERNEL_ROLES
from daoscript.providers import Signer

logger = logging.getLogger(__name__)

DEFAULT_REGISTRY = "aragonpm.eth"


def role_hash(role_name: str) -> str:
    return to_hex(keccak(text=role_name))


@dataclass
class Permission:
    manager: Optional[str] = None
    grantees: Set[str] = field(default_factory=set)

    def has_grantee(self, address: str) -> bool:
        return address.lower() in {g.lower() for g in self.grantees}


@dataclass
class Artifact:
    """Interface descriptor and role list of an app version."""
    interface: Interface
    roles: List[Dict[str, Any]] = field(default_factory=list)

    def role_hashes(self) -> Dict[str, str]:
        """Role name -> hash."""
        out = {}
        for role in self.roles:
            name = role.get("id") or role.get("name")
            out[name] = (role.get("bytes") or role_hash(name)).lower()
        return out


def build_app_artifact(raw: Dict[str, Any]) -> Artifact:
    return Artifact(interface=Interface(raw.get("abi", [])), roles=list(raw.get("roles", [])))


def build_app_permissions(artifact: Artifact, parsed_roles=()) -> Dict[str, Permission]:
    """Permissions keyed by role hash: every artifact role, with on-chain state when known."""
    permissions = {h: Permission() for h in artifact.role_hashes().values()}
    for role in parsed_roles:
        manager = role.manager if role.manager and not addresses_equal(role.manager, ZERO_ADDRESS) else None
        permissions[role.role_hash.lower()] = Permission(manager=manager, grantees=set(role.grantees))
    return permissions


@dataclass
class App:
    name: str
    address: str
    code_address: str
    content_uri: str
    registry_name: str
    artifact: Artifact
    permissions: Dict[str, Permission] = field(default_factory=dict)

    @property
    def interface(self) -> Interface:
        return self.artifact.interface

    def resolve_role(self, role: str) -> Optional[str]:
        """Role hash of ``role`` (a name or a hash), or None if the app doesn't define it."""
        if role.startswith("0x"):
            key = role.lower()
        else:
            key = self.artifact.role_hashes().get(role)
        return key if key in self.permissions else None


def _core_artifact(abi, roles) -> Artifact:
    return Artifact(
        interface=Interface(abi),
        roles=[{"id": name, "bytes": role_hash(name)} for name in roles],
    )


class AragonDAO:
    """
    Organization context: kernel, ACL and the app cache.

    The artifact cache is shared with the rest of the session and keyed by
    code address.
    """

    def __init__(self, kernel: App, acl: App, app_cache: Dict[str, App],
                 artifact_cache: Dict[str, Artifact]):
        self.kernel = kernel
        self.acl = acl
        self.app_cache = app_cache
        self.app_artifact_cache = artifact_cache

    @property
    def address(self) -> str:
        return self.kernel.address

    @classmethod
    def create(cls, dao_address: str, connector: Connector, signer: Signer,
               ipfs_resolver: IPFSResolver, artifact_cache: Dict[str, Artifact]) -> "AragonDAO":
        """Build the context of ``dao_address`` from the registry's list of its apps."""
        dao_address = checksum(dao_address)
        parsed_apps = connector.organization_apps(dao_address)
        logger.debug("Found %d app(s) in organization %s", len(parsed_apps), dao_address)

        kernel_artifact = _core_artifact(KERNEL_ABI, KERNEL_ROLES)
        acl_artifact = _core_artifact(ACL_ABI, ACL_ROLES)

        apps: Dict[str, App] = {}
        counters: Dict[str, int] = {}
        kernel = acl = None

        for parsed in parsed_apps:
            if parsed.name == "kernel" or addresses_equal(parsed.address, dao_address):
                artifact = kernel_artifact
            elif parsed.name == "acl":
                artifact = acl_artifact
            else:
                artifact = cls._resolve_artifact(parsed, ipfs_resolver, artifact_cache)

            app = App(
                name=parsed.name or "kernel",
                address=parsed.address,
                code_address=parsed.code_address,
                content_uri=parsed.content_uri,
                registry_name=parsed.registry_name or DEFAULT_REGISTRY,
                artifact=artifact,
                permissions=build_app_permissions(artifact, parsed.roles),
            )
            index = counters.get(app.name, 0)
            counters[app.name] = index + 1
            apps[f"{app.name}:{index}"] = app
            if app.artifact is kernel_artifact and kernel is None:
                kernel = app
            elif app.artifact is acl_artifact and acl is None:
                acl = app

        if kernel is None:
            kernel = App("kernel", dao_address, "", "", DEFAULT_REGISTRY, kernel_artifact,
                         build_app_permissions(kernel_artifact))
            apps["kernel:0"] = kernel
        if acl is None:
            raw = signer.provider.call(dao_address, kernel.interface.encode_function_data("acl", []))
            (acl_address,) = decode_result(["address"], raw)
            acl = App("acl", checksum(acl_address), "", "", DEFAULT_REGISTRY, acl_artifact,
                      build_app_permissions(acl_artifact))
            apps["acl:0"] = acl

        return cls(kernel, acl, apps, artifact_cache)

    @staticmethod
    def _resolve_artifact(parsed: ParsedApp, ipfs_resolver: IPFSResolver,
                          artifact_cache: Dict[str, Artifact]) -> Artifact:
        key = parsed.code_address.lower()
        if key not in artifact_cache:
            raw = parsed.artifact or ipfs_resolver.fetch_artifact(parsed.content_uri)
            artifact_cache[key] = build_app_artifact(raw)
        return artifact_cache[key]

    def resolve_app(self, identifier: str) -> Optional[App]:
        """App for ``identifier``; a bare name refers to index 0."""
        if identifier in self.app_cache:
            return self.app_cache[identifier]
        if ":" not in identifier:
            return self.app_cache.get(f"{identifier}:0")
        return None

    def resolve_app_by_address(self, address: str) -> Optional[App]:
        for app in self.app_cache.values():
            if addresses_equal(app.address, address):
                return app
        return None

    def app_bindings(self) -> Dict[str, str]:
        """Identifier -> address for every app; ``name:0`` apps also under bare ``name``."""
        out = {}
        for identifier, app in self.app_cache.items():
            out[identifier] = app.address
            name, _, index = identifier.partition(":")
            if index == "0" and name not in self.app_cache:
                out[name] = app.address
        return out

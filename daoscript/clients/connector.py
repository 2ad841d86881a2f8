"""
Registry query client.

Queries the organization subgraph for repos (published app versions) and
for the apps installed in an organization. The endpoint is fixed per
network id; an unsupported network fails when the connector is built.
"""

from __future__ import annotations

import json
import logging
from dataclasses import dataclass, field
from typing import Any, Callable, Dict, List, Optional, Tuple, TypeVar

import requests

from daoscript.chain.address import checksum
from daoscript.errors import ErrorException, ErrorNotFound

logger = logging.getLogger(__name__)

T = TypeVar("T")

SUBGRAPH_URLS = {
    1: "https://api.thegraph.com/subgraphs/name/aragon/aragon-mainnet",
    4: "https://api.thegraph.com/subgraphs/name/1hive/aragon-rinkeby",
    100: "https://api.thegraph.com/subgraphs/name/1hive/aragon-xdai",
    137: "https://api.thegraph.com/subgraphs/name/1hive/aragon-polygon",
}

REPO_QUERY = """
query Repos($repoName: String!) {
  repos(where: {name: $repoName}) {
    name
    address
    registry { name }
    lastVersion { semanticVersion codeAddress contentUri artifact }
  }
}
"""

ORGANIZATION_APPS_QUERY = """
query Organization($id: ID!) {
  organization(id: $id) {
    apps {
      address
      appId
      repoName
      implementation { address }
      repo { registry { name } }
      version { semanticVersion codeAddress contentUri artifact }
      roles { roleHash manager grantees { granteeAddress } }
    }
  }
}
"""


def subgraph_url_from_chain_id(chain_id: int) -> Optional[str]:
    return SUBGRAPH_URLS.get(chain_id)


@dataclass
class RepoVersion:
    semantic_version: Tuple[int, int, int]
    code_address: str
    content_uri: str
    artifact: Optional[Dict[str, Any]] = None


@dataclass
class Repo:
    name: str
    address: str
    registry_name: str
    last_version: Optional[RepoVersion] = None


@dataclass
class ParsedRole:
    role_hash: str
    manager: Optional[str]
    grantees: List[str] = field(default_factory=list)


@dataclass
class ParsedApp:
    address: str
    app_id: str
    code_address: str
    content_uri: str
    name: str
    registry_name: str
    artifact: Optional[Dict[str, Any]] = None
    roles: List[ParsedRole] = field(default_factory=list)


def _parse_artifact(raw: Any) -> Optional[Dict[str, Any]]:
    if not raw:
        return None
    if isinstance(raw, dict):
        return raw
    try:
        return json.loads(raw)
    except (TypeError, ValueError):
        return None


def _parse_version(raw: Optional[Dict[str, Any]]) -> Optional[RepoVersion]:
    if not raw:
        return None
    parts = tuple(int(p) for p in str(raw.get("semanticVersion", "0,0,0")).replace(".", ",").split(","))
    return RepoVersion(
        semantic_version=parts,
        code_address=checksum(raw["codeAddress"]),
        content_uri=raw.get("contentUri") or "",
        artifact=_parse_artifact(raw.get("artifact")),
    )


def parse_repo(raw: Dict[str, Any]) -> Repo:
    return Repo(
        name=raw["name"],
        address=checksum(raw["address"]),
        registry_name=(raw.get("registry") or {}).get("name", ""),
        last_version=_parse_version(raw.get("lastVersion")),
    )


def parse_app(raw: Dict[str, Any]) -> ParsedApp:
    version = raw.get("version") or {}
    implementation = raw.get("implementation") or {}
    code_address = version.get("codeAddress") or implementation.get("address")
    registry = ((raw.get("repo") or {}).get("registry") or {}).get("name", "")
    roles = [
        ParsedRole(
            role_hash=r["roleHash"],
            manager=checksum(r["manager"]) if r.get("manager") else None,
            grantees=[checksum(g["granteeAddress"]) for g in r.get("grantees") or []],
        )
        for r in raw.get("roles") or []
    ]
    return ParsedApp(
        address=checksum(raw["address"]),
        app_id=raw["appId"],
        code_address=checksum(code_address) if code_address else "",
        content_uri=version.get("contentUri") or "",
        name=raw.get("repoName") or "",
        registry_name=registry,
        artifact=_parse_artifact(version.get("artifact")),
        roles=roles,
    )


class Connector:
    """
    Subgraph client for one network.

    Raises:
        ErrorException: at construction, for an unsupported network id
    """

    def __init__(self, chain_id: int, subgraph_url: Optional[str] = None,
                 timeout: float = 30.0, session: Optional[requests.Session] = None):
        url = subgraph_url or subgraph_url_from_chain_id(chain_id)
        if not url:
            supported = ", ".join(str(c) for c in SUBGRAPH_URLS)
            raise ErrorException(f"Network {chain_id} not supported. Use {supported}.")
        self.chain_id = chain_id
        self.subgraph_url = url
        self.timeout = timeout
        self.session = session or requests.Session()

    def query_subgraph(self, query: str, variables: Dict[str, Any],
                       parser: Optional[Callable[[Dict[str, Any]], T]] = None) -> Any:
        logger.debug("Querying subgraph %s with %s", self.subgraph_url, variables)
        try:
            response = self.session.post(
                self.subgraph_url,
                json={"query": query, "variables": variables},
                timeout=self.timeout,
            )
            response.raise_for_status()
            body = response.json()
        except (requests.RequestException, ValueError) as e:
            raise ErrorException(f"An error happened while querying subgraph: {e}") from e

        errors = body.get("errors")
        if errors:
            first = errors[0]
            message = first.get("message", first) if isinstance(first, dict) else first
            raise ErrorException(f"An error happened while querying subgraph: {message}")

        data = body.get("data")
        return parser(data) if parser else data

    def repo(self, repo_name: str, registry_name: str) -> Repo:
        def parse(data: Dict[str, Any]) -> Repo:
            for raw in (data or {}).get("repos") or []:
                if (raw.get("registry") or {}).get("name") == registry_name:
                    return parse_repo(raw)
            raise ErrorNotFound(f"Repo {repo_name}.{registry_name} not found", name="ErrorRepoNotFound")

        return self.query_subgraph(REPO_QUERY, {"repoName": repo_name}, parse)

    def organization_apps(self, dao_address: str) -> List[ParsedApp]:
        def parse(data: Dict[str, Any]) -> List[ParsedApp]:
            organization = (data or {}).get("organization")
            apps = (organization or {}).get("apps")
            if not apps:
                raise ErrorNotFound("Organization apps not found")
            return [parse_app(app) for app in apps]

        return self.query_subgraph(ORGANIZATION_APPS_QUERY, {"id": dao_address.lower()}, parse)

"""Test fixtures for the daoscript test suite."""
import pytest
import sys
from pathlib import Path
from typing import Dict, Any

# Add project root and this directory to path
project_root = Path(__file__).parent.parent
sys.path.insert(0, str(project_root))
sys.path.insert(0, str(Path(__file__).parent))

from daoscript.clients.ipfs import IPFSResolver
from daoscript.config import InterpreterConfig
from daoscript.providers import Signer
from daoscript.runtime.interpreter import Interpreter

from builders import (
    DAO,
    IPFS_GATEWAY,
    SIGNER,
    VOTING_CODE_V2,
    VOTING_REPO,
    XDAI_SUBGRAPH,
    FakeProvider,
    organization_apps_response,
    program,
    voting_artifact,
)


@pytest.fixture
def provider() -> FakeProvider:
    """In-memory chain on network 100."""
    return FakeProvider(chain_id=100)


@pytest.fixture
def signer(provider) -> Signer:
    """Signer backed by the fake provider."""
    return Signer(provider, SIGNER)


@pytest.fixture
def config() -> InterpreterConfig:
    """Interpreter config pointing at the public endpoints."""
    return InterpreterConfig(ipfs_gateway=IPFS_GATEWAY, from_address=SIGNER)


@pytest.fixture
def make_interpreter(signer, config):
    """Factory: build an interpreter for the given statements."""
    def _make(*statements) -> Interpreter:
        return Interpreter(program(*statements), signer, config, IPFSResolver(config.ipfs_gateway))
    return _make


@pytest.fixture
def interpreter(make_interpreter) -> Interpreter:
    """Interpreter over an empty program, for evaluating single nodes."""
    return make_interpreter()


@pytest.fixture
def dao_registry(requests_mock, provider):
    """
    Organization DAO with acl, voting and token-manager apps, plus a
    published voting repo whose latest version lives on IPFS.
    """
    requests_mock.post(XDAI_SUBGRAPH, json=organization_apps_response())
    requests_mock.get(f"{IPFS_GATEWAY}QmVotingV2/artifact.json", json=voting_artifact())
    provider.register_ens_name("voting.aragonpm.eth", VOTING_REPO)
    provider.register_repo(VOTING_REPO, VOTING_CODE_V2, "ipfs:QmVotingV2", version=(2, 0, 0))
    return requests_mock


@pytest.fixture
def sample_ast_json() -> Dict[str, Any]:
    """Serialized AST: load aragonos and set a variable."""
    return {
        "type": "Program",
        "body": [
            {
                "type": "CommandExpression",
                "name": "load",
                "args": [{
                    "type": "AsExpression",
                    "left": {"type": "ProbableIdentifier", "value": "aragonos"},
                    "right": {"type": "ProbableIdentifier", "value": "ar"},
                }],
                "opts": [],
                "loc": {"start": {"line": 1, "col": 0}, "end": {"line": 1, "col": 19}},
            },
            {
                "type": "CommandExpression",
                "name": "set",
                "args": [
                    {"type": "VariableIdentifier", "value": "$amount"},
                    {
                        "type": "BinaryExpression",
                        "operator": "*",
                        "left": {"type": "NumberLiteral", "value": "15"},
                        "right": {"type": "NumberLiteral", "value": "1e18"},
                    },
                ],
                "opts": [],
                "loc": {"start": {"line": 2, "col": 0}, "end": {"line": 2, "col": 22}},
            },
        ],
    }


@pytest.fixture
def exec_ast_json() -> Dict[str, Any]:
    """Serialized AST: a single exec producing one transaction."""
    return {
        "type": "Program",
        "body": [{
            "type": "CommandExpression",
            "name": "exec",
            "args": [
                {"type": "AddressLiteral", "value": DAO},
                {"type": "StringLiteral", "value": "transfer(address,uint256)"},
                {"type": "AddressLiteral", "value": SIGNER},
                {"type": "NumberLiteral", "value": "2e18"},
            ],
            "opts": [],
        }],
    }

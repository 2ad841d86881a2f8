"""Adapters to external collaborators: registry subgraph and IPFS."""

from daoscript.clients.connector import Connector, ParsedApp, Repo
from daoscript.clients.ipfs import IPFSResolver

__all__ = ["Connector", "ParsedApp", "Repo", "IPFSResolver"]

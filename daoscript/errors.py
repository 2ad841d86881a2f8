"""
daoscript error model

Every failure raised while interpreting a script is fatal to the session.
Errors tied to a node carry it so hosts can map the failure back to a
source location.

Key classes:
- DaoScriptError: base class
- ErrorException: external collaborator failures (RPC, subgraph, IPFS)
- ErrorNotFound: identifier, name-resolution and registry lookup misses
- ErrorInvalid: malformed input (AST schema, identifiers, encodings)
- NodeError: base for errors raised while evaluating a node
- CommandError, ExpressionError, HelperFunctionError
"""

from __future__ import annotations

from typing import Any, Iterable, Optional, TYPE_CHECKING

if TYPE_CHECKING:
    from daoscript.ast import Node


class DaoScriptError(Exception):
    """Base class for all interpreter failures."""

    name = "DaoScriptError"

    def __init__(self, message: str, name: Optional[str] = None):
        self.message = message
        if name:
            self.name = name
        super().__init__(message)

    def to_dict(self) -> dict:
        return {"name": self.name, "message": str(self)}


class ErrorException(DaoScriptError):
    name = "ErrorException"


class ErrorNotFound(DaoScriptError):
    name = "ErrorNotFound"


class ErrorInvalid(DaoScriptError):
    name = "ErrorInvalid"


class NodeError(DaoScriptError):
    """
    Error raised while evaluating a node.

    The rendered message is prefixed with the node's location when the
    parser provided one: ``CommandError(3:2,3:40): <message>``.
    """

    name = "NodeError"

    def __init__(self, node: "Node", message: str, name: Optional[str] = None):
        self.node = node
        super().__init__(message, name)

    @property
    def location(self) -> str:
        loc = getattr(self.node, "loc", None)
        if loc is None:
            return ""
        return f"({loc.start.line}:{loc.start.col},{loc.end.line}:{loc.end.col})"

    def __str__(self) -> str:
        return f"{self.name}{self.location}: {self.message}"

    def to_dict(self) -> dict:
        out = super().to_dict()
        loc = getattr(self.node, "loc", None)
        out["loc"] = loc.to_dict() if loc else None
        return out


class CommandError(NodeError):
    name = "CommandError"

    def __init__(self, node: "Node", message: str, name: Optional[str] = None):
        command_name = getattr(node, "name", None)
        if command_name and name is None:
            message = f"{command_name}: {message}"
        super().__init__(node, message, name)


class ExpressionError(NodeError):
    name = "ExpressionError"


class HelperFunctionError(NodeError):
    name = "HelperFunctionError"

    def __init__(self, node: "Node", message: str, name: Optional[str] = None):
        helper_name = getattr(node, "name", None)
        if helper_name and name is None:
            message = f"@{helper_name}: {message}"
        super().__init__(node, message, name)


def list_items(title: str, items: Iterable[Any]) -> str:
    """Build an aggregated message: a title followed by one bullet per item."""
    lines = "\n".join(f"  - {item}" for item in items)
    return f"{title}:\n{lines}"


def comma_list_items(items: Iterable[Any]) -> str:
    """Render ``a, b and c``."""
    items = [str(i) for i in items]
    if len(items) <= 1:
        return "".join(items)
    return f"{', '.join(items[:-1])} and {items[-1]}"

"""
daoscript AST

The textual parser lives outside this package. Its output arrives as JSON,
is validated against ``schemas/ast.schema.json`` and is turned into the
frozen node dataclasses below by ``load_ast``.

Node kinds:
- Program, CommandExpression, CommandOpt, BlockExpression
- NumberLiteral, StringLiteral, AddressLiteral, BytesLiteral, BoolLiteral
- ProbableIdentifier, VariableIdentifier
- BinaryExpression, HelperFunctionExpression, AsExpression
"""

from __future__ import annotations

import json
from dataclasses import dataclass, field
from enum import Enum
from functools import lru_cache
from pathlib import Path
from typing import Any, Dict, List, Optional, Tuple, Union

import jsonschema

from daoscript.errors import ErrorInvalid

SCHEMA_PATH = Path(__file__).parent / "schemas" / "ast.schema.json"


class NodeType(Enum):
    PROGRAM = "Program"
    COMMAND_EXPRESSION = "CommandExpression"
    COMMAND_OPT = "CommandOpt"
    BLOCK_EXPRESSION = "BlockExpression"
    NUMBER_LITERAL = "NumberLiteral"
    STRING_LITERAL = "StringLiteral"
    ADDRESS_LITERAL = "AddressLiteral"
    BYTES_LITERAL = "BytesLiteral"
    BOOL_LITERAL = "BoolLiteral"
    PROBABLE_IDENTIFIER = "ProbableIdentifier"
    VARIABLE_IDENTIFIER = "VariableIdentifier"
    BINARY_EXPRESSION = "BinaryExpression"
    HELPER_FUNCTION_EXPRESSION = "HelperFunctionExpression"
    AS_EXPRESSION = "AsExpression"


@dataclass(frozen=True)
class Position:
    line: int
    col: int


@dataclass(frozen=True)
class Location:
    start: Position
    end: Position

    def to_dict(self) -> Dict[str, Any]:
        return {
            "start": {"line": self.start.line, "col": self.start.col},
            "end": {"line": self.end.line, "col": self.end.col},
        }


@dataclass(frozen=True)
class Node:
    loc: Optional[Location] = field(default=None, kw_only=True, compare=False)

    type = None


@dataclass(frozen=True)
class Literal(Node):
    value: Any = None


@dataclass(frozen=True)
class NumberLiteral(Literal):
    type = NodeType.NUMBER_LITERAL


@dataclass(frozen=True)
class StringLiteral(Literal):
    type = NodeType.STRING_LITERAL


@dataclass(frozen=True)
class AddressLiteral(Literal):
    type = NodeType.ADDRESS_LITERAL


@dataclass(frozen=True)
class BytesLiteral(Literal):
    type = NodeType.BYTES_LITERAL


@dataclass(frozen=True)
class BoolLiteral(Literal):
    type = NodeType.BOOL_LITERAL


@dataclass(frozen=True)
class ProbableIdentifier(Node):
    value: str = ""
    type = NodeType.PROBABLE_IDENTIFIER


@dataclass(frozen=True)
class VariableIdentifier(Node):
    value: str = ""
    type = NodeType.VARIABLE_IDENTIFIER


@dataclass(frozen=True)
class BinaryExpression(Node):
    operator: str = "+"
    left: Node = None
    right: Node = None
    type = NodeType.BINARY_EXPRESSION


@dataclass(frozen=True)
class HelperFunctionExpression(Node):
    name: str = ""
    args: Tuple[Node, ...] = ()
    type = NodeType.HELPER_FUNCTION_EXPRESSION


@dataclass(frozen=True)
class AsExpression(Node):
    left: Node = None
    right: Node = None
    type = NodeType.AS_EXPRESSION


@dataclass(frozen=True)
class CommandOpt(Node):
    name: str = ""
    value: Node = None
    type = NodeType.COMMAND_OPT


@dataclass(frozen=True)
class CommandExpression(Node):
    name: str = ""
    args: Tuple[Node, ...] = ()
    opts: Tuple[CommandOpt, ...] = ()
    module: Optional[str] = None
    type = NodeType.COMMAND_EXPRESSION

    def get_opt(self, name: str) -> Optional[CommandOpt]:
        for opt in self.opts:
            if opt.name == name:
                return opt
        return None


@dataclass(frozen=True)
class BlockExpression(Node):
    body: Tuple[CommandExpression, ...] = ()
    type = NodeType.BLOCK_EXPRESSION


@dataclass(frozen=True)
class Program(Node):
    body: Tuple[CommandExpression, ...] = ()
    type = NodeType.PROGRAM


AnyNode = Union[
    Program, CommandExpression, CommandOpt, BlockExpression, Literal,
    ProbableIdentifier, VariableIdentifier, BinaryExpression,
    HelperFunctionExpression, AsExpression,
]


@lru_cache(maxsize=1)
def load_schema() -> Dict[str, Any]:
    """Load the AST JSON schema shipped with the package."""
    with open(SCHEMA_PATH, "r") as f:
        return json.load(f)


def validate_ast(data: Dict[str, Any]) -> None:
    """
    Validate serialized AST against the schema.

    Raises:
        ErrorInvalid: naming the path of the first violation
    """
    try:
        jsonschema.validate(instance=data, schema=load_schema())
    except jsonschema.ValidationError as e:
        path = "/".join(str(p) for p in e.absolute_path) or "<root>"
        raise ErrorInvalid(f"invalid AST at {path}: {e.message}") from e


def load_ast(data: Union[str, Dict[str, Any]]) -> Program:
    """Validate and build a Program from its JSON form (string or dict)."""
    if isinstance(data, str):
        try:
            data = json.loads(data)
        except json.JSONDecodeError as e:
            raise ErrorInvalid(f"invalid AST JSON: {e}") from e
    validate_ast(data)
    node = build_node(data)
    if not isinstance(node, Program):
        raise ErrorInvalid(f"expected a Program node, got {data.get('type')}")
    return node


def _build_loc(raw: Optional[Dict[str, Any]]) -> Optional[Location]:
    if not raw:
        return None
    return Location(
        start=Position(raw["start"]["line"], raw["start"]["col"]),
        end=Position(raw["end"]["line"], raw["end"]["col"]),
    )


_LITERALS = {
    "NumberLiteral": NumberLiteral,
    "StringLiteral": StringLiteral,
    "AddressLiteral": AddressLiteral,
    "BytesLiteral": BytesLiteral,
    "BoolLiteral": BoolLiteral,
}


def build_node(raw: Dict[str, Any]) -> AnyNode:
    """Build a node (and its children) from an already validated dict."""
    kind = raw["type"]
    loc = _build_loc(raw.get("loc"))

    if kind in _LITERALS:
        return _LITERALS[kind](raw["value"], loc=loc)
    if kind == "ProbableIdentifier":
        return ProbableIdentifier(raw["value"], loc=loc)
    if kind == "VariableIdentifier":
        return VariableIdentifier(raw["value"], loc=loc)
    if kind == "BinaryExpression":
        return BinaryExpression(
            raw["operator"], build_node(raw["left"]), build_node(raw["right"]), loc=loc
        )
    if kind == "HelperFunctionExpression":
        return HelperFunctionExpression(
            raw["name"], tuple(build_node(a) for a in raw.get("args", [])), loc=loc
        )
    if kind == "AsExpression":
        return AsExpression(build_node(raw["left"]), build_node(raw["right"]), loc=loc)
    if kind == "CommandOpt":
        return CommandOpt(raw["name"], build_node(raw["value"]), loc=loc)
    if kind == "CommandExpression":
        return CommandExpression(
            raw["name"],
            tuple(build_node(a) for a in raw.get("args", [])),
            tuple(build_node(o) for o in raw.get("opts", [])),
            raw.get("module"),
            loc=loc,
        )
    if kind == "BlockExpression":
        return BlockExpression(tuple(build_node(c) for c in raw.get("body", [])), loc=loc)
    if kind == "Program":
        return Program(tuple(build_node(c) for c in raw.get("body", [])), loc=loc)

    raise ErrorInvalid(f"unknown node type: {kind}")


def iter_commands(nodes: List[Node]):
    """Yield every CommandExpression reachable from ``nodes``, depth-first."""
    for node in nodes:
        if isinstance(node, (Program, BlockExpression)):
            yield from iter_commands(list(node.body))
        elif isinstance(node, CommandExpression):
            yield node
            yield from iter_commands(list(node.args))

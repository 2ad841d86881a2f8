"""
daoscript Interpreter

Single-threaded, depth-first, left-to-right evaluation of a Program.
Sibling arguments and statements are evaluated strictly in order because
nonce allocation and scope mutation depend on it.

Key classes:
- InterpretationResult: outcome of a run for hosts (CLI, API)
- Interpreter: node evaluation, module loading and command dispatch
"""

from __future__ import annotations

import logging
import time
from dataclasses import dataclass, field
from typing import Any, Callable, Dict, List, Optional, Type

from daoscript.ast import (
    AddressLiteral,
    AsExpression,
    BinaryExpression,
    BlockExpression,
    BoolLiteral,
    BytesLiteral,
    CommandExpression,
    HelperFunctionExpression,
    Node,
    NumberLiteral,
    ProbableIdentifier,
    Program,
    StringLiteral,
    VariableIdentifier,
    iter_commands,
)
from daoscript.chain.address import checksum, is_valid_address
from daoscript.chain.numbers import apply_operator, is_numeric, parse_number
from daoscript.clients.ipfs import IPFSResolver
from daoscript.config import InterpreterConfig
from daoscript.errors import DaoScriptError, ErrorNotFound, ExpressionError
from daoscript.providers import Signer
from daoscript.runtime.actions import Action, actions_to_dicts, compute_actions_digest
from daoscript.runtime.bindings import BindingsManager, BindingsSpace
from daoscript.runtime.command import NodesInterpreters, literal_text
from daoscript.runtime.module import Module, SessionContext

logger = logging.getLogger(__name__)

ARITHMETIC_ERROR = "ArithmeticExpressionError"


@dataclass
class InterpretationResult:
    """Result of interpreting a program. Failed runs carry no actions."""
    success: bool
    actions: List[Action] = field(default_factory=list)
    digest: str = ""
    errors: List[Dict[str, Any]] = field(default_factory=list)
    execution_time_ms: float = 0.0

    def to_dict(self) -> Dict[str, Any]:
        return {
            "success": self.success,
            "actions": actions_to_dicts(self.actions),
            "digest": self.digest,
            "errors": self.errors,
            "execution_time_ms": self.execution_time_ms,
        }


def _static_module_for(c: CommandExpression,
                       aliases: Dict[str, Type[Module]]) -> Optional[Type[Module]]:
    if c.module:
        module_cls = aliases.get(c.module)
        return module_cls if module_cls and c.name in module_cls.commands else None
    for module_cls in [aliases["std"], *aliases.values()]:
        if c.name in module_cls.commands:
            return module_cls
    return None


def pre_validate_program(program: Program) -> List[str]:
    """
    Best-effort static check of every command reachable in the program.

    Tracks ``load`` aliases without executing anything and never touches
    the network. Returns the collected error messages.
    """
    from daoscript.modules import MODULES

    aliases: Dict[str, Type[Module]] = {"std": MODULES["std"]}
    errors: List[str] = []

    for c in iter_commands(list(program.body)):
        if c.name == "load" and not c.module and c.args:
            target = c.args[0]
            if isinstance(target, AsExpression):
                name, alias = literal_text(target.left), literal_text(target.right)
            else:
                name = alias = literal_text(target)
            if name in MODULES and alias:
                aliases[alias] = MODULES[name]

        module_cls = _static_module_for(c, aliases)
        if module_cls is None:
            errors.append(f"{c.name}: command not found")
            continue
        try:
            module_cls.commands[c.name].pre_validate(c)
        except DaoScriptError as e:
            errors.append(str(e))
    return errors


class Interpreter:
    """
    Interpreter for one script.

    The ``std`` module is loaded at construction and is the fallback for
    commands without a module prefix.
    """

    def __init__(self,
                 ast: Program,
                 signer: Signer,
                 config: InterpreterConfig = None,
                 ipfs_resolver: IPFSResolver = None):
        from daoscript.modules.std import Std

        self.ast = ast
        self.config = config or InterpreterConfig()
        self.bindings = BindingsManager()
        self.context = SessionContext(
            bindings=self.bindings,
            signer=signer,
            ipfs_resolver=ipfs_resolver or IPFSResolver(
                self.config.ipfs_gateway, timeout=self.config.http_timeout
            ),
            config=self.config,
        )
        self.std = Std(self.context, loader=self.load_module)
        self.modules: List[Module] = [self.std]
        self.bindings.set_binding(self.std.name, self.std, BindingsSpace.MODULE)
        self.interpreters = NodesInterpreters(
            interpret_node=self.interpret_node,
            interpret_nodes=self.interpret_nodes,
        )

    # Entry points

    def interpret(self) -> List[Action]:
        """
        Evaluate the whole program and return its ordered actions.

        Any failure propagates; no partial action list is ever returned.
        """
        return self._interpret_program(self.ast)

    def run(self) -> InterpretationResult:
        """Interpret and package the outcome for hosts."""
        start = time.time()
        try:
            actions = self.interpret()
        except DaoScriptError as e:
            logger.debug("Interpretation failed: %s", e)
            return InterpretationResult(
                success=False,
                errors=[e.to_dict()],
                execution_time_ms=(time.time() - start) * 1000,
            )
        return InterpretationResult(
            success=True,
            actions=actions,
            digest=compute_actions_digest(actions),
            execution_time_ms=(time.time() - start) * 1000,
        )

    def pre_validate(self) -> List[str]:
        return pre_validate_program(self.ast)

    # Modules

    def load_module(self, name: str, alias: Optional[str] = None) -> Module:
        """Instantiate ``name`` under ``alias`` (or its name), or return it if already loaded."""
        from daoscript.modules import MODULES

        key = alias or name
        existing = self.bindings.get_binding_value(key, BindingsSpace.MODULE)
        if existing is not None:
            if existing.name != name:
                raise ErrorNotFound(f"alias {key} is already used by module {existing.name}")
            return existing

        module_cls = MODULES.get(name)
        if module_cls is None:
            raise ErrorNotFound(f"module {name} not found")

        if module_cls is type(self.std):
            module = module_cls(self.context, loader=self.load_module, alias=alias)
        else:
            module = module_cls(self.context, alias=alias)
        self.modules.append(module)
        self.bindings.set_binding(key, module, BindingsSpace.MODULE, scope=0)
        logger.debug("Loaded module %s as %s", name, key)
        return module

    def _resolve_command_module(self, c: CommandExpression) -> Module:
        if c.module:
            module = self.bindings.get_binding_value(c.module, BindingsSpace.MODULE)
            if module is None:
                raise ErrorNotFound(f"module {c.module} not found")
            return module

        block_module_name = self.bindings.get_scope_module()
        if block_module_name:
            module = self.bindings.get_binding_value(block_module_name, BindingsSpace.MODULE)
            if module is not None and c.name in module.commands:
                return module
        return self.std

    def _resolve_helper(self, h: HelperFunctionExpression):
        for module in self.modules:
            if h.name in module.helpers:
                return module, module.helpers[h.name]
        raise ErrorNotFound(f"helper @{h.name} not found")

    # Node evaluation

    def interpret_nodes(self, nodes: List[Node], **kwargs) -> List[Any]:
        """Evaluate ``nodes`` strictly left to right."""
        return [self.interpret_node(node, **kwargs) for node in nodes]

    def interpret_node(self,
                       node: Node,
                       treat_as_literal: bool = False,
                       allow_not_found_error: bool = False,
                       block_module: Optional[str] = None,
                       block_initializer: Optional[Callable[[], None]] = None) -> Any:
        if isinstance(node, NumberLiteral):
            return self._interpret_number(node)
        elif isinstance(node, StringLiteral):
            return node.value
        elif isinstance(node, BoolLiteral):
            return bool(node.value)
        elif isinstance(node, AddressLiteral):
            return self._interpret_address(node, treat_as_literal)
        elif isinstance(node, BytesLiteral):
            return self._interpret_bytes(node)
        elif isinstance(node, ProbableIdentifier):
            return self._interpret_probable_identifier(node, treat_as_literal, allow_not_found_error)
        elif isinstance(node, VariableIdentifier):
            return self._interpret_variable(node, treat_as_literal, allow_not_found_error)
        elif isinstance(node, BinaryExpression):
            return self._interpret_binary_expression(node)
        elif isinstance(node, HelperFunctionExpression):
            return self._interpret_helper(node)
        elif isinstance(node, BlockExpression):
            return self._interpret_block(node, block_module, block_initializer)
        elif isinstance(node, CommandExpression):
            return self._interpret_command(node)
        elif isinstance(node, Program):
            return self._interpret_program(node)
        raise ExpressionError(node, f"unexpected node of type {type(node).__name__}")

    def _interpret_program(self, node: Program) -> List[Action]:
        actions: List[Action] = []
        for statement in node.body:
            actions.extend(self.interpret_node(statement))
        return actions

    def _interpret_number(self, node: NumberLiteral) -> int:
        try:
            return parse_number(node.value)
        except ValueError as e:
            raise ExpressionError(node, f"invalid number {node.value}: {e}") from e

    def _interpret_address(self, node: AddressLiteral, treat_as_literal: bool) -> str:
        if treat_as_literal:
            return node.value
        if not is_valid_address(node.value):
            raise ExpressionError(node, f"invalid address {node.value}")
        return checksum(node.value)

    def _interpret_bytes(self, node: BytesLiteral) -> str:
        value = str(node.value)
        body = value[2:] if value.startswith("0x") else None
        if body is None or len(body) % 2 or any(ch not in "0123456789abcdefABCDEF" for ch in body):
            raise ExpressionError(node, f"invalid bytes {value}")
        return value.lower()

    def _interpret_probable_identifier(self, node: ProbableIdentifier,
                                       treat_as_literal: bool,
                                       allow_not_found_error: bool) -> Any:
        if treat_as_literal:
            return node.value
        binding = self.bindings.get_binding(node.value, BindingsSpace.ADDR)
        if binding is not None:
            return binding.value
        if is_valid_address(node.value):
            return checksum(node.value)
        if allow_not_found_error:
            return node.value
        raise ErrorNotFound(f"identifier {node.value} not found")

    def _interpret_variable(self, node: VariableIdentifier,
                            treat_as_literal: bool,
                            allow_not_found_error: bool) -> Any:
        if treat_as_literal:
            return node.value
        binding = self.bindings.get_binding(node.value, BindingsSpace.USER)
        if binding is not None:
            return binding.value
        if allow_not_found_error:
            return node.value
        raise ErrorNotFound(f"variable {node.value} not found")

    def _interpret_binary_expression(self, node: BinaryExpression) -> int:
        left = self.interpret_node(node.left)
        right = self.interpret_node(node.right)

        if node.operator == "/" and is_numeric(right) and right == 0:
            raise ExpressionError(
                node, "invalid operation. Can't divide by zero", name=ARITHMETIC_ERROR
            )
        if not is_numeric(left):
            raise ExpressionError(
                node, f'invalid left operand. Expected a number but got "{left}"',
                name=ARITHMETIC_ERROR,
            )
        if not is_numeric(right):
            raise ExpressionError(
                node, f'invalid right operand. Expected a number but got "{right}"',
                name=ARITHMETIC_ERROR,
            )
        try:
            return apply_operator(node.operator, left, right)
        except ValueError as e:
            raise ExpressionError(node, f"invalid operation. {e}", name=ARITHMETIC_ERROR) from e

    def _interpret_helper(self, node: HelperFunctionExpression) -> Any:
        module, helper = self._resolve_helper(node)
        helper.validate(node)
        logger.debug("Running helper @%s of %s", node.name, module.contextual_name)
        return helper.run(module, node, self.interpreters)

    def _interpret_block(self, node: BlockExpression,
                         block_module: Optional[str],
                         block_initializer: Optional[Callable[[], None]]) -> List[Action]:
        actions: List[Action] = []
        with self.bindings.scope(module=block_module):
            if block_initializer is not None:
                block_initializer()
            for statement in node.body:
                actions.extend(self.interpret_node(statement))
        return actions

    def _interpret_command(self, node: CommandExpression) -> List[Action]:
        module = self._resolve_command_module(node)
        command = module.get_command(node.name)
        command.validate(node)
        logger.debug("Running command %s:%s", module.contextual_name, node.name)
        return list(command.run(module, node, self.interpreters) or [])

"""
std commands: load, set, exec, raw, switch
"""

from __future__ import annotations

import logging
from typing import Any, List

from daoscript.ast import AsExpression, CommandExpression, VariableIdentifier
from daoscript.chain.abi import encode_function_call
from daoscript.chain.address import checksum, is_valid_address
from daoscript.chain.numbers import is_numeric
from daoscript.errors import CommandError, DaoScriptError
from daoscript.runtime.actions import Action, ProviderAction, TransactionAction
from daoscript.runtime.bindings import BindingsSpace
from daoscript.runtime.command import (
    Arity,
    Command,
    NodesInterpreters,
    get_opt_value,
    literal_text,
)

logger = logging.getLogger(__name__)

NETWORKS = {
    "mainnet": 1,
    "ethereum": 1,
    "rinkeby": 4,
    "goerli": 5,
    "optimism": 10,
    "gnosis": 100,
    "xdai": 100,
    "polygon": 137,
    "arbitrum": 42161,
    "sepolia": 11155111,
}


def _check_value(c: CommandExpression, value: Any) -> int:
    if value is None:
        return 0
    if not is_numeric(value) or value < 0:
        raise CommandError(c, f"invalid --value option. Expected a positive number, but got {value}")
    return value


def _check_target(c: CommandExpression, target: Any) -> str:
    if not is_valid_address(target):
        raise CommandError(c, f"invalid target. Expected an address, but got {target}")
    return checksum(target)


class LoadCommand(Command):
    """``load <module> [as <alias>]``"""

    name = "load"
    arity = Arity.exactly(1)

    def run(self, module, c, interpreters: NodesInterpreters) -> List[Action]:
        target = c.args[0]
        if isinstance(target, AsExpression):
            name = interpreters.interpret_node(target.left, treat_as_literal=True)
            alias = interpreters.interpret_node(target.right, treat_as_literal=True)
        else:
            name = interpreters.interpret_node(target, treat_as_literal=True)
            alias = None

        try:
            module.load(name, alias)
        except DaoScriptError as e:
            raise CommandError(c, e.message) from e
        return []

    def build_completion_items_for_arg(self, arg_index, bindings) -> List[str]:
        from daoscript.modules import MODULES

        return [name for name in MODULES if name != "std"] if arg_index == 0 else []

    def pre_validate(self, c: CommandExpression) -> None:
        from daoscript.modules import MODULES

        super().pre_validate(c)
        target = c.args[0]
        name = literal_text(target.left if isinstance(target, AsExpression) else target)
        if name is not None and name not in MODULES:
            raise CommandError(c, f"module {name} not found")


class SetCommand(Command):
    """``set $var <value>``: bind a user variable in the current scope."""

    name = "set"
    arity = Arity.exactly(2)

    def run(self, module, c, interpreters: NodesInterpreters) -> List[Action]:
        var_node, value_node = c.args
        if not isinstance(var_node, VariableIdentifier):
            raise CommandError(c, f"expected a variable identifier, but got {literal_text(var_node)}")

        value = interpreters.interpret_node(value_node)
        module.bindings.set_binding(var_node.value, value, BindingsSpace.USER)
        logger.debug("Set %s", var_node.value)
        return []

    def pre_validate(self, c: CommandExpression) -> None:
        super().pre_validate(c)
        if not isinstance(c.args[0], VariableIdentifier):
            raise CommandError(c, f"expected a variable identifier, but got {literal_text(c.args[0])}")


class ExecCommand(Command):
    """``exec <target> <signature> [...params] [--value n]``"""

    name = "exec"
    arity = Arity.at_least(2)
    options = ("value",)

    def run(self, module, c, interpreters: NodesInterpreters) -> List[Action]:
        target_node, signature_node, *param_nodes = c.args
        target = _check_target(c, interpreters.interpret_node(target_node))
        signature = interpreters.interpret_node(signature_node, treat_as_literal=True)
        params = interpreters.interpret_nodes(param_nodes)
        value = _check_value(c, get_opt_value(c, "value", interpreters.interpret_node))

        try:
            data = encode_function_call(signature, params)
        except DaoScriptError as e:
            raise CommandError(c, f"error when encoding {signature} call: {e.message}") from e
        return [TransactionAction(to=target, data=data, value=value)]


class RawCommand(Command):
    """``raw <target> <data> [--value n] [--from address]``"""

    name = "raw"
    arity = Arity.exactly(2)
    options = ("value", "from")

    def run(self, module, c, interpreters: NodesInterpreters) -> List[Action]:
        target = _check_target(c, interpreters.interpret_node(c.args[0]))
        data = interpreters.interpret_node(c.args[1])
        if not isinstance(data, str) or not data.startswith("0x"):
            raise CommandError(c, f"invalid data. Expected hex bytes, but got {data}")

        value = _check_value(c, get_opt_value(c, "value", interpreters.interpret_node))
        from_ = get_opt_value(c, "from", interpreters.interpret_node)
        if from_ is not None:
            if not is_valid_address(from_):
                raise CommandError(c, f"invalid --from option. Expected an address, but got {from_}")
            from_ = checksum(from_)
        return [TransactionAction(to=target, data=data, value=value, from_=from_)]


class SwitchCommand(Command):
    """``switch <network>``: request a change of network (by name or chain id)."""

    name = "switch"
    arity = Arity.exactly(1)

    def run(self, module, c, interpreters: NodesInterpreters) -> List[Action]:
        network = interpreters.interpret_node(c.args[0], treat_as_literal=True)
        if is_numeric(network):
            chain_id = network
        elif isinstance(network, str) and network.isdigit():
            chain_id = int(network)
        elif isinstance(network, str) and network.lower() in NETWORKS:
            chain_id = NETWORKS[network.lower()]
        else:
            names = ", ".join(NETWORKS)
            raise CommandError(c, f"network {network} not supported. Use one of: {names}")

        return [ProviderAction("wallet_switchEthereumChain", [{"chainId": hex(chain_id)}])]

    def build_completion_items_for_arg(self, arg_index, bindings) -> List[str]:
        return list(NETWORKS) if arg_index == 0 else []


commands = {
    command.name: command
    for command in (LoadCommand(), SetCommand(), ExecCommand(), RawCommand(), SwitchCommand())
}

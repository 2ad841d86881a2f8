"""
``forward <...forwarders> (block) [--context text]``

The last listed forwarder is the one the sender calls; each forwarder
forwards to the one listed before it, and the first listed executes the
block's actions.
"""

from __future__ import annotations

from typing import List

from daoscript.ast import BlockExpression
from daoscript.chain.address import is_valid_address
from daoscript.chain.callscript import batch_forwarder_actions
from daoscript.errors import CommandError, ErrorException, comma_list_items
from daoscript.modules.aragonos.utils import get_dao_app_identifiers
from daoscript.runtime.actions import Action, is_provider_action
from daoscript.runtime.command import Arity, Command, NodesInterpreters, get_opt_value


class ForwardCommand(Command):
    name = "forward"
    arity = Arity.at_least(2)
    options = ("context",)

    def run(self, module, c, interpreters: NodesInterpreters) -> List[Action]:
        *forwarder_nodes, block_node = c.args
        if not isinstance(block_node, BlockExpression):
            raise CommandError(c, "last argument should be a set of commands")

        forwarders = interpreters.interpret_nodes(forwarder_nodes, allow_not_found_error=True)
        invalid = [f for f in forwarders if not is_valid_address(f)]
        if invalid:
            raise ErrorException(f"{comma_list_items(invalid)} are not valid forwarder address")

        actions = interpreters.interpret_node(block_node, block_module=module.contextual_name)
        if any(is_provider_action(a) for a in actions):
            raise ErrorException("can't switch networks inside a connect command")

        context = get_opt_value(c, "context", interpreters.interpret_node)
        return batch_forwarder_actions(actions, list(reversed(forwarders)), context)

    def build_completion_items_for_arg(self, arg_index, bindings) -> List[str]:
        return get_dao_app_identifiers(bindings)

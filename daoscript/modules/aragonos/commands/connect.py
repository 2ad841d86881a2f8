"""
``connect <dao> [...forwarders] (block) [--context text]``

Loads an organization, makes it the current one inside the block and
routes the block's actions through the forwarder path. The first listed
forwarder is the one the sender calls.
"""

from __future__ import annotations

import logging
from typing import List

from daoscript.ast import BlockExpression
from daoscript.chain.address import addresses_equal, checksum, is_valid_address
from daoscript.chain.callscript import batch_forwarder_actions
from daoscript.errors import CommandError, comma_list_items
from daoscript.modules.aragonos.dao import AragonDAO
from daoscript.modules.aragonos.helpers import aragon_ens
from daoscript.modules.aragonos.utils import bind_dao_apps, get_dao_app_identifiers
from daoscript.runtime.actions import Action, is_provider_action
from daoscript.runtime.command import Arity, Command, NodesInterpreters, get_opt_value

logger = logging.getLogger(__name__)

DAO_ENS_SUFFIX = "aragonid.eth"


class ConnectCommand(Command):
    name = "connect"
    arity = Arity.at_least(2)
    options = ("context",)

    def run(self, module, c, interpreters: NodesInterpreters) -> List[Action]:
        dao_node, *forwarder_nodes, block_node = c.args
        if not isinstance(block_node, BlockExpression):
            raise CommandError(c, "last argument should be a set of commands")

        dao_address = self._resolve_dao_address(module, c, interpreters)
        current = module.current_dao
        if current is not None and addresses_equal(current.address, dao_address):
            raise CommandError(c, f"trying to connect to an already connected DAO ({dao_address})")

        dao = module.get_connected_dao(dao_address)
        if dao is None:
            dao = AragonDAO.create(
                dao_address,
                module.connector(),
                module.signer,
                module.ipfs_resolver,
                module.context.artifact_cache,
            )
            module.connected_daos.append(dao)

        forwarders = self._resolve_forwarders(c, dao, interpreters.interpret_nodes(
            forwarder_nodes, treat_as_literal=True
        ))
        context = get_opt_value(c, "context", interpreters.interpret_node)

        def initialize_block():
            module.current_dao = dao
            bind_dao_apps(module.bindings, dao)

        actions = interpreters.interpret_node(
            block_node,
            block_module=module.contextual_name,
            block_initializer=initialize_block,
        )

        if any(is_provider_action(a) for a in actions):
            raise CommandError(c, "can't switch networks inside a connect command")

        if not forwarders:
            return actions
        return batch_forwarder_actions(actions, forwarders, context)

    def _resolve_dao_address(self, module, c, interpreters: NodesInterpreters) -> str:
        dao = interpreters.interpret_node(c.args[0], treat_as_literal=True)
        if is_valid_address(dao):
            return checksum(dao)

        ens_name = dao if str(dao).endswith(".eth") else f"{dao}.{DAO_ENS_SUFFIX}"
        address = aragon_ens(ens_name, module)
        if address is None:
            raise CommandError(c, f"ENS DAO {ens_name} couldn't be resolved")
        return address

    def _resolve_forwarders(self, c, dao: AragonDAO, values) -> List[str]:
        forwarders, invalid = [], []
        for value in values:
            if is_valid_address(value):
                forwarders.append(checksum(value))
                continue
            app = dao.resolve_app(str(value))
            if app is None:
                invalid.append(value)
            else:
                forwarders.append(app.address)
        if invalid:
            raise CommandError(c, f"{comma_list_items(invalid)} are not valid forwarder address")
        return forwarders

    def build_completion_items_for_arg(self, arg_index, bindings) -> List[str]:
        return get_dao_app_identifiers(bindings) if arg_index > 0 else []

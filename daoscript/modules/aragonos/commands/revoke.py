"""
``revoke <grantee> <app> <role> [removeManager] [--dao address]``
"""

from __future__ import annotations

import logging
from typing import List

from daoscript.errors import CommandError
from daoscript.modules.aragonos.utils import (
    DAO_OPT_NAME,
    check_permission_args,
    get_app_permission,
    get_dao_app_identifiers,
    get_dao_by_option,
)
from daoscript.runtime.actions import Action, TransactionAction
from daoscript.runtime.command import Arity, Command, NodesInterpreters, literal_text

logger = logging.getLogger(__name__)


class RevokeCommand(Command):
    name = "revoke"
    arity = Arity.between(3, 4)
    options = (DAO_OPT_NAME,)

    def run(self, module, c, interpreters: NodesInterpreters) -> List[Action]:
        interpret_node = interpreters.interpret_node
        dao = get_dao_by_option(module, c, interpret_node)

        grantee_value = interpret_node(c.args[0])
        app_value = interpret_node(c.args[1])
        role_text = interpret_node(c.args[2], treat_as_literal=True)
        grantee, app_address = check_permission_args(c, grantee_value, app_value, role_text)
        app_text = literal_text(c.args[1]) or app_address
        app, role = get_app_permission(c, dao, app_address, app_text, role_text)
        permission = app.permissions[role]

        remove_manager = False
        if len(c.args) == 4:
            remove_manager = interpret_node(c.args[3])
            if not isinstance(remove_manager, bool):
                raise CommandError(
                    c, f"invalid remove manager flag. Expected a boolean, but got {remove_manager}"
                )

        if not permission.has_grantee(grantee):
            raise CommandError(c, f"grantee {grantee} doesn't have the given permission")

        acl = dao.acl
        actions = [
            TransactionAction(
                to=acl.address,
                data=acl.interface.encode_function_data("revokePermission", [grantee, app_address, role]),
            )
        ]
        permission.grantees = {g for g in permission.grantees if g.lower() != grantee.lower()}

        if remove_manager:
            actions.append(
                TransactionAction(
                    to=acl.address,
                    data=acl.interface.encode_function_data("removePermissionManager", [app_address, role]),
                )
            )
            permission.manager = None

        logger.debug("Revoking %s on %s from %s", role_text, app_address, grantee)
        return actions

    def build_completion_items_for_arg(self, arg_index, bindings) -> List[str]:
        return get_dao_app_identifiers(bindings) if arg_index in (0, 1) else []

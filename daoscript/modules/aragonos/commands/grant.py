"""
``grant <grantee> <app> <role> [manager] [--dao address]``
"""

from __future__ import annotations

import logging
from typing import List

from daoscript.chain.address import ZERO_ADDRESS, addresses_equal, checksum, is_valid_address
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


class GrantCommand(Command):
    name = "grant"
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

        if permission.has_grantee(grantee):
            raise CommandError(c, f"grantee {grantee} already has given permission on app {app_text}")

        acl = dao.acl
        if permission.manager is None:
            if len(c.args) < 4:
                raise CommandError(c, "required permission manager missing")
            manager = interpret_node(c.args[3])
            if not is_valid_address(manager) or addresses_equal(manager, ZERO_ADDRESS):
                raise CommandError(
                    c, f"invalid permission manager. Expected an address, but got {manager}"
                )
            permission.manager = checksum(manager)
            data = acl.interface.encode_function_data(
                "createPermission", [grantee, app_address, role, permission.manager]
            )
        else:
            if len(c.args) == 4:
                manager = interpret_node(c.args[3])
                if not addresses_equal(manager, permission.manager):
                    raise CommandError(c, f"a permission manager for role {role_text} already exists")
            data = acl.interface.encode_function_data("grantPermission", [grantee, app_address, role])

        permission.grantees.add(grantee)
        logger.debug("Granting %s on %s to %s", role_text, app_address, grantee)
        return [TransactionAction(to=acl.address, data=data)]

    def build_completion_items_for_arg(self, arg_index, bindings) -> List[str]:
        return get_dao_app_identifiers(bindings) if arg_index in (0, 1, 3) else []

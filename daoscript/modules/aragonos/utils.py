"""
aragonos helpers shared by commands: app identifiers, version checks,
organization selection and permission argument validation.
"""

from __future__ import annotations

import re
from typing import TYPE_CHECKING, Any, Callable, List, Optional, Tuple

from daoscript.ast import CommandExpression
from daoscript.chain.address import checksum, is_valid_address
from daoscript.errors import CommandError, ErrorInvalid, list_items
from daoscript.modules.aragonos.dao import DEFAULT_REGISTRY, AragonDAO, App
from daoscript.runtime.bindings import Binding, BindingsManager, BindingsSpace
from daoscript.runtime.command import get_opt_value

if TYPE_CHECKING:
    from daoscript.modules.aragonos.module import AragonOS

DAO_OPT_NAME = "dao"

SEMANTIC_VERSION_REGEX = re.compile(r"^\d+\.\d+\.\d+$")

APP_IDENTIFIER_REGEX = re.compile(
    r"^(?P<name>[a-z0-9]+(?:-[a-z0-9]+)*)"
    r"(?:\.(?P<registry>[a-z0-9]+(?:-[a-z0-9]+)*(?:\.[a-z0-9]+(?:-[a-z0-9]+)*)*))?"
    r"(?::(?P<label>[A-Za-z0-9-]+))?$"
)

ROLE_HASH_REGEX = re.compile(r"^0x[0-9a-fA-F]{64}$")


def _full_registry(registry: Optional[str]) -> str:
    if not registry:
        return DEFAULT_REGISTRY
    return registry if registry.endswith(".eth") else f"{registry}.{DEFAULT_REGISTRY}"


def is_app_identifier(identifier: Any) -> bool:
    return isinstance(identifier, str) and bool(APP_IDENTIFIER_REGEX.match(identifier))


def parse_app_identifier(identifier: str) -> Tuple[str, str, Optional[str]]:
    """
    ``name[.registry][:label]`` -> (name, full registry, label).

    Raises:
        ErrorInvalid: malformed identifier
    """
    match = APP_IDENTIFIER_REGEX.match(identifier) if isinstance(identifier, str) else None
    if not match:
        raise ErrorInvalid(f"invalid app identifier {identifier}")
    return match.group("name"), _full_registry(match.group("registry")), match.group("label")


def parse_labeled_app_identifier(identifier: str) -> Tuple[str, str]:
    """
    (app name, registry) of an identifier used to install an app.

    The label is required (``voting:new``, never bare ``voting``).

    Raises:
        ErrorInvalid: malformed identifier or missing label
    """
    name, registry, label = parse_app_identifier(identifier)
    if not label:
        raise ErrorInvalid(f"invalid labeled identifier {identifier}")
    return name, registry


def get_dao_app_identifiers(bindings: BindingsManager) -> List[str]:
    """App identifiers visible in ADDR space, for completion."""
    return [
        b.name for b in bindings.get_all_bindings(
            BindingsSpace.ADDR, lambda b: is_app_identifier(b.name)
        )
    ]


def bind_dao_apps(bindings: BindingsManager, dao: AragonDAO) -> None:
    bindings.set_bindings([
        Binding(identifier, address, BindingsSpace.ADDR)
        for identifier, address in dao.app_bindings().items()
    ])


def get_dao_by_option(module: "AragonOS", c: CommandExpression,
                      interpret_node: Callable[..., Any]) -> AragonDAO:
    """Organization chosen with ``--dao`` or, by default, the current one."""
    dao_address = get_opt_value(c, DAO_OPT_NAME, interpret_node)
    if dao_address is not None:
        if not is_valid_address(dao_address):
            raise CommandError(c, f"invalid --dao option. Expected an address, but got {dao_address}")
        dao = module.get_connected_dao(dao_address)
        if dao is None:
            raise CommandError(c, f"--dao option must be an address of a connected DAO, but got {dao_address}")
        return dao

    dao = module.current_dao
    if dao is None:
        raise CommandError(c, 'must be used within a "connect" command')
    return dao


def check_permission_args(c: CommandExpression, grantee: Any, app: Any,
                          role: Any) -> Tuple[str, str]:
    """Validate the (grantee, app, role) triple; all problems are reported together."""
    errors = []
    if not is_valid_address(grantee):
        errors.append(f"Invalid grantee. Expected an address, but got {grantee}")
    if not is_valid_address(app):
        errors.append(f"Invalid app. Expected an address, but got {app}")
    if not isinstance(role, str) or (role.startswith("0x") and not ROLE_HASH_REGEX.match(role)):
        errors.append(f"Invalid role. Expected a valid hash, but got {role}")
    if errors:
        raise CommandError(c, list_items("invalid permission provided", errors))
    return checksum(grantee), checksum(app)


def get_app_permission(c: CommandExpression, dao: AragonDAO, app_address: str,
                       app_text: str, role: str) -> Tuple[App, str]:
    """App and role hash of a permission; fails when the app doesn't define it."""
    app = dao.resolve_app_by_address(app_address)
    role_key = app.resolve_role(role) if app else None
    if role_key is None:
        raise CommandError(c, f"given permission doesn't exists on app {app_text}")
    return app, role_key

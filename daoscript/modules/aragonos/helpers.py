"""
aragonos helpers: @aragonEns
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Any, Optional

from daoscript.chain.address import is_valid_address
from daoscript.chain.ens import get_aragon_ens_registry, resolve_name
from daoscript.errors import HelperFunctionError
from daoscript.runtime.command import Arity, Helper, NodesInterpreters

if TYPE_CHECKING:
    from daoscript.modules.aragonos.module import AragonOS


def aragon_ens(ens_name: str, module: "AragonOS", ens_resolver: Optional[str] = None) -> Optional[str]:
    """
    Resolve ``ens_name`` through the organization ENS registry.

    The registry is, in order: the explicit ``ens_resolver``, the
    ``$aragonos:ensResolver`` binding, the configured resolver, and the
    default registry of the signer's network.
    """
    registry = (
        ens_resolver
        or module.get_config_binding("ensResolver")
        or module.context.config.ens_resolver
        or get_aragon_ens_registry(module.signer.get_chain_id())
    )
    return resolve_name(ens_name, registry, module.signer.provider)


class AragonEnsHelper(Helper):
    name = "aragonEns"
    arity = Arity.between(1, 2)

    def run(self, module, h, interpreters: NodesInterpreters) -> Any:
        ens_name = interpreters.interpret_node(h.args[0], treat_as_literal=True)
        resolver = interpreters.interpret_node(h.args[1]) if len(h.args) > 1 else None
        if resolver is not None and not is_valid_address(resolver):
            raise HelperFunctionError(h, f"invalid ENS resolver. Expected an address, but got {resolver}")

        address = aragon_ens(ens_name, module, resolver)
        if address is None:
            raise HelperFunctionError(h, f"ENS name {ens_name} couldn't be resolved")
        return address


helpers = {helper.name: helper for helper in (AragonEnsHelper(),)}

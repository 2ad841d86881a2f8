"""
aragonos module: organization connection, app installation, permissions
and forwarding.
"""

from __future__ import annotations

import logging
from typing import List, Optional

from daoscript.chain.address import addresses_equal, calculate_new_proxy_address
from daoscript.clients.connector import Connector
from daoscript.errors import ErrorNotFound
from daoscript.modules.aragonos.commands import commands
from daoscript.modules.aragonos.dao import AragonDAO
from daoscript.modules.aragonos.helpers import helpers
from daoscript.runtime.bindings import BindingsSpace
from daoscript.runtime.module import Module, SessionContext

logger = logging.getLogger(__name__)

CURRENT_DAO_BINDING = "currentDAO"


class AragonOS(Module):
    name = "aragonos"
    commands = commands
    helpers = helpers

    def __init__(self, context: SessionContext, alias: Optional[str] = None):
        super().__init__(context, alias)
        self.connected_daos: List[AragonDAO] = []

    @property
    def current_dao(self) -> Optional[AragonDAO]:
        return self.bindings.get_binding_value(CURRENT_DAO_BINDING, BindingsSpace.DATA_PROVIDER)

    @current_dao.setter
    def current_dao(self, dao: Optional[AragonDAO]) -> None:
        if dao is None:
            return
        self.bindings.set_binding(CURRENT_DAO_BINDING, dao, BindingsSpace.DATA_PROVIDER)

    def get_connected_dao(self, dao_address: str) -> Optional[AragonDAO]:
        for dao in self.connected_daos:
            if addresses_equal(dao.kernel.address, dao_address):
                return dao
        return None

    def connector(self) -> Connector:
        subgraph_url = self.get_config_binding("subgraphUrl") or self.context.config.subgraph_url
        return Connector(
            self.signer.get_chain_id(),
            subgraph_url=subgraph_url,
            timeout=self.context.config.http_timeout,
        )

    def register_next_proxy_address(self, identifier: str, dao_address: str) -> str:
        """Predict the address of the next proxy the kernel deploys and bind it to ``identifier``."""
        dao = self.get_connected_dao(dao_address)
        if dao is None:
            raise ErrorNotFound(f"couldn't found DAO {dao_address}")

        kernel_address = dao.kernel.address
        nonce = self.next_nonce(kernel_address)
        address = calculate_new_proxy_address(kernel_address, nonce)
        self.bindings.set_binding(identifier, address, BindingsSpace.ADDR)
        logger.debug("Predicted proxy %s for %s (nonce %d)", address, identifier, nonce)
        return address

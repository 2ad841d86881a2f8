"""
``install <name[.registry]:label> [...initParams] [--version x.y.z] [--dao address]``
"""

from __future__ import annotations

import logging
from typing import List

from daoscript.ast import CommandExpression
from daoscript.chain.abi import encode_calldata
from daoscript.chain.ens import namehash
from daoscript.errors import CommandError, DaoScriptError
from daoscript.modules.aragonos.dao import App, build_app_artifact, build_app_permissions
from daoscript.modules.aragonos.helpers import aragon_ens
from daoscript.modules.aragonos.repo import RepoContract
from daoscript.modules.aragonos.utils import (
    DAO_OPT_NAME,
    SEMANTIC_VERSION_REGEX,
    get_dao_by_option,
    parse_labeled_app_identifier,
)
from daoscript.runtime.actions import Action, TransactionAction
from daoscript.runtime.bindings import BindingsSpace
from daoscript.runtime.command import Arity, Command, NodesInterpreters, get_opt_value, literal_text

logger = logging.getLogger(__name__)

NEW_APP_INSTANCE = "newAppInstance(bytes32,address,bytes,bool)"


def _check_version(c: CommandExpression, version) -> None:
    if version is not None and not SEMANTIC_VERSION_REGEX.match(str(version)):
        raise CommandError(
            c, f"invalid --version option. Expected a semantic version, but got {version}"
        )


class InstallCommand(Command):
    name = "install"
    arity = Arity.at_least(1)
    options = (DAO_OPT_NAME, "version")

    def run(self, module, c, interpreters: NodesInterpreters) -> List[Action]:
        interpret_node = interpreters.interpret_node
        dao = get_dao_by_option(module, c, interpret_node)

        identifier_node, *param_nodes = c.args
        identifier = interpret_node(identifier_node, treat_as_literal=True)
        try:
            app_name, registry = parse_labeled_app_identifier(identifier)
        except DaoScriptError as e:
            raise CommandError(c, e.message) from e

        if dao.resolve_app(identifier):
            raise CommandError(c, f"identifier {identifier} is already in use.")

        version = get_opt_value(c, "version", interpret_node, treat_as_literal=True)
        _check_version(c, version)

        repo_ens_name = f"{app_name}.{registry}"
        repo_address = aragon_ens(repo_ens_name, module)
        if not repo_address:
            raise CommandError(c, f"ENS repo name {repo_ens_name} couldn't be resolved")

        repo_version = RepoContract(repo_address, module.signer).get_version(version)
        code_address = repo_version.code_address
        content_uri = repo_version.content_uri

        cache_key = code_address.lower()
        if cache_key not in dao.app_artifact_cache:
            raw = module.ipfs_resolver.fetch_artifact(content_uri)
            dao.app_artifact_cache[cache_key] = build_app_artifact(raw)
        artifact = dao.app_artifact_cache[cache_key]

        init_params = interpreters.interpret_nodes(param_nodes)
        try:
            encoded_initialize = encode_calldata(artifact.interface.get_function("initialize"), init_params)
        except DaoScriptError as e:
            raise CommandError(c, e.message) from e

        if not module.bindings.has_binding(identifier, BindingsSpace.ADDR):
            module.register_next_proxy_address(identifier, dao.kernel.address)
        proxy_address = module.bindings.get_binding_value(identifier, BindingsSpace.ADDR)

        dao.app_cache[identifier] = App(
            name=app_name,
            address=proxy_address,
            code_address=code_address,
            content_uri=content_uri,
            registry_name=registry,
            artifact=artifact,
            permissions=build_app_permissions(artifact),
        )
        logger.debug("Installing %s (%s) at %s", identifier, code_address, proxy_address)

        app_id = namehash(repo_ens_name)
        return [
            TransactionAction(
                to=dao.kernel.address,
                data=dao.kernel.interface.encode_function_data(
                    NEW_APP_INSTANCE, [app_id, code_address, encoded_initialize, False]
                ),
            )
        ]

    def pre_validate(self, c: CommandExpression) -> None:
        super().pre_validate(c)
        identifier = literal_text(c.args[0])
        if identifier is not None:
            try:
                parse_labeled_app_identifier(identifier)
            except DaoScriptError as e:
                raise CommandError(c, e.message) from e
        opt = c.get_opt("version")
        if opt is not None:
            _check_version(c, literal_text(opt.value))

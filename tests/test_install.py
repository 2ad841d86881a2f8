"""Test app installation inside an organization."""
import pytest
from eth_utils import to_checksum_address

from daoscript.chain.abi import encode_function_call
from daoscript.chain.ens import namehash
from daoscript.errors import CommandError
from daoscript.runtime.bindings import BindingsSpace

from builders import (
    DAO,
    TOKEN,
    VOTING,
    VOTING_CODE_V2,
    VOTING_REPO,
    XDAI_ENS_REGISTRY,
    addr,
    cmd,
    connect,
    ident,
    load_aragonos,
    num,
    string,
)

PROXY_NONCE_0 = to_checksum_address("0xcd234a471b72ba2f1ccf0a70fcaba648a5eecd8d")
PROXY_NONCE_1 = to_checksum_address("0x343c43a37d37dff08ae8c4a11544c718abb4fcf8")

VOTING_INIT_ARGS = (addr(TOKEN), num("5e17"), num("15e16"), num(604800))


def install_voting(identifier="voting:new", opts=None):
    return cmd("install", ident(identifier), *VOTING_INIT_ARGS, opts=opts)


def expected_install_data():
    initialize = encode_function_call(
        "initialize(address,uint64,uint64,uint64)", [TOKEN, 5 * 10 ** 17, 15 * 10 ** 16, 604800]
    )
    return encode_function_call(
        "newAppInstance(bytes32,address,bytes,bool)",
        [namehash("voting.aragonpm.eth"), VOTING_CODE_V2, initialize, False],
    )


def ipfs_requests(registry):
    return [r for r in registry.request_history if r.method == "GET"]


class TestInstallCommand:
    """Tests for install."""

    def test_install_action(self, make_interpreter, dao_registry):
        """Test install produces one newAppInstance call on the kernel."""
        interpreter = make_interpreter(load_aragonos(), connect(install_voting()))
        (action,) = interpreter.interpret()

        assert action.to == to_checksum_address(DAO)
        assert action.data == expected_install_data()
        assert action.value == 0

    def test_proxy_address_bound(self, make_interpreter, dao_registry, provider):
        """Test the predicted proxy address is usable right after install."""
        interpreter = make_interpreter(
            load_aragonos(),
            connect(
                install_voting(),
                cmd("exec", ident("voting:new"), string("deposit()")),
            ),
        )
        install_action, exec_action = interpreter.interpret()
        assert exec_action.to == PROXY_NONCE_0

    def test_consecutive_installs_increment_nonce(self, make_interpreter, dao_registry, provider):
        """Test the nonce is read once then incremented in memory."""
        interpreter = make_interpreter(
            load_aragonos(),
            connect(
                install_voting("voting:first"),
                install_voting("voting:second"),
                cmd("exec", ident("voting:first"), string("deposit()")),
                cmd("exec", ident("voting:second"), string("deposit()")),
            ),
        )
        actions = interpreter.interpret()

        assert [a.to for a in actions[2:]] == [PROXY_NONCE_0, PROXY_NONCE_1]
        assert provider.nonce_reads == [to_checksum_address(DAO)]

    def test_onchain_nonce_used(self, make_interpreter, dao_registry, provider):
        """Test the prediction starts at the kernel's current nonce."""
        provider.nonces[DAO] = 1
        interpreter = make_interpreter(
            load_aragonos(),
            connect(install_voting(), cmd("exec", ident("voting:new"), string("deposit()"))),
        )
        actions = interpreter.interpret()
        assert actions[1].to == PROXY_NONCE_1

    def test_artifact_fetched_once(self, make_interpreter, dao_registry):
        """Test the artifact of a code address is fetched once per session."""
        interpreter = make_interpreter(
            load_aragonos(),
            connect(install_voting("voting:first"), install_voting("voting:second")),
        )
        interpreter.interpret()
        assert len(ipfs_requests(dao_registry)) == 1

    def test_specific_version(self, make_interpreter, dao_registry):
        """Test --version reads the repo by semantic version."""
        interpreter = make_interpreter(
            load_aragonos(), connect(install_voting(opts={"version": string("2.0.0")}))
        )
        (action,) = interpreter.interpret()
        assert action.data == expected_install_data()

    def test_duplicate_identifier(self, make_interpreter, dao_registry, provider):
        """Test an identifier already in the organization fails before any lookup."""
        interpreter = make_interpreter(load_aragonos(), connect(install_voting("voting:0")))
        with pytest.raises(CommandError, match="identifier voting:0 is already in use."):
            interpreter.interpret()

        assert provider.calls_to(XDAI_ENS_REGISTRY) == []
        assert provider.calls_to(VOTING_REPO) == []
        assert ipfs_requests(dao_registry) == []

    def test_duplicate_installed_identifier(self, make_interpreter, dao_registry):
        """Test installing twice under the same label fails."""
        interpreter = make_interpreter(
            load_aragonos(), connect(install_voting(), install_voting())
        )
        with pytest.raises(CommandError, match="identifier voting:new is already in use."):
            interpreter.interpret()

    def test_unlabeled_identifier(self, make_interpreter, dao_registry, provider):
        """Test a bare app name is rejected when the organization already has the app."""
        interpreter = make_interpreter(
            load_aragonos(),
            connect(
                cmd("install", ident("voting"), *VOTING_INIT_ARGS),
                cmd("exec", ident("voting"), string("deposit()")),
            ),
        )
        with pytest.raises(CommandError, match="invalid labeled identifier voting"):
            interpreter.interpret()

        assert provider.calls_to(XDAI_ENS_REGISTRY) == []
        assert ipfs_requests(dao_registry) == []

    def test_installed_app_never_reuses_existing_proxy(self, make_interpreter, dao_registry):
        """Test a labeled install of an app the organization has gets a new proxy."""
        interpreter = make_interpreter(
            load_aragonos(),
            connect(install_voting(), cmd("exec", ident("voting"), string("deposit()"))),
        )
        _, exec_action = interpreter.interpret()

        module = interpreter.bindings.get_binding_value("ar", BindingsSpace.MODULE)
        (dao,) = module.connected_daos
        assert dao.app_cache["voting:new"].address == PROXY_NONCE_0
        assert dao.resolve_app("voting").address.lower() == VOTING
        assert exec_action.to == to_checksum_address(VOTING)

    def test_invalid_version(self, make_interpreter, dao_registry, provider):
        """Test a malformed --version fails before the repo is read."""
        interpreter = make_interpreter(
            load_aragonos(), connect(install_voting(opts={"version": string("2.0")}))
        )
        with pytest.raises(CommandError) as exc_info:
            interpreter.interpret()
        assert "invalid --version option. Expected a semantic version, but got 2.0" in str(exc_info.value)
        assert provider.calls_to(VOTING_REPO) == []

    def test_unresolved_repo(self, make_interpreter, dao_registry, provider):
        """Test an app without a published repo fails."""
        from daoscript.chain.address import ZERO_ADDRESS

        provider.on_call(
            XDAI_ENS_REGISTRY, "resolver(bytes32)", [namehash("finance.aragonpm.eth")],
            ["address"], [ZERO_ADDRESS],
        )
        interpreter = make_interpreter(load_aragonos(), connect(cmd("install", ident("finance:new"))))
        with pytest.raises(CommandError, match="ENS repo name finance.aragonpm.eth couldn't be resolved"):
            interpreter.interpret()

    def test_invalid_identifier(self, make_interpreter, dao_registry):
        """Test malformed identifiers fail."""
        interpreter = make_interpreter(load_aragonos(), connect(cmd("install", ident("Voting!"))))
        with pytest.raises(CommandError, match="invalid app identifier Voting!"):
            interpreter.interpret()

    def test_initialize_params_checked(self, make_interpreter, dao_registry):
        """Test initialize parameters are encoded against the artifact."""
        interpreter = make_interpreter(
            load_aragonos(), connect(cmd("install", ident("voting:new"), addr(TOKEN)))
        )
        with pytest.raises(CommandError, match="invalid number of parameters"):
            interpreter.interpret()

    def test_outside_connect(self, make_interpreter):
        """Test install needs a current organization."""
        interpreter = make_interpreter(load_aragonos(), cmd("install", ident("voting:new"), module="ar"))
        with pytest.raises(CommandError, match='must be used within a "connect" command'):
            interpreter.interpret()

    def test_installed_app_cached(self, make_interpreter, dao_registry):
        """Test the installed app joins the organization's app cache."""
        interpreter = make_interpreter(load_aragonos(), connect(install_voting()))
        interpreter.interpret()

        module = interpreter.bindings.get_binding_value("ar", BindingsSpace.MODULE)
        (dao,) = module.connected_daos
        app = dao.app_cache["voting:new"]
        assert app.address == PROXY_NONCE_0
        assert app.code_address == to_checksum_address(VOTING_CODE_V2)
        assert app.registry_name == "aragonpm.eth"

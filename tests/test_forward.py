"""Test forwarding paths for connect and forward."""
import pytest
from eth_utils import to_checksum_address

from daoscript.chain.abi import encode_function_call
from daoscript.chain.callscript import decode_forward_call
from daoscript.errors import CommandError, ErrorException

from builders import (
    DAO,
    SIGNER,
    TOKEN,
    TOKEN_MANAGER,
    VOTING,
    addr,
    block,
    cmd,
    connect,
    ident,
    load_aragonos,
    num,
    string,
)

FORWARD_SELECTOR = encode_function_call("forward(bytes)", ["0x"])[:10]
FORWARD_WITH_CONTEXT_SELECTOR = encode_function_call("forward(bytes,bytes)", ["0x", "0x"])[:10]


def transfer():
    return cmd("exec", addr(TOKEN), string("transfer(address,uint256)"), addr(SIGNER), num(1))


def forward(*forwarders, commands=(), opts=None):
    return cmd("forward", *[ident(f) for f in forwarders], block(*commands), opts=opts)


class TestForwardCommand:
    """Tests for forward."""

    def test_single_forwarder(self, make_interpreter, dao_registry):
        """Test the block's actions are wrapped in one forward call."""
        interpreter = make_interpreter(load_aragonos(), connect(forward("voting", commands=[transfer()])))
        (action,) = interpreter.interpret()

        assert action.to == to_checksum_address(VOTING)
        assert action.data.startswith(FORWARD_SELECTOR)
        (inner,) = decode_forward_call(action.data)
        assert inner.to == to_checksum_address(TOKEN)

    def test_last_forwarder_is_outermost(self, make_interpreter, dao_registry):
        """Test the sender calls the last listed forwarder and the first one executes."""
        interpreter = make_interpreter(
            load_aragonos(),
            connect(forward("voting", "token-manager", commands=[transfer()])),
        )
        (action,) = interpreter.interpret()

        assert action.to == to_checksum_address(TOKEN_MANAGER)
        (middle,) = decode_forward_call(action.data)
        assert middle.to == to_checksum_address(VOTING)
        (inner,) = decode_forward_call(middle.data)
        assert inner.to == to_checksum_address(TOKEN)

    def test_context_on_innermost(self, make_interpreter, dao_registry):
        """Test --context is attached to the call nearest the actions."""
        interpreter = make_interpreter(
            load_aragonos(),
            connect(forward("voting", "token-manager", commands=[transfer()],
                            opts={"context": string("Reason")})),
        )
        (action,) = interpreter.interpret()

        assert action.data.startswith(FORWARD_SELECTOR)
        (middle,) = decode_forward_call(action.data)
        assert middle.data.startswith(FORWARD_WITH_CONTEXT_SELECTOR)

    def test_invalid_forwarders_reported_together(self, make_interpreter, dao_registry):
        """Test every unresolved forwarder is named in one error."""
        interpreter = make_interpreter(
            load_aragonos(), connect(forward("finance", "agent", commands=[transfer()]))
        )
        with pytest.raises(ErrorException, match="finance and agent are not valid forwarder address"):
            interpreter.interpret()

    def test_switch_inside_forward(self, make_interpreter, dao_registry):
        """Test network switches can't be forwarded."""
        interpreter = make_interpreter(
            load_aragonos(),
            connect(forward("voting", commands=[cmd("switch", ident("gnosis"))])),
        )
        with pytest.raises(ErrorException, match="can't switch networks inside a connect command"):
            interpreter.interpret()

    def test_block_required(self, make_interpreter, dao_registry):
        """Test the last argument must be a block."""
        interpreter = make_interpreter(
            load_aragonos(), connect(cmd("forward", ident("voting"), ident("token-manager")))
        )
        with pytest.raises(CommandError, match="last argument should be a set of commands"):
            interpreter.interpret()

    def test_forward_by_address(self, make_interpreter):
        """Test forwarders may be plain addresses outside an organization."""
        interpreter = make_interpreter(
            load_aragonos(),
            cmd("forward", addr(VOTING), block(transfer()), module="ar"),
        )
        (action,) = interpreter.interpret()
        assert action.to == to_checksum_address(VOTING)


class TestConnectForwarders:
    """Tests for the forwarder path of connect."""

    def test_connect_through_forwarder(self, make_interpreter, dao_registry):
        """Test connect wraps its block through the listed app."""
        interpreter = make_interpreter(load_aragonos(), connect(transfer(), forwarders=["voting"]))
        (action,) = interpreter.interpret()

        assert action.to == to_checksum_address(VOTING)
        (inner,) = decode_forward_call(action.data)
        assert inner.to == to_checksum_address(TOKEN)

    def test_connect_first_forwarder_is_outermost(self, make_interpreter, dao_registry):
        """Test the sender calls the first forwarder listed on connect."""
        interpreter = make_interpreter(
            load_aragonos(), connect(transfer(), forwarders=["token-manager", "voting"])
        )
        (action,) = interpreter.interpret()

        assert action.to == to_checksum_address(TOKEN_MANAGER)
        (middle,) = decode_forward_call(action.data)
        assert middle.to == to_checksum_address(VOTING)

    def test_connect_context(self, make_interpreter, dao_registry):
        """Test --context on connect goes on the innermost forward call."""
        interpreter = make_interpreter(
            load_aragonos(),
            connect(transfer(), forwarders=["voting"], opts={"context": string("Reason")}),
        )
        (action,) = interpreter.interpret()
        assert action.data.startswith(FORWARD_WITH_CONTEXT_SELECTOR)

    def test_connect_invalid_forwarders(self, make_interpreter, dao_registry):
        """Test unknown apps are rejected as forwarders."""
        interpreter = make_interpreter(
            load_aragonos(), connect(transfer(), forwarders=["finance", "agent"])
        )
        with pytest.raises(CommandError, match="finance and agent are not valid forwarder address"):
            interpreter.interpret()

    def test_connect_without_forwarders(self, make_interpreter, dao_registry):
        """Test actions are returned as-is without a forwarder path."""
        interpreter = make_interpreter(load_aragonos(), connect(transfer()))
        (action,) = interpreter.interpret()
        assert action.to == to_checksum_address(TOKEN)

    def test_switch_inside_connect(self, make_interpreter, dao_registry):
        """Test network switches are rejected inside connect."""
        interpreter = make_interpreter(load_aragonos(), connect(cmd("switch", ident("gnosis"))))
        with pytest.raises(CommandError, match="can't switch networks inside a connect command"):
            interpreter.interpret()

    def test_dao_address_as_forwarder(self, make_interpreter, dao_registry):
        """Test plain addresses are accepted on connect."""
        interpreter = make_interpreter(load_aragonos(), connect(transfer(), forwarders=[DAO]))
        (action,) = interpreter.interpret()
        assert action.to == to_checksum_address(DAO)

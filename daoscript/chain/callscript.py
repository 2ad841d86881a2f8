"""
Call scripts and forwarder batching.

A call script packs a list of calls as ``0x00000001`` followed by, for
each call, the 20-byte target, the calldata length as uint32 and the
calldata. Forwarders receive such a script through ``forward(bytes)``
(or ``forward(bytes,bytes)`` when a context is attached).
"""

from __future__ import annotations

import logging
from typing import List, Optional, Sequence

from eth_utils import to_bytes, to_hex

from daoscript.chain.abi import decode_function_call, encode_function_call
from daoscript.chain.address import checksum
from daoscript.errors import ErrorInvalid
from daoscript.runtime.actions import TransactionAction

logger = logging.getLogger(__name__)

CALLSCRIPT_ID = "0x00000001"

FORWARD_SIGNATURE = "forward(bytes)"
FORWARD_WITH_CONTEXT_SIGNATURE = "forward(bytes,bytes)"


def encode_call_script(actions: Sequence[TransactionAction]) -> str:
    script = to_bytes(hexstr=CALLSCRIPT_ID)
    for action in actions:
        calldata = to_bytes(hexstr=action.data) if action.data else b""
        script += to_bytes(hexstr=action.to)
        script += len(calldata).to_bytes(4, "big")
        script += calldata
    return to_hex(script)


def decode_call_script(script: str) -> List[TransactionAction]:
    raw = to_bytes(hexstr=script)
    if raw[:4] != to_bytes(hexstr=CALLSCRIPT_ID):
        raise ErrorInvalid(f"unknown call script id {to_hex(raw[:4])}")

    actions: List[TransactionAction] = []
    offset = 4
    while offset < len(raw):
        if offset + 24 > len(raw):
            raise ErrorInvalid("truncated call script")
        to = checksum(to_hex(raw[offset:offset + 20]))
        length = int.from_bytes(raw[offset + 20:offset + 24], "big")
        data = raw[offset + 24:offset + 24 + length]
        if len(data) != length:
            raise ErrorInvalid("truncated call script")
        actions.append(TransactionAction(to=to, data=to_hex(data)))
        offset += 24 + length
    return actions


def encode_forward_call(actions: Sequence[TransactionAction], context: Optional[str] = None) -> str:
    script = encode_call_script(actions)
    if context:
        return encode_function_call(
            FORWARD_WITH_CONTEXT_SIGNATURE, [script, to_hex(text=context)]
        )
    return encode_function_call(FORWARD_SIGNATURE, [script])


def decode_forward_call(data: str) -> List[TransactionAction]:
    """Inverse of ``encode_forward_call`` (context, if any, is dropped)."""
    try:
        (script,) = decode_function_call(FORWARD_SIGNATURE, data)
    except ErrorInvalid:
        script, _ = decode_function_call(FORWARD_WITH_CONTEXT_SIGNATURE, data)
    return decode_call_script(to_hex(script))


def batch_forwarder_actions(
    actions: Sequence[TransactionAction],
    forwarders: Sequence[str],
    context: Optional[str] = None,
) -> List[TransactionAction]:
    """
    Wrap ``actions`` through a forwarder path.

    ``forwarders`` is ordered outermost first: the sender calls
    ``forwarders[0]``, which forwards to ``forwarders[1]`` and so on; the
    last forwarder executes ``actions``. The context, if given, is only
    attached to the innermost forward call.
    """
    batch = list(actions)
    for depth, forwarder in enumerate(reversed(forwarders)):
        data = encode_forward_call(batch, context if depth == 0 else None)
        logger.debug("Wrapped %d action(s) through forwarder %s", len(batch), forwarder)
        batch = [TransactionAction(to=checksum(forwarder), data=data)]
    return batch

"""
std helpers: @me, @id, @date
"""

from __future__ import annotations

from datetime import datetime, timezone
from typing import Any

from eth_utils import keccak, to_hex

from daoscript.chain.numbers import is_numeric, parse_number
from daoscript.errors import HelperFunctionError
from daoscript.runtime.command import Arity, Helper, NodesInterpreters


class MeHelper(Helper):
    """Address of the session's signer."""

    name = "me"
    arity = Arity.exactly(0)

    def run(self, module, h, interpreters: NodesInterpreters) -> Any:
        return module.signer.get_address()


class IdHelper(Helper):
    """keccak256 of a text, as a 0x-prefixed 32-byte hex string."""

    name = "id"
    arity = Arity.exactly(1)

    def run(self, module, h, interpreters: NodesInterpreters) -> Any:
        text = interpreters.interpret_node(h.args[0], treat_as_literal=True)
        if not isinstance(text, str):
            raise HelperFunctionError(h, f"expected a text, but got {text}")
        return to_hex(keccak(text=text))


class DateHelper(Helper):
    """
    Unix timestamp of an ISO-8601 date, optionally shifted by an offset.

    Dates without a timezone are read as UTC. The offset is a signed
    number with an optional time unit, e.g. ``+1d`` or ``-2h``.
    """

    name = "date"
    arity = Arity.between(1, 2)

    def run(self, module, h, interpreters: NodesInterpreters) -> Any:
        date_text = interpreters.interpret_node(h.args[0], treat_as_literal=True)
        try:
            date = datetime.fromisoformat(str(date_text).replace("Z", "+00:00"))
        except ValueError as e:
            raise HelperFunctionError(h, f"invalid date {date_text}") from e
        if date.tzinfo is None:
            date = date.replace(tzinfo=timezone.utc)
        timestamp = int(date.timestamp())

        if len(h.args) > 1:
            timestamp += self._offset(h, interpreters.interpret_node(h.args[1], treat_as_literal=True))
        return timestamp

    def _offset(self, h, offset: Any) -> int:
        if is_numeric(offset):
            return offset
        text = str(offset)
        try:
            if text.startswith("+"):
                return parse_number(text[1:])
            return parse_number(text)
        except ValueError as e:
            raise HelperFunctionError(h, f"invalid offset {offset}") from e


helpers = {helper.name: helper for helper in (MeHelper(), IdHelper(), DateHelper())}

"""
ABI encoding helpers.

Wraps eth-abi with the pieces the interpreter needs: an Interface built
from a JSON ABI (artifact descriptors), encoding of calls from
human-readable signatures, and coercion of script values into the
Python types eth-abi expects.
"""

from __future__ import annotations

import json
from typing import Any, Dict, List, Optional, Sequence, Tuple, Union

from eth_abi import decode, encode
from eth_abi.exceptions import ABITypeError, DecodingError, EncodingError, ParseError
from eth_abi.grammar import TupleType, normalize, parse as parse_abi_type
from eth_utils import function_signature_to_4byte_selector, to_bytes, to_hex

from daoscript.chain.address import checksum, is_valid_address
from daoscript.chain.numbers import is_numeric, parse_number
from daoscript.errors import ErrorInvalid, ErrorNotFound


def split_types(types: str) -> List[str]:
    """Split a comma separated type list, keeping tuple types intact."""
    out: List[str] = []
    depth = 0
    current = ""
    for char in types:
        if char == "(":
            depth += 1
        elif char == ")":
            depth -= 1
        if char == "," and depth == 0:
            out.append(current.strip())
            current = ""
        else:
            current += char
    if current.strip():
        out.append(current.strip())
    return out


def parse_signature(signature: str) -> Tuple[str, List[str]]:
    """
    Parse ``name(type1,type2 paramName,...)`` into name and canonical types.

    Parameter names are allowed and dropped.
    """
    signature = signature.strip()
    open_paren = signature.find("(")
    if open_paren <= 0 or not signature.endswith(")"):
        raise ErrorInvalid(f"invalid function signature {signature}")
    name = signature[:open_paren]
    inner = signature[open_paren + 1:-1]
    types = [normalize(t.split()[0]) for t in split_types(inner)]
    for abi_type in types:
        try:
            parse_abi_type(abi_type).validate()
        except (ParseError, ABITypeError) as e:
            raise ErrorInvalid(f"invalid type {abi_type} in signature {signature}") from e
    return name, types


def _coerce(abi_type, value: Any) -> Any:
    if abi_type.is_array:
        if not isinstance(value, (list, tuple)):
            raise ErrorInvalid(f"expected an array for type {abi_type.to_type_str()}, but got {value}")
        return [_coerce(abi_type.item_type, v) for v in value]

    if isinstance(abi_type, TupleType):
        if not isinstance(value, (list, tuple)) or len(value) != len(abi_type.components):
            raise ErrorInvalid(f"expected a tuple for type {abi_type.to_type_str()}, but got {value}")
        return tuple(_coerce(c, v) for c, v in zip(abi_type.components, value))

    base = abi_type.base
    if base == "address":
        if not is_valid_address(value):
            raise ErrorInvalid(f"expected an address, but got {value}")
        return checksum(value)
    if base in ("uint", "int"):
        if is_numeric(value):
            return value
        if isinstance(value, str):
            try:
                return parse_number(value)
            except ValueError:
                pass
        raise ErrorInvalid(f"expected a number, but got {value}")
    if base == "bool":
        if isinstance(value, bool):
            return value
        if value in ("true", "false"):
            return value == "true"
        raise ErrorInvalid(f"expected a boolean, but got {value}")
    if base == "bytes":
        if isinstance(value, (bytes, bytearray)):
            return bytes(value)
        if isinstance(value, str) and value.startswith("0x"):
            try:
                return to_bytes(hexstr=value)
            except ValueError as e:
                raise ErrorInvalid(f"expected bytes, but got {value}") from e
        raise ErrorInvalid(f"expected bytes, but got {value}")
    if base == "string":
        return value if isinstance(value, str) else str(value)
    return value


def coerce_values(types: Sequence[str], values: Sequence[Any]) -> List[Any]:
    return [_coerce(parse_abi_type(t), v) for t, v in zip(types, values)]


def encode_parameters(types: Sequence[str], values: Sequence[Any]) -> bytes:
    if len(types) != len(values):
        raise ErrorInvalid(
            f"invalid number of parameters. Expected {len(types)}, but got {len(values)}"
        )
    try:
        return encode(list(types), coerce_values(types, values))
    except EncodingError as e:
        raise ErrorInvalid(str(e)) from e


def encode_function_call(signature: str, values: Sequence[Any]) -> str:
    """Selector plus encoded arguments, as a 0x-prefixed hex string."""
    name, types = parse_signature(signature)
    canonical = f"{name}({','.join(types)})"
    selector = function_signature_to_4byte_selector(canonical)
    return to_hex(selector + encode_parameters(types, values))


def decode_function_call(signature: str, data: Union[str, bytes]) -> Tuple[Any, ...]:
    """Decode calldata produced for ``signature``; the selector must match."""
    name, types = parse_signature(signature)
    raw = to_bytes(hexstr=data) if isinstance(data, str) else data
    selector = function_signature_to_4byte_selector(f"{name}({','.join(types)})")
    if raw[:4] != selector:
        raise ErrorInvalid(f"calldata does not match signature {signature}")
    try:
        return decode(types, raw[4:])
    except DecodingError as e:
        raise ErrorInvalid(str(e)) from e


def decode_result(types: Sequence[str], data: bytes) -> Tuple[Any, ...]:
    try:
        return decode(list(types), data)
    except DecodingError as e:
        raise ErrorInvalid(f"couldn't decode call result: {e}") from e


def canonical_type(param: Dict[str, Any]) -> str:
    """Canonical type of an ABI JSON parameter, expanding tuples."""
    abi_type = param["type"]
    if abi_type.startswith("tuple"):
        suffix = abi_type[len("tuple"):]
        inner = ",".join(canonical_type(c) for c in param.get("components", []))
        return f"({inner}){suffix}"
    return abi_type


class AbiFunction:
    """One function fragment of an ABI."""

    def __init__(self, fragment: Dict[str, Any]):
        self.fragment = fragment
        self.name: str = fragment["name"]
        self.inputs: List[Dict[str, Any]] = fragment.get("inputs", [])
        self.outputs: List[Dict[str, Any]] = fragment.get("outputs", [])

    @property
    def types(self) -> List[str]:
        return [canonical_type(p) for p in self.inputs]

    @property
    def signature(self) -> str:
        return f"{self.name}({','.join(self.types)})"

    @property
    def selector(self) -> bytes:
        return function_signature_to_4byte_selector(self.signature)

    def encode(self, values: Sequence[Any]) -> str:
        if len(values) != len(self.inputs):
            raise ErrorInvalid(
                f"invalid number of parameters for {self.signature}. "
                f"Expected {len(self.inputs)}, but got {len(values)}"
            )
        return to_hex(self.selector + encode_parameters(self.types, values))

    def __repr__(self) -> str:
        return f"AbiFunction({self.signature})"


class Interface:
    """
    Function lookup over a JSON ABI.

    Functions are addressable by bare name (when unambiguous) or by full
    signature.
    """

    def __init__(self, abi: Union[str, List[Dict[str, Any]]]):
        if isinstance(abi, str):
            abi = json.loads(abi)
        self.abi: List[Dict[str, Any]] = list(abi)
        self.functions: Dict[str, AbiFunction] = {}
        self._by_name: Dict[str, List[AbiFunction]] = {}
        for fragment in self.abi:
            if fragment.get("type", "function") != "function" or "name" not in fragment:
                continue
            fn = AbiFunction(fragment)
            self.functions[fn.signature] = fn
            self._by_name.setdefault(fn.name, []).append(fn)

    def has_function(self, name_or_signature: str) -> bool:
        return name_or_signature in self.functions or name_or_signature in self._by_name

    def get_function(self, name_or_signature: str) -> AbiFunction:
        if "(" in name_or_signature:
            name, types = parse_signature(name_or_signature)
            fn = self.functions.get(f"{name}({','.join(types)})")
            if fn:
                return fn
            raise ErrorNotFound(f"no matching function ({name_or_signature})")

        candidates = self._by_name.get(name_or_signature, [])
        if not candidates:
            raise ErrorNotFound(f"no matching function ({name_or_signature})")
        if len(candidates) > 1:
            options = ", ".join(fn.signature for fn in candidates)
            raise ErrorInvalid(f"ambiguous function {name_or_signature}, use one of: {options}")
        return candidates[0]

    def encode_function_data(self, name_or_signature: str, values: Sequence[Any]) -> str:
        return self.get_function(name_or_signature).encode(values)


def encode_calldata(fn: AbiFunction, params: Sequence[Any]) -> str:
    return fn.encode(params)

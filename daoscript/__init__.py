"""
daoscript - scripting language interpreter for organization governance

Compiles scripts (as a serialized AST) into ordered batches of on-chain
transaction intents.

Exports:
- load_ast: validate and build a Program from its JSON form
- Interpreter: evaluates a Program into actions
- InterpreterConfig: session configuration
- JsonRpcProvider / Signer: chain access and identity handle
"""

from daoscript.ast import Program, load_ast, validate_ast
from daoscript.config import InterpreterConfig
from daoscript.errors import (
    CommandError,
    DaoScriptError,
    ErrorException,
    ErrorInvalid,
    ErrorNotFound,
    ExpressionError,
    HelperFunctionError,
)
from daoscript.providers import JsonRpcProvider, Signer
from daoscript.runtime import (
    InterpretationResult,
    Interpreter,
    ProviderAction,
    TransactionAction,
)

__version__ = "0.1.0"

__all__ = [
    "__version__",
    "Program",
    "load_ast",
    "validate_ast",
    "InterpreterConfig",
    "DaoScriptError",
    "CommandError",
    "ExpressionError",
    "HelperFunctionError",
    "ErrorException",
    "ErrorInvalid",
    "ErrorNotFound",
    "JsonRpcProvider",
    "Signer",
    "Interpreter",
    "InterpretationResult",
    "ProviderAction",
    "TransactionAction",
]

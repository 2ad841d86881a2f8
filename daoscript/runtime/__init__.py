"""
daoscript Runtime Engine

This package provides the interpreter core:
- Interpreter: AST evaluation, module loading and command dispatch
- BindingsManager: scoped bindings store
- Command / Helper: the protocol modules implement
- Module / SessionContext: module base class and shared session state
- TransactionAction / ProviderAction: what commands produce
"""

from daoscript.runtime.actions import (
    Action,
    ProviderAction,
    TransactionAction,
    compute_actions_digest,
)
from daoscript.runtime.bindings import Binding, BindingsManager, BindingsSpace
from daoscript.runtime.command import Arity, Command, Helper, NodesInterpreters
from daoscript.runtime.module import Module, NonceTracker, SessionContext
from daoscript.runtime.interpreter import InterpretationResult, Interpreter, pre_validate_program

__all__ = [
    "Action",
    "ProviderAction",
    "TransactionAction",
    "compute_actions_digest",
    "Binding",
    "BindingsManager",
    "BindingsSpace",
    "Arity",
    "Command",
    "Helper",
    "NodesInterpreters",
    "Module",
    "NonceTracker",
    "SessionContext",
    "InterpretationResult",
    "Interpreter",
    "pre_validate_program",
]

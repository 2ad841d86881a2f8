"""
daoscript Commands and Helpers

A module exposes a fixed mapping of command names to Command objects and
helper names to Helper objects. Each command declares its arity and the
options it accepts; the interpreter checks both before ``run`` is called,
so malformed invocations fail before any argument is evaluated.

Key classes:
- Arity: declarative argument count rule
- NodesInterpreters: evaluation callbacks handed to commands/helpers
- Command: script-invocable operation producing actions
- Helper: script-invocable operation producing a plain value
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Any, Callable, List, Optional, Sequence, Tuple, TYPE_CHECKING

from daoscript.ast import CommandExpression, HelperFunctionExpression, Node
from daoscript.errors import CommandError, HelperFunctionError

if TYPE_CHECKING:
    from daoscript.runtime.actions import Action
    from daoscript.runtime.bindings import BindingsManager
    from daoscript.runtime.module import Module


class ComparisonType(Enum):
    EQUAL = "EQUAL"
    GREATER = "GREATER"
    BETWEEN = "BETWEEN"


def _plural(n: int) -> str:
    return "argument" if n == 1 else "arguments"


@dataclass(frozen=True)
class Arity:
    comparison: ComparisonType
    min_value: int
    max_value: Optional[int] = None

    @classmethod
    def exactly(cls, n: int) -> "Arity":
        return cls(ComparisonType.EQUAL, n, n)

    @classmethod
    def at_least(cls, n: int) -> "Arity":
        return cls(ComparisonType.GREATER, n)

    @classmethod
    def between(cls, low: int, high: int) -> "Arity":
        return cls(ComparisonType.BETWEEN, low, high)

    def check(self, count: int) -> Optional[str]:
        """Return the violation message, or None when ``count`` fits."""
        if self.comparison == ComparisonType.EQUAL and count != self.min_value:
            return (f"invalid number of arguments. Expected {self.min_value} "
                    f"{_plural(self.min_value)}, but got {count}")
        if self.comparison == ComparisonType.GREATER and count < self.min_value:
            return (f"invalid number of arguments. Expected at least {self.min_value} "
                    f"{_plural(self.min_value)}, but got {count}")
        if self.comparison == ComparisonType.BETWEEN and not (
            self.min_value <= count <= self.max_value
        ):
            return (f"invalid number of arguments. Expected between {self.min_value} "
                    f"and {self.max_value} arguments, but got {count}")
        return None


def check_args_length(c: CommandExpression, arity: Arity) -> None:
    message = arity.check(len(c.args))
    if message:
        raise CommandError(c, message)


def check_opts(c: CommandExpression, valid_opts: Sequence[str]) -> None:
    invalid = [opt.name for opt in c.opts if opt.name not in valid_opts]
    if invalid:
        raise CommandError(c, f"invalid options: {', '.join('--' + o for o in invalid)}")


def get_opt_value(c: CommandExpression, name: str,
                  interpret_node: Callable[..., Any], **kwargs) -> Any:
    opt = c.get_opt(name)
    if opt is None:
        return None
    return interpret_node(opt.value, **kwargs)


@dataclass
class NodesInterpreters:
    """Lazy evaluation callbacks: commands evaluate only what they need."""
    interpret_node: Callable[..., Any]
    interpret_nodes: Callable[..., List[Any]]


class Command:
    """
    Base class for commands.

    Subclasses set ``name``, ``arity`` and ``options`` and implement
    ``run``. ``build_completion_items_for_arg`` and ``pre_validate`` are
    optional hooks; neither may touch the network or mutate state.
    """

    name: str = ""
    arity: Arity = Arity.at_least(0)
    options: Tuple[str, ...] = ()

    def validate(self, c: CommandExpression) -> None:
        check_args_length(c, self.arity)
        check_opts(c, self.options)

    def run(self, module: "Module", c: CommandExpression,
            interpreters: NodesInterpreters) -> List["Action"]:
        raise NotImplementedError

    def build_completion_items_for_arg(self, arg_index: int,
                                       bindings: "BindingsManager") -> List[str]:
        return []

    def pre_validate(self, c: CommandExpression) -> None:
        self.validate(c)

    def __repr__(self) -> str:
        return f"{type(self).__name__}({self.name})"


class Helper:
    """Base class for helpers: ``@name(args...)`` evaluates to a value."""

    name: str = ""
    arity: Arity = Arity.at_least(0)

    def validate(self, h: HelperFunctionExpression) -> None:
        message = self.arity.check(len(h.args))
        if message:
            raise HelperFunctionError(h, message)

    def run(self, module: "Module", h: HelperFunctionExpression,
            interpreters: NodesInterpreters) -> Any:
        raise NotImplementedError

    def __repr__(self) -> str:
        return f"{type(self).__name__}(@{self.name})"


def literal_text(node: Node) -> Optional[str]:
    """Raw text of a literal or identifier node, without evaluating it."""
    value = getattr(node, "value", None)
    return value if isinstance(value, str) else None

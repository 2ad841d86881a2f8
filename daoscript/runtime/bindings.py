"""
daoscript Bindings Store

Scoped key/value store partitioned into namespaces (spaces). Scope frames
live in an arena addressed by index; each frame records the index of its
parent. Frames are pushed when a block is entered and popped when it
finishes, strictly LIFO.

Key classes:
- BindingsSpace: the namespaces (USER, ADDR, MODULE, DATA_PROVIDER)
- Binding: a (name, value, space) triple
- ScopeFrame: bindings of one scope, all spaces
- BindingsManager: lookup/mutation through the scope chain
"""

from __future__ import annotations

import logging
from contextlib import contextmanager
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Callable, Dict, Iterator, List, Optional

logger = logging.getLogger(__name__)


class BindingsSpace(Enum):
    USER = "USER"
    ADDR = "ADDR"
    MODULE = "MODULE"
    DATA_PROVIDER = "DATA_PROVIDER"


@dataclass
class Binding:
    name: str
    value: Any
    space: BindingsSpace


@dataclass
class ScopeFrame:
    """Bindings of one scope, keyed by space then name."""
    index: int
    parent: Optional[int] = None
    module: Optional[str] = None
    bindings: Dict[BindingsSpace, Dict[str, Binding]] = field(
        default_factory=lambda: {space: {} for space in BindingsSpace}
    )

    def get(self, name: str, space: BindingsSpace) -> Optional[Binding]:
        return self.bindings[space].get(name)

    def set(self, binding: Binding) -> None:
        self.bindings[binding.space][binding.name] = binding


class BindingsManager:
    """
    Bindings store over a chain of scope frames.

    Lookup walks from the given (default: current) frame to the root. A
    ``set`` always lands in exactly one frame, so an inner binding shadows
    an outer one without touching it.
    """

    def __init__(self, initial_bindings: Optional[List[Binding]] = None):
        self._frames: List[ScopeFrame] = [ScopeFrame(index=0)]
        for binding in initial_bindings or []:
            self._frames[0].set(binding)

    @property
    def current_scope(self) -> int:
        return self._frames[-1].index

    @property
    def depth(self) -> int:
        return len(self._frames)

    def _frame(self, scope: Optional[int]) -> ScopeFrame:
        index = self.current_scope if scope is None else scope
        if index < 0 or index >= len(self._frames):
            raise IndexError(f"Scope {index} is not alive")
        return self._frames[index]

    def _chain(self, scope: Optional[int] = None) -> Iterator[ScopeFrame]:
        frame: Optional[ScopeFrame] = self._frame(scope)
        while frame is not None:
            yield frame
            frame = self._frames[frame.parent] if frame.parent is not None else None

    # Scopes

    def enter_scope(self, module: Optional[str] = None) -> int:
        """Push a child frame of the current one and return its index."""
        parent = self.current_scope
        frame = ScopeFrame(index=len(self._frames), parent=parent, module=module)
        self._frames.append(frame)
        logger.debug("Entered scope %d (parent %d, module %s)", frame.index, parent, module)
        return frame.index

    def exit_scope(self) -> None:
        """Pop the current frame. The root frame is never popped."""
        if len(self._frames) == 1:
            raise RuntimeError("Cannot exit the root scope")
        frame = self._frames.pop()
        logger.debug("Exited scope %d", frame.index)

    @contextmanager
    def scope(self, module: Optional[str] = None):
        """Push a frame for the duration of the block; popped on any exit."""
        index = self.enter_scope(module)
        try:
            yield index
        finally:
            self.exit_scope()

    def get_scope_module(self) -> Optional[str]:
        """Module of the innermost frame that declares one."""
        for frame in self._chain():
            if frame.module:
                return frame.module
        return None

    # Bindings

    def get_binding(self, name: str, space: BindingsSpace,
                    scope: Optional[int] = None) -> Optional[Binding]:
        for frame in self._chain(scope):
            binding = frame.get(name, space)
            if binding is not None:
                return binding
        return None

    def get_binding_value(self, name: str, space: BindingsSpace,
                          scope: Optional[int] = None) -> Any:
        binding = self.get_binding(name, space, scope)
        return binding.value if binding else None

    def has_binding(self, name: str, space: BindingsSpace,
                    inside_current_scope: bool = False) -> bool:
        if inside_current_scope:
            return self._frame(None).get(name, space) is not None
        return self.get_binding(name, space) is not None

    def set_binding(self, name: str, value: Any, space: BindingsSpace,
                    scope: Optional[int] = None) -> None:
        self._frame(scope).set(Binding(name, value, space))

    def set_bindings(self, bindings: List[Binding], scope: Optional[int] = None) -> None:
        frame = self._frame(scope)
        for binding in bindings:
            frame.set(binding)

    def get_all_bindings(self, space: Optional[BindingsSpace] = None,
                         predicate: Optional[Callable[[Binding], bool]] = None) -> List[Binding]:
        """
        Snapshot of every binding visible from the current scope.

        Shadowed bindings are omitted; innermost bindings come first.
        """
        seen = set()
        out: List[Binding] = []
        for frame in self._chain():
            spaces = [space] if space else list(BindingsSpace)
            for s in spaces:
                for name, binding in frame.bindings[s].items():
                    key = (name, s)
                    if key in seen:
                        continue
                    seen.add(key)
                    if predicate is None or predicate(binding):
                        out.append(binding)
        return out

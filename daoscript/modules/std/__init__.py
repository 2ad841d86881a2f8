"""std module: always loaded, fallback for unprefixed commands."""

from typing import Callable, Optional

from daoscript.modules.std.commands import commands
from daoscript.modules.std.helpers import helpers
from daoscript.runtime.module import Module, SessionContext


class Std(Module):
    name = "std"
    commands = commands
    helpers = helpers

    def __init__(self, context: SessionContext,
                 loader: Callable[[str, Optional[str]], Module],
                 alias: Optional[str] = None):
        super().__init__(context, alias)
        self._loader = loader

    def load(self, name: str, alias: Optional[str] = None) -> Module:
        """Load (or return the already loaded) module ``name``."""
        return self._loader(name, alias)


__all__ = ["Std"]

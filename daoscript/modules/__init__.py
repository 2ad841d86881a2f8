"""Module registry: name -> Module class."""

from daoscript.modules.aragonos import AragonOS
from daoscript.modules.std import Std

MODULES = {
    "std": Std,
    "aragonos": AragonOS,
}

__all__ = ["MODULES", "Std", "AragonOS"]

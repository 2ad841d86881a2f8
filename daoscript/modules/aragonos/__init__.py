"""aragonos module: organization framework commands."""

from daoscript.modules.aragonos.dao import AragonDAO, App, Artifact, Permission
from daoscript.modules.aragonos.module import AragonOS

__all__ = ["AragonOS", "AragonDAO", "App", "Artifact", "Permission"]

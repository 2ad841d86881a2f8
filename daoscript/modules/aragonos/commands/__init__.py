"""aragonos commands, keyed by name."""

from daoscript.modules.aragonos.commands.connect import ConnectCommand
from daoscript.modules.aragonos.commands.forward import ForwardCommand
from daoscript.modules.aragonos.commands.grant import GrantCommand
from daoscript.modules.aragonos.commands.install import InstallCommand
from daoscript.modules.aragonos.commands.revoke import RevokeCommand

commands = {
    command.name: command
    for command in (
        ConnectCommand(),
        InstallCommand(),
        ForwardCommand(),
        GrantCommand(),
        RevokeCommand(),
    )
}

__all__ = [
    "commands",
    "ConnectCommand",
    "InstallCommand",
    "ForwardCommand",
    "GrantCommand",
    "RevokeCommand",
]

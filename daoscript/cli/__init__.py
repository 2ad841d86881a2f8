"""daoscript CLI Package"""

import logging

import click

from daoscript import __version__
from daoscript.cli.interpret import interpret_command
from daoscript.cli.modules import modules_command
from daoscript.cli.validate import validate_command


@click.group()
@click.option('--verbose', '-v', is_flag=True, help='Enable debug logging')
def main(verbose):
    """daoscript CLI - compile governance scripts into transaction batches."""
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format="%(asctime)s %(name)s %(levelname)s %(message)s",
    )


@click.command()
def version_command():
    """Show the daoscript version."""
    print(f"daoscript {__version__}")


main.add_command(interpret_command, "interpret")
main.add_command(validate_command, "validate")
main.add_command(modules_command, "modules")
main.add_command(version_command, "version")

__all__ = [
    "main",
    "interpret_command",
    "validate_command",
    "modules_command",
    "version_command",
]

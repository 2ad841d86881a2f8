"""Modules command for daoscript CLI."""

import json

import click

from daoscript.modules import MODULES


@click.command()
@click.option('--json', 'json_output', is_flag=True, help='Output as JSON')
def modules_command(json_output):
    """List the available modules with their commands and helpers."""
    listing = {
        name: {
            "commands": sorted(module_cls.commands),
            "helpers": sorted(f"@{h}" for h in module_cls.helpers),
        }
        for name, module_cls in MODULES.items()
    }

    if json_output:
        print(json.dumps(listing, indent=2))
        return

    for name, entry in listing.items():
        print(name)
        print(f"  commands: {', '.join(entry['commands'])}")
        if entry["helpers"]:
            print(f"  helpers: {', '.join(entry['helpers'])}")

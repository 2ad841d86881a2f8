"""Validate command for daoscript CLI."""

import json
import sys
from pathlib import Path

import click

from daoscript.ast import load_ast
from daoscript.errors import DaoScriptError
from daoscript.runtime.interpreter import pre_validate_program


@click.command()
@click.argument('ast_file', type=click.Path(exists=True))
@click.option('--json', 'json_output', is_flag=True, help='Output as JSON')
def validate_command(ast_file, json_output):
    """Validate a script AST: schema, arity and options of every command."""
    errors = []
    try:
        program = load_ast(Path(ast_file).read_text())
    except DaoScriptError as e:
        errors.append(str(e))
    else:
        errors.extend(pre_validate_program(program))

    output = {"valid": not errors, "errors": errors}
    if errors:
        print(json.dumps(output, indent=2), file=sys.stderr)
        sys.exit(1)

    if json_output:
        print(json.dumps(output, indent=2))
    else:
        print("✓ Validation passed")

"""Interpret command for daoscript CLI."""

import json
import sys
from pathlib import Path

import click

from daoscript.ast import load_ast
from daoscript.config import InterpreterConfig
from daoscript.errors import DaoScriptError
from daoscript.providers import JsonRpcProvider, Signer
from daoscript.runtime.interpreter import Interpreter


@click.command()
@click.argument('ast_file', type=click.Path(exists=True))
@click.option('--rpc-url', help='JSON-RPC endpoint (default: $DAOSCRIPT_RPC_URL)')
@click.option('--from', 'from_address', help='Signer address (default: $DAOSCRIPT_FROM_ADDRESS)')
@click.option('--ipfs-gateway', help='IPFS gateway used to fetch app artifacts')
@click.option('--json', 'json_output', is_flag=True, help='Output as JSON')
def interpret_command(ast_file, rpc_url, from_address, ipfs_gateway, json_output):
    """Interpret a script AST into an ordered list of actions."""
    config = InterpreterConfig.from_env()
    if rpc_url:
        config.rpc_url = rpc_url
    if from_address:
        config.from_address = from_address
    if ipfs_gateway:
        config.ipfs_gateway = ipfs_gateway

    if not config.from_address:
        print("Error: a signer address is required (--from)", file=sys.stderr)
        sys.exit(1)

    try:
        program = load_ast(Path(ast_file).read_text())
        provider = JsonRpcProvider(config.rpc_url, timeout=config.http_timeout)
        signer = Signer(provider, config.from_address)
    except DaoScriptError as e:
        print(f"Error: {e}", file=sys.stderr)
        sys.exit(1)

    result = Interpreter(program, signer, config).run()
    output = result.to_dict()

    if not result.success:
        print(json.dumps(output, indent=2), file=sys.stderr)
        sys.exit(1)

    if json_output:
        print(json.dumps(output, indent=2))
    else:
        print(f"✓ Interpretation successful")
        print(f"  Actions: {len(result.actions)}")
        print(f"  Digest: {result.digest}")
        print(f"  Time: {result.execution_time_ms:.2f}ms")
        for i, action in enumerate(output["actions"]):
            target = action.get("to") or action.get("method")
            print(f"  [{i}] {action['type']} {target}")

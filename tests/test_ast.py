"""Test AST loading and traversal."""
import json

import pytest

from daoscript.ast import (
    AsExpression,
    BinaryExpression,
    CommandExpression,
    NumberLiteral,
    Program,
    iter_commands,
    load_ast,
)
from daoscript.errors import CommandError, ErrorInvalid

from builders import block, cmd, ident, num, program


class TestLoadAst:
    """Tests for building nodes from serialized AST."""

    def test_load_sample(self, sample_ast_json):
        """Test a valid program builds typed nodes."""
        ast = load_ast(sample_ast_json)
        assert isinstance(ast, Program)
        assert len(ast.body) == 2

        load_cmd, set_cmd = ast.body
        assert isinstance(load_cmd, CommandExpression)
        assert load_cmd.name == "load"
        assert isinstance(load_cmd.args[0], AsExpression)
        assert isinstance(set_cmd.args[1], BinaryExpression)
        assert isinstance(set_cmd.args[1].left, NumberLiteral)

    def test_load_from_string(self, sample_ast_json):
        """Test JSON text is accepted."""
        ast = load_ast(json.dumps(sample_ast_json))
        assert ast.body[1].name == "set"

    def test_locations_kept(self, sample_ast_json):
        """Test loc survives loading."""
        ast = load_ast(sample_ast_json)
        loc = ast.body[1].loc
        assert (loc.start.line, loc.start.col, loc.end.line, loc.end.col) == (2, 0, 2, 22)

    def test_invalid_json(self):
        """Test malformed JSON text is rejected."""
        with pytest.raises(ErrorInvalid, match="invalid AST JSON"):
            load_ast("{not json")

    def test_missing_body(self):
        """Test a program without a body is rejected."""
        with pytest.raises(ErrorInvalid, match="invalid AST"):
            load_ast({"type": "Program"})

    def test_unknown_statement(self):
        """Test statements must be commands."""
        with pytest.raises(ErrorInvalid):
            load_ast({"type": "Program", "body": [{"type": "NumberLiteral", "value": "1"}]})

    def test_bad_operator(self):
        """Test operators outside + - * / ^ are rejected."""
        data = {
            "type": "Program",
            "body": [{
                "type": "CommandExpression",
                "name": "set",
                "args": [
                    {"type": "VariableIdentifier", "value": "$a"},
                    {
                        "type": "BinaryExpression",
                        "operator": "%",
                        "left": {"type": "NumberLiteral", "value": "1"},
                        "right": {"type": "NumberLiteral", "value": "2"},
                    },
                ],
            }],
        }
        with pytest.raises(ErrorInvalid):
            load_ast(data)


class TestIterCommands:
    """Tests for depth-first command traversal."""

    def test_nested_blocks(self):
        """Test commands inside blocks are visited in source order."""
        ast = program(
            cmd("load", ident("aragonos")),
            cmd("connect", ident("dao"), block(cmd("install", ident("voting")), cmd("grant"))),
            cmd("set"),
        )
        assert [c.name for c in iter_commands(list(ast.body))] == [
            "load", "connect", "install", "grant", "set"
        ]


class TestNodeErrors:
    """Tests for location-aware error rendering."""

    def test_command_error_location(self, sample_ast_json):
        """Test command errors carry the command name and location."""
        ast = load_ast(sample_ast_json)
        error = CommandError(ast.body[1], "boom")
        assert str(error) == "CommandError(2:0,2:22): set: boom"
        assert error.to_dict()["loc"] == {
            "start": {"line": 2, "col": 0}, "end": {"line": 2, "col": 22}
        }

    def test_command_error_without_location(self):
        """Test errors on synthesized nodes omit the location."""
        error = CommandError(cmd("set", num(1)), "boom")
        assert str(error) == "CommandError: set: boom"

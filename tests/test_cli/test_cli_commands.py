"""CLI tests for interpret, validate, modules and version."""

import pytest
import json
from unittest.mock import patch, MagicMock
from click.testing import CliRunner

from daoscript.cli import main as cli_main
from daoscript.runtime.interpreter import InterpretationResult

from builders import DAO, SIGNER, FakeProvider


@pytest.fixture
def runner():
    """CLI runner."""
    return CliRunner()


@pytest.fixture
def write_ast(tmp_path):
    """Factory: write an AST dict to a temporary file."""
    def _write(data, name="script.json"):
        path = tmp_path / name
        with open(path, "w") as f:
            json.dump(data, f)
        return str(path)
    return _write


class TestInterpretCommand:
    """Tests for the interpret CLI command."""

    def test_missing_argument(self, runner):
        """Test interpret without an AST file."""
        result = runner.invoke(cli_main, ["interpret"])
        assert result.exit_code != 0

    def test_file_not_found(self, runner):
        """Test interpret with a non-existent file."""
        result = runner.invoke(cli_main, ["interpret", "/nonexistent/script.json", "--from", SIGNER])
        assert result.exit_code != 0

    def test_missing_signer(self, runner, write_ast, exec_ast_json):
        """Test a signer address is required."""
        path = write_ast(exec_ast_json)
        result = runner.invoke(cli_main, ["interpret", path], env={"DAOSCRIPT_FROM_ADDRESS": None})
        assert result.exit_code == 1
        assert "signer address is required" in result.output

    def test_invalid_json(self, runner, tmp_path):
        """Test interpret with a file that isn't JSON."""
        path = tmp_path / "invalid.json"
        path.write_text("not valid json")
        result = runner.invoke(cli_main, ["interpret", str(path), "--from", SIGNER])
        assert result.exit_code == 1
        assert "invalid AST JSON" in result.output

    def test_json_output(self, runner, write_ast, exec_ast_json):
        """Test a script is interpreted against the chain provider."""
        path = write_ast(exec_ast_json)
        with patch("daoscript.cli.interpret.JsonRpcProvider", return_value=FakeProvider()):
            result = runner.invoke(cli_main, ["interpret", path, "--from", SIGNER, "--json"])

        assert result.exit_code == 0
        data = json.loads(result.output)
        assert data["success"] is True
        (action,) = data["actions"]
        assert action["to"].lower() == DAO
        assert action["data"].startswith("0xa9059cbb")
        assert data["digest"].startswith("sha256:")

    def test_human_output(self, runner, write_ast, exec_ast_json):
        """Test the summary output."""
        path = write_ast(exec_ast_json)
        with patch("daoscript.cli.interpret.JsonRpcProvider", return_value=FakeProvider()):
            result = runner.invoke(cli_main, ["interpret", path, "--from", SIGNER])

        assert result.exit_code == 0
        assert "Interpretation successful" in result.output
        assert "Actions: 1" in result.output

    def test_failure_exit_code(self, runner, write_ast, exec_ast_json):
        """Test failed interpretations exit non-zero with the errors."""
        path = write_ast(exec_ast_json)
        with patch("daoscript.cli.interpret.Interpreter") as mock_interpreter:
            mock_instance = MagicMock()
            mock_instance.run.return_value = InterpretationResult(
                success=False,
                errors=[{"name": "CommandError", "message": "exec: boom"}],
            )
            mock_interpreter.return_value = mock_instance

            result = runner.invoke(cli_main, ["interpret", path, "--from", SIGNER])

        assert result.exit_code == 1
        assert "exec: boom" in result.output

    def test_rpc_url_option(self, runner, write_ast, exec_ast_json):
        """Test --rpc-url is passed to the provider."""
        path = write_ast(exec_ast_json)
        with patch("daoscript.cli.interpret.JsonRpcProvider", return_value=FakeProvider()) as provider_cls:
            runner.invoke(cli_main, ["interpret", path, "--from", SIGNER, "--rpc-url", "http://node:8545"])
        assert provider_cls.call_args[0][0] == "http://node:8545"


class TestValidateCommand:
    """Tests for the validate CLI command."""

    def test_valid(self, runner, write_ast, sample_ast_json):
        """Test a well formed script."""
        path = write_ast(sample_ast_json)
        result = runner.invoke(cli_main, ["validate", path])
        assert result.exit_code == 0
        assert "Validation passed" in result.output

    def test_valid_json(self, runner, write_ast, sample_ast_json):
        """Test JSON output."""
        path = write_ast(sample_ast_json)
        result = runner.invoke(cli_main, ["validate", path, "--json"])
        assert json.loads(result.output) == {"valid": True, "errors": []}

    def test_invalid(self, runner, write_ast):
        """Test command errors fail validation."""
        path = write_ast({
            "type": "Program",
            "body": [{"type": "CommandExpression", "name": "load", "args": [], "opts": []}],
        })
        result = runner.invoke(cli_main, ["validate", path])
        assert result.exit_code == 1
        assert "invalid number of arguments" in result.output

    def test_schema_error(self, runner, write_ast):
        """Test schema violations fail validation."""
        path = write_ast({"type": "Program"})
        result = runner.invoke(cli_main, ["validate", path])
        assert result.exit_code == 1
        assert "invalid AST" in result.output


class TestModulesCommand:
    """Tests for the modules CLI command."""

    def test_listing(self, runner):
        """Test modules are listed with their commands."""
        result = runner.invoke(cli_main, ["modules"])
        assert result.exit_code == 0
        assert "aragonos" in result.output
        assert "install" in result.output

    def test_json(self, runner):
        """Test JSON listing."""
        result = runner.invoke(cli_main, ["modules", "--json"])
        data = json.loads(result.output)
        assert data["std"]["commands"] == ["exec", "load", "raw", "set", "switch"]
        assert data["std"]["helpers"] == ["@date", "@id", "@me"]
        assert data["aragonos"]["helpers"] == ["@aragonEns"]


class TestVersionCommand:
    """Tests for the version CLI command."""

    def test_version(self, runner):
        """Test the version is printed."""
        result = runner.invoke(cli_main, ["version"])
        assert result.exit_code == 0
        assert "daoscript 0.1.0" in result.output

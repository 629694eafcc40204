"""CLI tests for init, schema, value pipeline and filter commands."""

from __future__ import annotations

import json
from pathlib import Path

from click.testing import CliRunner

from propkit.cli import cli
from propkit.config import PROPKIT_DIR_NAME, SCHEMA_FILENAME


class TestInit:
    def test_init_creates_project(self, tmp_path: Path, cli_runner: CliRunner, monkeypatch) -> None:
        monkeypatch.chdir(tmp_path)
        result = cli_runner.invoke(cli, ["init"])
        assert result.exit_code == 0
        assert "Initialized .propkit/" in result.output
        assert (tmp_path / PROPKIT_DIR_NAME / SCHEMA_FILENAME).is_file()

    def test_init_existing(self, cli_in_project: tuple[CliRunner, Path]) -> None:
        runner, _ = cli_in_project
        result = runner.invoke(cli, ["init"])
        assert result.exit_code == 0
        assert "already exists" in result.output

    def test_init_force_rewrites_schema(self, cli_in_project: tuple[CliRunner, Path]) -> None:
        runner, root = cli_in_project
        schema_file = root / PROPKIT_DIR_NAME / SCHEMA_FILENAME
        schema_file.write_text("[]")
        result = runner.invoke(cli, ["init", "--force"])
        assert result.exit_code == 0
        assert len(json.loads(schema_file.read_text())) == 13

    def test_version(self, cli_runner: CliRunner) -> None:
        result = cli_runner.invoke(cli, ["--version"])
        assert result.exit_code == 0
        assert "propkit" in result.output


class TestSchemaCommands:
    def test_types_json(self, cli_runner: CliRunner) -> None:
        result = cli_runner.invoke(cli, ["types", "--json"])
        assert result.exit_code == 0
        rows = {row["type"]: row for row in json.loads(result.output)}
        assert rows["miners"]["operations"] == ["add", "remove", "update"]
        assert rows["id"] == {"type": "id", "creatable": False, "operations": [], "filterable": True}

    def test_types_text(self, cli_runner: CliRunner) -> None:
        result = cli_runner.invoke(cli, ["types"])
        assert result.exit_code == 0
        assert "multi_select" in result.output

    def test_properties(self, cli_in_project: tuple[CliRunner, Path]) -> None:
        runner, _ = cli_in_project
        result = runner.invoke(cli, ["properties"])
        assert result.exit_code == 0
        assert "property0001  id" in result.output
        assert "(readonly)" in result.output

    def test_properties_json(self, cli_in_project: tuple[CliRunner, Path]) -> None:
        runner, _ = cli_in_project
        result = runner.invoke(cli, ["properties", "--json"])
        data = json.loads(result.output)
        assert [d["id"] for d in data][:2] == ["property0001", "property0002"]

    def test_no_project(self, tmp_path: Path, cli_runner: CliRunner, monkeypatch) -> None:
        monkeypatch.chdir(tmp_path)
        result = cli_runner.invoke(cli, ["properties", "--json"])
        assert result.exit_code == 1
        assert json.loads(result.output) == {"error": "No .propkit/ found. Run 'propkit init' first."}

    def test_broken_schema(self, cli_in_project: tuple[CliRunner, Path]) -> None:
        runner, root = cli_in_project
        (root / PROPKIT_DIR_NAME / SCHEMA_FILENAME).write_text("{}")
        result = runner.invoke(cli, ["properties"])
        assert result.exit_code == 1
        assert "must be a JSON list" in result.output


class TestCheck:
    def test_valid_value(self, cli_in_project: tuple[CliRunner, Path]) -> None:
        runner, _ = cli_in_project
        result = runner.invoke(cli, ["check", "property0003", '"new"'])
        assert result.exit_code == 0
        assert "Status: valid" in result.output
        assert "property0003 (select) = 'new'" in result.output

    def test_valid_value_json(self, cli_in_project: tuple[CliRunner, Path]) -> None:
        runner, _ = cli_in_project
        args = ["check", "property0010", '["urgent", "warranty"]', "--issue-id", "i-7", "--json"]
        result = runner.invoke(cli, args)
        assert result.exit_code == 0
        data = json.loads(result.output)
        assert data["valid"] is True
        rows = data["data"]["multi_values"]
        expected = [("i-7", "urgent", 0), ("i-7", "warranty", 1)]
        assert [(r["issue_id"], r["value"], r["position"]) for r in rows] == expected

    def test_invalid_value_json(self, cli_in_project: tuple[CliRunner, Path]) -> None:
        runner, _ = cli_in_project
        result = runner.invoke(cli, ["check", "property0003", '"bogus"', "--json"])
        assert result.exit_code == 1
        data = json.loads(result.output)
        assert data == {
            "property_id": "property0003",
            "valid": False,
            "errors": ["Property Status value is not a valid option"],
        }

    def test_unknown_property(self, cli_in_project: tuple[CliRunner, Path]) -> None:
        runner, _ = cli_in_project
        result = runner.invoke(cli, ["check", "property4242", '"x"'])
        assert result.exit_code == 1
        assert "Property property4242 does not exist" in result.output

    def test_bad_json(self, cli_in_project: tuple[CliRunner, Path]) -> None:
        runner, _ = cli_in_project
        result = runner.invoke(cli, ["check", "property0003", "new", "--json"])
        assert result.exit_code == 1
        assert json.loads(result.output)["error"].startswith("Invalid JSON for VALUE_JSON")

    def test_type_without_processor(self, cli_in_project: tuple[CliRunner, Path]) -> None:
        runner, _ = cli_in_project
        result = runner.invoke(cli, ["check", "property0004", '"2024-01-01"', "--json"])
        assert result.exit_code == 1
        assert "datetime" in json.loads(result.output)["error"]


class TestCreate:
    def test_plans_rows(self, cli_in_project: tuple[CliRunner, Path]) -> None:
        runner, _ = cli_in_project
        values = json.dumps({"property0002": "Fan noise", "property0011": ["m-1", "m-2"]})
        result = runner.invoke(cli, ["create", values, "--issue-id", "i-1", "--issue-number", "17", "--json"])
        assert result.exit_code == 0
        data = json.loads(result.output)
        assert data["success"] is True
        singles = data["data"]["single_values"]
        assert singles[0]["property_id"] == "property0001"
        assert singles[0]["number_value"] == 17
        assert [r["value"] for r in data["data"]["multi_values"]] == ["m-1", "m-2"]

    def test_text_output(self, cli_in_project: tuple[CliRunner, Path]) -> None:
        runner, _ = cli_in_project
        result = runner.invoke(cli, ["create", '{"property0002": "Fan noise"}'])
        assert result.exit_code == 0
        assert "Planned create for new-issue" in result.output

    def test_reports_every_error(self, cli_in_project: tuple[CliRunner, Path]) -> None:
        runner, _ = cli_in_project
        values = json.dumps({"property0002": None, "property0003": "bogus"})
        result = runner.invoke(cli, ["create", values, "--json"])
        assert result.exit_code == 1
        data = json.loads(result.output)
        assert data["success"] is False
        assert len(data["errors"]) == 2

    def test_rejects_non_object(self, cli_in_project: tuple[CliRunner, Path]) -> None:
        runner, _ = cli_in_project
        result = runner.invoke(cli, ["create", "[1]"])
        assert result.exit_code == 1
        assert "must be an object" in result.output


class TestUpdate:
    def test_update_multi_select_with_count(self, cli_in_project: tuple[CliRunner, Path]) -> None:
        runner, _ = cli_in_project
        op = {"property_id": "property0010", "operation_type": "update", "operation_payload": {"values": ["urgent"]}}
        result = runner.invoke(cli, ["update", "i-1", json.dumps(op), "--count", "property0010=2", "--json"])
        assert result.exit_code == 0
        planned = json.loads(result.output)["operations"][0]["result"]
        assert planned["multi_value_remove_positions"] == [0, 1]
        assert [c["value"] for c in planned["multi_value_creates"]] == ["urgent"]

    def test_text_output(self, cli_in_project: tuple[CliRunner, Path]) -> None:
        runner, _ = cli_in_project
        ops = [
            {"property_id": "property0003", "operation_type": "set", "operation_payload": {"value": "closed"}},
            {"property_id": "property0011", "operation_type": "add", "operation_payload": {"value": "m-3"}},
        ]
        result = runner.invoke(cli, ["update", "i-1", json.dumps(ops)])
        assert result.exit_code == 0
        assert "Planned 2 operation(s) for i-1" in result.output
        assert "'m-3'@next" in result.output

    def test_readonly_rejected(self, cli_in_project: tuple[CliRunner, Path]) -> None:
        runner, _ = cli_in_project
        op = {"property_id": "property0001", "operation_type": "set", "operation_payload": {"value": "9"}}
        result = runner.invoke(cli, ["update", "i-1", json.dumps(op), "--json"])
        assert result.exit_code == 1
        assert json.loads(result.output)["errors"] == ["Property is readonly: ID"]

    def test_bad_count(self, cli_in_project: tuple[CliRunner, Path]) -> None:
        runner, _ = cli_in_project
        result = runner.invoke(cli, ["update", "i-1", "[]", "--count", "property0010"])
        assert result.exit_code == 1
        assert "Invalid count format" in result.output


class TestFilter:
    def test_expression_json(self, cli_runner: CliRunner) -> None:
        result = cli_runner.invoke(cli, ["filter", "property0003:select:in:new,closed", "--json"])
        assert result.exit_code == 0
        data = json.loads(result.output)
        assert data["filters"] == "property0003:select:in:new%2Cclosed"
        assert data["query"]["AND"][0]["value"] == {"in": ["new", "closed"]}

    def test_conditions_option(self, cli_runner: CliRunner) -> None:
        condition = {"propertyId": "property0012", "propertyType": "user", "operator": "in", "value": ["u1"]}
        conditions = json.dumps([condition])
        result = cli_runner.invoke(cli, ["filter", "--conditions", conditions])
        assert result.exit_code == 0
        assert "[single] property0012 in ['u1']" in result.output

    def test_no_filters(self, cli_runner: CliRunner) -> None:
        result = cli_runner.invoke(cli, ["filter"])
        assert result.exit_code == 0
        assert "matches every issue" in result.output

    def test_conditions_must_be_list(self, cli_runner: CliRunner) -> None:
        result = cli_runner.invoke(cli, ["filter", "--conditions", "{}", "--json"])
        assert result.exit_code == 1
        assert json.loads(result.output) == {"error": "--conditions must be a JSON list of objects"}

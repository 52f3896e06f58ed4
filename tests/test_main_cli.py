from __future__ import annotations

from pathlib import Path
from typing import Any, Dict, List

import pytest

import main
from main import _parse_args
from usergql.models import User
from usergql.results import Err, FacadeError, Ok

ROOT = Path(__file__).resolve().parents[1]

ADA = User("u1", "Ada", "ada@example.com", "hunter2", "2024-01-01", "2024-01-02")


def test_command_is_required() -> None:
    with pytest.raises(SystemExit):
        _parse_args([])


def test_generate_accepts_repeated_exclusions() -> None:
    args = _parse_args(
        [
            "generate",
            "--schema",
            "schema.graphql",
            "--output",
            "-",
            "--exclude-field",
            "password",
            "--exclude-field",
            "secret",
        ]
    )
    assert args.command == "generate"
    assert args.exclude_fields == ["password", "secret"]


def test_global_options_precede_subcommand() -> None:
    args = _parse_args(["--endpoint", "http://localhost/graphql", "update-user", "u1", "--name", "Ada"])
    assert args.endpoint == "http://localhost/graphql"
    assert args.command == "update-user"
    assert args.id == "u1"
    assert args.name == "Ada"
    assert args.email is None
    assert args.change_password is False


def test_generate_writes_module(tmp_path: Path) -> None:
    output = tmp_path / "generated.py"

    exit_code = main.main(
        [
            "generate",
            "--schema",
            str(ROOT / "schema" / "user.graphql"),
            "--output",
            str(output),
            "--header",
            "# header line\\n# second line",
        ]
    )

    assert exit_code == 0
    source = output.read_text(encoding="utf-8")
    assert "# header line\n# second line\n" in source
    assert "CREATE_USER = " in source


def test_generate_reports_missing_schema(tmp_path: Path, capsys) -> None:
    exit_code = main.main(
        ["generate", "--schema", str(tmp_path / "missing.graphql"), "--output", "-"]
    )

    assert exit_code == 1
    assert "Error reading schema file" in capsys.readouterr().err


def _fake_operation(monkeypatch, result, calls: List[Dict[str, Any]]) -> None:
    async def fake_run_operation(config, operation, arguments):
        calls.append({"endpoint": config.endpoint, "operation": operation, "arguments": arguments})
        return result

    monkeypatch.setattr(main, "_run_operation", fake_run_operation)
    monkeypatch.setenv("USERGQL_CONFIG", "/nonexistent/client.yaml")


def test_users_command_prints_table_without_passwords(monkeypatch, capsys) -> None:
    calls: List[Dict[str, Any]] = []
    _fake_operation(monkeypatch, Ok([ADA]), calls)

    exit_code = main.main(["--endpoint", "http://localhost/graphql", "users"])

    assert exit_code == 0
    assert calls == [
        {"endpoint": "http://localhost/graphql", "operation": "users", "arguments": {}}
    ]
    output = capsys.readouterr().out
    assert "1 user(s) found:" in output
    assert "ada@example.com" in output
    assert "hunter2" not in output


def test_create_user_prompts_for_password(monkeypatch, capsys) -> None:
    calls: List[Dict[str, Any]] = []
    _fake_operation(monkeypatch, Ok(ADA), calls)
    monkeypatch.setattr(main, "getpass", lambda _prompt: "hunter2")

    exit_code = main.main(
        ["--endpoint", "http://localhost/graphql", "create-user", " Ada ", "ada@example.com"]
    )

    assert exit_code == 0
    assert calls[0]["operation"] == "createUser"
    assert calls[0]["arguments"] == {"name": "Ada", "email": "ada@example.com", "password": "hunter2"}
    assert "hunter2" not in capsys.readouterr().out


def test_create_user_aborts_after_mismatched_passwords(monkeypatch) -> None:
    calls: List[Dict[str, Any]] = []
    _fake_operation(monkeypatch, Ok(ADA), calls)
    answers = iter(["first", "second"] * 3)
    monkeypatch.setattr(main, "getpass", lambda _prompt: next(answers))

    exit_code = main.main(["--endpoint", "http://localhost/graphql", "create-user", "Ada", "a@b"])

    assert exit_code == 1
    assert calls == []


def test_error_result_exits_non_zero(monkeypatch, capsys) -> None:
    calls: List[Dict[str, Any]] = []
    _fake_operation(monkeypatch, Err(FacadeError.malformed()), calls)

    exit_code = main.main(["--endpoint", "http://localhost/graphql", "delete-user", "u9"])

    assert exit_code == 1
    assert calls[0]["operation"] == "deleteUser"
    assert "Invalid response structure" in capsys.readouterr().err


def test_missing_endpoint_is_a_configuration_error(monkeypatch, capsys) -> None:
    monkeypatch.delenv("USERGQL_ENDPOINT", raising=False)
    monkeypatch.setenv("USERGQL_CONFIG", "/nonexistent/client.yaml")

    exit_code = main.main(["users"])

    assert exit_code == 2
    assert "Configuration error" in capsys.readouterr().err


def test_explicit_missing_config_file_is_reported(monkeypatch, tmp_path: Path, capsys) -> None:
    calls: List[Dict[str, Any]] = []
    _fake_operation(monkeypatch, Ok([ADA]), calls)
    missing = tmp_path / "missing.yaml"

    exit_code = main.main(
        ["--config", str(missing), "--endpoint", "http://localhost/graphql", "users"]
    )

    assert exit_code == 2
    assert calls == []
    assert f"Configuration file not found: {missing}" in capsys.readouterr().err


def test_generate_raise_errors_flag(tmp_path: Path) -> None:
    assert _parse_args(["generate", "--schema", "s", "--output", "-"]).raise_errors is False
    output = tmp_path / "generated.py"

    exit_code = main.main(
        [
            "generate",
            "--schema",
            str(ROOT / "schema" / "user.graphql"),
            "--output",
            str(output),
            "--raise-errors",
        ]
    )

    assert exit_code == 0
    source = output.read_text(encoding="utf-8")
    assert "async def users(client) -> List[User]:" in source
    assert ").unwrap()" in source
    assert "from usergql.results import Result" not in source


def test_generate_default_functions_return_results(tmp_path: Path) -> None:
    output = tmp_path / "generated.py"

    main.main(["generate", "--schema", str(ROOT / "schema" / "user.graphql"), "--output", str(output)])

    source = output.read_text(encoding="utf-8")
    assert "async def createUser(client, name: str, email: str, password: str) -> Result:" in source
    assert 'mutation = {\n    "createUser": createUser,' in source

"""Tests for the design-lab command line interface."""

import json
from collections.abc import Callable, Iterator
from pathlib import Path
from typing import Any

import pytest
from click.testing import CliRunner

from designlab import __version__
from designlab.cli import main
from designlab.infrastructure import AgentClientRegistry
from designlab.infrastructure.llm.mock import MockAgentClient, MockReply

SCORES = {
    "alpha": {"clarity": 8, "feasibility": 9},
    "beta": {"clarity": 6, "feasibility": 7},
}


class LabClient(MockAgentClient):
    """Registered as the 'lab' client; replies come from the class responder."""

    responder: Callable[[str, str], str | MockReply] | None = None
    config: dict[str, Any] = {}

    def __init__(self, **config: Any):
        assert LabClient.responder is not None
        super().__init__(LabClient.responder)
        LabClient.config = config


@pytest.fixture
def runner() -> CliRunner:
    return CliRunner()


@pytest.fixture
def project(tmp_path, config_data) -> Path:  # noqa: ANN001
    root = tmp_path / "project"
    config_file = root / ".designlab" / "design-lab.json"
    config_file.parent.mkdir(parents=True)
    config_file.write_text(json.dumps(config_data))
    return root


@pytest.fixture
def lab_client(lab_responder) -> Iterator[type[LabClient]]:  # noqa: ANN001
    LabClient.responder = lab_responder(SCORES)
    AgentClientRegistry.register("lab", LabClient)
    yield LabClient
    LabClient.responder = None
    AgentClientRegistry.clear()


def _run_args(project: Path, *extra: str) -> list[str]:
    return [
        "run",
        "Build a URL shortener",
        "--topic",
        "url shortener",
        "--client",
        "lab",
        "--project-dir",
        str(project),
        "--no-user-config",
        *extra,
    ]


class TestMain:
    def test_version(self, runner) -> None:
        result = runner.invoke(main, ["--version"])

        assert result.exit_code == 0
        assert __version__ in result.output

    def test_help_lists_commands(self, runner) -> None:
        result = runner.invoke(main, ["--help"])

        for command in ("run", "aggregate", "init", "schemas"):
            assert command in result.output


class TestInit:
    def test_creates_config(self, runner, tmp_path) -> None:
        result = runner.invoke(
            main, ["init", "--project-dir", str(tmp_path), "--model", "a/x", "--model", "b/y"]
        )

        assert result.exit_code == 0
        assert "Created" in result.output
        content = (tmp_path / ".designlab" / "design-lab.jsonc").read_text()
        assert '["a/x", "b/y"]' in content

    def test_existing_config_exits_1(self, runner, project) -> None:
        result = runner.invoke(main, ["init", "--project-dir", str(project)])

        assert result.exit_code == 1


class TestSchemas:
    def test_writes_schema_files(self, runner, tmp_path) -> None:
        result = runner.invoke(main, ["schemas", str(tmp_path / "schemas")])

        assert result.exit_code == 0
        assert "Wrote 4 schemas" in result.output
        assert (tmp_path / "schemas" / "design-artifact.schema.json").is_file()


class TestRun:
    """Tests for 'design-lab run'."""

    def test_full_run(self, runner, project, lab_client) -> None:
        result = runner.invoke(main, _run_args(project))

        assert result.exit_code == 0, result.output
        (run_dir,) = (project / ".design-lab").iterdir()
        assert run_dir.name.endswith("-url-shortener")
        ranking = json.loads((run_dir / "results" / "ranking.json").read_text())
        assert [r["design_id"] for r in ranking] == ["alpha", "beta"]
        assert (run_dir / "results" / "results.md").is_file()

    def test_client_built_from_provider_config(self, runner, project, lab_client) -> None:
        runner.invoke(main, _run_args(project, "--base-url", "http://localhost:11434/v1"))

        assert lab_client.config == {
            "base_url": "http://localhost:11434/v1",
            "api_key_env": "OPENAI_API_KEY",
            "timeout": 180.0,
        }

    def test_requirements_from_file(self, runner, project, lab_client, tmp_path) -> None:
        requirements = tmp_path / "req.md"
        requirements.write_text("Build a URL shortener")
        args = _run_args(project)
        args[1:2] = ["--requirements-file", str(requirements)]

        result = runner.invoke(main, args)

        assert result.exit_code == 0, result.output

    def test_missing_requirements_is_usage_error(self, runner, project, lab_client) -> None:
        result = runner.invoke(main, ["run", "--client", "lab", "--project-dir", str(project)])

        assert result.exit_code == 2

    def test_duplicate_run_exits_1(self, runner, project, lab_client) -> None:
        assert runner.invoke(main, _run_args(project)).exit_code == 0

        result = runner.invoke(main, _run_args(project))

        assert result.exit_code == 1

    def test_missing_config_exits_1(self, runner, tmp_path, lab_client) -> None:
        result = runner.invoke(main, _run_args(tmp_path))

        assert result.exit_code == 1
        assert not (tmp_path / ".design-lab").exists()

    def test_unknown_client_exits_1(self, runner, project) -> None:
        args = _run_args(project)
        args[args.index("lab")] = "nonexistent"

        result = runner.invoke(main, args)

        assert result.exit_code == 1

    def test_no_designs_exits_1(self, runner, project, lab_client) -> None:
        LabClient.responder = lambda _model, _prompt: "I cannot help with that."

        result = runner.invoke(main, _run_args(project))

        assert result.exit_code == 1
        (run_dir,) = (project / ".design-lab").iterdir()
        assert list((run_dir / "designs").iterdir()) == []

    def test_log_file(self, runner, project, lab_client, tmp_path) -> None:
        log_file = tmp_path / "logs" / "run.log"

        result = runner.invoke(main, ["--log-file", str(log_file), *_run_args(project)])

        assert result.exit_code == 0, result.output
        assert "designlab.application" in log_file.read_text()


class TestAggregate:
    """Tests for 'design-lab aggregate'."""

    def test_latest_run_reaggregated(self, runner, project, lab_client) -> None:
        assert runner.invoke(main, _run_args(project)).exit_code == 0
        (run_dir,) = (project / ".design-lab").iterdir()
        for score_file in (run_dir / "scores").glob("score-beta-*.json"):
            score_file.write_text(
                json.dumps([{"name": "clarity", "value": 10}, {"name": "feasibility", "value": 10}])
            )
        (run_dir / "results" / "ranking.json").unlink()

        result = runner.invoke(
            main, ["aggregate", "--project-dir", str(project), "--no-user-config"]
        )

        assert result.exit_code == 0, result.output
        ranking = json.loads((run_dir / "results" / "ranking.json").read_text())
        assert [r["design_id"] for r in ranking] == ["beta", "alpha"]

    def test_explicit_run_dir(self, runner, project, lab_client) -> None:
        runner.invoke(main, _run_args(project))
        (run_dir,) = (project / ".design-lab").iterdir()

        result = runner.invoke(
            main, ["aggregate", str(run_dir), "--project-dir", str(project), "--no-user-config"]
        )

        assert result.exit_code == 0, result.output

    def test_no_runs_exits_1(self, runner, project) -> None:
        result = runner.invoke(
            main, ["aggregate", "--project-dir", str(project), "--no-user-config"]
        )

        assert result.exit_code == 1

"""Tests for CLI module."""

from __future__ import annotations

import json
from unittest.mock import AsyncMock, patch

import pytest
from typer.testing import CliRunner

from kubedesk.cli import app
from kubedesk.services.runner import KubectlRunner
from kubedesk.storage.models import CommandResult

runner = CliRunner()

PODS_JSON = json.dumps(
    {
        "items": [
            {
                "metadata": {"name": "web-1", "ownerReferences": [{"kind": "ReplicaSet"}]},
                "status": {
                    "phase": "Running",
                    "nodeName": "node-a",
                    "containerStatuses": [{"ready": True, "restartCount": 0}],
                },
            }
        ]
    }
)


def _ok(stdout: str = "", args: str = "") -> CommandResult:
    return CommandResult(command=f"kubectl {args}".strip(), stdout=stdout, exit_code=0, duration_ms=5)


@pytest.fixture
def mock_execute():
    with patch.object(KubectlRunner, "execute", new_callable=AsyncMock) as mocked:
        mocked.return_value = _ok()
        yield mocked


class TestCli:
    def test_version(self):
        with patch("kubedesk.cli.check_kubectl_cli", return_value=(True, "Client Version: v1.30.0")):
            result = runner.invoke(app, ["version"])
        assert result.exit_code == 0
        assert "kubedesk v" in result.output
        assert "v1.30.0" in result.output

    def test_pods_table(self, mock_execute):
        mock_execute.return_value = _ok(PODS_JSON, "get pods -n default -o json")
        result = runner.invoke(app, ["pods", "default"])
        assert result.exit_code == 0
        assert "web-1" in result.output
        assert "Running" in result.output
        assert "$ kubectl get pods -n default -o json" in result.output
        mock_execute.assert_awaited_once_with(["get", "pods", "-n", "default", "-o", "json"], 15)

    def test_pods_with_context(self, mock_execute):
        runner.invoke(app, ["pods", "default", "--context", "prod"])
        args, _ = mock_execute.call_args.args
        assert args[:2] == ["--context", "prod"]

    def test_pods_json(self, mock_execute):
        mock_execute.return_value = _ok(PODS_JSON, "get pods -n default -o json")
        result = runner.invoke(app, ["pods", "default", "--json"])
        assert result.exit_code == 0
        data = json.loads(result.output)
        assert data["exitCode"] == 0
        assert data["parsedData"][0]["name"] == "web-1"
        assert data["parsedData"][0]["hasOwner"] is True

    def test_invalid_namespace(self, mock_execute):
        result = runner.invoke(app, ["pods", "Bad_NS"])
        assert result.exit_code == 1
        assert "invalid namespace name" in result.output
        mock_execute.assert_not_awaited()

    def test_failed_command_exits_nonzero(self, mock_execute):
        mock_execute.return_value = CommandResult(
            command="kubectl get ns -o json", stderr="Unable to connect to the server", exit_code=1
        )
        result = runner.invoke(app, ["namespaces"])
        assert result.exit_code == 1
        assert "Unable to connect" in result.output

    def test_logs_default_tail(self, mock_execute):
        mock_execute.return_value = _ok("line1\nline2\n")
        result = runner.invoke(app, ["logs", "default", "web-1"])
        assert result.exit_code == 0
        assert "line2" in result.output
        mock_execute.assert_awaited_once_with(["logs", "web-1", "-n", "default", "--tail=100"], 30)

    def test_delete_requires_confirmation(self, mock_execute):
        result = runner.invoke(app, ["delete-pod", "default", "web-1"], input="n\n")
        assert result.exit_code == 1
        mock_execute.assert_not_awaited()

    def test_delete_with_yes(self, mock_execute):
        mock_execute.return_value = _ok('pod "web-1" deleted\n')
        result = runner.invoke(app, ["delete-pod", "default", "web-1", "--yes"])
        assert result.exit_code == 0
        assert "deleted" in result.output

    def test_current_context(self, mock_execute):
        mock_execute.return_value = _ok("kind-dev\n")
        result = runner.invoke(app, ["current-context"])
        assert result.exit_code == 0
        assert "kind-dev" in result.output

    def test_history_after_command(self, mock_execute):
        mock_execute.return_value = _ok("kind-dev\n", "config current-context")
        runner.invoke(app, ["current-context"])
        result = runner.invoke(app, ["history"])
        assert result.exit_code == 0
        assert "current-context" in result.output

    def test_history_empty(self):
        result = runner.invoke(app, ["history"])
        assert result.exit_code == 0
        assert "no history" in result.output.lower()

    def test_shell_transcript(self, mock_execute):
        mock_execute.return_value = _ok(PODS_JSON, "get pods -n default -o json")
        result = runner.invoke(app, ["shell"], input="pods default\ntranscript\nclear\ntranscript\nquit\n")
        assert result.exit_code == 0
        assert "web-1" in result.output
        assert "Transcript" in result.output
        assert "Transcript cleared" in result.output
        assert "Transcript is empty" in result.output

    def test_shell_bad_arguments(self, mock_execute):
        result = runner.invoke(app, ["shell"], input="pods\nbogus\n")
        assert result.exit_code == 0
        assert "Missing or invalid arguments" in result.output
        assert "Unknown command" in result.output

    def test_config_show(self):
        result = runner.invoke(app, ["config"])
        assert result.exit_code == 0
        assert "kubectl.timeout" in result.output

    def test_config_set(self):
        result = runner.invoke(app, ["config", "kubectl.default_tail", "250"])
        assert result.exit_code == 0

        from kubedesk.config import load_config

        assert load_config().kubectl.default_tail == 250

    def test_config_unknown_section(self):
        result = runner.invoke(app, ["config", "bot.token", "x"])
        assert result.exit_code == 1

"""Tests for the kubectl process runner."""

from __future__ import annotations

import asyncio
from unittest.mock import AsyncMock, MagicMock, patch

import pytest

from kubedesk.services.runner import TIMEOUT_MESSAGE, KubectlRunner


@pytest.fixture
def runner(app_config):
    return KubectlRunner(app_config)


class TestKubectlRunner:
    @pytest.mark.asyncio
    async def test_execute_success(self, runner):
        mock_proc = AsyncMock()
        mock_proc.communicate = AsyncMock(return_value=(b'{"items": []}', b""))
        mock_proc.returncode = 0

        with patch(
            "kubedesk.services.runner.asyncio.create_subprocess_exec", return_value=mock_proc
        ) as mock_exec:
            result = await runner.execute(["get", "ns", "-o", "json"], timeout=15)

        assert result.exit_code == 0
        assert result.stdout == '{"items": []}'
        assert result.stderr == ""
        assert result.command == "kubectl get ns -o json"
        assert result.parsed_data is None
        args = mock_exec.call_args.args
        assert args == ("kubectl", "get", "ns", "-o", "json")

    @pytest.mark.asyncio
    async def test_arguments_are_not_shell_interpreted(self, runner):
        mock_proc = AsyncMock()
        mock_proc.communicate = AsyncMock(return_value=(b"", b""))
        mock_proc.returncode = 0

        with patch(
            "kubedesk.services.runner.asyncio.create_subprocess_exec", return_value=mock_proc
        ) as mock_exec:
            await runner.execute(["logs", "pod; rm -rf /", "-n", "default"], timeout=15)

        assert "pod; rm -rf /" in mock_exec.call_args.args

    @pytest.mark.asyncio
    async def test_nonzero_exit_is_reported(self, runner):
        mock_proc = AsyncMock()
        mock_proc.communicate = AsyncMock(return_value=(b"", b'Error from server (NotFound): pods "x" not found'))
        mock_proc.returncode = 1

        with patch("kubedesk.services.runner.asyncio.create_subprocess_exec", return_value=mock_proc):
            result = await runner.execute(["delete", "pod", "x", "-n", "default"], timeout=15)

        assert result.exit_code == 1
        assert "NotFound" in result.stderr

    @pytest.mark.asyncio
    async def test_killed_by_signal_maps_to_minus_one(self, runner):
        mock_proc = AsyncMock()
        mock_proc.communicate = AsyncMock(return_value=(b"", b""))
        mock_proc.returncode = -9

        with patch("kubedesk.services.runner.asyncio.create_subprocess_exec", return_value=mock_proc):
            result = await runner.execute(["get", "ns"], timeout=15)

        assert result.exit_code == -1

    @pytest.mark.asyncio
    async def test_timeout_without_stderr(self, runner):
        mock_proc = AsyncMock()
        mock_proc.communicate = AsyncMock(side_effect=[asyncio.TimeoutError, (b"", b"")])
        mock_proc.kill = MagicMock()

        with patch("kubedesk.services.runner.asyncio.create_subprocess_exec", return_value=mock_proc):
            result = await runner.execute(["logs", "web", "-n", "default"], timeout=1)

        mock_proc.kill.assert_called_once()
        assert result.exit_code == -1
        assert result.stderr == TIMEOUT_MESSAGE == "command timed out"

    @pytest.mark.asyncio
    async def test_timeout_keeps_process_stderr(self, runner):
        mock_proc = AsyncMock()
        mock_proc.communicate = AsyncMock(side_effect=[asyncio.TimeoutError, (b"", b"Unable to connect")])
        mock_proc.kill = MagicMock()

        with patch("kubedesk.services.runner.asyncio.create_subprocess_exec", return_value=mock_proc):
            result = await runner.execute(["get", "ns"], timeout=1)

        assert result.exit_code == -1
        assert result.stderr == "Unable to connect"

    @pytest.mark.asyncio
    async def test_real_timeout_terminates_process(self, app_config):
        app_config.kubectl.binary = "sleep"
        runner = KubectlRunner(app_config)

        result = await runner.execute(["5"], timeout=0.2)

        assert result.exit_code == -1
        assert result.stderr == "command timed out"
        assert result.duration_ms < 5000

    @pytest.mark.asyncio
    async def test_binary_not_found(self, runner):
        with patch("kubedesk.services.runner.asyncio.create_subprocess_exec", side_effect=FileNotFoundError):
            result = await runner.execute(["get", "ns"], timeout=15)

        assert result.exit_code == -1
        assert "not found" in result.stderr.lower()
        assert result.stdout == ""

    @pytest.mark.asyncio
    async def test_launch_error(self, runner):
        with patch(
            "kubedesk.services.runner.asyncio.create_subprocess_exec", side_effect=PermissionError("denied")
        ):
            result = await runner.execute(["get", "ns"], timeout=15)

        assert result.exit_code == -1
        assert "denied" in result.stderr

    def test_display_command_uses_configured_binary(self, app_config):
        app_config.kubectl.binary = "/usr/local/bin/kubectl"
        runner = KubectlRunner(app_config)
        assert runner.display_command(["config", "current-context"]) == "/usr/local/bin/kubectl config current-context"

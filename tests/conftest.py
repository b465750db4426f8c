"""Shared test fixtures."""

from __future__ import annotations

import pytest

from kubedesk.config import AppConfig, KubectlConfig, LoggingConfig, StorageConfig, TranscriptConfig
from kubedesk.storage.models import CommandResult


@pytest.fixture(autouse=True)
def isolated_home(tmp_path, monkeypatch):
    """Keep config, history and logs out of the real home directory."""
    import kubedesk.config as cfg_module

    monkeypatch.setattr(cfg_module, "CONFIG_DIR", tmp_path / "kubedesk-home")
    monkeypatch.setattr(cfg_module, "CONFIG_FILE", tmp_path / "kubedesk-home" / "config.toml")
    monkeypatch.setenv("KUBEDESK_DB_PATH", str(tmp_path / "history.db"))
    monkeypatch.setenv("KUBEDESK_LOG_FILE", str(tmp_path / "kubedesk.log"))


@pytest.fixture
def app_config(tmp_path):
    """Create a test configuration."""
    return AppConfig(
        kubectl=KubectlConfig(binary="kubectl", timeout=15, logs_timeout=30, default_tail=100),
        transcript=TranscriptConfig(capacity=200, learning_mode=True),
        storage=StorageConfig(history=False, db_path=str(tmp_path / "test.db")),
        logging=LoggingConfig(level="DEBUG", file=str(tmp_path / "test.log")),
    )


class FakeRunner:
    """Stand-in for KubectlRunner that records calls instead of spawning kubectl."""

    def __init__(self, stdout: str = "", stderr: str = "", exit_code: int = 0) -> None:
        self.stdout = stdout
        self.stderr = stderr
        self.exit_code = exit_code
        self.calls: list[tuple[list[str], float]] = []

    async def execute(self, args: list[str], timeout: float) -> CommandResult:
        self.calls.append((list(args), timeout))
        return CommandResult(
            command=" ".join(["kubectl", *args]),
            stdout=self.stdout,
            stderr=self.stderr,
            exit_code=self.exit_code,
            duration_ms=7,
        )


@pytest.fixture
def fake_runner():
    return FakeRunner()

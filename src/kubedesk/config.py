"""Configuration management using TOML + environment variables."""

from __future__ import annotations

import os
import sys
from dataclasses import dataclass, field
from pathlib import Path

if sys.version_info >= (3, 11):
    import tomllib
else:
    try:
        import tomllib
    except ModuleNotFoundError:
        import tomli as tomllib  # type: ignore[no-redef]

import tomli_w

CONFIG_DIR = Path.home() / ".kubedesk"
CONFIG_FILE = CONFIG_DIR / "config.toml"


@dataclass
class KubectlConfig:
    binary: str = "kubectl"
    timeout: int = 15
    logs_timeout: int = 30
    default_tail: int = 100


@dataclass
class TranscriptConfig:
    capacity: int = 200
    learning_mode: bool = True


@dataclass
class StorageConfig:
    history: bool = True
    db_path: str = "~/.kubedesk/history.db"


@dataclass
class LoggingConfig:
    level: str = "WARNING"
    file: str = "~/.kubedesk/kubedesk.log"


@dataclass
class AppConfig:
    kubectl: KubectlConfig = field(default_factory=KubectlConfig)
    transcript: TranscriptConfig = field(default_factory=TranscriptConfig)
    storage: StorageConfig = field(default_factory=StorageConfig)
    logging: LoggingConfig = field(default_factory=LoggingConfig)


def ensure_config_dir() -> None:
    """Create config directory with secure permissions."""
    CONFIG_DIR.mkdir(parents=True, exist_ok=True)
    os.chmod(CONFIG_DIR, 0o700)


def load_config() -> AppConfig:
    """Load configuration from TOML file with env var overrides."""
    config = AppConfig()

    if CONFIG_FILE.exists():
        with open(CONFIG_FILE, "rb") as f:
            data = tomllib.load(f)

        kubectl = data.get("kubectl", {})
        config.kubectl.binary = kubectl.get("binary", config.kubectl.binary)
        config.kubectl.timeout = kubectl.get("timeout", config.kubectl.timeout)
        config.kubectl.logs_timeout = kubectl.get("logs_timeout", config.kubectl.logs_timeout)
        config.kubectl.default_tail = kubectl.get("default_tail", config.kubectl.default_tail)

        transcript = data.get("transcript", {})
        config.transcript.capacity = transcript.get("capacity", config.transcript.capacity)
        config.transcript.learning_mode = transcript.get("learning_mode", config.transcript.learning_mode)

        storage = data.get("storage", {})
        config.storage.history = storage.get("history", config.storage.history)
        config.storage.db_path = storage.get("db_path", config.storage.db_path)

        logging_cfg = data.get("logging", {})
        config.logging.level = logging_cfg.get("level", config.logging.level)
        config.logging.file = logging_cfg.get("file", config.logging.file)

    # Environment variable overrides
    if env_binary := os.environ.get("KUBEDESK_KUBECTL"):
        config.kubectl.binary = env_binary
    if env_timeout := os.environ.get("KUBEDESK_TIMEOUT"):
        config.kubectl.timeout = int(env_timeout)
    if env_logs_timeout := os.environ.get("KUBEDESK_LOGS_TIMEOUT"):
        config.kubectl.logs_timeout = int(env_logs_timeout)
    if env_tail := os.environ.get("KUBEDESK_DEFAULT_TAIL"):
        config.kubectl.default_tail = int(env_tail)
    if env_capacity := os.environ.get("KUBEDESK_TRANSCRIPT_CAPACITY"):
        config.transcript.capacity = int(env_capacity)
    if env_db := os.environ.get("KUBEDESK_DB_PATH"):
        config.storage.db_path = env_db
    if env_log_level := os.environ.get("KUBEDESK_LOG_LEVEL"):
        config.logging.level = env_log_level
    if env_log_file := os.environ.get("KUBEDESK_LOG_FILE"):
        config.logging.file = env_log_file

    return config


def save_config(config: AppConfig) -> None:
    """Save configuration to TOML file."""
    ensure_config_dir()

    data = {
        "kubectl": {
            "binary": config.kubectl.binary,
            "timeout": config.kubectl.timeout,
            "logs_timeout": config.kubectl.logs_timeout,
            "default_tail": config.kubectl.default_tail,
        },
        "transcript": {
            "capacity": config.transcript.capacity,
            "learning_mode": config.transcript.learning_mode,
        },
        "storage": {
            "history": config.storage.history,
            "db_path": config.storage.db_path,
        },
        "logging": {
            "level": config.logging.level,
            "file": config.logging.file,
        },
    }

    with open(CONFIG_FILE, "wb") as f:
        tomli_w.dump(data, f)

    os.chmod(CONFIG_FILE, 0o600)

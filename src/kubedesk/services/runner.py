"""kubectl process runner."""

from __future__ import annotations

import asyncio
import logging
import time

from kubedesk.config import AppConfig
from kubedesk.storage.models import CommandResult

logger = logging.getLogger(__name__)

TIMEOUT_MESSAGE = "command timed out"


class KubectlRunner:
    """Run kubectl with an argument vector and a deadline.

    Arguments are always passed to exec, never through a shell. Every call
    spawns exactly one process and never retries.
    """

    def __init__(self, config: AppConfig) -> None:
        self.config = config

    @property
    def binary(self) -> str:
        return self.config.kubectl.binary

    def display_command(self, args: list[str]) -> str:
        return " ".join([self.binary, *args])

    async def execute(self, args: list[str], timeout: float) -> CommandResult:
        """Execute kubectl and capture its output, exit code and duration."""
        command = self.display_command(args)
        logger.debug("Running: %s (timeout=%ss)", command, timeout)

        start = time.monotonic()
        try:
            proc = await asyncio.create_subprocess_exec(
                self.binary,
                *args,
                stdout=asyncio.subprocess.PIPE,
                stderr=asyncio.subprocess.PIPE,
            )
        except FileNotFoundError:
            return CommandResult(
                command=command,
                stderr=f"{self.binary} not found. Install kubectl and make sure it is on PATH.",
                exit_code=-1,
                duration_ms=int((time.monotonic() - start) * 1000),
            )
        except Exception as e:
            logger.exception("kubectl launch error")
            return CommandResult(
                command=command,
                stderr=str(e),
                exit_code=-1,
                duration_ms=int((time.monotonic() - start) * 1000),
            )

        try:
            stdout_bytes, stderr_bytes = await asyncio.wait_for(proc.communicate(), timeout=timeout)
            exit_code = proc.returncode if proc.returncode is not None and proc.returncode >= 0 else -1
        except asyncio.TimeoutError:
            logger.warning("Command timed out after %ss: %s", timeout, command)
            proc.kill()
            stdout_bytes, stderr_bytes = await proc.communicate()
            if not stderr_bytes:
                stderr_bytes = TIMEOUT_MESSAGE.encode()
            exit_code = -1
        except Exception as e:
            logger.exception("kubectl execution error")
            stdout_bytes = b""
            stderr_bytes = str(e).encode()
            exit_code = -1

        elapsed_ms = int((time.monotonic() - start) * 1000)
        return CommandResult(
            command=command,
            stdout=stdout_bytes.decode("utf-8", errors="replace"),
            stderr=stderr_bytes.decode("utf-8", errors="replace"),
            exit_code=exit_code,
            duration_ms=elapsed_ms,
        )

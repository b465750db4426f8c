"""Command service: the fixed set of kubectl operations the UI can call."""

from __future__ import annotations

import dataclasses
import logging
from typing import Callable

from kubedesk.config import AppConfig
from kubedesk.services.decoders import ParseError, parse_contexts, parse_namespaces, parse_pods
from kubedesk.services.runner import KubectlRunner
from kubedesk.services.validation import (
    ValidationError,
    validate_context_name,
    validate_namespace,
    validate_pod_name,
    with_context,
)
from kubedesk.storage import database
from kubedesk.storage.models import (
    CommandResult,
    ContextList,
    CurrentContext,
    NamespaceList,
    ParsedData,
    PodList,
)
from kubedesk.storage.transcript import Transcript

logger = logging.getLogger(__name__)

Decoder = Callable[[str], ParsedData]


def _decode_contexts(stdout: str) -> ContextList:
    return ContextList(items=tuple(parse_contexts(stdout)))


def _decode_current_context(stdout: str) -> CurrentContext:
    return CurrentContext(name=stdout.strip())


def _decode_namespaces(stdout: str) -> NamespaceList:
    return NamespaceList(items=tuple(parse_namespaces(stdout)))


def _decode_pods(stdout: str) -> PodList:
    return PodList(items=tuple(parse_pods(stdout)))


def _append_parse_error(result: CommandResult, error: ParseError) -> CommandResult:
    stderr = result.stderr
    if stderr:
        stderr += "\n"
    stderr += f"parse error: {error}"
    return dataclasses.replace(result, stderr=stderr)


class KubectlService:
    """Validate, run, decode and record each supported kubectl operation.

    The transcript is owned by the service and can be injected for isolation.
    Concurrent calls run their processes independently; only recording into
    the transcript is serialized. Operations are never retried here, and
    concurrent deletes of the same pod are left to the caller.
    """

    def __init__(
        self,
        config: AppConfig,
        runner: KubectlRunner | None = None,
        transcript: Transcript | None = None,
        archive: bool = False,
    ) -> None:
        self.config = config
        self.runner = runner or KubectlRunner(config)
        self.transcript = transcript or Transcript(config.transcript.capacity)
        self.archive = archive

    # --- Plumbing ---

    def _display(self, args: list[str], context_name: str = "") -> str:
        prefix = ["--context", context_name] if context_name else []
        return " ".join([self.config.kubectl.binary, *prefix, *args])

    async def _record(self, result: CommandResult) -> CommandResult:
        self.transcript.append(result)
        if self.archive:
            await database.save_command(result)
        return result

    async def _reject(self, args: list[str], context_name: str, error: ValidationError) -> CommandResult:
        logger.warning("Rejected kubectl %s: %s", args[:2], error)
        result = CommandResult(
            command=self._display(args, context_name),
            stderr=str(error),
            exit_code=-1,
        )
        return await self._record(result)

    async def _run(
        self,
        args: list[str],
        context_name: str = "",
        timeout: float | None = None,
        decoder: Decoder | None = None,
    ) -> CommandResult:
        try:
            argv = with_context(args, context_name)
        except ValidationError as e:
            return await self._reject(args, context_name, e)

        result = await self.runner.execute(argv, timeout if timeout is not None else self.config.kubectl.timeout)
        if result.ok and decoder is not None:
            try:
                result = dataclasses.replace(result, parsed_data=decoder(result.stdout))
            except ParseError as e:
                logger.warning("Could not decode output of %s: %s", result.command, e)
                result = _append_parse_error(result, e)
        return await self._record(result)

    # --- Operations ---

    async def list_contexts(self) -> CommandResult:
        return await self._run(["config", "view", "-o", "json"], decoder=_decode_contexts)

    async def get_current_context(self) -> CommandResult:
        return await self._run(["config", "current-context"], decoder=_decode_current_context)

    async def set_context(self, context_name: str) -> CommandResult:
        args = ["config", "use-context", context_name]
        try:
            if not context_name:
                raise ValidationError("context name is required")
            validate_context_name(context_name)
        except ValidationError as e:
            return await self._reject(args, "", e)
        return await self._run(args)

    async def list_namespaces(self, context_name: str = "") -> CommandResult:
        return await self._run(["get", "ns", "-o", "json"], context_name, decoder=_decode_namespaces)

    async def list_pods(self, context_name: str, namespace: str) -> CommandResult:
        args = ["get", "pods", "-n", namespace, "-o", "json"]
        try:
            validate_namespace(namespace)
        except ValidationError as e:
            return await self._reject(args, context_name, e)
        return await self._run(args, context_name, decoder=_decode_pods)

    async def delete_pod(self, context_name: str, namespace: str, pod_name: str) -> CommandResult:
        args = ["delete", "pod", pod_name, "-n", namespace]
        try:
            validate_namespace(namespace)
            validate_pod_name(pod_name)
        except ValidationError as e:
            return await self._reject(args, context_name, e)
        return await self._run(args, context_name)

    async def get_pod_logs(
        self,
        context_name: str,
        namespace: str,
        pod_name: str,
        tail_lines: int = 0,
    ) -> CommandResult:
        if tail_lines <= 0:
            tail_lines = self.config.kubectl.default_tail
        args = ["logs", pod_name, "-n", namespace, f"--tail={tail_lines}"]
        try:
            validate_namespace(namespace)
            validate_pod_name(pod_name)
        except ValidationError as e:
            return await self._reject(args, context_name, e)
        return await self._run(args, context_name, timeout=self.config.kubectl.logs_timeout)

    async def describe_pod(self, context_name: str, namespace: str, pod_name: str) -> CommandResult:
        args = ["describe", "pod", pod_name, "-n", namespace]
        try:
            validate_namespace(namespace)
            validate_pod_name(pod_name)
        except ValidationError as e:
            return await self._reject(args, context_name, e)
        return await self._run(args, context_name)

    # --- Transcript ---

    def get_transcript(self) -> list[CommandResult]:
        return self.transcript.snapshot()

    def clear_transcript(self) -> None:
        self.transcript.clear()

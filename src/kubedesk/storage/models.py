"""Data models for kubedesk."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, ClassVar, Union


@dataclass(frozen=True)
class Context:
    """A named cluster connection from the kubeconfig."""

    name: str

    def to_dict(self) -> dict[str, Any]:
        return {"name": self.name}


@dataclass(frozen=True)
class Namespace:
    name: str

    def to_dict(self) -> dict[str, Any]:
        return {"name": self.name}


@dataclass(frozen=True)
class Pod:
    """Point-in-time view of a pod as shown in the pod table."""

    name: str
    status: str = ""
    ready: str = "0/0"
    restarts: int = 0
    age: str = "-"
    node: str = "-"
    has_owner: bool = False

    def to_dict(self) -> dict[str, Any]:
        return {
            "name": self.name,
            "status": self.status,
            "ready": self.ready,
            "restarts": self.restarts,
            "age": self.age,
            "node": self.node,
            "hasOwner": self.has_owner,
        }


@dataclass(frozen=True)
class ContextList:
    kind: ClassVar[str] = "contexts"
    items: tuple[Context, ...] = ()

    def to_dict(self) -> list[dict[str, Any]]:
        return [item.to_dict() for item in self.items]


@dataclass(frozen=True)
class CurrentContext:
    kind: ClassVar[str] = "current_context"
    name: str = ""

    def to_dict(self) -> str:
        return self.name


@dataclass(frozen=True)
class NamespaceList:
    kind: ClassVar[str] = "namespaces"
    items: tuple[Namespace, ...] = ()

    def to_dict(self) -> list[dict[str, Any]]:
        return [item.to_dict() for item in self.items]


@dataclass(frozen=True)
class PodList:
    kind: ClassVar[str] = "pods"
    items: tuple[Pod, ...] = ()

    def to_dict(self) -> list[dict[str, Any]]:
        return [item.to_dict() for item in self.items]


ParsedData = Union[ContextList, CurrentContext, NamespaceList, PodList]


@dataclass(frozen=True)
class CommandResult:
    """Uniform envelope returned by every kubectl operation.

    ``exit_code`` is 0 on success, -1 for validation failures, timeouts and
    processes that could not be started, and the kubectl exit status otherwise.
    ``parsed_data`` is only set when the command succeeded and its output
    decoded cleanly.
    """

    command: str
    stdout: str = ""
    stderr: str = ""
    exit_code: int = 0
    duration_ms: int = 0
    parsed_data: ParsedData | None = field(default=None)

    @property
    def ok(self) -> bool:
        return self.exit_code == 0

    def to_dict(self) -> dict[str, Any]:
        data: dict[str, Any] = {
            "command": self.command,
            "stdout": self.stdout,
            "stderr": self.stderr,
            "exitCode": self.exit_code,
            "durationMs": self.duration_ms,
        }
        if self.parsed_data is not None:
            data["parsedData"] = self.parsed_data.to_dict()
        return data


@dataclass
class CommandRecord:
    """An archived command history entry."""

    id: int = 0
    command: str = ""
    stdout: str = ""
    stderr: str = ""
    exit_code: int = 0
    duration_ms: int = 0
    created_at: str = ""

"""Display formatting for command results and records."""

from __future__ import annotations

from rich.table import Table
from rich.text import Text

from kubedesk.storage.models import CommandRecord, CommandResult, Pod


def format_duration(ms: int) -> str:
    """Format milliseconds to human-readable duration."""
    if ms < 1000:
        return f"{ms}ms"
    elif ms < 60000:
        return f"{ms / 1000:.1f}s"
    else:
        minutes = ms // 60000
        seconds = (ms % 60000) // 1000
        return f"{minutes}m {seconds}s"


def status_label(exit_code: int) -> str:
    return "OK" if exit_code == 0 else f"ERR({exit_code})"


def format_command_line(result: CommandResult) -> str:
    """One transcript line: ``$ kubectl ... [OK] 120ms``."""
    return f"$ {result.command}  [{status_label(result.exit_code)}] {format_duration(result.duration_ms)}"


def pods_table(pods: tuple[Pod, ...] | list[Pod], title: str = "Pods") -> Table:
    table = Table(title=title)
    table.add_column("Name", style="cyan")
    table.add_column("Status")
    table.add_column("Ready", justify="right")
    table.add_column("Restarts", justify="right")
    table.add_column("Age", justify="right")
    table.add_column("Node", style="dim")

    for pod in pods:
        status_style = "green" if pod.status in ("Running", "Succeeded", "Completed") else "yellow"
        name = pod.name if pod.has_owner else f"{pod.name} *"
        table.add_row(
            name,
            f"[{status_style}]{pod.status}[/{status_style}]",
            pod.ready,
            str(pod.restarts),
            pod.age,
            pod.node,
        )
    if any(not pod.has_owner for pod in pods):
        table.caption = "* not managed by a controller, deleting it is permanent"
    return table


def transcript_table(results: list[CommandResult]) -> Table:
    table = Table(title="Transcript")
    table.add_column("#", justify="right", style="dim")
    table.add_column("Command", style="cyan")
    table.add_column("Exit", justify="right")
    table.add_column("Time", justify="right")

    for i, result in enumerate(results, start=1):
        table.add_row(str(i), Text(result.command), status_label(result.exit_code), format_duration(result.duration_ms))
    return table


def history_table(records: list[CommandRecord]) -> Table:
    table = Table(title="History")
    table.add_column("When", style="dim")
    table.add_column("Command", style="cyan")
    table.add_column("Exit", justify="right")
    table.add_column("Time", justify="right")

    for record in records:
        table.add_row(
            record.created_at,
            Text(record.command),
            status_label(record.exit_code),
            format_duration(record.duration_ms),
        )
    return table

"""CLI entry point using typer."""

from __future__ import annotations

import asyncio
import logging
import shlex
import sys
from pathlib import Path
from typing import Awaitable, Callable

import typer
from rich.console import Console
from rich.table import Table

from kubedesk import __version__
from kubedesk.config import CONFIG_FILE, AppConfig, load_config, save_config
from kubedesk.services.kubectl import KubectlService
from kubedesk.storage.database import close_db, get_recent_commands, init_db
from kubedesk.storage.models import CommandResult, ContextList, CurrentContext, NamespaceList, PodList
from kubedesk.utils.formatting import format_command_line, history_table, pods_table, transcript_table
from kubedesk.utils.system import check_kubectl_cli

app = typer.Typer(
    name="kubedesk",
    help="Browse a Kubernetes cluster through kubectl, showing every command it runs.",
    add_completion=False,
)
console = Console()

ContextOption = typer.Option("", "--context", "-c", help="kubeconfig context to use")
JsonOption = typer.Option(False, "--json", help="Print the raw result envelope as JSON")

Operation = Callable[[KubectlService], Awaitable[CommandResult]]


def _setup_logging(config: AppConfig, verbose: bool) -> None:
    log_path = Path(config.logging.file).expanduser().resolve()
    log_path.parent.mkdir(parents=True, exist_ok=True)
    level = logging.DEBUG if verbose else getattr(logging, config.logging.level.upper(), logging.WARNING)
    logging.basicConfig(
        level=level,
        format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
        handlers=[
            logging.FileHandler(str(log_path)),
            *([logging.StreamHandler()] if verbose else []),
        ],
    )


async def _with_service(config: AppConfig, operation: Callable[[KubectlService], Awaitable]):
    archive = config.storage.history
    if archive:
        await init_db(config.storage.db_path)
    try:
        return await operation(KubectlService(config, archive=archive))
    finally:
        if archive:
            await close_db()


def _render(result: CommandResult, config: AppConfig) -> None:
    if config.transcript.learning_mode:
        console.print(format_command_line(result), style="dim", markup=False, highlight=False)

    data = result.parsed_data
    if isinstance(data, PodList):
        if data.items:
            console.print(pods_table(data.items))
        else:
            console.print("[dim]No pods found.[/dim]")
    elif isinstance(data, (ContextList, NamespaceList)):
        for item in data.items:
            console.print(item.name, markup=False, highlight=False)
    elif isinstance(data, CurrentContext):
        console.print(data.name, style="green", markup=False, highlight=False)
    elif result.stdout:
        console.print(result.stdout.rstrip("\n"), markup=False, highlight=False)

    if result.stderr:
        style = "yellow" if result.ok else "red"
        console.print(result.stderr.rstrip("\n"), style=style, markup=False, highlight=False)


def _execute(operation: Operation, as_json: bool) -> None:
    config = load_config()
    result: CommandResult = asyncio.run(_with_service(config, operation))
    if as_json:
        console.print_json(data=result.to_dict())
    else:
        _render(result, config)
    if not result.ok:
        raise typer.Exit(1)


@app.callback()
def main(
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Log debug output to stderr"),
) -> None:
    _setup_logging(load_config(), verbose)


@app.command()
def contexts(as_json: bool = JsonOption) -> None:
    """List contexts in the kubeconfig."""
    _execute(lambda svc: svc.list_contexts(), as_json)


@app.command("current-context")
def current_context(as_json: bool = JsonOption) -> None:
    """Show the current context."""
    _execute(lambda svc: svc.get_current_context(), as_json)


@app.command("use-context")
def use_context(
    name: str = typer.Argument(..., help="Context name"),
    as_json: bool = JsonOption,
) -> None:
    """Switch the kubeconfig's current context."""
    _execute(lambda svc: svc.set_context(name), as_json)


@app.command()
def namespaces(context: str = ContextOption, as_json: bool = JsonOption) -> None:
    """List namespaces."""
    _execute(lambda svc: svc.list_namespaces(context), as_json)


@app.command()
def pods(
    namespace: str = typer.Argument(..., help="Namespace"),
    context: str = ContextOption,
    as_json: bool = JsonOption,
) -> None:
    """List pods in a namespace."""
    _execute(lambda svc: svc.list_pods(context, namespace), as_json)


@app.command("delete-pod")
def delete_pod(
    namespace: str = typer.Argument(..., help="Namespace"),
    pod: str = typer.Argument(..., help="Pod name"),
    context: str = ContextOption,
    yes: bool = typer.Option(False, "--yes", "-y", help="Do not ask for confirmation"),
    as_json: bool = JsonOption,
) -> None:
    """Delete a pod."""
    if not yes and not typer.confirm(f"Delete pod {pod} in {namespace}?", default=False):
        console.print("[dim]Aborted.[/dim]")
        raise typer.Exit(1)
    _execute(lambda svc: svc.delete_pod(context, namespace, pod), as_json)


@app.command()
def logs(
    namespace: str = typer.Argument(..., help="Namespace"),
    pod: str = typer.Argument(..., help="Pod name"),
    tail: int = typer.Option(0, "--tail", "-n", help="Number of lines (default from config)"),
    context: str = ContextOption,
    as_json: bool = JsonOption,
) -> None:
    """Show the most recent log lines of a pod."""
    _execute(lambda svc: svc.get_pod_logs(context, namespace, pod, tail), as_json)


@app.command()
def describe(
    namespace: str = typer.Argument(..., help="Namespace"),
    pod: str = typer.Argument(..., help="Pod name"),
    context: str = ContextOption,
    as_json: bool = JsonOption,
) -> None:
    """Describe a pod."""
    _execute(lambda svc: svc.describe_pod(context, namespace, pod), as_json)


@app.command()
def history(limit: int = typer.Option(20, "--limit", "-l", help="Number of entries")) -> None:
    """Show archived commands from previous runs."""
    config = load_config()
    if not config.storage.history:
        console.print("[yellow]History is disabled (storage.history = false).[/yellow]")
        return

    async def _load():
        await init_db(config.storage.db_path)
        try:
            return await get_recent_commands(limit)
        finally:
            await close_db()

    records = asyncio.run(_load())
    if not records:
        console.print("[dim]No history yet.[/dim]")
        return
    console.print(history_table(records))


SHELL_HELP = """Commands:
  contexts                   List contexts
  current                    Show current context
  use <context>              Switch current context
  context [<name>]           Set or clear the context used by this session
  ns                         List namespaces
  pods <ns>                  List pods
  logs <ns> <pod> [lines]    Show pod logs
  describe <ns> <pod>        Describe a pod
  delete <ns> <pod>          Delete a pod
  transcript                 Show commands run in this session
  clear                      Clear the transcript
  help                       This help
  quit                       Leave the shell"""


async def _dispatch(service: KubectlService, session: dict, words: list[str]) -> bool:
    """Run one shell line. Returns False when the session should end."""
    cmd, args = words[0], words[1:]
    ctx = session["context"]

    try:
        if cmd in ("quit", "exit"):
            return False
        if cmd == "help":
            console.print(SHELL_HELP, markup=False, highlight=False)
        elif cmd == "context":
            session["context"] = args[0] if args else ""
            console.print(f"Session context: {session['context'] or '(kubeconfig default)'}", markup=False)
        elif cmd == "transcript":
            entries = service.get_transcript()
            if entries:
                console.print(transcript_table(entries))
            else:
                console.print("[dim]Transcript is empty.[/dim]")
        elif cmd == "clear":
            service.clear_transcript()
            console.print("[dim]Transcript cleared.[/dim]")
        elif cmd == "contexts":
            _render(await service.list_contexts(), service.config)
        elif cmd == "current":
            _render(await service.get_current_context(), service.config)
        elif cmd == "use":
            _render(await service.set_context(args[0]), service.config)
        elif cmd == "ns":
            _render(await service.list_namespaces(ctx), service.config)
        elif cmd == "pods":
            _render(await service.list_pods(ctx, args[0]), service.config)
        elif cmd == "logs":
            tail = int(args[2]) if len(args) > 2 else 0
            _render(await service.get_pod_logs(ctx, args[0], args[1], tail), service.config)
        elif cmd == "describe":
            _render(await service.describe_pod(ctx, args[0], args[1]), service.config)
        elif cmd == "delete":
            _render(await service.delete_pod(ctx, args[0], args[1]), service.config)
        else:
            console.print(f"Unknown command: {cmd}. Type 'help'.", style="red", markup=False)
    except (IndexError, ValueError):
        console.print(f"Missing or invalid arguments for '{cmd}'. Type 'help'.", style="red", markup=False)
    return True


@app.command()
def shell(context: str = ContextOption) -> None:
    """Interactive session with an in-memory command transcript."""
    config = load_config()
    console.print(f"[bold]kubedesk v{__version__}[/bold]  Type 'help' for commands.\n")

    async def _loop(service: KubectlService) -> None:
        session = {"context": context}
        while True:
            try:
                line = await asyncio.to_thread(console.input, "[bold cyan]kubedesk>[/bold cyan] ")
            except EOFError:
                break
            try:
                words = shlex.split(line)
            except ValueError as e:
                console.print(f"Parse error: {e}", style="red", markup=False)
                continue
            if words and not await _dispatch(service, session, words):
                break

    try:
        asyncio.run(_with_service(config, _loop))
    except KeyboardInterrupt:
        pass


@app.command()
def config(
    key: str = typer.Argument(None, help="Config key (e.g., kubectl.timeout)"),
    value: str = typer.Argument(None, help="New value"),
) -> None:
    """View or modify configuration."""
    cfg = load_config()

    if key is None:
        table = Table(title="Configuration")
        table.add_column("Key", style="cyan")
        table.add_column("Value", style="green")

        table.add_row("kubectl.binary", cfg.kubectl.binary)
        table.add_row("kubectl.timeout", str(cfg.kubectl.timeout))
        table.add_row("kubectl.logs_timeout", str(cfg.kubectl.logs_timeout))
        table.add_row("kubectl.default_tail", str(cfg.kubectl.default_tail))
        table.add_row("transcript.capacity", str(cfg.transcript.capacity))
        table.add_row("transcript.learning_mode", str(cfg.transcript.learning_mode))
        table.add_row("storage.history", str(cfg.storage.history))
        table.add_row("storage.db_path", cfg.storage.db_path)
        table.add_row("logging.level", cfg.logging.level)
        table.add_row("logging.file", cfg.logging.file)

        console.print(table)
        return

    if value is None:
        console.print("[red]Usage: kubedesk config <key> <value>[/red]")
        raise typer.Exit(1)

    parts = key.split(".")
    if len(parts) != 2:
        console.print("[red]Key format: section.key (e.g., kubectl.timeout)[/red]")
        raise typer.Exit(1)

    section, attr = parts
    section_map = {
        "kubectl": cfg.kubectl,
        "transcript": cfg.transcript,
        "storage": cfg.storage,
        "logging": cfg.logging,
    }

    if section not in section_map:
        console.print(f"[red]Unknown section: {section}[/red]")
        raise typer.Exit(1)

    obj = section_map[section]
    if not hasattr(obj, attr):
        console.print(f"[red]Unknown key: {key}[/red]")
        raise typer.Exit(1)

    # Type coercion
    current = getattr(obj, attr)
    try:
        if isinstance(current, bool):
            typed_value = value.lower() in ("true", "1", "yes")
        elif isinstance(current, int):
            typed_value = int(value)
        else:
            typed_value = value
    except ValueError:
        console.print(f"[red]Invalid value type for {key}[/red]")
        raise typer.Exit(1)

    setattr(obj, attr, typed_value)
    save_config(cfg)
    console.print(f"[green]{key} = {typed_value}[/green]")


@app.command()
def version() -> None:
    """Show version information."""
    console.print(f"kubedesk v{__version__}")

    cfg = load_config()
    installed, version_info = check_kubectl_cli(cfg.kubectl.binary)
    if installed:
        console.print(f"kubectl: {version_info}", markup=False)
    else:
        console.print("kubectl: [yellow]not installed[/yellow]")

    console.print(f"Python: {sys.version.split()[0]}")
    console.print(f"Config: {CONFIG_FILE}")


if __name__ == "__main__":
    app()

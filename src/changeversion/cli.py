"""Command line interface for ChangeVersion."""

from __future__ import annotations

import difflib
from dataclasses import dataclass
from datetime import datetime
from pathlib import Path
from typing import Any

import click
import yaml
from rich.console import Console
from rich.markup import escape
from rich.syntax import Syntax

from changeversion import __version__
from changeversion.config import ConfigError, ConfigManager, CvConfig, resolve_with_precedence
from changeversion.history import Changelist, RecreatedFile, StorageError
from changeversion.logs import configure_logging
from changeversion.remote import RemoteError, RemoteStore, pull, push
from changeversion.repository import Repository, RepositoryContext
from changeversion.repository.results import Precondition

console = Console()
COMMIT_USAGE = "Usage: cv commit -m <message>"


@dataclass
class CliState:
    """Options shared by every command, captured from the group invocation."""

    root: Path
    config_path: Path | None
    verbose: bool
    quiet: bool


def _handle_cli_error(
    message: str,
    *,
    code: str,
    json_output: bool,
    original: Exception | None = None,
) -> None:
    """Emit a standardized error and terminate the command with a non-zero status.

    Args:
        message: Human-readable error message.
        code: Machine-readable error identifier.
        json_output: Indicates whether JSON mode is active.
        original: Original exception for chaining when not using JSON.

    Raises:
        SystemExit: When emitting JSON output to terminate the command.
        click.ClickException: For non-JSON flows to surface the error.
    """

    if json_output:
        console.print_json(data={"error": {"code": code, "message": message}})
        raise SystemExit(1)

    if isinstance(original, click.ClickException):
        raise original

    raise click.ClickException(message) from original


def _handle_failure(exc: Exception, *, json_output: bool = False) -> None:
    """Map a fatal exception onto a CLI error code."""
    if isinstance(exc, ConfigError):
        code = "config_error"
    elif isinstance(exc, StorageError):
        code = "storage_error"
    elif isinstance(exc, RemoteError):
        code = "remote_error"
    elif isinstance(exc, OSError):
        code = "filesystem_error"
    else:
        code = "internal_error"
    _handle_cli_error(str(exc), code=code, json_output=json_output, original=exc)


def _emit_message(message: Any, *, quiet: bool, mode: str = "detail") -> None:
    """Print ``message`` unless quiet mode suppresses it; errors always print."""
    if quiet and mode != "error":
        return
    console.print(message)


def _report_precondition(outcome: Precondition, *, json_output: bool = False) -> None:
    """Print a recoverable precondition failure; the command still exits with status 0."""
    if json_output:
        console.print_json(data={"precondition": outcome.model_dump(mode="json")})
        return
    console.print(f"[red]{escape(outcome.message)}[/red]")


def _format_time(moment: datetime) -> str:
    return moment.astimezone().strftime("%Y-%m-%d %H:%M:%S")


def _plural(count: int, word: str) -> str:
    return f"{count} {word}" if count == 1 else f"{count} {word}s"


def _load_config(state: CliState) -> CvConfig:
    return ConfigManager(config_path=state.config_path).load()


def _open_repository(state: CliState) -> tuple[Repository, CvConfig]:
    """Build the repository for the invocation root and configure logging."""
    config = _load_config(state)
    context = RepositoryContext.from_settings(state.root, config.repository)
    configure_logging(config.logging, log_dir=context.control_dir, verbose=state.verbose)
    return Repository(context), config


def _changes_payload(changes: Changelist) -> dict[str, Any]:
    return {
        "counts": changes.counts(),
        "changes": [change.model_dump(mode="json") for change in changes.ordered()],
    }


def _emit_changelist(changes: Changelist, *, show_times: bool, quiet: bool) -> None:
    """Render a changelist grouped as New, Updated, Moved, Deleted."""

    def stamp(moment: datetime) -> str:
        return f" [bright_black]{_format_time(moment)}[/bright_black]" if show_times else ""

    _emit_message(f"[yellow]# New: {len(changes.new)}[/yellow]", quiet=quiet)
    for entry in changes.new:
        suffix = " [yellow]\\[Recreated][/yellow]" if isinstance(entry, RecreatedFile) else ""
        _emit_message(
            f"[green]{escape(entry.path)}[/green]{stamp(entry.update_time)}{suffix}", quiet=quiet
        )

    _emit_message(f"[yellow]# Updated: {len(changes.updated)}[/yellow]", quiet=quiet)
    for entry in changes.updated:
        _emit_message(f"[cyan]{escape(entry.path)}[/cyan]{stamp(entry.update_time)}", quiet=quiet)

    _emit_message(f"[yellow]# Moved: {len(changes.moved)}[/yellow]", quiet=quiet)
    for entry in changes.moved:
        _emit_message(
            f"[blue]{escape(entry.old_path)} -> {escape(entry.new_path)}[/blue]"
            f"{stamp(entry.update_time)}",
            quiet=quiet,
        )

    _emit_message(f"[yellow]# Deleted: {len(changes.deleted)}[/yellow]", quiet=quiet)
    for entry in changes.deleted:
        _emit_message(f"[red]{escape(entry.path)}[/red]{stamp(entry.update_time)}", quiet=quiet)


class CvGroup(click.Group):
    """Click group that reports unknown commands without failing."""

    def resolve_command(
        self, ctx: click.Context, args: list[str]
    ) -> tuple[str | None, click.Command | None, list[str]]:
        name = args[0] if args else None
        if name and not name.startswith("-") and self.get_command(ctx, name) is None:
            console.print(f"[red]Unrecognized command: {escape(name)}[/red]")
            console.print("Run `cv --help` to list the available commands.")
            ctx.exit(0)
        return super().resolve_command(ctx, args)


@click.group(
    cls=CvGroup,
    invoke_without_command=True,
    context_settings={"help_option_names": ["-h", "--help"]},
)
@click.version_option(__version__, "-v", "--version", prog_name="cv")
@click.option(
    "-C",
    "--root",
    type=click.Path(exists=True, file_okay=False, path_type=Path),
    default=None,
    help="Repository root (defaults to the current directory).",
)
@click.option(
    "--config",
    "config_path",
    type=click.Path(dir_okay=False, path_type=Path),
    default=None,
    help="Configuration file to use instead of the default location.",
)
@click.option("--verbose", is_flag=True, help="Enable debug logging.")
@click.option("--quiet", is_flag=True, help="Suppress non-error output.")
@click.pass_context
def cli(
    ctx: click.Context,
    root: Path | None,
    config_path: Path | None,
    verbose: bool,
    quiet: bool,
) -> None:
    """ChangeVersion tracks file changes in a directory as an append-only commit log."""
    ctx.obj = CliState(
        root=(root or Path.cwd()).resolve(),
        config_path=config_path,
        verbose=verbose,
        quiet=quiet,
    )
    if ctx.invoked_subcommand is None:
        click.echo(ctx.get_help())


@cli.command()
@click.pass_obj
def init(state: CliState) -> None:
    """Initialize a new repository in the root directory."""
    try:
        repository, _ = _open_repository(state)
        outcome = repository.init()
    except Exception as exc:
        _handle_failure(exc)
        return

    if isinstance(outcome, Precondition):
        _report_precondition(outcome)
        return
    _emit_message(f"[green]Repo initialized at: {escape(str(outcome.root))}[/green]", quiet=state.quiet)


@cli.command()
@click.option("--json", "json_output", is_flag=True, help="Emit pending changes as JSON.")
@click.pass_obj
def status(state: CliState, json_output: bool) -> None:
    """Show uncommitted changes grouped by kind."""
    try:
        repository, config = _open_repository(state)
        outcome = repository.status()
    except Exception as exc:
        _handle_failure(exc, json_output=json_output)
        return

    if isinstance(outcome, Precondition):
        _report_precondition(outcome, json_output=json_output)
        return
    if json_output:
        console.print_json(data={"root": str(outcome.root), **_changes_payload(outcome.changes)})
        return
    quiet = state.quiet or config.cli.quiet_default
    _emit_changelist(outcome.changes, show_times=config.cli.show_timestamps, quiet=quiet)


@cli.command(name="list")
@click.pass_obj
def list_command(state: CliState) -> None:
    """List tracked files and any uncommitted changes."""
    try:
        repository, config = _open_repository(state)
        outcome = repository.list_files()
    except Exception as exc:
        _handle_failure(exc)
        return

    if isinstance(outcome, Precondition):
        _report_precondition(outcome)
        return
    quiet = state.quiet or config.cli.quiet_default
    _emit_message("[cyan]# Tracked files:[/cyan]", quiet=quiet)
    for path in outcome.tracked:
        _emit_message(escape(path), quiet=quiet)

    changes = outcome.changes
    if changes.is_empty:
        return
    _emit_message("", quiet=quiet)
    _emit_message("[yellow]# Uncommitted changes:[/yellow]", quiet=quiet)
    for entry in changes.new:
        _emit_message(f"[green]New:     {escape(entry.path)}[/green]", quiet=quiet)
    for entry in changes.updated:
        _emit_message(f"[cyan]Updated: {escape(entry.path)}[/cyan]", quiet=quiet)
    for entry in changes.moved:
        _emit_message(
            f"[blue]Moved:   {escape(entry.old_path)} -> {escape(entry.new_path)}[/blue]",
            quiet=quiet,
        )
    for entry in changes.deleted:
        _emit_message(f"[red]Deleted: {escape(entry.path)}[/red]", quiet=quiet)


@cli.command()
@click.option("-m", "--message", default=None, help="Commit message (required).")
@click.option(
    "--allow-empty",
    is_flag=True,
    help="Record the commit even when nothing changed, without asking.",
)
@click.pass_obj
def commit(state: CliState, message: str | None, allow_empty: bool) -> None:
    """Record the current changes as a new commit."""

    if message is None:
        console.print(f"[red]{escape(COMMIT_USAGE)}[/red]")
        return

    def confirm_empty() -> bool:
        if allow_empty:
            return True
        policy = config.commit.empty_commit
        if policy != "prompt":
            return policy == "allow"
        try:
            return click.confirm(
                "There is no changed file, are you sure you want to make an empty commit?",
                default=False,
            )
        except click.Abort:
            return False

    try:
        repository, config = _open_repository(state)
        outcome = repository.commit(message, confirm_empty=confirm_empty)
    except Exception as exc:
        _handle_failure(exc)
        return

    if isinstance(outcome, Precondition):
        _report_precondition(outcome)
        return
    _emit_message(
        f"[yellow]Saved {_plural(outcome.change_count, 'file')}.[/yellow]",
        quiet=state.quiet or config.cli.quiet_default,
    )


@cli.command()
@click.option("--json", "json_output", is_flag=True, help="Emit the commit history as JSON.")
@click.pass_obj
def log(state: CliState, json_output: bool) -> None:
    """List every commit with its index, time, and message."""
    try:
        repository, config = _open_repository(state)
        outcome = repository.log()
    except Exception as exc:
        _handle_failure(exc, json_output=json_output)
        return

    if isinstance(outcome, Precondition):
        _report_precondition(outcome, json_output=json_output)
        return
    if json_output:
        console.print_json(data=outcome.model_dump(mode="json"))
        return
    quiet = state.quiet or config.cli.quiet_default
    for entry in outcome.entries:
        _emit_message(
            f"{entry.index}. [green]{_format_time(entry.time)}[/green] {escape(entry.message)}",
            quiet=quiet,
        )
    _emit_message(f"[yellow]{_plural(len(outcome.entries), 'commit')}.[/yellow]", quiet=quiet)


@cli.command(name="push")
@click.argument("server_url")
@click.argument("api_key")
@click.pass_obj
def push_command(state: CliState, server_url: str, api_key: str) -> None:
    """Upload committed files and the commit log to a remote file store."""
    try:
        repository, config = _open_repository(state)
        with RemoteStore(
            server_url,
            api_key,
            header_name=config.remote.api_key_header,
            timeout=config.remote.timeout_seconds,
        ) as remote:
            outcome = push(repository, remote)
    except Exception as exc:
        _handle_failure(exc)
        return

    if isinstance(outcome, Precondition):
        _report_precondition(outcome)
        return
    quiet = state.quiet or config.cli.quiet_default
    _emit_message(
        f"[green]Pushed {_plural(len(outcome.uploaded), 'file')}, "
        f"removed {len(outcome.deleted)} remote.[/green]",
        quiet=quiet,
    )
    for path in outcome.skipped:
        _emit_message(f"[yellow]Skipped missing file: {escape(path)}[/yellow]", quiet=quiet)
    if outcome.pending_changes:
        _emit_message(
            f"[yellow]{_plural(outcome.pending_changes, 'uncommitted change')} not pushed.[/yellow]",
            quiet=quiet,
        )


@cli.command(name="pull")
@click.argument("server_url")
@click.argument("api_key")
@click.pass_obj
def pull_command(state: CliState, server_url: str, api_key: str) -> None:
    """Download the commit log and tracked files from a remote file store."""
    try:
        repository, config = _open_repository(state)
        with RemoteStore(
            server_url,
            api_key,
            header_name=config.remote.api_key_header,
            timeout=config.remote.timeout_seconds,
        ) as remote:
            outcome = pull(repository, remote)
    except Exception as exc:
        _handle_failure(exc)
        return

    if isinstance(outcome, Precondition):
        _report_precondition(outcome)
        return
    quiet = state.quiet or config.cli.quiet_default
    _emit_message(
        f"[green]Pulled {_plural(outcome.commits, 'commit')} and "
        f"{_plural(len(outcome.downloaded), 'file')}.[/green]",
        quiet=quiet,
    )
    for path in outcome.missing:
        _emit_message(f"[yellow]Missing on remote: {escape(path)}[/yellow]", quiet=quiet)


@cli.command(name="help")
@click.pass_context
def help_command(ctx: click.Context) -> None:
    """Show this help message."""
    parent = ctx.parent or ctx
    click.echo(parent.get_help())


@cli.command(name="version")
def version_command() -> None:
    """Show the installed version."""
    click.echo(f"cv, version {__version__}")


@cli.group()
def config() -> None:
    """Manage ChangeVersion configuration files and overrides."""


@config.command("view")
@click.option("--no-env", is_flag=True, help="Ignore environment overrides when displaying output.")
@click.pass_obj
def config_view(state: CliState, no_env: bool) -> None:
    """Display the effective configuration after applying precedence rules."""
    manager = ConfigManager(config_path=state.config_path)
    try:
        manager.ensure_exists()
        effective = manager.load(include_env=not no_env)
    except ConfigError as exc:
        raise click.ClickException(str(exc)) from exc

    yaml_text = yaml.safe_dump(effective.model_dump(mode="python"), sort_keys=False)
    console.print(Syntax(yaml_text, "yaml", word_wrap=True))


@config.command("set")
@click.argument("key")
@click.option("--value", required=True, help="Value to assign to KEY.")
@click.pass_obj
def config_set(state: CliState, key: str, value: str) -> None:
    """Persist a configuration value expressed as a dotted KEY."""
    manager = ConfigManager(config_path=state.config_path)
    manager.ensure_exists()

    before = manager.read_text().splitlines()
    segments = [segment.strip() for segment in key.split(".") if segment.strip()]
    if not segments:
        raise click.ClickException("KEY must specify a dotted path such as 'commit.empty_commit'.")

    try:
        parsed_value = yaml.safe_load(value)
    except yaml.YAMLError as exc:
        raise click.ClickException(f"Unable to parse value: {exc}") from exc

    try:
        file_data = manager.load_file_overrides()
        node = file_data
        for segment in segments[:-1]:
            existing = node.setdefault(segment, {})
            if not isinstance(existing, dict):
                raise ConfigError(
                    f"Cannot assign into '{segment}' because it is not a mapping in the config file."
                )
            node = existing
        node[segments[-1]] = parsed_value
        resolve_with_precedence(defaults=CvConfig(), file_overrides=file_data)
    except ConfigError as exc:
        raise click.ClickException(str(exc)) from exc

    manager.save(file_data)
    after = manager.read_text().splitlines()

    diff = list(
        difflib.unified_diff(
            before,
            after,
            fromfile="config.yaml (before)",
            tofile="config.yaml (after)",
            lineterm="",
        )
    )
    changed = [line for line in diff if not line.startswith(("---", "+++", "@@"))]
    if not any(line.startswith(("+", "-")) and "Last updated" not in line for line in changed):
        console.print("[yellow]No changes applied; value already up to date.[/yellow]")
        return

    console.print(Syntax("\n".join(diff), "diff", word_wrap=False))
    console.print(f"[green]Updated {'.'.join(segments)}.[/green]")


@config.command("edit")
@click.pass_obj
def config_edit(state: CliState) -> None:
    """Open the configuration file in an interactive editor session."""
    manager = ConfigManager(config_path=state.config_path)
    manager.ensure_exists()

    original = manager.read_text()
    edited = click.edit(original, extension=".yaml")

    if edited is None:
        console.print("[yellow]Edit cancelled; no changes applied.[/yellow]")
        return

    if edited == original:
        console.print("[yellow]No changes detected.[/yellow]")
        return

    try:
        parsed = yaml.safe_load(edited) or {}
    except yaml.YAMLError as exc:
        raise click.ClickException(f"Invalid YAML: {exc}") from exc

    if not isinstance(parsed, dict):
        raise click.ClickException("Configuration file must contain a top-level mapping.")

    try:
        resolve_with_precedence(defaults=CvConfig(), file_overrides=parsed)
    except ConfigError as exc:
        raise click.ClickException(str(exc)) from exc

    manager.save(parsed)
    console.print("[green]Configuration updated successfully.[/green]")


def main() -> None:
    """Invoke the Click CLI as the console script entry point."""
    cli()


if __name__ == "__main__":
    main()

"""readgate context-lock - freeze the working set once context is sufficient."""

import click

from readgate.cli.utils import echo_json, get_engine, handle_errors
from readgate.core.formatting import pluralize
from readgate.core.progress import report, status
from readgate.optimizer.reports import format_context_state


@click.group()
def context_lock_group() -> None:
    """Declare, inspect and release the context lock."""


@context_lock_group.command("lock")
@click.argument("reason")
@click.option("--file", "-f", "files", multiple=True, help="File already read")
@click.pass_context
@handle_errors
def lock_command(ctx: click.Context, reason: str, files: tuple[str, ...]) -> None:
    """Declare that the context gathered so far is sufficient."""
    doc = get_engine(ctx).context_lock.declare_sufficient_context(reason, files)
    status(
        f"Context locked ({pluralize(len(doc.locked_files), 'file')} allowed)",
        style="success",
    )


@context_lock_group.command("unlock")
@click.pass_context
@handle_errors
def unlock_command(ctx: click.Context) -> None:
    """Release the lock."""
    get_engine(ctx).context_lock.unlock()
    status("Context unlocked", style="success")


@context_lock_group.command("override")
@click.argument("file_path")
@click.option("--reason", "-r", required=True, help="Why the file is needed")
@click.pass_context
@handle_errors
def override_command(ctx: click.Context, file_path: str, reason: str) -> None:
    """Allow FILE_PATH despite the lock."""
    override = get_engine(ctx).context_lock.add_override(file_path, reason)
    status(f"Override added for {override.file_path}", style="success")


@context_lock_group.command("check")
@click.argument("file_path")
@click.pass_context
@handle_errors
def check_command(ctx: click.Context, file_path: str) -> None:
    """Check FILE_PATH against the lock without recording an attempt."""
    check, _ = get_engine(ctx).context_lock.check(file_path)
    verdict = "ALLOW" if check.allowed else "DENY"
    click.echo(f"{verdict} {file_path}: {check.reason}")


@context_lock_group.command("status")
@click.option("--json", "as_json", is_flag=True, help="Output as JSON")
@click.pass_context
@handle_errors
def status_command(ctx: click.Context, as_json: bool) -> None:
    """Show the lock state."""
    doc = get_engine(ctx).context_lock.state()
    if as_json:
        echo_json(doc.model_dump(mode="json", by_alias=True))
        return
    report(format_context_state(doc))

"""readgate hypothesis - gate reads on explicit debugging hypotheses."""

import click

from readgate.cli.utils import echo_json, get_engine, handle_errors
from readgate.core.formatting import pluralize
from readgate.core.progress import report, status
from readgate.optimizer.reports import format_hypothesis_report


@click.group()
def hypothesis_group() -> None:
    """Manage the hypothesis session."""


@hypothesis_group.command("start")
@click.argument("task")
@click.pass_context
@handle_errors
def start_command(ctx: click.Context, task: str) -> None:
    """Start a session for TASK, archiving the previous one."""
    doc = get_engine(ctx).hypotheses.start(task)
    status(f"Hypothesis session {doc.session_id} started", style="success")


@hypothesis_group.command("add")
@click.argument("description")
@click.option("--file", "-f", "files", multiple=True, required=True, help="Target file")
@click.option("--symbol", "-s", "symbols", multiple=True, help="Target symbol")
@click.option("--priority", "-p", type=int, default=1, show_default=True)
@click.pass_context
@handle_errors
def add_command(
    ctx: click.Context,
    description: str,
    files: tuple[str, ...],
    symbols: tuple[str, ...],
    priority: int,
) -> None:
    """Add a hypothesis naming the files that would confirm it."""
    hypothesis = get_engine(ctx).hypotheses.add_hypothesis(
        description, files, symbols, priority
    )
    status(
        f"Added {hypothesis.id} ({pluralize(len(hypothesis.target_files), 'target')})",
        style="success",
    )
    click.echo(hypothesis.id)


def _resolve(ctx: click.Context, hypothesis_id: str, validated: bool, evidence: str | None) -> None:
    hypothesis = get_engine(ctx).hypotheses.validate_hypothesis(hypothesis_id, validated, evidence)
    status(f"Hypothesis {hypothesis.id} {hypothesis.status}", style="success")


@hypothesis_group.command("validate")
@click.argument("hypothesis_id")
@click.option("--evidence", "-e", default=None, help="What confirmed it")
@click.pass_context
@handle_errors
def validate_command(ctx: click.Context, hypothesis_id: str, evidence: str | None) -> None:
    """Mark a hypothesis as confirmed."""
    _resolve(ctx, hypothesis_id, True, evidence)


@hypothesis_group.command("reject")
@click.argument("hypothesis_id")
@click.option("--evidence", "-e", default=None, help="What ruled it out")
@click.pass_context
@handle_errors
def reject_command(ctx: click.Context, hypothesis_id: str, evidence: str | None) -> None:
    """Mark a hypothesis as ruled out."""
    _resolve(ctx, hypothesis_id, False, evidence)


@hypothesis_group.command("check")
@click.argument("file_path")
@click.pass_context
@handle_errors
def check_command(ctx: click.Context, file_path: str) -> None:
    """Check whether FILE_PATH is covered by the session."""
    check = get_engine(ctx).hypotheses.is_read_allowed(file_path)
    verdict = "ALLOW" if check.allowed else "DENY"
    click.echo(f"{verdict} {file_path}: {check.reason}")


@hypothesis_group.command("status")
@click.option("--json", "as_json", is_flag=True, help="Output as JSON")
@click.pass_context
@handle_errors
def status_command(ctx: click.Context, as_json: bool) -> None:
    """Show hypotheses and read attempts."""
    tracker = get_engine(ctx).hypotheses
    stats = tracker.stats()
    if as_json:
        echo_json(stats.to_dict())
        return
    doc = tracker.load()
    if doc is not None:
        report(format_hypothesis_report(doc, stats))


@hypothesis_group.command("archive")
@click.pass_context
@handle_errors
def archive_command(ctx: click.Context) -> None:
    """Archive a fully resolved session."""
    doc = get_engine(ctx).hypotheses.archive()
    status(f"Session {doc.session_id} archived", style="success")

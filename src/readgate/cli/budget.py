"""readgate budget - token budget for the current session."""

import click

from readgate.cli.utils import echo_json, get_engine, handle_errors
from readgate.core.errors import StateError
from readgate.core.formatting import format_tokens
from readgate.core.progress import report, status
from readgate.optimizer.models import READ_LEVELS
from readgate.optimizer.reports import format_budget_report


@click.group()
def budget_group() -> None:
    """Track token consumption against a session budget."""


@budget_group.command("init")
@click.option("--limit", type=int, default=None, help="Token budget (default from config)")
@click.pass_context
@handle_errors
def init_command(ctx: click.Context, limit: int | None) -> None:
    """Start a new budget session."""
    doc = get_engine(ctx).budget.init(limit)
    status(
        f"Budget session {doc.session_id} started with {format_tokens(doc.total_budget)} tokens",
        style="success",
    )


@budget_group.command("reset")
@click.option("--limit", type=int, default=None, help="Token budget (default from config)")
@click.pass_context
@handle_errors
def reset_command(ctx: click.Context, limit: int | None) -> None:
    """Discard the current session and start over."""
    doc = get_engine(ctx).budget.reset(limit)
    status(f"Budget reset ({format_tokens(doc.total_budget)} tokens)", style="success")


@budget_group.command("increase")
@click.argument("amount", type=int)
@click.option("--reason", "-r", required=True, help="Why more tokens are needed")
@click.pass_context
@handle_errors
def increase_command(ctx: click.Context, amount: int, reason: str) -> None:
    """Raise the budget by AMOUNT tokens with a justification."""
    ledger = get_engine(ctx).budget
    ledger.request_increase(reason, amount)
    stats = ledger.stats()
    status(
        f"Budget increased by {format_tokens(amount)} to {format_tokens(stats.budget)} tokens",
        style="success",
    )


@budget_group.command("record")
@click.argument("file_path")
@click.option("--lines", type=int, default=None, help="Lines actually read")
@click.option(
    "--level", type=click.Choice(READ_LEVELS), default="full", show_default=True
)
@click.option("--reason", default="", help="Why the file was read")
@click.pass_context
@handle_errors
def record_command(
    ctx: click.Context, file_path: str, lines: int | None, level: str, reason: str
) -> None:
    """Charge a read of FILE_PATH to the budget."""
    result = get_engine(ctx).record_read(file_path, lines, level, reason)  # type: ignore[arg-type]
    status(
        f"Recorded {format_tokens(result.entry.estimated_tokens)} tokens for {result.entry.file_path}",
        style="success" if result.success else "error",
    )
    if result.alert is not None:
        status(result.alert.message, style="warning")


@budget_group.command("status")
@click.option("--json", "as_json", is_flag=True, help="Output as JSON")
@click.pass_context
@handle_errors
def status_command(ctx: click.Context, as_json: bool) -> None:
    """Show budget consumption."""
    ledger = get_engine(ctx).budget
    doc = ledger.load()
    if doc is None:
        raise StateError.missing("budget", "Run 'readgate budget init' first")
    stats = ledger.stats()
    if as_json:
        echo_json(stats.to_dict())
        return
    report(format_budget_report(doc, stats))

"""readgate optimizer - the combined read admission decision."""

import click

from readgate.cli.utils import echo_json, get_engine, handle_errors
from readgate.core.progress import report
from readgate.optimizer.reports import format_decision, format_optimizer_status


@click.command()
@click.option("--file", "-f", "file_path", default=None, help="File proposed for reading")
@click.option("--strict", is_flag=True, help="Exit with status 1 when the read is denied")
@click.option("--json", "as_json", is_flag=True, help="Output as JSON")
@click.pass_context
@handle_errors
def optimizer_command(
    ctx: click.Context, file_path: str | None, strict: bool, as_json: bool
) -> None:
    """Decide whether a file should be read, or show the optimizer status."""
    engine = get_engine(ctx)
    if file_path is None:
        state = engine.status()
        if as_json:
            echo_json(state.to_dict())
        else:
            report(format_optimizer_status(state))
        return

    decision = engine.should_allow_read(file_path)
    if as_json:
        echo_json(decision.to_dict())
    else:
        report(format_decision(decision, file_path))
    if strict and not decision.allowed:
        ctx.exit(1)

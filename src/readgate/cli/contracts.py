"""readgate contracts - signature snapshots for change detection."""

import click

from readgate.cli.utils import echo_json, get_engine, handle_errors
from readgate.collaborators.graph import load_graph
from readgate.core.formatting import pluralize
from readgate.core.progress import report, status
from readgate.optimizer.contracts import compare_contracts
from readgate.optimizer.reports import format_contract_diff


@click.group()
def contracts_group() -> None:
    """Capture and compare file contracts."""


@contracts_group.command("snapshot")
@click.argument("files", nargs=-1, required=True)
@click.pass_context
@handle_errors
def snapshot_command(ctx: click.Context, files: tuple[str, ...]) -> None:
    """Record the current contract of each file."""
    results = get_engine(ctx).contracts.update_snapshots(files)
    changed = sum(1 for _, diff in results if diff.has_changes)
    status(
        f"Captured {pluralize(len(results), 'contract')} ({changed} changed)",
        style="success",
    )


@contracts_group.command("check")
@click.argument("files", nargs=-1, required=True)
@click.option("--json", "as_json", is_flag=True, help="Output as JSON")
@click.pass_context
@handle_errors
def check_command(ctx: click.Context, files: tuple[str, ...], as_json: bool) -> None:
    """Compare files against the snapshot without updating it."""
    engine = get_engine(ctx)
    store = engine.contracts
    graph = load_graph(engine.state_dir)
    results = []
    for file_path in files:
        current = store.capture_file_contract(file_path)
        diff = compare_contracts(store.get(file_path), current)
        affected = store.affected_by_change(file_path, graph) if diff.has_changes else []
        results.append((current.file_path, diff, affected))

    if as_json:
        echo_json(
            [
                {"filePath": path, **diff.to_dict(), "affected": affected}
                for path, diff, affected in results
            ]
        )
        return
    for path, diff, affected in results:
        report(format_contract_diff(diff, path))
        if affected:
            report(f"  Affected importers: {', '.join(affected)}")


@contracts_group.command("status")
@click.pass_context
@handle_errors
def status_command(ctx: click.Context) -> None:
    """List tracked contracts."""
    doc = get_engine(ctx).contracts.snapshot()
    click.echo(f"Tracked contracts: {len(doc.files)}")
    for path, contract in sorted(doc.files.items()):
        count = pluralize(len(contract.exported_signatures), "signature")
        click.echo(f"  {contract.hash[:8]} {count:>14} {path}")

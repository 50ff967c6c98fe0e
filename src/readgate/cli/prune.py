"""readgate prune-path - narrow the candidate files to a stack trace."""

import sys
from pathlib import Path

import click

from readgate.cli.utils import echo_json, get_engine, handle_errors
from readgate.collaborators.graph import load_graph
from readgate.core.progress import report
from readgate.optimizer.reports import format_runtime_path
from readgate.optimizer.runtime_paths import analyze_runtime_path


@click.command()
@click.option("--stack", "-s", default=None, help="Stack trace text")
@click.option(
    "--file",
    "-f",
    "trace_file",
    type=click.Path(exists=True, dir_okay=False, path_type=Path),
    default=None,
    help="File containing a stack trace",
)
@click.option(
    "--candidate",
    "-F",
    "candidates",
    multiple=True,
    help="Candidate file (default: dependency graph files)",
)
@click.option("--json", "as_json", is_flag=True, help="Output as JSON")
@click.pass_context
@handle_errors
def prune_path_command(
    ctx: click.Context,
    stack: str | None,
    trace_file: Path | None,
    candidates: tuple[str, ...],
    as_json: bool,
) -> None:
    """Split candidate files into relevant and pruned using a stack trace.

    The trace is taken from --stack, --file or standard input.
    """
    if stack is not None:
        trace = stack
    elif trace_file is not None:
        trace = trace_file.read_text(encoding="utf-8", errors="replace")
    else:
        trace = sys.stdin.read()
    if not trace.strip():
        raise click.UsageError("No stack trace given (use --stack, --file or stdin)")

    engine = get_engine(ctx)
    graph = load_graph(engine.state_dir)
    all_files = list(candidates) or (graph.files() if graph is not None else [])
    runtime = analyze_runtime_path(trace, all_files, graph, engine.root)

    if as_json:
        echo_json(
            {
                "executedFiles": runtime.executed_files,
                "executedFunctions": runtime.executed_functions,
                "relevantFiles": runtime.relevant_files,
                "prunedFiles": runtime.pruned_files,
                "callChain": runtime.call_chain,
                "savings": runtime.savings,
            }
        )
        return
    report(format_runtime_path(runtime))

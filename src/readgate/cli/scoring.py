"""readgate locality / importance / risk - per-file relevance signals."""

import click

from readgate.cli.utils import echo_json, get_engine, handle_errors
from readgate.collaborators.error_db import load_error_db
from readgate.collaborators.graph import load_graph
from readgate.core.errors import StateError
from readgate.core.progress import report, spinner, status
from readgate.optimizer.engine import DecisionEngine
from readgate.optimizer.locality import (
    calculate_locality_score,
    filter_by_threshold,
    rank_files_by_locality,
)
from readgate.optimizer.models import RISK_LEVELS
from readgate.optimizer.reports import (
    format_importance_report,
    format_locality_report,
    format_risk_detail,
    format_risk_report,
)
from readgate.optimizer.risk import (
    assess_diff_risk,
    assess_file_risk,
    level_at_least,
)


def _candidate_files(engine: DecisionEngine) -> list[str]:
    """Graph files, else changed files, else everything in the index."""
    graph = load_graph(engine.state_dir)
    if graph is not None and graph.nodes:
        return graph.files()
    return engine.history.changed_files() or engine.history.tracked_files()


# =============================================================================
# Locality
# =============================================================================


@click.command()
@click.argument("files", nargs=-1)
@click.option("--top-k", "-k", type=int, default=10, show_default=True)
@click.option("--threshold", type=int, default=None, help="Minimum score to list")
@click.option("--json", "as_json", is_flag=True, help="Output as JSON")
@click.pass_context
@handle_errors
def locality_command(
    ctx: click.Context,
    files: tuple[str, ...],
    top_k: int,
    threshold: int | None,
    as_json: bool,
) -> None:
    """Score files by recency, diff proximity, error history and centrality."""
    engine = get_engine(ctx)
    if threshold is None:
        threshold = engine.config.optimizer.locality_threshold
    graph = load_graph(engine.state_dir)
    error_db = load_error_db(engine.state_dir)
    changed = engine.history.changed_files()

    if len(files) == 1:
        score = calculate_locality_score(
            files[0], changed, graph, error_db, repo_root=engine.root
        )
        if as_json:
            echo_json(score.to_dict())
            return
        f = score.factors
        report(
            "\n".join(
                [
                    f"Locality: {score.file_path}",
                    f"  Total score: {score.score}/100",
                    f"  Recency:        {f.recency}/25",
                    f"  Diff proximity: {f.diff_proximity}/25",
                    f"  Error history:  {f.error_history}/25",
                    f"  Centrality:     {f.centrality}/25",
                ]
            )
        )
        return

    candidates = list(files) or _candidate_files(engine)
    ranked = rank_files_by_locality(candidates, changed, graph, error_db, repo_root=engine.root)
    shown = filter_by_threshold(ranked, threshold)[:top_k]
    if as_json:
        echo_json([s.to_dict() for s in shown])
        return
    report(format_locality_report(shown, threshold))


# =============================================================================
# Importance
# =============================================================================


@click.group()
def importance_group() -> None:
    """Task-independent file importance index."""


@importance_group.command("build")
@click.option("--top-k", "-k", type=int, default=None, help="Top-K size (default from config)")
@click.pass_context
@handle_errors
def build_command(ctx: click.Context, top_k: int | None) -> None:
    """Rank every file in the dependency graph."""
    engine = get_engine(ctx)
    k = top_k if top_k is not None else engine.config.optimizer.top_k
    with spinner("Building importance index"):
        doc = engine.importance.build_importance_index(k)
    if not doc.files:
        status("No files indexed (is .rag/deps.json present?)", style="warning")
        return
    status(f"Indexed {len(doc.files)} files (top-{doc.top_k})", style="success")


@importance_group.command("check")
@click.argument("file_path")
@click.option("--top-k", "-k", type=int, default=None)
@click.pass_context
@handle_errors
def check_command(ctx: click.Context, file_path: str, top_k: int | None) -> None:
    """Show the rank of FILE_PATH and whether it is in the top-K."""
    indexer = get_engine(ctx).importance
    if indexer.load() is None:
        raise StateError.missing("importance index", "Run 'readgate importance build' first")
    found = indexer.entry(file_path)
    if found is None:
        click.echo(f"{file_path}: not indexed")
        return
    rank, entry = found
    in_top = "yes" if indexer.is_in_top_k(file_path, top_k) else "no"
    click.echo(f"{entry.file_path}: rank {rank}, importance {entry.importance}, top-K: {in_top}")


@importance_group.command("show")
@click.option("--limit", "-n", type=int, default=15, show_default=True)
@click.option("--json", "as_json", is_flag=True, help="Output as JSON")
@click.pass_context
@handle_errors
def show_command(ctx: click.Context, limit: int, as_json: bool) -> None:
    """Show the highest-ranked files."""
    doc = get_engine(ctx).importance.load()
    if doc is None:
        raise StateError.missing("importance index", "Run 'readgate importance build' first")
    if as_json:
        echo_json([e.model_dump(mode="json", by_alias=True) for e in doc.files[:limit]])
        return
    report(format_importance_report(doc, limit))


# =============================================================================
# Risk
# =============================================================================


@click.command()
@click.argument("files", nargs=-1)
@click.option("--diff", "use_diff", is_flag=True, help="Assess files changed since HEAD")
@click.option(
    "--min-level",
    type=click.Choice(RISK_LEVELS),
    default="minimal",
    show_default=True,
    help="Only list files at or above this level",
)
@click.option("--json", "as_json", is_flag=True, help="Output as JSON")
@click.pass_context
@handle_errors
def risk_command(
    ctx: click.Context,
    files: tuple[str, ...],
    use_diff: bool,
    min_level: str,
    as_json: bool,
) -> None:
    """Assess files for security, performance and data-handling risk."""
    engine = get_engine(ctx)
    rules = engine.risk_rules
    excerpt = engine.config.risk.excerpt_chars
    if use_diff:
        assessments = assess_diff_risk(engine.root, rules, engine.history)
    else:
        candidates = list(files) or _candidate_files(engine)
        assessments = [assess_file_risk(f, rules, engine.root, excerpt) for f in candidates]
    assessments = [a for a in assessments if level_at_least(a.risk_level, min_level)]  # type: ignore[arg-type]

    if as_json:
        echo_json([a.to_dict() for a in assessments])
        return
    if len(files) == 1 and len(assessments) == 1:
        report(format_risk_detail(assessments[0]))
        return
    report(format_risk_report(assessments))

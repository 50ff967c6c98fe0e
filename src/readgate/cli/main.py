"""readgate CLI - read admission control for coding agents."""

from pathlib import Path

import click

from readgate.cli.budget import budget_group
from readgate.cli.context_lock import context_lock_group
from readgate.cli.contracts import contracts_group
from readgate.cli.hypothesis import hypothesis_group
from readgate.cli.optimizer import optimizer_command
from readgate.cli.prune import prune_path_command
from readgate.cli.scoring import importance_group, locality_command, risk_command
from readgate.cli.utils import find_repo_root, get_config
from readgate.core.errors import ConfigError
from readgate.core.logging import configure_logging, set_request_id


@click.group()
@click.version_option(version="0.1.0", prog_name="readgate")
@click.option("-v", "--verbose", is_flag=True, help="Enable debug logging")
@click.option(
    "-C",
    "--root",
    type=click.Path(exists=True, file_okay=False, path_type=Path),
    default=None,
    help="Repository root (default: discovered from the current directory)",
)
@click.pass_context
def cli(ctx: click.Context, verbose: bool, root: Path | None) -> None:
    """readgate - Decide which files are worth reading."""
    ctx.ensure_object(dict)
    ctx.obj["verbose"] = verbose
    ctx.obj["root"] = root.resolve() if root is not None else find_repo_root()
    set_request_id()
    try:
        logging_config = get_config(ctx).logging
    except ConfigError as e:
        raise click.ClickException(str(e)) from e
    if verbose:
        logging_config = logging_config.model_copy(update={"level": "DEBUG"})
    configure_logging(config=logging_config)


cli.add_command(budget_group, name="budget")
cli.add_command(hypothesis_group, name="hypothesis")
cli.add_command(context_lock_group, name="context-lock")
cli.add_command(contracts_group, name="contracts")
cli.add_command(locality_command, name="locality")
cli.add_command(importance_group, name="importance")
cli.add_command(risk_command, name="risk")
cli.add_command(prune_path_command, name="prune-path")
cli.add_command(optimizer_command, name="optimizer")


if __name__ == "__main__":
    cli()

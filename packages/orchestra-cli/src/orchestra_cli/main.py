from __future__ import annotations

from pathlib import Path

import typer
from orchestra_core import __version__
from orchestra_core.config import OrchestraConfig
from orchestra_core.errors import ConfigError
from orchestra_core.logging import setup_logging
from rich.console import Console
from rich.markup import escape

from orchestra_cli.commands.agent import agent_app
from orchestra_cli.commands.config import config_command
from orchestra_cli.commands.workflow import workflow_app
from orchestra_cli.state import CliState

app = typer.Typer(
    name="orchestra",
    help="Orchestra: compile and resolve agent workflows",
    no_args_is_help=True,
)

app.add_typer(agent_app, name="agent", help="Manage built-in, defined and temp agents")
app.add_typer(workflow_app, name="workflow", help="Compile and expand workflow files")
app.command("config")(config_command)


@app.callback()
def _root(
    ctx: typer.Context,
    home: Path | None = typer.Option(
        None,
        "--home",
        help="Orchestra home directory (default: ~/.orchestra)",
    ),
    log_level: str | None = typer.Option(
        None, "--log-level", help="Logging level (overrides config)"
    ),
    json_logs: bool = typer.Option(
        False, "--json-logs", help="Emit logs as JSON lines"
    ),
) -> None:
    """Load configuration and set up logging for every sub-command."""
    try:
        config = OrchestraConfig.load(home=home)
    except ConfigError as exc:
        Console(stderr=True).print(f"[red]{escape(str(exc))}[/red]")
        raise typer.Exit(1) from None

    setup_logging(
        level=log_level or config.logging.level,
        json_output=json_logs or config.logging.json,
    )
    ctx.obj = CliState(config=config)


@app.command()
def version() -> None:
    """Show the Orchestra version."""
    Console().print(f"orchestra {__version__}")


def main() -> None:
    app()


if __name__ == "__main__":
    main()

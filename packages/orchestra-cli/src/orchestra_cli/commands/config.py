from __future__ import annotations

import typer
from orchestra_agents import builtin_agents
from rich.console import Console
from rich.markup import escape
from rich.table import Table

from orchestra_cli.state import get_config

console = Console()


def config_command(ctx: typer.Context) -> None:
    """Show the effective configuration and resolved agent paths."""
    config = get_config(ctx)
    paths = config.paths

    table = Table(show_header=True, header_style="bold cyan")
    table.add_column("Setting", style="bold", no_wrap=True)
    table.add_column("Value")

    rows = [
        ("paths.home", str(paths.home_path)),
        ("paths.agents_dir", str(paths.agents_path)),
        ("paths.temp_agents_dir", str(paths.temp_agents_path)),
        ("paths.registry_file", str(paths.registry_path)),
        ("agents.builtins", ", ".join(builtin_agents(config.agents))),
        ("macros.default_model", config.macros.default_model),
        ("logging.level", config.logging.level),
        ("logging.json", str(config.logging.json).lower()),
    ]
    for key, value in rows:
        table.add_row(key, escape(value))

    console.print(table)

    global_path = paths.home_path / "config.toml"
    if not global_path.exists():
        console.print(
            f"[dim]No global config at {escape(str(global_path))};"
            " using defaults.[/dim]"
        )

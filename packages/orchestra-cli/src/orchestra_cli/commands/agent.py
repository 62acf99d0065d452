"""Agent management commands: list, resolve, show, promote, delete."""
from __future__ import annotations

import typer
from orchestra_agents import (
    AgentResolver,
    AgentSource,
    builtin_agents,
    extract_description,
    parse_agent_md,
)
from orchestra_core.errors import OrchestraError
from rich.console import Console
from rich.markup import escape
from rich.panel import Panel
from rich.syntax import Syntax
from rich.table import Table

from orchestra_cli.state import build_store, get_config

console = Console()

agent_app = typer.Typer(
    no_args_is_help=True,
)

_SOURCE_STYLES = {
    AgentSource.BUILTIN: "cyan",
    AgentSource.DEFINED: "green",
    AgentSource.TEMPORARY: "yellow",
}


def _fail(message: str) -> typer.Exit:
    console.print(f"[red]{escape(message)}[/red]")
    return typer.Exit(1)


@agent_app.command("list")
def agent_list(ctx: typer.Context) -> None:
    """List built-in, defined and temporary agents."""
    config = get_config(ctx)
    try:
        store = build_store(ctx)
        registry = store.load()
        temporary = store.list_temporary()
    except OrchestraError as exc:
        raise _fail(str(exc)) from None

    table = Table(
        title="Agents",
        show_header=True,
        header_style="bold cyan",
    )
    table.add_column("Name", style="bold")
    table.add_column("Source", justify="center")
    table.add_column("Description")
    table.add_column("Uses", justify="right")

    for name in builtin_agents(config.agents):
        table.add_row(name, "[cyan]builtin[/cyan]", "-", "-")

    for name, entry in sorted(registry.items()):
        table.add_row(
            name,
            "[green]defined[/green]",
            escape(entry.description) or "-",
            str(entry.usage_count),
        )

    for name in temporary:
        try:
            text = store.temporary_path(name).read_text(encoding="utf-8")
        except (OSError, UnicodeDecodeError):
            description = "[dim](unreadable)[/dim]"
        else:
            description = escape(extract_description(text)) or "-"
        table.add_row(name, "[yellow]temp[/yellow]", description, "-")

    console.print(table)
    console.print(
        f"\n[dim]{len(registry)} defined, {len(temporary)} temporary agent(s).[/dim]"
    )


@agent_app.command("resolve")
def agent_resolve(
    ctx: typer.Context,
    name: str = typer.Argument(..., help="Agent name to resolve"),
) -> None:
    """Show which tier owns an agent name."""
    config = get_config(ctx)
    try:
        descriptor = AgentResolver.from_config(config, build_store(ctx)).resolve(name)
    except OrchestraError as exc:
        raise _fail(str(exc)) from None

    style = _SOURCE_STYLES[descriptor.source]
    location = str(descriptor.path) if descriptor.path is not None else "(in-process)"
    console.print(
        f"[bold]{escape(name)}[/bold] -> "
        f"[{style}]{descriptor.source.value}[/{style}] {escape(location)}"
    )


@agent_app.command("show")
def agent_show(
    ctx: typer.Context,
    name: str = typer.Argument(..., help="Name of the agent to inspect"),
) -> None:
    """Show an agent's definition metadata and instructions."""
    config = get_config(ctx)
    try:
        store = build_store(ctx)
        descriptor = AgentResolver.from_config(config, store).resolve(name)
        if descriptor.path is None:
            console.print(
                f"[bold]{escape(name)}[/bold] is a built-in agent "
                "(no definition file)."
            )
            return
        definition = parse_agent_md(descriptor.path)
        entry = store.get(name) if descriptor.source is AgentSource.DEFINED else None
    except OrchestraError as exc:
        raise _fail(str(exc)) from None

    meta_lines = [
        f"[bold]Name:[/bold]          {escape(definition.name)}",
        f"[bold]Source:[/bold]        {descriptor.source.value}",
        f"[bold]Description:[/bold]   {escape(definition.description) or '-'}",
    ]
    if definition.model:
        meta_lines.append(f"[bold]Model:[/bold]         {escape(definition.model)}")
    if definition.tools:
        meta_lines.append(
            f"[bold]Tools:[/bold]         {escape(', '.join(definition.tools))}"
        )
    if entry is not None:
        meta_lines.append(f"[bold]Created:[/bold]       {entry.created}")
        meta_lines.append(f"[bold]Usage count:[/bold]   {entry.usage_count}")
    meta_lines.append(f"[bold]File:[/bold]          {escape(str(descriptor.path))}")

    console.print(Panel(
        "\n".join(meta_lines),
        title=f"Agent: {escape(name)}",
        border_style=_SOURCE_STYLES[descriptor.source],
    ))

    if definition.instructions:
        preview = definition.instructions
        if len(preview) > 500:
            preview = preview[:500] + "\n\n... (truncated)"
        console.print()
        console.print(Panel(
            Syntax(preview, "markdown", theme="monokai", word_wrap=True),
            title="Instructions (preview)",
            border_style="dim",
        ))
    else:
        console.print("\n[dim]No instructions body defined.[/dim]")


@agent_app.command("promote")
def agent_promote(
    ctx: typer.Context,
    name: str = typer.Argument(..., help="Temporary agent to promote"),
    new_name: str | None = typer.Option(
        None, "--as", help="Register the agent under a different name"
    ),
) -> None:
    """Promote a temporary agent to a defined agent."""
    try:
        promoted = build_store(ctx).promote(name, new_name)
    except (OrchestraError, ValueError) as exc:
        raise _fail(str(exc)) from None

    target = new_name or name
    if not promoted:
        raise _fail(
            f"Could not promote '{name}': temp agent not found "
            f"or '{target}' is already defined."
        )
    console.print(
        f"[green]Promoted[/green] {escape(name)} -> defined agent "
        f"[bold]{escape(target)}[/bold]"
    )


@agent_app.command("delete")
def agent_delete(
    ctx: typer.Context,
    name: str = typer.Argument(..., help="Temporary agent to delete"),
) -> None:
    """Delete a temporary agent."""
    try:
        deleted = build_store(ctx).delete_temporary(name)
    except OrchestraError as exc:
        raise _fail(str(exc)) from None

    if not deleted:
        raise _fail(f"Temp agent not found: {name}")
    console.print(f"[green]Deleted[/green] temp agent {escape(name)}")

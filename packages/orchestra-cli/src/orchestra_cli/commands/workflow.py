"""Workflow commands: check (compile) and expand (macro phase only)."""
from __future__ import annotations

from pathlib import Path

import typer
from orchestra_core.errors import OrchestraError
from orchestra_workflow import WorkflowCompiler, expand
from rich.console import Console
from rich.markup import escape
from rich.table import Table

from orchestra_cli.state import build_store, get_config

console = Console()

workflow_app = typer.Typer(
    no_args_is_help=True,
)


def _read_source(path: Path) -> str:
    if not path.is_file():
        console.print(f"[red]Workflow file not found:[/red] {escape(str(path))}")
        raise typer.Exit(1)
    return path.read_text(encoding="utf-8")


@workflow_app.command("check")
def workflow_check(
    ctx: typer.Context,
    path: Path = typer.Argument(..., help="Workflow source file"),
) -> None:
    """Compile a workflow and show its resolved invocations."""
    source = _read_source(path)
    config = get_config(ctx)
    try:
        workflow = WorkflowCompiler.from_config(config, build_store(ctx)).compile(source)
    except OrchestraError as exc:
        console.print(f"[red]{type(exc).__name__}:[/red] {escape(str(exc))}")
        raise typer.Exit(1) from None

    table = Table(
        title=f"Workflow: {escape(path.name)}",
        show_header=True,
        header_style="bold cyan",
    )
    table.add_column("Line", justify="right")
    table.add_column("Agent", style="bold")
    table.add_column("Source", justify="center")
    table.add_column("Uses")
    table.add_column("Captures")
    table.add_column("Macro")

    for node in workflow.nodes:
        table.add_row(
            str(node.line_no),
            escape(node.agent_name),
            node.source.value,
            ", ".join(node.uses_variables) or "-",
            node.output_variable or "-",
            f"${node.macro_name} ({node.model})" if node.macro_name else "-",
        )

    console.print(table)
    console.print(
        f"\n[green]OK[/green] {len(workflow)} invocation(s), "
        f"{len(workflow.outputs)} capture(s)."
    )


@workflow_app.command("expand")
def workflow_expand(
    ctx: typer.Context,
    path: Path = typer.Argument(..., help="Workflow source file"),
) -> None:
    """Print the workflow with macro definitions removed and calls expanded."""
    source = _read_source(path)
    config = get_config(ctx)
    try:
        expanded = expand(source, default_model=config.macros.default_model)
    except OrchestraError as exc:
        console.print(f"[red]{type(exc).__name__}:[/red] {escape(str(exc))}")
        raise typer.Exit(1) from None

    console.print(expanded.text, markup=False, highlight=False, soft_wrap=True)

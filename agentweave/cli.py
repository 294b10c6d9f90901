#!/usr/bin/env python3
"""Agent orchestration CLI.

Command-line interface for inspecting agent catalogs and running requests
through a planner-driven supervisor.
"""

import asyncio
import json
from pathlib import Path

import typer
from rich.console import Console
from rich.panel import Panel
from rich.table import Table

from .catalog import load_agent_catalog, read_agent_catalog
from .config import load_settings, validate_configuration
from .core.state import ExecutionStore
from .logging_config import setup_logging
from .models import create_chat_model
from .supervisor import Supervisor


app = typer.Typer(help="Agent Orchestration CLI")
console = Console()


@app.command()
def agents(
    catalog_file: Path = typer.Argument(..., help="YAML agent catalog"),
):
    """List the agents declared in a catalog file."""
    try:
        catalog = read_agent_catalog(catalog_file)
    except Exception as e:
        console.print(f"[bold red]Error reading catalog: {e}[/bold red]")
        raise typer.Exit(1) from e

    table = Table(title="Agents", show_header=True, header_style="bold magenta")
    table.add_column("Name", style="cyan")
    table.add_column("Description", style="white")
    table.add_column("Output", style="yellow")

    for definition in catalog.agents:
        table.add_row(
            definition.name, definition.description, definition.output_name or "-"
        )

    console.print(table)


@app.command()
def supervise(
    catalog_file: Path = typer.Argument(..., help="YAML agent catalog"),
    request: str = typer.Argument(..., help="Request to address"),
    max_invocations: int | None = typer.Option(
        None, "--max-invocations", "-n", help="Maximum agent invocations"
    ),
    config_file: Path | None = typer.Option(None, "--config", "-c", help="YAML settings file"),
    show_state: bool = typer.Option(False, "--state", help="Print the final state"),
):
    """Run a request through a supervisor over the catalog agents."""
    settings = load_settings(config_file)
    setup_logging(settings.effective_log_level)

    try:
        validate_configuration(settings)
    except ValueError as e:
        console.print(f"[bold red]{e}[/bold red]")
        raise typer.Exit(1) from e

    async def _supervise():
        model = create_chat_model(settings)
        supervisor = Supervisor.from_model(
            model,
            load_agent_catalog(catalog_file, model),
            max_invocations=max_invocations,
            memory_window=settings.memory.max_messages,
        )
        store = ExecutionStore()
        with console.status("[bold green]Supervising request..."):
            response = await supervisor.invoke(request, store)
        return response, store

    try:
        response, store = asyncio.run(_supervise())
    except Exception as e:
        console.print(f"[bold red]Supervision failed: {e}[/bold red]")
        raise typer.Exit(1) from e

    console.print(Panel(response, title="Response"))
    if show_state:
        console.print_json(json.dumps(store.read_all(), default=str))


@app.command()
def config(
    config_file: Path | None = typer.Option(None, "--config", "-c", help="YAML settings file"),
):
    """Show the effective configuration (API keys redacted)."""
    settings = load_settings(config_file)
    data = settings.model_dump(mode="json")
    for provider in ("openai", "openrouter"):
        if data[provider].get("api_key"):
            data[provider]["api_key"] = "***"
    console.print_json(json.dumps(data))


@app.callback()
def main():
    """Agent Orchestration CLI.

    Compose chat-model agents and let a planner-driven supervisor coordinate
    them.
    """
    pass


if __name__ == "__main__":
    app()

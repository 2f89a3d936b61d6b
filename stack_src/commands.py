#!/usr/bin/env python3
# -*- coding: utf-8 -*-
#
# Copyright (c) 2026 plumiume
# SPDX-License-Identifier: MIT
# License: MIT License (https://opensource.org/licenses/MIT)
# See LICENSE.txt for details.

"""
CLI commands for the compose stack wrapper.
"""

import subprocess
import sys
from pathlib import Path
from typing import Annotated, Optional

import typer
from docker.errors import DockerException
from pydantic import ValidationError
from rich.console import Console
from rich.panel import Panel
from rich.table import Table

from . import __version__, updater
from .log import set_level
from .manager import StackManager
from .models import Settings
from .ports import query_port_mappings
from .schema_utils import generate_apps_schema

console = Console()
app = typer.Typer(
    name="stack",
    help="Docker Compose wrapper that expands application names into services",
    add_completion=False,
)
schema_app = typer.Typer(help="Schema utilities")
app.add_typer(schema_app, name="schema")

FORWARD_COMMAND = "compose"
GLOBAL_OPTIONS = ("--test",)
AUXILIARY_COMMANDS = (
    FORWARD_COMMAND,
    "help",
    "apps",
    "version",
    "update",
    "ports",
    "export",
    "import",
    "init",
    "schema",
)

COMMAND_HELP = [
    ("<compose command>", "Any docker compose command; app names expand to services"),
    ("help", "Show this message"),
    ("apps", "List applications and the services they start"),
    ("version [--check]", "Show the installed version, optionally check for updates"),
    ("update", "Update the installation and relink executables"),
    ("ports [--json]", "Show published ports of running services"),
    ("export [DEST]", "Export stack data into DEST (default: current directory)"),
    ("import FILE", "Import stack data from FILE"),
    ("init [--force]", "Create apps.yml from the example and generate its schema"),
    ("schema generate", "Generate the editor schema for apps.yml"),
]


def _manager(ctx: typer.Context) -> StackManager:
    manager: StackManager = ctx.obj
    return manager


def print_usage(manager: StackManager) -> None:
    """Print subcommands and configured applications"""
    console.print("Usage: stack [--test] COMMAND [ARGS]...\n")

    table = Table(title="Commands", show_header=True, header_style="bold magenta")
    table.add_column("Command", style="cyan", no_wrap=True)
    table.add_column("Description")
    for name, description in COMMAND_HELP:
        table.add_row(name, description)
    console.print(table)

    if not manager.settings.apps_path.exists():
        console.print(
            f"\n[dim]No applications configured ({manager.settings.apps_path})[/dim]"
        )
        return

    apps = manager.load_apps()
    apps_table = Table(
        title="Applications", show_header=True, header_style="bold magenta"
    )
    apps_table.add_column("Application", style="cyan", no_wrap=True)
    apps_table.add_column("Services", style="green")
    for name in apps.names():
        apps_table.add_row(name, " ".join(apps.expand(name)))
    console.print()
    console.print(apps_table)


# ============================================================================
# CLI Commands
# ============================================================================


@app.callback(invoke_without_command=True)
def callback(
    ctx: typer.Context,
    test: Annotated[
        bool,
        typer.Option(
            "--test", help="Test mode: separate project, volumes removed on shutdown"
        ),
    ] = False,
):
    """Docker Compose wrapper that expands application names into services"""
    try:
        settings = Settings(test_mode=True) if test else Settings()
    except ValidationError as e:
        console.print(f"[red]Error: invalid settings: {e}[/red]")
        raise typer.Exit(1)

    # An installed wheel resolves root to site-packages
    if not settings.is_installation:
        console.print(f"[red]Error: {settings.root} is not a stack installation[/red]")
        console.print("Set STACK_ROOT to the checkout directory")
        raise typer.Exit(1)

    set_level(settings.log_level)
    ctx.obj = StackManager(settings)

    if ctx.invoked_subcommand is None:
        print_usage(ctx.obj)


@app.command(
    FORWARD_COMMAND,
    hidden=True,
    add_help_option=False,
    context_settings={"allow_extra_args": True, "ignore_unknown_options": True},
)
def compose(ctx: typer.Context):
    """Forward a command to docker compose"""
    manager = _manager(ctx)
    sys.exit(manager.run_compose(list(ctx.args)))


@app.command("help")
def help_command(ctx: typer.Context):
    """Show commands and configured applications"""
    print_usage(_manager(ctx))


@app.command()
def apps(ctx: typer.Context):
    """List applications and the services they start"""
    manager = _manager(ctx)
    app_map = manager.load_apps()
    topology = manager.load_topology()
    known = topology.known_services

    table = Table(title="Applications", show_header=True, header_style="bold magenta")
    table.add_column("Application", style="cyan", no_wrap=True)
    table.add_column("Services")

    for name in app_map.names():
        members = [
            f"[green]{member}[/green]" if member in known else f"[red]{member}?[/red]"
            for member in app_map.expand(name)
        ]
        table.add_row(name, " ".join(members) or "[dim](none)[/dim]")

    console.print(table)
    console.print(f"[dim]Known services: {', '.join(topology.services)}[/dim]")


@app.command()
def version(
    ctx: typer.Context,
    check: Annotated[
        bool, typer.Option("--check", help="Check upstream for new revisions")
    ] = False,
):
    """Show the installed version"""
    root = _manager(ctx).project_root

    try:
        revision = updater.current_revision(root)
    except (subprocess.CalledProcessError, FileNotFoundError):
        revision = "unknown"
    console.print(f"stack {__version__} ({revision})")

    if not check:
        return

    try:
        behind = updater.commits_behind(root)
    except FileNotFoundError:
        console.print("[red]Error: git not found[/red]")
        raise typer.Exit(1)
    except subprocess.CalledProcessError as e:
        console.print(f"[red]Error: {(e.stderr or '').strip() or e}[/red]")
        raise typer.Exit(1)

    if behind:
        console.print(
            f"[yellow]{behind} new revision(s) available. "
            "Run 'stack update' to install them.[/yellow]"
        )
        raise typer.Exit(1)

    console.print("[green]✓[/green] Up to date")


@app.command()
def update(ctx: typer.Context):
    """Update the installation and relink executables"""
    manager = _manager(ctx)
    root = manager.project_root

    try:
        output = updater.pull(root)
        revision = updater.current_revision(root)
    except FileNotFoundError:
        console.print("[red]Error: git not found[/red]")
        raise typer.Exit(1)
    except subprocess.CalledProcessError as e:
        console.print(f"[red]Error: {(e.stderr or '').strip() or e}[/red]")
        raise typer.Exit(1)

    if output:
        console.print(f"[dim]{output}[/dim]")

    try:
        links = updater.relink(root, manager.settings.bin_dir)
    except OSError as e:
        console.print(f"[red]Error: {e}[/red]")
        raise typer.Exit(1)

    console.print(
        Panel(
            f"[green]✓[/green] Updated to {revision}\n\n"
            + "\n".join(f"{link} → {link.resolve()}" for link in links),
            title="[bold green]Success[/bold green]",
            border_style="green",
        )
    )


@app.command()
def ports(
    ctx: typer.Context,
    as_json: Annotated[
        bool, typer.Option("--json", help="Print the mapping as JSON")
    ] = False,
):
    """Show published ports of running services"""
    project = _manager(ctx).settings.effective_project_name

    try:
        report = query_port_mappings(project)
    except DockerException as e:
        console.print(f"[red]Error: cannot query docker: {e}[/red]")
        raise typer.Exit(1)

    if as_json:
        console.print_json(data=report)
        return

    if not report:
        console.print(f"[yellow]No running containers for project {project}[/yellow]")
        return

    table = Table(
        title=f"Published Ports - {project}",
        show_header=True,
        header_style="bold magenta",
    )
    table.add_column("Service", style="cyan", no_wrap=True)
    table.add_column("Internal", style="green")
    table.add_column("Published", style="yellow")
    for service, mapping in report.items():
        if not mapping:
            table.add_row(service, "[dim]-[/dim]", "[dim]-[/dim]")
        for internal, published in mapping.items():
            table.add_row(service, internal, str(published))

    console.print(table)


@app.command("export")
def export_command(
    ctx: typer.Context,
    destination: Annotated[
        Optional[Path],
        typer.Argument(help="Directory to export into (default: current directory)"),
    ] = None,
):
    """Export stack data"""
    manager = _manager(ctx)
    sys.exit(manager.export_data(destination or Path.cwd()))


@app.command("import")
def import_command(
    ctx: typer.Context,
    source: Annotated[Path, typer.Argument(help="File to import")],
):
    """Import stack data"""
    manager = _manager(ctx)
    sys.exit(manager.import_data(source))


@app.command()
def init(
    ctx: typer.Context,
    force: Annotated[
        bool,
        typer.Option(
            "--force",
            help="Overwrite apps.yml if it already exists",
        ),
    ] = False,
):
    """Initialize apps.yml and generate editor schema"""
    manager = _manager(ctx)
    project_root = manager.project_root
    apps_example_path = project_root / "apps.example.yml"
    apps_path = manager.settings.apps_path

    if not apps_example_path.exists():
        console.print(f"[red]Error: {apps_example_path} not found[/red]")
        raise typer.Exit(1)

    if not apps_path.exists() or force:
        apps_path.write_text(apps_example_path.read_text(encoding="utf-8"))
        console.print(f"[green]✓[/green] Created {apps_path}")
    else:
        console.print(
            "[yellow]apps.yml already exists. Use --force to overwrite.[/yellow]"
        )

    schema_path = generate_apps_schema(project_root)
    console.print(f"[green]✓[/green] Generated {schema_path}")


@schema_app.command("generate")
def schema_generate(ctx: typer.Context):
    """Generate editor schema from Pydantic models"""
    project_root = _manager(ctx).project_root
    try:
        schema_path = generate_apps_schema(project_root)
        console.print(f"[green]✓[/green] Generated {schema_path}")
    except OSError as e:
        console.print(f"[red]Error: {e}[/red]")
        raise typer.Exit(1)


def route(args: list[str]) -> list[str]:
    """Send anything that is not an auxiliary command to docker compose"""
    rest = list(args)
    options: list[str] = []
    while rest and rest[0] in GLOBAL_OPTIONS:
        options.append(rest.pop(0))

    if rest and rest[0] == FORWARD_COMMAND:
        rest.pop(0)
    elif not rest or rest[0] in AUXILIARY_COMMANDS or rest[0] == "--help":
        return list(args)
    # "--" stops option parsing so later tokens, "--" included, reach compose
    return [*options, FORWARD_COMMAND, "--", *rest]


def main(argv: Optional[list[str]] = None):
    """Main entry point"""
    args = sys.argv[1:] if argv is None else list(argv)
    app(args=route(args), prog_name="stack")

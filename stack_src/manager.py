#!/usr/bin/env python3
# -*- coding: utf-8 -*-
#
# Copyright (c) 2026 plumiume
# SPDX-License-Identifier: MIT
# License: MIT License (https://opensource.org/licenses/MIT)
# See LICENSE.txt for details.

"""
Stack manager for Docker Compose operations.
"""

import os
import subprocess
from pathlib import Path
from typing import Any, Optional

import typer
import yaml
from jinja2 import Environment, FileSystemLoader
from pydantic import ValidationError
from rich.console import Console

from .classifier import Invocation, build_command, classify
from .log import logger
from .models import AppMap, Settings, Topology

# Rich Console for beautiful output
console = Console()

TRANSFER_MOUNT = "/transfer"
VOLUMES_MOUNT = "/volumes"


# ============================================================================
# Core Stack Manager
# ============================================================================


class StackManager:
    """Loads descriptors and launches docker compose"""

    def __init__(self, settings: Settings):
        self.settings = settings
        self.project_root = settings.root
        self.build_dir = self.project_root / "_build"

    # ------------------------------------------------------------------
    # Descriptors
    # ------------------------------------------------------------------

    @property
    def template_path(self) -> Path:
        compose_path = self.settings.compose_path
        return compose_path.with_name(compose_path.name + ".jinja2")

    def render_template(self) -> str:
        """Render the compose template with the runtime settings"""
        env = Environment(
            loader=FileSystemLoader(str(self.template_path.parent)),
            trim_blocks=True,
            lstrip_blocks=True,
        )
        template = env.get_template(self.template_path.name)
        return template.render(
            settings=self.settings.model_dump(mode="json"),
            project_name=self.settings.effective_project_name,
            test_mode=self.settings.test_mode,
        )

    def prepare_compose_file(self) -> Path:
        """Return the compose file to use, rendering it from a template if any"""
        if not self.template_path.exists():
            return self.settings.compose_path

        output_path = self.build_dir / self.settings.compose_path.name
        output_path.parent.mkdir(parents=True, exist_ok=True)
        with open(output_path, "w", encoding="utf-8") as f:
            f.write(self.render_template())

        logger.debug(f"Rendered {self.template_path} to {output_path}")
        return output_path

    def _read_yaml(self, path: Path) -> Any:
        if not path.exists():
            console.print(f"[red]Error: {path} not found[/red]")
            raise typer.Exit(1)

        try:
            with open(path, encoding="utf-8") as f:
                return yaml.safe_load(f)
        except yaml.YAMLError as e:
            console.print(f"[red]Error: failed to parse {path}: {e}[/red]")
            raise typer.Exit(1)

    def load_topology(self, compose_path: Optional[Path] = None) -> Topology:
        """Load services and volumes from the compose file"""
        if compose_path is None:
            compose_path = self.prepare_compose_file()

        data = self._read_yaml(compose_path)
        try:
            return Topology.from_document(data)
        except ValueError as e:
            console.print(f"[red]Error: invalid {compose_path}: {e}[/red]")
            raise typer.Exit(1)

    def load_apps(self) -> AppMap:
        """Load and validate the application map"""
        apps_path = self.settings.apps_path
        data = self._read_yaml(apps_path)
        try:
            return AppMap.model_validate(data)
        except ValidationError as e:
            console.print(f"[red]Error: invalid {apps_path}: {e}[/red]")
            raise typer.Exit(1)

    # ------------------------------------------------------------------
    # Process launching
    # ------------------------------------------------------------------

    def compose_base(self, compose_path: Path) -> list[str]:
        return [self.settings.docker, "compose", "-f", str(compose_path)]

    def compose_env(self) -> dict[str, str]:
        """Environment for child processes"""
        env = os.environ.copy()
        env["COMPOSE_PROJECT_NAME"] = self.settings.effective_project_name
        return env

    def cleanup_command(self, compose_path: Path) -> list[str]:
        """Tear-down command run after an interrupted foreground up"""
        cmd = self.compose_base(compose_path) + ["down"]
        if self.settings.test_mode:
            cmd.append("-v")
        return cmd

    def _run(self, cmd: list[str]) -> int:
        console.print(f"\n[dim]Running: {' '.join(cmd)}[/dim]\n")
        try:
            result = subprocess.run(
                cmd, cwd=self.project_root, env=self.compose_env()
            )
        except FileNotFoundError:
            console.print(f"[red]Error: {cmd[0]} not found[/red]")
            return 127
        return result.returncode

    def resolve(self, tokens: list[str]) -> tuple[Invocation, Path]:
        """Classify a command line against the current descriptors"""
        compose_path = self.prepare_compose_file()
        topology = self.load_topology(compose_path)
        apps = self.load_apps()

        invocation = classify(tokens, apps.root, topology.known_services)
        for alias in invocation.dropped_aliases:
            logger.warning(
                f"Application '{alias}' does not name any known service; ignoring it"
            )
        return invocation, compose_path

    def run_compose(self, tokens: list[str]) -> int:
        """Run a docker compose command, expanding application names"""
        invocation, compose_path = self.resolve(tokens)
        cmd = build_command(invocation, self.compose_base(compose_path))

        try:
            return self._run(cmd)
        except KeyboardInterrupt:
            console.print("\n[yellow]Interrupted by user[/yellow]")
            if not invocation.is_foreground_up:
                return 130
            try:
                return self._run(self.cleanup_command(compose_path))
            except KeyboardInterrupt:
                console.print("\n[yellow]Cleanup interrupted[/yellow]")
                return 130

    # ------------------------------------------------------------------
    # Data transfer
    # ------------------------------------------------------------------

    def transfer_command(
        self,
        compose_path: Path,
        topology: Topology,
        mount: str,
        args: list[str],
        volumes_read_only: bool,
    ) -> list[str]:
        """docker compose run of the transfer service with the given mount"""
        cmd = self.compose_base(compose_path) + ["run", "--rm", "-v", mount]
        suffix = ":ro" if volumes_read_only else ""
        project = self.settings.effective_project_name
        for volume in topology.volumes:
            cmd += ["-v", f"{project}_{volume}:{VOLUMES_MOUNT}/{volume}{suffix}"]
        return cmd + [self.settings.transfer_service] + args

    def export_data(self, destination: Path) -> int:
        """Export stack data into a host directory"""
        destination = destination.resolve()
        destination.mkdir(parents=True, exist_ok=True)

        compose_path = self.prepare_compose_file()
        topology = self.load_topology(compose_path)
        cmd = self.transfer_command(
            compose_path,
            topology,
            f"{destination}:{TRANSFER_MOUNT}",
            ["export"],
            volumes_read_only=True,
        )
        return self._run(cmd)

    def import_data(self, source: Path) -> int:
        """Import stack data from a host file"""
        source = source.resolve()
        if not source.is_file():
            console.print(f"[red]Error: {source} not found[/red]")
            raise typer.Exit(1)

        compose_path = self.prepare_compose_file()
        topology = self.load_topology(compose_path)
        cmd = self.transfer_command(
            compose_path,
            topology,
            f"{source.parent}:{TRANSFER_MOUNT}:ro",
            ["import", f"{TRANSFER_MOUNT}/{source.name}"],
            volumes_read_only=False,
        )
        return self._run(cmd)

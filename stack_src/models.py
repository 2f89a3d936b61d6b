#!/usr/bin/env python3
# -*- coding: utf-8 -*-
#
# Copyright (c) 2026 plumiume
# SPDX-License-Identifier: MIT
# License: MIT License (https://opensource.org/licenses/MIT)
# See LICENSE.txt for details.

"""
Configuration models for the compose stack wrapper.
"""

import re
from pathlib import Path
from typing import Any, Optional

from pydantic import BaseModel, ConfigDict, Field, RootModel, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

# ============================================================================
# Runtime Settings
# ============================================================================


def _default_root() -> Path:
    """Installation root: the directory holding stack_src/ (symlinks resolved)"""
    return Path(__file__).resolve().parent.parent


class Settings(BaseSettings):
    """Runtime settings, computed once at startup"""

    model_config = SettingsConfigDict(
        env_file=_default_root() / ".env",
        env_prefix="STACK_",
        case_sensitive=False,
        extra="ignore",
        frozen=True,
    )

    root: Path = Field(default_factory=_default_root, description="Installation root")
    compose_file: str = Field(
        default="docker-compose.yml", description="Topology descriptor"
    )
    apps_file: str = Field(default="apps.yml", description="Application alias map")
    project_name: Optional[str] = Field(
        default=None,
        description="Compose project name (None = installation root directory name)",
    )
    test_mode: bool = Field(default=False, description="Run against test resources")
    test_suffix: str = Field(
        default="_test", description="Project name suffix used in test mode"
    )
    test_compose_file: str = Field(
        default="docker-compose.test.yml",
        description="Alternate topology descriptor used in test mode when present",
    )
    transfer_service: str = Field(
        default="transfer", description="Service used for data import/export"
    )
    bin_dir: Path = Field(
        default=Path("~/.local/bin"),
        description="Directory where executables are linked on update",
    )
    log_level: str = Field(default="WARNING", description="Diagnostics log level")
    docker: str = Field(default="docker", description="Docker executable")

    @field_validator("bin_dir")
    @classmethod
    def expand_bin_dir(cls, v: Path) -> Path:
        return v.expanduser()

    @field_validator("log_level")
    @classmethod
    def validate_log_level(cls, v: str) -> str:
        """Validate log level name"""
        level = v.upper()
        if level not in {"DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"}:
            raise ValueError(f"Unknown log level: {v}")
        return level

    @property
    def effective_project_name(self) -> str:
        """Compose project name, suffixed in test mode"""
        name = self.project_name or re.sub(r"[^a-z0-9_-]", "", self.root.name.lower())
        if self.test_mode:
            name += self.test_suffix
        return name

    @property
    def compose_path(self) -> Path:
        """Topology descriptor in use (test descriptor only if it exists)"""
        if self.test_mode:
            test_path = self.root / self.test_compose_file
            if test_path.exists() or test_path.with_name(
                test_path.name + ".jinja2"
            ).exists():
                return test_path
        return self.root / self.compose_file

    @property
    def apps_path(self) -> Path:
        return self.root / self.apps_file

    @property
    def is_installation(self) -> bool:
        """Whether root looks like a checkout (git repo or topology present)"""
        compose_path = self.compose_path
        return (
            (self.root / ".git").exists()
            or compose_path.exists()
            or compose_path.with_name(compose_path.name + ".jinja2").exists()
        )


# ============================================================================
# Descriptors
# ============================================================================


class Topology(BaseModel):
    """Services and volumes declared by the topology descriptor"""

    model_config = ConfigDict(frozen=True)

    services: tuple[str, ...] = Field(description="Service names, in document order")
    volumes: tuple[str, ...] = Field(default=(), description="Named volumes")

    @classmethod
    def from_document(cls, data: Any) -> "Topology":
        """Build from a parsed compose document"""
        if not isinstance(data, dict):
            raise ValueError("topology descriptor must be a mapping")

        services = data.get("services")
        if not isinstance(services, dict) or not services:
            raise ValueError("topology descriptor has no services")

        volumes = data.get("volumes") or {}
        if not isinstance(volumes, dict):
            raise ValueError("topology descriptor volumes must be a mapping")

        return cls(services=tuple(services), volumes=tuple(volumes))

    @property
    def known_services(self) -> frozenset[str]:
        return frozenset(self.services)


class AppMap(RootModel[dict[str, list[str]]]):
    """Application name to the services it depends on"""

    model_config = ConfigDict(frozen=True)

    root: dict[str, list[str]] = Field(default_factory=dict)

    @field_validator("root", mode="before")
    @classmethod
    def normalize(cls, v: Any) -> Any:
        """Accept an empty document and scalar members"""
        if v is None:
            return {}
        if isinstance(v, dict):
            return {
                name: [members]
                if isinstance(members, str)
                else ([] if members is None else members)
                for name, members in v.items()
            }
        return v

    def __contains__(self, name: object) -> bool:
        return name in self.root

    def expand(self, name: str) -> list[str]:
        """Members of an application, deduplicated in declaration order"""
        return list(dict.fromkeys(self.root.get(name, [])))

    def names(self) -> list[str]:
        return sorted(self.root)

#!/usr/bin/env python3
# -*- coding: utf-8 -*-
#
# Copyright (c) 2026 plumiume
# SPDX-License-Identifier: MIT
# License: MIT License (https://opensource.org/licenses/MIT)
# See LICENSE.txt for details.

"""Version check and self-update of the installation checkout."""

from __future__ import annotations

import os
import subprocess
from pathlib import Path

from .log import logger

ENTRY_SCRIPT = "stack.py"


def _git(root: Path, *args: str) -> str:
    cmd = ["git", "-C", str(root), *args]
    logger.debug(f"Running: {' '.join(cmd)}")
    result = subprocess.run(cmd, capture_output=True, text=True, check=True)
    return result.stdout.strip()


def current_revision(root: Path) -> str:
    """Short hash of the checked-out revision"""
    return _git(root, "rev-parse", "--short", "HEAD")


def commits_behind(root: Path) -> int:
    """Fetch the upstream branch and count commits not yet pulled"""
    _git(root, "fetch", "--quiet")
    return int(_git(root, "rev-list", "--count", "HEAD..@{u}") or 0)


def pull(root: Path) -> str:
    return _git(root, "pull", "--ff-only")


def entry_points(root: Path) -> list[Path]:
    """Executables to expose in the binary directory"""
    targets = [root / ENTRY_SCRIPT]
    bin_dir = root / "bin"
    if bin_dir.is_dir():
        targets += sorted(
            path
            for path in bin_dir.iterdir()
            if path.is_file() and os.access(path, os.X_OK)
        )
    return targets


def link_name(target: Path) -> str:
    return target.stem if target.suffix == ".py" else target.name


def relink(root: Path, bin_dir: Path) -> list[Path]:
    """Symlink every entry point into bin_dir, replacing stale links.

    Raises:
        FileExistsError: A regular file is in the way of a link.
    """
    bin_dir.mkdir(parents=True, exist_ok=True)

    links: list[Path] = []
    for target in entry_points(root):
        link = bin_dir / link_name(target)
        if link.is_symlink():
            link.unlink()
        elif link.exists():
            raise FileExistsError(f"{link} exists and is not a symlink")
        link.symlink_to(target)
        links.append(link)
    return links

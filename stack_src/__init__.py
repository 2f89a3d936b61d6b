#!/usr/bin/env python3
# -*- coding: utf-8 -*-

# Copyright (c) 2026 plumiume
# SPDX-License-Identifier: MIT
# License: MIT License (https://opensource.org/licenses/MIT)
# See LICENSE.txt for details.

"""
Docker Compose wrapper package.
"""

__version__ = "0.1.0"

from .classifier import Invocation, build_command, classify
from .commands import app, main
from .manager import StackManager
from .models import AppMap, Settings, Topology

__all__ = [
    "__version__",
    # Commands
    "app",
    "main",
    # Manager
    "StackManager",
    # Classifier
    "Invocation",
    "classify",
    "build_command",
    # Models
    "Settings",
    "Topology",
    "AppMap",
]

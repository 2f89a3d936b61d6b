#!/usr/bin/env python3
# -*- coding: utf-8 -*-
#
# Copyright (c) 2026 plumiume
# SPDX-License-Identifier: MIT
# License: MIT License (https://opensource.org/licenses/MIT)
# See LICENSE.txt for details.

"""
Diagnostics logging.

User-facing output goes through rich consoles in each module; this logger is
for warnings and debug traces, written to stderr.
"""

from __future__ import annotations

import logging
from typing import Optional

from rich.console import Console
from rich.logging import RichHandler

LOGGER_NAME = "stack"


def get_logger(name: Optional[str] = None) -> logging.Logger:
    """Get the configured logger, configuring it on first use"""
    if name is None:
        name = LOGGER_NAME

    logger_instance = logging.getLogger(name)
    if not logger_instance.handlers:
        configure_logger(logger_instance)

    return logger_instance


def configure_logger(logger_instance: logging.Logger, level: str = "WARNING") -> None:
    """Attach a stderr rich handler"""
    logger_instance.setLevel(level)

    handler = RichHandler(
        console=Console(stderr=True),
        show_time=False,
        show_path=False,
        markup=True,
    )
    handler.setFormatter(logging.Formatter("%(message)s"))
    logger_instance.addHandler(handler)


def set_level(level: str) -> None:
    get_logger().setLevel(level)


logger = get_logger()


__all__ = ["get_logger", "logger", "configure_logger", "set_level"]

#!/usr/bin/env python3
# -*- coding: utf-8 -*-
#
# Copyright (c) 2026 plumiume
# SPDX-License-Identifier: MIT
# License: MIT License (https://opensource.org/licenses/MIT)
# See LICENSE.txt for details.

"""Schema generation utilities."""

from __future__ import annotations

import json
from pathlib import Path

from .models import AppMap


def generate_apps_schema(project_root: Path) -> Path:
    """Generate apps.schema.json from the application map model."""
    schema_path = project_root / ".vscode" / "apps.schema.json"
    schema_path.parent.mkdir(parents=True, exist_ok=True)

    apps_schema = AppMap.model_json_schema()
    apps_schema.setdefault("$schema", "https://json-schema.org/draft/2020-12/schema")
    schema_path.write_text(
        json.dumps(apps_schema, indent=2, ensure_ascii=True) + "\n",
        encoding="utf-8",
    )

    return schema_path

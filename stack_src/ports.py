#!/usr/bin/env python3
# -*- coding: utf-8 -*-
#
# Copyright (c) 2026 plumiume
# SPDX-License-Identifier: MIT
# License: MIT License (https://opensource.org/licenses/MIT)
# See LICENSE.txt for details.

"""
Published port report for running stack containers.
"""

import re
from collections.abc import Iterable, Mapping
from typing import Any, Optional

import docker
from docker.models.containers import Container

PROJECT_LABEL = "com.docker.compose.project"
SERVICE_LABEL = "com.docker.compose.service"

PortReport = dict[str, dict[str, int]]


def service_name(
    container_name: str, project: str, labels: Optional[Mapping[str, str]] = None
) -> str:
    """Derive the service name from a compose container name.

    ``<project>-<service>-<n>`` (compose v2) and ``<project>_<service>_<n>``
    (compose v1) are recognised. Anything else falls back to the service
    label, then to the bare container name.
    """
    name = container_name.lstrip("/")
    match = re.match(rf"^{re.escape(project)}[-_](?P<service>.+?)[-_]\d+$", name)
    if match:
        return match.group("service")
    if labels and labels.get(SERVICE_LABEL):
        return labels[SERVICE_LABEL]
    return name


def _internal_port(key: str) -> str:
    """'80/tcp' -> '80', other protocols are kept ('53/udp')"""
    port, _, protocol = key.partition("/")
    return port if protocol in ("", "tcp") else key


def _published_port(bindings: Any) -> Optional[int]:
    for binding in bindings or []:
        host_port = binding.get("HostPort")
        if host_port:
            return int(host_port)
    return None


def port_mappings(containers: Iterable[Container], project: str) -> PortReport:
    """Map service name to {internal port: published port}"""
    report: PortReport = {}
    for container in containers:
        mapping = report.setdefault(
            service_name(container.name, project, container.labels), {}
        )
        for key, bindings in (container.ports or {}).items():
            published = _published_port(bindings)
            if published is not None:
                mapping[_internal_port(key)] = published

    return {
        service: dict(sorted(ports.items(), key=lambda item: _port_sort_key(item[0])))
        for service, ports in sorted(report.items())
    }


def _port_sort_key(port: str) -> tuple[int, str]:
    number, _, protocol = port.partition("/")
    return (int(number) if number.isdigit() else 0, protocol)


def query_port_mappings(
    project: str, client: Optional[docker.DockerClient] = None
) -> PortReport:
    """Query the local Docker Engine for the project's running containers"""
    if client is None:
        client = docker.from_env()
    containers = client.containers.list(filters={"label": f"{PROJECT_LABEL}={project}"})
    return port_mappings(containers, project)

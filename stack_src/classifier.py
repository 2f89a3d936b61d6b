#!/usr/bin/env python3
# -*- coding: utf-8 -*-
#
# Copyright (c) 2026 plumiume
# SPDX-License-Identifier: MIT
# License: MIT License (https://opensource.org/licenses/MIT)
# See LICENSE.txt for details.

"""
Command line classification and application expansion.

A command line such as ``stack --verbose up web solr`` is split into:

- head flags (``--verbose``), recognised only before the first non-flag token;
- trailing service references (``web solr``), consumed from the end while
  they name a known service or an application that expands to known services;
- everything else: the untouched prefix (``up``) and any trailing tokens that
  are not service references, which are forwarded as-is.

Nothing here performs I/O.
"""

from collections.abc import Collection, Mapping, Sequence
from dataclasses import dataclass
from typing import Optional

FLAG_MARKER = "-"

DETACH_FLAGS = frozenset({"-d", "--detach"})


def is_flag(token: str) -> bool:
    return token.startswith(FLAG_MARKER)


@dataclass(frozen=True)
class Invocation:
    """A classified command line"""

    argv: tuple[str, ...]
    flags: tuple[str, ...] = ()
    prefix: tuple[str, ...] = ()
    services: tuple[str, ...] = ()
    # Reverse-encounter order: tokens are consumed from the tail.
    passthrough: tuple[str, ...] = ()
    dropped_aliases: tuple[str, ...] = ()

    @property
    def verb(self) -> Optional[str]:
        return self.prefix[0] if self.prefix else None

    @property
    def detached(self) -> bool:
        """Whether a detach flag appears anywhere before the services"""
        for token in (*self.flags, *self.prefix):
            if token in DETACH_FLAGS:
                return True
            # Combined short flags, e.g. -dV
            if (
                token.startswith("-")
                and not token.startswith("--")
                and "=" not in token
                and "d" in token[1:]
            ):
                return True
        return False

    @property
    def is_foreground_up(self) -> bool:
        return self.verb == "up" and not self.detached

    def compose_args(self) -> list[str]:
        """Arguments in the order they are handed to compose"""
        return [
            *self.flags,
            *self.prefix,
            *self.services,
            *reversed(self.passthrough),
        ]


def classify(
    tokens: Sequence[str],
    apps: Mapping[str, Sequence[str]],
    known_services: Collection[str],
) -> Invocation:
    """Partition command line tokens into flags, services and passthrough args.

    Args:
        tokens: The command line without the program name.
        apps: Application name to member service names.
        known_services: Service names declared by the topology.

    Returns:
        The classified invocation. Resolved services are deduplicated, keep
        first-seen order and are all members of ``known_services``.
        Application names that expand to no known service are reported in
        ``dropped_aliases`` and are not forwarded.
    """
    remaining = list(tokens)

    flags: list[str] = []
    while remaining and is_flag(remaining[0]):
        flags.append(remaining.pop(0))

    services: list[str] = []
    passthrough: list[str] = []
    dropped: list[str] = []

    # The last remaining token is the command verb and is never consumed
    while len(remaining) > 1 and not is_flag(remaining[-1]):
        token = remaining.pop()
        candidates = apps[token] if token in apps else [token]
        resolved = [name for name in candidates if name in known_services]

        if resolved:
            for name in resolved:
                if name not in services:
                    services.append(name)
        elif token in apps:
            dropped.append(token)
        else:
            passthrough.append(token)

    return Invocation(
        argv=tuple(tokens),
        flags=tuple(flags),
        prefix=tuple(remaining),
        services=tuple(services),
        passthrough=tuple(passthrough),
        dropped_aliases=tuple(dropped),
    )


def build_command(invocation: Invocation, base: Sequence[str]) -> list[str]:
    """Reassemble the full compose command line"""
    return [*base, *invocation.compose_args()]

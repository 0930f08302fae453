# Copyright 2026 Google LLC
#
# Licensed under the Apache License, Version 2.0 (the "License");
# you may not use this file except in compliance with the License.
# You may obtain a copy of the License at
#
#     http://www.apache.org/licenses/LICENSE-2.0
#
# Unless required by applicable law or agreed to in writing, software
# distributed under the License is distributed on an "AS IS" BASIS,
# WITHOUT WARRANTIES OR CONDITIONS OF ANY KIND, either express or implied.
# See the License for the specific language governing permissions and
# limitations under the License.
#
# SPDX-License-Identifier: Apache-2.0


"""Structured logging for changekit.

Configures `structlog <https://www.structlog.org/>`_ on top of the
standard library ``logging`` module. Everything is written to stderr so
that a changelog printed to stdout can be piped straight into a file::

    changekit --unreleased > CHANGES.md

Two renderers are available:

- **Console** (default): human-readable, colored when stderr is a TTY.
- **JSON** (``--json-log``): one JSON object per line for CI log parsers.

Events emitted while a single commit is being processed carry the short
commit id via :func:`commit_context`, so a dropped or unresolved commit
can be traced back without repeating ``commit=...`` at every call site.

Usage::

    from changekit.logging import commit_context, configure_logging, get_logger

    configure_logging(verbose=True)
    log = get_logger(__name__)
    with commit_context('8f55e69eba6e6ce811ace32bd84cc82215673cb6'):
        log.debug('commit_skipped', reason='Skipping commit')
"""

from __future__ import annotations

import logging
import sys
from collections.abc import Iterator
from contextlib import contextmanager

import structlog


def configure_logging(
    *,
    verbose: bool = False,
    quiet: bool = False,
    json_log: bool = False,
) -> None:
    """Configure structlog for a changekit run.

    Safe to call more than once; the last call wins.

    Args:
        verbose: Enable debug-level output (per-commit drop reasons,
            cache hits, subprocess invocations).
        quiet: Only show warnings and errors.
        json_log: Render events as JSON lines instead of console text.
    """
    if quiet:
        level = logging.WARNING
    elif verbose:
        level = logging.DEBUG
    else:
        level = logging.INFO

    logging.basicConfig(
        format='%(message)s',
        stream=sys.stderr,
        level=level,
        force=True,
    )

    shared_processors: list[structlog.types.Processor] = [
        structlog.contextvars.merge_contextvars,
        structlog.stdlib.add_log_level,
        structlog.stdlib.add_logger_name,
        structlog.processors.TimeStamper(fmt='iso'),
        structlog.processors.StackInfoRenderer(),
        structlog.processors.UnicodeDecoder(),
    ]

    if json_log:
        renderer: structlog.types.Processor = structlog.processors.JSONRenderer()
    else:
        renderer = structlog.dev.ConsoleRenderer(colors=sys.stderr.isatty())

    structlog.configure(
        processors=[
            *shared_processors,
            structlog.stdlib.ProcessorFormatter.wrap_for_formatter,
        ],
        logger_factory=structlog.stdlib.LoggerFactory(),
        wrapper_class=structlog.stdlib.BoundLogger,
        cache_logger_on_first_use=True,
    )

    formatter = structlog.stdlib.ProcessorFormatter(
        processors=[
            structlog.stdlib.ProcessorFormatter.remove_processors_meta,
            renderer,
        ],
    )
    for handler in logging.root.handlers:
        handler.setFormatter(formatter)


def get_logger(name: str = 'changekit') -> structlog.stdlib.BoundLogger:
    """Return a bound structlog logger.

    Args:
        name: Logger name, usually the calling module's ``__name__``.

    Returns:
        A :class:`structlog.stdlib.BoundLogger` instance.
    """
    return structlog.get_logger(name)


@contextmanager
def commit_context(commit_id: str) -> Iterator[None]:
    """Bind the short id of the commit being processed to every log event.

    Args:
        commit_id: Full or abbreviated commit id. Empty ids (commits
            injected with ``--with-commit``) are bound as ``"-"``.
    """
    with structlog.contextvars.bound_contextvars(commit=commit_id[:7] or '-'):
        yield


__all__ = [
    'commit_context',
    'configure_logging',
    'get_logger',
]

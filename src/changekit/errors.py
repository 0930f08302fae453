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


"""Structured error system for changekit.

Every error carries a unique ``CK-NAMED-KEY`` code, a human-readable
message and an optional hint. The per-commit failures of the processing
pipeline have dedicated subclasses so callers can decide, per stage,
whether to drop the commit or abort the run.

Key Concepts (ELI5)::

    ┌─────────────────────┬────────────────────────────────────────────────┐
    │ Concept             │ ELI5 Explanation                               │
    ├─────────────────────┼────────────────────────────────────────────────┤
    │ ErrorCode           │ A unique named ID like "CK-GROUP-SKIPPED".     │
    │                     │ Readable at a glance, greppable in logs.       │
    ├─────────────────────┼────────────────────────────────────────────────┤
    │ ChangeKitError      │ The base exception. Carries code, message and  │
    │                     │ hint so the CLI can render it nicely.          │
    ├─────────────────────┼────────────────────────────────────────────────┤
    │ ParseError          │ "This message is not a Conventional Commit."   │
    ├─────────────────────┼────────────────────────────────────────────────┤
    │ GroupError          │ "A skip rule matched" or "no rule matched".    │
    ├─────────────────────┼────────────────────────────────────────────────┤
    │ CommandError        │ A preprocessing shell command failed.          │
    ├─────────────────────┼────────────────────────────────────────────────┤
    │ NetworkError        │ A GitHub API call failed or returned junk.     │
    └─────────────────────┴────────────────────────────────────────────────┘

Code categories::

    CK-CONFIG-*       Configuration errors (abort the run)
    CK-COMMIT-*       Conventional parsing (drop one commit)
    CK-GROUP-*        Classification (drop one commit)
    CK-COMMAND-*      Preprocessing commands (drop one commit)
    CK-NETWORK-*      Identity resolution (leave one commit unresolved)
    CK-TEMPLATE-*     Template compilation / rendering (abort the run)
    CK-VCS-*          Git access (abort the run)
    CK-ARGS-*         Command-line usage (abort the run)

Usage::

    from changekit.errors import E, ChangeKitError

    raise ChangeKitError(
        code=E.CONFIG_INVALID_KEY,
        message="Unknown key 'filter_commit' in [git]",
        hint="Did you mean 'filter_commits'?",
    )
"""

from __future__ import annotations

import sys
from dataclasses import dataclass
from enum import Enum
from typing import TextIO

from rich.console import Console
from rich.markup import escape as rich_escape


class ErrorCode(str, Enum):
    """Enumeration of all changekit diagnostic codes."""

    # Configuration
    CONFIG_NOT_FOUND = 'CK-CONFIG-NOT-FOUND'
    CONFIG_PARSE_ERROR = 'CK-CONFIG-PARSE-ERROR'
    CONFIG_INVALID_KEY = 'CK-CONFIG-INVALID-KEY'
    CONFIG_INVALID_VALUE = 'CK-CONFIG-INVALID-VALUE'
    CONFIG_INVALID_REGEX = 'CK-CONFIG-INVALID-REGEX'

    # Per-commit processing
    COMMIT_UNCONVENTIONAL = 'CK-COMMIT-UNCONVENTIONAL'
    GROUP_SKIPPED = 'CK-GROUP-SKIPPED'
    GROUP_NO_MATCH = 'CK-GROUP-NO-MATCH'
    COMMAND_FAILED = 'CK-COMMAND-FAILED'

    # Identity resolution
    NETWORK_FAILED = 'CK-NETWORK-FAILED'

    # Rendering
    TEMPLATE_PARSE = 'CK-TEMPLATE-PARSE'
    TEMPLATE_RENDER = 'CK-TEMPLATE-RENDER'

    # Repository access
    VCS_FAILED = 'CK-VCS-FAILED'
    VCS_NO_CURRENT_TAG = 'CK-VCS-NO-CURRENT-TAG'

    # Command line
    ARGS_MISSING_RANGE = 'CK-ARGS-MISSING-RANGE'


# Convenience alias for shorter imports.
E = ErrorCode


@dataclass(frozen=True)
class ErrorInfo:
    """Metadata for a single error code.

    Attributes:
        code: The ``CK-NAMED-KEY`` error code.
        message: Human-readable description of what went wrong.
        hint: Optional suggestion for how to fix the error.
    """

    code: ErrorCode
    message: str
    hint: str = ''


class ChangeKitError(Exception):
    """Base exception for all changekit errors.

    Args:
        code: The error code from :class:`ErrorCode`.
        message: Human-readable description of what went wrong.
        hint: Optional suggestion for how to fix the error.
    """

    def __init__(self, code: ErrorCode, message: str, hint: str = '') -> None:
        """Initialize with an error code, message, and optional hint."""
        self.info = ErrorInfo(code=code, message=message, hint=hint)
        super().__init__(f'[{code.value}] {message}')

    @property
    def code(self) -> ErrorCode:
        """The error code."""
        return self.info.code

    @property
    def message(self) -> str:
        """The human-readable message without the code prefix."""
        return self.info.message

    @property
    def hint(self) -> str:
        """Suggestion for fixing this error, or empty string."""
        return self.info.hint


class ParseError(ChangeKitError):
    """A commit message does not follow the Conventional Commits grammar."""

    def __init__(self, message: str, hint: str = '') -> None:
        """Initialize with the reason the grammar did not match."""
        super().__init__(E.COMMIT_UNCONVENTIONAL, message, hint)


class GroupErrorReason(str, Enum):
    """Why the classifier rejected a commit."""

    SKIPPED = 'Skipping commit'
    NO_MATCH = 'no matching group'


class GroupError(ChangeKitError):
    """The classifier dropped (skip rule) or rejected (no rule) a commit.

    Args:
        reason: Distinguishes a matching skip rule from an unmatched
            commit under ``filter_commits``.
    """

    def __init__(self, reason: GroupErrorReason, hint: str = '') -> None:
        """Initialize from a :class:`GroupErrorReason`."""
        code = E.GROUP_SKIPPED if reason is GroupErrorReason.SKIPPED else E.GROUP_NO_MATCH
        super().__init__(code, reason.value, hint)
        self.reason = reason


class CommandError(ChangeKitError):
    """A ``replace_command`` preprocessor failed or printed nothing."""

    def __init__(self, message: str, hint: str = '') -> None:
        """Initialize with a description of the failed command."""
        super().__init__(E.COMMAND_FAILED, message, hint)


class NetworkError(ChangeKitError):
    """A hosting API call failed, returned non-2xx, or returned bad JSON."""

    def __init__(self, message: str, hint: str = '') -> None:
        """Initialize with a description of the failed request."""
        super().__init__(E.NETWORK_FAILED, message, hint)


class ConfigError(ChangeKitError):
    """Invalid ``changekit.toml`` content."""


class TemplateError(ChangeKitError):
    """A changelog template failed to compile or render."""


class VCSError(ChangeKitError):
    """The repository could not be read."""


ERRORS: dict[ErrorCode, ErrorInfo] = {
    E.CONFIG_NOT_FOUND: ErrorInfo(
        code=E.CONFIG_NOT_FOUND,
        message='The configuration file passed with --config does not exist.',
        hint='Omit --config to use the defaults, or point it at an existing changekit.toml.',
    ),
    E.CONFIG_INVALID_REGEX: ErrorInfo(
        code=E.CONFIG_INVALID_REGEX,
        message='A pattern in changekit.toml is not a valid regular expression.',
        hint='Patterns use Python re syntax; captures are referenced as $1 or ${name} in templates.',
    ),
    E.COMMIT_UNCONVENTIONAL: ErrorInfo(
        code=E.COMMIT_UNCONVENTIONAL,
        message='A commit message is not a Conventional Commit.',
        hint='Set filter_unconventional = false in [git] to keep such commits unclassified.',
    ),
    E.GROUP_SKIPPED: ErrorInfo(
        code=E.GROUP_SKIPPED,
        message='A commit parser with skip = true matched the commit.',
        hint='Enable protect_breaking_commits to keep breaking changes even when a skip rule matches.',
    ),
    E.GROUP_NO_MATCH: ErrorInfo(
        code=E.GROUP_NO_MATCH,
        message='No commit parser matched the commit and filter_commits is enabled.',
        hint='Add a catch-all parser such as { message = ".*", group = "Other" }.',
    ),
    E.COMMAND_FAILED: ErrorInfo(
        code=E.COMMAND_FAILED,
        message='A replace_command preprocessor exited non-zero or printed nothing.',
        hint='Run the command by hand with the commit message on stdin and COMMIT_SHA set.',
    ),
    E.NETWORK_FAILED: ErrorInfo(
        code=E.NETWORK_FAILED,
        message='A GitHub API request failed.',
        hint='Pass --github-token or set GITHUB_TOKEN to avoid anonymous rate limits.',
    ),
    E.VCS_NO_CURRENT_TAG: ErrorInfo(
        code=E.VCS_NO_CURRENT_TAG,
        message='--current was given but HEAD is not tagged.',
        hint='Check out a tagged commit or use --latest instead.',
    ),
    E.ARGS_MISSING_RANGE: ErrorInfo(
        code=E.ARGS_MISSING_RANGE,
        message='--prepend needs a bounded range.',
        hint="Combine --prepend with '-u', '-l' or an explicit RANGE.",
    ),
}


def explain(code: str) -> str | None:
    """Return a detailed explanation for an error code.

    Args:
        code: The error code string, e.g. ``"CK-GROUP-SKIPPED"``.

    Returns:
        A formatted explanation string, or ``None`` if the code is unknown.
    """
    try:
        error_code = ErrorCode(code)
    except ValueError:
        return None

    info = ERRORS.get(error_code)
    if info is None:
        return f'{code}: No detailed explanation available.'

    lines = [f'{code}: {info.message}']
    if info.hint:
        lines.append(f'  Hint: {info.hint}')
    return '\n'.join(lines)


def render_error(exc: ChangeKitError, *, file: TextIO | None = None) -> None:
    """Render an error in Rust-compiler style, colored on a TTY.

    Output format::

        error[CK-CONFIG-INVALID-KEY]: Unknown key 'filter_commit' in [git]
          |
          = hint: Did you mean 'filter_commits'?

    Args:
        exc: The error to render.
        file: Output stream (defaults to ``sys.stderr``).
    """
    out = file or sys.stderr

    if out.isatty():
        console = Console(file=out, highlight=False)
        msg = rich_escape(exc.message)
        console.print(
            f'[bold red]error[/bold red][bold red]\\[{exc.code.value}][/bold red][bold]: {msg}[/bold]',
        )
        if exc.hint:
            console.print('  [dim]|[/dim]')
            console.print(f'  [dim]=[/dim] [cyan]hint[/cyan]: {rich_escape(exc.hint)}')
        console.print()
    else:
        print(f'error[{exc.code.value}]: {exc.message}', file=out)  # noqa: T201 - CLI output
        if exc.hint:
            print('  |', file=out)  # noqa: T201 - CLI output
            print(f'  = hint: {exc.hint}', file=out)  # noqa: T201 - CLI output
        print(file=out)  # noqa: T201 - CLI output


__all__ = [
    'E',
    'ERRORS',
    'ChangeKitError',
    'CommandError',
    'ConfigError',
    'ErrorCode',
    'ErrorInfo',
    'GroupError',
    'GroupErrorReason',
    'NetworkError',
    'ParseError',
    'TemplateError',
    'VCSError',
    'explain',
    'render_error',
]

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


"""Pure types for commit message parsing.

This module has **zero** runtime dependencies beyond the standard library.
Everything here is a frozen dataclass or protocol: no I/O, no logging,
no side effects.

The parsed fields are owned copies extracted once after a successful
parse, so a :class:`ConventionalCommit` never refers back into the
message it came from.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Protocol, runtime_checkable


@dataclass(frozen=True)
class Footer:
    """A trailer line of a Conventional Commit.

    For ``Signed-off-by: Jane <jane@example.com>`` the token is
    ``"Signed-off-by"``, the separator ``": "`` and the value
    ``"Jane <jane@example.com>"``. For ``Closes #12`` the separator is
    ``" #"`` and the value ``"12"``.

    Attributes:
        token: The part preceding the separator.
        separator: Either ``": "`` or ``" #"``.
        value: Everything after the separator, including continuation
            lines joined with ``"\\n"``.
        breaking: Whether the token is ``BREAKING CHANGE`` or
            ``BREAKING-CHANGE``.
    """

    token: str
    separator: str
    value: str
    breaking: bool = False

    def to_dict(self) -> dict[str, Any]:
        """Return the footer as a plain mapping for templates."""
        return {
            'token': self.token,
            'separator': self.separator,
            'value': self.value,
            'breaking': self.breaking,
        }


@dataclass(frozen=True)
class ConventionalCommit:
    """The parsed view of a Conventional Commit message.

    Attributes:
        type: The commit type (e.g. ``"feat"``, ``"fix"``).
        description: The summary text after ``": "``.
        scope: The optional scope inside parentheses.
        body: Free text between the summary and the footers, if any.
        breaking: ``True`` for ``type!:`` or a breaking-change footer.
        breaking_description: The breaking footer's value, or the
            description when only ``!`` marks the break.
        footers: Footers in message order.
    """

    type: str
    description: str
    scope: str | None = None
    body: str | None = None
    breaking: bool = False
    breaking_description: str | None = None
    footers: tuple[Footer, ...] = ()


@runtime_checkable
class CommitParser(Protocol):
    """Protocol for commit message parsers.

    A parser receives a full commit message and returns a
    :class:`ConventionalCommit`, or raises
    :class:`~changekit.errors.ParseError` when the message does not
    follow its grammar.
    """

    def parse(self, message: str) -> ConventionalCommit:
        """Parse a commit message.

        Args:
            message: The full commit message (summary, body, footers).

        Returns:
            The parsed commit.

        Raises:
            ParseError: If the message does not match the grammar.
        """
        ...

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


"""Rule types for the commit processing pipeline.

Three ordered rule lists drive the pipeline. All of them are read-only
for the whole run and may be shared by every commit:

- :class:`PreprocessorRule`: rewrite the raw message before parsing.
- :class:`CommitParserRule`: assign group/scope or skip the commit.
- :class:`LinkParserRule`: turn references (``#123``, ``RFC456``)
  into links.

Replacement, href and text templates reference captures the way
``changekit.toml`` users are used to from other changelog tools::

    $1  ${1}  $name  ${name}   capture by index or name
    $$                         a literal dollar sign

A reference to a group that does not exist or did not participate in the
match expands to the empty string. ``$name`` takes the longest run of
``[A-Za-z0-9_]``, so ``$1a`` refers to a group called ``1a``; write
``${1}a`` for "group one followed by a".
"""

from __future__ import annotations

import re
from dataclasses import dataclass

_TEMPLATE_REF: re.Pattern[str] = re.compile(r'\$(?:\$|\{(?P<braced>[^}]*)\}|(?P<bare>[A-Za-z0-9_]+))')


def expand_template(match: re.Match[str], template: str) -> str:
    """Expand ``$1`` / ``${name}`` capture references against a match.

    Args:
        match: The regex match providing the captures.
        template: Template text with capture references.

    Returns:
        The expanded text.

    >>> m = re.search(r'#(?P<num>\\d+)', 'see #42')
    >>> expand_template(m, 'https://example.com/issues/$1 (${num})')
    'https://example.com/issues/42 (42)'
    """

    def _replace(ref: re.Match[str]) -> str:
        name = ref.group('braced')
        if name is None:
            name = ref.group('bare')
        if name is None:
            return '$'
        key: int | str = int(name) if name.isdigit() else name
        try:
            value = match.group(key)
        except IndexError:
            return ''
        return value or ''

    return _TEMPLATE_REF.sub(_replace, template)


def replace_all(pattern: re.Pattern[str], text: str, template: str) -> str:
    """Replace every non-overlapping match of ``pattern`` using ``template``."""
    return pattern.sub(lambda m: expand_template(m, template), text)


@dataclass(frozen=True)
class PreprocessorRule:
    """Rewrite a commit message before it is parsed.

    Exactly one of ``replace`` and ``replace_command`` is set.

    Attributes:
        pattern: Pattern that selects the text to rewrite.
        replace: Capture-aware replacement template applied to every match.
        replace_command: Shell command that receives the whole message on
            stdin (with ``COMMIT_SHA`` in its environment) and prints the
            new message. Only run when ``pattern`` matches.
    """

    pattern: re.Pattern[str]
    replace: str | None = None
    replace_command: str | None = None

    def __post_init__(self) -> None:
        """Reject rules with both or neither substitution set."""
        if (self.replace is None) == (self.replace_command is None):
            msg = 'PreprocessorRule needs exactly one of replace or replace_command'
            raise ValueError(msg)


@dataclass(frozen=True)
class CommitParserRule:
    """Classify commits by message or body.

    Attributes:
        message: Pattern searched in the full (preprocessed) message.
        body: Pattern searched in the conventional body; only checked
            when the commit parsed as conventional and has a body.
        group: Group assigned on match.
        scope: Scope assigned on match (overrides the conventional scope).
        default_scope: Scope used when neither an explicit nor a
            conventional scope exists.
        skip: Drop matching commits (breaking ones survive under
            ``protect_breaking_commits``).
    """

    message: re.Pattern[str] | None = None
    body: re.Pattern[str] | None = None
    group: str | None = None
    scope: str | None = None
    default_scope: str | None = None
    skip: bool = False


@dataclass(frozen=True)
class LinkParserRule:
    """Extract links from commit messages.

    Attributes:
        pattern: Pattern whose matches become links.
        href: Template for the link target.
        text: Template for the link text; defaults to the matched text.
    """

    pattern: re.Pattern[str]
    href: str
    text: str | None = None


__all__ = [
    'CommitParserRule',
    'LinkParserRule',
    'PreprocessorRule',
    'expand_template',
    'replace_all',
]

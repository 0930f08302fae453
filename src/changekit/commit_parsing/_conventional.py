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


"""Conventional Commits parser.

Pure implementation: depends only on ``re``, :mod:`._types` and the
error types. No I/O, no logging, no side effects, so parsing the same
message twice always yields equal results.

Grammar::

    <type>[(<scope>)][!]: <description>
    <blank line>
    [body paragraphs]
    <blank line>
    [Token: value | Token #value | BREAKING CHANGE: value]...
"""

from __future__ import annotations

import re

from changekit.commit_parsing._types import ConventionalCommit, Footer
from changekit.errors import ParseError

SUMMARY_PATTERN: re.Pattern[str] = re.compile(
    r'^(?P<type>[A-Za-z][\w-]*)'  # type (e.g. feat, fix, chore)
    r'(?:\((?P<scope>[^()\r\n]*)\))?'  # optional scope in parens
    r'(?P<breaking>!)?'  # optional breaking change indicator
    r':\s+'  # colon + whitespace
    r'(?P<description>\S.*)$',  # description
)

FOOTER_PATTERN: re.Pattern[str] = re.compile(
    r'^(?P<token>BREAKING[ -]CHANGE|[\w-]+)(?P<separator>: | #)(?P<value>.*)$',
)

_BREAKING_TOKENS: frozenset[str] = frozenset({'BREAKING CHANGE', 'BREAKING-CHANGE'})

_PARAGRAPH_SPLIT: re.Pattern[str] = re.compile(r'\n[ \t]*\n')


def _parse_footers(block: str) -> tuple[Footer, ...]:
    """Parse a footer paragraph; non-footer lines continue the last value."""
    footers: list[Footer] = []
    for line in block.split('\n'):
        match = FOOTER_PATTERN.match(line)
        if match:
            token = match.group('token')
            footers.append(
                Footer(
                    token=token,
                    separator=match.group('separator'),
                    value=match.group('value'),
                    breaking=token in _BREAKING_TOKENS,
                ),
            )
        else:
            last = footers[-1]
            footers[-1] = Footer(
                token=last.token,
                separator=last.separator,
                value=f'{last.value}\n{line}',
                breaking=last.breaking,
            )
    return tuple(footers)


class ConventionalCommitParser:
    """Parser for `Conventional Commits <https://www.conventionalcommits.org/>`_.

    Unlike a subject-only parser, this one understands the full message:
    the body and the trailing footer block are split out, and
    ``BREAKING CHANGE`` footers mark the commit as breaking.
    """

    def parse(self, message: str) -> ConventionalCommit:
        """Parse a commit message as a Conventional Commit.

        Args:
            message: The full commit message.

        Returns:
            A :class:`ConventionalCommit` with owned copies of all fields.

        Raises:
            ParseError: If the summary line does not match
                ``type(scope)!: description``, the scope is empty, or the
                summary is not followed by a blank line.
        """
        text = message.replace('\r\n', '\n').strip()
        if not text:
            raise ParseError('missing type in commit summary')

        summary, _, rest = text.partition('\n')
        match = SUMMARY_PATTERN.match(summary.rstrip())
        if not match:
            raise ParseError(
                f'commit summary does not match "type(scope): description": {summary!r}',
            )

        scope = match.group('scope')
        if scope is not None and not scope.strip():
            raise ParseError('empty scope in commit summary')

        if rest and rest.split('\n', 1)[0].strip():
            raise ParseError('missing blank line between summary and body')

        paragraphs = [p.strip('\n') for p in _PARAGRAPH_SPLIT.split(rest.strip('\n'))] if rest.strip() else []
        footers: tuple[Footer, ...] = ()
        if paragraphs and FOOTER_PATTERN.match(paragraphs[-1].split('\n', 1)[0]):
            footers = _parse_footers(paragraphs.pop())
        body = '\n\n'.join(paragraphs) or None

        description = match.group('description').strip()
        bang = bool(match.group('breaking'))
        breaking_footer = next((f for f in footers if f.breaking), None)
        if breaking_footer is not None:
            breaking_description: str | None = breaking_footer.value
        elif bang:
            breaking_description = description
        else:
            breaking_description = None

        return ConventionalCommit(
            type=match.group('type'),
            scope=scope,
            description=description,
            body=body,
            breaking=bang or breaking_footer is not None,
            breaking_description=breaking_description,
            footers=footers,
        )

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


"""Commit value types.

A :class:`Commit` is immutable: every pipeline stage returns an updated
copy (via :func:`dataclasses.replace`) rather than mutating shared
state, so a failure in a later stage never corrupts what an earlier
stage produced in the caller's copy.

Key Concepts (ELI5)::

    ┌─────────────────────────┬─────────────────────────────────────────────┐
    │ Concept                 │ Plain-English                               │
    ├─────────────────────────┼─────────────────────────────────────────────┤
    │ Signature               │ Who did it and when: name, email, unix      │
    │                         │ timestamp.                                  │
    ├─────────────────────────┼─────────────────────────────────────────────┤
    │ Link                    │ A reference found in the message, e.g.      │
    │                         │ "#123" -> https://github.com/o/r/issues/123 │
    ├─────────────────────────┼─────────────────────────────────────────────┤
    │ Commit                  │ One commit moving through the pipeline:     │
    │                         │ raw message, parsed form, group, scope,     │
    │                         │ links, authors and GitHub attribution.      │
    └─────────────────────────┴─────────────────────────────────────────────┘
"""

from __future__ import annotations

import re
from dataclasses import dataclass
from typing import Any

from changekit.backends.vcs import RawCommit
from changekit.commit_parsing import ConventionalCommit

# "<40 hex chars> <message>", as accepted by ``--with-commit``.
SHA1_PATTERN: re.Pattern[str] = re.compile(r'^\b([a-f0-9]{40})\b (.*)$', re.DOTALL)

# Git trailer naming a co-author, matched anywhere in the raw message.
COAUTHOR_PATTERN: re.Pattern[str] = re.compile(
    r'^Co-authored-by:\s*(?P<name>.+)(<(?P<email>.+)>)',
    re.IGNORECASE | re.MULTILINE,
)


@dataclass(frozen=True)
class Signature:
    """Authorship of a commit.

    Attributes:
        name: Name on the signature, if any.
        email: Email on the signature, if any.
        timestamp: Seconds since the epoch.
    """

    name: str | None = None
    email: str | None = None
    timestamp: int = 0

    def to_dict(self) -> dict[str, Any]:
        """Return the signature as a plain mapping."""
        return {'name': self.name, 'email': self.email, 'timestamp': self.timestamp}


@dataclass(frozen=True)
class Link:
    """A reference extracted from a commit message.

    Attributes:
        text: Display text.
        href: Resolved URL or URI.
    """

    text: str
    href: str

    def to_dict(self) -> dict[str, Any]:
        """Return the link as a plain mapping."""
        return {'text': self.text, 'href': self.href}


@dataclass(frozen=True)
class Commit:
    """A commit as it moves through the processing pipeline.

    ``scope`` and ``default_scope`` stay ``None`` until the classifier
    runs. ``github_coauthors`` and ``pull_requests`` are ``None`` when
    unknown and a (possibly empty) tuple once resolved.

    Attributes:
        id: Full commit SHA; empty for custom messages.
        message: Commit message (after preprocessing, once processed).
        conv: Parsed Conventional Commit, if the message is conventional.
        group: Group assigned by a commit parser.
        default_scope: Fallback scope assigned by a commit parser.
        scope: Scope override assigned by a commit parser.
        links: Links extracted by link parsers.
        author: Commit author.
        committer: Committer.
        coauthors: Co-authors from ``Co-authored-by`` trailers.
        github_author: GitHub login of the author.
        github_coauthors: GitHub logins of the co-authors.
        pull_requests: Associated pull request numbers.
    """

    id: str = ''
    message: str = ''
    conv: ConventionalCommit | None = None
    group: str | None = None
    default_scope: str | None = None
    scope: str | None = None
    links: tuple[Link, ...] = ()
    author: Signature = Signature()
    committer: Signature = Signature()
    coauthors: tuple[Signature, ...] = ()
    github_author: str | None = None
    github_coauthors: tuple[str, ...] | None = None
    pull_requests: tuple[int, ...] | None = None

    @classmethod
    def from_line(cls, text: str) -> Commit:
        """Build a commit from ``"<sha1> <message>"`` or a bare message.

        A 40-character lowercase hex prefix followed by a space becomes the
        id; anything else leaves the id empty and keeps ``text`` whole.

        >>> Commit.from_line('8f55e69eba6e6ce811ace32bd84cc82215673cb6 feat: x').message
        'feat: x'
        >>> Commit.from_line('abc style: y').id
        ''
        """
        match = SHA1_PATTERN.match(text)
        if match:
            return cls(id=match.group(1), message=match.group(2))
        return cls(id='', message=text)

    @classmethod
    def from_record(cls, raw: RawCommit) -> Commit:
        """Build a commit from a VCS record, collecting co-authors.

        Co-authors are read from ``Co-authored-by: Name <email>`` lines
        (case-insensitive) of the raw message, independent of whether the
        message is conventional. Each co-author inherits the author
        timestamp.
        """
        author = Signature(name=raw.author_name, email=raw.author_email, timestamp=raw.author_time)
        coauthors = tuple(
            Signature(name=m.group('name'), email=m.group('email'), timestamp=raw.author_time)
            for m in COAUTHOR_PATTERN.finditer(raw.message)
        )
        return cls(
            id=raw.id,
            message=raw.message,
            author=author,
            committer=Signature(name=raw.committer_name, email=raw.committer_email, timestamp=raw.committer_time),
            coauthors=coauthors,
        )

    @property
    def effective_group(self) -> str | None:
        """The assigned group, falling back to the conventional type."""
        if self.group is not None:
            return self.group
        return self.conv.type if self.conv else None

    @property
    def effective_scope(self) -> str | None:
        """Explicit scope, then conventional scope, then default scope."""
        if self.scope is not None:
            return self.scope
        if self.conv is not None and self.conv.scope is not None:
            return self.conv.scope
        return self.default_scope

    def github_authors(self) -> list[str]:
        """Resolved GitHub logins: the author first, then co-authors."""
        authors: list[str] = []
        if self.github_author:
            authors.append(self.github_author)
        if self.github_coauthors:
            authors.extend(self.github_coauthors)
        return authors

    def pull_request_numbers(self) -> list[int]:
        """Associated pull request numbers, empty when unknown."""
        return list(self.pull_requests or ())

    def to_dict(self) -> dict[str, Any]:
        """Serialize the commit for templates and ``--context`` output.

        Conventional commits expose the description as ``message`` plus
        ``body``, ``footers``, ``breaking`` and ``breaking_description``;
        other commits expose the raw message.
        """
        data: dict[str, Any] = {'id': self.id}
        if self.conv is not None:
            data['message'] = self.conv.description
            data['body'] = self.conv.body
            data['footers'] = [f.to_dict() for f in self.conv.footers]
            data['group'] = self.effective_group
            data['breaking_description'] = self.conv.breaking_description
            data['breaking'] = self.conv.breaking
        else:
            data['message'] = self.message
            data['group'] = self.group
        data['scope'] = self.effective_scope
        data['links'] = [link.to_dict() for link in self.links]
        data['author'] = self.author.to_dict()
        data['coauthors'] = [c.to_dict() for c in self.coauthors]
        data['committer'] = self.committer.to_dict()
        data['github_author'] = self.github_author
        data['github_coauthors'] = list(self.github_coauthors) if self.github_coauthors is not None else None
        data['pull_requests'] = list(self.pull_requests) if self.pull_requests is not None else None
        data['conventional'] = self.conv is not None
        return data


__all__ = [
    'COAUTHOR_PATTERN',
    'SHA1_PATTERN',
    'Commit',
    'Link',
    'Signature',
]

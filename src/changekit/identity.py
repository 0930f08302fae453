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


"""GitHub identity and pull request resolution.

Attributes a processed commit to GitHub accounts. Resolution runs one
commit at a time against two caches that live for one changelog run::

    ┌──────────────────────┬──────────────────────────────────────────────┐
    │ Cache                │ Key → value                                  │
    ├──────────────────────┼──────────────────────────────────────────────┤
    │ usernames            │ email → login (None: no linked account)      │
    ├──────────────────────┼──────────────────────────────────────────────┤
    │ coauthors            │ ((name, email), ...) → (login, ...)          │
    │                      │ one entry per distinct co-author set         │
    └──────────────────────┴──────────────────────────────────────────────┘

Per commit::

    author       usernames[email]  ──miss──►  forge.author_of(id)
    PR numbers   trailing "(#123)" in the message, no request needed
    co-authors   every email in usernames?  ──yes──►  done
                         │ no
                         ▼
                 PR numbers known?  ──no──►  forge.pull_requests_of(id)
                         │
                         ▼
                 coauthors[key]  ──miss──►  forge.authors_of(n) for each PR

Strictly sequential resolution is what makes "at most one request per
email / per co-author set" hold without locks. Caches only ever gain
entries, so a :class:`~changekit.errors.NetworkError` half-way through a
commit leaves them valid for the next one.
"""

from __future__ import annotations

import dataclasses
import re
from collections.abc import Sequence
from dataclasses import dataclass, field

from changekit.backends.forge import IdentityForge
from changekit.commit import Commit
from changekit.logging import get_logger

logger = get_logger(__name__)

# Squash-merge suffix GitHub appends to the summary: "fix: x (#123)".
PR_SUFFIX_PATTERN: re.Pattern[str] = re.compile(r'\s\(#(\d+)\)$', re.MULTILINE)

CoauthorKey = tuple[tuple[str, str], ...]


@dataclass
class IdentityCaches:
    """Lookup results shared by every commit of one run.

    Attributes:
        usernames: Author email to GitHub login. ``None`` records that
            GitHub knows the commit but the email is not linked to an
            account, so the lookup is not repeated.
        coauthors: Ordered ``(name, email)`` pairs of a commit's
            co-authors to the logins found on its pull requests.
    """

    usernames: dict[str, str | None] = field(default_factory=dict)
    coauthors: dict[CoauthorKey, tuple[str, ...]] = field(default_factory=dict)


def pull_requests_from_message(message: str) -> tuple[int, ...] | None:
    """Return the PR number of a trailing ``(#123)``, or ``None``.

    >>> pull_requests_from_message('feat: add x (#42)')
    (42,)
    """
    match = PR_SUFFIX_PATTERN.search(message)
    if match is None:
        return None
    return (int(match.group(1)),)


def coauthor_key(commit: Commit) -> CoauthorKey:
    """The cache key for a commit's co-authors: pairs with both fields set."""
    return tuple(
        (c.name, c.email) for c in commit.coauthors if c.name is not None and c.email is not None
    )


async def _resolve_author(commit: Commit, forge: IdentityForge, caches: IdentityCaches) -> str | None:
    email = commit.author.email
    if email is None:
        return None
    if email in caches.usernames:
        logger.debug('identity_cache_hit', email=email)
        return caches.usernames[email]
    login = await forge.author_of(commit.id)
    caches.usernames[email] = login
    logger.debug('identity_resolved', email=email, login=login)
    return login


async def resolve_identity(
    commit: Commit,
    *,
    forge: IdentityForge,
    caches: IdentityCaches,
    resolve_authors: bool = False,
) -> Commit:
    """Resolve the GitHub author, co-authors and pull requests of a commit.

    Args:
        commit: A processed commit.
        forge: The hosting API client.
        caches: The run's caches; updated in place.
        resolve_authors: Look up the author's login (one request per new
            email).

    Returns:
        A copy of ``commit`` with ``github_author``, ``github_coauthors``
        and ``pull_requests`` filled in where they could be resolved.

    Raises:
        NetworkError: If a request fails. Entries cached before the
            failure are kept.
    """
    github_author = commit.github_author
    if resolve_authors:
        github_author = await _resolve_author(commit, forge, caches)

    pull_requests = pull_requests_from_message(commit.message)
    if pull_requests is None:
        pull_requests = commit.pull_requests

    github_coauthors = commit.github_coauthors
    if commit.coauthors:
        from_emails = [
            caches.usernames.get(c.email) for c in commit.coauthors if c.email is not None
        ]
        resolved = [login for login in from_emails if login is not None]
        if len(resolved) == len(commit.coauthors):
            github_coauthors = tuple(resolved)
        else:
            if pull_requests is None:
                pull_requests = tuple(await forge.pull_requests_of(commit.id))
            key = coauthor_key(commit)
            if key in caches.coauthors:
                logger.debug('coauthor_cache_hit', coauthors=len(key))
                github_coauthors = caches.coauthors[key]
            else:
                logins: list[str] = []
                for number in pull_requests:
                    logins.extend(await forge.authors_of(number))
                github_coauthors = tuple(logins)
                caches.coauthors[key] = github_coauthors
                logger.debug('coauthors_resolved', pull_requests=list(pull_requests), logins=logins)

    return dataclasses.replace(
        commit,
        github_author=github_author,
        github_coauthors=github_coauthors,
        pull_requests=pull_requests,
    )


async def resolve_commits(
    commits: Sequence[Commit],
    *,
    forge: IdentityForge,
    caches: IdentityCaches,
    resolve_authors: bool = False,
) -> list[Commit]:
    """Resolve ``commits`` one after another, sharing ``caches``.

    Raises:
        NetworkError: On the first failing request; commits after it are
            not resolved.
    """
    resolved: list[Commit] = []
    for commit in commits:
        resolved.append(
            await resolve_identity(commit, forge=forge, caches=caches, resolve_authors=resolve_authors)
        )
    return resolved


__all__ = [
    'PR_SUFFIX_PATTERN',
    'CoauthorKey',
    'IdentityCaches',
    'coauthor_key',
    'pull_requests_from_message',
    'resolve_commits',
    'resolve_identity',
]

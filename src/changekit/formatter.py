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


"""Default Markdown layout, used when no body template is configured.

Output for one release::

    ## [1.0.0] - 2024-05-01

    ### Features

    #### - Api, Cli

    - [`8f55e69`](https://github.com/o/r/commit/8f55e69...) Add xyz by [@alice](https://github.com/alice) in [#12](https://github.com/o/r/pull/12)
      　
      > Body line one
      > Body line two

    ---

    _This changelog is generated by changekit,_
    _**You can also view the full changes: https://github.com/o/r/compare/v0.9.0..v1.0.0**_

    ---

Groups are sorted lexicographically, so ``"1. Features"`` sorts before
``"2. Fixes"`` and renders as ``### Features``. Scopes keep the order in
which they first appear.
"""

from __future__ import annotations

import re
from collections.abc import Sequence
from datetime import datetime, timezone

from changekit.commit import Commit
from changekit.release import Release

# Opening line of the footer printed after every release.
ATTRIBUTION = '_This changelog is generated by changekit'

_GROUP_ORDER_PREFIX = re.compile(r'^\d+')
_GROUP_SEPARATOR_PREFIX = re.compile(r'^(?:\. )+')

# GitHub squash-merge bodies list the squashed commits as "* feat: x".
_SQUASH_BODY = re.compile(r'\*\s\w+')


def upper_first(value: str) -> str:
    """Uppercase the first character of ``value``.

    >>> upper_first('add xyz')
    'Add xyz'
    """
    return value[:1].upper() + value[1:]


def group_title(group: str) -> str:
    """Strip the ordering prefix from a group name.

    >>> group_title('1. Features')
    'Features'
    """
    return _GROUP_SEPARATOR_PREFIX.sub('', _GROUP_ORDER_PREFIX.sub('', group))


def _scope_title(scope: str) -> str:
    return ', '.join(upper_first(part.strip()) for part in scope.split(','))


def _group_commits(commits: Sequence[Commit]) -> dict[str, dict[str | None, list[Commit]]]:
    grouped: dict[str, dict[str | None, list[Commit]]] = {}
    for commit in commits:
        group = commit.effective_group
        if group is None:
            continue
        grouped.setdefault(group, {}).setdefault(commit.effective_scope, []).append(commit)
    return {group: grouped[group] for group in sorted(grouped)}


def _commit_line(commit: Commit, repo_url: str | None, repo_owner: str | None) -> str:
    message = upper_first(commit.conv.description if commit.conv is not None else commit.message)

    authors = commit.github_authors()
    if authors and authors != [repo_owner]:
        message += ' by ' + ' and '.join(f'[@{a}](https://github.com/{a})' for a in authors)

    prs = commit.pull_request_numbers()
    if prs and repo_url is not None:
        message += ' in ' + ' and '.join(f'[#{n}]({repo_url}/pull/{n})' for n in prs)

    if not commit.id:
        return f'- {message}\n'
    short = commit.id[:7]
    if repo_url is not None:
        return f'- [`{short}`]({repo_url}/commit/{commit.id}) {message}\n'
    return f'- `{short}` {message}\n'


def _commit_body(commit: Commit) -> str:
    body = commit.conv.body if commit.conv is not None else None
    if not body or _SQUASH_BODY.match(body):
        return ''
    # The ideographic space keeps the spacer line from collapsing.
    return '  　\n' + ''.join(f'  > {line}\n' for line in body.splitlines())


def _footer(release: Release, repo_url: str | None) -> str:
    if repo_url is None:
        return f'{ATTRIBUTION}_\n\n---\n\n'
    previous = release.previous.version if release.previous is not None else None
    if previous is not None:
        target = f'compare/{previous}..{release.version or "HEAD"}'
    else:
        target = 'commits/HEAD'
    return f'{ATTRIBUTION},_\n_**You can also view the full changes: {repo_url}/{target}**_\n\n---\n\n'


def render_default(release: Release, github_repo: str | None = None) -> str:
    """Render one release in the default layout.

    Args:
        release: The release to render.
        github_repo: ``owner/name``; enables commit/PR/compare links and
            hides attribution to the repository owner.

    Returns:
        The Markdown text.
    """
    repo_url = f'https://github.com/{github_repo}' if github_repo else None
    repo_owner = github_repo.split('/', 1)[0] if github_repo else None

    parts: list[str] = []
    if release.version is not None:
        date = datetime.fromtimestamp(release.timestamp, tz=timezone.utc).strftime('%Y-%m-%d')
        parts.append(f'## [{release.version.lstrip("v")}] - {date}\n\n')
    else:
        parts.append('## [Unreleased]\n\n')

    for group, scopes in _group_commits(release.commits).items():
        parts.append(f'### {group_title(group)}\n')
        for scope, commits in scopes.items():
            if scope is not None:
                parts.append(f'\n#### - {_scope_title(scope)}\n\n')
            for commit in commits:
                parts.append(_commit_line(commit, repo_url, repo_owner))
                parts.append(_commit_body(commit))
        parts.append('\n---\n\n')

    parts.append(_footer(release, repo_url))
    return ''.join(parts)


def render_releases(releases: Sequence[Release], github_repo: str | None = None) -> str:
    """Render every release, in the given order, in the default layout."""
    return ''.join(render_default(release, github_repo) for release in releases)


__all__ = [
    'ATTRIBUTION',
    'group_title',
    'render_default',
    'render_releases',
    'upper_first',
]

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


"""Git VCS backend for changekit.

The :class:`GitCLIBackend` implements the :class:`VCS` protocol by
delegating to ``git`` via :func:`run_command`.

All methods are async; blocking subprocess calls are dispatched to
``asyncio.to_thread()`` to avoid blocking the event loop.

Commit records are read with a delimiter-based ``--pretty`` format so
multi-line messages survive intact::

    %H NUL %an NUL %ae NUL %at NUL %cn NUL %ce NUL %ct NUL %B RS
"""

from __future__ import annotations

import asyncio
import fnmatch
import re
from pathlib import Path

from changekit.backends._run import CommandResult, run_command
from changekit.backends.vcs._types import RawCommit
from changekit.errors import E, VCSError
from changekit.logging import get_logger

log = get_logger('changekit.backends.git')

_FIELD_SEP = '\x00'
_RECORD_SEP = '\x1e'
_LOG_FORMAT = '%x00'.join(['%H', '%an', '%ae', '%at', '%cn', '%ce', '%ct', '%B']) + '%x1e'

# git@github.com:owner/repo.git, https://github.com/owner/repo, ssh://git@github.com/owner/repo.git
_GITHUB_REMOTE = re.compile(r'github\.com[:/](?P<owner>[^/\s]+)/(?P<repo>[^/\s]+?)(?:\.git)?/?$')


def parse_github_repo(url: str) -> str | None:
    """Extract ``owner/repo`` from a GitHub remote URL.

    >>> parse_github_repo('git@github.com:orhun/git-cliff.git')
    'orhun/git-cliff'
    >>> parse_github_repo('https://gitlab.com/a/b') is None
    True
    """
    match = _GITHUB_REMOTE.search(url.strip())
    if not match:
        return None
    return f'{match.group("owner")}/{match.group("repo")}'


def _or_none(value: str) -> str | None:
    return value or None


class GitCLIBackend:
    """Default :class:`~changekit.backends.vcs.VCS` implementation using ``git``.

    Args:
        repo_root: Path to the git repository (any directory inside it).
    """

    def __init__(self, repo_root: Path) -> None:
        """Initialize with the git repository root path."""
        self._root = repo_root

    def _git(self, *args: str) -> CommandResult:
        """Run a git command synchronously (called via to_thread)."""
        return run_command(['git', *args], cwd=self._root)

    async def _git_checked(self, *args: str) -> CommandResult:
        try:
            result = await asyncio.to_thread(self._git, *args)
        except OSError as exc:
            raise VCSError(E.VCS_FAILED, f'Failed to run git: {exc}', hint='Is git installed and on PATH?') from exc
        if not result.ok:
            raise VCSError(
                E.VCS_FAILED,
                f'git {args[0]} failed: {result.stderr.strip() or result.return_code}',
                hint=f'Check that {self._root} is a git repository.',
            )
        return result

    async def commits(
        self,
        range: str | None = None,
        *,
        include_paths: list[str] | None = None,
        exclude_paths: list[str] | None = None,
    ) -> list[RawCommit]:
        """Return commit records for a range, newest first."""
        cmd_parts = ['log', f'--pretty=format:{_LOG_FORMAT}', range or 'HEAD']
        pathspecs = [*(include_paths or []), *(f':(exclude){p}' for p in exclude_paths or [])]
        if pathspecs:
            cmd_parts.append('--')
            cmd_parts.extend(pathspecs)
        result = await self._git_checked(*cmd_parts)

        records: list[RawCommit] = []
        for chunk in result.stdout.split(_RECORD_SEP):
            chunk = chunk.lstrip('\n')
            if not chunk:
                continue
            fields = chunk.split(_FIELD_SEP, 7)
            if len(fields) != 8:
                log.warning('malformed_log_record', record=chunk[:80])
                continue
            sha, an, ae, at, cn, ce, ct, message = fields
            records.append(
                RawCommit(
                    id=sha,
                    message=message.rstrip('\n'),
                    author_name=_or_none(an),
                    author_email=_or_none(ae),
                    author_time=int(at or 0),
                    committer_name=_or_none(cn),
                    committer_email=_or_none(ce),
                    committer_time=int(ct or 0),
                ),
            )
        log.debug('git_commits', range=range or 'HEAD', count=len(records))
        return records

    async def tags(self, pattern: str | None = None, *, date_order: bool = False) -> dict[str, str]:
        """Return ``{commit_id: tag_name}``, oldest tag first.

        Annotated tags are peeled to the commit they point at.
        """
        sort_key = 'creatordate' if date_order else 'version:refname'
        result = await self._git_checked(
            'for-each-ref',
            f'--sort={sort_key}',
            '--format=%(refname:short)%00%(objectname)%00%(*objectname)',
            'refs/tags',
        )
        tags: dict[str, str] = {}
        for line in result.stdout.splitlines():
            if not line.strip():
                continue
            name, object_id, peeled_id = (line.split(_FIELD_SEP) + ['', ''])[:3]
            if pattern and not fnmatch.fnmatchcase(name, pattern):
                continue
            tags[peeled_id or object_id] = name
        log.debug('git_tags', count=len(tags), pattern=pattern or '*')
        return tags

    async def current_tag(self) -> str | None:
        """Return the tag pointing exactly at HEAD, if any."""
        result = await asyncio.to_thread(self._git, 'describe', '--tags', '--exact-match', 'HEAD')
        if not result.ok:
            return None
        return result.stdout.strip() or None

    async def root_commit(self) -> str | None:
        """Return the id of the oldest root commit reachable from HEAD."""
        result = await asyncio.to_thread(self._git, 'rev-list', '--max-parents=0', 'HEAD')
        if not result.ok or not result.stdout.strip():
            return None
        return result.stdout.strip().splitlines()[-1]

    async def remote_url(self, remote: str = 'origin') -> str | None:
        """Return the configured URL of ``remote``."""
        result = await asyncio.to_thread(self._git, 'config', '--get', f'remote.{remote}.url')
        if not result.ok:
            return None
        return result.stdout.strip() or None


__all__ = [
    'GitCLIBackend',
    'parse_github_repo',
]

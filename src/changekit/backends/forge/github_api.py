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


"""GitHub REST API identity backend for changekit.

Implements the :class:`~changekit.backends.forge.IdentityForge` protocol
using the GitHub REST API v3 via ``httpx``::

    author_of(sha)          GET /repos/{repo}/commits/{sha}         → author.login
    pull_requests_of(sha)   GET /repos/{repo}/commits/{sha}/pulls   → [number, ...]
    authors_of(n)           GET /repos/{repo}/pulls/{n}/commits     → [author.login, ...]

Authentication:

    Resolves a token in order of precedence:

    1. ``token`` constructor parameter.
    2. ``GITHUB_TOKEN`` env var (set automatically by GitHub Actions).
    3. ``GH_TOKEN`` env var (used by the ``gh`` CLI).

    Unlike release publishing, reading public commits works without a
    token, so a missing token only means anonymous rate limits.

Usage::

    from changekit.backends.forge.github_api import GitHubAPIBackend

    forge = GitHubAPIBackend('orhun/git-cliff')
    login = await forge.author_of('8f55e69eba6e6ce811ace32bd84cc82215673cb6')

.. seealso::

    `GitHub REST API <https://docs.github.com/en/rest>`_
"""

from __future__ import annotations

import json
import os
from typing import Any

import httpx

import changekit
from changekit.errors import NetworkError
from changekit.logging import get_logger
from changekit.net import DEFAULT_POOL_SIZE, DEFAULT_TIMEOUT, http_client, request_with_retry

log = get_logger('changekit.backends.forge.github_api')

# GitHub REST API base URL.
_DEFAULT_BASE_URL = 'https://api.github.com'

# API version header for stable API behavior.
_API_VERSION = '2022-11-28'

# Fixed client identifier sent with every request.
USER_AGENT = f'changekit/{changekit.__version__}'


class GitHubAPIBackend:
    """Identity lookups against the GitHub REST API.

    Every call opens its own pooled client; resolution is sequential, so
    there is never more than one request in flight.

    Args:
        repo: Repository coordinate, ``"owner/name"``.
        token: GitHub API token. Falls back to ``GITHUB_TOKEN`` or
            ``GH_TOKEN`` env vars; anonymous when none is set.
        base_url: API base URL (override for GitHub Enterprise Server).
        pool_size: HTTP connection pool size.
        timeout: HTTP request timeout in seconds.
        max_retries: Transport-level retries for 429/5xx/connection errors.
    """

    def __init__(
        self,
        repo: str,
        *,
        token: str = '',
        base_url: str = _DEFAULT_BASE_URL,
        pool_size: int = DEFAULT_POOL_SIZE,
        timeout: float = DEFAULT_TIMEOUT,
        max_retries: int = 0,
    ) -> None:
        """Initialize with the repository coordinate and optional token."""
        self._repo = repo
        self._base_url = base_url.rstrip('/')
        self._repo_url = f'{self._base_url}/repos/{repo}'
        self._pool_size = pool_size
        self._timeout = timeout
        self._max_retries = max_retries

        self._headers = {
            'Accept': 'application/vnd.github+json',
            'User-Agent': USER_AGENT,
            'X-GitHub-Api-Version': _API_VERSION,
        }
        # Resolve auth: explicit token > GITHUB_TOKEN > GH_TOKEN.
        resolved_token = token or os.environ.get('GITHUB_TOKEN', '') or os.environ.get('GH_TOKEN', '')
        if resolved_token:
            self._headers['Authorization'] = f'Bearer {resolved_token}'
        else:
            log.debug('github_api_anonymous', repo=repo)

    def __repr__(self) -> str:
        """Return a safe repr that never exposes the API token."""
        return f'GitHubAPIBackend(repo={self._repo!r}, base_url={self._base_url!r})'

    async def _get_json(self, path: str) -> Any:  # noqa: ANN401 - arbitrary JSON
        """GET ``{repo_url}{path}`` and decode the JSON body.

        Raises:
            NetworkError: On transport errors, non-2xx statuses, or a body
                that is not JSON.
        """
        url = f'{self._repo_url}{path}'
        try:
            async with http_client(
                pool_size=self._pool_size,
                timeout=self._timeout,
                headers=self._headers,
            ) as client:
                response = await request_with_retry(client, 'GET', url, max_retries=self._max_retries)
        except httpx.HTTPError as exc:
            raise NetworkError(f'GET {url} failed: {exc}') from exc

        log.debug('github_api_get', url=url, status=response.status_code)
        if not response.is_success:
            raise NetworkError(
                f'GET {url} returned {response.status_code}: {response.text[:200]}',
                hint='Pass --github-token or set GITHUB_TOKEN to avoid anonymous rate limits.',
            )
        try:
            return response.json()
        except json.JSONDecodeError as exc:
            raise NetworkError(f'GET {url} returned malformed JSON: {exc}') from exc

    async def author_of(self, commit_id: str) -> str | None:
        """Return the login of the commit's author, if linked to an account."""
        data = await self._get_json(f'/commits/{commit_id}')
        return _login(data)

    async def pull_requests_of(self, commit_id: str) -> list[int]:
        """Return the numbers of the pull requests containing the commit."""
        data = await self._get_json(f'/commits/{commit_id}/pulls')
        if not isinstance(data, list):
            raise NetworkError(f'Expected a list of pull requests for {commit_id}, got {type(data).__name__}')
        return [pr['number'] for pr in data if isinstance(pr, dict) and isinstance(pr.get('number'), int)]

    async def authors_of(self, pr_number: int) -> list[str]:
        """Return the author logins of the commits in a pull request."""
        data = await self._get_json(f'/pulls/{pr_number}/commits')
        if not isinstance(data, list):
            raise NetworkError(f'Expected a list of commits for #{pr_number}, got {type(data).__name__}')
        logins: list[str] = []
        for entry in data:
            login = _login(entry)
            if login is not None:
                logins.append(login)
        return logins


def _login(entry: Any) -> str | None:  # noqa: ANN401 - arbitrary JSON
    """Extract ``author.login`` from a commit object."""
    if not isinstance(entry, dict):
        return None
    author = entry.get('author')
    if not isinstance(author, dict):
        return None
    login = author.get('login')
    return login if isinstance(login, str) else None


__all__ = [
    'USER_AGENT',
    'GitHubAPIBackend',
]

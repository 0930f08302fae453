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


"""Tests for the GitHub REST API identity backend.

Uses httpx mock transport to avoid real network calls.
"""

from __future__ import annotations

import json
from collections.abc import AsyncGenerator, Callable
from contextlib import asynccontextmanager
from typing import Any
from unittest.mock import patch

import httpx
import pytest
from changekit.backends.forge import IdentityForge
from changekit.backends.forge.github_api import USER_AGENT, GitHubAPIBackend
from changekit.errors import E, NetworkError

_SHA = '8f55e69eba6e6ce811ace32bd84cc82215673cb6'

# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------


def _mock_transport(responses: dict[str, tuple[int, str]]) -> Callable[[httpx.Request], httpx.Response]:
    """Create a mock transport handler keyed by URL suffix."""

    def handler(request: httpx.Request) -> httpx.Response:
        url = str(request.url)
        for suffix, (status, body) in responses.items():
            if url.endswith(suffix):
                return httpx.Response(status, text=body)
        return httpx.Response(404, text='Not found')

    return handler


def _make_client_cm(transport: Any) -> Any:  # noqa: ANN401
    """Create a context manager that yields an httpx.AsyncClient with mock transport."""

    @asynccontextmanager
    async def _client_cm(**kw: Any) -> AsyncGenerator[httpx.AsyncClient]:  # noqa: ANN401
        async with httpx.AsyncClient(
            transport=httpx.MockTransport(transport),
            headers=kw.get('headers'),
        ) as client:
            yield client

    return _client_cm


def _patched(responses: dict[str, tuple[int, str]]) -> Any:  # noqa: ANN401
    return patch(
        'changekit.backends.forge.github_api.http_client',
        _make_client_cm(_mock_transport(responses)),
    )


@pytest.fixture()
def gh() -> GitHubAPIBackend:
    """Create a GitHubAPIBackend fixture."""
    return GitHubAPIBackend('orhun/git-cliff', token='fake-token')


# ---------------------------------------------------------------------------
# Init / Auth
# ---------------------------------------------------------------------------


class TestInit:
    """Tests for Init."""

    def test_satisfies_protocol(self, gh: GitHubAPIBackend) -> None:
        """Test satisfies protocol."""
        assert isinstance(gh, IdentityForge)

    def test_explicit_token(self) -> None:
        """Test explicit token."""
        api = GitHubAPIBackend('o/r', token='tok')
        assert api._headers['Authorization'] == 'Bearer tok'

    def test_env_github_token(self) -> None:
        """Test env github token."""
        with patch.dict('os.environ', {'GITHUB_TOKEN': 'env-tok', 'GH_TOKEN': 'gh-tok'}):
            api = GitHubAPIBackend('o/r')
            assert api._headers['Authorization'] == 'Bearer env-tok'

    def test_env_gh_token(self) -> None:
        """Test env gh token."""
        with patch.dict('os.environ', {'GITHUB_TOKEN': '', 'GH_TOKEN': 'gh-tok'}):
            api = GitHubAPIBackend('o/r')
            assert api._headers['Authorization'] == 'Bearer gh-tok'

    def test_anonymous(self) -> None:
        """No token at all still works, just without Authorization."""
        with patch.dict('os.environ', {'GITHUB_TOKEN': '', 'GH_TOKEN': ''}):
            api = GitHubAPIBackend('o/r')
            assert 'Authorization' not in api._headers

    def test_custom_base_url(self) -> None:
        """Test custom base url."""
        api = GitHubAPIBackend('o/r', token='t', base_url='https://ghe.corp.com/api/v3/')
        assert api._repo_url == 'https://ghe.corp.com/api/v3/repos/o/r'

    def test_repr_hides_token(self, gh: GitHubAPIBackend) -> None:
        """Test repr hides token."""
        text = repr(gh)
        assert 'fake-token' not in text
        assert 'orhun/git-cliff' in text


# ---------------------------------------------------------------------------
# Lookups
# ---------------------------------------------------------------------------


class TestAuthorOf:
    """Tests for author_of."""

    @pytest.mark.asyncio()
    async def test_login(self, gh: GitHubAPIBackend) -> None:
        """Test login."""
        body = json.dumps({'sha': _SHA, 'author': {'login': 'orhun'}})
        with _patched({f'/repos/orhun/git-cliff/commits/{_SHA}': (200, body)}):
            assert await gh.author_of(_SHA) == 'orhun'

    @pytest.mark.asyncio()
    async def test_unlinked_author(self, gh: GitHubAPIBackend) -> None:
        """An email not linked to an account has a null author."""
        body = json.dumps({'sha': _SHA, 'author': None})
        with _patched({f'/commits/{_SHA}': (200, body)}):
            assert await gh.author_of(_SHA) is None

    @pytest.mark.asyncio()
    async def test_sends_headers(self, gh: GitHubAPIBackend) -> None:
        """Test sends headers."""
        seen: list[httpx.Request] = []

        def handler(request: httpx.Request) -> httpx.Response:
            seen.append(request)
            return httpx.Response(200, json={'author': {'login': 'a'}})

        with patch('changekit.backends.forge.github_api.http_client', _make_client_cm(handler)):
            await gh.author_of(_SHA)
        headers = seen[0].headers
        assert headers['Authorization'] == 'Bearer fake-token'
        assert headers['User-Agent'] == USER_AGENT
        assert headers['Accept'] == 'application/vnd.github+json'
        assert headers['X-GitHub-Api-Version'] == '2022-11-28'

    @pytest.mark.asyncio()
    async def test_not_found(self, gh: GitHubAPIBackend) -> None:
        """Test not found."""
        with _patched({}):
            with pytest.raises(NetworkError) as exc_info:
                await gh.author_of(_SHA)
        assert exc_info.value.code == E.NETWORK_FAILED
        assert '404' in exc_info.value.message

    @pytest.mark.asyncio()
    async def test_malformed_json(self, gh: GitHubAPIBackend) -> None:
        """Test malformed json."""
        with _patched({f'/commits/{_SHA}': (200, '<html>')}):
            with pytest.raises(NetworkError, match='malformed JSON'):
                await gh.author_of(_SHA)

    @pytest.mark.asyncio()
    async def test_transport_error(self, gh: GitHubAPIBackend) -> None:
        """Test transport error."""

        def handler(request: httpx.Request) -> httpx.Response:
            raise httpx.ConnectError('refused', request=request)

        with patch('changekit.backends.forge.github_api.http_client', _make_client_cm(handler)):
            with pytest.raises(NetworkError, match='refused'):
                await gh.author_of(_SHA)


class TestPullRequestsOf:
    """Tests for pull_requests_of."""

    @pytest.mark.asyncio()
    async def test_numbers(self, gh: GitHubAPIBackend) -> None:
        """Test numbers."""
        body = json.dumps([{'number': 42}, {'number': 7}, {'title': 'no number'}])
        with _patched({f'/commits/{_SHA}/pulls': (200, body)}):
            assert await gh.pull_requests_of(_SHA) == [42, 7]

    @pytest.mark.asyncio()
    async def test_not_a_list(self, gh: GitHubAPIBackend) -> None:
        """Test not a list."""
        with _patched({f'/commits/{_SHA}/pulls': (200, '{}')}):
            with pytest.raises(NetworkError):
                await gh.pull_requests_of(_SHA)


class TestAuthorsOf:
    """Tests for authors_of."""

    @pytest.mark.asyncio()
    async def test_logins(self, gh: GitHubAPIBackend) -> None:
        """Commits without a linked account are left out."""
        body = json.dumps([
            {'author': {'login': 'alice'}},
            {'author': None},
            {'author': {'login': 'bob'}},
        ])
        with _patched({'/pulls/42/commits': (200, body)}):
            assert await gh.authors_of(42) == ['alice', 'bob']

    @pytest.mark.asyncio()
    async def test_server_error(self, gh: GitHubAPIBackend) -> None:
        """Test server error."""
        with _patched({'/pulls/42/commits': (500, 'oops')}):
            with pytest.raises(NetworkError):
                await gh.authors_of(42)

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


"""Tests for changekit.net module.

Uses httpx mock transport to avoid real network calls.
"""

from __future__ import annotations

import httpx
import pytest
from changekit.logging import configure_logging
from changekit.net import http_client, request_with_retry

configure_logging(quiet=True)


def _sequence(*outcomes: int | Exception) -> tuple[httpx.MockTransport, list[httpx.Request]]:
    """Return a transport that replays ``outcomes`` and the list of requests it saw."""
    seen: list[httpx.Request] = []
    queue = list(outcomes)

    def handler(request: httpx.Request) -> httpx.Response:
        seen.append(request)
        outcome = queue.pop(0)
        if isinstance(outcome, Exception):
            raise outcome
        return httpx.Response(outcome, json={'status': outcome})

    return httpx.MockTransport(handler), seen


@pytest.fixture()
def no_sleep(monkeypatch: pytest.MonkeyPatch) -> list[float]:
    """Record backoff delays instead of sleeping."""
    delays: list[float] = []

    async def _sleep(delay: float) -> None:
        delays.append(delay)

    monkeypatch.setattr('changekit.net.asyncio.sleep', _sleep)
    return delays


class TestHttpClient:
    """Tests for http_client() context manager."""

    @pytest.mark.asyncio()
    async def test_applies_settings(self) -> None:
        """Base URL, headers and timeout land on the client."""
        async with http_client(base_url='https://api.example.com', headers={'X-Test': '1'}, timeout=5.0) as client:
            assert client.base_url.host == 'api.example.com'
            assert client.headers['X-Test'] == '1'
            assert client.timeout.read == 5.0


class TestRequestWithRetry:
    """Tests for request_with_retry()."""

    @pytest.mark.asyncio()
    async def test_no_retry_by_default(self, no_sleep: list[float]) -> None:
        """A 503 is returned as-is when retries are off."""
        transport, seen = _sequence(503)
        async with httpx.AsyncClient(transport=transport) as client:
            response = await request_with_retry(client, 'GET', 'https://x/y')
        assert response.status_code == 503
        assert len(seen) == 1
        assert no_sleep == []

    @pytest.mark.asyncio()
    async def test_retries_then_succeeds(self, no_sleep: list[float]) -> None:
        """Test retries then succeeds."""
        transport, seen = _sequence(429, 502, 200)
        async with httpx.AsyncClient(transport=transport) as client:
            response = await request_with_retry(client, 'GET', 'https://x/y', max_retries=3, backoff_base=0.5)
        assert response.status_code == 200
        assert len(seen) == 3
        assert no_sleep == [0.5, 1.0]

    @pytest.mark.asyncio()
    async def test_gives_up_with_last_response(self, no_sleep: list[float]) -> None:
        """Test gives up with last response."""
        transport, seen = _sequence(500, 500)
        async with httpx.AsyncClient(transport=transport) as client:
            response = await request_with_retry(client, 'GET', 'https://x/y', max_retries=1)
        assert response.status_code == 500
        assert len(seen) == 2
        assert no_sleep == [1.0]

    @pytest.mark.asyncio()
    async def test_404_not_retried(self, no_sleep: list[float]) -> None:
        """404 should not be retried (not in RETRYABLE_STATUS_CODES)."""
        transport, seen = _sequence(404)
        async with httpx.AsyncClient(transport=transport) as client:
            response = await request_with_retry(client, 'GET', 'https://x/y', max_retries=2)
        assert response.status_code == 404
        assert len(seen) == 1

    @pytest.mark.asyncio()
    async def test_connect_error_retried(self, no_sleep: list[float]) -> None:
        """Test connect error retried."""
        transport, seen = _sequence(httpx.ConnectError('refused'), 200)
        async with httpx.AsyncClient(transport=transport) as client:
            response = await request_with_retry(client, 'GET', 'https://x/y', max_retries=1)
        assert response.status_code == 200
        assert len(seen) == 2

    @pytest.mark.asyncio()
    async def test_connect_error_reraised(self, no_sleep: list[float]) -> None:
        """Test connect error reraised."""
        transport, _ = _sequence(httpx.ConnectError('refused'))
        async with httpx.AsyncClient(transport=transport) as client:
            with pytest.raises(httpx.ConnectError):
                await request_with_retry(client, 'GET', 'https://x/y')

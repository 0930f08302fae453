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

"""Async HTTP plumbing for GitHub lookups.

:func:`http_client` opens one pooled :class:`httpx.AsyncClient` per
lookup; :func:`request_with_retry` issues a request under an optional
retry policy. Retries are off by default (``[github] max_retries = 0``):
a failed lookup leaves that one commit unattributed instead of slowing
the whole run down.

Usage::

    from changekit.net import http_client, request_with_retry

    async with http_client(base_url='https://api.github.com') as client:
        response = await request_with_retry(client, 'GET', '/repos/orhun/git-cliff')
"""

from __future__ import annotations

import asyncio
from collections.abc import AsyncGenerator
from contextlib import asynccontextmanager
from typing import Final

import httpx

from changekit.logging import get_logger

log = get_logger('changekit.net')

DEFAULT_POOL_SIZE: Final[int] = 10
DEFAULT_TIMEOUT: Final[float] = 30.0

MAX_RETRIES: Final[int] = 0
RETRY_BACKOFF_BASE: Final[float] = 1.0

# Rate limiting and server-side failures; anything else is final.
RETRYABLE_STATUS_CODES: Final[frozenset[int]] = frozenset({429, 500, 502, 503, 504})

# Transport failures worth another attempt.
_RETRYABLE_ERRORS = (httpx.ConnectError, httpx.TimeoutException)


@asynccontextmanager
async def http_client(
    *,
    pool_size: int = DEFAULT_POOL_SIZE,
    timeout: float = DEFAULT_TIMEOUT,
    base_url: str = '',
    headers: dict[str, str] | None = None,
) -> AsyncGenerator[httpx.AsyncClient]:
    """Yield a pooled client that follows redirects.

    Args:
        pool_size: Connection and keep-alive limit.
        timeout: Per-request timeout in seconds.
        base_url: Prefix for relative request URLs.
        headers: Headers sent with every request.
    """
    limits = httpx.Limits(max_connections=pool_size, max_keepalive_connections=pool_size)
    async with httpx.AsyncClient(
        base_url=base_url,
        headers=headers or {},
        limits=limits,
        timeout=httpx.Timeout(timeout),
        follow_redirects=True,
    ) as client:
        yield client


def _backoff(attempt: int, base: float) -> float:
    return base * (2**attempt)


async def request_with_retry(
    client: httpx.AsyncClient,
    method: str,
    url: str,
    *,
    max_retries: int = MAX_RETRIES,
    backoff_base: float = RETRY_BACKOFF_BASE,
    **kwargs: object,
) -> httpx.Response:
    """Send a request, repeating it up to ``max_retries`` more times.

    A response whose status is in :data:`RETRYABLE_STATUS_CODES`, a
    connect error or a timeout triggers another attempt after an
    exponential delay, while attempts remain. ``max_retries=0`` sends
    exactly one request.

    Returns:
        The final response, whatever its status.

    Raises:
        httpx.TransportError: The final attempt failed in transport.
    """
    for attempt in range(max_retries + 1):
        last = attempt == max_retries
        try:
            response = await client.request(method, url, **kwargs)  # type: ignore[arg-type]
        except _RETRYABLE_ERRORS as exc:
            if last:
                raise
            log.warning('http_retry_error', url=url, error=str(exc), attempt=attempt + 1)
        else:
            if last or response.status_code not in RETRYABLE_STATUS_CODES:
                return response
            log.warning('http_retry', url=url, status=response.status_code, attempt=attempt + 1)
        await asyncio.sleep(_backoff(attempt, backoff_base))
    raise AssertionError('unreachable')  # pragma: no cover


__all__ = [
    'DEFAULT_POOL_SIZE',
    'DEFAULT_TIMEOUT',
    'MAX_RETRIES',
    'RETRYABLE_STATUS_CODES',
    'http_client',
    'request_with_retry',
]

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


"""Hosting-platform identity protocol for changekit.

The :class:`IdentityForge` protocol is the whole contract the identity
resolver needs from a code host: three read-only lookups, each a single
request. Implementations:

- :class:`~changekit.backends.forge.github_api.GitHubAPIBackend`: GitHub REST API

Any failure (transport error, non-2xx status, malformed JSON) surfaces
as :class:`~changekit.errors.NetworkError`.
"""

from __future__ import annotations

from typing import Protocol, runtime_checkable

from changekit.backends.forge.github_api import GitHubAPIBackend as GitHubAPIBackend

__all__ = [
    'GitHubAPIBackend',
    'IdentityForge',
]


@runtime_checkable
class IdentityForge(Protocol):
    """Protocol for resolving commit authorship on a code host."""

    async def author_of(self, commit_id: str) -> str | None:
        """Return the login of the account that authored ``commit_id``.

        ``None`` when the host knows the commit but not the account (an
        email not linked to any user).
        """
        ...

    async def pull_requests_of(self, commit_id: str) -> list[int]:
        """Return the numbers of the pull requests associated with ``commit_id``."""
        ...

    async def authors_of(self, pr_number: int) -> list[str]:
        """Return the author logins of every commit in pull request ``pr_number``."""
        ...

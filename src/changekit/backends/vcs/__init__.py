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


"""VCS protocol for changekit.

changekit only ever *reads* from version control. The :class:`VCS`
protocol covers exactly what changelog generation needs: commit records
for a range, the tag-by-commit map, and a few lookups used for range
selection and repository detection.

Implementations:

- :class:`~changekit.backends.vcs.git.GitCLIBackend`: ``git`` CLI
"""

from __future__ import annotations

from typing import Protocol, runtime_checkable

from changekit.backends.vcs._types import RawCommit as RawCommit
from changekit.backends.vcs.git import GitCLIBackend as GitCLIBackend, parse_github_repo as parse_github_repo

__all__ = [
    'VCS',
    'GitCLIBackend',
    'RawCommit',
    'parse_github_repo',
]


@runtime_checkable
class VCS(Protocol):
    """Protocol for read-only version control access.

    All methods are async to avoid blocking the event loop when
    shelling out to ``git``.
    """

    async def commits(
        self,
        range: str | None = None,
        *,
        include_paths: list[str] | None = None,
        exclude_paths: list[str] | None = None,
    ) -> list[RawCommit]:
        """Return commit records, newest first.

        Args:
            range: A revision range such as ``"v1.0..HEAD"``; ``None``
                means all history reachable from HEAD.
            include_paths: Only commits touching these paths.
            exclude_paths: Skip commits touching only these paths.
        """
        ...

    async def tags(self, pattern: str | None = None, *, date_order: bool = False) -> dict[str, str]:
        """Return ``{commit_id: tag_name}``, oldest tag first.

        Args:
            pattern: Glob pattern tag names must match.
            date_order: Order by tag creation date instead of version.
        """
        ...

    async def current_tag(self) -> str | None:
        """Return the tag pointing at HEAD, if any."""
        ...

    async def root_commit(self) -> str | None:
        """Return the id of the first commit reachable from HEAD."""
        ...

    async def remote_url(self, remote: str = 'origin') -> str | None:
        """Return the URL of a remote, if configured."""
        ...

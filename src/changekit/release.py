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


"""Tag-bounded release bucketing.

Walks the commits oldest first and closes a release at every tagged
commit::

    commits (oldest → newest):   c1    c2    c3    c4    c5
    tags:                              v1.0        v1.1
                                 └──┬──┘     └──┬──┘     └┬┘
    releases:                     v1.0        v1.1     unreleased
    previous:                    (empty)  ◄── v1.0
                                  ▲
                                  └── replaced by v1.0 when ≥ 2 tags exist

Every ``previous`` is a copy with its own ``previous`` cleared, so the
chain is never more than one level deep and serializing a release never
recurses past its predecessor.
"""

from __future__ import annotations

import dataclasses
from collections.abc import Iterable, Mapping, Sequence
from dataclasses import dataclass, field
from typing import Any

from changekit.commit import Commit


@dataclass
class Release:
    """One release bucket.

    Attributes:
        version: Tag name; ``None`` for the unreleased tail.
        commit_id: Id of the tagged commit.
        timestamp: Commit time of the tagged commit, seconds since epoch.
        commits: Commits in the configured sort order.
        previous: The preceding release, depth 1.
    """

    version: str | None = None
    commit_id: str | None = None
    timestamp: int = 0
    commits: list[Commit] = field(default_factory=list)
    previous: Release | None = None

    def to_dict(self) -> dict[str, Any]:
        """Serialize the release for templates and ``--context`` output."""
        return {
            'version': self.version,
            'commit_id': self.commit_id,
            'timestamp': self.timestamp,
            'commits': [c.to_dict() for c in self.commits],
            'previous': self.previous.to_dict() if self.previous is not None else None,
        }


def _snapshot(release: Release) -> Release:
    """Copy ``release`` for use as a back-reference, one level deep."""
    return dataclasses.replace(release, commits=list(release.commits), previous=None)


def bucket_releases(
    commits: Iterable[Commit],
    tags: Mapping[str, str],
    *,
    sort: str = 'oldest',
    custom_messages: Sequence[str] = (),
) -> list[Release]:
    """Split ``commits`` into releases at tagged commits.

    Args:
        commits: Commits ordered oldest first.
        tags: Tag name by commit id, oldest tag first.
        sort: ``"oldest"`` appends commits to their release, ``"newest"``
            prepends them.
        custom_messages: ``"<sha> <message>"`` or bare messages added to
            the trailing unreleased release.

    Returns:
        Releases ordered oldest first. The last one is always the
        unreleased tail, possibly without commits.
    """
    releases: list[Release] = []
    current = Release()
    previous = Release()
    for commit in commits:
        if sort == 'newest':
            current.commits.insert(0, commit)
        else:
            current.commits.append(commit)
        tag = tags.get(commit.id)
        if tag is not None:
            current.version = tag
            current.commit_id = commit.id
            current.timestamp = commit.committer.timestamp
            current.previous = _snapshot(previous)
            previous = current
            releases.append(current)
            current = Release()
    releases.append(current)

    for message in custom_messages:
        current.commits.append(Commit.from_line(message))

    if len(tags) >= 2:
        commit_id, version = list(tags.items())[-2]
        releases[0].previous = Release(version=version, commit_id=commit_id)

    return releases


__all__ = [
    'Release',
    'bucket_releases',
]

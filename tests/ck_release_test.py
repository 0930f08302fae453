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


"""Tests for changekit.release."""

from __future__ import annotations

from changekit.commit import Commit, Signature
from changekit.release import Release, bucket_releases

from tests._fakes import sha


def _commits(*ids: int) -> list[Commit]:
    return [
        Commit(id=sha(n), message=f'feat: change {n}', committer=Signature(timestamp=1_700_000_000 + n))
        for n in ids
    ]


def _ids(release: Release) -> list[str]:
    return [c.id for c in release.commits]


class TestBucketReleases:
    """Tests for bucket_releases."""

    def test_single_tag(self) -> None:
        """c1, c2 close v1.0 at c2; c3 is unreleased."""
        releases = bucket_releases(_commits(1, 2, 3), {sha(2): 'v1.0'})
        assert len(releases) == 2
        tagged, tail = releases
        assert tagged.version == 'v1.0'
        assert tagged.commit_id == sha(2)
        assert tagged.timestamp == 1_700_000_002
        assert _ids(tagged) == [sha(1), sha(2)]
        assert tail.version is None
        assert tail.commit_id is None
        assert _ids(tail) == [sha(3)]

    def test_tail_always_present(self) -> None:
        """Test tail always present."""
        releases = bucket_releases(_commits(1, 2), {sha(2): 'v1.0'})
        assert releases[-1].version is None
        assert releases[-1].commits == []

    def test_no_commits(self) -> None:
        """Test no commits."""
        releases = bucket_releases([], {})
        assert releases == [Release()]

    def test_newest_first(self) -> None:
        """Test newest first."""
        releases = bucket_releases(_commits(1, 2, 3), {sha(2): 'v1.0'}, sort='newest')
        assert _ids(releases[0]) == [sha(2), sha(1)]

    def test_previous_chain(self) -> None:
        """Each release points back at the one before, one level deep."""
        releases = bucket_releases(_commits(1, 2, 3), {sha(1): 'v0.1', sha(2): 'v0.2'})
        _, v02, tail = releases
        assert v02.previous is not None
        assert v02.previous.version == 'v0.1'
        assert v02.previous.previous is None
        assert tail.previous is None

    def test_first_release_previous_with_two_tags(self) -> None:
        """With two or more tags the first release's previous is the second-to-last tag."""
        tags = {sha(1): 'v0.1', sha(2): 'v0.2', sha(3): 'v0.3'}
        releases = bucket_releases(_commits(1, 2, 3), tags)
        assert releases[0].previous == Release(version='v0.2', commit_id=sha(2))

    def test_first_release_previous_with_one_tag(self) -> None:
        """Test first release previous with one tag."""
        releases = bucket_releases(_commits(1), {sha(1): 'v0.1'})
        assert releases[0].previous == Release()

    def test_custom_messages(self) -> None:
        """Custom messages go to the unreleased tail."""
        custom = ['8f55e69eba6e6ce811ace32bd84cc82215673cb6 feat: injected', 'fix: bare']
        releases = bucket_releases(_commits(1), {sha(1): 'v1.0'}, custom_messages=custom)
        tail = releases[-1]
        assert [c.id for c in tail.commits] == ['8f55e69eba6e6ce811ace32bd84cc82215673cb6', '']
        assert [c.message for c in tail.commits] == ['feat: injected', 'fix: bare']
        assert len(releases[0].commits) == 1


class TestToDict:
    """Tests for Release.to_dict."""

    def test_nested_previous(self) -> None:
        """Test nested previous."""
        release = Release(version='v1.0', commits=_commits(1), previous=Release(version='v0.9'))
        data = release.to_dict()
        assert data['version'] == 'v1.0'
        assert data['commits'][0]['id'] == sha(1)
        assert data['previous']['version'] == 'v0.9'
        assert data['previous']['previous'] is None

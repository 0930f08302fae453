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


"""Plain record types shared by the VCS protocol and its backends."""

from __future__ import annotations

from dataclasses import dataclass


@dataclass(frozen=True)
class RawCommit:
    """A commit record exactly as the VCS reports it.

    Attributes:
        id: Full commit SHA.
        message: Full commit message.
        author_name: Author name, if recorded.
        author_email: Author email, if recorded.
        author_time: Author timestamp (seconds since epoch).
        committer_name: Committer name, if recorded.
        committer_email: Committer email, if recorded.
        committer_time: Committer timestamp (seconds since epoch).
    """

    id: str
    message: str
    author_name: str | None = None
    author_email: str | None = None
    author_time: int = 0
    committer_name: str | None = None
    committer_email: str | None = None
    committer_time: int = 0


__all__ = [
    'RawCommit',
]

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


"""Per-commit processing pipeline.

Runs one commit through the local (non-network) stages::

    raw commit
        │
        ▼
    preprocess ──── CommandError ─────┐
        │                             │
        ▼                             │
    conventional ── ParseError ───────┤  (only when filter_unconventional)
        │                             │
        ▼                             ▼
    classify ────── GroupError ───► raised to the caller,
        │                           which drops the commit
        ▼
    extract links
        │
        ▼
    processed commit

Each stage returns a new :class:`~changekit.commit.Commit`; the input is
never modified, so a failure leaves the caller's copy untouched.
"""

from __future__ import annotations

import dataclasses

from changekit.classify import classify
from changekit.commit import Commit
from changekit.commit_parsing import parse_conventional_commit
from changekit.config import GitConfig
from changekit.errors import ParseError
from changekit.links import parse_links
from changekit.logging import get_logger
from changekit.preprocess import preprocess

logger = get_logger(__name__)


def into_conventional(commit: Commit) -> Commit:
    """Parse the message as a Conventional Commit.

    Raises:
        ParseError: If the message does not follow the grammar.
    """
    return dataclasses.replace(commit, conv=parse_conventional_commit(commit.message))


def process_commit(commit: Commit, git: GitConfig) -> Commit:
    """Run ``commit`` through preprocessing, parsing, classification and links.

    Args:
        commit: The raw commit.
        git: The ``[git]`` settings holding the rule lists and policies.

    Returns:
        The processed commit.

    Raises:
        CommandError: A ``replace_command`` preprocessor failed.
        ParseError: The commit is unconventional and
            ``filter_unconventional`` is on.
        GroupError: A skip rule matched, or no rule matched under
            ``filter_commits``.
    """
    commit = preprocess(commit, git.commit_preprocessors)
    if git.conventional_commits:
        if git.filter_unconventional:
            commit = into_conventional(commit)
        else:
            try:
                commit = into_conventional(commit)
            except ParseError as exc:
                # Best effort: keep it as a plain, unclassified commit.
                logger.debug('commit_unconventional', reason=exc.message)
    if git.commit_parsers is not None:
        commit = classify(
            commit,
            git.commit_parsers,
            protect_breaking=git.protect_breaking_commits,
            filter_commits=git.filter_commits,
        )
    if git.link_parsers:
        commit = parse_links(commit, git.link_parsers)
    return commit


__all__ = [
    'into_conventional',
    'process_commit',
]

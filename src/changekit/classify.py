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


"""Rule-based commit classification.

Evaluates the ordered ``commit_parsers`` rules against a commit and
assigns ``group``, ``scope`` and ``default_scope`` from the first rule
that matches. Within a rule the message pattern is checked before the
body pattern; the body is only checked for conventional commits that
have one.

Decision table for the first matching rule::

    rule.skip   protect_breaking   commit breaking    outcome
    ─────────   ────────────────   ───────────────    ──────────────────────
    False       any                any                classified
    True        False              any                GroupError(SKIPPED)
    True        True               False              GroupError(SKIPPED)
    True        True               True               classified

When no rule matches, ``filter_commits`` decides between
``GroupError(NO_MATCH)`` and returning the commit unclassified.
"""

from __future__ import annotations

import dataclasses
import re
from collections.abc import Sequence

from changekit.commit import Commit
from changekit.errors import GroupError, GroupErrorReason
from changekit.rules import CommitParserRule


def _checks(commit: Commit, rule: CommitParserRule) -> list[tuple[re.Pattern[str], str]]:
    checks: list[tuple[re.Pattern[str], str]] = []
    if rule.message is not None:
        checks.append((rule.message, commit.message))
    if rule.body is not None and commit.conv is not None and commit.conv.body is not None:
        checks.append((rule.body, commit.conv.body))
    return checks


def should_skip(commit: Commit, rule: CommitParserRule, *, protect_breaking: bool) -> bool:
    """Whether a matching ``rule`` drops ``commit``.

    A skip rule never drops a breaking conventional commit while
    ``protect_breaking`` is enabled.
    """
    breaking = commit.conv is not None and commit.conv.breaking
    return rule.skip and not (protect_breaking and breaking)


def classify(
    commit: Commit,
    rules: Sequence[CommitParserRule],
    *,
    protect_breaking: bool = False,
    filter_commits: bool = False,
) -> Commit:
    """Assign group and scope from the first matching rule.

    Args:
        commit: The (parsed) commit to classify.
        rules: Commit parser rules in declared order.
        protect_breaking: Keep breaking commits even if a skip rule matches.
        filter_commits: Reject commits that match no rule.

    Returns:
        A classified copy of ``commit``, or ``commit`` itself when no rule
        matched and ``filter_commits`` is off.

    Raises:
        GroupError: ``SKIPPED`` if a skip rule matched, ``NO_MATCH`` if
            nothing matched under ``filter_commits``.
    """
    for rule in rules:
        if any(pattern.search(text) for pattern, text in _checks(commit, rule)):
            if should_skip(commit, rule, protect_breaking=protect_breaking):
                raise GroupError(GroupErrorReason.SKIPPED)
            return dataclasses.replace(
                commit,
                group=rule.group,
                scope=rule.scope,
                default_scope=rule.default_scope,
            )
    if filter_commits:
        raise GroupError(GroupErrorReason.NO_MATCH)
    return commit


__all__ = [
    'classify',
    'should_skip',
]

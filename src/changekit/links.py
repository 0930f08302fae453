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


"""Link extraction from commit messages."""

from __future__ import annotations

import dataclasses
from collections.abc import Sequence

from changekit.commit import Commit, Link
from changekit.rules import LinkParserRule, expand_template


def extract_links(message: str, rules: Sequence[LinkParserRule]) -> list[Link]:
    """Find links in ``message``, in rule order, then match order.

    Every rule scans the whole message independently, so two rules
    matching the same text both contribute a link; duplicates are kept.

    Args:
        message: The commit message to scan.
        rules: Link parser rules in declared order.

    Returns:
        The extracted links.
    """
    links: list[Link] = []
    for rule in rules:
        for match in rule.pattern.finditer(message):
            text = expand_template(match, rule.text) if rule.text is not None else match.group(0)
            links.append(Link(text=text, href=expand_template(match, rule.href)))
    return links


def parse_links(commit: Commit, rules: Sequence[LinkParserRule]) -> Commit:
    """Return a copy of ``commit`` with extracted links appended."""
    found = extract_links(commit.message, rules)
    if not found:
        return commit
    return dataclasses.replace(commit, links=(*commit.links, *found))


__all__ = [
    'extract_links',
    'parse_links',
]

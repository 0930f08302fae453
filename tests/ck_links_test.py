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


"""Tests for changekit.links."""

from __future__ import annotations

import re

from changekit.commit import Commit, Link
from changekit.links import extract_links, parse_links
from changekit.rules import LinkParserRule

_ISSUES = LinkParserRule(pattern=re.compile(r'#(\d+)'), href='https://github.com/o/r/issues/$1')


class TestExtractLinks:
    """Tests for extract_links."""

    def test_text_defaults_to_match(self) -> None:
        """Test text defaults to match."""
        assert extract_links('fix #1 and #2', [_ISSUES]) == [
            Link(text='#1', href='https://github.com/o/r/issues/1'),
            Link(text='#2', href='https://github.com/o/r/issues/2'),
        ]

    def test_text_template(self) -> None:
        """Test text template."""
        rule = LinkParserRule(
            pattern=re.compile(r'RFC(\d+)'),
            href='https://datatracker.ietf.org/doc/html/rfc$1',
            text='ietf-rfc$1',
        )
        assert extract_links('see RFC456', [rule]) == [
            Link(text='ietf-rfc456', href='https://datatracker.ietf.org/doc/html/rfc456'),
        ]

    def test_overlapping_rules_keep_duplicates(self) -> None:
        """Two rules matching the same #123 both contribute, in rule order."""
        other = LinkParserRule(pattern=re.compile(r'#(\d+)'), href='https://tracker.example.com/$1')
        assert extract_links('closes #123', [_ISSUES, other]) == [
            Link(text='#123', href='https://github.com/o/r/issues/123'),
            Link(text='#123', href='https://tracker.example.com/123'),
        ]

    def test_no_match(self) -> None:
        """Test no match."""
        assert extract_links('nothing here', [_ISSUES]) == []


class TestParseLinks:
    """Tests for parse_links."""

    def test_appends(self) -> None:
        """Test appends."""
        commit = Commit(message='fix #5', links=(Link(text='a', href='b'),))
        result = parse_links(commit, [_ISSUES])
        assert result.links == (Link(text='a', href='b'), Link(text='#5', href='https://github.com/o/r/issues/5'))
        assert len(commit.links) == 1

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


"""Tests for the per-commit processing pipeline."""

from __future__ import annotations

import re

import pytest
from changekit.commit import Commit
from changekit.config import GitConfig, parse_config
from changekit.errors import GroupError, GroupErrorReason, ParseError
from changekit.processing import process_commit
from changekit.rules import CommitParserRule, LinkParserRule, PreprocessorRule

from tests._fakes import sha


class TestProcessCommit:
    """Tests for process_commit."""

    def test_full_pipeline(self) -> None:
        """Preprocess, parse, classify and extract links, in that order."""
        git = GitConfig(
            commit_preprocessors=(PreprocessorRule(pattern=re.compile('^feature'), replace='feat'),),
            commit_parsers=(CommitParserRule(message=re.compile('^feat'), group='Features'),),
            link_parsers=(LinkParserRule(pattern=re.compile(r'#(\d+)'), href='https://x/$1'),),
        )
        result = process_commit(Commit(id=sha(1), message='feature(ui): add #3'), git)
        assert result.message == 'feat(ui): add #3'
        assert result.conv is not None
        assert result.conv.scope == 'ui'
        assert result.group == 'Features'
        assert [link.href for link in result.links] == ['https://x/3']

    def test_unconventional_filtered(self) -> None:
        """Test unconventional filtered."""
        with pytest.raises(ParseError):
            process_commit(Commit(message='Merge branch x'), GitConfig(filter_unconventional=True))

    def test_unconventional_kept(self) -> None:
        """Best effort: an unconventional commit stays plain."""
        git = GitConfig(
            filter_unconventional=False,
            commit_parsers=(CommitParserRule(message=re.compile('^Merge'), group='Merges'),),
        )
        result = process_commit(Commit(message='Merge branch x'), git)
        assert result.conv is None
        assert result.group == 'Merges'

    def test_conventional_disabled(self) -> None:
        """Test conventional disabled."""
        result = process_commit(Commit(message='feat: x'), GitConfig(conventional_commits=False))
        assert result.conv is None

    def test_group_error_propagates(self) -> None:
        """Test group error propagates."""
        git = GitConfig(commit_parsers=(CommitParserRule(message=re.compile('^chore'), skip=True),))
        with pytest.raises(GroupError):
            process_commit(Commit(message='chore: deps'), git)

    def test_no_parsers_means_no_classification(self) -> None:
        """Test no parsers means no classification."""
        result = process_commit(Commit(message='feat: x'), GitConfig(filter_commits=True))
        assert result.group is None

    def test_empty_parser_list_filters_everything(self) -> None:
        """An explicit empty rule list still classifies, so nothing matches."""
        git = parse_config('[git]\ncommit_parsers = []\nfilter_commits = true\n').git
        with pytest.raises(GroupError) as exc_info:
            process_commit(Commit(message='feat: x'), git)
        assert exc_info.value.reason is GroupErrorReason.NO_MATCH

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


"""Tests for changekit.preprocess."""

from __future__ import annotations

import re
import shutil
import subprocess

import pytest
from changekit.backends._run import CommandResult
from changekit.commit import Commit
from changekit.errors import E, CommandError
from changekit.preprocess import preprocess, preprocess_message, run_replace_command
from changekit.rules import PreprocessorRule

from tests._fakes import sha


def _fake_run(stdout: str = '', return_code: int = 0, calls: list[dict[str, object]] | None = None) -> object:
    """Build a run_command replacement returning a canned result."""

    def fake(cmd: list[str], **kwargs: object) -> CommandResult:
        if calls is not None:
            calls.append({'cmd': cmd, **kwargs})
        return CommandResult(command=cmd, return_code=return_code, stdout=stdout, stderr='boom')

    return fake


class TestReplace:
    """Tests for inline replacement rules."""

    def test_no_matching_rule_is_identity(self) -> None:
        """A message no rule matches comes back byte-identical."""
        message = 'feat: x\r\n\r\n  trailing  \n'
        rules = [PreprocessorRule(pattern=re.compile('zzz'), replace='y')]
        assert preprocess_message(message, rules) == message

    def test_replaces_all_with_captures(self) -> None:
        """Test replaces all with captures."""
        rules = [PreprocessorRule(pattern=re.compile(r'\(#(\d+)\)'), replace='([#$1](https://github.com/o/r/pull/$1))')]
        result = preprocess_message('fix: a (#1) b (#2)', rules)
        assert result == 'fix: a ([#1](https://github.com/o/r/pull/1)) b ([#2](https://github.com/o/r/pull/2))'

    def test_rules_apply_to_evolving_message(self) -> None:
        """Each rule sees the output of the previous one."""
        rules = [
            PreprocessorRule(pattern=re.compile('^update'), replace='chore: update'),
            PreprocessorRule(pattern=re.compile('^chore'), replace='build'),
        ]
        assert preprocess_message('update deps', rules) == 'build: update deps'

    def test_preprocess_returns_new_commit(self) -> None:
        """Test preprocess returns new commit."""
        commit = Commit(id=sha(1), message='feat: colour')
        result = preprocess(commit, [PreprocessorRule(pattern=re.compile('colour'), replace='color')])
        assert result.message == 'feat: color'
        assert commit.message == 'feat: colour'


class TestReplaceCommand:
    """Tests for replace_command rules."""

    def test_skipped_when_pattern_misses(self, monkeypatch: pytest.MonkeyPatch) -> None:
        """The command only runs when its pattern matches."""
        calls: list[dict[str, object]] = []
        monkeypatch.setattr('changekit.preprocess.run_command', _fake_run('x', calls=calls))
        rules = [PreprocessorRule(pattern=re.compile('zzz'), replace_command='cat')]
        assert preprocess_message('feat: x', rules) == 'feat: x'
        assert calls == []

    def test_pipes_message_with_commit_sha(self, monkeypatch: pytest.MonkeyPatch) -> None:
        """Test pipes message with commit sha."""
        calls: list[dict[str, object]] = []
        monkeypatch.setattr('changekit.preprocess.run_command', _fake_run('feat: rewritten\n\n', calls=calls))
        rules = [PreprocessorRule(pattern=re.compile('.*'), replace_command='my-filter --flag')]
        result = preprocess_message('feat: original', rules, commit_id=sha(9))
        assert result == 'feat: rewritten'
        assert calls[0]['cmd'] == ['sh', '-c', 'my-filter --flag']
        assert calls[0]['stdin'] == 'feat: original'
        assert calls[0]['env'] == {'COMMIT_SHA': sha(9)}

    def test_non_zero_exit(self, monkeypatch: pytest.MonkeyPatch) -> None:
        """Test non zero exit."""
        monkeypatch.setattr('changekit.preprocess.run_command', _fake_run('out', return_code=2))
        with pytest.raises(CommandError) as exc_info:
            run_replace_command('false', 'msg')
        assert exc_info.value.code == E.COMMAND_FAILED
        assert 'status 2' in exc_info.value.message

    def test_empty_output(self, monkeypatch: pytest.MonkeyPatch) -> None:
        """Test empty output."""
        monkeypatch.setattr('changekit.preprocess.run_command', _fake_run('\n'))
        with pytest.raises(CommandError, match='no output'):
            run_replace_command('true', 'msg')

    def test_timeout(self, monkeypatch: pytest.MonkeyPatch) -> None:
        """Test timeout."""

        def fake(cmd: list[str], **kwargs: object) -> CommandResult:
            raise subprocess.TimeoutExpired(cmd, 120)

        monkeypatch.setattr('changekit.preprocess.run_command', fake)
        with pytest.raises(CommandError):
            run_replace_command('sleep 999', 'msg')

    def test_failure_leaves_commit_untouched(self, monkeypatch: pytest.MonkeyPatch) -> None:
        """Test failure leaves commit untouched."""
        monkeypatch.setattr('changekit.preprocess.run_command', _fake_run('', return_code=1))
        commit = Commit(id=sha(1), message='feat: x')
        with pytest.raises(CommandError):
            preprocess(commit, [PreprocessorRule(pattern=re.compile('x'), replace_command='false')])
        assert commit.message == 'feat: x'

    @pytest.mark.skipif(shutil.which('sh') is None, reason='needs a POSIX shell')
    def test_real_shell(self) -> None:
        """Test real shell."""
        rules = [PreprocessorRule(pattern=re.compile('^wip'), replace_command='printf "%s\\n" "$(sed s/^wip/chore/)" "sha=$COMMIT_SHA"')]
        result = preprocess_message('wip: thing', rules, commit_id='abc')
        assert result == 'chore: thing\nsha=abc'

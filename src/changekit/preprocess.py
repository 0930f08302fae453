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


"""Commit message preprocessing.

Applies the ``commit_preprocessors`` rules to a raw message before it is
parsed. Rules run in declared order on the *evolving* message:

- ``replace`` rules substitute every match with a capture-aware
  template (``$1``, ``${name}``). A rule that matches nothing leaves
  the message byte-identical.
- ``replace_command`` rules run only when their pattern matches. The
  current message is piped to ``sh -c <command>`` with ``COMMIT_SHA``
  in the environment, and the command's output becomes the new message.

Usage::

    rules = [PreprocessorRule(pattern=re.compile(r'\\(#(\\d+)\\)'), replace='([#$1](https://github.com/o/r/issues/$1))')]
    preprocess_message('fix: crash (#12)', rules)
    # 'fix: crash ([#12](https://github.com/o/r/issues/12))'
"""

from __future__ import annotations

import dataclasses
from collections.abc import Sequence

from changekit.backends._run import TimeoutExpired, run_command, shell
from changekit.commit import Commit
from changekit.errors import CommandError
from changekit.logging import get_logger
from changekit.rules import PreprocessorRule, replace_all

logger = get_logger(__name__)


def run_replace_command(command: str, message: str, *, commit_id: str = '') -> str:
    """Pipe ``message`` through a shell command and return its output.

    Args:
        command: Shell command line, run with ``sh -c``.
        message: Text written to the command's stdin.
        commit_id: Exposed to the command as ``COMMIT_SHA``.

    Returns:
        The command's stdout with trailing newlines removed.

    Raises:
        CommandError: If the command cannot be started, times out, exits
            non-zero, or prints nothing.
    """
    try:
        result = run_command(shell(command), env={'COMMIT_SHA': commit_id}, stdin=message)
    except (OSError, TimeoutExpired) as exc:
        raise CommandError(f'Failed to run {command!r}: {exc}') from exc

    if not result.ok:
        raise CommandError(
            f'{command!r} exited with status {result.return_code}: {result.stderr.strip()}',
            hint='Run the command by hand with the commit message on stdin and COMMIT_SHA set.',
        )
    output = result.stdout.rstrip('\n')
    if not output:
        raise CommandError(f'{command!r} produced no output')
    return output


def preprocess_message(
    message: str,
    rules: Sequence[PreprocessorRule],
    *,
    commit_id: str = '',
) -> str:
    """Apply preprocessing rules, in order, to a commit message.

    Args:
        message: The raw commit message.
        rules: Rules in declared order.
        commit_id: Commit SHA passed to ``replace_command`` rules.

    Returns:
        The rewritten message.

    Raises:
        CommandError: If a ``replace_command`` rule fails.
    """
    for rule in rules:
        if rule.replace is not None:
            message = replace_all(rule.pattern, message, rule.replace)
        elif rule.replace_command is not None and rule.pattern.search(message):
            logger.debug('preprocess_command', command=rule.replace_command)
            message = run_replace_command(rule.replace_command, message, commit_id=commit_id)
    return message


def preprocess(commit: Commit, rules: Sequence[PreprocessorRule]) -> Commit:
    """Return a copy of ``commit`` with its message preprocessed."""
    return dataclasses.replace(commit, message=preprocess_message(commit.message, rules, commit_id=commit.id))


__all__ = [
    'preprocess',
    'preprocess_message',
    'run_replace_command',
]

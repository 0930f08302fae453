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

"""Subprocess calls made by changekit.

Two kinds of external command are run, both through :func:`run_command`:

- ``git`` plumbing from :mod:`changekit.backends.vcs.git`.
- ``replace_command`` preprocessors, which read a commit message on
  stdin and print the rewritten message (``COMMIT_SHA`` is set in their
  environment).

Every call is logged with its duration; a call that outlives its
timeout is logged and the :class:`TimeoutExpired` propagates.
"""

from __future__ import annotations

import os
import subprocess  # noqa: S404 - running git and user commands is this module's job
import time
from dataclasses import dataclass
from pathlib import Path

from changekit.logging import get_logger

log = get_logger('changekit.backends.run')

# Seconds a single git call or preprocessor may run.
DEFAULT_TIMEOUT_SECONDS = 120

# Longest stderr excerpt kept in a failure log line.
_STDERR_EXCERPT = 500

# Re-exported so callers can catch it without importing subprocess.
TimeoutExpired = subprocess.TimeoutExpired


@dataclass(frozen=True)
class CommandResult:
    """Outcome of one external command.

    Attributes:
        command: Argument vector that was run.
        return_code: Exit status.
        stdout: Decoded standard output.
        stderr: Decoded standard error.
        duration: Wall-clock time in milliseconds.
    """

    command: list[str]
    return_code: int
    stdout: str = ''
    stderr: str = ''
    duration: float = 0.0

    @property
    def ok(self) -> bool:
        """True when the command exited with status 0."""
        return self.return_code == 0


def shell(command: str) -> list[str]:
    """Argument vector running a user-supplied command line via ``sh -c``."""
    return ['sh', '-c', command]


def run_command(
    cmd: list[str],
    *,
    cwd: Path | str | None = None,
    env: dict[str, str] | None = None,
    stdin: str | None = None,
    timeout: int = DEFAULT_TIMEOUT_SECONDS,
) -> CommandResult:
    """Run ``cmd`` to completion and capture its output as text.

    A non-zero exit is reported through :attr:`CommandResult.ok`, never
    raised; callers decide whether it is fatal.

    Args:
        cmd: Argument vector.
        cwd: Working directory, or the current one.
        env: Variables layered over the inherited environment.
        stdin: Text fed to standard input.
        timeout: Seconds before the process is killed.

    Raises:
        TimeoutExpired: The process outlived ``timeout``.
        OSError: The executable could not be started.
    """
    argv = ' '.join(cmd)
    log.debug('run_command', cmd=argv, cwd=str(cwd or '.'), stdin_chars=len(stdin or ''))

    started = time.monotonic()
    try:
        proc = subprocess.run(  # noqa: S603 - argv comes from the git backend or user config
            cmd,
            cwd=cwd,
            env={**os.environ, **env} if env else None,
            input=stdin,
            capture_output=True,
            text=True,
            timeout=timeout,
        )
    except subprocess.TimeoutExpired:
        log.error('command_timeout', cmd=argv, timeout=timeout, duration=(time.monotonic() - started) * 1000)
        raise

    result = CommandResult(
        command=cmd,
        return_code=proc.returncode,
        stdout=proc.stdout,
        stderr=proc.stderr,
        duration=(time.monotonic() - started) * 1000,
    )
    if result.ok:
        log.debug('command_ok', cmd=argv, duration=result.duration)
    else:
        log.warning(
            'command_failed',
            cmd=argv,
            return_code=result.return_code,
            stderr=result.stderr[:_STDERR_EXCERPT],
            duration=result.duration,
        )
    return result


__all__ = [
    'DEFAULT_TIMEOUT_SECONDS',
    'CommandResult',
    'TimeoutExpired',
    'run_command',
    'shell',
]

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


"""Tests for changekit.logging module."""

from __future__ import annotations

import logging

import structlog
from changekit.logging import commit_context, configure_logging, get_logger


class TestConfigureLogging:
    """Tests for configure_logging()."""

    def test_default_level_is_info(self) -> None:
        """Default logging level should be INFO."""
        configure_logging()
        assert logging.root.level == logging.INFO

    def test_verbose_sets_debug(self) -> None:
        """Verbose flag should set DEBUG level."""
        configure_logging(verbose=True)
        assert logging.root.level == logging.DEBUG

    def test_quiet_wins_over_verbose(self) -> None:
        """Quiet flag should set WARNING level even with verbose."""
        configure_logging(verbose=True, quiet=True)
        assert logging.root.level == logging.WARNING

    def test_json_log_does_not_crash(self) -> None:
        """JSON log mode should configure without errors."""
        configure_logging(json_log=True)
        get_logger().info('test_json', key='value')


class TestCommitContext:
    """Tests for commit_context()."""

    def test_binds_short_id(self) -> None:
        """Test binds short id."""
        with commit_context('8f55e69eba6e6ce811ace32bd84cc82215673cb6'):
            assert structlog.contextvars.get_contextvars()['commit'] == '8f55e69'
        assert 'commit' not in structlog.contextvars.get_contextvars()

    def test_empty_id(self) -> None:
        """Commits without an id are bound as a dash."""
        with commit_context(''):
            assert structlog.contextvars.get_contextvars()['commit'] == '-'

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


"""Commit message parsing.

This subpackage provides a protocol-based commit parsing system. The
:class:`CommitParser` protocol lets the pipeline stay agnostic of the
message grammar; the built-in :class:`ConventionalCommitParser` handles
``type(scope)!: description`` messages with bodies and footers.

Usage::

    from changekit.commit_parsing import parse_conventional_commit

    conv = parse_conventional_commit('feat(auth)!: drop OAuth1\\n\\nCloses #12')
    assert conv.type == 'feat'
    assert conv.breaking
    assert conv.footers[0].token == 'Closes'
"""

from changekit.commit_parsing._conventional import ConventionalCommitParser
from changekit.commit_parsing._types import CommitParser, ConventionalCommit, Footer

# Module-level singleton for convenience.
_DEFAULT_PARSER = ConventionalCommitParser()


def parse_conventional_commit(message: str) -> ConventionalCommit:
    """Parse a commit message with the default Conventional Commits parser.

    Args:
        message: The full commit message.

    Returns:
        The parsed :class:`ConventionalCommit`.

    Raises:
        ParseError: If the message is not a Conventional Commit.
    """
    return _DEFAULT_PARSER.parse(message)


__all__ = [
    'CommitParser',
    'ConventionalCommit',
    'ConventionalCommitParser',
    'Footer',
    'parse_conventional_commit',
]

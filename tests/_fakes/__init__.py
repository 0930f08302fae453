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


"""Shared test fakes for changekit.

Provides reusable fake implementations of the VCS and IdentityForge
protocols so that individual test modules don't need to duplicate
boilerplate classes.

Usage::

    from tests._fakes import FakeForge, FakeVCS, raw_commit

    vcs = FakeVCS(commits=[raw_commit('a' * 40, 'feat: init')])
    forge = FakeForge(authors={'a' * 40: 'alice'})
"""

from tests._fakes._forge import FakeForge as FakeForge
from tests._fakes._vcs import FakeVCS as FakeVCS, raw_commit as raw_commit, sha as sha

__all__ = [
    'FakeForge',
    'FakeVCS',
    'raw_commit',
    'sha',
]

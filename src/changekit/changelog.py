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


"""Changelog assembly.

Turns bucketed releases into finished output. This is the caller that
decides what per-commit failures mean: a commit that fails preprocessing,
parsing or classification is dropped, and a commit whose GitHub lookup
fails is kept unresolved.

Key Concepts (ELI5)::

    ┌─────────────────────────┬─────────────────────────────────────────────┐
    │ Concept                 │ Plain-English                               │
    ├─────────────────────────┼─────────────────────────────────────────────┤
    │ Changelog.build()       │ Process every commit, drop empty or skipped │
    │                         │ releases, then ask GitHub who wrote what.   │
    ├─────────────────────────┼─────────────────────────────────────────────┤
    │ generate()              │ header + one section per release (newest    │
    │                         │ first) + footer.                            │
    ├─────────────────────────┼─────────────────────────────────────────────┤
    │ prepend()               │ New sections on top of an existing file,    │
    │                         │ keeping a single header.                    │
    ├─────────────────────────┼─────────────────────────────────────────────┤
    │ context()               │ The releases as JSON, for external tools.   │
    └─────────────────────────┴─────────────────────────────────────────────┘

Build flow::

    releases (oldest first)
         │
         ▼
    process_commit() per commit ──error──► dropped (debug log)
         │
         ▼
    drop releases without commits / matching skip_tags
         │
         ▼
    resolve_identity() per commit ──NetworkError──► kept unresolved (warning)
         │
         ▼
    releases (newest first)

Usage::

    from changekit.changelog import Changelog

    changelog = await Changelog.build(releases, config, forge=forge, github_repo='o/r')
    print(changelog.generate())
"""

from __future__ import annotations

import dataclasses
import json
from collections.abc import Sequence
from pathlib import Path

from changekit.backends.forge import IdentityForge
from changekit.commit import Commit
from changekit.config import ChangeKitConfig
from changekit.errors import ChangeKitError, CommandError, GroupError, NetworkError, ParseError
from changekit.formatter import render_default
from changekit.identity import IdentityCaches, resolve_identity
from changekit.logging import commit_context, get_logger
from changekit.processing import process_commit
from changekit.release import Release
from changekit.template import Template

logger = get_logger(__name__)

_STAGES: dict[type[ChangeKitError], str] = {
    CommandError: 'preprocess',
    ParseError: 'conventional',
    GroupError: 'classify',
}


def _process_release(release: Release, config: ChangeKitConfig) -> Release:
    commits: list[Commit] = []
    for commit in release.commits:
        with commit_context(commit.id):
            try:
                commits.append(process_commit(commit, config.git))
            except (CommandError, ParseError, GroupError) as exc:
                logger.debug('commit_dropped', stage=_STAGES[type(exc)], reason=exc.message)
    return dataclasses.replace(release, commits=commits)


def _keep_release(release: Release, config: ChangeKitConfig) -> bool:
    if not release.commits:
        if release.version is not None:
            logger.debug('release_without_commits', version=release.version)
        return False
    skip_tags = config.git.skip_tags
    if release.version is not None and skip_tags is not None and skip_tags.search(release.version):
        logger.debug('release_skipped', version=release.version)
        return False
    return True


async def _resolve_release(
    release: Release,
    *,
    forge: IdentityForge,
    caches: IdentityCaches,
    resolve_authors: bool,
) -> Release:
    commits: list[Commit] = []
    for commit in release.commits:
        with commit_context(commit.id):
            try:
                commit = await resolve_identity(
                    commit,
                    forge=forge,
                    caches=caches,
                    resolve_authors=resolve_authors,
                )
            except NetworkError as exc:
                logger.warning('identity_unresolved', reason=exc.message)
        commits.append(commit)
    return dataclasses.replace(release, commits=commits)


@dataclasses.dataclass
class Changelog:
    """Processed releases plus the settings needed to render them.

    Attributes:
        releases: Releases ordered newest first.
        config: The run's configuration.
        github_repo: ``owner/name`` used by the default layout's links.
    """

    releases: list[Release]
    config: ChangeKitConfig
    github_repo: str | None = None

    def __post_init__(self) -> None:
        """Compile the body template, if one is configured."""
        body = self.config.changelog.body
        self._template = Template(body) if body is not None else None

    @classmethod
    async def build(
        cls,
        releases: Sequence[Release],
        config: ChangeKitConfig,
        *,
        forge: IdentityForge | None = None,
        github_repo: str | None = None,
    ) -> Changelog:
        """Process, filter and resolve bucketed releases.

        Args:
            releases: Output of :func:`~changekit.release.bucket_releases`,
                oldest first.
            config: The run's configuration.
            forge: Hosting client; identity resolution is skipped when
                ``None``.
            github_repo: ``owner/name`` for default-layout links.

        Returns:
            A :class:`Changelog` ready to render.

        Raises:
            TemplateError: If the configured body template does not compile.
        """
        processed = [_process_release(release, config) for release in releases]
        kept = [release for release in reversed(processed) if _keep_release(release, config)]

        if forge is not None:
            caches = IdentityCaches()
            resolved: list[Release] = []
            for release in kept:
                resolved.append(
                    await _resolve_release(
                        release,
                        forge=forge,
                        caches=caches,
                        resolve_authors=config.github.resolve_authors,
                    )
                )
            kept = resolved
            logger.debug('identity_caches', usernames=len(caches.usernames), coauthor_sets=len(caches.coauthors))

        logger.info('changelog_built', releases=len(kept), commits=sum(len(r.commits) for r in kept))
        return cls(releases=kept, config=config, github_repo=github_repo)

    def render_release(self, release: Release) -> str:
        """Render one release with the body template or the default layout."""
        if self._template is not None:
            return self._template.render(release)
        return render_default(release, self.github_repo)

    def _parts(self) -> list[str]:
        changelog = self.config.changelog
        parts = [self.render_release(release) for release in self.releases]
        if changelog.header is not None:
            parts.insert(0, changelog.header)
        if changelog.footer is not None:
            parts.append(changelog.footer)
        return parts

    def generate(self) -> str:
        """Render the header, every release (newest first) and the footer.

        Raises:
            TemplateError: If a release fails to render.
        """
        parts = self._parts()
        if self.config.changelog.trim:
            return ''.join(f'{part.strip()}\n' for part in parts)
        return ''.join(parts)

    def prepend(self, existing: str) -> str:
        """Put the new releases on top of an existing changelog.

        The configured header is removed from ``existing`` (first
        occurrence) so that it appears only once, at the very top.
        """
        header = self.config.changelog.header
        if header:
            existing = existing.replace(header, '', 1)
        return self.generate() + existing

    def context(self) -> str:
        """Serialize the releases, newest first, as a JSON document."""
        return json.dumps([release.to_dict() for release in self.releases], indent=2) + '\n'


def write_changelog(path: Path, text: str) -> None:
    """Write rendered changelog text, creating parent directories."""
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(text, encoding='utf-8')
    logger.info('changelog_written', path=str(path), bytes=len(text.encode('utf-8')))


__all__ = [
    'Changelog',
    'write_changelog',
]

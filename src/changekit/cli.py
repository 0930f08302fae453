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


"""CLI entry point for changekit.

Wires the git backend, the configuration and the GitHub backend into one
changelog run.

Usage::

    # Whole history to stdout:
    changekit

    # Only what happened since the last tag, on top of CHANGELOG.md:
    changekit --unreleased --prepend CHANGELOG.md

    # The latest release, treating HEAD as v1.2.0 if it is untagged:
    changekit --latest --tag v1.2.0 -o RELEASE_NOTES.md

    # Machine-readable releases for another tool:
    changekit --context

    # Explain an error:
    changekit --explain CK-GROUP-NO-MATCH

Range selection::

    --unreleased   <last tag>..HEAD
    --latest       <second-to-last tag>..<last tag>   (root..<tag> with one tag)
    --current      <tag before HEAD's tag>..<HEAD's tag>
    RANGE          any git revision range, e.g. v1.0.0..v1.1.0
"""

from __future__ import annotations

import argparse
import asyncio
import dataclasses
import sys
from pathlib import Path

from rich_argparse import RichHelpFormatter

from changekit import __version__
from changekit.backends.forge import GitHubAPIBackend, IdentityForge
from changekit.backends.vcs import VCS, GitCLIBackend, parse_github_repo
from changekit.changelog import Changelog, write_changelog
from changekit.commit import Commit
from changekit.config import CONFIG_FILENAME, ChangeKitConfig, load_config
from changekit.errors import E, ChangeKitError, VCSError, explain, render_error
from changekit.logging import configure_logging, get_logger
from changekit.release import bucket_releases

logger = get_logger(__name__)


def _apply_overrides(config: ChangeKitConfig, args: argparse.Namespace) -> ChangeKitConfig:
    """Fold command-line overrides into the loaded configuration.

    Raises:
        ChangeKitError: If ``--prepend`` is used without a bounded range.
    """
    changelog = config.changelog
    if args.strip in ('header', 'all'):
        changelog = dataclasses.replace(changelog, header=None)
    if args.strip in ('footer', 'all'):
        changelog = dataclasses.replace(changelog, footer=None)
    if args.prepend is not None:
        changelog = dataclasses.replace(changelog, footer=None)
        if not (args.unreleased or args.latest or args.range):
            raise ChangeKitError(
                code=E.ARGS_MISSING_RANGE,
                message="'-u' or '-l' is not specified",
                hint="Combine --prepend with '-u', '-l' or an explicit RANGE.",
            )
    if args.body is not None:
        changelog = dataclasses.replace(changelog, body=args.body)

    git = config.git
    if args.sort is not None:
        git = dataclasses.replace(git, sort_commits=args.sort)
    if args.date_order:
        git = dataclasses.replace(git, date_order=True)
    return dataclasses.replace(config, changelog=changelog, git=git)


def filter_tags(tags: dict[str, str], config: ChangeKitConfig) -> dict[str, str]:
    """Drop ``ignore_tags`` matches, keeping ``skip_tags`` matches for later."""
    skip = config.git.skip_tags
    ignore = config.git.ignore_tags
    kept: dict[str, str] = {}
    for commit_id, name in tags.items():
        skipped = skip is not None and skip.search(name) is not None
        ignored = ignore is not None and ignore.search(name) is not None
        if ignored and not skipped:
            logger.debug('tag_ignored', tag=name)
            continue
        kept[commit_id] = name
    return kept


async def select_range(args: argparse.Namespace, tags: dict[str, str], vcs: VCS) -> str | None:
    """Translate ``--unreleased`` / ``--latest`` / ``--current`` into a revision range.

    Raises:
        VCSError: If ``--current`` is given but HEAD carries no known tag.
    """
    if args.unreleased:
        if tags:
            return f'{list(tags)[-1]}..HEAD'
        return args.range
    if not (args.latest or args.current):
        return args.range

    tag_ids = list(tags)
    if len(tag_ids) < 2:
        root = await vcs.root_commit()
        if root is not None and tag_ids:
            return f'{root}..{tag_ids[0]}'
        return args.range

    index = len(tag_ids) - 2
    if args.current:
        current = await vcs.current_tag()
        names = list(tags.values())
        if current is None or current not in names:
            raise VCSError(
                code=E.VCS_NO_CURRENT_TAG,
                message='No tag exists for the current commit',
                hint='Check out a tagged commit or use --latest instead.',
            )
        position = names.index(current)
        if position == 0:
            root = await vcs.root_commit()
            return f'{root}..{tag_ids[0]}' if root is not None else args.range
        index = position - 1
    return f'{tag_ids[index]}..{tag_ids[index + 1]}'


async def _detect_github_repo(args: argparse.Namespace, config: ChangeKitConfig, vcs: VCS) -> str | None:
    if args.github_repo:
        return args.github_repo
    if config.github.repo:
        return config.github.repo
    url = await vcs.remote_url()
    return parse_github_repo(url) if url else None


def _create_forge(github_repo: str, args: argparse.Namespace, config: ChangeKitConfig) -> IdentityForge:
    github = config.github
    return GitHubAPIBackend(
        github_repo,
        token=args.github_token or github.token,
        base_url=github.api_url,
        timeout=github.timeout,
        max_retries=github.max_retries,
    )


async def _cmd_generate(args: argparse.Namespace) -> int:
    """Generate the changelog."""
    workdir = Path(args.workdir) if args.workdir else Path.cwd()
    config_path = Path(args.config) if args.config else workdir / CONFIG_FILENAME
    config = _apply_overrides(load_config(config_path, required=args.config is not None), args)
    git = config.git

    vcs = GitCLIBackend(Path(args.repository) if args.repository else workdir)
    tags = filter_tags(await vcs.tags(git.tag_pattern, date_order=git.date_order), config)

    commit_range = await select_range(args, tags, vcs)
    raw_commits = await vcs.commits(
        commit_range,
        include_paths=args.include_path,
        exclude_paths=args.exclude_path,
    )
    if git.limit_commits is not None:
        raw_commits = raw_commits[: git.limit_commits]

    if args.tag and raw_commits:
        newest = raw_commits[0].id
        if newest in tags:
            logger.warning('tag_exists', tag=tags[newest], commit=newest)
        else:
            tags[newest] = args.tag

    commits = [Commit.from_record(raw) for raw in reversed(raw_commits)]
    releases = bucket_releases(
        commits,
        tags,
        sort=git.sort_commits,
        custom_messages=args.with_commit or (),
    )

    github_repo = await _detect_github_repo(args, config, vcs)
    forge = _create_forge(github_repo, args, config) if github_repo else None
    changelog = await Changelog.build(releases, config, forge=forge, github_repo=github_repo)

    if args.prepend is not None:
        path = Path(args.prepend)
        existing = path.read_text(encoding='utf-8') if path.is_file() else ''
        write_changelog(path, changelog.prepend(existing))
    else:
        text = changelog.context() if args.context else changelog.generate()
        if args.output is not None:
            write_changelog(Path(args.output), text)
        else:
            sys.stdout.write(text)
    return 0


def _cmd_explain(args: argparse.Namespace) -> int:
    """Handle ``--explain``."""
    result = explain(args.explain)
    if result is None:
        print(f'Unknown error code: {args.explain}')  # noqa: T201 - CLI output
        return 1
    print(result)  # noqa: T201 - CLI output
    return 0


def build_parser() -> argparse.ArgumentParser:
    """Build the CLI argument parser.

    Returns:
        Configured :class:`argparse.ArgumentParser`.
    """
    RichHelpFormatter.styles['argparse.groups'] = 'bold yellow'
    parser = argparse.ArgumentParser(
        prog='changekit',
        description='Generate a changelog from git history and Conventional Commits.',
        formatter_class=RichHelpFormatter,
    )
    parser.add_argument(
        '--version',
        action='version',
        version=f'%(prog)s {__version__}',
    )
    parser.add_argument(
        'range',
        nargs='?',
        default=None,
        help='Git revision range to include (e.g. v1.0.0..HEAD).',
    )

    general = parser.add_argument_group('general')
    general.add_argument('--config', '-c', metavar='PATH', help=f'Config file (default: ./{CONFIG_FILENAME}).')
    general.add_argument('--workdir', '-w', metavar='PATH', help='Directory to run in.')
    general.add_argument('--repository', '-r', metavar='PATH', help='Git repository (default: the workdir).')
    general.add_argument('--verbose', '-v', action='store_true', help='Show debug output.')
    general.add_argument('--quiet', '-q', action='store_true', help='Only show warnings and errors.')
    general.add_argument('--json-log', action='store_true', help='Log as JSON lines.')
    general.add_argument('--explain', metavar='CODE', help='Explain an error code and exit.')

    selection = parser.add_argument_group('commit selection')
    selection.add_argument(
        '--include-path',
        metavar='PATH',
        nargs='+',
        default=None,
        help='Only include commits touching these paths.',
    )
    selection.add_argument(
        '--exclude-path',
        metavar='PATH',
        nargs='+',
        default=None,
        help='Exclude commits that only touch these paths.',
    )
    selection.add_argument(
        '--with-commit',
        metavar='MSG',
        action='append',
        help='Add a custom commit message to the unreleased section (repeatable).',
    )
    ranges = selection.add_mutually_exclusive_group()
    ranges.add_argument('--current', action='store_true', help='Only the release tagged on HEAD.')
    ranges.add_argument('--latest', '-l', action='store_true', help='Only the latest release.')
    ranges.add_argument('--unreleased', '-u', action='store_true', help='Only commits after the last tag.')
    selection.add_argument('--tag', '-t', metavar='TAG', help='Tag the newest commit as TAG if it has no tag.')
    selection.add_argument(
        '--sort',
        choices=('oldest', 'newest'),
        default=None,
        help='Commit order within a release (default: [git] sort_commits).',
    )
    selection.add_argument('--date-order', action='store_true', help='Order tags by date instead of version.')

    output = parser.add_argument_group('output')
    output_target = output.add_mutually_exclusive_group()
    output_target.add_argument('--output', '-o', metavar='PATH', help='Write to PATH instead of stdout.')
    output_target.add_argument('--prepend', '-p', metavar='PATH', help='Prepend to an existing changelog.')
    output.add_argument('--context', '-x', action='store_true', help='Print the releases as JSON.')
    output.add_argument('--body', '-b', metavar='TEMPLATE', help='Override the [changelog] body template.')
    output.add_argument(
        '--strip',
        '-s',
        choices=('header', 'footer', 'all'),
        default=None,
        help='Leave out the header, the footer or both.',
    )

    github = parser.add_argument_group('github')
    github.add_argument('--github-repo', metavar='OWNER/NAME', help='Repository for links and author lookup.')
    github.add_argument('--github-token', metavar='TOKEN', help='API token (default: GITHUB_TOKEN / GH_TOKEN).')

    return parser


def main(argv: list[str] | None = None) -> int:
    """CLI entry point.

    Args:
        argv: Arguments to parse instead of ``sys.argv[1:]``.

    Returns:
        Exit code (0 for success, non-zero for failure).
    """
    parser = build_parser()
    args = parser.parse_args(argv)
    configure_logging(verbose=args.verbose, quiet=args.quiet, json_log=args.json_log)

    try:
        if args.explain:
            return _cmd_explain(args)
        return asyncio.run(_cmd_generate(args))
    except ChangeKitError as exc:
        render_error(exc)
        return 1
    except KeyboardInterrupt:
        logger.info('interrupted')
        return 130


def _main() -> None:
    """Wrapper for pyproject.toml [project.scripts] entry point."""
    sys.exit(main())


__all__ = [
    'build_parser',
    'filter_tags',
    'main',
    'select_range',
]

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


"""Configuration reader for changekit.

Reads ``changekit.toml`` and returns a validated :class:`ChangeKitConfig`.
Patterns are compiled once here, so every later stage works with
ready-to-use :mod:`changekit.rules` objects and never sees raw TOML.

Key Concepts (ELI5)::

    ┌─────────────────────────┬────────────────────────────────────────────┐
    │ Concept                 │ ELI5 Explanation                           │
    ├─────────────────────────┼────────────────────────────────────────────┤
    │ ChangeKitConfig         │ All settings for one run, split into the   │
    │                         │ [changelog], [git] and [github] tables.    │
    ├─────────────────────────┼────────────────────────────────────────────┤
    │ load_config()           │ Read changekit.toml + validate settings.   │
    │                         │ A missing file just means "use defaults".  │
    ├─────────────────────────┼────────────────────────────────────────────┤
    │ Fuzzy key matching      │ If you typo a config key, we suggest the   │
    │                         │ closest valid key. Like "did you mean?"    │
    │                         │ in a search engine.                        │
    └─────────────────────────┴────────────────────────────────────────────┘

Validation Pipeline::

    changekit.toml
    ┌──────────────────────┐
    │ filter_commit = true │  ← typo!
    └──────────┬───────────┘
               │
               ▼
    ┌──────────────────┐     ┌──────────────────────────────┐
    │ 1. Unknown key   │────→│ CK-CONFIG-INVALID-KEY:       │
    │    detection     │     │ hint: "Did you mean          │
    └────────┬─────────┘     │       'filter_commits'?"     │
             │               └──────────────────────────────┘
             ▼
    ┌──────────────────┐     ┌──────────────────────────────┐
    │ 2. Type check    │────→│ CK-CONFIG-INVALID-VALUE:     │
    │    each value    │     │ Expected bool, got str       │
    └────────┬─────────┘     └──────────────────────────────┘
             │
             ▼
    ┌──────────────────┐     ┌──────────────────────────────┐
    │ 3. Compile       │────→│ CK-CONFIG-INVALID-REGEX:     │
    │    patterns      │     │ unbalanced parenthesis       │
    └────────┬─────────┘     └──────────────────────────────┘
             │
             ▼
    ┌──────────────────┐
    │ ChangeKitConfig  │  ← frozen dataclass, ready to use
    └──────────────────┘

Supported keys::

    [changelog]
    header = "# Changelog\\n"
    body = "..."                    # Jinja2 template; default layout if unset
    footer = "..."
    trim = true

    [git]
    conventional_commits = true
    filter_unconventional = true
    commit_preprocessors = [{ pattern = '\\(#(\\d+)\\)', replace = "([#$1](https://github.com/o/r/pull/$1))" }]
    commit_parsers = [{ message = "^feat", group = "Features" }, { message = "^chore", skip = true }]
    link_parsers = [{ pattern = "#(\\d+)", href = "https://github.com/o/r/issues/$1" }]
    protect_breaking_commits = false
    filter_commits = false
    tag_pattern = "v*"              # glob
    skip_tags = "v0.1.0-beta"       # regex
    ignore_tags = "rc"              # regex
    date_order = false
    sort_commits = "oldest"         # "oldest" or "newest"
    limit_commits = 100

    [github]
    repo = "owner/name"
    resolve_authors = true
    token = ""                      # falls back to GITHUB_TOKEN / GH_TOKEN
    api_url = "https://api.github.com"
    timeout = 10.0
    max_retries = 0

Usage::

    from changekit.config import load_config

    cfg = load_config(Path('changekit.toml'))
    print(cfg.git.filter_commits)
"""

from __future__ import annotations

import difflib
import re
from collections.abc import Callable
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, TypeVar

import tomlkit
import tomlkit.exceptions

from changekit.errors import E, ConfigError
from changekit.logging import get_logger
from changekit.rules import CommitParserRule, LinkParserRule, PreprocessorRule

logger = get_logger(__name__)

_T = TypeVar('_T')

# The config file name looked up in the working directory.
CONFIG_FILENAME = 'changekit.toml'

DEFAULT_GITHUB_API_URL = 'https://api.github.com'

VALID_SECTIONS: frozenset[str] = frozenset({'changelog', 'git', 'github'})

VALID_CHANGELOG_KEYS: frozenset[str] = frozenset({'body', 'footer', 'header', 'trim'})

VALID_GIT_KEYS: frozenset[str] = frozenset({
    'commit_parsers',
    'commit_preprocessors',
    'conventional_commits',
    'date_order',
    'filter_commits',
    'filter_unconventional',
    'ignore_tags',
    'limit_commits',
    'link_parsers',
    'protect_breaking_commits',
    'skip_tags',
    'sort_commits',
    'tag_pattern',
})

VALID_GITHUB_KEYS: frozenset[str] = frozenset({
    'api_url',
    'max_retries',
    'repo',
    'resolve_authors',
    'timeout',
    'token',
})

VALID_PREPROCESSOR_KEYS: frozenset[str] = frozenset({'pattern', 'replace', 'replace_command'})
VALID_COMMIT_PARSER_KEYS: frozenset[str] = frozenset({'body', 'default_scope', 'group', 'message', 'scope', 'skip'})
VALID_LINK_PARSER_KEYS: frozenset[str] = frozenset({'href', 'pattern', 'text'})

ALLOWED_SORT_ORDERS: frozenset[str] = frozenset({'newest', 'oldest'})

_CHANGELOG_TYPE_MAP: dict[str, type | tuple[type, ...]] = {
    'header': str,
    'body': str,
    'footer': str,
    'trim': bool,
}

_GIT_TYPE_MAP: dict[str, type | tuple[type, ...]] = {
    'conventional_commits': bool,
    'filter_unconventional': bool,
    'commit_preprocessors': list,
    'commit_parsers': list,
    'link_parsers': list,
    'protect_breaking_commits': bool,
    'filter_commits': bool,
    'tag_pattern': str,
    'skip_tags': str,
    'ignore_tags': str,
    'date_order': bool,
    'sort_commits': str,
    'limit_commits': int,
}

_GITHUB_TYPE_MAP: dict[str, type | tuple[type, ...]] = {
    'repo': str,
    'resolve_authors': bool,
    'token': str,
    'api_url': str,
    'timeout': (int, float),
    'max_retries': int,
}

_REPO_RE = re.compile(r'[^/\s]+/[^/\s]+')


@dataclass(frozen=True)
class ChangelogConfig:
    """The ``[changelog]`` table.

    Attributes:
        header: Text printed once before all releases.
        body: Jinja2 template rendered per release. ``None`` selects the
            built-in default layout.
        footer: Text printed once after all releases.
        trim: Strip leading/trailing whitespace of every rendered part.
    """

    header: str | None = None
    body: str | None = None
    footer: str | None = None
    trim: bool = False


@dataclass(frozen=True)
class GitConfig:
    """The ``[git]`` table, with every pattern already compiled.

    Attributes:
        conventional_commits: Parse messages as Conventional Commits.
        filter_unconventional: Drop commits that fail to parse.
        commit_preprocessors: Message rewrite rules, in order.
        commit_parsers: Classification rules, in order; ``None`` when
            unset, which skips classification entirely.
        link_parsers: Link extraction rules, in order.
        protect_breaking_commits: Never let a skip rule drop a breaking
            commit.
        filter_commits: Drop commits that match no commit parser.
        tag_pattern: Glob selecting the tags that delimit releases.
        skip_tags: Releases whose version matches are dropped.
        ignore_tags: Matching tags are ignored; their commits fall into
            the next release.
        date_order: Order tags by date instead of by version.
        sort_commits: ``"oldest"`` or ``"newest"`` first within a release.
        limit_commits: Only consider this many of the newest commits.
    """

    conventional_commits: bool = True
    filter_unconventional: bool = True
    commit_preprocessors: tuple[PreprocessorRule, ...] = ()
    commit_parsers: tuple[CommitParserRule, ...] | None = None
    link_parsers: tuple[LinkParserRule, ...] = ()
    protect_breaking_commits: bool = False
    filter_commits: bool = False
    tag_pattern: str | None = None
    skip_tags: re.Pattern[str] | None = None
    ignore_tags: re.Pattern[str] | None = None
    date_order: bool = False
    sort_commits: str = 'oldest'
    limit_commits: int | None = None


@dataclass(frozen=True)
class GithubConfig:
    """The ``[github]`` table.

    Attributes:
        repo: ``owner/name`` coordinate; detected from the ``origin``
            remote when empty.
        resolve_authors: Look up the GitHub login of every commit author.
        token: API token; ``GITHUB_TOKEN`` / ``GH_TOKEN`` when empty.
        api_url: REST API base URL (GitHub Enterprise uses its own).
        timeout: Per-request timeout in seconds.
        max_retries: Transport-level retries for failed requests.
    """

    repo: str = ''
    resolve_authors: bool = False
    token: str = ''
    api_url: str = DEFAULT_GITHUB_API_URL
    timeout: float = 10.0
    max_retries: int = 0


@dataclass(frozen=True)
class ChangeKitConfig:
    """Top-level configuration for a changekit run.

    Attributes:
        changelog: Rendering settings.
        git: Commit processing and release bucketing settings.
        github: Identity resolution settings.
        config_path: The file the settings came from, ``None`` when the
            defaults are in use.
    """

    changelog: ChangelogConfig = field(default_factory=ChangelogConfig)
    git: GitConfig = field(default_factory=GitConfig)
    github: GithubConfig = field(default_factory=GithubConfig)
    config_path: Path | None = None


def _check_keys(raw: dict[str, Any], valid: frozenset[str], context: str) -> None:  # noqa: ANN401 - dynamic config
    """Raise on the first unknown key, suggesting the closest valid one."""
    for key in raw:
        if key not in valid:
            suggestion = difflib.get_close_matches(key, valid, n=1, cutoff=0.6)
            hint = f"Did you mean '{suggestion[0]}'?" if suggestion else f'Valid keys for {context}: {sorted(valid)}'
            raise ConfigError(
                code=E.CONFIG_INVALID_KEY,
                message=f"Unknown key '{key}' in {context}",
                hint=hint,
            )


def _validate_value_type(
    key: str,
    value: Any,  # noqa: ANN401 - dynamic config values
    type_map: dict[str, type | tuple[type, ...]],
    *,
    context: str,
) -> None:
    """Raise if a config value has the wrong type."""
    expected = type_map.get(key)
    if expected is None:
        return
    # bool is an int subclass; never accept it where a number is expected.
    wrong_bool = isinstance(value, bool) and bool not in (expected if isinstance(expected, tuple) else (expected,))
    if wrong_bool or not isinstance(value, expected):
        if isinstance(expected, type):
            type_name = expected.__name__
        else:
            type_name = ' or '.join(t.__name__ for t in expected)
        raise ConfigError(
            code=E.CONFIG_INVALID_VALUE,
            message=f"'{key}' must be {type_name}, got {type(value).__name__}",
            hint=f'Check the value of {key} in {context}.',
        )


def _compile(pattern: str, where: str) -> re.Pattern[str]:
    """Compile a user-supplied regex, reporting where it came from."""
    try:
        return re.compile(pattern)
    except re.error as exc:
        raise ConfigError(
            code=E.CONFIG_INVALID_REGEX,
            message=f'Invalid regex {pattern!r} in {where}: {exc}',
            hint='Patterns use Python re syntax.',
        ) from exc


def _rule_tables(value: list[Any], context: str) -> list[dict[str, Any]]:  # noqa: ANN401 - dynamic config
    """Check that every entry of a rule list is a table."""
    tables: list[dict[str, Any]] = []
    for index, item in enumerate(value):
        if not isinstance(item, dict):
            raise ConfigError(
                code=E.CONFIG_INVALID_VALUE,
                message=f'{context}[{index}] must be a table, got {type(item).__name__}',
                hint='Write rules as inline tables, e.g. { message = "^feat", group = "Features" }.',
            )
        tables.append(item)
    return tables


def _optional_str(raw: dict[str, Any], key: str, context: str) -> str | None:  # noqa: ANN401 - dynamic config
    value = raw.get(key)
    if value is not None and not isinstance(value, str):
        raise ConfigError(
            code=E.CONFIG_INVALID_VALUE,
            message=f"'{key}' must be str, got {type(value).__name__}",
            hint=f'Check {context}.',
        )
    return value


def _parse_preprocessor(raw: dict[str, Any], context: str) -> PreprocessorRule:  # noqa: ANN401 - dynamic config
    _check_keys(raw, VALID_PREPROCESSOR_KEYS, context)
    pattern = _optional_str(raw, 'pattern', context)
    if pattern is None:
        raise ConfigError(code=E.CONFIG_INVALID_VALUE, message=f"{context} is missing 'pattern'")
    replace = _optional_str(raw, 'replace', context)
    replace_command = _optional_str(raw, 'replace_command', context)
    if (replace is None) == (replace_command is None):
        raise ConfigError(
            code=E.CONFIG_INVALID_VALUE,
            message=f"{context} needs exactly one of 'replace' or 'replace_command'",
            hint='Use replace for a substitution, replace_command to pipe the message through a shell command.',
        )
    return PreprocessorRule(
        pattern=_compile(pattern, context),
        replace=replace,
        replace_command=replace_command,
    )


def _parse_commit_parser(raw: dict[str, Any], context: str) -> CommitParserRule:  # noqa: ANN401 - dynamic config
    _check_keys(raw, VALID_COMMIT_PARSER_KEYS, context)
    message = _optional_str(raw, 'message', context)
    body = _optional_str(raw, 'body', context)
    if message is None and body is None:
        raise ConfigError(
            code=E.CONFIG_INVALID_VALUE,
            message=f"{context} needs 'message' or 'body'",
            hint='A commit parser without a pattern can never match.',
        )
    skip = raw.get('skip', False)
    if not isinstance(skip, bool):
        raise ConfigError(
            code=E.CONFIG_INVALID_VALUE,
            message=f"'skip' must be bool, got {type(skip).__name__}",
            hint=f'Check {context}.',
        )
    return CommitParserRule(
        message=_compile(message, context) if message is not None else None,
        body=_compile(body, context) if body is not None else None,
        group=_optional_str(raw, 'group', context),
        scope=_optional_str(raw, 'scope', context),
        default_scope=_optional_str(raw, 'default_scope', context),
        skip=skip,
    )


def _parse_link_parser(raw: dict[str, Any], context: str) -> LinkParserRule:  # noqa: ANN401 - dynamic config
    _check_keys(raw, VALID_LINK_PARSER_KEYS, context)
    pattern = _optional_str(raw, 'pattern', context)
    href = _optional_str(raw, 'href', context)
    if pattern is None or href is None:
        raise ConfigError(
            code=E.CONFIG_INVALID_VALUE,
            message=f"{context} needs both 'pattern' and 'href'",
        )
    return LinkParserRule(
        pattern=_compile(pattern, context),
        href=href,
        text=_optional_str(raw, 'text', context),
    )


def _parse_rules(
    raw: dict[str, Any],  # noqa: ANN401 - dynamic config
    key: str,
    parse: Callable[[dict[str, Any], str], _T],
) -> tuple[_T, ...]:
    if key not in raw:
        return ()
    return tuple(parse(table, f'git.{key}[{i}]') for i, table in enumerate(_rule_tables(raw[key], f'git.{key}')))


def _parse_changelog_section(raw: dict[str, Any]) -> ChangelogConfig:  # noqa: ANN401 - dynamic config
    _check_keys(raw, VALID_CHANGELOG_KEYS, '[changelog]')
    for key, value in raw.items():
        _validate_value_type(key, value, _CHANGELOG_TYPE_MAP, context='[changelog]')
    return ChangelogConfig(**raw)


def _parse_git_section(raw: dict[str, Any]) -> GitConfig:  # noqa: ANN401 - dynamic config
    _check_keys(raw, VALID_GIT_KEYS, '[git]')
    for key, value in raw.items():
        _validate_value_type(key, value, _GIT_TYPE_MAP, context='[git]')

    sort_commits = raw.get('sort_commits', 'oldest')
    if sort_commits not in ALLOWED_SORT_ORDERS:
        raise ConfigError(
            code=E.CONFIG_INVALID_VALUE,
            message=f"sort_commits must be one of {sorted(ALLOWED_SORT_ORDERS)}, got '{sort_commits}'",
            hint="Use 'oldest' to list commits oldest first within a release.",
        )
    limit_commits = raw.get('limit_commits')
    if limit_commits is not None and limit_commits < 1:
        raise ConfigError(
            code=E.CONFIG_INVALID_VALUE,
            message=f'limit_commits must be positive, got {limit_commits}',
        )

    kwargs: dict[str, Any] = dict(raw)  # noqa: ANN401 - dynamic config
    kwargs['commit_preprocessors'] = _parse_rules(raw, 'commit_preprocessors', _parse_preprocessor)
    if 'commit_parsers' in raw:
        kwargs['commit_parsers'] = _parse_rules(raw, 'commit_parsers', _parse_commit_parser)
    kwargs['link_parsers'] = _parse_rules(raw, 'link_parsers', _parse_link_parser)
    for key in ('skip_tags', 'ignore_tags'):
        if raw.get(key):
            kwargs[key] = _compile(raw[key], f'git.{key}')
        else:
            kwargs.pop(key, None)
    return GitConfig(**kwargs)


def _parse_github_section(raw: dict[str, Any]) -> GithubConfig:  # noqa: ANN401 - dynamic config
    _check_keys(raw, VALID_GITHUB_KEYS, '[github]')
    for key, value in raw.items():
        _validate_value_type(key, value, _GITHUB_TYPE_MAP, context='[github]')

    repo = raw.get('repo', '')
    if repo and not _REPO_RE.fullmatch(repo):
        raise ConfigError(
            code=E.CONFIG_INVALID_VALUE,
            message=f"github.repo must look like 'owner/name', got '{repo}'",
            hint="Example: repo = 'orhun/git-cliff'",
        )
    if raw.get('max_retries', 0) < 0:
        raise ConfigError(
            code=E.CONFIG_INVALID_VALUE,
            message=f'github.max_retries must not be negative, got {raw["max_retries"]}',
        )
    if raw.get('timeout', 1) <= 0:
        raise ConfigError(
            code=E.CONFIG_INVALID_VALUE,
            message=f'github.timeout must be positive, got {raw["timeout"]}',
        )

    kwargs: dict[str, Any] = dict(raw)  # noqa: ANN401 - dynamic config
    if 'timeout' in kwargs:
        kwargs['timeout'] = float(kwargs['timeout'])
    kwargs['api_url'] = kwargs.get('api_url', DEFAULT_GITHUB_API_URL).rstrip('/')
    return GithubConfig(**kwargs)


def parse_config(text: str, *, source: Path | None = None) -> ChangeKitConfig:
    """Parse and validate ``changekit.toml`` content.

    Args:
        text: TOML document.
        source: Where the text came from; recorded on the result and
            used in error messages.

    Returns:
        A validated :class:`ChangeKitConfig`.

    Raises:
        ConfigError: If the document is malformed or holds invalid
            settings.
    """
    name = str(source) if source is not None else CONFIG_FILENAME
    try:
        doc = tomlkit.parse(text)
    except tomlkit.exceptions.TOMLKitError as exc:
        raise ConfigError(
            code=E.CONFIG_PARSE_ERROR,
            message=f'Failed to parse {name}: {exc}',
        ) from exc

    raw: dict[str, Any] = doc.unwrap()  # noqa: ANN401 - dynamic config
    _check_keys(raw, VALID_SECTIONS, name)

    sections: dict[str, dict[str, Any]] = {}  # noqa: ANN401 - dynamic config
    for section, value in raw.items():
        if not isinstance(value, dict):
            raise ConfigError(
                code=E.CONFIG_INVALID_VALUE,
                message=f'[{section}] must be a table, got {type(value).__name__}',
            )
        sections[section] = value

    return ChangeKitConfig(
        changelog=_parse_changelog_section(sections.get('changelog', {})),
        git=_parse_git_section(sections.get('git', {})),
        github=_parse_github_section(sections.get('github', {})),
        config_path=source,
    )


def load_config(path: Path, *, required: bool = False) -> ChangeKitConfig:
    """Load and validate configuration from ``changekit.toml``.

    Args:
        path: The config file.
        required: Raise instead of falling back to the defaults when the
            file is missing (an explicit ``--config``).

    Returns:
        A validated :class:`ChangeKitConfig`.

    Raises:
        ConfigError: If the file is missing while ``required``, unreadable,
            or contains invalid config.
    """
    if not path.is_file():
        if required:
            raise ConfigError(
                code=E.CONFIG_NOT_FOUND,
                message=f'Config file {path} does not exist',
                hint='Omit --config to use the defaults.',
            )
        logger.debug('no_changekit_config', path=str(path))
        return ChangeKitConfig()

    try:
        text = path.read_text(encoding='utf-8')
    except OSError as exc:
        raise ConfigError(
            code=E.CONFIG_NOT_FOUND,
            message=f'Failed to read {path}: {exc}',
        ) from exc

    config = parse_config(text, source=path)
    logger.debug(
        'config_loaded',
        path=str(path),
        commit_parsers=len(config.git.commit_parsers or ()),
        link_parsers=len(config.git.link_parsers),
    )
    return config


__all__ = [
    'ALLOWED_SORT_ORDERS',
    'CONFIG_FILENAME',
    'DEFAULT_GITHUB_API_URL',
    'VALID_CHANGELOG_KEYS',
    'VALID_GITHUB_KEYS',
    'VALID_GIT_KEYS',
    'ChangeKitConfig',
    'ChangelogConfig',
    'GitConfig',
    'GithubConfig',
    'load_config',
    'parse_config',
]

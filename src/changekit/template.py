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


"""Jinja2 rendering of user-supplied changelog templates.

The ``[changelog] body`` template is rendered once per release. Its
context is :meth:`Release.to_dict <changekit.release.Release.to_dict>`::

    version, commit_id, timestamp, previous
    commits[]: id, message, body, footers, group, scope, breaking,
               breaking_description, links, author, committer,
               coauthors, github_author, github_coauthors,
               pull_requests, conventional

Example body::

    ## {{ version or "Unreleased" }}
    {% for commit in commits %}
    - {{ commit.message | upper_first }}
    {% endfor %}
"""

from __future__ import annotations

import jinja2

from changekit.errors import E, TemplateError
from changekit.formatter import upper_first
from changekit.release import Release


def _upper_first_filter(value: object) -> str:
    if not isinstance(value, str):
        raise jinja2.TemplateRuntimeError(f'upper_first expects a string, got {type(value).__name__}')
    return upper_first(value)


class Template:
    """A compiled changelog body template.

    Args:
        source: Jinja2 template text.

    Raises:
        TemplateError: If the template does not compile.
    """

    def __init__(self, source: str) -> None:
        """Compile ``source``."""
        env = jinja2.Environment(
            autoescape=False,  # noqa: S701 - renders Markdown, not HTML
            keep_trailing_newline=True,
            trim_blocks=True,
        )
        env.filters['upper_first'] = _upper_first_filter
        try:
            self._template = env.from_string(source)
        except jinja2.TemplateSyntaxError as exc:
            raise TemplateError(
                code=E.TEMPLATE_PARSE,
                message=f'Template syntax error on line {exc.lineno}: {exc.message}',
                hint='Check the [changelog] body template.',
            ) from exc

    def render(self, release: Release) -> str:
        """Render the template for one release.

        Raises:
            TemplateError: If rendering fails.
        """
        try:
            return self._template.render(**release.to_dict())
        except jinja2.TemplateError as exc:
            raise TemplateError(
                code=E.TEMPLATE_RENDER,
                message=f'Failed to render release {release.version or "Unreleased"}: {exc}',
            ) from exc


__all__ = [
    'Template',
]

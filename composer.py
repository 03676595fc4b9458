#!/usr/bin/env python3
"""
Assembly of the destination description page.

Sections are always written in this order:

1.  Summary: an {{Information}} template filled from the source page's
    own {{Information}} (if any) with own-work dependent defaults.
2.  License: the remaining top-level templates, in page order.
3.  Internal links are turned into interwiki links back to the source.
4.  Runs of three or more newlines are collapsed.
5.  Upload log: one table row per file revision, newest first.
6.  Categories, or an "uncategorized" marker when none were given.
7.  The tracking category, if requested.

The strings in transfer_data's output contract section are matched by the
destination renderer and must come out byte for byte.
"""
#
# Distributed under the terms of the MIT license.
#
from __future__ import annotations

import re

from transfer_data import (
    CATEGORY_NS, FILE_NS, LICENSE_HEADING, ORIGINAL_FILE_PAGE, OWN_WORK_DEFAULTS,
    SOURCE_INTERWIKI, SOURCE_PROJECT, SUMMARY_FIELDS, SUMMARY_HEADING, TRACKING_CATEGORY,
    UNCATEGORIZED_MARKER, UPLOAD_LOG_HEADER, UPLOAD_LOG_HEADING, UPLOAD_LOG_ROW,
)
from utils import flatten_summary, format_timestamp

_LINK_TARGET_RE = re.compile(r'(?<=\[\[)(.+?\]\])')
_DOUBLE_PREFIX_RE = re.compile(
    r'\[\[(?:{0}::|{0}:{0}:)'.format(re.escape(SOURCE_INTERWIKI)), re.IGNORECASE)
_NEWLINES_RE = re.compile(r'\n{3,}')


def fuzz_for_param(template, key: str, default: str = '') -> str:
    """
    Fuzz for a parameter in an {{Information}} template.

    Try the key as given (use the capitalized form), then lowercased, then
    lowercased with underscores as spaces. Return default if the template
    is None or has none of them.
    """
    if template is not None:
        for candidate in (key, key.lower(), key.lower().replace('_', ' ')):
            if template.has(candidate):
                return str(template.get(candidate))
    return default


def summary_defaults(own_work: bool, uploader: str) -> dict[str, str]:
    if not own_work:
        return {}
    return {k: v.format(user=uploader) for k, v in OWN_WORK_DEFAULTS.items()}


def summary_section(page, info, own_work: bool, uploader: str) -> str:
    """Build the {{Information}} block; call after the license section is taken out."""
    defaults = summary_defaults(own_work, uploader)
    description, *rest = SUMMARY_FIELDS

    # The free text left on the page follows the source description on a new
    # line; the two are never run together.
    values = [
        '\n'.join(t for t in (fuzz_for_param(info, description, ''), str(page).strip()) if t),
    ]
    values += [fuzz_for_param(info, key, defaults.get(key, '')).strip() for key in rest]

    lines = [SUMMARY_HEADING, '{{Information']
    lines += [f'|{key.lower()}={value}' for key, value in zip(SUMMARY_FIELDS, values)]
    lines.append('}}')
    return '\n'.join(lines) + '\n'


def license_section(page) -> str:
    """Serialize the remaining top-level templates and drop them from the page."""
    text = f'\n{LICENSE_HEADING}\n'
    for template in page.templates():
        text += f'{template}\n'
        template.drop()
    return text


def rewrite_links(text: str) -> str:
    """Point every internal link at the source wiki."""
    text = _LINK_TARGET_RE.sub(SOURCE_INTERWIKI + r':\1', text)
    return _DOUBLE_PREFIX_RE.sub(f'[[{SOURCE_INTERWIKI}:', text)


def collapse_newlines(text: str) -> str:
    return _NEWLINES_RE.sub('\n', text)


def upload_log_section(source_title: str, history) -> str:
    text = f'\n{UPLOAD_LOG_HEADING}\n'
    text += ORIGINAL_FILE_PAGE.format(project=SOURCE_PROJECT, title=source_title) + '\n'
    text += UPLOAD_LOG_HEADER
    for revision in history:
        text += UPLOAD_LOG_ROW.format(
            timestamp=format_timestamp(revision.timestamp),
            width=revision.width,
            height=revision.height,
            interwiki=SOURCE_INTERWIKI,
            user=revision.user,
            summary=flatten_summary(revision.summary),
        )
    return text + '\n|}\n'


def category_section(wiki, categories) -> str:
    if not categories:
        return f'\n{UNCATEGORIZED_MARKER}'
    return ''.join(
        f'\n[[{wiki.resolve_canonical_title(c, CATEGORY_NS, with_ns=True)}]]' for c in categories)


def compose(wiki, page, info, candidate, history) -> str:
    """
    Return the description page text for a candidate.

    page is the parsed, filtered and transformed source page; info is its
    {{Information}} invocation or None; history is the list of file
    revisions, newest first, so the original uploader is the last entry.
    """
    uploader = history[-1].user

    licenses = license_section(page)
    text = summary_section(page, info, candidate.own_work, uploader) + licenses
    text = rewrite_links(text)
    text = collapse_newlines(text)

    source_name = wiki.resolve_canonical_title(candidate.source_title, FILE_NS, with_ns=False)
    text += upload_log_section(source_name, history)
    text += category_section(wiki, candidate.categories)
    if candidate.use_tracking_cat:
        text += f'\n[[{TRACKING_CATEGORY}]]'
    return text

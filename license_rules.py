#!/usr/bin/env python3
"""
Rewriting of license and attribution templates.

LICENSE_RULES maps a canonical template title to the function that adapts
it for the destination wiki. Titles without a rule pass through unchanged,
so supporting another template only needs a new entry.
"""
#
# Distributed under the terms of the MIT license.
#
from __future__ import annotations

import pywikibot

from transfer_data import (
    ATTRIBUTION, INFORMATION_TEMPLATE, LICENSE_RENAMES, SELF_TEMPLATE, SOURCE_INTERWIKI,
)


def attribution(uploader: str) -> str:
    """Cross-wiki reference to the original uploader."""
    return ATTRIBUTION.format(user=uploader, interwiki=SOURCE_INTERWIKI)


def _summary_source(template, uploader):
    """{{Information}} feeds the summary section instead of the license section."""
    return template


def _self(template, uploader):
    if not template.has('author'):
        template.put('author', attribution(uploader))


def _rename(source_title):
    rename = LICENSE_RENAMES[source_title]

    def rule(template, uploader):
        template.title = rename['title']
        value = uploader if rename['value'] == 'name' else attribution(uploader)
        template.put(rename['param'], value)

    rule.__doc__ = f"{{{{{source_title}}}}} becomes {{{{{rename['title']}}}}}."
    return rule


LICENSE_RULES = {
    INFORMATION_TEMPLATE: _summary_source,
    SELF_TEMPLATE: _self,
    **{title: _rename(title) for title in LICENSE_RENAMES},
}


def transform_templates(page, uploader: str):
    """
    Apply LICENSE_RULES to the top-level invocations of a page.

    Return the {{Information}} invocation, already dropped from the page,
    or None if the page has none.
    """
    info = None
    for template in page.templates():
        rule = LICENSE_RULES.get(template.title)
        if rule is None:
            continue
        if rule(template, uploader) is template:
            if info is None:
                info = template
            else:
                pywikibot.warning(f'Found more than one {{{{{template.title}}}}}; keeping the first')

    if info is not None:
        info.drop()
    return info

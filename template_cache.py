#!/usr/bin/env python3
"""
Cached results of whether a given template exists on the destination wiki.

The cache lives for the whole run and is shared by all candidates. Entries
are only ever added: a title is queried at most once, and a title nobody
asked about never gets an entry.
"""
#
# Distributed under the terms of the MIT license.
#
from __future__ import annotations

import threading

import pywikibot

from transfer_data import TEMPLATE_NS


class ExistenceCache:

    def __init__(self, wiki, namespace: int = TEMPLATE_NS) -> None:
        self.wiki = wiki
        self.namespace = namespace
        self._known = {}
        # Serializes lookups so two candidates never query the same title.
        self._lock = threading.Lock()

    def verify(self, titles) -> dict[str, bool]:
        """
        Return what is known about the given titles, querying unknown ones
        in a single batch first.

        Titles the wiki did not report on are left out of the result and
        out of the cache.
        """
        titles = set(titles)
        with self._lock:
            missing = sorted(t for t in titles if t not in self._known)
            if missing:
                pywikibot.debug(f'Checking {len(missing)} templates on the destination wiki')
                results = self.wiki.exists_batch(missing, self.namespace)
                for title in missing:
                    if title in results:
                        self._known.setdefault(title, bool(results[title]))
            return {t: self._known[t] for t in titles if t in self._known}

    def exists(self, title: str) -> bool | None:
        """Return the cached answer, or None if the title was never confirmed."""
        return self._known.get(title)

    def __contains__(self, title) -> bool:
        return title in self._known

    def __len__(self) -> int:
        return len(self._known)


def filter_templates(page, cache: ExistenceCache) -> list:
    """Drop every invocation whose template is absent from the destination."""
    templates = page.templates_recursive()
    cache.verify(t.title for t in templates)

    dropped = []
    for template in templates:
        if not template.dropped and cache.exists(template.title) is False:
            pywikibot.debug(f'Dropping {{{{{template.title}}}}}: not on the destination wiki')
            template.drop()
            dropped.append(template)
    return dropped

#!/usr/bin/env python3
"""
Read access to the source and destination wikis through Pywikibot.

Everything the transfer pipeline needs to know about either wiki goes
through WikiAccess. Queries about many titles are sent in batches of
API_BATCH_SIZE and always return a map with one entry per title that the
wiki reported on; callers treat absent entries as unknown.

Pywikibot errors are re-raised as FetchError. Retrying is left to
Pywikibot's own throttle and retry settings in user-config.py.
"""
#
# Distributed under the terms of the MIT license.
#
from __future__ import annotations

from contextlib import contextmanager
from dataclasses import dataclass
from datetime import datetime

import pywikibot
from pywikibot.data import api
from pywikibot.exceptions import Error, InvalidTitleError

from errors import FetchError
from transfer_data import API_BATCH_SIZE, DESTINATION_SITE, FILE_NS, SOURCE_SITE, TEMPLATE_NS


@dataclass(frozen=True)
class ImageRevision:

    """One upload of a file, as shown in its file history."""

    timestamp: datetime
    width: int
    height: int
    user: str
    summary: str = ''


@contextmanager
def fetching(what: str):
    try:
        yield
    except Error as e:
        raise FetchError(f'Could not fetch {what}: {e}') from e


def batches(titles, size: int = API_BATCH_SIZE):
    titles = list(titles)
    for start in range(0, len(titles), size):
        yield titles[start:start + size]


class WikiAccess:

    def __init__(self, source=None, destination=None) -> None:
        self.source = source or pywikibot.Site(*SOURCE_SITE)
        self.destination = destination or pywikibot.Site(*DESTINATION_SITE)

    # =========================================================================
    # Single pages
    # =========================================================================

    def get_page_text(self, title: str) -> str:
        with fetching(f'the text of {title}'):
            return pywikibot.Page(self.source, title).get()

    def get_image_history(self, title: str) -> list[ImageRevision]:
        """Return the upload history of a source file, newest upload first."""
        with fetching(f'the file history of {title}'):
            history = pywikibot.FilePage(self.source, title).get_file_history()

        revisions = [
            ImageRevision(
                timestamp=info.timestamp,
                width=getattr(info, 'width', 0),
                height=getattr(info, 'height', 0),
                user=info.user,
                summary=getattr(info, 'comment', ''),
            )
            for info in history.values()
        ]
        return sorted(revisions, key=lambda r: r.timestamp, reverse=True)

    def what_links_here(self, title: str) -> list[str]:
        """Get a list of redirect titles for a given template."""
        with fetching(f'redirects to {title}'):
            page = pywikibot.Page(self.source, title, ns=TEMPLATE_NS)
            redirects = page.redirects(filter_fragments=False, namespaces=TEMPLATE_NS)
            return [redirect.title(with_ns=False) for redirect in redirects]

    def resolve_canonical_title(self, title: str, namespace: int, with_ns: bool = True) -> str:
        """
        Canonicalize a title the way the destination wiki does (first letter
        case, underscores, namespace aliases).

        Without with_ns the namespace prefix is dropped, but only for titles
        that really are in the given namespace.
        """
        try:
            page = pywikibot.Page(self.destination, title, ns=namespace)
        except InvalidTitleError:
            return title.strip()
        if with_ns or page.namespace() != namespace:
            return page.title()
        return page.title(with_ns=False)

    # =========================================================================
    # Batched queries
    # =========================================================================

    def _query(self, site, prop: str, titles, namespace: int = 0, **parameters):
        """
        Run a prop query for many titles and yield (requested title, page data).

        Titles are normalized locally first so that the normalized titles the
        API reports can be matched back to the requested ones.
        """
        requested = {}
        for title in titles:
            try:
                requested[pywikibot.Page(site, title, ns=namespace).title()] = title
            except InvalidTitleError:
                pywikibot.debug(f'Skipping invalid title {title!r}')

        for chunk in batches(requested):
            with fetching(f'{prop} for {len(chunk)} pages'):
                request = dict(parameters, titles=chunk)
                for data in api.PropertyGenerator(prop, site=site, parameters=request):
                    if data.get('title') in requested:
                        yield requested[data['title']], data

    def exists_batch(self, titles, namespace: int) -> dict[str, bool]:
        """Check which titles exist on the destination wiki."""
        titles = list(titles)
        result = {}
        for title, data in self._query(self.destination, 'info', titles, namespace):
            result[title] = 'missing' not in data and 'invalid' not in data
        # Titles that can't be valid page names can't exist either.
        for title in titles:
            if title not in result:
                try:
                    pywikibot.Page(self.destination, title, ns=namespace)
                except InvalidTitleError:
                    result[title] = False
        return result

    def get_categories(self, titles) -> dict[str, list[str]]:
        result = {}
        for title, data in self._query(self.source, 'categories', titles, FILE_NS, cllimit='max'):
            result.setdefault(title, []).extend(c['title'] for c in data.get('categories', []))
        return result

    def get_links_on_page(self, titles) -> dict[str, list[str]]:
        result = {}
        for title, data in self._query(self.source, 'links', titles, pllimit='max'):
            result.setdefault(title, []).extend(link['title'] for link in data.get('links', []))
        return result

    def get_shared_duplicates(self, titles) -> dict[str, list[str]]:
        """Map each source file to its duplicates on the shared file repository."""
        result = {}
        for title, data in self._query(self.source, 'duplicatefiles', titles, FILE_NS, dflimit='max'):
            shared = [d['name'] for d in data.get('duplicatefiles', []) if 'shared' in d]
            result.setdefault(title, []).extend(shared)
        return result

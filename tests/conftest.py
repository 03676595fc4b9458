#!/usr/bin/env python3
"""
Pytest fixtures for the transfer bot tests.

FakeWiki stands in for WikiAccess so no network access or bot account is
needed. It records every call, which lets tests check batching and caching.
"""
from __future__ import annotations

import os

# pywikibot must not look for a user-config.py during the tests.
os.environ.setdefault('PYWIKIBOT_NO_USER_CONFIG', '2')

import random  # noqa: E402
from datetime import datetime  # noqa: E402

import pytest  # noqa: E402

from description_pipeline import DescriptionPipeline, TransferSettings  # noqa: E402
from redirects import RedirectTable  # noqa: E402
from transfer_data import CATEGORY_NS, FILE_NS, TEMPLATE_NS  # noqa: E402
from wiki_access import ImageRevision  # noqa: E402

NS_PREFIXES = {FILE_NS: 'File', TEMPLATE_NS: 'Template', CATEGORY_NS: 'Category'}


class FakeWiki:

    """In-memory source and destination wikis."""

    def __init__(self, pages=None, categories=None, history=None, templates=None,
                 files=(), links=None, duplicates=None, redirects=None, unanswered=()):
        self.pages = dict(pages or {})
        self.categories = dict(categories or {})
        self.history = dict(history or {})
        self.templates = dict(templates or {})  # destination template -> exists
        self.files = set(files)  # files on the destination
        self.links = dict(links or {})
        self.duplicates = dict(duplicates or {})
        self.redirects = dict(redirects or {})
        self.unanswered = set(unanswered)  # titles exists_batch stays silent about
        self.calls = []

    def _record(self, name, *args):
        self.calls.append((name, *args))

    def calls_to(self, name):
        return [c for c in self.calls if c[0] == name]

    def get_page_text(self, title):
        self._record('get_page_text', title)
        return self.pages[title]

    def get_image_history(self, title):
        self._record('get_image_history', title)
        return list(self.history.get(title, []))

    def what_links_here(self, title):
        self._record('what_links_here', title)
        return list(self.redirects.get(title, []))

    def resolve_canonical_title(self, title, namespace, with_ns=True):
        title = ' '.join(title.replace('_', ' ').split())
        prefix = NS_PREFIXES.get(namespace)
        head, sep, rest = title.partition(':')
        if prefix and sep and head.lower() == prefix.lower():
            title = rest.strip()
        title = title[:1].upper() + title[1:]
        return f'{prefix}:{title}' if with_ns and prefix else title

    def exists_batch(self, titles, namespace):
        titles = list(titles)
        self._record('exists_batch', tuple(titles), namespace)
        if namespace == FILE_NS:
            return {t: t in self.files for t in titles if t not in self.unanswered}
        return {t: self.templates.get(t, False) for t in titles if t not in self.unanswered}

    def get_categories(self, titles):
        self._record('get_categories', tuple(titles))
        return {t: list(self.categories[t]) for t in titles if t in self.categories}

    def get_links_on_page(self, titles):
        self._record('get_links_on_page', tuple(titles))
        return {t: list(self.links.get(t, [])) for t in titles}

    def get_shared_duplicates(self, titles):
        self._record('get_shared_duplicates', tuple(titles))
        return {t: list(self.duplicates.get(t, [])) for t in titles}


def revision(user, when='2020-01-01 12:00:00', width=640, height=480, summary=''):
    return ImageRevision(
        timestamp=datetime.strptime(when, '%Y-%m-%d %H:%M:%S'),
        width=width, height=height, user=user, summary=summary)


COMMON_TEMPLATES = {
    'Information': True,
    'Self': True,
    'Cc-by-sa-4.0': True,
    'User at project': True,
    'Own work by original uploader': True,
    'PD-self': True,
    'GFDL-self': True,
    'GFDL-self-with-disclaimers': True,
}


@pytest.fixture
def settings():
    return TransferSettings(
        blacklist=frozenset({'Category:Non-free media'}),
        whitelist=frozenset({'Category:Copy to Wikimedia Commons', 'Category:Self-published work'}),
        redirects=RedirectTable.from_text('Self|Self2|Selfref\nInformation|Info'),
        marker_aliases=('Copy to Commons', 'Copy to Wikimedia Commons'),
    )


@pytest.fixture
def wiki():
    return FakeWiki(
        pages={
            'File:Photo.jpg': (
                '{{Copy to Wikimedia Commons}}\n'
                '{{Information|Description=Test photo|Date=2020-01-01}}\n'
                '{{Self|Cc-by-sa-4.0}}\n'
                '[[Category:Test]]'
            ),
        },
        categories={'File:Photo.jpg': ['Category:Self-published work', 'Category:Test']},
        history={'File:Photo.jpg': [revision('Alice', summary='First  upload\nof photo')]},
        templates=dict(COMMON_TEMPLATES),
    )


@pytest.fixture
def pipeline(wiki, settings):
    return DescriptionPipeline(wiki, settings, rng=random.Random(7))

#!/usr/bin/env python3
"""
Template redirect resolution.

The redirect table is read from a configuration page where each line lists
a canonical template title followed by its aliases, separated by pipes:

    Self|Self2|Selfref

Every title on a line, the first one included, maps to the first title.
Empty lines and lines starting with '<' (comments, <pre> tags) are skipped.
"""
#
# Distributed under the terms of the MIT license.
#
from __future__ import annotations

from types import MappingProxyType

from transfer_data import TEMPLATE_NS


class RedirectTable:

    """Immutable mapping of alias title to canonical title."""

    def __init__(self, mapping=None) -> None:
        self._map = MappingProxyType(dict(mapping or {}))

    @classmethod
    def from_text(cls, text: str) -> RedirectTable:
        mapping = {}
        for line in text.splitlines():
            line = line.strip()
            if not line or line.startswith('<'):
                continue
            titles = [t.strip() for t in line.split('|') if t.strip()]
            for title in titles:
                mapping[title] = titles[0]
        return cls(mapping)

    def resolve(self, title: str) -> str:
        return self._map.get(title, title)

    def __contains__(self, title) -> bool:
        return title in self._map

    def __getitem__(self, title: str) -> str:
        return self._map[title]

    def __len__(self) -> int:
        return len(self._map)

    def __iter__(self):
        return iter(self._map)


class TitleNormalizer:

    """Give template invocations their canonical destination titles."""

    def __init__(self, wiki, table: RedirectTable) -> None:
        self.wiki = wiki
        self.table = table

    def canonical(self, title: str) -> str:
        """Wiki-canonicalize a template title, then follow the redirect table."""
        title = self.wiki.resolve_canonical_title(title, TEMPLATE_NS, with_ns=False)
        return self.table.resolve(title)

    def normalize(self, page) -> None:
        """Normalize every invocation of a parsed page, nested ones included."""
        for template in page.templates_recursive():
            template.title = self.canonical(template.raw_title)

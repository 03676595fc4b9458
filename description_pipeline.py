#!/usr/bin/env python3
"""
Generation of destination description pages for a batch of files.

Operational Flow:
1.  Initialization: the blacklist, whitelist, template redirect table and the
    marker template's redirects are read once from the source wiki and kept
    for the whole run (TransferSettings).
2.  Candidate selection: CandidateBuilder filters the requested files and
    resolves their destination names.
3.  Generation, per candidate: strip and parse the page text, normalize
    template titles, drop templates missing on the destination, rewrite
    license templates and compose the final text.

Candidates only share the read-only settings and the append-only template
existence cache, so they can be generated in parallel. A failing candidate
is marked FAILED and never stops its siblings.
"""
#
# Distributed under the terms of the MIT license.
#
from __future__ import annotations

import random
from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass

import pywikibot

from candidates import CandidateBuilder, CandidateState
from composer import compose
from errors import MissingMetadataError, TransferError
from license_rules import transform_templates
from redirects import RedirectTable, TitleNormalizer
from template_cache import ExistenceCache, filter_templates
from transfer_data import BLACKLIST_PAGE, MARKER_TEMPLATE, REDIRECTS_PAGE, WHITELIST_PAGE
from wikitext import parse, strip_text


@dataclass(frozen=True)
class TransferSettings:

    """Startup configuration, read once and never changed afterwards."""

    blacklist: frozenset
    whitelist: frozenset
    redirects: RedirectTable
    marker_aliases: tuple

    @classmethod
    def load(cls, wiki) -> TransferSettings:
        pywikibot.info('Loading blacklist, whitelist and template redirects...')
        links = wiki.get_links_on_page([BLACKLIST_PAGE, WHITELIST_PAGE])
        redirects = RedirectTable.from_text(wiki.get_page_text(REDIRECTS_PAGE))
        aliases = (*wiki.what_links_here(MARKER_TEMPLATE), MARKER_TEMPLATE)

        settings = cls(
            blacklist=frozenset(links.get(BLACKLIST_PAGE, ())),
            whitelist=frozenset(links.get(WHITELIST_PAGE, ())),
            redirects=redirects,
            marker_aliases=aliases,
        )
        pywikibot.info(f'{"    - Blacklisted:":<25}{len(settings.blacklist)} categories')
        pywikibot.info(f'{"    - Whitelisted:":<25}{len(settings.whitelist)} categories')
        pywikibot.info(f'{"    - Redirects:":<25}{len(settings.redirects)} titles')
        pywikibot.info(f'{"    - Marker aliases:":<25}{len(settings.marker_aliases)}')
        if not settings.whitelist:
            pywikibot.warning('The whitelist is empty; only -ignorefilter runs can transfer files.')
        return settings


class DescriptionPipeline:

    def __init__(self, wiki, settings: TransferSettings, cache: ExistenceCache | None = None,
                 rng: random.Random | None = None) -> None:
        self.wiki = wiki
        self.settings = settings
        self.cache = cache if cache is not None else ExistenceCache(wiki)
        self.normalizer = TitleNormalizer(wiki, settings.redirects)
        self.builder = CandidateBuilder(wiki, settings, rng)

    def build_candidates(self, titles, ignore_filter: bool = False, use_tracking_cat: bool = False,
                         categories=()):
        return self.builder.build(titles, ignore_filter, use_tracking_cat, categories)

    def generate(self, candidate):
        """
        Generate the description page text of one candidate.

        Candidates that are not ready (rejected, failed, or without a
        destination name) are returned untouched.
        """
        if candidate.state is not CandidateState.NAME_RESOLVED:
            return candidate
        try:
            self._generate(candidate)
        except TransferError as e:
            pywikibot.error(f'{candidate.source_title}: {e}')
            candidate.fail(e)
        return candidate

    def _generate(self, candidate) -> None:
        history = self.wiki.get_image_history(candidate.source_title)
        if not history:
            raise MissingMetadataError(f'{candidate.source_title} has no upload history')
        uploader = history[-1].user

        text = strip_text(self.wiki.get_page_text(candidate.source_title), self.settings.marker_aliases)
        page = parse(text)
        candidate.advance(CandidateState.PARSED)

        self.normalizer.normalize(page)
        candidate.advance(CandidateState.NORMALIZED)

        dropped = filter_templates(page, self.cache)
        if dropped:
            pywikibot.warning(f'{candidate.source_title}: dropped {len(dropped)} '
                              'templates missing on the destination')
        candidate.advance(CandidateState.EXISTENCE_FILTERED)

        info = transform_templates(page, uploader)
        candidate.advance(CandidateState.TRANSFORMED)

        candidate.text = compose(self.wiki, page, info, candidate, history)
        candidate.advance(CandidateState.COMPOSED)

    def generate_all(self, candidates, max_workers: int = 1):
        """Generate every candidate, in parallel when max_workers > 1."""
        candidates = list(candidates)
        if max_workers <= 1:
            return [self.generate(c) for c in candidates]
        with ThreadPoolExecutor(max_workers=max_workers) as executor:
            return list(executor.map(self.generate, candidates))

    def run(self, titles, ignore_filter: bool = False, use_tracking_cat: bool = False,
            categories=(), max_workers: int = 1):
        candidates = self.build_candidates(titles, ignore_filter, use_tracking_cat, categories)
        return self.generate_all(candidates, max_workers)

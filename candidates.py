#!/usr/bin/env python3
"""
Selection of files to transfer.

CandidateBuilder turns a list of source file titles into TransferCandidate
objects:

1.  Categories and shared duplicates are fetched for all titles in batches.
2.  Files that already have a duplicate on the shared repository are
    rejected, then (unless the filter is ignored) files in a blacklisted
    category or in no whitelisted category.
3.  Own-work status comes from the self-published work category.
4.  Each remaining file gets a destination name that is free on the
    destination wiki and unique within the batch.
"""
#
# Distributed under the terms of the MIT license.
#
from __future__ import annotations

import random
from dataclasses import dataclass, field
from enum import Enum

import pywikibot

from errors import NameResolutionError
from transfer_data import FILE_NS, MAX_NAME_ATTEMPTS, NAME_TOKEN_RANGE, OWN_WORK_CATEGORY
from utils import insert_before_extension


class CandidateState(Enum):
    CREATED = 'created'
    ELIGIBLE = 'eligible'
    REJECTED = 'rejected'
    NAME_RESOLVED = 'name resolved'
    PARSED = 'parsed'
    NORMALIZED = 'normalized'
    EXISTENCE_FILTERED = 'existence filtered'
    TRANSFORMED = 'transformed'
    COMPOSED = 'composed'
    FAILED = 'failed'


@dataclass
class TransferCandidate:

    """One source file queued for transfer."""

    source_title: str
    destination_title: str | None = None
    own_work: bool = False
    use_tracking_cat: bool = False
    categories: list[str] = field(default_factory=list)
    text: str | None = None
    state: CandidateState = CandidateState.CREATED
    error: Exception | None = None
    reason: str = ''

    def advance(self, state: CandidateState) -> None:
        pywikibot.debug(f'{self.source_title}: {self.state.value} -> {state.value}')
        self.state = state

    def fail(self, error: Exception) -> None:
        self.error = error
        self.advance(CandidateState.FAILED)

    def to_record(self) -> dict:
        return {
            'sourceTitle': self.source_title,
            'destinationTitle': self.destination_title,
            'generatedText': self.text,
        }


class CandidateBuilder:

    def __init__(self, wiki, settings, rng: random.Random | None = None) -> None:
        self.wiki = wiki
        self.settings = settings
        self.rng = rng or random.Random()

    def is_eligible(self, categories) -> bool:
        """A file may move if it is in a whitelisted and no blacklisted category."""
        categories = set(categories)
        if categories & self.settings.blacklist:
            return False
        return bool(categories & self.settings.whitelist)

    def build(self, titles, ignore_filter: bool = False, use_tracking_cat: bool = False,
              categories=()) -> list[TransferCandidate]:
        """
        Create a candidate for every title, in input order.

        Rejected files come back in the REJECTED state; files that could not
        be given a destination name come back FAILED.
        """
        titles = list(dict.fromkeys(titles))
        candidates = [
            TransferCandidate(t, use_tracking_cat=use_tracking_cat, categories=list(categories))
            for t in titles
        ]
        if not candidates:
            return candidates

        cats_by_title = self.wiki.get_categories(titles)
        duplicates = self.wiki.get_shared_duplicates(titles)

        eligible = []
        for candidate in candidates:
            cats = cats_by_title.get(candidate.source_title, [])
            if duplicates.get(candidate.source_title):
                candidate.reason = 'already on the shared repository'
            elif not ignore_filter and not self.is_eligible(cats):
                candidate.reason = 'not eligible by category'
            else:
                candidate.own_work = OWN_WORK_CATEGORY in cats
                candidate.advance(CandidateState.ELIGIBLE)
                eligible.append(candidate)
                continue
            pywikibot.info(f'Skipping {candidate.source_title}: {candidate.reason}')
            candidate.advance(CandidateState.REJECTED)

        self.resolve_names(eligible)
        return candidates

    def resolve_names(self, candidates) -> None:
        """Give each candidate a destination title not used on the destination wiki."""
        if not candidates:
            return
        existing = self.wiki.exists_batch([c.source_title for c in candidates], FILE_NS)
        taken = set()
        for candidate in candidates:
            title = candidate.source_title
            try:
                if existing.get(title, True) or title in taken:
                    title = self.find_free_name(title, taken)
            except NameResolutionError as e:
                pywikibot.error(f'{candidate.source_title}: {e}')
                candidate.fail(e)
                continue
            taken.add(title)
            candidate.destination_title = title
            candidate.advance(CandidateState.NAME_RESOLVED)

    def find_free_name(self, title: str, taken=()) -> str:
        for _ in range(MAX_NAME_ATTEMPTS):
            variant = insert_before_extension(title, self.rng.randint(*NAME_TOKEN_RANGE))
            if variant in taken:
                continue
            if not self.wiki.exists_batch([variant], FILE_NS).get(variant, True):
                pywikibot.warning(f'{title} exists on the destination wiki; using {variant}')
                return variant
        raise NameResolutionError(
            f'No free destination name for {title} after {MAX_NAME_ATTEMPTS} attempts')

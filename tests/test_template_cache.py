#!/usr/bin/env python3
"""Tests for the template existence cache and filter."""
from __future__ import annotations

from concurrent.futures import ThreadPoolExecutor

from conftest import FakeWiki
from template_cache import ExistenceCache, filter_templates
from transfer_data import TEMPLATE_NS
from wikitext import parse


def make_cache(**templates):
    wiki = FakeWiki(templates=templates)
    return wiki, ExistenceCache(wiki)


def test_unknown_titles_are_queried_in_one_batch():
    wiki, cache = make_cache(Self=True, Information=True)
    result = cache.verify(['Self', 'Information', 'Nope', 'Self'])
    assert result == {'Self': True, 'Information': True, 'Nope': False}
    assert wiki.calls_to('exists_batch') == [
        ('exists_batch', ('Information', 'Nope', 'Self'), TEMPLATE_NS)]


def test_cached_titles_are_never_queried_again():
    wiki, cache = make_cache(Self=True)
    cache.verify(['Self', 'Gone'])
    wiki.templates['Gone'] = True  # would change the answer if asked again
    assert cache.verify(['Self', 'Gone']) == {'Self': True, 'Gone': False}
    assert cache.exists('Gone') is False
    assert len(wiki.calls_to('exists_batch')) == 1


def test_only_new_titles_are_queried():
    wiki, cache = make_cache(Self=True, Information=True)
    cache.verify(['Self'])
    cache.verify(['Self', 'Information'])
    assert [c[1] for c in wiki.calls_to('exists_batch')] == [('Self',), ('Information',)]


def test_cache_only_holds_queried_titles():
    wiki, cache = make_cache(Self=True, Information=True)
    cache.verify(['Self'])
    assert 'Self' in cache
    assert 'Information' not in cache
    assert cache.exists('Information') is None
    assert len(cache) == 1


def test_unanswered_titles_stay_unknown():
    wiki, cache = make_cache(Self=True)
    wiki.unanswered = {'Flaky'}
    assert cache.verify(['Self', 'Flaky']) == {'Self': True}
    assert 'Flaky' not in cache


def test_empty_request_does_not_query():
    wiki, cache = make_cache()
    assert cache.verify([]) == {}
    assert wiki.calls_to('exists_batch') == []


def test_concurrent_verification_queries_each_title_once():
    wiki, cache = make_cache(Self=True)
    with ThreadPoolExecutor(max_workers=8) as executor:
        list(executor.map(lambda _: cache.verify(['Self', 'Gone']), range(32)))
    queried = [t for c in wiki.calls_to('exists_batch') for t in c[1]]
    assert sorted(queried) == ['Gone', 'Self']


def test_filter_drops_missing_templates_everywhere():
    wiki, cache = make_cache(Information=True, Self=True, en=True)
    page = parse('{{Information|Description={{en|a}}{{Enwp only}}}}\n{{Self}}{{Local}}')
    dropped = filter_templates(page, cache)

    assert [t.title for t in dropped] == ['Enwp only', 'Local']
    assert [t.title for t in page.templates()] == ['Information', 'Self']
    assert [t.title for t in page.templates_recursive()] == ['Information', 'en', 'Self']
    assert str(page) == '{{Information|Description={{en|a}}}}\n{{Self}}'


def test_filter_rejects_known_missing_titles_without_query():
    wiki, cache = make_cache(Self=True)
    filter_templates(parse('{{Local}}'), cache)
    page = parse('{{Self}}{{Local}}')
    filter_templates(page, cache)
    assert str(page) == '{{Self}}'
    assert [c[1] for c in wiki.calls_to('exists_batch')] == [('Local',), ('Self',)]


def test_filter_keeps_unanswered_templates():
    wiki, cache = make_cache()
    wiki.unanswered = {'Flaky'}
    page = parse('{{Flaky}}')
    assert filter_templates(page, cache) == []
    assert str(page) == '{{Flaky}}'

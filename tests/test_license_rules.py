#!/usr/bin/env python3
"""Tests for the license template rule table."""
from __future__ import annotations

from license_rules import LICENSE_RULES, attribution, transform_templates
from wikitext import parse


def transformed(text, uploader='Alice'):
    page = parse(text)
    info = transform_templates(page, uploader)
    return page, info


def test_rule_table_covers_special_templates():
    assert set(LICENSE_RULES) == {
        'Information', 'Self', 'PD-self', 'GFDL-self-with-disclaimers', 'GFDL-self'}


def test_attribution_points_at_source_wiki():
    assert attribution('Alice') == '{{User at project|Alice|w|en}}'


def test_self_gets_author():
    page, _ = transformed('{{Self|Cc-by-sa-4.0}}')
    assert str(page) == '{{Self|Cc-by-sa-4.0|author={{User at project|Alice|w|en}}}}'


def test_self_keeps_existing_author():
    page, _ = transformed('{{Self|Cc-by-sa-4.0|author=Bob}}')
    assert str(page) == '{{Self|Cc-by-sa-4.0|author=Bob}}'


def test_pd_self_is_renamed():
    page, _ = transformed('{{PD-self|date=2020}}')
    assert str(page) == '{{PD-user-en|date=2020|Alice}}'


def test_pd_self_replaces_positional_parameter():
    page, _ = transformed('{{PD-self|Someone}}')
    assert str(page) == '{{PD-user-en|Alice}}'


def test_gfdl_self_with_disclaimers_is_renamed():
    page, _ = transformed('{{GFDL-self-with-disclaimers}}')
    assert str(page) == '{{GFDL-user-en-with-disclaimers|Alice}}'


def test_gfdl_self_gets_attribution():
    page, _ = transformed('{{GFDL-self|migration=relicense}}')
    assert str(page) == (
        '{{GFDL-self-en|migration=relicense|author={{User at project|Alice|w|en}}}}')


def test_information_is_set_aside():
    page, info = transformed('{{Information|Description=x}}\n{{Self|Cc-zero}}')
    assert info.title == 'Information'
    assert str(info.get('Description')) == 'x'
    assert info.dropped
    assert [t.title for t in page.templates()] == ['Self']


def test_missing_information_returns_none():
    page, info = transformed('{{Cc-by-4.0}}')
    assert info is None
    assert str(page) == '{{Cc-by-4.0}}'


def test_only_top_level_templates_are_rewritten():
    page, _ = transformed('{{Wrapper|{{PD-self}}}}')
    assert str(page) == '{{Wrapper|{{PD-self}}}}'


def test_second_information_stays_on_page():
    page, info = transformed('{{Information|Description=a}}{{Information|Description=b}}')
    assert str(info.get('Description')) == 'a'
    assert str(page) == '{{Information|Description=b}}'

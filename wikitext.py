#!/usr/bin/env python3
"""
Wikitext handling for description pages.

The raw page text goes through two stages:

1.  Stripping: an ordered list of textual passes removes constructs that
    must not be transferred (the marker template, comments, category links,
    section headers, caption tables and bot-control templates). Later passes
    assume the earlier ones already ran, so the order matters.
2.  Parsing: the stripped text is turned into a tree. Every {{...}} becomes
    a TemplateInvocation whose parameters are WikiText sequences that may
    hold nested invocations. Links and {{{...}}} parameter references are
    kept as text, but pipes inside them never split template parameters.

The tree is only turned back into text when the description page is
composed. Dropping an invocation removes it from its parent sequence and
from the page's flat index at the same time.
"""
#
# Distributed under the terms of the MIT license.
#
from __future__ import annotations

import functools
import re

from errors import MarkupError

# =========================================================================
# Stripping passes
# =========================================================================

_BRACES_RE = re.compile(r'\{\{|\}\}')


def balanced_end(text: str, start: int) -> int:
    """
    Return the end of the invocation opening at start, nested braces
    included, or -1 if it is never closed.
    """
    depth = 0
    for match in _BRACES_RE.finditer(text, start):
        depth += 1 if match.group() == '{{' else -1
        if not depth:
            return match.end()
    return -1


class TemplatePass:

    """Remove whole invocations of the templates an opening regex matches."""

    def __init__(self, opening: re.Pattern) -> None:
        self.opening = opening

    def __call__(self, text: str) -> str:
        pos = 0
        while match := self.opening.search(text, pos):
            end = balanced_end(text, match.start())
            if end < 0:
                # Left for the parser to report.
                break
            text = text[:match.start()] + text[end:]
            pos = match.start()
        return text


def _regex_pass(pattern: str, flags: int = 0):
    return functools.partial(re.compile(pattern, flags).sub, '')


STRIP_PASSES = [
    ('comments', _regex_pass(r'<!--.*?-->', re.DOTALL)),
    # Categories don't transfer well; the destination gets its own.
    ('categories', _regex_pass(r'\n?\[\[\s*Category\s*:.*?\]\]', re.IGNORECASE)),
    ('headers', _regex_pass(r'\n?^=+.*?=+[ \t]*$\n?', re.MULTILINE)),
    # Caption tables, e.g. per-language descriptions laid out as a wikitable.
    ('captions', _regex_pass(r'\{\|\s*?class="wikitable.+?\|\}', re.IGNORECASE | re.DOTALL)),
    ('bots', TemplatePass(re.compile(r'\{\{\s*(?:bots|nobots)\b', re.IGNORECASE))),
]


def title_pattern(title: str) -> str:
    """Return a regex for a page title that accepts spaces or underscores."""
    return r'[ _]+'.join(re.escape(word) for word in title.split())


def marker_regex(aliases) -> re.Pattern | None:
    """Compile the regex matching the opening of the marker template or a redirect to it."""
    aliases = sorted({a for a in aliases if a}, key=lambda a: (-len(a), a))
    if not aliases:
        return None
    return re.compile(
        r'\{\{\s*(?:' + '|'.join(title_pattern(a) for a in aliases) + r')\s*(?=[|}])',
        re.IGNORECASE)


def strip_passes(marker_aliases=()) -> list:
    """Return the (name, pass) pairs to run, in order, for the given marker aliases."""
    marker = marker_regex(marker_aliases)
    return ([('marker', TemplatePass(marker))] if marker else []) + STRIP_PASSES


def strip_text(text: str, marker_aliases=()) -> str:
    for _, strip in strip_passes(marker_aliases):
        text = strip(text)
    return text


# =========================================================================
# Template tree
# =========================================================================

class WikiText:

    """An ordered sequence of plain text and template invocations."""

    def __init__(self, parts=None, parent: TemplateInvocation | None = None) -> None:
        self.parts = []
        self.parent = parent
        for part in parts or ():
            self.append(part)

    def append(self, part) -> None:
        if isinstance(part, TemplateInvocation):
            part.parent = self
            self.parts.append(part)
        elif part:
            if self.parts and isinstance(self.parts[-1], str):
                self.parts[-1] += part
            else:
                self.parts.append(part)

    def templates(self) -> list[TemplateInvocation]:
        """Invocations directly in this sequence."""
        return [p for p in self.parts if isinstance(p, TemplateInvocation)]

    def templates_recursive(self):
        """Yield every invocation in document order, parents before children."""
        for template in self.templates():
            yield template
            yield from template.descendants()

    def remove(self, template: TemplateInvocation) -> None:
        self.parts = [p for p in self.parts if p is not template]

    def __str__(self) -> str:
        return ''.join(str(p) for p in self.parts)

    def __repr__(self) -> str:
        return f'WikiText({str(self)!r})'


class TemplateInvocation:

    """A single {{...}} construct and its parameters."""

    def __init__(self, title: str, params=None) -> None:
        self.raw_title = title
        self.title = title  # canonical title once normalized
        self.params = {}
        self.parent = None  # WikiText holding this invocation
        self.page = None
        self.dropped = False
        for key, value in (params or {}).items():
            self.put(key, value)

    @property
    def top_level(self) -> bool:
        return self.parent is not None and self.parent.parent is None

    def has(self, key: str) -> bool:
        return key in self.params

    def get(self, key: str) -> WikiText:
        return self.params[key]

    def put(self, key: str, value) -> None:
        """Set a parameter, keeping its position if it already exists."""
        old = self.params.get(str(key))
        if old is not None:
            for template in old.templates():
                template.drop()
        if not isinstance(value, WikiText):
            value = WikiText([value])
        value.parent = self
        self.params[str(key)] = value

    def descendants(self):
        for value in self.params.values():
            yield from value.templates_recursive()

    def drop(self) -> None:
        """Remove this invocation, and everything nested in it, from its page."""
        if self.page is not None:
            self.page.drop(self)
        elif self.parent is not None:
            self.parent.remove(self)
            self.dropped = True

    def __str__(self) -> str:
        text = '{{' + self.title
        position = 1
        for key, value in self.params.items():
            value = str(value)
            # Positional values stay bare while their numbering is implicit.
            if key == str(position) and '=' not in value:
                text += '|' + value
                position += 1
            else:
                text += f'|{key}={value}'
        return text + '}}'

    def __repr__(self) -> str:
        return f'TemplateInvocation({self.title!r})'


class ParsedPage:

    """The root of a parsed page plus a flat index of all its invocations."""

    def __init__(self, root: WikiText) -> None:
        self.root = root
        self._index = list(root.templates_recursive())
        for template in self._index:
            template.page = self

    def templates(self) -> list[TemplateInvocation]:
        """Top-level invocations, in document order."""
        return self.root.templates()

    def templates_recursive(self) -> list[TemplateInvocation]:
        """Every invocation that has not been dropped, nested ones included."""
        return list(self._index)

    def drop(self, template: TemplateInvocation) -> None:
        if template.dropped:
            return
        gone = [template, *template.descendants()]
        if template.parent is not None:
            template.parent.remove(template)
        for t in gone:
            t.dropped = True
        self._index = [t for t in self._index if not t.dropped]

    def __str__(self) -> str:
        return str(self.root)


# =========================================================================
# Parser
# =========================================================================

_TOKEN_RE = re.compile(r'\{\{\{|\}\}\}|\{\{|\}\}|\[\[|\]\]|\|')


class _Frame:

    """Parser state for the page root or one open template."""

    def __init__(self, start: int, is_template: bool) -> None:
        self.start = start
        self.is_template = is_template
        self.segments = [WikiText()]
        self.links = 0  # open [[ in this frame
        self.args = 0  # open {{{ in this frame

    @property
    def current(self) -> WikiText:
        return self.segments[-1]


def _split_name(segment: WikiText):
    """Split "name=value" at the first '=' before any nested template."""
    for index, part in enumerate(segment.parts):
        if isinstance(part, TemplateInvocation):
            return None, segment
        if '=' in part:
            name, _, rest = part.partition('=')
            value = WikiText([rest, *segment.parts[index + 1:]])
            return name.strip(), value
    return None, segment


def _strip_value(value: WikiText) -> WikiText:
    parts = list(value.parts)
    if parts and isinstance(parts[0], str):
        parts[0] = parts[0].lstrip()
    if parts and isinstance(parts[-1], str):
        parts[-1] = parts[-1].rstrip()
    return WikiText(parts)


def _build_template(frame: _Frame) -> TemplateInvocation:
    title, *segments = frame.segments
    template = TemplateInvocation(str(title).strip())
    position = 1
    for segment in segments:
        name, value = _split_name(segment)
        if name is None:
            template.put(str(position), value)
            position += 1
        else:
            template.put(name, _strip_value(value))
    return template


def _link_closes(text: str, pos: int) -> bool:
    """Tell whether the '[[' ending at pos is closed before its template is."""
    braces = links = 0
    for match in _TOKEN_RE.finditer(text, pos):
        token = match.group()
        if token in ('{{', '{{{'):
            braces += 1
        elif token in ('}}', '}}}'):
            if not braces:
                return False
            braces -= 1
        elif braces:
            continue
        elif token == '[[':
            links += 1
        elif token == ']]':
            if not links:
                return True
            links -= 1
    return False


def parse(text: str) -> ParsedPage:
    """
    Parse wikitext into a template tree.

    Raise MarkupError when the template braces don't balance; no partial
    tree is returned in that case.
    """
    stack = [_Frame(0, is_template=False)]
    pos = 0
    while True:
        match = _TOKEN_RE.search(text, pos)
        frame = stack[-1]
        if not match:
            frame.current.append(text[pos:])
            break

        frame.current.append(text[pos:match.start()])
        token = match.group()
        pos = match.end()

        if token == '{{{':
            frame.args += 1
            frame.current.append(token)
        elif token == '}}}' and frame.args:
            frame.args -= 1
            frame.current.append(token)
        elif token == '{{':
            stack.append(_Frame(match.start(), is_template=True))
        elif token in ('}}', '}}}'):
            if token == '}}}':
                # No open argument, so this closes a template followed by a '}'.
                pos = match.start() + 2
            if not frame.is_template:
                raise MarkupError("Unbalanced '}}'", match.start())
            if frame.links or frame.args:
                raise MarkupError('Unclosed link or argument inside template', match.start())
            stack.pop()
            stack[-1].current.append(_build_template(frame))
        elif token == '[[':
            # An unclosed link inside a template is plain text.
            if frame.is_template and _link_closes(text, pos):
                frame.links += 1
            frame.current.append(token)
        elif token == ']]':
            if frame.links:
                frame.links -= 1
            frame.current.append(token)
        elif frame.is_template and not frame.links and not frame.args:
            frame.segments.append(WikiText())
        else:
            frame.current.append(token)

    if len(stack) > 1:
        raise MarkupError("Unclosed '{{'", stack[-1].start)
    return ParsedPage(stack[0].current)

#!/usr/bin/env python3
"""
Exceptions raised while generating description pages.

All of them derive from pywikibot's base Error, so the bot framework
reports them the same way it reports API or page errors.
"""
#
# Distributed under the terms of the MIT license.
#
from pywikibot.exceptions import Error


class TransferError(Error):

    """Base class for failures of a single transfer candidate."""


class MarkupError(TransferError):

    """Page text whose template markup cannot be balanced."""

    def __init__(self, message: str, offset: int = -1) -> None:
        super().__init__(message if offset < 0 else f'{message} (at offset {offset})')
        self.offset = offset


class FetchError(TransferError):

    """A read from one of the wikis failed."""


class MissingMetadataError(TransferError):

    """The source file has no upload history to attribute it with."""


class NameResolutionError(TransferError):

    """No free destination file name was found."""

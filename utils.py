#!/usr/bin/env python3
# -*- coding: utf-8  -*-
'''
This script provides small text helpers shared by the transfer modules:
formatting upload timestamps, flattening edit summaries for table cells
and building alternative file names.
'''
#
# License: Distributed under the terms of the MIT license.
#
import re
from datetime import timezone

from transfer_data import TIMESTAMP_FORMAT

# A function to format an upload timestamp in UTC
def format_timestamp(timestamp):
    if timestamp.tzinfo is not None:
        timestamp = timestamp.astimezone(timezone.utc).replace(tzinfo=None)
    return timestamp.strftime(TIMESTAMP_FORMAT)

# A function to put an edit summary on a single table line
def flatten_summary(summary):
    return re.sub(r' {2,}', ' ', (summary or '').replace('\n', ' '))

# A function to insert a token before the file extension, e.g. "A.jpg" -> "A 12.jpg"
def insert_before_extension(title, token):
    base, dot, extension = title.rpartition('.')
    if not dot or not base or '/' in extension:
        return f'{title} {token}'
    return f'{base} {token}.{extension}'


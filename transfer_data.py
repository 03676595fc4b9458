# -*- coding: utf-8 -*-

"""
This file serves as the central configuration hub for the transfer bot.

It contains all data and settings that control the bot's behavior, separating
configuration from the operational logic in the pipeline modules.

Note:
The generated description pages rely on these templates existing on the
destination wiki:
- {{Information}}, {{Original upload log}} and {{Original file page}}
- {{User at project}} for attributing the original uploader
- {{Own work by original uploader}} for own-work defaults
"""

# Sites taking part in the transfer, as (code, family) pairs for pywikibot.Site.
SOURCE_SITE = ('en', 'wikipedia')
DESTINATION_SITE = ('commons', 'commons')

# Interwiki prefix pointing from the destination back to the source wiki.
SOURCE_INTERWIKI = 'w'

# Project code used by {{Original file page}} on the destination.
SOURCE_PROJECT = 'en.wikipedia'

# Configuration pages on the source wiki.
CONFIG_PAGE = 'Wikipedia:MTC!'
BLACKLIST_PAGE = CONFIG_PAGE + '/Blacklist'
WHITELIST_PAGE = CONFIG_PAGE + '/Whitelist'
REDIRECTS_PAGE = CONFIG_PAGE + '/Redirects'

# Template that marks a file as queued for transfer. Its redirects are
# fetched at startup and stripped together with it.
MARKER_TEMPLATE = 'Copy to Wikimedia Commons'

OWN_WORK_CATEGORY = 'Category:Self-published work'
TRACKING_CATEGORY = 'Category:Uploaded with MTC!'
UNCATEGORIZED_MARKER = '{{Subst:Unc}}'

# Namespace numbers shared by every MediaWiki installation.
FILE_NS = 6
TEMPLATE_NS = 10
CATEGORY_NS = 14

# --- License templates ---
#
# Source license templates that have a destination-specific equivalent.
#   - "title": (str)  Title used on the destination wiki.
#   - "param": (str)  Parameter that receives the uploader; "1" is the
#                     primary positional parameter.
#   - "value": (str)  Either "name" for the bare user name or "attribution"
#                     for the ATTRIBUTION template below.
#
LICENSE_RENAMES = {
    'PD-self': {"title": 'PD-user-en', "param": '1', "value": 'name'},
    'GFDL-self-with-disclaimers': {"title": 'GFDL-user-en-with-disclaimers', "param": '1', "value": 'name'},
    'GFDL-self': {"title": 'GFDL-self-en', "param": 'author', "value": 'attribution'},
}

INFORMATION_TEMPLATE = 'Information'
SELF_TEMPLATE = 'Self'

# Cross-wiki reference to the original uploader.
ATTRIBUTION = '{{{{User at project|{user}|{interwiki}|en}}}}'

# --- Summary section ---
#
# Information parameters copied to the destination, in output order.
SUMMARY_FIELDS = ('Description', 'Source', 'Date', 'Author', 'Permission', 'Other_versions')

# Defaults used when a field is missing; own-work files get attribution to
# the uploader instead of empty values. These are str.format templates with
# {user} as the only field, so literal braces are doubled.
OWN_WORK_DEFAULTS = {
    'Source': '{{{{Own work by original uploader}}}}',
    'Author': '[[User:{user}|{user}]]',
}

# --- Output contract ---
#
# The destination renderer depends on these strings; do not localize them.
SUMMARY_HEADING = '== {{int:filedesc}} =='
LICENSE_HEADING = '== {{int:license-header}} =='
UPLOAD_LOG_HEADING = '== {{Original upload log}} =='
ORIGINAL_FILE_PAGE = '{{{{Original file page|{project}|{title}}}}}'
UPLOAD_LOG_HEADER = (
    '{| class="wikitable"\n'
    '! {{int:filehist-datetime}} !! {{int:filehist-dimensions}} '
    '!! {{int:filehist-user}} !! {{int:filehist-comment}}'
)
UPLOAD_LOG_ROW = "\n|-\n| {timestamp} || {width} × {height} || [[{interwiki}:User:{user}|{user}]] || ''<nowiki>{summary}</nowiki>''"
TIMESTAMP_FORMAT = '%Y-%m-%d %H:%M:%S'

# --- Destination file names ---
#
# A colliding name gets " <n>" inserted before its extension, n drawn from
# NAME_TOKEN_RANGE. After MAX_NAME_ATTEMPTS variants the candidate fails.
MAX_NAME_ATTEMPTS = 25
NAME_TOKEN_RANGE = (0, 1000)

# Titles per API request; MediaWiki caps non-bot queries at 50.
API_BATCH_SIZE = 50

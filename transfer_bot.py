#!/usr/bin/env python3
"""
A bot that prepares description pages for moving files from English
Wikipedia to Wikimedia Commons.

For every file given by the page generator arguments the bot checks that
the file may be moved, picks a free name on Commons and generates the
Commons description page: an {{Information}} summary, the license templates
that exist on Commons, the original upload log and categories. The
generated pages are shown and can be saved as JSON; nothing is uploaded.

Configuration and Recommendations:
- Site names, configuration pages and output strings are managed in the
  `transfer_data.py` file, NOT here.
- Options can also be set in the [transfer_bot] section of scripts.ini.

The following parameters are supported:

-ignorefilter     Don't check the files' categories against the
                  blacklist and whitelist.

-trackingcat      Add the tracking category to the generated pages.

-addcat:          Add a category to the generated pages. Can be given
                  more than once; without it the pages are marked as
                  uncategorized.

-workers:         Number of files to generate in parallel (default 1).

-json:            Write {sourceTitle, destinationTitle, generatedText}
                  records for all generated pages to this file.

Example:
--------

To prepare all files tagged for moving to Commons:

    python pwb.py transfer_bot -family:wikipedia -lang:en -transcludes:"Copy to Wikimedia Commons" -ns:6

&params;
"""
#
# Distributed under the terms of the MIT license.
#
from __future__ import annotations

import json

import pywikibot
from pywikibot import pagegenerators
from pywikibot.bot import ConfigParserBot

from candidates import CandidateState, TransferCandidate
from description_pipeline import DescriptionPipeline, TransferSettings
from errors import FetchError
from transfer_data import FILE_NS
from wiki_access import WikiAccess

# This is required for the text that is shown when you run this script
# with the parameter -help.
docuReplacements = {'&params;': pagegenerators.parameterHelp}  # noqa: N816


class TransferBot(ConfigParserBot):

    """Generate description pages for the candidates prepared by the pipeline."""

    update_options = {
        'ignorefilter': False,  # skip the blacklist/whitelist check
        'trackingcat': False,  # append the tracking category
        'addcat': '',  # extra categories, separated by '|'
        'workers': 1,  # candidates generated in parallel
        'json': '',  # file to write the output records to
    }

    def __init__(self, pipeline: DescriptionPipeline, **kwargs) -> None:
        super().__init__(**kwargs)
        # The generator yields candidates, not pages.
        self.treat_page_type = TransferCandidate
        self.pipeline = pipeline
        self.records = []

    @property
    def categories(self) -> list[str]:
        return [c.strip() for c in self.opt.addcat.split('|') if c.strip()]

    def prepare(self, titles) -> None:
        """Select the candidates among titles and use them as the generator."""
        candidates = self.pipeline.build_candidates(
            titles, self.opt.ignorefilter, self.opt.trackingcat, self.categories)

        ready = [c for c in candidates if c.state is CandidateState.NAME_RESOLVED]
        self.counter['rejected'] += sum(c.state is CandidateState.REJECTED for c in candidates)
        pywikibot.info(f'{len(ready)} of {len(candidates)} files can be transferred.')

        if int(self.opt.workers) > 1:
            self.pipeline.generate_all(ready, int(self.opt.workers))
        self.generator = (c for c in candidates if c.state is not CandidateState.REJECTED)

    def treat(self, candidate) -> None:
        self.pipeline.generate(candidate)

        if candidate.state is not CandidateState.COMPOSED:
            self.counter['failed'] += 1
            pywikibot.error(f'Could not generate {candidate.source_title}: {candidate.error}')
            return

        self.counter['composed'] += 1
        pywikibot.info(f'\n<<lightpurple>>{candidate.source_title}<<default>> -> '
                       f'<<lightgreen>>{candidate.destination_title}<<default>>')
        pywikibot.info(candidate.text)
        self.records.append(candidate.to_record())

    def teardown(self) -> None:
        self.write_records()

    def write_records(self) -> None:
        if not self.opt.json:
            return
        with open(self.opt.json, 'w', encoding='utf-8') as f:
            json.dump(self.records, f, ensure_ascii=False, indent=2)
        pywikibot.info(f'Wrote {len(self.records)} description pages to {self.opt.json}')


def main(*args: str) -> None:
    """
    Process command line arguments and invoke bot.

    If args is an empty list, sys.argv is used.

    :param args: command line arguments
    """
    options = {}
    categories = []
    # Process global arguments to determine desired site
    local_args = pywikibot.handle_args(args)

    wiki = WikiAccess()

    # This factory is responsible for processing command line arguments
    # that are also used by other scripts and that determine on which pages
    # to work on.
    gen_factory = pagegenerators.GeneratorFactory(site=wiki.source)

    # Process pagegenerators arguments
    local_args = gen_factory.handle_args(local_args)

    # Parse your own command line arguments
    for arg in local_args:
        arg, _, value = arg.partition(':')
        option = arg[1:]
        if option == 'addcat':
            if not value:
                value = pywikibot.input('Please enter a category to add')
            categories.append(value)
        elif option in ('workers', 'json'):
            if not value:
                pywikibot.error(f'The {arg} parameter requires a value.')
                return
            options[option] = value
        # take the remaining options as booleans.
        else:
            options[option] = True

    if categories:
        options['addcat'] = '|'.join(categories)

    gen = gen_factory.getCombinedGenerator()

    # check if further help is needed
    if pywikibot.bot.suggest_help(missing_generator=not gen):
        return

    try:
        settings = TransferSettings.load(wiki)
    except FetchError as e:
        pywikibot.error(f'Could not load the transfer configuration: {e}')
        return

    titles = [page.title() for page in gen if page.namespace() == FILE_NS]
    bot = TransferBot(pipeline=DescriptionPipeline(wiki, settings), **options)
    try:
        bot.prepare(titles)
    except FetchError as e:
        pywikibot.error(f'Could not select the files to transfer: {e}')
        return
    bot.run()


if __name__ == '__main__':
    main()

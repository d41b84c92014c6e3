import argparse
import logging
import sys

from photoslurp.auth import TokenSupplier
from photoslurp.config import Settings, load_user_config
from photoslurp.errors import ConfigError, SlurpError
from photoslurp.local_store import CsvStore
from photoslurp.providers.flickr import FlickrProvider
from photoslurp.providers.instagram import InstagramProvider
from photoslurp.providers.twitter import TwitterProvider
from photoslurp.sheet_store import SpreadsheetStore
from photoslurp.sheets_api import SheetsClient
from photoslurp.syncer import PhotoSlurp

DESCRIPTION = """
Harvest recent tagged photo metadata from social media services and store the
data in a local CSV file or a Google Spreadsheet. Only *recent* photos are
harvested, so run it regularly, depending on how much use your tags get.

You MUST provide at least one tag and one API key. Data goes to a local CSV
file unless a spreadsheet ID and Google credentials are given. Every key can
also live in a JSON file passed with --config.
"""


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="photoslurp", description=DESCRIPTION,
                                     formatter_class=argparse.RawDescriptionHelpFormatter)
    parser.add_argument("tags", nargs="*", help="tags to search for")
    parser.add_argument("-c", "--config", help="path to JSON configuration file")
    parser.add_argument("-d", "--debug", action="store_true",
                        help="print what would be stored, but don't save data")
    parser.add_argument("--auto-approve", action="store_true",
                        help="fill the usable_tag column with the tag the contributor used "
                             "when nobody has curated that row yet")
    parser.add_argument("--twitter-key")
    parser.add_argument("--twitter-secret")
    parser.add_argument("--flickr-key")
    parser.add_argument("--instagram-key")
    parser.add_argument("--google-application-credentials", help="path to Google JSON key")
    parser.add_argument("-g", "--google-spreadsheet-id",
                        help="write to this Google Spreadsheet instead of CSV")
    parser.add_argument("--update-batch-size", type=int,
                        help="buffer this many spreadsheet row updates per write (default 1)")
    parser.add_argument("-o", "--output-dir", help="folder for CSV output (default: .)")
    parser.add_argument("-v", "--verbose", action="store_true", help="debug logging")
    return parser


def build_providers(settings: Settings):
    """One instance per configured source, shared across every tag."""
    providers = []
    if settings.twitter_key:
        providers.append(TwitterProvider(settings.twitter_key, settings.twitter_secret))
    if settings.flickr_key:
        providers.append(FlickrProvider(settings.flickr_key))
    if settings.instagram_key:
        providers.append(InstagramProvider(settings.instagram_key))
    return providers


def build_store(settings: Settings):
    if settings.use_spreadsheet:
        tokens = TokenSupplier(settings.google_application_credentials)
        client = SheetsClient(settings.google_spreadsheet_id, tokens)
        return SpreadsheetStore(client, debug=settings.debug,
                                update_batch_size=settings.update_batch_size)
    return CsvStore(settings.output_dir, debug=settings.debug)


def main(argv=None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.INFO,
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s"
    )

    options = vars(args)
    try:
        settings = Settings.resolve(args.tags, options, load_user_config(args.config))
    except ConfigError as e:
        parser.error(str(e))

    providers = build_providers(settings)
    try:
        with build_store(settings) as store:
            syncer = PhotoSlurp(providers, store, settings.tags,
                                auto_approve=settings.auto_approve)
            result = syncer.run()
    except KeyboardInterrupt:
        print("\nInterrupted, rows written so far are kept.")
        return 130
    except SlurpError as e:
        target = "spreadsheet" if settings.use_spreadsheet else "CSV"
        print(f"Sync to {target} failed: {e}", file=sys.stderr)
        return 1

    print(f"\nHarvested {result.records} photos.")
    if not result.ok:
        print(f"Failed providers: {', '.join(result.failed_providers)}", file=sys.stderr)
        return 1
    return 0

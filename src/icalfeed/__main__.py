"""Entry point for running icalfeed as a module.

Usage: python -m icalfeed records.json --date-field field_date [options]
"""

import argparse
import json
import logging
import sys
from pathlib import Path

from icalfeed.config.settings import FeedSettings, FieldMapping
from icalfeed.core.event_model import FeedMeta
from icalfeed.core.json_source import records_from_json
from icalfeed.core.style import StructuredDateFeed
from icalfeed.exceptions.errors import FeedError

logger = logging.getLogger("icalfeed")


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="icalfeed",
        description="Render a JSON export of content records as an iCalendar feed.",
    )
    parser.add_argument("input", type=Path, help="JSON file with 'fields' and 'records'")
    parser.add_argument("--date-field", required=True, help="Field holding the event dates")
    parser.add_argument("--summary-field", help="Field used as SUMMARY")
    parser.add_argument("--location-field", help="Field used as LOCATION")
    parser.add_argument("--description-field", help="Field used as DESCRIPTION")
    parser.add_argument("--timezone", help="Fallback timezone (default: ICALFEED_DEFAULT_TIMEZONE or local)")
    parser.add_argument("--title", help="Calendar name")
    parser.add_argument("--link", help="Calendar URL")
    parser.add_argument("--identifier", help="Feed identifier used to seed event UIDs")
    parser.add_argument("--env-file", type=Path, help=".env file with ICALFEED_* settings")
    parser.add_argument("-o", "--output", type=Path, help="Write the feed here instead of stdout")
    parser.add_argument("-v", "--verbose", action="store_true", help="Enable debug logging")
    return parser


def main(argv=None) -> int:
    """Main entry point for the command line."""
    args = build_parser().parse_args(argv)

    # Configure logging
    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.INFO,
        format='%(asctime)s - %(name)s - %(levelname)s - %(message)s',
        stream=sys.stderr,
    )

    try:
        payload = json.loads(args.input.read_text(encoding="utf-8"))
    except (OSError, ValueError) as exc:
        logger.error("Cannot read %s: %s", args.input, exc)
        return 1

    try:
        settings = FeedSettings.from_env(env_file=args.env_file)
        mapping = FieldMapping(
            date_field=args.date_field,
            summary_field=args.summary_field,
            location_field=args.location_field,
            description_field=args.description_field,
        )
        metadata, records = records_from_json(payload, settings)
        feed = StructuredDateFeed(mapping, metadata, settings=settings)
        document = feed.render(
            records,
            FeedMeta(title=args.title, link=args.link, identifier=args.identifier),
            fallback_timezone=args.timezone,
        )
    except FeedError as exc:
        logger.error("Feed generation failed: %s", exc)
        return 1

    if args.output:
        args.output.write_bytes(document.to_ical())
        logger.info("Wrote %d event(s) to %s", document.event_count, args.output)
    else:
        sys.stdout.write(document.to_text())
    return 0


if __name__ == "__main__":
    sys.exit(main())

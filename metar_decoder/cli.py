#!/usr/bin/env python3
"""
Command line decoder of METAR report files.

Decodes reports from files matching the input glob patterns and saves them
into a JSON file. Identical reports found in several files are kept once.

Example:
    decode-metar -f plain -a 2023-05-14 -p "reports/*.txt" metars.json
"""

import argparse
import logging
import sys
from datetime import datetime
from typing import List, Optional

from metar_decoder.batch import MetarFileFormat, MetarBatchDecoder

logger = logging.getLogger(__name__)


def anchor_date(value: str) -> datetime:
    """Parse an anchor day given as YYYY-MM-DD."""
    try:
        return datetime.strptime(value, '%Y-%m-%d')
    except ValueError:
        raise argparse.ArgumentTypeError(f"Invalid anchor time, expected YYYY-MM-DD, given {value}")


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog='decode-metar',
        description='Decode METAR reports stored in files and save them into a JSON file',
    )
    parser.add_argument('-q', '--quiet', help='Only log warnings and errors', action='store_true')
    parser.add_argument('-v', '--verbose', help='Verbose output, including unparsed groups', action='store_true')
    parser.add_argument(
        '-f', '--file-format',
        help='METAR file format',
        choices=[f.value for f in MetarFileFormat],
        default=MetarFileFormat.NOAA_METAR_CYCLES.value,
    )
    parser.add_argument('-p', '--pretty-print', help='Pretty-print the output JSON file', action='store_true')
    parser.add_argument(
        '-a', '--anchor-time',
        help='Day (YYYY-MM-DD) close to when the reports were collected, for the plain file format. '
             'If given, report days are resolved to full dates.',
        type=anchor_date,
    )
    parser.add_argument('--encoding', help='Input file encoding (default depends on the file format)')
    parser.add_argument('input_globs', help='Input files (glob patterns)', nargs='+', metavar='INPUT_GLOB')
    parser.add_argument('output', help='Output JSON file')
    return parser


def main(argv: Optional[List[str]] = None) -> int:
    args = build_parser().parse_args(argv)

    logging.basicConfig(
        level=logging.INFO,
        format='%(asctime)s - %(name)s - %(levelname)s - %(message)s'
    )
    if args.quiet:
        logging.getLogger().setLevel(logging.WARNING)
    elif args.verbose:
        logging.getLogger().setLevel(logging.DEBUG)

    decoder = MetarBatchDecoder(
        file_format=MetarFileFormat(args.file_format),
        anchor_time=args.anchor_time,
        encoding=args.encoding,
    )

    logger.info("Reading input glob patterns")
    paths = decoder.expand_globs(args.input_globs)
    logger.info(f"Found {len(paths)} file(s)")

    metars = decoder.decode_paths(paths)

    logger.info(f"Saving to file {args.output}")
    try:
        decoder.write_json(metars, args.output, pretty_print=args.pretty_print)
    except OSError as e:
        logger.error(f"Failed to write {args.output}: {e}")
        return 1

    return 0


if __name__ == '__main__':
    sys.exit(main())

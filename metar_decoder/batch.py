"""
Batch decoding of METAR report files.

Two file formats are supported:

- NOAA METAR cycle files, as published at
  https://tgftp.nws.noaa.gov/data/observations/metar/cycles/. Rows alternate
  between a "YYYY/MM/DD HH:MM" timestamp and the report it belongs to. The
  timestamp is used as the anchor time of that report. Files may start with
  garbage rows, which are skipped up to the first timestamp.
- Plain files with one report per row and an optional global anchor time.
"""

import glob
import json
import logging
from datetime import datetime
from enum import Enum
from pathlib import Path
from typing import Iterable, List, Optional, Tuple, Union

from metar_decoder.exceptions import MetarDecodeError
from metar_decoder.models.metar import Metar
from metar_decoder.parsers.metar_parser import MetarParser

logger = logging.getLogger(__name__)

NOAA_TIMESTAMP_FORMAT = '%Y/%m/%d %H:%M'

PathLike = Union[str, Path]


class MetarFileFormat(Enum):
    """Supported report file formats, valued by their command line name."""

    NOAA_METAR_CYCLES = "noaa-metar-cycles"
    PLAIN = "plain"

    @property
    def default_encoding(self) -> str:
        if self == MetarFileFormat.NOAA_METAR_CYCLES:
            return 'windows-1252'
        return 'utf-8'

    @property
    def decode_errors(self) -> str:
        """Codec error handler; cycle files replace undecodable bytes."""
        if self == MetarFileFormat.NOAA_METAR_CYCLES:
            return 'replace'
        return 'strict'


class MetarBatchDecoder:
    """
    Decode report files and export the results to JSON.

    Example:
        decoder = MetarBatchDecoder(MetarFileFormat.PLAIN, anchor_time=datetime(2023, 5, 14))
        metars = decoder.decode_paths(decoder.expand_globs(["reports/*.txt"]))
        decoder.write_json(metars, "metars.json", pretty_print=True)
    """

    def __init__(
        self,
        file_format: MetarFileFormat = MetarFileFormat.NOAA_METAR_CYCLES,
        anchor_time: Optional[datetime] = None,
        encoding: Optional[str] = None,
    ):
        """
        Initialize the batch decoder.

        Args:
            file_format: Format of the input files
            anchor_time: Anchor time for plain files; cycle files carry
                their own timestamps and ignore it
            encoding: Text encoding of the input files. Defaults to
                Windows-1252 for cycle files and UTF-8 for plain files.
        """
        self.file_format = file_format
        self.anchor_time = anchor_time
        self.encoding = encoding or file_format.default_encoding

    @staticmethod
    def expand_globs(patterns: Iterable[str]) -> List[Path]:
        """
        Expand glob patterns to a sorted list of unique file paths.

        Patterns that match nothing are logged and ignored.
        """
        paths = set()
        for pattern in patterns:
            matches = glob.glob(pattern, recursive=True)
            if not matches:
                logger.warning(f"No files match {pattern}")
            paths.update(Path(match) for match in matches if Path(match).is_file())
        return sorted(paths)

    @staticmethod
    def read_noaa_cycles(lines: Iterable[str]) -> List[Tuple[str, str]]:
        """
        Split the rows of a NOAA cycle file into (timestamp, report) pairs.

        Rows before the first timestamp are skipped, as are empty rows. A
        trailing timestamp without a report is dropped.
        """
        rows = []
        is_header = True
        for line in lines:
            row = line.strip()
            if is_header:
                digits = row.replace('/', '').replace(' ', '').replace(':', '')
                if digits.isascii() and digits.isdigit():
                    rows.append(row)
                    is_header = False
            elif row:
                rows.append(row)

        return list(zip(rows[0::2], rows[1::2]))

    def decode_file(self, path: PathLike) -> List[Metar]:
        """
        Decode all reports of one file.

        Reports that fail to decode are logged and skipped.

        Raises:
            OSError: If the file cannot be read
            UnicodeDecodeError: If a plain file is not valid in the configured
                encoding. Undecodable bytes in cycle files are replaced.
        """
        with open(path, 'r', encoding=self.encoding, errors=self.file_format.decode_errors) as f:
            lines = f.readlines()

        if self.file_format == MetarFileFormat.NOAA_METAR_CYCLES:
            reports = []
            for time_str, report in self.read_noaa_cycles(lines):
                try:
                    anchor_time = datetime.strptime(time_str, NOAA_TIMESTAMP_FORMAT)
                except ValueError:
                    logger.warning(f"Skipping report with invalid timestamp {time_str!r} in {path}")
                    continue
                reports.append((report, anchor_time))
        else:
            reports = [(line.strip(), self.anchor_time) for line in lines if line.strip()]

        metars = []
        for report, anchor_time in reports:
            try:
                metars.append(MetarParser.decode(report, anchor_time))
            except MetarDecodeError as e:
                logger.warning(f"{e}")

        logger.debug(f"Decoded {len(metars)} of {len(reports)} report(s) from {path}")
        return metars

    def decode_paths(self, paths: Iterable[PathLike]) -> List[Metar]:
        """
        Decode several files, dropping repeated reports.

        Files are visited in sorted order. A report is kept the first time
        its sanitized text is seen. Files that cannot be read are logged and
        skipped.
        """
        seen_reports = set()
        all_metars = []

        for path in sorted(Path(p) for p in paths):
            try:
                metars = self.decode_file(path)
            except (OSError, UnicodeDecodeError) as e:
                logger.error(f"Failed to read {path}: {e}")
                continue

            for metar in metars:
                if metar.report in seen_reports:
                    continue
                seen_reports.add(metar.report)
                all_metars.append(metar)

        logger.info(f"Decoded {len(all_metars)} unique report(s)")
        return all_metars

    @staticmethod
    def write_json(metars: List[Metar], path: PathLike, pretty_print: bool = False) -> None:
        """Write decoded reports to a JSON file as a list of objects."""
        data = [metar.to_dict() for metar in metars]
        with open(path, 'w', encoding='utf-8') as f:
            if pretty_print:
                json.dump(data, f, indent=2)
            else:
                json.dump(data, f)

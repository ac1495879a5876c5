"""Tests for batch decoding of report files."""

import json
import logging
from datetime import datetime

from metar_decoder.batch import MetarFileFormat, MetarBatchDecoder
from metar_decoder.models import MetarTime, Metar


class TestMetarFileFormat:
    """Test file format names and encodings."""

    def test_command_line_names(self):
        assert MetarFileFormat("noaa-metar-cycles") == MetarFileFormat.NOAA_METAR_CYCLES
        assert MetarFileFormat("plain") == MetarFileFormat.PLAIN

    def test_default_encodings(self):
        assert MetarBatchDecoder(MetarFileFormat.NOAA_METAR_CYCLES).encoding == 'windows-1252'
        assert MetarBatchDecoder(MetarFileFormat.PLAIN).encoding == 'utf-8'
        assert MetarBatchDecoder(MetarFileFormat.PLAIN, encoding='latin-1').encoding == 'latin-1'

    def test_decode_errors(self):
        assert MetarFileFormat.NOAA_METAR_CYCLES.decode_errors == 'replace'
        assert MetarFileFormat.PLAIN.decode_errors == 'strict'


class TestReadNoaaCycles:
    """Test splitting cycle file rows into timestamp/report pairs."""

    def test_skips_garbage_header(self):
        lines = ["garbage\n", "\n", "2023/05/13 19:51\n", "KXYZ 131951Z 18010KT\n"]
        assert MetarBatchDecoder.read_noaa_cycles(lines) == [("2023/05/13 19:51", "KXYZ 131951Z 18010KT")]

    def test_skips_empty_rows_between_pairs(self):
        lines = ["2023/05/13 19:51", "", "A", "", "2023/05/13 19:55", "B"]
        assert MetarBatchDecoder.read_noaa_cycles(lines) == [
            ("2023/05/13 19:51", "A"),
            ("2023/05/13 19:55", "B"),
        ]

    def test_drops_trailing_timestamp(self):
        lines = ["2023/05/13 19:51", "A", "2023/05/13 19:55"]
        assert MetarBatchDecoder.read_noaa_cycles(lines) == [("2023/05/13 19:51", "A")]

    def test_no_timestamp(self):
        assert MetarBatchDecoder.read_noaa_cycles(["garbage", "KXYZ 131951Z"]) == []


class TestDecodeFile:
    """Test decoding one file."""

    def test_noaa_cycle_file(self, noaa_cycle_file, caplog):
        decoder = MetarBatchDecoder(MetarFileFormat.NOAA_METAR_CYCLES)
        with caplog.at_level(logging.WARNING, logger='metar_decoder.batch'):
            metars = decoder.decode_file(noaa_cycle_file)

        assert [m.header.station_id for m in metars] == ["KXYZ", "LFPG"]
        assert metars[0].header.observation_time == MetarTime.from_datetime(datetime(2023, 5, 13, 19, 51))
        assert "invalid timestamp" in caplog.text

    def test_noaa_cycle_file_with_undefined_byte(self, tmp_path):
        path = tmp_path / '19Z.TXT'
        path.write_bytes(
            b"2023/05/13 19:51\n"
            b"KXYZ 131951Z 18010KT 10SM FEW050 22/18 A3002\n"
            b"\n"
            b"2023/05/13 19:55\n"
            b"KABC 131955Z 20008KT 10SM SCT040 21/17 A3001 RMK AO2 \x81\n"
        )
        decoder = MetarBatchDecoder(MetarFileFormat.NOAA_METAR_CYCLES)

        metars = decoder.decode_paths([path])

        assert [m.header.station_id for m in metars] == ["KXYZ", "KABC"]
        assert metars[1].unparsed_groups == []

    def test_plain_file_with_anchor(self, plain_files, caplog):
        decoder = MetarBatchDecoder(MetarFileFormat.PLAIN, anchor_time=datetime(2023, 5, 14))
        with caplog.at_level(logging.WARNING, logger='metar_decoder.batch'):
            metars = decoder.decode_file(plain_files[0])

        assert len(metars) == 1
        assert metars[0].header.observation_time == MetarTime.from_datetime(datetime(2023, 5, 13, 19, 51))
        assert "LFPG 212460Z 24005KT 9999" in caplog.text

    def test_plain_file_without_anchor(self, plain_files):
        metars = MetarBatchDecoder(MetarFileFormat.PLAIN).decode_file(plain_files[1])
        assert [m.header.station_id for m in metars] == ["KXYZ", "EGLL"]
        assert not metars[0].header.observation_time.is_resolved


class TestDecodePaths:
    """Test decoding several files."""

    def test_deduplicates_reports(self, plain_files):
        decoder = MetarBatchDecoder(MetarFileFormat.PLAIN)
        metars = decoder.decode_paths(reversed(plain_files))
        assert [m.report for m in metars] == [
            "KXYZ 131951Z 18010KT 10SM FEW050 22/18 A3002",
            "EGLL 131950Z 27010KT 9999 SCT030 15/08 Q1020",
        ]

    def test_unreadable_file_is_skipped(self, plain_files, tmp_path, caplog):
        decoder = MetarBatchDecoder(MetarFileFormat.PLAIN)
        with caplog.at_level(logging.ERROR, logger='metar_decoder.batch'):
            metars = decoder.decode_paths([tmp_path / 'missing.txt', plain_files[1]])
        assert len(metars) == 2
        assert "missing.txt" in caplog.text

    def test_undecodable_file_is_skipped(self, tmp_path, caplog):
        path = tmp_path / 'binary.txt'
        path.write_bytes(b"\xff\xfe\xfa KXYZ 131951Z\n")
        decoder = MetarBatchDecoder(MetarFileFormat.PLAIN)
        with caplog.at_level(logging.ERROR, logger='metar_decoder.batch'):
            assert decoder.decode_paths([path]) == []
        assert "binary.txt" in caplog.text


class TestExpandGlobs:
    """Test input file discovery."""

    def test_sorted_unique_files(self, tmp_path):
        for name in ("b.txt", "a.txt", "c.dat"):
            (tmp_path / name).write_text("")
        (tmp_path / "dir.txt").mkdir()

        paths = MetarBatchDecoder.expand_globs([str(tmp_path / "*.txt"), str(tmp_path / "a.txt")])
        assert paths == [tmp_path / "a.txt", tmp_path / "b.txt"]

    def test_no_match(self, tmp_path, caplog):
        with caplog.at_level(logging.WARNING, logger='metar_decoder.batch'):
            assert MetarBatchDecoder.expand_globs([str(tmp_path / "*.txt")]) == []
        assert "No files match" in caplog.text


class TestWriteJson:
    """Test JSON export."""

    def test_compact(self, tmp_path, sample_report):
        output = tmp_path / 'out.json'
        metar = Metar.from_report(sample_report)
        MetarBatchDecoder.write_json([metar], output)

        text = output.read_text()
        assert "\n" not in text
        data = json.loads(text)
        assert len(data) == 1
        assert data[0]['station_id'] == "KXYZ"
        assert Metar.from_dict(data[0]) == metar

    def test_pretty_print(self, tmp_path, sample_report):
        output = tmp_path / 'out.json'
        MetarBatchDecoder.write_json([Metar.from_report(sample_report)], output, pretty_print=True)
        assert '\n  {' in output.read_text()

    def test_empty(self, tmp_path):
        output = tmp_path / 'out.json'
        MetarBatchDecoder.write_json([], output)
        assert json.loads(output.read_text()) == []

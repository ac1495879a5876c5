import pytest
from datetime import datetime
from pathlib import Path


@pytest.fixture
def sample_report() -> str:
    """A complete US-style report with no trend."""
    return "KXYZ 131951Z 18010KT 10SM FEW050 22/18 A3002"


@pytest.fixture
def full_report() -> str:
    """A report exercising most main section groups plus a trend and remarks."""
    return (
        "METAR LFPG 211230Z 24015G25KT 200V280 9999 R27L/M0600V1000FT/U -SHRA "
        "FEW040 BKN080CB 18/09 Q1015 RETSRA WS R27L W15/S3 "
        "BECMG FM1300 TL1400 25020KT 4000 RA BKN012 TEMPO 3000 TSRA RMK AO2 SLP123"
    )


@pytest.fixture
def anchor_time() -> datetime:
    return datetime(2023, 5, 21, 13, 0)


@pytest.fixture
def noaa_cycle_file(tmp_path) -> Path:
    """A NOAA cycle file with garbage header rows and one bad timestamp."""
    path = tmp_path / '19Z.TXT'
    content = (
        "Température relevée°\n"
        "\n"
        "2023/05/13 19:51\n"
        "KXYZ 131951Z 18010KT 10SM FEW050 22/18 A3002\n"
        "\n"
        "2023/05/13 19:55\n"
        "LFPG 131955Z 24005KT CAVOK 20/10 Q1015\n"
        "2023/13/45 10:00\n"
        "EGLL 131950Z 27010KT 9999 SCT030 15/08 Q1020\n"
    )
    path.write_text(content, encoding='windows-1252')
    return path


@pytest.fixture
def plain_files(tmp_path) -> list:
    """Two plain files sharing one report written differently."""
    first = tmp_path / 'a.txt'
    first.write_text(
        "KXYZ 131951Z 18010KT 10SM FEW050 22/18 A3002\n"
        "\n"
        "LFPG 212460Z 24005KT 9999\n",
        encoding='utf-8',
    )
    second = tmp_path / 'b.txt'
    second.write_text(
        "kxyz 131951z 18010kt 10sm few050 22/18 a3002=\n"
        "EGLL 131950Z 27010KT 9999 SCT030 15/08 Q1020\n",
        encoding='utf-8',
    )
    return [first, second]

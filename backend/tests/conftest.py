"""
Shared fixtures for the solar simulation tests.
"""
import textwrap

import pytest
from fastapi.testclient import TestClient

from app.config import Settings
from app.main import create_app
from data_simulator.playback import PlaybackSource


SAMPLE_CSV = textwrap.dedent("""\
    timestamp,ActivePowerL3,CurrentL3,VoltageL3,IRRADIATION,temp
    2024-06-01T08:00:00,120.5,0.52,231.2,410.0,24.1
    2024-06-01T08:01:00,130.0,0.56,230.9,425.5,24.3
    2024-06-01T08:02:00,128.25,0.55,231.0,420.0,24.4
""")


@pytest.fixture
def csv_path(tmp_path):
    path = tmp_path / "final.csv"
    path.write_text(SAMPLE_CSV)
    return path


@pytest.fixture
def playback(csv_path):
    return PlaybackSource.load(str(csv_path))


@pytest.fixture
def settings(csv_path):
    return Settings(data_csv=str(csv_path), panel_count=30, stream_interval=0.05)


@pytest.fixture
def client(settings):
    with TestClient(create_app(settings)) as c:
        yield c


@pytest.fixture
def empty_client(tmp_path):
    settings = Settings(data_csv=str(tmp_path / "missing.csv"), panel_count=30, stream_interval=0.05)
    with TestClient(create_app(settings)) as c:
        yield c


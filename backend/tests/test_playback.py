import pytest

from data_simulator.playback import PlaybackRecord, PlaybackSource


def _records(*names):
    return [
        PlaybackRecord(id=i + 1, timestamp=name, power=float(i), current=0.0,
                       voltage=230.0, irradiance=0.0, temperature=20.0)
        for i, name in enumerate(names)
    ]


def test_load_parses_rows(playback):
    assert len(playback) == 3
    assert playback.has_data
    first = playback.sample(1)[0]
    assert first == {
        "id": 1,
        "timestamp": "2024-06-01T08:00:00",
        "ActivePowerL3": 120.5,
        "CurrentL3": 0.52,
        "VoltageL3": 231.2,
        "IRRADIATION": 410.0,
        "temp": 24.1,
    }


def test_load_missing_file_gives_empty_source(tmp_path):
    source = PlaybackSource.load(str(tmp_path / "nope.csv"))
    assert len(source) == 0
    assert not source.has_data
    assert source.next() is None


def test_load_header_only_gives_empty_source(tmp_path):
    path = tmp_path / "final.csv"
    path.write_text("timestamp,ActivePowerL3,CurrentL3,VoltageL3,IRRADIATION,temp\n")
    assert not PlaybackSource.load(str(path)).has_data


def test_malformed_numbers_become_zero(tmp_path):
    path = tmp_path / "final.csv"
    path.write_text(
        "timestamp,ActivePowerL3,CurrentL3,VoltageL3,IRRADIATION,temp\n"
        ",abc,,NaN,12.5\n"
    )
    source = PlaybackSource.load(str(path))
    record = source.next()
    assert record["ActivePowerL3"] == 0.0
    assert record["CurrentL3"] == 0.0
    assert record["VoltageL3"] == 0.0
    assert record["IRRADIATION"] == 12.5
    assert record["temp"] == 0.0
    # Missing timestamp falls back to load time
    assert record["timestamp"]


def test_next_walks_and_wraps():
    source = PlaybackSource(_records("A", "B", "C"))

    results = [source.next() for _ in range(4)]

    assert [r["timestamp"] for r in results] == ["A", "B", "C", "A"]
    assert [r["currentIndex"] for r in results] == [1, 2, 3, 1]
    assert all(r["totalPoints"] == 3 for r in results)


def test_wraparound_after_length_plus_one_calls():
    source = PlaybackSource(_records("A", "B", "C", "D", "E"))
    first = source.next()
    for _ in range(4):
        source.next()
    assert source.next() == first


def test_cursor_stays_in_range():
    source = PlaybackSource(_records("A", "B"))
    seen = []
    for _ in range(5):
        source.next()
        seen.append(source.cursor)
    assert seen == [1, 0, 1, 0, 1]


def test_sample_limits_to_n():
    source = PlaybackSource(_records(*"ABCDEFG"))
    assert [r["timestamp"] for r in source.sample(5)] == list("ABCDE")
    # sampling does not move the cursor
    assert source.cursor == 0


@pytest.mark.parametrize("raw, expected", [
    ("1.5", 1.5), (" 2 ", 2.0), ("", 0.0), (None, 0.0), ("x", 0.0),
    ("Infinity", 0.0), ("-inf", 0.0), ("1e999", 0.0),
])
def test_record_from_row_cells(raw, expected):
    record = PlaybackRecord.from_row(0, {"ActivePowerL3": raw}, "now")
    assert record.power == expected
    assert record.id == 1
    assert record.timestamp == "now"


def test_position_counts_records_sent_in_current_pass():
    source = PlaybackSource(_records("A", "B", "C"))
    assert source.position == 0

    positions = []
    for _ in range(4):
        source.next()
        positions.append(source.position)

    # reads the full length after the last record, then restarts at 1
    assert positions == [1, 2, 3, 1]


def test_infinite_cells_are_zeroed_on_load(tmp_path):
    path = tmp_path / "final.csv"
    path.write_text(
        "timestamp,ActivePowerL3,CurrentL3,VoltageL3,IRRADIATION,temp\n"
        "t1,Infinity,1e999,-inf,3,4\n"
    )
    record = PlaybackSource.load(str(path)).next()
    assert record["ActivePowerL3"] == 0.0
    assert record["CurrentL3"] == 0.0
    assert record["VoltageL3"] == 0.0
    assert record["IRRADIATION"] == 3.0

import random
from dataclasses import replace
from datetime import datetime, timezone

import pytest

from app.services.data_aggregation import summarize
from data_simulator.panel_simulator import FleetState, PanelReading, PanelStatus, TickSimulator

NOW = datetime(2024, 6, 1, tzinfo=timezone.utc)


def _reading(pid, power, voltage, temperature, status):
    current = power / voltage if power > 0 else 0.0
    return PanelReading(pid, power, voltage, current, temperature, status, NOW)


def test_summarize_totals_and_counts():
    readings = [
        _reading("P01", 20.0, 30.0, 25.0, PanelStatus.NORMAL),
        _reading("P02", 5.0, 40.0, 35.0, PanelStatus.WARNING),
        _reading("P03", 0.0, 35.0, 45.0, PanelStatus.FAULT),
    ]
    metrics = summarize(readings)

    assert metrics.total_power == pytest.approx(25.0)
    assert metrics.avg_voltage == pytest.approx(35.0)
    assert metrics.avg_temperature == pytest.approx(35.0)
    assert metrics.avg_current == pytest.approx((20 / 30 + 5 / 40) / 3)
    assert metrics.panel_counts == {"total": 3, "normal": 1, "warning": 1, "fault": 1}


def test_summarize_empty_fleet_averages_to_zero():
    metrics = summarize([])
    assert metrics.total_power == 0
    assert metrics.avg_voltage == 0
    assert metrics.avg_current == 0
    assert metrics.avg_temperature == 0
    assert metrics.panel_counts == {"total": 0, "normal": 0, "warning": 0, "fault": 0}


def test_to_dict_rounds_for_the_wire():
    readings = [_reading("P01", 12.34567, 33.333, 21.26, PanelStatus.NORMAL)]
    data = summarize(readings).to_dict()
    assert data["totalPower"] == 12.35
    assert data["avgVoltage"] == 33.3
    assert data["avgTemperature"] == 21.3
    assert data["avgCurrent"] == 0.4
    assert data["panelCounts"]["total"] == 1


def test_thirty_panel_fleet_summary():
    rng = random.Random(3)
    fleet = FleetState(rng)
    fleet.initialize(30)
    simulator = TickSimulator(rng)

    for _ in range(20):
        simulator.advance(fleet)
        counts = summarize(fleet.snapshot()).panel_counts
        assert counts["total"] == 30
        assert counts["normal"] + counts["warning"] + counts["fault"] == counts["total"]

    assert summarize(fleet.snapshot()).total_power >= 0


def test_counts_follow_status():
    fleet = FleetState(random.Random(5))
    fleet.initialize(4)
    fleet.replace_all(replace(r, status=PanelStatus.FAULT, power=0.0) for r in fleet.snapshot())
    counts = summarize(fleet.snapshot()).panel_counts
    assert counts["fault"] == 4
    assert counts["normal"] == counts["warning"] == 0

from dataclasses import dataclass
from typing import Dict, Iterable

from data_simulator.panel_simulator import PanelReading, PanelStatus


@dataclass(frozen=True)
class AggregateMetrics:
    total_power: float
    avg_voltage: float
    avg_current: float
    avg_temperature: float
    panel_counts: Dict[str, int]

    def to_dict(self):
        """Wire form: total power to 2 decimals, averages to 1 decimal."""
        return {
            "totalPower": round(self.total_power, 2),
            "avgVoltage": round(self.avg_voltage, 1),
            "avgCurrent": round(self.avg_current, 1),
            "avgTemperature": round(self.avg_temperature, 1),
            "panelCounts": dict(self.panel_counts),
        }


def summarize(readings: Iterable[PanelReading]) -> AggregateMetrics:
    """Fleet-wide totals and averages. An empty fleet averages to 0."""
    readings = list(readings)
    count = len(readings)

    total_power = sum(r.power for r in readings)
    voltage_sum = sum(r.voltage for r in readings)
    current_sum = sum(r.current for r in readings)
    temperature_sum = sum(r.temperature for r in readings)

    panel_counts = {"total": count}
    for status in PanelStatus:
        panel_counts[status.value] = 0
    for r in readings:
        panel_counts[r.status.value] += 1

    return AggregateMetrics(
        total_power=total_power,
        avg_voltage=(voltage_sum / count) if count else 0.0,
        avg_current=(current_sum / count) if count else 0.0,
        avg_temperature=(temperature_sum / count) if count else 0.0,
        panel_counts=panel_counts,
    )

# panel_simulator.py
import logging
import random
from dataclasses import dataclass, replace
from datetime import datetime
from enum import Enum
from typing import Dict, Iterator, Optional, Tuple

from .constants import (
    DEFAULT_PANEL_COUNT,
    FAULT_PROBABILITY,
    INITIAL_POWER_RANGE,
    MAX_PANEL_POWER,
    POWER_DELTA_RANGE,
    TEMPERATURE_RANGE,
    VOLTAGE_RANGE,
    WARNING_POWER_THRESHOLD,
)
from .utils import RandomSource, clamp, uniform, utc_now

logger = logging.getLogger(__name__)


class PanelStatus(str, Enum):
    NORMAL = "normal"
    WARNING = "warning"
    FAULT = "fault"


def status_for_power(power: float) -> PanelStatus:
    """Non-fault status of a panel producing ``power`` watts."""
    if power < WARNING_POWER_THRESHOLD:
        return PanelStatus.WARNING
    return PanelStatus.NORMAL


def current_for(power: float, voltage: float) -> float:
    return power / voltage if power > 0 else 0.0


@dataclass(frozen=True)
class PanelReading:
    id: str
    power: float
    voltage: float
    current: float
    temperature: float
    status: PanelStatus
    last_update: datetime

    def to_dict(self):
        return {
            "id": self.id,
            "power": self.power,
            "voltage": self.voltage,
            "current": self.current,
            "temperature": self.temperature,
            "status": self.status.value,
            "lastUpdate": self.last_update.isoformat(),
        }


def panel_id(index: int) -> str:
    # P01, P02, ... P30
    return f"P{index:02d}"


class FleetState:
    """
    Current readings of a fixed-size panel fleet, ordered and keyed by panel id.
    Readings are immutable; a tick swaps in a complete new set at once so a
    snapshot never sees a half-applied update.
    """

    def __init__(self, rng: Optional[RandomSource] = None):
        self.rng = rng or random.Random()
        self._readings: Dict[str, PanelReading] = {}
        self._initialized = False

    @property
    def initialized(self) -> bool:
        return self._initialized

    def initialize(self, n: int = DEFAULT_PANEL_COUNT) -> bool:
        """
        Populate the fleet with n panels holding randomized plausible values.
        Returns False (and changes nothing) if the fleet was already initialized.
        """
        if self._initialized:
            return False
        if n < 0:
            raise ValueError(f"Panel count must be >= 0, got {n}")

        now = utc_now()
        readings = {}
        for i in range(1, n + 1):
            power = uniform(self.rng, *INITIAL_POWER_RANGE)
            voltage = uniform(self.rng, *VOLTAGE_RANGE)
            temperature = uniform(self.rng, *TEMPERATURE_RANGE)
            reading = PanelReading(
                id=panel_id(i),
                power=power,
                voltage=voltage,
                current=current_for(power, voltage),
                temperature=temperature,
                status=status_for_power(power),
                last_update=now,
            )
            readings[reading.id] = reading

        self._readings = readings
        self._initialized = True
        logger.info(f"Initialized fleet with {n} panels")
        return True

    def snapshot(self) -> Tuple[PanelReading, ...]:
        return tuple(self._readings.values())

    def get(self, panel_id: str) -> Optional[PanelReading]:
        return self._readings.get(panel_id)

    def replace_all(self, readings) -> None:
        """Swap in a full new set of readings for the same panel ids."""
        readings = tuple(readings)
        if [r.id for r in readings] != list(self._readings):
            raise ValueError("Replacement readings must cover the same panels in the same order")
        self._readings = {r.id: r for r in readings}

    def __len__(self) -> int:
        return len(self._readings)

    def __iter__(self) -> Iterator[PanelReading]:
        return iter(self.snapshot())


class TickSimulator:
    """
    Advances a fleet by one synthetic interval.

    Each panel is updated independently: random power walk clamped to
    [0, MAX_PANEL_POWER], a fault roll that zeroes power, then fresh voltage
    and temperature draws (sensor noise, no drift). Random draws per panel,
    in order: power delta, fault roll, voltage, temperature.
    """

    def __init__(self, rng: Optional[RandomSource] = None):
        self.rng = rng or random.Random()

    def advance_reading(self, reading: PanelReading, now: datetime) -> PanelReading:
        # 1. Power random walk
        delta = uniform(self.rng, *POWER_DELTA_RANGE)
        power = clamp(reading.power + delta, 0.0, MAX_PANEL_POWER)

        # 2-3. Fault injection short-circuits the warning/normal rule
        if self.rng.random() < FAULT_PROBABILITY:
            power = 0.0
            status = PanelStatus.FAULT
        else:
            status = status_for_power(power)

        # 4-6. Sensor noise
        voltage = uniform(self.rng, *VOLTAGE_RANGE)
        current = current_for(power, voltage)
        temperature = uniform(self.rng, *TEMPERATURE_RANGE)

        return replace(
            reading,
            power=power,
            voltage=voltage,
            current=current,
            temperature=temperature,
            status=status,
            last_update=now,
        )

    def advance(self, state: FleetState) -> None:
        now = utc_now()
        state.replace_all(self.advance_reading(r, now) for r in state.snapshot())
        faults = sum(1 for r in state.snapshot() if r.status is PanelStatus.FAULT)
        if faults:
            logger.debug(f"Tick applied to {len(state)} panels, {faults} in fault")

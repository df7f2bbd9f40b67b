import random
from typing import Optional

from data_simulator.constants import DEFAULT_PANEL_COUNT
from data_simulator.panel_simulator import FleetState, TickSimulator
from data_simulator.playback import PlaybackSource
from data_simulator.utils import RandomSource, utc_now

from app.services.data_aggregation import summarize
from app.services.session_registry import SessionRegistry
from app.services.streaming import PushStreamer


class SimulationContext:
    """
    Owns all mutable simulation state for one fleet: panel readings, playback
    data, push subscribers and the push run state.
    """

    def __init__(
        self,
        panel_count: int = DEFAULT_PANEL_COUNT,
        playback: Optional[PlaybackSource] = None,
        rng: Optional[RandomSource] = None,
        stream_interval: float = 1.0,
    ):
        self.panel_count = panel_count
        self.rng = rng or random.Random()
        self.fleet = FleetState(self.rng)
        self.simulator = TickSimulator(self.rng)
        self.playback = playback or PlaybackSource()
        self.registry = SessionRegistry()
        self.streamer = PushStreamer(self.playback, self.registry, interval=stream_interval)

    @classmethod
    def from_settings(cls, settings, rng: Optional[RandomSource] = None) -> "SimulationContext":
        return cls(
            panel_count=settings.panel_count,
            playback=PlaybackSource.load(settings.data_csv),
            rng=rng,
            stream_interval=settings.stream_interval,
        )

    def ensure_fleet(self) -> None:
        self.fleet.initialize(self.panel_count)

    @property
    def is_running(self) -> bool:
        return self.streamer.is_running

    def status(self) -> dict:
        return {
            "isRunning": self.is_running,
            "currentIndex": self.playback.position,
            "totalDataPoints": len(self.playback),
            "hasData": self.playback.has_data,
        }


def handle_poll(context: SimulationContext) -> dict:
    """
    One pull-mode step: every call ticks the fleet and advances playback,
    so the polling client's cadence is the simulation clock.
    """
    context.ensure_fleet()
    context.simulator.advance(context.fleet)
    panels = context.fleet.snapshot()
    metrics = summarize(panels)
    return {
        "panels": [p.to_dict() for p in panels],
        "metrics": metrics.to_dict(),
        "currentPlaybackRecord": context.playback.next(),
        "timestamp": utc_now().isoformat(),
    }

# Solar panel fleet simulation and recorded-data playback
from .panel_simulator import FleetState, PanelReading, PanelStatus, TickSimulator
from .playback import PlaybackRecord, PlaybackSource

__all__ = [
    'FleetState',
    'PanelReading',
    'PanelStatus',
    'TickSimulator',
    'PlaybackRecord',
    'PlaybackSource',
]

import os
from dataclasses import dataclass, field
from typing import List

from data_simulator.constants import DEFAULT_CSV_FILE, DEFAULT_PANEL_COUNT


def _split_origins(raw: str) -> List[str]:
    return [o.strip() for o in raw.split(",") if o.strip()]


@dataclass
class Settings:
    host: str = "0.0.0.0"
    port: int = 3001
    data_csv: str = DEFAULT_CSV_FILE
    panel_count: int = DEFAULT_PANEL_COUNT
    stream_interval: float = 1.0
    cors_origins: List[str] = field(default_factory=lambda: ["*"])
    log_level: str = "INFO"

    def __post_init__(self):
        if self.panel_count < 0:
            raise ValueError(f"PANEL_COUNT must be >= 0, got {self.panel_count}")
        if self.stream_interval <= 0:
            raise ValueError(f"STREAM_INTERVAL_SECONDS must be > 0, got {self.stream_interval}")

    @classmethod
    def from_env(cls, environ=None) -> "Settings":
        env = os.environ if environ is None else environ
        return cls(
            host=env.get("HOST", "0.0.0.0"),
            port=int(env.get("PORT", "3001")),
            data_csv=env.get("SOLAR_DATA_CSV", DEFAULT_CSV_FILE),
            panel_count=int(env.get("PANEL_COUNT", str(DEFAULT_PANEL_COUNT))),
            stream_interval=float(env.get("STREAM_INTERVAL_SECONDS", "1.0")),
            cors_origins=_split_origins(env.get("CORS_ORIGINS", "*")),
            log_level=env.get("LOG_LEVEL", "INFO").upper(),
        )

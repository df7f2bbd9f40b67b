# Constants for simulating a small fleet of solar panels

DEFAULT_PANEL_COUNT = 30

# Initial reading ranges, [low, high)
INITIAL_POWER_RANGE = (0.0, 50.0)  # W
VOLTAGE_RANGE = (30.0, 40.0)  # V
TEMPERATURE_RANGE = (20.0, 50.0)  # °C

# Per-tick update rule
POWER_DELTA_RANGE = (-5.0, 5.0)  # W change per tick
MAX_PANEL_POWER = 60.0  # W
FAULT_PROBABILITY = 0.05  # per panel per tick
WARNING_POWER_THRESHOLD = 10.0  # W, below this a panel is in warning

# Playback CSV layout
CSV_TIMESTAMP_COLUMN = 'timestamp'
CSV_FIELDS = {
    # record attribute: CSV column
    'power': 'ActivePowerL3',
    'current': 'CurrentL3',
    'voltage': 'VoltageL3',
    'irradiance': 'IRRADIATION',
    'temperature': 'temp',
}
DEFAULT_CSV_FILE = 'final.csv'

"""
Simulation Configuration
========================
Configuration parameters for the windowed neighbor instrumentation and the
DTN host scenario that drives it.
"""

from dataclasses import dataclass, field, fields, replace
from pathlib import Path
from typing import Optional, Tuple, Union

import yaml


@dataclass
class InstrumentationConfig:

    # Window length in seconds
    window_size: float = 300.0
    log_dir: str = "logs"
    # One log per observing node, e.g. logs/node_7.csv
    file_pattern: str = "node_{node}.csv"

    # Message identifier prefixes used for classification
    normal_prefix: str = "M"
    flood_prefix: str = "F"

    def __post_init__(self):
        if self.window_size <= 0:
            raise ValueError(f"window_size must be positive, got {self.window_size}")

    def log_path_for(self, node_id) -> Path:
        return Path(self.log_dir) / self.file_pattern.format(node=node_id)


@dataclass
class SimulationConfig:

    # ============================================================================
    # HOST SCENARIO PARAMETERS
    # ============================================================================

    # General simulation parameters
    sim_time: float = 43200.0  # 12 hours
    area_size: Tuple[float, float] = (2000.0, 2000.0)
    num_nodes: int = 20
    seed: int = 42

    # Radio
    comm_range: float = 100.0
    transmit_speed: float = 250000.0  # bytes per second

    # Random waypoint mobility
    min_speed: float = 0.5
    max_speed: float = 1.5
    max_pause: float = 120.0
    movement_step: float = 1.0

    # Node buffers (None = unbounded store)
    buffer_capacity: Optional[int] = 5_000_000

    # Message generation
    message_interval: float = 30.0
    message_size_range: Tuple[int, int] = (50_000, 500_000)
    flood_fraction: float = 0.2

    # Router update period, also the instrumentation tick
    update_interval: float = 1.0

    # PRoPHET constants
    prophet_p_init: float = 0.75
    prophet_beta: float = 0.25
    prophet_gamma: float = 0.98
    prophet_time_unit: float = 30.0

    instrumentation: InstrumentationConfig = field(default_factory=InstrumentationConfig)


def _build(cls, values: dict, section: str):
    known = {f.name for f in fields(cls)}
    unknown = set(values) - known
    if unknown:
        raise ValueError(f"Unknown {section} option(s): {', '.join(sorted(unknown))}")
    return cls(**values)


def load_config(path: Union[str, Path]) -> SimulationConfig:
    """
    Load a SimulationConfig from a YAML file.

    Top-level keys map to SimulationConfig fields; an optional
    ``instrumentation:`` mapping holds InstrumentationConfig fields.
    Missing keys keep their defaults.
    """
    with open(path, "r", encoding="utf-8") as f:
        raw = yaml.safe_load(f) or {}

    if not isinstance(raw, dict):
        raise ValueError(f"Configuration file {path} must contain a mapping")

    raw = dict(raw)
    instrumentation = _build(InstrumentationConfig, raw.pop("instrumentation", None) or {},
                             "instrumentation")

    for key in ("area_size", "message_size_range"):
        if key in raw:
            raw[key] = tuple(raw[key])

    config = _build(SimulationConfig, raw, "simulation")
    return replace(config, instrumentation=instrumentation)


DEFAULT_CONFIG = SimulationConfig()

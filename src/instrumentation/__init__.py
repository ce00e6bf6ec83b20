"""Windowed per-neighbor observation of a DTN router"""

from .buffer_sampler import BufferSampler, DropCounters, buffer_occupancy
from .contact_tracker import ContactTracker
from .errors import InstrumentationError
from .neighbor_stats import NeighborStats, NeighborStatsTable
from .observer import BufferView, NodeInstrumentation
from .window_manager import WindowManager
from .window_writer import LOG_COLUMNS, WindowWriter

__all__ = [
    'BufferSampler',
    'BufferView',
    'ContactTracker',
    'DropCounters',
    'InstrumentationError',
    'LOG_COLUMNS',
    'NeighborStats',
    'NeighborStatsTable',
    'NodeInstrumentation',
    'WindowManager',
    'WindowWriter',
    'buffer_occupancy',
]

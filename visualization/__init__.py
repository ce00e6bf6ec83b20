"""Visualization tools for the windowed DTN instrumentation logs"""

from .window_plots import WindowPlotter

__all__ = [
    'WindowPlotter',
]

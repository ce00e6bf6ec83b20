"""
Analysis Package
================
Loading, validation and summaries of per-node window logs.
"""

from .metrics import (
    RunSummary,
    check_window_contiguity,
    load_node_log,
    load_run_logs,
    summarize_neighbors,
    summarize_run,
    window_table,
)

__all__ = [
    'RunSummary',
    'check_window_contiguity',
    'load_node_log',
    'load_run_logs',
    'summarize_neighbors',
    'summarize_run',
    'window_table',
]

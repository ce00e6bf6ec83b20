# analysis/metrics.py
"""
Offline analysis of per-node window logs.

Each observing node writes its own CSV (one row per window and neighbor with
activity). Cumulative totals only exist here, by summing rows across windows:
- contacts / contact_time: link-up count and seconds the link was up
- tx_offer / tx_ok / tx_abort / rx: transfer counters per traffic class
- buf_bytes_avg / buf_bytes_max, drop_buf_*: per-window fields, repeated on
  every row of the same window
"""

from dataclasses import dataclass
from pathlib import Path
from typing import List, Union

import numpy as np
import pandas as pd

from src.instrumentation.window_writer import LOG_COLUMNS

COUNTER_COLUMNS = [
    "contacts", "contact_time",
    "tx_offer_normal", "tx_ok_normal", "tx_abort_normal", "rx_normal",
    "tx_offer_flood", "tx_ok_flood", "tx_abort_flood", "rx_flood",
]

# Fields shared by all rows of one window
WINDOW_COLUMNS = ["buf_bytes_avg", "buf_bytes_max", "drop_buf_normal", "drop_buf_flood"]


@dataclass
class RunSummary:
    observers: int
    windows: int
    rows: int
    total_contacts: int
    total_contact_time: float
    tx_offer: int
    tx_ok: int
    tx_abort: int
    drops_normal: int
    drops_flood: int
    mean_buffer_bytes: float
    max_buffer_bytes: int

    @property
    def transfer_success_rate(self) -> float:
        return self.tx_ok / self.tx_offer if self.tx_offer > 0 else 0.0

    @property
    def transfer_abort_rate(self) -> float:
        return self.tx_abort / self.tx_offer if self.tx_offer > 0 else 0.0


def load_node_log(path: Union[str, Path]) -> pd.DataFrame:
    """Load one node's window log. Raises ValueError on an unexpected header."""
    df = pd.read_csv(path)
    if list(df.columns) != LOG_COLUMNS:
        raise ValueError(f"{path} is not a window log (columns: {list(df.columns)})")
    return df


def load_run_logs(log_dir: Union[str, Path], pattern: str = "node_*.csv") -> pd.DataFrame:
    """Concatenate all node logs found in ``log_dir``."""
    paths = sorted(Path(log_dir).glob(pattern))
    if not paths:
        return pd.DataFrame(columns=LOG_COLUMNS)
    return pd.concat([load_node_log(p) for p in paths], ignore_index=True)


def window_table(df: pd.DataFrame) -> pd.DataFrame:
    """One row per (observer, window) with the shared window fields."""
    keys = ["observer", "window_start", "window_end"]
    return df.drop_duplicates(subset=keys)[keys + WINDOW_COLUMNS].reset_index(drop=True)


def check_window_contiguity(df: pd.DataFrame, window_size: float) -> List[str]:
    """
    Check that each observer's windows have the configured length and do not
    overlap. Windows without activity produce no rows, so gaps are allowed as
    long as they are whole multiples of the window size.

    Returns a list of human-readable violations (empty when consistent).
    """
    problems = []
    windows = window_table(df)

    for observer, group in windows.groupby("observer"):
        starts = group["window_start"].to_numpy(dtype=float)
        ends = group["window_end"].to_numpy(dtype=float)

        bad_length = ~np.isclose(ends - starts, window_size)
        for s, e in zip(starts[bad_length], ends[bad_length]):
            problems.append(f"observer {observer}: window [{s:.0f}, {e:.0f}) has length {e - s:.0f}")

        order = np.argsort(starts)
        starts, ends = starts[order], ends[order]
        gaps = starts[1:] - ends[:-1]
        for i in np.nonzero(gaps < 0)[0]:
            problems.append(f"observer {observer}: window starting {starts[i + 1]:.0f} overlaps previous")
        steps = gaps / window_size
        for i in np.nonzero(~np.isclose(steps, np.round(steps)))[0]:
            problems.append(f"observer {observer}: window starting {starts[i + 1]:.0f} is misaligned")

    return problems


def summarize_neighbors(df: pd.DataFrame) -> pd.DataFrame:
    """Cumulative counters per (observer, neighbor) over the whole run."""
    totals = df.groupby(["observer", "neighbor"], as_index=False)[COUNTER_COLUMNS].sum()
    totals["windows_active"] = df.groupby(["observer", "neighbor"]).size().to_numpy()

    offered = totals["tx_offer_normal"] + totals["tx_offer_flood"]
    succeeded = totals["tx_ok_normal"] + totals["tx_ok_flood"]
    totals["tx_success_ratio"] = np.where(offered > 0, succeeded / offered.where(offered > 0, 1), 0.0)
    return totals


def summarize_run(df: pd.DataFrame) -> RunSummary:
    windows = window_table(df)
    offered = int(df["tx_offer_normal"].sum() + df["tx_offer_flood"].sum())
    ok = int(df["tx_ok_normal"].sum() + df["tx_ok_flood"].sum())
    aborted = int(df["tx_abort_normal"].sum() + df["tx_abort_flood"].sum())

    return RunSummary(
        observers=int(df["observer"].nunique()),
        windows=len(windows),
        rows=len(df),
        total_contacts=int(df["contacts"].sum()),
        total_contact_time=float(df["contact_time"].sum()),
        tx_offer=offered,
        tx_ok=ok,
        tx_abort=aborted,
        drops_normal=int(windows["drop_buf_normal"].sum()),
        drops_flood=int(windows["drop_buf_flood"].sum()),
        mean_buffer_bytes=float(windows["buf_bytes_avg"].mean()) if len(windows) else 0.0,
        max_buffer_bytes=int(windows["buf_bytes_max"].max()) if len(windows) else 0,
    )

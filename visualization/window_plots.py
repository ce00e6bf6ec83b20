"""Visualization of per-window neighbor observations"""

import matplotlib
matplotlib.use('Agg')  # Non-interactive backend
import matplotlib.pyplot as plt
import numpy as np
import pandas as pd
import seaborn as sns
from pathlib import Path
from typing import Optional

from analysis.metrics import window_table

# Set style
sns.set_style("whitegrid")
plt.rcParams['figure.figsize'] = (12, 8)
plt.rcParams['font.size'] = 10


class WindowPlotter:
    """Plot window logs of a single observing node"""

    def __init__(self, save_dir: str = "results/plots/windows"):
        self.save_dir = Path(save_dir)
        self.save_dir.mkdir(parents=True, exist_ok=True)

    def plot_contact_time(self, df: pd.DataFrame, observer, top_n: int = 5) -> Optional[Path]:
        """Stacked contact time per window for the ``top_n`` busiest neighbors"""
        rows = df[df["observer"] == observer]
        if rows.empty:
            return None

        pivot = rows.pivot_table(index="window_start", columns="neighbor",
                                 values="contact_time", aggfunc="sum", fill_value=0)
        busiest = pivot.sum().sort_values(ascending=False).index[:top_n]
        pivot = pivot[busiest]

        fig, ax = plt.subplots(figsize=(12, 5))
        bottom = np.zeros(len(pivot))
        for neighbor in pivot.columns:
            ax.bar(pivot.index, pivot[neighbor], bottom=bottom, width=rows["window_end"].iloc[0] - rows["window_start"].iloc[0],
                   align="edge", label=f"Node {neighbor}", alpha=0.8, edgecolor="black", linewidth=0.3)
            bottom += pivot[neighbor].to_numpy()

        ax.set_xlabel('Window start (s)', fontweight='bold')
        ax.set_ylabel('Contact time (s)', fontweight='bold')
        ax.set_title(f'Contact time per window, observer {observer}')
        ax.legend(loc='upper right')

        path = self.save_dir / f"contact_time_node_{observer}.png"
        fig.savefig(path, dpi=150, bbox_inches='tight')
        plt.close(fig)
        return path

    def plot_buffer_occupancy(self, df: pd.DataFrame, observer) -> Optional[Path]:
        """Average and maximum buffer occupancy per window"""
        windows = window_table(df[df["observer"] == observer])
        if windows.empty:
            return None

        fig, ax = plt.subplots(figsize=(12, 5))
        ax.step(windows["window_start"], windows["buf_bytes_avg"] / 1e6, where="post",
                label="Average", color='#2ecc71')
        ax.step(windows["window_start"], windows["buf_bytes_max"] / 1e6, where="post",
                label="Maximum", color='#e74c3c', linestyle='--')

        drops = windows["drop_buf_normal"] + windows["drop_buf_flood"]
        if drops.any():
            ax2 = ax.twinx()
            ax2.bar(windows["window_start"], drops, width=windows["window_end"] - windows["window_start"],
                    align="edge", alpha=0.2, color='gray', label="Drops")
            ax2.set_ylabel('Dropped messages', fontweight='bold')
            ax2.grid(False)

        ax.set_xlabel('Window start (s)', fontweight='bold')
        ax.set_ylabel('Buffer occupancy (MB)', fontweight='bold')
        ax.set_title(f'Buffer occupancy per window, observer {observer}')
        ax.legend(loc='upper left')

        path = self.save_dir / f"buffer_node_{observer}.png"
        fig.savefig(path, dpi=150, bbox_inches='tight')
        plt.close(fig)
        return path

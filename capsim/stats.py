"""
Statistics aggregated over trials, per number of placed receivers.
Provides the CSV export, a formatted summary table and coverage curves.
"""

from __future__ import annotations

import csv
import math
import os
import threading
from typing import Dict, List, Optional

import matplotlib.pyplot as plt
from tabulate import tabulate

from .solution import RoundStats

CSV_SEPARATOR = ", "
CSV_HEADER = [
    "#Tx", "#Rx",
    "MinCov", "MedCov", "MeanCov", "P95Cov", "MaxCov",
    "MinContention", "MedContention", "MeanContention", "P95Contention", "MaxContention",
]


class Series:
    """Sample list with the order statistics used in the report."""

    def __init__(self):
        self.values: List[float] = []

    def add(self, v: float) -> None:
        self.values.append(float(v))

    def __len__(self) -> int:
        return len(self.values)

    def _sorted(self) -> List[float]:
        return sorted(self.values)

    def min(self) -> float:
        return min(self.values) if self.values else math.nan

    def max(self) -> float:
        return max(self.values) if self.values else math.nan

    def median(self) -> float:
        if not self.values:
            return math.nan
        s = self._sorted()
        return s[len(s) // 2]

    def mean(self) -> float:
        if not self.values:
            return math.nan
        return sum(self.values) / len(self.values)

    def percentile95(self) -> float:
        if not self.values:
            return math.nan
        s = self._sorted()
        return s[min(len(s) - 1, int(len(s) * 0.95))]


class ExperimentStats:
    """Statistics for one (transmitter count, receiver count) pair, fed once per trial."""

    def __init__(self, num_transmitters: int, num_receivers: int):
        self.num_transmitters = num_transmitters
        self.num_receivers = num_receivers
        self.coverage = Series()
        self.contention = Series()
        self.min_contention = Series()
        self.max_contention = Series()
        self._lock = threading.Lock()

    def add_round(self, rs: RoundStats) -> None:
        with self._lock:
            self.coverage.add(rs.coverage_ratio)
            self.contention.add(rs.mean_contention)
            self.min_contention.add(rs.min_contention)
            self.max_contention.add(rs.max_contention)

    def add_contention(self, mean_contention: float) -> None:
        with self._lock:
            self.contention.add(mean_contention)

    def row(self) -> List[str]:
        cov = self.coverage
        con = self.contention
        return [
            str(self.num_transmitters),
            str(self.num_receivers),
            f"{cov.min():.4f}", f"{cov.median():.4f}", f"{cov.mean():.4f}",
            f"{cov.percentile95():.4f}", f"{cov.max():.4f}",
            f"{self.min_contention.min():.5f}", f"{con.median():.5f}", f"{con.mean():.5f}",
            f"{con.percentile95():.5f}", f"{self.max_contention.max():.5f}",
        ]


def make_stats(num_transmitters: int, num_receivers: int) -> List[ExperimentStats]:
    return [ExperimentStats(num_transmitters, m + 1) for m in range(num_receivers)]


def write_stats_csv(path: str, stats: List[ExperimentStats]) -> None:
    parent = os.path.dirname(path)
    if parent:
        os.makedirs(parent, exist_ok=True)
    with open(path, "w", encoding="utf-8") as f:
        f.write(CSV_SEPARATOR.join(CSV_HEADER) + "\n")
        for s in stats:
            f.write(CSV_SEPARATOR.join(s.row()) + "\n")


def load_stats_csv(csv_path: str) -> List[Dict[str, float]]:
    """Reads a statistics CSV back; numeric columns are parsed as floats (NaN allowed)."""
    rows = []
    with open(csv_path, "r", encoding="utf-8") as f:
        reader = csv.reader(f, skipinitialspace=True)
        header = [h.strip() for h in next(reader)]
        for raw in reader:
            if not raw:
                continue
            row = {}
            for k, v in zip(header, raw):
                row[k] = float(v)
            row["#Tx"] = int(row["#Tx"])
            row["#Rx"] = int(row["#Rx"])
            rows.append(row)
    return rows


def print_summary_table(stats: List[ExperimentStats]) -> None:
    table_data = []
    headers = ["#Tx", "#Rx", "Trials", "Mean coverage", "P95 coverage", "Mean contention", "Max contention"]
    for s in stats:
        table_data.append([
            s.num_transmitters,
            s.num_receivers,
            max(len(s.coverage), len(s.contention)),
            f"{s.coverage.mean():.4f}",
            f"{s.coverage.percentile95():.4f}",
            f"{s.contention.mean():.5f}",
            f"{s.max_contention.max():.5f}",
        ])

    print("\n" + "=" * 100)
    print("RESULTS SUMMARY")
    print("=" * 100)
    print(tabulate(table_data, headers=headers, tablefmt="grid", stralign="left"))
    print()


def plot_coverage_curve(stats: List[ExperimentStats], save_path: Optional[str] = None, show: bool = False):
    """Mean coverage ratio and mean contention against the number of receivers."""
    rx = [s.num_receivers for s in stats]
    cov = [s.coverage.mean() for s in stats]
    con = [s.contention.mean() for s in stats]

    fig, ax1 = plt.subplots(figsize=(8, 5))
    ax1.plot(rx, cov, marker="o", color="#2E86AB", label="Mean coverage")
    ax1.set_xlabel("Receivers")
    ax1.set_ylabel("Coverage ratio")
    ax1.set_ylim(0.0, 1.05)
    ax1.grid(True, linewidth=0.3)

    ax2 = ax1.twinx()
    ax2.plot(rx, con, marker="s", color="#A23B72", label="Mean contention")
    ax2.set_ylabel("Mean contention")

    lines = ax1.get_legend_handles_labels()[0] + ax2.get_legend_handles_labels()[0]
    labels = ax1.get_legend_handles_labels()[1] + ax2.get_legend_handles_labels()[1]
    ax1.legend(lines, labels, loc="center right", fontsize=9)

    if stats:
        ax1.set_title(f"{stats[0].num_transmitters} transmitters")
    plt.tight_layout()

    if save_path:
        parent = os.path.dirname(save_path)
        if parent:
            os.makedirs(parent, exist_ok=True)
        fig.savefig(save_path, dpi=150, bbox_inches="tight")
    if show:
        plt.show()
    else:
        plt.close(fig)

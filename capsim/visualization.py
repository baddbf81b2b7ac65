from __future__ import annotations

import os
from typing import Optional

import matplotlib.pyplot as plt
from matplotlib import colormaps
from matplotlib.patches import Circle

from .solution import FieldSnapshot


class FieldRenderer:
    """
    Draws a trial snapshot:
      - transmitters, coloured by capture ratio
      - live capture disks
      - candidate points (coloured by bin rank when available)
      - receivers, labelled R<disks>/<transmitters>

    Purely observational: nothing flows back into the solvers.
    """

    def __init__(self, width_px: int = 800, height_px: int = 600, dpi: int = 100,
                 max_disks: int = 400, max_points: int = 20000):
        self.width_px = width_px
        self.height_px = height_px
        self.dpi = dpi
        self.max_disks = max_disks
        self.max_points = max_points

    def render(self, snap: FieldSnapshot, save_path: Optional[str] = None, title: str = "", show: bool = False):
        fig, ax = plt.subplots(figsize=(self.width_px / self.dpi, self.height_px / self.dpi), dpi=self.dpi)
        cmap = colormaps["RdYlGn"]

        # Capture disks (auto-limit for readability)
        for disk in list(snap.disks)[:self.max_disks]:
            c = disk.circle
            ax.add_patch(Circle(c.center, c.radius, fill=False, linewidth=0.4, alpha=0.35))
        if len(snap.disks) > self.max_disks:
            ax.text(
                0.01, 0.01,
                f"Disks shown: {self.max_disks}/{len(snap.disks)} (auto-limited)",
                transform=ax.transAxes,
                fontsize=8,
                verticalalignment="bottom",
            )

        # Candidate points
        if snap.ranked_points is not None and snap.rank_thresholds is not None:
            n_bins = max(1, len(snap.ranked_points) - 1)
            for rank, bucket in enumerate(snap.ranked_points):
                if not bucket:
                    continue
                pts = list(bucket)[:self.max_points]
                ax.scatter([p[0] for p in pts], [p[1] for p in pts], s=2,
                           color=colormaps["viridis"](rank / n_bins), alpha=0.6)
        elif snap.points:
            pts = list(snap.points)[:self.max_points]
            ax.scatter([p[0] for p in pts], [p[1] for p in pts], s=2, color="grey", alpha=0.5,
                       label=f"Points ({len(snap.points)})")

        # Transmitters
        if snap.transmitters:
            tx = [t.x for t in snap.transmitters]
            ty = [t.y for t in snap.transmitters]
            colors = [cmap(t.capture_ratio) for t in snap.transmitters]
            ax.scatter(tx, ty, s=30, c=colors, edgecolors="black", linewidths=0.5, zorder=3,
                       label=f"Transmitters ({len(snap.transmitters)})")

        # Receivers
        for i, r in enumerate(snap.receivers):
            winners = snap.receiver_winners[i] if i < len(snap.receiver_winners) else 0
            ax.scatter([r.x], [r.y], s=80, marker="^", color="#1f77b4", edgecolors="black", zorder=4)
            ax.annotate(f"R{r.size()}/{winners}", (r.x, r.y), textcoords="offset points",
                        xytext=(5, 5), fontsize=7)

        ax.set_xlim(0, snap.width)
        ax.set_ylim(0, snap.height)
        ax.set_aspect("equal", adjustable="box")
        ax.grid(True, linewidth=0.3)
        if not title:
            title = f"tx={len(snap.transmitters)} | disks={len(snap.disks)} | rx={len(snap.receivers)}"
        ax.set_title(title)
        if snap.transmitters or snap.points:
            ax.legend(loc="upper right", fontsize=8)

        if save_path:
            parent = os.path.dirname(save_path)
            if parent:
                os.makedirs(parent, exist_ok=True)
            fig.savefig(save_path, dpi=self.dpi, bbox_inches="tight")
        if show:
            plt.show()
        else:
            plt.close(fig)

from __future__ import annotations

import math
import threading
from typing import Iterable, List, Optional, Set

from .geometry import Point


def _thresholds(num_bins: int, min_score: int, max_score: int) -> List[int]:
    step = int(math.ceil((max_score - min_score) / num_bins))
    if step < 1:
        step = 1
    return [min_score + i * step for i in range(num_bins)]


class Binner:
    """
    Rank index of candidate points by their last observed coverage count.

    Bucket i holds points whose score s satisfies thresholds[i] <= s <
    thresholds[i + 1]; the last bucket takes every higher score. Insertion is
    safe from several evaluator threads at once; removal is only done by the
    orchestrating thread between rounds.
    """

    def __init__(self, num_bins: int, min_score: int, max_score: int):
        if num_bins < 1:
            raise ValueError(f"num_bins must be >= 1, got {num_bins}")
        self._mins = _thresholds(num_bins, min_score, max_score)
        self._bins: List[Set[Point]] = [set() for _ in range(num_bins)]
        self._lock = threading.Lock()

    @property
    def num_bins(self) -> int:
        return len(self._bins)

    @property
    def thresholds(self) -> List[int]:
        return list(self._mins)

    def rebin(self, min_score: int, max_score: int) -> None:
        """
        Recompute thresholds over [min_score, max_score].

        Points are not moved: their membership is stale until they are scored again.
        """
        self._mins = _thresholds(len(self._bins), min_score, max_score)

    def bucket_of(self, score: int) -> int:
        mins = self._mins
        bindex = 0
        while bindex < len(mins) - 1:
            if mins[bindex + 1] > score:
                break
            bindex += 1
        return bindex

    def place(self, point: Point, score: int) -> int:
        bindex = self.bucket_of(score)
        with self._lock:
            self._bins[bindex].add(point)
        return bindex

    def place_all(self, points: Iterable[Point], score: int) -> int:
        bindex = self.bucket_of(score)
        with self._lock:
            self._bins[bindex].update(points)
        return bindex

    def top_bucket(self) -> Optional[Set[Point]]:
        for b in reversed(self._bins):
            if b:
                return b
        return None

    def top_index(self) -> int:
        """Index of the highest non-empty bucket, 0 when all are empty."""
        bindex = len(self._bins) - 1
        while bindex > 0 and not self._bins[bindex]:
            bindex -= 1
        return bindex

    def take_top(self) -> List[Point]:
        """Removes and returns the points of the highest non-empty bucket."""
        with self._lock:
            for b in reversed(self._bins):
                if b:
                    points = list(b)
                    b.clear()
                    return points
        return []

    def buckets(self) -> List[Set[Point]]:
        """Snapshot copies of every bucket, lowest score first."""
        with self._lock:
            return [set(b) for b in self._bins]

    def __len__(self) -> int:
        return sum(len(b) for b in self._bins)

    def clear(self) -> None:
        with self._lock:
            for b in self._bins:
                b.clear()

    def histogram(self, width: int = 60) -> str:
        sizes = [len(b) for b in self._bins]
        max_size = max(sizes) if sizes else 0
        tick = max(1, max_size // width)

        lines = []
        skip = True
        for i in range(len(sizes) - 1, -1, -1):
            size = sizes[i]
            if size == 0 and skip:
                continue
            skip = False
            bar = "#" * (size // tick)
            if tick > 1 and size % tick >= tick // 2:
                bar += "="
            lines.append(f"{self._mins[i]:3d}) |{bar} {size:,}")
        return "\n".join(lines)

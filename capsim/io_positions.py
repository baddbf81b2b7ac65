from __future__ import annotations

import logging
import os
from typing import Iterable, List, Tuple

from .geometry import Point
from .solution import Receiver

log = logging.getLogger(__name__)


def _parse_lines(path: str, min_tokens: int) -> List[List[str]]:
    rows: List[List[str]] = []
    with open(path, "r", encoding="utf-8", errors="ignore") as f:
        for lineno, line in enumerate(f, start=1):
            line = line.strip()
            if not line or line.startswith("#"):
                continue
            parts = line.replace(",", " ").replace(";", " ").split()
            if len(parts) < min_tokens:
                log.debug("%s:%d: skipping short line %r", path, lineno, line)
                continue
            rows.append(parts)
    return rows


def load_transmitters(path: str) -> List[Point]:
    """
    Reads "x y" lines (whitespace separated). Lines that do not parse are skipped.
    """
    pts: List[Point] = []
    for parts in _parse_lines(path, 2):
        try:
            pts.append((float(parts[0]), float(parts[1])))
        except ValueError:
            log.debug("%s: skipping malformed line %r", path, " ".join(parts))
            continue
    return pts


def load_receivers(path: str) -> List[Tuple[Point, int]]:
    """
    Reads "x y count" lines; count is the coverage-set size recorded at placement.
    A missing count reads as 0. Lines that do not parse are skipped.
    """
    rows: List[Tuple[Point, int]] = []
    for parts in _parse_lines(path, 2):
        try:
            p = (float(parts[0]), float(parts[1]))
            count = int(parts[2]) if len(parts) > 2 else 0
        except ValueError:
            log.debug("%s: skipping malformed line %r", path, " ".join(parts))
            continue
        rows.append((p, count))
    return rows


def _ensure_parent(path: str) -> None:
    parent = os.path.dirname(path)
    if parent:
        os.makedirs(parent, exist_ok=True)


def write_transmitters(path: str, positions: Iterable[Point]) -> None:
    _ensure_parent(path)
    with open(path, "w", encoding="utf-8") as f:
        for x, y in positions:
            f.write(f"{x} {y}\n")


def write_receivers(path: str, receivers: Iterable[Receiver]) -> None:
    _ensure_parent(path)
    with open(path, "w", encoding="utf-8") as f:
        for r in receivers:
            f.write(f"{r.x} {r.y} {r.size()}\n")

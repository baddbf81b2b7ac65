from __future__ import annotations

import math
from dataclasses import dataclass
from typing import List, Optional, Tuple

Point = Tuple[float, float]
Idx = int
PointKey = Tuple[int, int]

CONTAINS_RTOL = 1e-9
CONTAINS_ATOL = 1e-12


def dist2(a: Point, b: Point) -> float:
    dx = a[0] - b[0]
    dy = a[1] - b[1]
    return dx * dx + dy * dy


def distance(a: Point, b: Point) -> float:
    return math.sqrt(dist2(a, b))


def point_key(p: Point, eps: float = 1e-6) -> PointKey:
    """Integer-scaled key used to deduplicate floating-point coordinates."""
    return (int(round(p[0] / eps)), int(round(p[1] / eps)))


def in_bounds(p: Point, width: float, height: float) -> bool:
    return 0.0 <= p[0] < width and 0.0 <= p[1] < height


@dataclass(frozen=True)
class Circle:
    cx: float
    cy: float
    radius: float

    @property
    def center(self) -> Point:
        return (self.cx, self.cy)

    def contains(self, p: Point) -> bool:
        # intersection points sit on the boundary, a few ULPs either side
        return distance(self.center, p) <= self.radius * (1.0 + CONTAINS_RTOL) + CONTAINS_ATOL


@dataclass(frozen=True)
class CaptureDisk:
    """
    Region where transmitter t1 is decoded despite t2 transmitting at the same time.

    t1 and t2 are indices into the trial's transmitter list.
    """
    t1: Idx
    t2: Idx
    circle: Circle

    def same_as(self, other: "CaptureDisk") -> bool:
        if self.t1 == other.t1 and self.t2 == other.t2:
            return True
        return self.circle == other.circle


def capture_circle(p1: Point, p2: Point, beta: float) -> Circle:
    beta2 = beta * beta
    denom = 1.0 - beta2
    cx = (p1[0] - beta2 * p2[0]) / denom
    cy = (p1[1] - beta2 * p2[1]) / denom
    radius = beta * distance(p1, p2) / denom
    return Circle(cx, cy, radius)


def make_capture_disk(t1: Idx, t2: Idx, p1: Point, p2: Point,
                      beta: float, max_range: float) -> Optional[CaptureDisk]:
    """
    Capture disk of transmitter t1 (at p1) against the colliding transmitter t2 (at p2).

    None when both indices name the same transmitter, when the two share a
    position, or when they are more than twice the radio range apart.
    """
    if t1 == t2 or p1 == p2:
        return None
    if distance(p1, p2) > 2.0 * max_range:
        return None
    return CaptureDisk(t1, t2, capture_circle(p1, p2, beta))


def intersect(a: CaptureDisk, b: CaptureDisk, width: float, height: float) -> Optional[List[Point]]:
    """
    Intersection points of two capture disks that fall inside the field.

    Returns None when the disks cannot produce intersection points (same disk,
    concentric, too far apart, or one inside the other), otherwise the 0, 1 or 2
    in-bounds points.
    """
    if a is b or a.same_as(b):
        return None

    c1, c2 = a.circle, b.circle
    dx = c2.cx - c1.cx
    dy = c2.cy - c1.cy
    d = math.sqrt(dx * dx + dy * dy)
    if d == 0.0:
        return None

    r1, r2 = c1.radius, c2.radius
    if d > r1 + r2:
        return None

    along = (r1 * r1 - r2 * r2 + d * d) / (2.0 * d)
    h2 = r1 * r1 - along * along
    # negative h2 is the "one circle inside the other" case
    if h2 < 0.0 or math.isnan(h2):
        return None
    h = math.sqrt(h2)

    x3 = c1.cx + along * dx / d
    y3 = c1.cy + along * dy / d

    candidates = [
        (x3 + h * dy / d, y3 - h * dx / d),
        (x3 - h * dy / d, y3 + h * dx / d),
    ]
    if h == 0.0:
        candidates = candidates[:1]

    points: List[Point] = []
    for p in candidates:
        if math.isnan(p[0]) or math.isnan(p[1]):
            continue
        if in_bounds(p, width, height):
            points.append(p)
    return points

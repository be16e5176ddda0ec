"""Design ruler: grid/angle snapping, measurements and their export.

All coordinates are in micron (DPoint), which is what the host's mouse
events deliver to a plugin.
"""

import csv
import math

import pya

from . import common, config


def snap_to_grid(p, grid):
    """Round both coordinates of ``p`` to the nearest multiple of ``grid``."""
    if grid <= 0:
        raise ValueError(f"grid must be > 0, got {grid}")
    return pya.DPoint(round(p.x / grid) * grid, round(p.y / grid) * grid)


def constrain_angle(p1, p2, step=45.0):
    """Rotate ``p2`` around ``p1`` onto the nearest multiple of ``step`` degrees.

    The distance between the points is kept.
    """
    dx = p2.x - p1.x
    dy = p2.y - p1.y
    angle = math.degrees(math.atan2(dy, dx))
    snapped = round(angle / step) * step
    distance = math.hypot(dx, dy)
    rad = math.radians(snapped)
    return pya.DPoint(p1.x + distance * math.cos(rad), p1.y + distance * math.sin(rad))


def measure(p1, p2):
    """(distance, angle in degrees) from ``p1`` to ``p2``."""
    dx = p2.x - p1.x
    dy = p2.y - p1.y
    return math.hypot(dx, dy), math.degrees(math.atan2(dy, dx))


class Measurement:
    def __init__(self, p1, p2):
        self.p1 = p1
        self.p2 = p2
        self.distance, self.angle = measure(p1, p2)

    def label(self, index):
        return "%d: %.3f um @ %.1f°" % (index + 1, self.distance, self.angle)


class MeasurementList:
    """Ordered measurements shown in the ruler dialog."""

    CSV_HEADER = ["Index", "X1_um", "Y1_um", "X2_um", "Y2_um", "Distance_um", "Angle_deg"]

    def __init__(self):
        self.items = []

    def __len__(self):
        return len(self.items)

    def add(self, m):
        self.items.append(m)
        return m

    def clear(self):
        self.items = []

    def labels(self):
        return [m.label(i) for i, m in enumerate(self.items)]

    def zoom_box(self, row):
        """DBox framing measurement ``row`` or None when the row is invalid.

        The margin is half the larger extent; very short rulers get 1 um.
        """
        if row < 0 or row >= len(self.items):
            return None
        m = self.items[row]
        min_x, max_x = sorted((m.p1.x, m.p2.x))
        min_y, max_y = sorted((m.p1.y, m.p2.y))
        margin = max(max_x - min_x, max_y - min_y) * 0.5
        if margin < 0.1:
            margin = 1.0
        return pya.DBox(min_x - margin, min_y - margin, max_x + margin, max_y + margin)

    def export_csv(self, path):
        with open(path, "w", encoding="utf-8", newline="") as f:
            w = csv.writer(f, lineterminator="\n")
            w.writerow(self.CSV_HEADER)
            for i, m in enumerate(self.items):
                w.writerow([i + 1, m.p1.x, m.p1.y, m.p2.x, m.p2.y, m.distance, m.angle])
        common.log("measurements exported to", path)


class RulerSession:
    """Two-click measurement state.

    The owner keeps ``snap``, ``grid`` and ``constrain`` in sync with the
    dialog options before feeding events.
    """

    def __init__(self, snap=True, grid=config.RULER_GRID_DEFAULT, constrain=False):
        self.snap = snap
        self.grid = grid
        self.constrain = constrain
        self.start = None

    @property
    def active(self):
        return self.start is not None

    def _snapped(self, p):
        return snap_to_grid(p, self.grid) if self.snap else p

    def _end_point(self, p):
        p = self._snapped(p)
        if self.constrain:
            p = constrain_angle(self.start, p)
        return p

    def click(self, p):
        """First click stores the start point and returns None; the second
        returns the finished Measurement and resets the session."""
        if self.start is None:
            self.start = self._snapped(p)
            return None
        m = Measurement(self.start, self._end_point(p))
        self.start = None
        return m

    def preview(self, p):
        """(end point, distance) for the rubber band, None when idle."""
        if self.start is None:
            return None
        end = self._end_point(p)
        return end, measure(self.start, end)[0]

    def cancel(self):
        self.start = None

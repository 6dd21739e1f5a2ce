"""
Frequency response curve data

A response curve is a fixed-length, ordered list of (frequency, magnitude) bins.
The frequencies are chosen by the display; the magnitudes come from the filter.
"""

from __future__ import annotations

import math
from dataclasses import dataclass
from typing import List


# Display range of the curve (dB)
DISPLAY_GAIN_DB = 20.0

# Axis grid: frequencies double on every grid step starting from the minimum
LOG_BASE = 2.0
DEFAULT_MIN_HZ = 12.0
MAX_RESPONSE_FREQUENCIES = 1024


@dataclass(frozen=True)
class FrequencyResponseBin:
    """One point of the response curve (linear magnitude)"""
    frequency_hz: float
    magnitude: float

    @property
    def magnitude_db(self) -> float:
        return magnitude_to_db(self.magnitude)


def log_spaced_frequencies(
    count: int,
    min_hz: float = DEFAULT_MIN_HZ,
    max_hz: float = 22050.0,
) -> List[float]:
    """
    Build the frequency list for a response curve.

    Points are spread evenly over the base-2 logarithmic axis from ``min_hz``
    to ``max_hz``; values past ``max_hz`` are clipped to it.

    Args:
        count: Number of points, at most MAX_RESPONSE_FREQUENCIES.
        min_hz: Left edge of the axis.
        max_hz: Right edge of the axis, usually half the sample rate.

    Returns:
        ``count`` ascending frequencies.
    """
    if count <= 0:
        return []
    count = min(count, MAX_RESPONSE_FREQUENCIES)
    if count == 1 or max_hz <= min_hz:
        return [float(min(min_hz, max_hz))] * count

    octaves = math.log(max_hz / min_hz, LOG_BASE)
    step = octaves / (count - 1)
    return [min(min_hz * LOG_BASE ** (i * step), max_hz) for i in range(count)]


def magnitude_to_db(
    magnitude: float,
    floor_db: float = -DISPLAY_GAIN_DB,
    ceiling_db: float = DISPLAY_GAIN_DB,
) -> float:
    """Convert a linear magnitude to dB, clamped to the display range."""
    if magnitude <= 0.0:
        return floor_db
    db = 20.0 * math.log10(magnitude)
    return max(floor_db, min(ceiling_db, db))

"""
Resonant Low-pass Filter Implementation

A second-order (biquad) low-pass with resonance control, one kernel per
audio channel.
"""

from __future__ import annotations

import cmath
import math
from dataclasses import dataclass
from typing import TYPE_CHECKING, MutableSequence, Optional, Sequence, Tuple

from core.dsp.parameters import MAX_RESONANCE_DB, MIN_CUTOFF_HZ, MIN_RESONANCE_DB

if TYPE_CHECKING:
    from core.ports.dsp import IFilterParameters


# Highest normalized cutoff (fraction of Nyquist) the filter is designed for
MAX_NORMALIZED_CUTOFF = 0.99

# Cache sentinel: no real parameter pair compares equal to it
_UNSET = -1.0


@dataclass(frozen=True)
class LowpassCoefficients:
    """
    Biquad coefficients.

    a0, a1, a2 are the feed-forward (zeros) terms, b1, b2 the feedback
    (poles) terms of

        y[n] = a0*x[n] + a1*x[n-1] + a2*x[n-2] - b1*y[n-1] - b2*y[n-2]
    """
    a0: float
    a1: float
    a2: float
    b1: float
    b2: float

    def poles(self) -> Tuple[complex, complex]:
        """Roots of z^2 + b1*z + b2."""
        root = cmath.sqrt(self.b1 * self.b1 - 4.0 * self.b2)
        return (-self.b1 + root) / 2.0, (-self.b1 - root) / 2.0

    def is_stable(self) -> bool:
        return all(abs(pole) < 1.0 for pole in self.poles())


# Used until the first coefficient calculation; the kernel outputs silence.
_SILENT = LowpassCoefficients(0.0, 0.0, 0.0, 0.0, 0.0)


def compute_lowpass_coefficients(normalized_freq: float, resonance_db: float) -> LowpassCoefficients:
    """
    Derive low-pass coefficients.

    No clamping is done here; callers pass a normalized frequency already
    clipped to MAX_NORMALIZED_CUTOFF.

    Args:
        normalized_freq: Cutoff as a fraction of Nyquist, in (0, 1].
        resonance_db: Resonance in dB.

    Returns:
        Coefficients with a1 == 2*a0 and a2 == a0.
    """
    r = 10.0 ** (-resonance_db / 20.0)  # dB -> linear

    k = 0.5 * r * math.sin(math.pi * normalized_freq)
    c1 = 0.5 * (1.0 - k) / (1.0 + k)
    c2 = (0.5 + c1) * math.cos(math.pi * normalized_freq)
    c3 = (0.5 + c1 - c2) * 0.25

    return LowpassCoefficients(
        a0=2.0 * c3,
        a1=4.0 * c3,
        a2=2.0 * c3,
        b1=-2.0 * c2,
        b2=2.0 * c1,
    )


def normalize_cutoff(cutoff_hz: float, sample_rate: float) -> float:
    """Cutoff in Hz -> fraction of Nyquist, clipped to MAX_NORMALIZED_CUTOFF."""
    normalized = 2.0 * cutoff_hz / sample_rate
    if normalized > MAX_NORMALIZED_CUTOFF:
        normalized = MAX_NORMALIZED_CUTOFF
    return normalized


def effective_parameters(cutoff_hz: float, resonance_db: float, sample_rate: float) -> Tuple[float, float]:
    """
    Clamp host values to the filter's range and normalize the cutoff.

    Returns:
        (normalized cutoff, resonance in dB)
    """
    if cutoff_hz < MIN_CUTOFF_HZ:
        cutoff_hz = MIN_CUTOFF_HZ
    if resonance_db < MIN_RESONANCE_DB:
        resonance_db = MIN_RESONANCE_DB
    elif resonance_db > MAX_RESONANCE_DB:
        resonance_db = MAX_RESONANCE_DB
    return normalize_cutoff(cutoff_hz, sample_rate), resonance_db


@dataclass
class FilterState:
    """Last two inputs and outputs of one channel"""
    x1: float = 0.0
    x2: float = 0.0
    y1: float = 0.0
    y2: float = 0.0

    def clear(self) -> None:
        self.x1 = self.x2 = self.y1 = self.y2 = 0.0


class LowpassFilterKernel:
    """
    Low-pass Filter Kernel - processes one channel

    Owns the channel's coefficients, history and cached parameter pair.
    Coefficients are recalculated only when the clamped, normalized
    parameters differ from the cached pair.

    Usage example:
        params = FilterParameters(cutoff_hz=800.0)
        kernel = LowpassFilterKernel(params)
        kernel.process(samples, samples, len(samples))
    """

    def __init__(self, parameters: IFilterParameters):
        """
        Args:
            parameters: Parameter source read at the start of every process() call
        """
        self._parameters = parameters
        self.coefficients: LowpassCoefficients = _SILENT
        self.state = FilterState()
        # Number of coefficient calculations so far
        self.coefficient_updates = 0
        self._last_cutoff = _UNSET
        self._last_resonance = _UNSET

    @property
    def sample_rate(self) -> float:
        return self._parameters.sample_rate

    def calculate_coefficients(self, normalized_freq: float, resonance_db: float) -> None:
        """Recalculate the coefficients for a normalized cutoff and resonance."""
        self.coefficients = compute_lowpass_coefficients(normalized_freq, resonance_db)
        self.coefficient_updates += 1

    def update_coefficients(
        self,
        cutoff_hz: float,
        resonance_db: float,
        sample_rate: Optional[float] = None,
    ) -> None:
        """
        Clamp and normalize host values, then recalculate unconditionally.

        Used by the response-curve path. The normalized pair is cached as if
        process() had computed it, so the cache always describes the
        coefficients in use.

        Args:
            cutoff_hz: Cutoff frequency (Hz), unclamped
            resonance_db: Resonance (dB), unclamped
            sample_rate: Defaults to the parameter store's current rate
        """
        if sample_rate is None:
            sample_rate = self.sample_rate
        cutoff, resonance = effective_parameters(cutoff_hz, resonance_db, sample_rate)
        self.calculate_coefficients(cutoff, resonance)
        self._last_cutoff = cutoff
        self._last_resonance = resonance

    def process(
        self,
        source: Sequence[float],
        dest: MutableSequence[float],
        frame_count: int,
        silence: bool = False,
    ) -> bool:
        """
        Filter one buffer of non-interleaved samples.

        Each position of ``dest`` is written after the matching ``source``
        sample has been read, so source and dest may be the same buffer.

        Args:
            source: Input samples.
            dest: Output samples.
            frame_count: Number of samples to process.
            silence: Host silence hint.

        Returns:
            The silence hint, unchanged.
        """
        if frame_count <= 0:
            return silence

        snap = self._parameters.snapshot()
        cutoff, resonance = effective_parameters(snap.cutoff_hz, snap.resonance_db, snap.sample_rate)

        if cutoff != self._last_cutoff or resonance != self._last_resonance:
            self.calculate_coefficients(cutoff, resonance)
            self._last_cutoff = cutoff
            self._last_resonance = resonance

        c = self.coefficients
        a0, a1, a2, b1, b2 = c.a0, c.a1, c.a2, c.b1, c.b2
        state = self.state
        x1, x2, y1, y2 = state.x1, state.x2, state.y1, state.y2

        for i in range(frame_count):
            x = source[i]
            y = a0 * x + a1 * x1 + a2 * x2 - b1 * y1 - b2 * y2
            x2 = x1
            x1 = x
            y2 = y1
            y1 = y
            dest[i] = y

        state.x1, state.x2, state.y1, state.y2 = x1, x2, y1, y2
        return silence

    def reset(self) -> None:
        """Reset filter state and force a coefficient recalculation."""
        self.state.clear()
        self._last_cutoff = _UNSET
        self._last_resonance = _UNSET

    def evaluate_magnitude(self, frequency_hz: float, sample_rate: Optional[float] = None) -> float:
        """
        Linear magnitude response at a frequency, from the current coefficients.

        ``sample_rate`` defaults to the parameter source's current rate.

        The denominator is non-zero for every coefficient set produced by
        compute_lowpass_coefficients over its valid input range.
        """
        if sample_rate is None:
            sample_rate = self._parameters.sample_rate
        scaled = 2.0 * frequency_hz / sample_rate

        # Point on the unit circle
        zr = math.cos(math.pi * scaled)
        zi = math.sin(math.pi * scaled)

        c = self.coefficients

        # Zeros
        num_r = c.a0 * (zr * zr - zi * zi) + c.a1 * zr + c.a2
        num_i = 2.0 * c.a0 * zr * zi + c.a1 * zi
        num_mag = math.sqrt(num_r * num_r + num_i * num_i)

        # Poles
        den_r = zr * zr - zi * zi + c.b1 * zr + c.b2
        den_i = 2.0 * zr * zi + c.b1 * zi
        den_mag = math.sqrt(den_r * den_r + den_i * den_i)

        return num_mag / den_mag

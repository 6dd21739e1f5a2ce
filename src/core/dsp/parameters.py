"""
Filter Parameter Store

Holds the cutoff / resonance / sample-rate values that the filter kernels
read once per processed buffer, plus the published parameter ranges.
"""

from __future__ import annotations

import threading
from dataclasses import dataclass
from enum import IntEnum
from typing import Union

from models.filter_errors import InvalidParameterError


MIN_CUTOFF_HZ = 12.0
DEFAULT_CUTOFF_HZ = 1000.0
MIN_RESONANCE_DB = -20.0
MAX_RESONANCE_DB = 20.0
DEFAULT_RESONANCE_DB = 0.0
DEFAULT_SAMPLE_RATE = 44100.0


class ParameterId(IntEnum):
    """Host parameter identifiers"""
    CUTOFF_FREQUENCY = 0
    RESONANCE = 1


@dataclass(frozen=True)
class ParameterSnapshot:
    """Values in effect for one processing call"""
    cutoff_hz: float
    resonance_db: float
    sample_rate: float


@dataclass(frozen=True)
class ParameterInfo:
    """
    Published description of a parameter.

    Attributes:
        name: Display name.
        unit: "Hz" or "dB".
        min_value / max_value / default_value: Range and default.
        high_resolution: Host should offer fine-grained control.
        logarithmic: Host should display the control on a log scale.
    """
    name: str
    unit: str
    min_value: float
    max_value: float
    default_value: float
    high_resolution: bool = True
    logarithmic: bool = False


def parameter_info(param_id: Union[ParameterId, int], sample_rate: float) -> ParameterInfo:
    """
    Describe a parameter.

    The cutoff maximum depends on the sample rate (half of it).

    Raises:
        InvalidParameterError: Unknown parameter id.
    """
    param = _resolve(param_id)
    if param is ParameterId.CUTOFF_FREQUENCY:
        return ParameterInfo(
            name="cutoff frequency",
            unit="Hz",
            min_value=MIN_CUTOFF_HZ,
            max_value=sample_rate * 0.5,
            default_value=DEFAULT_CUTOFF_HZ,
            logarithmic=True,
        )
    return ParameterInfo(
        name="resonance",
        unit="dB",
        min_value=MIN_RESONANCE_DB,
        max_value=MAX_RESONANCE_DB,
        default_value=DEFAULT_RESONANCE_DB,
    )


def _resolve(param_id: Union[ParameterId, int]) -> ParameterId:
    try:
        return ParameterId(param_id)
    except ValueError:
        raise InvalidParameterError(param_id) from None


class FilterParameters:
    """
    Parameter store shared by all channel kernels.

    Written by the host (UI, automation, presets); read by the kernels via
    snapshot(). Values are stored as given; range clamping is the kernel's job.

    Usage example:
        params = FilterParameters(sample_rate=48000)
        params.set(ParameterId.CUTOFF_FREQUENCY, 800.0)
        snap = params.snapshot()
    """

    def __init__(
        self,
        cutoff_hz: float = DEFAULT_CUTOFF_HZ,
        resonance_db: float = DEFAULT_RESONANCE_DB,
        sample_rate: float = DEFAULT_SAMPLE_RATE,
    ):
        if sample_rate <= 0:
            raise ValueError(f"sample_rate must be positive, got {sample_rate}")
        self._cutoff_hz = float(cutoff_hz)
        self._resonance_db = float(resonance_db)
        self._sample_rate = float(sample_rate)
        self._lock = threading.Lock()

    @property
    def cutoff_hz(self) -> float:
        return self._cutoff_hz

    @cutoff_hz.setter
    def cutoff_hz(self, value: float) -> None:
        with self._lock:
            self._cutoff_hz = float(value)

    @property
    def resonance_db(self) -> float:
        return self._resonance_db

    @resonance_db.setter
    def resonance_db(self, value: float) -> None:
        with self._lock:
            self._resonance_db = float(value)

    @property
    def sample_rate(self) -> float:
        return self._sample_rate

    @sample_rate.setter
    def sample_rate(self, value: float) -> None:
        if value <= 0:
            raise ValueError(f"sample_rate must be positive, got {value}")
        with self._lock:
            self._sample_rate = float(value)

    def get(self, param_id: Union[ParameterId, int]) -> float:
        """Read a parameter by id."""
        if _resolve(param_id) is ParameterId.CUTOFF_FREQUENCY:
            return self._cutoff_hz
        return self._resonance_db

    def set(self, param_id: Union[ParameterId, int], value: float) -> None:
        """Write a parameter by id."""
        if _resolve(param_id) is ParameterId.CUTOFF_FREQUENCY:
            self.cutoff_hz = value
        else:
            self.resonance_db = value

    def update(self, cutoff_hz: float, resonance_db: float) -> None:
        """Set cutoff and resonance together (presets)."""
        with self._lock:
            self._cutoff_hz = float(cutoff_hz)
            self._resonance_db = float(resonance_db)

    def snapshot(self) -> ParameterSnapshot:
        """Consistent copy of all three values."""
        with self._lock:
            return ParameterSnapshot(self._cutoff_hz, self._resonance_db, self._sample_rate)

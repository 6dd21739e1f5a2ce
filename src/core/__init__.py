"""
Resonant Low-pass Core Module
"""

from .event_bus import EventBus, EventType
from .dsp import (
    FilterParameters,
    LowpassCoefficients,
    LowpassFilterKernel,
    LowpassFilterProcessor,
    ParameterId,
    compute_lowpass_coefficients,
)
from .ports import IFilterKernel, IFilterParameters

__all__ = [
    'EventBus',
    'EventType',
    'FilterParameters',
    'LowpassCoefficients',
    'LowpassFilterKernel',
    'LowpassFilterProcessor',
    'ParameterId',
    'compute_lowpass_coefficients',
    'IFilterKernel',
    'IFilterParameters',
]

"""
DSP (Digital Signal Processing) Module

Provides the resonant low-pass filter:
- LowpassFilterKernel: per-channel biquad kernel
- LowpassFilterProcessor: kernels indexed by channel
- FilterParameters: parameter store read by the kernels
"""

from core.dsp.lowpass_filter import (
    MAX_NORMALIZED_CUTOFF,
    FilterState,
    LowpassCoefficients,
    LowpassFilterKernel,
    compute_lowpass_coefficients,
    effective_parameters,
    normalize_cutoff,
)
from core.dsp.filter_processor import LowpassFilterProcessor
from core.dsp.parameters import (
    FilterParameters,
    ParameterId,
    ParameterInfo,
    ParameterSnapshot,
    parameter_info,
)

__all__ = [
    "MAX_NORMALIZED_CUTOFF",
    "FilterState",
    "LowpassCoefficients",
    "LowpassFilterKernel",
    "compute_lowpass_coefficients",
    "effective_parameters",
    "normalize_cutoff",
    "LowpassFilterProcessor",
    "FilterParameters",
    "ParameterId",
    "ParameterInfo",
    "ParameterSnapshot",
    "parameter_info",
]

"""
Data Models Module
"""

from .filter_errors import (
    FilterEffectError,
    FilterNotInitializedError,
    InvalidParameterError,
    InvalidPresetError,
)
from .filter_preset import FILTER_PRESETS, FilterPreset, FilterPresetValues, find_preset
from .frequency_response import FrequencyResponseBin, log_spaced_frequencies, magnitude_to_db

__all__ = [
    'FilterEffectError',
    'FilterNotInitializedError',
    'InvalidParameterError',
    'InvalidPresetError',
    'FILTER_PRESETS',
    'FilterPreset',
    'FilterPresetValues',
    'find_preset',
    'FrequencyResponseBin',
    'log_spaced_frequencies',
    'magnitude_to_db',
]

"""
Filter Preset Module

Factory presets for the resonant low-pass filter.
"""

from dataclasses import dataclass
from typing import Dict, List, Union
from enum import Enum

from models.filter_errors import InvalidPresetError


class FilterPreset(Enum):
    """Factory preset number"""
    PRESET_ONE = 0
    PRESET_TWO = 1


@dataclass(frozen=True)
class FilterPresetValues:
    """
    Parameter values stored by a factory preset.

    Attributes:
        name: Display name.
        cutoff_hz: Cutoff frequency (Hz).
        resonance_db: Resonance (dB), range -20 to +20.
    """
    name: str
    cutoff_hz: float
    resonance_db: float


# Read-only after import; shared freely between threads.
FILTER_PRESETS: Dict[FilterPreset, FilterPresetValues] = {
    # Low cutoff, damped peak
    FilterPreset.PRESET_ONE: FilterPresetValues("Preset One", 200.0, -5.0),

    # Mid cutoff, pronounced resonance
    FilterPreset.PRESET_TWO: FilterPresetValues("Preset Two", 1000.0, 10.0),
}


def list_presets() -> List[FilterPreset]:
    """Presets in preset-number order."""
    return sorted(FILTER_PRESETS, key=lambda preset: preset.value)


def get_preset_values(preset: FilterPreset) -> FilterPresetValues:
    """
    Get the parameter values for a preset.

    Args:
        preset: Preset type.

    Returns:
        The preset's stored values.
    """
    return FILTER_PRESETS[preset]


def find_preset(key: Union[FilterPreset, int, str]) -> FilterPreset:
    """
    Resolve a preset from its enum member, number or name.

    Names are matched case-insensitively against both the display name
    ("Preset One") and the enum name ("preset_one").

    Raises:
        InvalidPresetError: No preset matches.
    """
    if isinstance(key, FilterPreset):
        return key

    if isinstance(key, int) and not isinstance(key, bool):
        try:
            return FilterPreset(key)
        except ValueError:
            raise InvalidPresetError(key) from None

    if isinstance(key, str):
        wanted = key.strip().lower().replace("_", " ")
        for preset, values in FILTER_PRESETS.items():
            if wanted in (values.name.lower(), preset.name.lower().replace("_", " ")):
                return preset
        if wanted.isdigit():
            return find_preset(int(wanted))

    raise InvalidPresetError(key)

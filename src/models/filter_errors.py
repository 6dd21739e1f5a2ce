"""
Filter effect error types

Raised by the host-facing layer only; the DSP kernels clamp instead of raising.
"""

from __future__ import annotations


class FilterEffectError(RuntimeError):
    """Base error for filter effect operations"""
    pass


class FilterNotInitializedError(FilterEffectError):
    """The effect has no kernels yet (initialize() has not been called)"""
    pass


class InvalidParameterError(FilterEffectError):
    """Unknown parameter identifier"""

    def __init__(self, param_id: object):
        self.param_id = param_id
        super().__init__(f"Invalid parameter id: {param_id!r}")


class InvalidPresetError(FilterEffectError):
    """Unknown factory preset number or name"""

    def __init__(self, preset: object):
        self.preset = preset
        super().__init__(f"Invalid preset: {preset!r}")

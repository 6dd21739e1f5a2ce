# -*- coding: utf-8 -*-
"""
DSP Port Interface

Defines the capabilities a per-channel filter kernel and its parameter
source must offer, so the host layer composes kernels by channel index
instead of depending on a concrete filter class.
"""

from __future__ import annotations

from typing import MutableSequence, Protocol, Sequence, runtime_checkable

from core.dsp.parameters import ParameterSnapshot


@runtime_checkable
class IFilterParameters(Protocol):
    """Filter Parameter Source Interface

    Kernels read it once per buffer; the processor also writes the sample
    rate when the host changes it. Current implementation: FilterParameters
    """

    sample_rate: float

    def snapshot(self) -> ParameterSnapshot:
        """Get the cutoff, resonance and sample rate in effect right now"""
        ...


@runtime_checkable
class IFilterKernel(Protocol):
    """Filter Kernel Interface

    Processes one channel of non-interleaved samples and owns that
    channel's filter state. Current implementation: LowpassFilterKernel
    """

    def process(
        self,
        source: Sequence[float],
        dest: MutableSequence[float],
        frame_count: int,
        silence: bool = False,
    ) -> bool:
        """Filter ``frame_count`` samples from source into dest

        Args:
            source: Input samples
            dest: Output samples, may be the same object as source
            frame_count: Number of samples to process
            silence: Silence hint from the host

        Returns:
            The silence hint for the output
        """
        ...

    def reset(self) -> None:
        """Clear the filter history after a processing discontinuity"""
        ...

"""
Multi-channel Low-pass Processor

Keeps one LowpassFilterKernel per channel, indexed by channel number.
"""

from __future__ import annotations

import array
import logging
from typing import TYPE_CHECKING, Iterable, List, MutableSequence, Optional, Sequence

from core.dsp.lowpass_filter import LowpassFilterKernel
from models.frequency_response import FrequencyResponseBin

if TYPE_CHECKING:
    from core.ports.dsp import IFilterParameters

logger = logging.getLogger(__name__)


class LowpassFilterProcessor:
    """
    Low-pass Processor - one kernel per channel

    Kernels share the parameter store but never share state. Changing the
    channel count replaces the whole kernel list.
    """

    def __init__(self, parameters: IFilterParameters, channels: int = 2):
        self.parameters = parameters
        self.kernels: List[LowpassFilterKernel] = []
        self._init_kernels(channels)

    def _init_kernels(self, channels: int) -> None:
        """Create a fresh kernel for every channel."""
        if channels < 1:
            raise ValueError(f"channel count must be at least 1, got {channels}")
        self.kernels = [LowpassFilterKernel(self.parameters) for _ in range(channels)]

    @property
    def channels(self) -> int:
        return len(self.kernels)

    def set_channel_count(self, channels: int) -> None:
        """Reallocate the kernels for a new channel count."""
        if channels != self.channels:
            logger.debug("Channel count %d -> %d, reallocating kernels", self.channels, channels)
            self._init_kernels(channels)

    def set_sample_rate(self, sample_rate: float) -> None:
        """Update sample rate."""
        if self.parameters.sample_rate != sample_rate:
            self.parameters.sample_rate = sample_rate
            # History from the old rate is meaningless at the new one
            self.reset()

    def kernel(self, channel: int) -> LowpassFilterKernel:
        return self.kernels[channel]

    def process_channel(
        self,
        channel: int,
        source: Sequence[float],
        dest: Optional[MutableSequence[float]] = None,
        frame_count: Optional[int] = None,
        silence: bool = False,
    ) -> bool:
        """
        Filter one channel's buffer.

        Args:
            channel: Channel index.
            source: Input samples.
            dest: Output samples, defaults to ``source`` (in place).
            frame_count: Defaults to len(source).
            silence: Host silence hint.
        """
        if dest is None:
            dest = source  # type: ignore[assignment]
        if frame_count is None:
            frame_count = len(source)
        return self.kernels[channel].process(source, dest, frame_count, silence)

    def process(self, channel_buffers: Sequence[MutableSequence[float]]) -> None:
        """
        Filter non-interleaved buffers in place, one buffer per channel.

        Raises:
            ValueError: Buffer count does not match the channel count.
        """
        if len(channel_buffers) != self.channels:
            raise ValueError(
                f"expected {self.channels} channel buffers, got {len(channel_buffers)}"
            )
        for kernel, buffer in zip(self.kernels, channel_buffers):
            kernel.process(buffer, buffer, len(buffer))

    def process_interleaved(self, samples: array.array) -> array.array:
        """
        Process interleaved audio data.

        Args:
            samples: Interleaved float samples [c0, c1, ..., c0, c1, ...].

        Returns:
            Filtered samples in the same layout.
        """
        channels = self.channels
        result = array.array('f', samples)
        frames = len(result) // channels
        if frames == 0:
            return result

        usable = frames * channels
        for ch, kernel in enumerate(self.kernels):
            buffer = result[ch:usable:channels]
            kernel.process(buffer, buffer, frames)
            result[ch:usable:channels] = buffer

        return result

    def reset(self) -> None:
        """Reset all kernel states."""
        for kernel in self.kernels:
            kernel.reset()

    def frequency_response(self, frequencies: Iterable[float]) -> List[FrequencyResponseBin]:
        """
        Evaluate the response curve at the given frequencies.

        Every channel has the same curve, so channel 0's kernel is used after
        loading it with the coefficients for the parameters in effect.
        """
        kernel = self.kernels[0]
        snap = self.parameters.snapshot()
        kernel.update_coefficients(snap.cutoff_hz, snap.resonance_db, snap.sample_rate)

        return [
            FrequencyResponseBin(float(frequency), kernel.evaluate_magnitude(frequency, snap.sample_rate))
            for frequency in frequencies
        ]

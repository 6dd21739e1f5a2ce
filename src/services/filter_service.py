"""
Filter Effect Service Module

Host-facing wrapper around the low-pass kernels: lifecycle, parameters,
factory presets, response curve and offline rendering.
"""

from __future__ import annotations

import array
import logging
import threading
from typing import Iterable, List, MutableSequence, Optional, Sequence, Union

from core.dsp import (
    FilterParameters,
    LowpassFilterProcessor,
    ParameterId,
    ParameterInfo,
    parameter_info,
)
from core.event_bus import EventBus, EventType
from models.filter_errors import FilterNotInitializedError
from models.filter_preset import (
    FilterPreset,
    FilterPresetValues,
    find_preset,
    get_preset_values,
    list_presets,
)
from models.frequency_response import FrequencyResponseBin, log_spaced_frequencies
from services.config_service import ConfigService

logger = logging.getLogger(__name__)


class FilterEffectService:
    """
    Filter Effect Service

    Owns the parameter store and, while initialized, one kernel per channel.

    Example:
        effect = FilterEffectService()
        effect.initialize(sample_rate=48000, channels=2)

        effect.apply_preset("Preset Two")
        effect.process([left, right])

        curve = effect.get_frequency_response([100.0, 1000.0, 10000.0])
    """

    # Reported to hosts: 1 ms tail, no latency
    TAIL_TIME_SECONDS = 0.001
    LATENCY_SECONDS = 0.0

    def __init__(
        self,
        config: Optional[ConfigService] = None,
        event_bus: Optional[EventBus] = None,
    ):
        self._config = config or ConfigService()
        self._event_bus = event_bus or EventBus()
        self._lock = threading.RLock()

        self._parameters = FilterParameters(
            cutoff_hz=self._config.get_float("filter.cutoff_hz"),
            resonance_db=self._config.get_float("filter.resonance_db"),
            sample_rate=self._config.get_float("audio.sample_rate"),
        )
        self._processor: Optional[LowpassFilterProcessor] = None
        self._current_preset: Optional[FilterPreset] = None

        preset_name = self._config.get("filter.preset")
        if preset_name is not None:
            self.apply_preset(preset_name)

    # ===== Lifecycle =====

    @property
    def is_initialized(self) -> bool:
        return self._processor is not None

    @property
    def parameters(self) -> FilterParameters:
        return self._parameters

    @property
    def sample_rate(self) -> float:
        return self._parameters.sample_rate

    @property
    def channels(self) -> int:
        """Channel count, 0 while uninitialized"""
        processor = self._processor
        return processor.channels if processor else 0

    @property
    def supports_tail(self) -> bool:
        return True

    @property
    def tail_time(self) -> float:
        return self.TAIL_TIME_SECONDS

    @property
    def latency(self) -> float:
        return self.LATENCY_SECONDS

    def initialize(self, sample_rate: Optional[float] = None, channels: Optional[int] = None) -> None:
        """
        Create the per-channel kernels.

        Calling again with a different channel count reallocates them; a
        different sample rate resets their history.

        Args:
            sample_rate: Defaults to audio.sample_rate from config
            channels: Defaults to audio.channels from config
        """
        if sample_rate is None:
            sample_rate = self._config.get_float("audio.sample_rate")
        if channels is None:
            channels = self._config.get_int("audio.channels")

        with self._lock:
            if self._processor is None:
                self._parameters.sample_rate = sample_rate
                self._processor = LowpassFilterProcessor(self._parameters, channels)
            else:
                self._processor.set_channel_count(channels)
                self._processor.set_sample_rate(sample_rate)

        logger.info("Filter effect initialized: %d channel(s) at %g Hz", channels, sample_rate)
        self._event_bus.publish(EventType.EFFECT_INITIALIZED, {
            "sample_rate": sample_rate,
            "channels": channels,
        })
        # The view may have missed parameter changes while uninitialized
        self._notify_response_changed()

    def uninitialize(self) -> None:
        """Discard the kernels."""
        with self._lock:
            if self._processor is None:
                return
            self._processor = None
        logger.info("Filter effect uninitialized")
        self._event_bus.publish(EventType.EFFECT_UNINITIALIZED)

    def _require_processor(self) -> LowpassFilterProcessor:
        processor = self._processor
        if processor is None:
            raise FilterNotInitializedError("Filter effect is not initialized")
        return processor

    # ===== Parameters =====

    def get_parameter(self, param_id: Union[ParameterId, int]) -> float:
        """
        Get a parameter value.

        Raises:
            InvalidParameterError: Unknown parameter id
        """
        return self._parameters.get(param_id)

    def set_parameter(self, param_id: Union[ParameterId, int], value: float) -> None:
        """
        Set a parameter value.

        The value is stored as given; the kernels clamp it to the filter's
        range when they read it.

        Raises:
            InvalidParameterError: Unknown parameter id
        """
        self._parameters.set(param_id, value)
        self._event_bus.publish(EventType.PARAMETER_CHANGED, {
            "parameter": ParameterId(param_id),
            "value": float(value),
        })
        self._notify_response_changed()

    def get_parameter_info(self, param_id: Union[ParameterId, int]) -> ParameterInfo:
        """
        Describe a parameter's range for the current sample rate.

        Raises:
            InvalidParameterError: Unknown parameter id
        """
        return parameter_info(param_id, self._parameters.sample_rate)

    # ===== Presets =====

    @property
    def current_preset(self) -> Optional[FilterPreset]:
        return self._current_preset

    def presets(self) -> List[FilterPresetValues]:
        """Factory presets in preset-number order."""
        return [get_preset_values(preset) for preset in list_presets()]

    def apply_preset(self, preset: Union[FilterPreset, int, str]) -> FilterPreset:
        """
        Load a factory preset's parameter values.

        Raises:
            InvalidPresetError: Unknown preset
        """
        chosen = find_preset(preset)
        values = get_preset_values(chosen)

        self._parameters.update(values.cutoff_hz, values.resonance_db)
        self._current_preset = chosen

        logger.info("Preset applied: %s", values.name)
        self._event_bus.publish(EventType.PRESET_CHANGED, {
            "preset": chosen,
            "name": values.name,
        })
        self._notify_response_changed()
        return chosen

    # ===== Processing =====

    def process(self, channel_buffers: Sequence[MutableSequence[float]]) -> None:
        """
        Filter non-interleaved buffers in place (one per channel).

        Raises:
            FilterNotInitializedError: initialize() has not been called
        """
        self._require_processor().process(channel_buffers)

    def process_interleaved(self, samples: array.array) -> array.array:
        """
        Filter interleaved samples.

        Raises:
            FilterNotInitializedError: initialize() has not been called
        """
        return self._require_processor().process_interleaved(samples)

    def reset(self) -> None:
        """Clear every channel's history (transport stop/start, seek)."""
        processor = self._processor
        if processor is None:
            return
        processor.reset()
        self._event_bus.publish(EventType.EFFECT_RESET)

    # ===== Response curve =====

    def get_frequency_response(self, frequencies: Iterable[float]) -> List[FrequencyResponseBin]:
        """
        Evaluate the magnitude response for the parameters in effect.

        Args:
            frequencies: Frequencies (Hz) chosen by the display

        Returns:
            One bin per frequency, in the given order

        Raises:
            FilterNotInitializedError: No kernels to evaluate
        """
        return self._require_processor().frequency_response(frequencies)

    def default_response_frequencies(self) -> List[float]:
        """Log-spaced display frequencies from config, up to Nyquist."""
        return log_spaced_frequencies(
            self._config.get_int("response.frequency_count"),
            self._config.get_float("response.min_hz"),
            self._parameters.sample_rate * 0.5,
        )

    def _notify_response_changed(self) -> None:
        if self._processor is not None:
            self._event_bus.publish(EventType.FREQUENCY_RESPONSE_CHANGED)

    # ===== Offline rendering =====

    def render_file(self, input_path: str, output_path: str, block_size: Optional[int] = None) -> int:
        """
        Filter an audio file and write the result as a float WAV file.

        Args:
            input_path: Source file (mp3, flac, wav, ogg)
            output_path: Destination WAV path
            block_size: Frames per processing call, defaults to audio.block_size

        Returns:
            Number of frames written

        Raises:
            UnsupportedFormatError: The source cannot be decoded
        """
        from core.audio_file import AudioFileCodec, DecodedAudio, UnsupportedFormatError

        if block_size is None:
            block_size = self._config.get_int("audio.block_size")
        if block_size < 1:
            raise ValueError(f"block_size must be at least 1, got {block_size}")

        codec = AudioFileCodec(
            sample_rate=self._config.get_int("audio.sample_rate"),
            channels=self._config.get_int("audio.channels"),
        )
        try:
            audio = codec.decode(input_path)
        except UnsupportedFormatError as e:
            logger.warning("Cannot render %s: %s", input_path, e)
            self._event_bus.publish(EventType.ERROR_OCCURRED, {
                "input": input_path,
                "error": str(e),
            })
            raise

        self.initialize(sample_rate=audio.sample_rate, channels=audio.channels)
        self.reset()
        logger.info("Rendering %s -> %s (%d frames)", input_path, output_path, audio.frames)

        rendered = self.render_samples(audio.samples, block_size)
        codec.write_wav(output_path, DecodedAudio(rendered, audio.channels, audio.sample_rate))

        self._event_bus.publish(EventType.RENDER_COMPLETED, {
            "input": input_path,
            "output": output_path,
            "frames": audio.frames,
        })
        return audio.frames

    def render_samples(self, samples: array.array, block_size: int = 512) -> array.array:
        """
        Filter interleaved samples in blocks of ``block_size`` frames.

        Block boundaries do not change the result; the kernels carry their
        history from one block to the next.
        """
        processor = self._require_processor()
        step = block_size * processor.channels
        output = array.array('f')
        for start in range(0, len(samples), step):
            output.extend(processor.process_interleaved(samples[start:start + step]))
        return output

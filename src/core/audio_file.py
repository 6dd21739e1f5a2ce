"""
Audio File Module

Decodes audio files to interleaved float32 samples and writes float WAV
files, both through miniaudio.
"""

import array
import logging
import os
from dataclasses import dataclass

import miniaudio

logger = logging.getLogger(__name__)

NATIVE_FORMATS = {'.mp3', '.flac', '.wav', '.ogg'}


class UnsupportedFormatError(Exception):
    """
    Unsupported audio format exception

    Raised when miniaudio cannot decode a file.
    """

    def __init__(self, file_path: str, format_ext: str, reason: str = ""):
        self.file_path = file_path
        self.format_ext = format_ext
        self.reason = reason
        super().__init__(
            f"Unsupported format {format_ext}: {file_path}" +
            (f" ({reason})" if reason else "")
        )


@dataclass
class DecodedAudio:
    """Interleaved float32 samples with their layout"""
    samples: array.array
    channels: int
    sample_rate: int

    @property
    def frames(self) -> int:
        return len(self.samples) // self.channels if self.channels else 0

    @property
    def duration_seconds(self) -> float:
        return self.frames / self.sample_rate if self.sample_rate else 0.0


class AudioFileCodec:
    """
    Audio File Codec

    Decodes to a fixed sample rate and channel count so the filter can be
    configured once per file.
    """

    def __init__(self, sample_rate: int = 44100, channels: int = 2):
        """
        Args:
            sample_rate: Target sample rate
            channels: Target channel count
        """
        self._sample_rate = sample_rate
        self._channels = channels

    def decode(self, file_path: str) -> DecodedAudio:
        """
        Decode an audio file

        First try decode_file, then in-memory decoding on failure.

        Raises:
            UnsupportedFormatError: The file cannot be decoded
        """
        ext = os.path.splitext(file_path)[1].lower()
        if ext not in NATIVE_FORMATS:
            raise UnsupportedFormatError(file_path, ext, "not a miniaudio native format")

        try:
            decoded = miniaudio.decode_file(
                file_path,
                output_format=miniaudio.SampleFormat.FLOAT32,
                nchannels=self._channels,
                sample_rate=self._sample_rate,
            )
        except miniaudio.MiniaudioError as e:
            logger.debug("miniaudio decode_file failed, retrying in-memory: %s", e)
            try:
                with open(file_path, "rb") as audio_file:
                    data = audio_file.read()
                decoded = miniaudio.decode(
                    data,
                    output_format=miniaudio.SampleFormat.FLOAT32,
                    nchannels=self._channels,
                    sample_rate=self._sample_rate,
                )
            except (OSError, miniaudio.MiniaudioError) as retry_error:
                raise UnsupportedFormatError(file_path, ext, str(retry_error)) from retry_error

        logger.debug(
            "Decoded %s: %d ch, %d Hz, %.2fs",
            file_path, decoded.nchannels, decoded.sample_rate, decoded.duration,
        )
        return DecodedAudio(
            samples=array.array('f', decoded.samples),
            channels=decoded.nchannels,
            sample_rate=decoded.sample_rate,
        )

    @staticmethod
    def write_wav(file_path: str, audio: DecodedAudio) -> None:
        """Write interleaved float32 samples as an IEEE-float WAV file."""
        sound = miniaudio.DecodedSoundFile(
            os.path.basename(file_path),
            audio.channels,
            audio.sample_rate,
            miniaudio.SampleFormat.FLOAT32,
            audio.samples,
        )
        # Without a sub-format the header says integer PCM
        sound.sub_format = miniaudio.lib.MA_DR_WAVE_FORMAT_IEEE_FLOAT
        miniaudio.wav_write_file(file_path, sound)
        logger.debug("Wrote %s (%d frames)", file_path, audio.frames)

    def get_native_formats(self) -> set:
        """Get natively supported formats"""
        return NATIVE_FORMATS.copy()

    def is_format_native(self, file_path: str) -> bool:
        """Check if format is natively supported"""
        ext = os.path.splitext(file_path)[1].lower()
        return ext in NATIVE_FORMATS

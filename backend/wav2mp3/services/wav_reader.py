from __future__ import annotations

import wave
from dataclasses import dataclass
from typing import BinaryIO, Iterator


SUPPORTED_BIT_DEPTHS = (8, 16, 24, 32)
DEFAULT_CHUNK_FRAMES = 16384


class WavDecodeError(ValueError):
    pass


def is_wav_header(head: bytes) -> bool:
    """Check for the RIFF/WAVE magic tags at the start of a file."""
    return len(head) >= 12 and head[0:4] == b"RIFF" and head[8:12] == b"WAVE"


@dataclass(frozen=True)
class WavFormat:
    sample_rate: int
    channels: int
    bit_depth: int
    frame_count: int = 0

    @property
    def sample_width(self) -> int:
        return self.bit_depth // 8

    @property
    def block_align(self) -> int:
        return self.sample_width * self.channels

    @property
    def duration_s(self) -> float:
        if self.sample_rate <= 0:
            return 0.0
        return self.frame_count / float(self.sample_rate)


class WavReader:
    """PCM frames and format of a WAV container opened over a binary stream.

    The underlying stream is left open; only the decoder state is released
    on close.
    """

    def __init__(self, stream: BinaryIO) -> None:
        try:
            self._wav = wave.open(stream, "rb")
        except (wave.Error, EOFError) as e:
            raise WavDecodeError(f"Not a readable WAV container: {e}") from e

        try:
            self.format = self._read_format()
        except WavDecodeError:
            self._wav.close()
            raise

    def _read_format(self) -> WavFormat:
        channels = self._wav.getnchannels()
        sample_width = self._wav.getsampwidth()
        sample_rate = self._wav.getframerate()
        if channels < 1:
            raise WavDecodeError(f"Invalid channel count: {channels}")
        if sample_rate < 1:
            raise WavDecodeError(f"Invalid sample rate: {sample_rate}")
        bit_depth = sample_width * 8
        if bit_depth not in SUPPORTED_BIT_DEPTHS:
            raise WavDecodeError(f"Unsupported bit depth: {bit_depth}")
        return WavFormat(
            sample_rate=int(sample_rate),
            channels=int(channels),
            bit_depth=bit_depth,
            frame_count=int(self._wav.getnframes()),
        )

    def iter_frames(self, chunk_frames: int = DEFAULT_CHUNK_FRAMES) -> Iterator[bytes]:
        chunk_frames = max(1, int(chunk_frames))
        block_align = self.format.block_align
        while True:
            try:
                data = self._wav.readframes(chunk_frames)
            except (wave.Error, EOFError) as e:
                raise WavDecodeError(f"Failed to read PCM frames: {e}") from e
            if not data:
                break
            # A truncated data chunk can end mid-frame.
            usable = len(data) - (len(data) % block_align)
            if usable:
                yield data[:usable]
            if usable < len(data):
                break

    def close(self) -> None:
        self._wav.close()

    def __enter__(self) -> WavReader:
        return self

    def __exit__(self, *exc) -> None:
        self.close()


def open_wav(stream: BinaryIO) -> WavReader:
    return WavReader(stream)

from __future__ import annotations

import logging
import os
import shutil
import subprocess
import tempfile
from typing import BinaryIO

import imageio_ffmpeg

from .wav_reader import WavFormat


logger = logging.getLogger(__name__)

# Raw PCM sample formats FFmpeg reads for each WAV bit depth. 8-bit WAV is unsigned.
_PCM_FORMATS = {
    8: "u8",
    16: "s16le",
    24: "s24le",
    32: "s32le",
}


class Mp3EncodeError(RuntimeError):
    pass


def _pcm_format(fmt: WavFormat) -> str:
    try:
        return _PCM_FORMATS[fmt.bit_depth]
    except KeyError:
        raise Mp3EncodeError(f"No raw PCM format for bit depth {fmt.bit_depth}.") from None


class Mp3Writer:
    """LAME VBR encoder handle writing an MP3 bitstream to ``sink``.

    PCM bytes passed to :meth:`write` are staged in a private temporary
    directory. Closing the writer runs libmp3lame over them and copies the
    result into ``sink``. Leaving a ``with`` block on an exception discards
    the staged audio without encoding.
    """

    def __init__(self, sink: BinaryIO, fmt: WavFormat, vbr_quality: int = 1) -> None:
        vbr_quality = int(vbr_quality)
        if vbr_quality < 0 or vbr_quality > 9:
            raise ValueError("vbr_quality must be within 0..9.")

        self._sink = sink
        self._format = fmt
        self._quality = vbr_quality
        self._pcm_format = _pcm_format(fmt)
        self._tmp = tempfile.TemporaryDirectory(prefix="wav2mp3-")
        self._in_path = os.path.join(self._tmp.name, "in.pcm")
        self._out_path = os.path.join(self._tmp.name, "out.mp3")
        self._pcm = open(self._in_path, "wb")
        self._closed = False

    def write(self, data: bytes) -> int:
        if self._closed:
            raise ValueError("write to closed Mp3Writer")
        return self._pcm.write(data)

    def _command(self) -> list[str]:
        return [
            imageio_ffmpeg.get_ffmpeg_exe(),
            "-y",
            "-hide_banner",
            "-loglevel",
            "error",
            "-f",
            self._pcm_format,
            "-ar",
            str(self._format.sample_rate),
            "-ac",
            str(self._format.channels),
            "-i",
            self._in_path,
            "-vn",
            "-codec:a",
            "libmp3lame",
            "-q:a",
            str(self._quality),
            self._out_path,
        ]

    def _encode(self) -> None:
        cmd = self._command()
        logger.debug("Encoding MP3: %s", " ".join(cmd))
        try:
            subprocess.run(cmd, check=True, capture_output=True)
        except subprocess.CalledProcessError as e:
            stderr = (e.stderr or b"").decode("utf-8", errors="replace").strip()
            raise Mp3EncodeError(f"libmp3lame failed (exit {e.returncode}): {stderr}") from e
        except OSError as e:
            raise Mp3EncodeError(f"Could not run ffmpeg: {e}") from e

        with open(self._out_path, "rb") as f:
            shutil.copyfileobj(f, self._sink)
        logger.debug(
            "Encoded %.2fs of PCM into %d MP3 bytes",
            self._format.duration_s,
            os.path.getsize(self._out_path),
        )

    def close(self, discard: bool = False) -> None:
        if self._closed:
            return
        self._closed = True
        try:
            self._pcm.close()
            if not discard:
                self._encode()
        finally:
            self._tmp.cleanup()

    def __enter__(self) -> Mp3Writer:
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        self.close(discard=exc_type is not None)

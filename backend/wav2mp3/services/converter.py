from __future__ import annotations

import io
import ntpath
import os
from typing import BinaryIO

from ..core.config import settings
from .audio_encode import Mp3Writer
from .wav_reader import DEFAULT_CHUNK_FRAMES, open_wav


def mp3_filename(filename: str) -> str:
    # Browsers on Windows may send a full client path.
    base = ntpath.basename(os.path.basename(filename or "")) or "audio.wav"
    stem, _ext = os.path.splitext(base)
    return f"{stem}.mp3"


def convert_wav_to_mp3(
    stream: BinaryIO,
    *,
    vbr_quality: int | None = None,
    chunk_frames: int = DEFAULT_CHUNK_FRAMES,
) -> io.BytesIO:
    quality = settings.vbr_quality if vbr_quality is None else vbr_quality
    output = io.BytesIO()
    with open_wav(stream) as reader:
        with Mp3Writer(output, reader.format, vbr_quality=quality) as writer:
            for chunk in reader.iter_frames(chunk_frames):
                writer.write(chunk)
    output.seek(0)
    return output

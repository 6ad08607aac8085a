from __future__ import annotations

import io
import os
import struct
import subprocess
import tempfile
import wave

import imageio_ffmpeg
import numpy as np
import pytest
from fastapi.testclient import TestClient

from wav2mp3.main import app


CONVERT_URL = "/api/ConvertWavToMp3"


def make_wav(
    duration_s: float = 1.0,
    *,
    sample_rate: int = 44100,
    channels: int = 1,
    bit_depth: int = 16,
    freq: float = 440.0,
) -> bytes:
    n = int(round(duration_s * sample_rate))
    t = np.arange(n, dtype=np.float64) / sample_rate
    tone = 0.5 * np.sin(2.0 * np.pi * freq * t)
    data = np.repeat(tone[:, None], channels, axis=1)

    if bit_depth == 8:
        pcm = (data * 127.0 + 128.0).astype(np.uint8).tobytes()
    elif bit_depth == 16:
        pcm = (data * 32767.0).astype("<i2").tobytes()
    elif bit_depth == 24:
        ints = np.ascontiguousarray((data * 8388607.0).astype("<i4"))
        pcm = ints.view(np.uint8).reshape(-1, 4)[:, :3].tobytes()
    elif bit_depth == 32:
        pcm = (data * 2147483647.0).astype("<i4").tobytes()
    else:
        raise ValueError(bit_depth)

    buf = io.BytesIO()
    with wave.open(buf, "wb") as wf:
        wf.setnchannels(channels)
        wf.setsampwidth(bit_depth // 8)
        wf.setframerate(sample_rate)
        wf.writeframes(pcm)
    return buf.getvalue()


_KSDATAFORMAT_SUBTYPE_PCM = b"\x01\x00\x00\x00\x00\x00\x10\x00\x80\x00\x00\xaa\x00\x38\x9b\x71"


def make_extensible_wav(plain_wav: bytes) -> bytes:
    """Rewrap a PCM WAV with a WAVE_FORMAT_EXTENSIBLE (0xFFFE) fmt chunk, as DAWs write."""
    with wave.open(io.BytesIO(plain_wav), "rb") as wf:
        channels = wf.getnchannels()
        width = wf.getsampwidth()
        rate = wf.getframerate()
        pcm = wf.readframes(wf.getnframes())

    block_align = channels * width
    channel_mask = 0x3 if channels == 2 else 0x4
    fmt = struct.pack(
        "<HHIIHHHHI16s",
        0xFFFE,
        channels,
        rate,
        rate * block_align,
        block_align,
        width * 8,
        22,
        width * 8,
        channel_mask,
        _KSDATAFORMAT_SUBTYPE_PCM,
    )
    body = b"WAVE" + b"fmt " + struct.pack("<I", len(fmt)) + fmt + b"data" + struct.pack("<I", len(pcm)) + pcm
    if len(pcm) % 2:
        body += b"\x00"
    return b"RIFF" + struct.pack("<I", len(body)) + body


def mp3_to_wav(data: bytes) -> bytes:
    """Decode an MP3 back into a WAV file with the bundled ffmpeg."""
    with tempfile.TemporaryDirectory() as td:
        in_path = os.path.join(td, "in.mp3")
        out_path = os.path.join(td, "out.wav")
        with open(in_path, "wb") as f:
            f.write(data)
        subprocess.run(
            [imageio_ffmpeg.get_ffmpeg_exe(), "-hide_banner", "-loglevel", "error", "-i", in_path, out_path],
            check=True,
            capture_output=True,
        )
        with open(out_path, "rb") as f:
            return f.read()


def looks_like_mp3(data: bytes) -> bool:
    if data[:3] == b"ID3":
        return True
    return len(data) >= 2 and data[0] == 0xFF and (data[1] & 0xE0) == 0xE0


def mp3_duration_s(data: bytes, sample_rate: int = 44100) -> float:
    """Decode an MP3 with the bundled ffmpeg and measure it in mono s16 samples."""
    with tempfile.TemporaryDirectory() as td:
        path = os.path.join(td, "in.mp3")
        with open(path, "wb") as f:
            f.write(data)
        proc = subprocess.run(
            [
                imageio_ffmpeg.get_ffmpeg_exe(),
                "-hide_banner",
                "-loglevel",
                "error",
                "-i",
                path,
                "-f",
                "s16le",
                "-ac",
                "1",
                "-ar",
                str(sample_rate),
                "pipe:1",
            ],
            check=True,
            capture_output=True,
        )
    return len(proc.stdout) / 2.0 / sample_rate


@pytest.fixture
def client() -> TestClient:
    return TestClient(app)


@pytest.fixture
def wav_bytes() -> bytes:
    return make_wav(1.0)

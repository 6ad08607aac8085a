from __future__ import annotations

import os
from dataclasses import dataclass

from dotenv import load_dotenv


load_dotenv()


def _env_bool(name: str, default: bool = False) -> bool:
    raw = os.getenv(name)
    if raw is None or not raw.strip():
        return default
    return raw.strip().lower() in {"1", "true", "yes", "on"}


@dataclass(frozen=True)
class Settings:
    app_name: str = os.getenv("APP_NAME", "WAV to MP3 Converter")
    host: str = os.getenv("HOST", "127.0.0.1")
    port: int = int(os.getenv("PORT", "8000"))
    log_level: str = os.getenv("LOG_LEVEL", "INFO").upper()
    # LAME VBR scale, 0 best .. 9 smallest; 1 matches the "VBR 90" preset.
    vbr_quality: int = int(os.getenv("MP3_VBR_QUALITY", "1"))
    wav_header_check: bool = _env_bool("WAV_HEADER_CHECK")


settings = Settings()

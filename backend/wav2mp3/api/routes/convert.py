from __future__ import annotations

import logging
from urllib.parse import quote

from fastapi import APIRouter, Request
from fastapi.concurrency import run_in_threadpool
from fastapi.responses import PlainTextResponse, Response

from ...core.config import settings
from ...services.converter import convert_wav_to_mp3, mp3_filename
from ...services.upload_validation import (
    VALID_WAV_MESSAGE,
    InvalidUpload,
    check_content_type,
    pick_wav_upload,
)


logger = logging.getLogger(__name__)

router = APIRouter()


def _content_disposition(filename: str) -> str:
    quoted = quote(filename)
    if quoted != filename:
        return f"attachment; filename*=utf-8''{quoted}"
    return f'attachment; filename="{filename}"'


@router.post("/ConvertWavToMp3")
async def convert_wav(request: Request) -> Response:
    logger.info("WAV to MP3 conversion function processed a request.")

    try:
        check_content_type(request.headers.get("content-type"))
    except InvalidUpload as e:
        return PlainTextResponse(e.message, status_code=400)

    try:
        form = await request.form()
    except Exception as e:  # noqa: BLE001
        logger.warning("Could not parse multipart body: %s", e)
        return PlainTextResponse(VALID_WAV_MESSAGE, status_code=400)

    try:
        try:
            upload = await pick_wav_upload(form, header_check=settings.wav_header_check)
        except InvalidUpload as e:
            return PlainTextResponse(e.message, status_code=400)

        try:
            await upload.seek(0)
            mp3 = await run_in_threadpool(convert_wav_to_mp3, upload.file)
            with mp3:
                body = mp3.getvalue()
        except Exception:  # noqa: BLE001
            logger.exception("Error during WAV to MP3 conversion.")
            return Response(status_code=500)

        return Response(
            content=body,
            media_type="audio/mpeg",
            headers={"Content-Disposition": _content_disposition(mp3_filename(upload.filename or ""))},
        )
    finally:
        await form.close()

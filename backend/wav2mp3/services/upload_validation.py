from __future__ import annotations

import os

from starlette.datastructures import FormData, UploadFile

from .wav_reader import is_wav_header


WAV_UPLOAD_MESSAGE = "Please upload a WAV file."
VALID_WAV_MESSAGE = "Please upload a valid WAV file."
FILE_FIELD = "file"


class InvalidUpload(Exception):
    def __init__(self, message: str) -> None:
        super().__init__(message)
        self.message = message


def check_content_type(content_type: str | None) -> None:
    if not (content_type or "").lower().startswith("multipart/form-data"):
        raise InvalidUpload(WAV_UPLOAD_MESSAGE)


def has_wav_extension(filename: str | None) -> bool:
    _stem, ext = os.path.splitext(filename or "")
    return ext.lower() == ".wav"


def _upload_size(upload: UploadFile) -> int:
    if upload.size is not None:
        return int(upload.size)
    f = upload.file
    pos = f.tell()
    f.seek(0, os.SEEK_END)
    size = f.tell()
    f.seek(pos)
    return size


async def pick_wav_upload(form: FormData | None, *, header_check: bool = False) -> UploadFile:
    upload = form.get(FILE_FIELD) if form is not None else None
    if not isinstance(upload, UploadFile):
        raise InvalidUpload(VALID_WAV_MESSAGE)
    if _upload_size(upload) == 0 or not has_wav_extension(upload.filename):
        raise InvalidUpload(VALID_WAV_MESSAGE)

    if header_check:
        await upload.seek(0)
        head = await upload.read(12)
        await upload.seek(0)
        if not is_wav_header(head):
            raise InvalidUpload(VALID_WAV_MESSAGE)

    return upload

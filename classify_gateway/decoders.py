"""Turn an incoming /classify request into image data.

Two encodings are understood: a JSON body carrying a base64 string, and a
multipart form with a single file part. Both produce an `ImageSource`
that the scratch-file layer can write to disk.
"""
from __future__ import annotations

import base64
import binascii
import json
from dataclasses import dataclass
from typing import Literal

import structlog
from fastapi import Request
from pydantic import ValidationError
from python_multipart.exceptions import MultipartParseError
from starlette.datastructures import FormData, UploadFile
from starlette.exceptions import HTTPException as StarletteHTTPException
from starlette.formparsers import MultiPartException

from .errors import DecodeError, MissingFieldError, ParseError
from .scratch import ImageData
from .schemas import ClassifyRequest

log = structlog.get_logger()

IMAGE_FIELD = "image"
JSON_TYPE = "application/json"
MULTIPART_TYPE = "multipart/form-data"

MODES = {
    "auto": (JSON_TYPE, MULTIPART_TYPE),
    "json": (JSON_TYPE,),
    "multipart": (MULTIPART_TYPE,),
}


@dataclass(frozen=True)
class ImageSource:
    kind: Literal["base64", "multipart"]
    data: ImageData

    @property
    def draw_again(self) -> bool:
        # only the canvas page posts base64, so only it gets a way back
        return self.kind == "base64"


def decode_base64(payload: str) -> bytes:
    try:
        return base64.b64decode(payload, validate=True)
    except (binascii.Error, ValueError) as exc:
        log.error(DecodeError.event, err=str(exc))
        raise DecodeError(str(exc)) from exc


async def from_json(request: Request) -> ImageSource:
    try:
        body = await request.json()
    except (json.JSONDecodeError, UnicodeDecodeError) as exc:
        log.error(ParseError.event, kind="json", err=str(exc))
        raise ParseError(str(exc)) from exc
    if not isinstance(body, dict):
        log.error(ParseError.event, kind="json", err=f"expected object, got {type(body).__name__}")
        raise ParseError("JSON body must be an object")

    try:
        req = ClassifyRequest.model_validate(body)
    except ValidationError as exc:
        log.error(MissingFieldError.event, kind="json", err=str(exc))
        raise MissingFieldError(f"missing or invalid '{IMAGE_FIELD}' field") from exc

    raw = decode_base64(req.image)
    log.debug("image_source", kind="inline_base64", size=len(raw))
    return ImageSource(kind="base64", data=raw)


async def read_form(request: Request) -> FormData:
    try:
        return await request.form()
    except (MultiPartException, MultipartParseError, StarletteHTTPException) as exc:
        detail = getattr(exc, "message", None) or getattr(exc, "detail", None) or str(exc)
        log.error(ParseError.event, kind="multipart", err=detail)
        raise ParseError(detail) from exc


def from_form(form: FormData) -> ImageSource:
    """Pick the `image` file part out of an already-parsed form."""
    upload = form.get(IMAGE_FIELD)
    if not isinstance(upload, UploadFile):
        log.error(MissingFieldError.event, kind="multipart", fields=list(form.keys()))
        raise MissingFieldError(f"no '{IMAGE_FIELD}' file part")
    log.debug("image_source", kind="multipart", filename=upload.filename, size=upload.size)
    return ImageSource(kind="multipart", data=upload.file)


def media_type(request: Request) -> str:
    return request.headers.get("content-type", "").split(";", 1)[0].strip().lower()


def check_media_type(request: Request, mode: str) -> str:
    """Return the request's media type if `mode` accepts it, else ParseError."""
    kind = media_type(request)
    if kind not in MODES[mode]:
        log.error(ParseError.event, kind="content_type", content_type=kind or None, mode=mode)
        raise ParseError(f"unsupported content type: {kind or 'none'}")
    return kind

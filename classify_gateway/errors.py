"""Error taxonomy for the classify pipeline.

Each error carries the HTTP status it maps to. Messages are for logs only;
clients receive the bare status.
"""
from __future__ import annotations

from fastapi import status


class GatewayError(Exception):
    status_code: int = status.HTTP_500_INTERNAL_SERVER_ERROR
    event: str = "gateway_error"


# ─── client errors ──────────────────────────────────────────────────────────
class DecodeError(GatewayError):
    status_code = status.HTTP_400_BAD_REQUEST
    event = "base64_decode_failed"


class MissingFieldError(GatewayError):
    status_code = status.HTTP_400_BAD_REQUEST
    event = "image_field_missing"


class ParseError(GatewayError):
    status_code = status.HTTP_400_BAD_REQUEST
    event = "request_parse_failed"


# ─── server errors ──────────────────────────────────────────────────────────
class FileWriteError(GatewayError):
    event = "scratch_write_failed"


class FileMissingError(GatewayError):
    event = "scratch_missing"


class SpawnError(GatewayError):
    event = "classifier_spawn_failed"


class ClassifierFailure(GatewayError):
    event = "classifier_failed"


class ClassifierTimeout(ClassifierFailure):
    event = "classifier_timeout"

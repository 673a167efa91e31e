"""Scratch files that carry one request's image to the classifier."""
from __future__ import annotations

import os
import shutil
import tempfile
from contextlib import contextmanager
from pathlib import Path
from typing import BinaryIO, Iterator, Optional, Union

import structlog

from .errors import FileMissingError, FileWriteError

log = structlog.get_logger()

ImageData = Union[bytes, BinaryIO]


def _write(fh: BinaryIO, data: ImageData) -> None:
    if isinstance(data, (bytes, bytearray)):
        fh.write(data)
    else:
        data.seek(0)
        shutil.copyfileobj(data, fh)


def _remove(path: Path) -> None:
    try:
        path.unlink(missing_ok=True)
    except OSError as exc:
        log.warning("scratch_cleanup_failed", path=str(path), err=str(exc))


@contextmanager
def scratch_file(data: ImageData, directory: Optional[Path] = None) -> Iterator[Path]:
    """
    Write `data` (raw bytes or a readable binary file object) to a freshly
    named file and yield its path. The file is closed before the caller
    sees it and removed on exit, whatever happens inside the block.
    """
    path: Optional[Path] = None
    try:
        with tempfile.NamedTemporaryFile(
            prefix="classify_", dir=directory, delete=False
        ) as fh:
            path = Path(fh.name)
            _write(fh, data)
    except OSError as exc:
        log.error(FileWriteError.event, err=str(exc))
        if path is not None:
            _remove(path)
        raise FileWriteError(str(exc)) from exc
    except BaseException:
        if path is not None:
            _remove(path)
        raise

    log.debug("scratch_created", path=str(path), size=path.stat().st_size)
    try:
        yield path
    finally:
        _remove(path)


def ensure_present(path: Path) -> None:
    """Raise FileMissingError unless `path` is a regular file."""
    if not os.path.isfile(path):
        log.error(FileMissingError.event, path=str(path))
        raise FileMissingError(f"scratch file vanished: {path}")

"""Running the external classifier."""
from __future__ import annotations

import shlex
import subprocess
from dataclasses import dataclass
from pathlib import Path
from typing import List, Optional, Protocol

import structlog

from .errors import ClassifierFailure, ClassifierTimeout, SpawnError
from .scratch import ensure_present

log = structlog.get_logger()


@dataclass(frozen=True)
class ClassificationOutcome:
    stdout: str
    stderr: str
    returncode: int

    @property
    def ok(self) -> bool:
        return self.returncode == 0


class Classifier(Protocol):
    def classify(self, path: Path) -> ClassificationOutcome:
        ...


class SubprocessClassifier:
    """Runs `<command> <path>` and waits for it to exit."""

    def __init__(self, command: str, timeout: Optional[float] = None):
        self.argv: List[str] = shlex.split(command)
        if not self.argv:
            raise ValueError("classifier command is empty")
        self.timeout = timeout

    def classify(self, path: Path) -> ClassificationOutcome:
        try:
            proc = subprocess.run(
                [*self.argv, str(path)],
                capture_output=True,
                timeout=self.timeout,
            )
        except subprocess.TimeoutExpired as exc:
            raise ClassifierTimeout(f"no exit after {self.timeout}s") from exc
        except OSError as exc:
            raise SpawnError(str(exc)) from exc

        return ClassificationOutcome(
            stdout=proc.stdout.decode("utf-8", errors="replace"),
            stderr=proc.stderr.decode("utf-8", errors="replace"),
            returncode=proc.returncode,
        )


def invoke(classifier: Classifier, path: Path, request_id: str = "-") -> ClassificationOutcome:
    """Classify the image at `path`; only a zero exit counts as success."""
    ensure_present(path)

    try:
        outcome = classifier.classify(path)
    except ClassifierTimeout as exc:
        log.error(ClassifierTimeout.event, request_id=request_id, err=str(exc))
        raise
    except SpawnError as exc:
        log.error(SpawnError.event, request_id=request_id, err=str(exc))
        raise

    if not outcome.stdout:
        log.info("classifier_no_stdout", request_id=request_id)
    if outcome.stderr:
        log.warning("classifier_stderr", request_id=request_id, stderr=outcome.stderr)

    if not outcome.ok:
        log.error(
            ClassifierFailure.event,
            request_id=request_id,
            returncode=outcome.returncode,
            stderr=outcome.stderr,
        )
        raise ClassifierFailure(f"classifier exited with {outcome.returncode}")

    log.info("classification_complete", request_id=request_id, result=outcome.stdout.strip())
    return outcome

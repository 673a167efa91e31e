import pytest

from classify_gateway.errors import (
    ClassifierFailure,
    ClassifierTimeout,
    FileMissingError,
    SpawnError,
)
from classify_gateway.invoker import ClassificationOutcome, SubprocessClassifier, invoke

from .stubs import CAT, FAIL, SLOW, WARN


@pytest.fixture
def image(tmp_path, png):
    path = tmp_path / "image.png"
    path.write_bytes(png)
    return path


class Canned:
    def __init__(self, outcome):
        self.outcome = outcome
        self.calls = []

    def classify(self, path):
        self.calls.append(path)
        return self.outcome


def test_subprocess_captures_stdout(stub, image):
    outcome = SubprocessClassifier(stub(CAT)).classify(image)
    assert outcome == ClassificationOutcome(stdout="cat", stderr="", returncode=0)
    assert outcome.ok


def test_subprocess_passes_path_as_last_argument(stub, image):
    cmd = stub('import sys; sys.stdout.write(repr(sys.argv[1:]))')
    outcome = SubprocessClassifier(cmd).classify(image)
    assert outcome.stdout == repr([str(image)])


def test_subprocess_captures_stderr_and_exit_code(stub, image):
    outcome = SubprocessClassifier(stub(FAIL)).classify(image)
    assert outcome.stdout == "partial"
    assert outcome.stderr == "boom"
    assert outcome.returncode == 1
    assert not outcome.ok


def test_subprocess_decodes_invalid_utf8_lossily(stub, image):
    cmd = stub('import sys; sys.stdout.buffer.write(b"caf\\xe9")')
    outcome = SubprocessClassifier(cmd).classify(image)
    assert outcome.stdout == "caf\ufffd"


def test_subprocess_missing_executable(tmp_path, image):
    with pytest.raises(SpawnError):
        SubprocessClassifier(str(tmp_path / "missing")).classify(image)


def test_subprocess_timeout(stub, image):
    with pytest.raises(ClassifierTimeout):
        SubprocessClassifier(stub(SLOW), timeout=0.5).classify(image)


def test_empty_command_rejected():
    with pytest.raises(ValueError):
        SubprocessClassifier("   ")


def test_invoke_success_keeps_stderr(stub, image):
    outcome = invoke(SubprocessClassifier(stub(WARN)), image)
    assert outcome.stdout == "dog"
    assert outcome.stderr == "low confidence"


def test_invoke_nonzero_exit_raises(image):
    canned = Canned(ClassificationOutcome(stdout="cat", stderr="segfault", returncode=139))
    with pytest.raises(ClassifierFailure):
        invoke(canned, image)


def test_invoke_nonzero_exit_without_output_raises(image):
    with pytest.raises(ClassifierFailure):
        invoke(Canned(ClassificationOutcome(stdout="", stderr="", returncode=2)), image)


def test_invoke_checks_file_exists(tmp_path):
    canned = Canned(ClassificationOutcome(stdout="cat", stderr="", returncode=0))
    with pytest.raises(FileMissingError):
        invoke(canned, tmp_path / "gone.png")
    assert canned.calls == []


def test_invoke_propagates_spawn_error(tmp_path, image):
    with pytest.raises(SpawnError):
        invoke(SubprocessClassifier(str(tmp_path / "missing")), image)

import pytest
from pydantic import ValidationError

from classify_gateway.config import Settings


def test_defaults(monkeypatch):
    for name in ("COMMAND", "HOST", "PORT", "WORKERS", "INPUT_MODE", "TIMEOUT"):
        monkeypatch.delenv(f"CLASSIFY_{name}", raising=False)
    s = Settings(_env_file=None)
    assert s.command == "classify"
    assert s.host == "0.0.0.0"
    assert s.input_mode == "auto"
    assert s.timeout is None


def test_environment_overrides(monkeypatch, tmp_path):
    monkeypatch.setenv("CLASSIFY_COMMAND", "/opt/model/classify --top 1")
    monkeypatch.setenv("classify_workers", "8")
    monkeypatch.setenv("CLASSIFY_INPUT_MODE", "multipart")
    monkeypatch.setenv("CLASSIFY_SCRATCH_DIR", str(tmp_path))
    s = Settings(_env_file=None)
    assert s.command == "/opt/model/classify --top 1"
    assert s.workers == 8
    assert s.input_mode == "multipart"
    assert s.scratch_dir == tmp_path


@pytest.mark.parametrize("name,value", [
    ("CLASSIFY_INPUT_MODE", "xml"),
    ("CLASSIFY_WORKERS", "0"),
    ("CLASSIFY_TIMEOUT", "-1"),
])
def test_invalid_values(monkeypatch, name, value):
    monkeypatch.setenv(name, value)
    with pytest.raises(ValidationError):
        Settings(_env_file=None)

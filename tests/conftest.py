import base64
import shlex
import sys
import textwrap

import pytest
from fastapi.testclient import TestClient

from classify_gateway.config import Settings
from classify_gateway.main import create_app

from .stubs import CAT, create_test_image


@pytest.fixture
def png() -> bytes:
    return create_test_image()


@pytest.fixture
def png_b64(png) -> str:
    return base64.b64encode(png).decode()


@pytest.fixture
def scratch_dir(tmp_path):
    d = tmp_path / "scratch"
    d.mkdir()
    return d


@pytest.fixture
def stub(tmp_path):
    """Write a Python classifier stub and return a command line that runs it."""
    def _make(source: str, name: str = "classify_stub.py") -> str:
        script = tmp_path / name
        script.write_text(textwrap.dedent(source))
        return f"{shlex.quote(sys.executable)} {shlex.quote(str(script))}"
    return _make


@pytest.fixture
def make_client(scratch_dir, stub):
    def _make(source: str = CAT, **overrides) -> TestClient:
        overrides.setdefault("command", stub(source))
        overrides.setdefault("scratch_dir", scratch_dir)
        settings = Settings(_env_file=None, **overrides)
        return TestClient(create_app(settings))
    return _make

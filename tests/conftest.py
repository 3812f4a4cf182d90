import pathlib
import sys

# ruff: noqa: E402
import pytest


ROOT = pathlib.Path(__file__).resolve().parents[1] / "src"
if str(ROOT) not in sys.path:
    sys.path.insert(0, str(ROOT))

from notionsmith.adapters.html.renderer import HtmlRenderer
from notionsmith.core.diagnostics import RecordingEmitter


@pytest.fixture
def renderer() -> HtmlRenderer:
    return HtmlRenderer()


@pytest.fixture
def emitter() -> RecordingEmitter:
    return RecordingEmitter()

"""Shared fixtures: a rendering engine stand-in that writes real PDFs without a browser."""

import re
from pathlib import Path
from typing import Dict, List

import pytest
from pypdf import PdfWriter

from docbinder.conversion import RenderEngine


def write_blank_pdf(path: Path, width: float = 200, height: float = 300) -> Path:
    """Write a one-page PDF; the page width identifies the document in merge tests."""
    writer = PdfWriter()
    writer.add_blank_page(width=width, height=height)
    path.parent.mkdir(parents=True, exist_ok=True)
    with open(path, "wb") as f:
        writer.write(f)
    return path


class FakeEngine(RenderEngine):
    """
    Prints a blank page whose width is read from a ``page-width=N`` marker in the
    page, and fails for pages containing ``BROKEN``.
    """

    def __init__(self, diagrams_ready: bool = True):
        self.diagrams_ready = diagrams_ready
        self.pages: List[str] = []
        self.diagram_waits: Dict[str, bool] = {}

    async def print_pdf(self, page_html, target, wait_for_diagrams=False):
        self.pages.append(page_html)
        self.diagram_waits[Path(target).name] = wait_for_diagrams
        if "BROKEN" in page_html:
            raise RuntimeError("engine crashed")
        match = re.search(r"page-width=(\d+)", page_html)
        write_blank_pdf(Path(target), width=float(match.group(1)) if match else 200)
        return self.diagrams_ready or not wait_for_diagrams


@pytest.fixture
def fake_engine():
    return FakeEngine()


@pytest.fixture
def make_pdf():
    return write_blank_pdf


@pytest.fixture
def engine_factory():
    return FakeEngine

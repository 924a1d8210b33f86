import asyncio
import base64
import logging

import pytest

from docbinder.conversion import ConversionWorker
from docbinder.errors import ConversionError, MissingResourceError
from docbinder.models import ConversionSettings


PNG_BYTES = base64.b64decode(
    "iVBORw0KGgoAAAANSUhEUgAAAAEAAAABCAYAAAAfFcSJAAAADUlEQVR42mNkYPhfDwAChwGA60e6kgAAAABJRU5ErkJggg=="
)


@pytest.fixture
def document(tmp_path):
    (tmp_path / "images").mkdir()
    (tmp_path / "images" / "diagram.png").write_bytes(PNG_BYTES)
    doc = tmp_path / "post.md"
    doc.write_text("# Post\n\n![Diagram](./images/diagram.png)\n\npage-width=321\n")
    return doc


def test_render_writes_pdf_with_embedded_images(document, tmp_path, fake_engine):
    worker = ConversionWorker(ConversionSettings(), engine=fake_engine)
    target = tmp_path / "pdfs" / "nested" / "post.pdf"

    result = asyncio.run(worker.render(document, target))

    assert result == target
    assert target.is_file()
    page = fake_engine.pages[0]
    assert "data:image/png;base64," in page
    assert "./images/diagram.png" not in page
    assert "<title>Post</title>" in page
    assert fake_engine.diagram_waits["post.pdf"] is False


def test_diagram_timeout_degrades_without_failing(tmp_path, caplog, engine_factory):
    doc = tmp_path / "flow.md"
    doc.write_text("# Flow\n\n```mermaid\ngraph TD\n  A --> B\n```\n")
    engine = engine_factory(diagrams_ready=False)
    worker = ConversionWorker(engine=engine)

    with caplog.at_level(logging.WARNING):
        result = asyncio.run(worker.render(doc, tmp_path / "flow.pdf"))

    assert result.is_file()
    assert engine.diagram_waits["flow.pdf"] is True
    assert "mermaid.min.js" in engine.pages[0]
    assert "Mermaid diagram may not have rendered" in caplog.text


def test_missing_document(tmp_path, fake_engine):
    worker = ConversionWorker(engine=fake_engine)

    with pytest.raises(MissingResourceError):
        asyncio.run(worker.render(tmp_path / "absent.md", tmp_path / "absent.pdf"))
    assert fake_engine.pages == []


def test_engine_failure_becomes_conversion_error(tmp_path, fake_engine):
    doc = tmp_path / "bad.md"
    doc.write_text("BROKEN")
    worker = ConversionWorker(engine=fake_engine)

    with pytest.raises(ConversionError) as excinfo:
        asyncio.run(worker.render(doc, tmp_path / "bad.pdf"))

    assert isinstance(excinfo.value.original, RuntimeError)
    assert excinfo.value.path == doc

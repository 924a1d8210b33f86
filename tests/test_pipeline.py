"""
Tests for the build pipeline state machine, failure isolation and merge order.
"""

import json

import pytest
from pypdf import PdfReader

from docbinder.conversion import ConversionWorker
from docbinder.errors import MissingResourceError, TreeValidationError
from docbinder.models import ConversionSettings, ConversionStatus
from docbinder.pipeline import BuildPipeline, PipelineState


def file_entry(rel_path):
    return {
        "label": rel_path.rsplit("/", 1)[-1],
        "type": "file",
        "path": f"blogs/{rel_path}",
        "date": "January 5, 2024",
        "createdOn": "2024-01-05 10:00:00",
    }


@pytest.fixture
def workspace(tmp_path):
    content = tmp_path / "out" / "blogs"
    (content / "patterns").mkdir(parents=True)
    (content / "patterns" / "alpha.md").write_text("# Alpha\n\npage-width=100\n")
    (content / "patterns" / "beta.md").write_text("# Beta\n\npage-width=200\n")
    return tmp_path


def make_pipeline(workspace, engine, concurrency=2):
    settings = ConversionSettings(concurrency=concurrency)
    return BuildPipeline(
        content_root=workspace / "out" / "blogs",
        index_path=workspace / "out" / "all-blogs-index.json",
        pdf_dir=workspace / "out" / "blogs-pdfs",
        merged_pdf=workspace / "out" / "blogs-pdfs" / "All-Blogs-Merged.pdf",
        conversion_settings=settings,
        worker=ConversionWorker(settings, engine=engine),
    )


def write_index(workspace, files):
    index = {"label": "blogs", "type": "directory", "children": [
        {"label": "patterns", "type": "directory", "children": [file_entry(f) for f in files]},
    ]}
    path = workspace / "out" / "all-blogs-index.json"
    path.write_text(json.dumps(index))
    return path


def merged_widths(pipeline):
    return [float(page.mediabox.width) for page in PdfReader(str(pipeline.merged_pdf)).pages]


def test_merge_follows_traversal_order(workspace, fake_engine):
    write_index(workspace, ["patterns/alpha.md", "patterns/beta.md"])
    pipeline = make_pipeline(workspace, fake_engine)

    summary = pipeline.run_conversion()

    assert pipeline.state == PipelineState.DONE
    assert summary.attempted == 2
    assert summary.succeeded == 2
    assert summary.merged_path == pipeline.merged_pdf
    assert merged_widths(pipeline) == [100.0, 200.0]
    assert (pipeline.pdf_dir / "patterns" / "alpha.pdf").is_file()


def test_failed_document_is_left_out_of_merge(workspace, fake_engine):
    (workspace / "out" / "blogs" / "patterns" / "alpha.md").write_text("BROKEN")
    write_index(workspace, ["patterns/alpha.md", "patterns/beta.md"])
    pipeline = make_pipeline(workspace, fake_engine)

    summary = pipeline.run_conversion()

    assert pipeline.state == PipelineState.DONE
    assert summary.failed == 1
    assert summary.succeeded == 1
    assert summary.results[0].status == ConversionStatus.FAILED
    assert merged_widths(pipeline) == [200.0]


def test_missing_document_is_skipped(workspace, fake_engine):
    write_index(workspace, ["patterns/gone.md", "patterns/beta.md"])
    pipeline = make_pipeline(workspace, fake_engine, concurrency=1)

    summary = pipeline.run_conversion()

    assert pipeline.state == PipelineState.DONE
    assert summary.skipped == 1
    assert summary.results[0].status == ConversionStatus.SKIPPED
    assert merged_widths(pipeline) == [200.0]


def test_only_markdown_documents_are_converted(workspace, fake_engine):
    (workspace / "out" / "blogs" / "patterns" / "notes.txt").write_text("page-width=999")
    write_index(workspace, ["patterns/notes.txt", "patterns/beta.md"])
    pipeline = make_pipeline(workspace, fake_engine)

    summary = pipeline.run_conversion()

    assert summary.attempted == 1
    assert merged_widths(pipeline) == [200.0]


def test_output_directory_is_cleaned(workspace, fake_engine):
    write_index(workspace, ["patterns/beta.md"])
    stale = workspace / "out" / "blogs-pdfs" / "old" / "stale.pdf"
    stale.parent.mkdir(parents=True)
    stale.write_text("stale")
    pipeline = make_pipeline(workspace, fake_engine)

    pipeline.run_conversion()

    assert not stale.exists()


def test_empty_index_completes_without_merge(workspace, fake_engine):
    write_index(workspace, [])
    pipeline = make_pipeline(workspace, fake_engine)

    summary = pipeline.run_conversion()

    assert pipeline.state == PipelineState.DONE
    assert summary.attempted == 0
    assert summary.merged_path is None


def test_missing_index_fails(workspace, fake_engine):
    pipeline = make_pipeline(workspace, fake_engine)

    with pytest.raises(MissingResourceError):
        pipeline.run_conversion()
    assert pipeline.state == PipelineState.FAILED
    assert fake_engine.pages == []


def test_invalid_index_fails_before_conversion(workspace, fake_engine):
    index = {"label": "blogs", "type": "directory", "children": [
        {"label": "alpha.md", "type": "file", "path": "blogs/patterns/alpha.md"},
    ]}
    (workspace / "out" / "all-blogs-index.json").write_text(json.dumps(index))
    pipeline = make_pipeline(workspace, fake_engine)

    with pytest.raises(TreeValidationError):
        pipeline.run_conversion()
    assert pipeline.state == PipelineState.FAILED
    assert fake_engine.pages == []


def test_full_run_indexes_then_converts(workspace, fake_engine):
    (workspace / "out" / "blogs" / "patterns" / "info.json").write_text('{"title": "Patterns"}')
    pipeline = make_pipeline(workspace, fake_engine)

    summary = pipeline.run()

    assert pipeline.state == PipelineState.DONE
    assert (workspace / "out" / "blogs" / "patterns" / "index.json").is_file()
    root_index = json.loads(pipeline.index_path.read_text())
    assert root_index["children"][0]["title"] == "Patterns"
    assert summary.succeeded == 2
    assert sorted(merged_widths(pipeline)) == [100.0, 200.0]


def test_full_run_with_missing_root_fails(tmp_path, fake_engine):
    pipeline = make_pipeline(tmp_path, fake_engine)

    with pytest.raises(MissingResourceError):
        pipeline.run()
    assert pipeline.state == PipelineState.FAILED

"""
Build pipeline for docbinder.

Coordinates indexing and conversion as a small state machine:

    IDLE -> INDEXING -> VALIDATED -> CONVERTING -> MERGING -> DONE

FAILED is reached when the content root or the index is missing, or when the
tree fails validation. A document that fails to convert is recorded in the
summary and left out of the merged PDF; it never fails the pipeline.
"""

import asyncio
import logging
import shutil
from enum import Enum
from pathlib import Path, PurePosixPath
from typing import List, Optional, Tuple, Union

from .errors import ConversionError, DocBinderError, MissingResourceError
from .indexing import IndexWriter, load_index
from .models import (
    ConversionResult,
    ConversionSettings,
    ConversionStatus,
    DirectoryNode,
    FileNode,
    IndexSettings,
    PipelineSummary,
)
from .conversion import ArtifactMerger, ConversionWorker, run_chunked


class PipelineState(str, Enum):
    IDLE = "idle"
    INDEXING = "indexing"
    VALIDATED = "validated"
    CONVERTING = "converting"
    MERGING = "merging"
    DONE = "done"
    FAILED = "failed"


class BuildPipeline:
    """
    Runs indexing and PDF conversion for one content root.
    """

    def __init__(
        self,
        content_root: Union[str, Path],
        index_path: Union[str, Path],
        pdf_dir: Union[str, Path],
        merged_pdf: Union[str, Path],
        index_settings: Optional[IndexSettings] = None,
        conversion_settings: Optional[ConversionSettings] = None,
        worker: Optional[ConversionWorker] = None,
        clean_output: bool = True,
    ):
        """
        Initialize the pipeline.

        Args:
            content_root: Directory of documents to index and convert
            index_path: Aggregated root index, written by indexing and read by conversion
            pdf_dir: Directory receiving one PDF per document
            merged_pdf: Path of the combined PDF
            index_settings: Tree builder settings
            conversion_settings: Rendering and concurrency settings
            worker: Conversion worker (defaults to one using Chromium)
            clean_output: Remove pdf_dir before converting
        """
        self.content_root = Path(content_root)
        self.index_path = Path(index_path)
        self.pdf_dir = Path(pdf_dir)
        self.merged_pdf = Path(merged_pdf)
        self.index_settings = index_settings or IndexSettings()
        self.conversion_settings = conversion_settings or ConversionSettings()
        self.worker = worker or ConversionWorker(self.conversion_settings)
        self.clean_output = clean_output
        self.state = PipelineState.IDLE

    def _transition(self, state: PipelineState) -> None:
        logging.debug(f"Pipeline state: {self.state.value} -> {state.value}")
        self.state = state

    def _fail(self, error: DocBinderError) -> None:
        self._transition(PipelineState.FAILED)
        logging.error(str(error))

    # Indexing

    def run_indexing(self) -> DirectoryNode:
        """
        Write every subfolder index and the root index, then load the result back.

        Returns:
            The validated root tree

        Raises:
            MissingResourceError: If the content root does not exist
            TreeValidationError: If any written index fails validation
        """
        self._transition(PipelineState.INDEXING)
        try:
            writer = IndexWriter(self.content_root, self.index_settings)
            writer.write_folder_indexes()
            writer.write_root_index(self.index_path)
            tree = load_index(self.index_path)
        except DocBinderError as e:
            self._fail(e)
            raise
        self._transition(PipelineState.VALIDATED)
        return tree

    # Conversion

    def load_tree(self) -> DirectoryNode:
        """Load and validate the persisted root index."""
        self._transition(PipelineState.INDEXING)
        try:
            tree = load_index(self.index_path)
        except DocBinderError as e:
            self._fail(e)
            raise
        self._transition(PipelineState.VALIDATED)
        return tree

    def document_paths(self, node: FileNode) -> Tuple[Path, Path]:
        """Map a file node to its source document and its PDF."""
        relative = PurePosixPath(node.path)
        prefix = self.index_settings.path_prefix
        if prefix and relative.parts[:1] == (prefix,):
            relative = PurePosixPath(*relative.parts[1:])
        source = self.content_root.joinpath(*relative.parts)
        target = self.pdf_dir.joinpath(*relative.with_suffix(".pdf").parts)
        return source, target

    def collect_documents(self, tree: DirectoryNode) -> List[FileNode]:
        """Markdown file nodes in pre-order traversal order."""
        extension = self.index_settings.markdown_extension
        return [node for node in tree.iter_files() if node.path.endswith(extension)]

    async def _convert_one(self, node: FileNode) -> ConversionResult:
        source, target = self.document_paths(node)
        try:
            logging.info(f"Generating PDF: {source}")
            await self.worker.render(source, target)
        except MissingResourceError as e:
            logging.warning(f"Missing file: {source}")
            return ConversionResult(source=source, target=target,
                                    status=ConversionStatus.SKIPPED, error=str(e))
        except ConversionError as e:
            logging.error(f"Failed: {source} -> {target}: {e}")
            return ConversionResult(source=source, target=target,
                                    status=ConversionStatus.FAILED, error=str(e))
        logging.info(f"PDF created: {target}")
        return ConversionResult(source=source, target=target, status=ConversionStatus.SUCCEEDED)

    async def convert_tree(self, tree: DirectoryNode) -> PipelineSummary:
        """
        Render every Markdown document of ``tree`` and merge the results.

        Returns:
            Per-document outcomes and the merged PDF path
        """
        documents = self.collect_documents(tree)
        self._transition(PipelineState.CONVERTING)
        if self.clean_output and self.pdf_dir.exists():
            shutil.rmtree(self.pdf_dir)
            logging.info(f"Cleaned existing directory: {self.pdf_dir}")
        self.pdf_dir.mkdir(parents=True, exist_ok=True)

        if not documents:
            logging.warning("No markdown files found to process.")

        outcomes = await run_chunked(documents, self._convert_one, self.conversion_settings.concurrency)
        results = []
        for node, outcome in zip(documents, outcomes):
            if isinstance(outcome, BaseException):
                # _convert_one handles expected errors; anything else is still one document's failure
                source, target = self.document_paths(node)
                logging.error(f"Failed: {source}: {outcome!r}")
                outcome = ConversionResult(source=source, target=target,
                                           status=ConversionStatus.FAILED, error=repr(outcome))
            results.append(outcome)

        self._transition(PipelineState.MERGING)
        succeeded = [r.target for r in results if r.status == ConversionStatus.SUCCEEDED]
        for result in results:
            if result.status != ConversionStatus.SUCCEEDED:
                logging.warning(f"Not included in merged PDF: {result.source}")
        logging.info("Merging all generated PDFs...")
        merged = ArtifactMerger(self.merged_pdf).merge(succeeded)

        self._transition(PipelineState.DONE)
        summary = PipelineSummary(results=results, merged_path=merged)
        logging.info(
            f"Conversion finished: {summary.attempted} attempted, {summary.succeeded} succeeded, "
            f"{summary.failed} failed, {summary.skipped} skipped"
        )
        return summary

    def run_conversion(self) -> PipelineSummary:
        """Load the persisted index and convert it."""
        tree = self.load_tree()
        return asyncio.run(self.convert_tree(tree))

    def run(self) -> PipelineSummary:
        """Index the content root, then convert the fresh index."""
        tree = self.run_indexing()
        return asyncio.run(self.convert_tree(tree))

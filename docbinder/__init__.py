"""
docbinder: index a directory of Markdown documents and bind them into PDFs.

Walks a content tree into a validated JSON index, renders every document to
PDF with headless Chromium, and merges the results into one book.
"""

__version__ = "0.1.0"
__author__ = "docbinder Project"

# Import main components
from .models import DirectoryNode, FileNode, IndexSettings, ConversionSettings, PipelineSummary
from .indexing import TreeBuilder, IndexWriter, validate_tree, extract_metadata, load_index
from .state import ChecksumStore
from .conversion import ConversionWorker, ChromiumEngine, ArtifactMerger
from .pipeline import BuildPipeline, PipelineState

__all__ = [
    "DirectoryNode",
    "FileNode",
    "IndexSettings",
    "ConversionSettings",
    "PipelineSummary",
    "TreeBuilder",
    "IndexWriter",
    "validate_tree",
    "extract_metadata",
    "load_index",
    "ChecksumStore",
    "ConversionWorker",
    "ChromiumEngine",
    "ArtifactMerger",
    "BuildPipeline",
    "PipelineState"
]

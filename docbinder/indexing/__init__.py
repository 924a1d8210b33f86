"""Content tree indexing: metadata extraction, tree building, validation and persistence."""

from .metadata import MetadataExtractor, extract_metadata
from .builder import TreeBuilder, slugify
from .validator import validate_tree
from .writer import IndexWriter, load_index

__all__ = [
    "MetadataExtractor",
    "extract_metadata",
    "TreeBuilder",
    "slugify",
    "validate_tree",
    "IndexWriter",
    "load_index"
]

"""Data models for docbinder."""

from .tree import DirectoryNode, FileNode, Node
from .settings import IndexSettings, ConversionSettings
from .results import ConversionResult, ConversionStatus, PipelineSummary

__all__ = [
    "DirectoryNode",
    "FileNode",
    "Node",
    "IndexSettings",
    "ConversionSettings",
    "ConversionResult",
    "ConversionStatus",
    "PipelineSummary"
]

"""
Settings models passed explicitly into the indexer and the conversion pipeline.

ConfigManager builds these from config.yaml; tests build them directly.
"""

from typing import List
from pydantic import BaseModel, Field


class IndexSettings(BaseModel):
    """
    Controls how a content directory is walked and indexed.
    """

    exclude_folders: List[str] = Field(
        default_factory=lambda: ["images", ".git", "node_modules"],
        description="Directory names skipped entirely (case-insensitive)"
    )

    exclude_files: List[str] = Field(
        default_factory=lambda: ["info.json", "index.json"],
        description="File names never indexed (case-insensitive)"
    )

    accept_extensions: List[str] = Field(
        default_factory=lambda: [".md", ".json", ".txt", ".html"],
        description="File extensions kept in the tree"
    )

    folder_metadata_file: str = Field(
        "info.json",
        description="Per-directory metadata file merged onto directory nodes"
    )

    index_file_name: str = Field(
        "index.json",
        description="Name of the index written into each top-level subfolder"
    )

    root_label: str = Field(
        "blogs",
        description="Label of the root node of a build and of the aggregated index"
    )

    path_prefix: str = Field(
        "blogs",
        description="Prefix prepended to every file node path"
    )

    markdown_extension: str = Field(
        ".md",
        description="Extension of documents whose metadata block is extracted"
    )

    array_keys: List[str] = Field(
        default_factory=lambda: ["tags", "references"],
        description="Metadata keys whose values are parsed as arrays"
    )


class ConversionSettings(BaseModel):
    """
    Controls PDF rendering.
    """

    concurrency: int = Field(
        4,
        ge=1,
        description="Maximum number of documents rendered at the same time"
    )

    diagram_timeout: float = Field(
        10.0,
        ge=0,
        description="Seconds to wait for diagrams before printing without them"
    )

    page_format: str = Field(
        "A4",
        description="Paper format handed to the rendering engine"
    )

    print_background: bool = Field(
        True,
        description="Whether CSS backgrounds are printed"
    )

    headless: bool = Field(
        True,
        description="Run the browser without a window"
    )

    toc_marker: str = Field(
        "[[toc]]",
        description="Placeholder replaced by the generated table of contents"
    )

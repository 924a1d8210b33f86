"""
Content tree builder for docbinder.

Walks a content directory and produces a DirectoryNode tree: directories are
always recursed into, files are filtered by name and extension, folder
metadata files are merged onto their directory, and Markdown documents get the
metadata declared in their leading comment block.
"""

import logging
import os
import re
from datetime import datetime
from pathlib import Path, PurePosixPath
from typing import Any, Dict, List, Optional, Union

import yaml

from ..errors import MissingResourceError, RecoverableParseError
from ..models import DirectoryNode, FileNode, IndexSettings
from .metadata import MetadataExtractor, load_lenient


SLUG_RE = re.compile(r"[^a-z0-9]+")

# Fields owned by the builder; metadata cannot override them.
DIRECTORY_SYSTEM_FIELDS = frozenset({"label", "type", "children"})
FILE_SYSTEM_FIELDS = frozenset({"label", "type", "children", "path", "date", "createdOn", "created_on"})


def slugify(name: str) -> str:
    """
    Derive a URL-safe id from a name.

    The name is trimmed and lowercased, then every run of characters outside
    ``[a-z0-9]`` becomes a single ``-``. Applying it to its own output returns
    the same string.

    Examples:
        slugify("My Post!.md")  # "my-post-md"
        slugify("Design Patterns")  # "design-patterns"
    """
    return SLUG_RE.sub("-", name.strip().lower())


def format_date(moment: datetime) -> str:
    """Format a timestamp as e.g. 'January 5, 2024'."""
    return f"{moment.strftime('%B')} {moment.day}, {moment.year}"


def format_datetime(moment: datetime) -> str:
    """Format a timestamp as 'YYYY-MM-DD HH:MM:SS'."""
    return moment.strftime("%Y-%m-%d %H:%M:%S")


def creation_time(stats: os.stat_result) -> datetime:
    # st_birthtime is not exposed on every platform (notably most Linux builds).
    timestamp = getattr(stats, "st_birthtime", None)
    if timestamp is None:
        timestamp = stats.st_mtime
    return datetime.fromtimestamp(timestamp)


def load_folder_metadata(path: Path) -> Dict[str, Any]:
    """
    Parse a folder metadata file.

    Args:
        path: Path to the metadata file (e.g. info.json)

    Returns:
        The metadata fields

    Raises:
        RecoverableParseError: If the file cannot be read or is not an object
    """
    try:
        with open(path, 'r', encoding='utf-8') as f:
            data = load_lenient(f.read())
    except (OSError, UnicodeDecodeError, yaml.YAMLError) as e:
        raise RecoverableParseError(f"Could not parse folder metadata: {e}", path) from e

    if data is None:
        return {}
    if not isinstance(data, dict):
        raise RecoverableParseError(
            f"Folder metadata must be an object, got {type(data).__name__}", path
        )
    return data


class TreeBuilder:
    """
    Builds content trees from a directory on disk.
    """

    def __init__(self, settings: Optional[IndexSettings] = None):
        """
        Initialize the tree builder.

        Args:
            settings: Filters and naming rules (defaults to IndexSettings())
        """
        self.settings = settings or IndexSettings()
        self.extractor = MetadataExtractor(self.settings.array_keys)
        self._excluded_folders = {name.lower() for name in self.settings.exclude_folders}
        self._excluded_files = {name.lower() for name in self.settings.exclude_files}
        self._accepted_extensions = {ext.lower() for ext in self.settings.accept_extensions}

    def build(self, root_dir: Union[str, Path], relative_path: str = "") -> DirectoryNode:
        """
        Build the tree for ``root_dir / relative_path``.

        Args:
            root_dir: Content root; file paths are computed relative to it
            relative_path: Subdirectory to build, empty for the root itself

        Returns:
            The directory node with all descendants

        Raises:
            MissingResourceError: If the directory does not exist
        """
        root = Path(root_dir)
        directory = root / relative_path if relative_path else root
        if not directory.is_dir():
            raise MissingResourceError("Content directory not found", directory)

        logging.debug(f"Building tree for {directory}")
        return self._build_directory(root, PurePosixPath(relative_path) if relative_path else None)

    def _build_directory(self, root: Path, rel: Optional[PurePosixPath]) -> DirectoryNode:
        directory = root.joinpath(*rel.parts) if rel else root
        info = self._read_folder_metadata(directory)

        children: List[Union[DirectoryNode, FileNode]] = []
        with os.scandir(directory) as entries:
            for entry in entries:
                entry_rel = rel / entry.name if rel else PurePosixPath(entry.name)
                if entry.is_dir():
                    if entry.name.lower() in self._excluded_folders:
                        continue
                    children.append(self._build_directory(root, entry_rel))
                elif entry.is_file():
                    if not self._accepts_file(entry.name):
                        continue
                    children.append(self._build_file(Path(entry.path), entry_rel))

        fields: Dict[str, Any] = {"label": rel.name if rel else self.settings.root_label}
        fields.update({k: v for k, v in info.items() if isinstance(k, str) and k not in DIRECTORY_SYSTEM_FIELDS})
        fields["id"] = self._directory_id(info, directory)
        fields["children"] = children
        return DirectoryNode(**fields)

    def _accepts_file(self, name: str) -> bool:
        if name.lower() in self._excluded_files:
            return False
        return os.path.splitext(name)[1].lower() in self._accepted_extensions

    def _build_file(self, path: Path, rel: PurePosixPath) -> FileNode:
        created = creation_time(path.stat())
        fields: Dict[str, Any] = {"id": slugify(path.name)}

        if path.name.endswith(self.settings.markdown_extension):
            meta = self._read_document_metadata(path)
            fields.update({k: v for k, v in meta.items() if k not in FILE_SYSTEM_FIELDS})

        fields.update({
            "label": path.name,
            "type": "file",
            "path": str(PurePosixPath(self.settings.path_prefix) / rel) if self.settings.path_prefix else str(rel),
            "date": format_date(created),
            "createdOn": format_datetime(created),
        })
        return FileNode(**fields)

    def _read_document_metadata(self, path: Path) -> Dict[str, Any]:
        try:
            text = path.read_text(encoding='utf-8')
        except (OSError, UnicodeDecodeError) as e:
            logging.warning(f"Could not read metadata from {path}: {e}")
            return {}
        return self.extractor.extract(text)

    def _read_folder_metadata(self, directory: Path) -> Dict[str, Any]:
        info_path = directory / self.settings.folder_metadata_file
        if not info_path.is_file():
            return {}
        try:
            return load_folder_metadata(info_path)
        except RecoverableParseError as e:
            logging.warning(f"Ignoring folder metadata: {e}")
            return {}

    @staticmethod
    def _directory_id(info: Dict[str, Any], directory: Path) -> Optional[str]:
        title = info.get("title")
        if title is None:
            if info:
                logging.warning(f"Folder metadata in {directory} has no title; directory gets no id")
            return None
        return slugify(str(title))

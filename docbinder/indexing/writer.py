"""
Index persistence for docbinder.

Each top-level subfolder of the content root gets its own index file, built
and validated independently. The aggregated root index wraps those subfolder
indexes and is the only input the conversion pipeline reads.
"""

import json
import logging
import os
from pathlib import Path
from typing import Any, Dict, List, Optional, Union

from pydantic import TypeAdapter

from ..errors import MissingResourceError, TreeValidationError
from ..models import DirectoryNode, IndexSettings, Node
from .builder import TreeBuilder
from .validator import validate_tree


_node_adapter = TypeAdapter(Node)


def write_json(path: Path, data: Any) -> None:
    path.parent.mkdir(parents=True, exist_ok=True)
    with open(path, 'w', encoding='utf-8') as f:
        json.dump(data, f, indent=2, ensure_ascii=False)


def load_index(path: Union[str, Path]) -> DirectoryNode:
    """
    Read, validate and parse an index file.

    Args:
        path: Path to a persisted index

    Returns:
        The root directory node

    Raises:
        MissingResourceError: If the file does not exist or is not valid JSON
        TreeValidationError: If the tree violates a structural invariant
    """
    path = Path(path)
    if not path.is_file():
        raise MissingResourceError("Index file not found", path)
    try:
        with open(path, 'r', encoding='utf-8') as f:
            data = json.load(f)
    except (OSError, json.JSONDecodeError) as e:
        raise MissingResourceError(f"Index file unreadable ({e})", path) from e

    validate_tree(data)
    node = _node_adapter.validate_python(data)
    if not isinstance(node, DirectoryNode):
        raise TreeValidationError("Index root must be a directory", node.label)
    return node


class IndexWriter:
    """
    Generates the index files for a content root.
    """

    def __init__(self, content_root: Union[str, Path], settings: Optional[IndexSettings] = None):
        """
        Initialize the index writer.

        Args:
            content_root: Directory holding the documents
            settings: Index settings shared with the tree builder
        """
        self.content_root = Path(content_root)
        self.settings = settings or IndexSettings()
        self.builder = TreeBuilder(self.settings)

    def _subfolders(self) -> List[os.DirEntry]:
        if not self.content_root.is_dir():
            raise MissingResourceError("Content directory not found", self.content_root)
        excluded = {name.lower() for name in self.settings.exclude_folders}
        with os.scandir(self.content_root) as entries:
            return [e for e in entries if e.is_dir() and e.name.lower() not in excluded]

    def write_folder_index(self, folder_name: str) -> Path:
        """
        Build, write and validate the index of one top-level subfolder.

        Args:
            folder_name: Name of the subfolder below the content root

        Returns:
            Path of the written index file

        Raises:
            TreeValidationError: If the written index fails validation
        """
        out_path = self.content_root / folder_name / self.settings.index_file_name
        if out_path.exists():
            out_path.unlink()

        tree = self.builder.build(self.content_root, folder_name)
        write_json(out_path, tree.to_index())
        logging.info(f"Generated: {out_path}")

        with open(out_path, 'r', encoding='utf-8') as f:
            validate_tree(json.load(f))
        logging.info(f"Validation passed for {out_path}")
        return out_path

    def write_folder_indexes(self) -> List[Path]:
        """Write the index of every non-excluded top-level subfolder."""
        return [self.write_folder_index(entry.name) for entry in self._subfolders()]

    def build_root_index(self) -> Dict[str, Any]:
        """
        Aggregate the subfolder indexes into one root tree.

        Subfolders without an index are left out; an unreadable index is
        skipped with a warning.
        """
        children = []
        for entry in self._subfolders():
            index_path = Path(entry.path) / self.settings.index_file_name
            if not index_path.is_file():
                continue
            try:
                with open(index_path, 'r', encoding='utf-8') as f:
                    children.append(json.load(f))
            except (OSError, json.JSONDecodeError) as e:
                logging.warning(f"Could not parse {index_path}: {e}")

        return {
            "label": self.settings.root_label,
            "type": "directory",
            "children": children
        }

    def write_root_index(self, output_path: Union[str, Path]) -> Path:
        """
        Write the aggregated root index.

        Args:
            output_path: Destination of the root index

        Returns:
            The destination path
        """
        output_path = Path(output_path)
        root_index = self.build_root_index()
        validate_tree(root_index)
        write_json(output_path, root_index)
        logging.info(f"Generated: {output_path} ({len(root_index['children'])} folders)")
        return output_path

"""
Checksum store for docbinder.

Keeps a flat JSON record mapping each document's relative path to the SHA-256
digest of its bytes. The record is rewritten wholesale on every save.
"""

import hashlib
import json
import logging
from pathlib import Path
from typing import Dict, List, Union


ChecksumMap = Dict[str, str]


def compute_digest(path: Union[str, Path]) -> str:
    """
    Calculate the SHA-256 hex digest of a file's raw bytes.

    Args:
        path: File to hash

    Returns:
        Hex-encoded digest
    """
    digest = hashlib.sha256()
    with open(path, 'rb') as f:
        for chunk in iter(lambda: f.read(65536), b""):
            digest.update(chunk)
    return digest.hexdigest()


class ChecksumStore:
    """
    Loads and saves the checksum map.
    """

    def __init__(self, store_path: Union[str, Path] = ".blog-checksum.json"):
        """
        Initialize the checksum store.

        Args:
            store_path: Location of the persisted checksum record
        """
        self.store_path = Path(store_path)

    compute_digest = staticmethod(compute_digest)

    def load(self) -> ChecksumMap:
        """Load the persisted map; a missing or malformed store yields an empty map."""
        if not self.store_path.exists():
            return {}
        try:
            with open(self.store_path, 'r', encoding='utf-8') as f:
                data = json.load(f)
        except (json.JSONDecodeError, OSError, UnicodeDecodeError) as e:
            logging.warning(f"Could not load checksum store {self.store_path}: {e}")
            return {}
        if not isinstance(data, dict):
            logging.warning(f"Checksum store {self.store_path} is not an object; ignoring it")
            return {}
        return {str(k): str(v) for k, v in data.items()}

    def save(self, checksums: ChecksumMap) -> None:
        """Overwrite the persisted map with ``checksums``."""
        self.store_path.parent.mkdir(parents=True, exist_ok=True)
        with open(self.store_path, 'w', encoding='utf-8') as f:
            json.dump(checksums, f, indent=2)

    def collect(self, root: Union[str, Path], extension: str = ".md") -> ChecksumMap:
        """
        Hash every document below ``root``.

        Args:
            root: Directory to scan recursively
            extension: Only files with this suffix are hashed

        Returns:
            Map of POSIX paths relative to root to digests
        """
        root = Path(root)
        checksums: ChecksumMap = {}
        for path in sorted(root.rglob(f"*{extension}")):
            if not path.is_file():
                continue
            try:
                checksums[path.relative_to(root).as_posix()] = compute_digest(path)
            except OSError as e:
                logging.warning(f"Failed to process {path}: {e}")
        return checksums

    def update(self, root: Union[str, Path], extension: str = ".md") -> ChecksumMap:
        """Recompute the checksums under ``root``, report changes and persist them."""
        previous = self.load()
        current = self.collect(root, extension)
        changed = changed_paths(previous, current)
        if changed:
            logging.info(f"{len(changed)} documents changed since the last run")
        self.save(current)
        logging.info(f"Updated checksums for {len(current)} files.")
        return current


def changed_paths(previous: ChecksumMap, current: ChecksumMap) -> List[str]:
    """Return the paths that are new in ``current`` or whose digest differs."""
    return [path for path, digest in current.items() if previous.get(path) != digest]

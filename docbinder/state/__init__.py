"""Persistent state kept between runs."""

from .checksums import ChecksumStore, compute_digest, changed_paths

__all__ = ["ChecksumStore", "compute_digest", "changed_paths"]

"""
Metadata extraction from document comment blocks.

Documents declare their metadata in the first HTML comment of the file:

    <!--
    title: "Singleton Pattern"
    tags: ["creational", "gof"]
    references: [
      { title: "GoF", url: "https://example.com/gof" },
    ]
    -->

Scalar values are kept as strings. Array-valued keys are parsed as JSON,
falling back to YAML flow syntax for trailing commas, single quotes and bare
keys. Extraction never raises: anything it cannot make sense of is dropped or
degraded to an empty list.
"""

import json
import logging
import re
from enum import Enum
from typing import Any, Dict, Iterable, List, Optional

import yaml


COMMENT_BLOCK_RE = re.compile(r"<!--(.*?)-->", re.DOTALL)
KEY_VALUE_RE = re.compile(r"^\s*([A-Za-z]+)\s*:\s*(.+)$")

DEFAULT_ARRAY_KEYS = ("tags", "references")


class ScanState(Enum):
    SCANNING = "scanning"
    BUFFERING_ARRAY = "buffering_array"


def load_lenient(text: str) -> Any:
    """
    Parse JSON, or the relaxed JSON people write by hand.

    Strict JSON is tried first. Otherwise the text is read as YAML flow
    syntax with tabs turned into spaces, since YAML does not allow tabs
    between tokens.

    Raises:
        yaml.YAMLError: If the text is neither
    """
    try:
        return json.loads(text)
    except json.JSONDecodeError:
        return yaml.safe_load(text.replace("\t", " "))


def parse_lenient_array(text: str) -> List[Any]:
    """
    Parse an array literal, returning an empty list if it is malformed.

    Args:
        text: Array source, e.g. ``['a', "b",]``

    Returns:
        The parsed list, or [] when the text is not a valid array
    """
    try:
        value = load_lenient(text)
    except yaml.YAMLError as e:
        logging.debug(f"Malformed metadata array {text!r}: {e}")
        return []
    if not isinstance(value, list):
        return []
    return value


def strip_quotes(value: str) -> str:
    if len(value) >= 2 and value[0] == value[-1] and value[0] in ("'", '"'):
        return value[1:-1]
    return value


class MetadataExtractor:
    """
    Line-oriented parser for a document's metadata comment block.

    The parser is a two-state machine. While SCANNING, each ``key: value``
    line assigns a value; an array-valued key whose value opens a bracket
    without closing it switches to BUFFERING_ARRAY, which collects lines until
    one ends with ``]`` and then parses the collected text. A block that ends
    while buffering assigns an empty list to the pending key.
    """

    def __init__(self, array_keys: Iterable[str] = DEFAULT_ARRAY_KEYS):
        self.array_keys = frozenset(array_keys)

    def extract(self, text: str) -> Dict[str, Any]:
        """
        Extract metadata from raw document text.

        Args:
            text: Full document content

        Returns:
            Mapping of metadata keys to values; empty when there is no comment block
        """
        match = COMMENT_BLOCK_RE.search(text)
        if not match:
            return {}

        meta: Dict[str, Any] = {}
        state = ScanState.SCANNING
        pending_key: Optional[str] = None
        buffer: List[str] = []

        for line in match.group(1).splitlines():
            if state is ScanState.BUFFERING_ARRAY:
                buffer.append(line)
                if line.strip().endswith("]"):
                    meta[pending_key] = parse_lenient_array("\n".join(buffer))
                    state, pending_key, buffer = ScanState.SCANNING, None, []
                continue

            key_value = KEY_VALUE_RE.match(line)
            if not key_value:
                continue

            key = key_value.group(1)
            value = key_value.group(2).strip()
            if value.endswith(","):
                value = value[:-1].rstrip()

            if key in self.array_keys and value.startswith("["):
                if value.endswith("]"):
                    meta[key] = parse_lenient_array(value)
                else:
                    state, pending_key, buffer = ScanState.BUFFERING_ARRAY, key, [value]
            else:
                meta[key] = strip_quotes(value)

        if state is ScanState.BUFFERING_ARRAY:
            logging.debug(f"Metadata array '{pending_key}' is never closed")
            meta[pending_key] = []

        return meta


def extract_metadata(text: str, array_keys: Iterable[str] = DEFAULT_ARRAY_KEYS) -> Dict[str, Any]:
    """Convenience wrapper around MetadataExtractor.extract."""
    return MetadataExtractor(array_keys).extract(text)

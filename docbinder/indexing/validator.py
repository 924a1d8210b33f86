"""
Structural validation of content trees.

Works on pydantic nodes and on the plain JSON read back from an index file,
so a persisted index can be checked before the conversion pipeline trusts it.
"""

from typing import Any, List, Mapping, Sequence, Union

from pydantic import BaseModel

from ..errors import TreeValidationError


NODE_TYPES = ("directory", "file")
FILE_REQUIRED_FIELDS = ("path", "date", "createdOn")


def validate_tree(node: Union[BaseModel, Mapping[str, Any]]) -> None:
    """
    Check every node of a tree, depth-first and pre-order.

    Args:
        node: Root of the tree, as a model or a JSON mapping

    Raises:
        TreeValidationError: On the first violation, with the dotted label path of the node
    """
    if isinstance(node, BaseModel):
        node = node.model_dump(mode="json", by_alias=True, exclude_none=True)
    _validate_node(node, [])


def _validate_node(node: Any, parents: List[str]) -> None:
    if not isinstance(node, Mapping):
        raise TreeValidationError(
            f"Node must be an object, got {type(node).__name__}", _label_path(parents)
        )

    label = node.get("label")
    here = parents + [str(label) if label else "?"]

    if not label or not node.get("type"):
        raise TreeValidationError("Missing label/type", _label_path(here))
    if node["type"] not in NODE_TYPES:
        raise TreeValidationError(f"Unknown node type '{node['type']}'", _label_path(here))

    if node["type"] == "file":
        for field in FILE_REQUIRED_FIELDS:
            if not node.get(field):
                raise TreeValidationError(f"Missing {field} for file", _label_path(here))

    children = node.get("children")
    if children is None:
        return
    if isinstance(children, (str, bytes)) or not isinstance(children, Sequence):
        raise TreeValidationError("children must be a list", _label_path(here))
    for child in children:
        _validate_node(child, here)


def _label_path(labels: Sequence[str]) -> str:
    return ".".join(labels)

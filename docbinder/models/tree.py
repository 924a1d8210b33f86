"""
Content tree models for docbinder.

A content tree mirrors a directory of documents: directories hold an ordered
list of children, files carry their repository path, creation dates and
whatever metadata their leading comment block declared. Both node types accept
extra fields so folder and document metadata can be merged onto them.
"""

from typing import Annotated, Iterator, List, Literal, Optional, Union
from pydantic import BaseModel, ConfigDict, Field


class FileNode(BaseModel):
    """
    A document in the content tree.
    """

    model_config = ConfigDict(extra="allow", populate_by_name=True)

    id: Optional[str] = Field(
        None,
        description="URL-safe slug of the file name"
    )

    label: str = Field(
        ...,
        description="Display name, the file name as found on disk"
    )

    type: Literal["file"] = Field(
        "file",
        description="Node discriminator"
    )

    path: str = Field(
        ...,
        description="Repository-relative, forward-slash path of the document"
    )

    date: str = Field(
        ...,
        description="Human-readable creation date (e.g. 'January 5, 2024')"
    )

    created_on: str = Field(
        ...,
        alias="createdOn",
        description="Sortable creation timestamp ('YYYY-MM-DD HH:MM:SS')"
    )


class DirectoryNode(BaseModel):
    """
    A directory in the content tree.
    """

    model_config = ConfigDict(extra="allow", populate_by_name=True)

    id: Optional[str] = Field(
        None,
        description="Slug of the folder metadata title, absent when no title is declared"
    )

    label: str = Field(
        ...,
        description="Display name, the directory name"
    )

    type: Literal["directory"] = Field(
        "directory",
        description="Node discriminator"
    )

    children: List["Node"] = Field(
        default_factory=list,
        description="Child nodes in filesystem enumeration order"
    )

    def iter_files(self) -> Iterator[FileNode]:
        """Yield every file below this directory in pre-order."""
        for child in self.children:
            if isinstance(child, DirectoryNode):
                yield from child.iter_files()
            else:
                yield child

    def to_index(self) -> dict:
        """Return the JSON-ready representation written to index files."""
        return self.model_dump(mode="json", by_alias=True, exclude_none=True)


Node = Annotated[Union[DirectoryNode, FileNode], Field(discriminator="type")]


# Enable forward references for the self-referencing tree
DirectoryNode.model_rebuild()

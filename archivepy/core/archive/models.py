"""Archive tree models."""
from dataclasses import dataclass
from enum import Enum
from typing import Dict, Any, Optional, List, Tuple, Iterator


class NodeKind(str, Enum):
    """Kind of a tree node."""
    FILE = 'file'
    DIRECTORY = 'directory'


@dataclass(frozen=True)
class ArchiveEntry:
    """
    One entry of an archive's flat listing.

    Attributes:
        path: '/'-separated entry path as stored in the container
        is_directory: Classification from container metadata (None = unknown)
        size: Uncompressed size in bytes (0 if unknown)
    """
    path: str
    is_directory: Optional[bool] = None
    size: int = 0


class TreeNode:
    """
    Node of an archive directory tree.

    Directory children are kept in a name-keyed dict; the sorted listing is
    computed on first request and cached until the children change.
    """

    def __init__(self, name: str, kind: NodeKind = NodeKind.DIRECTORY, path: str = ''):
        """Initializes node."""
        self.name = name
        self.kind = kind
        self.path = path
        self._children: Dict[str, 'TreeNode'] = {}
        self._listing: Optional[List[Tuple[str, 'TreeNode']]] = None

    @property
    def is_dir(self) -> bool:
        """Checks if node is directory."""
        return self.kind is NodeKind.DIRECTORY

    @property
    def is_file(self) -> bool:
        return self.kind is NodeKind.FILE

    @property
    def is_root(self) -> bool:
        return self.path == ''

    def __len__(self) -> int:
        return len(self._children)

    def __contains__(self, name: str) -> bool:
        return name in self._children

    def __iter__(self) -> Iterator['TreeNode']:
        for _, child in self.list_children():
            yield child

    def __repr__(self) -> str:
        return f"TreeNode({self.path or '/'!r}, {self.kind.value})"

    def get_child(self, name: str) -> Optional['TreeNode']:
        """Finds child by name."""
        return self._children.get(name)

    def add_child(self, child: 'TreeNode') -> 'TreeNode':
        """Adds (or replaces) a child node."""
        self._children[child.name] = child
        self._listing = None
        return child

    def change_kind(self, kind: NodeKind) -> None:
        """Re-declare the node; a node that becomes a file loses its children."""
        self.kind = kind
        if kind is NodeKind.FILE and self._children:
            self._children.clear()
        self._listing = None

    def list_children(self) -> List[Tuple[str, 'TreeNode']]:
        """Children as (name, node) sorted ascending by name."""
        if self._listing is None:
            self._listing = sorted(self._children.items(), key=lambda item: item[0])
        return self._listing

    def to_dict(self) -> Dict[str, Any]:
        """
        Nested export of the subtree below this node.

        Shape: {'dir': {'type': 'folder', 'children': {...}},
                'file.txt': {'type': 'file', 'path': 'dir/file.txt'}}
        """
        result: Dict[str, Any] = {}
        for name, child in self.list_children():
            if child.is_dir:
                result[name] = {'type': 'folder', 'children': child.to_dict()}
            else:
                result[name] = {'type': 'file', 'path': child.path}
        return result

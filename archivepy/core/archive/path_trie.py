"""Path trie: builds a directory tree from flat archive entry paths."""
from typing import Iterable, Iterator, List, Optional, Tuple, Union

from .models import ArchiveEntry, NodeKind, TreeNode
from ..exceptions import ConflictWarning, TreeConflictError
from ..logging import get_logger

logger = get_logger('archivepy.archive.trie')

EntryLike = Union[str, Tuple[str, Optional[bool]], ArchiveEntry]


def _classify(entry: EntryLike) -> Tuple[str, NodeKind]:
    """Split an entry into its path and File/Directory kind."""
    if isinstance(entry, ArchiveEntry):
        path, is_directory = entry.path, entry.is_directory
    elif isinstance(entry, tuple):
        path, is_directory = entry
    else:
        path, is_directory = entry, None

    if is_directory is None:
        # zip convention: directory entries end with '/'
        is_directory = path.endswith('/')

    return path, NodeKind.DIRECTORY if is_directory else NodeKind.FILE


def split_path(path: str) -> List[str]:
    """Path segments with empty ones (leading, trailing, doubled '/') dropped."""
    return [segment for segment in path.split('/') if segment]


class PathTrie:
    """
    Hierarchical tree keyed by path segments.

    Intermediate components are always materialized as directories, so the
    tree derives purely from the leaf paths. When one path is declared both
    as a file and as a directory the last declaration wins and a
    ConflictWarning is recorded; with strict=True a TreeConflictError is
    raised instead.

    Example:
        >>> trie = PathTrie.build(["a/b/c.txt", "a/e.txt"])
        >>> [name for name, _ in trie.list(trie.find("a"))]
        ['b', 'e.txt']
    """

    def __init__(self, strict: bool = False):
        self.root = TreeNode('', NodeKind.DIRECTORY, '')
        self.strict = strict
        self.conflicts: List[ConflictWarning] = []
        self.entry_count = 0

    @classmethod
    def build(cls, entries: Iterable[EntryLike], strict: bool = False) -> 'PathTrie':
        """Build a trie from a flat iterable of entries."""
        trie = cls(strict=strict)
        for entry in entries:
            trie.insert(entry)
        logger.debug(f"Built tree from {trie.entry_count} entries")
        return trie

    def insert(self, entry: EntryLike) -> Optional[TreeNode]:
        """
        Insert one entry.

        Args:
            entry: Path string, (path, is_directory) pair or ArchiveEntry

        Returns:
            The node for the entry, or None if the path has no segments
        """
        path, kind = _classify(entry)
        segments = split_path(path)
        if not segments:
            return None

        self.entry_count += 1
        node = self.root
        last = len(segments) - 1

        for i, segment in enumerate(segments):
            wanted = kind if i == last else NodeKind.DIRECTORY
            child = node.get_child(segment)

            if child is None:
                child = node.add_child(
                    TreeNode(segment, wanted, '/'.join(segments[:i + 1]))
                )
            elif child.kind is not wanted:
                self._resolve_conflict(child, wanted)

            node = child

        return node

    def _resolve_conflict(self, node: TreeNode, wanted: NodeKind) -> None:
        if self.strict:
            raise TreeConflictError(
                f"'{node.path}' declared as both {node.kind.value} and {wanted.value}",
                node.path
            )

        conflict = ConflictWarning(node.path, node.kind.value, wanted.value)
        self.conflicts.append(conflict)
        logger.warning(str(conflict))
        node.change_kind(wanted)

    def list(self, node: Optional[TreeNode] = None) -> List[Tuple[str, TreeNode]]:
        """Children of node (root by default) sorted ascending by name."""
        return (node if node is not None else self.root).list_children()

    def find(self, path: str) -> Optional[TreeNode]:
        """Resolves path from root node ('' or '/' is the root)."""
        current = self.root
        for segment in split_path(path):
            current = current.get_child(segment)
            if current is None:
                return None
        return current

    def walk(self, node: Optional[TreeNode] = None) -> Iterator[Tuple[str, TreeNode]]:
        """Depth-first (path, node) pairs below node, in sorted order."""
        for _, child in self.list(node):
            yield child.path, child
            if child.is_dir:
                yield from self.walk(child)

    @property
    def file_count(self) -> int:
        return sum(1 for _, node in self.walk() if node.is_file)

    @property
    def directory_count(self) -> int:
        return sum(1 for _, node in self.walk() if node.is_dir)

    def to_dict(self):
        """Nested dict export of the whole tree."""
        return self.root.to_dict()


def build_tree(entries: Iterable[EntryLike], strict: bool = False) -> TreeNode:
    """Build a tree and return its synthetic root node."""
    return PathTrie.build(entries, strict=strict).root

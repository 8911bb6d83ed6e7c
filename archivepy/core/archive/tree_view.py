"""Expand/collapse state for rendering an archive tree."""
from typing import FrozenSet, Iterable, Iterator, Optional, Tuple

from .models import TreeNode
from .path_trie import PathTrie, split_path

ROOT_PATH = ''


def normalize_path(path: str) -> str:
    """'/'-joined path with empty segments dropped ('' is the root)."""
    return '/'.join(split_path(path))


class TreeViewState:
    """
    Set of expanded node paths.

    The root is expanded by default, everything else starts collapsed.
    The state never touches the trie; rows are derived from it on demand.
    """

    def __init__(self, expanded: Iterable[str] = ()):
        self._expanded = {ROOT_PATH}
        self._expanded.update(normalize_path(path) for path in expanded)

    @property
    def expanded(self) -> FrozenSet[str]:
        return frozenset(self._expanded)

    def is_expanded(self, path: str) -> bool:
        return normalize_path(path) in self._expanded

    def toggle(self, path: str) -> bool:
        """Flip the path's membership; returns the new expanded state."""
        path = normalize_path(path)
        if path in self._expanded:
            self._expanded.discard(path)
            return False
        self._expanded.add(path)
        return True

    def expand(self, path: str) -> None:
        self._expanded.add(normalize_path(path))

    def collapse(self, path: str) -> None:
        self._expanded.discard(normalize_path(path))

    def collapse_all(self) -> None:
        """Collapse everything except the root."""
        self._expanded = {ROOT_PATH}

    def expand_all(self, trie: PathTrie, depth: Optional[int] = None) -> None:
        """
        Expand every directory, or only those less than depth levels deep.

        depth=1 expands the top-level directories only.
        """
        for path, node in trie.walk():
            if not node.is_dir:
                continue
            if depth is not None and len(split_path(path)) > depth:
                continue
            self._expanded.add(path)

    def visible_rows(self, trie: PathTrie) -> Iterator[Tuple[int, str, TreeNode]]:
        """
        Lazily yield (depth, path, node) for every visible node.

        Children of a collapsed directory are never listed, so only the
        expanded part of a large tree is ever enumerated.
        """
        if ROOT_PATH not in self._expanded:
            return
        yield from self._rows(trie.root, 0)

    def _rows(self, node: TreeNode, depth: int) -> Iterator[Tuple[int, str, TreeNode]]:
        for _, child in node.list_children():
            yield depth, child.path, child
            if child.is_dir and child.path in self._expanded:
                yield from self._rows(child, depth + 1)

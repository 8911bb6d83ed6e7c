"""Archive inspection: entry readers, path trie and tree view state."""
from .models import ArchiveEntry, NodeKind, TreeNode
from .path_trie import PathTrie, build_tree, split_path
from .tree_view import TreeViewState, normalize_path
from .readers import ZipEntryReader, ManifestReader, RangeZipReader, MAX_TAIL_SCAN, MAX_CD_SIZE
from .inspector import ArchiveInspector

__all__ = [
    'ArchiveEntry',
    'NodeKind',
    'TreeNode',
    'PathTrie',
    'build_tree',
    'split_path',
    'TreeViewState',
    'normalize_path',
    'ZipEntryReader',
    'ManifestReader',
    'RangeZipReader',
    'MAX_TAIL_SCAN',
    'MAX_CD_SIZE',
    'ArchiveInspector',
]

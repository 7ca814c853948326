"""
LinkTree Sources: File Iterator.

Walks storage roots and yields the candidate files the builder links.

The iterator is single-pass: once exhausted it stays exhausted, and iterating
it again yields nothing. Build a new FileIterator to walk the roots again.
"""

import os
from typing import Callable, FrozenSet, Iterator, List, Optional, Sequence, Tuple

from linktree.infrastructure.logger import Logger, get_logger

FileFilter = Callable[[str], bool]


class FileIterator:
    """Depth-first walk over one or more storage roots.

    Roots are visited in the order given. Within a directory, entries are
    visited in sorted name order, and files are yielded before descending into
    subdirectories. Yielded paths are joined onto the root as it was given,
    so relative roots produce relative paths.

    Attributes:
        roots: Storage roots to walk
        file_filter: Optional predicate; files for which it returns False
                     are not yielded
    """

    def __init__(
        self,
        roots: Sequence[str],
        file_filter: Optional[FileFilter] = None,
        follow_symlinks: bool = True,
        logger: Optional[Logger] = None,
    ):
        """
        Initialize the iterator.

        Args:
            roots: Storage roots to walk
            file_filter: Optional predicate over candidate file paths
            follow_symlinks: Whether to descend into symlinked directories
            logger: Logger for warnings about unusable roots
        """
        self.roots = list(roots)
        self.file_filter = file_filter
        self.follow_symlinks = follow_symlinks
        self.logger = logger or get_logger()
        self._walker: Optional[Iterator[str]] = None

    def __iter__(self) -> "FileIterator":
        return self

    def __next__(self) -> str:
        if self._walker is None:
            self._walker = self._walk_roots()
        return next(self._walker)

    def _accepts(self, path: str) -> bool:
        return self.file_filter is None or bool(self.file_filter(path))

    def _walk_roots(self) -> Iterator[str]:
        for root in self.roots:
            if os.path.isfile(root):
                if self._accepts(root):
                    yield root
            elif os.path.isdir(root):
                yield from self._walk_directory(root)
            else:
                self.logger.warning("Storage root does not exist, skipping", root=root)

    def _walk_directory(
        self, directory: str, ancestors: FrozenSet[Tuple[int, int]] = frozenset()
    ) -> Iterator[str]:
        st = os.stat(directory)
        identity = (st.st_dev, st.st_ino)
        # A followed symlink pointing back up the tree
        if identity in ancestors:
            self.logger.warning("Symlink loop, skipping", directory=directory)
            return
        ancestors = ancestors | {identity}

        files: List[str] = []
        subdirs: List[str] = []

        with os.scandir(directory) as entries:
            for entry in sorted(entries, key=lambda e: e.name):
                path = os.path.join(directory, entry.name)
                if entry.is_dir(follow_symlinks=self.follow_symlinks):
                    subdirs.append(path)
                elif entry.is_file():
                    files.append(path)

        for path in files:
            if self._accepts(path):
                yield path

        for path in subdirs:
            yield from self._walk_directory(path, ancestors)

    def __repr__(self) -> str:
        return f"{self.__class__.__name__}(roots={self.roots!r})"

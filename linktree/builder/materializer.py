"""
LinkTree Builder: Path Materializer.

Turns one (file, metadata, template) triple into a link on disk:

    1. look up each template field; absent or empty values become "-"
    2. sanitize each segment: path separators become "-", and a leading "."
       becomes "_"
    3. join the segments under the link root
    4. create the destination directory and any missing parents
    5. place a link named after the source file in that directory

Example:
    metadata {"religion": "Christian", "date": "Dec25"} and template
    ("tradition", "date") produce the directory "<link_root>/-/Dec25".
"""

import os
from dataclasses import dataclass
from enum import Enum
from typing import List, Optional, Sequence

from linktree.core.constants import (
    LEADING_DOT_REPLACEMENT,
    PLACEHOLDER,
    SEPARATOR_REPLACEMENT,
    LinkMode,
    Metadata,
    OnExisting,
)
from linktree.core.errors import LinkCreationError
from linktree.infrastructure.logger import Logger, get_logger

_SEPARATORS = {"/", os.sep} | ({os.altsep} if os.altsep else set())


def sanitize_segment(segment: str) -> str:
    """
    Make a metadata value safe to use as a single path component.

    Args:
        segment: Raw metadata value

    Returns:
        The value with every path separator replaced by "-" and a leading
        "." replaced by "_"
    """
    for separator in _SEPARATORS:
        segment = segment.replace(separator, SEPARATOR_REPLACEMENT)
    if segment.startswith("."):
        segment = LEADING_DOT_REPLACEMENT + segment[1:]
    return segment


def path_segments(metadata: Metadata, template: Sequence[str]) -> List[str]:
    """
    Derive the sanitized path segments for one template.

    Fields missing from the metadata, or mapped to None or "", yield the
    placeholder. The result always has one segment per template field.

    Args:
        metadata: Field name to value mapping for one file
        template: Ordered metadata field names

    Returns:
        List of sanitized segments, in template order
    """
    segments = []
    for field_name in template:
        value = metadata.get(field_name)
        if value is None or len(str(value)) == 0:
            segments.append(PLACEHOLDER)
        else:
            segments.append(sanitize_segment(str(value)))
    return segments


def destination_directory(link_root: str, metadata: Metadata, template: Sequence[str]) -> str:
    """Directory under link_root where a file's link for this template goes."""
    return os.path.join(link_root, *path_segments(metadata, template))


def ensure_directory(path: str, base: Optional[str] = None) -> int:
    """
    Create path and any missing parents.

    Args:
        path: Directory to create
        base: If given, directories at or above base are created when
              missing but not counted

    Returns:
        Number of directories actually created below base (0 if path
        already existed)

    Raises:
        OSError: If a directory cannot be created
    """
    stop = os.path.abspath(base) if base is not None else None
    missing = []
    current = os.path.abspath(path)
    while current != stop and not os.path.isdir(current):
        missing.append(current)
        parent = os.path.dirname(current)
        if parent == current:
            break
        current = parent

    os.makedirs(path, exist_ok=True)
    return len(missing)


class Outcome(Enum):
    """What happened to one destination link."""

    CREATED = "created"
    EXISTING = "existing"  # Left alone under the skip policy


@dataclass(frozen=True)
class MaterializeResult:
    """Result of materializing one template for one file."""

    outcome: Outcome
    link_path: str
    directories_created: int = 0


class PathMaterializer:
    """
    Creates destination directories and links for the builder.

    Attributes:
        link_root: Directory under which link trees are built
        link_mode: Symbolic or hard links
        on_existing: Policy when the link path is already taken
    """

    def __init__(
        self,
        link_root: str,
        link_mode: LinkMode = LinkMode.SYMBOLIC,
        on_existing: OnExisting = OnExisting.FAIL,
        logger: Optional[Logger] = None,
    ):
        self.link_root = link_root
        self.link_mode = link_mode
        self.on_existing = on_existing
        self.logger = logger or get_logger()

    def materialize(
        self, source: str, basename: str, metadata: Metadata, template: Sequence[str]
    ) -> MaterializeResult:
        """
        Place one link for source according to template.

        Args:
            source: Absolute path of the source file (the link target)
            basename: File name given to the link
            metadata: Metadata of the source file
            template: Ordered metadata field names

        Returns:
            MaterializeResult; outcome is EXISTING only under the skip policy

        Raises:
            LinkCreationError: If the directory or link cannot be created.
                Under the fail policy this includes an already existing link.
        """
        directory = destination_directory(self.link_root, metadata, template)

        try:
            created = ensure_directory(directory, base=self.link_root)
        except OSError as e:
            raise LinkCreationError(directory, source, e) from e

        link_path = os.path.join(directory, basename)

        # lexists: a dangling symlink still occupies the name
        if self.on_existing is OnExisting.SKIP and os.path.lexists(link_path):
            self.logger.debug("Link exists, skipping", link=link_path)
            return MaterializeResult(Outcome.EXISTING, link_path, created)

        self.create_link(source, link_path)
        self.logger.debug("Link created", link=link_path, target=source)
        return MaterializeResult(Outcome.CREATED, link_path, created)

    def create_link(self, source: str, link_path: str) -> None:
        """
        Create a hard or symbolic link at link_path pointing to source.

        Raises:
            LinkCreationError: If the OS refuses to create the link
        """
        try:
            if self.link_mode is LinkMode.HARD:
                os.link(source, link_path)
            else:
                os.symlink(source, link_path)
        except OSError as e:
            raise LinkCreationError(link_path, source, e) from e

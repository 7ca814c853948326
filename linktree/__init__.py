"""LinkTree - builds trees of links organized by file metadata."""

from linktree.builder import BuilderConfig, LinkTreeBuilder, RunStats, SidecarLinkTreeBuilder
from linktree.core.constants import LINKTREE_VERSION, LinkMode, OnExisting
from linktree.core.errors import (
    ConfigurationError,
    LinkCreationError,
    LinkTreeError,
    MetadataRetrievalError,
    MissingMetadataSourceError,
)

__version__ = LINKTREE_VERSION

__all__ = [
    "BuilderConfig",
    "LinkTreeBuilder",
    "SidecarLinkTreeBuilder",
    "RunStats",
    "LinkMode",
    "OnExisting",
    "LinkTreeError",
    "ConfigurationError",
    "MissingMetadataSourceError",
    "MetadataRetrievalError",
    "LinkCreationError",
]

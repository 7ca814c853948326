"""
LinkTree Sources - Pluggable collaborators of the builder.

The builder pulls candidate files from a file iterator and asks a metadata
source for each file's metadata. This package ships default implementations
of both, plus the pattern-based file filter the iterator applies.
"""

from linktree.sources.iterator import FileIterator
from linktree.sources.metadata import (
    CallableMetadataSource,
    MetadataSource,
    YamlIndexMetadata,
    YamlSidecarMetadata,
    as_metadata_source,
)
from linktree.sources.patterns import PatternFilter, PatternMatcher

__all__ = [
    "FileIterator",
    "MetadataSource",
    "CallableMetadataSource",
    "YamlSidecarMetadata",
    "YamlIndexMetadata",
    "as_metadata_source",
    "PatternFilter",
    "PatternMatcher",
]

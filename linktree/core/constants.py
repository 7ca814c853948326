"""
LinkTree Core: Constants and Type Definitions

This module provides system-wide constants, error codes, and enumerations
shared by the builder, the metadata sources and the CLI.
"""
from enum import Enum, IntEnum
from typing import Mapping, Optional, Sequence, TypeAlias

# Version information
LINKTREE_VERSION = "1.0.0"

# Segment substituted for absent or empty metadata values
PLACEHOLDER = "-"

# Replacement for path separators found inside metadata values
SEPARATOR_REPLACEMENT = "-"

# Replacement for a leading dot in a segment
LEADING_DOT_REPLACEMENT = "_"


# Error codes (0-9 range)
class ErrorCode(IntEnum):
    """Standardized error codes for LinkTree operations."""

    SUCCESS = 0  # Operation completed successfully
    INVALID_INPUT = 1  # Bad option, invalid configuration
    NOT_FOUND = 2  # File or resource doesn't exist
    PERMISSION_DENIED = 3  # Insufficient permissions
    CONFLICT = 4  # Destination already exists
    DEPENDENCY_ERROR = 5  # Missing collaborator (metadata source)
    INTERNAL_ERROR = 6  # Unexpected OS or library failure


# Type aliases for clarity
FilePath: TypeAlias = str
FieldName: TypeAlias = str
Template: TypeAlias = Sequence[FieldName]
Metadata: TypeAlias = Mapping[FieldName, Optional[str]]


class LinkMode(Enum):
    """Kind of link placed in the tree."""

    SYMBOLIC = "symbolic"
    HARD = "hard"


class OnExisting(Enum):
    """Policy applied when a destination link path already exists."""

    FAIL = "fail"  # Attempt creation anyway and let the OS refuse
    SKIP = "skip"  # Leave the existing entry alone


# Configuration keys
class ConfigKey:
    """Configuration key constants."""

    # Builder options
    STORAGE_ROOT = "storage_root"
    STORAGE_ROOTS = "storage_roots"
    FILE_FILTER = "file_filter"
    LINK_ROOT = "link_root"
    METADATA_GETTER = "metadata_getter"
    LINK_PATHS = "link_paths"
    HARDLINK = "hardlink"
    ON_EXISTING = "on_existing"

    # Config file sections
    ROOT = "linktree"
    FILTER = "filter"
    FILTER_INCLUDE = "include"
    FILTER_EXCLUDE = "exclude"
    METADATA = "metadata"
    METADATA_TYPE = "type"
    METADATA_SUFFIX = "suffix"
    METADATA_REQUIRED = "required"
    METADATA_INDEX_FILE = "index_file"
    LOGGING = "logging"


BUILDER_OPTIONS = frozenset(
    {
        ConfigKey.STORAGE_ROOT,
        ConfigKey.STORAGE_ROOTS,
        ConfigKey.FILE_FILTER,
        ConfigKey.LINK_ROOT,
        ConfigKey.METADATA_GETTER,
        ConfigKey.LINK_PATHS,
        ConfigKey.HARDLINK,
        ConfigKey.ON_EXISTING,
    }
)

DEFAULT_LINK_ROOT = "."
DEFAULT_SIDECAR_SUFFIX = ".yaml"

# Default configuration values
DEFAULT_CONFIG = {
    ConfigKey.ROOT: {
        ConfigKey.STORAGE_ROOTS: [],
        ConfigKey.LINK_ROOT: DEFAULT_LINK_ROOT,
        ConfigKey.LINK_PATHS: [],
        ConfigKey.HARDLINK: False,
        ConfigKey.ON_EXISTING: OnExisting.FAIL.value,
        ConfigKey.FILTER: {
            ConfigKey.FILTER_INCLUDE: [],
            ConfigKey.FILTER_EXCLUDE: [],
        },
        ConfigKey.METADATA: {
            ConfigKey.METADATA_TYPE: "sidecar",
            ConfigKey.METADATA_SUFFIX: DEFAULT_SIDECAR_SUFFIX,
            ConfigKey.METADATA_REQUIRED: False,
            ConfigKey.METADATA_INDEX_FILE: None,
        },
        ConfigKey.LOGGING: {
            "level": "INFO",
            "file": None,
        },
    }
}

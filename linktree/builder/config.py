"""
LinkTree Builder: Configuration.

BuilderConfig is the validated, immutable form of the builder options. It is
built from a raw option mapping with BuilderConfig.from_options(), which
rejects invalid combinations before anything touches the filesystem.

Recognized options:
    storage_root    - a path, or a list of paths, to search for files
    storage_roots   - same as storage_root; give one or the other
    file_filter     - predicate over candidate file paths
    link_root       - directory under which the link trees are built ('.')
    metadata_getter - callable or MetadataSource returning a file's metadata
    link_paths      - list of templates, each a list of metadata field names
    hardlink        - if true, create hard links instead of symbolic links
    on_existing     - 'fail' (default) or 'skip'
"""

from dataclasses import dataclass
from typing import Any, Callable, Dict, Optional, Tuple

from linktree.core import validators
from linktree.core.constants import DEFAULT_LINK_ROOT, ConfigKey, LinkMode, OnExisting


@dataclass(frozen=True)
class BuilderConfig:
    """
    Validated builder parameters.

    Attributes:
        storage_roots: Paths searched for source files, in order
        link_root: Directory under which all link trees are built
        link_paths: Templates, each an ordered tuple of metadata field names
        file_filter: Optional predicate applied by the file iterator
        metadata_getter: Optional metadata source; may be supplied later
                         through LinkTreeBuilder.set_metadata_getter()
        link_mode: Symbolic or hard links
        on_existing: Policy when a destination link already exists
    """

    storage_roots: Tuple[str, ...]
    link_root: str = DEFAULT_LINK_ROOT
    link_paths: Tuple[Tuple[str, ...], ...] = ()
    file_filter: Optional[Callable[[str], bool]] = None
    metadata_getter: Optional[Callable[[str], Any]] = None
    link_mode: LinkMode = LinkMode.SYMBOLIC
    on_existing: OnExisting = OnExisting.FAIL

    @classmethod
    def from_options(cls, options: Optional[Dict[str, Any]] = None) -> "BuilderConfig":
        """
        Validate raw options and build a config.

        Args:
            options: Mapping of the option names listed in the module docstring

        Returns:
            BuilderConfig

        Raises:
            ConfigurationError: If the options are invalid or contradictory
        """
        options = dict(options or {})
        validators.validate_option_keys(options)

        on_existing = validators.validate_on_existing(options.get(ConfigKey.ON_EXISTING))
        storage_roots = validators.normalize_storage_roots(options)
        link_paths = validators.validate_link_paths(options.get(ConfigKey.LINK_PATHS))

        file_filter = options.get(ConfigKey.FILE_FILTER)
        validators.validate_callable(ConfigKey.FILE_FILTER, file_filter)

        metadata_getter = options.get(ConfigKey.METADATA_GETTER)
        validators.validate_callable(ConfigKey.METADATA_GETTER, metadata_getter)

        link_root = validators.validate_link_root(options.get(ConfigKey.LINK_ROOT))

        return cls(
            storage_roots=storage_roots,
            link_root=link_root,
            link_paths=link_paths,
            file_filter=file_filter,
            metadata_getter=metadata_getter,
            link_mode=LinkMode.HARD if options.get(ConfigKey.HARDLINK) else LinkMode.SYMBOLIC,
            on_existing=on_existing,
        )

    @property
    def hardlink(self) -> bool:
        return self.link_mode is LinkMode.HARD

    @property
    def skip_existing(self) -> bool:
        return self.on_existing is OnExisting.SKIP

"""
LinkTree Builder: Traversal Driver.

LinkTreeBuilder pulls files from the file iterator, fetches each file's
metadata once, and hands the file to the path materializer for every
configured template.

Example:
    LinkTreeBuilder.build_tree({
        "storage_root": "trove/files",
        "link_root": "trove/links",
        "metadata_getter": lookup_metadata,
        "link_paths": [
            ["author", "subject"],
            ["subject", "author"],
        ],
    })

Skip policy:
    Under on_existing="skip", the first template whose link already exists
    ends processing of that file; the remaining templates are not applied to
    it during this run. Under "fail", the existing link makes the run abort
    with LinkCreationError.
"""

import os
from dataclasses import dataclass
from typing import Any, Callable, Dict, Iterable, Optional, Union

from linktree.builder.config import BuilderConfig
from linktree.builder.materializer import Outcome, PathMaterializer
from linktree.core.constants import DEFAULT_SIDECAR_SUFFIX, Metadata
from linktree.core.errors import ConfigurationError, LinkTreeError, MissingMetadataSourceError
from linktree.infrastructure.logger import Logger, get_logger
from linktree.sources.iterator import FileIterator
from linktree.sources.metadata import (
    MetadataGetter,
    MetadataSource,
    YamlSidecarMetadata,
    as_metadata_source,
)


@dataclass
class RunStats:
    """Counters collected during one run."""

    files_seen: int = 0
    links_created: int = 0
    links_skipped: int = 0
    directories_created: int = 0

    def as_dict(self) -> Dict[str, int]:
        return {
            "files_seen": self.files_seen,
            "links_created": self.links_created,
            "links_skipped": self.links_skipped,
            "directories_created": self.directories_created,
        }


class LinkTreeBuilder:
    """
    Builds link trees from file metadata.

    A builder is meant to be run once: the default file iterator is
    single-pass, so a second run() finds no files.

    Attributes:
        config: Validated builder configuration
        iterator: Iterable of candidate file paths
        metadata_source_locked: Class flag; when True the builder supplies its
            own metadata source and rejects set_metadata_getter()
    """

    metadata_source_locked = False

    def __init__(
        self,
        config: BuilderConfig,
        iterator: Optional[Iterable[str]] = None,
        logger: Optional[Logger] = None,
    ):
        """
        Initialize the builder.

        Args:
            config: Validated configuration
            iterator: Candidate file paths; defaults to a FileIterator over
                      the configured storage roots and file filter
            logger: Logger instance
        """
        self.config = config
        self.logger = logger or get_logger()
        self.iterator = iter(
            iterator
            if iterator is not None
            else FileIterator(config.storage_roots, config.file_filter, logger=self.logger)
        )
        self.materializer = PathMaterializer(
            config.link_root,
            link_mode=config.link_mode,
            on_existing=config.on_existing,
            logger=self.logger,
        )

        self._metadata_source: Optional[MetadataSource] = self.default_metadata_source()
        if config.metadata_getter is not None:
            self.set_metadata_getter(config.metadata_getter)

    @classmethod
    def from_options(cls, options: Optional[Dict[str, Any]] = None, **kwargs) -> "LinkTreeBuilder":
        """Validate raw options and create a builder."""
        return cls(BuilderConfig.from_options(options), **kwargs)

    @classmethod
    def build_tree(cls, options: Optional[Dict[str, Any]] = None, **kwargs) -> RunStats:
        """Build a link tree in one call; same as ``from_options(options).run()``."""
        return cls.from_options(options, **kwargs).run()

    def default_metadata_source(self) -> Optional[MetadataSource]:
        """Metadata source used when none is configured; None for the base builder."""
        return None

    def set_metadata_getter(self, getter: Union[MetadataSource, MetadataGetter]) -> None:
        """
        Set the routine that fetches a file's metadata.

        Args:
            getter: MetadataSource, or a callable taking an absolute path

        Raises:
            ConfigurationError: If this builder's metadata source is locked
        """
        if self.metadata_source_locked:
            raise ConfigurationError(
                f"{self.__class__.__name__} supplies its own metadata source; "
                "metadata_getter cannot be set"
            )
        self._metadata_source = as_metadata_source(getter)

    def metadata_for_file(self, filename: str) -> Metadata:
        """
        Return the metadata for a file.

        Errors raised by the metadata source propagate unchanged.

        Raises:
            MissingMetadataSourceError: If no metadata source is configured
        """
        if self._metadata_source is None:
            raise MissingMetadataSourceError()
        return self._metadata_source.metadata_for(filename) or {}

    def run(self) -> RunStats:
        """
        Work through the iterator, building the links for each file.

        Returns:
            RunStats for this run

        Raises:
            LinkTreeError: On the first fatal error; links created before it
                remain on disk
        """
        stats = RunStats()
        templates = self.config.link_paths

        if not templates:
            self.logger.warning("No link paths configured; no links will be created")

        self.logger.info(
            "Building link tree",
            link_root=self.config.link_root,
            templates=len(templates),
            mode=self.config.link_mode.value,
        )

        try:
            for filename in self.iterator:
                stats.files_seen += 1
                self._process_file(filename, stats)
        except LinkTreeError as e:
            self.logger.error("Link tree build aborted", error=e.message, **stats.as_dict())
            raise

        self.logger.info("Link tree built", **stats.as_dict())
        return stats

    def _process_file(self, filename: str, stats: RunStats) -> None:
        abs_file = os.path.abspath(filename)
        basename = os.path.basename(filename)

        with self.logger.add_context(file=abs_file):
            metadata = self.metadata_for_file(abs_file)

            for template in self.config.link_paths:
                result = self.materializer.materialize(abs_file, basename, metadata, template)
                stats.directories_created += result.directories_created

                if result.outcome is Outcome.EXISTING:
                    # Remaining templates for this file are not applied
                    stats.links_skipped += 1
                    return

                stats.links_created += 1


class SidecarLinkTreeBuilder(LinkTreeBuilder):
    """
    Builder whose metadata always comes from YAML sidecar files.

    Metadata for ``notes/a.txt`` is read from ``notes/a.txt.yaml``. The
    sidecar files themselves are never linked.
    """

    metadata_source_locked = True

    def __init__(
        self,
        config: BuilderConfig,
        iterator: Optional[Iterable[str]] = None,
        logger: Optional[Logger] = None,
        sidecar_suffix: str = DEFAULT_SIDECAR_SUFFIX,
        require_sidecar: bool = False,
    ):
        """
        Args:
            config: Validated configuration; must not carry a metadata_getter
            iterator: Candidate file paths; defaults to a FileIterator that
                      leaves out sidecar files
            logger: Logger instance
            sidecar_suffix: Appended to a file path to locate its sidecar
            require_sidecar: Abort when a file has no sidecar

        Raises:
            ConfigurationError: If config carries a metadata_getter
        """
        self.sidecar_source = YamlSidecarMetadata(suffix=sidecar_suffix, required=require_sidecar)

        if iterator is None:
            iterator = FileIterator(
                config.storage_roots,
                self._skip_sidecars(config.file_filter),
                logger=logger or get_logger(),
            )
        super().__init__(config, iterator=iterator, logger=logger)

    def _skip_sidecars(self, file_filter: Optional[Callable[[str], bool]]) -> Callable[[str], bool]:
        is_sidecar = self.sidecar_source.is_sidecar

        def accepts(path: str) -> bool:
            if is_sidecar(path):
                return False
            return file_filter is None or bool(file_filter(path))

        return accepts

    def default_metadata_source(self) -> Optional[MetadataSource]:
        return self.sidecar_source

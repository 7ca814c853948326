#!/usr/bin/env python3
"""Command-line interface for LinkTree.

This module provides the ``linktree`` command:
- Argument parsing and validation
- Configuration file loading and merging with arguments
- Metadata source and file filter selection
- Running the builder and reporting the result

Example:
    >>> from linktree.cli import parse_arguments
    >>> args = parse_arguments(["--storage-root", "trove/files", "--link-path", "author,subject"])
"""

import argparse
import os
import sys
from pathlib import Path
from typing import Any, Dict, List, Optional

from linktree.builder import LinkTreeBuilder, RunStats, SidecarLinkTreeBuilder
from linktree.core.constants import (
    DEFAULT_SIDECAR_SUFFIX,
    LINKTREE_VERSION,
    ConfigKey,
    OnExisting,
)
from linktree.core.errors import LinkTreeError
from linktree.infrastructure.config_manager import ConfigManager, ConfigSource
from linktree.infrastructure.logger import Logger, set_global_logger
from linktree.sources.iterator import FileFilter
from linktree.sources.metadata import YamlIndexMetadata
from linktree.sources.patterns import PatternFilter

DESCRIPTION = "LinkTree - build trees of links organized by file metadata"

METADATA_SIDECAR = "sidecar"
METADATA_INDEX = "index"


class CLIError(Exception):
    """Exception raised for CLI-related errors."""

    pass


def parse_arguments(args: Optional[List[str]] = None) -> argparse.Namespace:
    """
    Parse command-line arguments.

    Args:
        args: Argument list to parse (defaults to sys.argv[1:])

    Returns:
        Parsed arguments namespace

    Raises:
        SystemExit: On invalid arguments or --help/--version
        CLIError: If arguments are syntactically valid but unusable
    """
    parser = argparse.ArgumentParser(
        prog="linktree",
        description=DESCRIPTION,
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  # Link files by religion/date and tradition/date, metadata in sidecars
  linktree --storage-root trove/files --link-root trove/links \\
           --link-path religion,date --link-path tradition,date

  # Re-run without failing on links that already exist
  linktree --config linktree.yaml --on-existing skip

  # Hard links, metadata for all files in one YAML index
  linktree --config linktree.yaml --hardlink --metadata index --metadata-index meta.yaml
        """,
    )

    parser.add_argument(
        "-v",
        "--version",
        action="version",
        version=f"%(prog)s {LINKTREE_VERSION}",
    )

    parser.add_argument(
        "-c",
        "--config",
        metavar="FILE",
        type=str,
        help="Configuration file path (YAML format)",
    )

    # Tree options
    tree_group = parser.add_argument_group("tree options")

    tree_group.add_argument(
        "-s",
        "--storage-root",
        metavar="DIR",
        nargs="+",
        dest="storage_roots",
        help="Directories to search for files (space-separated)",
    )

    tree_group.add_argument(
        "-l",
        "--link-root",
        metavar="DIR",
        help="Directory under which link trees are built (default: .)",
    )

    tree_group.add_argument(
        "-p",
        "--link-path",
        metavar="FIELD[,FIELD...]",
        action="append",
        dest="link_paths",
        help="Comma-separated metadata fields forming one tree (repeatable)",
    )

    tree_group.add_argument(
        "--hardlink",
        action="store_true",
        default=None,
        help="Create hard links instead of symbolic links",
    )

    tree_group.add_argument(
        "--on-existing",
        choices=[p.value for p in OnExisting],
        help="What to do when a link already exists (default: fail)",
    )

    # Filter options
    filter_group = parser.add_argument_group("filter options")

    filter_group.add_argument(
        "--include",
        metavar="PATTERN",
        action="append",
        help="Only link files matching this glob (or regex:PATTERN); repeatable",
    )

    filter_group.add_argument(
        "--exclude",
        metavar="PATTERN",
        action="append",
        help="Never link files matching this glob (or regex:PATTERN); repeatable",
    )

    # Metadata options
    meta_group = parser.add_argument_group("metadata options")

    meta_group.add_argument(
        "--metadata",
        choices=[METADATA_SIDECAR, METADATA_INDEX],
        help="Where file metadata comes from (default: sidecar)",
    )

    meta_group.add_argument(
        "--metadata-suffix",
        metavar="SUFFIX",
        help=f"Sidecar file suffix (default: {DEFAULT_SIDECAR_SUFFIX})",
    )

    meta_group.add_argument(
        "--metadata-index",
        metavar="FILE",
        help="YAML index mapping file names to metadata",
    )

    meta_group.add_argument(
        "--require-metadata",
        action="store_true",
        default=None,
        help="Abort when a file has no sidecar",
    )

    # Logging options
    log_group = parser.add_argument_group("logging options")

    log_group.add_argument(
        "--debug",
        action="store_true",
        help="Enable debug logging",
    )

    log_group.add_argument(
        "--log-file",
        metavar="FILE",
        type=str,
        help="Also write log messages to this file",
    )

    parsed = parser.parse_args(args)

    _validate_arguments(parsed)

    return parsed


def _validate_arguments(args: argparse.Namespace) -> None:
    """
    Validate parsed arguments.

    Args:
        args: Parsed arguments namespace

    Raises:
        CLIError: If validation fails
    """
    if not args.config and not args.storage_roots:
        raise CLIError(
            "Either --config or --storage-root must be specified\n"
            "Use --help for usage information"
        )

    if args.config:
        config_path = Path(args.config)

        if not config_path.exists():
            raise CLIError(f"Configuration file does not exist: {args.config}")

        if not config_path.is_file():
            raise CLIError(f"Configuration path is not a file: {args.config}")

    for link_path in args.link_paths or []:
        if not all(field.strip() for field in link_path.split(",")):
            raise CLIError(f"Invalid link path: {link_path!r}")


def build_config_from_args(args: argparse.Namespace) -> Dict[str, Any]:
    """
    Build the ``linktree`` configuration section from command-line arguments.

    Only options actually given on the command line appear in the result, so
    that they override, rather than mask, the configuration file.

    Args:
        args: Parsed arguments namespace

    Returns:
        Configuration dictionary for ConfigManager
    """
    section: Dict[str, Any] = {}

    if args.storage_roots:
        section[ConfigKey.STORAGE_ROOTS] = list(args.storage_roots)
    if args.link_root:
        section[ConfigKey.LINK_ROOT] = args.link_root
    if args.link_paths:
        section[ConfigKey.LINK_PATHS] = [
            [field.strip() for field in link_path.split(",")] for link_path in args.link_paths
        ]
    if args.hardlink is not None:
        section[ConfigKey.HARDLINK] = args.hardlink
    if args.on_existing:
        section[ConfigKey.ON_EXISTING] = args.on_existing

    filter_section = {}
    if args.include:
        filter_section[ConfigKey.FILTER_INCLUDE] = list(args.include)
    if args.exclude:
        filter_section[ConfigKey.FILTER_EXCLUDE] = list(args.exclude)
    if filter_section:
        section[ConfigKey.FILTER] = filter_section

    metadata_section: Dict[str, Any] = {}
    if args.metadata:
        metadata_section[ConfigKey.METADATA_TYPE] = args.metadata
    if args.metadata_suffix:
        metadata_section[ConfigKey.METADATA_SUFFIX] = args.metadata_suffix
    if args.metadata_index:
        metadata_section[ConfigKey.METADATA_INDEX_FILE] = args.metadata_index
    if args.require_metadata is not None:
        metadata_section[ConfigKey.METADATA_REQUIRED] = args.require_metadata
    if metadata_section:
        section[ConfigKey.METADATA] = metadata_section

    logging_section: Dict[str, Any] = {}
    if args.debug:
        logging_section["level"] = "DEBUG"
    if args.log_file:
        logging_section["file"] = args.log_file
    if logging_section:
        section[ConfigKey.LOGGING] = logging_section

    return {ConfigKey.ROOT: section}


def load_configuration(args: argparse.Namespace) -> ConfigManager:
    """
    Layer defaults, config file, environment and arguments.

    Raises:
        CLIError: If the configuration file cannot be loaded
    """
    try:
        config = ConfigManager(args.config)
    except LinkTreeError as e:
        raise CLIError(e.message)

    config.load_dict(build_config_from_args(args), ConfigSource.CLI_ARGS)
    return config


def build_file_filter(section: Dict[str, Any]) -> Optional[PatternFilter]:
    """Build the include/exclude filter, or None when no patterns are set."""
    filter_section = section.get(ConfigKey.FILTER) or {}
    include = filter_section.get(ConfigKey.FILTER_INCLUDE) or []
    exclude = filter_section.get(ConfigKey.FILTER_EXCLUDE) or []

    if not include and not exclude:
        return None

    return PatternFilter(include=include, exclude=exclude)


def skip_file(file_filter: Optional[FileFilter], excluded: str) -> FileFilter:
    """Wrap file_filter so it also rejects one file, compared by real path."""
    excluded = os.path.realpath(excluded)

    def accepts(path: str) -> bool:
        if os.path.realpath(path) == excluded:
            return False
        return file_filter is None or bool(file_filter(path))

    return accepts


def build_builder_options(section: Dict[str, Any]) -> Dict[str, Any]:
    """Translate a merged ``linktree`` section into builder options."""
    return {
        ConfigKey.STORAGE_ROOTS: section.get(ConfigKey.STORAGE_ROOTS),
        ConfigKey.LINK_ROOT: section.get(ConfigKey.LINK_ROOT),
        ConfigKey.LINK_PATHS: section.get(ConfigKey.LINK_PATHS),
        ConfigKey.HARDLINK: bool(section.get(ConfigKey.HARDLINK)),
        ConfigKey.ON_EXISTING: section.get(ConfigKey.ON_EXISTING),
        ConfigKey.FILE_FILTER: build_file_filter(section),
    }


def create_builder(section: Dict[str, Any], logger: Logger) -> LinkTreeBuilder:
    """
    Create the builder for the configured metadata source.

    Args:
        section: Merged ``linktree`` configuration section
        logger: Logger instance

    Returns:
        Builder ready to run

    Raises:
        CLIError: If the metadata configuration is incomplete
        ConfigurationError: If the builder options are invalid
    """
    metadata = section.get(ConfigKey.METADATA) or {}
    metadata_type = metadata.get(ConfigKey.METADATA_TYPE) or METADATA_SIDECAR
    options = build_builder_options(section)

    if metadata_type == METADATA_SIDECAR:
        return SidecarLinkTreeBuilder.from_options(
            options,
            logger=logger,
            sidecar_suffix=metadata.get(ConfigKey.METADATA_SUFFIX) or DEFAULT_SIDECAR_SUFFIX,
            require_sidecar=bool(metadata.get(ConfigKey.METADATA_REQUIRED)),
        )

    if metadata_type == METADATA_INDEX:
        index_file = metadata.get(ConfigKey.METADATA_INDEX_FILE)
        if not index_file:
            raise CLIError("Index metadata requires --metadata-index (metadata.index_file)")
        if not isinstance(index_file, str):
            raise CLIError(f"Index file must be a path, got {index_file!r}")
        options[ConfigKey.METADATA_GETTER] = YamlIndexMetadata(index_file)
        options[ConfigKey.FILE_FILTER] = skip_file(options[ConfigKey.FILE_FILTER], index_file)
        return LinkTreeBuilder.from_options(options, logger=logger)

    raise CLIError(f"Unknown metadata type: {metadata_type}")


def setup_logging(section: Dict[str, Any]) -> Logger:
    """
    Create the logger used by the builder and install it globally.

    Args:
        section: Merged ``linktree`` configuration section

    Returns:
        Configured logger instance
    """
    logging_section = section.get(ConfigKey.LOGGING) or {}
    level = logging_section.get("level") or "INFO"
    try:
        logger = Logger("linktree", level=level)
    except KeyError:
        raise CLIError(f"Invalid log level: {level}")

    log_file = logging_section.get("file")
    if log_file:
        logger.add_handler(logger.create_file_handler(log_file))

    set_global_logger(logger)
    return logger


def format_summary(stats: RunStats) -> str:
    return (
        f"{stats.files_seen} files, {stats.links_created} links created, "
        f"{stats.links_skipped} skipped, {stats.directories_created} directories created"
    )


def main(argv: Optional[List[str]] = None) -> int:
    """
    Main CLI entry point.

    Returns:
        Process exit code
    """
    try:
        args = parse_arguments(argv)
        section = load_configuration(args).get_section()
        logger = setup_logging(section)

        builder = create_builder(section, logger)
        stats = builder.run()

        print(format_summary(stats))
        return 0

    except (CLIError, LinkTreeError) as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1

    except KeyboardInterrupt:
        print("\nInterrupted by user", file=sys.stderr)
        return 130


if __name__ == "__main__":
    sys.exit(main())

"""
LinkTree Builder - Builds link trees from file metadata.

Public API:
-----------

    BuilderConfig: Validated, immutable builder options
    LinkTreeBuilder: Drives traversal and link creation
    SidecarLinkTreeBuilder: Builder with YAML sidecar metadata hard-wired
    PathMaterializer: Creates one destination directory and link
    RunStats: Counters returned by LinkTreeBuilder.run()

Usage Example:
--------------

    from linktree.builder import LinkTreeBuilder

    stats = LinkTreeBuilder.build_tree({
        "storage_root": "trove/files",
        "link_root": "trove/links",
        "metadata_getter": lookup_metadata,
        "link_paths": [["religion", "date"], ["tradition", "date"]],
        "on_existing": "skip",
    })
"""

from linktree.builder.builder import LinkTreeBuilder, RunStats, SidecarLinkTreeBuilder
from linktree.builder.config import BuilderConfig
from linktree.builder.materializer import (
    MaterializeResult,
    Outcome,
    PathMaterializer,
    destination_directory,
    path_segments,
    sanitize_segment,
)

__all__ = [
    "BuilderConfig",
    "LinkTreeBuilder",
    "SidecarLinkTreeBuilder",
    "RunStats",
    "PathMaterializer",
    "MaterializeResult",
    "Outcome",
    "destination_directory",
    "path_segments",
    "sanitize_segment",
]

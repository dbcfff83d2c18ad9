"""Import graph analysis: circular imports and orphaned modules."""

from npmplus.analysis.graph import (
    ENTRY_POINT_PATTERNS,
    Graph,
    analyze,
    build_dependency_graph,
    find_circular,
    find_orphans,
    is_entry_point,
    summarize_package_json,
)

__all__ = [
    "ENTRY_POINT_PATTERNS",
    "Graph",
    "analyze",
    "build_dependency_graph",
    "find_circular",
    "find_orphans",
    "is_entry_point",
    "summarize_package_json",
]

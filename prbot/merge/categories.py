"""
Conflict path categories.

Each category is a family of files with a known semantic merge. The
priority table fixes the order in which a round's resolutions are
submitted.
"""

import posixpath
import re
from enum import Enum
from typing import Optional


class ConflictCategory(str, Enum):
    """Semantically-mergeable file families."""

    BUILD_CONFIG = "build_config"
    DEPENDENCY_MANIFEST = "dependency_manifest"
    COUNTER = "counter"
    VERSION_DESCRIPTOR = "version_descriptor"


BUILD_CONFIG_SUFFIX = "/.corext/configs/default.config"
VERSION_DESCRIPTOR_SUFFIX = "/.corext/configs/vsversion.json"
COUNTER_FILENAME = "revision.txt"
DEPENDENCY_MANIFEST_PATTERN = re.compile(r".*/.corext/configs/.*components.json")

# Lower rank is submitted first.
CATEGORY_PRIORITY: dict[ConflictCategory, int] = {
    ConflictCategory.BUILD_CONFIG: 0,
    ConflictCategory.DEPENDENCY_MANIFEST: 1,
    ConflictCategory.COUNTER: 2,
    ConflictCategory.VERSION_DESCRIPTOR: 3,
}


def categorize_path(path: str) -> Optional[ConflictCategory]:
    """
    Map a conflict path to its category.

    All comparisons are case-insensitive. Categories are checked in
    priority order so a path never lands in two of them.

    Args:
        path: Git-format path of the conflicting file

    Returns:
        The category, or None when no semantic merge applies
    """
    if not path:
        return None

    lowered = path.lower()

    if lowered.endswith(BUILD_CONFIG_SUFFIX):
        return ConflictCategory.BUILD_CONFIG
    if DEPENDENCY_MANIFEST_PATTERN.match(lowered):
        return ConflictCategory.DEPENDENCY_MANIFEST
    if posixpath.basename(lowered) == COUNTER_FILENAME:
        return ConflictCategory.COUNTER
    if lowered.endswith(VERSION_DESCRIPTOR_SUFFIX):
        return ConflictCategory.VERSION_DESCRIPTOR

    return None


def category_rank(category: ConflictCategory) -> int:
    """Priority rank of a category."""
    return CATEGORY_PRIORITY[category]

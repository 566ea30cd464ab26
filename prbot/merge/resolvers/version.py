"""Resolver for version descriptor files."""

from prbot.merge.categories import ConflictCategory
from prbot.merge.resolvers.textual import ExternalToolResolver


class VersionDescriptorResolver(ExternalToolResolver):
    """
    Resolves version descriptor conflicts with a semantic merge tool.

    Declines whenever the tool reports an irreconcilable difference
    (any nonzero exit code).
    """

    resolver_name = "version_descriptor"
    category = ConflictCategory.VERSION_DESCRIPTOR

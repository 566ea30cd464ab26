"""
Resolver registry.

Maps conflict categories to the resolver that handles them. Conflicts
outside every registered category are never touched.
"""

import logging
from typing import Any, Iterable, Optional

from prbot.config.settings import get_merge_tool_config, get_settings
from prbot.gateway.models import Conflict
from prbot.merge.categories import ConflictCategory, categorize_path
from prbot.merge.resolvers.base import BaseResolver
from prbot.merge.resolvers.counter import CounterResolver
from prbot.merge.resolvers.manifest import ManifestResolver
from prbot.merge.resolvers.textual import TextualResolver
from prbot.merge.resolvers.version import VersionDescriptorResolver
from prbot.merge.tools import ExternalMergeTool

logger = logging.getLogger(__name__)


class ResolverRegistry:
    """Category to resolver mapping, consulted once per conflict."""

    def __init__(self, resolvers: Optional[Iterable[BaseResolver]] = None):
        self._resolvers: dict[ConflictCategory, BaseResolver] = {}
        for resolver in resolvers or []:
            self.register(resolver)

    def register(self, resolver: BaseResolver) -> None:
        """Register a resolver for its category, replacing any previous one."""
        self._resolvers[resolver.category] = resolver

    def unregister(self, category: ConflictCategory) -> None:
        self._resolvers.pop(category, None)

    def get(self, category: ConflictCategory) -> Optional[BaseResolver]:
        return self._resolvers.get(category)

    @property
    def categories(self) -> list[ConflictCategory]:
        return list(self._resolvers)

    def __contains__(self, category: object) -> bool:
        return category in self._resolvers

    def resolver_for(self, conflict: Conflict) -> Optional[BaseResolver]:
        """
        Find the resolver for a conflict.

        Returns:
            The resolver, or None for non edit/edit conflicts and paths
            outside every registered category
        """
        if not conflict.is_edit_edit:
            return None
        category = categorize_path(conflict.path)
        if category is None:
            return None
        return self._resolvers.get(category)


def build_default_registry(
    tool_config: Optional[dict[str, dict[str, Any]]] = None,
    tool_timeout: Optional[float] = None,
) -> ResolverRegistry:
    """
    Build the registry from the merge tool configuration.

    The counter resolver is built in and always registered. The other
    categories are registered only when a tool command is configured.

    Args:
        tool_config: Per-category tool settings (defaults to the YAML config)
        tool_timeout: Timeout per tool run (defaults to settings)

    Returns:
        Populated ResolverRegistry
    """
    if tool_config is None:
        tool_config = get_merge_tool_config()
    if tool_timeout is None:
        tool_timeout = get_settings().merge_tool_timeout

    registry = ResolverRegistry([CounterResolver()])

    def _tool(category: ConflictCategory) -> Optional[ExternalMergeTool]:
        command = (tool_config.get(category.value) or {}).get("command") or ""
        if not command.strip():
            logger.info(f"No merge tool configured for {category.value}; leaving it unregistered")
            return None
        return ExternalMergeTool(command, timeout=tool_timeout)

    tool = _tool(ConflictCategory.BUILD_CONFIG)
    if tool:
        registry.register(TextualResolver(tool))

    tool = _tool(ConflictCategory.DEPENDENCY_MANIFEST)
    if tool:
        protected_exit_code = tool_config[ConflictCategory.DEPENDENCY_MANIFEST.value].get(
            "protected_exit_code"
        )
        registry.register(
            ManifestResolver(
                tool,
                protected_exit_code=int(protected_exit_code) if protected_exit_code is not None else None,
            )
        )

    tool = _tool(ConflictCategory.VERSION_DESCRIPTOR)
    if tool:
        registry.register(VersionDescriptorResolver(tool))

    return registry

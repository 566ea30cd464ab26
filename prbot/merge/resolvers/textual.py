"""
Textual resolver for build configuration files.

Delegates to a line-based three-way merge tool (git merge-file by
default) and declines whenever the tool reports conflicts.
"""

import logging

from prbot.gateway.models import Conflict
from prbot.merge.categories import ConflictCategory
from prbot.merge.models import ResolutionResult
from prbot.merge.resolvers.base import BaseResolver
from prbot.merge.tools import ExternalMergeTool, MergeToolResult

logger = logging.getLogger(__name__)


class ExternalToolResolver(BaseResolver):
    """
    Resolver backed by an external merge tool.

    The target branch version is the tool's {ours} file and the source
    branch version its {theirs} file.
    """

    resolver_name = "external_tool"

    def __init__(self, tool: ExternalMergeTool):
        """
        Initialize resolver.

        Args:
            tool: Merge tool to run for each conflict
        """
        self.tool = tool

    async def resolve(
        self,
        source: bytes,
        target: bytes,
        base: bytes,
        conflict: Conflict,
    ) -> ResolutionResult:
        result = await self.tool.merge(ours=target, base=base, theirs=source)
        return self._interpret(result, conflict)

    def _interpret(self, result: MergeToolResult, conflict: Conflict) -> ResolutionResult:
        """Turn a tool run into a resolution. Only a clean exit is accepted."""
        if result.clean:
            return ResolutionResult.merged(result.content, resolver=self.resolver_name)

        logger.info(
            f"{self.tool.name} could not merge {conflict.path} "
            f"(exit code {result.exit_code})"
        )
        return ResolutionResult.declined(
            f"{self.tool.name} exited with {result.exit_code}",
            resolver=self.resolver_name,
        )


class TextualResolver(ExternalToolResolver):
    """Resolves build configuration conflicts with a line-based merge."""

    resolver_name = "textual"
    category = ConflictCategory.BUILD_CONFIG

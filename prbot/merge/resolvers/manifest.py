"""
Structured resolver for dependency manifests.

The structured merge itself is an external merge driver. It signals a
conflict inside the protected section of the manifest with a dedicated
exit code, which is surfaced as ProtectedSectionConflict so it can be
reported separately from an ordinary decline.
"""

from typing import Optional

from prbot.gateway.models import Conflict
from prbot.merge.categories import ConflictCategory
from prbot.merge.exceptions import ProtectedSectionConflict
from prbot.merge.models import ResolutionResult
from prbot.merge.resolvers.textual import ExternalToolResolver
from prbot.merge.tools import ExternalMergeTool, MergeToolResult


class ManifestResolver(ExternalToolResolver):
    """Resolves dependency manifest conflicts with a structured merge driver."""

    resolver_name = "manifest"
    category = ConflictCategory.DEPENDENCY_MANIFEST

    def __init__(
        self,
        tool: ExternalMergeTool,
        protected_exit_code: Optional[int] = None,
    ):
        """
        Initialize resolver.

        Args:
            tool: Structured merge driver
            protected_exit_code: Exit code the driver uses for a conflict
                inside the protected section
        """
        super().__init__(tool)
        self.protected_exit_code = protected_exit_code

    def _interpret(self, result: MergeToolResult, conflict: Conflict) -> ResolutionResult:
        if self.protected_exit_code is not None and result.exit_code == self.protected_exit_code:
            raise ProtectedSectionConflict(
                f"Conflict in the protected section of {conflict.path} "
                f"(conflict {conflict.conflict_id})"
            )
        return super()._interpret(result, conflict)

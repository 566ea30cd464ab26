"""
Base resolver for conflict auto-resolution.

Provides the abstract interface every per-file resolver implements.
"""

from abc import ABC, abstractmethod

from prbot.gateway.models import Conflict
from prbot.merge.categories import ConflictCategory, categorize_path
from prbot.merge.models import ResolutionResult


class BaseResolver(ABC):
    """
    Abstract base class for conflict resolvers.

    A resolver either fully resolves a conflict or declines it. It may
    raise a ConflictResolutionFailure, which the caller treats as a
    decline for that conflict only.
    """

    resolver_name: str = "base"
    category: ConflictCategory

    def can_resolve(self, conflict: Conflict) -> bool:
        """
        Check if this resolver can handle the conflict.

        Only edit/edit conflicts in this resolver's category qualify.
        """
        return conflict.is_edit_edit and categorize_path(conflict.path) == self.category

    @abstractmethod
    async def resolve(
        self,
        source: bytes,
        target: bytes,
        base: bytes,
        conflict: Conflict,
    ) -> ResolutionResult:
        """
        Resolve a conflict.

        Args:
            source: File content on the pull request's source branch
            target: File content on the target branch
            base: Common ancestor content
            conflict: Conflict metadata

        Returns:
            ResolutionResult with merged content or a decline
        """
        pass

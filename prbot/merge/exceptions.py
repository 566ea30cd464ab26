"""Errors raised while resolving a single conflict."""


class ConflictResolutionFailure(Exception):
    """A resolver could not produce merged content for one conflict."""


class MalformedCounterFile(ConflictResolutionFailure):
    """A counter file's first line is not an integer."""


class ProtectedSectionConflict(ConflictResolutionFailure):
    """The structured merge hit a conflict inside a protected section."""


class MergeToolError(ConflictResolutionFailure):
    """An external merge tool could not be run or timed out."""

"""
Numeric resolver for monotonic counter files.

A counter file holds an integer on its first line and a unique token on
its second. Both branches bumped the counter, so the merge takes the
larger value, bumps it once more and writes a fresh token.
"""

import logging
import re
import uuid

from prbot.gateway.models import Conflict
from prbot.merge.categories import ConflictCategory
from prbot.merge.exceptions import MalformedCounterFile
from prbot.merge.models import ResolutionResult
from prbot.merge.resolvers.base import BaseResolver

logger = logging.getLogger(__name__)

_INTEGER_PATTERN = re.compile(r"^[+-]?\d+$")


def read_counter(content: bytes, path: str = "") -> int:
    """
    Parse the counter value from the first line of a counter file.

    Raises:
        MalformedCounterFile: first line is not an integer
    """
    first_line = content.decode("utf-8-sig", errors="replace").split("\n", 1)[0].strip()
    if not _INTEGER_PATTERN.match(first_line):
        raise MalformedCounterFile(f"{path or 'counter file'}: {first_line!r} is not an integer")
    return int(first_line)


def merge_counters(source: int, target: int) -> bytes:
    """
    Build merged counter file content.

    Lines end with a bare newline; the repository stores normalized
    line endings.
    """
    merged = max(source, target) + 1
    return f"{merged}\n{uuid.uuid4()}\n".encode("utf-8")


class CounterResolver(BaseResolver):
    """Resolves counter file conflicts. Never declines a well-formed file."""

    resolver_name = "counter"
    category = ConflictCategory.COUNTER

    async def resolve(
        self,
        source: bytes,
        target: bytes,
        base: bytes,
        conflict: Conflict,
    ) -> ResolutionResult:
        source_value = read_counter(source, conflict.path)
        target_value = read_counter(target, conflict.path)
        content = merge_counters(source_value, target_value)

        logger.info(
            f"Counter conflict at {conflict.path}: source {source_value}, "
            f"target {target_value}, merged {max(source_value, target_value) + 1}"
        )

        return ResolutionResult.merged(content, resolver=self.resolver_name)

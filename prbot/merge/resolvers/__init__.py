"""Per-file conflict resolvers."""

from prbot.merge.resolvers.base import BaseResolver
from prbot.merge.resolvers.counter import CounterResolver
from prbot.merge.resolvers.manifest import ManifestResolver
from prbot.merge.resolvers.textual import ExternalToolResolver, TextualResolver
from prbot.merge.resolvers.version import VersionDescriptorResolver

__all__ = [
    "BaseResolver",
    "CounterResolver",
    "ExternalToolResolver",
    "ManifestResolver",
    "TextualResolver",
    "VersionDescriptorResolver",
]

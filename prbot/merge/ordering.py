"""
Batch ordering for a resolution round.

Orders a round's unresolved edit/edit conflicts by the category
priority table. Conflicts outside every category are dropped.
"""

from dataclasses import dataclass

from prbot.gateway.models import Conflict
from prbot.merge.categories import ConflictCategory, categorize_path, category_rank


@dataclass
class BatchEntry:
    """A conflict scheduled for resolution in this round."""

    conflict: Conflict
    category: ConflictCategory


class BatchOrderer:
    """Produces the deterministic resolution order for a round."""

    def order(self, conflicts: list[Conflict]) -> list[BatchEntry]:
        """
        Order conflicts for resolution.

        Only unresolved edit/edit conflicts are considered. Within a
        category the host's order is kept.

        Args:
            conflicts: Conflict snapshot taken at the start of the round

        Returns:
            Batch entries, highest priority first
        """
        entries = []
        for conflict in conflicts:
            if conflict.is_resolved or not conflict.is_edit_edit:
                continue
            category = categorize_path(conflict.path)
            if category is None:
                continue
            entries.append(BatchEntry(conflict=conflict, category=category))

        # sorted() is stable, so host order is preserved inside a category
        return sorted(entries, key=lambda entry: category_rank(entry.category))

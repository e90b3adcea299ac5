"""Operations over parsed entries.

Pure list helpers for filtering, merging, updating and deleting entries
between a parse and a generate step.
"""

from .crud import (
    FilterCriteria,
    create_entry,
    delete_entries,
    filter_entries,
    merge_entries,
    read_entries,
    sort_entries,
    update_entry,
)

__all__ = [
    "FilterCriteria",
    "create_entry",
    "delete_entries",
    "filter_entries",
    "merge_entries",
    "read_entries",
    "sort_entries",
    "update_entry",
]

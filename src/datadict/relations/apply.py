"""Apply planned corrections to loaded documents (pure, no I/O)."""

from typing import Dict, List, Tuple, TypeVar
from pydantic import BaseModel
from datadict.models.entries import ColumnEntry, DesignEntry, DocumentData, TableEntry
from datadict.models.relations import ColumnPatch, RelationSyncUpdate, TablePatch

EntryT = TypeVar("EntryT", bound=DesignEntry)


def _apply_patches(
    data: DocumentData[EntryT],
    patches: Dict[str, BaseModel],
    now: str,
) -> Tuple[DocumentData[EntryT], int]:
    entries: List[EntryT] = []
    updated = 0
    for entry in data.entries:
        patch = patches.get(entry.id)
        if patch is None:
            entries.append(entry)
            continue
        values = patch.model_dump(exclude_none=True)
        values["updated_at"] = now
        entries.append(entry.with_patch(values))
        updated += 1

    new_data = data.model_copy(
        update={"entries": entries, "last_updated": now, "total_count": len(entries)}
    )
    return new_data, updated


def apply_table_patches(
    data: DocumentData[TableEntry],
    updates: List[RelationSyncUpdate[TablePatch]],
    now: str,
) -> Tuple[DocumentData[TableEntry], int]:
    """
    Patch table entries by id.

    Args:
        data: Loaded table document
        updates: Table updates from a sync plan
        now: ISO timestamp written to ``updatedAt`` and ``lastUpdated``

    Returns:
        (new document, number of entries updated)
    """
    return _apply_patches(data, {u.id: u.patch for u in updates}, now)


def apply_column_patches(
    data: DocumentData[ColumnEntry],
    updates: List[RelationSyncUpdate[ColumnPatch]],
    now: str,
) -> Tuple[DocumentData[ColumnEntry], int]:
    """Patch column entries by id. Same contract as ``apply_table_patches``."""
    return _apply_patches(data, {u.id: u.patch for u in updates}, now)

"""
Relation sync planning.

Builds safe, non-ambiguous corrections for tables and columns plus advisory
attribute->column suggestions. Planning runs in explicit stages: the table
pass produces an effective table view, which the column pass requires, and
suggestions are computed from the resulting effective column view. Nothing
here touches the stored documents.
"""

from collections import defaultdict
from dataclasses import dataclass, field
from typing import Dict, List, Optional, Tuple
from datadict.models.context import MappingContext
from datadict.models.entries import ColumnEntry, EntityEntry, TableEntry
from datadict.models.relations import (
    ColumnPatch,
    DesignRelationSyncPlan,
    DesignRelationSyncPreview,
    RelationSyncChange,
    RelationSyncSuggestion,
    RelationSyncSuggestionCandidate,
    RelationSyncUpdate,
    SyncCounts,
    TablePatch,
)
from datadict.config.logging import get_logger
from .keys import build_composite_key, normalize_key

logger = get_logger(__name__)

MAX_SUGGESTION_CANDIDATES = 3

TABLE_LABEL_FIELDS = ("table_english_name", "table_korean_name")
COLUMN_LABEL_FIELDS = ("column_english_name", "column_korean_name")

# Python attribute -> persisted field name reported in change records
_CHANGE_FIELD_NAMES = {
    "schema_name": "schemaName",
    "table_english_name": "tableEnglishName",
    "related_entity_name": "relatedEntityName",
}

REASON_TABLE_RELATED_IS_KOREAN = (
    "relatedEntityName matched an entity's Korean table name; corrected to the entity name"
)
REASON_TABLE_FROM_KOREAN_NAME = (
    "Found the entity matching tableKoreanName; filled relatedEntityName"
)
REASON_COLUMN_TABLE_IS_KOREAN = (
    "Column tableEnglishName held the table's Korean name; corrected to the English name"
)
REASON_COLUMN_UNIQUE_ENGLISH = (
    "Unique tableEnglishName match; corrected schema/relatedEntityName"
)
REASON_COLUMN_UNIQUE_ENTITY = (
    "Unique schema+relatedEntityName match; corrected tableEnglishName"
)


def _key(*parts: Optional[str]) -> str:
    return build_composite_key(parts, empty_like_dash=True)


def _norm(value: Optional[str]) -> str:
    return normalize_key(value, empty_like_dash=True)


@dataclass
class TablePassResult:
    """Output of the table pass, required input of the column pass."""

    updates: List[RelationSyncUpdate[TablePatch]] = field(default_factory=list)
    changes: List[RelationSyncChange] = field(default_factory=list)
    effective_tables: List[TableEntry] = field(default_factory=list)


@dataclass
class ColumnPassResult:
    """Output of the column pass."""

    updates: List[RelationSyncUpdate[ColumnPatch]] = field(default_factory=list)
    changes: List[RelationSyncChange] = field(default_factory=list)
    effective_columns: List[ColumnEntry] = field(default_factory=list)


# ============================================================================
# Table pass
# ============================================================================


def _resolve_table_entity(
    table: TableEntry,
    entity_names: Dict[str, EntityEntry],
    entities_by_korean: Dict[str, List[EntityEntry]],
) -> Tuple[Optional[str], str]:
    """Canonical entity name for a table, or (None, "") when not resolvable."""
    schema = _norm(table.schema_name)
    related = _norm(table.related_entity_name)

    if related:
        if _key(schema, related) in entity_names:
            return None, ""
        candidates = entities_by_korean.get(_key(schema, related), [])
        if len(candidates) == 1 and candidates[0].entity_name:
            return candidates[0].entity_name, REASON_TABLE_RELATED_IS_KOREAN
        return None, ""

    if _norm(table.table_korean_name):
        candidates = entities_by_korean.get(_key(schema, table.table_korean_name), [])
        if len(candidates) == 1 and candidates[0].entity_name:
            return candidates[0].entity_name, REASON_TABLE_FROM_KOREAN_NAME

    return None, ""


def plan_table_updates(context: MappingContext) -> TablePassResult:
    """
    Correct ``relatedEntityName`` on tables.

    A table is patched only when exactly one entity matches by
    (schema, tableKoreanName); zero or several candidates leave it alone.
    """
    entity_names: Dict[str, EntityEntry] = {}
    entities_by_korean: Dict[str, List[EntityEntry]] = defaultdict(list)
    for entity in context.entities:
        name_key = _key(entity.schema_name, entity.entity_name)
        if name_key:
            entity_names[name_key] = entity
        korean_key = _key(entity.schema_name, entity.table_korean_name)
        if korean_key:
            entities_by_korean[korean_key].append(entity)

    result = TablePassResult()
    patches: Dict[str, TablePatch] = {}

    for table in context.tables:
        if not _norm(table.schema_name):
            continue

        canonical, reason = _resolve_table_entity(table, entity_names, entities_by_korean)
        if not canonical or canonical == table.related_entity_name:
            continue

        label = table.label(TABLE_LABEL_FIELDS)
        patch = TablePatch(related_entity_name=canonical)
        patches[table.id] = patch
        result.updates.append(
            RelationSyncUpdate[TablePatch](
                id=table.id, patch=patch, target_label=label, reason=reason
            )
        )
        result.changes.append(
            RelationSyncChange(
                target_type="table",
                target_id=table.id,
                target_label=label,
                field="relatedEntityName",
                before=table.related_entity_name or "",
                after=canonical,
                reason=reason,
            )
        )

    result.effective_tables = [
        table.with_patch(patches[table.id].model_dump(exclude_none=True))
        if table.id in patches
        else table
        for table in context.tables
    ]
    return result


# ============================================================================
# Column pass
# ============================================================================


class _TableIndex:
    """Lookups over the effective tables used by the column strategies."""

    def __init__(self, tables: List[TableEntry]):
        self.by_schema_english: Dict[str, TableEntry] = {}
        self.by_schema_korean: Dict[str, List[TableEntry]] = defaultdict(list)
        self.by_english: Dict[str, List[TableEntry]] = defaultdict(list)
        self.by_schema_entity: Dict[str, List[TableEntry]] = defaultdict(list)

        for table in tables:
            english_key = _key(table.schema_name, table.table_english_name)
            if english_key:
                self.by_schema_english[english_key] = table
            korean_key = _key(table.schema_name, table.table_korean_name)
            if korean_key:
                self.by_schema_korean[korean_key].append(table)
            english = _norm(table.table_english_name)
            if english:
                self.by_english[english].append(table)
            entity_key = _key(table.schema_name, table.related_entity_name)
            if entity_key:
                self.by_schema_entity[entity_key].append(table)

    def match(self, column: ColumnEntry) -> Tuple[Optional[TableEntry], str]:
        """First strategy with a unique hit wins."""
        schema_english = _key(column.schema_name, column.table_english_name)

        if schema_english:
            candidates = self.by_schema_korean.get(schema_english, [])
            if len(candidates) == 1:
                return candidates[0], REASON_COLUMN_TABLE_IS_KOREAN

        english = _norm(column.table_english_name)
        if english:
            candidates = self.by_english.get(english, [])
            if len(candidates) == 1:
                return candidates[0], REASON_COLUMN_UNIQUE_ENGLISH

        entity_key = _key(column.schema_name, column.related_entity_name)
        if entity_key:
            candidates = self.by_schema_entity.get(entity_key, [])
            if len(candidates) == 1:
                return candidates[0], REASON_COLUMN_UNIQUE_ENTITY

        return None, ""


def plan_column_updates(
    context: MappingContext, table_pass: TablePassResult
) -> ColumnPassResult:
    """
    Correct schema/table/entity references on columns.

    Args:
        context: Loaded design documents
        table_pass: Result of ``plan_table_updates``; its effective tables
            are the lookup targets

    Returns:
        Column updates, one change record per corrected field, and the
        effective column view
    """
    index = _TableIndex(table_pass.effective_tables)
    result = ColumnPassResult()
    patches: Dict[str, ColumnPatch] = {}

    for column in context.columns:
        schema_english = _key(column.schema_name, column.table_english_name)
        if schema_english and schema_english in index.by_schema_english:
            continue

        table, reason = index.match(column)
        if table is None:
            continue

        values: Dict[str, str] = {}
        for attr in _CHANGE_FIELD_NAMES:
            table_value = getattr(table, attr)
            if table_value and table_value != getattr(column, attr):
                values[attr] = table_value
        if not values:
            continue

        label = column.label(COLUMN_LABEL_FIELDS)
        patch = ColumnPatch(**values)
        patches[column.id] = patch
        result.updates.append(
            RelationSyncUpdate[ColumnPatch](
                id=column.id, patch=patch, target_label=label, reason=reason
            )
        )
        for attr, after in values.items():
            result.changes.append(
                RelationSyncChange(
                    target_type="column",
                    target_id=column.id,
                    target_label=label,
                    field=_CHANGE_FIELD_NAMES[attr],
                    before=getattr(column, attr) or "",
                    after=after,
                    reason=reason,
                )
            )

    result.effective_columns = [
        column.with_patch(patches[column.id].model_dump(exclude_none=True))
        if column.id in patches
        else column
        for column in context.columns
    ]
    return result


# ============================================================================
# Suggestions
# ============================================================================


def build_attribute_column_suggestions(
    context: MappingContext, columns: List[ColumnEntry]
) -> List[RelationSyncSuggestion]:
    """
    Suggest columns for attributes that have no exact column link.

    Candidates share the attribute's (schema, entity) bucket and have a
    Korean name that contains, or is contained in, the attribute name.
    """
    buckets: Dict[str, List[ColumnEntry]] = defaultdict(list)
    exact_keys = set()
    for column in columns:
        bucket_key = _key(column.schema_name, column.related_entity_name)
        if not bucket_key:
            continue
        buckets[bucket_key].append(column)
        korean = _norm(column.column_korean_name)
        if korean:
            exact_keys.add(_key(bucket_key, korean))

    suggestions: List[RelationSyncSuggestion] = []
    for attribute in context.attributes:
        bucket_key = _key(attribute.schema_name, attribute.entity_name)
        attribute_name = _norm(attribute.attribute_name)
        if not bucket_key or not attribute_name:
            continue
        if _key(bucket_key, attribute_name) in exact_keys:
            continue

        candidates: List[RelationSyncSuggestionCandidate] = []
        for column in buckets.get(bucket_key, []):
            korean = _norm(column.column_korean_name)
            if not korean or (korean not in attribute_name and attribute_name not in korean):
                continue
            candidates.append(
                RelationSyncSuggestionCandidate(
                    column_id=column.id,
                    column_label=column.label(COLUMN_LABEL_FIELDS),
                    schema_name=column.schema_name,
                    table_english_name=column.table_english_name,
                    related_entity_name=column.related_entity_name,
                )
            )
            if len(candidates) == MAX_SUGGESTION_CANDIDATES:
                break

        if not candidates:
            continue

        suggestions.append(
            RelationSyncSuggestion(
                attribute_id=attribute.id,
                attribute_name=attribute.attribute_name or attribute.id,
                schema_name=attribute.schema_name or "",
                entity_name=attribute.entity_name or "",
                candidates=candidates,
            )
        )

    return suggestions


def build_design_relation_sync_plan(context: MappingContext) -> DesignRelationSyncPlan:
    """
    Plan all corrections for a context snapshot.

    Deterministic: identical input yields an identical plan.
    """
    table_pass = plan_table_updates(context)
    column_pass = plan_column_updates(context, table_pass)
    suggestions = build_attribute_column_suggestions(context, column_pass.effective_columns)

    changes = table_pass.changes + column_pass.changes
    counts = SyncCounts(
        table_candidates=len(table_pass.updates),
        column_candidates=len(column_pass.updates),
        total_candidates=len(table_pass.updates) + len(column_pass.updates),
        field_changes=len(changes),
        attribute_column_suggestions=len(suggestions),
    )

    logger.debug(
        f"Sync plan: {counts.table_candidates} table and {counts.column_candidates} "
        f"column corrections, {counts.attribute_column_suggestions} suggestions"
    )

    return DesignRelationSyncPlan(
        table_updates=table_pass.updates,
        column_updates=column_pass.updates,
        preview=DesignRelationSyncPreview(
            counts=counts, changes=changes, suggestions=suggestions
        ),
    )

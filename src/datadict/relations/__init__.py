"""Relation validation and sync engine."""

from .keys import build_composite_key, is_empty, normalize_key, split_underscore_parts
from .registry import RELATION_RULES, RELATION_SPECS, RelationRule, get_rule
from .validator import validate_design_relations, validate_relation
from .sync import (
    ColumnPassResult,
    TablePassResult,
    build_attribute_column_suggestions,
    build_design_relation_sync_plan,
    plan_column_updates,
    plan_table_updates,
)
from .apply import apply_column_patches, apply_table_patches

__all__ = [
    "build_composite_key",
    "is_empty",
    "normalize_key",
    "split_underscore_parts",
    "RELATION_RULES",
    "RELATION_SPECS",
    "RelationRule",
    "get_rule",
    "validate_design_relations",
    "validate_relation",
    "ColumnPassResult",
    "TablePassResult",
    "build_attribute_column_suggestions",
    "build_design_relation_sync_plan",
    "plan_column_updates",
    "plan_table_updates",
    "apply_column_patches",
    "apply_table_patches",
]

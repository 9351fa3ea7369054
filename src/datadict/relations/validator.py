"""Referential integrity checks across the design documents."""

from typing import List, Set
from datadict.models.context import MappingContext
from datadict.models.entries import DesignEntry
from datadict.models.relations import (
    DesignRelationValidationResult,
    RelationIssue,
    RelationValidationSummary,
    ValidationTotals,
)
from datadict.config.logging import get_logger
from .keys import build_composite_key, raw_key
from .registry import RELATION_RULES, RELATION_SPECS, RelationRule

logger = get_logger(__name__)


def _lookup_keys(rule: RelationRule, context: MappingContext) -> Set[str]:
    """Known keys of a rule: union over its alternative key tuples."""
    keys: Set[str] = set()
    entries: List[DesignEntry] = getattr(context, rule.lookup_collection)
    for fields in rule.lookup_key_fields:
        for entry in entries:
            key = build_composite_key(entry.key_parts(fields), empty_like_dash=True)
            if key:
                keys.add(key)
    return keys


def validate_relation(
    rule: RelationRule, context: MappingContext
) -> RelationValidationSummary:
    """
    Evaluate one relation rule.

    Entries whose key has an empty or placeholder part are skipped and do
    not count towards ``total_checked``.
    """
    spec = rule.spec
    summary = RelationValidationSummary(
        relation_id=spec.id,
        relation_name=spec.name,
        severity=spec.severity,
        mapping_key=spec.mapping_key,
    )
    known = _lookup_keys(rule, context)

    for entry in getattr(context, rule.checked_collection):
        parts = entry.key_parts(rule.checked_key_fields)
        key = build_composite_key(parts, empty_like_dash=True)
        if not key:
            continue

        summary.total_checked += 1
        if key in known:
            summary.matched += 1
            continue

        summary.unmatched += 1
        summary.issues.append(
            RelationIssue(
                relation_id=spec.id,
                severity=spec.severity,
                source_type=spec.source_type,
                target_type=spec.target_type,
                target_id=entry.id,
                target_label=entry.label(rule.checked_label_fields),
                expected_key=raw_key(parts),
                reason=rule.reason,
            )
        )

    return summary


def validate_design_relations(context: MappingContext) -> DesignRelationValidationResult:
    """
    Validate all six relations against a context snapshot.

    Args:
        context: Loaded design documents

    Returns:
        Specs, one summary per relation (registry order) and totals
    """
    summaries = [validate_relation(rule, context) for rule in RELATION_RULES]

    totals = ValidationTotals()
    for summary in summaries:
        totals.total_checked += summary.total_checked
        totals.matched += summary.matched
        totals.unmatched += summary.unmatched
        if summary.severity == "error":
            totals.error_count += summary.unmatched
        else:
            totals.warning_count += summary.unmatched

    logger.debug(
        f"Relation validation: {totals.total_checked} checked, "
        f"{totals.unmatched} unmatched ({totals.error_count} errors, "
        f"{totals.warning_count} warnings)"
    )

    return DesignRelationValidationResult(
        specs=list(RELATION_SPECS),
        summaries=summaries,
        totals=totals,
    )

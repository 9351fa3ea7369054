"""Relation validation and sync report models."""

from typing import Dict, Generic, List, Literal, Optional, TypeVar
from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel

DesignRelationId = Literal[
    "DB_ENTITY",
    "DB_TABLE",
    "ENTITY_ATTRIBUTE",
    "ENTITY_TABLE",
    "TABLE_COLUMN",
    "ATTRIBUTE_COLUMN",
]

RelationSeverity = Literal["error", "warning"]
Cardinality = Literal["1:1", "1:N", "N:1", "N:N"]


class ReportModel(BaseModel):
    """Base for report models serialized with camelCase keys."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class RelationSpec(ReportModel):
    """One cross-document relation rule."""

    id: DesignRelationId
    name: str
    source_type: str
    target_type: str
    mapping_key: str
    cardinality: Cardinality
    severity: RelationSeverity
    description: str


class RelationIssue(ReportModel):
    """A target entry whose reference does not resolve."""

    relation_id: DesignRelationId
    severity: RelationSeverity
    source_type: str
    target_type: str
    target_id: str
    target_label: str
    expected_key: str
    reason: str


class RelationValidationSummary(ReportModel):
    """Per-relation counters. totalChecked == matched + unmatched."""

    relation_id: DesignRelationId
    relation_name: str
    total_checked: int = 0
    matched: int = 0
    unmatched: int = 0
    severity: RelationSeverity
    mapping_key: str
    issues: List[RelationIssue] = Field(default_factory=list)


class ValidationTotals(ReportModel):
    """Totals across all relation summaries."""

    total_checked: int = 0
    matched: int = 0
    unmatched: int = 0
    error_count: int = 0
    warning_count: int = 0


class DesignRelationValidationResult(ReportModel):
    """Full validation report."""

    specs: List[RelationSpec]
    summaries: List[RelationValidationSummary]
    totals: ValidationTotals

    def summary_for(self, relation_id: str) -> RelationValidationSummary:
        """Look up the summary of one relation."""
        for summary in self.summaries:
            if summary.relation_id == relation_id:
                return summary
        raise KeyError(relation_id)


# ============================================================================
# Sync
# ============================================================================


class TablePatch(ReportModel):
    """Fields the sync planner may correct on a table."""

    related_entity_name: Optional[str] = None


class ColumnPatch(ReportModel):
    """Fields the sync planner may correct on a column."""

    schema_name: Optional[str] = None
    table_english_name: Optional[str] = None
    related_entity_name: Optional[str] = None


PatchT = TypeVar("PatchT", TablePatch, ColumnPatch)


class RelationSyncUpdate(ReportModel, Generic[PatchT]):
    """A correction for one target entry."""

    id: str
    patch: PatchT
    target_label: str
    reason: str


class RelationSyncChange(ReportModel):
    """Before/after of a single field touched by a correction."""

    target_type: Literal["table", "column"]
    target_id: str
    target_label: str
    field: Literal["relatedEntityName", "schemaName", "tableEnglishName"]
    before: str
    after: str
    reason: str


class RelationSyncSuggestionCandidate(ReportModel):
    """A column that could back an attribute."""

    column_id: str
    column_label: str
    schema_name: Optional[str] = None
    table_english_name: Optional[str] = None
    related_entity_name: Optional[str] = None


class RelationSyncSuggestion(ReportModel):
    """Advisory attribute->column link; never applied automatically."""

    attribute_id: str
    attribute_name: str
    schema_name: str
    entity_name: str
    candidates: List[RelationSyncSuggestionCandidate] = Field(default_factory=list)


class SyncCounts(ReportModel):
    """Plan-level counters."""

    table_candidates: int = 0
    column_candidates: int = 0
    total_candidates: int = 0
    field_changes: int = 0
    attribute_column_suggestions: int = 0


class DesignRelationSyncPreview(ReportModel):
    """What a sync would change."""

    counts: SyncCounts
    changes: List[RelationSyncChange] = Field(default_factory=list)
    suggestions: List[RelationSyncSuggestion] = Field(default_factory=list)


class DesignRelationSyncPlan(ReportModel):
    """Table and column corrections plus their preview."""

    table_updates: List[RelationSyncUpdate[TablePatch]] = Field(default_factory=list)
    column_updates: List[RelationSyncUpdate[ColumnPatch]] = Field(default_factory=list)
    preview: DesignRelationSyncPreview


class RelationSyncCounts(SyncCounts):
    """Plan counters plus what was actually persisted."""

    applied_table_updates: int = 0
    applied_column_updates: int = 0
    applied_total_updates: int = 0


class RelationSyncResult(ReportModel):
    """Response of a preview or apply run."""

    mode: Literal["preview", "apply"]
    files: Dict[str, Optional[str]]
    counts: RelationSyncCounts
    changes: List[RelationSyncChange] = Field(default_factory=list)
    suggestions: List[RelationSyncSuggestion] = Field(default_factory=list)
    validation_before: DesignRelationValidationResult
    validation_after: DesignRelationValidationResult


class RelationValidationReport(ReportModel):
    """Validation response: which files were read and the result."""

    files: Dict[str, Optional[str]]
    validation: DesignRelationValidationResult

"""Pydantic models for documents, contexts, relation reports and graphs."""

from .entries import (
    DEFINITION_TYPES,
    ENTRY_MODELS,
    AttributeEntry,
    ColumnEntry,
    DatabaseEntry,
    DesignEntry,
    DocType,
    DocumentData,
    DomainEntry,
    EntityEntry,
    TableEntry,
    VocabularyEntry,
)
from .context import MappingContext, VocabularyRef
from .relations import (
    ColumnPatch,
    DesignRelationId,
    DesignRelationSyncPlan,
    DesignRelationSyncPreview,
    DesignRelationValidationResult,
    RelationIssue,
    RelationSpec,
    RelationSyncChange,
    RelationSyncCounts,
    RelationSyncResult,
    RelationSyncSuggestion,
    RelationSyncSuggestionCandidate,
    RelationSyncUpdate,
    RelationValidationReport,
    RelationValidationSummary,
    SyncCounts,
    TablePatch,
    ValidationTotals,
)
from .erd import (
    ERDData,
    ERDEdge,
    ERDFilterOptions,
    ERDMapping,
    ERDMetadata,
    ERDNode,
    ERDTableSummary,
)

__all__ = [
    "DEFINITION_TYPES",
    "ENTRY_MODELS",
    "AttributeEntry",
    "ColumnEntry",
    "DatabaseEntry",
    "DesignEntry",
    "DocType",
    "DocumentData",
    "DomainEntry",
    "EntityEntry",
    "TableEntry",
    "VocabularyEntry",
    "MappingContext",
    "VocabularyRef",
    "ColumnPatch",
    "DesignRelationId",
    "DesignRelationSyncPlan",
    "DesignRelationSyncPreview",
    "DesignRelationValidationResult",
    "RelationIssue",
    "RelationSpec",
    "RelationSyncChange",
    "RelationSyncCounts",
    "RelationSyncResult",
    "RelationSyncSuggestion",
    "RelationSyncSuggestionCandidate",
    "RelationSyncUpdate",
    "RelationValidationReport",
    "RelationValidationSummary",
    "SyncCounts",
    "TablePatch",
    "ValidationTotals",
    "ERDData",
    "ERDEdge",
    "ERDFilterOptions",
    "ERDMapping",
    "ERDMetadata",
    "ERDNode",
    "ERDTableSummary",
]

"""
Orchestration of validate, sync (preview/apply), ERD and table listing.

This is the only layer that combines the pure engine with storage.
"""

from datetime import datetime, timezone
from typing import Dict, List, Optional, Tuple
from datadict.config.logging import get_logger
from datadict.config.settings import Settings, get_settings
from datadict.erd.generator import generate_erd_data
from datadict.models.erd import ERDData, ERDFilterOptions, ERDTableSummary
from datadict.models.relations import (
    RelationSyncCounts,
    RelationSyncResult,
    RelationValidationReport,
)
from datadict.relations.apply import apply_column_patches, apply_table_patches
from datadict.relations.registry import RELATION_RULES
from datadict.relations.sync import build_design_relation_sync_plan
from datadict.relations.validator import validate_design_relations
from datadict.storage.cache import LookupCache
from datadict.storage.context_loader import FileSelection, load_design_relation_context
from datadict.storage.registry import FileRelationRegistry
from datadict.storage.store import DocumentStore

logger = get_logger(__name__)

Selection = Optional[Dict[str, Optional[str]]]


def _utc_now() -> str:
    return datetime.now(timezone.utc).isoformat()


class DesignRelationService:
    """Entry point used by the CLI."""

    def __init__(
        self,
        store: Optional[DocumentStore] = None,
        cache: Optional[LookupCache] = None,
        registry: Optional[FileRelationRegistry] = None,
        settings: Optional[Settings] = None,
    ):
        self.settings = settings or get_settings()
        self.store = store or DocumentStore(self.settings.data_path)
        self.cache = cache or LookupCache()
        self.registry = registry or FileRelationRegistry(self.store.root)

    def _load(self, selection: Selection, include_extras: bool = False):
        return load_design_relation_context(
            self.store,
            selection,
            include_domain=include_extras,
            include_vocabulary=include_extras,
            fallback=self.settings.fallback_to_first_file,
            cache=self.cache,
        )

    def validate_relations(self, selection: Selection = None) -> RelationValidationReport:
        """Validate the six relations over the selected files."""
        context, files = self._load(selection)
        validation = validate_design_relations(context)
        logger.info(
            f"Validation: {validation.totals.error_count} errors, "
            f"{validation.totals.warning_count} warnings"
        )
        return RelationValidationReport(files=files.definition_files(), validation=validation)

    def sync_relations(
        self,
        selection: Selection = None,
        apply: bool = False,
        now: Optional[str] = None,
    ) -> RelationSyncResult:
        """
        Plan corrections and optionally persist them.

        Preview never writes. Apply saves the patched table and column
        documents, records the file relations (best effort) and validates
        the corrected view again.
        """
        context, files = self._load(selection)
        validation_before = validate_design_relations(context)
        plan = build_design_relation_sync_plan(context)

        tables = context.tables
        columns = context.columns
        applied_tables = 0
        applied_columns = 0

        if apply:
            now = now or _utc_now()

            if files.table and plan.table_updates:
                data = self.store.load("table", files.table)
                data, applied_tables = apply_table_patches(data, plan.table_updates, now)
                if applied_tables:
                    self.store.save("table", data, files.table)
                tables = data.entries

            if files.column and plan.column_updates:
                data = self.store.load("column", files.column)
                data, applied_columns = apply_column_patches(data, plan.column_updates, now)
                if applied_columns:
                    self.store.save("column", data, files.column)
                columns = data.entries

            if applied_tables or applied_columns:
                self._record_file_relations(files, now)

        validation_after = validate_design_relations(
            context.with_updates(tables=tables, columns=columns)
        )

        counts = RelationSyncCounts(
            **plan.preview.counts.model_dump(),
            applied_table_updates=applied_tables,
            applied_column_updates=applied_columns,
            applied_total_updates=applied_tables + applied_columns,
        )
        logger.info(
            f"Sync ({'apply' if apply else 'preview'}): "
            f"{counts.total_candidates} candidates, {counts.applied_total_updates} applied"
        )

        return RelationSyncResult(
            mode="apply" if apply else "preview",
            files=files.definition_files(),
            counts=counts,
            changes=plan.preview.changes[: self.settings.preview_change_limit],
            suggestions=plan.preview.suggestions[: self.settings.preview_suggestion_limit],
            validation_before=validation_before,
            validation_after=validation_after,
        )

    def _record_file_relations(self, files: FileSelection, now: str) -> None:
        """Register which files were reconciled together; failures only warn."""
        try:
            for rule in RELATION_RULES:
                spec = rule.spec
                source = getattr(files, spec.source_type)
                target = getattr(files, spec.target_type)
                if not source or not target:
                    continue
                self.registry.record_relation(
                    source_type=spec.source_type,
                    source_filename=source,
                    target_type=spec.target_type,
                    target_filename=target,
                    mapping_key=spec.mapping_key,
                    cardinality=spec.cardinality,
                    now=now,
                    description=spec.description,
                )
        except Exception as e:
            logger.warning(f"Failed to update relation registry after sync: {e}")

    def build_erd(
        self,
        selection: Selection = None,
        filter_options: Optional[ERDFilterOptions] = None,
    ) -> Tuple[ERDData, FileSelection]:
        """Generate the ERD graph, including domain and vocabulary lookups."""
        context, files = self._load(selection, include_extras=True)
        return generate_erd_data(context, filter_options), files

    def list_erd_tables(
        self,
        filename: Optional[str] = None,
        query: Optional[str] = None,
    ) -> Tuple[Optional[str], List[ERDTableSummary]]:
        """
        Tables available for ERD filtering.

        Args:
            filename: Table document (defaults to the first available one)
            query: Case-insensitive substring of English name, Korean name
                or schema

        Returns:
            (selected filename, tables sorted by English name)
        """
        selected = filename or next(iter(self.store.list_files("table")), None)
        if not selected:
            return None, []

        entries = self.store.load("table", selected).entries
        needle = (query or "").strip().lower()

        tables = []
        for entry in entries:
            if needle:
                haystack = (
                    entry.table_english_name,
                    entry.table_korean_name,
                    entry.schema_name,
                )
                if not any(needle in (value or "").lower() for value in haystack):
                    continue
            tables.append(
                ERDTableSummary(
                    id=entry.id,
                    table_english_name=entry.table_english_name,
                    table_korean_name=entry.table_korean_name,
                    schema_name=entry.schema_name,
                    physical_db_name=entry.physical_db_name,
                )
            )

        tables.sort(key=lambda t: (t.table_english_name or "").lower())
        return selected, tables

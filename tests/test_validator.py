"""Tests for relation validation."""

from datadict.models import (
    AttributeEntry,
    ColumnEntry,
    DatabaseEntry,
    EntityEntry,
    MappingContext,
    TableEntry,
)
from datadict.relations.registry import RELATION_RULES, get_rule
from datadict.relations.validator import validate_design_relations


def _context():
    return MappingContext(
        databases=[
            DatabaseEntry(id="db-1", logical_db_name="LDB_MAIN", physical_db_name="PDB_MAIN"),
        ],
        entities=[
            EntityEntry(id="entity-1", logical_db_name="LDB_MAIN", schema_name="BKSP",
                        entity_name="사용자", table_korean_name="사용자"),
            EntityEntry(id="entity-2", logical_db_name="LDB_MISSING", schema_name="BKSP",
                        entity_name="미존재엔터티", table_korean_name="미존재엔터티"),
        ],
        attributes=[
            AttributeEntry(id="attr-1", schema_name="BKSP", entity_name="사용자",
                           attribute_name="이름"),
            AttributeEntry(id="attr-2", schema_name="BKSP", entity_name="없는엔터티",
                           attribute_name="없는속성"),
        ],
        tables=[
            TableEntry(id="table-1", physical_db_name="PDB_MAIN", schema_name="BKSP",
                       table_english_name="TB_USER", related_entity_name="사용자"),
            TableEntry(id="table-2", physical_db_name="PDB_MISSING", schema_name="BKSP",
                       table_english_name="TB_UNKNOWN", related_entity_name="없는엔터티"),
        ],
        columns=[
            ColumnEntry(id="col-1", schema_name="BKSP", table_english_name="TB_USER",
                        column_english_name="USER_NAME", column_korean_name="이름",
                        related_entity_name="사용자"),
            ColumnEntry(id="col-2", schema_name="BKSP", table_english_name="TB_NONE",
                        column_english_name="X", column_korean_name="엑스"),
        ],
    )


def test_registry_has_six_ordered_rules():
    """Rules are declared once, in a fixed order."""
    ids = [rule.spec.id for rule in RELATION_RULES]
    assert ids == [
        "DB_ENTITY", "DB_TABLE", "ENTITY_ATTRIBUTE",
        "ENTITY_TABLE", "TABLE_COLUMN", "ATTRIBUTE_COLUMN",
    ]
    assert get_rule("ATTRIBUTE_COLUMN").spec.severity == "warning"
    assert get_rule("ATTRIBUTE_COLUMN").spec.cardinality == "1:1"
    assert all(
        rule.spec.severity == "error" and rule.spec.cardinality == "1:N"
        for rule in RELATION_RULES[:5]
    )


def test_validate_design_relations_counts():
    """Each relation counts matched and unmatched entries."""
    result = validate_design_relations(_context())

    expected = {
        "DB_ENTITY": (2, 1, 1),
        "DB_TABLE": (2, 1, 1),
        "ENTITY_ATTRIBUTE": (2, 1, 1),
        "ENTITY_TABLE": (2, 1, 1),
        "TABLE_COLUMN": (2, 1, 1),
        "ATTRIBUTE_COLUMN": (2, 1, 1),
    }
    for relation_id, (checked, matched, unmatched) in expected.items():
        summary = result.summary_for(relation_id)
        assert (summary.total_checked, summary.matched, summary.unmatched) == (
            checked, matched, unmatched,
        ), relation_id
        assert summary.total_checked == summary.matched + summary.unmatched
        assert len(summary.issues) == summary.unmatched

    assert result.totals.total_checked == 12
    assert result.totals.matched == 6
    assert result.totals.unmatched == 6
    assert result.totals.error_count == 5
    assert result.totals.warning_count == 1


def test_issue_carries_raw_expected_key_and_label():
    """Issues report the raw key parts and a readable label."""
    result = validate_design_relations(_context())

    issue = result.summary_for("ENTITY_ATTRIBUTE").issues[0]
    assert issue.target_id == "attr-2"
    assert issue.target_label == "없는속성"
    assert issue.expected_key == "BKSP|없는엔터티"
    assert issue.source_type == "entity"
    assert issue.target_type == "attribute"

    issue = result.summary_for("DB_ENTITY").issues[0]
    assert issue.expected_key == "LDB_MISSING"


def test_empty_and_placeholder_keys_are_not_counted():
    """Entries with an empty or '-' key part are skipped entirely."""
    context = MappingContext(
        tables=[
            TableEntry(id="t1", schema_name="BKSP", table_english_name="TB_A",
                       physical_db_name="-", related_entity_name=""),
            TableEntry(id="t2", schema_name=" ", table_english_name="TB_B",
                       physical_db_name=None, related_entity_name="사용자"),
        ],
        columns=[
            ColumnEntry(id="c1", schema_name="-", table_english_name="TB_A"),
        ],
    )
    result = validate_design_relations(context)

    for relation_id in ("DB_TABLE", "ENTITY_TABLE", "TABLE_COLUMN"):
        assert result.summary_for(relation_id).total_checked == 0
    assert result.totals.total_checked == 0


def test_entity_table_accepts_korean_table_name():
    """relatedEntityName may hold the entity's Korean table name."""
    context = MappingContext(
        entities=[
            EntityEntry(id="e1", schema_name="MAIN", entity_name="사용자",
                        table_korean_name="사용자테이블"),
        ],
        tables=[
            TableEntry(id="t1", schema_name="main", related_entity_name="사용자테이블"),
        ],
    )
    summary = validate_design_relations(context).summary_for("ENTITY_TABLE")

    assert summary.matched == 1
    assert summary.unmatched == 0


def test_validation_output_uses_camel_case():
    """Serialized reports use the persisted field naming."""
    dumped = validate_design_relations(_context()).model_dump(by_alias=True)

    assert set(dumped) == {"specs", "summaries", "totals"}
    assert "errorCount" in dumped["totals"]
    assert "totalChecked" in dumped["summaries"][0]
    assert "expectedKey" in dumped["summaries"][0]["issues"][0]

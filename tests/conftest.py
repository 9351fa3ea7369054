"""Shared fixtures."""

import json
import pytest
from datadict.config import reset_settings, setup_logging
from datadict.models import (
    AttributeEntry,
    ColumnEntry,
    DatabaseEntry,
    DomainEntry,
    EntityEntry,
    MappingContext,
    TableEntry,
    VocabularyRef,
)

TS = "2026-02-14T00:00:00.000Z"
NAME_WORD = VocabularyRef(standard_name="이름", abbreviation="NM", domain_category="이름")


@pytest.fixture(autouse=True)
def quiet_settings(monkeypatch, tmp_path):
    """Fresh settings per test, WARNING-level logs, data under tmp_path."""
    monkeypatch.setenv("LOG_LEVEL", "WARNING")
    monkeypatch.setenv("DATA_PATH", str(tmp_path / "data"))
    reset_settings()
    setup_logging()
    yield
    reset_settings()


@pytest.fixture
def korean_label_context():
    """Tables/columns that reference entities and tables by Korean labels."""
    return MappingContext(
        entities=[
            EntityEntry(
                id="entity-1",
                schema_name="MAIN",
                entity_name="사용자",
                table_korean_name="사용자테이블",
                created_at=TS,
                updated_at=TS,
            )
        ],
        attributes=[
            AttributeEntry(
                id="attr-1",
                schema_name="MAIN",
                entity_name="사용자",
                attribute_name="사용자아이디코드",
                required_input="Y",
                ref_entity_name="-",
            )
        ],
        tables=[
            TableEntry(
                id="table-1",
                schema_name="MAIN",
                table_english_name="TB_USER",
                table_korean_name="사용자테이블",
                related_entity_name="사용자테이블",
            )
        ],
        columns=[
            ColumnEntry(
                id="col-1",
                schema_name="MAIN",
                table_english_name="사용자테이블",
                column_english_name="USER_ID",
                column_korean_name="사용자아이디",
                related_entity_name="사용자",
            ),
            ColumnEntry(
                id="col-2",
                schema_name="",
                table_english_name="TB_USER",
                column_english_name="USER_NAME",
                column_korean_name="사용자이름",
                related_entity_name="",
            ),
        ],
    )


@pytest.fixture
def write_doc(tmp_path):
    """Write ``{entries, lastUpdated, totalCount}`` under ``<tmp>/data/<type>/<name>``."""

    def _write(doc_type, filename, entries):
        directory = tmp_path / "data" / doc_type
        directory.mkdir(parents=True, exist_ok=True)
        payload = {"entries": entries, "lastUpdated": TS, "totalCount": len(entries)}
        path = directory / filename
        path.write_text(json.dumps(payload, ensure_ascii=False, indent=2), encoding="utf-8")
        return path

    return _write


@pytest.fixture
def data_dir(tmp_path):
    return tmp_path / "data"


@pytest.fixture
def korean_label_store(write_doc, data_dir):
    """The Korean-label scenario persisted as one file per document type."""
    write_doc("database", "db.json", [
        {"id": "db-1", "logicalDbName": "LDB_MAIN", "physicalDbName": "PDB_MAIN"},
    ])
    write_doc("entity", "entity.json", [
        {"id": "entity-1", "logicalDbName": "LDB_MAIN", "schemaName": "MAIN",
         "entityName": "사용자", "tableKoreanName": "사용자테이블"},
    ])
    write_doc("attribute", "attribute.json", [
        {"id": "attr-1", "schemaName": "MAIN", "entityName": "사용자",
         "attributeName": "사용자아이디코드"},
    ])
    write_doc("table", "table.json", [
        {"id": "table-1", "physicalDbName": "PDB_MAIN", "schemaName": "MAIN",
         "tableEnglishName": "TB_USER", "tableKoreanName": "사용자테이블",
         "relatedEntityName": "사용자테이블", "tableOwner": "dba"},
    ])
    write_doc("column", "column.json", [
        {"id": "col-1", "schemaName": "MAIN", "tableEnglishName": "사용자테이블",
         "columnEnglishName": "USER_ID", "columnKoreanName": "사용자아이디",
         "relatedEntityName": "사용자", "pkInfo": "Y", "dataType": "VARCHAR"},
        {"id": "col-2", "schemaName": "", "tableEnglishName": "TB_USER",
         "columnEnglishName": "USER_NAME", "columnKoreanName": "사용자이름",
         "relatedEntityName": "", "customNote": "keep me"},
    ])
    return data_dir


@pytest.fixture
def erd_context():
    """Two entities mapped to two tables, one FK, one vocabulary-driven domain."""
    return MappingContext(
        databases=[
            DatabaseEntry(id="db-1", logical_db_name="LDB", physical_db_name="PDB",
                          dbms_info="Oracle 19c"),
        ],
        entities=[
            EntityEntry(id="e1", logical_db_name="LDB", schema_name="MAIN",
                        entity_name="사용자", primary_identifier="USER_ID"),
            EntityEntry(id="e2", logical_db_name="LDB", schema_name="MAIN", entity_name="주문"),
            EntityEntry(id="e-blank"),
        ],
        attributes=[
            AttributeEntry(id="a1", schema_name="MAIN", entity_name="사용자",
                           attribute_name="이름", identifier_flag="Y"),
            AttributeEntry(id="a2", schema_name="MAIN", entity_name="주문",
                           attribute_name="주문번호"),
        ],
        tables=[
            TableEntry(id="t1", physical_db_name="PDB", schema_name="MAIN",
                       table_english_name="TB_USER", table_korean_name="사용자테이블",
                       related_entity_name="사용자"),
            TableEntry(id="t2", physical_db_name="PDB", schema_name="MAIN",
                       table_english_name="TB_ORDER", related_entity_name="주문"),
        ],
        columns=[
            ColumnEntry(id="c1", schema_name="MAIN", table_english_name="TB_USER",
                        column_english_name="USER_ID", column_korean_name="사용자아이디",
                        related_entity_name="사용자", pk_info="Y", data_type="VARCHAR"),
            ColumnEntry(id="c2", schema_name="MAIN", table_english_name="TB_USER",
                        column_english_name="USER_NM", column_korean_name="이름",
                        related_entity_name="사용자"),
            ColumnEntry(id="c3", schema_name="MAIN", table_english_name="TB_ORDER",
                        column_english_name="ORDER_NO", column_korean_name="주문번호",
                        related_entity_name="주문", pk_info="Y"),
            ColumnEntry(id="c4", schema_name="MAIN", table_english_name="TB_ORDER",
                        column_english_name="USER_ID", column_korean_name="사용자아이디",
                        related_entity_name="주문", fk_info="TB_USER.USER_ID"),
        ],
        domains=[
            DomainEntry(id="d1", domain_category="이름", standard_domain_name="이름V50"),
            DomainEntry(id="d2", domain_category="금액", standard_domain_name="금액N15"),
        ],
        vocabulary_map={
            "이름": NAME_WORD,
            "nm": NAME_WORD,
        },
    )

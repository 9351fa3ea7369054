"""Tests for the document store, lookup cache, context loading and registry."""

import os
import pytest
from datadict.models import DocumentData, TableEntry, VocabularyEntry
from datadict.storage import (
    DocumentStore,
    DocumentStoreError,
    FileRelationRegistry,
    LookupCache,
    build_vocabulary_map,
    load_design_relation_context,
)


def test_list_files_sorted_and_filtered(write_doc, data_dir):
    """History and backup files are hidden; names are sorted."""
    write_doc("table", "b.json", [])
    write_doc("table", "a.json", [])
    write_doc("table", "history.json", [])
    write_doc("table", "a_backup_2026.json", [])
    (data_dir / "table" / "notes.txt").write_text("x", encoding="utf-8")

    assert DocumentStore(data_dir).list_files("table") == ["a.json", "b.json"]
    assert DocumentStore(data_dir).list_files("column") == []


def test_load_preserves_unknown_fields(korean_label_store):
    """Fields the model does not declare survive a load/save round trip."""
    store = DocumentStore(korean_label_store)
    data = store.load("column", "column.json")

    assert data.total_count == 2
    assert data.entries[1].customNote == "keep me"

    store.save("column", data, "copy.json")
    raw = (korean_label_store / "column" / "copy.json").read_text(encoding="utf-8")
    assert '"customNote": "keep me"' in raw
    assert '"columnEnglishName": "USER_ID"' in raw
    assert "사용자아이디" in raw


def test_load_empty_file(data_dir):
    """An empty file reads as an empty document."""
    (data_dir / "table").mkdir(parents=True)
    (data_dir / "table" / "empty.json").write_text("  \n", encoding="utf-8")

    data = DocumentStore(data_dir).load("table", "empty.json")

    assert data.entries == []
    assert data.total_count == 0


def test_load_errors(write_doc, data_dir):
    """Missing, corrupted and wrongly shaped documents raise DocumentStoreError."""
    store = DocumentStore(data_dir)

    with pytest.raises(DocumentStoreError, match="not found"):
        store.load("table", "missing.json")

    (data_dir / "table").mkdir(parents=True, exist_ok=True)
    (data_dir / "table" / "broken.json").write_text("{not json", encoding="utf-8")
    with pytest.raises(DocumentStoreError, match="corrupted"):
        store.load("table", "broken.json")

    (data_dir / "table" / "shape.json").write_text('{"entries": "nope"}', encoding="utf-8")
    with pytest.raises(DocumentStoreError, match="invalid shape"):
        store.load("table", "shape.json")

    with pytest.raises(DocumentStoreError, match="Unknown document type"):
        store.load("sheet", "x.json")


@pytest.mark.parametrize("filename", ["", "  ", "../escape.json", "sub/inner.json", ".."])
def test_resolve_rejects_escaping_names(data_dir, filename):
    """Filenames must name a file directly inside the type directory."""
    with pytest.raises(DocumentStoreError):
        DocumentStore(data_dir).resolve("table", filename)


def test_save_creates_directory(data_dir):
    """Saving into a new type directory creates it."""
    store = DocumentStore(data_dir)
    data = DocumentData[TableEntry](
        entries=[TableEntry(id="t1", table_english_name="TB_A")], total_count=1
    )

    path = store.save("table", data, "new.json")

    assert path.is_file()
    assert store.exists("table", "new.json")
    assert store.load("table", "new.json").entries[0].table_english_name == "TB_A"


def test_build_vocabulary_map():
    """Both the standard name and the abbreviation index a word."""
    data = DocumentData[VocabularyEntry](entries=[
        VocabularyEntry(id="v1", standard_name="Name", abbreviation="NM", domain_category="이름"),
        VocabularyEntry(id="v2", standard_name="Orphan"),
    ])
    vocabulary = build_vocabulary_map(data)

    assert set(vocabulary) == {"name", "nm"}
    assert vocabulary["nm"].domain_category == "이름"


def test_lookup_cache_reuses_until_file_changes(write_doc, data_dir):
    """Cached maps are reused while the file's mtime is unchanged."""
    path = write_doc("vocabulary", "vocab.json", [
        {"id": "v1", "standardName": "name", "abbreviation": "NM", "domainCategory": "이름"},
    ])
    store = DocumentStore(data_dir)
    cache = LookupCache()

    first = cache.vocabulary_map(store, "vocab.json")
    assert cache.vocabulary_map(store, "vocab.json") is first

    write_doc("vocabulary", "vocab.json", [
        {"id": "v1", "standardName": "amount", "abbreviation": "AMT", "domainCategory": "금액"},
    ])
    stat = path.stat()
    os.utime(path, ns=(stat.st_atime_ns, stat.st_mtime_ns + 1_000_000))

    assert set(cache.vocabulary_map(store, "vocab.json")) == {"amount", "amt"}

    cache.invalidate()
    assert cache.vocabulary_map(store, "vocab.json") is not first


def test_context_falls_back_to_first_file(korean_label_store, write_doc):
    """Unselected types load the first available file."""
    write_doc("table", "z_later.json", [])
    store = DocumentStore(korean_label_store)

    context, files = load_design_relation_context(store)

    assert files.table == "table.json"
    assert files.domain is None
    assert files.vocabulary is None
    assert [t.id for t in context.tables] == ["table-1"]
    assert context.vocabulary_map is None


def test_context_without_fallback(korean_label_store):
    """With fallback disabled, unselected types stay empty."""
    store = DocumentStore(korean_label_store)

    context, files = load_design_relation_context(
        store, {"table": "table.json"}, fallback=False
    )

    assert files.table == "table.json"
    assert files.column is None
    assert context.columns == []


def test_context_missing_explicit_file_raises(korean_label_store):
    """An explicitly selected file must exist."""
    with pytest.raises(DocumentStoreError):
        load_design_relation_context(DocumentStore(korean_label_store), {"table": "nope.json"})


def test_context_tolerates_broken_vocabulary(korean_label_store):
    """A bad vocabulary file leaves the map out instead of failing."""
    (korean_label_store / "vocabulary").mkdir()
    (korean_label_store / "vocabulary" / "vocab.json").write_text("{", encoding="utf-8")

    context, files = load_design_relation_context(
        DocumentStore(korean_label_store), include_vocabulary=True
    )

    assert context.vocabulary_map is None
    assert files.vocabulary == "vocab.json"


def test_registry_upserts_relations(tmp_path):
    """Recording the same link twice keeps one relation and refreshes it."""
    registry = FileRelationRegistry(tmp_path)
    assert registry.load().relations == []

    first = registry.record_relation(
        "table", "table.json", "column", "column.json",
        "schemaName+tableEnglishName", "1:N", now="2026-01-01",
    )
    second = registry.record_relation(
        "table", "table.json", "column", "column.json",
        "schemaName+tableEnglishName", "1:N", now="2026-02-01", description="refreshed",
    )

    data = registry.load()
    assert len(data.relations) == 1
    assert second.id == first.id
    assert data.relations[0].created_at == "2026-01-01"
    assert data.relations[0].updated_at == "2026-02-01"
    assert data.last_updated == "2026-02-01"
    assert len(registry.relations_for("column", "column.json")) == 1
    assert registry.relations_for("column", "other.json") == []


def test_registry_rejects_malformed_file(tmp_path):
    """A corrupted registry raises DocumentStoreError."""
    (tmp_path / "registry.json").write_text("[1, 2", encoding="utf-8")

    with pytest.raises(DocumentStoreError):
        FileRelationRegistry(tmp_path).load()

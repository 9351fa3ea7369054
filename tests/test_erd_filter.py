"""Tests for table-based ERD filtering."""

from datadict.erd import filter_erd_data_by_table_ids, generate_erd_data


def _ids(erd_data):
    return {node.id for node in erd_data.nodes}


def test_filter_with_related(erd_context):
    """A table pulls in its columns, entity, attributes, domains and database."""
    full = generate_erd_data(erd_context)
    filtered = filter_erd_data_by_table_ids(full, ["t1"])

    assert _ids(filtered) == {"t1", "c1", "c2", "e1", "a1", "d1", "db-1"}
    # c4 -> c1 is an FK from an excluded column
    assert all(e.source in _ids(filtered) and e.target in _ids(filtered) for e in filtered.edges)
    assert len(filtered.mappings) == 10
    assert len(filtered.edges) == 10


def test_filter_without_related(erd_context):
    """Only tables, their columns and their database survive."""
    full = generate_erd_data(erd_context)
    filtered = filter_erd_data_by_table_ids(full, ["t1"], include_related=False)

    assert _ids(filtered) == {"t1", "c1", "c2", "db-1"}
    assert {(m.source_id, m.target_id) for m in filtered.mappings} == {
        ("db-1", "t1"),
        ("t1", "c1"),
        ("t1", "c2"),
    }


def test_filter_recomputes_metadata(erd_context):
    """Counters describe the filtered graph, the timestamp is kept."""
    full = generate_erd_data(erd_context)
    filtered = filter_erd_data_by_table_ids(full, ["t1"])
    meta = filtered.metadata

    assert meta.total_nodes == 7
    assert meta.total_edges == 10
    assert meta.total_mappings == 10
    assert meta.logical_nodes == 2
    assert meta.physical_nodes == 4
    assert meta.domain_nodes == 1
    assert meta.generated_at == full.metadata.generated_at


def test_filter_empty_selection_is_identity(erd_context):
    """No table ids means no filtering."""
    full = generate_erd_data(erd_context)

    assert filter_erd_data_by_table_ids(full, []) is full


def test_filter_unknown_table_yields_empty_graph(erd_context):
    """Ids that are not table nodes select nothing."""
    full = generate_erd_data(erd_context)
    filtered = filter_erd_data_by_table_ids(full, ["nope", "c1"])

    assert filtered.nodes == []
    assert filtered.edges == []
    assert filtered.metadata.total_nodes == 0

import pytest

from configdiff.core.models import ConfigFormat, DiffStatus, Entry, SegmentRole
from configdiff.diff.differ import DiffEngine
from configdiff.parsing.pipeline import ComparePipeline, diff, parse_and_canonicalize

LEFT_PROPS = "server.port=8080\nspring.datasource.url=jdbc:mysql://localhost:3306/db"
RIGHT_PROPS = (
    "server.port=9090\n"
    "spring.datasource.url=jdbc:postgresql://localhost:5432/db\n"
    "spring.datasource.username=admin"
)


def _rows(left, right, fmt):
    pipeline = ComparePipeline()
    return pipeline.run(left, right, fmt).rows


def test_properties_end_to_end():
    rows = _rows(LEFT_PROPS, RIGHT_PROPS, "properties")

    assert [(r.key, r.status) for r in rows] == [
        ("server.port", DiffStatus.MODIFIED),
        ("spring.datasource.url", DiffStatus.MODIFIED),
        ("spring.datasource.username", DiffStatus.ADDED),
    ]
    assert rows[0].left_line == "server.port=8080"
    assert rows[0].right_line == "server.port=9090"
    assert rows[2].left_line == ""
    assert rows[2].right_line == "spring.datasource.username=admin"
    assert rows[2].left_segments is None and rows[2].right_segments is None


def test_yaml_end_to_end():
    rows = _rows("server:\n  port: 8080", "server:\n  port: 8080\n  context-path: /api", ConfigFormat.YAML)

    assert [(r.key, r.status) for r in rows] == [
        ("server.context-path", DiffStatus.ADDED),
        ("server.port", DiffStatus.UNCHANGED),
    ]
    assert rows[0].right_line == "server.context-path: /api"
    assert rows[1].left_line == rows[1].right_line == "server.port: 8080"


@pytest.mark.parametrize("fmt", ["properties", "yaml"])
def test_empty_inputs_produce_no_rows(fmt):
    assert _rows("", "", fmt) == []
    assert _rows(None, None, fmt) == []


def test_empty_value_counts_as_present():
    """PRESENCE TEST: 'a=' is a key with an empty value, not a missing key."""
    assert [r.status for r in _rows("a=", "a=", "properties")] == [DiffStatus.UNCHANGED]
    assert [r.status for r in _rows("a=", "a=x", "properties")] == [DiffStatus.MODIFIED]
    assert [(r.key, r.status) for r in _rows("a=", "b=1", "properties")] == [
        ("a", DiffStatus.REMOVED),
        ("b", DiffStatus.ADDED),
    ]


def test_modified_row_carries_segments():
    row = _rows("a=kitten", "a=sitting", "properties")[0]

    assert row.status is DiffStatus.MODIFIED
    assert "".join(s.text for s in row.left_segments if s.role is not SegmentRole.ADDED) == "kitten"
    assert "".join(s.text for s in row.right_segments if s.role is not SegmentRole.REMOVED) == "sitting"


def test_every_key_appears_exactly_once():
    left = "a=1\nb=2\nc=3\nb=4"
    right = "c=3\nd=5\na=0"
    rows = _rows(left, right, "properties")
    keys = [r.key for r in rows]

    assert keys == sorted(set(keys))
    assert set(keys) == {"a", "b", "c", "d"}


def test_swap_inverts_added_and_removed():
    """SYMMETRY TEST: swapping inputs mirrors every row."""
    forward = _rows(LEFT_PROPS + "\nold.key=1", RIGHT_PROPS, "properties")
    backward = _rows(RIGHT_PROPS, LEFT_PROPS + "\nold.key=1", "properties")
    mirror = {
        DiffStatus.ADDED: DiffStatus.REMOVED,
        DiffStatus.REMOVED: DiffStatus.ADDED,
        DiffStatus.MODIFIED: DiffStatus.MODIFIED,
        DiffStatus.UNCHANGED: DiffStatus.UNCHANGED,
    }

    assert [r.key for r in forward] == [r.key for r in backward]
    for f, b in zip(forward, backward):
        assert b.status is mirror[f.status]
        assert (f.left_line, f.right_line) == (b.right_line, b.left_line)
        if f.status is DiffStatus.MODIFIED:
            swapped_roles = {SegmentRole.ADDED: SegmentRole.REMOVED,
                             SegmentRole.REMOVED: SegmentRole.ADDED,
                             SegmentRole.UNCHANGED: SegmentRole.UNCHANGED}
            assert "".join(s.text for s in f.left_segments) == "".join(s.text for s in b.right_segments)
            assert {s.role for s in f.left_segments} == {swapped_roles[s.role] for s in b.right_segments}


def test_order_of_input_does_not_matter():
    rows = _rows("b=2\na=1", "a=1\nb=2", "properties")
    assert all(r.status is DiffStatus.UNCHANGED for r in rows)


def test_properties_to_map_keeps_last_duplicate():
    engine = DiffEngine()
    entries = [Entry.prop("k", "1", "k=1"), Entry.comment("# c"), Entry.prop("k", "2", "k=2")]
    assert engine.properties_to_map(entries) == {"k": "2"}


@pytest.mark.parametrize("fmt, expected", [
    ("properties", "server.port=8080"),
    (ConfigFormat.YAML, "server.port: 8080"),
])
def test_format_line(fmt, expected):
    assert DiffEngine.format_line("server.port", "8080", fmt) == expected


def test_module_level_entry_points():
    left = parse_and_canonicalize("b=2\n# about a\na=1", "properties")
    right = parse_and_canonicalize("a=1\nb=3", "properties")

    assert [e.line for e in left.entries] == ["# about a", "a=1", "b=2"]
    assert [(r.key, r.status) for r in diff(left, right)] == [
        ("a", DiffStatus.UNCHANGED),
        ("b", DiffStatus.MODIFIED),
    ]


def test_compare_with_one_missing_side():
    engine = DiffEngine()
    right = parse_and_canonicalize("x: 1", "yaml")
    rows = engine.compare(None, right, "yaml")
    assert [(r.key, r.status) for r in rows] == [("x", DiffStatus.ADDED)]


def test_unknown_format_is_rejected():
    with pytest.raises(ValueError):
        ConfigFormat.coerce("toml")


def test_document_format_must_match_requested_format():
    props = parse_and_canonicalize("a=1", "properties")
    with pytest.raises(ValueError):
        DiffEngine().compare(props, props, "yaml")

# =============================================================================
# Unit Tests: Board Layout
# =============================================================================

from __future__ import annotations

from crimeboard.models.board import EvidenceItem
from crimeboard.models.stages import BoardNode, NodeType, Position
from crimeboard.services.layout import (
    Lane,
    _jitter,
    _place,
    assign_layout,
    classify_node,
    needs_layout,
    node_lane_label,
)


def _node(node_id: str, node_type: str = "NOTE", title: str = "", **extra) -> BoardNode:
    return BoardNode.model_validate(
        {"id": node_id, "type": node_type, "title": title, **extra}
    )


def _at_origin(count_by_type: dict[str, int]) -> list[BoardNode]:
    nodes = []
    for node_type, count in count_by_type.items():
        for i in range(count):
            prefix = "SUS" if node_type == "SUSPECT" else f"EVID-{node_type}"
            nodes.append(
                _node(f"{prefix}-{i + 1:02d}", node_type, position={"x": 0, "y": 0})
            )
    return nodes


# ---------------------------------------------------------------------------
# Test: Lane classification
# ---------------------------------------------------------------------------


class TestClassifyNode:
    def test_suspect(self):
        assert classify_node(_node("SUS-01")) is Lane.SUSPECT

    def test_photo(self):
        assert classify_node(_node("EVID-01", "PHOTO")) is Lane.SCENE

    def test_statement(self):
        assert classify_node(_node("EVID-01", "STATEMENT")) is Lane.WITNESS

    def test_text(self):
        assert classify_node(_node("EVID-01", "TEXT")) is Lane.WITNESS

    def test_note_by_title_keyword(self):
        node = _node("EVID-01", "NOTE", "Interview transcript")
        assert classify_node(node) is Lane.WITNESS

    def test_scene_keyword_wins_over_witness_keyword(self):
        node = _node("EVID-01", "NOTE", "Witness sketch of crime scene")
        assert classify_node(node) is Lane.SCENE

    def test_linked_evidence_kind(self):
        evidence = [
            EvidenceItem(id=1, display_id="EVID-01", kind="photo", filename="img_0001.jpg"),
        ]
        node = _node("EVID-01", "NOTE", "Receipt")
        assert classify_node(node, evidence) is Lane.SCENE

    def test_linked_by_filename_in_title(self):
        evidence = [
            EvidenceItem(id=1, display_id="EVID-07", kind="statement", filename="mrs_h.txt"),
        ]
        node = _node("N1", "NOTE", "Notes on mrs_h.txt")
        assert classify_node(node, evidence) is Lane.WITNESS

    def test_tags(self):
        node = _node("EVID-01", "NOTE", "Item 4", data={"tags": ["fingerprint"]})
        assert classify_node(node) is Lane.SCENE

    def test_other(self):
        assert classify_node(_node("EVID-01", "NOTE", "Receipt")) is Lane.OTHER

    def test_lane_label(self):
        assert node_lane_label(_node("SUS-01")) == "Suspects"
        assert node_lane_label(_node("EVID-01", "PHOTO")) == "Scene Evidence"


# ---------------------------------------------------------------------------
# Test: Layout decision
# ---------------------------------------------------------------------------


class TestNeedsLayout:
    def test_empty(self):
        assert needs_layout([]) is False

    def test_all_at_origin(self):
        assert needs_layout(_at_origin({"PHOTO": 7})) is True

    def test_missing_positions(self):
        assert needs_layout([_node("A"), _node("B")]) is True

    def test_spread_positions(self):
        nodes = [
            _node("A", position={"x": 100, "y": 100}),
            _node("B", position={"x": 400, "y": 100}),
            _node("C", position={"x": 100, "y": 400}),
        ]
        assert needs_layout(nodes) is False

    def test_clustered_positions(self):
        nodes = [
            _node("A", position={"x": 100, "y": 100}),
            _node("B", position={"x": 100, "y": 100}),
            _node("C", position={"x": 100, "y": 100}),
            _node("D", position={"x": 400, "y": 100}),
        ]
        assert needs_layout(nodes) is True


# ---------------------------------------------------------------------------
# Test: Placement
# ---------------------------------------------------------------------------


class TestAssignLayout:
    def test_seven_nodes_at_origin(self):
        nodes = _at_origin({"PHOTO": 3, "STATEMENT": 2, "NOTE": 1, "SUSPECT": 1})
        assert needs_layout(nodes)

        laid_out = assign_layout(nodes)

        points = [(n.position.x, n.position.y) for n in laid_out]
        assert len(set(points)) == len(points)

    def test_fresh_layout_does_not_need_layout(self):
        nodes = _at_origin({"PHOTO": 4, "STATEMENT": 3, "NOTE": 2, "SUSPECT": 3})
        assert needs_layout(assign_layout(nodes)) is False

    def test_ids_preserved_in_order(self):
        nodes = _at_origin({"SUSPECT": 2, "PHOTO": 2, "NOTE": 2})
        laid_out = assign_layout(nodes)
        assert [n.id for n in laid_out] == [n.id for n in nodes]

    def test_only_position_changes(self):
        nodes = [_node("EVID-01", "PHOTO", "scene.jpg", data={"url": "u"})]
        laid_out = assign_layout(nodes)[0]
        assert laid_out.title == "scene.jpg"
        assert laid_out.data == {"url": "u"}
        assert laid_out.type is NodeType.PHOTO

    def test_empty(self):
        assert assign_layout([]) == []

    def test_lane_columns(self):
        laid_out = assign_layout(_at_origin({"PHOTO": 2, "STATEMENT": 1, "NOTE": 1}))
        assert [n.position for n in laid_out] == [
            Position(x=100, y=80),
            Position(x=100, y=300),
            Position(x=450, y=80),
            Position(x=800, y=80),
        ]

    def test_single_suspect_is_centred(self):
        laid_out = assign_layout(_at_origin({"SUSPECT": 1}))
        assert laid_out[0].position == Position(x=550, y=500)

    def test_suspect_row_spacing(self):
        laid_out = assign_layout(_at_origin({"SUSPECT": 2}))
        assert [n.position.x for n in laid_out] == [370, 730]

    def test_suspects_below_all_evidence(self):
        laid_out = assign_layout(
            _at_origin({"PHOTO": 5, "STATEMENT": 1, "SUSPECT": 2})
        )

        suspect_ys = [n.position.y for n in laid_out if n.is_suspect]
        evidence_ys = [n.position.y for n in laid_out if not n.is_suspect]
        assert min(suspect_ys) > max(evidence_ys)

    def test_deterministic(self):
        nodes = _at_origin({"PHOTO": 3, "STATEMENT": 3, "SUSPECT": 4})
        first = [n.position for n in assign_layout(nodes)]
        second = [n.position for n in assign_layout(nodes)]
        assert first == second


class TestPlacementHelpers:
    def test_jitter_range_and_determinism(self):
        values = [_jitter("EVID-01", attempt) for attempt in range(20)]
        assert all(-0.5 <= v < 0.5 for v in values)
        assert values == [_jitter("EVID-01", attempt) for attempt in range(20)]

    def test_colliding_candidate_is_nudged_down(self):
        placed = [Position(x=100, y=80)]

        position = _place("EVID-02", 100, 80, placed, 10, 50, 20)

        # Nine 20px steps clear the 176px vertical overlap band
        assert position.y == 260
        assert placed[-1] is position

    def test_attempts_are_bounded(self):
        placed = [Position(x=100, y=80)]

        position = _place("SUS-01", 100, 80, placed, 5, 30, 0)

        assert position.y == 80
        assert len(placed) == 2

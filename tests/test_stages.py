# =============================================================================
# Unit Tests: Stage Record Coercion
# =============================================================================

from crimeboard.models.stages import (
    NODE_ID_MAX_LENGTH,
    NODE_TITLE_MAX_LENGTH,
    BoardNode,
    Connection,
    ConnectionMap,
    ForensicTags,
    MergedAnalysis,
    NodeKind,
    NodeType,
    Position,
    PsychoProfile,
    RelationshipKind,
    Suspect,
    SuspectRanking,
    WitnessAnalysis,
    coerce_stage,
)


# ---------------------------------------------------------------------------
# Test: Boundary coercion
# ---------------------------------------------------------------------------


class TestCoerceStage:
    def test_empty_payload_gives_empty_record(self):
        record = coerce_stage(ForensicTags, {})
        assert record.evidence_tags == []

    def test_non_dict_payload_gives_empty_record(self):
        assert coerce_stage(SuspectRanking, ["SUS-01"]).suspects == []
        assert coerce_stage(SuspectRanking, None).suspects == []

    def test_extra_keys_survive_into_context(self):
        record = coerce_stage(ForensicTags, {"evidence_tags": [], "analyst_note": "x"})
        assert record.to_context()["analyst_note"] == "x"

    def test_malformed_items_are_dropped_individually(self):
        record = coerce_stage(
            WitnessAnalysis,
            {"key_claims": [{"claim": "saw a van"}, "garbage", 42]},
        )
        assert [c.claim for c in record.key_claims] == ["saw a van"]

    def test_scalar_where_list_expected(self):
        record = coerce_stage(
            ForensicTags,
            {"evidence_tags": [{"evidence_id": "EVID-01", "objects": "knife"}]},
        )
        assert record.evidence_tags[0].objects == ["knife"]

    def test_numbers_become_text(self):
        record = coerce_stage(ForensicTags, {"evidence_tags": [{"evidence_id": 7}]})
        assert record.evidence_tags[0].evidence_id == "7"

    def test_confidence_defaults_and_clamps(self):
        record = coerce_stage(
            WitnessAnalysis,
            {"key_claims": [
                {"claim": "a", "confidence": "high"},
                {"claim": "b", "confidence": 3},
                {"claim": "c", "confidence": -1},
            ]},
        )
        assert [c.confidence for c in record.key_claims] == [0.5, 1.0, 0.0]

    def test_modus_operandi_string_falls_back(self):
        record = coerce_stage(PsychoProfile, {"modus_operandi": "quiet entry"})
        assert record.modus_operandi.description == ""

    def test_ui_must_be_an_object(self):
        assert coerce_stage(MergedAnalysis, {"ui": "dark"}).ui == {}


# ---------------------------------------------------------------------------
# Test: Suspects
# ---------------------------------------------------------------------------


class TestSuspect:
    def test_missing_guilt_defaults_to_zero(self):
        assert Suspect.model_validate({"display_name": "A"}).guilt_probability == 0

    def test_percent_string(self):
        assert Suspect.model_validate({"guilt_probability": "35%"}).guilt_probability == 35

    def test_guilt_is_clamped(self):
        assert Suspect.model_validate({"guilt_probability": 150}).guilt_probability == 100
        assert Suspect.model_validate({"guilt_probability": -5}).guilt_probability == 0

    def test_blank_name(self):
        assert Suspect.model_validate({"display_name": "  "}).display_name == "Unknown Suspect"

    def test_key_attributes_non_dict(self):
        suspect = Suspect.model_validate({"key_attributes": "tall"})
        assert suspect.key_attributes.description is None

    def test_ranking_assigns_missing_ids_by_position(self):
        ranking = coerce_stage(
            SuspectRanking,
            {"suspects": [
                {"display_name": "A"},
                {"suspect_id": "SUS-09", "display_name": "B"},
                {"display_name": "C"},
            ]},
        )
        assert [s.suspect_id for s in ranking.suspects] == ["SUS-01", "SUS-09", "SUS-03"]

    def test_relationship_without_target_is_dropped(self):
        suspect = Suspect.model_validate(
            {"relationships": [{"label": "knows"}, {"target_suspect_id": "SUS-02"}]}
        )
        assert [r.target_suspect_id for r in suspect.relationships] == ["SUS-02"]


# ---------------------------------------------------------------------------
# Test: Board nodes and connections
# ---------------------------------------------------------------------------


class TestBoardNode:
    def test_suspect_prefix_sets_kind(self):
        node = BoardNode.model_validate({"id": "SUS-01", "type": "PHOTO"})
        assert node.kind is NodeKind.SUSPECT
        assert node.type is NodeType.SUSPECT
        assert node.is_suspect

    def test_suspect_type_alias(self):
        node = BoardNode.model_validate({"id": "X-1", "type": "poi"})
        assert node.kind is NodeKind.SUSPECT

    def test_evidence_type_is_case_insensitive(self):
        node = BoardNode.model_validate({"id": "EVID-01", "type": "photo"})
        assert node.kind is NodeKind.EVIDENCE
        assert node.type is NodeType.PHOTO

    def test_unknown_type_becomes_note(self):
        node = BoardNode.model_validate({"id": "EVID-01", "type": "HOLOGRAM"})
        assert node.type is NodeType.NOTE

    def test_explicit_enum_kind(self):
        node = BoardNode(id="EVID-01", kind=NodeKind.EVIDENCE, type=NodeType.PDF)
        assert node.kind is NodeKind.EVIDENCE
        assert node.type is NodeType.PDF

    def test_position_coercion(self):
        node = BoardNode.model_validate({"id": "E", "position": {"x": "10", "y": 20}})
        assert node.position == Position(x=10, y=20)

    def test_bad_position_is_none(self):
        node = BoardNode.model_validate({"id": "E", "position": "top-left"})
        assert node.position is None

    def test_nodes_without_id_are_dropped(self):
        record = coerce_stage(
            ConnectionMap, {"nodes": [{"id": ""}, {"title": "x"}, {"id": "EVID-01"}]}
        )
        assert [n.id for n in record.nodes] == ["EVID-01"]

    def test_long_id_and_title_fit_the_board_table(self):
        node = BoardNode.model_validate(
            {"id": "EVID-" + "9" * 300, "title": "x" * 2000}
        )
        assert len(node.id) == NODE_ID_MAX_LENGTH
        assert node.id.startswith("EVID-")
        assert len(node.title) == NODE_TITLE_MAX_LENGTH

    def test_long_ids_cut_consistently(self):
        long_id = "SUS-" + "a" * 200
        suspect = Suspect.model_validate({"suspect_id": long_id})
        edge = Connection.model_validate({"source_id": long_id, "target_id": "EVID-01"})
        node = BoardNode.model_validate({"id": long_id})
        assert suspect.suspect_id == edge.source_id == node.id


class TestConnection:
    def test_relationship_normalised(self):
        edge = Connection.model_validate(
            {"source_id": "A", "target_id": "B", "relationship": "Seen With"}
        )
        assert edge.relationship is RelationshipKind.SEEN_WITH

    def test_unknown_relationship_is_none(self):
        edge = Connection.model_validate(
            {"source_id": "A", "target_id": "B", "relationship": "cousin"}
        )
        assert edge.relationship is None

    def test_edges_need_both_endpoints(self):
        record = coerce_stage(
            ConnectionMap,
            {"edges": [
                {"source_id": "A"},
                {"source_id": "A", "target_id": " "},
                {"source_id": "A", "target_id": "B", "label": "matches"},
            ]},
        )
        assert len(record.edges) == 1
        assert record.edges[0].confidence == 0.5

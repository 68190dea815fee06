# =============================================================================
# Board Assembly: From Stage Records to a Renderable Graph
# =============================================================================
#
# Turns the seven stage records into one BoardAnalysis:
#
#   build_final_output()     merge stage records, drop repeated node ids,
#                            synthesise missing suspect nodes
#   ensure_evidence_nodes()  one node per evidence item, even when the whole
#                            chain came back empty
#   prune_connections()      drop edges to unknown nodes and duplicate pairs
#   assemble_board()         all of the above, then lane layout if the
#                            suggested positions are unusable
#
# Source precedence: nodes, edges and suspects come from their dedicated
# stages (ConnectionMapper, SuspectRanker) when those produced anything, and
# from the DeskSergeant merge otherwise.
#
# Node ids are unique on the board. When an agent repeats an id, the first
# node with that id is kept and later ones are dropped, the same rule
# prune_connections() applies to repeated edge pairs.
# =============================================================================

from __future__ import annotations

import copy
import json
import logging
from collections.abc import Sequence

from crimeboard.agents.orchestrator import OrchestrationResult
from crimeboard.models.board import DEFAULT_UI, BoardAnalysis, EvidenceItem
from crimeboard.models.stages import (
    BoardNode,
    Connection,
    NodeKind,
    NodeType,
    Position,
    Suspect,
)
from crimeboard.services.layout import assign_layout, needs_layout

logger = logging.getLogger(__name__)

# Grid used for synthesised suspect nodes before the layout engine runs
SUSPECT_GRID_X = 100
SUSPECT_GRID_STEP = 150
SUSPECT_GRID_COLUMNS = 4
SUSPECT_GRID_Y = 300

REASON_TAG_LENGTH = 20


# ---------------------------------------------------------------------------
# Evidence summary (pipeline input)
# ---------------------------------------------------------------------------


def build_evidence_summary(evidence: Sequence[EvidenceItem]) -> str:
    """
    Format evidence as the newline-delimited list the agents read.

    Example output:
        EVID-01: photo - "scene.jpg" - Tags: ["blood", "knife"]
        EVID-02: statement - "witness.txt" - Text: "I saw a man..."
    """
    lines = []
    for item in evidence:
        line = f'{item.display_id}: {item.kind} - "{item.filename}"'
        if item.extracted_text:
            line += f" - Text: {json.dumps(item.extracted_text)}"
        if item.tags:
            line += f" - Tags: {json.dumps(item.tags)}"
        lines.append(line)
    return "\n".join(lines)


# ---------------------------------------------------------------------------
# Merge
# ---------------------------------------------------------------------------


def build_final_output(
    result: OrchestrationResult, case_title: str,
) -> BoardAnalysis:
    """Merge the stage records into the board-ready analysis."""
    merged = result.merged_analysis
    case_file = result.case_file

    suspects = list(result.suspect_ranking.suspects or merged.suspects)
    nodes = unique_nodes(result.connection_map.nodes or merged.evidence_nodes)
    edges = list(result.connection_map.edges or merged.connections)

    known = {node.id for node in nodes}
    for suspect in suspects:
        if suspect.suspect_id in known:
            continue
        nodes.append(suspect_node(suspect, len(nodes)))
        known.add(suspect.suspect_id)
        logger.info("Synthesised node for suspect %s", suspect.suspect_id)

    return BoardAnalysis(
        case_title=merged.case_title or case_title,
        master_summary=merged.master_summary,
        timeline=list(merged.timeline),
        suspects=suspects,
        evidence_nodes=nodes,
        connections=edges,
        ui=merged.ui or copy.deepcopy(DEFAULT_UI),
        next_step=merged.next_step,
        prosecutor_notes=merged.prosecutor_notes or case_file.executive_summary,
        case_file=case_file,
    )


def unique_nodes(nodes: Sequence[BoardNode]) -> list[BoardNode]:
    """Keep the first node for each id."""
    seen: set[str] = set()
    kept: list[BoardNode] = []
    for node in nodes:
        if node.id in seen:
            continue
        seen.add(node.id)
        kept.append(node)
    if len(kept) < len(nodes):
        logger.warning(
            "Dropped %d nodes with repeated ids", len(nodes) - len(kept),
        )
    return kept


def suspect_node(suspect: Suspect, node_count: int) -> BoardNode:
    """Board node for a suspect the ConnectionMapper left out."""
    return BoardNode(
        id=suspect.suspect_id,
        kind=NodeKind.SUSPECT,
        type=NodeType.SUSPECT,
        title=f"{suspect.display_name} ({suspect.guilt_probability}%)",
        data={
            "text": suspect.key_attributes.description or "",
            "tags": [
                reason.reason[:REASON_TAG_LENGTH]
                for reason in suspect.why_suspected
            ],
            "guilt_probability": suspect.guilt_probability,
            "suspect_data": suspect.to_context(),
        },
        position=Position(
            x=SUSPECT_GRID_X
            + (node_count % SUSPECT_GRID_COLUMNS) * SUSPECT_GRID_STEP,
            y=SUSPECT_GRID_Y,
        ),
    )


# ---------------------------------------------------------------------------
# Evidence completeness
# ---------------------------------------------------------------------------


def _node_type_for(item: EvidenceItem) -> NodeType:
    kind = item.kind.lower()
    if kind == "photo":
        return NodeType.PHOTO
    if kind == "statement":
        return NodeType.STATEMENT
    if kind == "document":
        if item.filename.lower().endswith(".pdf"):
            return NodeType.PDF
        return NodeType.TEXT
    return NodeType.NOTE


def evidence_node(item: EvidenceItem) -> BoardNode:
    """Board node built straight from an evidence item."""
    return BoardNode(
        id=item.display_id,
        kind=NodeKind.EVIDENCE,
        type=_node_type_for(item),
        title=item.filename or item.display_id,
        data={
            "url": None,
            "text": item.extracted_text,
            "tags": list(item.tags),
            "kind": item.kind,
        },
        position=Position(x=0, y=0),
    )


def ensure_evidence_nodes(
    analysis: BoardAnalysis, evidence: Sequence[EvidenceItem],
) -> BoardAnalysis:
    """
    Guarantee one node per evidence item.

    When the chain produced neither nodes nor suspects, the board is built
    from the evidence alone. Otherwise any evidence item missing from the
    board gets its own node.
    """
    if not analysis.evidence_nodes and not analysis.suspects:
        if evidence:
            logger.warning(
                "Agent chain produced no graph; building %d nodes from "
                "evidence", len(evidence),
            )
        return analysis.model_copy(
            update={"evidence_nodes": [evidence_node(item) for item in evidence]}
        )

    present = analysis.node_ids()
    missing = [
        evidence_node(item) for item in evidence
        if item.display_id not in present
    ]
    if not missing:
        return analysis

    logger.info(
        "Adding %d evidence nodes missing from the agent graph: %s",
        len(missing), ", ".join(node.id for node in missing),
    )
    return analysis.model_copy(
        update={"evidence_nodes": [*analysis.evidence_nodes, *missing]}
    )


def prune_connections(analysis: BoardAnalysis) -> BoardAnalysis:
    """Drop edges whose endpoints are not on the board, and duplicate pairs."""
    node_ids = analysis.node_ids()
    seen: set[tuple[str, str]] = set()
    kept: list[Connection] = []
    dangling = 0

    for edge in analysis.connections:
        if edge.source_id not in node_ids or edge.target_id not in node_ids:
            dangling += 1
            continue
        pair = (edge.source_id, edge.target_id)
        if pair in seen:
            continue
        seen.add(pair)
        kept.append(edge)

    if dangling:
        logger.warning("Dropped %d edges referencing unknown nodes", dangling)
    if len(kept) == len(analysis.connections):
        return analysis
    return analysis.model_copy(update={"connections": kept})


# ---------------------------------------------------------------------------
# Public API
# ---------------------------------------------------------------------------


def assemble_board(
    result: OrchestrationResult,
    case_title: str,
    evidence: Sequence[EvidenceItem],
) -> BoardAnalysis:
    """Build the final, laid-out board for one orchestration run."""
    analysis = build_final_output(result, case_title)
    analysis = ensure_evidence_nodes(analysis, evidence)
    analysis = prune_connections(analysis)

    if needs_layout(analysis.evidence_nodes):
        analysis = analysis.model_copy(
            update={
                "evidence_nodes": assign_layout(analysis.evidence_nodes, evidence),
            }
        )

    logger.info(
        "Board assembled: nodes=%d, edges=%d, suspects=%d",
        len(analysis.evidence_nodes),
        len(analysis.connections),
        len(analysis.suspects),
    )
    return analysis

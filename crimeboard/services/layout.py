# =============================================================================
# Board Layout: Deterministic Lane Placement
# =============================================================================
#
# Positions suggested by the ConnectionMapper agent are unreliable: often all
# (0, 0), often stacked on top of each other. This module is the fallback
# that always yields a renderable board.
#
# LANES:
#   SCENE    x=100   photos, forensic and physical evidence
#   WITNESS  x=450   statements, interviews, reports
#   OTHER    x=800   everything else
#   SUSPECT  one centred row below all evidence lanes
#
# Evidence lanes stack downward from y=80 in strides of 220. Suspects are
# spread 360 apart, centred within a nominal 1100-wide board.
#
# COLLISIONS:
# Two positions collide when both axes are within 80% of their stride. A
# colliding candidate is nudged (horizontal jitter, vertical step) a bounded
# number of times, then accepted as-is. The jitter comes from a hash of the
# node id, so the same input always yields the same board.
#
# Node counts are small (tens), so the quadratic collision scan is fine.
# =============================================================================

from __future__ import annotations

import enum
import hashlib
import logging
from collections.abc import Sequence

from crimeboard.models.board import EvidenceItem
from crimeboard.models.stages import BoardNode, NodeKind, NodeType, Position

logger = logging.getLogger(__name__)


class Lane(str, enum.Enum):
    SCENE = "SCENE"
    WITNESS = "WITNESS"
    SUSPECT = "SUSPECT"
    OTHER = "OTHER"


LANE_X = {
    Lane.SCENE: 100,
    Lane.WITNESS: 450,
    Lane.OTHER: 800,
}

LANE_LABELS = {
    Lane.SCENE: "Scene Evidence",
    Lane.WITNESS: "Witnesses",
    Lane.OTHER: "Other Evidence",
    Lane.SUSPECT: "Suspects",
}

EVIDENCE_LANES = (Lane.SCENE, Lane.WITNESS, Lane.OTHER)

VERTICAL_SPACING = 220
HORIZONTAL_SPACING = 360
EVIDENCE_START_Y = 80
SUSPECT_ROW_Y = 500
BOARD_WIDTH = 1100
SUSPECT_MIN_X = 100
OVERLAP_FACTOR = 0.8

EVIDENCE_MAX_ATTEMPTS = 10
EVIDENCE_JITTER = 50
EVIDENCE_NUDGE_Y = 20
SUSPECT_MAX_ATTEMPTS = 5
SUSPECT_JITTER = 30

VALID_POSITION_SHARE = 0.5
DISTINCT_POSITION_SHARE = 0.7

SCENE_KEYWORDS = (
    "scene", "photo", "image", "crime", "forensic", "blood", "weapon",
    "fingerprint", "dna", "ballistic",
)
WITNESS_KEYWORDS = (
    "witness", "statement", "interview", "testimony", "account", "report",
    "deposition",
)
SUSPECT_TYPES = {"suspect", "poi", "person_of_interest"}


# ---------------------------------------------------------------------------
# Classification
# ---------------------------------------------------------------------------


def find_evidence(
    node: BoardNode, evidence: Sequence[EvidenceItem] | None,
) -> EvidenceItem | None:
    """Match a node to an evidence item by id or filename substring."""
    title = node.title or ""
    for item in evidence or ():
        if item.display_id and item.display_id in node.id:
            return item
        if item.filename and item.filename in title:
            return item
        if title and title in (item.filename or ""):
            return item
    return None


def classify_node(
    node: BoardNode, evidence: Sequence[EvidenceItem] | None = None,
) -> Lane:
    """Assign a node to exactly one lane."""
    node_type = node.type.value.lower()
    if node.kind is NodeKind.SUSPECT or node_type in SUSPECT_TYPES:
        return Lane.SUSPECT

    linked = find_evidence(node, evidence)
    filename = (linked.filename if linked else "").lower()
    evidence_kind = (linked.kind if linked else "").lower()
    data_kind = str(node.data.get("kind") or "").lower()
    tags = node.data.get("tags") or []
    tag_text = " ".join(str(t) for t in tags) if isinstance(tags, list) else ""

    haystack = " ".join(
        [node_type, node.title.lower(), data_kind, filename, evidence_kind,
         tag_text.lower()]
    )

    if (
        node.type is NodeType.PHOTO
        or evidence_kind in ("photo", "image")
        or any(kw in haystack for kw in SCENE_KEYWORDS)
    ):
        return Lane.SCENE

    if (
        node.type in (NodeType.STATEMENT, NodeType.TEXT)
        or evidence_kind in ("statement", "text")
        or any(kw in haystack for kw in WITNESS_KEYWORDS)
    ):
        return Lane.WITNESS

    return Lane.OTHER


def node_lane_label(
    node: BoardNode, evidence: Sequence[EvidenceItem] | None = None,
) -> str:
    """Human-readable lane name, for display."""
    return LANE_LABELS[classify_node(node, evidence)]


# ---------------------------------------------------------------------------
# Layout decision
# ---------------------------------------------------------------------------


def needs_layout(nodes: Sequence[BoardNode]) -> bool:
    """
    Decide whether the suggested positions are unusable.

    True when fewer than half the nodes have a non-origin position, or when
    the positioned nodes cluster onto fewer than 70% distinct points.
    """
    if not nodes:
        return False

    valid = [
        node.position for node in nodes
        if node.position is not None and not node.position.is_origin
    ]
    if len(valid) < len(nodes) * VALID_POSITION_SHARE:
        return True

    distinct = {(p.x, p.y) for p in valid}
    return len(distinct) < len(valid) * DISTINCT_POSITION_SHARE


# ---------------------------------------------------------------------------
# Placement
# ---------------------------------------------------------------------------


def _overlaps(placed: list[Position], x: float, y: float) -> bool:
    return any(
        abs(p.x - x) < HORIZONTAL_SPACING * OVERLAP_FACTOR
        and abs(p.y - y) < VERTICAL_SPACING * OVERLAP_FACTOR
        for p in placed
    )


def _jitter(node_id: str, attempt: int) -> float:
    """Deterministic value in [-0.5, 0.5) derived from the node id."""
    digest = hashlib.sha256(f"{node_id}:{attempt}".encode()).digest()
    return int.from_bytes(digest[:4], "big") / 2**32 - 0.5


def _place(
    node_id: str,
    x: float,
    y: float,
    placed: list[Position],
    max_attempts: int,
    jitter: float,
    nudge_y: float,
) -> Position:
    attempts = 0
    while _overlaps(placed, x, y) and attempts < max_attempts:
        x += _jitter(node_id, attempts) * jitter
        y += nudge_y
        attempts += 1
    if attempts and _overlaps(placed, x, y):
        logger.debug("Accepting overlapping position for %s", node_id)
    position = Position(x=round(x), y=round(y))
    placed.append(position)
    return position


def assign_layout(
    nodes: Sequence[BoardNode],
    evidence: Sequence[EvidenceItem] | None = None,
) -> list[BoardNode]:
    """
    Give every node a lane-based position.

    Returns new node objects in the input order. Only `position` changes.
    """
    if not nodes:
        return []

    lanes: dict[Lane, list[int]] = {lane: [] for lane in Lane}
    for index, node in enumerate(nodes):
        lanes[classify_node(node, evidence)].append(index)

    positions: dict[int, Position] = {}
    placed: list[Position] = []

    for lane in EVIDENCE_LANES:
        for row, index in enumerate(lanes[lane]):
            positions[index] = _place(
                nodes[index].id,
                LANE_X[lane],
                EVIDENCE_START_Y + row * VERTICAL_SPACING,
                placed,
                EVIDENCE_MAX_ATTEMPTS,
                EVIDENCE_JITTER,
                EVIDENCE_NUDGE_Y,
            )

    suspects = lanes[Lane.SUSPECT]
    if suspects:
        # The suspect row always sits below the deepest evidence node.
        row_y = SUSPECT_ROW_Y
        if placed:
            row_y = max(row_y, max(p.y for p in placed) + VERTICAL_SPACING)
        total_width = (len(suspects) - 1) * HORIZONTAL_SPACING
        start_x = max(SUSPECT_MIN_X, (BOARD_WIDTH - total_width) / 2)

        for column, index in enumerate(suspects):
            positions[index] = _place(
                nodes[index].id,
                start_x + column * HORIZONTAL_SPACING,
                row_y,
                placed,
                SUSPECT_MAX_ATTEMPTS,
                SUSPECT_JITTER,
                0,
            )

    logger.info(
        "Assigned layout: scene=%d, witness=%d, other=%d, suspects=%d",
        len(lanes[Lane.SCENE]), len(lanes[Lane.WITNESS]),
        len(lanes[Lane.OTHER]), len(suspects),
    )

    return [
        node.model_copy(update={"position": positions[index]})
        for index, node in enumerate(nodes)
    ]

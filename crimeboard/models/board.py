# =============================================================================
# Board Models: Evidence Items and the Unified Analysis
# =============================================================================
#
# EvidenceItem is the read-only view of one registered piece of evidence as
# the pipeline sees it. BoardAnalysis is the board-ready result handed back
# to the API and persisted with the case.
# =============================================================================

from __future__ import annotations

import copy
from typing import Any

from pydantic import BaseModel, ConfigDict, Field

from crimeboard.models.stages import (
    EVIDENCE_ID_PREFIX,
    BoardNode,
    CaseFileNarrative,
    Connection,
    Suspect,
    TimelineEvent,
)

DEFAULT_UI: dict[str, Any] = {
    "theme": {"bg": "#0B0B12", "nodeGlow": "#5EE7FF", "laser": "#FF3D81"},
    "physics": {"floatStrength": 0.6, "repel": 0.8},
}


def evidence_display_id(position: int) -> str:
    """EVID-NN label for the evidence item at 1-based `position`."""
    return f"{EVIDENCE_ID_PREFIX}{position:02d}"


class EvidenceItem(BaseModel):
    """One evidence item, frozen for the duration of an analysis."""

    model_config = ConfigDict(frozen=True)

    id: int | str
    display_id: str
    kind: str = "other"
    filename: str = ""
    extracted_text: str | None = None
    tags: list[str] = Field(default_factory=list)


class BoardAnalysis(BaseModel):
    """The unified, board-ready output of one analysis."""

    case_title: str = ""
    master_summary: str = ""
    timeline: list[TimelineEvent] = Field(default_factory=list)
    suspects: list[Suspect] = Field(default_factory=list)
    evidence_nodes: list[BoardNode] = Field(default_factory=list)
    connections: list[Connection] = Field(default_factory=list)
    ui: dict[str, Any] = Field(default_factory=lambda: copy.deepcopy(DEFAULT_UI))
    next_step: str = ""
    prosecutor_notes: str = ""
    case_file: CaseFileNarrative = Field(default_factory=CaseFileNarrative)

    def node_ids(self) -> set[str]:
        return {node.id for node in self.evidence_nodes}

# =============================================================================
# Case Analysis Service
# =============================================================================
#
# The one entry point behind `POST /cases/{id}/analyze`:
#
#   1. Validate: the case exists and has evidence
#   2. Status → analyzing
#   3. Evidence rows → EvidenceItems (EVID-01, EVID-02, ... in registration
#      order) → evidence summary
#   4. Seven-stage orchestration → board assembly → persist (status analyzed)
#   5. Any failure after step 2 → status error, exception re-raised
# =============================================================================

from __future__ import annotations

import logging
from collections.abc import Sequence

from crimeboard.agents.orchestrator import run_orchestration
from crimeboard.db.models import CaseStatus, Evidence
from crimeboard.models.board import BoardAnalysis, EvidenceItem, evidence_display_id
from crimeboard.services.board import assemble_board, build_evidence_summary
from crimeboard.services.board_store import BoardStore
from crimeboard.services.llm import AgentClient

logger = logging.getLogger(__name__)


class CaseNotFoundError(LookupError):
    """The requested case does not exist."""


class NoEvidenceError(ValueError):
    """The case has no evidence to analyse."""


def to_evidence_items(rows: Sequence[Evidence]) -> list[EvidenceItem]:
    """Evidence rows → pipeline items, numbered from EVID-01."""
    return [
        EvidenceItem(
            id=row.id,
            display_id=evidence_display_id(position),
            kind=getattr(row.kind, "value", row.kind) or "other",
            filename=row.filename or "",
            extracted_text=row.extracted_text,
            tags=[str(tag) for tag in (row.tags_json or [])],
        )
        for position, row in enumerate(rows, start=1)
    ]


async def analyze_case(
    store: BoardStore,
    case_id: int,
    client: AgentClient | None = None,
) -> BoardAnalysis:
    """
    Run the full analysis for one case and persist the board.

    Raises:
        CaseNotFoundError: No case with this id.
        NoEvidenceError: The case has no evidence.
    """
    case = await store.get_case(case_id)
    if case is None:
        raise CaseNotFoundError(f"Case {case_id} not found")

    rows = await store.list_evidence(case_id)
    if not rows:
        raise NoEvidenceError(f"Case {case_id} has no evidence to analyze")

    await store.set_status(case_id, CaseStatus.ANALYZING)
    logger.info("Analyzing case %s (%d evidence items)", case_id, len(rows))

    try:
        evidence = to_evidence_items(rows)
        summary = build_evidence_summary(evidence)

        result = await run_orchestration(
            case_title=case.title,
            case_id=str(case_id),
            evidence_summary=summary,
            client=client,
        )
        analysis = assemble_board(result, case.title, evidence)
        await store.save_analysis(case_id, analysis)
    except Exception:
        logger.exception("Analysis of case %s failed", case_id)
        await store.mark_error(case_id)
        raise

    logger.info("Case %s analyzed", case_id)
    return analysis

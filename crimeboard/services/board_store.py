# =============================================================================
# Board Store: Persistence for Cases, Evidence and Boards
# =============================================================================
#
# Thin async repository over the ORM models. Route handlers and the analysis
# service talk to this class only, never to the session directly, which
# keeps them testable with an in-memory fake.
#
# REPLACE-ON-REANALYSIS:
# `save_analysis()` deletes every node and edge of the case and inserts the
# new set in the same commit as the analysis JSON and the ANALYZED status.
# A failed commit leaves the previous board in place.
#
# FAILURE:
# `mark_error()` rolls the session back before recording ERROR, so a failed
# flush or commit cannot block the status update.
# =============================================================================

from __future__ import annotations

import logging

from sqlalchemy import delete, select
from sqlalchemy.ext.asyncio import AsyncSession

from crimeboard.db.models import (
    BoardEdge,
    BoardNode,
    Case,
    CaseStatus,
    Evidence,
    EvidenceKind,
)
from crimeboard.models.board import BoardAnalysis

logger = logging.getLogger(__name__)


class BoardStore:
    """Async persistence for one request's session."""

    def __init__(self, session: AsyncSession) -> None:
        self._session = session

    # -----------------------------------------------------------------------
    # Cases
    # -----------------------------------------------------------------------

    async def create_case(self, title: str) -> Case:
        case = Case(title=title, status=CaseStatus.OPEN)
        self._session.add(case)
        await self._session.commit()
        await self._session.refresh(case)
        logger.info("Created case %s: %s", case.id, title)
        return case

    async def list_cases(self) -> list[Case]:
        result = await self._session.execute(
            select(Case).order_by(Case.created_at.desc(), Case.id.desc())
        )
        return list(result.scalars().all())

    async def get_case(self, case_id: int) -> Case | None:
        return await self._session.get(Case, case_id)

    async def set_status(self, case_id: int, status: CaseStatus) -> None:
        case = await self._session.get(Case, case_id)
        if case is None:
            logger.warning("Cannot set status of unknown case %s", case_id)
            return
        case.status = status
        await self._session.commit()
        logger.info("Case %s status → %s", case_id, status.value)

    async def mark_error(self, case_id: int) -> None:
        """Discard pending changes and record a failed analysis."""
        await self._session.rollback()
        await self.set_status(case_id, CaseStatus.ERROR)

    async def delete_case(self, case_id: int) -> bool:
        """
        Delete a case. False if there was no such case.

        Evidence, nodes and edges go with it through the ON DELETE CASCADE
        foreign keys.
        """
        result = await self._session.execute(
            delete(Case).where(Case.id == case_id)
        )
        await self._session.commit()
        if not result.rowcount:
            return False
        logger.info("Deleted case %s", case_id)
        return True

    # -----------------------------------------------------------------------
    # Evidence
    # -----------------------------------------------------------------------

    async def add_evidence(
        self,
        case_id: int,
        kind: EvidenceKind,
        filename: str,
        extracted_text: str | None = None,
        tags: list[str] | None = None,
        storage_key: str | None = None,
    ) -> Evidence:
        evidence = Evidence(
            case_id=case_id,
            kind=kind,
            filename=filename,
            extracted_text=extracted_text,
            tags_json=tags,
            storage_key=storage_key,
        )
        self._session.add(evidence)
        await self._session.commit()
        await self._session.refresh(evidence)
        return evidence

    async def list_evidence(self, case_id: int) -> list[Evidence]:
        """Evidence in registration order (this order defines EVID-NN)."""
        result = await self._session.execute(
            select(Evidence)
            .where(Evidence.case_id == case_id)
            .order_by(Evidence.created_at, Evidence.id)
        )
        return list(result.scalars().all())

    # -----------------------------------------------------------------------
    # Board
    # -----------------------------------------------------------------------

    async def save_analysis(self, case_id: int, analysis: BoardAnalysis) -> None:
        """Store the analysis and replace the case's nodes and edges."""
        case = await self._session.get(Case, case_id)
        if case is None:
            raise LookupError(f"Case {case_id} not found")

        case.analysis_json = analysis.model_dump(mode="json")
        case.status = CaseStatus.ANALYZED

        await self._session.execute(
            delete(BoardNode).where(BoardNode.case_id == case_id)
        )
        await self._session.execute(
            delete(BoardEdge).where(BoardEdge.case_id == case_id)
        )

        for node in analysis.evidence_nodes:
            position = node.position
            self._session.add(
                BoardNode(
                    case_id=case_id,
                    node_id=node.id,
                    node_kind=node.kind.value,
                    node_type=node.type.value,
                    title=node.title,
                    data_json=node.data,
                    x=position.x if position else 0,
                    y=position.y if position else 0,
                )
            )

        for edge in analysis.connections:
            self._session.add(
                BoardEdge(
                    case_id=case_id,
                    source_id=edge.source_id,
                    target_id=edge.target_id,
                    label=edge.label,
                    confidence=edge.confidence,
                    relationship_kind=(
                        edge.relationship.value if edge.relationship else None
                    ),
                )
            )

        await self._session.commit()
        logger.info(
            "Saved board for case %s: %d nodes, %d edges",
            case_id, len(analysis.evidence_nodes), len(analysis.connections),
        )

    async def get_board(
        self, case_id: int,
    ) -> tuple[list[BoardNode], list[BoardEdge]]:
        nodes = await self._session.execute(
            select(BoardNode)
            .where(BoardNode.case_id == case_id)
            .order_by(BoardNode.id)
        )
        edges = await self._session.execute(
            select(BoardEdge)
            .where(BoardEdge.case_id == case_id)
            .order_by(BoardEdge.id)
        )
        return list(nodes.scalars().all()), list(edges.scalars().all())

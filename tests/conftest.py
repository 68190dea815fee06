# =============================================================================
# Shared test fakes: in-memory store and scripted agent client
# =============================================================================
#
# Nothing here touches a database or the network. FakeStore mirrors the
# BoardStore interface; FakeAgentClient answers each stage by its system
# prompt.
# =============================================================================

from __future__ import annotations

import itertools
import json
from dataclasses import dataclass, field
from datetime import UTC, datetime
from typing import Any

import pytest

from crimeboard.db.models import CaseStatus, EvidenceKind
from crimeboard.models.board import BoardAnalysis


@dataclass
class FakeCase:
    id: int
    title: str
    status: CaseStatus = CaseStatus.OPEN
    analysis_json: dict | None = None
    created_at: datetime = field(default_factory=lambda: datetime.now(UTC))
    updated_at: datetime = field(default_factory=lambda: datetime.now(UTC))


@dataclass
class FakeEvidence:
    id: int
    case_id: int
    kind: EvidenceKind
    filename: str
    storage_key: str | None = None
    extracted_text: str | None = None
    tags_json: list | None = None
    created_at: datetime = field(default_factory=lambda: datetime.now(UTC))


@dataclass
class FakeNodeRow:
    node_id: str
    node_kind: str
    node_type: str
    title: str
    data_json: dict | None
    x: float
    y: float


@dataclass
class FakeEdgeRow:
    source_id: str
    target_id: str
    label: str
    confidence: float
    relationship_kind: str | None


class FakeStore:
    """In-memory stand-in for BoardStore."""

    def __init__(self) -> None:
        self.cases: dict[int, FakeCase] = {}
        self.evidence: list[FakeEvidence] = []
        self.nodes: dict[int, list[FakeNodeRow]] = {}
        self.edges: dict[int, list[FakeEdgeRow]] = {}
        self.status_history: list[CaseStatus] = []
        self.saved: list[BoardAnalysis] = []
        self._case_ids = itertools.count(1)

    async def create_case(self, title: str) -> FakeCase:
        case = FakeCase(id=next(self._case_ids), title=title)
        self.cases[case.id] = case
        return case

    async def list_cases(self) -> list[FakeCase]:
        return sorted(self.cases.values(), key=lambda c: c.id, reverse=True)

    async def get_case(self, case_id: int) -> FakeCase | None:
        return self.cases.get(case_id)

    async def set_status(self, case_id: int, status: CaseStatus) -> None:
        self.cases[case_id].status = status
        self.status_history.append(status)

    async def mark_error(self, case_id: int) -> None:
        await self.set_status(case_id, CaseStatus.ERROR)

    async def delete_case(self, case_id: int) -> bool:
        if self.cases.pop(case_id, None) is None:
            return False
        self.evidence = [e for e in self.evidence if e.case_id != case_id]
        self.nodes.pop(case_id, None)
        self.edges.pop(case_id, None)
        return True

    async def add_evidence(
        self,
        case_id: int,
        kind: EvidenceKind,
        filename: str,
        extracted_text: str | None = None,
        tags: list[str] | None = None,
        storage_key: str | None = None,
    ) -> FakeEvidence:
        item = FakeEvidence(
            id=len(self.evidence) + 1,
            case_id=case_id,
            kind=kind,
            filename=filename,
            storage_key=storage_key,
            extracted_text=extracted_text,
            tags_json=tags,
        )
        self.evidence.append(item)
        return item

    async def list_evidence(self, case_id: int) -> list[FakeEvidence]:
        return [e for e in self.evidence if e.case_id == case_id]

    async def save_analysis(self, case_id: int, analysis: BoardAnalysis) -> None:
        case = self.cases[case_id]
        case.analysis_json = analysis.model_dump(mode="json")
        case.status = CaseStatus.ANALYZED
        self.status_history.append(CaseStatus.ANALYZED)
        self.saved.append(analysis)
        self.nodes[case_id] = [
            FakeNodeRow(
                node_id=n.id,
                node_kind=n.kind.value,
                node_type=n.type.value,
                title=n.title,
                data_json=n.data,
                x=n.position.x if n.position else 0,
                y=n.position.y if n.position else 0,
            )
            for n in analysis.evidence_nodes
        ]
        self.edges[case_id] = [
            FakeEdgeRow(
                source_id=e.source_id,
                target_id=e.target_id,
                label=e.label,
                confidence=e.confidence,
                relationship_kind=e.relationship.value if e.relationship else None,
            )
            for e in analysis.connections
        ]

    async def get_board(self, case_id: int):
        return self.nodes.get(case_id, []), self.edges.get(case_id, [])


class FakeAgentClient:
    """
    Scripted agent: replies are looked up by system prompt.

    Unscripted stages answer "{}". Prompts listed in `failing` raise.
    """

    def __init__(
        self,
        replies: dict[str, Any] | None = None,
        failing: set[str] | None = None,
    ) -> None:
        self.replies = replies or {}
        self.failing = failing or set()
        self.calls: list[tuple[str, str]] = []

    async def call(self, system_prompt: str, user_prompt: str) -> str:
        self.calls.append((system_prompt, user_prompt))
        if system_prompt in self.failing:
            raise RuntimeError("agent exploded")
        reply = self.replies.get(system_prompt, "{}")
        return reply if isinstance(reply, str) else json.dumps(reply)

    def prompt_for(self, system_prompt: str) -> str:
        for system, user in self.calls:
            if system == system_prompt:
                return user
        raise AssertionError("stage was never called")


@pytest.fixture
def store() -> FakeStore:
    return FakeStore()


@pytest.fixture
def agent() -> FakeAgentClient:
    return FakeAgentClient()


@pytest.fixture
def make_agent():
    """Factory for scripted agents: make_agent(replies=..., failing=...)."""
    return FakeAgentClient

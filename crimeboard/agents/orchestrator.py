# =============================================================================
# LangGraph Orchestrator: Seven-Stage Investigation Pipeline
# =============================================================================
#
# Wires the seven agent roles into a LangGraph StateGraph. Every stage reads
# the fixed case context plus the records of earlier stages and writes its
# own record back into the state.
#
# GRAPH TOPOLOGY:
#   START ──▶ forensic_tagger ──▶ witness_analyst ──▶ psycho_profiler
#         ──▶ suspect_ranker ──▶ connection_mapper ──▶ desk_sergeant
#         ──▶ case_file_writer ──▶ END
#
# There are no conditional edges: every stage runs, in order, whatever the
# previous stage produced. A stage whose call or parse fails contributes its
# empty record and the chain moves on. Nothing a stage does can abort the
# remaining stages.
#
# CONTEXT PER STAGE:
#   1 ForensicTagger     base
#   2 WitnessAnalyst     base + forensic tags
#   3 PsychoProfiler     base + witness analysis
#   4 SuspectRanker      base + forensic tags + witness analysis + profile
#   5 ConnectionMapper   base + suspects
#   6 DeskSergeant       base + stages 1-5
#   7 CaseFileWriter     base + merged analysis
#
# The graph is compiled once at import. The agent client travels in the
# state, so concurrent invocations share nothing mutable.
# =============================================================================

from __future__ import annotations

import json
import logging
from dataclasses import dataclass, field

from langgraph.graph import END, START, StateGraph
from typing_extensions import TypedDict

from crimeboard.agents import prompts
from crimeboard.models.stages import (
    CaseFileNarrative,
    ConnectionMap,
    ForensicTags,
    MergedAnalysis,
    PsychoProfile,
    StageRecord,
    SuspectRanking,
    WitnessAnalysis,
    coerce_stage,
)
from crimeboard.services.llm import AgentClient, get_agent_client
from crimeboard.services.parser import parse_agent_json

logger = logging.getLogger(__name__)

TOTAL_STAGES = 7


# ---------------------------------------------------------------------------
# State and Result
# ---------------------------------------------------------------------------


class InvestigationState(TypedDict, total=False):
    """
    State that flows through the graph.

    total=False so each node only returns the key it produces.
    """

    # --- Input (set by caller) ---
    case_title: str
    case_id: str
    evidence_summary: str
    base_context: str
    # Not JSON-serialisable; fine while no checkpointer is configured.
    client: AgentClient

    # --- Stage records ---
    forensic_tags: ForensicTags
    witness_analysis: WitnessAnalysis
    psycho_profile: PsychoProfile
    suspect_ranking: SuspectRanking
    connection_map: ConnectionMap
    merged_analysis: MergedAnalysis
    case_file: CaseFileNarrative


@dataclass
class OrchestrationResult:
    """The seven stage records of one pipeline run."""

    forensic_tags: ForensicTags = field(default_factory=ForensicTags)
    witness_analysis: WitnessAnalysis = field(default_factory=WitnessAnalysis)
    psycho_profile: PsychoProfile = field(default_factory=PsychoProfile)
    suspect_ranking: SuspectRanking = field(default_factory=SuspectRanking)
    connection_map: ConnectionMap = field(default_factory=ConnectionMap)
    merged_analysis: MergedAnalysis = field(default_factory=MergedAnalysis)
    case_file: CaseFileNarrative = field(default_factory=CaseFileNarrative)


# ---------------------------------------------------------------------------
# Stage runner
# ---------------------------------------------------------------------------


async def _run_stage(
    state: InvestigationState,
    step: int,
    stage_name: str,
    system_prompt: str,
    record_type: type[StageRecord],
    sections: list[tuple[str, StageRecord]],
) -> StageRecord:
    """Call one agent, parse its answer and coerce it to the stage record."""
    logger.info("Orchestration step %d/%d: %s", step, TOTAL_STAGES, stage_name)

    user_prompt = _compose_prompt(state["base_context"], sections)
    try:
        raw = await state["client"].call(system_prompt, user_prompt)
        record = coerce_stage(record_type, parse_agent_json(raw))
    except Exception:
        logger.exception("%s failed; continuing with an empty result", stage_name)
        return record_type()

    return record


def _prior(state: InvestigationState, key: str, record_type: type[StageRecord]):
    return state.get(key) or record_type()


# ---------------------------------------------------------------------------
# Node Functions
# ---------------------------------------------------------------------------


async def forensic_tagger_node(state: InvestigationState) -> dict:
    record = await _run_stage(
        state, 1, "ForensicTagger", prompts.FORENSIC_TAGGER, ForensicTags, [],
    )
    return {"forensic_tags": record}


async def witness_analyst_node(state: InvestigationState) -> dict:
    record = await _run_stage(
        state, 2, "WitnessAnalyst", prompts.WITNESS_ANALYST, WitnessAnalysis,
        [("FORENSIC TAGS", _prior(state, "forensic_tags", ForensicTags))],
    )
    return {"witness_analysis": record}


async def psycho_profiler_node(state: InvestigationState) -> dict:
    record = await _run_stage(
        state, 3, "PsychoProfiler", prompts.PSYCHO_PROFILER, PsychoProfile,
        [("WITNESS ANALYSIS", _prior(state, "witness_analysis", WitnessAnalysis))],
    )
    return {"psycho_profile": record}


async def suspect_ranker_node(state: InvestigationState) -> dict:
    record = await _run_stage(
        state, 4, "SuspectRanker", prompts.SUSPECT_RANKER, SuspectRanking,
        [
            ("FORENSIC TAGS", _prior(state, "forensic_tags", ForensicTags)),
            ("WITNESS ANALYSIS", _prior(state, "witness_analysis", WitnessAnalysis)),
            ("BEHAVIORAL PROFILE", _prior(state, "psycho_profile", PsychoProfile)),
        ],
    )
    logger.info("SuspectRanker returned %d suspects", len(record.suspects))
    return {"suspect_ranking": record}


async def connection_mapper_node(state: InvestigationState) -> dict:
    record = await _run_stage(
        state, 5, "ConnectionMapper", prompts.CONNECTION_MAPPER, ConnectionMap,
        [("SUSPECTS", _prior(state, "suspect_ranking", SuspectRanking))],
    )
    logger.info(
        "ConnectionMapper returned %d nodes, %d edges",
        len(record.nodes), len(record.edges),
    )
    return {"connection_map": record}


async def desk_sergeant_node(state: InvestigationState) -> dict:
    record = await _run_stage(
        state, 6, "DeskSergeant (merge)", prompts.DESK_SERGEANT, MergedAnalysis,
        [
            ("FORENSIC TAGS", _prior(state, "forensic_tags", ForensicTags)),
            ("WITNESS ANALYSIS", _prior(state, "witness_analysis", WitnessAnalysis)),
            ("BEHAVIORAL PROFILE", _prior(state, "psycho_profile", PsychoProfile)),
            ("SUSPECTS", _prior(state, "suspect_ranking", SuspectRanking)),
            ("CONNECTION MAP", _prior(state, "connection_map", ConnectionMap)),
        ],
    )
    return {"merged_analysis": record}


async def case_file_writer_node(state: InvestigationState) -> dict:
    record = await _run_stage(
        state, 7, "CaseFileWriter", prompts.CASE_FILE_WRITER, CaseFileNarrative,
        [("FINAL ANALYSIS", _prior(state, "merged_analysis", MergedAnalysis))],
    )
    return {"case_file": record}


# ---------------------------------------------------------------------------
# Graph Assembly
# ---------------------------------------------------------------------------

STAGE_NODES = [
    ("forensic_tagger", forensic_tagger_node),
    ("witness_analyst", witness_analyst_node),
    ("psycho_profiler", psycho_profiler_node),
    ("suspect_ranker", suspect_ranker_node),
    ("connection_mapper", connection_mapper_node),
    ("desk_sergeant", desk_sergeant_node),
    ("case_file_writer", case_file_writer_node),
]

_builder = StateGraph(InvestigationState)
for _name, _node in STAGE_NODES:
    _builder.add_node(_name, _node)

_builder.add_edge(START, STAGE_NODES[0][0])
for (_upstream, _), (_downstream, _) in zip(STAGE_NODES, STAGE_NODES[1:]):
    _builder.add_edge(_upstream, _downstream)
_builder.add_edge(STAGE_NODES[-1][0], END)

graph = _builder.compile()


# ---------------------------------------------------------------------------
# Public API
# ---------------------------------------------------------------------------


async def run_orchestration(
    case_title: str,
    case_id: str,
    evidence_summary: str,
    client: AgentClient | None = None,
) -> OrchestrationResult:
    """
    Run all seven stages for one case.

    Args:
        case_title: Human-readable case title.
        case_id: Case identifier, echoed into the agents' context.
        evidence_summary: Newline-delimited "EVID-NN: ..." lines.
        client: Agent client override. Defaults to the settings-backed
            singleton.

    Returns:
        OrchestrationResult holding every stage record. Degraded stages
        hold empty records.
    """
    initial_state: InvestigationState = {
        "case_title": case_title,
        "case_id": case_id,
        "evidence_summary": evidence_summary,
        "base_context": build_base_context(case_title, case_id, evidence_summary),
        "client": client or get_agent_client(),
    }

    logger.info(
        "Starting multi-agent analysis: case_id=%s, evidence_lines=%d",
        case_id, len(evidence_summary.splitlines()),
    )

    final_state = await graph.ainvoke(initial_state)

    result = OrchestrationResult(
        forensic_tags=_prior(final_state, "forensic_tags", ForensicTags),
        witness_analysis=_prior(final_state, "witness_analysis", WitnessAnalysis),
        psycho_profile=_prior(final_state, "psycho_profile", PsychoProfile),
        suspect_ranking=_prior(final_state, "suspect_ranking", SuspectRanking),
        connection_map=_prior(final_state, "connection_map", ConnectionMap),
        merged_analysis=_prior(final_state, "merged_analysis", MergedAnalysis),
        case_file=_prior(final_state, "case_file", CaseFileNarrative),
    )

    logger.info(
        "Multi-agent analysis complete: suspects=%d, nodes=%d",
        len(result.suspect_ranking.suspects),
        len(result.connection_map.nodes),
    )
    return result


# ---------------------------------------------------------------------------
# Internal Helpers
# ---------------------------------------------------------------------------


def build_base_context(case_title: str, case_id: str, evidence_summary: str) -> str:
    return (
        f"CASE TITLE: {case_title}\n"
        f"CASE ID: {case_id}\n\n"
        f"EVIDENCE ITEMS:\n{evidence_summary}"
    )


def _compose_prompt(base_context: str, sections: list[tuple[str, StageRecord]]) -> str:
    """
    Append prior stage records to the base context.

    Example output:
        CASE TITLE: Warehouse Break-in
        ...
        EVIDENCE ITEMS:
        EVID-01: photo - "scene.jpg"

        FORENSIC TAGS:
        {"evidence_tags": [...]}
    """
    parts = [base_context]
    for heading, record in sections:
        parts.append(f"{heading}:\n{json.dumps(record.to_context())}")
    return "\n\n".join(parts)

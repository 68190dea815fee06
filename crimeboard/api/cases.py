# =============================================================================
# Cases API: Cases, Evidence, Analysis and the Board
# =============================================================================
#
#   POST /cases                         create a case
#   GET  /cases                         list cases, newest first
#   GET  /cases/{case_id}               case metadata + latest analysis
#   DELETE /cases/{case_id}             delete a case with its evidence and board
#   POST /cases/{case_id}/evidence      register an evidence item
#   GET  /cases/{case_id}/evidence      evidence in registration order
#   POST /cases/{case_id}/analyze       run the seven-stage analysis
#   GET  /cases/{case_id}/board         persisted nodes and edges
#   POST /cases/{case_id}/composite     suspect composite image prompt
#
# Handlers are thin: validation, a call into the store or the analysis
# service, and mapping domain errors to HTTP status codes.
# =============================================================================

from __future__ import annotations

import logging

from fastapi import APIRouter, Depends, HTTPException

from crimeboard.api.deps import get_board_store
from crimeboard.db.models import EvidenceKind
from crimeboard.models.requests import (
    CaseCreateRequest,
    CompositeRequest,
    EvidenceRegisterRequest,
)
from crimeboard.models.responses import (
    AnalyzeResponse,
    BoardEdgeResponse,
    BoardNodeResponse,
    BoardResponse,
    CaseDetailResponse,
    CaseResponse,
    CompositeResponse,
    DeleteCaseResponse,
    EvidenceResponse,
)
from crimeboard.services.board_store import BoardStore
from crimeboard.services.composite import COMPOSITE_NOTE, build_composite_prompt
from crimeboard.services.investigation import (
    CaseNotFoundError,
    NoEvidenceError,
    analyze_case,
)
from crimeboard.services.llm import AgentClient, get_agent_client
from crimeboard.services.tagger import generate_tags

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/cases", tags=["Cases"])


async def _require_case(store: BoardStore, case_id: int):
    case = await store.get_case(case_id)
    if case is None:
        raise HTTPException(status_code=404, detail=f"Case {case_id} not found.")
    return case


# ---------------------------------------------------------------------------
# Cases
# ---------------------------------------------------------------------------


@router.post(
    "",
    response_model=CaseResponse,
    status_code=201,
    summary="Create a case",
)
async def create_case(
    request: CaseCreateRequest,
    store: BoardStore = Depends(get_board_store),
) -> CaseResponse:
    case = await store.create_case(request.title)
    return CaseResponse.model_validate(case)


@router.get(
    "",
    response_model=list[CaseResponse],
    summary="List cases",
)
async def list_cases(
    store: BoardStore = Depends(get_board_store),
) -> list[CaseResponse]:
    cases = await store.list_cases()
    return [CaseResponse.model_validate(case) for case in cases]


@router.get(
    "/{case_id}",
    response_model=CaseDetailResponse,
    summary="Get a case and its latest analysis",
)
async def get_case(
    case_id: int,
    store: BoardStore = Depends(get_board_store),
) -> CaseDetailResponse:
    case = await _require_case(store, case_id)
    return CaseDetailResponse.model_validate(case)


@router.delete(
    "/{case_id}",
    response_model=DeleteCaseResponse,
    summary="Delete a case",
    description="Deletes the case together with its evidence and board.",
)
async def delete_case(
    case_id: int,
    store: BoardStore = Depends(get_board_store),
) -> DeleteCaseResponse:
    if not await store.delete_case(case_id):
        raise HTTPException(status_code=404, detail=f"Case {case_id} not found.")
    return DeleteCaseResponse(case_id=case_id)


# ---------------------------------------------------------------------------
# Evidence
# ---------------------------------------------------------------------------


@router.post(
    "/{case_id}/evidence",
    response_model=EvidenceResponse,
    status_code=201,
    summary="Register an evidence item",
    description=(
        "Registers an uploaded file's metadata. Photos registered without "
        "tags are tagged from keywords in their filename."
    ),
)
async def register_evidence(
    case_id: int,
    request: EvidenceRegisterRequest,
    store: BoardStore = Depends(get_board_store),
) -> EvidenceResponse:
    await _require_case(store, case_id)

    tags = request.tags
    if tags is None and request.kind == EvidenceKind.PHOTO:
        tags = generate_tags(request.filename).tags
        logger.info("Auto-tagged %s: %s", request.filename, tags)

    evidence = await store.add_evidence(
        case_id,
        kind=request.kind,
        filename=request.filename,
        extracted_text=request.extracted_text,
        tags=tags,
        storage_key=request.storage_key,
    )
    return EvidenceResponse.model_validate(evidence)


@router.get(
    "/{case_id}/evidence",
    response_model=list[EvidenceResponse],
    summary="List a case's evidence",
)
async def list_evidence(
    case_id: int,
    store: BoardStore = Depends(get_board_store),
) -> list[EvidenceResponse]:
    await _require_case(store, case_id)
    rows = await store.list_evidence(case_id)
    return [EvidenceResponse.model_validate(row) for row in rows]


# ---------------------------------------------------------------------------
# Analysis
# ---------------------------------------------------------------------------


@router.post(
    "/{case_id}/analyze",
    response_model=AnalyzeResponse,
    summary="Analyze a case",
    description=(
        "Runs the seven agent stages over the case's evidence, assembles "
        "the investigation board and stores it. Stages that fail degrade to "
        "empty output; the board is still produced from the evidence."
    ),
)
async def analyze(
    case_id: int,
    store: BoardStore = Depends(get_board_store),
    client: AgentClient = Depends(get_agent_client),
) -> AnalyzeResponse:
    try:
        analysis = await analyze_case(store, case_id, client=client)
    except CaseNotFoundError as e:
        raise HTTPException(status_code=404, detail=str(e)) from e
    except NoEvidenceError as e:
        raise HTTPException(status_code=400, detail=str(e)) from e
    except Exception as e:
        logger.exception("Analyze failed for case %s", case_id)
        raise HTTPException(
            status_code=500,
            detail=f"Analysis failed: {e}",
        ) from e

    return AnalyzeResponse(success=True, analysis=analysis)


@router.get(
    "/{case_id}/board",
    response_model=BoardResponse,
    summary="Get the persisted board",
)
async def get_board(
    case_id: int,
    store: BoardStore = Depends(get_board_store),
) -> BoardResponse:
    await _require_case(store, case_id)
    nodes, edges = await store.get_board(case_id)
    return BoardResponse(
        case_id=case_id,
        nodes=[BoardNodeResponse.model_validate(node) for node in nodes],
        edges=[BoardEdgeResponse.model_validate(edge) for edge in edges],
    )


@router.post(
    "/{case_id}/composite",
    response_model=CompositeResponse,
    summary="Build a suspect composite prompt",
    description=(
        "Turns a witness description into a photorealistic composite sketch "
        "prompt for an image-generation model. No image is generated."
    ),
)
async def composite(
    case_id: int,
    request: CompositeRequest,
    store: BoardStore = Depends(get_board_store),
) -> CompositeResponse:
    await _require_case(store, case_id)
    sketch = build_composite_prompt(request.suspect_description)
    logger.info(
        "Composite for case %s: %d features", case_id, len(sketch.features),
    )
    return CompositeResponse(
        case_id=case_id,
        composite_prompt=sketch.prompt,
        features=sketch.features,
        note=COMPOSITE_NOTE,
    )

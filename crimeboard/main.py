# =============================================================================
# CrimeBoard: FastAPI Application
# =============================================================================
#
# Run locally:
#   uvicorn crimeboard.main:app --reload
#
# Interactive docs at /docs.
# =============================================================================

import logging

from fastapi import FastAPI

from crimeboard.api.cases import router as cases_router
from crimeboard.config import settings
from crimeboard.models.responses import HealthResponse
from crimeboard.services.llm import AgentConfig

logging.basicConfig(
    level=settings.log_level.upper(),
    format="%(asctime)s %(levelname)s %(name)s: %(message)s",
)

app = FastAPI(
    title=settings.app_name,
    version=settings.app_version,
    description=(
        "Evidence-to-board investigation analysis: a chain of seven agent "
        "stages turns a case's evidence into a graph of evidence and "
        "suspect nodes."
    ),
)

app.include_router(cases_router)


@app.get("/health", response_model=HealthResponse, tags=["Health"])
async def health() -> HealthResponse:
    return HealthResponse(
        version=settings.app_version,
        service=settings.app_name,
        agent_configured=AgentConfig.from_settings().is_configured,
    )

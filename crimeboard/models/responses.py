# =============================================================================
# API Response Models: Pydantic V2 Schemas
# =============================================================================
#
# Shapes of data going OUT of the API. ORM rows are converted with
# `from_attributes=True`; internal columns (storage keys, raw JSON blobs)
# are exposed only where a client needs them.
# =============================================================================

from datetime import datetime
from typing import Any

from pydantic import BaseModel, ConfigDict, Field, computed_field

from crimeboard.db.models import CaseStatus, EvidenceKind
from crimeboard.models.board import BoardAnalysis
from crimeboard.services.tagger import extract_entity_hints


class HealthResponse(BaseModel):
    """Response for GET /health: confirms the API is running."""

    status: str = "ok"
    version: str
    service: str
    agent_configured: bool


class CaseResponse(BaseModel):
    """Case metadata, returned on creation and in listings."""

    id: int
    title: str
    status: CaseStatus
    created_at: datetime
    updated_at: datetime

    model_config = ConfigDict(from_attributes=True)


class EntityHintResponse(BaseModel):
    type: str
    value: str


class EvidenceResponse(BaseModel):
    id: int
    case_id: int
    kind: EvidenceKind
    filename: str
    storage_key: str | None = None
    extracted_text: str | None = None
    tags: list[str] | None = Field(default=None, validation_alias="tags_json")
    created_at: datetime

    model_config = ConfigDict(from_attributes=True, populate_by_name=True)

    @computed_field
    @property
    def entity_hints(self) -> list[EntityHintResponse]:
        """Dates and times mentioned in the extracted text."""
        return [
            EntityHintResponse(type=hint.type, value=hint.value)
            for hint in extract_entity_hints(self.extracted_text)
        ]


class CaseDetailResponse(CaseResponse):
    """Response for GET /cases/{case_id}: metadata plus the latest analysis."""

    analysis: BoardAnalysis | None = Field(
        default=None,
        validation_alias="analysis_json",
        description="Latest analysis, or null if the case was never analyzed",
    )

    model_config = ConfigDict(from_attributes=True, populate_by_name=True)


class AnalyzeResponse(BaseModel):
    """Response for POST /cases/{case_id}/analyze."""

    success: bool = True
    analysis: BoardAnalysis


class BoardNodeResponse(BaseModel):
    node_id: str
    node_kind: str
    node_type: str
    title: str
    data: dict[str, Any] | None = Field(default=None, validation_alias="data_json")
    x: float
    y: float

    model_config = ConfigDict(from_attributes=True, populate_by_name=True)


class BoardEdgeResponse(BaseModel):
    source_id: str
    target_id: str
    label: str
    confidence: float
    relationship: str | None = Field(
        default=None, validation_alias="relationship_kind",
    )

    model_config = ConfigDict(from_attributes=True, populate_by_name=True)


class BoardResponse(BaseModel):
    """Response for GET /cases/{case_id}/board: the persisted graph."""

    case_id: int
    nodes: list[BoardNodeResponse]
    edges: list[BoardEdgeResponse]


class DeleteCaseResponse(BaseModel):
    """Response for DELETE /cases/{case_id}."""

    success: bool = True
    case_id: int


class CompositeResponse(BaseModel):
    """Response for POST /cases/{case_id}/composite."""

    success: bool = True
    case_id: int
    composite_prompt: str
    features: list[str]
    image_url: str | None = Field(
        default=None,
        description="Generated image, when an image model is configured",
    )
    note: str

# =============================================================================
# API Request Models: Pydantic V2 Schemas
# =============================================================================
#
# Shapes of data coming INTO the API. FastAPI validates request bodies
# against these (automatic 422 on invalid data) and uses them for the
# OpenAPI docs at /docs.
# =============================================================================

from pydantic import BaseModel, ConfigDict, Field

from crimeboard.db.models import EvidenceKind


class CaseCreateRequest(BaseModel):
    """Request body for POST /cases."""

    title: str = Field(
        ...,
        min_length=1,
        max_length=500,
        description="Human-readable case title",
        examples=["The Riverside Break-in"],
    )


class EvidenceRegisterRequest(BaseModel):
    """
    Request body for POST /cases/{case_id}/evidence.

    The file itself is uploaded to object storage by the client; this
    registers its metadata and any text already extracted from it. Photos
    registered without tags are tagged from their filename.

    Example:
        {
            "kind": "statement",
            "filename": "witness_statement.txt",
            "extracted_text": "I saw a man in a red jacket near the door."
        }
    """

    kind: EvidenceKind = Field(
        default=EvidenceKind.OTHER,
        description="Evidence kind: photo, document, statement or other",
    )
    filename: str = Field(..., min_length=1, max_length=500)
    storage_key: str | None = Field(
        default=None,
        max_length=1000,
        description="Object storage key of the uploaded file",
    )
    extracted_text: str | None = Field(
        default=None,
        description="Text transcribed or extracted from the file",
    )
    tags: list[str] | None = Field(
        default=None,
        description="Descriptive tags. Omit to auto-tag photos.",
    )

    model_config = ConfigDict(
        json_schema_extra={
            "examples": [
                {
                    "kind": "photo",
                    "filename": "crime_scene_knife.jpg",
                },
                {
                    "kind": "statement",
                    "filename": "witness_statement.txt",
                    "extracted_text": "I saw a man in a red jacket near the door.",
                },
            ]
        }
    )


class CompositeRequest(BaseModel):
    """Request body for POST /cases/{case_id}/composite."""

    suspect_description: str = Field(
        ...,
        min_length=1,
        description="Witness description of the suspect",
        examples=["Tall man, about 30 years old, wearing a red jacket"],
    )

    model_config = ConfigDict(str_strip_whitespace=True)

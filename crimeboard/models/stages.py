# =============================================================================
# Agent Stage Records: Pydantic V2 Schemas
# =============================================================================
#
# Each of the seven pipeline stages returns an untyped JSON object. These
# models give every stage output a shape the rest of the code can rely on.
#
# COERCION RULES:
# - Every field is optional with an empty default. A degraded stage ("{}")
#   validates to an all-empty record.
# - Unknown keys are preserved (extra="allow") so the next agent still sees
#   everything the previous one said.
# - Malformed list items are dropped one at a time; the rest of the list
#   survives.
# - Malformed scalars fall back to their defaults.
# - `coerce_stage()` never raises.
#
# NODE DISCRIMINATOR:
# `BoardNode.kind` (EVIDENCE | SUSPECT) is inferred once, here, from the type
# tag or the "SUS-" id prefix. Layout and assembly code only look at `kind`.
#
# Node ids and titles are cut to the board table column widths
# (NODE_ID_MAX_LENGTH, NODE_TITLE_MAX_LENGTH) so agent text can never fail
# the save.
# =============================================================================

from __future__ import annotations

import enum
import logging
import re
from typing import Annotated, Any, TypeVar

from pydantic import (
    BaseModel,
    BeforeValidator,
    ConfigDict,
    Field,
    TypeAdapter,
    ValidationError,
    field_validator,
    model_validator,
)

logger = logging.getLogger(__name__)

SUSPECT_ID_PREFIX = "SUS-"
EVIDENCE_ID_PREFIX = "EVID-"

DEFAULT_CONFIDENCE = 0.5

NODE_ID_MAX_LENGTH = 100
NODE_TITLE_MAX_LENGTH = 500


# ---------------------------------------------------------------------------
# Lenient field helpers
# ---------------------------------------------------------------------------


def _lenient_list(item_type: Any) -> BeforeValidator:
    """Validate list items one by one, dropping the ones that fail."""
    adapter = TypeAdapter(item_type)

    def _coerce(value: Any) -> list:
        if value is None:
            return []
        if not isinstance(value, list):
            value = [value]
        kept = []
        for item in value:
            try:
                kept.append(adapter.validate_python(item))
            except ValidationError:
                logger.debug("Dropping malformed %s: %r", item_type, item)
        return kept

    return BeforeValidator(_coerce)


def _string_list(value: Any) -> list[str]:
    if value is None:
        return []
    if isinstance(value, (str, int, float)):
        value = [value]
    if not isinstance(value, list):
        return []
    return [str(v) for v in value if isinstance(v, (str, int, float)) and str(v)]


def _optional_text(value: Any) -> str | None:
    if value is None or isinstance(value, (dict, list)):
        return None
    return str(value)


def _text(value: Any) -> str:
    return _optional_text(value) or ""


def _node_id(value: Any) -> str:
    return _text(value).strip()[:NODE_ID_MAX_LENGTH]


def _node_title(value: Any) -> str:
    return _text(value)[:NODE_TITLE_MAX_LENGTH]


def _confidence(value: Any) -> float:
    try:
        number = float(value)
    except (TypeError, ValueError):
        return DEFAULT_CONFIDENCE
    if number != number:  # NaN
        return DEFAULT_CONFIDENCE
    return min(max(number, 0.0), 1.0)


_PERCENT = re.compile(r"-?\d+(?:\.\d+)?")


def _guilt(value: Any) -> int:
    if isinstance(value, bool):
        return 0
    if isinstance(value, (int, float)):
        number = float(value)
    else:
        match = _PERCENT.search(str(value or ""))
        if not match:
            return 0
        number = float(match.group(0))
    if number != number:
        return 0
    return int(min(max(round(number), 0), 100))


StrList = Annotated[list[str], BeforeValidator(_string_list)]
Text = Annotated[str, BeforeValidator(_text)]
OptionalText = Annotated[str | None, BeforeValidator(_optional_text)]
Confidence = Annotated[float, BeforeValidator(_confidence)]
NodeId = Annotated[str, BeforeValidator(_node_id)]
NodeTitle = Annotated[str, BeforeValidator(_node_title)]


def _lenient_dict(value: Any) -> dict:
    return value if isinstance(value, dict) else {}


FreeDict = Annotated[dict[str, Any], BeforeValidator(_lenient_dict)]


class StageRecord(BaseModel):
    """Base for every agent-produced structure."""

    model_config = ConfigDict(extra="allow", coerce_numbers_to_str=True)

    def to_context(self) -> dict[str, Any]:
        """JSON-ready dict used as context for downstream agents."""
        return self.model_dump(mode="json", exclude_none=True)


# ---------------------------------------------------------------------------
# Stage 1: ForensicTagger
# ---------------------------------------------------------------------------


class EvidenceTag(StageRecord):
    evidence_id: Text = ""
    objects: StrList = []
    locations: StrList = []
    timestamps: StrList = []
    people_descriptors: StrList = []
    vehicles: StrList = []
    forensic_notes: StrList = []


class ForensicTags(StageRecord):
    evidence_tags: Annotated[list[EvidenceTag], _lenient_list(EvidenceTag)] = []


# ---------------------------------------------------------------------------
# Stage 2: WitnessAnalyst
# ---------------------------------------------------------------------------


class SuspectDescriptor(StageRecord):
    source_evidence_id: Text = ""
    physical: FreeDict = {}
    clothing: StrList = []
    behavior: StrList = []
    confidence: Confidence = DEFAULT_CONFIDENCE


class TimelineHint(StageRecord):
    time_estimate: Text = ""
    event: Text = ""
    source_evidence_id: Text = ""


class KeyClaim(StageRecord):
    claim: Text = ""
    source_evidence_id: Text = ""
    confidence: Confidence = DEFAULT_CONFIDENCE


class WitnessAnalysis(StageRecord):
    suspect_descriptors: Annotated[
        list[SuspectDescriptor], _lenient_list(SuspectDescriptor)
    ] = []
    timeline_hints: Annotated[list[TimelineHint], _lenient_list(TimelineHint)] = []
    key_claims: Annotated[list[KeyClaim], _lenient_list(KeyClaim)] = []


# ---------------------------------------------------------------------------
# Stage 3: PsychoProfiler
# ---------------------------------------------------------------------------


class BehavioralHypothesis(StageRecord):
    hypothesis: Text = ""
    supporting_evidence: StrList = []
    confidence: Confidence = DEFAULT_CONFIDENCE


class ModusOperandi(StageRecord):
    description: Text = ""
    indicators: StrList = []


class PsychoProfile(StageRecord):
    behavioral_hypotheses: Annotated[
        list[BehavioralHypothesis], _lenient_list(BehavioralHypothesis)
    ] = []
    modus_operandi: ModusOperandi = Field(default_factory=ModusOperandi)

    @field_validator("modus_operandi", mode="before")
    @classmethod
    def _modus_operandi(cls, value: Any) -> Any:
        return value if isinstance(value, (dict, ModusOperandi)) else {}


# ---------------------------------------------------------------------------
# Stage 4: SuspectRanker
# ---------------------------------------------------------------------------


class SuspectReason(StageRecord):
    reason: Text = ""
    evidence_ids: StrList = []


class KeyAttributes(StageRecord):
    description: OptionalText = None
    vehicle: OptionalText = None
    last_seen: OptionalText = None


class SuspectRelationship(StageRecord):
    target_suspect_id: NodeId
    label: Text = ""
    evidence_ids: StrList = []


class Suspect(StageRecord):
    """
    A person of interest.

    guilt_probability is always present (0-100). Scores are independent
    across suspects and do not sum to 100.
    """

    suspect_id: NodeId = ""
    display_name: Text = "Unknown Suspect"
    guilt_probability: Annotated[int, BeforeValidator(_guilt)] = 0
    why_suspected: Annotated[list[SuspectReason], _lenient_list(SuspectReason)] = []
    key_attributes: KeyAttributes = Field(default_factory=KeyAttributes)
    relationships: Annotated[
        list[SuspectRelationship], _lenient_list(SuspectRelationship)
    ] = []
    recommended_next_action: OptionalText = None

    @field_validator("key_attributes", mode="before")
    @classmethod
    def _key_attributes(cls, value: Any) -> Any:
        return value if isinstance(value, (dict, KeyAttributes)) else {}

    @field_validator("display_name", mode="after")
    @classmethod
    def _display_name(cls, value: str) -> str:
        return value.strip() or "Unknown Suspect"


def _number_suspects(suspects: list[Suspect]) -> list[Suspect]:
    """Give id-less suspects a SUS-NN id based on their position."""
    for index, suspect in enumerate(suspects, 1):
        if not suspect.suspect_id.strip():
            suspect.suspect_id = f"{SUSPECT_ID_PREFIX}{index:02d}"
    return suspects


class SuspectRanking(StageRecord):
    suspects: Annotated[list[Suspect], _lenient_list(Suspect)] = []

    @model_validator(mode="after")
    def _assign_ids(self) -> SuspectRanking:
        _number_suspects(self.suspects)
        return self


# ---------------------------------------------------------------------------
# Stage 5: ConnectionMapper (graph primitives)
# ---------------------------------------------------------------------------


class NodeKind(str, enum.Enum):
    EVIDENCE = "EVIDENCE"
    SUSPECT = "SUSPECT"


class NodeType(str, enum.Enum):
    PHOTO = "PHOTO"
    STATEMENT = "STATEMENT"
    TIMELINE = "TIMELINE"
    COMPOSITE = "COMPOSITE"
    NOTE = "NOTE"
    PDF = "PDF"
    TEXT = "TEXT"
    SUSPECT = "SUSPECT"


_SUSPECT_TYPE_ALIASES = {"SUSPECT", "POI", "PERSON_OF_INTEREST"}


class RelationshipKind(str, enum.Enum):
    SUPPORTS = "supports"
    CONTRADICTS = "contradicts"
    SEEN_WITH = "seen_with"
    RELATES = "relates"


class Position(BaseModel):
    x: float = 0
    y: float = 0

    @property
    def is_origin(self) -> bool:
        return self.x == 0 and self.y == 0


def _position(value: Any) -> Any:
    if isinstance(value, Position):
        return value
    if not isinstance(value, dict):
        return None
    try:
        return Position(x=float(value.get("x", 0)), y=float(value.get("y", 0)))
    except (TypeError, ValueError):
        return None


def _enum_text(value: Any) -> str:
    if isinstance(value, enum.Enum):
        value = value.value
    return str(value or "").strip()


class BoardNode(StageRecord):
    """
    A vertex on the board.

    `id` is the display label (EVID-01, SUS-02, ...). `kind` is the
    discriminator everything downstream uses.
    """

    id: NodeId
    kind: NodeKind = NodeKind.EVIDENCE
    type: NodeType = NodeType.NOTE
    title: NodeTitle = ""
    data: FreeDict = {}
    position: Annotated[Position | None, BeforeValidator(_position)] = None

    @model_validator(mode="before")
    @classmethod
    def _infer_kind(cls, value: Any) -> Any:
        if not isinstance(value, dict):
            return value
        value = dict(value)
        raw_type = _enum_text(value.get("type")).upper()
        raw_kind = _enum_text(value.get("kind")).upper()
        node_id = str(value.get("id") or "")

        if raw_kind not in NodeKind.__members__:
            is_suspect = (
                raw_type in _SUSPECT_TYPE_ALIASES
                or node_id.upper().startswith(SUSPECT_ID_PREFIX)
            )
            raw_kind = "SUSPECT" if is_suspect else "EVIDENCE"
        value["kind"] = raw_kind

        if raw_kind == "SUSPECT":
            value["type"] = NodeType.SUSPECT.value
        elif raw_type in NodeType.__members__ and raw_type != "SUSPECT":
            value["type"] = raw_type
        else:
            value["type"] = NodeType.NOTE.value
        return value

    @field_validator("id", mode="after")
    @classmethod
    def _require_id(cls, value: str) -> str:
        if not value.strip():
            raise ValueError("node id must not be empty")
        return value.strip()

    @property
    def is_suspect(self) -> bool:
        return self.kind is NodeKind.SUSPECT


class Connection(StageRecord):
    source_id: NodeId
    target_id: NodeId
    label: Text = ""
    confidence: Confidence = DEFAULT_CONFIDENCE
    relationship: RelationshipKind | None = None

    @field_validator("relationship", mode="before")
    @classmethod
    def _relationship(cls, value: Any) -> Any:
        if value is None:
            return None
        normalised = str(value).strip().lower().replace(" ", "_")
        if normalised in {r.value for r in RelationshipKind}:
            return normalised
        return None

    @model_validator(mode="after")
    def _require_endpoints(self) -> Connection:
        if not self.source_id.strip() or not self.target_id.strip():
            raise ValueError("connection needs both endpoints")
        return self


class ConnectionMap(StageRecord):
    nodes: Annotated[list[BoardNode], _lenient_list(BoardNode)] = []
    edges: Annotated[list[Connection], _lenient_list(Connection)] = []


# ---------------------------------------------------------------------------
# Stage 6: DeskSergeant (merge)
# ---------------------------------------------------------------------------


class TimelineEvent(StageRecord):
    t: Text = ""
    event: Text = ""
    evidence_ids: StrList = []


class MergedAnalysis(StageRecord):
    case_title: Text = ""
    master_summary: Text = ""
    timeline: Annotated[list[TimelineEvent], _lenient_list(TimelineEvent)] = []
    suspects: Annotated[list[Suspect], _lenient_list(Suspect)] = []
    evidence_nodes: Annotated[list[BoardNode], _lenient_list(BoardNode)] = []
    connections: Annotated[list[Connection], _lenient_list(Connection)] = []
    ui: FreeDict = {}
    next_step: Text = ""
    prosecutor_notes: Text = ""

    @model_validator(mode="after")
    def _assign_ids(self) -> MergedAnalysis:
        _number_suspects(self.suspects)
        return self


# ---------------------------------------------------------------------------
# Stage 7: CaseFileWriter
# ---------------------------------------------------------------------------


class CaseFileNarrative(StageRecord):
    executive_summary: Text = ""
    evidence_narrative: Text = ""
    suspect_analysis: Text = ""
    timeline_narrative: Text = ""
    chain_of_custody_notes: Text = ""
    recommended_charges: StrList = []
    gaps_and_next_steps: Text = ""


# ---------------------------------------------------------------------------
# Boundary coercion
# ---------------------------------------------------------------------------

RecordT = TypeVar("RecordT", bound=StageRecord)


def coerce_stage(model: type[RecordT], raw: Any) -> RecordT:
    """
    Validate a parsed agent payload into its stage record.

    Falls back to the empty record when the payload cannot be salvaged.
    """
    if not isinstance(raw, dict):
        return model()
    try:
        return model.model_validate(raw)
    except ValidationError as e:
        logger.warning(
            "%s payload failed validation (%d errors); using empty record",
            model.__name__, e.error_count(),
        )
        return model()

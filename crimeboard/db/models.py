# =============================================================================
# Database Models: SQLAlchemy ORM
# =============================================================================
#
# SCHEMA OVERVIEW:
#
# ┌──────────────┐       ┌──────────────────────────────┐
# │  cases       │       │  evidence                    │
# ├──────────────┤       ├──────────────────────────────┤
# │ id (PK)      │──1:N─▶│ id (PK)                      │
# │ title        │       │ case_id (FK → cases.id)      │
# │ status       │       │ kind                         │
# │ analysis_json│       │ filename / storage_key       │
# │ created_at   │       │ extracted_text / tags_json   │
# │ updated_at   │       │ created_at                   │
# └──────────────┘       └──────────────────────────────┘
#        │
#        ├──1:N─▶ board_nodes (case_id, node_id) UNIQUE
#        └──1:N─▶ board_edges (case_id, source_id, target_id) UNIQUE
#
# Board nodes and edges are derived data. Re-running analysis deletes a
# case's nodes and edges and inserts the new ones.
# =============================================================================

import enum
from datetime import datetime

from sqlalchemy import (
    DateTime,
    Enum,
    Float,
    ForeignKey,
    Integer,
    String,
    Text,
    UniqueConstraint,
    func,
)
from sqlalchemy.dialects.postgresql import JSONB
from sqlalchemy.orm import DeclarativeBase, Mapped, mapped_column, relationship


class Base(DeclarativeBase):
    """SQLAlchemy declarative base class for all ORM models."""

    pass


class CaseStatus(str, enum.Enum):
    """
    Analysis state of a case.

    State machine:
        OPEN → ANALYZING → ANALYZED
                         → ERROR
    Re-analysis may start from any state.
    """

    OPEN = "open"
    ANALYZING = "analyzing"
    ANALYZED = "analyzed"
    ERROR = "error"


class EvidenceKind(str, enum.Enum):
    PHOTO = "photo"
    DOCUMENT = "document"
    STATEMENT = "statement"
    OTHER = "other"


class Case(Base):
    """An investigation and its latest analysis result."""

    __tablename__ = "cases"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    title: Mapped[str] = mapped_column(String(500), nullable=False)

    status: Mapped[CaseStatus] = mapped_column(
        Enum(CaseStatus, values_callable=lambda e: [m.value for m in e]),
        nullable=False,
        default=CaseStatus.OPEN,
    )

    # Full BoardAnalysis as JSON (null until the first analysis completes)
    analysis_json: Mapped[dict | None] = mapped_column(JSONB, nullable=True)

    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        server_default=func.now(),
        nullable=False,
    )
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        server_default=func.now(),
        onupdate=func.now(),
        nullable=False,
    )

    evidence: Mapped[list["Evidence"]] = relationship(
        "Evidence",
        back_populates="case",
        cascade="all, delete-orphan",
        order_by="Evidence.id",
    )

    def __repr__(self) -> str:
        return f"<Case(id={self.id}, title='{self.title}', status={self.status})>"


class Evidence(Base):
    """
    One registered evidence file.

    The upload itself lives in object storage under `storage_key`; only the
    metadata and any extracted text are stored here.
    """

    __tablename__ = "evidence"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    case_id: Mapped[int] = mapped_column(
        Integer,
        ForeignKey("cases.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    kind: Mapped[EvidenceKind] = mapped_column(
        Enum(EvidenceKind, values_callable=lambda e: [m.value for m in e]),
        nullable=False,
        default=EvidenceKind.OTHER,
    )
    filename: Mapped[str] = mapped_column(String(500), nullable=False)
    storage_key: Mapped[str | None] = mapped_column(String(1000), nullable=True)
    extracted_text: Mapped[str | None] = mapped_column(Text, nullable=True)
    tags_json: Mapped[list | None] = mapped_column(JSONB, nullable=True)

    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        server_default=func.now(),
        nullable=False,
    )

    case: Mapped["Case"] = relationship("Case", back_populates="evidence")

    def __repr__(self) -> str:
        return (
            f"<Evidence(id={self.id}, case_id={self.case_id}, "
            f"kind={self.kind}, filename='{self.filename}')>"
        )


class BoardNode(Base):
    """A persisted board vertex (evidence or suspect)."""

    __tablename__ = "board_nodes"
    __table_args__ = (
        UniqueConstraint("case_id", "node_id", name="uq_board_node"),
    )

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    case_id: Mapped[int] = mapped_column(
        Integer,
        ForeignKey("cases.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    node_id: Mapped[str] = mapped_column(String(100), nullable=False)
    node_kind: Mapped[str] = mapped_column(String(20), nullable=False)
    node_type: Mapped[str] = mapped_column(String(20), nullable=False)
    title: Mapped[str] = mapped_column(String(500), nullable=False, default="")
    data_json: Mapped[dict | None] = mapped_column(JSONB, nullable=True)
    x: Mapped[float] = mapped_column(Float, nullable=False, default=0)
    y: Mapped[float] = mapped_column(Float, nullable=False, default=0)


class BoardEdge(Base):
    """A persisted board edge."""

    __tablename__ = "board_edges"
    __table_args__ = (
        UniqueConstraint("case_id", "source_id", "target_id", name="uq_board_edge"),
    )

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    case_id: Mapped[int] = mapped_column(
        Integer,
        ForeignKey("cases.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    source_id: Mapped[str] = mapped_column(String(100), nullable=False)
    target_id: Mapped[str] = mapped_column(String(100), nullable=False)
    label: Mapped[str] = mapped_column(Text, nullable=False, default="")
    confidence: Mapped[float] = mapped_column(Float, nullable=False, default=0.5)
    relationship_kind: Mapped[str | None] = mapped_column(String(20), nullable=True)

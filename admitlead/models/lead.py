"""
Lead model - one row per consultation request contact.
Pipeline stage: NEW → CONTACTED → BOOKED → CONSULTED → PAID, or LOST.
A returning contact (same phone) is reset to NEW rather than duplicated.
"""
import uuid
from datetime import datetime, timezone
from typing import Optional
from sqlalchemy import String, Text, Boolean, DateTime, Index
from sqlalchemy.dialects.postgresql import UUID, JSONB
from sqlalchemy.orm import Mapped, mapped_column, relationship
from admitlead.database import Base

LEAD_STAGES = ("NEW", "CONTACTED", "BOOKED", "CONSULTED", "PAID", "LOST")


class Lead(Base):
    __tablename__ = "leads"

    id: Mapped[uuid.UUID] = mapped_column(
        UUID(as_uuid=True), primary_key=True, default=uuid.uuid4
    )

    # Origin
    source: Mapped[str] = mapped_column(String(50), default="tally", nullable=False)
    form_submission_id: Mapped[Optional[str]] = mapped_column(String(255), unique=True)
    # Submission that last reopened this lead as a returning contact
    last_submission_id: Mapped[Optional[str]] = mapped_column(String(255))

    # Contact (free-form answers, stored as submitted)
    parent_name: Mapped[str] = mapped_column(Text, nullable=False)
    parent_phone: Mapped[str] = mapped_column(Text, nullable=False)

    # Inquiry
    student_grade: Mapped[Optional[str]] = mapped_column(Text)
    desired_track: Mapped[Optional[str]] = mapped_column(Text)
    region: Mapped[Optional[str]] = mapped_column(Text)
    desired_timing: Mapped[Optional[str]] = mapped_column(Text)
    question_context: Mapped[Optional[str]] = mapped_column(Text)

    # Pipeline
    stage: Mapped[str] = mapped_column(String(20), default="NEW", nullable=False)
    is_high_interest: Mapped[bool] = mapped_column(Boolean, default=False)
    assignee: Mapped[Optional[str]] = mapped_column(Text)

    # Attribution
    utm_source: Mapped[Optional[str]] = mapped_column(Text)
    utm_medium: Mapped[Optional[str]] = mapped_column(Text)
    utm_campaign: Mapped[Optional[str]] = mapped_column(Text)
    utm_term: Mapped[Optional[str]] = mapped_column(Text)
    utm_content: Mapped[Optional[str]] = mapped_column(Text)

    # Original webhook body, stored verbatim for audit
    raw_payload: Mapped[dict] = mapped_column(JSONB, default=dict, nullable=False)

    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), default=lambda: datetime.now(timezone.utc)
    )
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), default=lambda: datetime.now(timezone.utc), onupdate=lambda: datetime.now(timezone.utc)
    )

    interactions: Mapped[list["Interaction"]] = relationship(
        back_populates="lead", lazy="select", order_by="Interaction.created_at"
    )

    __table_args__ = (
        Index("ix_leads_parent_phone", "parent_phone"),
        Index("ix_leads_stage", "stage"),
        Index("ix_leads_created_at", "created_at"),
    )

    def __repr__(self) -> str:
        masked = self.parent_phone[:6] + "***" if self.parent_phone else "unknown"
        return f"<Lead {masked} stage={self.stage}>"

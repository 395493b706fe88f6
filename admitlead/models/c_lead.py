"""
C-level lead model - leads from the C-level Tally form.
Kept apart from ordinary leads: own table, ACTIVE/INACTIVE status, SMS history instead of a pipeline.
"""
import uuid
from datetime import datetime, timezone
from typing import Optional
from sqlalchemy import String, Text, DateTime, Index
from sqlalchemy.dialects.postgresql import UUID, JSONB
from sqlalchemy.orm import Mapped, mapped_column, relationship
from admitlead.database import Base

C_LEAD_STATUSES = ("ACTIVE", "INACTIVE")


class CLead(Base):
    __tablename__ = "c_leads"

    id: Mapped[uuid.UUID] = mapped_column(
        UUID(as_uuid=True), primary_key=True, default=uuid.uuid4
    )
    source: Mapped[str] = mapped_column(String(50), default="tally", nullable=False)
    form_submission_id: Mapped[Optional[str]] = mapped_column(String(255), unique=True)

    parent_name: Mapped[str] = mapped_column(Text, nullable=False)
    parent_phone: Mapped[str] = mapped_column(Text, nullable=False)
    student_grade: Mapped[Optional[str]] = mapped_column(Text)
    desired_track: Mapped[Optional[str]] = mapped_column(Text)
    region: Mapped[Optional[str]] = mapped_column(Text)
    question_context: Mapped[Optional[str]] = mapped_column(Text)

    status: Mapped[str] = mapped_column(String(20), default="ACTIVE", nullable=False)
    notes: Mapped[Optional[str]] = mapped_column(Text)

    utm_source: Mapped[Optional[str]] = mapped_column(Text)
    utm_medium: Mapped[Optional[str]] = mapped_column(Text)
    utm_campaign: Mapped[Optional[str]] = mapped_column(Text)

    raw_payload: Mapped[dict] = mapped_column(JSONB, default=dict, nullable=False)

    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), default=lambda: datetime.now(timezone.utc)
    )
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), default=lambda: datetime.now(timezone.utc), onupdate=lambda: datetime.now(timezone.utc)
    )

    messages: Mapped[list["CLeadMessage"]] = relationship(
        back_populates="c_lead", lazy="select", order_by="CLeadMessage.created_at.desc()"
    )

    __table_args__ = (
        Index("ix_c_leads_parent_phone", "parent_phone"),
        Index("ix_c_leads_status", "status"),
        Index("ix_c_leads_created_at", "created_at"),
    )

    def __repr__(self) -> str:
        masked = self.parent_phone[:6] + "***" if self.parent_phone else "unknown"
        return f"<CLead {masked} status={self.status}>"

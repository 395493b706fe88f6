"""
Interaction model: append-only contact log for a lead (calls, Kakao, SMS, meetings, memos).
Webhook re-submissions are logged here as MEMO entries.
"""
import uuid
from datetime import datetime, timezone
from typing import Optional
from sqlalchemy import String, Text, DateTime, ForeignKey, Index
from sqlalchemy.dialects.postgresql import UUID
from sqlalchemy.orm import Mapped, mapped_column, relationship
from admitlead.database import Base

INTERACTION_TYPES = ("CALL", "KAKAO", "SMS", "MEETING", "MEMO")


class Interaction(Base):
    __tablename__ = "interactions"

    id: Mapped[uuid.UUID] = mapped_column(
        UUID(as_uuid=True), primary_key=True, default=uuid.uuid4
    )
    lead_id: Mapped[uuid.UUID] = mapped_column(
        UUID(as_uuid=True), ForeignKey("leads.id", ondelete="CASCADE"), nullable=False
    )
    type: Mapped[str] = mapped_column(String(20), default="MEMO", nullable=False)
    content: Mapped[str] = mapped_column(Text, nullable=False)
    created_by: Mapped[Optional[str]] = mapped_column(String(100))

    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), default=lambda: datetime.now(timezone.utc)
    )

    lead: Mapped["Lead"] = relationship(back_populates="interactions")

    __table_args__ = (
        Index("ix_interactions_lead_id", "lead_id"),
        Index("ix_interactions_created_at", "created_at"),
    )

    def __repr__(self) -> str:
        return f"<Interaction {self.type} lead={self.lead_id}>"

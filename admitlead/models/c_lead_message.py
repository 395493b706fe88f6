"""
C-lead message model: every SMS/LMS sent to a C-level lead through Solapi.
Rows are created PENDING before the send and moved to SENT or FAILED afterwards.
"""
import uuid
from datetime import datetime, timezone
from typing import Optional
from sqlalchemy import String, Text, DateTime, ForeignKey, Index
from sqlalchemy.dialects.postgresql import UUID
from sqlalchemy.orm import Mapped, mapped_column, relationship
from admitlead.database import Base


class CLeadMessage(Base):
    __tablename__ = "c_lead_messages"

    id: Mapped[uuid.UUID] = mapped_column(
        UUID(as_uuid=True), primary_key=True, default=uuid.uuid4
    )
    c_lead_id: Mapped[uuid.UUID] = mapped_column(
        UUID(as_uuid=True), ForeignKey("c_leads.id", ondelete="CASCADE"), nullable=False
    )
    message_type: Mapped[str] = mapped_column(String(10), nullable=False)  # SMS, LMS
    recipient_phone: Mapped[str] = mapped_column(Text, nullable=False)
    content: Mapped[str] = mapped_column(Text, nullable=False)

    status: Mapped[str] = mapped_column(
        String(20), default="PENDING", nullable=False
    )  # PENDING, SENT, FAILED
    external_message_id: Mapped[Optional[str]] = mapped_column(String(100))
    error_message: Mapped[Optional[str]] = mapped_column(Text)
    sent_at: Mapped[Optional[datetime]] = mapped_column(DateTime(timezone=True))

    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), default=lambda: datetime.now(timezone.utc)
    )

    c_lead: Mapped["CLead"] = relationship(back_populates="messages")

    __table_args__ = (
        Index("ix_c_lead_messages_c_lead_id", "c_lead_id"),
        Index("ix_c_lead_messages_created_at", "created_at"),
    )

    def __repr__(self) -> str:
        return f"<CLeadMessage {self.message_type} status={self.status}>"

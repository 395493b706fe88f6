"""
API response schemas for the webhook and messaging endpoints.
Field names serialize in camelCase to match what the CRM frontend reads.
"""
from datetime import datetime
from typing import Optional
from pydantic import BaseModel, ConfigDict, Field


class WebhookAck(BaseModel):
    """Successful webhook response."""
    model_config = ConfigDict(populate_by_name=True)

    success: bool = True
    lead_id: Optional[str] = Field(default=None, serialization_alias="leadId")
    is_returning: Optional[bool] = Field(default=None, serialization_alias="isReturning")
    message: Optional[str] = None


class WebhookStatus(BaseModel):
    """GET liveness payload of a webhook endpoint."""
    status: str = "ok"
    endpoint: str
    method: str = "POST"


class SendMessageRequest(BaseModel):
    content: Optional[str] = None


class SendMessageResponse(BaseModel):
    success: bool = True
    message_id: str = Field(serialization_alias="messageId")
    external_message_id: Optional[str] = Field(default=None, serialization_alias="externalMessageId")
    message_type: str = Field(serialization_alias="messageType")


class MessageSummary(BaseModel):
    id: str
    c_lead_id: str
    message_type: str
    recipient_phone: str
    content: str
    status: str
    external_message_id: Optional[str] = None
    error_message: Optional[str] = None
    sent_at: Optional[datetime] = None
    created_at: datetime

    @classmethod
    def from_model(cls, m) -> "MessageSummary":
        return cls(
            id=str(m.id),
            c_lead_id=str(m.c_lead_id),
            message_type=m.message_type,
            recipient_phone=m.recipient_phone,
            content=m.content,
            status=m.status,
            external_message_id=m.external_message_id,
            error_message=m.error_message,
            sent_at=m.sent_at,
            created_at=m.created_at,
        )

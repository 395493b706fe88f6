"""
CRM request/response schemas for the lead and C-lead endpoints.

Request models are validated by hand in the route so a bad body answers
400 with field paths, the same shape the webhooks use.
"""
import uuid
from datetime import datetime
from typing import Optional
from pydantic import BaseModel, ConfigDict, Field, field_validator

from admitlead.models.c_lead import C_LEAD_STATUSES
from admitlead.models.interaction import INTERACTION_TYPES
from admitlead.models.lead import LEAD_STAGES
from admitlead.schemas.api_responses import MessageSummary


def _one_of(value: Optional[str], allowed: tuple[str, ...], name: str) -> Optional[str]:
    if value is not None and value not in allowed:
        raise ValueError(f"{name} must be one of: {', '.join(allowed)}")
    return value


# === Requests ===

class LeadUpdateRequest(BaseModel):
    stage: Optional[str] = None
    assignee: Optional[str] = None

    @field_validator("stage")
    @classmethod
    def _stage(cls, v):
        if v is None:
            raise ValueError("stage cannot be null")
        return _one_of(v, LEAD_STAGES, "stage")


class InteractionCreateRequest(BaseModel):
    content: str
    type: str = "MEMO"
    created_by: Optional[str] = None

    @field_validator("content")
    @classmethod
    def _content(cls, v: str) -> str:
        if not v.strip():
            raise ValueError("content is required")
        return v

    @field_validator("type")
    @classmethod
    def _type(cls, v: str) -> str:
        return _one_of(v, INTERACTION_TYPES, "type")


class CLeadUpdateRequest(BaseModel):
    """Editable C-lead columns. Omitted keys are left alone; notes may be cleared with null."""
    status: Optional[str] = None
    notes: Optional[str] = None
    parent_name: Optional[str] = None
    parent_phone: Optional[str] = None
    student_grade: Optional[str] = None
    region: Optional[str] = None
    question_context: Optional[str] = None

    @field_validator("status", "parent_name", "parent_phone")
    @classmethod
    def _not_null(cls, v, info):
        if v is None:
            raise ValueError(f"{info.field_name} cannot be null")
        return v

    @field_validator("status")
    @classmethod
    def _status(cls, v):
        return _one_of(v, C_LEAD_STATUSES, "status")


# === Responses ===

class LeadRecord(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: uuid.UUID
    source: str
    form_submission_id: Optional[str] = None
    parent_name: str
    parent_phone: str
    student_grade: Optional[str] = None
    desired_track: Optional[str] = None
    region: Optional[str] = None
    desired_timing: Optional[str] = None
    question_context: Optional[str] = None
    stage: str
    is_high_interest: bool = False
    assignee: Optional[str] = None
    utm_source: Optional[str] = None
    utm_medium: Optional[str] = None
    utm_campaign: Optional[str] = None
    utm_term: Optional[str] = None
    utm_content: Optional[str] = None
    created_at: datetime
    updated_at: datetime


class InteractionRecord(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: uuid.UUID
    lead_id: uuid.UUID
    type: str
    content: str
    created_by: Optional[str] = None
    created_at: datetime


class LeadListResponse(BaseModel):
    data: list[LeadRecord]
    total: int
    page: int
    page_size: int = Field(serialization_alias="pageSize")
    total_pages: int = Field(serialization_alias="totalPages")


class LeadDetailResponse(BaseModel):
    lead: LeadRecord
    raw_payload: dict
    interactions: list[InteractionRecord]


class CLeadRecord(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: uuid.UUID
    source: str
    form_submission_id: Optional[str] = None
    parent_name: str
    parent_phone: str
    student_grade: Optional[str] = None
    desired_track: Optional[str] = None
    region: Optional[str] = None
    question_context: Optional[str] = None
    status: str
    notes: Optional[str] = None
    utm_source: Optional[str] = None
    utm_medium: Optional[str] = None
    utm_campaign: Optional[str] = None
    created_at: datetime
    updated_at: datetime


class CLeadListResponse(BaseModel):
    data: list[CLeadRecord]
    total: int
    page: int
    page_size: int = Field(serialization_alias="pageSize")
    total_pages: int = Field(serialization_alias="totalPages")


class CLeadDetailResponse(BaseModel):
    lead: CLeadRecord
    raw_payload: dict
    messages: list[MessageSummary]
    last_message_at: Optional[datetime] = Field(default=None, serialization_alias="lastMessageAt")

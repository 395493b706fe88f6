"""
C-level lead CRM endpoints - list, detail with message history, status/notes edits.
Sending messages lives in api/messages.py under the same prefix.
"""
import logging
from typing import Optional

from fastapi import APIRouter, Depends, Query
from fastapi.responses import JSONResponse
from pydantic import ValidationError
from sqlalchemy.ext.asyncio import AsyncSession

from admitlead.api.leads import NOT_FOUND, invalid_body
from admitlead.database import get_db
from admitlead.schemas.api_responses import MessageSummary
from admitlead.schemas.crm import (
    CLeadDetailResponse,
    CLeadListResponse,
    CLeadRecord,
    CLeadUpdateRequest,
)
from admitlead.services import crm
from admitlead.services.errors import LeadNotFoundError

logger = logging.getLogger(__name__)
router = APIRouter(prefix="/api/c-leads", tags=["c-leads"])


@router.get("", response_model=CLeadListResponse)
async def get_c_leads(
    page: int = Query(default=1, ge=1),
    page_size: int = Query(default=20, ge=1, le=100, alias="pageSize"),
    search: Optional[str] = None,
    status: Optional[str] = None,
    db: AsyncSession = Depends(get_db),
):
    result = await crm.list_c_leads(db, search=search, page=page, page_size=page_size, status=status)
    return CLeadListResponse(
        data=[CLeadRecord.model_validate(lead) for lead in result.items],
        total=result.total,
        page=result.page,
        page_size=result.page_size,
        total_pages=result.total_pages,
    )


@router.get("/{c_lead_id}", response_model=CLeadDetailResponse)
async def get_c_lead(c_lead_id: str, db: AsyncSession = Depends(get_db)):
    try:
        lead, messages = await crm.get_c_lead_detail(db, c_lead_id)
    except LeadNotFoundError:
        return JSONResponse(status_code=404, content=NOT_FOUND)

    # Newest first, so the head is the last send
    last = messages[0] if messages else None
    return CLeadDetailResponse(
        lead=CLeadRecord.model_validate(lead),
        raw_payload=lead.raw_payload or {},
        messages=[MessageSummary.from_model(m) for m in messages],
        last_message_at=(last.sent_at or last.created_at) if last else None,
    )


@router.patch("/{c_lead_id}", response_model=CLeadRecord)
async def patch_c_lead(c_lead_id: str, payload: dict, db: AsyncSession = Depends(get_db)):
    try:
        request = CLeadUpdateRequest.model_validate(payload)
    except ValidationError as e:
        return invalid_body(e)
    updates = request.model_dump(exclude_unset=True)
    if not updates:
        return JSONResponse(status_code=400, content={"error": "No updates provided"})

    try:
        lead = await crm.update_c_lead(db, c_lead_id, updates)
    except LeadNotFoundError:
        return JSONResponse(status_code=404, content=NOT_FOUND)
    return CLeadRecord.model_validate(lead)

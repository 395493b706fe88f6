"""
Lead CRM endpoints - list, detail, stage/assignee edits, staff interactions.
"""
import logging
from typing import Optional

from fastapi import APIRouter, Depends, Query
from fastapi.responses import JSONResponse
from pydantic import ValidationError
from sqlalchemy.ext.asyncio import AsyncSession

from admitlead.database import get_db
from admitlead.schemas.crm import (
    InteractionCreateRequest,
    InteractionRecord,
    LeadDetailResponse,
    LeadListResponse,
    LeadRecord,
    LeadUpdateRequest,
)
from admitlead.services import crm
from admitlead.services.errors import LeadNotFoundError
from admitlead.services.reconciler import validation_details

logger = logging.getLogger(__name__)
router = APIRouter(prefix="/api/leads", tags=["leads"])

NOT_FOUND = {"error": "Lead not found"}


def invalid_body(error: ValidationError) -> JSONResponse:
    return JSONResponse(
        status_code=400,
        content={"error": "Invalid request body", "details": validation_details(error)},
    )


@router.get("", response_model=LeadListResponse)
async def get_leads(
    page: int = Query(default=1, ge=1),
    page_size: int = Query(default=20, ge=1, le=100, alias="pageSize"),
    search: Optional[str] = None,
    db: AsyncSession = Depends(get_db),
):
    result = await crm.list_leads(db, search=search, page=page, page_size=page_size)
    return LeadListResponse(
        data=[LeadRecord.model_validate(lead) for lead in result.items],
        total=result.total,
        page=result.page,
        page_size=result.page_size,
        total_pages=result.total_pages,
    )


@router.get("/{lead_id}", response_model=LeadDetailResponse)
async def get_lead(lead_id: str, db: AsyncSession = Depends(get_db)):
    try:
        lead, interactions = await crm.get_lead_detail(db, lead_id)
    except LeadNotFoundError:
        return JSONResponse(status_code=404, content=NOT_FOUND)
    return LeadDetailResponse(
        lead=LeadRecord.model_validate(lead),
        raw_payload=lead.raw_payload or {},
        interactions=[InteractionRecord.model_validate(i) for i in interactions],
    )


@router.patch("/{lead_id}", response_model=LeadRecord)
async def patch_lead(lead_id: str, payload: dict, db: AsyncSession = Depends(get_db)):
    try:
        request = LeadUpdateRequest.model_validate(payload)
    except ValidationError as e:
        return invalid_body(e)
    updates = request.model_dump(exclude_unset=True)
    if not updates:
        return JSONResponse(status_code=400, content={"error": "No updates provided"})

    try:
        lead = await crm.update_lead(db, lead_id, updates)
    except LeadNotFoundError:
        return JSONResponse(status_code=404, content=NOT_FOUND)
    return LeadRecord.model_validate(lead)


@router.post("/{lead_id}/interactions", response_model=InteractionRecord, status_code=201)
async def post_interaction(lead_id: str, payload: dict, db: AsyncSession = Depends(get_db)):
    try:
        request = InteractionCreateRequest.model_validate(payload)
    except ValidationError as e:
        return invalid_body(e)

    try:
        interaction = await crm.add_interaction(
            db, lead_id, request.content, type=request.type, created_by=request.created_by
        )
    except LeadNotFoundError:
        return JSONResponse(status_code=404, content=NOT_FOUND)
    return InteractionRecord.model_validate(interaction)

"""
C-lead messaging endpoints - send an SMS/LMS and read the send history.
"""
import logging

from fastapi import APIRouter, Depends
from fastapi.responses import JSONResponse
from sqlalchemy.ext.asyncio import AsyncSession

from admitlead.database import get_db
from admitlead.schemas.api_responses import MessageSummary, SendMessageRequest, SendMessageResponse
from admitlead.services.errors import LeadNotFoundError
from admitlead.services.messages import list_c_lead_messages, send_c_lead_message

logger = logging.getLogger(__name__)
router = APIRouter(prefix="/api/c-leads", tags=["c-leads"])


@router.get("/{c_lead_id}/messages", response_model=list[MessageSummary])
async def get_messages(c_lead_id: str, db: AsyncSession = Depends(get_db)):
    try:
        messages = await list_c_lead_messages(db, c_lead_id)
    except LeadNotFoundError:
        return JSONResponse(status_code=404, content={"error": "Lead not found"})
    return [MessageSummary.from_model(m) for m in messages]


@router.post("/{c_lead_id}/messages")
async def post_message(
    c_lead_id: str,
    payload: SendMessageRequest,
    db: AsyncSession = Depends(get_db),
):
    if not payload.content or not payload.content.strip():
        return JSONResponse(status_code=400, content={"error": "Message content is required"})

    try:
        message = await send_c_lead_message(db, c_lead_id, payload.content)
    except LeadNotFoundError:
        return JSONResponse(status_code=404, content={"error": "Lead not found"})

    if message.status != "SENT":
        return JSONResponse(
            status_code=500,
            content={"success": False, "messageId": str(message.id), "error": message.error_message},
        )

    response = SendMessageResponse(
        message_id=str(message.id),
        external_message_id=message.external_message_id,
        message_type=message.message_type,
    )
    return JSONResponse(content=response.model_dump(by_alias=True))

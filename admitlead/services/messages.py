"""
C-lead message dispatch.
History row first (PENDING), then the Solapi send, then SENT/FAILED on the same row,
so a crash mid-send still leaves a trace.
"""
import logging
from datetime import datetime, timezone

from sqlalchemy.ext.asyncio import AsyncSession

from admitlead.models.c_lead import CLead
from admitlead.models.c_lead_message import CLeadMessage
from admitlead.services import solapi
from admitlead.services.crm import get_c_lead_detail, load_record
from admitlead.utils.phone import digits_only

logger = logging.getLogger(__name__)


async def list_c_lead_messages(db: AsyncSession, c_lead_id: str) -> list[CLeadMessage]:
    """Message history for a C-lead, newest first."""
    _, messages = await get_c_lead_detail(db, c_lead_id)
    return messages


async def send_c_lead_message(db: AsyncSession, c_lead_id: str, content: str) -> CLeadMessage:
    """
    Send `content` to the C-lead's phone and record the attempt.
    Returns the message row; check `.status` for the outcome.
    """
    lead = await load_record(db, CLead, c_lead_id)
    text = content.strip()

    message = CLeadMessage(
        c_lead_id=lead.id,
        message_type=solapi.get_message_type(text),
        recipient_phone=digits_only(lead.parent_phone),
        content=text,
        status="PENDING",
    )
    db.add(message)
    await db.commit()

    result = await solapi.send_message(message.recipient_phone, text)

    if result["success"]:
        message.status = "SENT"
        message.external_message_id = result["message_id"]
        message.sent_at = datetime.now(timezone.utc)
    else:
        message.status = "FAILED"
        message.error_message = result["error"]
        logger.warning("Message to C-lead %s failed: %s", c_lead_id[:8], result["error"])
    await db.commit()
    return message

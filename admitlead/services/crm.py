"""
CRM reads and edits behind the lead and C-lead endpoints.

The webhook pipeline owns lead creation; these functions only list, load,
and edit rows, and append interactions written by staff.
"""
import logging
import uuid
from dataclasses import dataclass
from typing import Any, Optional

from sqlalchemy import func, or_, select
from sqlalchemy.ext.asyncio import AsyncSession

from admitlead.models.c_lead import CLead
from admitlead.models.c_lead_message import CLeadMessage
from admitlead.models.interaction import Interaction
from admitlead.models.lead import Lead
from admitlead.services.errors import LeadNotFoundError
from admitlead.utils.phone import normalize_phone

logger = logging.getLogger(__name__)

LEAD_SEARCH_COLUMNS = (
    "parent_name", "parent_phone", "question_context",
    "utm_source", "utm_medium", "utm_campaign",
)
C_LEAD_SEARCH_COLUMNS = ("parent_name", "parent_phone", "question_context")


@dataclass
class Page:
    items: list
    total: int
    page: int
    page_size: int

    @property
    def total_pages(self) -> int:
        return (self.total + self.page_size - 1) // self.page_size


async def load_record(db: AsyncSession, model, record_id: str):
    """Row by primary key; malformed ids count as not found."""
    try:
        record_uuid = uuid.UUID(str(record_id))
    except ValueError:
        raise LeadNotFoundError(record_id)
    record = await db.get(model, record_uuid)
    if record is None:
        raise LeadNotFoundError(record_id)
    return record


def _search_clause(model, columns: tuple[str, ...], search: str):
    # Escape SQL LIKE wildcards in user input
    escaped = search.replace("\\", "\\\\").replace("%", r"\%").replace("_", r"\_")
    pattern = f"%{escaped}%"
    return or_(*(getattr(model, c).ilike(pattern, escape="\\") for c in columns))


async def _paginate(db: AsyncSession, query, order_by, page: int, page_size: int) -> Page:
    total = (await db.execute(select(func.count()).select_from(query.subquery()))).scalar() or 0
    result = await db.execute(
        query.order_by(order_by).offset((page - 1) * page_size).limit(page_size)
    )
    return Page(items=list(result.scalars().all()), total=total, page=page, page_size=page_size)


# === Leads ===

async def list_leads(
    db: AsyncSession,
    search: Optional[str] = None,
    page: int = 1,
    page_size: int = 20,
) -> Page:
    """Leads, most recently touched first. `search` matches contact, question, and UTM columns."""
    query = select(Lead)
    if search and search.strip():
        query = query.where(_search_clause(Lead, LEAD_SEARCH_COLUMNS, search.strip()))
    return await _paginate(db, query, Lead.updated_at.desc(), page, page_size)


async def get_lead_detail(db: AsyncSession, lead_id: str) -> tuple[Lead, list[Interaction]]:
    lead = await load_record(db, Lead, lead_id)
    result = await db.execute(
        select(Interaction)
        .where(Interaction.lead_id == lead.id)
        .order_by(Interaction.created_at.desc())
    )
    return lead, list(result.scalars().all())


async def update_lead(db: AsyncSession, lead_id: str, updates: dict[str, Any]) -> Lead:
    """Apply stage/assignee changes."""
    lead = await load_record(db, Lead, lead_id)
    for column, value in updates.items():
        setattr(lead, column, value)
    await db.commit()
    await db.refresh(lead)
    logger.info("Lead %s updated: %s", lead_id[:8], ", ".join(sorted(updates)))
    return lead


async def add_interaction(
    db: AsyncSession,
    lead_id: str,
    content: str,
    type: str = "MEMO",
    created_by: Optional[str] = None,
) -> Interaction:
    lead = await load_record(db, Lead, lead_id)
    interaction = Interaction(lead_id=lead.id, type=type, content=content, created_by=created_by)
    db.add(interaction)
    await db.commit()
    await db.refresh(interaction)
    return interaction


# === C-level leads ===

async def list_c_leads(
    db: AsyncSession,
    search: Optional[str] = None,
    page: int = 1,
    page_size: int = 20,
    status: Optional[str] = None,
) -> Page:
    """C-leads, newest first, optionally filtered by status."""
    query = select(CLead)
    if status:
        query = query.where(CLead.status == status)
    if search and search.strip():
        query = query.where(_search_clause(CLead, C_LEAD_SEARCH_COLUMNS, search.strip()))
    return await _paginate(db, query, CLead.created_at.desc(), page, page_size)


async def get_c_lead_detail(db: AsyncSession, c_lead_id: str) -> tuple[CLead, list[CLeadMessage]]:
    lead = await load_record(db, CLead, c_lead_id)
    result = await db.execute(
        select(CLeadMessage)
        .where(CLeadMessage.c_lead_id == lead.id)
        .order_by(CLeadMessage.created_at.desc())
    )
    return lead, list(result.scalars().all())


async def update_c_lead(db: AsyncSession, c_lead_id: str, updates: dict[str, Any]) -> CLead:
    lead = await load_record(db, CLead, c_lead_id)
    if "parent_phone" in updates:
        updates = {**updates, "parent_phone": normalize_phone(updates["parent_phone"])}
    for column, value in updates.items():
        setattr(lead, column, value)
    await db.commit()
    await db.refresh(lead)
    logger.info("C-lead %s updated: %s", c_lead_id[:8], ", ".join(sorted(updates)))
    return lead

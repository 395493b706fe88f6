"""
Tally form webhooks - ordinary leads and C-level leads.

Both endpoints run the same LeadReconciler with a different variant.
Every outcome is a synchronous JSON response; retrying a failed delivery is
left to Tally.
"""
import logging

from fastapi import APIRouter, Depends, Request
from fastapi.responses import JSONResponse
from sqlalchemy.ext.asyncio import AsyncSession

from admitlead.config import Settings, get_settings
from admitlead.database import get_db
from admitlead.models import CLead, Interaction, Lead
from admitlead.schemas.api_responses import WebhookStatus
from admitlead.services.errors import WebhookError
from admitlead.services.lead_store import LeadStore, SqlLeadStore
from admitlead.services.reconciler import LeadReconciler
from admitlead.services.variants import LeadVariant, c_lead_variant, lead_variant

logger = logging.getLogger(__name__)
router = APIRouter(prefix="/api/tally", tags=["webhooks"])


async def get_lead_store(db: AsyncSession = Depends(get_db)) -> LeadStore:
    return SqlLeadStore(db, Lead, Interaction)


async def get_c_lead_store(db: AsyncSession = Depends(get_db)) -> LeadStore:
    return SqlLeadStore(db, CLead)


async def _process_delivery(variant: LeadVariant, store: LeadStore, request: Request) -> JSONResponse:
    body = await request.body()
    reconciler = LeadReconciler(store, variant)
    try:
        ack = await reconciler.process(body, request.headers)
    except WebhookError as e:
        return JSONResponse(status_code=e.status_code, content=e.to_response())
    except Exception as e:
        logger.error(
            "Tally webhook processing error: %s", str(e),
            exc_info=True, extra={"variant": variant.name},
        )
        return JSONResponse(status_code=500, content={"error": "Internal server error"})

    return JSONResponse(content=ack.model_dump(by_alias=True, exclude_none=True))


@router.post("/webhook")
async def tally_webhook(
    request: Request,
    store: LeadStore = Depends(get_lead_store),
    settings: Settings = Depends(get_settings),
):
    """Consultation form submission. Repeat phone numbers reopen the existing lead."""
    return await _process_delivery(lead_variant(settings), store, request)


@router.get("/webhook", response_model=WebhookStatus)
async def tally_webhook_status():
    return WebhookStatus(endpoint="/api/tally/webhook")


@router.post("/c-webhook")
async def tally_c_webhook(
    request: Request,
    store: LeadStore = Depends(get_c_lead_store),
    settings: Settings = Depends(get_settings),
):
    """C-level form submission. Always an idempotent insert keyed by submission id."""
    return await _process_delivery(c_lead_variant(settings), store, request)


@router.get("/c-webhook", response_model=WebhookStatus)
async def tally_c_webhook_status():
    return WebhookStatus(endpoint="/api/tally/c-webhook")

"""Top-level router: Tally webhooks, lead CRM, C-lead CRM and messaging, health."""
from fastapi import APIRouter

from admitlead.api import c_leads, health, leads, messages, webhooks

api_router = APIRouter()
for module in (webhooks, leads, c_leads, messages, health):
    api_router.include_router(module.router)

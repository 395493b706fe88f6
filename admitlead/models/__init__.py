"""
Database models - import all models here so Alembic can discover them.
"""
from admitlead.models.lead import Lead
from admitlead.models.interaction import Interaction
from admitlead.models.c_lead import CLead
from admitlead.models.c_lead_message import CLeadMessage

__all__ = [
    "Lead",
    "Interaction",
    "CLead",
    "CLeadMessage",
]

"""
Lead variants handled by the Tally webhook pipeline.

Ordinary leads and C-level leads run the same reconciliation. A variant
names the table, the optional columns, the initial status, and whether a
repeat phone number reopens the existing lead.
"""
from dataclasses import dataclass
from typing import Optional

from admitlead.config import Settings
from admitlead.mapping.field_resolver import FieldMapping
from admitlead.mapping.forms import (
    C_LEAD_UTM_PARAMS,
    LEAD_UTM_PARAMS,
    c_lead_form_mapping,
    lead_form_mapping,
)
from admitlead.models import CLead, Interaction, Lead

REQUIRED_COLUMNS = ("parent_name", "parent_phone")


@dataclass(frozen=True)
class LeadVariant:
    name: str  # "lead" or "c_lead", used in logs
    endpoint: str
    lead_model: type
    interaction_model: Optional[type]
    mapping: FieldMapping
    optional_columns: tuple[str, ...]
    utm_params: tuple[str, ...]
    status_column: str  # "stage" or "status"
    initial_status: str
    has_returning_branch: bool
    secret: str = ""
    source: str = "tally"


def lead_variant(settings: Settings) -> LeadVariant:
    return LeadVariant(
        name="lead",
        endpoint="/api/tally/webhook",
        lead_model=Lead,
        interaction_model=Interaction,
        mapping=lead_form_mapping(),
        optional_columns=("student_grade", "desired_track", "desired_timing", "question_context", "region"),
        utm_params=LEAD_UTM_PARAMS,
        status_column="stage",
        initial_status="NEW",
        has_returning_branch=True,
        secret=settings.tally_webhook_secret,
    )


def c_lead_variant(settings: Settings) -> LeadVariant:
    return LeadVariant(
        name="c_lead",
        endpoint="/api/tally/c-webhook",
        lead_model=CLead,
        interaction_model=None,
        mapping=c_lead_form_mapping(),
        optional_columns=("student_grade", "desired_track", "region", "question_context"),
        utm_params=C_LEAD_UTM_PARAMS,
        status_column="status",
        initial_status="ACTIVE",
        has_returning_branch=False,
        secret=settings.tally_c_webhook_secret,
    )

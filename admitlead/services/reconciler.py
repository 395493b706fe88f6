"""
Tally submission reconciler - the webhook pipeline for one lead variant.

Gates, in order (any gate can reject):
1. Shared-secret authentication         -> 401
2. JSON decode + payload schema          -> 400 with field paths
3. Required fields (parent name/phone)   -> 400
Then persistence:
4. Returning contact (ordinary leads only): newest lead with the same
   normalized phone is reset to NEW, refreshed with the non-empty new
   answers, and gets a MEMO interaction summarising the new inquiry.
   The reopening submission id is kept on the lead. If this submission
   created the lead or last reopened it, the delivery is a redelivery and
   is acknowledged as a duplicate instead.
5. New contact: insert keyed by submission id; a duplicate delivery of the
   same submission is acknowledged as success without a lead id.
Store failures other than the duplicate case are fatal (500). The MEMO
insert is the exception: its failure is logged and the request still succeeds.

The returning-contact lookup matches on phone only, across all forms and
all time. Two different forms filled from one phone are one contact thread.
"""
import json
from typing import Any, Mapping, Optional

from pydantic import ValidationError

from admitlead.mapping.field_resolver import FieldResolver, extract_utm_params
from admitlead.schemas.api_responses import WebhookAck
from admitlead.schemas.webhook_payloads import TallyWebhookPayload
from admitlead.services.errors import (
    AuthenticationError,
    MissingRequiredFieldError,
    PayloadValidationError,
    StoreError,
)
from admitlead.services.lead_store import DUPLICATE_IGNORED, LeadStore
from admitlead.services.variants import REQUIRED_COLUMNS, LeadVariant
from admitlead.utils.logging import get_variant_logger
from admitlead.utils.phone import mask_phone, normalize_phone
from admitlead.utils.webhook_signatures import compute_payload_hash, validate_shared_secret

EMPTY_PLACEHOLDER = "(없음)"
RETURNING_MESSAGE = "Returning customer updated"
DUPLICATE_MESSAGE = "Duplicate submission ignored"


def build_returning_summary(values: Mapping[str, Optional[str]]) -> str:
    """MEMO body logged when a known phone number submits the form again."""
    def show(column: str) -> str:
        return values.get(column) or EMPTY_PLACEHOLDER

    return (
        "[재문의]\n"
        f"문의 내용: {show('question_context')}\n"
        f"학년: {show('student_grade')}\n"
        f"희망계열: {show('desired_track')}\n"
        f"상담희망시간: {show('desired_timing')}"
    )


def is_redelivery(lead, submission_id: str) -> bool:
    """True if `submission_id` created this lead or was the last one to reopen it."""
    return submission_id in (
        getattr(lead, "form_submission_id", None),
        getattr(lead, "last_submission_id", None),
    )


def validation_details(error: ValidationError) -> list[dict[str, Any]]:
    """Flatten pydantic errors into {path, message, type} entries."""
    details = []
    for err in error.errors():
        path = ".".join(str(part) for part in err.get("loc", ())) or "(root)"
        details.append({"path": path, "message": err.get("msg", ""), "type": err.get("type", "")})
    return details


class LeadReconciler:
    """Runs one webhook delivery through authentication, validation, and persistence."""

    def __init__(self, store: LeadStore, variant: LeadVariant):
        self.store = store
        self.variant = variant
        self.resolver = FieldResolver(variant.mapping)
        self.log = get_variant_logger(__name__, variant.name)

    async def process(self, body: bytes, headers: Mapping[str, str]) -> WebhookAck:
        self.authenticate(headers)
        raw_payload = self.decode(body)
        payload = self.validate(raw_payload)
        return await self.reconcile(payload, raw_payload)

    def authenticate(self, headers: Mapping[str, str]) -> None:
        if not validate_shared_secret(self.variant.secret, headers):
            self.log.warning("Rejected webhook: invalid shared secret")
            raise AuthenticationError()

    def decode(self, body: bytes) -> Any:
        try:
            return json.loads(body)
        except ValueError:
            self.log.warning("Rejected webhook: body is not valid JSON (sha256=%s)", compute_payload_hash(body))
            raise PayloadValidationError(details=[], message="Invalid JSON")

    def validate(self, raw_payload: Any) -> TallyWebhookPayload:
        try:
            return TallyWebhookPayload.model_validate(raw_payload)
        except ValidationError as e:
            details = validation_details(e)
            self.log.warning(
                "Rejected webhook: invalid payload (%s)",
                ", ".join(d["path"] for d in details),
            )
            raise PayloadValidationError(details=details)

    def extract(self, payload: TallyWebhookPayload) -> dict[str, Optional[str]]:
        """Resolve required + optional columns. Raises if a required column is missing."""
        fields = payload.data.fields
        values = self.resolver.resolve_many(fields, REQUIRED_COLUMNS + self.variant.optional_columns)

        missing = [column for column in REQUIRED_COLUMNS if not values[column]]
        if missing:
            self.log.warning(
                "Rejected webhook: missing %s", ", ".join(missing),
                extra={"submission_id": payload.data.submissionId},
            )
            raise MissingRequiredFieldError(missing)

        values["parent_phone"] = normalize_phone(values["parent_phone"])
        self.log.debug(
            "Extracted fields: %s",
            {k: (mask_phone(v) if k == "parent_phone" else v) for k, v in values.items()},
            extra={"submission_id": payload.data.submissionId},
        )
        return values

    async def reconcile(self, payload: TallyWebhookPayload, raw_payload: dict) -> WebhookAck:
        values = self.extract(payload)
        utm = extract_utm_params(payload.data.fields, self.variant.utm_params)

        if self.variant.has_returning_branch:
            existing = await self.store.find_most_recent_lead_by_phone(values["parent_phone"])
            if existing is not None:
                if is_redelivery(existing, payload.data.submissionId):
                    return self._duplicate(payload.data.submissionId)
                return await self._reopen(existing, values, payload)

        return await self._insert(values, utm, payload, raw_payload)

    async def _reopen(self, existing, values: dict[str, Optional[str]], payload: TallyWebhookPayload) -> WebhookAck:
        lead_id = str(existing.id)
        submission_id = payload.data.submissionId
        self.log.info(
            "Returning contact matched by phone",
            extra={"lead_id": lead_id, "submission_id": submission_id, "phone": mask_phone(values["parent_phone"])},
        )

        updates: dict[str, Any] = {
            self.variant.status_column: self.variant.initial_status,
            "last_submission_id": submission_id,
        }
        for column in self.variant.optional_columns:
            if values.get(column) is not None:
                updates[column] = values[column]
        await self.store.update_lead(existing.id, updates)

        try:
            await self.store.insert_interaction(existing.id, "MEMO", build_returning_summary(values))
        except StoreError as e:
            self.log.error(
                "Returning-contact memo not saved: %s", e.message,
                extra={"lead_id": lead_id, "submission_id": submission_id, "error_code": e.code},
            )

        return WebhookAck(lead_id=lead_id, is_returning=True, message=RETURNING_MESSAGE)

    def _duplicate(self, submission_id: str) -> WebhookAck:
        self.log.info("Duplicate submission ignored", extra={"submission_id": submission_id})
        return WebhookAck(message=DUPLICATE_MESSAGE)

    async def _insert(
        self,
        values: dict[str, Optional[str]],
        utm: dict[str, Optional[str]],
        payload: TallyWebhookPayload,
        raw_payload: dict,
    ) -> WebhookAck:
        submission_id = payload.data.submissionId
        lead_data: dict[str, Any] = {
            "source": self.variant.source,
            "form_submission_id": submission_id,
            **values,
            self.variant.status_column: self.variant.initial_status,
            **utm,
            "raw_payload": raw_payload,
        }

        result = await self.store.upsert_lead_ignoring_duplicate_submission(lead_data)
        if result is DUPLICATE_IGNORED:
            return self._duplicate(submission_id)

        lead_id = str(result.id)
        self.log.info("New lead created", extra={"lead_id": lead_id, "submission_id": submission_id})
        return WebhookAck(
            lead_id=lead_id,
            is_returning=False if self.variant.has_returning_branch else None,
        )

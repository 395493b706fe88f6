"""
Tests for admitlead/schemas/webhook_payloads.py - Tally envelope validation.
"""
import pytest
from pydantic import ValidationError

from admitlead.schemas.webhook_payloads import TallyWebhookPayload
from admitlead.services.reconciler import validation_details
from conftest import make_field, make_payload


class TestTallyWebhookPayload:
    def test_valid_payload(self, lead_fields):
        payload = TallyWebhookPayload.model_validate(make_payload(lead_fields))
        assert payload.data.submissionId == "sub-001"
        assert len(payload.data.fields) == len(lead_fields)
        assert payload.data.fields[2].options[1].text == "고3"

    def test_optional_envelope_fields(self):
        raw = make_payload([make_field("k", "이름", "김민수")])
        del raw["data"]["respondentId"]
        del raw["data"]["formName"]
        payload = TallyWebhookPayload.model_validate(raw)
        assert payload.data.respondentId is None
        assert payload.data.formName is None

    def test_field_value_may_be_absent(self):
        raw = make_payload([{"key": "k", "label": "이름", "type": "INPUT_TEXT"}])
        payload = TallyWebhookPayload.model_validate(raw)
        assert payload.data.fields[0].value is None

    def test_missing_submission_id_rejected(self):
        raw = make_payload([])
        del raw["data"]["submissionId"]
        with pytest.raises(ValidationError):
            TallyWebhookPayload.model_validate(raw)

    def test_fields_must_be_list(self):
        raw = make_payload([])
        raw["data"]["fields"] = "not-a-list"
        with pytest.raises(ValidationError):
            TallyWebhookPayload.model_validate(raw)


class TestValidationDetails:
    def test_paths_point_at_offending_field(self):
        raw = make_payload([{"label": "이름", "type": "INPUT_TEXT", "value": "x"}])
        with pytest.raises(ValidationError) as exc_info:
            TallyWebhookPayload.model_validate(raw)
        details = validation_details(exc_info.value)
        assert {"path": "data.fields.0.key", "message": "Field required", "type": "missing"} in details

    def test_non_object_body_has_root_path(self):
        with pytest.raises(ValidationError) as exc_info:
            TallyWebhookPayload.model_validate([1, 2, 3])
        details = validation_details(exc_info.value)
        assert details[0]["path"] == "(root)"

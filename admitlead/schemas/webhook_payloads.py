"""
Tally webhook payload schemas.
Every Tally submission is validated against these models before any field extraction runs.
"""
from typing import Optional, Union
from pydantic import BaseModel


class TallyOption(BaseModel):
    """One option of a choice-type field."""
    id: str
    text: str


class TallyField(BaseModel):
    """A single answered question in a Tally submission."""
    key: str  # question_xxxxxx, unique within a submission
    label: str  # human readable, changes when the form is edited
    type: str  # INPUT_TEXT, INPUT_PHONE_NUMBER, MULTIPLE_CHOICE, CHECKBOXES, ...
    value: Optional[Union[str, list[str]]] = None
    options: Optional[list[TallyOption]] = None


class TallyFormData(BaseModel):
    responseId: str
    submissionId: str
    respondentId: Optional[str] = None
    formId: str
    formName: Optional[str] = None
    createdAt: str
    fields: list[TallyField]


class TallyWebhookPayload(BaseModel):
    """Top-level Tally FORM_RESPONSE webhook envelope."""
    eventId: str
    eventType: str
    createdAt: str
    data: TallyFormData

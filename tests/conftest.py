"""
Test configuration and fixtures.
Uses SQLite in-memory for fast tests. Mocks all external services.
"""
import uuid
from datetime import datetime, timezone
from types import SimpleNamespace

import pytest
from sqlalchemy.ext.asyncio import create_async_engine, AsyncSession, async_sessionmaker
from sqlalchemy.ext.compiler import compiles
from sqlalchemy.dialects.postgresql import JSONB

import admitlead.models  # noqa: F401  (registers tables on Base.metadata)
from admitlead.database import Base
from admitlead.services.errors import StoreError
from admitlead.services.lead_store import DUPLICATE_IGNORED, LeadStore


# Register JSONB as JSON for SQLite compatibility in tests
@compiles(JSONB, "sqlite")
def _compile_jsonb_sqlite(type_, compiler, **kw):
    return "JSON"


@pytest.fixture
async def db():
    """In-memory SQLite database for tests."""
    engine = create_async_engine("sqlite+aiosqlite:///:memory:")
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    session_factory = async_sessionmaker(engine, class_=AsyncSession, expire_on_commit=False)
    async with session_factory() as session:
        yield session
    await engine.dispose()


class FakeLeadStore(LeadStore):
    """
    In-memory LeadStore. Enforces unique submission ids like the real table
    and records every call so tests can assert on what was (not) written.
    """

    def __init__(self):
        self.leads: list[SimpleNamespace] = []
        self.interactions: list[dict] = []
        self.calls: list[str] = []
        self.fail_on: dict[str, StoreError] = {}

    def _enter(self, name: str) -> None:
        self.calls.append(name)
        if name in self.fail_on:
            raise self.fail_on[name]

    def add_lead(self, **fields) -> SimpleNamespace:
        lead = SimpleNamespace(
            id=uuid.uuid4(),
            created_at=datetime.now(timezone.utc),
            **fields,
        )
        self.leads.append(lead)
        return lead

    async def find_most_recent_lead_by_phone(self, phone):
        self._enter("find_most_recent_lead_by_phone")
        matches = [lead for lead in self.leads if lead.parent_phone == phone]
        if not matches:
            return None
        return max(matches, key=lambda lead: lead.created_at)

    async def update_lead(self, lead_id, fields):
        self._enter("update_lead")
        for lead in self.leads:
            if lead.id == lead_id:
                for column, value in fields.items():
                    setattr(lead, column, value)
                return lead
        raise StoreError(f"Lead {lead_id} not found", code="not_found")

    async def insert_interaction(self, lead_id, type, content):
        self._enter("insert_interaction")
        interaction = {"lead_id": lead_id, "type": type, "content": content}
        self.interactions.append(interaction)
        return interaction

    async def upsert_lead_ignoring_duplicate_submission(self, lead_data, conflict_key="form_submission_id"):
        self._enter("upsert_lead_ignoring_duplicate_submission")
        key = lead_data.get(conflict_key)
        if any(getattr(lead, conflict_key, None) == key for lead in self.leads):
            return DUPLICATE_IGNORED
        return self.add_lead(**lead_data)


@pytest.fixture
def fake_store():
    return FakeLeadStore()


def make_field(key, label, value, type="INPUT_TEXT", options=None) -> dict:
    field = {"key": key, "label": label, "type": type, "value": value}
    if options is not None:
        field["options"] = options
    return field


def make_payload(fields, submission_id="sub-001") -> dict:
    """A Tally FORM_RESPONSE webhook body with the given fields."""
    return {
        "eventId": "evt-001",
        "eventType": "FORM_RESPONSE",
        "createdAt": "2026-10-18T09:00:00.000Z",
        "data": {
            "responseId": "resp-001",
            "submissionId": submission_id,
            "respondentId": "respondent-001",
            "formId": "form-001",
            "formName": "입시 상담 신청",
            "createdAt": "2026-10-18T09:00:00.000Z",
            "fields": fields,
        },
    }


@pytest.fixture
def lead_fields():
    """A complete consultation-form submission keyed by the form's stable keys."""
    return [
        make_field("question_g01o6D", "학부모 성함", "김민수"),
        make_field("question_y6Ra5X", "연락처", "01012345678", type="INPUT_PHONE_NUMBER"),
        make_field(
            "question_XDkbPL", "학생 학년", ["opt-g3"], type="MULTIPLE_CHOICE",
            options=[{"id": "opt-g2", "text": "고2"}, {"id": "opt-g3", "text": "고3"}],
        ),
        make_field("question_8Kyl4z", "희망계열", "의약학"),
        make_field("question_0xyWRB", "상담 희망 시간대", "평일 저녁"),
        make_field("question_zqo65M", "궁금하신 점", "수시 전략이 궁금합니다", type="TEXTAREA"),
        make_field("question_rgn", "거주 지역", "서울 강남"),
        make_field("question_utm_s", "utm_source", "instagram", type="HIDDEN_FIELDS"),
        make_field("question_utm_c", "utm_campaign", "fall_2026", type="HIDDEN_FIELDS"),
    ]


@pytest.fixture
def c_lead_fields():
    """A C-level form submission; this form has no key map so labels decide."""
    return [
        make_field("question_aaa111", "이름", "박지영"),
        make_field("question_bbb222", "전화번호", "010 9876 5432"),
        make_field("question_ccc333", "학년", "고1"),
        make_field("question_ddd444", "문의 내용", "컨설팅 비용이 궁금합니다"),
        make_field("question_eee555", "utm_source", "naver", type="HIDDEN_FIELDS"),
    ]

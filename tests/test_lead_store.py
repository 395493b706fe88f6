"""
Tests for admitlead/services/lead_store.py - SQL store against SQLite.
"""
import uuid
from datetime import datetime, timedelta, timezone
from unittest.mock import AsyncMock, MagicMock

import pytest
from sqlalchemy import select
from sqlalchemy.exc import IntegrityError, OperationalError

from admitlead.models import CLead, Interaction, Lead
from admitlead.services.errors import StoreError, UNIQUE_VIOLATION
from admitlead.services.lead_store import DUPLICATE_IGNORED, SqlLeadStore, _error_code


def _lead_data(submission_id="sub-1", phone="010-1234-5678", **extra):
    data = {
        "source": "tally",
        "form_submission_id": submission_id,
        "parent_name": "김민수",
        "parent_phone": phone,
        "stage": "NEW",
        "raw_payload": {"eventId": "evt-1"},
    }
    data.update(extra)
    return data


class TestUpsert:
    async def test_inserts_and_returns_lead(self, db):
        store = SqlLeadStore(db, Lead, Interaction)
        lead = await store.upsert_lead_ignoring_duplicate_submission(_lead_data(student_grade="고3"))

        assert isinstance(lead, Lead)
        assert isinstance(lead.id, uuid.UUID)
        assert lead.student_grade == "고3"
        assert lead.raw_payload == {"eventId": "evt-1"}

    async def test_duplicate_submission_ignored(self, db):
        store = SqlLeadStore(db, Lead, Interaction)
        await store.upsert_lead_ignoring_duplicate_submission(_lead_data())
        result = await store.upsert_lead_ignoring_duplicate_submission(
            _lead_data(phone="010-9999-9999")
        )

        assert result is DUPLICATE_IGNORED
        rows = (await db.execute(select(Lead))).scalars().all()
        assert len(rows) == 1
        assert rows[0].parent_phone == "010-1234-5678"

    async def test_c_lead_table(self, db):
        store = SqlLeadStore(db, CLead)
        data = _lead_data(submission_id="c-1")
        del data["stage"]
        data["status"] = "ACTIVE"

        lead = await store.upsert_lead_ignoring_duplicate_submission(data)
        assert isinstance(lead, CLead)
        assert lead.status == "ACTIVE"

    async def test_other_integrity_error_raises(self, db):
        store = SqlLeadStore(db, Lead, Interaction)
        data = _lead_data()
        data["parent_name"] = None

        with pytest.raises(StoreError) as exc_info:
            await store.upsert_lead_ignoring_duplicate_submission(data)
        assert not exc_info.value.is_unique_violation


class TestFindMostRecentByPhone:
    async def test_returns_newest(self, db):
        store = SqlLeadStore(db, Lead, Interaction)
        old_time = datetime.now(timezone.utc) - timedelta(days=400)
        await store.upsert_lead_ignoring_duplicate_submission(_lead_data("sub-old", created_at=old_time))
        newest = await store.upsert_lead_ignoring_duplicate_submission(_lead_data("sub-new"))
        await store.upsert_lead_ignoring_duplicate_submission(_lead_data("sub-other", phone="010-5555-5555"))

        found = await store.find_most_recent_lead_by_phone("010-1234-5678")
        assert found.id == newest.id

    async def test_no_match(self, db):
        store = SqlLeadStore(db, Lead, Interaction)
        assert await store.find_most_recent_lead_by_phone("010-0000-0000") is None

    async def test_exact_string_match_only(self, db):
        store = SqlLeadStore(db, Lead, Interaction)
        await store.upsert_lead_ignoring_duplicate_submission(_lead_data())
        assert await store.find_most_recent_lead_by_phone("01012345678") is None


class TestUpdateAndInteraction:
    async def test_update_lead(self, db):
        store = SqlLeadStore(db, Lead, Interaction)
        lead = await store.upsert_lead_ignoring_duplicate_submission(_lead_data(stage="PAID"))

        updated = await store.update_lead(lead.id, {"stage": "NEW", "region": "부산"})
        assert updated.stage == "NEW"
        assert updated.region == "부산"

    async def test_update_accepts_string_id(self, db):
        store = SqlLeadStore(db, Lead, Interaction)
        lead = await store.upsert_lead_ignoring_duplicate_submission(_lead_data())
        updated = await store.update_lead(str(lead.id), {"stage": "CONTACTED"})
        assert updated.stage == "CONTACTED"

    async def test_update_missing_lead(self, db):
        store = SqlLeadStore(db, Lead, Interaction)
        with pytest.raises(StoreError) as exc_info:
            await store.update_lead(uuid.uuid4(), {"stage": "NEW"})
        assert exc_info.value.code == "not_found"

    async def test_insert_interaction(self, db):
        store = SqlLeadStore(db, Lead, Interaction)
        lead = await store.upsert_lead_ignoring_duplicate_submission(_lead_data())

        interaction = await store.insert_interaction(lead.id, "MEMO", "[재문의]")
        assert interaction.lead_id == lead.id
        assert interaction.type == "MEMO"

    async def test_interaction_unsupported_without_model(self, db):
        store = SqlLeadStore(db, CLead)
        with pytest.raises(StoreError) as exc_info:
            await store.insert_interaction(uuid.uuid4(), "MEMO", "x")
        assert exc_info.value.code == "unsupported"


class TestFailureMapping:
    async def test_driver_error_becomes_store_error(self):
        db = MagicMock()
        db.execute = AsyncMock(side_effect=OperationalError("SELECT", {}, Exception("server closed")))
        db.rollback = AsyncMock()
        store = SqlLeadStore(db, Lead, Interaction)

        with pytest.raises(StoreError) as exc_info:
            await store.find_most_recent_lead_by_phone("010-1234-5678")
        assert exc_info.value.message == "server closed"
        db.rollback.assert_awaited_once()

    def test_error_code_from_sqlstate(self):
        orig = Exception("duplicate key")
        orig.sqlstate = UNIQUE_VIOLATION
        assert _error_code(IntegrityError("INSERT", {}, orig)) == UNIQUE_VIOLATION

    def test_error_code_from_sqlite_message(self):
        orig = Exception("UNIQUE constraint failed: leads.form_submission_id")
        assert _error_code(IntegrityError("INSERT", {}, orig)) == UNIQUE_VIOLATION

    def test_error_code_unknown(self):
        orig = Exception("NOT NULL constraint failed: leads.parent_name")
        assert _error_code(IntegrityError("INSERT", {}, orig)) is None

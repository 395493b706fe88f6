"""
Lead persistence used by the webhook reconciler.

Duplicate protection lives in the database: `form_submission_id` is UNIQUE and
new leads are written with INSERT ... ON CONFLICT DO NOTHING. Two concurrent
deliveries of one submission produce one row; the other sees DUPLICATE_IGNORED.
Never replace this with a select-then-insert.

Every write commits on its own. A returning-contact update stays committed
even when the follow-up interaction insert fails.
"""
import enum
import logging
import uuid
from abc import ABC, abstractmethod
from typing import Any, Optional, Union

from sqlalchemy import select
from sqlalchemy.dialects import postgresql, sqlite
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from admitlead.database import dialect_name
from admitlead.services.errors import StoreError, UNIQUE_VIOLATION

logger = logging.getLogger(__name__)


class UpsertOutcome(enum.Enum):
    DUPLICATE_IGNORED = "duplicate-ignored"


DUPLICATE_IGNORED = UpsertOutcome.DUPLICATE_IGNORED

_INSERT_BY_DIALECT = {
    "postgresql": postgresql.insert,
    "sqlite": sqlite.insert,
}


class LeadStore(ABC):
    """Persistence operations the reconciler needs. Failures raise StoreError."""

    @abstractmethod
    async def find_most_recent_lead_by_phone(self, phone: str) -> Optional[Any]:
        """Newest lead (by created_at) with this normalized phone, across all time."""
        ...

    @abstractmethod
    async def update_lead(self, lead_id: Any, fields: dict[str, Any]) -> Any:
        ...

    @abstractmethod
    async def insert_interaction(self, lead_id: Any, type: str, content: str) -> Any:
        ...

    @abstractmethod
    async def upsert_lead_ignoring_duplicate_submission(
        self,
        lead_data: dict[str, Any],
        conflict_key: str = "form_submission_id",
    ) -> Union[Any, UpsertOutcome]:
        """Insert a lead, or return DUPLICATE_IGNORED if `conflict_key` already exists."""
        ...


def _error_code(error: SQLAlchemyError) -> Optional[str]:
    """SQLSTATE of a driver error. SQLite has none, so unique failures are recognised by message."""
    orig = getattr(error, "orig", None)
    for attr in ("pgcode", "sqlstate"):
        code = getattr(orig, attr, None)
        if code:
            return str(code)
    if isinstance(error, IntegrityError) and "UNIQUE constraint failed" in str(orig):
        return UNIQUE_VIOLATION
    return None


class SqlLeadStore(LeadStore):
    """
    SQLAlchemy-backed store for one lead table.
    `interaction_model` is None for lead tables without an interaction log.
    """

    def __init__(self, db: AsyncSession, lead_model, interaction_model=None):
        self.db = db
        self.lead_model = lead_model
        self.interaction_model = interaction_model

    async def _fail(self, action: str, error: SQLAlchemyError) -> StoreError:
        await self.db.rollback()
        code = _error_code(error)
        logger.error(
            "Store %s failed on %s: %s", action, self.lead_model.__tablename__, str(error),
            exc_info=True, extra={"error_code": code},
        )
        return StoreError(str(getattr(error, "orig", None) or error), code=code)

    async def find_most_recent_lead_by_phone(self, phone: str):
        model = self.lead_model
        try:
            result = await self.db.execute(
                select(model)
                .where(model.parent_phone == phone)
                .order_by(model.created_at.desc())
                .limit(1)
            )
        except SQLAlchemyError as e:
            raise await self._fail("lookup", e)
        return result.scalar_one_or_none()

    async def update_lead(self, lead_id, fields: dict[str, Any]):
        try:
            lead = await self.db.get(self.lead_model, _as_uuid(lead_id))
            if lead is None:
                raise StoreError(f"Lead {lead_id} not found", code="not_found")
            for column, value in fields.items():
                setattr(lead, column, value)
            await self.db.commit()
        except SQLAlchemyError as e:
            raise await self._fail("update", e)
        return lead

    async def insert_interaction(self, lead_id, type: str, content: str):
        if self.interaction_model is None:
            raise StoreError(
                f"{self.lead_model.__tablename__} has no interaction log", code="unsupported"
            )
        interaction = self.interaction_model(lead_id=_as_uuid(lead_id), type=type, content=content)
        try:
            self.db.add(interaction)
            await self.db.commit()
        except SQLAlchemyError as e:
            raise await self._fail("interaction insert", e)
        return interaction

    async def upsert_lead_ignoring_duplicate_submission(
        self,
        lead_data: dict[str, Any],
        conflict_key: str = "form_submission_id",
    ):
        model = self.lead_model
        insert = _INSERT_BY_DIALECT.get(dialect_name(self.db), postgresql.insert)
        stmt = (
            insert(model)
            .values(**lead_data)
            .on_conflict_do_nothing(index_elements=[conflict_key])
            .returning(model.id)
        )
        try:
            result = await self.db.execute(stmt)
            lead_id = result.scalar_one_or_none()
            await self.db.commit()
        except IntegrityError as e:
            if _error_code(e) != UNIQUE_VIOLATION:
                raise await self._fail("upsert", e)
            await self.db.rollback()
            return DUPLICATE_IGNORED
        except SQLAlchemyError as e:
            raise await self._fail("upsert", e)

        if lead_id is None:
            return DUPLICATE_IGNORED
        return await self.db.get(model, lead_id)


def _as_uuid(value) -> uuid.UUID:
    return value if isinstance(value, uuid.UUID) else uuid.UUID(str(value))

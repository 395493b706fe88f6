"""Initial schema: leads, interactions, C-level leads and their messages.

form_submission_id is UNIQUE on both lead tables: webhook idempotency
depends on it (INSERT ... ON CONFLICT DO NOTHING).

Revision ID: 001
Revises:
Create Date: 2026-10-18
"""
from typing import Sequence, Union
from alembic import op
import sqlalchemy as sa
from sqlalchemy.dialects import postgresql

revision: str = "001"
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    # Ordinary leads
    op.create_table(
        "leads",
        sa.Column("id", postgresql.UUID(as_uuid=True), primary_key=True),
        sa.Column("source", sa.String(50), nullable=False, server_default="tally"),
        sa.Column("form_submission_id", sa.String(255), unique=True),
        sa.Column("last_submission_id", sa.String(255)),
        sa.Column("parent_name", sa.Text, nullable=False),
        sa.Column("parent_phone", sa.Text, nullable=False),
        sa.Column("student_grade", sa.Text),
        sa.Column("desired_track", sa.Text),
        sa.Column("region", sa.Text),
        sa.Column("desired_timing", sa.Text),
        sa.Column("question_context", sa.Text),
        sa.Column("stage", sa.String(20), nullable=False, server_default="NEW"),
        sa.Column("is_high_interest", sa.Boolean, server_default=sa.false()),
        sa.Column("assignee", sa.Text),
        sa.Column("utm_source", sa.Text),
        sa.Column("utm_medium", sa.Text),
        sa.Column("utm_campaign", sa.Text),
        sa.Column("utm_term", sa.Text),
        sa.Column("utm_content", sa.Text),
        sa.Column("raw_payload", postgresql.JSONB, nullable=False, server_default="{}"),
        sa.Column("created_at", sa.DateTime(timezone=True), server_default=sa.func.now()),
        sa.Column("updated_at", sa.DateTime(timezone=True), server_default=sa.func.now()),
        sa.CheckConstraint(
            "stage IN ('NEW', 'CONTACTED', 'BOOKED', 'CONSULTED', 'PAID', 'LOST')",
            name="ck_leads_stage",
        ),
    )
    op.create_index("ix_leads_parent_phone", "leads", ["parent_phone"])
    op.create_index("ix_leads_stage", "leads", ["stage"])
    op.create_index("ix_leads_created_at", "leads", ["created_at"])

    # Interaction log
    op.create_table(
        "interactions",
        sa.Column("id", postgresql.UUID(as_uuid=True), primary_key=True),
        sa.Column(
            "lead_id", postgresql.UUID(as_uuid=True),
            sa.ForeignKey("leads.id", ondelete="CASCADE"), nullable=False,
        ),
        sa.Column("type", sa.String(20), nullable=False, server_default="MEMO"),
        sa.Column("content", sa.Text, nullable=False),
        sa.Column("created_by", sa.String(100)),
        sa.Column("created_at", sa.DateTime(timezone=True), server_default=sa.func.now()),
        sa.CheckConstraint(
            "type IN ('CALL', 'KAKAO', 'SMS', 'MEETING', 'MEMO')",
            name="ck_interactions_type",
        ),
    )
    op.create_index("ix_interactions_lead_id", "interactions", ["lead_id"])
    op.create_index("ix_interactions_created_at", "interactions", ["created_at"])

    # C-level leads
    op.create_table(
        "c_leads",
        sa.Column("id", postgresql.UUID(as_uuid=True), primary_key=True),
        sa.Column("source", sa.String(50), nullable=False, server_default="tally"),
        sa.Column("form_submission_id", sa.String(255), unique=True),
        sa.Column("parent_name", sa.Text, nullable=False),
        sa.Column("parent_phone", sa.Text, nullable=False),
        sa.Column("student_grade", sa.Text),
        sa.Column("desired_track", sa.Text),
        sa.Column("region", sa.Text),
        sa.Column("question_context", sa.Text),
        sa.Column("status", sa.String(20), nullable=False, server_default="ACTIVE"),
        sa.Column("notes", sa.Text),
        sa.Column("utm_source", sa.Text),
        sa.Column("utm_medium", sa.Text),
        sa.Column("utm_campaign", sa.Text),
        sa.Column("raw_payload", postgresql.JSONB, nullable=False, server_default="{}"),
        sa.Column("created_at", sa.DateTime(timezone=True), server_default=sa.func.now()),
        sa.Column("updated_at", sa.DateTime(timezone=True), server_default=sa.func.now()),
        sa.CheckConstraint("status IN ('ACTIVE', 'INACTIVE')", name="ck_c_leads_status"),
    )
    op.create_index("ix_c_leads_parent_phone", "c_leads", ["parent_phone"])
    op.create_index("ix_c_leads_status", "c_leads", ["status"])
    op.create_index("ix_c_leads_created_at", "c_leads", ["created_at"])

    # C-level message history
    op.create_table(
        "c_lead_messages",
        sa.Column("id", postgresql.UUID(as_uuid=True), primary_key=True),
        sa.Column(
            "c_lead_id", postgresql.UUID(as_uuid=True),
            sa.ForeignKey("c_leads.id", ondelete="CASCADE"), nullable=False,
        ),
        sa.Column("message_type", sa.String(10), nullable=False),
        sa.Column("recipient_phone", sa.Text, nullable=False),
        sa.Column("content", sa.Text, nullable=False),
        sa.Column("status", sa.String(20), nullable=False, server_default="PENDING"),
        sa.Column("external_message_id", sa.String(100)),
        sa.Column("error_message", sa.Text),
        sa.Column("sent_at", sa.DateTime(timezone=True)),
        sa.Column("created_at", sa.DateTime(timezone=True), server_default=sa.func.now()),
    )
    op.create_index("ix_c_lead_messages_c_lead_id", "c_lead_messages", ["c_lead_id"])
    op.create_index("ix_c_lead_messages_created_at", "c_lead_messages", ["created_at"])


def downgrade() -> None:
    op.drop_index("ix_c_lead_messages_created_at", table_name="c_lead_messages")
    op.drop_index("ix_c_lead_messages_c_lead_id", table_name="c_lead_messages")
    op.drop_table("c_lead_messages")

    op.drop_index("ix_c_leads_created_at", table_name="c_leads")
    op.drop_index("ix_c_leads_status", table_name="c_leads")
    op.drop_index("ix_c_leads_parent_phone", table_name="c_leads")
    op.drop_table("c_leads")

    op.drop_index("ix_interactions_created_at", table_name="interactions")
    op.drop_index("ix_interactions_lead_id", table_name="interactions")
    op.drop_table("interactions")

    op.drop_index("ix_leads_created_at", table_name="leads")
    op.drop_index("ix_leads_stage", table_name="leads")
    op.drop_index("ix_leads_parent_phone", table_name="leads")
    op.drop_table("leads")

"""contacts, do-not-contact and email events

Revision ID: 0001_init
Revises: 
Create Date: 2026-10-19 00:00:00.000000
"""
from __future__ import annotations

from alembic import op
import sqlalchemy as sa

# revision identifiers, used by Alembic.
revision = "0001_init"
down_revision = None
branch_labels = None
depends_on = None


def upgrade():
    op.create_table(
        "contacts",
        sa.Column("id", sa.Integer(), nullable=False),
        sa.Column("email", sa.String(length=320), nullable=False),
        sa.Column("first_name", sa.String(length=120), nullable=True),
        sa.Column("last_name", sa.String(length=120), nullable=True),
        sa.Column("created_at", sa.DateTime(timezone=True), server_default=sa.text("CURRENT_TIMESTAMP")),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index("ix_contacts_id", "contacts", ["id"], unique=False)
    op.create_index("ix_contacts_email", "contacts", ["email"], unique=False)

    op.create_table(
        "do_not_contact",
        sa.Column("id", sa.Integer(), nullable=False),
        sa.Column("contact_id", sa.Integer(), nullable=True),
        sa.Column("email", sa.String(length=320), nullable=False),
        sa.Column("channel", sa.String(length=50), nullable=False, server_default="email"),
        sa.Column("channel_id", sa.String(length=255), nullable=True),
        sa.Column("reason", sa.Integer(), nullable=False),
        sa.Column("comments", sa.Text(), nullable=True),
        sa.Column("date_added", sa.DateTime(timezone=True), server_default=sa.text("CURRENT_TIMESTAMP")),
        sa.ForeignKeyConstraint(["contact_id"], ["contacts.id"]),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index("ix_do_not_contact_contact_id", "do_not_contact", ["contact_id"], unique=False)
    op.create_index("ix_do_not_contact_email", "do_not_contact", ["email"], unique=False)

    op.create_table(
        "email_events",
        sa.Column("id", sa.Integer(), nullable=False),
        sa.Column("event_type", sa.String(length=50), nullable=False),
        sa.Column("ses_message_id", sa.String(length=255), nullable=True),
        sa.Column("email_id", sa.String(length=255), nullable=True),
        sa.Column("topic_arn", sa.String(length=512), nullable=True),
        sa.Column("payload_json", sa.Text(), nullable=False),
        sa.Column("signature_verified", sa.Boolean(), nullable=True),
        sa.Column("received_at", sa.DateTime(timezone=True), server_default=sa.text("CURRENT_TIMESTAMP")),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index("ix_email_events_ses_message_id", "email_events", ["ses_message_id"], unique=False)
    op.create_index("ix_email_events_email_id", "email_events", ["email_id"], unique=False)


def downgrade():
    op.drop_index("ix_email_events_email_id", table_name="email_events")
    op.drop_index("ix_email_events_ses_message_id", table_name="email_events")
    op.drop_table("email_events")
    op.drop_index("ix_do_not_contact_email", table_name="do_not_contact")
    op.drop_index("ix_do_not_contact_contact_id", table_name="do_not_contact")
    op.drop_table("do_not_contact")
    op.drop_index("ix_contacts_email", table_name="contacts")
    op.drop_index("ix_contacts_id", table_name="contacts")
    op.drop_table("contacts")

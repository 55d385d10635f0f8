"""baseline schema

Revision ID: 5c1d7e2a9b40
Revises:
Create Date: 2026-10-17 00:00:00
"""

from __future__ import annotations

from alembic import op
import sqlalchemy as sa


# revision identifiers, used by Alembic.
revision = "5c1d7e2a9b40"
down_revision = None
branch_labels = None
depends_on = None


def upgrade() -> None:
    # events
    op.create_table(
        "events",
        sa.Column("id", sa.Integer(), primary_key=True, nullable=False),
        sa.Column("title", sa.String(length=200), nullable=False),
        sa.Column("game", sa.String(length=120), nullable=True),
        sa.Column("slot_config", sa.JSON(), nullable=True),
        sa.Column("created_at", sa.DateTime(), nullable=False),
    )
    op.create_index("ix_events_id", "events", ["id"])

    # characters
    op.create_table(
        "characters",
        sa.Column("id", sa.Integer(), primary_key=True, nullable=False),
        sa.Column("owner", sa.String(length=120), nullable=False),
        sa.Column("name", sa.String(length=120), nullable=False),
        sa.Column("class_name", sa.String(length=60), nullable=True),
        sa.Column("role", sa.String(length=16), nullable=True),
        sa.Column("created_at", sa.DateTime(), nullable=False),
    )
    op.create_index("ix_characters_id", "characters", ["id"])
    op.create_index("ix_characters_owner", "characters", ["owner"])

    # event_signups
    op.create_table(
        "event_signups",
        sa.Column("id", sa.Integer(), primary_key=True, nullable=False),
        sa.Column(
            "event_id",
            sa.Integer(),
            sa.ForeignKey("events.id", ondelete="CASCADE"),
            nullable=False,
        ),
        sa.Column("username", sa.String(length=120), nullable=False),
        sa.Column(
            "character_id",
            sa.Integer(),
            sa.ForeignKey("characters.id", ondelete="SET NULL"),
            nullable=True,
        ),
        sa.Column("preferred_roles", sa.JSON(), nullable=True),
        sa.Column(
            "status", sa.String(length=20), nullable=False, server_default="signed_up"
        ),
        sa.Column("signed_up_at", sa.DateTime(), nullable=False),
        sa.UniqueConstraint(
            "event_id", "username", name="uq_signup_event_username"
        ),  # <- inline UNIQUE (SQLite-safe)
    )
    op.create_index("ix_event_signups_id", "event_signups", ["id"])
    op.create_index("ix_event_signups_event_id", "event_signups", ["event_id"])

    # roster_assignments
    op.create_table(
        "roster_assignments",
        sa.Column("id", sa.Integer(), primary_key=True, nullable=False),
        sa.Column(
            "event_id",
            sa.Integer(),
            sa.ForeignKey("events.id", ondelete="CASCADE"),
            nullable=False,
        ),
        sa.Column(
            "signup_id",
            sa.Integer(),
            sa.ForeignKey("event_signups.id", ondelete="CASCADE"),
            nullable=False,
        ),
        sa.Column("role", sa.String(length=16), nullable=False),
        sa.Column("position", sa.Integer(), nullable=False),
        sa.Column(
            "is_override", sa.Boolean(), nullable=False, server_default=sa.text("0")
        ),
        sa.Column("created_at", sa.DateTime(), nullable=False),
        # one seat per signup, one signup per seat
        sa.UniqueConstraint(
            "event_id", "signup_id", name="uq_assignment_event_signup"
        ),
        sa.UniqueConstraint(
            "event_id", "role", "position", name="uq_assignment_event_seat"
        ),
    )
    op.create_index("ix_roster_assignments_id", "roster_assignments", ["id"])
    op.create_index("ix_roster_assignments_event_id", "roster_assignments", ["event_id"])
    op.create_index("ix_roster_assignments_signup_id", "roster_assignments", ["signup_id"])


def downgrade() -> None:
    op.drop_index("ix_roster_assignments_signup_id", table_name="roster_assignments")
    op.drop_index("ix_roster_assignments_event_id", table_name="roster_assignments")
    op.drop_index("ix_roster_assignments_id", table_name="roster_assignments")
    op.drop_table("roster_assignments")

    op.drop_index("ix_event_signups_event_id", table_name="event_signups")
    op.drop_index("ix_event_signups_id", table_name="event_signups")
    op.drop_table("event_signups")

    op.drop_index("ix_characters_owner", table_name="characters")
    op.drop_index("ix_characters_id", table_name="characters")
    op.drop_table("characters")

    op.drop_index("ix_events_id", table_name="events")
    op.drop_table("events")

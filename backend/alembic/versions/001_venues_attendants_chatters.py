"""Initial schema: venues, venue_attendants (attendance ledger), chatters.

Revision ID: 001
Revises:
Create Date: (run alembic upgrade head)

- venues: one row per Yelp business id seen via search or detail; the primary key makes
  lazy registration idempotent.
- venue_attendants: attendant set per venue; UNIQUE(venue_id, user_id).
- chatters: 140-char venue messages; (venue_id, created_at) index serves newest-first reads.
"""
from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa

revision: str = "001"
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    op.create_table(
        "venues",
        sa.Column("venue_id", sa.String(64), primary_key=True),
        sa.Column("first_seen_at", sa.DateTime(timezone=True), server_default=sa.func.now()),
    )
    op.create_table(
        "venue_attendants",
        sa.Column("id", sa.Integer(), primary_key=True, autoincrement=True),
        sa.Column(
            "venue_id",
            sa.String(64),
            sa.ForeignKey("venues.venue_id", ondelete="CASCADE"),
            nullable=False,
        ),
        sa.Column("user_id", sa.String(64), nullable=False),
        sa.Column("created_at", sa.DateTime(timezone=True), server_default=sa.func.now()),
        sa.UniqueConstraint("venue_id", "user_id", name="uq_venue_attendants_venue_user"),
    )
    op.create_index("ix_venue_attendants_venue_id", "venue_attendants", ["venue_id"])
    op.create_table(
        "chatters",
        sa.Column("id", sa.Integer(), primary_key=True, autoincrement=True),
        sa.Column(
            "venue_id",
            sa.String(64),
            sa.ForeignKey("venues.venue_id", ondelete="CASCADE"),
            nullable=False,
        ),
        sa.Column("author_name", sa.String(128), nullable=False),
        sa.Column("body", sa.String(140), nullable=False),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False),
    )
    op.create_index("ix_chatters_venue_created", "chatters", ["venue_id", "created_at"])
    op.create_index("ix_chatters_created_at", "chatters", ["created_at"])


def downgrade() -> None:
    op.drop_index("ix_chatters_created_at", table_name="chatters")
    op.drop_index("ix_chatters_venue_created", table_name="chatters")
    op.drop_table("chatters")
    op.drop_index("ix_venue_attendants_venue_id", table_name="venue_attendants")
    op.drop_table("venue_attendants")
    op.drop_table("venues")

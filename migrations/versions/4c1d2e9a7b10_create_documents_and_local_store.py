"""create_documents_and_local_store

Revision ID: 4c1d2e9a7b10
Revises:
Create Date: 2026-10-19 09:12:41.118203

"""

from collections.abc import Sequence

import sqlalchemy as sa
from alembic import op
from sqlalchemy.dialects import postgresql

# revision identifiers, used by Alembic.
revision: str = "4c1d2e9a7b10"
down_revision: str | Sequence[str] | None = None
branch_labels: str | Sequence[str] | None = None
depends_on: str | Sequence[str] | None = None


def upgrade() -> None:
    """Create the documents and local_store tables."""
    op.create_table(
        "documents",
        sa.Column("collection", sa.String(length=100), nullable=False),
        sa.Column("id", sa.String(length=128), nullable=False),
        sa.Column(
            "data",
            postgresql.JSONB(astext_type=sa.Text()),
            server_default=sa.text("'{}'::jsonb"),
            nullable=False,
        ),
        sa.Column("event_time", sa.DateTime(), nullable=True),
        sa.Column("created_at", sa.DateTime(), nullable=False),
        sa.Column("updated_at", sa.DateTime(), nullable=False),
        sa.PrimaryKeyConstraint("collection", "id"),
    )
    # Live queries read a whole collection ordered by event time
    op.create_index(
        "idx_documents_collection_event_time",
        "documents",
        ["collection", "event_time"],
        unique=False,
    )
    # Customer order history filters orders by userId
    op.execute(
        "CREATE INDEX idx_documents_orders_user_id ON documents ((data->>'userId')) "
        "WHERE collection = 'orders'"
    )

    op.create_table(
        "local_store",
        sa.Column("key", sa.String(length=255), nullable=False),
        sa.Column("value", sa.Text(), nullable=False),
        sa.Column("updated_at", sa.DateTime(), nullable=False),
        sa.PrimaryKeyConstraint("key"),
    )


def downgrade() -> None:
    """Drop the documents and local_store tables."""
    op.drop_table("local_store")
    op.execute("DROP INDEX IF EXISTS idx_documents_orders_user_id")
    op.drop_index("idx_documents_collection_event_time", table_name="documents")
    op.drop_table("documents")

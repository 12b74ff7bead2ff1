"""Item requests, and items answering them.

Revision ID: 002
Revises: 001
Create Date: 2026-10-17
"""
from typing import Sequence, Union

import sqlalchemy as sa
from alembic import op

revision: str = "002"
down_revision: Union[str, None] = "001"
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    op.create_table(
        "item_requests",
        sa.Column("id", sa.Integer(), primary_key=True, autoincrement=True),
        sa.Column("description", sa.String(1000), nullable=False),
        sa.Column("requester_id", sa.Integer(), sa.ForeignKey("users.id"), nullable=False),
        sa.Column("created", sa.DateTime(), nullable=False),
    )
    op.create_index("ix_item_requests_id", "item_requests", ["id"])
    op.create_index("ix_item_requests_requester_id", "item_requests", ["requester_id"])
    # Both request lists are ordered by creation time, newest first.
    op.create_index("ix_item_requests_created", "item_requests", ["created"])

    op.add_column("items", sa.Column("request_id", sa.Integer(), nullable=True))
    op.create_foreign_key(
        "fk_items_request_id", "items", "item_requests", ["request_id"], ["id"]
    )
    op.create_index("ix_items_request_id", "items", ["request_id"])


def downgrade() -> None:
    op.drop_index("ix_items_request_id", table_name="items")
    op.drop_constraint("fk_items_request_id", "items", type_="foreignkey")
    op.drop_column("items", "request_id")
    op.drop_table("item_requests")

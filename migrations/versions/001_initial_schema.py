"""Initial schema — menu_items and menu_updates, matching db.py models.

Revision ID: 001
Revises: (none)
Create Date: 2026-10-18
"""

import sqlalchemy as sa
from alembic import op
from sqlalchemy.dialects.postgresql import ARRAY, JSONB

revision = "001"
down_revision = None
branch_labels = None
depends_on = None

MENU_CATEGORIES = ("wine_list", "featured_menu", "signature_cocktails", "tavern_menu")


def upgrade() -> None:
    # --- menu_items ---
    op.create_table(
        "menu_items",
        sa.Column("id", sa.String(255), primary_key=True),
        sa.Column("name", sa.String(255), nullable=False),
        sa.Column("description", sa.Text(), nullable=True),
        sa.Column("price", sa.Numeric(10, 2), nullable=True),
        sa.Column("category", sa.String(50), nullable=False),
        sa.Column("subcategory", sa.String(100), nullable=True),
        sa.Column("available", sa.Boolean(), server_default=sa.text("true"), nullable=False),
        sa.Column("tags", ARRAY(sa.Text()), server_default="{}", nullable=False),
        sa.Column(
            "created_at",
            sa.DateTime(timezone=True),
            server_default=sa.func.now(),
            nullable=False,
        ),
        sa.Column(
            "updated_at",
            sa.DateTime(timezone=True),
            server_default=sa.func.now(),
            nullable=False,
        ),
        sa.CheckConstraint(
            "category IN (" + ", ".join(f"'{c}'" for c in MENU_CATEGORIES) + ")",
            name="ck_menu_items_category",
        ),
        sa.CheckConstraint("price IS NULL OR price >= 0", name="ck_menu_items_price"),
    )
    op.create_index("idx_menu_items_category", "menu_items", ["category"])
    op.create_index("idx_menu_items_available", "menu_items", ["available"])
    op.create_index("idx_menu_items_updated", "menu_items", ["updated_at"])

    # --- menu_updates ---
    op.create_table(
        "menu_updates",
        sa.Column("id", sa.BigInteger(), sa.Identity(), primary_key=True),
        sa.Column("user_id", sa.String(255), nullable=False),
        sa.Column("menu_type", sa.String(50), nullable=False),
        sa.Column("operation", sa.String(20), nullable=False),
        sa.Column("changes", JSONB(), nullable=False),
        sa.Column(
            "created_at",
            sa.DateTime(timezone=True),
            server_default=sa.func.now(),
            nullable=False,
        ),
        sa.CheckConstraint(
            "operation IN ('create', 'update', 'delete', 'bulk_update')",
            name="ck_menu_updates_operation",
        ),
    )
    op.create_index("idx_menu_updates_user_id", "menu_updates", ["user_id"])
    op.create_index("idx_menu_updates_menu_type", "menu_updates", ["menu_type"])
    op.create_index("idx_menu_updates_created_at", "menu_updates", ["created_at"])


def downgrade() -> None:
    op.drop_table("menu_updates")
    op.drop_table("menu_items")

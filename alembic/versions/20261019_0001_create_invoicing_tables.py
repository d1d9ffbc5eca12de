"""create invoicing tables

Revision ID: 20261019_0001
Revises:
Create Date: 2026-10-19 09:00:00.000000
"""

from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa


# revision identifiers, used by Alembic.
revision: str = "20261019_0001"
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None

# Wide enough that quantities, prices and derived totals are stored unrounded.
# SQLite keeps the text form; its numeric affinity would turn them into floats.
EXACT_NUMERIC = sa.Numeric(24, 10).with_variant(sa.String(32), "sqlite")


def _table_exists(inspector: sa.Inspector, table_name: str) -> bool:
    return table_name in inspector.get_table_names()


def _index_exists(inspector: sa.Inspector, table_name: str, index_name: str) -> bool:
    return index_name in {index["name"] for index in inspector.get_indexes(table_name)}


def _timestamps() -> list[sa.Column]:
    return [
        sa.Column(
            "created_at",
            sa.DateTime(timezone=True),
            nullable=False,
            server_default=sa.func.now(),
        ),
        sa.Column(
            "updated_at",
            sa.DateTime(timezone=True),
            nullable=False,
            server_default=sa.func.now(),
        ),
    ]


def upgrade() -> None:
    bind = op.get_bind()
    inspector = sa.inspect(bind)

    if not _table_exists(inspector, "users"):
        op.create_table(
            "users",
            sa.Column("id", sa.String(length=36), nullable=False),
            sa.Column("email", sa.String(length=255), nullable=False),
            sa.Column("hashed_password", sa.String(length=255), nullable=False),
            sa.Column("full_name", sa.String(length=100), nullable=True),
            sa.Column("is_active", sa.Boolean(), nullable=False, server_default=sa.true()),
            sa.Column("created_at", sa.DateTime(), nullable=False, server_default=sa.func.now()),
            sa.Column("updated_at", sa.DateTime(), nullable=False, server_default=sa.func.now()),
            sa.PrimaryKeyConstraint("id"),
        )
        op.create_index("ix_users_email", "users", ["email"], unique=True)
        op.create_index("ux_users_email_lower", "users", [sa.text("lower(email)")], unique=True)

    if not _table_exists(inspector, "business_profiles"):
        op.create_table(
            "business_profiles",
            sa.Column("id", sa.String(length=36), nullable=False),
            sa.Column("user_id", sa.String(length=36), nullable=False),
            sa.Column("business_name", sa.String(length=255), nullable=True),
            sa.Column("business_address", sa.String(length=500), nullable=True),
            sa.Column("business_phone", sa.String(length=40), nullable=True),
            sa.Column("business_email", sa.String(length=255), nullable=True),
            sa.Column("logo_url", sa.String(length=500), nullable=True),
            sa.Column("gstin", sa.String(length=30), nullable=True),
            *_timestamps(),
            sa.ForeignKeyConstraint(["user_id"], ["users.id"]),
            sa.PrimaryKeyConstraint("id"),
        )
        op.create_index("ix_business_profiles_user_id", "business_profiles", ["user_id"], unique=True)

    if not _table_exists(inspector, "inventory_items"):
        op.create_table(
            "inventory_items",
            sa.Column("id", sa.String(length=36), nullable=False),
            sa.Column("user_id", sa.String(length=36), nullable=False),
            sa.Column("name", sa.String(length=255), nullable=False),
            sa.Column("description", sa.String(length=500), nullable=True),
            sa.Column("quantity", EXACT_NUMERIC, nullable=False, server_default="0"),
            sa.Column("price_per_unit", EXACT_NUMERIC, nullable=False),
            sa.Column("unit", sa.String(length=20), nullable=False, server_default="pcs"),
            *_timestamps(),
            sa.ForeignKeyConstraint(["user_id"], ["users.id"]),
            sa.PrimaryKeyConstraint("id"),
        )
        op.create_index("ix_inventory_items_user_id", "inventory_items", ["user_id"], unique=False)
        op.create_index(
            "ix_inventory_items_user_created_at",
            "inventory_items",
            ["user_id", "created_at"],
            unique=False,
        )

    if not _table_exists(inspector, "invoices"):
        op.create_table(
            "invoices",
            sa.Column("id", sa.String(length=36), nullable=False),
            sa.Column("user_id", sa.String(length=36), nullable=False),
            sa.Column("invoice_number", sa.String(length=40), nullable=False),
            sa.Column("date", sa.DateTime(timezone=True), nullable=False),
            sa.Column("status", sa.String(length=20), nullable=False, server_default="draft"),
            sa.Column("buyer_name", sa.String(length=255), nullable=False),
            sa.Column("buyer_address", sa.String(length=500), nullable=False),
            sa.Column("buyer_phone", sa.String(length=40), nullable=False),
            sa.Column("buyer_email", sa.String(length=255), nullable=True),
            sa.Column("buyer_gstin", sa.String(length=30), nullable=True),
            sa.Column("subtotal", EXACT_NUMERIC, nullable=False),
            sa.Column("discount", EXACT_NUMERIC, nullable=False, server_default="0"),
            sa.Column("tax_percent", EXACT_NUMERIC, nullable=False, server_default="0"),
            sa.Column("tax", EXACT_NUMERIC, nullable=False, server_default="0"),
            sa.Column("total", EXACT_NUMERIC, nullable=False),
            sa.Column("notes", sa.String(length=1000), nullable=True),
            *_timestamps(),
            sa.CheckConstraint(
                "status IN ('draft', 'sent', 'paid')",
                name="ck_invoices_status",
            ),
            sa.ForeignKeyConstraint(["user_id"], ["users.id"]),
            sa.PrimaryKeyConstraint("id"),
            sa.UniqueConstraint("user_id", "invoice_number", name="ux_invoices_user_invoice_number"),
        )
        op.create_index("ix_invoices_user_id", "invoices", ["user_id"], unique=False)
        op.create_index("ix_invoices_user_date", "invoices", ["user_id", "date"], unique=False)

    if not _table_exists(inspector, "invoice_items"):
        op.create_table(
            "invoice_items",
            sa.Column("id", sa.String(length=36), nullable=False),
            sa.Column("invoice_id", sa.String(length=36), nullable=False),
            sa.Column("inventory_item_id", sa.String(length=36), nullable=True),
            sa.Column("position", sa.Integer(), nullable=False, server_default="0"),
            sa.Column("name", sa.String(length=255), nullable=False),
            sa.Column("unit", sa.String(length=20), nullable=False),
            sa.Column("quantity", EXACT_NUMERIC, nullable=False),
            sa.Column("price_per_unit", EXACT_NUMERIC, nullable=False),
            sa.Column("total", EXACT_NUMERIC, nullable=False),
            sa.ForeignKeyConstraint(["invoice_id"], ["invoices.id"]),
            sa.PrimaryKeyConstraint("id"),
        )
        op.create_index("ix_invoice_items_invoice_id", "invoice_items", ["invoice_id"], unique=False)
        op.create_index(
            "ix_invoice_items_inventory_item_id",
            "invoice_items",
            ["inventory_item_id"],
            unique=False,
        )
        op.create_index(
            "ix_invoice_items_invoice_position",
            "invoice_items",
            ["invoice_id", "position"],
            unique=False,
        )


def downgrade() -> None:
    bind = op.get_bind()
    inspector = sa.inspect(bind)

    for table_name, index_names in (
        (
            "invoice_items",
            (
                "ix_invoice_items_invoice_position",
                "ix_invoice_items_inventory_item_id",
                "ix_invoice_items_invoice_id",
            ),
        ),
        ("invoices", ("ix_invoices_user_date", "ix_invoices_user_id")),
        (
            "inventory_items",
            ("ix_inventory_items_user_created_at", "ix_inventory_items_user_id"),
        ),
        ("business_profiles", ("ix_business_profiles_user_id",)),
        ("users", ("ux_users_email_lower", "ix_users_email")),
    ):
        if not _table_exists(inspector, table_name):
            continue
        for index_name in index_names:
            if _index_exists(inspector, table_name, index_name):
                op.drop_index(index_name, table_name=table_name)
        op.drop_table(table_name)
        inspector = sa.inspect(bind)

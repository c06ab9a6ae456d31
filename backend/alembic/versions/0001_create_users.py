"""Create users table with role and section permissions.

Revision ID: 0001
Revises: (none)
Create Date: 2026-10-18
"""

revision = "0001"
down_revision = None
branch_labels = None
depends_on = None

from alembic import op
import sqlalchemy as sa

userrole = sa.Enum("customer", "employee", "superadmin", name="userrole")


def upgrade() -> None:
    op.create_table(
        "users",
        sa.Column("id", sa.String(36), primary_key=True),
        sa.Column("phone", sa.String(20), nullable=False),
        sa.Column("email", sa.String(255)),
        sa.Column("name", sa.String(255), nullable=False),
        sa.Column("hashed_password", sa.String(255), nullable=False),
        sa.Column("role", userrole, nullable=False, server_default="customer"),
        sa.Column("is_active", sa.Boolean(), server_default=sa.true()),
        sa.Column("permissions", sa.JSON(), nullable=False, server_default="{}"),
        sa.Column("temporary_password", sa.Boolean(), server_default=sa.false()),
        sa.Column("office_location", sa.String(255)),
        sa.Column("home_location", sa.String(255)),
        sa.Column("created_by", sa.String(36)),
        sa.Column("created_at", sa.DateTime(), server_default=sa.func.now()),
        sa.Column("updated_at", sa.DateTime(), server_default=sa.func.now()),
    )
    op.create_index("ix_users_phone", "users", ["phone"], unique=True)
    op.create_index("ix_users_email", "users", ["email"], unique=True)


def downgrade() -> None:
    op.drop_index("ix_users_email", table_name="users")
    op.drop_index("ix_users_phone", table_name="users")
    op.drop_table("users")
    userrole.drop(op.get_bind(), checkfirst=True)

"""Create users and the shared reference tables.

Revision ID: 001
Create Date: 2026-10-19
"""

from alembic import op
import sqlalchemy as sa

# revision identifiers, used by Alembic.
revision = "001"
down_revision = None
branch_labels = None
depends_on = None

LOOKUP_TABLES = ("categories", "currencies", "account_types", "transaction_types", "states")


def upgrade() -> None:
    op.create_table(
        "users",
        sa.Column("id", sa.Integer(), autoincrement=True, nullable=False),
        sa.Column("email", sa.String(255), nullable=False),
        sa.Column("full_name", sa.String(255), nullable=False),
        sa.Column("role_id", sa.Integer(), nullable=True),
        sa.Column("created_at", sa.DateTime(timezone=True), server_default=sa.text("now()"), nullable=False),
        sa.Column("updated_at", sa.DateTime(timezone=True), server_default=sa.text("now()"), nullable=False),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index("ix_users_email", "users", ["email"], unique=True)

    for table in LOOKUP_TABLES:
        op.create_table(
            table,
            sa.Column("id", sa.Integer(), autoincrement=True, nullable=False),
            sa.Column("name", sa.String(250), nullable=False),
            sa.PrimaryKeyConstraint("id"),
        )

    # Ids 1/2 are the income/expense and pending/completed conventions in settings
    op.execute("""
        INSERT INTO transaction_types (id, name) VALUES
        (1, 'Income'),
        (2, 'Expense');
    """)
    op.execute("""
        INSERT INTO states (id, name) VALUES
        (1, 'Pending'),
        (2, 'Completed');
    """)
    op.execute("SELECT setval('transaction_types_id_seq', (SELECT MAX(id) FROM transaction_types))")
    op.execute("SELECT setval('states_id_seq', (SELECT MAX(id) FROM states))")


def downgrade() -> None:
    for table in reversed(LOOKUP_TABLES):
        op.drop_table(table)
    op.drop_index("ix_users_email", table_name="users")
    op.drop_table("users")

from __future__ import annotations

import sqlalchemy as sa
from alembic import op

revision = "0002_order_cart_id"
down_revision = "0001_create_schema"
branch_labels = None
depends_on = None


def upgrade() -> None:
    with op.batch_alter_table("orders") as batch_op:
        batch_op.add_column(sa.Column("cart_id", sa.String(length=32), nullable=True))


def downgrade() -> None:
    with op.batch_alter_table("orders") as batch_op:
        batch_op.drop_column("cart_id")

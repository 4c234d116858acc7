"""create logistics boards, lists and cards

Revision ID: 0001_logistics_board
Revises:
Create Date: 2025-11-12 19:05:00

"""
from alembic import op
import sqlalchemy as sa


# revision identifiers, used by Alembic.
revision = "0001_logistics_board"
down_revision = None
branch_labels = None
depends_on = None

card_status = sa.Enum("TODO", "IN_PROGRESS", "DONE", name="cardstatus")


def upgrade() -> None:
    op.create_table(
        "logistics_boards",
        sa.Column("id", sa.Integer(), primary_key=True),
        sa.Column("name", sa.String(length=200), nullable=False),
        sa.Column("description", sa.String(length=2000), nullable=False),
        sa.Column("activity_id", sa.Integer(), nullable=True),
        sa.Column("created_at", sa.DateTime(), nullable=True),
        sa.Column("updated_at", sa.DateTime(), nullable=True),
    )
    op.create_index("ix_logistics_boards_id", "logistics_boards", ["id"])
    op.create_index("ix_logistics_boards_activity_id", "logistics_boards", ["activity_id"])

    op.create_table(
        "logistics_lists",
        sa.Column("id", sa.Integer(), primary_key=True),
        sa.Column("name", sa.String(length=100), nullable=False),
        sa.Column("position", sa.Integer(), nullable=False),
        sa.Column(
            "board_id",
            sa.Integer(),
            sa.ForeignKey("logistics_boards.id", ondelete="CASCADE"),
            nullable=False,
        ),
        sa.Column("created_at", sa.DateTime(), nullable=True),
        sa.Column("updated_at", sa.DateTime(), nullable=True),
    )
    op.create_index("ix_logistics_lists_id", "logistics_lists", ["id"])
    op.create_index("ix_logistics_lists_board_id", "logistics_lists", ["board_id"])

    op.create_table(
        "logistics_cards",
        sa.Column("id", sa.Integer(), primary_key=True),
        sa.Column("title", sa.String(length=200), nullable=False),
        sa.Column("description", sa.String(length=2000), nullable=False),
        sa.Column("position", sa.Integer(), nullable=False),
        sa.Column(
            "list_id",
            sa.Integer(),
            sa.ForeignKey("logistics_lists.id", ondelete="CASCADE"),
            nullable=False,
        ),
        sa.Column("activity_id", sa.Integer(), nullable=True),
        sa.Column("assigned_member_id", sa.String(length=450), nullable=True),
        sa.Column("status", card_status, nullable=False),
        sa.Column("labels", sa.JSON(), nullable=True),
        sa.Column("start_date", sa.DateTime(), nullable=True),
        sa.Column("due_date", sa.DateTime(), nullable=True),
        sa.Column("reminder_date", sa.DateTime(), nullable=True),
        sa.Column("checklist", sa.JSON(), nullable=True),
        sa.Column("attachments", sa.JSON(), nullable=True),
        sa.Column("created_at", sa.DateTime(), nullable=True),
        sa.Column("updated_at", sa.DateTime(), nullable=True),
    )
    op.create_index("ix_logistics_cards_id", "logistics_cards", ["id"])
    op.create_index("ix_logistics_cards_list_id", "logistics_cards", ["list_id"])
    op.create_index("ix_logistics_cards_activity_id", "logistics_cards", ["activity_id"])
    op.create_index("ix_logistics_cards_assigned_member_id", "logistics_cards", ["assigned_member_id"])


def downgrade() -> None:
    op.drop_table("logistics_cards")
    op.drop_table("logistics_lists")
    op.drop_table("logistics_boards")
    card_status.drop(op.get_bind(), checkfirst=True)

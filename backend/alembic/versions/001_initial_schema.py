"""Initial schema

Revision ID: 001
Revises:
Create Date: 2026-10-18

"""

from typing import List, Sequence, Union

import sqlalchemy as sa

from alembic import op

# revision identifiers, used by Alembic.
revision: str = "001"
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def _timestamps() -> List[sa.Column]:
    return [
        sa.Column(
            "created_at",
            sa.DateTime(timezone=True),
            server_default=sa.text("CURRENT_TIMESTAMP"),
            nullable=False,
        ),
        sa.Column(
            "updated_at",
            sa.DateTime(timezone=True),
            server_default=sa.text("CURRENT_TIMESTAMP"),
            nullable=False,
        ),
    ]


def _timestamp_indexes(table: str) -> None:
    op.create_index(
        op.f(f"ix_{table}_created_at"), table, ["created_at"], unique=False
    )
    op.create_index(
        op.f(f"ix_{table}_updated_at"), table, ["updated_at"], unique=False
    )


def upgrade() -> None:
    # Create studio table
    op.create_table(
        "studio",
        sa.Column("id", sa.String(), nullable=False),
        sa.Column("name", sa.String(), nullable=False),
        sa.Column("description", sa.Text(), nullable=True),
        sa.Column("thumbnail", sa.String(), nullable=True),
        sa.Column("favorite", sa.Boolean(), nullable=False),
        sa.Column("bookmark", sa.BigInteger(), nullable=True),
        sa.Column("aliases", sa.JSON(), nullable=False),
        sa.Column("custom_fields", sa.JSON(), nullable=False),
        sa.Column("parent_id", sa.String(), nullable=True),
        *_timestamps(),
        sa.ForeignKeyConstraint(["parent_id"], ["studio.id"], ondelete="SET NULL"),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index("idx_studio_name_lower", "studio", ["name"], unique=False)
    op.create_index(op.f("ix_studio_id"), "studio", ["id"], unique=False)
    op.create_index(op.f("ix_studio_name"), "studio", ["name"], unique=False)
    op.create_index(
        op.f("ix_studio_parent_id"), "studio", ["parent_id"], unique=False
    )
    _timestamp_indexes("studio")

    # Create label table
    op.create_table(
        "label",
        sa.Column("id", sa.String(), nullable=False),
        sa.Column("name", sa.String(), nullable=False),
        sa.Column("aliases", sa.JSON(), nullable=False),
        *_timestamps(),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index(op.f("ix_label_id"), "label", ["id"], unique=False)
    op.create_index(op.f("ix_label_name"), "label", ["name"], unique=True)
    _timestamp_indexes("label")

    # Create labelled_item table
    op.create_table(
        "labelled_item",
        sa.Column("id", sa.String(), nullable=False),
        sa.Column("item_id", sa.String(), nullable=False),
        sa.Column(
            "item_type",
            sa.Enum("studio", "scene", "movie", "image", name="itemtype"),
            nullable=False,
        ),
        sa.Column("label_id", sa.String(), nullable=False),
        *_timestamps(),
        sa.ForeignKeyConstraint(["label_id"], ["label.id"], ondelete="CASCADE"),
        sa.PrimaryKeyConstraint("id"),
        sa.UniqueConstraint("item_id", "label_id", name="uq_labelled_item"),
    )
    op.create_index(
        op.f("ix_labelled_item_item_id"), "labelled_item", ["item_id"], unique=False
    )
    op.create_index(
        op.f("ix_labelled_item_label_id"),
        "labelled_item",
        ["label_id"],
        unique=False,
    )
    op.create_index(
        "idx_labelled_item_type",
        "labelled_item",
        ["item_type", "item_id"],
        unique=False,
    )
    _timestamp_indexes("labelled_item")

    # Create scene, movie and image tables
    op.create_table(
        "scene",
        sa.Column("id", sa.String(), nullable=False),
        sa.Column("name", sa.String(), nullable=False),
        sa.Column("path", sa.String(), nullable=True),
        sa.Column("details", sa.Text(), nullable=True),
        sa.Column("studio_id", sa.String(), nullable=True),
        *_timestamps(),
        sa.ForeignKeyConstraint(["studio_id"], ["studio.id"], ondelete="SET NULL"),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_table(
        "movie",
        sa.Column("id", sa.String(), nullable=False),
        sa.Column("name", sa.String(), nullable=False),
        sa.Column("studio_id", sa.String(), nullable=True),
        *_timestamps(),
        sa.ForeignKeyConstraint(["studio_id"], ["studio.id"], ondelete="SET NULL"),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_table(
        "image",
        sa.Column("id", sa.String(), nullable=False),
        sa.Column("name", sa.String(), nullable=False),
        sa.Column("path", sa.String(), nullable=True),
        sa.Column("studio_id", sa.String(), nullable=True),
        *_timestamps(),
        sa.ForeignKeyConstraint(["studio_id"], ["studio.id"], ondelete="SET NULL"),
        sa.PrimaryKeyConstraint("id"),
    )
    for table in ("scene", "movie", "image"):
        op.create_index(op.f(f"ix_{table}_id"), table, ["id"], unique=False)
        op.create_index(op.f(f"ix_{table}_name"), table, ["name"], unique=False)
        op.create_index(
            op.f(f"ix_{table}_studio_id"), table, ["studio_id"], unique=False
        )
        _timestamp_indexes(table)

    # Create studio_search_document table
    op.create_table(
        "studio_search_document",
        sa.Column("studio_id", sa.String(), nullable=False),
        sa.Column("name", sa.String(), nullable=False),
        sa.Column("aliases", sa.JSON(), nullable=False),
        sa.Column("label_ids", sa.JSON(), nullable=False),
        sa.Column("label_names", sa.JSON(), nullable=False),
        sa.Column("parent_id", sa.String(), nullable=True),
        sa.Column("favorite", sa.Boolean(), nullable=False),
        sa.Column("bookmark", sa.BigInteger(), nullable=True),
        sa.Column("scene_count", sa.Integer(), nullable=False),
        sa.Column("custom_fields", sa.JSON(), nullable=False),
        sa.Column("indexed_at", sa.DateTime(timezone=True), nullable=False),
        *_timestamps(),
        sa.PrimaryKeyConstraint("studio_id"),
    )
    op.create_index(
        op.f("ix_studio_search_document_name"),
        "studio_search_document",
        ["name"],
        unique=False,
    )
    op.create_index(
        op.f("ix_studio_search_document_parent_id"),
        "studio_search_document",
        ["parent_id"],
        unique=False,
    )
    _timestamp_indexes("studio_search_document")


def downgrade() -> None:
    op.drop_table("studio_search_document")
    op.drop_table("image")
    op.drop_table("movie")
    op.drop_table("scene")
    op.drop_table("labelled_item")
    op.drop_table("label")
    op.drop_table("studio")
    sa.Enum(name="itemtype").drop(op.get_bind(), checkfirst=True)

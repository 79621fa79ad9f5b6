"""Create dive log tables

Revision ID: 001
Revises: None
Create Date: 2024-03-01 00:00:00.000000

Creates dive_sites, dives and user_settings with their indexes.
See app/models/ for column documentation.

Rollback: downgrade() drops all three tables (destructive).
"""

from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa
from sqlalchemy.dialects import postgresql

revision: str = "001"
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None

JSONDocument = sa.JSON().with_variant(postgresql.JSONB(), "postgresql")


def _timestamps():
    return [
        sa.Column("created_at", sa.DateTime(), nullable=False, server_default=sa.text("CURRENT_TIMESTAMP")),
        sa.Column("updated_at", sa.DateTime(), nullable=False, server_default=sa.text("CURRENT_TIMESTAMP")),
    ]


def upgrade() -> None:
    op.create_table(
        "dive_sites",
        sa.Column("id", sa.Integer(), autoincrement=True, nullable=False),
        sa.Column("name", sa.String(255), nullable=False),
        sa.Column("latitude", sa.Float(), nullable=False),
        sa.Column("longitude", sa.Float(), nullable=False),
        sa.Column("description", sa.Text(), nullable=True),
        *_timestamps(),
        sa.PrimaryKeyConstraint("id", name="pk_dive_sites"),
    )
    op.create_index(
        "idx_dive_sites_name_lower",
        "dive_sites",
        [sa.text("lower(name)")],
    )

    op.create_table(
        "dives",
        sa.Column("id", sa.Integer(), autoincrement=True, nullable=False),
        sa.Column("user_id", sa.Integer(), nullable=False),
        sa.Column("dive_site_id", sa.Integer(), nullable=True),
        sa.Column("dive_datetime", sa.DateTime(), nullable=False),
        sa.Column("max_depth", sa.Float(), nullable=False),
        sa.Column("duration", sa.Integer(), nullable=False),
        sa.Column("buddy", sa.String(255), nullable=True),
        sa.Column("water_temperature", sa.Float(), nullable=True),
        sa.Column("visibility", sa.Integer(), nullable=True),
        sa.Column("notes", sa.Text(), nullable=True),
        sa.Column("latitude", sa.Float(), nullable=True),
        sa.Column("longitude", sa.Float(), nullable=True),
        sa.Column("location", sa.String(255), nullable=True),
        sa.Column("samples", JSONDocument, nullable=True),
        sa.Column("equipment", JSONDocument, nullable=True),
        sa.Column("conditions", JSONDocument, nullable=True),
        sa.Column("dive_type", sa.String(50), nullable=True),
        sa.Column("rating", sa.Integer(), nullable=True),
        sa.Column("safety_stops", JSONDocument, nullable=True),
        *_timestamps(),
        sa.PrimaryKeyConstraint("id", name="pk_dives"),
        sa.ForeignKeyConstraint(["dive_site_id"], ["dive_sites.id"], name="fk_dives_dive_site_id"),
    )
    op.create_index("idx_dives_user_datetime", "dives", ["user_id", "dive_datetime"])
    op.create_index("idx_dives_dive_site_id", "dives", ["dive_site_id"])

    op.create_table(
        "user_settings",
        sa.Column("id", sa.Integer(), autoincrement=True, nullable=False),
        sa.Column("user_id", sa.Integer(), nullable=False),
        sa.Column("unit_preference", sa.String(20), nullable=False),
        sa.Column("depth_unit", sa.String(20), nullable=False),
        sa.Column("temperature_unit", sa.String(20), nullable=False),
        sa.Column("distance_unit", sa.String(20), nullable=False),
        sa.Column("weight_unit", sa.String(20), nullable=False),
        sa.Column("pressure_unit", sa.String(20), nullable=False),
        sa.Column("volume_unit", sa.String(20), nullable=False),
        sa.Column("date_format", sa.String(20), nullable=False),
        sa.Column("time_format", sa.String(20), nullable=False),
        sa.Column("default_visibility", sa.String(20), nullable=False),
        sa.Column("show_buddy_reminders", sa.Boolean(), nullable=False),
        sa.Column("auto_calculate_nitrox", sa.Boolean(), nullable=False),
        sa.Column("default_gas_mix", sa.String(100), nullable=False),
        sa.Column("max_depth_warning", sa.Integer(), nullable=False),
        *_timestamps(),
        sa.PrimaryKeyConstraint("id", name="pk_user_settings"),
        sa.UniqueConstraint("user_id", name="uq_user_settings_user_id"),
    )


def downgrade() -> None:
    op.drop_table("user_settings")
    op.drop_index("idx_dives_dive_site_id", table_name="dives")
    op.drop_index("idx_dives_user_datetime", table_name="dives")
    op.drop_table("dives")
    op.drop_index("idx_dive_sites_name_lower", table_name="dive_sites")
    op.drop_table("dive_sites")

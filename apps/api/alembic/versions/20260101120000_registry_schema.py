"""registry schema

Revision ID: 20260101120000
Revises:
Create Date: 2026-01-01 12:00:00.000000

"""

from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa

from church_registry.common.models.base import (
    EDUCATION_LEVELS,
    GENDERS,
    LIVE_STATUSES,
    MEMBER_ROLES,
    USER_ROLES,
)

# revision identifiers, used by Alembic.
revision: str = "20260101120000"
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None

ENUM_NAMES = ("gender", "live_status", "member_role", "education_level", "user_role")


def _timestamps() -> list[sa.Column]:
    return [
        sa.Column("created_at", sa.TIMESTAMP(timezone=True), nullable=True),
        sa.Column("updated_at", sa.TIMESTAMP(timezone=True), nullable=True),
    ]


def upgrade() -> None:
    """Create the registry tables."""
    op.create_table(
        "wereda_units",
        sa.Column("id", sa.Uuid(), nullable=False),
        sa.Column("name", sa.String(length=200), nullable=False),
        sa.Column("region", sa.String(length=100), nullable=False),
        sa.Column("zone", sa.String(length=100), nullable=False),
        sa.Column("woreda", sa.String(length=100), nullable=False),
        sa.Column("kebele", sa.String(length=100), nullable=False),
        *_timestamps(),
        sa.PrimaryKeyConstraint("id", name="pk_wereda_units"),
        sa.UniqueConstraint("name", name="uq_wereda_units_name"),
    )
    op.create_index(
        "ix_wereda_units_region_zone_woreda",
        "wereda_units",
        ["region", "zone", "woreda"],
    )

    op.create_table(
        "parishes",
        sa.Column("id", sa.Uuid(), nullable=False),
        sa.Column("name", sa.String(length=200), nullable=False),
        sa.Column("region", sa.String(length=100), nullable=False),
        sa.Column("zone", sa.String(length=100), nullable=True),
        sa.Column("woreda", sa.String(length=100), nullable=True),
        sa.Column("kebele", sa.String(length=100), nullable=True),
        sa.Column("contact_name", sa.String(length=200), nullable=True),
        sa.Column("contact_phone", sa.String(length=16), nullable=True),
        sa.Column("contact_role", sa.String(length=100), nullable=True),
        sa.Column("under_id", sa.Uuid(), nullable=False),
        *_timestamps(),
        sa.ForeignKeyConstraint(
            ["under_id"],
            ["wereda_units.id"],
            name="fk_parishes_under_id_wereda_units",
            ondelete="RESTRICT",
        ),
        sa.PrimaryKeyConstraint("id", name="pk_parishes"),
        sa.UniqueConstraint("name", name="uq_parishes_name"),
    )
    op.create_index("ix_parishes_under_id", "parishes", ["under_id"])

    op.create_table(
        "members",
        sa.Column("id", sa.Uuid(), nullable=False),
        sa.Column("first_name", sa.String(length=100), nullable=False),
        sa.Column("father_name", sa.String(length=100), nullable=True),
        sa.Column("grandfather_name", sa.String(length=100), nullable=True),
        sa.Column("gender", sa.Enum(*GENDERS, name="gender"), nullable=False),
        sa.Column("date_of_birth", sa.Date(), nullable=False),
        sa.Column("christianity_name", sa.String(length=100), nullable=True),
        sa.Column(
            "education_level",
            sa.Enum(*EDUCATION_LEVELS, name="education_level"),
            nullable=True,
        ),
        sa.Column("role", sa.Enum(*MEMBER_ROLES, name="member_role"), nullable=False),
        sa.Column(
            "live_status", sa.Enum(*LIVE_STATUSES, name="live_status"), nullable=False
        ),
        sa.Column("phone", sa.String(length=16), nullable=True),
        sa.Column("emergency_phone", sa.String(length=16), nullable=True),
        sa.Column("parish_id", sa.Uuid(), nullable=True),
        sa.Column("mother_name", sa.String(length=100), nullable=True),
        sa.Column("mother_father_name", sa.String(length=100), nullable=True),
        sa.Column("soul_father_name", sa.String(length=100), nullable=True),
        sa.Column("photo_url", sa.String(length=500), nullable=True),
        sa.Column("death_id", sa.Uuid(), nullable=True),
        *_timestamps(),
        sa.ForeignKeyConstraint(
            ["parish_id"],
            ["parishes.id"],
            name="fk_members_parish_id_parishes",
            ondelete="SET NULL",
        ),
        sa.PrimaryKeyConstraint("id", name="pk_members"),
        sa.UniqueConstraint("phone", name="uq_members_phone"),
    )
    op.create_index("ix_members_parish_id", "members", ["parish_id"])
    op.create_index(
        "ix_members_names", "members", ["first_name", "father_name", "grandfather_name"]
    )

    op.create_table(
        "baptism_records",
        sa.Column("id", sa.Uuid(), nullable=False),
        sa.Column("member_id", sa.Uuid(), nullable=False),
        sa.Column("baptism_date", sa.Date(), nullable=False),
        sa.Column("parish_id", sa.Uuid(), nullable=False),
        sa.Column("baptized_by_id", sa.Uuid(), nullable=True),
        sa.Column("parent_name", sa.String(length=200), nullable=False),
        sa.Column("parent_phone", sa.String(length=16), nullable=True),
        *_timestamps(),
        sa.ForeignKeyConstraint(
            ["member_id"],
            ["members.id"],
            name="fk_baptism_records_member_id_members",
            ondelete="CASCADE",
        ),
        sa.ForeignKeyConstraint(
            ["parish_id"],
            ["parishes.id"],
            name="fk_baptism_records_parish_id_parishes",
            ondelete="RESTRICT",
        ),
        sa.ForeignKeyConstraint(
            ["baptized_by_id"],
            ["members.id"],
            name="fk_baptism_records_baptized_by_id_members",
            ondelete="SET NULL",
        ),
        sa.PrimaryKeyConstraint("id", name="pk_baptism_records"),
        sa.UniqueConstraint("member_id", name="uq_baptism_records_member_id"),
    )
    op.create_index("ix_baptism_records_parish_id", "baptism_records", ["parish_id"])
    op.create_index(
        "ix_baptism_records_baptized_by_id", "baptism_records", ["baptized_by_id"]
    )
    op.create_index(
        "ix_baptism_records_baptism_date", "baptism_records", ["baptism_date"]
    )

    op.create_table(
        "marriage_records",
        sa.Column("id", sa.Uuid(), nullable=False),
        sa.Column("husband_id", sa.Uuid(), nullable=False),
        sa.Column("wife_id", sa.Uuid(), nullable=False),
        sa.Column("marriage_date", sa.Date(), nullable=False),
        sa.Column("marriage_place", sa.String(length=200), nullable=True),
        sa.Column("church_id", sa.Uuid(), nullable=True),
        sa.Column("is_active", sa.Boolean(), nullable=False),
        sa.Column("divorce_date", sa.Date(), nullable=True),
        sa.Column("divorce_reason", sa.String(length=500), nullable=True),
        *_timestamps(),
        sa.ForeignKeyConstraint(
            ["husband_id"],
            ["members.id"],
            name="fk_marriage_records_husband_id_members",
            ondelete="CASCADE",
        ),
        sa.ForeignKeyConstraint(
            ["wife_id"],
            ["members.id"],
            name="fk_marriage_records_wife_id_members",
            ondelete="CASCADE",
        ),
        sa.ForeignKeyConstraint(
            ["church_id"],
            ["parishes.id"],
            name="fk_marriage_records_church_id_parishes",
            ondelete="SET NULL",
        ),
        sa.PrimaryKeyConstraint("id", name="pk_marriage_records"),
        sa.UniqueConstraint(
            "husband_id", "wife_id", name="uq_marriage_records_husband_wife"
        ),
    )
    op.create_index("ix_marriage_records_husband_id", "marriage_records", ["husband_id"])
    op.create_index("ix_marriage_records_wife_id", "marriage_records", ["wife_id"])
    op.create_index("ix_marriage_records_church_id", "marriage_records", ["church_id"])
    op.create_index(
        "ix_marriage_records_marriage_date", "marriage_records", ["marriage_date"]
    )

    op.create_table(
        "death_records",
        sa.Column("id", sa.Uuid(), nullable=False),
        sa.Column("member_id", sa.Uuid(), nullable=False),
        sa.Column("date_of_death", sa.Date(), nullable=False),
        sa.Column("grave_location_id", sa.Uuid(), nullable=True),
        *_timestamps(),
        sa.ForeignKeyConstraint(
            ["member_id"],
            ["members.id"],
            name="fk_death_records_member_id_members",
            ondelete="CASCADE",
        ),
        sa.ForeignKeyConstraint(
            ["grave_location_id"],
            ["parishes.id"],
            name="fk_death_records_grave_location_id_parishes",
            ondelete="SET NULL",
        ),
        sa.PrimaryKeyConstraint("id", name="pk_death_records"),
        sa.UniqueConstraint("member_id", name="uq_death_records_member_id"),
    )
    op.create_index(
        "ix_death_records_grave_location_id", "death_records", ["grave_location_id"]
    )
    op.create_index("ix_death_records_date_of_death", "death_records", ["date_of_death"])

    # members <-> death_records cycle: added once both tables exist
    op.create_foreign_key(
        "fk_members_death_id_death_records",
        "members",
        "death_records",
        ["death_id"],
        ["id"],
        ondelete="SET NULL",
    )

    op.create_table(
        "users",
        sa.Column("id", sa.Uuid(), nullable=False),
        sa.Column("username", sa.String(length=100), nullable=False),
        sa.Column("password_hash", sa.String(length=255), nullable=False),
        sa.Column("role", sa.Enum(*USER_ROLES, name="user_role"), nullable=False),
        sa.Column("wereda_unit_id", sa.Uuid(), nullable=True),
        sa.Column("is_active", sa.Boolean(), nullable=False),
        sa.Column("last_login", sa.TIMESTAMP(timezone=True), nullable=True),
        *_timestamps(),
        sa.ForeignKeyConstraint(
            ["wereda_unit_id"],
            ["wereda_units.id"],
            name="fk_users_wereda_unit_id_wereda_units",
            ondelete="SET NULL",
        ),
        sa.PrimaryKeyConstraint("id", name="pk_users"),
        sa.UniqueConstraint("username", name="uq_users_username"),
    )
    op.create_index("ix_users_wereda_unit_id", "users", ["wereda_unit_id"])


def downgrade() -> None:
    """Drop the registry tables."""
    op.drop_table("users")
    op.drop_constraint(
        "fk_members_death_id_death_records", "members", type_="foreignkey"
    )
    op.drop_table("death_records")
    op.drop_table("marriage_records")
    op.drop_table("baptism_records")
    op.drop_table("members")
    op.drop_table("parishes")
    op.drop_table("wereda_units")
    for name in ENUM_NAMES:
        op.execute(f"DROP TYPE IF EXISTS {name}")

"""initial schema

Revision ID: 0001_initial
Revises: 
Create Date: 2026-10-16 09:00:00.000000
"""

from alembic import op
import sqlalchemy as sa


revision = "0001_initial"
down_revision = None
branch_labels = None
depends_on = None

REFERRAL_TYPES = (
    "MongKol Borey Hospital",
    "Optometrist",
    "Dentist",
    "Poipet Referral Hospital",
    "Bong Bondol",
    "SEVA",
    "WSAudiology",
)


def _stamp_columns() -> list[sa.Column]:
    return [
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False, server_default=sa.text("now()")),
        sa.Column(
            "last_updated_at", sa.DateTime(timezone=True), nullable=False, server_default=sa.text("now()")
        ),
        sa.Column(
            "last_updated_by",
            sa.Integer(),
            sa.ForeignKey("users.id", ondelete="SET NULL"),
            nullable=True,
        ),
    ]


def _visit_record_table(name: str, *columns: sa.Column) -> None:
    op.create_table(
        name,
        sa.Column("id", sa.Integer(), primary_key=True, autoincrement=True),
        sa.Column(
            "visit_id",
            sa.Integer(),
            sa.ForeignKey("visits.id", ondelete="CASCADE"),
            nullable=False,
        ),
        *columns,
        *_stamp_columns(),
        sa.UniqueConstraint("visit_id"),
    )
    op.create_index(f"ix_{name}_visit_id", name, ["visit_id"])


def upgrade() -> None:
    op.create_table(
        "users",
        sa.Column("id", sa.Integer(), primary_key=True, autoincrement=True),
        sa.Column("username", sa.String(length=120), nullable=False),
        sa.Column("is_active", sa.Boolean(), nullable=False, server_default=sa.text("true")),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False, server_default=sa.text("now()")),
        sa.Column("updated_at", sa.DateTime(timezone=True), nullable=False, server_default=sa.text("now()")),
    )
    op.create_index("ix_users_username", "users", ["username"], unique=True)

    op.create_table(
        "locations",
        sa.Column("id", sa.Integer(), primary_key=True, autoincrement=True),
        sa.Column("name", sa.String(length=120), nullable=False),
        sa.Column("is_active", sa.Boolean(), nullable=False, server_default=sa.text("true")),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False, server_default=sa.text("now()")),
        sa.UniqueConstraint("name"),
    )

    op.create_table(
        "patients",
        sa.Column("id", sa.Integer(), primary_key=True, autoincrement=True),
        sa.Column("face_id", sa.String(length=120), nullable=True),
        sa.Column("english_name", sa.String(length=200), nullable=False),
        sa.Column("khmer_name", sa.String(length=200), nullable=True),
        sa.Column("date_of_birth", sa.Date(), nullable=True),
        sa.Column("sex", sa.Enum("male", "female", "other", name="sex_enum"), nullable=True),
        sa.Column("phone_number", sa.String(length=50), nullable=True),
        sa.Column("address", sa.Text(), nullable=True),
        sa.Column("location_id", sa.Integer(), sa.ForeignKey("locations.id"), nullable=False),
        sa.Column("queue_no", sa.String(length=16), nullable=True),
        *_stamp_columns(),
    )
    op.create_index("ix_patients_english_name", "patients", ["english_name"])
    op.create_index("ix_patients_location_id", "patients", ["location_id"])

    op.create_table(
        "visits",
        sa.Column("id", sa.Integer(), primary_key=True, autoincrement=True),
        sa.Column(
            "patient_id",
            sa.Integer(),
            sa.ForeignKey("patients.id", ondelete="CASCADE"),
            nullable=False,
        ),
        sa.Column("location_id", sa.Integer(), sa.ForeignKey("locations.id"), nullable=False),
        sa.Column("visit_date", sa.Date(), nullable=False),
        sa.Column("queue_no", sa.String(length=16), nullable=False),
        *_stamp_columns(),
        sa.UniqueConstraint(
            "location_id", "visit_date", "queue_no", name="uq_visits_location_date_queue"
        ),
    )
    op.create_index("ix_visits_patient_id", "visits", ["patient_id"])

    _visit_record_table(
        "vitals",
        sa.Column("height", sa.Float(), nullable=False),
        sa.Column("weight", sa.Float(), nullable=False),
        sa.Column("bmi", sa.Float(), nullable=True),
        sa.Column("below_3rd_percentile", sa.Boolean(), nullable=True),
        sa.Column("bp_systolic", sa.Integer(), nullable=True),
        sa.Column("bp_diastolic", sa.Integer(), nullable=True),
        sa.Column("temperature", sa.Float(), nullable=True),
        sa.Column("notes", sa.Text(), nullable=True),
    )
    _visit_record_table(
        "hef",
        sa.Column("know_of_hef", sa.Boolean(), nullable=False),
        sa.Column("has_hef", sa.Boolean(), nullable=False),
        sa.Column("notes", sa.Text(), nullable=True),
    )
    _visit_record_table(
        "visual_acuity",
        sa.Column("left_with_pinhole", sa.String(length=20), nullable=True),
        sa.Column("left_without_pinhole", sa.String(length=20), nullable=True),
        sa.Column("right_with_pinhole", sa.String(length=20), nullable=True),
        sa.Column("right_without_pinhole", sa.String(length=20), nullable=True),
        sa.Column("notes", sa.Text(), nullable=True),
    )
    _visit_record_table(
        "presenting_complaint",
        sa.Column("history", sa.Text(), nullable=True),
        sa.Column("red_flags", sa.Text(), nullable=True),
        sa.Column("systems_review", sa.Text(), nullable=True),
        sa.Column("drug_allergies", sa.Text(), nullable=True),
    )
    _visit_record_table(
        "history",
        sa.Column("past", sa.Text(), nullable=True),
        sa.Column("drug_and_treatment", sa.Text(), nullable=True),
        sa.Column("family", sa.Text(), nullable=True),
        sa.Column("social", sa.Text(), nullable=True),
        sa.Column("systems_review", sa.Text(), nullable=True),
    )
    _visit_record_table(
        "consultation",
        sa.Column("notes", sa.Text(), nullable=True),
        sa.Column("prescription", sa.Text(), nullable=True),
        sa.Column("require_referral", sa.Boolean(), nullable=True),
    )
    _visit_record_table(
        "seva",
        sa.Column("left_with_pinhole_new", sa.String(length=20), nullable=True),
        sa.Column("right_with_pinhole_new", sa.String(length=20), nullable=True),
        sa.Column("left_without_pinhole_new", sa.String(length=20), nullable=True),
        sa.Column("right_without_pinhole_new", sa.String(length=20), nullable=True),
        sa.Column("diagnosis", sa.Text(), nullable=True),
        sa.Column("date_of_referral", sa.Date(), nullable=True),
        sa.Column("notes", sa.Text(), nullable=True),
    )
    _visit_record_table(
        "physiotherapy",
        sa.Column("notes", sa.Text(), nullable=True),
    )

    op.create_table(
        "painpoints",
        sa.Column("id", sa.Integer(), primary_key=True, autoincrement=True),
        sa.Column(
            "physiotherapy_id",
            sa.Integer(),
            sa.ForeignKey("physiotherapy.id", ondelete="CASCADE"),
            nullable=False,
        ),
        sa.Column("x_coord", sa.Float(), nullable=False),
        sa.Column("y_coord", sa.Float(), nullable=False),
        *_stamp_columns(),
    )
    op.create_index("ix_painpoints_physiotherapy_id", "painpoints", ["physiotherapy_id"])

    op.create_table(
        "referral",
        sa.Column("id", sa.Integer(), primary_key=True, autoincrement=True),
        sa.Column(
            "visit_id",
            sa.Integer(),
            sa.ForeignKey("visits.id", ondelete="CASCADE"),
            nullable=False,
        ),
        sa.Column(
            "consultation_id",
            sa.Integer(),
            sa.ForeignKey("consultation.id", ondelete="SET NULL"),
            nullable=True,
        ),
        sa.Column(
            "doctor_id",
            sa.Integer(),
            sa.ForeignKey("users.id", ondelete="SET NULL"),
            nullable=True,
        ),
        sa.Column("referral_date", sa.Date(), nullable=False),
        sa.Column("referral_type", sa.Enum(*REFERRAL_TYPES, name="referral_type"), nullable=False),
        sa.Column("illness", sa.Text(), nullable=True),
        sa.Column("duration", sa.String(length=120), nullable=True),
        sa.Column("reason", sa.Text(), nullable=True),
        *_stamp_columns(),
    )
    op.create_index("ix_referral_visit_id", "referral", ["visit_id"])
    op.create_index("ix_referral_consultation_id", "referral", ["consultation_id"])

    op.create_table(
        "pharmacy_items",
        sa.Column("id", sa.Integer(), primary_key=True, autoincrement=True),
        sa.Column("name", sa.String(length=200), nullable=False),
        sa.Column("stock_level", sa.Integer(), nullable=False, server_default="0"),
        *_stamp_columns(),
        sa.UniqueConstraint("name"),
        sa.CheckConstraint("stock_level >= 0", name="ck_pharmacy_items_stock_non_negative"),
    )


def downgrade() -> None:
    op.drop_table("pharmacy_items")
    op.drop_index("ix_referral_consultation_id", table_name="referral")
    op.drop_index("ix_referral_visit_id", table_name="referral")
    op.drop_table("referral")
    op.drop_index("ix_painpoints_physiotherapy_id", table_name="painpoints")
    op.drop_table("painpoints")
    for name in (
        "physiotherapy",
        "seva",
        "consultation",
        "history",
        "presenting_complaint",
        "visual_acuity",
        "hef",
        "vitals",
    ):
        op.drop_index(f"ix_{name}_visit_id", table_name=name)
        op.drop_table(name)
    op.drop_index("ix_visits_patient_id", table_name="visits")
    op.drop_table("visits")
    op.drop_index("ix_patients_location_id", table_name="patients")
    op.drop_index("ix_patients_english_name", table_name="patients")
    op.drop_table("patients")
    op.drop_table("locations")
    op.drop_index("ix_users_username", table_name="users")
    op.drop_table("users")
    sa.Enum(name="referral_type").drop(op.get_bind(), checkfirst=True)
    sa.Enum(name="sex_enum").drop(op.get_bind(), checkfirst=True)

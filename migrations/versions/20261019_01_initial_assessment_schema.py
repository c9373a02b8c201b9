"""initial assessment schema

Revision ID: 20261019_01
Revises:
Create Date: 2026-10-19
"""
from alembic import op
import sqlalchemy as sa


# revision identifiers, used by Alembic.
revision = "20261019_01"
down_revision = None
branch_labels = None
depends_on = None


def upgrade():
    op.create_table(
        "countries",
        sa.Column("id", sa.Integer(), primary_key=True),
        sa.Column("name", sa.String(length=120), nullable=False, unique=True),
    )
    op.create_table(
        "schools",
        sa.Column("id", sa.Integer(), primary_key=True),
        sa.Column("name", sa.String(length=160), nullable=False),
        sa.Column("country_id", sa.Integer(), sa.ForeignKey("countries.id"), nullable=True),
    )
    op.create_index("ix_schools_country_id", "schools", ["country_id"])

    op.create_table(
        "users",
        sa.Column("id", sa.Integer(), primary_key=True),
        sa.Column("email", sa.String(length=160), nullable=False, unique=True),
        sa.Column("first_name", sa.String(length=80), nullable=False),
        sa.Column("last_name", sa.String(length=80), nullable=False),
        sa.Column("role", sa.String(length=20), nullable=False),
        sa.Column("school_id", sa.Integer(), sa.ForeignKey("schools.id"), nullable=True),
        sa.Column("country_id", sa.Integer(), sa.ForeignKey("countries.id"), nullable=True),
        sa.Column("is_active", sa.Boolean(), nullable=False, server_default=sa.true()),
        sa.Column("created_at", sa.DateTime(), nullable=False),
    )
    op.create_index("ix_users_school_id", "users", ["school_id"])

    op.create_table(
        "subjects",
        sa.Column("id", sa.Integer(), primary_key=True),
        sa.Column("name", sa.String(length=120), nullable=False, unique=True),
        sa.Column("display_order", sa.Integer(), nullable=False, server_default="0"),
    )
    op.create_table(
        "strands",
        sa.Column("id", sa.Integer(), primary_key=True),
        sa.Column("subject_id", sa.Integer(), sa.ForeignKey("subjects.id"), nullable=False),
        sa.Column("name", sa.String(length=160), nullable=False),
        sa.Column("display_order", sa.Integer(), nullable=False, server_default="0"),
    )
    op.create_index("ix_strands_subject_id", "strands", ["subject_id"])

    op.create_table(
        "learning_outcomes",
        sa.Column("id", sa.Integer(), primary_key=True),
        sa.Column("subject_id", sa.Integer(), sa.ForeignKey("subjects.id"), nullable=False),
        sa.Column("strand_id", sa.Integer(), sa.ForeignKey("strands.id"), nullable=False),
        sa.Column("code", sa.String(length=20), nullable=False),
        sa.Column("description", sa.Text(), nullable=False),
        sa.Column("display_order", sa.Integer(), nullable=False, server_default="0"),
        sa.UniqueConstraint("subject_id", "code", name="uq_outcome_subject_code"),
    )
    op.create_index("ix_learning_outcomes_subject_id", "learning_outcomes", ["subject_id"])
    op.create_index("ix_learning_outcomes_strand_id", "learning_outcomes", ["strand_id"])

    op.create_table(
        "classes",
        sa.Column("id", sa.Integer(), primary_key=True),
        sa.Column("school_id", sa.Integer(), sa.ForeignKey("schools.id"), nullable=False),
        sa.Column("name", sa.String(length=80), nullable=False),
        sa.Column("grade_level", sa.String(length=30), nullable=False, server_default="KINDERGARTEN"),
        sa.Column("academic_year", sa.String(length=9), nullable=False),
        sa.Column("teacher_id", sa.Integer(), sa.ForeignKey("users.id"), nullable=True),
    )
    op.create_index("ix_classes_school_id", "classes", ["school_id"])

    op.create_table(
        "students",
        sa.Column("id", sa.Integer(), primary_key=True),
        sa.Column("school_id", sa.Integer(), sa.ForeignKey("schools.id"), nullable=False),
        sa.Column("class_id", sa.Integer(), sa.ForeignKey("classes.id"), nullable=True),
        sa.Column("first_name", sa.String(length=80), nullable=False),
        sa.Column("last_name", sa.String(length=80), nullable=False),
        sa.Column("student_id_number", sa.String(length=40), nullable=False),
        sa.Column("date_of_birth", sa.Date(), nullable=True),
        sa.Column("is_active", sa.Boolean(), nullable=False, server_default=sa.true()),
        sa.Column("updated_at", sa.DateTime(), nullable=True),
        sa.UniqueConstraint("school_id", "student_id_number", name="uq_student_number_per_school"),
    )
    op.create_index("ix_students_school_id", "students", ["school_id"])
    op.create_index("ix_students_class_id", "students", ["class_id"])
    op.create_index("ix_students_last_name", "students", ["last_name"])

    op.create_table(
        "terms",
        sa.Column("id", sa.Integer(), primary_key=True),
        sa.Column("school_id", sa.Integer(), sa.ForeignKey("schools.id"), nullable=False),
        sa.Column("name", sa.String(length=40), nullable=False),
        sa.Column("school_year", sa.String(length=9), nullable=False),
        sa.Column("start_date", sa.Date(), nullable=False),
        sa.Column("end_date", sa.Date(), nullable=False),
        sa.UniqueConstraint("school_id", "school_year", "name", name="uq_term_school_year_name"),
    )
    op.create_index("ix_terms_school_id", "terms", ["school_id"])

    op.create_table(
        "assessments",
        sa.Column("id", sa.Integer(), primary_key=True),
        sa.Column("student_id", sa.Integer(), sa.ForeignKey("students.id"), nullable=False),
        sa.Column("learning_outcome_id", sa.Integer(), sa.ForeignKey("learning_outcomes.id"), nullable=False),
        sa.Column("term_id", sa.Integer(), sa.ForeignKey("terms.id"), nullable=False),
        sa.Column("assessment_date", sa.Date(), nullable=False),
        sa.Column("rating", sa.String(length=20), nullable=False),
        sa.Column("comment", sa.Text(), nullable=True),
        sa.Column("teacher_id", sa.Integer(), sa.ForeignKey("users.id"), nullable=True),
        sa.Column("created_at", sa.DateTime(), nullable=True),
        sa.Column("updated_at", sa.DateTime(), nullable=True),
    )
    op.create_index("ix_assessments_learning_outcome_id", "assessments", ["learning_outcome_id"])
    op.create_index("ix_assessments_term_id", "assessments", ["term_id"])
    op.create_index(
        "ix_assessment_student_outcome_date",
        "assessments",
        ["student_id", "learning_outcome_id", "assessment_date"],
    )


def downgrade():
    op.drop_index("ix_assessment_student_outcome_date", table_name="assessments")
    op.drop_index("ix_assessments_term_id", table_name="assessments")
    op.drop_index("ix_assessments_learning_outcome_id", table_name="assessments")
    op.drop_table("assessments")
    op.drop_index("ix_terms_school_id", table_name="terms")
    op.drop_table("terms")
    op.drop_index("ix_students_last_name", table_name="students")
    op.drop_index("ix_students_class_id", table_name="students")
    op.drop_index("ix_students_school_id", table_name="students")
    op.drop_table("students")
    op.drop_index("ix_classes_school_id", table_name="classes")
    op.drop_table("classes")
    op.drop_index("ix_learning_outcomes_strand_id", table_name="learning_outcomes")
    op.drop_index("ix_learning_outcomes_subject_id", table_name="learning_outcomes")
    op.drop_table("learning_outcomes")
    op.drop_index("ix_strands_subject_id", table_name="strands")
    op.drop_table("strands")
    op.drop_table("subjects")
    op.drop_index("ix_users_school_id", table_name="users")
    op.drop_table("users")
    op.drop_index("ix_schools_country_id", table_name="schools")
    op.drop_table("schools")
    op.drop_table("countries")

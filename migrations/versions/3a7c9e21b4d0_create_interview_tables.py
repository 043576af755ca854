"""create interview tables

Revision ID: 3a7c9e21b4d0
Revises:
Create Date: 2025-06-02 10:14:52.318204

"""

from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa


# revision identifiers, used by Alembic.
revision: str = "3a7c9e21b4d0"
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def _enum(*values):
    return sa.Enum(*values, native_enum=False, length=32)


def upgrade() -> None:
    op.create_table(
        "users",
        sa.Column("id", sa.Integer(), primary_key=True),
        sa.Column("name", sa.String(length=255), nullable=False),
        sa.Column("email", sa.String(length=255), nullable=False),
        sa.Column("password_hash", sa.String(length=255), nullable=False),
        sa.Column("is_active", sa.Boolean(), nullable=True),
        sa.Column("created_at", sa.DateTime(timezone=True), server_default=sa.func.now()),
        sa.Column("updated_at", sa.DateTime(timezone=True), nullable=True),
    )
    op.create_index("ix_users_email", "users", ["email"], unique=True)

    op.create_table(
        "resumes",
        sa.Column("id", sa.Integer(), primary_key=True),
        sa.Column(
            "user_id",
            sa.Integer(),
            sa.ForeignKey("users.id", ondelete="CASCADE"),
            nullable=False,
        ),
        sa.Column("file_name", sa.String(length=500), nullable=False),
        sa.Column("mime_type", sa.String(length=255), nullable=True),
        sa.Column("file_size", sa.Integer(), nullable=True),
        sa.Column("raw_text", sa.Text(), nullable=True),
        sa.Column("parsed_content", sa.JSON(), nullable=True),
        sa.Column("tech_keywords", sa.JSON(), nullable=True),
        sa.Column("projects", sa.JSON(), nullable=True),
        sa.Column("work_experience", sa.JSON(), nullable=True),
        sa.Column("created_at", sa.DateTime(timezone=True), server_default=sa.func.now()),
    )
    op.create_index("ix_resumes_user_id", "resumes", ["user_id"])
    op.create_index("ix_resumes_created_at", "resumes", ["created_at"])

    op.create_table(
        "resume_ai_profiles",
        sa.Column("id", sa.Integer(), primary_key=True),
        sa.Column(
            "resume_id",
            sa.Integer(),
            sa.ForeignKey("resumes.id", ondelete="CASCADE"),
            nullable=False,
            unique=True,
        ),
        sa.Column("experience_level", sa.String(length=50), nullable=True),
        sa.Column("experience_level_confidence", sa.Float(), nullable=True),
        sa.Column("experience_reasoning", sa.Text(), nullable=True),
        sa.Column("specializations", sa.JSON(), nullable=True),
        sa.Column("tech_highlights", sa.JSON(), nullable=True),
        sa.Column("career_suggestions", sa.JSON(), nullable=True),
        sa.Column("role_matching_analysis", sa.JSON(), nullable=True),
        sa.Column("skill_assessment", sa.JSON(), nullable=True),
        sa.Column("simulated_interview", sa.JSON(), nullable=True),
        sa.Column("analysis_source", sa.String(length=20), nullable=True),
        sa.Column("raw_analysis", sa.JSON(), nullable=True),
        sa.Column("created_at", sa.DateTime(timezone=True), server_default=sa.func.now()),
        sa.Column("updated_at", sa.DateTime(timezone=True), nullable=True),
    )

    op.create_table(
        "tech_stack_items",
        sa.Column("id", sa.Integer(), primary_key=True),
        sa.Column(
            "profile_id",
            sa.Integer(),
            sa.ForeignKey("resume_ai_profiles.id", ondelete="CASCADE"),
            nullable=False,
        ),
        sa.Column("technology", sa.String(length=255), nullable=False),
        sa.Column("category", sa.String(length=100), nullable=True),
        sa.Column("proficiency", sa.String(length=50), nullable=True),
        sa.Column("value_score", sa.Integer(), nullable=True),
        sa.Column("evidence_count", sa.Integer(), nullable=True),
        sa.Column("last_used", sa.String(length=100), nullable=True),
    )
    op.create_index("ix_tech_stack_items_profile_id", "tech_stack_items", ["profile_id"])

    op.create_table(
        "project_analyses",
        sa.Column("id", sa.Integer(), primary_key=True),
        sa.Column(
            "profile_id",
            sa.Integer(),
            sa.ForeignKey("resume_ai_profiles.id", ondelete="CASCADE"),
            nullable=False,
        ),
        sa.Column("project_name", sa.String(length=500), nullable=True),
        sa.Column("description", sa.Text(), nullable=True),
        sa.Column("tech_stack", sa.JSON(), nullable=True),
        sa.Column("complexity", sa.String(length=50), nullable=True),
        sa.Column("impact", sa.Text(), nullable=True),
        sa.Column("role", sa.String(length=255), nullable=True),
        sa.Column("highlights", sa.JSON(), nullable=True),
        sa.Column("interview_questions", sa.JSON(), nullable=True),
    )
    op.create_index("ix_project_analyses_profile_id", "project_analyses", ["profile_id"])

    op.create_table(
        "interviews",
        sa.Column("id", sa.Integer(), primary_key=True),
        sa.Column(
            "user_id",
            sa.Integer(),
            sa.ForeignKey("users.id", ondelete="CASCADE"),
            nullable=False,
        ),
        sa.Column("job_position_id", sa.Integer(), nullable=True),
        sa.Column("target_company", sa.String(length=255), nullable=True),
        sa.Column("target_position", sa.String(length=255), nullable=True),
        sa.Column("type", _enum("technical", "behavioral", "system-design"), nullable=True),
        sa.Column("status", _enum("scheduled", "in-progress", "completed"), nullable=True),
        sa.Column("started_at", sa.DateTime(timezone=True), nullable=True),
        sa.Column("completed_at", sa.DateTime(timezone=True), nullable=True),
        sa.Column("created_at", sa.DateTime(timezone=True), server_default=sa.func.now()),
    )
    op.create_index("ix_interviews_user_id", "interviews", ["user_id"])

    op.create_table(
        "interview_rounds",
        sa.Column("id", sa.Integer(), primary_key=True),
        sa.Column(
            "interview_id",
            sa.Integer(),
            sa.ForeignKey("interviews.id", ondelete="CASCADE"),
            nullable=False,
        ),
        sa.Column("round_number", sa.Integer(), nullable=False),
        sa.Column("type", _enum("coding", "behavioral", "system-design"), nullable=True),
        sa.Column("score", sa.Float(), nullable=True),
        sa.Column("feedback", sa.Text(), nullable=True),
    )
    op.create_index("ix_interview_rounds_interview_id", "interview_rounds", ["interview_id"])

    op.create_table(
        "questions",
        sa.Column("id", sa.Integer(), primary_key=True),
        sa.Column(
            "round_id",
            sa.Integer(),
            sa.ForeignKey("interview_rounds.id", ondelete="CASCADE"),
            nullable=False,
        ),
        sa.Column("content", sa.Text(), nullable=False),
        sa.Column(
            "type",
            _enum(
                "coding",
                "algorithm",
                "technical-knowledge",
                "behavioral",
                "system-design",
                "scenario",
            ),
            nullable=True,
        ),
        sa.Column("difficulty", _enum("easy", "medium", "hard", "expert"), nullable=True),
        sa.Column("category", sa.String(length=255), nullable=True),
        sa.Column("source", _enum("generated", "bank"), nullable=False),
        sa.Column("bank_category", sa.String(length=100), nullable=True),
        sa.Column("topics", sa.JSON(), nullable=True),
        sa.Column("user_answer", sa.Text(), nullable=True),
        sa.Column("model_answer", sa.Text(), nullable=True),
        sa.Column("score", sa.Float(), nullable=True),
        sa.Column("feedback", sa.Text(), nullable=True),
        sa.Column("follow_ups", sa.JSON(), nullable=True),
        sa.Column("order_index", sa.Integer(), nullable=True),
        sa.Column("created_at", sa.DateTime(timezone=True), server_default=sa.func.now()),
        sa.Column("updated_at", sa.DateTime(timezone=True), server_default=sa.func.now()),
    )
    op.create_index("ix_questions_round_id", "questions", ["round_id"])

    op.create_table(
        "interview_reports",
        sa.Column("id", sa.Integer(), primary_key=True),
        sa.Column(
            "interview_id",
            sa.Integer(),
            sa.ForeignKey("interviews.id", ondelete="CASCADE"),
            nullable=False,
            unique=True,
        ),
        sa.Column("overall_score", sa.Float(), nullable=True),
        sa.Column("technical_score", sa.Float(), nullable=True),
        sa.Column("communication_score", sa.Float(), nullable=True),
        sa.Column("system_design_score", sa.Float(), nullable=True),
        sa.Column("problem_solving_score", sa.Float(), nullable=True),
        sa.Column("strengths", sa.JSON(), nullable=True),
        sa.Column("weaknesses", sa.JSON(), nullable=True),
        sa.Column("recommendations", sa.JSON(), nullable=True),
        sa.Column("detailed_analysis", sa.JSON(), nullable=True),
        sa.Column("created_at", sa.DateTime(timezone=True), server_default=sa.func.now()),
    )

    op.create_table(
        "user_job_preferences",
        sa.Column("id", sa.Integer(), primary_key=True),
        sa.Column(
            "user_id",
            sa.Integer(),
            sa.ForeignKey("users.id", ondelete="CASCADE"),
            nullable=False,
        ),
        sa.Column("company", sa.String(length=255), nullable=True),
        sa.Column("custom_company", sa.String(length=255), nullable=True),
        sa.Column("position", sa.String(length=255), nullable=True),
        sa.Column("level", sa.String(length=50), nullable=True),
        sa.Column("requirements", sa.Text(), nullable=True),
        sa.Column("job_responsibilities", sa.JSON(), nullable=True),
        sa.Column("job_requirements", sa.JSON(), nullable=True),
        sa.Column("is_default", sa.Boolean(), nullable=False),
        sa.Column("usage_count", sa.Integer(), nullable=False),
        sa.Column("last_used_at", sa.DateTime(timezone=True), nullable=True),
        sa.Column("created_at", sa.DateTime(timezone=True), server_default=sa.func.now()),
    )
    op.create_index("ix_user_job_preferences_user_id", "user_job_preferences", ["user_id"])

    op.create_table(
        "task_records",
        sa.Column("id", sa.String(length=36), primary_key=True),
        sa.Column(
            "user_id",
            sa.Integer(),
            sa.ForeignKey("users.id", ondelete="CASCADE"),
            nullable=True,
        ),
        sa.Column("task_type", _enum("best_answers", "resume_analysis"), nullable=False),
        sa.Column(
            "status", _enum("pending", "running", "succeeded", "failed"), nullable=False
        ),
        sa.Column("payload", sa.JSON(), nullable=True),
        sa.Column("result", sa.JSON(), nullable=True),
        sa.Column("error", sa.Text(), nullable=True),
        sa.Column("created_at", sa.DateTime(timezone=True), server_default=sa.func.now()),
        sa.Column("updated_at", sa.DateTime(timezone=True), server_default=sa.func.now()),
    )
    op.create_index("ix_task_records_user_id", "task_records", ["user_id"])


def downgrade() -> None:
    op.drop_table("task_records")
    op.drop_table("user_job_preferences")
    op.drop_table("interview_reports")
    op.drop_table("questions")
    op.drop_table("interview_rounds")
    op.drop_table("interviews")
    op.drop_table("project_analyses")
    op.drop_table("tech_stack_items")
    op.drop_table("resume_ai_profiles")
    op.drop_table("resumes")
    op.drop_table("users")

"""create_test_session_tables

Revision ID: 5b1c9e7d2a40
Revises:
Create Date: 2026-10-19 10:12:41.532118

"""
from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa
from sqlalchemy.dialects import postgresql


# revision identifiers, used by Alembic.
revision: str = '5b1c9e7d2a40'
down_revision: Union[str, Sequence[str], None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None

question_category = postgresql.ENUM(
    'Basic Sciences', 'Organ Systems', 'Clinical Specialties',
    name='question_category',
    create_type=False,
)
question_difficulty = postgresql.ENUM('easy', 'medium', 'hard', name='question_difficulty', create_type=False)
test_session_status = postgresql.ENUM(
    'proceeding', 'succeeded', 'canceled',
    name='test_session_status',
    create_type=False,
)


def upgrade() -> None:
    """questions / test_sessions / student_questions 테이블 생성"""
    bind = op.get_bind()
    question_category.create(bind, checkfirst=True)
    question_difficulty.create(bind, checkfirst=True)
    test_session_status.create(bind, checkfirst=True)

    op.create_table(
        'questions',
        sa.Column('id', sa.Integer(), nullable=False),
        sa.Column('question_text', sa.Text(), nullable=False),
        sa.Column('question_media', sa.JSON(), nullable=False),
        sa.Column('options', sa.JSON(), nullable=False),
        sa.Column('correct_answer', sa.Integer(), nullable=False),
        sa.Column('explanation', sa.Text(), nullable=False),
        sa.Column('explanation_media', sa.JSON(), nullable=False),
        sa.Column('category', question_category, nullable=False),
        sa.Column('subjects', sa.JSON(), nullable=False),
        sa.Column('difficulty', question_difficulty, nullable=False),
        sa.Column('tags', sa.JSON(), nullable=False),
        sa.Column('source_url', sa.String(), nullable=True),
        sa.Column('approved', sa.Boolean(), nullable=False),
        sa.Column('created_at', sa.DateTime(timezone=True), server_default=sa.text('now()'), nullable=False),
        sa.Column('updated_at', sa.DateTime(timezone=True), server_default=sa.text('now()'), nullable=False),
        sa.PrimaryKeyConstraint('id'),
    )
    op.create_index(op.f('ix_questions_category'), 'questions', ['category'], unique=False)
    op.create_index(op.f('ix_questions_approved'), 'questions', ['approved'], unique=False)

    op.create_table(
        'test_sessions',
        sa.Column('id', sa.String(length=36), nullable=False),
        sa.Column('student_id', sa.String(), nullable=False),
        sa.Column('questions', sa.JSON(), nullable=False),
        sa.Column('total_questions', sa.Integer(), nullable=False),
        sa.Column('total_options', sa.Integer(), nullable=False),
        sa.Column('correct_answers', sa.Integer(), nullable=False),
        sa.Column('incorrect_answers', sa.Integer(), nullable=False),
        sa.Column('flagged_answers', sa.Integer(), nullable=False),
        sa.Column('filters', sa.JSON(), nullable=False),
        sa.Column('status', test_session_status, nullable=False),
        sa.Column('started_at', sa.DateTime(timezone=True), server_default=sa.text('now()'), nullable=False),
        sa.Column('completed_at', sa.DateTime(timezone=True), nullable=True),
        sa.Column('created_at', sa.DateTime(timezone=True), server_default=sa.text('now()'), nullable=False),
        sa.Column('updated_at', sa.DateTime(timezone=True), server_default=sa.text('now()'), nullable=False),
        sa.PrimaryKeyConstraint('id'),
    )
    op.create_index(op.f('ix_test_sessions_student_id'), 'test_sessions', ['student_id'], unique=False)
    op.create_index(op.f('ix_test_sessions_status'), 'test_sessions', ['status'], unique=False)
    op.create_index(op.f('ix_test_sessions_started_at'), 'test_sessions', ['started_at'], unique=False)

    op.create_table(
        'student_questions',
        sa.Column('id', sa.Integer(), nullable=False),
        sa.Column('student_id', sa.String(), nullable=False),
        sa.Column('question_id', sa.Integer(), nullable=False),
        sa.Column('test_session_id', sa.String(length=36), nullable=False),
        sa.Column('selected_answer', sa.Integer(), nullable=False),
        sa.Column('is_correct', sa.Boolean(), nullable=False),
        sa.Column('options', sa.JSON(), nullable=False),
        sa.Column('correct_answer', sa.Integer(), nullable=False),
        sa.Column('explanation', sa.Text(), nullable=True),
        sa.Column('explanation_media', sa.JSON(), nullable=False),
        sa.Column('category', question_category, nullable=False),
        sa.Column('subjects', sa.JSON(), nullable=False),
        sa.Column('topics', sa.JSON(), nullable=False),
        sa.Column('answered_at', sa.DateTime(timezone=True), nullable=False),
        sa.Column('last_updated_at', sa.DateTime(timezone=True), nullable=False),
        sa.Column('created_at', sa.DateTime(timezone=True), server_default=sa.text('now()'), nullable=False),
        sa.Column('updated_at', sa.DateTime(timezone=True), server_default=sa.text('now()'), nullable=False),
        sa.ForeignKeyConstraint(['question_id'], ['questions.id'], ),
        sa.ForeignKeyConstraint(['test_session_id'], ['test_sessions.id'], ),
        sa.PrimaryKeyConstraint('id'),
        sa.UniqueConstraint('student_id', 'question_id', 'test_session_id', name='uq_student_question_session'),
    )
    op.create_index(op.f('ix_student_questions_test_session_id'), 'student_questions', ['test_session_id'], unique=False)
    op.create_index('ix_student_questions_student_is_correct', 'student_questions', ['student_id', 'is_correct'], unique=False)
    op.create_index('ix_student_questions_student_selected_answer', 'student_questions', ['student_id', 'selected_answer'], unique=False)


def downgrade() -> None:
    """테이블 및 enum 타입 제거"""
    op.drop_index('ix_student_questions_student_selected_answer', table_name='student_questions')
    op.drop_index('ix_student_questions_student_is_correct', table_name='student_questions')
    op.drop_index(op.f('ix_student_questions_test_session_id'), table_name='student_questions')
    op.drop_table('student_questions')
    op.drop_index(op.f('ix_test_sessions_started_at'), table_name='test_sessions')
    op.drop_index(op.f('ix_test_sessions_status'), table_name='test_sessions')
    op.drop_index(op.f('ix_test_sessions_student_id'), table_name='test_sessions')
    op.drop_table('test_sessions')
    op.drop_index(op.f('ix_questions_approved'), table_name='questions')
    op.drop_index(op.f('ix_questions_category'), table_name='questions')
    op.drop_table('questions')

    bind = op.get_bind()
    test_session_status.drop(bind, checkfirst=True)
    question_difficulty.drop(bind, checkfirst=True)
    question_category.drop(bind, checkfirst=True)

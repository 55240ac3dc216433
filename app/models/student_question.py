from datetime import datetime

from sqlalchemy import JSON, Boolean, DateTime, Enum, ForeignKey, Index, String, Text, UniqueConstraint
from sqlalchemy.orm import Mapped, mapped_column

from app.models.base import Base, TimestampMixin
from app.models.question import Category

FLAGGED_ANSWER = -1


class StudentQuestion(Base, TimestampMixin):
    """학생 답안 원장 (학생, 문제, 시험 세션) 당 한 건"""
    __tablename__ = "student_questions"
    __table_args__ = (
        UniqueConstraint("student_id", "question_id", "test_session_id", name="uq_student_question_session"),
        Index("ix_student_questions_student_is_correct", "student_id", "is_correct"),
        Index("ix_student_questions_student_selected_answer", "student_id", "selected_answer"),
    )

    id: Mapped[int] = mapped_column(primary_key=True)
    student_id: Mapped[str] = mapped_column(String, nullable=False)
    question_id: Mapped[int] = mapped_column(ForeignKey("questions.id"), nullable=False)
    test_session_id: Mapped[str] = mapped_column(ForeignKey("test_sessions.id"), nullable=False, index=True)

    selected_answer: Mapped[int] = mapped_column(nullable=False, default=FLAGGED_ANSWER)
    is_correct: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)

    # 최초 제출 시점의 문제 스냅샷
    options: Mapped[list[dict]] = mapped_column(JSON, nullable=False)
    correct_answer: Mapped[int] = mapped_column(nullable=False)
    explanation: Mapped[str | None] = mapped_column(Text, default=None)
    explanation_media: Mapped[list[dict]] = mapped_column(JSON, default=list, nullable=False)
    category: Mapped[Category] = mapped_column(
        Enum(Category, name="question_category", values_callable=lambda e: [m.value for m in e]),
        nullable=False,
    )
    subjects: Mapped[list[str]] = mapped_column(JSON, default=list, nullable=False)
    topics: Mapped[list[str]] = mapped_column(JSON, default=list, nullable=False)

    answered_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False)
    last_updated_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False)

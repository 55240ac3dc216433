from app.models.base import Base, get_db
from app.models.question import Category, Difficulty, Question
from app.models.student_question import FLAGGED_ANSWER, StudentQuestion
from app.models.test_session import TestSession, TestSessionStatus

__all__ = [
    "Base",
    "Category",
    "Difficulty",
    "Question",
    "TestSession",
    "TestSessionStatus",
    "StudentQuestion",
    "FLAGGED_ANSWER",
    "get_db",
]

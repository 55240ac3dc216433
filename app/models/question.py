import enum

from sqlalchemy import JSON, Boolean, Enum, String, Text
from sqlalchemy.orm import Mapped, mapped_column

from app.models.base import Base, TimestampMixin


class Category(str, enum.Enum):
    BASIC_SCIENCES = "Basic Sciences"
    ORGAN_SYSTEMS = "Organ Systems"
    CLINICAL_SPECIALTIES = "Clinical Specialties"


class Difficulty(str, enum.Enum):
    EASY = "easy"
    MEDIUM = "medium"
    HARD = "hard"


def _enum_values(enum_cls):
    return [member.value for member in enum_cls]


class Question(Base, TimestampMixin):
    """문제 은행 (이 서비스에서는 읽기 전용)"""
    __tablename__ = "questions"

    id: Mapped[int] = mapped_column(primary_key=True)
    question_text: Mapped[str] = mapped_column(Text, nullable=False)
    question_media: Mapped[list[dict]] = mapped_column(JSON, default=list, nullable=False)
    # [{"text": str, "media": [...]}]
    options: Mapped[list[dict]] = mapped_column(JSON, nullable=False)
    correct_answer: Mapped[int] = mapped_column(nullable=False)
    explanation: Mapped[str] = mapped_column(Text, nullable=False)
    explanation_media: Mapped[list[dict]] = mapped_column(JSON, default=list, nullable=False)
    category: Mapped[Category] = mapped_column(
        Enum(Category, name="question_category", values_callable=_enum_values),
        nullable=False,
        index=True,
    )
    # [{"name": str, "topics": [str]}]
    subjects: Mapped[list[dict]] = mapped_column(JSON, default=list, nullable=False)
    difficulty: Mapped[Difficulty] = mapped_column(
        Enum(Difficulty, name="question_difficulty", values_callable=_enum_values),
        default=Difficulty.MEDIUM,
        nullable=False,
    )
    tags: Mapped[list[str]] = mapped_column(JSON, default=list, nullable=False)
    source_url: Mapped[str | None] = mapped_column(String, default=None)
    approved: Mapped[bool] = mapped_column(Boolean, default=False, nullable=False, index=True)

    @property
    def subject_names(self) -> list[str]:
        return [s["name"] for s in self.subjects or []]

    @property
    def topic_names(self) -> list[str]:
        topics: list[str] = []
        for s in self.subjects or []:
            for topic in s.get("topics") or []:
                if topic not in topics:
                    topics.append(topic)
        return topics

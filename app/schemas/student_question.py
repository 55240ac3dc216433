from datetime import datetime
from typing import Literal

from pydantic import BaseModel, Field, StrictInt

from app.models.question import Category
from app.models.test_session import TestSessionStatus
from app.schemas.common import MediaSchema, PageMeta
from app.schemas.question import QuestionOptionResponse, QuestionReference


class AnswerSubmitRequest(BaseModel):
    """답안 제출 요청 스키마 (-1은 플래그/건너뛰기)

    questionId/selectedAnswer는 정수만 허용한다 (true, "1" 등은 400).
    """
    test_session_id: str = Field(..., alias="testSessionId", min_length=1, description="시험 세션 ID")
    question_id: StrictInt = Field(..., alias="questionId", description="문제 ID")
    selected_answer: StrictInt = Field(..., alias="selectedAnswer", ge=-1, description="선택한 답 (0부터, -1은 플래그)")
    subjects: list[str] | None = Field(None, description="과목 스냅샷 재지정 (선택)")
    topics: list[str] | None = Field(None, description="토픽 스냅샷 재지정 (선택)")

    model_config = {"populate_by_name": True}


class AnswerSubmitResponse(BaseModel):
    """답안 제출 응답 (정답은 포함하지 않음)"""
    id: int
    is_correct: bool
    selected_answer: int


class TestAnswerResponse(BaseModel):
    """세션 답안 요약"""
    id: int
    question_id: int
    selected_answer: int
    is_correct: bool
    category: Category
    subjects: list[str]
    topics: list[str]
    answered_at: datetime
    last_updated_at: datetime

    model_config = {"from_attributes": True}


class TestAnswerListResponse(BaseModel):
    answers: list[TestAnswerResponse]
    count: int


class SessionReference(BaseModel):
    id: str
    started_at: datetime
    status: TestSessionStatus

    model_config = {"from_attributes": True}


class StudentQuestionResponse(BaseModel):
    """원장 항목 (채점 후 복습용, 정답 스냅샷 포함)"""
    id: int
    question_id: int
    test_session_id: str
    selected_answer: int
    is_correct: bool
    options: list[QuestionOptionResponse]
    correct_answer: int
    explanation: str | None
    explanation_media: list[MediaSchema] = Field(default_factory=list)
    category: Category
    subjects: list[str]
    topics: list[str]
    answered_at: datetime
    last_updated_at: datetime
    question: QuestionReference | None = None
    test_session: SessionReference | None = None

    model_config = {"from_attributes": True}


class StudentQuestionPageResponse(PageMeta):
    """원장 이력 페이지"""
    entries: list[StudentQuestionResponse]


SessionQuestionFilter = Literal["none", "correct", "incorrect", "flagged"]


class CategoryStat(BaseModel):
    category: Category
    total: int
    correct: int
    incorrect: int
    percentage: float


class StudentStatsResponse(BaseModel):
    """학생 통계 응답 스키마"""
    total_answered: int
    correct_answers: int
    incorrect_answers: int
    flagged_answers: int
    accuracy: float
    category_stats: list[CategoryStat]

from fastapi import APIRouter, Depends, Query
from sqlalchemy.ext.asyncio import AsyncSession

from app.api.deps import Pagination, get_current_student_id
from app.models.base import get_db
from app.models.question import Category
from app.schemas import student_question as student_question_schema
from app.services import answer_service, history_service, stats_service

router = APIRouter(prefix="/student-questions", tags=["student-questions"])


@router.post("/submit", response_model=student_question_schema.AnswerSubmitResponse)
async def submit_answer(
    request: student_question_schema.AnswerSubmitRequest,
    student_id: str = Depends(get_current_student_id),
    db: AsyncSession = Depends(get_db),
):
    """답안 제출/수정 API"""
    return await answer_service.submit_answer(db, student_id, request)


@router.get("/test/{test_session_id}", response_model=student_question_schema.TestAnswerListResponse)
async def get_test_answers(
    test_session_id: str,
    student_id: str = Depends(get_current_student_id),
    db: AsyncSession = Depends(get_db),
):
    """시험 세션 답안 목록 API"""
    return await answer_service.get_test_answers(db, student_id, test_session_id)


@router.get("/stats", response_model=student_question_schema.StudentStatsResponse)
async def get_stats(
    category: Category | None = Query(None),
    subject: list[str] | None = Query(None),
    topic: list[str] | None = Query(None),
    student_id: str = Depends(get_current_student_id),
    db: AsyncSession = Depends(get_db),
):
    """학생 답안 통계 API"""
    return await stats_service.get_student_stats(
        db, student_id, category=category, subjects=subject, topics=topic
    )


@router.get("/history", response_model=student_question_schema.StudentQuestionPageResponse)
async def get_history(
    category: Category | None = Query(None),
    subject: list[str] | None = Query(None),
    topic: list[str] | None = Query(None),
    is_correct: bool | None = Query(None, alias="isCorrect"),
    flagged: bool | None = Query(None),
    test_session_id: str | None = Query(None, alias="testSession"),
    pagination: Pagination = Depends(),
    student_id: str = Depends(get_current_student_id),
    db: AsyncSession = Depends(get_db),
):
    """답안 이력 API"""
    return await history_service.question_history(
        db,
        student_id,
        category=category,
        subjects=subject,
        topics=topic,
        is_correct=is_correct,
        flagged=flagged,
        test_session_id=test_session_id,
        page=pagination.page,
        page_size=pagination.page_size,
    )


@router.get(
    "/history/{test_session_id}",
    response_model=student_question_schema.StudentQuestionPageResponse,
)
async def get_session_questions(
    test_session_id: str,
    filter: student_question_schema.SessionQuestionFilter = Query("none"),
    pagination: Pagination = Depends(),
    student_id: str = Depends(get_current_student_id),
    db: AsyncSession = Depends(get_db),
):
    """시험 세션별 문제 조회 API (correct/incorrect/flagged 필터)"""
    return await history_service.session_questions(
        db,
        student_id,
        test_session_id,
        filter=filter,
        page=pagination.page,
        page_size=pagination.page_size,
    )

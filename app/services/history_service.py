import logging
from typing import Sequence

from sqlalchemy.ext.asyncio import AsyncSession

from app.crud import (
    question as question_crud,
    student_question as student_question_crud,
    test_session as test_session_crud,
)
from app.models.question import Category
from app.models.student_question import StudentQuestion
from app.schemas import (
    question as question_schema,
    student_question as student_question_schema,
)
from app.schemas.common import page_count
from app.services import session_service

logger = logging.getLogger(__name__)

# filter 값 → (is_correct, flagged) 조건
_SESSION_FILTERS: dict[str, tuple[bool | None, bool | None]] = {
    "none": (None, None),
    "correct": (True, None),
    "incorrect": (False, False),
    "flagged": (None, True),
}


async def _enrich_entries(
    session: AsyncSession,
    entries: Sequence[StudentQuestion],
) -> list[student_question_schema.StudentQuestionResponse]:
    """원장 항목에 문제/세션 최소 정보 첨부 (일괄 조회)"""
    questions = await question_crud.get_questions_by_ids(
        session, list({e.question_id for e in entries})
    )
    test_sessions = await test_session_crud.get_test_sessions_by_ids(
        session, list({e.test_session_id for e in entries})
    )

    responses = []
    for entry in entries:
        response = student_question_schema.StudentQuestionResponse.model_validate(entry)
        question = questions.get(entry.question_id)
        if question is not None:
            response.question = question_schema.QuestionReference.model_validate(question)
        test_session = test_sessions.get(entry.test_session_id)
        if test_session is not None:
            response.test_session = student_question_schema.SessionReference.model_validate(test_session)
        responses.append(response)
    return responses


async def question_history(
    session: AsyncSession,
    student_id: str,
    *,
    category: Category | None = None,
    subjects: Sequence[str] | None = None,
    topics: Sequence[str] | None = None,
    is_correct: bool | None = None,
    flagged: bool | None = None,
    test_session_id: str | None = None,
    page: int = 1,
    page_size: int = 20,
) -> student_question_schema.StudentQuestionPageResponse:
    """학생 답안 이력 (모든 조건 AND, 최근 수정순)"""
    entries, total = await student_question_crud.get_student_question_history(
        session,
        student_id,
        category=category,
        subjects=subjects,
        topics=topics,
        is_correct=is_correct,
        flagged=flagged,
        test_session_id=test_session_id,
        offset=(page - 1) * page_size,
        limit=page_size,
    )
    return student_question_schema.StudentQuestionPageResponse(
        entries=await _enrich_entries(session, entries),
        total=total,
        page=page,
        pages=page_count(total, page_size),
    )


async def session_questions(
    session: AsyncSession,
    student_id: str,
    test_session_id: str,
    filter: str = "none",
    page: int = 1,
    page_size: int = 20,
) -> student_question_schema.StudentQuestionPageResponse:
    """시험 세션 내 문제 (정답/오답/플래그 중 하나로 필터)"""
    await session_service.get_owned_test_session(session, student_id, test_session_id)

    is_correct, flagged = _SESSION_FILTERS.get(filter, (None, None))
    entries, total = await student_question_crud.get_student_question_history(
        session,
        student_id,
        is_correct=is_correct,
        flagged=flagged,
        test_session_id=test_session_id,
        offset=(page - 1) * page_size,
        limit=page_size,
    )
    logger.debug(
        f"세션 문제 조회: test_session_id={test_session_id}, filter={filter}, total={total}"
    )
    return student_question_schema.StudentQuestionPageResponse(
        entries=await _enrich_entries(session, entries),
        total=total,
        page=page,
        pages=page_count(total, page_size),
    )

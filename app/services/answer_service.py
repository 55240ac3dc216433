import logging
from datetime import datetime, timezone

from sqlalchemy.ext.asyncio import AsyncSession

from app.crud import (
    question as question_crud,
    student_question as student_question_crud,
    test_session as test_session_crud,
)
from app.exceptions import InvalidInputError, InvalidStateError, QuestionNotFoundError
from app.models.question import Question
from app.models.student_question import FLAGGED_ANSWER, StudentQuestion
from app.models.test_session import TestSession
from app.schemas import student_question as student_question_schema
from app.services import session_service

logger = logging.getLogger(__name__)


def _snapshot(
    question: Question,
    subjects: list[str] | None = None,
    topics: list[str] | None = None,
) -> dict:
    """최초 제출 시점에 원장에 고정할 문제 정보"""
    return {
        "options": question.options,
        "correct_answer": question.correct_answer,
        "explanation": question.explanation,
        "explanation_media": question.explanation_media or [],
        "category": question.category,
        "subjects": list(subjects) if subjects is not None else question.subject_names,
        "topics": list(topics) if topics is not None else question.topic_names,
    }


def grade_answer(selected_answer: int, options: list, correct_answer: int) -> bool:
    """채점 (-1 플래그는 항상 오답 처리, 범위 밖이면 InvalidInput)"""
    if selected_answer == FLAGGED_ANSWER:
        return False
    if selected_answer < 0 or selected_answer >= len(options):
        raise InvalidInputError("Invalid selectedAnswer value")
    return selected_answer == correct_answer


async def recompute_session_counters(
    session: AsyncSession,
    test_session: TestSession,
) -> TestSession:
    """원장 전체를 다시 세어 세션 카운터를 덮어쓴다 (재시도해도 안전)"""
    return await test_session_crud.recompute_test_session_counters(session, test_session)


async def submit_answer(
    session: AsyncSession,
    student_id: str,
    request: student_question_schema.AnswerSubmitRequest,
) -> student_question_schema.AnswerSubmitResponse:
    """답안 제출/수정

    (학생, 문제, 세션)당 원장 항목은 하나이며, 재제출은 기존 항목을 갱신한다.
    채점 기준(선택지, 정답)과 분류 정보는 최초 제출 때의 스냅샷을 유지한다.
    """
    test_session = await session_service.get_owned_test_session(
        session, student_id, request.test_session_id
    )

    if test_session.status.is_terminal:
        raise InvalidStateError("Cannot update answers for a completed or canceled test session")

    if request.question_id not in test_session.questions:
        raise InvalidInputError("Question does not belong to this test session")

    question = await question_crud.get_question_by_id(session, request.question_id)
    if not question:
        raise QuestionNotFoundError(request.question_id)

    existing: StudentQuestion | None = await student_question_crud.get_student_question(
        session, student_id, request.question_id, request.test_session_id
    )
    if existing is not None:
        is_correct = grade_answer(request.selected_answer, existing.options, existing.correct_answer)
        snapshot = {
            "options": existing.options,
            "correct_answer": existing.correct_answer,
            "explanation": existing.explanation,
            "explanation_media": existing.explanation_media,
            "category": existing.category,
            "subjects": existing.subjects,
            "topics": existing.topics,
        }
    else:
        is_correct = grade_answer(request.selected_answer, question.options, question.correct_answer)
        snapshot = _snapshot(question, request.subjects, request.topics)

    entry = await student_question_crud.upsert_student_question(
        session,
        student_id=student_id,
        question_id=request.question_id,
        test_session_id=request.test_session_id,
        selected_answer=request.selected_answer,
        is_correct=is_correct,
        snapshot=snapshot,
        submitted_at=datetime.now(timezone.utc),
    )

    test_session = await recompute_session_counters(session, test_session)

    logger.info(
        f"답안 제출: test_session_id={request.test_session_id}, question_id={request.question_id}, "
        f"selected_answer={request.selected_answer}, is_correct={entry.is_correct}, "
        f"resubmission={existing is not None}, "
        f"counters={test_session.correct_answers}/{test_session.incorrect_answers}/{test_session.flagged_answers}"
    )
    return student_question_schema.AnswerSubmitResponse(
        id=entry.id,
        is_correct=entry.is_correct,
        selected_answer=entry.selected_answer,
    )


async def get_test_answers(
    session: AsyncSession,
    student_id: str,
    test_session_id: str,
) -> student_question_schema.TestAnswerListResponse:
    """시험 세션의 답안 목록"""
    await session_service.get_owned_test_session(session, student_id, test_session_id)
    entries = await student_question_crud.get_student_questions_by_session(
        session, test_session_id, student_id=student_id
    )
    answers = [student_question_schema.TestAnswerResponse.model_validate(e) for e in entries]
    return student_question_schema.TestAnswerListResponse(answers=answers, count=len(answers))

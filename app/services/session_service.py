import logging
import uuid
from collections import defaultdict
from datetime import datetime, timezone
from typing import Sequence

from sqlalchemy.ext.asyncio import AsyncSession

from app.crud import (
    question as question_crud,
    student_question as student_question_crud,
    test_session as test_session_crud,
)
from app.exceptions import (
    ForbiddenError,
    InvalidInputError,
    InvalidStateError,
    NotFoundError,
    TestSessionNotFoundError,
)
from app.models.question import Category, Question
from app.models.test_session import TestSession, TestSessionStatus
from app.schemas import question as question_schema, test_session as test_session_schema
from app.schemas.common import page_count
from app.services import stats_service

logger = logging.getLogger(__name__)

CLOSING_STATUSES = (TestSessionStatus.SUCCEEDED, TestSessionStatus.CANCELED)


def _now() -> datetime:
    return datetime.now(timezone.utc)


async def get_owned_test_session(
    session: AsyncSession,
    student_id: str,
    test_session_id: str,
) -> TestSession:
    """시험 세션 조회 + 소유자 확인 (NotFound → Forbidden 순)"""
    test_session = await test_session_crud.get_test_session_by_id(session, test_session_id)
    if not test_session:
        raise TestSessionNotFoundError(test_session_id)
    if test_session.student_id != student_id:
        logger.warning(
            f"다른 학생의 시험 세션 접근 시도: student_id={student_id}, test_session_id={test_session_id}"
        )
        raise ForbiddenError()
    return test_session


def _public_questions(questions: Sequence[Question]) -> list[question_schema.QuestionPublicResponse]:
    return [question_schema.QuestionPublicResponse.model_validate(q) for q in questions]


async def open_session(
    session: AsyncSession,
    student_id: str,
    request: test_session_schema.TestSessionCreateRequest,
) -> test_session_schema.TestSessionWithQuestionsResponse:
    """시험 세션 생성

    요청한 문제가 모두 존재하고 승인된 경우에만 생성하며,
    응답의 문제 목록에는 정답과 해설을 포함하지 않는다.
    """
    question_ids = request.question_ids
    if not question_ids:
        raise InvalidInputError("Please provide an array of question IDs")

    questions = await question_crud.get_approved_questions_by_ids(session, question_ids)
    if len(questions) != len(question_ids):
        logger.warning(
            f"승인된 문제 부족: 요청={len(question_ids)}, 실제={len(questions)}, student_id={student_id}"
        )
        raise InvalidInputError("One or more questions not found or not approved")

    total_options = sum(len(q.options) for q in questions)

    test_session = await test_session_crud.create_test_session(
        session,
        test_session_id=str(uuid.uuid4()),
        student_id=student_id,
        question_ids=question_ids,
        total_options=total_options,
        filters=request.filters.model_dump(mode="json", exclude_none=True),
        started_at=_now(),
    )

    logger.info(
        f"시험 세션 생성: test_session_id={test_session.id}, student_id={student_id}, "
        f"questions={len(question_ids)}, total_options={total_options}"
    )
    return test_session_schema.TestSessionWithQuestionsResponse(
        session=test_session_schema.TestSessionResponse.model_validate(test_session),
        questions=_public_questions(questions),
    )


async def start_session(
    session: AsyncSession,
    student_id: str,
    request: test_session_schema.TestSessionStartRequest,
) -> test_session_schema.TestSessionWithQuestionsResponse:
    """조건에 맞는 승인된 문제를 무작위로 골라 시험 세션 생성

    가능한 문제가 count보다 적으면 있는 만큼만 출제하고,
    기록되는 filters.count는 실제 출제 수다.
    """
    questions = await question_crud.get_random_approved_questions(
        session,
        limit=request.count,
        category=request.category,
        difficulty=request.difficulty,
        subjects=request.subjects,
        topics=request.topics,
    )
    if not questions:
        logger.warning(
            f"조건에 맞는 문제 없음: student_id={student_id}, "
            f"filters={request.model_dump(mode='json', exclude_none=True)}"
        )
        raise NotFoundError("No questions available for the selected filters")

    filters = test_session_schema.TestSessionFilters(
        **request.model_dump(exclude={"count"}),
        count=len(questions),
    )
    return await open_session(
        session,
        student_id,
        test_session_schema.TestSessionCreateRequest(
            question_ids=[q.id for q in questions],
            filters=filters,
        ),
    )

def _question_matches(
    question: Question,
    category: Category | None,
    subjects: Sequence[str] | None,
    topics: Sequence[str] | None,
) -> bool:
    if category is not None and question.category != category:
        return False
    if subjects and not set(question.subject_names) & set(subjects):
        return False
    if topics and not set(question.topic_names) & set(topics):
        return False
    return True


async def list_sessions(
    session: AsyncSession,
    student_id: str,
    status: TestSessionStatus | None = None,
    category: Category | None = None,
    subjects: Sequence[str] | None = None,
    topics: Sequence[str] | None = None,
    page: int = 1,
    page_size: int = 20,
) -> test_session_schema.TestSessionListResponse:
    """학생의 시험 세션 목록 (최신순, 페이지네이션)

    카테고리/과목/토픽 조건이 있으면 승인된 문제 중 하나라도 조건을 모두
    만족하는 세션만 남긴다.
    """
    offset = (page - 1) * page_size

    if category is not None or subjects or topics:
        test_sessions = list(
            await test_session_crud.get_test_sessions_by_student(session, student_id, status=status)
        )
        member_ids = {qid for ts in test_sessions for qid in ts.questions}
        questions = await question_crud.get_approved_questions_by_ids(session, list(member_ids))
        matching_ids = {
            q.id for q in questions if _question_matches(q, category, subjects, topics)
        }
        test_sessions = [
            ts for ts in test_sessions if any(qid in matching_ids for qid in ts.questions)
        ]
        total = len(test_sessions)
        page_sessions = test_sessions[offset:offset + page_size]
    else:
        page_sessions, total = await test_session_crud.get_test_sessions_page(
            session, student_id, status=status, offset=offset, limit=page_size
        )

    entries = await student_question_crud.get_student_questions_by_sessions(
        session, [ts.id for ts in page_sessions]
    )
    entries_by_session = defaultdict(list)
    for entry in entries:
        entries_by_session[entry.test_session_id].append(entry)

    summaries = []
    for ts in page_sessions:
        summary = test_session_schema.TestSessionSummaryResponse.model_validate(ts)
        summary.performance_by_category = stats_service.performance_by_category(
            entries_by_session[ts.id]
        )
        summaries.append(summary)

    return test_session_schema.TestSessionListResponse(
        sessions=summaries,
        total=total,
        page=page,
        pages=page_count(total, page_size),
    )


async def get_session(
    session: AsyncSession,
    student_id: str,
    test_session_id: str,
) -> test_session_schema.TestSessionWithQuestionsResponse:
    """시험 세션 상세 조회 (승인된 문제만 포함)"""
    test_session = await get_owned_test_session(session, student_id, test_session_id)
    questions = await question_crud.get_approved_questions_by_ids(session, test_session.questions)
    return test_session_schema.TestSessionWithQuestionsResponse(
        session=test_session_schema.TestSessionResponse.model_validate(test_session),
        questions=_public_questions(questions),
    )


async def close_session(
    session: AsyncSession,
    student_id: str,
    test_session_id: str,
    status: TestSessionStatus | str,
) -> test_session_schema.TestSessionResponse:
    """시험 세션 종료/취소 (상태를 바꾸는 유일한 경로)"""
    try:
        target = TestSessionStatus(status)
    except ValueError:
        raise InvalidInputError("Status must be either succeeded or canceled")
    if target not in CLOSING_STATUSES:
        raise InvalidInputError("Status must be either succeeded or canceled")

    test_session = await get_owned_test_session(session, student_id, test_session_id)
    if test_session.status.is_terminal:
        raise InvalidStateError("Cannot update a completed or canceled test session")

    test_session = await test_session_crud.update_test_session_status(
        session,
        test_session,
        status=target,
        completed_at=_now(),
    )
    logger.info(f"시험 세션 종료: test_session_id={test_session_id}, status={target.value}")
    return test_session_schema.TestSessionResponse.model_validate(test_session)

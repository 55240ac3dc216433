import logging
from datetime import datetime
from typing import Sequence

from sqlalchemy import func, select
from sqlalchemy.dialects.postgresql import insert as postgresql_insert
from sqlalchemy.dialects.sqlite import insert as sqlite_insert
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.sql import Select

from app.exceptions import UnsupportedDatabaseError
from app.models.question import Category
from app.models.student_question import FLAGGED_ANSWER, StudentQuestion

logger = logging.getLogger(__name__)

_UNIQUE_KEY = ["student_id", "question_id", "test_session_id"]

# 재제출 시 갱신되는 컬럼 (스냅샷과 answered_at은 유지)
_MUTABLE_COLUMNS = ("selected_answer", "is_correct", "last_updated_at")


def _dialect_insert(session: AsyncSession):
    dialect = session.get_bind().dialect.name
    if dialect == "postgresql":
        return postgresql_insert
    if dialect == "sqlite":
        return sqlite_insert
    raise UnsupportedDatabaseError(dialect)


async def get_student_question(
    session: AsyncSession,
    student_id: str,
    question_id: int,
    test_session_id: str,
) -> StudentQuestion | None:
    """(학생, 문제, 시험 세션)으로 원장 항목 조회"""
    stmt = (
        select(StudentQuestion)
        .where(
            StudentQuestion.student_id == student_id,
            StudentQuestion.question_id == question_id,
            StudentQuestion.test_session_id == test_session_id,
        )
        .execution_options(populate_existing=True)
    )
    result = await session.execute(stmt)
    return result.scalar_one_or_none()


async def upsert_student_question(
    session: AsyncSession,
    *,
    student_id: str,
    question_id: int,
    test_session_id: str,
    selected_answer: int,
    is_correct: bool,
    snapshot: dict,
    submitted_at: datetime,
) -> StudentQuestion:
    """답안 upsert (단일 INSERT ... ON CONFLICT DO UPDATE)

    동일 (학생, 문제, 세션)에 대한 동시 제출도 한 건으로 합쳐지며
    마지막 쓰기가 selected_answer/is_correct/last_updated_at을 결정한다.
    """
    insert = _dialect_insert(session)
    stmt = insert(StudentQuestion).values(
        student_id=student_id,
        question_id=question_id,
        test_session_id=test_session_id,
        selected_answer=selected_answer,
        is_correct=is_correct,
        answered_at=submitted_at,
        last_updated_at=submitted_at,
        **snapshot,
    )
    update_set = {column: stmt.excluded[column] for column in _MUTABLE_COLUMNS}
    update_set["updated_at"] = func.now()
    stmt = stmt.on_conflict_do_update(index_elements=_UNIQUE_KEY, set_=update_set)

    await session.execute(stmt)
    await session.commit()

    entry = await get_student_question(session, student_id, question_id, test_session_id)
    if entry is None:
        # upsert 직후에는 반드시 존재해야 함
        raise RuntimeError(
            f"upsert 후 답안 조회 실패: student_id={student_id}, "
            f"question_id={question_id}, test_session_id={test_session_id}"
        )
    return entry


async def get_student_questions_by_session(
    session: AsyncSession,
    test_session_id: str,
    student_id: str | None = None,
) -> Sequence[StudentQuestion]:
    """시험 세션의 원장 항목 전체 (답안 시각순)"""
    stmt = select(StudentQuestion).where(StudentQuestion.test_session_id == test_session_id)
    if student_id is not None:
        stmt = stmt.where(StudentQuestion.student_id == student_id)
    stmt = stmt.order_by(StudentQuestion.answered_at, StudentQuestion.id)
    result = await session.execute(stmt)
    return result.scalars().all()


async def get_student_questions_by_sessions(
    session: AsyncSession,
    test_session_ids: Sequence[str],
) -> Sequence[StudentQuestion]:
    """여러 시험 세션의 원장 항목 일괄 조회"""
    if not test_session_ids:
        return []

    stmt = select(StudentQuestion).where(StudentQuestion.test_session_id.in_(set(test_session_ids)))
    result = await session.execute(stmt)
    return result.scalars().all()


async def get_student_questions_by_student(
    session: AsyncSession,
    student_id: str,
    category: Category | None = None,
) -> Sequence[StudentQuestion]:
    """학생의 원장 항목 (카테고리 조건 선택)"""
    stmt = select(StudentQuestion).where(StudentQuestion.student_id == student_id)
    if category is not None:
        stmt = stmt.where(StudentQuestion.category == category)
    result = await session.execute(stmt)
    return result.scalars().all()


async def count_student_answers(
    session: AsyncSession,
    student_id: str,
) -> list[tuple[Category, bool, int, int]]:
    """(카테고리, 정답 여부)별 원장 항목 수와 그중 플래그 수"""
    stmt = (
        select(
            StudentQuestion.category,
            StudentQuestion.is_correct,
            func.count(StudentQuestion.id),
            func.count(StudentQuestion.id).filter(StudentQuestion.selected_answer == FLAGGED_ANSWER),
        )
        .where(StudentQuestion.student_id == student_id)
        .group_by(StudentQuestion.category, StudentQuestion.is_correct)
    )
    result = await session.execute(stmt)
    return [
        (category, bool(is_correct), total, flagged)
        for category, is_correct, total, flagged in result.all()
    ]


def _history_statement(
    student_id: str,
    category: Category | None = None,
    is_correct: bool | None = None,
    flagged: bool | None = None,
    test_session_id: str | None = None,
) -> Select:
    stmt = select(StudentQuestion).where(StudentQuestion.student_id == student_id)
    if category is not None:
        stmt = stmt.where(StudentQuestion.category == category)
    if is_correct is not None:
        stmt = stmt.where(StudentQuestion.is_correct.is_(is_correct))
    if flagged is True:
        stmt = stmt.where(StudentQuestion.selected_answer == FLAGGED_ANSWER)
    elif flagged is False:
        stmt = stmt.where(StudentQuestion.selected_answer != FLAGGED_ANSWER)
    if test_session_id is not None:
        stmt = stmt.where(StudentQuestion.test_session_id == test_session_id)
    return stmt


def _matches_any(values: Sequence[str], wanted: Sequence[str] | None) -> bool:
    if not wanted:
        return True
    return bool(set(values or []) & set(wanted))


async def get_student_question_history(
    session: AsyncSession,
    student_id: str,
    *,
    category: Category | None = None,
    subjects: Sequence[str] | None = None,
    topics: Sequence[str] | None = None,
    is_correct: bool | None = None,
    flagged: bool | None = None,
    test_session_id: str | None = None,
    offset: int = 0,
    limit: int = 20,
) -> tuple[list[StudentQuestion], int]:
    """학생 답안 이력 조회 (최근 수정순, 페이지네이션)

    subjects/topics는 JSON 스냅샷 컬럼이라 DB 독립적으로 처리하기 위해
    조건이 있을 때만 메모리에서 필터링한다.

    Returns:
        (현재 페이지 항목, 전체 개수)
    """
    stmt = _history_statement(student_id, category, is_correct, flagged, test_session_id)
    ordered = stmt.order_by(StudentQuestion.last_updated_at.desc(), StudentQuestion.id.desc())

    if subjects or topics:
        result = await session.execute(ordered)
        matched = [
            entry
            for entry in result.scalars().all()
            if _matches_any(entry.subjects, subjects) and _matches_any(entry.topics, topics)
        ]
        return matched[offset:offset + limit], len(matched)

    total = await session.scalar(select(func.count()).select_from(stmt.subquery()))
    result = await session.execute(ordered.offset(offset).limit(limit))
    return list(result.scalars().all()), total or 0

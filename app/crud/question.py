from typing import Sequence

from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession

from app.models.question import Category, Difficulty, Question


async def get_question_by_id(session: AsyncSession, question_id: int) -> Question | None:
    """ID로 문제 조회 (승인 여부 무관)"""
    result = await session.execute(select(Question).where(Question.id == question_id))
    return result.scalar_one_or_none()


async def get_approved_questions_by_ids(
    session: AsyncSession,
    question_ids: Sequence[int],
) -> list[Question]:
    """승인된 문제만 조회 (요청한 ID 순서 유지, 없는 ID는 제외)"""
    if not question_ids:
        return []

    stmt = select(Question).where(
        Question.id.in_(set(question_ids)),
        Question.approved.is_(True),
    )
    result = await session.execute(stmt)
    by_id = {q.id: q for q in result.scalars().all()}
    return [by_id[qid] for qid in dict.fromkeys(question_ids) if qid in by_id]


async def get_questions_by_ids(
    session: AsyncSession,
    question_ids: Sequence[int],
) -> dict[int, Question]:
    """ID → 문제 매핑 (승인 여부 무관, 이력 조회용)"""
    if not question_ids:
        return {}

    result = await session.execute(select(Question).where(Question.id.in_(set(question_ids))))
    return {q.id: q for q in result.scalars().all()}


async def get_random_approved_questions(
    session: AsyncSession,
    *,
    limit: int,
    category: Category | None = None,
    difficulty: Difficulty | None = None,
    subjects: Sequence[str] | None = None,
    topics: Sequence[str] | None = None,
) -> list[Question]:
    """조건에 맞는 승인된 문제를 무작위로 최대 limit개 추출

    subjects/topics는 JSON 컬럼이라 조건이 있을 때만 메모리에서 거른 뒤 자른다.
    """
    stmt = select(Question).where(Question.approved.is_(True))
    if category is not None:
        stmt = stmt.where(Question.category == category)
    if difficulty is not None:
        stmt = stmt.where(Question.difficulty == difficulty)
    stmt = stmt.order_by(func.random())

    if not subjects and not topics:
        result = await session.execute(stmt.limit(limit))
        return list(result.scalars().all())

    result = await session.execute(stmt)
    matched = [
        q for q in result.scalars().all()
        if (not subjects or set(q.subject_names) & set(subjects))
        and (not topics or set(q.topic_names) & set(topics))
    ]
    return matched[:limit]

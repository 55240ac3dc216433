"""원장(StudentQuestion) 기반 집계

세션 카운터와 학생 통계는 항상 원장 전체를 다시 집계해 계산한다.
증분 갱신을 하지 않으므로 동시 제출로 생긴 불일치도 다음 집계에서 바로잡힌다.
"""
import logging
from collections import defaultdict
from typing import Iterable, Sequence

from pydantic import BaseModel
from sqlalchemy.ext.asyncio import AsyncSession

from app.crud import student_question as student_question_crud
from app.models.question import Category
from app.models.student_question import FLAGGED_ANSWER, StudentQuestion
from app.schemas import student_question as student_question_schema, test_session as test_session_schema

logger = logging.getLogger(__name__)


class SessionCounters(BaseModel):
    """세션 카운터 (세 버킷은 원장 항목을 정확히 분할한다)"""
    correct_answers: int = 0
    incorrect_answers: int = 0
    flagged_answers: int = 0
    answered_options: int = 0

    @property
    def answered(self) -> int:
        return self.correct_answers + self.incorrect_answers + self.flagged_answers


def percentage(numerator: int, denominator: int) -> float:
    """백분율 (분모가 0이면 0)"""
    if not denominator:
        return 0.0
    return round(numerator / denominator * 100, 2)


def _is_flagged(entry) -> bool:
    return entry.selected_answer == FLAGGED_ANSWER


def _category_name(category) -> str:
    return category.value if isinstance(category, Category) else str(category)


def session_counters(entries: Iterable[StudentQuestion]) -> SessionCounters:
    """한 세션의 원장 항목으로 카운터 계산"""
    counters = SessionCounters()
    for entry in entries:
        if entry.is_correct:
            counters.correct_answers += 1
        elif _is_flagged(entry):
            counters.flagged_answers += 1
        else:
            counters.incorrect_answers += 1
        counters.answered_options += len(entry.options or [])
    return counters


def _matches_filters(
    entry,
    category: Category | None,
    subjects: Sequence[str] | None,
    topics: Sequence[str] | None,
) -> bool:
    if category is not None and _category_name(entry.category) != _category_name(category):
        return False
    if subjects and not set(entry.subjects or []) & set(subjects):
        return False
    if topics and not set(entry.topics or []) & set(topics):
        return False
    return True


def tally_entries(entries: Iterable[StudentQuestion]) -> dict[str, list[int]]:
    """카테고리 → [정답, 오답, 플래그] 개수"""
    tally: dict[str, list[int]] = defaultdict(lambda: [0, 0, 0])
    for entry in entries:
        counts = tally[_category_name(entry.category)]
        if entry.is_correct:
            counts[0] += 1
        elif _is_flagged(entry):
            counts[2] += 1
        else:
            counts[1] += 1
    return dict(tally)


def tally_counts(rows: Iterable[tuple]) -> dict[str, list[int]]:
    """DB 집계 행 (카테고리, 정답 여부, 개수, 플래그 수) → 카테고리별 개수"""
    tally: dict[str, list[int]] = defaultdict(lambda: [0, 0, 0])
    for category, is_correct, total, flagged in rows:
        counts = tally[_category_name(category)]
        if is_correct:
            counts[0] += total
        else:
            counts[1] += total - flagged
            counts[2] += flagged
    return dict(tally)


def category_stats_from_tally(tally: dict[str, list[int]]) -> list[student_question_schema.CategoryStat]:
    """플래그 제외 카테고리별 통계 (카테고리명 오름차순)"""
    return [
        student_question_schema.CategoryStat(
            category=name,
            total=correct + incorrect,
            correct=correct,
            incorrect=incorrect,
            percentage=percentage(correct, correct + incorrect),
        )
        for name, (correct, incorrect, _) in sorted(tally.items())
        if correct + incorrect
    ]


def category_stats(entries: Iterable[StudentQuestion]) -> list[student_question_schema.CategoryStat]:
    return category_stats_from_tally(tally_entries(entries))


def _stats_response(
    filtered: dict[str, list[int]],
    everything: dict[str, list[int]],
) -> student_question_schema.StudentStatsResponse:
    correct = sum(counts[0] for counts in filtered.values())
    incorrect = sum(counts[1] for counts in filtered.values())
    flagged = sum(counts[2] for counts in filtered.values())
    total_answered = correct + incorrect

    return student_question_schema.StudentStatsResponse(
        total_answered=total_answered,
        correct_answers=correct,
        incorrect_answers=incorrect,
        flagged_answers=flagged,
        accuracy=percentage(correct, total_answered),
        category_stats=category_stats_from_tally(everything),
    )


def student_stats(
    entries: Sequence[StudentQuestion],
    category: Category | None = None,
    subjects: Sequence[str] | None = None,
    topics: Sequence[str] | None = None,
) -> student_question_schema.StudentStatsResponse:
    """학생 전체 답안 통계

    category_stats는 카테고리/과목/토픽 필터와 무관하게 전체 항목으로 계산한다.
    """
    filtered = [e for e in entries if _matches_filters(e, category, subjects, topics)]
    return _stats_response(tally_entries(filtered), tally_entries(entries))


def performance_by_category(
    entries: Iterable[StudentQuestion],
) -> dict[str, test_session_schema.CategoryPerformance]:
    """세션 목록용 카테고리 → 과목별 정답/오답/플래그 수"""
    result: dict[str, test_session_schema.CategoryPerformance] = {}
    for entry in entries:
        perf = result.setdefault(
            _category_name(entry.category), test_session_schema.CategoryPerformance()
        )
        if entry.is_correct:
            field = "correct"
        elif _is_flagged(entry):
            field = "flagged"
        else:
            field = "incorrect"
        setattr(perf, field, getattr(perf, field) + 1)

        for subject in entry.subjects or []:
            subject_perf = perf.subjects.setdefault(subject, test_session_schema.SubjectPerformance())
            setattr(subject_perf, field, getattr(subject_perf, field) + 1)
    return result


async def get_student_stats(
    session: AsyncSession,
    student_id: str,
    category: Category | None = None,
    subjects: Sequence[str] | None = None,
    topics: Sequence[str] | None = None,
) -> student_question_schema.StudentStatsResponse:
    """학생 통계 조회

    카테고리별 개수는 DB에서 집계하고, 과목/토픽 조건이 있을 때만
    해당 카테고리의 원장 항목을 읽어 JSON 스냅샷으로 거른다.
    """
    everything = tally_counts(await student_question_crud.count_student_answers(session, student_id))

    if subjects or topics:
        entries = await student_question_crud.get_student_questions_by_student(
            session, student_id, category=category
        )
        filtered = tally_entries(e for e in entries if _matches_filters(e, None, subjects, topics))
    elif category is not None:
        filtered = {name: counts for name, counts in everything.items() if name == _category_name(category)}
    else:
        filtered = everything

    stats = _stats_response(filtered, everything)
    logger.debug(
        f"학생 통계 계산: student_id={student_id}, answered={stats.total_answered}, "
        f"accuracy={stats.accuracy}"
    )
    return stats
